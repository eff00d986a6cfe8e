"""AI service - situation-specific clauses and template authoring with OpenAI"""

import json
import logging
import time
from typing import Optional

from fastapi import HTTPException
from openai import AsyncOpenAI

from ...config import OPENAI_API_KEY, OPENAI_MODEL
from ..templates.placeholders import extract_placeholders
from .template_html import (
    GENERATE_PROMPT,
    GENERATE_SYSTEM_PROMPT,
    INSERT_ZONE_PROMPT,
    INSERT_ZONE_SYSTEM_PROMPT,
    TEMPLATE_CSS,
    clause_zone_html,
    clean_generated_html,
    find_zone_section,
    format_placeholder_list,
    has_clause_zone,
    strip_html_fences,
)

logger = logging.getLogger(__name__)

MIN_SITUATION_LENGTH = 10

SYSTEM_PROMPT = """You are a real estate contract specialist helping wholesalers create appropriate additional clauses for their purchase agreements.

Your role is to generate protective, legally-sound clauses based on the unique situation described by the user.

Guidelines:
1. ALWAYS generate at least 1 clause for any situation described
2. Generate 1-5 clauses depending on the complexity of the situation
3. Each clause should be clear, specific, and enforceable
4. Use standard real estate contract language
5. Focus on protecting both parties while addressing the specific situation
6. Keep clauses concise but comprehensive

For example, if someone mentions "roof damage with a $5,000 credit", generate a clause that states the repair credit amount, when it is applied (at closing), and what it covers.

IMPORTANT: You are NOT providing legal advice. These are suggestions that should be reviewed by a licensed attorney before use.

Return your response as JSON with this exact structure:
{
  "clauses": [
    {
      "title": "Short descriptive title",
      "content": "The full clause text that would appear in the contract"
    }
  ]
}

Only return the JSON, no additional text. NEVER return an empty clauses array."""


def get_openai_client() -> AsyncOpenAI:
    return AsyncOpenAI(api_key=OPENAI_API_KEY)


def build_contract_context(details: Optional[dict]) -> str:
    if not details:
        return ""

    price = details.get("price")
    try:
        price_text = f"${float(price):,.0f}" if price else "Not specified"
    except (TypeError, ValueError):
        price_text = str(price)
    inspection = details.get("inspection_period")

    return (
        "Contract Details:\n"
        f"- Property: {details.get('property_address') or 'Not specified'}, {details.get('property_city') or ''}, "
        f"{details.get('property_state') or ''} {details.get('property_zip') or ''}\n"
        f"- Purchase Price: {price_text}\n"
        f"- Seller: {details.get('seller_name') or 'Not specified'}\n"
        f"- Close of Escrow: {details.get('close_of_escrow') or 'Not specified'}\n"
        f"- Inspection Period: {f'{inspection} days' if inspection else 'Not specified'}\n"
    )


def strip_code_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    if cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def parse_clauses(response_content: str) -> list[dict]:
    """Parse the model's JSON reply into clause dicts, dropping empty clauses"""
    parsed = json.loads(strip_code_fences(response_content))
    raw_clauses = parsed.get("clauses") if isinstance(parsed, dict) else None
    if not isinstance(raw_clauses, list):
        raise ValueError("Invalid response format")

    stamp = int(time.time() * 1000)
    non_empty = [c for c in raw_clauses if isinstance(c, dict) and (c.get("content") or "").strip()]
    return [
        {
            "id": f"clause-{stamp}-{index}",
            "title": clause.get("title") or f"Clause {index + 1}",
            "content": clause["content"],
            "status": "pending",
        }
        for index, clause in enumerate(non_empty)
    ]


class AIClauseService:
    """Generates additional contract clauses for a described situation"""

    async def generate_for_situation(self, situation: str, contract_details: Optional[dict] = None) -> list[dict]:
        if not situation or len(situation.strip()) < MIN_SITUATION_LENGTH:
            raise HTTPException(
                status_code=400,
                detail="Please provide more detail about your situation (at least 10 characters)",
            )

        if not OPENAI_API_KEY:
            raise HTTPException(status_code=500, detail="OpenAI API key not configured")

        user_prompt = (
            f"{build_contract_context(contract_details)}\n"
            f"User's Situation:\n{situation}\n\n"
            "Based on this situation, generate appropriate additional clauses for this real estate purchase agreement."
        )

        try:
            completion = await get_openai_client().chat.completions.create(
                model=OPENAI_MODEL,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=0.7,
                max_tokens=2000,
            )
        except Exception as e:
            logger.error(f"❌ AI clause generation failed: {e}")
            raise HTTPException(status_code=500, detail="Failed to generate clauses") from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise HTTPException(status_code=500, detail="No response from AI")

        try:
            clauses = parse_clauses(content)
        except (ValueError, json.JSONDecodeError) as e:
            logger.error(f"❌ Failed to parse AI response: {content[:200]}")
            raise HTTPException(status_code=500, detail="Failed to parse AI response. Please try again.") from e

        if not clauses:
            logger.warning(f"⚠️ AI returned no clauses for situation: {situation[:100]}")
            raise HTTPException(
                status_code=400,
                detail=(
                    "AI could not generate clauses for this situation. Please provide more details "
                    "about what needs to be documented in the contract."
                ),
            )

        logger.info(f"✅ Generated {len(clauses)} AI clauses")
        return clauses


class AITemplateService:
    """Template authoring: contract text to template HTML, and AI clause zone placement"""

    async def _complete(self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int) -> str:
        if not OPENAI_API_KEY:
            raise HTTPException(status_code=500, detail="OpenAI API key not configured")

        completion = await get_openai_client().chat.completions.create(
            model=OPENAI_MODEL,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        content = completion.choices[0].message.content if completion.choices else None
        return content or ""

    async def generate_template_html(self, plain_text: str, placeholders: Optional[list[dict]] = None) -> dict:
        if not plain_text or not plain_text.strip():
            raise HTTPException(status_code=400, detail="Contract text is required")

        prompt = GENERATE_PROMPT.format(
            css=TEMPLATE_CSS,
            placeholders=format_placeholder_list(placeholders),
            plain_text=plain_text,
        )
        try:
            content = await self._complete(GENERATE_SYSTEM_PROMPT, prompt, temperature=0.3, max_tokens=8000)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"❌ AI template HTML generation failed: {e}")
            raise HTTPException(status_code=500, detail="Failed to generate HTML. Please try again.") from e

        html = clean_generated_html(content)
        discovered = extract_placeholders(html)
        logger.info(f"✅ Generated template HTML with {len(discovered)} placeholders")
        return {"html": html, "discovered_placeholders": discovered}

    async def insert_clause_zone(self, html: str, section_number: str) -> dict:
        if not html or not html.strip():
            raise HTTPException(status_code=400, detail="HTML content is required")
        if not section_number or not section_number.strip():
            raise HTTPException(status_code=400, detail="Section number is required")
        if has_clause_zone(html):
            raise HTTPException(
                status_code=400,
                detail="This template already has an AI clause zone. Remove the existing one first to add a new one.",
            )

        section = section_number.strip()
        prompt = INSERT_ZONE_PROMPT.format(section=section, zone=clause_zone_html(section), html=html)
        failure = "Failed to insert AI clause zone. Please try again."
        try:
            content = await self._complete(INSERT_ZONE_SYSTEM_PROMPT, prompt, temperature=0.2, max_tokens=10000)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"❌ AI clause zone insertion failed: {e}")
            raise HTTPException(status_code=500, detail=failure) from e

        modified = strip_html_fences(content)
        if not has_clause_zone(modified):
            logger.warning(f"⚠️ AI reply has no clause zone for section {section}")
            raise HTTPException(status_code=500, detail=failure)

        used_section = find_zone_section(modified)
        logger.info(f"✅ Inserted AI clause zone at section {used_section}")
        return {"html": modified, "section_number": used_section}
