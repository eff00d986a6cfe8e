"""Prompts and post-processing for turning contract text into template HTML"""

import logging
import re
from typing import Optional

from ..templates.placeholders import STANDARD_PLACEHOLDERS

logger = logging.getLogger(__name__)

# Same stylesheet as the bundled purchase agreement
TEMPLATE_CSS = """@page {
      size: letter;
      margin: 0.75in 1in 1in 1in;
    }
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body {
      font-family: 'Times New Roman', Times, serif;
      font-size: 11pt;
      line-height: 1.4;
      color: #000;
    }
    h1 { text-align: center; font-size: 12pt; font-weight: bold; margin-bottom: 12pt; }
    .intro { text-indent: 0.5in; text-align: justify; margin-bottom: 10pt; }
    .section-header { margin-top: 10pt; margin-bottom: 6pt; }
    .section-number { font-weight: bold; }
    .subsection { margin-left: 0.5in; margin-bottom: 6pt; }
    .field-line { display: inline-block; border-bottom: 1px solid #000; min-width: 200px; padding: 0 2px; }
    .field-line.short { min-width: 100px; }
    .field-line.medium { min-width: 150px; }
    .indented { margin-left: 1in; margin-bottom: 4pt; }
    .indented-more { margin-left: 1.5in; margin-bottom: 4pt; }
    .checkbox {
      display: inline-block;
      width: 10px;
      height: 10px;
      border: 1px solid #000;
      margin-right: 2px;
      vertical-align: middle;
    }
    .checkbox.checked { background-color: #000; position: relative; }
    .checkbox.checked::after { content: '\\2713'; color: #fff; font-size: 8px; position: absolute; top: -1px; left: 1px; }
    .paragraph { text-align: justify; margin-bottom: 10pt; text-indent: 0.5in; }
    .paragraph-no-indent { text-align: justify; margin-bottom: 10pt; }
    .section-title { font-weight: bold; }
    .center-text { text-align: center; }"""

GENERATE_SYSTEM_PROMPT = (
    "You are a legal document HTML formatter specializing in real estate contracts. You convert plain text "
    "contracts into HTML using a fixed set of CSS classes (.paragraph, .section-header, .subsection, .field-line) "
    "and never invent your own styles. You keep the exact wording and add structure. Every blank fill-in line gets "
    "a {{placeholder}}; a label followed by a colon and a blank (\"Buyer Name: ___\") is always a fill-in field. "
    "Label text stays OUTSIDE the span: Buyer Name: <span class=\"field-line\">{{buyer_name}}</span>. "
    "Markers such as \"(ai clauses)\" are replaced with the AI clause zone block, numbered from context."
)

GENERATE_PROMPT = """Convert the following plain text contract into HTML that matches our standard legal document format.

RULES:
1. Use the EXACT text provided. Do not add, remove or reword anything.
2. Replace values with placeholders from the list below where they fit.
3. Use ONLY the CSS classes defined below.
4. Number sections properly (1., 1.1, 1.2, 2., 2.1, ...).
5. Do NOT include a signature page or "[SIGNATURES ON FOLLOWING PAGE]"; both are added automatically.
6. Put a $ before money placeholders (e.g. ${{{{purchase_price}}}}, ${{{{earnest_money}}}}); the form only accepts numbers.
7. Return ONLY the HTML, no explanation.

AI CLAUSE ZONE:
Replace "(ai clauses)", "[AI Clauses]" or similar markers with this block, where X.X is the section number the
surrounding sections imply:
<!-- AI_CLAUSES_START section="X.X" -->
<div class="ai-clause-zone" data-section="X.X">
  {{{{ai_clauses}}}}
</div>
<!-- AI_CLAUSES_END -->

PLACEHOLDERS:
- Every <span class="field-line"> contains ONLY a {{{{placeholder}}}}. Never leave one empty and never put label text,
  colons or underscores inside it.
- Use the standard name for fields in the list below.
- For any other blank, make a descriptive snake_case name from context (e.g. {{{{repair_deadline_days}}}},
  {{{{title_company_name}}}}).
- "Label: ______" becomes Label: <span class="field-line">{{{{label_name}}}}</span>.
- Yes/no and multiple-choice options become checkboxes with the placeholder in the class attribute and a _check
  suffix: <span class="checkbox {{{{fha_mortgage_check}}}}"></span> FHA

REQUIRED CSS (use exactly this in the <style> tag):
{css}

HTML STRUCTURE:
- <h1> for the contract title
- <p class="intro"> for introductory paragraphs
- <p class="section-header"><span class="section-number">1.</span> <span class="section-title">SECTION NAME</span></p>
- <div class="subsection"> for subsection content
- <p class="paragraph"> and <p class="paragraph-no-indent"> for body text
- <p class="indented"> for indented items and <p class="center-text"> for centered text

AVAILABLE PLACEHOLDERS:
{placeholders}

PLAIN TEXT CONTRACT:
{plain_text}

Return a complete HTML document starting with <!DOCTYPE html>, with the CSS above in <head>."""

INSERT_ZONE_SYSTEM_PROMPT = (
    "You are an HTML document editor. You insert content into HTML documents at specified locations while "
    "keeping the document structure intact. You return complete, valid HTML documents."
)

INSERT_ZONE_PROMPT = """Insert an AI clause zone into the following HTML contract as section {section}.

Find the insertion point from the existing numbering:
- "5.1" goes after section 5 (or 5.0) and before section 6
- "8" goes after section 7 and before section 9
- "12.3" goes after 12.2 and before 12.4 or 13

AI CLAUSE ZONE HTML TO INSERT:
{zone}

RULES:
1. Do NOT modify any other content in the document.
2. Return the COMPLETE modified HTML document and nothing else.

CURRENT HTML DOCUMENT:
{html}"""

FALLBACK_HEAD = (
    '<!DOCTYPE html>\n<html>\n<head>\n<style>\nbody { font-family: "Times New Roman", serif; '
    "font-size: 11pt; line-height: 1.4; }\n</style>\n</head>\n<body>\n"
)

CODE_FENCE_PATTERN = re.compile(r"```(?:html)?\n?", re.IGNORECASE)
LABELLED_FIELD_PATTERN = re.compile(r'<span class="field-line([^"]*)">([^<{]+?)(\{\{[^}]+\}\})</span>')
TRAILING_FILL_PATTERN = re.compile(r'<span class="field-line([^"]*)">(\{\{[^}]+\}\})[\s_-]+</span>')
EMPTY_FIELD_PATTERN = re.compile(r'<span class="field-line[^"]*">\s*</span>')
EMPTY_CHECKBOX_PATTERN = re.compile(r'<span class="checkbox">\s*</span>')
DATA_SECTION_PATTERN = re.compile(r'data-section="([^"]+)"')


def clause_zone_html(section: str) -> str:
    return (
        f'<!-- AI_CLAUSES_START section="{section}" -->\n'
        f'<div class="ai-clause-zone" data-section="{section}">\n'
        "  {{ai_clauses}}\n"
        "</div>\n"
        "<!-- AI_CLAUSES_END -->"
    )


def has_clause_zone(html: str) -> bool:
    return "{{ai_clauses}}" in html or "ai-clause-zone" in html


def format_placeholder_list(placeholders: Optional[list[dict]] = None) -> str:
    """Prompt lines for the placeholders the form knows; the standard catalog when none are given"""
    if placeholders is None:
        placeholders = [{"key": key, **meta} for key, meta in STANDARD_PLACEHOLDERS.items()]
    return "\n".join(
        f"- {{{{{p['key']}}}}} = {p.get('label') or p['key']} ({p.get('category') or 'Custom'})"
        for p in placeholders
        if p.get("key")
    )


def strip_html_fences(text: str) -> str:
    return CODE_FENCE_PATTERN.sub("", text).strip()


def _move_label_outside(match: re.Match) -> str:
    classes, label, placeholder = match.groups()
    span = f'<span class="field-line{classes}">{placeholder}</span>'
    # Underscores and dashes are blank-line filler, not label text
    label = label.strip("_- \t\n")
    if not label:
        return span
    return f"{label} {span}"


def clean_generated_html(html: str) -> str:
    """
    Normalize model output: drop code fences, wrap fragments in a document and keep
    field-line spans down to a bare placeholder.
    """
    html = strip_html_fences(html)
    if not html.lower().startswith("<!doctype"):
        html = f"{FALLBACK_HEAD}{html}\n</body>\n</html>"

    html, moved = LABELLED_FIELD_PATTERN.subn(_move_label_outside, html)
    html, trimmed = TRAILING_FILL_PATTERN.subn(r'<span class="field-line\1">\2</span>', html)
    if moved or trimmed:
        logger.info(f"📝 Cleaned {moved + trimmed} field-line spans in generated template")

    empty_fields = len(EMPTY_FIELD_PATTERN.findall(html))
    if empty_fields:
        logger.warning(f"⚠️ Generated template has {empty_fields} empty field-line spans")
    empty_checkboxes = len(EMPTY_CHECKBOX_PATTERN.findall(html))
    if empty_checkboxes:
        logger.warning(f"⚠️ Generated template has {empty_checkboxes} checkboxes without a placeholder")
    return html


def find_zone_section(html: str) -> str:
    match = DATA_SECTION_PATTERN.search(html)
    return match.group(1) if match else "auto"
