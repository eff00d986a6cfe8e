"""AI router - Clauses and template authoring"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...auth import get_current_company_user
from ...database import get_db
from ...models import User
from ..billing.enforcement import PlanEnforcementService
from .clauses import get_clause, get_recommended_clauses
from .schemas import (
    GenerateClausesRequest,
    GenerateClausesResponse,
    GenerateTemplateHtmlRequest,
    GenerateTemplateHtmlResponse,
    InsertClauseZoneRequest,
    InsertClauseZoneResponse,
)
from .service import AIClauseService, AITemplateService

router = APIRouter(prefix="/ai", tags=["AI"])


def require_ai_feature(
    user: User = Depends(get_current_company_user),
    db: Session = Depends(get_db),
) -> User:
    """Company user whose plan includes ai_template_generation"""
    access = PlanEnforcementService(db).check_feature_access(user.company_id, "ai_template_generation")
    if not access.allowed:
        raise HTTPException(
            status_code=403,
            detail={
                "error": access.reason,
                "upgrade_required": access.upgrade_required,
                "suggested_plan": access.suggested_plan,
            },
        )
    return user


# ============================================================================
# CLAUSES
# ============================================================================


@router.get("/clauses/recommended")
async def recommended_clauses(
    contract_type: str = Query("purchase", pattern="^(purchase|assignment)$"),
    is_as_is: bool = False,
    has_inspection: bool = False,
    has_financing: bool = False,
    is_wholesale: bool = False,
    user: User = Depends(get_current_company_user),
):
    """Standard clauses recommended for a contract"""
    types = get_recommended_clauses(contract_type, is_as_is, has_inspection, has_financing, is_wholesale)
    return {"clauses": [get_clause(t) for t in types]}


@router.post("/clauses/generate", response_model=GenerateClausesResponse)
async def generate_clauses_for_situation(
    body: GenerateClausesRequest,
    user: User = Depends(require_ai_feature),
):
    """Generate situation-specific clauses"""
    clauses = await AIClauseService().generate_for_situation(body.situation, body.contract_details)
    return {"clauses": clauses}


# ============================================================================
# TEMPLATE AUTHORING
# ============================================================================


@router.post("/generate-template-html", response_model=GenerateTemplateHtmlResponse)
async def generate_template_html(
    body: GenerateTemplateHtmlRequest,
    user: User = Depends(require_ai_feature),
):
    """Format pasted contract text as template HTML with placeholders"""
    placeholders = [p.model_dump() for p in body.placeholders] if body.placeholders is not None else None
    return await AITemplateService().generate_template_html(body.plain_text, placeholders)


@router.post("/insert-ai-clause-zone", response_model=InsertClauseZoneResponse)
async def insert_ai_clause_zone(
    body: InsertClauseZoneRequest,
    user: User = Depends(require_ai_feature),
):
    """Add the {{ai_clauses}} zone to a template at a section number"""
    return await AITemplateService().insert_clause_zone(body.html, body.section_number)
