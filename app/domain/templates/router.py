"""Template router - Company templates, layouts and state templates"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_company_user
from ...database import get_db
from ...models import User
from ..contracts.signature_layouts import list_layouts
from .schemas import TemplateCopyRequest, TemplateCreate, TemplateResponse, TemplateUpdate
from .service import TemplateService

router = APIRouter(prefix="/templates", tags=["Templates"])


def get_template_service(db: Session = Depends(get_db)) -> TemplateService:
    """Dependency injection for TemplateService"""
    return TemplateService(db)


# ============================================================================
# CATALOGS
# ============================================================================


@router.get("/layouts")
async def get_layouts(user: User = Depends(get_current_company_user)):
    """Signature page layouts a template can use"""
    return {"layouts": list_layouts()}


@router.get("/states/{state_code}")
async def get_state_templates(
    state_code: str,
    user: User = Depends(get_current_company_user),
    service: TemplateService = Depends(get_template_service),
):
    """Purchase and assignment templates that apply to a state (name or code)"""
    return service.get_state_templates(state_code)


# ============================================================================
# COMPANY TEMPLATES
# ============================================================================


@router.get("")
async def list_templates(
    tag: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    include_examples: bool = Query(True),
    user: User = Depends(get_current_company_user),
    service: TemplateService = Depends(get_template_service),
):
    result = service.list_templates(user, tag, search, include_examples)
    result["templates"] = [TemplateResponse.model_validate(t) for t in result["templates"]]
    return result


@router.post("", response_model=TemplateResponse)
async def create_template(
    body: TemplateCreate,
    user: User = Depends(get_current_company_user),
    service: TemplateService = Depends(get_template_service),
):
    """Create a company template (custom_templates plan feature)"""
    return service.create_template(body, user)


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(
    template_id: str,
    user: User = Depends(get_current_company_user),
    service: TemplateService = Depends(get_template_service),
):
    return service.get_template(template_id, user)


@router.patch("/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: str,
    body: TemplateUpdate,
    user: User = Depends(get_current_company_user),
    service: TemplateService = Depends(get_template_service),
):
    return service.update_template(template_id, body, user)


@router.delete("/{template_id}")
async def delete_template(
    template_id: str,
    user: User = Depends(get_current_company_user),
    service: TemplateService = Depends(get_template_service),
):
    service.delete_template(template_id, user)
    return {"success": True}


@router.post("/{template_id}/copy", response_model=TemplateResponse)
async def copy_template(
    template_id: str,
    body: Optional[TemplateCopyRequest] = None,
    user: User = Depends(get_current_company_user),
    service: TemplateService = Depends(get_template_service),
):
    """Copy an example or own template into the company"""
    return service.copy_template(template_id, body or TemplateCopyRequest(), user)
