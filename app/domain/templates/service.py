"""Template service - Company contract templates and state template lookup"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import CompanyTemplate, User
from ...utils.sanitization import sanitize_string
from ..billing.enforcement import PlanEnforcementService
from ..contracts.pdf_service import ContractPDFService
from ..contracts.signature_layouts import DEFAULT_LAYOUT, SIGNATURE_PAGE_LAYOUTS
from ..contracts.template_renderer import STATE_CODES, resolve_state_code
from .placeholders import STANDARD_PLACEHOLDERS, extract_placeholders, generate_field_config
from .repository import TemplateRepository
from .schemas import TemplateCopyRequest, TemplateCreate, TemplateUpdate

logger = logging.getLogger(__name__)

KNOWN_STATE_CODES = set(STATE_CODES.values()) | {"GENERAL"}


def validate_layout(layout: Optional[str]) -> str:
    if not layout:
        return DEFAULT_LAYOUT
    if layout not in SIGNATURE_PAGE_LAYOUTS:
        raise HTTPException(status_code=400, detail=f"Unknown signature layout: {layout}")
    return layout


class TemplateService:
    """Service layer for company templates"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TemplateRepository()

    def list_templates(
        self, user: User, tag: Optional[str] = None, search: Optional[str] = None, include_examples: bool = True
    ) -> dict:
        all_templates = self.repo.list_templates(self.db, user.company_id, include_examples=include_examples)
        templates = all_templates
        if search:
            templates = self.repo.list_templates(self.db, user.company_id, search, include_examples)
        if tag:
            templates = [t for t in templates if tag in (t.tags or [])]

        available_tags = sorted({t for template in all_templates for t in (template.tags or [])})
        return {
            "templates": templates,
            "available_tags": available_tags,
            "standard_placeholders": STANDARD_PLACEHOLDERS,
        }

    def get_template(self, public_id: str, user: User) -> CompanyTemplate:
        template = self.repo.get_visible_template(self.db, public_id, user.company_id)
        if not template:
            raise HTTPException(status_code=404, detail="Template not found")
        return template

    def _get_owned_template(self, public_id: str, user: User, action: str) -> CompanyTemplate:
        template = self.get_template(public_id, user)
        if template.is_example:
            message = "Cannot edit example templates. Copy it first." if action == "edit" else "Cannot delete example templates"
            raise HTTPException(status_code=403, detail=message)
        if template.company_id != user.company_id:
            raise HTTPException(status_code=403, detail="Unauthorized")
        return template

    def create_template(self, data: TemplateCreate, user: User) -> CompanyTemplate:
        access = PlanEnforcementService(self.db).check_feature_access(user.company_id, "custom_templates")
        if not access.allowed:
            raise HTTPException(
                status_code=403,
                detail={
                    "error": access.reason,
                    "upgrade_required": access.upgrade_required,
                    "suggested_plan": access.suggested_plan,
                },
            )

        if not (data.name and data.name.strip()) or not (data.html_content and data.html_content.strip()):
            raise HTTPException(status_code=400, detail="Name and HTML content are required")

        used_placeholders = extract_placeholders(data.html_content)
        template = self.repo.create_template(
            self.db,
            company_id=user.company_id,
            created_by=user.id,
            name=sanitize_string(data.name),
            description=sanitize_string(data.description),
            tags=[sanitize_string(t) for t in data.tags],
            html_content=data.html_content,
            signature_layout=validate_layout(data.signature_layout),
            custom_fields=data.custom_fields or [],
            used_placeholders=used_placeholders,
            field_config=generate_field_config(used_placeholders),
            is_example=False,
            is_active=True,
        )
        logger.info(f"📝 Template '{template.name}' created with {len(used_placeholders)} placeholders")
        return template

    def update_template(self, public_id: str, data: TemplateUpdate, user: User) -> CompanyTemplate:
        template = self._get_owned_template(public_id, user, "edit")
        updates = {}

        if data.name is not None:
            if not data.name.strip():
                raise HTTPException(status_code=400, detail="Name cannot be empty")
            updates["name"] = sanitize_string(data.name)
        if data.description is not None:
            updates["description"] = sanitize_string(data.description)
        if data.tags is not None:
            updates["tags"] = [sanitize_string(t) for t in data.tags]
        if data.signature_layout is not None:
            updates["signature_layout"] = validate_layout(data.signature_layout)
        if data.custom_fields is not None:
            updates["custom_fields"] = data.custom_fields
        if data.html_content is not None:
            used_placeholders = extract_placeholders(data.html_content)
            updates["html_content"] = data.html_content
            updates["used_placeholders"] = used_placeholders
            updates["field_config"] = generate_field_config(used_placeholders)
        if data.field_config is not None:
            updates["field_config"] = data.field_config

        template = self.repo.update_template(self.db, template, updates)
        logger.info(f"🔄 Template {public_id} updated: {sorted(updates)}")
        return template

    def delete_template(self, public_id: str, user: User) -> None:
        """Soft delete; contracts keep rendering from the stored row"""
        template = self._get_owned_template(public_id, user, "delete")
        self.repo.update_template(self.db, template, {"is_active": False})
        logger.info(f"📝 Template {public_id} deactivated")

    def copy_template(self, public_id: str, body: TemplateCopyRequest, user: User) -> CompanyTemplate:
        source = self.get_template(public_id, user)
        copy = self.repo.create_template(
            self.db,
            company_id=user.company_id,
            created_by=user.id,
            name=sanitize_string(body.name) if body.name else f"{source.name} (Copy)",
            description=source.description,
            tags=list(source.tags or []),
            html_content=source.html_content,
            signature_layout=source.signature_layout,
            custom_fields=source.custom_fields,
            used_placeholders=source.used_placeholders,
            field_config=source.field_config,
            is_example=False,
            is_active=True,
        )
        logger.info(f"📝 Copied template {public_id} to company {user.company_id}")
        return copy

    def get_state_templates(self, state: str) -> dict:
        """Templates a contract in this state renders from, resolved the same way as at send time"""
        state_code = resolve_state_code(state)
        if state_code not in KNOWN_STATE_CODES:
            raise HTTPException(status_code=404, detail="State not found")

        result = {"state_code": state_code}
        for template_type in ("purchase", "assignment"):
            source, html = ContractPDFService.resolve_state_template(self.db, template_type, state_code)
            result[template_type] = {"source": source, "html": html}
        return result
