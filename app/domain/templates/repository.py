"""Template repository - Company templates"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import CompanyTemplate


class TemplateRepository:
    """Repository for template database operations"""

    @staticmethod
    def _visible(db: Session, company_id: int, include_examples: bool = True):
        ownership = CompanyTemplate.company_id == company_id
        if include_examples:
            ownership = or_(ownership, CompanyTemplate.is_example.is_(True))
        return db.query(CompanyTemplate).filter(CompanyTemplate.is_active.is_(True), ownership)

    @staticmethod
    def list_templates(
        db: Session,
        company_id: int,
        search: Optional[str] = None,
        include_examples: bool = True,
    ) -> list[CompanyTemplate]:
        """Company templates plus examples, examples first then by name"""
        query = TemplateRepository._visible(db, company_id, include_examples)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(CompanyTemplate.name.ilike(pattern), CompanyTemplate.description.ilike(pattern)))
        return query.order_by(CompanyTemplate.is_example.desc(), CompanyTemplate.name).all()

    @staticmethod
    def get_visible_template(db: Session, public_id: str, company_id: int) -> Optional[CompanyTemplate]:
        return (
            TemplateRepository._visible(db, company_id)
            .filter(CompanyTemplate.public_id == public_id)
            .first()
        )

    @staticmethod
    def create_template(db: Session, **template_data) -> CompanyTemplate:
        template = CompanyTemplate(**template_data)
        db.add(template)
        db.commit()
        db.refresh(template)
        return template

    @staticmethod
    def update_template(db: Session, template: CompanyTemplate, updates: dict) -> CompanyTemplate:
        for key, value in updates.items():
            setattr(template, key, value)
        db.commit()
        db.refresh(template)
        return template
