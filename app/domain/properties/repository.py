"""Property repository - Database operations for properties"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Contract, Property


class PropertyRepository:
    """Repository for property database operations"""

    @staticmethod
    def get_properties_with_counts(db: Session, company_id: int) -> list[tuple[Property, int]]:
        """Company properties with the number of contracts on each, newest first"""
        return (
            db.query(Property, func.count(Contract.id))
            .outerjoin(Contract, Contract.property_id == Property.id)
            .filter(Property.company_id == company_id)
            .group_by(Property.id)
            .order_by(Property.created_at.desc(), Property.id.desc())
            .all()
        )

    @staticmethod
    def get_property_by_public_id(db: Session, public_id: str, company_id: int) -> Optional[Property]:
        return (
            db.query(Property)
            .filter(Property.public_id == public_id, Property.company_id == company_id)
            .first()
        )

    @staticmethod
    def update_status(db: Session, prop: Property, status: str) -> Property:
        prop.status = status
        db.commit()
        db.refresh(prop)
        return prop
