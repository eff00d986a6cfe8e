"""Property service"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Property, User
from .repository import PropertyRepository
from .schemas import PROPERTY_STATUSES, PropertyResponse

logger = logging.getLogger(__name__)


class PropertyService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = PropertyRepository()

    def list_properties(self, user: User) -> list[PropertyResponse]:
        rows = self.repo.get_properties_with_counts(self.db, user.company_id)
        return [
            PropertyResponse.model_validate(prop).model_copy(update={"contract_count": count})
            for prop, count in rows
        ]

    def update_status(self, public_id: str, status: str, user: User) -> Property:
        if status not in PROPERTY_STATUSES:
            raise HTTPException(status_code=400, detail="Invalid status")

        prop = self.repo.get_property_by_public_id(self.db, public_id, user.company_id)
        if not prop:
            raise HTTPException(status_code=404, detail="Property not found")

        prop = self.repo.update_status(self.db, prop, status)
        logger.info(f"🔄 Property {public_id} status set to {status}")
        return prop
