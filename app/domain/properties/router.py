"""Property router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_company_user
from ...database import get_db
from ...models import User
from .schemas import PropertyResponse, PropertyStatusUpdate
from .service import PropertyService

router = APIRouter(prefix="/properties", tags=["Properties"])


def get_property_service(db: Session = Depends(get_db)) -> PropertyService:
    return PropertyService(db)


@router.get("", response_model=list[PropertyResponse])
async def list_properties(
    current_user: User = Depends(get_current_company_user),
    service: PropertyService = Depends(get_property_service),
):
    """Company properties with contract counts"""
    return service.list_properties(current_user)


@router.patch("/{property_id}/status", response_model=PropertyResponse)
async def update_property_status(
    property_id: str,
    body: PropertyStatusUpdate,
    current_user: User = Depends(get_current_company_user),
    service: PropertyService = Depends(get_property_service),
):
    return service.update_status(property_id, body.status, current_user)
