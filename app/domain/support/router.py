"""Support router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_company_user
from ...database import get_db
from ...models import User
from .schemas import SupportTicketCreate, SupportTicketResponse
from .service import SupportService

router = APIRouter(prefix="/support", tags=["Support"])


def get_support_service(db: Session = Depends(get_db)) -> SupportService:
    """Dependency injection for SupportService"""
    return SupportService(db)


@router.post("")
async def create_ticket(
    body: SupportTicketCreate,
    user: User = Depends(get_current_company_user),
    service: SupportService = Depends(get_support_service),
):
    """Open a support ticket and notify the admin inbox"""
    ticket = await service.create_ticket(body, user)
    return {"success": True, "ticket": SupportTicketResponse.model_validate(ticket)}


@router.get("")
async def get_tickets(
    user: User = Depends(get_current_company_user),
    service: SupportService = Depends(get_support_service),
):
    """The caller's tickets, newest first"""
    tickets = service.get_tickets(user)
    return {"tickets": [SupportTicketResponse.model_validate(t) for t in tickets]}
