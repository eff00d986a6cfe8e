"""Support service - Tickets from signed-in users, forwarded to the admin inbox"""

import html
import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...email_service import send_admin_notification
from ...models import SupportTicket, User
from ...utils.sanitization import sanitize_string
from ..billing.repository import BillingRepository
from .repository import SupportRepository
from .schemas import SupportTicketCreate

logger = logging.getLogger(__name__)


class SupportService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = SupportRepository()
        self.billing_repo = BillingRepository()

    async def create_ticket(self, data: SupportTicketCreate, user: User) -> SupportTicket:
        if not (data.subject and data.subject.strip()) or not (data.message and data.message.strip()):
            raise HTTPException(status_code=400, detail="Subject and message are required")

        ticket = self.repo.create_ticket(
            self.db,
            company_id=user.company_id,
            user_id=user.id,
            subject=sanitize_string(data.subject),
            message=sanitize_string(data.message),
            category=sanitize_string(data.category) or "general",
        )
        logger.info(f"🆕 Support ticket {ticket.public_id} from user {user.id}")

        company = self.billing_repo.get_company(self.db, user.company_id)
        # Ticket fields are already escaped; user and company names are not
        await send_admin_notification(
            subject=f"Support Ticket: {ticket.subject}",
            event="New Support Ticket",
            details={
                "Subject": ticket.subject,
                "Category": ticket.category,
                "Message": ticket.message,
                "User": html.escape(user.full_name or user.email or "Unknown"),
                "Email": html.escape(user.email or "Unknown"),
                "Company": html.escape(company.name) if company else "Unknown",
            },
        )
        return ticket

    def get_tickets(self, user: User) -> list[SupportTicket]:
        return self.repo.get_user_tickets(self.db, user.id)
