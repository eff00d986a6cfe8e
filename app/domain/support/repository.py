"""Support repository - Database operations for support tickets"""

from sqlalchemy.orm import Session

from ...models import SupportTicket


class SupportRepository:
    """Repository for support ticket database operations"""

    @staticmethod
    def create_ticket(db: Session, **values) -> SupportTicket:
        ticket = SupportTicket(**values)
        db.add(ticket)
        db.commit()
        db.refresh(ticket)
        return ticket

    @staticmethod
    def get_user_tickets(db: Session, user_id: int) -> list[SupportTicket]:
        return (
            db.query(SupportTicket)
            .filter(SupportTicket.user_id == user_id)
            .order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc())
            .all()
        )
