"""Team repository - Database operations for members and invites"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Invite, User


class TeamRepository:
    """Repository for team database operations"""

    @staticmethod
    def get_members(db: Session, company_id: int) -> list[User]:
        return db.query(User).filter(User.company_id == company_id).order_by(User.created_at, User.id).all()

    @staticmethod
    def get_member(db: Session, user_id: int, company_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id, User.company_id == company_id).first()

    @staticmethod
    def find_member_by_email(db: Session, company_id: int, email: str) -> Optional[User]:
        return (
            db.query(User)
            .filter(User.company_id == company_id, func.lower(User.email) == email.lower())
            .first()
        )

    @staticmethod
    def get_pending_invites(db: Session, company_id: int, now: Optional[datetime] = None) -> list[Invite]:
        """Invites not yet accepted and not expired"""
        now = now or datetime.utcnow()
        return (
            db.query(Invite)
            .filter(
                Invite.company_id == company_id,
                Invite.accepted_at.is_(None),
                Invite.expires_at > now,
            )
            .order_by(Invite.created_at.desc(), Invite.id.desc())
            .all()
        )

    @staticmethod
    def find_pending_invite(db: Session, company_id: int, email: str) -> Optional[Invite]:
        return (
            db.query(Invite)
            .filter(
                Invite.company_id == company_id,
                func.lower(Invite.email) == email.lower(),
                Invite.accepted_at.is_(None),
                Invite.expires_at > datetime.utcnow(),
            )
            .first()
        )

    @staticmethod
    def get_invite(db: Session, invite_id: int, company_id: int) -> Optional[Invite]:
        return db.query(Invite).filter(Invite.id == invite_id, Invite.company_id == company_id).first()

    @staticmethod
    def get_invite_by_token(db: Session, token: str) -> Optional[Invite]:
        return db.query(Invite).filter(Invite.token == token).first()

    @staticmethod
    def create_invite(db: Session, **invite_data) -> Invite:
        invite = Invite(**invite_data)
        db.add(invite)
        db.commit()
        db.refresh(invite)
        return invite

    @staticmethod
    def delete_invite(db: Session, invite: Invite) -> None:
        db.delete(invite)
        db.commit()
