"""Team service - Members, invites and seat billing"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import FRONTEND_URL
from ...email_service import send_team_invite_email
from ...models import Invite, User
from ...plans import get_plan
from ...utils.sanitization import normalize_email, sanitize_string
from ..billing.enforcement import PlanEnforcementService
from ..billing.repository import BillingRepository
from ..billing.subscription_service import SubscriptionService
from .repository import TeamRepository
from .schemas import InviteRequest, MemberUpdate

logger = logging.getLogger(__name__)

INVITE_EXPIRY_DAYS = 7
MEMBER_ROLES = ("manager", "user")


def seat_billing_info(overage_price: Optional[int]) -> dict:
    is_overage_seat = overage_price is not None
    return {
        "is_overage_seat": is_overage_seat,
        "monthly_charge": f"${overage_price / 100:.0f}/month" if is_overage_seat else None,
    }


class TeamService:
    """Service layer for team management"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TeamRepository()
        self.billing_repo = BillingRepository()
        self.enforcement = PlanEnforcementService(db)

    # ========================================================================
    # Members
    # ========================================================================

    def get_team(self, user: User) -> dict:
        company = self.billing_repo.get_company(self.db, user.company_id)
        members = self.repo.get_members(self.db, user.company_id)
        plan = get_plan(company.actual_plan if company else None)
        return {
            "members": members,
            "current_user_role": user.role,
            "current_user_id": user.id,
            "plan": plan.id,
            "users_limit": plan.limits.max_users,
        }

    def update_member(self, member_id: int, data: MemberUpdate, manager: User) -> User:
        member = self.repo.get_member(self.db, member_id, manager.company_id)
        if not member:
            raise HTTPException(status_code=404, detail="Member not found")

        if data.role is not None:
            if member.id == manager.id:
                raise HTTPException(status_code=400, detail="You cannot change your own role")
            if data.role not in MEMBER_ROLES:
                raise HTTPException(status_code=400, detail="Invalid role")
            member.role = data.role

        if data.full_name is not None:
            member.full_name = sanitize_string(data.full_name)
        if "monthly_contract_limit" in data.model_fields_set:
            if data.monthly_contract_limit is not None and data.monthly_contract_limit < 0:
                raise HTTPException(status_code=400, detail="Contract limit cannot be negative")
            member.monthly_contract_limit = data.monthly_contract_limit
        if data.is_active is not None:
            member.is_active = data.is_active

        self.db.commit()
        self.db.refresh(member)
        logger.info(f"🔄 Updated team member {member.id} in company {manager.company_id}")
        return member

    def remove_member(self, member_id: int, manager: User) -> None:
        """Detach a member from the company; their account itself is kept"""
        if member_id == manager.id:
            raise HTTPException(status_code=400, detail="You cannot remove yourself")

        member = self.repo.get_member(self.db, member_id, manager.company_id)
        if not member:
            raise HTTPException(status_code=404, detail="Member not found")

        member.company_id = None
        member.role = "user"
        self.db.commit()
        logger.info(f"📝 Removed user {member_id} from company {manager.company_id}")

    # ========================================================================
    # Invites
    # ========================================================================

    def get_pending_invites(self, user: User) -> list[Invite]:
        return self.repo.get_pending_invites(self.db, user.company_id)

    async def invite_member(self, data: InviteRequest, manager: User) -> dict:
        email = normalize_email(data.email)
        if not email:
            raise HTTPException(status_code=400, detail="Email is required")
        if data.role not in MEMBER_ROLES:
            raise HTTPException(status_code=400, detail="Invalid role")

        if self.repo.find_member_by_email(self.db, manager.company_id, email):
            raise HTTPException(status_code=400, detail="A user with this email is already in your team")
        if self.repo.find_pending_invite(self.db, manager.company_id, email):
            raise HTTPException(status_code=400, detail="An invite has already been sent to this email")

        check = self.enforcement.check_team_invite(manager.company_id)
        if not check.allowed:
            raise HTTPException(
                status_code=403,
                detail={
                    "error": check.reason,
                    "upgrade_required": check.upgrade_required,
                    "suggested_plan": check.suggested_plan,
                },
            )

        expires_at = datetime.utcnow() + timedelta(days=INVITE_EXPIRY_DAYS)
        invite = self.repo.create_invite(
            self.db,
            email=email,
            token=secrets.token_hex(32),
            company_id=manager.company_id,
            invited_by=manager.id,
            role=data.role,
            expires_at=expires_at,
        )
        invite_url = f"{FRONTEND_URL}/signup?invite={invite.token}"

        company = self.billing_repo.get_company(self.db, manager.company_id)
        email_sent = True
        try:
            await send_team_invite_email(
                to=email,
                inviter_name=manager.full_name or manager.email,
                company_name=company.name if company else "your team",
                invite_url=invite_url,
                role=data.role,
            )
        except Exception as e:
            email_sent = False
            logger.error(f"❌ Failed to send invite email to {email}: {e}")

        logger.info(f"📧 Invite created for {email} in company {manager.company_id}")
        return {
            "success": True,
            "invite": invite,
            "invite_url": invite_url,
            "email_sent": email_sent,
            "billing": seat_billing_info(check.overage_price),
        }

    def delete_invite(self, invite_id: int, manager: User) -> None:
        invite = self.repo.get_invite(self.db, invite_id, manager.company_id)
        if not invite or invite.accepted_at is not None:
            raise HTTPException(status_code=404, detail="Invite not found")
        self.repo.delete_invite(self.db, invite)
        logger.info(f"📝 Deleted invite {invite_id}")

    def _get_open_invite(self, token: Optional[str]) -> Invite:
        if not token:
            raise HTTPException(status_code=400, detail="Token is required")

        invite = self.repo.get_invite_by_token(self.db, token)
        if not invite:
            raise HTTPException(status_code=404, detail="Invalid invite token")
        if invite.accepted_at is not None:
            raise HTTPException(status_code=400, detail="This invite has already been used")
        if invite.expires_at < datetime.utcnow():
            raise HTTPException(status_code=400, detail="This invite has expired")
        return invite

    def verify_invite(self, token: Optional[str]) -> dict:
        """Invite details shown on the signup page before an account exists"""
        invite = self._get_open_invite(token)
        company = self.billing_repo.get_company(self.db, invite.company_id)
        return {
            "email": invite.email,
            "role": invite.role,
            "company_id": company.public_id if company else None,
            "company_name": company.name if company else "Unknown Company",
        }

    async def accept_invite(self, token: Optional[str], user: User) -> dict:
        """Join the inviting company; extra seats are billed to its subscription"""
        invite = self._get_open_invite(token)
        if (invite.email or "").lower() != (user.email or "").lower():
            raise HTTPException(status_code=400, detail="This invite was sent to a different email address")

        company = self.billing_repo.get_company(self.db, invite.company_id)
        if not company:
            raise HTTPException(status_code=404, detail="Company not found")

        check = self.enforcement.check_team_invite(company.id)
        if not check.allowed:
            raise HTTPException(status_code=403, detail=check.reason)

        user.company_id = company.id
        user.role = invite.role
        user.is_active = True
        invite.accepted_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"✅ User {user.id} joined company {company.id} as {invite.role}")

        seat_billed = False
        if check.overage_price is not None:
            seat_billed = await SubscriptionService(self.db).bill_extra_seats(company)

        self.enforcement.log_usage(
            company.id, user.id, "user_added", {"role": invite.role, "is_overage_seat": check.overage_price is not None}
        )

        return {
            "success": True,
            "company_id": company.public_id,
            "company_name": company.name,
            "role": user.role,
            "billing": {**seat_billing_info(check.overage_price), "seat_billed": seat_billed},
        }
