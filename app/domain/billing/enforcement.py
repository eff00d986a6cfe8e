"""
Plan enforcement - company-level checks run before contract creation,
team invites and gated features.
"""

import logging
from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from ...models import Company
from ...plans import PLANS, can_add_team_member, can_create_contract, get_plan, has_feature
from .calculations import calculate_billing_details, calculate_next_billing_date
from .repository import BillingRepository

logger = logging.getLogger(__name__)

UPGRADE_PATH = {
    "free": "individual",
    "individual": "team",
    "team": "business",
    "business": "business",
    "admin": "admin",
}


class EnforcementResult(BaseModel):
    allowed: bool
    reason: Optional[str] = None
    overage_price: Optional[int] = None
    upgrade_required: bool = False
    suggested_plan: Optional[str] = None


def get_suggested_upgrade(plan: Optional[str]) -> str:
    return UPGRADE_PATH.get(get_plan(plan).id, "business")


def get_minimum_plan_for_feature(feature: str) -> str:
    for tier in ("free", "individual", "team", "business"):
        if PLANS[tier].limits.features.get(feature):
            return tier
    return "business"


def roll_billing_period(db: Session, company: Company, now: Optional[datetime] = None) -> bool:
    """
    Close elapsed billing periods: snapshot each one into a BillingCycle,
    reset the contract counter and advance the period dates.
    Returns True if anything changed.
    """
    now = now or datetime.utcnow()
    repo = BillingRepository()
    interval = company.billing_interval or "monthly"

    if company.billing_period_start is None:
        company.billing_period_start = company.created_at or now

    if company.next_billing_date is None:
        company.next_billing_date = calculate_next_billing_date(company.billing_period_start, interval)
        db.commit()

    rolled = False
    while now >= company.next_billing_date:
        users_count = repo.count_company_users(db, company.id)
        details = calculate_billing_details(
            company.billing_plan,
            company.actual_plan,
            interval,
            company.contracts_used_this_period or 0,
            users_count,
            company.billing_period_start,
            company.next_billing_date,
        )
        repo.add_billing_cycle(
            db,
            company_id=company.id,
            cycle_start=company.billing_period_start,
            cycle_end=company.next_billing_date,
            plan_at_cycle_start=details["billing_plan"],
            base_amount=details["base_cost"],
            extra_seats_count=details["extra_seats"],
            extra_seats_amount=details["extra_seats_cost"],
            extra_contracts_count=details["extra_contracts"],
            extra_contracts_amount=details["extra_contracts_cost"],
            total_amount=details["estimated_next_invoice"],
            status="pending",
        )
        company.billing_period_start = company.next_billing_date
        company.next_billing_date = calculate_next_billing_date(company.next_billing_date, interval)
        company.contracts_used_this_period = 0
        if company.subscription_status == "canceling":
            # Cancelled at period end: the closed period was the last paid one
            company.billing_plan = company.actual_plan = "free"
            company.subscription_status = "cancelled"
        rolled = True

    if rolled:
        db.commit()
        db.refresh(company)
        logger.info(
            f"🔄 Rolled billing period for company {company.id}, next billing {company.next_billing_date}"
        )
    return rolled


class PlanEnforcementService:
    """Checks plan limits for a company before actions that consume them"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BillingRepository()

    def _get_company(self, company_id: int) -> Optional[Company]:
        company = self.repo.get_company(self.db, company_id)
        if company:
            roll_billing_period(self.db, company)
        return company

    def check_contract_creation(self, company_id: int) -> EnforcementResult:
        company = self._get_company(company_id)
        if not company:
            return EnforcementResult(allowed=False, reason="Company not found")

        plan = company.actual_plan or "free"
        check = can_create_contract(plan, company.contracts_used_this_period or 0)
        if not check.allowed:
            return EnforcementResult(
                allowed=False,
                reason=check.reason,
                upgrade_required=True,
                suggested_plan=get_suggested_upgrade(plan),
            )
        return EnforcementResult(allowed=True, reason=check.reason, overage_price=check.overage_price)

    def check_team_invite(self, company_id: int) -> EnforcementResult:
        company = self._get_company(company_id)
        if not company:
            return EnforcementResult(allowed=False, reason="Company not found")

        plan = company.actual_plan or "free"
        user_count = self.repo.count_company_users(self.db, company_id)
        check = can_add_team_member(plan, user_count)
        if not check.allowed:
            return EnforcementResult(
                allowed=False,
                reason=check.reason,
                upgrade_required=True,
                suggested_plan=get_suggested_upgrade(plan),
            )
        return EnforcementResult(allowed=True, reason=check.reason, overage_price=check.overage_price)

    def check_feature_access(self, company_id: int, feature: str) -> EnforcementResult:
        company = self._get_company(company_id)
        if not company:
            return EnforcementResult(allowed=False, reason="Company not found")

        if has_feature(company.actual_plan or "free", feature):
            return EnforcementResult(allowed=True)

        minimum = get_minimum_plan_for_feature(feature)
        return EnforcementResult(
            allowed=False,
            reason=f"This feature requires the {PLANS[minimum].name} plan or higher.",
            upgrade_required=True,
            suggested_plan=minimum,
        )

    def increment_contract_count(self, company_id: int) -> int:
        company = self._get_company(company_id)
        if not company:
            return 0
        return self.repo.increment_contract_count(self.db, company)

    def log_usage(
        self,
        company_id: int,
        user_id: Optional[int],
        action_type: str,
        metadata: Optional[dict] = None,
    ) -> None:
        try:
            self.repo.create_usage_log(self.db, company_id, user_id, action_type, metadata)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to log usage {action_type} for company {company_id}: {e}")

    def get_company_usage(self, company_id: int) -> Optional[dict]:
        company = self._get_company(company_id)
        if not company:
            return None

        actual = get_plan(company.actual_plan)
        used = company.contracts_used_this_period or 0
        limit = actual.limits.contracts_per_month
        return {
            "billing_plan": get_plan(company.billing_plan).id,
            "actual_plan": actual.id,
            "plan_details": actual.model_dump(),
            "contracts": {
                "used": used,
                "limit": limit,
                "remaining": None if limit is None else max(0, limit - used),
            },
            "users": {
                "current": self.repo.count_company_users(self.db, company_id),
                "limit": actual.limits.max_users,
            },
            "billing_period_start": company.billing_period_start,
            "next_billing_date": company.next_billing_date,
            "subscription_status": company.subscription_status,
        }
