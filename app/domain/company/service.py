"""Company service - Onboarding, settings and plan selection"""

import logging
from datetime import datetime

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Company, User
from ...plans import get_usage_summary, is_valid_plan
from ...utils.sanitization import normalize_email, sanitize_string
from ..billing.calculations import calculate_next_billing_date
from ..billing.enforcement import roll_billing_period
from .repository import CompanyRepository
from .schemas import OnboardingRequest, PlanSelectRequest, SettingsUpdate

logger = logging.getLogger(__name__)

OVERAGE_BEHAVIORS = ("auto_charge", "warn_each")
PROFILE_FIELDS = ("phone", "address", "city", "state", "zip", "signer_name")


class CompanyService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CompanyRepository()

    def _get_company(self, user: User) -> Company:
        company = self.repo.get_company(self.db, user.company_id)
        if not company:
            raise HTTPException(status_code=404, detail="Company not found")
        roll_billing_period(self.db, company)
        return company

    def onboard(self, data: OnboardingRequest, user: User) -> Company:
        """Create the user's company on the free plan with the user as manager"""
        name = (data.company_name or "").strip()
        if not name:
            raise HTTPException(status_code=400, detail="Company name is required")
        if user.company_id:
            raise HTTPException(status_code=400, detail="You already have a company")

        now = datetime.utcnow()
        company = self.repo.create_company_for_user(
            self.db,
            user,
            name=sanitize_string(name),
            email=normalize_email(data.email) or user.email,
            billing_plan="free",
            actual_plan="free",
            billing_interval="monthly",
            billing_period_start=now,
            next_billing_date=calculate_next_billing_date(now, "monthly"),
            contracts_used_this_period=0,
            **{field: sanitize_string(getattr(data, field)) for field in PROFILE_FIELDS},
        )
        logger.info(f"🆕 Company {company.id} created by user {user.id}")
        return company

    def get_settings(self, user: User) -> dict:
        company = self._get_company(user)
        user_count = self.repo.count_users(self.db, company.id)
        return {
            "company": company,
            "user_role": user.role,
            "user_count": user_count,
            "usage": get_usage_summary(
                company.billing_plan,
                company.actual_plan,
                company.contracts_used_this_period or 0,
                user_count,
            ),
        }

    def update_settings(self, data: SettingsUpdate, user: User) -> Company:
        company = self._get_company(user)
        updates = {}

        if data.overage_behavior in OVERAGE_BEHAVIORS:
            updates["overage_behavior"] = data.overage_behavior
        if data.company_name and data.company_name.strip():
            updates["name"] = sanitize_string(data.company_name)
        if data.email:
            updates["email"] = normalize_email(data.email)
        if data.billing_email:
            updates["billing_email"] = normalize_email(data.billing_email)
        for field in PROFILE_FIELDS:
            value = getattr(data, field)
            if value is not None:
                updates[field] = sanitize_string(value)

        if not updates:
            raise HTTPException(status_code=400, detail="No valid updates provided")

        company = self.repo.update_company(self.db, company, updates)
        logger.info(f"🔄 Updated settings for company {company.id}: {sorted(updates)}")
        return company

    def select_plan(self, data: PlanSelectRequest, user: User) -> Company:
        """Set both plans and start a fresh billing period"""
        if not is_valid_plan(data.plan):
            raise HTTPException(status_code=400, detail="Invalid plan")
        if data.plan == "admin":
            raise HTTPException(status_code=400, detail="Admin plan cannot be selected")
        if data.billing_interval is not None and data.billing_interval not in ("monthly", "yearly"):
            raise HTTPException(status_code=400, detail="Invalid billing interval")

        company = self._get_company(user)
        interval = data.billing_interval or company.billing_interval or "monthly"
        now = datetime.utcnow()
        company = self.repo.update_company(
            self.db,
            company,
            {
                "billing_plan": data.plan,
                "actual_plan": data.plan,
                "billing_interval": interval,
                "billing_period_start": now,
                "next_billing_date": calculate_next_billing_date(now, interval),
                "contracts_used_this_period": 0,
            },
        )
        logger.info(f"✅ Company {company.id} switched to {data.plan} ({interval})")
        return company
