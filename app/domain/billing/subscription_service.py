"""Subscription service - Business logic for company subscriptions and usage"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import DODO_EXTRA_SEAT_ADDON_ID, DODO_PRODUCT_IDS, FRONTEND_URL
from ...models import BillingCycle, Company, User
from ...plans import format_price, get_extra_seats, get_plan, get_usage_summary, is_valid_plan
from .calculations import calculate_billing_details, calculate_upgrade_credit, days_until_next_billing
from .dodo_service import dodo_service
from .enforcement import roll_billing_period
from .repository import BillingRepository
from .schemas import CancelRequest, ChangePlanRequest, CheckoutRequest

logger = logging.getLogger(__name__)


def get_product_id(plan: str, interval: str) -> Optional[str]:
    return DODO_PRODUCT_IDS.get((plan, interval))


class SubscriptionService:
    """Service for subscription management"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BillingRepository()

    def _get_company(self, user: User) -> Company:
        company = self.repo.get_company(self.db, user.company_id)
        if not company:
            raise HTTPException(status_code=404, detail="Company not found")
        roll_billing_period(self.db, company)
        return company

    def _require_dodo(self) -> None:
        if not dodo_service.is_available():
            raise HTTPException(status_code=503, detail="Billing service temporarily unavailable")

    # ========================================================================
    # Usage
    # ========================================================================

    def get_usage(self, user: User) -> dict:
        """Usage for the current billing period"""
        company = self._get_company(user)
        summary = get_usage_summary(
            company.billing_plan,
            company.actual_plan,
            company.contracts_used_this_period or 0,
            self.repo.count_company_users(self.db, company.id),
        )
        summary.update(
            {
                "billing_plan": get_plan(company.billing_plan).id,
                "actual_plan": get_plan(company.actual_plan).id,
                "total_monthly_charge_display": format_price(summary["total_monthly_charge"]),
            }
        )
        return summary

    def get_billing_details(self, user: User) -> dict:
        company = self._get_company(user)
        details = calculate_billing_details(
            company.billing_plan,
            company.actual_plan,
            company.billing_interval or "monthly",
            company.contracts_used_this_period or 0,
            self.repo.count_company_users(self.db, company.id),
            company.billing_period_start,
            company.next_billing_date,
        )
        details.update(
            {
                "days_until_next_billing": days_until_next_billing(company.next_billing_date),
                "subscription_status": company.subscription_status,
                "overage_behavior": company.overage_behavior,
                "estimated_next_invoice_display": format_price(details["estimated_next_invoice"]),
            }
        )
        return details

    def get_billing_cycles(self, user: User) -> list[BillingCycle]:
        company = self._get_company(user)
        return self.repo.get_billing_cycles(self.db, company.id)

    def get_upgrade_credit(self, user: User, plan: str) -> dict:
        """Prorated credit for the unused days of the current period, applied to a new plan"""
        if not is_valid_plan(plan) or plan == "admin":
            raise HTTPException(status_code=400, detail=f"Invalid plan: {plan}")

        company = self._get_company(user)
        interval = company.billing_interval or "monthly"
        days_remaining = days_until_next_billing(company.next_billing_date) or 0
        total_days = 0
        if company.next_billing_date and company.billing_period_start:
            total_days = (company.next_billing_date - company.billing_period_start).days

        credit = calculate_upgrade_credit(company.billing_plan, interval, days_remaining, total_days)
        new_plan = get_plan(plan)
        new_price = new_plan.yearly_price if interval == "yearly" else new_plan.monthly_price
        amount_due = max(0, new_price - credit)

        return {
            "current_plan": get_plan(company.billing_plan).id,
            "new_plan": new_plan.id,
            "billing_interval": interval,
            "days_remaining": days_remaining,
            "total_days": total_days,
            "credit": credit,
            "credit_display": format_price(credit),
            "new_plan_price": new_price,
            "amount_due": amount_due,
            "amount_due_display": format_price(amount_due),
        }

    # ========================================================================
    # Dodo Payments
    # ========================================================================

    async def create_checkout_session(self, request: CheckoutRequest, user: User) -> dict:
        """Create a hosted checkout for a plan and interval"""
        company = self._get_company(user)
        product_id = get_product_id(request.plan, request.billing_interval)
        if not product_id:
            raise HTTPException(
                status_code=400,
                detail=f"No product configured for the {request.plan} plan ({request.billing_interval})",
            )
        self._require_dodo()

        success_url = f"{FRONTEND_URL}{request.return_path or '/dashboard/settings/billing?checkout=success'}"
        metadata = {
            "company_id": company.public_id,
            "user_email": user.email,
            "plan": request.plan,
            "billing_interval": request.billing_interval,
        }

        try:
            response = await dodo_service.create_checkout_session(
                product_id=product_id,
                customer_email=company.billing_email or user.email,
                success_url=success_url,
                metadata=metadata,
            )
        except Exception as e:
            logger.error(f"❌ Failed to create checkout session for company {company.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create checkout session") from e

        logger.info(f"✅ Created checkout session for company {company.id}: {request.plan}/{request.billing_interval}")
        return {
            "checkout_url": response.get("checkout_url") or response.get("url"),
            "session_id": response.get("session_id") or response.get("id"),
        }

    async def cancel_subscription(self, request: CancelRequest, user: User) -> dict:
        company = self._get_company(user)
        if not company.dodo_subscription_id:
            raise HTTPException(status_code=400, detail="No active subscription found")
        self._require_dodo()

        try:
            await dodo_service.cancel_subscription(
                company.dodo_subscription_id,
                cancel_at_period_end=request.cancel_at_period_end,
            )
        except Exception as e:
            logger.error(f"❌ Failed to cancel subscription for company {company.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to cancel subscription") from e

        if request.cancel_at_period_end:
            # Plan stays until the period rolls over
            self.repo.update_company_billing(self.db, company, subscription_status="canceling")
            message = "Subscription will be canceled at the end of the billing period"
        else:
            # Access ends now: drop back to the free plan
            self.repo.update_company_billing(
                self.db,
                company,
                subscription_status="cancelled",
                billing_plan="free",
                actual_plan="free",
            )
            message = "Subscription canceled"

        logger.info(f"✅ Canceled subscription for company {company.id} (at period end: {request.cancel_at_period_end})")
        return {"message": message, "status": company.subscription_status}

    async def change_plan(self, request: ChangePlanRequest, user: User) -> dict:
        """Move the Dodo subscription to another plan, carrying extra seats as add-ons"""
        if request.plan not in ("individual", "team", "business"):
            raise HTTPException(status_code=400, detail=f"Invalid plan: {request.plan}")

        company = self._get_company(user)
        if not company.dodo_subscription_id:
            raise HTTPException(status_code=400, detail="No active subscription found")

        interval = request.billing_interval or company.billing_interval or "monthly"
        product_id = get_product_id(request.plan, interval)
        if not product_id:
            raise HTTPException(
                status_code=400, detail=f"No product configured for the {request.plan} plan ({interval})"
            )
        self._require_dodo()

        credit = self.get_upgrade_credit(user, request.plan)
        extra_seats = get_extra_seats(request.plan, self.repo.count_company_users(self.db, company.id))
        addons = None
        if extra_seats and DODO_EXTRA_SEAT_ADDON_ID:
            addons = [{"addon_id": DODO_EXTRA_SEAT_ADDON_ID, "quantity": extra_seats}]

        try:
            await dodo_service.change_plan(
                company.dodo_subscription_id,
                product_id,
                proration_billing_mode=request.proration_billing_mode,
                addons=addons,
            )
        except Exception as e:
            logger.error(f"❌ Failed to change plan for company {company.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to change plan") from e

        self.repo.update_company_billing(
            self.db,
            company,
            billing_plan=request.plan,
            actual_plan=request.plan,
            billing_interval=interval,
            extra_seats_billed=extra_seats,
        )
        logger.info(f"✅ Changed plan for company {company.id} to {request.plan}/{interval}")

        return {
            "message": "Plan changed successfully",
            "plan": request.plan,
            "billing_interval": interval,
            "upgrade_credit": credit,
        }

    async def get_payments(self, user: User, limit: int = 10) -> list:
        company = self._get_company(user)
        if not company.dodo_customer_id:
            return []
        self._require_dodo()

        try:
            return await dodo_service.list_payments(company.dodo_customer_id, limit)
        except Exception as e:
            logger.error(f"❌ Failed to get payments for company {company.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to get payments") from e

    async def bill_extra_seats(self, company: Company) -> bool:
        """
        Bring the subscription's seat add-on up to the company's extra seats.
        Returns True when Dodo was updated.
        """
        extra_seats = get_extra_seats(company.billing_plan, self.repo.count_company_users(self.db, company.id))
        if extra_seats <= (company.extra_seats_billed or 0):
            return False
        if not (company.dodo_subscription_id and DODO_EXTRA_SEAT_ADDON_ID and dodo_service.is_available()):
            logger.warning(f"⚠️ Cannot bill extra seat for company {company.id}: billing not configured")
            return False

        product_id = get_product_id(company.billing_plan, company.billing_interval or "monthly")
        if not product_id:
            logger.warning(f"⚠️ No product for {company.billing_plan}; extra seat not billed")
            return False

        try:
            await dodo_service.change_plan(
                company.dodo_subscription_id,
                product_id,
                addons=[{"addon_id": DODO_EXTRA_SEAT_ADDON_ID, "quantity": extra_seats}],
            )
        except Exception as e:
            logger.error(f"❌ Failed to bill extra seat for company {company.id}: {e}")
            return False

        self.repo.update_company_billing(self.db, company, extra_seats_billed=extra_seats)
        logger.info(f"✅ Billed {extra_seats} extra seat(s) for company {company.id}")
        return True
