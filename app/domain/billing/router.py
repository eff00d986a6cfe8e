"""Billing router - FastAPI endpoints for billing operations"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_company_user, require_manager
from ...database import get_db
from ...models import User
from .schemas import (
    BillingCycleResponse,
    CancelRequest,
    ChangePlanRequest,
    CheckoutRequest,
    UsageSummaryResponse,
)
from .subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["Billing"])


def get_subscription_service(db: Session = Depends(get_db)) -> SubscriptionService:
    """Dependency injection for SubscriptionService"""
    return SubscriptionService(db)


# ============================================================================
# USAGE & INVOICE ESTIMATES
# ============================================================================


@router.get("/usage", response_model=UsageSummaryResponse)
async def get_usage(
    user: User = Depends(get_current_company_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Contracts and seats used in the current billing period"""
    return service.get_usage(user)


@router.get("/details")
async def get_billing_details(
    user: User = Depends(get_current_company_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Estimated next invoice and billing dates"""
    return service.get_billing_details(user)


@router.get("/cycles", response_model=list[BillingCycleResponse])
async def get_billing_cycles(
    user: User = Depends(get_current_company_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Closed billing cycles, newest first"""
    return service.get_billing_cycles(user)


@router.get("/upgrade-credit")
async def get_upgrade_credit(
    plan: str = Query(..., description="Plan being upgraded to"),
    user: User = Depends(get_current_company_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return service.get_upgrade_credit(user, plan)


# ============================================================================
# SUBSCRIPTION MANAGEMENT
# ============================================================================


@router.post("/checkout")
async def create_checkout_session(
    body: CheckoutRequest,
    user: User = Depends(require_manager),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Create a Dodo checkout session for a plan"""
    return await service.create_checkout_session(body, user)


@router.post("/cancel")
async def cancel_subscription(
    body: CancelRequest,
    user: User = Depends(require_manager),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return await service.cancel_subscription(body, user)


@router.post("/change-plan")
async def change_plan(
    body: ChangePlanRequest,
    user: User = Depends(require_manager),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return await service.change_plan(body, user)


@router.get("/payments")
async def get_payments(
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_company_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Recent payments from Dodo"""
    return {"payments": await service.get_payments(user, limit)}
