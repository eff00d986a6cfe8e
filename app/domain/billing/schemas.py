"""Billing domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


def _validate_interval(v: str) -> str:
    if v not in {"monthly", "yearly"}:
        raise ValueError("billing_interval must be 'monthly' or 'yearly'")
    return v


class CheckoutRequest(BaseModel):
    """Schema for creating a checkout session"""

    plan: str  # "individual" | "team" | "business"
    billing_interval: str = "monthly"
    return_path: Optional[str] = None  # e.g. "/settings/billing?checkout=success"

    @field_validator("plan")
    @classmethod
    def validate_plan(cls, v: str) -> str:
        if v not in {"individual", "team", "business"}:
            raise ValueError("plan must be one of individual, team, business")
        return v

    @field_validator("billing_interval")
    @classmethod
    def validate_interval(cls, v: str) -> str:
        return _validate_interval(v)


class CancelRequest(BaseModel):
    """Schema for canceling subscription"""

    cancel_at_period_end: bool = True


class ChangePlanRequest(BaseModel):
    """Schema for changing subscription plan"""

    plan: str
    billing_interval: Optional[str] = None
    proration_billing_mode: str = "prorated_immediately"

    @field_validator("billing_interval")
    @classmethod
    def validate_interval(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _validate_interval(v)


class UsageSummaryResponse(BaseModel):
    """Schema for usage in the current billing period"""

    billing_plan: str
    actual_plan: str
    contracts_used: int
    contracts_limit: Optional[int] = None
    contracts_remaining: Optional[int] = None
    extra_contracts: int
    extra_contracts_cost: int
    users_count: int
    users_limit: int
    extra_seats: int
    extra_seats_cost: int
    total_monthly_charge: int
    total_monthly_charge_display: str


class BillingCycleResponse(BaseModel):
    id: int
    cycle_start: datetime
    cycle_end: datetime
    plan_at_cycle_start: str
    base_amount: int
    extra_seats_count: int
    extra_seats_amount: int
    extra_contracts_count: int
    extra_contracts_amount: int
    total_amount: int
    status: str
    paid_at: Optional[datetime] = None

    class Config:
        from_attributes = True
