"""Company schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class OnboardingRequest(BaseModel):
    company_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    signer_name: Optional[str] = None


class SettingsUpdate(BaseModel):
    overage_behavior: Optional[str] = None
    company_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    signer_name: Optional[str] = None
    billing_email: Optional[str] = None


class PlanSelectRequest(BaseModel):
    plan: str
    billing_interval: Optional[str] = None


class CompanyResponse(BaseModel):
    public_id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    signer_name: Optional[str] = None
    billing_plan: str
    actual_plan: str
    billing_interval: str
    billing_period_start: Optional[datetime] = None
    next_billing_date: Optional[datetime] = None
    contracts_used_this_period: int
    subscription_status: str
    overage_behavior: str
    billing_email: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
