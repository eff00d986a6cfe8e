"""Billing cycle date math and invoice estimates"""

import math
from datetime import datetime
from typing import Optional

from dateutil.relativedelta import relativedelta

from ...plans import get_plan


def calculate_next_billing_date(current: datetime, interval: str = "monthly") -> datetime:
    """
    Next billing date from the current one.

    - yearly: same month/day next year; Feb 29 rolls forward to Mar 1
    - monthly: same day next month, except days 29-31 move to the 1st of the
      month after next so short months never shift the cycle backwards
    """
    if interval == "yearly":
        try:
            return current.replace(year=current.year + 1)
        except ValueError:
            # Feb 29 in a non-leap target year
            return current.replace(year=current.year + 1, month=3, day=1)

    if current.day >= 29:
        return current.replace(day=1) + relativedelta(months=2)

    return current + relativedelta(months=1)


def calculate_billing_details(
    billing_plan: Optional[str],
    actual_plan: Optional[str],
    billing_interval: str,
    contracts_used: int,
    users_count: int,
    period_start: Optional[datetime],
    next_billing_date: Optional[datetime],
) -> dict:
    """Estimate the next invoice. Allowances from the actual plan, prices from the billing plan."""
    billing = get_plan(billing_plan)
    actual = get_plan(actual_plan)

    contracts_allowed = actual.limits.contracts_per_month
    extra_contracts = 0 if contracts_allowed is None else max(0, contracts_used - contracts_allowed)
    extra_seats = max(0, users_count - actual.limits.max_users)

    base_cost = billing.yearly_price if billing_interval == "yearly" else billing.monthly_price
    if billing.id == "free":
        extra_contracts_cost = 0
    else:
        extra_contracts_cost = extra_contracts * billing.limits.overage_pricing.extra_contract_price
    extra_seats_cost = extra_seats * billing.limits.overage_pricing.extra_seat_price

    return {
        "billing_plan": billing.id,
        "actual_plan": actual.id,
        "billing_interval": billing_interval,
        "period_start": period_start,
        "next_billing_date": next_billing_date,
        "contracts_used": contracts_used,
        "contracts_allowed": contracts_allowed,
        "extra_contracts": extra_contracts,
        "users_count": users_count,
        "users_allowed": actual.limits.max_users,
        "extra_seats": extra_seats,
        "base_cost": base_cost,
        "extra_contracts_cost": extra_contracts_cost,
        "extra_seats_cost": extra_seats_cost,
        "estimated_next_invoice": base_cost + extra_contracts_cost + extra_seats_cost,
    }


def calculate_upgrade_credit(
    current_plan: Optional[str], billing_interval: str, days_remaining: int, total_days: int
) -> int:
    """Prorated credit (cents) for the unused part of the current period"""
    if total_days <= 0:
        return 0
    plan = get_plan(current_plan)
    period_cost = plan.yearly_price if billing_interval == "yearly" else plan.monthly_price
    # Halves round up
    return math.floor(period_cost * days_remaining / total_days + 0.5)


def days_until_next_billing(
    next_billing_date: Optional[datetime], now: Optional[datetime] = None
) -> Optional[int]:
    if next_billing_date is None:
        return None
    now = now or datetime.utcnow()
    diff_days = (next_billing_date - now).total_seconds() / 86400
    return max(0, math.ceil(diff_days))
