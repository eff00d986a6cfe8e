"""
Plan catalog and limit checks for subscription-based contract and seat restrictions.

All prices are integer cents. A company has two plans:
- billing_plan: what it pays for (drives invoice amounts)
- actual_plan: whose limits and features apply (may differ for comped accounts)
"""

from typing import Optional

from pydantic import BaseModel

PLAN_TIERS = ("free", "individual", "team", "business", "admin")

FEATURE_NAMES = (
    "all_state_templates",
    "custom_templates",
    "ai_template_generation",
    "custom_branding",
    "api_access",
    "priority_support",
    "dedicated_support",
)


class OveragePricing(BaseModel):
    extra_contract_price: int = 0
    extra_seat_price: int = 0


class PlanLimits(BaseModel):
    contracts_per_month: Optional[int]  # None means unlimited
    max_users: int
    features: dict[str, bool]
    overage_pricing: OveragePricing


class PlanConfig(BaseModel):
    id: str
    name: str
    description: str
    monthly_price: int
    yearly_price: int
    limits: PlanLimits


class LimitCheck(BaseModel):
    """Outcome of a plan limit check"""

    allowed: bool
    reason: Optional[str] = None
    overage_price: Optional[int] = None
    is_overage: bool = False


def _features(*enabled: str) -> dict[str, bool]:
    return {name: name in enabled for name in FEATURE_NAMES}


PAID_FEATURES = ("all_state_templates", "custom_templates", "ai_template_generation", "priority_support")

PLANS: dict[str, PlanConfig] = {
    "free": PlanConfig(
        id="free",
        name="Free",
        description="Get started at no cost",
        monthly_price=0,
        yearly_price=0,
        limits=PlanLimits(
            contracts_per_month=2,
            max_users=1,
            features=_features(),
            overage_pricing=OveragePricing(),
        ),
    ),
    "individual": PlanConfig(
        id="individual",
        name="Standard",
        description="For solo wholesalers",
        monthly_price=3900,
        yearly_price=39000,
        limits=PlanLimits(
            contracts_per_month=5,
            max_users=1,
            features=_features(*PAID_FEATURES),
            overage_pricing=OveragePricing(extra_contract_price=149),
        ),
    ),
    "team": PlanConfig(
        id="team",
        name="Teams",
        description="For growing businesses",
        monthly_price=5900,
        yearly_price=59000,
        limits=PlanLimits(
            contracts_per_month=10,
            max_users=3,
            features=_features(*PAID_FEATURES),
            overage_pricing=OveragePricing(extra_contract_price=97, extra_seat_price=1900),
        ),
    ),
    "business": PlanConfig(
        id="business",
        name="Enterprise",
        description="For teams & brokerages",
        monthly_price=12900,
        yearly_price=129000,
        limits=PlanLimits(
            contracts_per_month=300,
            max_users=4,
            features=_features(*FEATURE_NAMES),
            overage_pricing=OveragePricing(extra_seat_price=1900),
        ),
    ),
    "admin": PlanConfig(
        id="admin",
        name="Admin",
        description="System administrator access",
        monthly_price=0,
        yearly_price=0,
        limits=PlanLimits(
            contracts_per_month=None,
            max_users=999,
            features=_features(*FEATURE_NAMES),
            overage_pricing=OveragePricing(),
        ),
    ),
}


def get_plan(tier: Optional[str]) -> PlanConfig:
    """Get the plan config for a tier. Unknown or missing tiers resolve to free."""
    if not tier:
        return PLANS["free"]
    return PLANS.get(tier.lower(), PLANS["free"])


def is_valid_plan(tier: Optional[str]) -> bool:
    return bool(tier) and tier in PLANS


def format_price(cents: int) -> str:
    return f"${cents / 100:.2f}"


def can_create_contract(actual_plan: Optional[str], contracts_used: int) -> LimitCheck:
    """
    Check whether another contract may be created this billing period.
    Paid plans may exceed their allowance at the per-contract overage price;
    the free plan is hard-capped.
    """
    plan = get_plan(actual_plan)
    limit = plan.limits.contracts_per_month

    if limit is None or contracts_used < limit:
        return LimitCheck(allowed=True)

    if plan.id == "free":
        return LimitCheck(
            allowed=False,
            reason=(
                f"You've reached your free plan limit of {limit} contracts this month. "
                "Please upgrade to a paid plan to create more contracts."
            ),
        )

    overage_price = plan.limits.overage_pricing.extra_contract_price
    return LimitCheck(
        allowed=True,
        is_overage=True,
        overage_price=overage_price,
        reason=(
            f"Contract limit reached ({contracts_used}/{limit}). "
            f"This contract will be charged at {format_price(overage_price)} on your next bill."
        ),
    )


def can_add_team_member(actual_plan: Optional[str], current_user_count: int) -> LimitCheck:
    """Check whether another user may join. Plans without a seat price are hard-capped."""
    plan = get_plan(actual_plan)
    max_users = plan.limits.max_users

    if current_user_count < max_users:
        return LimitCheck(allowed=True)

    seat_price = plan.limits.overage_pricing.extra_seat_price
    if seat_price == 0:
        return LimitCheck(
            allowed=False,
            reason=(
                f"Your {plan.name} plan only supports {max_users} user{'' if max_users == 1 else 's'}. "
                "Please upgrade to add more team members."
            ),
        )

    return LimitCheck(
        allowed=True,
        is_overage=True,
        overage_price=seat_price,
        reason=(
            "Adding more team members will incur an additional charge of "
            f"{format_price(seat_price)}/month per extra seat."
        ),
    )


def has_feature(actual_plan: Optional[str], feature: str) -> bool:
    return get_plan(actual_plan).limits.features.get(feature, False)


def get_extra_contracts_used(billing_plan: Optional[str], contracts_used: int) -> int:
    limit = get_plan(billing_plan).limits.contracts_per_month
    if limit is None or contracts_used <= limit:
        return 0
    return contracts_used - limit


def get_extra_seats(billing_plan: Optional[str], current_user_count: int) -> int:
    max_users = get_plan(billing_plan).limits.max_users
    if current_user_count <= max_users:
        return 0
    return current_user_count - max_users


def get_usage_summary(
    billing_plan: Optional[str],
    actual_plan: Optional[str],
    contracts_used: int,
    user_count: int,
) -> dict:
    """
    Usage for the current period.
    Limits come from the actual plan; overage costs from the billing plan.
    """
    actual = get_plan(actual_plan)
    billing = get_plan(billing_plan)

    contract_limit = actual.limits.contracts_per_month
    extra_contracts = get_extra_contracts_used(billing_plan, contracts_used)
    extra_seats = get_extra_seats(billing_plan, user_count)
    extra_contracts_cost = extra_contracts * billing.limits.overage_pricing.extra_contract_price
    extra_seats_cost = extra_seats * billing.limits.overage_pricing.extra_seat_price

    return {
        "contracts_used": contracts_used,
        "contracts_limit": contract_limit,
        "contracts_remaining": None if contract_limit is None else max(0, contract_limit - contracts_used),
        "extra_contracts": extra_contracts,
        "extra_contracts_cost": extra_contracts_cost,
        "users_count": user_count,
        "users_limit": actual.limits.max_users,
        "extra_seats": extra_seats,
        "extra_seats_cost": extra_seats_cost,
        "total_monthly_charge": billing.monthly_price + extra_contracts_cost + extra_seats_cost,
    }
