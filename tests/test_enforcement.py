"""Tests for company-level plan enforcement and billing period rollover."""

from datetime import datetime, timedelta

from app.domain.billing.enforcement import (
    PlanEnforcementService,
    get_minimum_plan_for_feature,
    get_suggested_upgrade,
    roll_billing_period,
)
from app.domain.billing.repository import BillingRepository
from app.models import BillingCycle
from factories import make_company, make_user


def test_suggested_upgrade_path():
    assert get_suggested_upgrade("free") == "individual"
    assert get_suggested_upgrade("individual") == "team"
    assert get_suggested_upgrade("team") == "business"
    assert get_suggested_upgrade("business") == "business"
    assert get_suggested_upgrade("admin") == "admin"
    assert get_suggested_upgrade(None) == "individual"


def test_minimum_plan_for_feature():
    assert get_minimum_plan_for_feature("custom_templates") == "individual"
    assert get_minimum_plan_for_feature("api_access") == "business"
    assert get_minimum_plan_for_feature("unknown") == "business"


def test_contract_creation_denied_on_free_limit(db_session):
    company = make_company(db_session, contracts_used_this_period=2)
    result = PlanEnforcementService(db_session).check_contract_creation(company.id)
    assert not result.allowed
    assert result.upgrade_required
    assert result.suggested_plan == "individual"


def test_contract_creation_overage_passes_price_through(db_session):
    company = make_company(db_session, billing_plan="team", actual_plan="team", contracts_used_this_period=10)
    result = PlanEnforcementService(db_session).check_contract_creation(company.id)
    assert result.allowed
    assert result.overage_price == 97
    assert "Contract limit reached (10/10)" in result.reason


def test_missing_company_is_denied(db_session):
    result = PlanEnforcementService(db_session).check_contract_creation(9999)
    assert not result.allowed
    assert result.reason == "Company not found"


def test_team_invite_counts_company_users(db_session):
    company = make_company(db_session, billing_plan="team", actual_plan="team")
    for index in range(3):
        make_user(db_session, company, email=f"user{index}@acme.test", role="user")

    result = PlanEnforcementService(db_session).check_team_invite(company.id)
    assert result.allowed
    assert result.overage_price == 1900


def test_team_invite_denied_on_single_seat_plan(db_session):
    company = make_company(db_session, billing_plan="individual", actual_plan="individual")
    make_user(db_session, company)
    result = PlanEnforcementService(db_session).check_team_invite(company.id)
    assert not result.allowed
    assert result.suggested_plan == "team"


def test_feature_access_denial_names_minimum_plan(db_session):
    company = make_company(db_session)
    result = PlanEnforcementService(db_session).check_feature_access(company.id, "custom_templates")
    assert not result.allowed
    assert result.reason == "This feature requires the Standard plan or higher."
    assert result.suggested_plan == "individual"


def test_increment_and_log_usage(db_session):
    company = make_company(db_session)
    service = PlanEnforcementService(db_session)
    assert service.increment_contract_count(company.id) == 1
    assert service.increment_contract_count(company.id) == 2

    service.log_usage(company.id, None, "contract_created", {"contract_id": "abc"})
    logs = BillingRepository.get_usage_logs(db_session, company.id, "contract_created")
    assert len(logs) == 1
    assert logs[0].details == {"contract_id": "abc"}


def test_company_usage(db_session):
    company = make_company(db_session, contracts_used_this_period=1)
    make_user(db_session, company)
    usage = PlanEnforcementService(db_session).get_company_usage(company.id)
    assert usage["contracts"] == {"used": 1, "limit": 2, "remaining": 1}
    assert usage["users"] == {"current": 1, "limit": 1}
    assert usage["plan_details"]["id"] == "free"
    assert PlanEnforcementService(db_session).get_company_usage(9999) is None


def test_roll_billing_period_closes_elapsed_cycles(db_session):
    start = datetime(2025, 1, 10)
    company = make_company(
        db_session,
        billing_plan="individual",
        actual_plan="individual",
        billing_period_start=start,
        next_billing_date=datetime(2025, 2, 10),
        contracts_used_this_period=7,
    )

    rolled = roll_billing_period(db_session, company, now=datetime(2025, 3, 15))

    assert rolled
    assert company.contracts_used_this_period == 0
    assert company.billing_period_start == datetime(2025, 3, 10)
    assert company.next_billing_date == datetime(2025, 4, 10)

    cycles = db_session.query(BillingCycle).order_by(BillingCycle.cycle_start).all()
    assert [c.cycle_start for c in cycles] == [start, datetime(2025, 2, 10)]
    assert cycles[0].extra_contracts_count == 2
    assert cycles[0].total_amount == 3900 + 298
    assert cycles[1].extra_contracts_count == 0


def test_roll_billing_period_noop_inside_period(db_session):
    company = make_company(db_session)
    assert not roll_billing_period(db_session, company, now=datetime.utcnow() + timedelta(days=1))
