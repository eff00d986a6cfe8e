"""API tests for usage, invoice estimates and Dodo subscription calls."""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.config import DODO_PRODUCT_IDS
from app.models import BillingCycle
from factories import make_user


@pytest.fixture
def team_company(db_session, company):
    company.billing_plan = company.actual_plan = "team"
    company.dodo_subscription_id = "sub_123"
    company.dodo_customer_id = "cus_123"
    db_session.commit()
    return company


@pytest.fixture
def dodo():
    service = MagicMock()
    service.is_available.return_value = True
    service.create_checkout_session = AsyncMock(
        return_value={"checkout_url": "https://pay.example/abc", "session_id": "cs_1"}
    )
    service.cancel_subscription = AsyncMock(return_value={})
    service.change_plan = AsyncMock(return_value={})
    service.list_payments = AsyncMock(return_value=[{"payment_id": "pay_1", "total_amount": 5900}])
    with patch("app.domain.billing.subscription_service.dodo_service", service):
        yield service


@pytest.fixture
def products():
    with patch.dict(
        DODO_PRODUCT_IDS,
        {
            ("individual", "monthly"): "prod_ind_m",
            ("team", "monthly"): "prod_team_m",
            ("business", "monthly"): "prod_biz_m",
        },
    ):
        yield


def test_usage(client, db_session, team_company):
    team_company.contracts_used_this_period = 12
    db_session.commit()
    for email in ("a@acme.test", "b@acme.test", "c@acme.test"):
        make_user(db_session, team_company, email=email, role="user")

    body = client.get("/billing/usage").json()
    assert body["billing_plan"] == "team"
    assert body["contracts_used"] == 12
    assert body["contracts_remaining"] == 0
    assert body["extra_contracts"] == 2
    assert body["extra_contracts_cost"] == 194
    assert body["users_count"] == 4
    assert body["extra_seats"] == 1
    assert body["total_monthly_charge"] == 5900 + 194 + 1900
    assert body["total_monthly_charge_display"] == "$79.94"


def test_billing_details(client, team_company):
    body = client.get("/billing/details").json()
    assert body["base_cost"] == 5900
    assert body["estimated_next_invoice"] == 5900
    assert body["estimated_next_invoice_display"] == "$59.00"
    assert body["days_until_next_billing"] == 27
    assert body["subscription_status"] == "active"


def test_cycles_roll_over_elapsed_period(client, db_session, team_company):
    now = datetime.utcnow()
    team_company.billing_period_start = now - timedelta(days=40)
    team_company.next_billing_date = now - timedelta(days=10)
    team_company.contracts_used_this_period = 11
    db_session.commit()

    cycles = client.get("/billing/cycles").json()

    assert len(cycles) == 1
    assert cycles[0]["plan_at_cycle_start"] == "team"
    assert cycles[0]["extra_contracts_count"] == 1
    assert cycles[0]["total_amount"] == 5900 + 97
    db_session.refresh(team_company)
    assert team_company.contracts_used_this_period == 0
    assert db_session.query(BillingCycle).count() == 1


def test_upgrade_credit(client, db_session, company):
    company.billing_plan = company.actual_plan = "individual"
    db_session.commit()

    body = client.get("/billing/upgrade-credit", params={"plan": "team"}).json()
    assert body["days_remaining"] == 27
    assert body["total_days"] == 30
    assert body["credit"] == 3510
    assert body["amount_due"] == 5900 - 3510
    assert body["amount_due_display"] == "$23.90"


def test_upgrade_credit_invalid_plan(client):
    response = client.get("/billing/upgrade-credit", params={"plan": "admin"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid plan: admin"


def test_checkout(client, dodo, products):
    response = client.post("/billing/checkout", json={"plan": "team"})

    assert response.status_code == 200
    assert response.json() == {"checkout_url": "https://pay.example/abc", "session_id": "cs_1"}
    kwargs = dodo.create_checkout_session.await_args.kwargs
    assert kwargs["product_id"] == "prod_team_m"
    assert kwargs["customer_email"] == "manager@acme.test"
    assert kwargs["metadata"]["plan"] == "team"


def test_checkout_prefers_billing_email(client, db_session, company, dodo, products):
    company.billing_email = "ap@acme.test"
    db_session.commit()

    client.post("/billing/checkout", json={"plan": "team"})
    assert dodo.create_checkout_session.await_args.kwargs["customer_email"] == "ap@acme.test"


def test_checkout_without_product(client, dodo, products):
    response = client.post("/billing/checkout", json={"plan": "team", "billing_interval": "yearly"})
    assert response.status_code == 400
    assert response.json()["detail"] == "No product configured for the team plan (yearly)"
    dodo.create_checkout_session.assert_not_awaited()


def test_checkout_rejects_unknown_plan(client, dodo):
    assert client.post("/billing/checkout", json={"plan": "free"}).status_code == 422


def test_checkout_when_dodo_is_down(client, dodo, products):
    dodo.is_available.return_value = False
    response = client.post("/billing/checkout", json={"plan": "team"})
    assert response.status_code == 503


def test_cancel_without_subscription(client, dodo):
    response = client.post("/billing/cancel", json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "No active subscription found"


def test_cancel_at_period_end_keeps_plan_until_rollover(client, db_session, team_company, dodo):
    response = client.post("/billing/cancel", json={"cancel_at_period_end": True})

    assert response.status_code == 200
    assert response.json()["status"] == "canceling"
    dodo.cancel_subscription.assert_awaited_once_with("sub_123", cancel_at_period_end=True)
    db_session.refresh(team_company)
    assert team_company.billing_plan == "team"

    now = datetime.utcnow()
    team_company.billing_period_start = now - timedelta(days=31)
    team_company.next_billing_date = now - timedelta(days=1)
    db_session.commit()

    body = client.get("/billing/usage").json()
    assert body["billing_plan"] == body["actual_plan"] == "free"
    [cycle] = client.get("/billing/cycles").json()
    assert cycle["plan_at_cycle_start"] == "team"
    db_session.refresh(team_company)
    assert team_company.subscription_status == "cancelled"


def test_cancel_immediately_drops_to_free(client, db_session, team_company, dodo):
    response = client.post("/billing/cancel", json={"cancel_at_period_end": False})

    assert response.json() == {"message": "Subscription canceled", "status": "cancelled"}
    db_session.refresh(team_company)
    assert team_company.billing_plan == team_company.actual_plan == "free"


def test_change_plan_carries_extra_seats(client, db_session, team_company, dodo, products):
    for email in ("a@acme.test", "b@acme.test", "c@acme.test", "d@acme.test"):
        make_user(db_session, team_company, email=email, role="user")

    with patch("app.domain.billing.subscription_service.DODO_EXTRA_SEAT_ADDON_ID", "addon_seat"):
        response = client.post("/billing/change-plan", json={"plan": "business"})

    assert response.status_code == 200
    assert response.json()["plan"] == "business"
    args, kwargs = dodo.change_plan.await_args
    assert args == ("sub_123", "prod_biz_m")
    assert kwargs["addons"] == [{"addon_id": "addon_seat", "quantity": 1}]
    db_session.refresh(team_company)
    assert team_company.actual_plan == "business"
    assert team_company.extra_seats_billed == 1


def test_payments(client, team_company, dodo):
    response = client.get("/billing/payments", params={"limit": 5})
    assert response.json() == {"payments": [{"payment_id": "pay_1", "total_amount": 5900}]}
    dodo.list_payments.assert_awaited_once_with("cus_123", 5)


def test_payments_without_customer(client, dodo):
    assert client.get("/billing/payments").json() == {"payments": []}
    dodo.list_payments.assert_not_awaited()


def test_regular_user_cannot_checkout(client, db_session, company, auth, dodo):
    member = make_user(db_session, company, email="member@acme.test", role="user")
    auth["user_id"] = member.id
    assert client.post("/billing/checkout", json={"plan": "team"}).status_code == 403
