"""API tests for team members, invites and seat billing."""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest

from app.domain.team.service import seat_billing_info
from app.models import Invite, UsageLog, User
from factories import make_company, make_user


@pytest.fixture
def team_company(db_session, company):
    company.billing_plan = company.actual_plan = "team"
    db_session.commit()
    return company


@pytest.fixture
def invite_email():
    with patch("app.domain.team.service.send_team_invite_email", new=AsyncMock(return_value={"id": "e1"})) as send:
        yield send


def make_invite(db, company, email="new@example.com", **overrides) -> Invite:
    values = {
        "email": email,
        "token": overrides.pop("token", "a" * 64),
        "company_id": company.id,
        "role": "user",
        "expires_at": datetime.utcnow() + timedelta(days=7),
    }
    values.update(overrides)
    invite = Invite(**values)
    db.add(invite)
    db.commit()
    db.refresh(invite)
    return invite


def test_seat_billing_info():
    assert seat_billing_info(1900) == {"is_overage_seat": True, "monthly_charge": "$19/month"}
    assert seat_billing_info(None) == {"is_overage_seat": False, "monthly_charge": None}


def test_get_team(client, manager):
    response = client.get("/team")
    assert response.status_code == 200
    body = response.json()
    assert [m["email"] for m in body["members"]] == ["manager@acme.test"]
    assert body["current_user_role"] == "manager"
    assert body["plan"] == "free"
    assert body["users_limit"] == 1


def test_invite_member(client, db_session, team_company, invite_email):
    response = client.post("/team/invite", json={"email": " New@Example.com ", "role": "user"})

    assert response.status_code == 200
    body = response.json()
    invite = db_session.query(Invite).one()
    assert invite.email == "new@example.com"
    assert len(invite.token) == 64
    assert body["invite_url"].endswith(f"/signup?invite={invite.token}")
    assert body["email_sent"] is True
    assert body["billing"] == {"is_overage_seat": False, "monthly_charge": None}
    assert invite_email.await_args.kwargs["company_name"] == "Acme Homes"


def test_invite_email_failure_still_returns_link(client, db_session, team_company, invite_email):
    invite_email.side_effect = Exception("Email service not configured")
    response = client.post("/team/invite", json={"email": "new@example.com"})
    assert response.status_code == 200
    assert response.json()["email_sent"] is False
    assert response.json()["invite_url"]


def test_invite_existing_member(client, team_company, invite_email):
    response = client.post("/team/invite", json={"email": "MANAGER@acme.test"})
    assert response.status_code == 400
    assert response.json()["detail"] == "A user with this email is already in your team"


def test_invite_twice(client, db_session, team_company, invite_email):
    make_invite(db_session, team_company)
    response = client.post("/team/invite", json={"email": "new@example.com"})
    assert response.status_code == 400
    assert response.json()["detail"] == "An invite has already been sent to this email"


def test_invite_requires_email(client, team_company, invite_email):
    response = client.post("/team/invite", json={"email": "  "})
    assert response.status_code == 400
    assert response.json()["detail"] == "Email is required"


def test_invite_blocked_by_seat_limit(client, invite_email):
    response = client.post("/team/invite", json={"email": "new@example.com"})
    assert response.status_code == 403
    assert response.json()["detail"]["suggested_plan"] == "individual"


def test_invite_over_seat_allowance_is_billed_info(client, db_session, team_company, invite_email):
    make_user(db_session, team_company, email="a@acme.test", role="user")
    make_user(db_session, team_company, email="b@acme.test", role="user")

    response = client.post("/team/invite", json={"email": "new@example.com"})
    assert response.json()["billing"] == {"is_overage_seat": True, "monthly_charge": "$19/month"}


def test_regular_user_cannot_invite(client, db_session, team_company, auth, invite_email):
    member = make_user(db_session, team_company, email="member@acme.test", role="user")
    auth["user_id"] = member.id

    response = client.post("/team/invite", json={"email": "new@example.com"})
    assert response.status_code == 403
    assert response.json()["detail"] == "Only managers can perform this action"


def test_pending_invites_exclude_expired_and_accepted(client, db_session, team_company):
    make_invite(db_session, team_company, email="pending@example.com", token="p" * 64)
    make_invite(
        db_session, team_company, email="expired@example.com", token="e" * 64,
        expires_at=datetime.utcnow() - timedelta(days=1),
    )
    make_invite(
        db_session, team_company, email="accepted@example.com", token="x" * 64, accepted_at=datetime.utcnow()
    )

    response = client.get("/team/invites")
    assert [i["email"] for i in response.json()] == ["pending@example.com"]


def test_delete_invite(client, db_session, team_company):
    invite = make_invite(db_session, team_company)
    assert client.delete(f"/team/invites/{invite.id}").status_code == 200
    assert client.delete(f"/team/invites/{invite.id}").status_code == 404


def test_accept_invite(client, db_session, team_company, auth):
    invite = make_invite(db_session, team_company, email="Joiner@Example.com", role="manager")
    joiner = make_user(db_session, None, email="joiner@example.com", role="user")
    auth["user_id"] = joiner.id

    response = client.post("/team/invite/accept", json={"token": invite.token})

    assert response.status_code == 200
    body = response.json()
    assert body["company_name"] == "Acme Homes"
    assert body["role"] == "manager"
    assert body["billing"]["seat_billed"] is False
    db_session.refresh(joiner)
    assert joiner.company_id == team_company.id
    assert db_session.query(UsageLog).filter_by(action_type="user_added").count() == 1


def test_accept_invite_bills_extra_seat(client, db_session, team_company, auth):
    make_user(db_session, team_company, email="a@acme.test", role="user")
    make_user(db_session, team_company, email="b@acme.test", role="user")
    invite = make_invite(db_session, team_company, email="joiner@example.com")
    joiner = make_user(db_session, None, email="joiner@example.com", role="user")
    auth["user_id"] = joiner.id

    with patch(
        "app.domain.team.service.SubscriptionService.bill_extra_seats", new=AsyncMock(return_value=True)
    ) as bill:
        response = client.post("/team/invite/accept", json={"token": invite.token})

    assert response.status_code == 200
    assert response.json()["billing"] == {"is_overage_seat": True, "monthly_charge": "$19/month", "seat_billed": True}
    bill.assert_awaited_once()


@pytest.mark.parametrize(
    "invite_overrides,user_email,status,detail",
    [
        ({"accepted_at": datetime(2025, 1, 1)}, "joiner@example.com", 400, "This invite has already been used"),
        ({"expires_at": datetime(2020, 1, 1)}, "joiner@example.com", 400, "This invite has expired"),
        ({}, "someone@example.com", 400, "This invite was sent to a different email address"),
    ],
)
def test_accept_invite_rejections(client, db_session, team_company, auth, invite_overrides, user_email, status, detail):
    invite = make_invite(db_session, team_company, email="joiner@example.com", **invite_overrides)
    joiner = make_user(db_session, None, email=user_email, role="user")
    auth["user_id"] = joiner.id

    response = client.post("/team/invite/accept", json={"token": invite.token})
    assert response.status_code == status
    assert response.json()["detail"] == detail


def test_accept_unknown_token(client):
    assert client.post("/team/invite/accept", json={"token": "nope"}).status_code == 404
    assert client.post("/team/invite/accept", json={}).json()["detail"] == "Token is required"


def test_verify_invite(client, db_session, team_company):
    invite = make_invite(db_session, team_company, email="joiner@example.com", role="manager")

    response = client.get("/team/invite/verify", params={"token": invite.token})

    assert response.status_code == 200
    assert response.json() == {
        "email": "joiner@example.com",
        "role": "manager",
        "company_id": team_company.public_id,
        "company_name": "Acme Homes",
    }
    db_session.refresh(invite)
    assert invite.accepted_at is None


@pytest.mark.parametrize(
    "invite_overrides,status,detail",
    [
        ({"accepted_at": datetime(2025, 1, 1)}, 400, "This invite has already been used"),
        ({"expires_at": datetime(2020, 1, 1)}, 400, "This invite has expired"),
    ],
)
def test_verify_invite_rejections(client, db_session, team_company, invite_overrides, status, detail):
    invite = make_invite(db_session, team_company, **invite_overrides)
    response = client.get("/team/invite/verify", params={"token": invite.token})
    assert response.status_code == status
    assert response.json()["detail"] == detail


def test_verify_unknown_or_missing_token(client):
    assert client.get("/team/invite/verify", params={"token": "nope"}).status_code == 404
    response = client.get("/team/invite/verify")
    assert response.status_code == 400
    assert response.json()["detail"] == "Token is required"


def test_update_member(client, db_session, team_company):
    member = make_user(db_session, team_company, email="member@acme.test", role="user")

    response = client.patch(f"/team/{member.id}", json={"role": "manager", "monthly_contract_limit": 5})
    assert response.status_code == 200
    assert response.json()["role"] == "manager"
    assert response.json()["monthly_contract_limit"] == 5

    response = client.patch(f"/team/{member.id}", json={"monthly_contract_limit": None})
    assert response.json()["monthly_contract_limit"] is None


def test_update_member_rejections(client, db_session, team_company, manager):
    member = make_user(db_session, team_company, email="member@acme.test", role="user")
    assert client.patch(f"/team/{manager.id}", json={"role": "user"}).json()["detail"] == (
        "You cannot change your own role"
    )
    assert client.patch(f"/team/{member.id}", json={"role": "admin"}).json()["detail"] == "Invalid role"

    outsider = make_user(db_session, make_company(db_session, name="Other"), email="x@other.test")
    assert client.patch(f"/team/{outsider.id}", json={"role": "user"}).status_code == 404


def test_remove_member_detaches_account(client, db_session, team_company, manager):
    member = make_user(db_session, team_company, email="member@acme.test", role="manager")

    assert client.delete(f"/team/{member.id}").status_code == 200
    db_session.refresh(member)
    assert member.company_id is None
    assert member.role == "user"
    assert db_session.get(User, member.id) is not None

    assert client.delete(f"/team/{manager.id}").json()["detail"] == "You cannot remove yourself"
