"""API tests for support tickets and the admin notification."""

from unittest.mock import AsyncMock, patch

import pytest

from app.models import SupportTicket
from factories import make_user


@pytest.fixture
def admin_notice():
    with patch("app.domain.support.service.send_admin_notification", new=AsyncMock(return_value=True)) as send:
        yield send


def test_create_ticket(client, db_session, manager, admin_notice):
    response = client.post(
        "/support",
        json={"subject": "PDF <blank>", "message": "The preview is empty", "category": "bug"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["ticket"]["subject"] == "PDF &lt;blank&gt;"
    assert body["ticket"]["category"] == "bug"
    assert body["ticket"]["status"] == "open"

    ticket = db_session.query(SupportTicket).one()
    assert ticket.user_id == manager.id
    assert ticket.company_id == manager.company_id

    kwargs = admin_notice.await_args.kwargs
    assert kwargs["subject"] == "Support Ticket: PDF &lt;blank&gt;"
    assert kwargs["event"] == "New Support Ticket"
    assert kwargs["details"]["Company"] == "Acme Homes"
    assert kwargs["details"]["Email"] == "manager@acme.test"


def test_category_defaults_to_general(client, admin_notice):
    response = client.post("/support", json={"subject": "Billing", "message": "Question about my invoice"})
    assert response.json()["ticket"]["category"] == "general"


@pytest.mark.parametrize("body", [{"subject": "Hi"}, {"message": "Hello"}, {"subject": " ", "message": "Hello"}])
def test_subject_and_message_required(client, db_session, admin_notice, body):
    response = client.post("/support", json=body)
    assert response.status_code == 400
    assert response.json()["detail"] == "Subject and message are required"
    assert db_session.query(SupportTicket).count() == 0
    admin_notice.assert_not_awaited()


def test_ticket_kept_when_notification_fails(client, db_session):
    with patch("app.email_service.ADMIN_NOTIFICATION_EMAIL", "admin@reisign.test"), patch(
        "app.email_service.send_email", new=AsyncMock(side_effect=Exception("rate limited"))
    ):
        response = client.post("/support", json={"subject": "Help", "message": "Cannot send"})

    assert response.status_code == 200
    assert db_session.query(SupportTicket).count() == 1


def test_list_own_tickets(client, db_session, company, auth, admin_notice):
    client.post("/support", json={"subject": "First", "message": "One"})
    client.post("/support", json={"subject": "Second", "message": "Two"})
    member = make_user(db_session, company, email="member@acme.test", role="user")
    auth["user_id"] = member.id
    client.post("/support", json={"subject": "Other", "message": "Three"})

    assert [t["subject"] for t in client.get("/support").json()["tickets"]] == ["Other"]
    auth["user_id"] = db_session.query(SupportTicket).first().user_id
    assert [t["subject"] for t in client.get("/support").json()["tickets"]] == ["Second", "First"]
