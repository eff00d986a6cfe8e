"""Tests for Resend email sending; MJML compilation is stubbed out."""

from unittest.mock import patch

import pytest

from app import email_service
from app.email_templates import contract_signed_template, team_invite_template


@pytest.fixture
def resend_send():
    with patch("app.email_service.RESEND_API_KEY", "re_test"), patch(
        "app.email_service.compile_mjml_to_html", side_effect=lambda mjml: f"<html>{mjml}</html>"
    ), patch("app.email_service.resend.Emails.send", return_value={"id": "email_123"}) as send:
        yield send


@pytest.mark.asyncio
async def test_send_email_requires_api_key():
    with patch("app.email_service.RESEND_API_KEY", None):
        with pytest.raises(Exception, match="Email service not configured"):
            await email_service.send_email("a@example.com", "Hi", "<mjml></mjml>")


@pytest.mark.asyncio
async def test_send_email(resend_send):
    response = await email_service.send_email("a@example.com", "Hi", "<mjml></mjml>")
    assert response == {"id": "email_123"}
    payload = resend_send.call_args.args[0]
    assert payload["to"] == ["a@example.com"]
    assert payload["html"] == "<html><mjml></mjml></html>"
    assert "attachments" not in payload


@pytest.mark.asyncio
async def test_signed_contract_email_attaches_pdf(resend_send):
    sent = await email_service.send_signed_contract_email(
        ["manager@acme.test", "seller@example.com", "manager@acme.test", ""],
        "12 Oak St",
        "Sam Seller",
        b"%PDF-1.4",
        buyer_name="Bea Buyer",
    )

    assert sent is True
    payload = resend_send.call_args.args[0]
    assert payload["to"] == ["manager@acme.test", "seller@example.com"]
    assert payload["subject"] == "Contract Signed: 12 Oak St"
    assert payload["attachments"] == [{"filename": "signed-12-Oak-St.pdf", "content": list(b"%PDF-1.4")}]


@pytest.mark.asyncio
async def test_plain_text_parts_are_unescaped(resend_send):
    await email_service.send_signed_contract_email(["a@example.com"], "9 O&#x27;Brien St", "Sam", b"%PDF")
    payload = resend_send.call_args.args[0]
    assert payload["subject"] == "Contract Signed: 9 O'Brien St"
    assert payload["attachments"][0]["filename"] == "signed-9-O-Brien-St.pdf"
    assert "9 O&#x27;Brien St" in payload["html"]

    await email_service.send_team_invite_email("b@example.com", "Jane", "Smith &amp; Sons", "https://app.test/x")
    assert resend_send.call_args.args[0]["subject"] == "Jane invited you to join Smith & Sons on REI Sign"


@pytest.mark.asyncio
async def test_signed_contract_email_skipped_without_key_or_recipients(resend_send):
    assert await email_service.send_signed_contract_email([""], "12 Oak St", "Sam", b"%PDF") is False
    with patch("app.email_service.RESEND_API_KEY", None):
        assert await email_service.send_signed_contract_email(["a@example.com"], "12 Oak St", "Sam", b"%PDF") is False
    resend_send.assert_not_called()


@pytest.mark.asyncio
async def test_send_failure_is_raised(resend_send):
    resend_send.side_effect = RuntimeError("rate limited")
    with pytest.raises(Exception, match="Failed to send email: rate limited"):
        await email_service.send_team_invite_email(
            "new@example.com", "Jane", "Acme Homes", "https://app.test/signup?invite=abc"
        )


@pytest.mark.asyncio
async def test_manager_signature_request_email(resend_send):
    await email_service.send_manager_signature_request_email(
        ["manager@acme.test", "owner@acme.test"],
        "Mo Member",
        "9 O&#x27;Brien St, Austin, TX",
        "Sam Seller",
        "$150,000",
        "https://app.test/dashboard/contracts/abc",
    )
    payload = resend_send.call_args.args[0]
    assert payload["to"] == ["manager@acme.test", "owner@acme.test"]
    assert payload["subject"] == "Contract Ready for Signature: 9 O'Brien St, Austin, TX"
    assert 'href="https://app.test/dashboard/contracts/abc"' in payload["html"]
    assert "<strong>Price:</strong> $150,000" in payload["html"]


@pytest.mark.asyncio
async def test_admin_notification(resend_send):
    with patch("app.email_service.ADMIN_NOTIFICATION_EMAIL", "admin@reisign.test"):
        sent = await email_service.send_admin_notification(
            "Support Ticket: A &amp; B", "New Support Ticket", {"Subject": "A &amp; B", "Category": "bug"}
        )

    assert sent is True
    payload = resend_send.call_args.args[0]
    assert payload["to"] == ["admin@reisign.test"]
    assert payload["subject"] == "Support Ticket: A & B"
    assert "<strong>Category:</strong> bug" in payload["html"]


@pytest.mark.asyncio
async def test_admin_notification_never_raises(resend_send):
    with patch("app.email_service.ADMIN_NOTIFICATION_EMAIL", None):
        assert await email_service.send_admin_notification("x", "Event", {}) is False
    resend_send.assert_not_called()

    resend_send.side_effect = RuntimeError("rate limited")
    with patch("app.email_service.ADMIN_NOTIFICATION_EMAIL", "admin@reisign.test"):
        assert await email_service.send_admin_notification("x", "Event", {}) is False


def test_templates_render_details():
    signed = contract_signed_template(None, "12 Oak St", "Sam Seller", "Bea Buyer", "Assignment Contract")
    assert "The Assignment Contract for <strong>12 Oak St</strong> has been fully executed." in signed
    assert "Buyer: Bea Buyer" in signed

    invite = team_invite_template("Jane", "Acme Homes", "https://app.test/signup?invite=abc", role="manager")
    assert 'href="https://app.test/signup?invite=abc"' in invite
    assert "as a manager" in invite
