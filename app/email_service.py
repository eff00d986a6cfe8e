"""
Email Service using Resend
Provides email functionality using MJML templates for responsive design
"""

import html
import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import ADMIN_NOTIFICATION_EMAIL, EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import (
    admin_notification_template,
    contract_signed_template,
    manager_signature_request_template,
    team_invite_template,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a dict-like result with 'html' and 'errors'
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        html = getattr(result, "html", None)
        return html if html is not None else str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
    attachments: Optional[list[dict]] = None,
) -> dict:
    """
    Send an email via Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address
        attachments: Optional list of {"filename", "content"} dicts

    Returns:
        Send response dict
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise Exception("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        email_data = {
            "from": from_address or EMAIL_FROM_ADDRESS,
            "to": recipients,
            "subject": subject,
            "html": html_content,
        }

        if attachments:
            email_data["attachments"] = [
                {"filename": attachment["filename"], "content": attachment["content"]}
                for attachment in attachments
            ]

        response = resend.Emails.send(email_data)
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e


# ============================================
# Pre-built Email Templates for Common Events
# ============================================


async def send_signed_contract_email(
    recipients: list[str],
    property_address: str,
    seller_name: str,
    pdf_bytes: bytes,
    buyer_name: Optional[str] = None,
    contract_type: str = "Purchase Agreement",
) -> bool:
    """
    Email the executed contract PDF to the company managers and the seller.
    Returns False without raising when email is not configured or nobody to send to.
    """
    unique_recipients = list(dict.fromkeys(r for r in recipients if r))
    if not RESEND_API_KEY:
        logger.warning("⚠️ RESEND_API_KEY not set, skipping signed contract email")
        return False
    if not unique_recipients:
        logger.warning(f"⚠️ No recipients for signed contract email: {property_address}")
        return False

    # Stored contract text is HTML-escaped; subjects and file names are plain text
    plain_address = html.unescape(property_address)
    safe_address = "".join(ch if ch.isalnum() else "-" for ch in plain_address).strip("-") or "contract"
    await send_email(
        to=unique_recipients,
        subject=f"Contract Signed: {plain_address}",
        mjml_content=contract_signed_template(None, property_address, seller_name, buyer_name, contract_type),
        attachments=[{"filename": f"signed-{safe_address}.pdf", "content": list(pdf_bytes)}],
    )
    return True


async def send_team_invite_email(
    to: str,
    inviter_name: str,
    company_name: str,
    invite_url: str,
    role: str = "user",
) -> dict:
    """Send a team invitation with the signup link"""
    return await send_email(
        to=to,
        subject=f"{html.unescape(inviter_name)} invited you to join {html.unescape(company_name)} on REI Sign",
        mjml_content=team_invite_template(inviter_name, company_name, invite_url, role),
    )


async def send_manager_signature_request_email(
    recipients: list[str],
    requester_name: str,
    property_address: str,
    seller_name: Optional[str],
    price_display: str,
    contract_url: str,
) -> dict:
    """Ask the company managers to sign a draft before it goes to the seller"""
    return await send_email(
        to=recipients,
        subject=f"Contract Ready for Signature: {html.unescape(property_address)}",
        mjml_content=manager_signature_request_template(
            requester_name, property_address, seller_name, price_display, contract_url
        ),
    )


async def send_admin_notification(subject: str, event: str, details: dict[str, str]) -> bool:
    """
    Internal notice to the admin inbox. Never raises: returns False when it is
    not configured or sending fails.
    """
    if not ADMIN_NOTIFICATION_EMAIL:
        logger.warning(f"⚠️ ADMIN_NOTIFICATION_EMAIL not set, skipping admin notification: {event}")
        return False

    try:
        await send_email(
            to=ADMIN_NOTIFICATION_EMAIL,
            subject=html.unescape(subject),
            mjml_content=admin_notification_template(event, details),
        )
    except Exception as e:
        logger.error(f"❌ Failed to send admin notification '{event}': {e}")
        return False
    return True
