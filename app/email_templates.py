"""
MJML Email Templates
Transactional emails for contracts, team invites and admin notices, compiled to HTML by email_service
"""

from typing import Optional

# App theme colors - Navy/Slate color scheme
THEME = {
    "primary": "#1e3a8a",
    "primary_dark": "#1e40af",
    "primary_light": "#dbeafe",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "success": "#16a34a",
    "warning": "#f59e0b",
    "danger": "#ef4444",
}

LOGO_URL = "https://reisign.com/logo.png"


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    is_user_email: bool = False,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    footer_notice = ""
    if is_user_email:
        footer_notice = """
        <mj-text align="center" font-size="12px" color="#94a3b8" padding="12px 0 0 0">
          You're receiving this because you have an account with REI Sign.
        </mj-text>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="32px 20px">
          <mj-column>
            <mj-image
              src="{LOGO_URL}"
              alt="REI Sign"
              width="140px"
              href="https://reisign.com"
              padding="0" />
          </mj-column>
        </mj-section>

        <mj-section background-color="#ffffff" padding="0 40px 48px 40px">
          <mj-column>
            <mj-divider border-color="{THEME['border']}" border-width="1px" padding="0 0 32px 0" />
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              © REI Sign. All rights reserved.
            </mj-text>
            {footer_notice}
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def contract_signed_template(
    recipient_name: Optional[str],
    property_address: str,
    seller_name: str,
    buyer_name: Optional[str] = None,
    contract_type: str = "Purchase Agreement",
) -> str:
    """Fully executed contract notification MJML template"""
    greeting = f"Hi {recipient_name}," if recipient_name else "Hello,"
    parties = f"Seller: {seller_name}"
    if buyer_name:
        parties += f"<br/>Buyer: {buyer_name}"

    content = f"""
    <mj-text color="{THEME['text_muted']}" padding="0 0 24px 0">
      All parties have signed.
    </mj-text>

    <mj-text>
      {greeting}
    </mj-text>

    <mj-text>
      The {contract_type} for <strong>{property_address}</strong> has been fully executed.
    </mj-text>

    <mj-text>
      {parties}
    </mj-text>

    <mj-text>
      A copy of the signed contract is attached to this email for your records.
    </mj-text>
    """

    return get_base_template(
        title="Contract Signed",
        preview_text=f"Contract signed: {property_address}",
        content_sections=content,
    )


def team_invite_template(
    inviter_name: str,
    company_name: str,
    invite_url: str,
    role: str = "user",
    expires_in_days: int = 7,
) -> str:
    """Team invitation MJML template"""
    role_label = "a manager" if role == "manager" else "a team member"

    content = f"""
    <mj-text color="{THEME['text_muted']}" padding="0 0 24px 0">
      You've been invited to join {company_name} on REI Sign.
    </mj-text>

    <mj-text>
      <strong>{inviter_name}</strong> has invited you to join <strong>{company_name}</strong> as {role_label}.
    </mj-text>

    <mj-text>
      REI Sign lets your team prepare purchase agreements and assignment contracts and send them for signature.
    </mj-text>

    <mj-text font-size="14px" color="{THEME['text_muted']}">
      This invitation expires in {expires_in_days} days. If you weren't expecting it, you can ignore this email.
    </mj-text>
    """

    return get_base_template(
        title="You're invited to REI Sign",
        preview_text=f"{inviter_name} invited you to join {company_name}",
        content_sections=content,
        cta_url=invite_url,
        cta_label="Accept Invitation",
    )


def manager_signature_request_template(
    requester_name: str,
    property_address: str,
    seller_name: Optional[str],
    price_display: str,
    contract_url: str,
) -> str:
    """Ask company managers to review and sign a prepared draft"""
    content = f"""
    <mj-text color="{THEME['text_muted']}" padding="0 0 24px 0">
      A contract is waiting for manager approval.
    </mj-text>

    <mj-text>
      <strong>{requester_name}</strong> has prepared a contract that requires your signature before it can be sent to the seller.
    </mj-text>

    <mj-text container-background-color="{THEME['background']}" padding="16px">
      <strong>Property:</strong> {property_address}<br/>
      <strong>Seller:</strong> {seller_name or 'Not specified'}<br/>
      <strong>Price:</strong> {price_display}
    </mj-text>

    <mj-text>
      Please review and sign this contract so it can be sent to the seller for their signature.
    </mj-text>

    <mj-text font-size="14px" color="{THEME['text_muted']}">
      This notification was sent because a team member requested manager approval.
    </mj-text>
    """

    return get_base_template(
        title="Contract Ready for Your Signature",
        preview_text=f"Contract ready for signature: {property_address}",
        content_sections=content,
        cta_url=contract_url,
        cta_label="Review & Sign Contract",
        is_user_email=True,
    )


def admin_notification_template(event: str, details: dict[str, str]) -> str:
    """Internal notification listing event details as label/value rows"""
    rows = "<br/>".join(f"<strong>{label}:</strong> {value}" for label, value in details.items())

    content = f"""
    <mj-text>
      {rows}
    </mj-text>
    """

    return get_base_template(
        title=event,
        preview_text=event,
        content_sections=content,
    )
