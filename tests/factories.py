"""ORM factories and sample documents for tests."""

import io
from datetime import datetime, timedelta

from reportlab.pdfgen import canvas

from app.models import Company, CompanyTemplate, Contract, Property, User


def make_pdf(pages: int = 3) -> bytes:
    """A real letter-size PDF with the given number of pages."""
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=(612, 792))
    for page in range(pages):
        c.drawString(72, 720, f"Page {page + 1}")
        c.showPage()
    c.save()
    return buffer.getvalue()


def make_company(db, **overrides) -> Company:
    now = datetime.utcnow()
    values = {
        "name": "Acme Homes",
        "email": "office@acme.test",
        "billing_plan": "free",
        "actual_plan": "free",
        "billing_interval": "monthly",
        "billing_period_start": now - timedelta(days=3),
        "next_billing_date": now + timedelta(days=27),
        "contracts_used_this_period": 0,
    }
    values.update(overrides)
    company = Company(**values)
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


def make_user(db, company=None, email="manager@acme.test", role="manager", **overrides) -> User:
    user = User(
        firebase_uid=f"uid-{email}",
        email=email,
        full_name=overrides.pop("full_name", email.split("@")[0].title()),
        company_id=company.id if company else None,
        role=role,
        **overrides,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_template(db, company=None, **overrides) -> CompanyTemplate:
    values = {
        "company_id": company.id if company else None,
        "name": "Cash Offer",
        "description": "Standard cash purchase",
        "tags": ["cash"],
        "html_content": "<html><body><p>{{property_address}} for ${{purchase_price}}</p></body></html>",
        "signature_layout": "two-column",
        "used_placeholders": ["property_address", "purchase_price"],
        "is_example": company is None,
        "is_active": True,
    }
    values.update(overrides)
    template = CompanyTemplate(**values)
    db.add(template)
    db.commit()
    db.refresh(template)
    return template


READY_CUSTOM_FIELDS = {
    "company_name": "Acme Homes LLC",
    "company_signer_name": "Jane Manager",
    "company_email": "office@acme.test",
    "company_phone": "555-0100",
    "buyer_signature": "data:image/png;base64,iVBORw0KGgo=",
    "buyer_initials": "data:image/png;base64,iVBORw0KGgo=",
    "property_address": "12 Oak St",
    "property_city": "Austin",
    "property_state": "TX",
    "property_zip": "78701",
}


def make_contract(db, company, user, status="draft", custom_fields=None, **overrides) -> Contract:
    prop = Property(company_id=company.id, address="12 Oak St", city="Austin", state="TX", zip="78701")
    db.add(prop)
    db.flush()
    contract = Contract(
        company_id=company.id,
        property_id=prop.id,
        created_by=user.id,
        seller_name="Sam Seller",
        seller_email="seller@example.com",
        buyer_name="",
        buyer_email="",
        price=150000,
        status=status,
        custom_fields=dict(READY_CUSTOM_FIELDS if custom_fields is None else custom_fields),
        **overrides,
    )
    db.add(contract)
    db.commit()
    db.refresh(contract)
    return contract
