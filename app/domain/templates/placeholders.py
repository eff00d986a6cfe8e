"""Placeholder catalog and form-field configuration for contract templates"""

import re

PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")

STANDARD_PLACEHOLDERS = {
    # Property
    "property_address": {"label": "Property Address", "category": "Property"},
    "property_city": {"label": "Property City", "category": "Property"},
    "property_state": {"label": "Property State", "category": "Property"},
    "property_zip": {"label": "Property ZIP", "category": "Property"},
    "full_property_address": {"label": "Full Property Address", "category": "Property"},
    "apn": {"label": "APN (Parcel Number)", "category": "Property"},
    # Seller
    "seller_name": {"label": "Seller Name", "category": "Seller"},
    "seller_email": {"label": "Seller Email", "category": "Seller"},
    "seller_phone": {"label": "Seller Phone", "category": "Seller"},
    "seller_address": {"label": "Seller Address", "category": "Seller"},
    # Company (the buyer on a purchase agreement)
    "company_name": {"label": "Company Name", "category": "Company"},
    "company_email": {"label": "Company Email", "category": "Company"},
    "company_phone": {"label": "Company Phone", "category": "Company"},
    "company_address": {"label": "Company Address", "category": "Company"},
    "company_signer_name": {"label": "Company Signer Name", "category": "Company"},
    # Assignee (three-party assignments)
    "assignee_name": {"label": "Assignee Name", "category": "Assignee"},
    "assignee_email": {"label": "Assignee Email", "category": "Assignee"},
    "assignee_phone": {"label": "Assignee Phone", "category": "Assignee"},
    "assignee_address": {"label": "Assignee Address", "category": "Assignee"},
    # Financial
    "purchase_price": {"label": "Purchase Price", "category": "Financial"},
    "earnest_money": {"label": "Earnest Money", "category": "Financial"},
    "assignment_fee": {"label": "Assignment Fee", "category": "Financial"},
    # Escrow
    "escrow_agent_name": {"label": "Escrow Agent Name", "category": "Escrow"},
    "escrow_agent_address": {"label": "Escrow Agent Address", "category": "Escrow"},
    "escrow_officer": {"label": "Escrow Officer", "category": "Escrow"},
    "escrow_agent_email": {"label": "Escrow Agent Email", "category": "Escrow"},
    # Terms
    "close_of_escrow": {"label": "Close of Escrow Date", "category": "Terms"},
    "inspection_period": {"label": "Inspection Period (days)", "category": "Terms"},
    "personal_property": {"label": "Personal Property Included", "category": "Terms"},
    "additional_terms": {"label": "Additional Terms", "category": "Terms"},
    # Generated
    "ai_clauses": {"label": "AI-Generated Clauses", "category": "Generated"},
    "contract_date": {"label": "Contract Date", "category": "Generated"},
}

ALL_STANDARD_FIELDS = (
    "property_address", "property_city", "property_state", "property_zip", "apn",
    "seller_name", "seller_email", "seller_phone", "seller_address",
    "buyer_name", "buyer_email", "buyer_phone",
    "purchase_price", "earnest_money", "assignment_fee",
    "escrow_agent_name", "escrow_agent_address", "escrow_officer", "escrow_agent_email",
    "close_of_escrow", "inspection_period", "personal_property", "additional_terms",
    "escrow_fees_split", "title_policy_paid_by", "hoa_fees_split",
)  # fmt: skip

REQUIRED_WHEN_VISIBLE = {
    "property_address", "property_city", "property_state", "property_zip",
    "seller_name", "seller_email", "purchase_price",
}  # fmt: skip

# Placeholders whose form field has a different name; everything else in
# ALL_STANDARD_FIELDS maps 1:1
PLACEHOLDER_TO_FIELD_MAP = {
    "escrow_fees_split_check": "escrow_fees_split",
    "escrow_fees_buyer_check": "escrow_fees_split",
    "title_policy_seller_check": "title_policy_paid_by",
    "title_policy_buyer_check": "title_policy_paid_by",
    "hoa_fees_split_check": "hoa_fees_split",
    "hoa_fees_buyer_check": "hoa_fees_split",
    "full_property_address": "property_address",
    "assignee_name": "buyer_name",
    "assignee_email": "buyer_email",
    "assignee_phone": "buyer_phone",
    "assignee_address": "buyer_phone",  # no separate address field on the form
}


def extract_placeholders(html: str) -> list[str]:
    """Distinct {{placeholder}} names in order of first appearance"""
    return list(dict.fromkeys(PLACEHOLDER_PATTERN.findall(html or "")))


def generate_field_config(used_placeholders: list[str]) -> dict:
    """Form field visibility/required flags derived from the placeholders a template uses"""
    used_fields = set()
    for placeholder in used_placeholders:
        if placeholder in PLACEHOLDER_TO_FIELD_MAP:
            used_fields.add(PLACEHOLDER_TO_FIELD_MAP[placeholder])
        elif placeholder in ALL_STANDARD_FIELDS:
            used_fields.add(placeholder)

    if "full_property_address" in used_placeholders:
        used_fields.update({"property_city", "property_state", "property_zip"})

    return {
        "standard_fields": {
            field: {
                "visible": field in used_fields,
                "required": field in used_fields and field in REQUIRED_WHEN_VISIBLE,
            }
            for field in ALL_STANDARD_FIELDS
        }
    }
