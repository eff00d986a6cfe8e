"""Tests for contract template interpolation and HTML assembly."""

from datetime import date

from app.domain.contracts.pdf_service import ContractPDFService
from app.domain.contracts.template_renderer import (
    append_signature_page,
    detect_clause_position,
    footer_template,
    format_ai_clauses,
    format_long_date,
    format_number,
    has_signature_page,
    inject_fonts,
    interpolate_template,
    load_file_template,
    resolve_state_code,
)
from app.models import StateTemplate
from factories import make_company, make_template

TODAY = date(2025, 3, 4)


def test_format_long_date():
    assert format_long_date("2025-01-05") == "January 5, 2025"
    assert format_long_date(date(2024, 12, 31)) == "December 31, 2024"
    assert format_long_date("") == ""
    assert format_long_date("sometime soon") == "sometime soon"


def test_format_number():
    assert format_number(150000) == "150,000"
    assert format_number("2500.5") == "2,500.5"
    assert format_number(0) == ""
    assert format_number(None) == ""
    assert format_number("n/a") == "n/a"


def test_resolve_state_code():
    assert resolve_state_code("Texas") == "TX"
    assert resolve_state_code(" New York ") == "NY"
    assert resolve_state_code("ca") == "CA"
    assert resolve_state_code(None) is None


def test_interpolates_known_placeholders_and_keeps_unknown():
    template = "{{seller_name}} sells {{full_property_address}} for ${{purchase_price}} on {{contract_date}}. {{mystery}}"
    data = {
        "seller_name": "Sam Seller",
        "property_address": "12 Oak St",
        "property_city": "Austin",
        "property_state": "TX",
        "property_zip": "78701",
        "purchase_price": 150000,
    }
    result = interpolate_template(template, data, today=TODAY)
    assert result == "Sam Seller sells 12 Oak St, Austin, TX 78701 for $150,000 on March 4, 2025. {{mystery}}"


def test_missing_values_render_empty():
    assert interpolate_template("[{{apn}}][{{seller_phone}}]", {}, today=TODAY) == "[][]"


def test_company_signer_falls_back_to_company_name():
    result = interpolate_template("{{company_signer_name}}", {"company_name": "Acme Homes LLC"}, today=TODAY)
    assert result == "Acme Homes LLC"


def test_checkbox_placeholders():
    template = "{{escrow_fees_split_check}}|{{escrow_fees_buyer_check}}|{{title_policy_seller_check}}"
    data = {"escrow_fees_split": "buyer", "title_policy_paid_by": "seller"}
    assert interpolate_template(template, data, today=TODAY) == "|checked|checked"


def test_signature_images():
    data = {"buyer_signature": "data:image/png;base64,AAA", "buyer_initials": "  "}
    result = interpolate_template("{{buyer_signature_img}}/{{buyer_initials_img}}", data, today=TODAY)
    assert result.startswith('<img src="data:image/png;base64,AAA" style="height: 40px;')
    assert result.endswith("/")


def test_ai_clause_block_removed_without_clauses():
    template = "<p>1.1 Terms</p>{{#if ai_clauses}}<h3>Additional</h3>{{ai_clauses}}{{/if}}<p>end</p>"
    assert interpolate_template(template, {}, today=TODAY) == "<p>1.1 Terms</p><p>end</p>"


def test_ai_clauses_numbered_after_preceding_section():
    template = "<p>4.2 Closing</p>{{#if ai_clauses}}{{ai_clauses}}{{/if}}"
    clauses = [
        {"title": "Roof Credit", "content": "Seller credits $5,000."},
        {"title": "Access", "content": "Original", "edited_content": "Edited access clause."},
    ]
    result = interpolate_template(template, {"ai_clauses": clauses}, today=TODAY)
    assert "<strong>4.3</strong> <em>Roof Credit:</em> Seller credits $5,000." in result
    assert "<strong>4.4</strong> <em>Access:</em> Edited access clause." in result
    assert "{{#if" not in result


def test_detect_clause_position():
    assert detect_clause_position("no clauses here") == (12, 6)
    assert detect_clause_position("{{ai_clauses}}") == (12, 6)
    assert detect_clause_position("1.1 a 9.4 b {{ai_clauses}} 10.1") == (9, 5)


def test_pre_rendered_clause_html_passes_through():
    assert format_ai_clauses('<div class="ai-clause">x</div>') == '<div class="ai-clause">x</div>'
    assert format_ai_clauses([]) == ""


def test_inject_fonts_into_head():
    html = inject_fonts("<html><head><title>x</title></head><body></body></html>")
    assert html.index("Tinos") < html.index("</head>")
    assert "Tinos" in inject_fonts("<p>bare</p>")


def test_append_signature_page_for_layout():
    html = "<html><head><style>p {}</style></head><body><p>Body</p></body></html>"
    result = append_signature_page(html, "two-column", {"seller_name": "Sam Seller"}, today=TODAY)
    assert has_signature_page(result)
    assert result.index('class="signature-page"') < result.index("</body>")
    assert "{{seller_name}}" not in result


def test_append_signature_page_skips_documents_that_have_one():
    html = '<body><div class="signature-page">signed</div></body>'
    assert append_signature_page(html, "three-party", {}, today=TODAY) == html


def test_footer_template():
    two_party = footer_template("data:image/png;base64,AAA", "two-column")
    assert "Buyer Initials:" in two_party
    assert "data:image/png;base64,AAA" in two_party

    three_party = footer_template("data:image/png;base64,AAA", "three-party")
    assert "Assignee Initials:" in three_party
    assert "data:image/png;base64,AAA" not in three_party


def test_bundled_templates_load():
    assert "{{full_property_address}}" in load_file_template("purchase")
    assert has_signature_page(load_file_template("assignment"))


def test_load_template_priority(db_session):
    company = make_company(db_session)
    service = ContractPDFService()

    html, layout = service.load_template(db_session, "purchase", "Texas")
    assert html == load_file_template("purchase")
    assert layout is None

    db_session.add(StateTemplate(state_code="GENERAL", purchase_agreement_html="<p>general</p>"))
    db_session.add(StateTemplate(state_code="TX", purchase_agreement_html="<p>texas</p>", is_purchase_customized=True))
    db_session.add(StateTemplate(state_code="CA", purchase_agreement_html="<p>california</p>"))
    db_session.commit()

    assert service.load_template(db_session, "purchase", "Texas") == ("<p>texas</p>", None)
    assert service.load_template(db_session, "purchase", "CA") == ("<p>general</p>", None)
    assert service.load_template(db_session, "assignment", "TX")[0] == load_file_template("assignment")

    template = make_template(db_session, company, html_content="<p>ours</p>", signature_layout="seller-only")
    assert service.load_template(db_session, "purchase", "TX", template.id, company.id) == (
        "<p>ours</p>",
        "seller-only",
    )


def test_other_company_template_is_not_used(db_session):
    owner = make_company(db_session, name="Owner")
    other = make_company(db_session, name="Other")
    template = make_template(db_session, owner, html_content="<p>private</p>")

    html, _layout = ContractPDFService.load_template(db_session, "purchase", None, template.id, other.id)
    assert html == load_file_template("purchase")
