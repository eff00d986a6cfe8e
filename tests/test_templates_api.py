"""API tests for company templates, layouts and state templates."""

import pytest

from app.domain.contracts.pdf_service import ContractPDFService
from app.domain.contracts.template_renderer import load_file_template
from app.models import CompanyTemplate, StateTemplate
from factories import make_company, make_template

TEMPLATE_HTML = "<p>{{buyer_name}} buys {{property_address}} on {{closing_date}}</p>"


@pytest.fixture
def paid_company(db_session, company):
    company.billing_plan = company.actual_plan = "individual"
    db_session.commit()
    return company


def test_layouts(client):
    response = client.get("/templates/layouts")
    assert response.status_code == 200
    ids = [layout["id"] for layout in response.json()["layouts"]]
    assert "two-column" in ids


def test_create_requires_paid_plan(client):
    response = client.post("/templates", json={"name": "Mine", "html_content": TEMPLATE_HTML})
    assert response.status_code == 403
    assert response.json()["detail"]["upgrade_required"] is True
    assert response.json()["detail"]["suggested_plan"] == "individual"


def test_create_template(client, paid_company):
    response = client.post(
        "/templates",
        json={"name": "Subject To", "tags": ["creative"], "html_content": TEMPLATE_HTML},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["is_example"] is False
    assert body["signature_layout"] == "two-column"
    assert body["used_placeholders"] == ["buyer_name", "property_address", "closing_date"]
    fields = body["field_config"]["standard_fields"]
    assert fields["buyer_name"] == {"visible": True, "required": False}
    assert fields["property_address"] == {"visible": True, "required": True}
    assert fields["seller_name"] == {"visible": False, "required": False}


@pytest.mark.parametrize(
    "payload,detail",
    [
        ({"name": "", "html_content": TEMPLATE_HTML}, "Name and HTML content are required"),
        ({"name": "Mine", "html_content": "  "}, "Name and HTML content are required"),
        ({"name": "Mine", "html_content": TEMPLATE_HTML, "signature_layout": "diagonal"}, None),
    ],
)
def test_create_validation(client, paid_company, payload, detail):
    response = client.post("/templates", json=payload)
    assert response.status_code == 400
    if detail:
        assert response.json()["detail"] == detail
    else:
        assert response.json()["detail"].startswith("Unknown signature layout")


def test_list_templates_with_tags_and_search(client, db_session, company):
    make_template(db_session, name="Example Cash")
    make_template(db_session, company, name="Novation", description="Novation agreement", tags=["novation"])
    make_template(db_session, make_company(db_session, name="Other"), name="Secret")

    body = client.get("/templates").json()
    assert [t["name"] for t in body["templates"]] == ["Example Cash", "Novation"]
    assert body["available_tags"] == ["cash", "novation"]
    assert body["standard_placeholders"]["full_property_address"]["category"] == "Property"

    assert [t["name"] for t in client.get("/templates", params={"tag": "novation"}).json()["templates"]] == [
        "Novation"
    ]
    searched = client.get("/templates", params={"search": "agreement"}).json()
    assert [t["name"] for t in searched["templates"]] == ["Novation"]
    assert searched["available_tags"] == ["cash", "novation"]

    own_only = client.get("/templates", params={"include_examples": "false"}).json()
    assert [t["name"] for t in own_only["templates"]] == ["Novation"]


def test_example_templates_are_read_only(client, db_session):
    example = make_template(db_session)

    assert client.get(f"/templates/{example.public_id}").status_code == 200
    response = client.patch(f"/templates/{example.public_id}", json={"name": "Edited"})
    assert response.status_code == 403
    assert response.json()["detail"] == "Cannot edit example templates. Copy it first."
    response = client.delete(f"/templates/{example.public_id}")
    assert response.json()["detail"] == "Cannot delete example templates"


def test_copy_example_then_edit(client, db_session, company):
    example = make_template(db_session)

    response = client.post(f"/templates/{example.public_id}/copy")
    assert response.status_code == 200
    copy = response.json()
    assert copy["name"] == "Cash Offer (Copy)"
    assert copy["is_example"] is False

    response = client.patch(f"/templates/{copy['public_id']}", json={"html_content": "<p>{{seller_name}}</p>"})
    assert response.status_code == 200
    assert response.json()["used_placeholders"] == ["seller_name"]

    named = client.post(f"/templates/{example.public_id}/copy", json={"name": "My Cash"}).json()
    assert named["name"] == "My Cash"


def test_update_rejects_empty_name(client, db_session, company):
    template = make_template(db_session, company)
    response = client.patch(f"/templates/{template.public_id}", json={"name": " "})
    assert response.status_code == 400
    assert response.json()["detail"] == "Name cannot be empty"


def test_delete_is_soft(client, db_session, company):
    template = make_template(db_session, company)

    assert client.delete(f"/templates/{template.public_id}").json() == {"success": True}
    assert client.get(f"/templates/{template.public_id}").status_code == 404
    db_session.expire_all()
    assert db_session.get(CompanyTemplate, template.id).is_active is False


def test_other_company_template_is_hidden(client, db_session):
    other = make_company(db_session, name="Other")
    template = make_template(db_session, other)
    assert client.get(f"/templates/{template.public_id}").status_code == 404
    assert client.delete(f"/templates/{template.public_id}").status_code == 404


def test_state_templates_resolution(client, db_session):
    db_session.add_all(
        [
            StateTemplate(
                state_code="GENERAL",
                purchase_agreement_html="<p>general purchase</p>",
                assignment_contract_html="<p>general assignment</p>",
            ),
            StateTemplate(
                state_code="TX",
                purchase_agreement_html="<p>texas purchase</p>",
                is_purchase_customized=True,
                assignment_contract_html="<p>texas assignment</p>",
                is_assignment_customized=True,
            ),
        ]
    )
    db_session.commit()

    body = client.get("/templates/states/Texas").json()
    assert body["state_code"] == "TX"
    assert body["purchase"] == {"source": "state", "html": "<p>texas purchase</p>"}
    # assignments always render from the bundled file
    assert body["assignment"] == {"source": "default", "html": load_file_template("assignment")}
    assert ContractPDFService.load_template(db_session, "assignment", "TX") == (body["assignment"]["html"], None)

    body = client.get("/templates/states/ca").json()
    assert body["state_code"] == "CA"
    assert body["purchase"] == {"source": "general", "html": "<p>general purchase</p>"}
    assert body["assignment"]["source"] == "default"


def test_unknown_state(client):
    response = client.get("/templates/states/Atlantis")
    assert response.status_code == 404
    assert response.json()["detail"] == "State not found"
