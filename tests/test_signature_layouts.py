"""Tests for signature zone placement per layout."""

from app.domain.contracts.signature_layouts import (
    get_layout,
    get_signature_positions,
    get_signature_positions_for_layout,
    get_signing_recipients,
    list_layouts,
)


def _by(positions, **criteria):
    return [p for p in positions if all(p[k] == v for k, v in criteria.items())]


def test_default_layout_initials_every_page_but_last():
    positions = get_signature_positions(4, "two-column")

    initials = _by(positions, field_type="initials")
    assert [p["page"] for p in initials] == [1, 2, 3]
    assert all(p["recipient_role"] == "seller" and p["x"] == 13 for p in initials)

    last_page = _by(positions, page=4)
    assert {(p["recipient_role"], p["field_type"]) for p in last_page} == {("seller", "signature"), ("seller", "date")}


def test_three_party_has_seller_and_buyer_zones():
    positions = get_signature_positions(3, "three-party")

    assert len(_by(positions, field_type="initials", recipient_role="seller")) == 2
    assert len(_by(positions, field_type="initials", recipient_role="buyer")) == 2
    assert _by(positions, page=3, recipient_role="buyer", field_type="signature")[0]["y"] == 79.5


def test_buyer_only_layout():
    positions = get_signature_positions(2, "buyer-only")
    assert {p["recipient_role"] for p in positions} == {"buyer"}
    assert _by(positions, field_type="initials")[0]["x"] == 88


def test_single_page_document_has_no_initials():
    positions = get_signature_positions(1, "seller-only")
    assert not _by(positions, field_type="initials")
    assert all(p["page"] == 1 for p in positions)


def test_missing_page_count_assumes_two_pages():
    positions = get_signature_positions(None, None)
    assert max(p["page"] for p in positions) == 2


def test_layout_positions_fall_back_to_default():
    assert get_signature_positions_for_layout("three-party", 5) == [
        {"page": 5, "recipient_role": "seller", "field_type": "signature", "x": 6, "y": 18, "width": 32, "height": 4.5},
        {"page": 5, "recipient_role": "assignee", "field_type": "signature", "x": 6, "y": 68, "width": 32, "height": 4.5},
    ]
    fallback = get_signature_positions_for_layout("nonexistent", 2)
    assert fallback == get_signature_positions_for_layout("two-column", 2)


def test_signing_recipients():
    assert get_signing_recipients("two-column") == [{"role": "seller", "label": "Seller"}]
    assert [r["role"] for r in get_signing_recipients("three-party")] == ["seller", "assignee"]
    assert get_signing_recipients("nonexistent") == []


def test_layout_catalog():
    ids = [layout["id"] for layout in list_layouts()]
    assert ids == ["two-column", "two-column-assignment", "seller-only", "three-party"]
    assert get_layout("seller-only")["name"] == "Seller Only"
    assert get_layout(None) is None
