"""
Signature page layouts and signature field zones.

All coordinates are percentages (0-100) of the page, origin top-left,
y increasing downwards. Letter pages are rendered with 0.5in margins on
top/left/right and a 1in footer band, which the footer zones sit in.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_LAYOUT = "two-column"

SIGNATURE_PAGE_LAYOUTS = {
    "two-column": {
        "id": "two-column",
        "name": "Two Column (Standard)",
        "description": "Seller and Buyer signatures side by side. Buyer pre-signs, Seller signs electronically.",
        "recipients": [
            {"role": "seller", "label": "Seller", "signs_electronically": True},
            {"role": "buyer", "label": "Buyer", "signs_electronically": False},
        ],
        "signature_positions": [
            {"recipient_role": "seller", "field_type": "signature", "x": 6, "y": 26, "width": 32, "height": 4.5},
        ],
    },
    "two-column-assignment": {
        "id": "two-column-assignment",
        "name": "Two Column (Assignment)",
        "description": "Assignee and Assignor signatures side by side. Assignor pre-signs, Assignee signs electronically.",
        "recipients": [
            {"role": "seller", "label": "Assignee", "signs_electronically": True},
            {"role": "buyer", "label": "Assignor", "signs_electronically": False},
        ],
        "signature_positions": [
            {"recipient_role": "seller", "field_type": "signature", "x": 6, "y": 26, "width": 32, "height": 4.5},
        ],
    },
    "seller-only": {
        "id": "seller-only",
        "name": "Seller Only",
        "description": "Only seller signature. Buyer/Company has already pre-signed.",
        "recipients": [
            {"role": "seller", "label": "Seller", "signs_electronically": True},
        ],
        "signature_positions": [
            {"recipient_role": "seller", "field_type": "signature", "x": 25, "y": 22, "width": 50, "height": 5},
        ],
    },
    "three-party": {
        "id": "three-party",
        "name": "Three Party Assignment",
        "description": (
            "Seller, Assignor (wholesaler pre-signs), and Assignee. "
            "Seller and Assignee sign electronically."
        ),
        "recipients": [
            {"role": "seller", "label": "Original Seller", "signs_electronically": True},
            {"role": "buyer", "label": "Assignor (Wholesaler)", "signs_electronically": False},
            {"role": "assignee", "label": "Assignee (End Buyer)", "signs_electronically": True},
        ],
        "signature_positions": [
            {"recipient_role": "seller", "field_type": "signature", "x": 6, "y": 18, "width": 32, "height": 4.5},
            {"recipient_role": "assignee", "field_type": "signature", "x": 6, "y": 68, "width": 32, "height": 4.5},
        ],
    },
}

# Signature page HTML bundled per layout
SIGNATURE_PAGE_FILES = {
    "two-column": "two-column.html",
    "seller-only": "seller-only.html",
    "three-party": "three-party-assignment.html",
}

# Footer initials boxes (left: seller, right: buyer/assignee)
SELLER_INITIALS_ZONE = {"x": 13, "y": 95, "width": 8, "height": 2.8}
BUYER_INITIALS_ZONE = {"x": 88, "y": 95, "width": 8, "height": 2.8}

# Last-page signature and date zones per layout, keyed by recipient role
LAST_PAGE_ZONES = {
    "three-party": [
        ("seller", "signature", {"x": 13, "y": 14.5, "width": 30, "height": 5}),
        ("seller", "date", {"x": 11.3, "y": 28.75, "width": 25, "height": 2.5}),
        ("buyer", "signature", {"x": 13, "y": 79.5, "width": 30, "height": 5}),
        ("buyer", "date", {"x": 11.3, "y": 93.75, "width": 25, "height": 2.5}),
    ],
    "seller-only": [
        ("seller", "date", {"x": 27.3, "y": 18.25, "width": 42, "height": 2.5}),
        ("seller", "signature", {"x": 26, "y": 24, "width": 42, "height": 5}),
    ],
    "buyer-only": [
        ("buyer", "signature", {"x": 11, "y": 58, "width": 30, "height": 5}),
        ("buyer", "date", {"x": 12.3, "y": 65.25, "width": 25, "height": 2.5}),
    ],
    "default": [
        ("seller", "date", {"x": 10.3, "y": 20.75, "width": 35, "height": 2.5}),
        ("seller", "signature", {"x": 9, "y": 26.5, "width": 35, "height": 5}),
    ],
}

# Where the signing date text is stamped on the executed PDF (x%, y% from top)
SIGNING_DATE_POSITIONS = {
    "two-column": {"seller": (9, 22)},
    "seller-only": {"seller": (27, 20)},
    "three-party": {"seller": (11.3, 29.5), "buyer": (11.3, 94.5)},
    "buyer-only": {"buyer": (9, 67)},
}


def get_layout(layout_id: Optional[str]) -> Optional[dict]:
    return SIGNATURE_PAGE_LAYOUTS.get(layout_id or "")


def list_layouts() -> list[dict]:
    return [
        {"id": layout["id"], "name": layout["name"], "description": layout["description"]}
        for layout in SIGNATURE_PAGE_LAYOUTS.values()
    ]


def get_signature_positions_for_layout(layout_id: Optional[str], page_number: int) -> list[dict]:
    """Static signature-page positions for a layout, placed on the given page"""
    layout = SIGNATURE_PAGE_LAYOUTS.get(layout_id or "")
    if not layout:
        logger.warning(f"⚠️ Unknown layout: {layout_id}, falling back to {DEFAULT_LAYOUT}")
        layout = SIGNATURE_PAGE_LAYOUTS[DEFAULT_LAYOUT]

    return [{"page": page_number, **position} for position in layout["signature_positions"]]


def get_signing_recipients(layout_id: Optional[str]) -> list[dict]:
    """Recipients who sign electronically for a layout"""
    layout = SIGNATURE_PAGE_LAYOUTS.get(layout_id or "")
    if not layout:
        return []
    return [
        {"role": r["role"], "label": r["label"]}
        for r in layout["recipients"]
        if r["signs_electronically"]
    ]


def get_signature_positions(page_count: Optional[int] = None, layout_id: Optional[str] = None) -> list[dict]:
    """
    Signature, initials and date zones for a rendered document.

    Initials sit in the footer of every page but the last; the signature and
    the auto-filled signing date sit on the last (signature) page.
    """
    total_pages = page_count or 2
    layout = layout_id or DEFAULT_LAYOUT
    zones_key = layout if layout in ("three-party", "seller-only", "buyer-only") else "default"

    initial_roles = {
        "three-party": [("seller", SELLER_INITIALS_ZONE), ("buyer", BUYER_INITIALS_ZONE)],
        "buyer-only": [("buyer", BUYER_INITIALS_ZONE)],
    }.get(zones_key, [("seller", SELLER_INITIALS_ZONE)])

    positions = []
    for role, zone in initial_roles:
        for page in range(1, total_pages):
            positions.append({"page": page, "recipient_role": role, "field_type": "initials", **zone})

    for role, field_type, zone in LAST_PAGE_ZONES[zones_key]:
        positions.append({"page": total_pages, "recipient_role": role, "field_type": field_type, **zone})

    logger.debug(f"📝 {len(positions)} signature zones for layout={layout}, pages={total_pages}")
    return positions
