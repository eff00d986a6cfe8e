"""
Contract HTML rendering: placeholder interpolation, AI clause numbering,
fonts, appended signature pages and the PDF footer.
"""

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Union

from dateutil import parser as date_parser

from .signature_layouts import DEFAULT_LAYOUT, SIGNATURE_PAGE_FILES

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent.parent / "templates"

TEMPLATE_FILES = {
    "purchase": "purchase-agreement.html",
    "assignment": "assignment-contract.html",
}

DEFAULT_CLAUSE_POSITION = (12, 6)

SECTION_NUMBER_PATTERN = re.compile(r"(\d{1,2})\.(\d{1,2})")
AI_CLAUSES_BLOCK_PATTERN = re.compile(r"\{\{#if ai_clauses\}\}[\s\S]*?\{\{/if\}\}")

STATE_CODES = {
    "Alabama": "AL", "Alaska": "AK", "Arizona": "AZ", "Arkansas": "AR",
    "California": "CA", "Colorado": "CO", "Connecticut": "CT", "Delaware": "DE",
    "Florida": "FL", "Georgia": "GA", "Hawaii": "HI", "Idaho": "ID",
    "Illinois": "IL", "Indiana": "IN", "Iowa": "IA", "Kansas": "KS",
    "Kentucky": "KY", "Louisiana": "LA", "Maine": "ME", "Maryland": "MD",
    "Massachusetts": "MA", "Michigan": "MI", "Minnesota": "MN", "Mississippi": "MS",
    "Missouri": "MO", "Montana": "MT", "Nebraska": "NE", "Nevada": "NV",
    "New Hampshire": "NH", "New Jersey": "NJ", "New Mexico": "NM", "New York": "NY",
    "North Carolina": "NC", "North Dakota": "ND", "Ohio": "OH", "Oklahoma": "OK",
    "Oregon": "OR", "Pennsylvania": "PA", "Rhode Island": "RI", "South Carolina": "SC",
    "South Dakota": "SD", "Tennessee": "TN", "Texas": "TX", "Utah": "UT",
    "Vermont": "VT", "Virginia": "VA", "Washington": "WA", "West Virginia": "WV",
    "Wisconsin": "WI", "Wyoming": "WY",
}  # fmt: skip

FONT_LINKS = """
<link rel="preconnect" href="https://fonts.googleapis.com">
<link rel="preconnect" href="https://fonts.gstatic.com" crossorigin>
<link href="https://fonts.googleapis.com/css2?family=Tinos:ital,wght@0,400;0,700;1,400;1,700&display=swap" rel="stylesheet">
"""

# Tinos is metric-compatible with Times New Roman, so layout matches the editor preview
FONT_STYLES = """
<style>
  @font-face { font-family: 'Times New Roman'; src: local('Tinos'), local('Tinos-Regular'); font-weight: normal; font-style: normal; }
  @font-face { font-family: 'Times New Roman'; src: local('Tinos-Bold'); font-weight: bold; font-style: normal; }
  @font-face { font-family: 'Times New Roman'; src: local('Tinos-Italic'); font-weight: normal; font-style: italic; }
  @font-face { font-family: 'Times New Roman'; src: local('Tinos-BoldItalic'); font-weight: bold; font-style: italic; }
  @font-face { font-family: 'Times'; src: local('Tinos'), local('Tinos-Regular'); }
  body { font-family: 'Tinos', 'Times New Roman', Times, serif; }
</style>
"""

SIGNATURE_PAGE_STYLES = """
  .signature-page { page-break-before: always; }
  .signature-header { text-align: center; font-style: italic; margin-bottom: 30pt; line-height: 1.4; }
  .signature-columns { display: flex; justify-content: space-between; }
  .signature-column { width: 45%; }
  .signature-row { margin-bottom: 16pt; }
  .signature-label { font-size: 9pt; font-weight: bold; margin-bottom: 4pt; }
  .signature-line { border-bottom: 1px solid #000; min-height: 20pt; padding-top: 2pt; }
  .signature-box { border: 1px solid #000; min-height: 35pt; }
"""

SIGNATURES_NOTICE = (
    '<p class="center-text" style="text-align: center; margin-top: 30pt; font-weight: bold;">'
    "[SIGNATURES ON THE FOLLOWING PAGE]</p>"
)


def resolve_state_code(state: Optional[str]) -> Optional[str]:
    """Full US state name to its postal code; anything else is upper-cased"""
    if not state:
        return None
    return STATE_CODES.get(state.strip(), state.strip().upper())


def format_long_date(value: Union[str, date, datetime, None]) -> str:
    """'January 5, 2025'. Unparseable strings are returned unchanged."""
    if not value:
        return ""
    if isinstance(value, (date, datetime)):
        parsed = value
    else:
        try:
            parsed = date_parser.parse(str(value))
        except (ValueError, OverflowError):
            return str(value)
    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"


def format_number(value) -> str:
    """Thousands separators, no currency sign (the template carries the $)"""
    if not value:
        return ""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    if not number:
        return ""
    return f"{number:,.3f}".rstrip("0").rstrip(".")


def detect_clause_position(template: str) -> tuple[int, int]:
    """
    Numbering for AI clauses: the subsection after the last X.Y section
    number that precedes {{ai_clauses}}.
    """
    index = template.find("{{ai_clauses}}")
    if index == -1:
        return DEFAULT_CLAUSE_POSITION

    matches = SECTION_NUMBER_PATTERN.findall(template[:index])
    if not matches:
        return DEFAULT_CLAUSE_POSITION

    major, minor = matches[-1]
    return int(major), int(minor) + 1


def format_ai_clauses(clauses, start: tuple[int, int] = DEFAULT_CLAUSE_POSITION) -> str:
    """Render clause dicts as numbered paragraphs; pre-rendered HTML passes through"""
    if not clauses:
        return ""
    if isinstance(clauses, str):
        return clauses

    major, minor = start
    parts = []
    for index, clause in enumerate(clauses):
        content = clause.get("edited_content") or clause.get("editedContent") or clause.get("content", "")
        parts.append(
            f'<p class="paragraph">\n'
            f"  <strong>{major}.{minor + index}</strong> <em>{clause.get('title', '')}:</em> {content}\n"
            f"</p>"
        )
    return "".join(parts)


def _has_ai_clauses(clauses) -> bool:
    if isinstance(clauses, str):
        return bool(clauses.strip())
    return bool(clauses)


def _image_tag(src: Optional[str], height: int) -> str:
    if not src or not src.strip():
        return ""
    return f'<img src="{src}" style="height: {height}px; width: auto; object-fit: contain;" />'


def _checked(value, expected: str) -> str:
    return "checked" if value == expected else ""


def interpolate_template(template: str, data: dict, today: Optional[date] = None) -> str:
    """Replace every known {{placeholder}} with contract data; unknown ones are left in place"""

    def text(key: str) -> str:
        value = data.get(key)
        return "" if value is None else str(value)

    company_address = text("company_address")
    if company_address:
        company_full_address = (
            f"{company_address}, {text('company_city')}, {text('company_state')} {text('company_zip')}"
        )
    else:
        company_full_address = ""

    contract_date = data.get("contract_date") or format_long_date(today or date.today())

    replacements = {
        "full_property_address": (
            f"{text('property_address')}, {text('property_city')}, "
            f"{text('property_state')} {text('property_zip')}"
        ),
        "company_full_address": company_full_address,
        "company_signer_name": text("company_signer_name") or text("company_name"),
        "purchase_price": format_number(data.get("purchase_price")),
        "earnest_money": format_number(data.get("earnest_money")),
        "assignment_fee": format_number(data.get("assignment_fee")),
        "close_of_escrow": format_long_date(data.get("close_of_escrow")),
        "escrow_fees_split_check": _checked(data.get("escrow_fees_split"), "split"),
        "escrow_fees_buyer_check": _checked(data.get("escrow_fees_split"), "buyer"),
        "title_policy_seller_check": _checked(data.get("title_policy_paid_by"), "seller"),
        "title_policy_buyer_check": _checked(data.get("title_policy_paid_by"), "buyer"),
        "hoa_fees_split_check": _checked(data.get("hoa_fees_split"), "split"),
        "hoa_fees_buyer_check": _checked(data.get("hoa_fees_split"), "buyer"),
        "ai_clauses": format_ai_clauses(data.get("ai_clauses"), detect_clause_position(template)),
        "contract_date": str(contract_date),
        "buyer_signature_img": _image_tag(data.get("buyer_signature"), 40),
        "buyer_initials_img": _image_tag(data.get("buyer_initials"), 26),
    }

    for key in (
        "property_address", "property_city", "property_state", "property_zip", "apn",
        "seller_name", "seller_email", "seller_phone", "seller_address",
        "company_name", "company_email", "company_phone", "company_address",
        "company_city", "company_state", "company_zip",
        "buyer_name", "buyer_email", "buyer_phone",
        "assignee_name", "assignee_email", "assignee_phone", "assignee_address",
        "escrow_agent_name", "escrow_agent_address", "escrow_officer", "escrow_agent_email",
        "inspection_period", "personal_property", "additional_terms",
    ):  # fmt: skip
        replacements[key] = text(key)

    result = template
    for key, value in replacements.items():
        result = result.replace("{{" + key + "}}", value)

    if _has_ai_clauses(data.get("ai_clauses")):
        result = result.replace("{{#if ai_clauses}}", "").replace("{{/if}}", "")
    else:
        result = AI_CLAUSES_BLOCK_PATTERN.sub("", result)

    return result


def load_file_template(template_type: str) -> str:
    """Bundled HTML template for 'purchase' or 'assignment' contracts"""
    file_name = TEMPLATE_FILES.get(template_type)
    if not file_name:
        raise ValueError(f"Template not found: {template_type}")
    return (TEMPLATES_DIR / file_name).read_text(encoding="utf-8")


def load_signature_page(layout: Optional[str]) -> str:
    file_name = SIGNATURE_PAGE_FILES.get(layout or "", SIGNATURE_PAGE_FILES[DEFAULT_LAYOUT])
    try:
        return (TEMPLATES_DIR / "signature-pages" / file_name).read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"❌ Error loading signature page template {file_name}: {e}")
        return '<div class="signature-page"><p>Signature Page</p></div>'


def inject_fonts(html: str) -> str:
    head = FONT_LINKS + FONT_STYLES
    if "</head>" in html:
        return html.replace("</head>", f"{head}</head>", 1)
    if "<body" in html:
        return html.replace("<body", f"{head}<body", 1)
    return head + html


def has_signature_page(html: str) -> bool:
    return 'class="signature-page"' in html or "class='signature-page'" in html


def append_signature_page(html: str, layout: str, data: dict, today: Optional[date] = None) -> str:
    """Add the layout's signature page (and its styles) to a document that has none"""
    if has_signature_page(html):
        return html

    signature_page = interpolate_template(load_signature_page(layout), data, today=today)

    if "</style>" in html:
        html = html.replace("</style>", f"{SIGNATURE_PAGE_STYLES}</style>", 1)
    elif "</head>" in html:
        html = html.replace("</head>", f"<style>{SIGNATURE_PAGE_STYLES}</style></head>", 1)

    if "</body>" in html:
        html = html.replace("</body>", f"{SIGNATURES_NOTICE}{signature_page}</body>", 1)
    else:
        html = html + SIGNATURES_NOTICE + signature_page

    logger.info(f"📝 Added signature page with layout: {layout}")
    return html


def footer_template(buyer_initials: Optional[str], layout: Optional[str] = None) -> str:
    """
    Page footer with initials boxes. Seller initials on the left; on the right
    the buyer's pre-filled initials, or an empty assignee box for three-party.
    """
    is_three_party = layout == "three-party"
    right_label = "Assignee Initials:" if is_three_party else "Buyer Initials:"
    right_content = "" if is_three_party else _image_tag(buyer_initials, 18)

    return f"""
<div style="width: 100%; font-size: 9px; font-family: 'Tinos', 'Times New Roman', Times, serif; padding: 0 0.5in;">
  <div style="display: flex; justify-content: space-between; align-items: center; border-top: 1px solid #ccc; padding-top: 8px; margin-top: 5px;">
    <div style="display: flex; align-items: center; gap: 5px;">
      <span>Seller Initials:</span>
      <div style="width: 50px; height: 22px; border: 1px solid #000;"></div>
    </div>
    <div>Page <span class="pageNumber"></span> of <span class="totalPages"></span></div>
    <div style="display: flex; align-items: center; gap: 5px;">
      <span>{right_label}</span>
      <div style="width: 50px; height: 22px; border: 1px solid #000; display: flex; align-items: center; justify-content: center;">
        {right_content}
      </div>
    </div>
  </div>
</div>
"""
