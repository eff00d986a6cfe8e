"""Tests for PDF post-processing: page counts, footer whiteout and signing dates."""

import io
from datetime import datetime

from PyPDF2 import PdfReader

from app.domain.contracts.pdf_service import DEFAULT_PAGE_COUNT, ContractPDFService
from factories import make_pdf


def _last_page_text(pdf_bytes: bytes) -> str:
    reader = PdfReader(io.BytesIO(pdf_bytes))
    return reader.pages[-1].extract_text() or ""


def test_page_count():
    assert ContractPDFService.get_page_count(make_pdf(4)) == 4


def test_unreadable_pdf_assumes_default_page_count():
    assert ContractPDFService.get_page_count(b"not a pdf") == DEFAULT_PAGE_COUNT


def test_whiteout_keeps_page_count():
    original = make_pdf(3)
    result = ContractPDFService.whiteout_last_page_footer(original)
    assert result.startswith(b"%PDF")
    assert ContractPDFService.get_page_count(result) == 3


def test_signing_dates_stamped_on_last_page():
    stamped = ContractPDFService.add_signing_date_to_pdf(
        make_pdf(2),
        "three-party",
        seller_signed_at=datetime(2025, 5, 1, 15, 30),
        buyer_signed_at="2025-05-02",
    )
    text = _last_page_text(stamped)
    assert "May 1, 2025" in text
    assert "May 2, 2025" in text
    assert "May 1, 2025" not in (PdfReader(io.BytesIO(stamped)).pages[0].extract_text() or "")


def test_layout_without_buyer_date_ignores_buyer_timestamp():
    stamped = ContractPDFService.add_signing_date_to_pdf(
        make_pdf(2), "two-column", seller_signed_at=None, buyer_signed_at="2025-05-02"
    )
    assert "May 2, 2025" not in _last_page_text(stamped)


def test_no_stamps_returns_original_bytes():
    original = make_pdf(1)
    assert ContractPDFService.add_signing_date_to_pdf(original, "nonexistent", datetime(2025, 1, 1)) == original


def test_build_html_appends_signature_page_only_with_layout():
    template = "<html><head></head><body><p>{{seller_name}}</p></body></html>"
    plain = ContractPDFService.build_html(template, {"seller_name": "Sam"})
    assert "<p>Sam</p>" in plain
    assert 'class="signature-page"' not in plain

    with_layout = ContractPDFService.build_html(template, {"seller_name": "Sam"}, "seller-only")
    assert 'class="signature-page"' in with_layout
