"""Contract PDF generation service"""

import asyncio
import base64
import io
import json
import logging
import os
import subprocess
import sys
from datetime import date
from typing import Optional

from PyPDF2 import PdfReader, PdfWriter
from reportlab.pdfgen import canvas
from sqlalchemy.orm import Session

from .repository import ContractRepository
from .signature_layouts import SIGNING_DATE_POSITIONS
from .template_renderer import (
    append_signature_page,
    footer_template,
    format_long_date,
    inject_fonts,
    interpolate_template,
    load_file_template,
    resolve_state_code,
)

logger = logging.getLogger(__name__)

PDF_WORKER_TIMEOUT = 120
FOOTER_HEIGHT_PT = 72  # 1in bottom margin
DEFAULT_PAGE_COUNT = 5
DATE_FONT = "Times-Roman"
DATE_FONT_SIZE = 10


class ContractPDFService:
    """Service for contract PDF generation and post-processing"""

    @staticmethod
    def load_template(
        db: Session,
        template_type: str,
        state: Optional[str] = None,
        company_template_id: Optional[int] = None,
        company_id: Optional[int] = None,
    ) -> tuple[str, Optional[str]]:
        """
        Template HTML and signature layout. Priority:
        company template > customized state template > GENERAL template > bundled file.
        Only company templates carry a signature layout.
        """
        repo = ContractRepository()

        if company_template_id:
            template = repo.get_contract_template(db, company_template_id, company_id)
            if template and template.html_content:
                logger.info(
                    f"📝 Using company template {template.name} with layout {template.signature_layout}"
                )
                return template.html_content, template.signature_layout

        _source, html = ContractPDFService.resolve_state_template(db, template_type, state)
        return html, None

    @staticmethod
    def resolve_state_template(db: Session, template_type: str, state: Optional[str]) -> tuple[str, str]:
        """
        (source, html) for a contract type in a state. Purchase agreements use the
        customized state template, then GENERAL. Assignments always use the bundled file.
        """
        repo = ContractRepository()
        state_code = resolve_state_code(state)
        if template_type == "purchase" and state_code:
            if state_code != "GENERAL":
                state_template = repo.get_state_template(db, state_code)
                if (
                    state_template
                    and state_template.is_purchase_customized
                    and state_template.purchase_agreement_html
                ):
                    return "state", state_template.purchase_agreement_html

            general = repo.get_state_template(db, "GENERAL")
            if general and general.purchase_agreement_html:
                return "general", general.purchase_agreement_html

        return "default", load_file_template(template_type)

    @staticmethod
    def build_html(
        template_html: str,
        data: dict,
        signature_layout: Optional[str] = None,
        today: Optional[date] = None,
    ) -> str:
        """Interpolate, inject fonts and append a signature page for layout-bearing templates"""
        html = interpolate_template(template_html, data, today=today)
        html = inject_fonts(html)
        if signature_layout:
            html = append_signature_page(html, signature_layout, data, today=today)
        return html

    @staticmethod
    async def html_to_pdf(html: str, footer_html: str) -> bytes:
        """
        Convert HTML to PDF using Playwright in a worker subprocess.
        Runs in a thread so the event loop is never blocked.
        """
        worker_path = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "pdf_worker.py"))
        payload = json.dumps({"html": html, "footer_template": footer_html})
        payload_b64 = base64.b64encode(payload.encode("utf-8")).decode("utf-8")

        def run_worker() -> bytes:
            try:
                result = subprocess.run(
                    [sys.executable, worker_path],
                    input=payload_b64,
                    capture_output=True,
                    text=True,
                    timeout=PDF_WORKER_TIMEOUT,
                )
            except subprocess.TimeoutExpired as e:
                raise Exception(f"PDF generation timed out after {PDF_WORKER_TIMEOUT} seconds") from e

            if result.returncode != 0:
                raise Exception(f"PDF worker failed (exit {result.returncode}): {result.stderr}")

            pdf_b64 = result.stdout.strip()
            if not pdf_b64:
                raise Exception("PDF worker returned empty output")
            return base64.b64decode(pdf_b64)

        return await asyncio.to_thread(run_worker)

    @staticmethod
    def _overlay_last_page(pdf_bytes: bytes, draw) -> bytes:
        """Draw on a reportlab canvas sized to the last page and merge it onto that page"""
        reader = PdfReader(io.BytesIO(pdf_bytes))
        writer = PdfWriter()
        last_index = len(reader.pages) - 1

        for index, page in enumerate(reader.pages):
            if index == last_index:
                width = float(page.mediabox.width)
                height = float(page.mediabox.height)
                buffer = io.BytesIO()
                overlay = canvas.Canvas(buffer, pagesize=(width, height))
                draw(overlay, width, height)
                overlay.save()
                buffer.seek(0)
                page.merge_page(PdfReader(buffer).pages[0])
            writer.add_page(page)

        output = io.BytesIO()
        writer.write(output)
        return output.getvalue()

    @staticmethod
    def whiteout_last_page_footer(pdf_bytes: bytes) -> bytes:
        """The signature page carries no initials footer: paint the bottom inch white"""

        def draw(c, width, _height):
            c.setFillColorRGB(1, 1, 1)
            c.setStrokeColorRGB(1, 1, 1)
            c.rect(0, 0, width, FOOTER_HEIGHT_PT, stroke=0, fill=1)

        return ContractPDFService._overlay_last_page(pdf_bytes, draw)

    @staticmethod
    def get_page_count(pdf_bytes: bytes) -> int:
        try:
            count = len(PdfReader(io.BytesIO(pdf_bytes)).pages)
            logger.info(f"📄 PDF has {count} pages")
            return count
        except Exception as e:
            logger.error(f"❌ Failed to read PDF page count, assuming {DEFAULT_PAGE_COUNT}: {e}")
            return DEFAULT_PAGE_COUNT

    @staticmethod
    def add_signing_date_to_pdf(
        pdf_bytes: bytes,
        signature_layout: Optional[str],
        seller_signed_at=None,
        buyer_signed_at=None,
    ) -> bytes:
        """Stamp signing dates onto the date lines of the executed signature page"""
        positions = SIGNING_DATE_POSITIONS.get(signature_layout or "", {})
        stamps = []
        if "seller" in positions and seller_signed_at:
            stamps.append((positions["seller"], format_long_date(seller_signed_at)))
        if "buyer" in positions and buyer_signed_at:
            stamps.append((positions["buyer"], format_long_date(buyer_signed_at)))

        if not stamps:
            return pdf_bytes

        def draw(c, width, height):
            c.setFont(DATE_FONT, DATE_FONT_SIZE)
            c.setFillColorRGB(0, 0, 0)
            for (x_pct, y_pct), text in stamps:
                # Percent coordinates are top-left based; PDF origin is bottom-left
                c.drawString((x_pct / 100) * width, height - (y_pct / 100) * height, text)

        return ContractPDFService._overlay_last_page(pdf_bytes, draw)

    @classmethod
    async def generate_contract_pdf(
        cls,
        db: Session,
        template_type: str,
        data: dict,
        company_template_id: Optional[int] = None,
        company_id: Optional[int] = None,
    ) -> tuple[bytes, Optional[str]]:
        """Render a contract to PDF. Returns (pdf_bytes, signature_layout)."""
        template_html, signature_layout = cls.load_template(
            db, template_type, data.get("property_state"), company_template_id, company_id
        )
        html = cls.build_html(template_html, data, signature_layout)
        footer_html = footer_template(data.get("buyer_initials"), signature_layout)

        pdf_bytes = await cls.html_to_pdf(html, footer_html)
        return cls.whiteout_last_page_footer(pdf_bytes), signature_layout
