"""
Standalone PDF generation worker script.
This runs as a separate process so Playwright's sync API never shares the server's event loop.

stdin:  base64 JSON {"html": ..., "footer_template": ...}
stdout: base64 PDF
"""

import base64
import json
import sys

from playwright.sync_api import sync_playwright


def generate_pdf(html: str, footer_template: str) -> bytes:
    """Render contract HTML to a Letter-size PDF with a page footer"""
    with sync_playwright() as p:
        browser = p.chromium.launch()
        page = browser.new_page()
        page.set_content(html, wait_until="networkidle")
        pdf = page.pdf(
            format="Letter",
            margin={"top": "0.5in", "right": "0.5in", "bottom": "1in", "left": "0.5in"},
            print_background=True,
            display_header_footer=True,
            header_template="<div></div>",
            footer_template=footer_template,
        )
        browser.close()
        return pdf


if __name__ == "__main__":
    payload = json.loads(base64.b64decode(sys.stdin.read()).decode("utf-8"))

    pdf_bytes = generate_pdf(payload["html"], payload.get("footer_template") or "<div></div>")

    sys.stdout.write(base64.b64encode(pdf_bytes).decode("utf-8"))
