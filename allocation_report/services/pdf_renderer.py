"""HTML to PDF rendering through headless Chromium (Playwright)."""

from __future__ import annotations

import logging
from typing import Protocol

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from allocation_report.core.config import Settings
from allocation_report.core.errors import ReportGenerationError

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
PDF_MARGIN = {"top": "20mm", "right": "15mm", "bottom": "20mm", "left": "15mm"}

# Charts are inline SVG; they are ready once the document is complete and
# every svg element has been laid out.
GRAPHICS_READY_SCRIPT = """
() => document.readyState === 'complete'
    && Array.from(document.querySelectorAll('svg')).every((svg) => svg.getBoundingClientRect().width > 0)
"""


class PdfRenderer(Protocol):
    def render(self, html: str) -> bytes: ...


class PlaywrightPdfRenderer:
    """One browser per call, closed on every exit path. No retries."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def render(self, html: str) -> bytes:
        timeout = self.settings.pdf_render_timeout_ms
        try:
            with sync_playwright() as playwright:
                browser = playwright.chromium.launch(
                    headless=True,
                    args=self.settings.chromium_args,
                    timeout=timeout,
                )
                try:
                    page = browser.new_page()
                    page.set_default_timeout(timeout)
                    page.set_content(html, wait_until="load")
                    page.wait_for_function(GRAPHICS_READY_SCRIPT, timeout=timeout)
                    if self.settings.pdf_settle_ms:
                        page.wait_for_timeout(self.settings.pdf_settle_ms)
                    pdf_bytes = page.pdf(
                        format=self.settings.pdf_page_format,
                        print_background=True,
                        margin=PDF_MARGIN,
                    )
                finally:
                    browser.close()
        except PlaywrightError as exc:
            logger.exception("PDF rendering failed")
            raise ReportGenerationError(f"PDF rendering failed: {exc}") from exc

        logger.info("Rendered PDF (%d bytes)", len(pdf_bytes))
        return pdf_bytes
