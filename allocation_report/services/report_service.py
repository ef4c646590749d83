"""Report pipeline: normalize, validate, aggregate, render."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from allocation_report.core.config import Settings, get_settings
from allocation_report.models.allocation import ExportFilePayload, ReportData
from allocation_report.services.aggregation import aggregate_report
from allocation_report.services.field_validator import validate_sheet_entries
from allocation_report.services.html_renderer import render_report_html
from allocation_report.services.payload_normalizer import build_descriptors, normalize_payload
from allocation_report.services.pdf_renderer import PDF_MEDIA_TYPE, PdfRenderer, PlaywrightPdfRenderer
from allocation_report.services.workbook_renderer import XLSX_MEDIA_TYPE, render_workbook, workbook_bytes

logger = logging.getLogger(__name__)

FILENAME_PREFIX = "Resource_Allocation"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def export_filename(extension: str, now: datetime | None = None) -> str:
    timestamp = (now or _utcnow()).strftime("%Y-%m-%dT%H-%M-%S")
    return f"{FILENAME_PREFIX}_{timestamp}.{extension}"


def _generated_on(payload: Any, now: datetime | None) -> str:
    meta = payload.get("meta") if isinstance(payload, Mapping) else None
    if isinstance(meta, Mapping) and meta.get("generatedOn"):
        return str(meta["generatedOn"])
    return (now or _utcnow()).strftime("%Y-%m-%d %H:%M:%S")


class ReportService:
    """Stateless per request; holds only settings and the PDF collaborator."""

    def __init__(self, settings: Settings | None = None, pdf_renderer: PdfRenderer | None = None) -> None:
        self.settings = settings or get_settings()
        self.pdf_renderer = pdf_renderer or PlaywrightPdfRenderer(self.settings)

    def prepare(self, payload: Any, *, now: datetime | None = None) -> ReportData:
        entries = normalize_payload(payload, default_sheet_name=self.settings.default_sheet_name)
        validate_sheet_entries(entries)
        descriptors = build_descriptors(entries)
        return aggregate_report(descriptors, generated_on=_generated_on(payload, now))

    def export_workbook(self, payload: Any, *, now: datetime | None = None) -> ExportFilePayload:
        report = self.prepare(payload, now=now)
        content = workbook_bytes(render_workbook(report.sheets))
        logger.info("Generated workbook with %d sheet(s) (%d bytes)", len(report.sheets), len(content))
        return ExportFilePayload(
            media_type=XLSX_MEDIA_TYPE,
            filename=export_filename("xlsx", now),
            content=content,
        )

    def render_html(self, payload: Any, *, hide_user_allocation: bool, now: datetime | None = None) -> str:
        report = self.prepare(payload, now=now)
        return render_report_html(report, hide_user_allocation=hide_user_allocation)

    def export_pdf(
        self,
        payload: Any,
        *,
        hide_user_allocation: bool,
        now: datetime | None = None,
    ) -> ExportFilePayload:
        html = self.render_html(payload, hide_user_allocation=hide_user_allocation, now=now)
        return ExportFilePayload(
            media_type=PDF_MEDIA_TYPE,
            filename=export_filename("pdf", now),
            content=self.pdf_renderer.render(html),
        )
