"""Spreadsheet, PDF and HTML preview generation endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.responses import HTMLResponse, Response

from allocation_report.core.config import Settings, get_settings
from allocation_report.core.errors import ReportError, ReportGenerationError
from allocation_report.models.allocation import ExportFilePayload
from allocation_report.services.pdf_renderer import PdfRenderer, PlaywrightPdfRenderer
from allocation_report.services.report_service import ReportService

router = APIRouter(tags=["exports"])


def get_pdf_renderer(settings: Settings = Depends(get_settings)) -> PdfRenderer:
    return PlaywrightPdfRenderer(settings)


def _service(settings: Settings, pdf_renderer: PdfRenderer) -> ReportService:
    return ReportService(settings=settings, pdf_renderer=pdf_renderer)


def _http_error(exc: ReportError, failure_detail: str) -> HTTPException:
    if isinstance(exc, ReportGenerationError):
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"{failure_detail}: {exc}",
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _attachment(exported: ExportFilePayload) -> Response:
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )


def _pdf_response(service: ReportService, payload: dict[str, Any], hide_user_allocation: bool) -> Response:
    try:
        exported = service.export_pdf(payload, hide_user_allocation=hide_user_allocation)
    except ReportError as exc:
        raise _http_error(exc, "Failed to generate PDF file") from exc
    return _attachment(exported)


@router.post("/generate-excel")
def generate_excel(
    payload: dict[str, Any] = Body(...),
    settings: Settings = Depends(get_settings),
    pdf_renderer: PdfRenderer = Depends(get_pdf_renderer),
) -> Response:
    service = _service(settings, pdf_renderer)
    try:
        exported = service.export_workbook(payload)
    except ReportError as exc:
        raise _http_error(exc, "Failed to generate Excel file") from exc
    return _attachment(exported)


@router.post("/generate-pdf")
def generate_pdf(
    payload: dict[str, Any] = Body(...),
    hide_user_allocation: bool = Query(default=False),
    settings: Settings = Depends(get_settings),
    pdf_renderer: PdfRenderer = Depends(get_pdf_renderer),
) -> Response:
    return _pdf_response(_service(settings, pdf_renderer), payload, hide_user_allocation)


@router.post("/generate-pdf/simple")
def generate_pdf_simple(
    payload: dict[str, Any] = Body(...),
    settings: Settings = Depends(get_settings),
    pdf_renderer: PdfRenderer = Depends(get_pdf_renderer),
) -> Response:
    return _pdf_response(_service(settings, pdf_renderer), payload, True)


@router.post("/preview-html", response_class=HTMLResponse)
def preview_html(
    payload: dict[str, Any] = Body(...),
    hide_user_allocation: bool = Query(default=False),
    settings: Settings = Depends(get_settings),
    pdf_renderer: PdfRenderer = Depends(get_pdf_renderer),
) -> HTMLResponse:
    service = _service(settings, pdf_renderer)
    try:
        html = service.render_html(payload, hide_user_allocation=hide_user_allocation)
    except ReportError as exc:
        raise _http_error(exc, "Failed to render report") from exc
    return HTMLResponse(content=html)
