from __future__ import annotations

from typing import Any

from allocation_report.models.allocation import ContextBlock, ContextKind, DateSpan, ReportData
from allocation_report.services.aggregation import aggregate_report
from allocation_report.services.html_renderer import (
    format_span,
    render_context_block,
    render_report_html,
)
from allocation_report.services.payload_normalizer import build_descriptors, normalize_payload

ROLE_ROW = (
    '<tr class="role"><td class="label">Developer</td>'
    "<td>160.00</td><td>120.00</td><td>40.00</td><td>75.00%</td></tr>"
)


def _report(payload: dict[str, Any]) -> ReportData:
    return aggregate_report(build_descriptors(normalize_payload(payload)), generated_on="2025-04-01 09:00:00")


def test_extended_mode_populates_every_row(single_sheet_payload: dict[str, Any]) -> None:
    html = render_report_html(_report(single_sheet_payload), hide_user_allocation=False)

    assert ROLE_ROW in html
    assert (
        '<tr class="user"><td class="label">Jane Doe</td>'
        "<td>160.00</td><td>120.00</td><td>40.00</td><td>75.00%</td></tr>"
    ) in html


def test_simplified_mode_blanks_user_allocation(single_sheet_payload: dict[str, Any]) -> None:
    html = render_report_html(_report(single_sheet_payload), hide_user_allocation=True)

    assert ROLE_ROW in html
    assert '<tr class="user"><td class="label">Jane Doe</td><td></td><td>120.00</td><td></td><td></td></tr>' in html
    assert (
        '<tr class="grand-total"><td class="label">GRAND TOTAL</td>'
        "<td>160.00</td><td>120.00</td><td>40.00</td><td>75.00%</td></tr>"
    ) in html


def test_document_structure(single_sheet_payload: dict[str, Any]) -> None:
    html = render_report_html(_report(single_sheet_payload), hide_user_allocation=False)

    assert html.startswith("<!DOCTYPE html>")
    assert "Generated on 2025-04-01 09:00:00" in html
    assert html.count('<section class="sheet"') == 1
    assert '<svg class="gauge"' in html
    assert '<rect class="bar-allocated"' in html
    assert "Project Comparison" not in html
    assert "<script" not in html


def test_summary_sheet_has_project_comparison(multi_sheet_payload: dict[str, Any]) -> None:
    html = render_report_html(_report(multi_sheet_payload), hide_user_allocation=False)

    assert html.count('<section class="sheet"') == 3
    assert html.count("Project Comparison") == 1
    assert html.count('<rect class="bar-used"') == 2
    assert "PORTFOLIO TOTAL (2)" in html
    assert "Summary - 2 projects" in html
    assert "125.0%" in html


def test_sheet_without_months_renders_placeholder_chart() -> None:
    html = render_report_html(
        _report({"meta": {"months": []}, "rows": []}),
        hide_user_allocation=False,
    )

    assert "No data available" in html
    assert "GRAND TOTAL" in html


def test_labels_are_escaped(single_sheet_payload: dict[str, Any]) -> None:
    single_sheet_payload["rows"][0]["label"] = "<b>R&D</b>"

    html = render_report_html(_report(single_sheet_payload), hide_user_allocation=False)

    assert "&lt;b&gt;R&amp;D&lt;/b&gt;" in html
    assert "<b>R&D</b>" not in html


def test_context_block_hides_absent_lines() -> None:
    block = ContextBlock(kind=ContextKind.PROJECT, span=DateSpan(start="2025-01-01", end="2025-02-28"))

    rendered = render_context_block(block)

    assert "Project period:</strong> 01 Jan 2025 to 28 Feb 2025" in rendered
    assert "Reporting period" not in rendered
    assert "Metric definitions" not in rendered
    assert render_context_block(None) == ""
    assert render_context_block(ContextBlock(kind=ContextKind.SUMMARY)) == ""


def test_format_span_variants() -> None:
    assert format_span(DateSpan(start="2025-01-01")) == "from 01 Jan 2025"
    assert format_span(DateSpan(end="2025-03-31")) == "until 31 Mar 2025"
    assert format_span(DateSpan(start="Q1", end="Q2")) == "Q1 to Q2"


def test_non_finite_and_oversized_numbers_render_as_zero(single_sheet_payload: dict[str, Any]) -> None:
    role = single_sheet_payload["rows"][0]
    role["allocated_effort_to_date"] = float("inf")
    role["actual_effort_to_date"] = 10**400
    role["months"]["2025-03"] = {"planned": "nan", "actual": float("nan")}

    html = render_report_html(_report(single_sheet_payload), hide_user_allocation=False)

    assert '<tr class="grand-total"><td class="label">GRAND TOTAL</td><td>0.00</td><td>0.00</td>' in html
    assert "nan" not in html.lower()
    assert "Infinity" not in html
    assert '<rect class="bar-allocated"' in html
