"""Printable HTML report with inline SVG charts.

The document is self-contained (no scripts, no external assets) so the
PDF renderer only has to load and print it.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from html import escape

from allocation_report.models.allocation import (
    ContextBlock,
    ContextKind,
    DateSpan,
    GrandTotal,
    PortfolioTotal,
    ProcessedRow,
    ProcessedSheet,
    ProjectBarDatum,
    ReportData,
)
from allocation_report.services.chart_geometry import (
    BarChartGeometry,
    GaugeGeometry,
    build_gauge,
    build_grouped_bar_chart,
    build_stacked_bar_chart,
)

REPORT_TITLE = "Resource Allocation Report"

SERIES_COLORS = {
    "allocated": "#9aa5b1",
    "actual": "#1f6feb",
    "remaining": "#d0d7de",
    "used": "#2da44e",
}
GAUGE_TRACK_COLOR = "#e5e7eb"
GAUGE_VALUE_COLOR = "#1f6feb"
GAUGE_OVERFLOW_COLOR = "#cf222e"

STYLESHEET = """
@page { size: A4; }
body { font-family: Arial, Helvetica, sans-serif; color: #1f2328; font-size: 11px; margin: 0; }
.report-header { border-bottom: 2px solid #333; margin-bottom: 16px; padding-bottom: 8px; }
.report-header h1 { font-size: 20px; margin: 0 0 4px 0; }
.report-header p { color: #57606a; margin: 0; }
.sheet { page-break-inside: auto; }
.sheet + .sheet { page-break-before: always; }
.sheet h2 { font-size: 16px; margin: 0 0 8px 0; }
.sheet h3 { font-size: 13px; margin: 16px 0 6px 0; }
.context-block { background: #f6f8fa; border-left: 3px solid #333; padding: 8px 12px; margin-bottom: 12px; }
.context-block p { margin: 2px 0; }
.context-block ul { margin: 4px 0 0 16px; padding: 0; }
.kpis { display: flex; align-items: center; gap: 24px; }
.kpis dl { display: grid; grid-template-columns: auto auto; gap: 4px 16px; margin: 0; }
.kpis dt { color: #57606a; }
.kpis dd { margin: 0; font-weight: bold; text-align: right; }
table { border-collapse: collapse; width: 100%; page-break-inside: auto; }
tr { page-break-inside: avoid; }
th { background: #333; color: #fff; padding: 4px 6px; text-align: center; }
td { border: 1px solid #b0b0b0; padding: 3px 6px; text-align: right; }
td.label { text-align: left; }
tr.role td { background: #e0e0e0; font-weight: bold; }
tr.user td.label { padding-left: 20px; }
tr.grand-total td { background: #333; color: #fff; font-weight: bold; }
.legend span { display: inline-block; margin-right: 12px; }
.legend i { display: inline-block; width: 10px; height: 10px; margin-right: 4px; }
"""


def format_number(value: float) -> str:
    return f"{value or 0:,.2f}"


def format_percent(value: float) -> str:
    return f"{value or 0:,.2f}%"


def format_date(value: str) -> str:
    try:
        return date.fromisoformat(value[:10]).strftime("%d %b %Y")
    except ValueError:
        return value


def format_span(span: DateSpan) -> str:
    if span.start and span.end:
        return f"{format_date(span.start)} to {format_date(span.end)}"
    if span.start:
        return f"from {format_date(span.start)}"
    return f"until {format_date(span.end or '')}"


def _svg_number(value: float) -> str:
    return f"{value:.2f}"


# ---------- Charts ----------
def render_gauge_svg(gauge: GaugeGeometry) -> str:
    parts = [
        f'<svg class="gauge" xmlns="http://www.w3.org/2000/svg" width="{_svg_number(gauge.width)}" '
        f'height="{_svg_number(gauge.height)}" viewBox="0 0 {_svg_number(gauge.width)} {_svg_number(gauge.height)}">',
        f'<path d="{gauge.track_path}" fill="none" stroke="{GAUGE_TRACK_COLOR}" stroke-width="24"/>',
    ]
    if gauge.value_path:
        parts.append(f'<path d="{gauge.value_path}" fill="none" stroke="{GAUGE_VALUE_COLOR}" stroke-width="24"/>')
    if gauge.overflow_path:
        parts.append(f'<path d="{gauge.overflow_path}" fill="{GAUGE_OVERFLOW_COLOR}" fill-opacity="0.8"/>')
    parts.append(
        f'<text x="{_svg_number(gauge.center.x)}" y="{_svg_number(gauge.center.y - 8)}" text-anchor="middle" '
        f'font-size="24" font-weight="bold">{escape(format_percent(gauge.pct))}</text>'
    )
    parts.append(
        f'<text x="{_svg_number(gauge.center.x)}" y="{_svg_number(gauge.center.y + 14)}" text-anchor="middle" '
        f'font-size="11" fill="#57606a">Effort Utilized</text>'
    )
    parts.append("</svg>")
    return "".join(parts)


def render_bar_chart_svg(chart: BarChartGeometry) -> str:
    layout = chart.layout
    header = (
        f'<svg class="bar-chart" xmlns="http://www.w3.org/2000/svg" width="{_svg_number(layout.width)}" '
        f'height="{_svg_number(layout.height)}" viewBox="0 0 {_svg_number(layout.width)} {_svg_number(layout.height)}">'
    )
    if chart.is_empty:
        return (
            f"{header}"
            f'<rect x="0" y="0" width="{_svg_number(layout.width)}" height="{_svg_number(layout.height)}" '
            f'fill="#f6f8fa" stroke="#d0d7de"/>'
            f'<text class="placeholder" x="{_svg_number(layout.width / 2)}" y="{_svg_number(layout.height / 2)}" '
            f'text-anchor="middle" fill="#57606a" font-size="14">{escape(chart.placeholder or "")}</text>'
            "</svg>"
        )

    right = layout.margin_left + layout.plot_width
    parts = [header]
    for tick in chart.ticks:
        parts.append(
            f'<line x1="{_svg_number(layout.margin_left)}" y1="{_svg_number(tick.y)}" x2="{_svg_number(right)}" '
            f'y2="{_svg_number(tick.y)}" stroke="#e5e7eb"/>'
            f'<text x="{_svg_number(layout.margin_left - 6)}" y="{_svg_number(tick.y + 3)}" text-anchor="end" '
            f'font-size="9" fill="#57606a">{escape(tick.label)}</text>'
        )
    for bar in chart.bars:
        parts.append(
            f'<rect class="bar-{bar.series}" x="{_svg_number(bar.x)}" y="{_svg_number(bar.y)}" '
            f'width="{_svg_number(bar.width)}" height="{_svg_number(bar.height)}" '
            f'fill="{SERIES_COLORS.get(bar.series, "#999")}"/>'
        )
    for bar in chart.bars:
        if bar.label:
            parts.append(
                f'<text x="{_svg_number(bar.label_x)}" y="{_svg_number(bar.label_y)}" text-anchor="middle" '
                f'font-size="9">{escape(bar.label)}</text>'
            )
    for label in chart.category_labels:
        if label.rotation:
            parts.append(
                f'<text x="{_svg_number(label.x)}" y="{_svg_number(label.y)}" text-anchor="end" font-size="9" '
                f'transform="rotate({_svg_number(label.rotation)} {_svg_number(label.x)} {_svg_number(label.y)})">'
                f"{escape(label.text)}</text>"
            )
        else:
            parts.append(
                f'<text x="{_svg_number(label.x)}" y="{_svg_number(label.y)}" text-anchor="middle" '
                f'font-size="9">{escape(label.text)}</text>'
            )
    parts.append(
        f'<line x1="{_svg_number(layout.margin_left)}" y1="{_svg_number(layout.baseline)}" '
        f'x2="{_svg_number(right)}" y2="{_svg_number(layout.baseline)}" stroke="#57606a"/>'
    )
    parts.append("</svg>")
    return "".join(parts)


def _legend(*series: tuple[str, str]) -> str:
    items = "".join(
        f'<span><i style="background:{SERIES_COLORS[key]}"></i>{escape(title)}</span>' for key, title in series
    )
    return f'<div class="legend">{items}</div>'


# ---------- Blocks ----------
def render_context_block(block: ContextBlock | None) -> str:
    if block is None:
        return ""
    lines: list[str] = []
    if block.description:
        lines.append(f"<p>{escape(block.description)}</p>")
    if block.span is not None:
        title = "Portfolio period" if block.kind is ContextKind.SUMMARY else "Project period"
        lines.append(f"<p><strong>{title}:</strong> {escape(format_span(block.span))}</p>")
    if block.reporting_period is not None:
        lines.append(f"<p><strong>Reporting period:</strong> {escape(format_span(block.reporting_period))}</p>")
    if block.metric_definitions:
        items = "".join(f"<li>{escape(item)}</li>" for item in block.metric_definitions)
        lines.append(f"<p><strong>Metric definitions:</strong></p><ul>{items}</ul>")
    if not lines:
        return ""
    return f'<div class="context-block">{"".join(lines)}</div>'


def render_kpis(total: GrandTotal) -> str:
    figures = (
        ("Allocated Hours", format_number(total.allocated)),
        ("Actual Hours", format_number(total.actual)),
        ("Variance", format_number(total.variance)),
        ("Effort Utilized", format_percent(total.effort_pct)),
    )
    items = "".join(f"<dt>{title}</dt><dd>{value}</dd>" for title, value in figures)
    gauge = render_gauge_svg(build_gauge(total.actual, total.allocated))
    return f'<div class="kpis">{gauge}<dl>{items}</dl></div>'


def render_projects_comparison(projects: Sequence[ProjectBarDatum], portfolio: PortfolioTotal) -> str:
    chart = render_bar_chart_svg(build_stacked_bar_chart(projects))
    body = "".join(
        "<tr>"
        f'<td class="label" title="{escape(project.full_name)}">{escape(project.full_name)}</td>'
        f"<td>{format_number(project.allocated)}</td>"
        f"<td>{format_number(project.used)}</td>"
        f"<td>{format_number(project.unused)}</td>"
        f"<td>{format_percent(project.utilization)}</td>"
        "</tr>"
        for project in projects
    )
    footer = (
        '<tr class="grand-total">'
        f'<td class="label">PORTFOLIO TOTAL ({portfolio.project_count})</td>'
        f"<td>{format_number(portfolio.allocated)}</td>"
        f"<td>{format_number(portfolio.actual)}</td>"
        f"<td>{format_number(sum(project.unused for project in projects))}</td>"
        f"<td>{format_percent(portfolio.effort_pct)}</td>"
        "</tr>"
    )
    return (
        "<h3>Project Comparison</h3>"
        f'{_legend(("used", "Used"), ("remaining", "Remaining"))}{chart}'
        '<table class="projects"><thead><tr><th>Project</th><th>Allocated Hours</th><th>Used Hours</th>'
        f"<th>Remaining Hours</th><th>Utilization</th></tr></thead><tbody>{body}{footer}</tbody></table>"
    )


def render_monthly_chart(sheet: ProcessedSheet) -> str:
    totals = sheet.monthly_totals
    chart = build_grouped_bar_chart(
        [total.label for total in totals],
        [total.planned for total in totals],
        [total.actual for total in totals],
    )
    return (
        "<h3>Allocated vs Actual by Month</h3>"
        f'{_legend(("allocated", "Allocated"), ("actual", "Actual"))}{render_bar_chart_svg(chart)}'
    )


def _row_cells(row: ProcessedRow, hide_user_allocation: bool) -> tuple[str, str, str, str]:
    if hide_user_allocation and not row.is_role:
        return "", format_number(row.actual), "", ""
    return (
        format_number(row.allocated),
        format_number(row.actual),
        format_number(row.variance),
        format_percent(row.effort_pct),
    )


def render_rows_table(sheet: ProcessedSheet, *, hide_user_allocation: bool) -> str:
    """Row table; in simplified mode user rows show only label and actual hours."""

    body: list[str] = []
    for row in sheet.rows:
        allocated, actual, variance, effort = _row_cells(row, hide_user_allocation)
        css_class = "role" if row.is_role else "user"
        body.append(
            f'<tr class="{css_class}"><td class="label">{escape(row.label)}</td>'
            f"<td>{allocated}</td><td>{actual}</td><td>{variance}</td><td>{effort}</td></tr>"
        )
    total = sheet.grand_total
    body.append(
        '<tr class="grand-total"><td class="label">GRAND TOTAL</td>'
        f"<td>{format_number(total.allocated)}</td><td>{format_number(total.actual)}</td>"
        f"<td>{format_number(total.variance)}</td><td>{format_percent(total.effort_pct)}</td></tr>"
    )
    return (
        '<table class="allocation"><thead><tr><th>Role/User</th><th>Allocated Hours</th><th>Actual Hours</th>'
        f'<th>Variance</th><th>Effort Utilized</th></tr></thead><tbody>{"".join(body)}</tbody></table>'
    )


def render_sheet_section(
    sheet: ProcessedSheet,
    index: int,
    report: ReportData,
    *,
    hide_user_allocation: bool,
) -> str:
    parts = [
        f'<section class="sheet" data-sheet-index="{index}">',
        f"<h2>{escape(sheet.sheet_name)}</h2>",
        render_context_block(sheet.context_block),
        render_kpis(sheet.grand_total),
    ]
    if sheet.is_summary:
        parts.append(render_projects_comparison(report.projects_bar_data, report.portfolio))
    parts.append(render_monthly_chart(sheet))
    parts.append(render_rows_table(sheet, hide_user_allocation=hide_user_allocation))
    parts.append("</section>")
    return "".join(parts)


def render_report_html(report: ReportData, *, hide_user_allocation: bool) -> str:
    """Compose the complete HTML document handed to the PDF renderer."""

    sections = "".join(
        render_sheet_section(sheet, index, report, hide_user_allocation=hide_user_allocation)
        for index, sheet in enumerate(report.sheets)
    )
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8">'
        f"<title>{REPORT_TITLE}</title><style>{STYLESHEET}</style></head><body>"
        f'<header class="report-header"><h1>{REPORT_TITLE}</h1>'
        f"<p>Generated on {escape(report.generated_on)}</p></header>"
        f"{sections}</body></html>"
    )
