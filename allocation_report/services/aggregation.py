"""Row, sheet and portfolio level aggregation.

Totals are taken from role rows only; user rows repeat allocation that is
already attributed to their role. The portfolio is rolled up from the
per-sheet grand totals, never from raw rows.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from allocation_report.models.allocation import (
    AllocationRow,
    GrandTotal,
    Month,
    MonthlyTotal,
    MonthValues,
    PortfolioTotal,
    ProcessedRow,
    ProcessedSheet,
    ProjectBarDatum,
    ReportData,
    SheetDescriptor,
)
from allocation_report.services.context_block import resolve_context_block

logger = logging.getLogger(__name__)

PROJECT_LABEL_MAX_LENGTH = 20
ZERO_MONTH = MonthValues()


def _effort_pct(allocated: float, actual: float) -> float:
    if allocated > 0:
        return actual / allocated * 100
    return 0.0


def process_row(row: AllocationRow) -> ProcessedRow:
    # Row-level percentages are trusted as supplied; only totals are derived.
    return ProcessedRow(
        label=row.label,
        allocated=row.allocated,
        actual=row.actual,
        variance=row.allocated - row.actual,
        effort_pct=row.effort_pct or 0.0,
        is_role=row.is_role,
        months=dict(row.months),
    )


def _role_rows(rows: Iterable[AllocationRow]) -> list[AllocationRow]:
    return [row for row in rows if row.is_role]


def compute_grand_total(rows: Iterable[AllocationRow]) -> GrandTotal:
    allocated = 0.0
    actual = 0.0
    for row in _role_rows(rows):
        allocated += row.allocated
        actual += row.actual
    return GrandTotal(
        allocated=allocated,
        actual=actual,
        variance=allocated - actual,
        effort_pct=_effort_pct(allocated, actual),
    )


def compute_monthly_totals(rows: Iterable[AllocationRow], months: Sequence[Month]) -> tuple[MonthlyTotal, ...]:
    """Sum role-row month values by month key, in declared month order."""

    sums: dict[str, tuple[float, float]] = {month.key: (0.0, 0.0) for month in months}
    for row in _role_rows(rows):
        for month in months:
            values = row.months.get(month.key, ZERO_MONTH)
            planned, actual = sums[month.key]
            sums[month.key] = (planned + values.planned, actual + values.actual)
    return tuple(
        MonthlyTotal(key=month.key, label=month.label, planned=sums[month.key][0], actual=sums[month.key][1])
        for month in months
    )


def aggregate_sheet(descriptor: SheetDescriptor) -> ProcessedSheet:
    return ProcessedSheet(
        descriptor=descriptor,
        rows=tuple(process_row(row) for row in descriptor.rows),
        grand_total=compute_grand_total(descriptor.rows),
        monthly_totals=compute_monthly_totals(descriptor.rows, descriptor.months),
        context_block=resolve_context_block(descriptor.context),
    )


def _project_sheets(sheets: Iterable[ProcessedSheet]) -> list[ProcessedSheet]:
    return [sheet for sheet in sheets if not sheet.is_summary]


def compute_portfolio_total(sheets: Iterable[ProcessedSheet]) -> PortfolioTotal:
    projects = _project_sheets(sheets)
    allocated = sum(sheet.grand_total.allocated for sheet in projects)
    actual = sum(sheet.grand_total.actual for sheet in projects)
    return PortfolioTotal(
        allocated=allocated,
        actual=actual,
        variance=allocated - actual,
        effort_pct=_effort_pct(allocated, actual),
        project_count=len(projects),
    )


def short_project_label(name: str, max_length: int = PROJECT_LABEL_MAX_LENGTH) -> str:
    cleaned = " ".join(name.split())
    if len(cleaned) <= max_length:
        return cleaned
    return cleaned[: max_length - 3].rstrip() + "..."


def build_projects_bar_data(sheets: Iterable[ProcessedSheet]) -> tuple[ProjectBarDatum, ...]:
    data: list[ProjectBarDatum] = []
    for sheet in _project_sheets(sheets):
        total = sheet.grand_total
        data.append(
            ProjectBarDatum(
                label=short_project_label(sheet.sheet_name),
                full_name=sheet.sheet_name,
                allocated=total.allocated,
                used=total.actual,
                unused=max(0.0, total.allocated - total.actual),
                utilization=total.effort_pct,
            )
        )
    return tuple(data)


def aggregate_report(descriptors: Sequence[SheetDescriptor], *, generated_on: str) -> ReportData:
    sheets = tuple(aggregate_sheet(descriptor) for descriptor in descriptors)
    logger.info("Aggregated %d sheet(s), %d row(s)", len(sheets), sum(len(sheet.rows) for sheet in sheets))
    return ReportData(
        generated_on=generated_on,
        sheets=sheets,
        portfolio=compute_portfolio_total(sheets),
        projects_bar_data=build_projects_bar_data(sheets),
    )
