"""Domain model package."""

from allocation_report.models.allocation import (
    AllocationRow,
    ContextBlock,
    ContextKind,
    DateSpan,
    ExportFilePayload,
    GrandTotal,
    Month,
    MonthlyTotal,
    MonthValues,
    PortfolioTotal,
    ProcessedRow,
    ProcessedSheet,
    ProjectBarDatum,
    ReportData,
    RowLevel,
    SheetDescriptor,
    SheetEntry,
)

__all__ = [
    "AllocationRow",
    "ContextBlock",
    "ContextKind",
    "DateSpan",
    "ExportFilePayload",
    "GrandTotal",
    "Month",
    "MonthlyTotal",
    "MonthValues",
    "PortfolioTotal",
    "ProcessedRow",
    "ProcessedSheet",
    "ProjectBarDatum",
    "ReportData",
    "RowLevel",
    "SheetDescriptor",
    "SheetEntry",
]
