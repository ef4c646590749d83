"""Canonical domain types for resource allocation reports."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

SUMMARY_SHEET_NAME = "Summary"


class RowLevel(str, enum.Enum):
    ROLE = "role"
    USER = "user"


class ContextKind(str, enum.Enum):
    SUMMARY = "summary"
    PROJECT = "project"


@dataclass(slots=True)
class SheetEntry:
    """One raw sheet as found in the payload, before any interpretation."""

    sheet_name: str
    payload: dict[str, Any]


@dataclass(frozen=True, slots=True)
class Month:
    key: str
    label: str


@dataclass(frozen=True, slots=True)
class MonthValues:
    planned: float = 0.0
    actual: float = 0.0


@dataclass(frozen=True, slots=True)
class AllocationRow:
    """Single allocation record in canonical field names.

    ``role_key`` / ``parent_role_key`` / ``user_sys_id`` are display-only
    back references and are never resolved.
    """

    level: str
    label: str
    allocated: float
    actual: float
    effort_pct: float | None
    months: dict[str, MonthValues] = field(default_factory=dict)
    role_key: str | None = None
    parent_role_key: str | None = None
    user_sys_id: str | None = None

    @property
    def is_role(self) -> bool:
        return self.level == RowLevel.ROLE.value


@dataclass(frozen=True, slots=True)
class SheetDescriptor:
    original_name: str
    sheet_name: str
    rows: tuple[AllocationRow, ...]
    months: tuple[Month, ...]
    context: dict[str, Any] | None = None

    @property
    def is_summary(self) -> bool:
        return self.original_name == SUMMARY_SHEET_NAME


@dataclass(frozen=True, slots=True)
class GrandTotal:
    allocated: float
    actual: float
    variance: float
    effort_pct: float


@dataclass(frozen=True, slots=True)
class PortfolioTotal:
    allocated: float
    actual: float
    variance: float
    effort_pct: float
    project_count: int


@dataclass(frozen=True, slots=True)
class MonthlyTotal:
    key: str
    label: str
    planned: float
    actual: float


@dataclass(frozen=True, slots=True)
class ProcessedRow:
    label: str
    allocated: float
    actual: float
    variance: float
    effort_pct: float
    is_role: bool
    months: dict[str, MonthValues] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class DateSpan:
    start: str | None = None
    end: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.start is None and self.end is None


@dataclass(frozen=True, slots=True)
class ContextBlock:
    kind: ContextKind
    description: str | None = None
    span: DateSpan | None = None
    reporting_period: DateSpan | None = None
    metric_definitions: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ProcessedSheet:
    descriptor: SheetDescriptor
    rows: tuple[ProcessedRow, ...]
    grand_total: GrandTotal
    monthly_totals: tuple[MonthlyTotal, ...]
    context_block: ContextBlock | None = None

    @property
    def sheet_name(self) -> str:
        return self.descriptor.sheet_name

    @property
    def is_summary(self) -> bool:
        return self.descriptor.is_summary


@dataclass(frozen=True, slots=True)
class ProjectBarDatum:
    label: str
    full_name: str
    allocated: float
    used: float
    unused: float
    utilization: float


@dataclass(frozen=True, slots=True)
class ReportData:
    generated_on: str
    sheets: tuple[ProcessedSheet, ...]
    portfolio: PortfolioTotal
    projects_bar_data: tuple[ProjectBarDatum, ...]


@dataclass(slots=True)
class ExportFilePayload:
    media_type: str
    filename: str
    content: bytes
