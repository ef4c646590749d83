"""Payload shape dispatch and schema adaptation.

Two payload shapes are accepted:

* single sheet: ``{"meta": {"months": [...]}, "rows": [...]}``
* multi tab: ``{"sheets": [{"sheetName": ..., "payload": {...}}]}``

The shape is resolved once here; everything downstream works on
``SheetEntry`` / ``SheetDescriptor`` only.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

from allocation_report.core.errors import PayloadShapeError
from allocation_report.models.allocation import (
    SUMMARY_SHEET_NAME,
    AllocationRow,
    Month,
    MonthValues,
    SheetDescriptor,
    SheetEntry,
)

logger = logging.getLogger(__name__)

DEFAULT_SHEET_NAME = "Resource Allocation (Monthly)"
FALLBACK_SHEET_NAME = "Sheet"

ALLOCATED_FIELD = "allocated_effort_to_date"
ACTUAL_FIELD = "actual_effort_to_date"
LEGACY_ALLOCATED_FIELD = "plannedTotal"
LEGACY_ACTUAL_FIELD = "actualTotal"
EFFORT_PCT_FIELD = "effortPct"


def _empty_sheet_payload() -> dict[str, Any]:
    return {"meta": {"months": []}, "rows": []}


def _is_single_sheet(payload: Mapping[str, Any]) -> bool:
    meta = payload.get("meta")
    if not isinstance(meta, Mapping):
        return False
    return isinstance(meta.get("months"), list) and isinstance(payload.get("rows"), list)


def normalize_payload(payload: Any, default_sheet_name: str = DEFAULT_SHEET_NAME) -> list[SheetEntry]:
    """Resolve the payload shape into an ordered list of sheet entries."""

    if not isinstance(payload, Mapping):
        raise PayloadShapeError("Invalid payload. Expected a JSON object.")

    sheets = payload.get("sheets")
    if isinstance(sheets, list):
        entries: list[SheetEntry] = []
        for index, sheet in enumerate(sheets, start=1):
            if not isinstance(sheet, Mapping):
                raise PayloadShapeError(f"Invalid payload. sheets[{index}] must be an object.")
            sheet_payload = sheet.get("payload")
            entries.append(
                SheetEntry(
                    sheet_name=str(sheet.get("sheetName") or FALLBACK_SHEET_NAME),
                    payload=dict(sheet_payload) if isinstance(sheet_payload, Mapping) else _empty_sheet_payload(),
                )
            )
        logger.debug("Normalized multi-tab payload with %d sheets", len(entries))
        return entries

    if _is_single_sheet(payload):
        return [SheetEntry(sheet_name=default_sheet_name, payload=dict(payload))]

    raise PayloadShapeError(
        "Invalid payload. Required: either (meta.months + rows) for single sheet, "
        "or (sheets[]) for multi-tab format"
    )


def _sheet_context(sheet_payload: Mapping[str, Any]) -> dict[str, Any] | None:
    meta = sheet_payload.get("meta")
    if not isinstance(meta, Mapping):
        return None
    context = meta.get("context")
    return dict(context) if isinstance(context, Mapping) else None


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def resolve_display_name(entry: SheetEntry, entries: Sequence[SheetEntry]) -> str:
    """Derive the display name of a sheet without touching ``entry``."""

    if entry.sheet_name == SUMMARY_SHEET_NAME:
        project_count = sum(1 for item in entries if item.sheet_name != SUMMARY_SHEET_NAME)
        return f"{SUMMARY_SHEET_NAME} - {project_count} projects"

    context = _sheet_context(entry.payload) or {}
    project_number = _text(context.get("projectNumber"))
    project_name = _text(context.get("projectName"))
    if project_number and project_name:
        return f"{project_number} - {project_name}"
    if project_number:
        return project_number
    return entry.sheet_name


def as_number(value: Any) -> float:
    """Read an untrusted numeric field.

    ``None``, junk, non-finite values and integers beyond float range read as zero.
    """

    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        if isinstance(value, (int, float)):
            result = float(value)
        elif isinstance(value, str):
            result = float(value.strip())
        else:
            return 0.0
    except (ValueError, OverflowError):
        return 0.0
    return result if math.isfinite(result) else 0.0


def _field(row: Mapping[str, Any], current: str, legacy: str) -> Any:
    if current in row:
        return row[current]
    return row.get(legacy)


def _parse_months(meta: Any) -> tuple[Month, ...]:
    if not isinstance(meta, Mapping) or not isinstance(meta.get("months"), list):
        return ()
    months: list[Month] = []
    for item in meta["months"]:
        if not isinstance(item, Mapping) or item.get("key") is None:
            continue
        key = str(item["key"])
        months.append(Month(key=key, label=str(item.get("label") or key)))
    return tuple(months)


def _parse_month_values(raw: Any) -> dict[str, MonthValues]:
    if not isinstance(raw, Mapping):
        return {}
    values: dict[str, MonthValues] = {}
    for key, item in raw.items():
        if not isinstance(item, Mapping):
            continue
        values[str(key)] = MonthValues(planned=as_number(item.get("planned")), actual=as_number(item.get("actual")))
    return values


def parse_row(row: Mapping[str, Any]) -> AllocationRow:
    """Adapt one raw row, legacy or current field names, to ``AllocationRow``."""

    effort_pct = row.get(EFFORT_PCT_FIELD)
    return AllocationRow(
        level=str(row.get("level") or ""),
        label=str(row.get("label") or ""),
        allocated=as_number(_field(row, ALLOCATED_FIELD, LEGACY_ALLOCATED_FIELD)),
        actual=as_number(_field(row, ACTUAL_FIELD, LEGACY_ACTUAL_FIELD)),
        effort_pct=None if effort_pct is None else as_number(effort_pct),
        months=_parse_month_values(row.get("months")),
        role_key=_text(row.get("roleKey")),
        parent_role_key=_text(row.get("parentRoleKey")),
        user_sys_id=_text(row.get("userSysId")),
    )


def build_descriptors(entries: Sequence[SheetEntry]) -> list[SheetDescriptor]:
    """Build canonical sheet descriptors from normalized entries."""

    descriptors: list[SheetDescriptor] = []
    for entry in entries:
        raw_rows = entry.payload.get("rows")
        if not isinstance(raw_rows, list):
            raw_rows = []
        rows = tuple(parse_row(row) for row in raw_rows if isinstance(row, Mapping))
        descriptors.append(
            SheetDescriptor(
                original_name=entry.sheet_name,
                sheet_name=resolve_display_name(entry, entries),
                rows=rows,
                months=_parse_months(entry.payload.get("meta")),
                context=_sheet_context(entry.payload),
            )
        )
    return descriptors
