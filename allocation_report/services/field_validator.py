"""Required effort field validation."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from allocation_report.core.errors import PayloadValidationError
from allocation_report.models.allocation import SheetEntry
from allocation_report.services.payload_normalizer import (
    ACTUAL_FIELD,
    ALLOCATED_FIELD,
    LEGACY_ACTUAL_FIELD,
    LEGACY_ALLOCATED_FIELD,
)

logger = logging.getLogger(__name__)

MAX_REPORTED_VIOLATIONS = 10

REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    (ALLOCATED_FIELD, LEGACY_ALLOCATED_FIELD),
    (ACTUAL_FIELD, LEGACY_ACTUAL_FIELD),
)


def _missing_fields(row: Any) -> list[str]:
    # Only an absent key counts as missing; null and 0 are valid values.
    if not isinstance(row, Mapping):
        return [current for current, _legacy in REQUIRED_FIELDS]
    return [current for current, legacy in REQUIRED_FIELDS if current not in row and legacy not in row]


def _row_label(row: Any) -> str:
    if isinstance(row, Mapping) and row.get("label"):
        return str(row["label"])
    return "unnamed"


def collect_violations(entries: Sequence[SheetEntry]) -> list[str]:
    """Walk every row of every sheet and describe each missing-field row."""

    violations: list[str] = []
    for entry in entries:
        rows = entry.payload.get("rows")
        if not isinstance(rows, list):
            continue
        for index, row in enumerate(rows, start=1):
            missing = _missing_fields(row)
            if missing:
                violations.append(
                    f'Sheet "{entry.sheet_name}", row {index} ({_row_label(row)}): missing {", ".join(missing)}'
                )
    return violations


def format_violations(violations: Sequence[str], limit: int = MAX_REPORTED_VIOLATIONS) -> str:
    lines = [f"Missing required effort fields in {len(violations)} row(s):"]
    lines.extend(f"- {item}" for item in violations[:limit])
    omitted = len(violations) - limit
    if omitted > 0:
        lines.append(f"... and {omitted} more")
    return "\n".join(lines)


def validate_sheet_entries(entries: Sequence[SheetEntry]) -> None:
    """Raise ``PayloadValidationError`` listing every row without effort fields."""

    violations = collect_violations(entries)
    if not violations:
        return
    logger.warning("Payload validation failed with %d violation(s)", len(violations))
    raise PayloadValidationError(format_violations(violations), violations)
