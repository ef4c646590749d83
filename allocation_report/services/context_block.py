"""Explanatory metadata attached to a sheet via ``meta.context``."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from allocation_report.models.allocation import ContextBlock, ContextKind, DateSpan

REPORT_START_FIELD = "startDate"
REPORT_END_FIELD = "endDate"

SPAN_FIELDS: dict[ContextKind, tuple[str, str]] = {
    ContextKind.SUMMARY: ("portfolioStart", "portfolioEnd"),
    ContextKind.PROJECT: ("projectStart", "projectEnd"),
}


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _span(start: str | None, end: str | None) -> DateSpan | None:
    span = DateSpan(start=start, end=end)
    return None if span.is_empty else span


def _metric_definitions(raw: Any) -> tuple[str, ...]:
    if isinstance(raw, Mapping):
        items = []
        for name, definition in raw.items():
            name_text, definition_text = _text(name), _text(definition)
            if name_text and definition_text:
                items.append(f"{name_text}: {definition_text}")
            elif definition_text or name_text:
                items.append(definition_text or name_text)
        return tuple(items)
    if isinstance(raw, list):
        return tuple(text for text in (_text(item) for item in raw) if text)
    text = _text(raw)
    return (text,) if text else ()


def _kind(raw: Any) -> ContextKind | None:
    try:
        return ContextKind(str(raw).strip().lower())
    except ValueError:
        return None


def resolve_context_block(context: Mapping[str, Any] | None) -> ContextBlock | None:
    """Normalize a sheet context, or ``None`` when there is nothing to show.

    The project/portfolio span falls back field by field to the generic
    report dates, which most payloads always carry.
    """

    if not isinstance(context, Mapping):
        return None
    kind = _kind(context.get("type"))
    if kind is None:
        return None

    report_start = _text(context.get(REPORT_START_FIELD))
    report_end = _text(context.get(REPORT_END_FIELD))
    start_field, end_field = SPAN_FIELDS[kind]

    return ContextBlock(
        kind=kind,
        description=_text(context.get("description")),
        span=_span(_text(context.get(start_field)) or report_start, _text(context.get(end_field)) or report_end),
        reporting_period=_span(report_start, report_end),
        metric_definitions=_metric_definitions(context.get("metricDefinitions")),
    )
