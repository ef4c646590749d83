"""Worksheet tab naming rules."""

from __future__ import annotations

import re
from collections.abc import Iterable

from allocation_report.core.errors import SheetNameError

MAX_SHEET_NAME_LENGTH = 31
MAX_DUPLICATE_SUFFIX = 99
FALLBACK_NAME = "Sheet"

_INVALID_CHARS = re.compile(r"[:\\/?*\[\]]")
_WHITESPACE = re.compile(r"\s+")


def sanitize_sheet_name(name: str) -> str:
    cleaned = _INVALID_CHARS.sub("", name or "")
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    cleaned = cleaned[:MAX_SHEET_NAME_LENGTH].rstrip()
    return cleaned or FALLBACK_NAME


def unique_sheet_name(name: str, used: Iterable[str]) -> str:
    """Sanitize ``name`` and suffix it with `` (2)``, `` (3)``... until unused.

    Comparison is case-insensitive, matching how spreadsheet tabs clash.
    """

    taken = {item.lower() for item in used}
    base = sanitize_sheet_name(name)
    if base.lower() not in taken:
        return base

    for counter in range(2, MAX_DUPLICATE_SUFFIX + 1):
        suffix = f" ({counter})"
        candidate = base[: MAX_SHEET_NAME_LENGTH - len(suffix)].rstrip() + suffix
        if candidate.lower() not in taken:
            return candidate
    raise SheetNameError(f'Could not derive a unique sheet name for "{base}".')


def assign_sheet_names(names: Iterable[str]) -> list[str]:
    assigned: list[str] = []
    for name in names:
        assigned.append(unique_sheet_name(name, assigned))
    return assigned
