"""Error taxonomy for report generation."""

from __future__ import annotations


class ReportError(Exception):
    """Base class for failures scoped to a single report request."""


class PayloadShapeError(ReportError):
    """Payload is neither a single-sheet nor a multi-tab document."""


class PayloadValidationError(ReportError):
    """One or more rows are missing required effort fields.

    ``violations`` holds every violation found; ``str(error)`` is the
    capped, human-readable summary.
    """

    def __init__(self, message: str, violations: list[str]) -> None:
        super().__init__(message)
        self.violations = violations


class SheetNameError(ReportError):
    """A unique worksheet name could not be derived."""


class ReportGenerationError(ReportError):
    """The PDF rendering collaborator failed."""
