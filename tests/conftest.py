from __future__ import annotations

from collections.abc import Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from allocation_report.api.routes.exports import get_pdf_renderer
from allocation_report.main import create_app

FAKE_PDF = b"%PDF-1.4\n% fake\n"


class FakePdfRenderer:
    """Records the HTML it was asked to print instead of launching a browser."""

    def __init__(self) -> None:
        self.documents: list[str] = []

    def render(self, html: str) -> bytes:
        self.documents.append(html)
        return FAKE_PDF


@pytest.fixture()
def pdf_renderer() -> FakePdfRenderer:
    return FakePdfRenderer()


@pytest.fixture()
def client(pdf_renderer: FakePdfRenderer) -> Generator[TestClient, None, None]:
    app = create_app()
    app.dependency_overrides[get_pdf_renderer] = lambda: pdf_renderer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def single_sheet_payload() -> dict[str, Any]:
    return {
        "meta": {
            "generatedOn": "2025-04-01 09:00:00",
            "months": [{"key": "2025-03", "label": "Mar 2025"}],
        },
        "rows": [
            {
                "level": "role",
                "label": "Developer",
                "roleKey": "dev",
                "allocated_effort_to_date": 160,
                "actual_effort_to_date": 120,
                "effortPct": 75,
                "months": {"2025-03": {"planned": 160, "actual": 120}},
            },
            {
                "level": "user",
                "label": "Jane Doe",
                "parentRoleKey": "dev",
                "userSysId": "u-1",
                "allocated_effort_to_date": 160,
                "actual_effort_to_date": 120,
                "effortPct": 75,
                "months": {"2025-03": {"planned": 160, "actual": 120}},
            },
        ],
    }


def _project_payload(number: str, name: str, allocated: float, actual: float) -> dict[str, Any]:
    return {
        "meta": {
            "months": [
                {"key": "2025-01", "label": "Jan 2025"},
                {"key": "2025-02", "label": "Feb 2025"},
            ],
            "context": {
                "type": "project",
                "projectNumber": number,
                "projectName": name,
                "startDate": "2025-01-01",
                "endDate": "2025-02-28",
            },
        },
        "rows": [
            {
                "level": "role",
                "label": "Analyst",
                "roleKey": f"{number}-analyst",
                "allocated_effort_to_date": allocated,
                "actual_effort_to_date": actual,
                "effortPct": 0 if allocated == 0 else actual / allocated * 100,
                "months": {
                    "2025-01": {"planned": allocated / 2, "actual": actual / 2},
                    "2025-02": {"planned": allocated / 2, "actual": actual / 2},
                },
            },
            {
                "level": "user",
                "label": "Sam Smith",
                "parentRoleKey": f"{number}-analyst",
                "allocated_effort_to_date": allocated,
                "actual_effort_to_date": actual,
                "effortPct": 0 if allocated == 0 else actual / allocated * 100,
                "months": {"2025-01": {"planned": allocated, "actual": actual}},
            },
        ],
    }


@pytest.fixture()
def multi_sheet_payload() -> dict[str, Any]:
    return {
        "meta": {"generatedOn": "2025-03-01 08:30:00"},
        "sheets": [
            {
                "sheetName": "Summary",
                "payload": {
                    "meta": {
                        "months": [
                            {"key": "2025-01", "label": "Jan 2025"},
                            {"key": "2025-02", "label": "Feb 2025"},
                        ],
                        "context": {
                            "type": "summary",
                            "description": "All active projects.",
                            "startDate": "2025-01-01",
                            "endDate": "2025-02-28",
                            "metricDefinitions": {"Effort Utilized": "Actual hours divided by allocated hours."},
                        },
                    },
                    "rows": [
                        {
                            "level": "role",
                            "label": "Analyst",
                            "allocated_effort_to_date": 300,
                            "actual_effort_to_date": 330,
                            "effortPct": 110,
                            "months": {
                                "2025-01": {"planned": 150, "actual": 165},
                                "2025-02": {"planned": 150, "actual": 165},
                            },
                        }
                    ],
                },
            },
            {"sheetName": "PRJ01 - X", "payload": _project_payload("PRJ01", "X", 100, 80)},
            {"sheetName": "PRJ02 - Y", "payload": _project_payload("PRJ02", "Y", 200, 250)},
        ],
    }
