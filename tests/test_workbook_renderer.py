from __future__ import annotations

from io import BytesIO
from typing import Any

from openpyxl import load_workbook

from allocation_report.services.aggregation import aggregate_report
from allocation_report.services.payload_normalizer import build_descriptors, normalize_payload
from allocation_report.services.workbook_renderer import WorkbookTheme, render_workbook, workbook_bytes


def _render(payload: dict[str, Any], theme: WorkbookTheme | None = None):
    report = aggregate_report(build_descriptors(normalize_payload(payload)), generated_on="now")
    workbook = render_workbook(report.sheets, theme) if theme else render_workbook(report.sheets)
    return load_workbook(BytesIO(workbook_bytes(workbook)))


def test_single_sheet_layout(single_sheet_payload: dict[str, Any]) -> None:
    workbook = _render(single_sheet_payload)

    assert workbook.sheetnames == ["Resource Allocation (Monthly)"]
    ws = workbook.active
    assert [ws.cell(row=1, column=column).value for column in range(1, 7)] == [
        "Role/User",
        "Allocated Hours",
        "Actual Hours",
        "Variance",
        "Effort Utilized",
        "Mar 2025",
    ]
    assert (ws["F2"].value, ws["G2"].value) == ("Allocated", "Actual")

    merged = {str(cell_range) for cell_range in ws.merged_cells.ranges}
    assert {"A1:A2", "B1:B2", "C1:C2", "D1:D2", "E1:E2", "F1:G1"} <= merged
    assert ws.freeze_panes == "F3"


def test_data_rows_and_grand_total(single_sheet_payload: dict[str, Any]) -> None:
    ws = _render(single_sheet_payload).active

    assert [ws.cell(row=3, column=column).value for column in range(1, 8)] == [
        "Developer",
        160,
        120,
        "=B3-C3",
        "=IF(B3=0,0,C3/B3)",
        160,
        120,
    ]
    assert ws["A3"].font.bold is True
    assert ws["A3"].fill.fgColor.rgb == "FFE0E0E0"
    assert ws["A4"].value == "Jane Doe"
    assert not ws["A4"].font.bold
    assert ws["A4"].alignment.indent == 2
    assert ws["E3"].number_format == "0.00%"

    assert [ws.cell(row=5, column=column).value for column in range(1, 8)] == [
        "GRAND TOTAL",
        160,
        120,
        "=B5-C5",
        "=IF(B5=0,0,C5/B5)",
        160,
        120,
    ]
    assert ws["A5"].font.color.rgb == "FFFFFFFF"
    assert ws.max_row == 5


def test_multi_sheet_names_use_display_names(multi_sheet_payload: dict[str, Any]) -> None:
    workbook = _render(multi_sheet_payload)

    assert workbook.sheetnames == ["Summary - 2 projects", "PRJ01 - X", "PRJ02 - Y"]
    project = workbook["PRJ01 - X"]
    # Grand total counts the role row only: 100 allocated, 80 actual.
    assert (project["B5"].value, project["C5"].value) == (100, 80)
    assert (project["F5"].value, project["H5"].value) == (50, 50)


def test_sheet_without_months_or_rows_still_has_header_and_total() -> None:
    ws = _render({"sheets": [{"sheetName": "Empty: tab"}]}).active

    assert ws.title == "Empty tab"
    assert ws["A3"].value == "GRAND TOTAL"
    assert ws["B3"].value == 0


def test_theme_is_applied(single_sheet_payload: dict[str, Any]) -> None:
    ws = _render(single_sheet_payload, WorkbookTheme(role_fill="FF00FF00")).active

    assert ws["B3"].fill.fgColor.rgb == "FF00FF00"
