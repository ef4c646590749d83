"""Spreadsheet rendering with openpyxl.

Layout per worksheet: columns A-E are fixed (label, allocated, actual,
variance, effort utilized), then one (allocated, actual) column pair per
declared month. Rows 1-2 are the header, data starts at row 3 and a
GRAND TOTAL row closes the sheet. Panes are frozen at F3.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from allocation_report.models.allocation import MonthValues, ProcessedRow, ProcessedSheet
from allocation_report.services.sheet_names import assign_sheet_names

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

FIXED_HEADERS = ("Role/User", "Allocated Hours", "Actual Hours", "Variance", "Effort Utilized")
MONTH_START_COLUMN = len(FIXED_HEADERS) + 1
FIRST_DATA_ROW = 3
GRAND_TOTAL_LABEL = "GRAND TOTAL"
FREEZE_CELL = "F3"


@dataclass(frozen=True, slots=True)
class WorkbookTheme:
    """Colors, formats and sizes applied to every generated worksheet."""

    header_fill: str = "FF333333"
    header_font_color: str = "FFFFFFFF"
    role_fill: str = "FFE0E0E0"
    grand_total_fill: str = "FF333333"
    grand_total_font_color: str = "FFFFFFFF"
    border_color: str = "FFB0B0B0"
    divider_color: str = "FF333333"
    number_format: str = "#,##0.00"
    percent_format: str = "0.00%"
    label_width: float = 32
    total_width: float = 16
    month_width: float = 14
    header_height: float = 20
    user_indent: int = 2

    def fill(self, color: str) -> PatternFill:
        return PatternFill(fill_type="solid", fgColor=color)

    def border(self, *, divider: bool = False) -> Border:
        thin = Side(style="thin", color=self.border_color)
        right = Side(style="medium", color=self.divider_color) if divider else thin
        return Border(left=thin, right=right, top=thin, bottom=thin)


DEFAULT_THEME = WorkbookTheme()


def _style_header(cell, theme: WorkbookTheme, *, divider: bool = False) -> None:
    cell.font = Font(bold=True, color=theme.header_font_color)
    cell.fill = theme.fill(theme.header_fill)
    cell.border = theme.border(divider=divider)
    cell.alignment = Alignment(horizontal="center", vertical="center")


def _write_header(ws: Worksheet, sheet: ProcessedSheet, theme: WorkbookTheme) -> None:
    for column, title in enumerate(FIXED_HEADERS, start=1):
        divider = column == len(FIXED_HEADERS)
        ws.merge_cells(start_row=1, start_column=column, end_row=2, end_column=column)
        ws.cell(row=1, column=column, value=title)
        _style_header(ws.cell(row=1, column=column), theme, divider=divider)
        ws.cell(row=2, column=column).border = theme.border(divider=divider)

    for index, month in enumerate(sheet.descriptor.months):
        allocated_column = MONTH_START_COLUMN + index * 2
        actual_column = allocated_column + 1
        ws.merge_cells(start_row=1, start_column=allocated_column, end_row=1, end_column=actual_column)
        ws.cell(row=1, column=allocated_column, value=month.label)
        _style_header(ws.cell(row=1, column=allocated_column), theme)
        ws.cell(row=1, column=actual_column).border = theme.border()

        ws.cell(row=2, column=allocated_column, value="Allocated")
        ws.cell(row=2, column=actual_column, value="Actual")
        _style_header(ws.cell(row=2, column=allocated_column), theme)
        _style_header(ws.cell(row=2, column=actual_column), theme)

    ws.row_dimensions[1].height = theme.header_height
    ws.row_dimensions[2].height = theme.header_height


def _set_column_widths(ws: Worksheet, month_count: int, theme: WorkbookTheme) -> None:
    ws.column_dimensions["A"].width = theme.label_width
    for column in range(2, MONTH_START_COLUMN):
        ws.column_dimensions[get_column_letter(column)].width = theme.total_width
    for offset in range(month_count * 2):
        ws.column_dimensions[get_column_letter(MONTH_START_COLUMN + offset)].width = theme.month_width


def _write_values(
    ws: Worksheet,
    *,
    row_number: int,
    label: str,
    allocated: float,
    actual: float,
    months: Sequence[MonthValues],
    font: Font,
    fill: PatternFill | None,
    label_alignment: Alignment,
    theme: WorkbookTheme,
) -> None:
    values: list[object] = [
        label,
        allocated,
        actual,
        f"=B{row_number}-C{row_number}",
        f"=IF(B{row_number}=0,0,C{row_number}/B{row_number})",
    ]
    for month in months:
        values.extend([month.planned, month.actual])

    for column, value in enumerate(values, start=1):
        cell = ws.cell(row=row_number, column=column, value=value)
        cell.font = font
        cell.border = theme.border(divider=column == len(FIXED_HEADERS))
        if fill is not None:
            cell.fill = fill
        if column == 1:
            cell.alignment = label_alignment
            continue
        cell.alignment = Alignment(horizontal="center")
        cell.number_format = theme.percent_format if column == len(FIXED_HEADERS) else theme.number_format


def _write_data_row(
    ws: Worksheet,
    row_number: int,
    row: ProcessedRow,
    sheet: ProcessedSheet,
    theme: WorkbookTheme,
) -> None:
    _write_values(
        ws,
        row_number=row_number,
        label=row.label,
        allocated=row.allocated,
        actual=row.actual,
        months=[row.months.get(month.key, MonthValues()) for month in sheet.descriptor.months],
        font=Font(bold=row.is_role),
        fill=theme.fill(theme.role_fill) if row.is_role else None,
        label_alignment=Alignment() if row.is_role else Alignment(indent=theme.user_indent),
        theme=theme,
    )


def write_worksheet(ws: Worksheet, sheet: ProcessedSheet, theme: WorkbookTheme = DEFAULT_THEME) -> None:
    _set_column_widths(ws, len(sheet.descriptor.months), theme)
    _write_header(ws, sheet, theme)

    row_number = FIRST_DATA_ROW
    for row in sheet.rows:
        _write_data_row(ws, row_number, row, sheet, theme)
        row_number += 1

    _write_values(
        ws,
        row_number=row_number,
        label=GRAND_TOTAL_LABEL,
        allocated=sheet.grand_total.allocated,
        actual=sheet.grand_total.actual,
        months=[MonthValues(planned=total.planned, actual=total.actual) for total in sheet.monthly_totals],
        font=Font(bold=True, color=theme.grand_total_font_color),
        fill=theme.fill(theme.grand_total_fill),
        label_alignment=Alignment(horizontal="left", vertical="center"),
        theme=theme,
    )
    ws.freeze_panes = FREEZE_CELL


def render_workbook(sheets: Sequence[ProcessedSheet], theme: WorkbookTheme = DEFAULT_THEME) -> Workbook:
    """Build one worksheet per processed sheet, with sanitized unique tab names."""

    workbook = Workbook()
    # remove default sheet to avoid empty tab
    workbook.remove(workbook.active)

    titles = assign_sheet_names(item.sheet_name for item in sheets)
    for title, sheet in zip(titles, sheets):
        write_worksheet(workbook.create_sheet(title=title), sheet, theme)

    if not workbook.worksheets:
        workbook.create_sheet(title="Sheet")
    return workbook


def workbook_bytes(workbook: Workbook) -> bytes:
    output = BytesIO()
    workbook.save(output)
    return output.getvalue()
