from __future__ import annotations

from pathlib import Path
from typing import cast

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from hourly_glucose.excel_writer import ExcelLayout, _format_sheet, write_readings_xlsx
from hourly_glucose.model import ReadingSet


def test_write_readings_xlsx_happy_path_and_formatting(tmp_path: Path) -> None:
    """Una fila por hora con lectura: Hora, Glucosa (mg/dL), Estado."""
    rs = ReadingSet.empty()
    for hour, value in {6: 70, 9: 180, 12: 50, 18: 200}.items():
        rs = rs.set_reading(hour, value)
    out = tmp_path / "nested" / "out.xlsx"
    layout = ExcelLayout()
    write_readings_xlsx(rs, out, layout)

    wb = load_workbook(out)
    ws = cast(Worksheet, wb[layout.readings_sheet])
    headers = [cell.value for cell in ws[1]]
    assert headers == ["Hora", "Glucosa (mg/dL)", "Estado"]
    assert ws.max_row == 5
    assert ws.cell(row=2, column=1).value == "6:00"
    assert ws.cell(row=2, column=2).value == 70
    assert ws.cell(row=4, column=3).value == "Bajo"
    assert ws.cell(row=5, column=3).value == "Alto"
    assert ws.cell(row=2, column=2).number_format == "0.0"
    assert ws.column_dimensions["B"].width == 16
    assert ws.cell(row=1, column=1).font.bold is True

    summary = cast(Worksheet, wb[layout.summary_sheet])
    values = {row[0]: row[1] for row in summary.iter_rows(min_row=2, values_only=True)}
    assert values["Lecturas"] == 4
    assert values["Promedio (mg/dL)"] == 125
    assert values["En rango 70-180 (%)"] == 50


def test_write_readings_xlsx_empty_day_has_no_summary(tmp_path: Path) -> None:
    out = tmp_path / "out.xlsx"
    write_readings_xlsx(ReadingSet.empty(), out, ExcelLayout())
    wb = load_workbook(out)
    assert wb.sheetnames == [ExcelLayout().readings_sheet]
    ws = wb[ExcelLayout().readings_sheet]
    assert [cell.value for cell in ws[1]] == ["Hora", "Glucosa (mg/dL)", "Estado"]
    assert ws.max_row == 1


def test_format_sheet_handles_missing_headers() -> None:
    wb = Workbook()
    ws = cast(Worksheet, wb.active)
    ws.append(["Solo"])
    ws.append([1])

    _format_sheet(ws)

    assert ws.cell(row=1, column=1).font.bold is True
    assert ws.cell(row=2, column=1).alignment.horizontal == "center"
