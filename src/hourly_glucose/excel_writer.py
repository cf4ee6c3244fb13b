"""Exportacion a Excel de las lecturas del dia y su resumen."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd
from dateutil import tz
from openpyxl.styles import Alignment, Border, Font, Side

from hourly_glucose.errors import NoDataError
from hourly_glucose.model import ReadingSet
from hourly_glucose.stats import (
    SummaryStatistics,
    compute_statistics,
    readings_to_frame,
    status_label,
)

logger = logging.getLogger(__name__)

_LOCAL_TZ = tz.gettz("America/Argentina/Buenos_Aires")

_HEADER_MAP: dict[str, str] = {
    "time": "Hora",
    "glucose_mg_dl": "Glucosa (mg/dL)",
    "status": "Estado",
}


@dataclass(frozen=True)
class ExcelLayout:
    """Sheet names for the export."""

    readings_sheet: str = "Lecturas"
    summary_sheet: str = "Resumen"


def export_path(export_dir: str, prefix: str = "glucosa_horaria") -> Path:
    """Timestamped XLSX path inside ``export_dir`` (or ./salidas)."""
    out_dir = Path(export_dir).expanduser() if export_dir else Path.cwd() / "salidas"
    ts = datetime.now(tz=_LOCAL_TZ).strftime("%Y-%m-%d_%H-%M-%S")
    return out_dir / f"{prefix}_{ts}.xlsx"


def _readings_export_frame(readings: ReadingSet) -> pd.DataFrame:
    """Hora / Glucosa / Estado, with status translated for display."""
    df = readings_to_frame(readings).drop(columns=["hour"])
    df["status"] = df["status"].map(status_label)
    return df.rename(columns=_HEADER_MAP)


def _summary_frame(stats: SummaryStatistics) -> pd.DataFrame:
    rows = [
        ("Lecturas", stats.count),
        ("Promedio (mg/dL)", round(stats.mean, 1)),
        ("Minimo (mg/dL)", stats.minimum),
        ("Maximo (mg/dL)", stats.maximum),
        ("Debajo del rango (%)", round(stats.percent_below, 1)),
        ("En rango 70-180 (%)", round(stats.percent_in, 1)),
        ("Encima del rango (%)", round(stats.percent_above, 1)),
    ]
    return pd.DataFrame(rows, columns=["Indicador", "Valor"])


def write_readings_xlsx(
    readings: ReadingSet, out_path: Path, layout: ExcelLayout
) -> None:
    """Write the day's readings (and the summary, if any) to an XLSX file.

    Args:
        readings: Day of hourly readings.
        out_path: Output path for the XLSX file.
        layout: Sheet names.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        stats: SummaryStatistics | None = compute_statistics(readings)
    except NoDataError:
        stats = None

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        _readings_export_frame(readings).to_excel(
            writer, index=False, sheet_name=layout.readings_sheet
        )
        _format_sheet(writer.book[layout.readings_sheet])
        if stats is not None:
            _summary_frame(stats).to_excel(
                writer, index=False, sheet_name=layout.summary_sheet
            )
            _format_sheet(writer.book[layout.summary_sheet])
    logger.info("Excel written to %s (%d readings)", out_path, readings.count)


def _style_header_row(ws: Any) -> None:
    """Aplica fuente negrita, alineación y borde a la fila de cabecera."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for cell in ws[1]:
        cell.font = header_font
        cell.alignment = center
        cell.border = border


def _style_body_rows(ws: Any) -> None:
    """Aplica alineación y borde a las filas de datos."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center")
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = center
            cell.border = border


def _get_header_col_index(ws: Any) -> dict[str, int]:
    """Devuelve mapa nombre de cabecera -> índice de columna (1-based)."""
    headers = [str(cell.value) for cell in ws[1]]
    return {name: idx + 1 for idx, name in enumerate(headers)}


def _apply_column_widths(ws: Any, col_index: dict[str, int]) -> None:
    widths = [
        ("Hora", 8),
        ("Glucosa (mg/dL)", 16),
        ("Estado", 10),
        ("Indicador", 22),
        ("Valor", 10),
    ]
    for header, width in widths:
        idx = col_index.get(header)
        if idx is not None:
            letter = ws.cell(row=1, column=idx).column_letter
            ws.column_dimensions[letter].width = width


def _apply_number_formats(ws: Any, col_index: dict[str, int]) -> None:
    idx = col_index.get("Glucosa (mg/dL)")
    if idx is None:
        return
    for row in ws.iter_rows(min_row=2):
        row[idx - 1].number_format = "0.0"


def _format_sheet(ws: Any) -> None:
    """Apply borders, widths and number formats to a worksheet.

    Args:
        ws: openpyxl worksheet.
    """
    _style_header_row(ws)
    _style_body_rows(ws)
    col_index = _get_header_col_index(ws)
    _apply_column_widths(ws, col_index)
    _apply_number_formats(ws, col_index)
