"""CLI para cargar y revisar las lecturas horarias sin interfaz grafica."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from pathlib import Path

from hourly_glucose.chart import render_chart
from hourly_glucose.errors import ErrorReason, PersistenceError
from hourly_glucose.excel_writer import ExcelLayout, export_path, write_readings_xlsx
from hourly_glucose.logging_config import LoggingConfig, setup_logging
from hourly_glucose.session import Notification, TrackerSession
from hourly_glucose.stats import (
    format_mg_dl,
    format_statistics,
    readings_to_frame,
    status_label,
)
from hourly_glucose.storage import SQLiteStore

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PERSISTENCE = 1
EXIT_INVALID = 2

DEFAULT_DB = Path.cwd() / "hourly_glucose.sqlite3"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="Lecturas de glucosa por hora (0 a 23) para un dia."
    )
    parser.add_argument(
        "--db",
        default=str(DEFAULT_DB),
        help="Base SQLite (default: ./hourly_glucose.sqlite3).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Nivel de log (default: WARNING).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="Muestra las lecturas cargadas.")

    set_cmd = sub.add_parser("set", help="Carga o corrige la lectura de una hora.")
    set_cmd.add_argument("hour", type=int, help="Hora (0 a 23).")
    set_cmd.add_argument("value", help="Glucosa en mg/dL (0 a 600).")

    clear_cmd = sub.add_parser("clear", help="Borra la lectura de una hora.")
    clear_cmd.add_argument("hour", type=int, help="Hora (0 a 23).")

    sub.add_parser("clear-all", help="Borra todas las lecturas.")
    sub.add_parser("stats", help="Muestra el resumen del dia.")

    chart_cmd = sub.add_parser("chart", help="Genera el grafico en PNG.")
    chart_cmd.add_argument("--out", default="glucosa_24h.png", help="Archivo PNG.")

    export_cmd = sub.add_parser("export", help="Exporta a Excel.")
    export_cmd.add_argument(
        "--out-dir",
        default=None,
        help="Directorio de salida (default: el configurado o ./salidas).",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        Exit code: 0 on success, 2 for rejected input or no data, 1 when the
        local store could not be read or written.
    """
    ns = parse_args(argv)
    setup_logging(LoggingConfig(level=ns.log_level))

    try:
        store = SQLiteStore(Path(ns.db).expanduser())
    except PersistenceError as exc:
        print(f"ERROR: {exc}")
        return EXIT_PERSISTENCE
    logger.info("Running %s on %s", ns.command, store.db_path)
    session = TrackerSession.open(store)
    if session.startup_notice is not None:
        return _report(session.startup_notice)

    if ns.command == "show":
        print(format_readings_table(session))
        return EXIT_OK
    if ns.command == "set":
        return _report(session.update_reading(ns.hour, ns.value))
    if ns.command == "clear":
        return _report(session.delete_reading(ns.hour))
    if ns.command == "clear-all":
        return _report(session.clear_all())
    if ns.command == "stats":
        stats = session.statistics()
        if stats is None:
            print("Sin lecturas: no hay estadisticas para mostrar.")
            return EXIT_INVALID
        print(format_statistics(stats))
        return EXIT_OK
    if ns.command == "chart":
        out = render_chart(session.readings, Path(ns.out).expanduser())
        print(f"OK: Grafico: {out}")
        return EXIT_OK
    if ns.command == "export":
        out_path = export_path(ns.out_dir or session.config.export_dir)
        write_readings_xlsx(session.readings, out_path, ExcelLayout())
        print(f"OK: Output: {out_path}")
        return EXIT_OK
    raise AssertionError(f"unhandled command {ns.command}")


def format_readings_table(session: TrackerSession) -> str:
    """Render the readings as aligned text, one row per recorded hour."""
    df = readings_to_frame(session.readings)
    if df.empty:
        return "Sin lecturas cargadas."
    out = df.drop(columns=["hour"]).copy()
    out["glucose_mg_dl"] = out["glucose_mg_dl"].map(format_mg_dl)
    out["status"] = out["status"].map(status_label)
    out = out.rename(
        columns={"time": "Hora", "glucose_mg_dl": "mg/dL", "status": "Estado"}
    )
    return out.to_string(index=False)


def _report(notification: Notification) -> int:
    prefix = "ERROR" if notification.is_error else "OK"
    print(f"{prefix}: {notification.title}. {notification.message}")
    if notification.reason is None:
        return EXIT_OK
    if notification.reason is ErrorReason.PERSISTENCE_FAILURE:
        return EXIT_PERSISTENCE
    return EXIT_INVALID
