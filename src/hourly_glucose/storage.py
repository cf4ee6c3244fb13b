"""Persistencia SQLite de las lecturas del dia y la configuracion."""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from hourly_glucose.errors import HourlyGlucoseError, PersistenceError
from hourly_glucose.model import ReadingSet

logger = logging.getLogger(__name__)

READINGS_KEY = "hourly_readings"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS app_config (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


@dataclass(frozen=True)
class AppConfig:
    """Configuracion persistida de la app."""

    export_dir: str = ""
    auto_advance: bool = True


def serialize_readings(readings: ReadingSet) -> str:
    """Serialize to a JSON array of 24 numbers-or-null, hour ascending."""
    return json.dumps(readings.to_list())


def deserialize_readings(raw: str | None) -> ReadingSet:
    """Parse a stored JSON array back into a ``ReadingSet``.

    Anything that is not a list of exactly 24 valid values (or nulls) is
    discarded and an empty day is returned instead.
    """
    if raw is None:
        return ReadingSet.empty()
    try:
        parsed: Any = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored readings are not valid JSON; starting empty")
        return ReadingSet.empty()
    if not isinstance(parsed, list):
        logger.warning("Stored readings are not a list; starting empty")
        return ReadingSet.empty()
    if not all(_is_stored_value(item) for item in parsed):
        logger.warning("Stored readings contain non-numeric items; starting empty")
        return ReadingSet.empty()
    try:
        return ReadingSet.from_list(parsed)
    except (ValueError, HourlyGlucoseError) as exc:
        logger.warning("Discarding stored readings: %s", exc)
        return ReadingSet.empty()


class SQLiteStore:
    """Repositorio SQLite key/value para la app."""

    def __init__(self, db_path: Path) -> None:
        """Create store and ensure schema exists.

        Raises:
            PersistenceError: If the database cannot be created.
        """
        self._db_path = db_path
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_schema()
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceError(f"No se pudo abrir {db_path}: {exc}") from exc

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with closing(self._connect()) as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def _read_values(self) -> dict[str, str]:
        try:
            with closing(self._connect()) as conn:
                rows = conn.execute("SELECT key, value FROM app_config").fetchall()
        except sqlite3.Error as exc:
            logger.error("Could not read %s: %s", self._db_path, exc)
            raise PersistenceError(f"No se pudo leer la base: {exc}") from exc
        return {row["key"]: row["value"] for row in rows}

    def _write_values(self, payload: dict[str, str]) -> None:
        try:
            with closing(self._connect()) as conn:
                conn.executemany(
                    """
                    INSERT INTO app_config(key, value) VALUES(?, ?)
                    ON CONFLICT(key) DO UPDATE SET value=excluded.value
                    """,
                    payload.items(),
                )
                conn.commit()
        except sqlite3.Error as exc:
            logger.error("Could not write %s: %s", self._db_path, exc)
            raise PersistenceError(f"No se pudo guardar en la base: {exc}") from exc

    def load_readings(self) -> ReadingSet:
        """Devuelve las lecturas guardadas o un dia vacio."""
        return deserialize_readings(self._read_values().get(READINGS_KEY))

    def save_readings(self, readings: ReadingSet) -> None:
        """Guarda las 24 lecturas como un unico valor JSON."""
        self._write_values({READINGS_KEY: serialize_readings(readings)})

    def load_config(self) -> AppConfig:
        """Devuelve configuracion guardada o defaults."""
        defaults = AppConfig()
        values = self._read_values()
        return AppConfig(
            export_dir=values.get("export_dir", defaults.export_dir),
            auto_advance=_parse_bool(
                values.get("auto_advance"), default=defaults.auto_advance
            ),
        )

    def save_config(self, config: AppConfig) -> None:
        """Guarda la configuracion en tabla key/value."""
        self._write_values(
            {
                "export_dir": config.export_dir,
                "auto_advance": json.dumps(config.auto_advance),
            }
        )


def _is_stored_value(item: object) -> bool:
    if item is None:
        return True
    return isinstance(item, int | float) and not isinstance(item, bool)


def _parse_bool(raw: str | None, *, default: bool) -> bool:
    if raw is None:
        return default
    try:
        parsed: Any = json.loads(raw)
    except json.JSONDecodeError:
        return default
    return parsed if isinstance(parsed, bool) else default
