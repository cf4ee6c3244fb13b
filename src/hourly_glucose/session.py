"""Estado de la sesion: lecturas actuales, hora seleccionada y guardado."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime

from dateutil import tz

from hourly_glucose.errors import (
    ErrorReason,
    NoDataError,
    PersistenceError,
    ValidationError,
)
from hourly_glucose.model import ReadingSet, next_hour, validate_hour
from hourly_glucose.stats import (
    SummaryStatistics,
    compute_statistics,
    format_hour,
    format_mg_dl,
)
from hourly_glucose.storage import AppConfig, SQLiteStore

logger = logging.getLogger(__name__)

_LOCAL_TZ = tz.gettz("America/Argentina/Buenos_Aires")


@dataclass(frozen=True)
class Notification:
    """Message for the user after an action; ``reason`` is set on failures."""

    title: str
    message: str
    reason: ErrorReason | None = None

    @property
    def is_error(self) -> bool:
        return self.reason is not None

    @property
    def rejected(self) -> bool:
        """True when the input was refused and nothing changed."""
        return self.is_error and self.reason is not ErrorReason.PERSISTENCE_FAILURE


def current_local_hour() -> int:
    return datetime.now(tz=_LOCAL_TZ).hour


class TrackerSession:
    """Owns the day's readings for one app session.

    Every entry point (hour picker, table edit, CLI) goes through the same
    ``ReadingSet.set_reading`` contract. After each accepted change the set is
    saved; if saving fails the in-memory readings stay as they are and the
    failure is reported as an error notification.
    """

    def __init__(
        self,
        store: SQLiteStore,
        readings: ReadingSet | None = None,
        *,
        config: AppConfig | None = None,
        current_hour: int | None = None,
    ) -> None:
        self.store = store
        self.readings = readings if readings is not None else ReadingSet.empty()
        self.config = config if config is not None else AppConfig()
        self.current_hour = validate_hour(
            current_hour if current_hour is not None else current_local_hour()
        )
        self.startup_notice: Notification | None = None

    @classmethod
    def open(
        cls, store: SQLiteStore, current_hour: int | None = None
    ) -> TrackerSession:
        """Load readings and config from ``store``; start empty if it fails."""
        try:
            readings = store.load_readings()
            config = store.load_config()
        except PersistenceError as exc:
            logger.warning("Starting with an empty day: %s", exc)
            session = cls(store, current_hour=current_hour)
            session.startup_notice = Notification(
                "Error al cargar datos",
                "No se pudieron leer las lecturas guardadas.",
                reason=ErrorReason.PERSISTENCE_FAILURE,
            )
            return session
        return cls(store, readings, config=config, current_hour=current_hour)

    @property
    def auto_advance(self) -> bool:
        return self.config.auto_advance

    def select_hour(self, hour: int) -> None:
        self.current_hour = validate_hour(hour)

    def set_auto_advance(self, enabled: bool) -> Notification | None:
        """Store the auto-advance preference; returns an error notice on failure."""
        self.config = replace(self.config, auto_advance=enabled)
        try:
            self.store.save_config(self.config)
        except PersistenceError as exc:
            return _save_failed(exc)
        return None

    def set_export_dir(self, export_dir: str) -> Notification | None:
        self.config = replace(self.config, export_dir=export_dir)
        try:
            self.store.save_config(self.config)
        except PersistenceError as exc:
            return _save_failed(exc)
        return None

    def add_reading(self, raw_value: object) -> Notification:
        """Record ``raw_value`` at the selected hour, then maybe advance."""
        hour = self.current_hour
        try:
            self.readings = self.readings.set_reading(hour, raw_value)
        except ValidationError as exc:
            return _rejected(exc)

        value = self.readings.get(hour)
        logger.info("Reading %s mg/dL set at %s", value, format_hour(hour))
        if self.auto_advance:
            self.current_hour = next_hour(hour)
        return self._persist(
            Notification(
                "Lectura agregada",
                f"{format_mg_dl(value)} mg/dL a las {format_hour(hour)}",
            )
        )

    def update_reading(self, hour: int, raw_value: object) -> Notification:
        """Replace the value at ``hour`` (table edit)."""
        try:
            self.readings = self.readings.set_reading(hour, raw_value)
        except ValidationError as exc:
            return _rejected(exc)

        value = self.readings.get(hour)
        logger.info("Reading at %s updated to %s mg/dL", format_hour(hour), value)
        return self._persist(
            Notification(
                "Lectura actualizada",
                f"{format_hour(hour)} ahora es {format_mg_dl(value)} mg/dL",
            )
        )

    def delete_reading(self, hour: int) -> Notification:
        try:
            self.readings = self.readings.clear_reading(hour)
        except ValidationError as exc:
            return _rejected(exc)
        logger.info("Reading at %s deleted", format_hour(hour))
        return self._persist(
            Notification(
                "Lectura eliminada",
                f"Se elimino la lectura de las {format_hour(hour)}",
            )
        )

    def clear_all(self) -> Notification:
        self.readings = self.readings.clear_all()
        logger.info("All readings cleared")
        return self._persist(
            Notification("Datos borrados", "Se borraron todas las lecturas.")
        )

    def statistics(self) -> SummaryStatistics | None:
        """Current statistics, or ``None`` when no hour has a reading."""
        try:
            return compute_statistics(self.readings)
        except NoDataError:
            return None

    def _persist(self, success: Notification) -> Notification:
        try:
            self.store.save_readings(self.readings)
        except PersistenceError as exc:
            return _save_failed(exc)
        return success


def _rejected(exc: ValidationError) -> Notification:
    title = (
        "Hora invalida"
        if exc.reason is ErrorReason.INVALID_HOUR
        else "Valor invalido"
    )
    return Notification(title, str(exc), reason=exc.reason)


def _save_failed(exc: PersistenceError) -> Notification:
    logger.warning("Keeping in-memory state after save failure: %s", exc)
    return Notification(
        "Error al guardar",
        "Los datos no se pudieron guardar en el almacenamiento local.",
        reason=exc.reason,
    )
