"""Excepciones del tracker de glucosa horaria."""

from __future__ import annotations

from enum import Enum


class ErrorReason(str, Enum):
    """Reason tags carried by every tracker error."""

    INVALID_NUMBER = "invalid_number"
    OUT_OF_RANGE = "out_of_range"
    INVALID_HOUR = "invalid_hour"
    NO_DATA = "no_data"
    PERSISTENCE_FAILURE = "persistence_failure"


class HourlyGlucoseError(Exception):
    """Base exception for all tracker errors."""

    reason: ErrorReason

    def __init__(self, reason: ErrorReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class ValidationError(HourlyGlucoseError, ValueError):
    """Raised when an hour or a reading value is rejected."""


class NoDataError(HourlyGlucoseError):
    """Raised when statistics are requested on a day without readings."""

    def __init__(self, message: str = "No hay lecturas cargadas.") -> None:
        super().__init__(ErrorReason.NO_DATA, message)


class PersistenceError(HourlyGlucoseError):
    """Raised when the local store cannot be read or written."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorReason.PERSISTENCE_FAILURE, message)
