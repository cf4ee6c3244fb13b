"""Clasificacion por rango objetivo y estadisticas del dia."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import pandas as pd

from hourly_glucose.errors import NoDataError
from hourly_glucose.model import ReadingSet

TARGET_LOW = 70.0
TARGET_HIGH = 180.0

FRAME_COLUMNS = ["hour", "time", "glucose_mg_dl", "status"]


class RangeClassification(str, Enum):
    """Position of a reading relative to the 70-180 mg/dL target range."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


STATUS_LABELS: dict[RangeClassification, str] = {
    RangeClassification.LOW: "Bajo",
    RangeClassification.NORMAL: "Normal",
    RangeClassification.HIGH: "Alto",
}


@dataclass(frozen=True)
class SummaryStatistics:
    """Derived statistics over the recorded hours of one day."""

    count: int
    mean: float
    minimum: float
    maximum: float
    percent_below: float
    percent_in: float
    percent_above: float

    @property
    def mean_classification(self) -> RangeClassification:
        return classify(self.mean)


def classify(value: float) -> RangeClassification:
    """Classify a reading: low below 70, high above 180, normal otherwise."""
    if value < TARGET_LOW:
        return RangeClassification.LOW
    if value > TARGET_HIGH:
        return RangeClassification.HIGH
    return RangeClassification.NORMAL


def format_hour(hour: int) -> str:
    return f"{hour}:00"


def format_mg_dl(value: float | None) -> str:
    """Format a mg/dL value without trailing zeros or scientific notation."""
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    text = format(value, "f").rstrip("0").rstrip(".")
    return text if text else "0"


def readings_to_frame(readings: ReadingSet) -> pd.DataFrame:
    """One row per recorded hour: hour, time label, value and status."""
    rows = [
        {
            "hour": hour,
            "time": format_hour(hour),
            "glucose_mg_dl": value,
            "status": classify(value).value,
        }
        for hour, value in readings.present()
    ]
    if not rows:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def compute_statistics(readings: ReadingSet) -> SummaryStatistics:
    """Summarize the recorded hours of ``readings``.

    Args:
        readings: Day of hourly readings.

    Returns:
        Count, mean, min, max and the share of readings below, in and above
        the target range (percentages add up to 100).

    Raises:
        NoDataError: If no hour has a reading.
    """
    frame = readings_to_frame(readings)
    if frame.empty:
        raise NoDataError()

    values = frame["glucose_mg_dl"].astype(float)
    counts = frame["status"].value_counts()
    total = len(frame)

    def _percent(classification: RangeClassification) -> float:
        return float(counts.get(classification.value, 0)) / total * 100

    return SummaryStatistics(
        count=total,
        mean=float(values.mean()),
        minimum=float(values.min()),
        maximum=float(values.max()),
        percent_below=_percent(RangeClassification.LOW),
        percent_in=_percent(RangeClassification.NORMAL),
        percent_above=_percent(RangeClassification.HIGH),
    )


def status_label(status: str | RangeClassification) -> str:
    """Display label for a classification or its tag (``"low"`` -> ``"Bajo"``)."""
    return STATUS_LABELS[RangeClassification(status)]


def format_statistics(stats: SummaryStatistics) -> str:
    """Multi-line summary shown by the CLI and the app's stats panel."""
    average = status_label(stats.mean_classification)
    return "\n".join(
        [
            f"Promedio: {stats.mean:.1f} mg/dL ({average})",
            f"Minimo: {format_mg_dl(stats.minimum)} mg/dL",
            f"Maximo: {format_mg_dl(stats.maximum)} mg/dL",
            f"Debajo del rango: {stats.percent_below:.1f}%",
            f"En rango (70-180 mg/dL): {stats.percent_in:.1f}%",
            f"Encima del rango: {stats.percent_above:.1f}%",
            f"Total de lecturas: {stats.count}",
        ]
    )
