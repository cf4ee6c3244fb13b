"""Grafico de 24 horas con lineas de referencia del rango objetivo."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.lines import Line2D

from hourly_glucose.model import HOURS_PER_DAY, ReadingSet
from hourly_glucose.stats import (
    STATUS_LABELS,
    TARGET_HIGH,
    TARGET_LOW,
    RangeClassification,
    classify,
    format_hour,
)

logger = logging.getLogger(__name__)

LINE_COLOR = "#3b82f6"
POINT_COLORS: dict[RangeClassification, str] = {
    RangeClassification.LOW: "#ef4444",
    RangeClassification.NORMAL: "#3b82f6",
    RangeClassification.HIGH: "#f97316",
}


@dataclass(frozen=True)
class ChartLayout:
    """Size and labelling of the rendered chart."""

    width_in: float = 10.0
    height_in: float = 4.0
    dpi: int = 100
    tick_every: int = 3
    title: str = "Glucosa en 24 horas"


@dataclass(frozen=True)
class ChartPoint:
    hour: int
    mg_dl: float
    classification: RangeClassification


def chart_points(readings: ReadingSet) -> list[ChartPoint]:
    """Plotted points, one per recorded hour."""
    return [
        ChartPoint(hour=hour, mg_dl=value, classification=classify(value))
        for hour, value in readings.present()
    ]


def build_figure(readings: ReadingSet, layout: ChartLayout | None = None) -> Figure:
    """Build the chart figure.

    The line is broken at hours without a reading; each point is colored by
    its range classification.
    """
    layout = layout or ChartLayout()
    fig = Figure(figsize=(layout.width_in, layout.height_in), dpi=layout.dpi)
    FigureCanvasAgg(fig)
    ax = fig.add_subplot(1, 1, 1)

    hours = list(range(HOURS_PER_DAY))
    series = [math.nan if v is None else v for v in readings.to_list()]
    ax.plot(hours, series, color=LINE_COLOR, linewidth=2.5, zorder=2)

    points = chart_points(readings)
    if points:
        ax.scatter(
            [p.hour for p in points],
            [p.mg_dl for p in points],
            c=[POINT_COLORS[p.classification] for p in points],
            s=45,
            edgecolors="white",
            linewidths=1.5,
            zorder=3,
        )

    for y, label, color in (
        (TARGET_LOW, STATUS_LABELS[RangeClassification.LOW], "#ef4444"),
        (TARGET_HIGH, STATUS_LABELS[RangeClassification.HIGH], "#f97316"),
    ):
        ax.axhline(y, color=color, linewidth=1.5, linestyle="--", zorder=1)
        ax.annotate(
            label,
            xy=(1.0, y),
            xycoords=("axes fraction", "data"),
            xytext=(4, 0),
            textcoords="offset points",
            va="center",
            color=color,
            fontsize=9,
        )

    ticks = hours[:: layout.tick_every]
    ax.set_xticks(ticks)
    ax.set_xticklabels([format_hour(h) for h in ticks])
    ax.set_xlim(-0.5, HOURS_PER_DAY - 0.5)
    top = max([TARGET_HIGH, *(p.mg_dl for p in points)]) * 1.1
    ax.set_ylim(0, top)
    ax.set_xlabel("Hora")
    ax.set_ylabel("mg/dL")
    ax.set_title(layout.title)
    ax.grid(True, linestyle=":", alpha=0.5)

    legend = [
        Line2D(
            [0],
            [0],
            marker="o",
            color="w",
            markerfacecolor=POINT_COLORS[c],
            markersize=7,
            label=_legend_label(c),
        )
        for c in RangeClassification
    ]
    ax.legend(handles=legend, loc="upper left", fontsize=8, frameon=False)
    fig.tight_layout()
    return fig


def render_chart(
    readings: ReadingSet, out_path: Path, layout: ChartLayout | None = None
) -> Path:
    """Render the chart as PNG at ``out_path`` and return the path."""
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig = build_figure(readings, layout)
    fig.savefig(out_path, format="png")
    logger.info("Chart written to %s", out_path)
    return out_path


def _legend_label(classification: RangeClassification) -> str:
    if classification is RangeClassification.LOW:
        return f"Bajo (<{TARGET_LOW:g})"
    if classification is RangeClassification.HIGH:
        return f"Alto (>{TARGET_HIGH:g})"
    return "Normal"
