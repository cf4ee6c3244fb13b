from __future__ import annotations

import math
from pathlib import Path

from hourly_glucose.chart import ChartLayout, build_figure, chart_points, render_chart
from hourly_glucose.model import ReadingSet
from hourly_glucose.stats import RangeClassification

_PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def _day() -> ReadingSet:
    rs = ReadingSet.empty()
    for hour, value in {1: 60, 2: 120, 5: 250}.items():
        rs = rs.set_reading(hour, value)
    return rs


def test_chart_points_classified() -> None:
    points = chart_points(_day())
    assert [p.hour for p in points] == [1, 2, 5]
    assert [p.classification for p in points] == [
        RangeClassification.LOW,
        RangeClassification.NORMAL,
        RangeClassification.HIGH,
    ]


def test_figure_has_reference_lines_and_gaps() -> None:
    fig = build_figure(_day(), ChartLayout(tick_every=3))
    ax = fig.axes[0]

    series = ax.lines[0].get_ydata()
    assert len(series) == 24
    assert math.isnan(series[0])
    assert series[2] == 120

    y_refs = sorted(line.get_ydata()[0] for line in ax.lines[1:])
    assert y_refs == [70, 180]

    assert [t.get_text() for t in ax.get_xticklabels()][:3] == ["0:00", "3:00", "6:00"]
    assert ax.get_ylim()[0] == 0


def test_render_chart_writes_png(tmp_path: Path) -> None:
    out = render_chart(_day(), tmp_path / "charts" / "day.png")
    assert out.exists()
    assert out.read_bytes()[:8] == _PNG_MAGIC


def test_render_chart_empty_day(tmp_path: Path) -> None:
    out = render_chart(ReadingSet.empty(), tmp_path / "empty.png")
    assert out.read_bytes()[:8] == _PNG_MAGIC
