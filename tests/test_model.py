from __future__ import annotations

import math

import pytest

from hourly_glucose.errors import ErrorReason, ValidationError
from hourly_glucose.model import (
    ABSENT,
    HOURS_PER_DAY,
    TIME_BLOCKS,
    Present,
    ReadingSet,
    next_hour,
    parse_value,
)


def test_empty_set_has_24_absent_slots() -> None:
    rs = ReadingSet.empty()
    assert len(rs.slots) == HOURS_PER_DAY
    assert all(slot == ABSENT for slot in rs.slots)
    assert rs.count == 0
    assert rs.is_empty()


def test_wrong_slot_count_is_rejected() -> None:
    with pytest.raises(ValueError):
        ReadingSet((ABSENT,) * 23)


@pytest.mark.parametrize("value", [900.0, -1.0, math.nan, 10**400])
def test_invalid_slot_value_is_rejected_on_construction(value: float) -> None:
    with pytest.raises(ValidationError):
        ReadingSet((Present(value),) + (ABSENT,) * 23)


def test_unknown_slot_type_is_rejected() -> None:
    with pytest.raises(ValueError):
        ReadingSet((120.0,) + (ABSENT,) * 23)  # type: ignore[arg-type]


@pytest.mark.parametrize("hour", [0, 7, 23])
@pytest.mark.parametrize("value", [0, 69.9, 120, 600])
def test_set_then_get_returns_value(hour: int, value: float) -> None:
    rs = ReadingSet.empty().set_reading(hour, value)
    assert rs.get(hour) == value
    assert rs.slots[hour] == Present(float(value))
    assert rs.count == 1


def test_set_reading_parses_text() -> None:
    rs = ReadingSet.empty().set_reading(8, " 112.5 ")
    assert rs.get(8) == 112.5


def test_set_reading_accepts_decimal_comma() -> None:
    assert ReadingSet.empty().set_reading(8, "98,4").get(8) == 98.4


def test_set_reading_is_idempotent() -> None:
    once = ReadingSet.empty().set_reading(3, "150")
    twice = once.set_reading(3, "150")
    assert once == twice


def test_set_reading_returns_new_set() -> None:
    rs = ReadingSet.empty()
    updated = rs.set_reading(5, 100)
    assert rs.get(5) is None
    assert updated.get(5) == 100


def test_set_reading_overwrites_previous_value() -> None:
    rs = ReadingSet.empty().set_reading(5, 100).set_reading(5, 140)
    assert rs.get(5) == 140
    assert rs.count == 1


@pytest.mark.parametrize("raw", [-0.1, 600.1, "700", "-5", 1000, 10**400, -(10**400)])
def test_out_of_range_values_are_rejected(raw: object) -> None:
    rs = ReadingSet.empty().set_reading(1, 90)
    with pytest.raises(ValidationError) as exc_info:
        rs.set_reading(1, raw)
    assert exc_info.value.reason is ErrorReason.OUT_OF_RANGE
    assert rs.get(1) == 90


@pytest.mark.parametrize(
    "raw", ["", "   ", "abc", "12abc", "nan", "inf", math.nan, math.inf, None, True]
)
def test_non_numeric_values_are_rejected(raw: object) -> None:
    rs = ReadingSet.empty()
    with pytest.raises(ValidationError) as exc_info:
        rs.set_reading(1, raw)
    assert exc_info.value.reason is ErrorReason.INVALID_NUMBER
    assert rs.is_empty()


@pytest.mark.parametrize("hour", [-1, 24, 100, 1.5, "3", None, True])
def test_invalid_hours_are_rejected(hour: object) -> None:
    with pytest.raises(ValidationError) as exc_info:
        ReadingSet.empty().set_reading(hour, 100)
    assert exc_info.value.reason is ErrorReason.INVALID_HOUR


def test_hour_is_checked_before_value() -> None:
    with pytest.raises(ValidationError) as exc_info:
        ReadingSet.empty().set_reading(30, "abc")
    assert exc_info.value.reason is ErrorReason.INVALID_HOUR


def test_validation_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        parse_value("x")


def test_bounds_are_inclusive() -> None:
    assert parse_value(0) == 0.0
    assert parse_value("600") == 600.0


def test_clear_reading() -> None:
    rs = ReadingSet.empty().set_reading(10, 130).set_reading(11, 140)
    cleared = rs.clear_reading(10)
    assert cleared.get(10) is None
    assert cleared.get(11) == 140


def test_clear_reading_on_absent_hour_is_noop() -> None:
    rs = ReadingSet.empty().set_reading(11, 140)
    assert rs.clear_reading(10) is rs


def test_clear_reading_rejects_invalid_hour() -> None:
    with pytest.raises(ValidationError) as exc_info:
        ReadingSet.empty().clear_reading(24)
    assert exc_info.value.reason is ErrorReason.INVALID_HOUR


def test_clear_all() -> None:
    rs = ReadingSet.empty().set_reading(0, 80).set_reading(23, 200)
    assert rs.clear_all() == ReadingSet.empty()


def test_present_is_ordered_by_hour() -> None:
    rs = ReadingSet.empty().set_reading(20, 150).set_reading(2, 90)
    assert rs.present() == [(2, 90.0), (20, 150.0)]


def test_list_roundtrip() -> None:
    values: list[float | None] = [None] * HOURS_PER_DAY
    values[0] = 70.0
    values[12] = 181.5
    rs = ReadingSet.from_list(values)
    assert rs.to_list() == values
    assert ReadingSet.from_list(rs.to_list()) == rs


def test_from_list_requires_24_items() -> None:
    with pytest.raises(ValueError):
        ReadingSet.from_list([None] * 25)


def test_from_list_validates_values() -> None:
    values: list[object] = [None] * HOURS_PER_DAY
    values[4] = 601
    with pytest.raises(ValidationError):
        ReadingSet.from_list(values)


def test_next_hour_wraps() -> None:
    assert next_hour(23) == 0
    assert [next_hour(h) for h in range(23)] == list(range(1, 24))


def test_time_blocks_cover_the_day_once() -> None:
    hours = [h for block in TIME_BLOCKS for h in block.hours]
    assert hours == list(range(HOURS_PER_DAY))
    assert all(len(block.hours) == 6 for block in TIME_BLOCKS)
