"""Modelo tipado de las 24 lecturas horarias de glucosa de un día."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from hourly_glucose.errors import ErrorReason, ValidationError

HOURS_PER_DAY = 24
MIN_MG_DL = 0.0
MAX_MG_DL = 600.0

_INVALID_NUMBER_MSG = "Ingresa un numero valido."
_OUT_OF_RANGE_MSG = "La glucosa debe estar entre 0 y 600 mg/dL."


@dataclass(frozen=True)
class Present:
    """Slot holding a recorded reading."""

    mg_dl: float


@dataclass(frozen=True)
class Absent:
    """Slot without a reading for that hour."""


ABSENT = Absent()

Slot = Present | Absent


@dataclass(frozen=True)
class TimeBlock:
    """Group of consecutive hours shown together in the hour picker."""

    name: str
    hours: tuple[int, ...]


TIME_BLOCKS: tuple[TimeBlock, ...] = (
    TimeBlock("Madrugada", tuple(range(0, 6))),
    TimeBlock("Mañana", tuple(range(6, 12))),
    TimeBlock("Tarde", tuple(range(12, 18))),
    TimeBlock("Noche", tuple(range(18, 24))),
)


def next_hour(hour: int) -> int:
    """Return the hour that follows ``hour``, wrapping 23 -> 0."""
    return (hour + 1) % HOURS_PER_DAY


def validate_hour(hour: object) -> int:
    """Return ``hour`` if it is an integer in [0, 23].

    Raises:
        ValidationError: With reason ``invalid_hour`` otherwise.
    """
    if isinstance(hour, bool) or not isinstance(hour, int):
        raise ValidationError(
            ErrorReason.INVALID_HOUR, f"Hora invalida: {hour!r} (0 a 23)."
        )
    if not 0 <= hour < HOURS_PER_DAY:
        raise ValidationError(
            ErrorReason.INVALID_HOUR, f"La hora debe estar entre 0 y 23: {hour}."
        )
    return hour


def parse_value(raw_value: object) -> float:
    """Parse user input into a reading value in mg/dL.

    Args:
        raw_value: Text typed by the user or a number.

    Returns:
        The finite value, within [0, 600].

    Raises:
        ValidationError: ``invalid_number`` if it does not parse to a finite
            number, ``out_of_range`` if it falls outside [0, 600].
    """
    if isinstance(raw_value, bool):
        raise ValidationError(ErrorReason.INVALID_NUMBER, _INVALID_NUMBER_MSG)
    if isinstance(raw_value, str):
        text = raw_value.strip().replace(",", ".")
        if not text:
            raise ValidationError(
                ErrorReason.INVALID_NUMBER, "Ingresa un valor de glucosa."
            )
        try:
            value = float(text)
        except ValueError:
            raise ValidationError(
                ErrorReason.INVALID_NUMBER, f"Numero invalido: {raw_value!r}."
            ) from None
    elif isinstance(raw_value, int | float):
        try:
            value = float(raw_value)
        except OverflowError:
            raise ValidationError(ErrorReason.OUT_OF_RANGE, _OUT_OF_RANGE_MSG) from None
    else:
        raise ValidationError(ErrorReason.INVALID_NUMBER, _INVALID_NUMBER_MSG)

    if not math.isfinite(value):
        raise ValidationError(ErrorReason.INVALID_NUMBER, _INVALID_NUMBER_MSG)
    if not MIN_MG_DL <= value <= MAX_MG_DL:
        raise ValidationError(ErrorReason.OUT_OF_RANGE, _OUT_OF_RANGE_MSG)
    return value


def _empty_slots() -> tuple[Slot, ...]:
    return (ABSENT,) * HOURS_PER_DAY


@dataclass(frozen=True)
class ReadingSet:
    """Fixed 24-slot day of readings, indexed by hour.

    Instances are immutable: every mutation returns a new ``ReadingSet``, so a
    rejected mutation leaves the caller's set untouched.
    """

    slots: tuple[Slot, ...] = field(default_factory=_empty_slots)

    def __post_init__(self) -> None:
        if len(self.slots) != HOURS_PER_DAY:
            raise ValueError(
                f"ReadingSet needs {HOURS_PER_DAY} slots, got {len(self.slots)}"
            )
        for slot in self.slots:
            if isinstance(slot, Present):
                parse_value(slot.mg_dl)
            elif not isinstance(slot, Absent):
                raise ValueError(f"Unexpected slot {slot!r}")

    @classmethod
    def empty(cls) -> ReadingSet:
        """Return a day with every hour absent."""
        return cls()

    @classmethod
    def from_list(cls, values: Iterable[object]) -> ReadingSet:
        """Build a set from 24 numbers-or-None, validating every value.

        Raises:
            ValueError: If the sequence does not have 24 elements.
            ValidationError: If any present value is invalid.
        """
        items = list(values)
        if len(items) != HOURS_PER_DAY:
            raise ValueError(f"Expected {HOURS_PER_DAY} values, got {len(items)}")
        slots: list[Slot] = [
            ABSENT if item is None else Present(parse_value(item)) for item in items
        ]
        return cls(tuple(slots))

    def to_list(self) -> list[float | None]:
        """Return the 24 values, ``None`` for absent hours."""
        return [
            slot.mg_dl if isinstance(slot, Present) else None for slot in self.slots
        ]

    def get(self, hour: int) -> float | None:
        """Value recorded at ``hour`` or ``None``."""
        slot = self.slots[validate_hour(hour)]
        return slot.mg_dl if isinstance(slot, Present) else None

    def present(self) -> list[tuple[int, float]]:
        """Hour/value pairs for recorded hours, in hour order."""
        return [
            (hour, slot.mg_dl)
            for hour, slot in enumerate(self.slots)
            if isinstance(slot, Present)
        ]

    @property
    def count(self) -> int:
        """Number of recorded hours."""
        return sum(1 for slot in self.slots if isinstance(slot, Present))

    def is_empty(self) -> bool:
        return self.count == 0

    def set_reading(self, hour: object, raw_value: object) -> ReadingSet:
        """Return a copy with ``hour`` set to the parsed ``raw_value``.

        Used both for new readings and for edits from the table.

        Raises:
            ValidationError: ``invalid_hour``, ``invalid_number`` or
                ``out_of_range``.
        """
        index = validate_hour(hour)
        value = parse_value(raw_value)
        return self._replace(index, Present(value))

    def clear_reading(self, hour: object) -> ReadingSet:
        """Return a copy with ``hour`` absent."""
        index = validate_hour(hour)
        if isinstance(self.slots[index], Absent):
            return self
        return self._replace(index, ABSENT)

    def clear_all(self) -> ReadingSet:
        """Return an all-absent set."""
        return ReadingSet.empty()

    def _replace(self, index: int, slot: Slot) -> ReadingSet:
        slots = list(self.slots)
        slots[index] = slot
        return ReadingSet(tuple(slots))
