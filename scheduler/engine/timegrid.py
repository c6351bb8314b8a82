"""Time grid - 15-minute slot labels derived from weekly business hours."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta

from .entities import WEEKDAYS, BusinessHours, CalendarAppointment

log = logging.getLogger(__name__)

SLOT_MINUTES = 15


def to_minutes(time_24: str) -> int | None:
    """Minutes since midnight for an ``HH:MM`` string, or None if unparseable."""
    try:
        hours, minutes = time_24.strip().split(":")[:2]
        return int(hours) * 60 + int(minutes)
    except (AttributeError, ValueError):
        return None


def to_24_hour(time_12: str) -> str:
    """Convert ``"h:mm AM/PM"`` to ``"HH:MM"``. Values without AM/PM pass through."""
    if not time_12:
        return ""
    text = time_12.strip()
    upper = text.upper()
    if "AM" not in upper and "PM" not in upper:
        return text

    time_part, _, modifier = text.partition(" ")
    if not modifier:
        # "10:00AM"
        time_part, modifier = text[:-2], text[-2:]
    modifier = modifier.strip().upper()
    hours, _, minutes = time_part.partition(":")
    try:
        hour = int(hours)
    except ValueError:
        return text

    if hour == 12:
        hour = 0 if modifier == "AM" else 12
    elif modifier == "PM":
        hour += 12
    return f"{hour:02d}:{minutes}"


def to_12_hour(time_24: str) -> str:
    """Convert a ``"HH:MM"`` slot label to the canonical ``"h:mm AM/PM"`` form."""
    hours, _, minutes = time_24.partition(":")
    hour = int(hours)
    period = "PM" if hour >= 12 else "AM"
    hour12 = 12 if hour == 0 else hour - 12 if hour > 12 else hour
    return f"{hour12}:{minutes} {period}"


def build_time_slots(
    hours: BusinessHours,
    *,
    default_open: int = 9,
    default_close: int = 19,
    padding: int = 1,
) -> list[str]:
    """Slot labels from ``padding`` hours before the earliest weekly opening
    to ``padding`` hours after the latest weekly closing, inclusive of the
    whole last hour.
    """
    open_hours: list[int] = []
    close_hours: list[int] = []
    for name in WEEKDAYS:
        entry = hours.for_weekday(name)
        if entry is None:
            continue
        open_minutes = to_minutes(entry.open)
        close_minutes = to_minutes(entry.close)
        if open_minutes is None or close_minutes is None:
            continue
        open_hours.append(open_minutes // 60)
        close_hours.append(close_minutes // 60)

    earliest_open = min(open_hours) if open_hours else default_open
    latest_close = max(close_hours) if close_hours else default_close

    start_hour = max(earliest_open - padding, 0)
    end_hour = min(latest_close + padding, 23)

    return [
        f"{hour:02d}:{minute:02d}"
        for hour in range(start_hour, end_hour + 1)
        for minute in range(0, 60, SLOT_MINUTES)
    ]


def slot_count(minutes: int) -> int:
    """Number of grid slots needed to cover ``minutes``."""
    if minutes <= 0:
        return 0
    return math.ceil(minutes / SLOT_MINUTES)


@dataclass
class TimeGrid:
    """Ordered slot labels with index lookups."""

    slots: list[str]
    _positions: dict[str, int] = field(init=False, repr=False)
    _minutes: list[int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._positions = {slot: i for i, slot in enumerate(self.slots)}
        self._minutes = [to_minutes(slot) for slot in self.slots]

    @classmethod
    def from_hours(cls, hours: BusinessHours, **options) -> "TimeGrid":
        return cls(build_time_slots(hours, **options))

    def __len__(self) -> int:
        return len(self.slots)

    def __contains__(self, slot: str) -> bool:
        return slot in self._positions

    def index(self, slot: str) -> int | None:
        return self._positions.get(slot)

    def nearest_index(self, minutes: int) -> int | None:
        """Index of the slot with the smallest absolute distance to ``minutes``.

        Ties go to the earlier slot.
        """
        best: int | None = None
        best_diff = None
        for i, slot_minutes in enumerate(self._minutes):
            diff = abs(slot_minutes - minutes)
            if best_diff is None or diff < best_diff:
                best, best_diff = i, diff
        return best

    def resolve_start(self, appointment: CalendarAppointment, *, warn: bool = True) -> int | None:
        """Starting slot index for an appointment.

        Irregular stored times fall back to the nearest slot rather than
        dropping the appointment. Returns None only when the time cannot be
        read at all. Pass ``warn=False`` from repeated lookups so each
        irregular time is reported at warning level only once per render.
        """
        level = logging.WARNING if warn else logging.DEBUG
        time_24 = to_24_hour(appointment.time)
        exact = self.index(time_24)
        if exact is not None:
            return exact

        minutes = to_minutes(time_24)
        if minutes is None:
            log.log(
                level,
                "Appointment %s has unreadable time %r; not placed on grid",
                appointment.id, appointment.time,
            )
            return None

        nearest = self.nearest_index(minutes)
        if nearest is not None:
            log.log(
                level,
                "Appointment %s time %r is off-grid; using nearest slot %s",
                appointment.id, appointment.time, self.slots[nearest],
            )
        return nearest


def week_dates(anchor: date) -> list[date]:
    """The Monday-to-Sunday week containing ``anchor``."""
    monday = anchor - timedelta(days=anchor.weekday())
    return [monday + timedelta(days=i) for i in range(7)]


def shift_week(anchor: date, direction: str) -> date:
    """Move the calendar anchor one week ``"prev"`` or ``"next"``."""
    if direction == "next":
        return anchor + timedelta(days=7)
    if direction == "prev":
        return anchor - timedelta(days=7)
    raise ValueError(f"Unknown week direction: {direction!r}")
