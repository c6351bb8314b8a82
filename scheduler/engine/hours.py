"""Business-hours checks for calendar slots."""

from __future__ import annotations

from datetime import date

from .entities import WEEKDAYS, BusinessHours, DayHours
from .timegrid import to_minutes


def opening_window(hours: BusinessHours, day: date) -> tuple[int, int] | None:
    """(open, close) in minutes since midnight for ``day``, or None when closed."""
    entry = hours.for_date(day)
    if entry is None:
        return None
    open_minutes = to_minutes(entry.open)
    close_minutes = to_minutes(entry.close)
    if open_minutes is None or close_minutes is None:
        return None
    return open_minutes, close_minutes


def is_open(hours: BusinessHours, time_slot: str, day: date) -> bool:
    """Whether the location is open at ``time_slot`` on ``day``.

    The window is half-open: a slot starting exactly at closing is closed.
    """
    window = opening_window(hours, day)
    if window is None:
        return False
    slot_minutes = to_minutes(time_slot)
    if slot_minutes is None:
        return False
    open_minutes, close_minutes = window
    return open_minutes <= slot_minutes < close_minutes


def merge_business_hours(*all_hours: BusinessHours) -> BusinessHours:
    """Aggregate hours across locations: earliest open and latest close per day."""
    merged: dict[str, DayHours] = {}
    for hours in all_hours:
        for name in WEEKDAYS:
            entry = hours.for_weekday(name)
            if entry is None:
                continue
            open_minutes, close_minutes = to_minutes(entry.open), to_minutes(entry.close)
            if open_minutes is None or close_minutes is None:
                continue
            current = merged.get(name)
            if current is None:
                merged[name] = DayHours(open=entry.open, close=entry.close)
                continue
            if open_minutes < to_minutes(current.open):
                current.open = entry.open
            if close_minutes > to_minutes(current.close):
                current.close = entry.close
    return BusinessHours(merged)
