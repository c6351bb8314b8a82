"""Slot occupancy - which appointments start in which calendar cell."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from .entities import BusinessHours, CalendarAppointment
from .hours import is_open
from .palette import category_color, staff_color, status_color
from .timegrid import TimeGrid, slot_count

SLOT_HEIGHT_PX = 60
CARD_INSET_PX = 16
MIN_CARD_HEIGHT_PX = 60


@dataclass
class Placement:
    """Where and how tall an appointment card is drawn."""

    appointment: CalendarAppointment
    start_index: int
    span: int
    buffer_span: int
    stack: int = 0

    @property
    def end_index(self) -> int:
        return self.start_index + self.span

    @property
    def height_px(self) -> int:
        return max(self.span * SLOT_HEIGHT_PX - CARD_INSET_PX, MIN_CARD_HEIGHT_PX)

    @property
    def buffer_height_px(self) -> int:
        if not self.buffer_span:
            return 0
        return self.buffer_span * SLOT_HEIGHT_PX - CARD_INSET_PX

    def to_dict(self) -> dict:
        return {
            "appointment": self.appointment.to_dict(),
            "start_index": self.start_index,
            "span": self.span,
            "buffer_span": self.buffer_span,
            "height_px": self.height_px,
            "buffer_height_px": self.buffer_height_px,
            "stack": self.stack,
            "colors": {
                "category": category_color(self.appointment.service_category),
                "status": status_color(self.appointment.status),
                "staff": staff_color(self.appointment.staff_name),
            },
        }


def place(appointment: CalendarAppointment, grid: TimeGrid) -> Placement | None:
    start = grid.resolve_start(appointment)
    if start is None:
        return None
    return Placement(
        appointment=appointment,
        start_index=start,
        span=slot_count(appointment.effective_duration),
        buffer_span=slot_count(appointment.effective_buffer),
    )


def occupants_of(
    day: date,
    time_slot: str,
    appointments: Iterable[CalendarAppointment],
    grid: TimeGrid,
) -> list[CalendarAppointment]:
    """Appointments whose starting cell is (``day``, ``time_slot``).

    Each appointment is reported once, at its start cell; callers size the
    card from its span. Cancelled appointments and appointments whose date
    cannot be read never match.
    """
    slot_index = grid.index(time_slot)
    if slot_index is None:
        return []
    matches = []
    for appt in appointments:
        if appt.is_cancelled or appt.day != day:
            continue
        if grid.resolve_start(appt, warn=False) == slot_index:
            matches.append(appt)
    return matches


@dataclass
class Cell:
    day: date
    time_slot: str
    open: bool
    placements: list[Placement]

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "time": self.time_slot,
            "open": self.open,
            "appointments": [p.to_dict() for p in self.placements],
        }


@dataclass
class WeekView:
    days: list[date]
    slots: list[str]
    rows: list[list[Cell]]

    def cell(self, day: date, time_slot: str) -> Cell:
        return self.rows[self.slots.index(time_slot)][self.days.index(day)]

    def to_dict(self) -> dict:
        return {
            "days": [d.isoformat() for d in self.days],
            "slots": self.slots,
            "rows": [[cell.to_dict() for cell in row] for row in self.rows],
        }


def build_week_view(
    days: list[date],
    grid: TimeGrid,
    appointments: Iterable[CalendarAppointment],
    hours: BusinessHours,
) -> WeekView:
    """Render list for every (slot, day) cell of the week.

    Placements sharing a start cell are stacked in the order given.
    """
    by_cell: dict[tuple[date, int], list[Placement]] = {}
    wanted = set(days)
    for appt in appointments:
        if appt.is_cancelled:
            continue
        day = appt.day
        if day not in wanted:
            continue
        placement = place(appt, grid)
        if placement is None:
            continue
        bucket = by_cell.setdefault((day, placement.start_index), [])
        placement.stack = len(bucket)
        bucket.append(placement)

    rows = [
        [
            Cell(
                day=day,
                time_slot=slot,
                open=is_open(hours, slot, day),
                placements=by_cell.get((day, i), []),
            )
            for day in days
        ]
        for i, slot in enumerate(grid.slots)
    ]
    return WeekView(days=list(days), slots=list(grid.slots), rows=rows)
