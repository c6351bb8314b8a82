"""Conflict detection for proposed appointment moves.

A move conflicts when, on the target date, the same staff member already has
a non-cancelled appointment whose occupied range (duration plus its own
trailing buffer) overlaps the moved appointment's range. Ranges are half-open
slot intervals, so back-to-back appointments do not conflict.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

from .entities import CalendarAppointment
from .timegrid import TimeGrid, slot_count


def _candidates(
    moving: CalendarAppointment,
    new_date: date,
    appointments: Iterable[CalendarAppointment],
    active_location_id: str | None,
):
    for appt in appointments:
        if appt.id == moving.id:
            continue
        if appt.is_cancelled:
            continue
        if active_location_id is not None and appt.location_id != active_location_id:
            continue
        # Different staff can always be double-booked in the same slot.
        if not moving.same_resource(appt):
            continue
        if appt.day != new_date:
            continue
        yield appt


def find_conflicting_appointment(
    moving: CalendarAppointment,
    new_date: date,
    new_time_slot: str,
    appointments: Iterable[CalendarAppointment],
    grid: TimeGrid,
    active_location_id: str | None = None,
) -> CalendarAppointment | None:
    """First appointment that blocks moving ``moving`` to (new_date, new_time_slot).

    ``appointments`` must be the full, unfiltered list.
    """
    new_index = grid.index(new_time_slot)
    if new_index is None:
        raise ValueError(f"Time slot {new_time_slot!r} is not on the calendar grid")

    # Only the stationary appointment's buffer extends its blocked range; the
    # moving appointment's own buffer is not checked against what follows it.
    # Unclear whether that is intended product behaviour, so it is kept as is.
    moving_end = new_index + slot_count(moving.effective_duration)

    for candidate in _candidates(moving, new_date, appointments, active_location_id):
        start = grid.resolve_start(candidate, warn=False)
        if start is None:
            continue
        end = (
            start
            + slot_count(candidate.effective_duration)
            + slot_count(candidate.effective_buffer)
        )
        if new_index < end and moving_end > start:
            return candidate
    return None


def has_conflict(
    moving: CalendarAppointment,
    new_date: date,
    new_time_slot: str,
    appointments: Iterable[CalendarAppointment],
    grid: TimeGrid,
    active_location_id: str | None = None,
) -> bool:
    return find_conflicting_appointment(
        moving, new_date, new_time_slot, appointments, grid, active_location_id
    ) is not None


def describe_conflict(
    moving: CalendarAppointment,
    conflicting: CalendarAppointment | None,
    new_time_slot: str,
) -> str:
    """User-facing rejection message for a blocked move."""
    client = moving.client_name or "the client"
    if conflicting is not None:
        return (
            f"Cannot move {client}'s appointment - {moving.staff_name} already has "
            f"an appointment at {conflicting.time} ({conflicting.effective_duration} min)"
        )
    return (
        f"Cannot move {client}'s appointment - {moving.staff_name} has a "
        f"scheduling conflict at {new_time_slot}"
    )


def overlapping_pairs(
    appointments: Iterable[CalendarAppointment],
    grid: TimeGrid,
    *,
    include_buffers: bool = False,
) -> list[tuple[CalendarAppointment, CalendarAppointment]]:
    """Pairs of same-staff, same-day appointments whose ranges overlap.

    Used to audit a schedule (for example after an import) rather than to
    gate a move. By default ranges cover the booked duration only, which is
    what the move check guarantees: since the moving appointment's buffer is
    not applied, an accepted move can leave a buffer running into the next
    booking. ``include_buffers`` extends every range by its own trailing
    buffer to list those intrusions as well.
    """
    placed = []
    for appt in appointments:
        if appt.is_cancelled or appt.day is None:
            continue
        start = grid.resolve_start(appt)
        if start is None:
            continue
        end = start + slot_count(appt.effective_duration)
        if include_buffers:
            end += slot_count(appt.effective_buffer)
        placed.append((appt, start, end))

    pairs = []
    for i, (a, a_start, a_end) in enumerate(placed):
        for b, b_start, b_end in placed[i + 1:]:
            if a.day != b.day or not a.same_resource(b):
                continue
            if a_start < b_end and b_start < a_end:
                pairs.append((a, b))
    return pairs
