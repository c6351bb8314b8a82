"""Drag-and-drop move executor.

One gesture runs ``IDLE -> DRAGGING -> DROPPED_VALID -> COMMITTING -> IDLE``
when accepted, or ``IDLE -> DRAGGING -> DROPPED_INVALID -> IDLE`` when the
drop lands on a closed or conflicting slot. Rejections leave the appointment
list untouched and never reach the schedule sink; an accepted move makes
exactly one sink call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Protocol

from .conflicts import describe_conflict, find_conflicting_appointment
from .entities import BusinessHours, CalendarAppointment
from .errors import (
    AppointmentNotFound,
    ClosedSlot,
    NotDraggable,
    PersistenceFailed,
    ScheduleConflict,
    StaleSchedule,
)
from .hours import is_open
from .timegrid import TimeGrid, to_12_hour

log = logging.getLogger(__name__)


class MoveState(str, Enum):
    idle = "idle"
    dragging = "dragging"
    dropped_valid = "dropped_valid"
    dropped_invalid = "dropped_invalid"
    committing = "committing"


class ScheduleSink(Protocol):
    """Where accepted moves are recorded.

    Returns False when the write failed; raises :class:`StaleSchedule` when
    the stored appointment changed since ``expected_version`` was read.
    """

    async def update_appointment_schedule(
        self,
        appointment_id: str,
        day: date,
        time_12h: str,
        expected_version: int | None = None,
    ) -> bool: ...


@dataclass
class MoveResult:
    appointment: CalendarAppointment
    previous_date: Any
    previous_time: str
    new_date: date
    new_time: str

    def to_dict(self) -> dict:
        return {
            "appointment": self.appointment.to_dict(),
            "previous_time": self.previous_time,
            "new_date": self.new_date.isoformat(),
            "new_time": self.new_time,
        }


@dataclass(frozen=True)
class SlotAction:
    """An empty-slot menu choice forwarded to the host."""

    kind: str  # "add_appointment" | "block_time"
    date: date
    time: str

    def to_dict(self) -> dict:
        return {"event": self.kind, "date": self.date.isoformat(), "time": self.time}


SlotCallback = Callable[[date, str], None]

SLOT_ACTION_KINDS = ("add_appointment", "block_time")


def emit_slot_action(
    kind: str,
    day: date,
    time_slot: str,
    callback: SlotCallback | None = None,
) -> SlotAction:
    """Build an empty-slot action and hand it to the host callback, if any."""
    if kind not in SLOT_ACTION_KINDS:
        raise ValueError(f"Unknown slot action: {kind!r}")
    action = SlotAction(kind, day, time_slot)
    log.debug("Slot action %s at %s %s", kind, day.isoformat(), time_slot)
    if callback is not None:
        callback(day, time_slot)
    return action


class MoveExecutor:
    """Validates and commits calendar moves against one appointment snapshot."""

    def __init__(
        self,
        appointments: list[CalendarAppointment],
        hours: BusinessHours,
        sink: ScheduleSink,
        *,
        grid: TimeGrid | None = None,
        active_location_id: str | None = None,
        on_add_appointment: SlotCallback | None = None,
        on_block_time: SlotCallback | None = None,
        grid_options: dict | None = None,
    ):
        self.appointments = appointments
        self.hours = hours
        self.sink = sink
        self.grid = grid or TimeGrid.from_hours(hours, **(grid_options or {}))
        self.active_location_id = active_location_id
        self.on_add_appointment = on_add_appointment
        self.on_block_time = on_block_time
        self.state = MoveState.idle
        self.dragging: CalendarAppointment | None = None

    def find(self, appointment_id: str) -> CalendarAppointment:
        for appt in self.appointments:
            if appt.id == appointment_id:
                return appt
        raise AppointmentNotFound(appointment_id)

    def begin_drag(self, appointment_id: str) -> CalendarAppointment:
        appt = self.find(appointment_id)
        if appt.is_cancelled:
            raise NotDraggable("Cancelled appointments cannot be moved.")
        self.state = MoveState.dragging
        self.dragging = appt
        return appt

    def can_drop(self, day: date, time_slot: str) -> bool:
        """Drag-over check: only open, on-grid slots accept a drop."""
        return time_slot in self.grid and is_open(self.hours, time_slot, day)

    def cancel_drag(self) -> None:
        self.state = MoveState.idle
        self.dragging = None

    async def move(
        self,
        appointment_id: str,
        new_date: date,
        new_time_slot: str,
    ) -> MoveResult:
        """Move an appointment to (``new_date``, ``new_time_slot``).

        ``new_time_slot`` is a 24-hour grid label. Raises a :class:`MoveError`
        subclass when the move is rejected.
        """
        try:
            moving = self.begin_drag(appointment_id)

            if not self.can_drop(new_date, new_time_slot):
                self.state = MoveState.dropped_invalid
                raise ClosedSlot(
                    f"The business is closed at {new_time_slot} on {new_date.isoformat()}."
                )

            conflicting = find_conflicting_appointment(
                moving,
                new_date,
                new_time_slot,
                self.appointments,
                self.grid,
                self.active_location_id,
            )
            if conflicting is not None:
                self.state = MoveState.dropped_invalid
                message = describe_conflict(moving, conflicting, new_time_slot)
                log.info("Move of %s rejected: blocked by %s", moving.id, conflicting.id)
                raise ScheduleConflict(message, conflicting)

            self.state = MoveState.dropped_valid
            return await self._commit(moving, new_date, new_time_slot)
        finally:
            self.cancel_drag()

    async def _commit(
        self,
        moving: CalendarAppointment,
        new_date: date,
        new_time_slot: str,
    ) -> MoveResult:
        self.state = MoveState.committing
        time_12h = to_12_hour(new_time_slot)
        previous_date, previous_time = moving.date, moving.time

        moving.date, moving.time = new_date, time_12h
        try:
            saved = await self.sink.update_appointment_schedule(
                moving.id, new_date, time_12h, moving.version
            )
        except StaleSchedule:
            moving.date, moving.time = previous_date, previous_time
            log.info("Move of %s lost a concurrent update", moving.id)
            raise ScheduleConflict(describe_conflict(moving, None, new_time_slot))
        except Exception as e:
            moving.date, moving.time = previous_date, previous_time
            log.exception("Schedule store failed while saving move of %s", moving.id)
            raise PersistenceFailed("Could not save the new appointment time. Please try again.") from e

        if not saved:
            moving.date, moving.time = previous_date, previous_time
            log.warning("Schedule store did not save move of %s", moving.id)
            raise PersistenceFailed("Could not save the new appointment time. Please try again.")

        if moving.version is not None:
            moving.version += 1
        log.info(
            "Moved appointment %s from %s %s to %s %s",
            moving.id, previous_date, previous_time, new_date.isoformat(), time_12h,
        )
        return MoveResult(
            appointment=moving,
            previous_date=previous_date,
            previous_time=previous_time,
            new_date=new_date,
            new_time=time_12h,
        )

    def request_add(self, day: date, time_slot: str) -> SlotAction:
        return emit_slot_action("add_appointment", day, time_slot, self.on_add_appointment)

    def request_block(self, day: date, time_slot: str) -> SlotAction:
        return emit_slot_action("block_time", day, time_slot, self.on_block_time)
