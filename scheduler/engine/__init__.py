"""Scheduling core - time grid, occupancy, conflicts and moves."""

from .conflicts import describe_conflict, find_conflicting_appointment, has_conflict, overlapping_pairs
from .entities import AppointmentStatus, BusinessHours, CalendarAppointment, DayHours
from .errors import (
    AppointmentNotFound,
    ClosedSlot,
    MoveError,
    NotDraggable,
    PersistenceFailed,
    ScheduleConflict,
    StaleSchedule,
)
from .filters import StaffFilter, unique_staff, visible
from .hours import is_open, merge_business_hours, opening_window
from .mover import MoveExecutor, MoveResult, MoveState, ScheduleSink, SlotAction, emit_slot_action
from .occupancy import build_week_view, occupants_of
from .timegrid import TimeGrid, build_time_slots, shift_week, to_12_hour, to_24_hour, week_dates

__all__ = [
    "AppointmentNotFound",
    "AppointmentStatus",
    "BusinessHours",
    "CalendarAppointment",
    "ClosedSlot",
    "DayHours",
    "MoveError",
    "MoveExecutor",
    "MoveResult",
    "MoveState",
    "NotDraggable",
    "PersistenceFailed",
    "ScheduleConflict",
    "ScheduleSink",
    "SlotAction",
    "StaffFilter",
    "StaleSchedule",
    "TimeGrid",
    "build_time_slots",
    "build_week_view",
    "describe_conflict",
    "emit_slot_action",
    "find_conflicting_appointment",
    "has_conflict",
    "is_open",
    "merge_business_hours",
    "occupants_of",
    "opening_window",
    "overlapping_pairs",
    "shift_week",
    "to_12_hour",
    "to_24_hour",
    "unique_staff",
    "visible",
    "week_dates",
]
