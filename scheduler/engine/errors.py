"""Errors raised while moving an appointment on the calendar."""

from __future__ import annotations


class MoveError(Exception):
    """Base class for rejected moves. ``str(error)`` is safe to show to users."""


class AppointmentNotFound(MoveError):
    """The appointment is no longer in the calendar's appointment list."""

    def __init__(self, appointment_id: str):
        self.appointment_id = appointment_id
        super().__init__("Appointment not found. Please refresh the page.")


class NotDraggable(MoveError):
    """Cancelled appointments cannot be rescheduled."""


class ClosedSlot(MoveError):
    """The target slot is outside business hours or off the grid."""


class ScheduleConflict(MoveError):
    """The move would double-book the staff member."""

    def __init__(self, message: str, conflicting=None):
        self.conflicting = conflicting
        super().__init__(message)


class PersistenceFailed(MoveError):
    """The schedule store refused or failed to record the move."""


class StaleSchedule(Exception):
    """Raised by a schedule sink when the stored appointment changed since it
    was read (compare-and-swap lost)."""
