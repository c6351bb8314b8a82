"""Staff and location filtering of the rendered appointment list.

Filtering only decides what is drawn. Conflict checks always run against the
full appointment list so hiding a staff member never allows double-booking.
"""

from __future__ import annotations

from typing import Iterable

from .entities import UNKNOWN_STAFF, CalendarAppointment


def visible(
    appointments: Iterable[CalendarAppointment],
    selected_staff: set[str] | frozenset[str] | None = None,
    location_id: str | None = None,
) -> list[CalendarAppointment]:
    """Appointments to draw: never cancelled, optionally one location, and
    only the selected staff names when any are selected."""
    result = [a for a in appointments if not a.is_cancelled]
    if location_id is not None:
        result = [a for a in result if a.location_id == location_id]
    if selected_staff:
        result = [a for a in result if (a.staff_name or UNKNOWN_STAFF) in selected_staff]
    return result


def unique_staff(appointments: Iterable[CalendarAppointment]) -> list[str]:
    """Staff names in first-seen order, for the filter checklist."""
    seen: dict[str, None] = {}
    for appt in appointments:
        if appt.staff_name and appt.staff_name != UNKNOWN_STAFF:
            seen.setdefault(appt.staff_name, None)
    return list(seen)


class StaffFilter:
    """Staff selection injected by the host (which owns its persistence)."""

    def __init__(self, selected: Iterable[str] | None = None):
        self._selected: frozenset[str] = frozenset(selected or ())

    @property
    def selected(self) -> frozenset[str]:
        return self._selected

    def toggle(self, staff_name: str, checked: bool) -> "StaffFilter":
        if checked:
            return StaffFilter(self._selected | {staff_name})
        return StaffFilter(self._selected - {staff_name})

    def apply(
        self,
        appointments: Iterable[CalendarAppointment],
        location_id: str | None = None,
    ) -> list[CalendarAppointment]:
        return visible(appointments, self._selected, location_id)

    def __repr__(self) -> str:
        return f"<StaffFilter {sorted(self._selected)!r}>"
