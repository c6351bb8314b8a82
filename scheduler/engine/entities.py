"""Engine data types - calendar appointments and weekly business hours."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

UNKNOWN_STAFF = "Unknown Staff"
DEFAULT_DURATION = 60  # minutes, used when an appointment carries no usable duration


class AppointmentStatus(str, Enum):
    confirmed = "confirmed"
    arrived = "arrived"
    started = "started"
    completed = "completed"
    cancelled = "cancelled"
    did_not_show = "did_not_show"


def coerce_date(value: Any) -> date | None:
    """Reduce a stored date value to its calendar day.

    Accepts ``date``, ``datetime`` and ISO-8601 strings (date or datetime).
    Anything else yields ``None`` so the caller can treat it as matching no day.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


@dataclass
class DayHours:
    open: str | None = None
    close: str | None = None

    @property
    def is_set(self) -> bool:
        return bool(self.open and self.close)


@dataclass
class BusinessHours:
    """Per-weekday opening hours for one location. A missing day is closed."""

    days: dict[str, DayHours] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict | None) -> "BusinessHours":
        days: dict[str, DayHours] = {}
        for name in WEEKDAYS:
            entry = (data or {}).get(name)
            if isinstance(entry, dict):
                days[name] = DayHours(open=entry.get("open") or None, close=entry.get("close") or None)
        return cls(days)

    def for_weekday(self, name: str) -> DayHours | None:
        entry = self.days.get(name)
        if entry is None or not entry.is_set:
            return None
        return entry

    def for_date(self, day: date) -> DayHours | None:
        return self.for_weekday(WEEKDAYS[day.weekday()])

    def to_dict(self) -> dict[str, dict[str, str]]:
        return {
            name: {"open": entry.open, "close": entry.close}
            for name, entry in self.days.items()
            if entry.is_set
        }



def _minutes(value: Any) -> int | None:
    """Positive whole minutes from an int, float or numeric string, else None."""
    if isinstance(value, bool):
        return None
    try:
        minutes = math.ceil(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    return minutes if minutes > 0 else None


# Accepted spellings when loading appointments from documents (camelCase
# exports from the booking app) as well as snake_case.
_FIELD_ALIASES = {
    "businessId": "business_id",
    "locationId": "location_id",
    "bufferTime": "buffer_time",
    "staffId": "staff_id",
    "staffName": "staff_name",
    "serviceCategory": "service_category",
    "serviceName": "service_name",
    "clientName": "client_name",
}


@dataclass
class CalendarAppointment:
    """The engine's view of one appointment.

    ``date`` keeps whatever the source stored; use :attr:`day` for comparisons.
    ``time`` is the canonical 12-hour ``"h:mm AM/PM"`` string.
    """

    id: str
    date: Any
    time: str
    duration: int = DEFAULT_DURATION
    buffer_time: int = 0
    staff_id: str | None = None
    staff_name: str = UNKNOWN_STAFF
    business_id: str | None = None
    location_id: str | None = None
    client_name: str = ""
    service_name: str = ""
    service_category: str | None = None
    status: str = AppointmentStatus.confirmed.value
    price: float = 0.0
    payment_status: str | None = None
    payment_amount: float | None = None
    version: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "CalendarAppointment":
        known = set(cls.__dataclass_fields__)
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            key = _FIELD_ALIASES.get(key, key)
            if key in known:
                kwargs[key] = value
        payment = data.get("payment")
        if isinstance(payment, dict):
            kwargs.setdefault("payment_status", payment.get("status"))
            kwargs.setdefault("payment_amount", payment.get("amount"))
        for key in ("id", "business_id", "location_id", "staff_id"):
            if kwargs.get(key) is not None:
                kwargs[key] = str(kwargs[key])
        if not kwargs.get("staff_name"):
            kwargs["staff_name"] = UNKNOWN_STAFF
        return cls(**kwargs)

    @property
    def day(self) -> date | None:
        return coerce_date(self.date)

    @property
    def is_cancelled(self) -> bool:
        return self.status == AppointmentStatus.cancelled.value

    @property
    def effective_duration(self) -> int:
        return _minutes(self.duration) or DEFAULT_DURATION

    @property
    def effective_buffer(self) -> int:
        return _minutes(self.buffer_time) or 0

    def same_resource(self, other: "CalendarAppointment") -> bool:
        """True when both appointments book the same staff member.

        Staff ids are compared when both sides have one; names are only the
        fallback for records that predate staff ids.
        """
        if self.staff_id and other.staff_id:
            return self.staff_id == other.staff_id
        return self.staff_name == other.staff_name

    def to_dict(self) -> dict[str, Any]:
        day = self.day
        return {
            "id": self.id,
            "date": day.isoformat() if day else None,
            "time": self.time,
            "duration": self.effective_duration,
            "buffer_time": self.effective_buffer,
            "staff_id": self.staff_id,
            "staff_name": self.staff_name,
            "location_id": self.location_id,
            "client_name": self.client_name,
            "service_name": self.service_name,
            "service_category": self.service_category,
            "status": self.status,
            "price": self.price,
            "payment": {"status": self.payment_status, "amount": self.payment_amount},
            "version": self.version,
        }
