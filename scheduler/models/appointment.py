"""Appointment model."""

from __future__ import annotations

import uuid
import datetime as dt

from sqlalchemy import Date, Float, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin


class Appointment(UUIDMixin, TimestampMixin, TenantMixin, Base):
    __tablename__ = "appointment"
    __table_args__ = (
        Index("ix_appointment_business_date", "business_id", "date"),
    )

    location_id: Mapped["uuid.UUID | None"] = mapped_column(
        Uuid, ForeignKey("location.id", ondelete="SET NULL"), default=None, index=True
    )
    staff_id: Mapped["uuid.UUID | None"] = mapped_column(
        Uuid, ForeignKey("staff.id", ondelete="SET NULL"), default=None
    )
    # Display copy of the staff member's name at booking time
    staff_name: Mapped[str | None] = mapped_column(String(200), default=None)
    client_name: Mapped[str | None] = mapped_column(String(200), default=None)
    service_name: Mapped[str | None] = mapped_column(String(200), default=None)
    service_category: Mapped[str | None] = mapped_column(String(100), default=None)
    notes: Mapped[str | None] = mapped_column(Text, default=None)

    date: Mapped[dt.date] = mapped_column(Date)
    time: Mapped[str] = mapped_column(String(20))  # "h:mm AM/PM"
    duration: Mapped[int] = mapped_column(Integer, default=60)  # minutes
    buffer_time: Mapped[int] = mapped_column(Integer, default=0)  # minutes after the appointment
    price: Mapped[float] = mapped_column(Float, default=0.0)
    status: Mapped[str] = mapped_column(String(20), default="confirmed")  # confirmed/arrived/started/completed/cancelled/did_not_show

    payment_status: Mapped[str | None] = mapped_column(String(20), default=None)
    payment_amount: Mapped[float | None] = mapped_column(Float, default=None)

    # Bumped on every reschedule; compare-and-swap guard against concurrent moves
    version: Mapped[int] = mapped_column(Integer, default=1)

    # Relationships
    location: Mapped["Location | None"] = relationship()  # noqa: F821
    staff: Mapped["Staff | None"] = relationship()  # noqa: F821
