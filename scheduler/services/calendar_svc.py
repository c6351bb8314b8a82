"""Calendar service - appointment source, schedule sink, business hours, moves."""

from __future__ import annotations

import logging
import uuid
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..engine import (
    BusinessHours,
    CalendarAppointment,
    MoveExecutor,
    MoveResult,
    StaleSchedule,
    TimeGrid,
    build_week_view,
    merge_business_hours,
    overlapping_pairs,
    unique_staff,
    visible,
    week_dates,
)
from ..engine.occupancy import WeekView
from ..models.appointment import Appointment
from ..models.business import Business, Location

log = logging.getLogger(__name__)


def to_calendar_appointment(row: Appointment) -> CalendarAppointment:
    return CalendarAppointment(
        id=str(row.id),
        date=row.date,
        time=row.time,
        duration=row.duration,
        buffer_time=row.buffer_time or 0,
        staff_id=str(row.staff_id) if row.staff_id else None,
        staff_name=row.staff_name or "Unknown Staff",
        business_id=str(row.business_id),
        location_id=str(row.location_id) if row.location_id else None,
        client_name=row.client_name or "",
        service_name=row.service_name or "",
        service_category=row.service_category,
        status=row.status,
        price=row.price or 0.0,
        payment_status=row.payment_status,
        payment_amount=row.payment_amount,
        version=row.version,
    )


async def get_business(db: AsyncSession, business_id: uuid.UUID) -> Business | None:
    return (
        await db.execute(select(Business).where(Business.id == business_id))
    ).scalar_one_or_none()


async def get_location(
    db: AsyncSession, business_id: uuid.UUID, location_id: uuid.UUID
) -> Location | None:
    stmt = select(Location).where(
        Location.id == location_id, Location.business_id == business_id
    )
    return (await db.execute(stmt)).scalar_one_or_none()


async def list_locations(db: AsyncSession, business_id: uuid.UUID) -> list[Location]:
    stmt = select(Location).where(Location.business_id == business_id).order_by(Location.name)
    return list((await db.execute(stmt)).scalars().all())


async def list_appointments(
    db: AsyncSession,
    business_id: uuid.UUID,
    location_id: uuid.UUID | None = None,
) -> list[CalendarAppointment]:
    """Read-only snapshot of the appointments for a business.

    Includes cancelled appointments, and every location unless one is given;
    the engine decides what is visible and what blocks.
    """
    stmt = select(Appointment).where(Appointment.business_id == business_id)
    if location_id is not None:
        stmt = stmt.where(Appointment.location_id == location_id)
    stmt = stmt.order_by(Appointment.date, Appointment.created_at)
    rows = (await db.execute(stmt)).scalars().all()
    return [to_calendar_appointment(r) for r in rows]


async def create_appointment(
    db: AsyncSession, business_id: uuid.UUID, **kwargs
) -> Appointment:
    appt = Appointment(business_id=business_id, **kwargs)
    db.add(appt)
    await db.commit()
    await db.refresh(appt)
    return appt


async def update_appointment_schedule(
    db: AsyncSession,
    appointment_id: uuid.UUID,
    day: date,
    time_12h: str,
    expected_version: int | None = None,
) -> bool:
    """Write a new date/time for an appointment.

    With ``expected_version`` the write is a compare-and-swap: if the row's
    version moved on, :class:`StaleSchedule` is raised and nothing changes.
    Returns False when the appointment no longer exists.
    """
    stmt = (
        update(Appointment)
        .where(Appointment.id == appointment_id)
        .values(date=day, time=time_12h, version=Appointment.version + 1)
    )
    if expected_version is not None:
        stmt = stmt.where(Appointment.version == expected_version)
    result = await db.execute(stmt)
    await db.commit()

    if result.rowcount == 1:
        return True
    exists = (
        await db.execute(select(Appointment.id).where(Appointment.id == appointment_id))
    ).scalar_one_or_none()
    if exists is not None and expected_version is not None:
        raise StaleSchedule(f"Appointment {appointment_id} was changed by someone else")
    return False


class DatabaseScheduleSink:
    """Schedule sink backed by the appointment table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def update_appointment_schedule(
        self,
        appointment_id: str,
        day: date,
        time_12h: str,
        expected_version: int | None = None,
    ) -> bool:
        return await update_appointment_schedule(
            self.db, uuid.UUID(appointment_id), day, time_12h, expected_version
        )


async def get_business_hours(
    db: AsyncSession,
    business_id: uuid.UUID,
    location_id: uuid.UUID | None = None,
) -> BusinessHours:
    """Hours for one location, or merged across all locations when none is given."""
    if location_id is not None:
        location = await get_location(db, business_id, location_id)
        return BusinessHours.from_dict(location.business_hours if location else None)
    locations = await list_locations(db, business_id)
    return merge_business_hours(*(BusinessHours.from_dict(l.business_hours) for l in locations))


async def set_business_hours(
    db: AsyncSession,
    business_id: uuid.UUID,
    location_id: uuid.UUID,
    hours: dict,
) -> Location | None:
    location = await get_location(db, business_id, location_id)
    if not location:
        return None
    location.business_hours = BusinessHours.from_dict(hours).to_dict()
    await db.commit()
    await db.refresh(location)
    return location


def build_grid(hours: BusinessHours) -> TimeGrid:
    return TimeGrid.from_hours(hours, **settings.grid_options)


async def week_view(
    db: AsyncSession,
    business_id: uuid.UUID,
    anchor: date,
    location_id: uuid.UUID | None = None,
    staff: set[str] | None = None,
) -> tuple[WeekView, list[str]]:
    """Week grid for rendering plus the staff names available for filtering."""
    hours = await get_business_hours(db, business_id, location_id)
    grid = build_grid(hours)
    appointments = await list_appointments(db, business_id)
    shown = visible(appointments, staff, str(location_id) if location_id else None)
    view = build_week_view(week_dates(anchor), grid, shown, hours)
    return view, unique_staff(appointments)


async def find_double_bookings(
    db: AsyncSession,
    business_id: uuid.UUID,
    location_id: uuid.UUID | None = None,
    include_buffers: bool = False,
) -> list[tuple[CalendarAppointment, CalendarAppointment]]:
    hours = await get_business_hours(db, business_id, location_id)
    appointments = await list_appointments(db, business_id, location_id)
    return overlapping_pairs(appointments, build_grid(hours), include_buffers=include_buffers)


async def move_appointment(
    db: AsyncSession,
    business_id: uuid.UUID,
    appointment_id: uuid.UUID,
    new_date: date,
    new_time_slot: str,
    location_id: uuid.UUID | None = None,
) -> MoveResult:
    """Validate and persist a calendar move. Raises ``MoveError`` on rejection."""
    hours = await get_business_hours(db, business_id, location_id)
    appointments = await list_appointments(db, business_id)
    executor = MoveExecutor(
        appointments,
        hours,
        DatabaseScheduleSink(db),
        grid=build_grid(hours),
        active_location_id=str(location_id) if location_id else None,
    )
    return await executor.move(str(appointment_id), new_date, new_time_slot)
