"""Calendar JSON API - week grid, business hours, drag-and-drop moves."""

from __future__ import annotations

import logging
import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..engine import (
    AppointmentNotFound,
    ClosedSlot,
    NotDraggable,
    PersistenceFailed,
    ScheduleConflict,
    emit_slot_action,
    shift_week,
    unique_staff,
)
from ..models.business import Business
from ..schemas.calendar import BusinessHoursIn, MoveRequest, SlotActionRequest
from ..services import calendar_svc
from ..tenant.deps import get_current_business

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/businesses/{business_id}", tags=["calendar"])


@router.get("/calendar")
async def calendar_week(
    week: date | None = None,
    location_id: uuid.UUID | None = None,
    staff: list[str] = Query(default=[]),
    business: Business = Depends(get_current_business),
    db: AsyncSession = Depends(get_db),
):
    anchor = week or date.today()
    view, all_staff = await calendar_svc.week_view(
        db, business.id, anchor, location_id=location_id, staff=set(staff)
    )
    return {
        "week_start": view.days[0].isoformat(),
        "prev_week": shift_week(anchor, "prev").isoformat(),
        "next_week": shift_week(anchor, "next").isoformat(),
        "staff": all_staff,
        "selected_staff": sorted(staff),
        **view.to_dict(),
    }


@router.get("/calendar/slots")
async def calendar_slots(
    location_id: uuid.UUID | None = None,
    business: Business = Depends(get_current_business),
    db: AsyncSession = Depends(get_db),
):
    hours = await calendar_svc.get_business_hours(db, business.id, location_id)
    return {"slots": calendar_svc.build_grid(hours).slots, "business_hours": hours.to_dict()}


@router.get("/calendar/staff")
async def calendar_staff(
    business: Business = Depends(get_current_business),
    db: AsyncSession = Depends(get_db),
):
    appointments = await calendar_svc.list_appointments(db, business.id)
    return {"staff": unique_staff(appointments)}


@router.get("/calendar/conflicts")
async def calendar_conflicts(
    location_id: uuid.UUID | None = None,
    buffers: bool = False,
    business: Business = Depends(get_current_business),
    db: AsyncSession = Depends(get_db),
):
    pairs = await calendar_svc.find_double_bookings(
        db, business.id, location_id, include_buffers=buffers
    )
    return {
        "conflicts": [
            {"first": a.to_dict(), "second": b.to_dict()}
            for a, b in pairs
        ]
    }


@router.put("/locations/{location_id}/hours")
async def update_hours(
    location_id: uuid.UUID,
    data: BusinessHoursIn,
    business: Business = Depends(get_current_business),
    db: AsyncSession = Depends(get_db),
):
    location = await calendar_svc.set_business_hours(
        db, business.id, location_id, data.model_dump(exclude_none=True)
    )
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    return {"location_id": str(location.id), "business_hours": location.business_hours}


@router.post("/appointments/{appointment_id}/move")
async def move_appointment(
    appointment_id: uuid.UUID,
    data: MoveRequest,
    business: Business = Depends(get_current_business),
    db: AsyncSession = Depends(get_db),
):
    try:
        result = await calendar_svc.move_appointment(
            db,
            business.id,
            appointment_id,
            data.date,
            data.time,
            location_id=data.location_id,
        )
    except AppointmentNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ScheduleConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (ClosedSlot, NotDraggable) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except PersistenceFailed as e:
        raise HTTPException(status_code=502, detail=str(e))
    return result.to_dict()


@router.post("/calendar/slot-actions")
async def slot_action(
    data: SlotActionRequest,
    business: Business = Depends(get_current_business),
):
    kind = "add_appointment" if data.action == "add" else "block_time"
    action = emit_slot_action(kind, data.date, data.time)
    log.info("Slot action %s for business %s at %s %s", kind, business.id, data.date, data.time)
    return action.to_dict()
