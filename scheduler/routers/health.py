"""Health and readiness checks for the scheduler service."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..engine.timegrid import SLOT_MINUTES
from ..models.business import Business

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Liveness: the schedule store answers a trivial query."""
    await db.execute(text("SELECT 1"))
    return {"status": "healthy", "service": "scheduler"}


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """Readiness: the calendar tables exist and the grid settings are loaded.

    Fails with a database error until the lifespan hook (or a migration)
    has created the schema.
    """
    businesses = (await db.execute(select(func.count()).select_from(Business))).scalar_one()
    return {
        "status": "ready",
        "service": "scheduler",
        "environment": settings.environment,
        "businesses": businesses,
        "slot_minutes": SLOT_MINUTES,
        "grid": settings.grid_options,
    }
