"""FastAPI application factory for the scheduler service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings

logging.getLogger("scheduler").setLevel(settings.log_level.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Auto-create tables for SQLite (local dev)
    if "sqlite" in settings.database_url:
        from .database import engine
        from .models import Base
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    yield


app = FastAPI(title=settings.app_title, lifespan=lifespan)

# Import and register routers
from .routers import calendar, health  # noqa: E402

app.include_router(calendar.router)
app.include_router(health.router)
