"""Async database engine and session factory for the schedule store.

Appointments, locations and staff live in one SQLAlchemy database; the
default is a local SQLite file through aiosqlite (``SCHED_DATABASE_URL``).
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .config import settings

engine = create_async_engine(settings.database_url, echo=settings.echo_sql)
async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db():
    """FastAPI dependency yielding a session for one calendar request.

    Move commits and compare-and-swap updates commit on this session, so
    objects stay readable after commit (``expire_on_commit=False``).
    """
    async with async_session_factory() as session:
        yield session
