"""Async test fixtures for scheduler tests using SQLite."""

from __future__ import annotations

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from scheduler.database import get_db
from scheduler.engine import BusinessHours, CalendarAppointment
from scheduler.models.base import Base
from scheduler.models.business import Business, Location, Staff

WEEKDAY_HOURS = {
    "monday": {"open": "09:00", "close": "17:00"},
    "tuesday": {"open": "09:00", "close": "17:00"},
    "wednesday": {"open": "09:00", "close": "17:00"},
    "thursday": {"open": "09:00", "close": "19:00"},
    "friday": {"open": "09:00", "close": "17:00"},
}


def make_appointment(appointment_id: str, **overrides) -> CalendarAppointment:
    """CalendarAppointment with salon-like defaults; 2030-01-07 is a Monday."""
    data = {
        "id": appointment_id,
        "date": "2030-01-07",
        "time": "10:00 AM",
        "duration": 60,
        "buffer_time": 0,
        "staff_id": "staff-alex",
        "staff_name": "Alex",
        "client_name": f"Client {appointment_id}",
        "service_name": "Cut & Style",
        "service_category": "Hair",
    }
    data.update(overrides)
    return CalendarAppointment(**data)


@pytest.fixture
def hours() -> BusinessHours:
    return BusinessHours.from_dict(WEEKDAY_HOURS)


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def business(db: AsyncSession):
    biz = Business(id=uuid.uuid4(), name="Test Salon", slug="test-salon")
    db.add(biz)
    await db.commit()
    await db.refresh(biz)
    return biz


@pytest_asyncio.fixture
async def location(db: AsyncSession, business: Business):
    loc = Location(
        id=uuid.uuid4(),
        business_id=business.id,
        name="Main Street",
        business_hours=dict(WEEKDAY_HOURS),
    )
    db.add(loc)
    await db.commit()
    await db.refresh(loc)
    return loc


@pytest_asyncio.fixture
async def staff(db: AsyncSession, business: Business):
    alex = Staff(business_id=business.id, name="Alex")
    sam = Staff(business_id=business.id, name="Sam")
    db.add_all([alex, sam])
    await db.commit()
    await db.refresh(alex)
    await db.refresh(sam)
    return {"Alex": alex, "Sam": sam}


@pytest_asyncio.fixture
async def client(engine):
    """HTTPX async test client against the scheduler app."""
    from scheduler.app import app

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner."""
    from typer.testing import CliRunner
    return CliRunner()
