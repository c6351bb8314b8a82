"""Business (tenant root), Location and Staff models."""

from __future__ import annotations

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin


class Business(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "business"

    name: Mapped[str] = mapped_column(String(200))
    slug: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    currency: Mapped[str] = mapped_column(String(3), default="USD")

    # Relationships
    locations: Mapped[list["Location"]] = relationship(
        back_populates="business", cascade="all, delete-orphan",
        order_by="Location.name",
    )
    staff: Mapped[list["Staff"]] = relationship(
        back_populates="business", cascade="all, delete-orphan",
        order_by="Staff.name",
    )

    def __repr__(self) -> str:
        return f"<Business {self.slug!r}>"


class Location(UUIDMixin, TimestampMixin, TenantMixin, Base):
    __tablename__ = "location"

    name: Mapped[str] = mapped_column(String(200))
    # {"monday": {"open": "09:00", "close": "17:00"}, ...}; absent day = closed
    business_hours: Mapped[dict] = mapped_column(JSON, default=dict)

    # Relationships
    business: Mapped["Business"] = relationship(back_populates="locations")


class Staff(UUIDMixin, TimestampMixin, TenantMixin, Base):
    __tablename__ = "staff"

    name: Mapped[str] = mapped_column(String(200))
    status: Mapped[str] = mapped_column(String(20), default="active")  # active/inactive

    # Relationships
    business: Mapped["Business"] = relationship(back_populates="staff")
