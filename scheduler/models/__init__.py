"""Scheduler models - re-exports all models and Base.metadata."""

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin
from .business import Business, Location, Staff
from .appointment import Appointment

__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    "TenantMixin",
    "Business",
    "Location",
    "Staff",
    "Appointment",
]
