"""Calendar request schemas."""

from __future__ import annotations

import re
import uuid
import datetime as dt
from typing import Literal

from pydantic import BaseModel, field_validator, model_validator

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _check_hhmm(value: str | None) -> str | None:
    if value is None or value == "":
        return None
    if not _HHMM.match(value):
        raise ValueError("time must be HH:MM (24-hour)")
    return value


class DayHoursIn(BaseModel):
    open: str | None = None
    close: str | None = None

    @field_validator("open", "close")
    @classmethod
    def _hhmm(cls, v: str | None) -> str | None:
        return _check_hhmm(v)

    @model_validator(mode="after")
    def _ordered(self):
        if self.open and self.close and self.open >= self.close:
            raise ValueError("close must be after open")
        return self


class BusinessHoursIn(BaseModel):
    monday: DayHoursIn | None = None
    tuesday: DayHoursIn | None = None
    wednesday: DayHoursIn | None = None
    thursday: DayHoursIn | None = None
    friday: DayHoursIn | None = None
    saturday: DayHoursIn | None = None
    sunday: DayHoursIn | None = None


class MoveRequest(BaseModel):
    date: dt.date
    time: str  # 24-hour grid slot, e.g. "10:30"
    location_id: uuid.UUID | None = None

    @field_validator("time")
    @classmethod
    def _hhmm(cls, v: str) -> str:
        if not _HHMM.match(v):
            raise ValueError("time must be HH:MM (24-hour)")
        return v


class SlotActionRequest(BaseModel):
    action: Literal["add", "block"]
    date: dt.date
    time: str

    @field_validator("time")
    @classmethod
    def _hhmm(cls, v: str) -> str:
        if not _HHMM.match(v):
            raise ValueError("time must be HH:MM (24-hour)")
        return v
