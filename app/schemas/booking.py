"""Pydantic schemas for slot availability and bookings."""

from __future__ import annotations

import re
from datetime import date as date_type
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, field_validator

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class SessionType(str, Enum):
    PT = "PT"
    GROUP = "GROUP"


def validate_iso_date(v: str) -> str:
    v = v.strip()
    if not _DATE_RE.match(v):
        raise ValueError("Date must be YYYY-MM-DD")
    date_type.fromisoformat(v)
    return v


# ── Slots ───────────────────────────────────────────────────────────
class SlotAvailability(BaseModel):
    slot: str
    available: bool
    reason: str | None = None
    count: int | None = None
    capacity: int | None = None


class SlotsResponse(BaseModel):
    trainer_id: int
    date: str
    type: SessionType
    slots: list[SlotAvailability]


# ── Booking ─────────────────────────────────────────────────────────
class BookingCreate(BaseModel):
    trainer_id: int
    date: str
    time_slot: str | None = None
    type: SessionType
    member_id: int | None = None  # staff booking on a member's behalf

    @field_validator("date")
    @classmethod
    def _date(cls, v: str) -> str:
        return validate_iso_date(v)


class BookingRead(BaseModel):
    id: int
    member_id: int
    trainer_id: int | None
    type: SessionType
    date: str
    time_slot: str
    branch_id: str | None
    status: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
