"""Pydantic schemas for staff punches and attendance rows."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class PunchRequest(BaseModel):
    user_id: int
    at: datetime | None = None  # defaults to now; naive values are taken as local time


class PunchResponse(BaseModel):
    success: bool
    event: str  # IN | OUT
    attendance_id: int
    user_id: int
    name: str
    date: str
    time: str
    shift_index: int | None = None
    hours: float | None = None


class AttendanceRead(BaseModel):
    id: int
    user_id: int
    date: str
    time_in: str
    time_out: str | None
    branch_id: str | None
    type: str
    shift_index: int | None = None

    model_config = {"from_attributes": True}
