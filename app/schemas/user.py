"""Pydantic schemas for users and staff profiles (including shifts)."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, Field, ValidationInfo, field_validator

_VALID_ROLES = {
    "SUPER_ADMIN",
    "BRANCH_ADMIN",
    "MANAGER",
    "RECEPTIONIST",
    "TRAINER",
    "STAFF",
    "MEMBER",
}
_STAFF_ROLES = _VALID_ROLES - {"MEMBER"}
_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
MAX_SHIFTS = 3


class ShiftIn(BaseModel):
    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def _clock(cls, v: str) -> str:
        v = v.strip()
        if not _HHMM_RE.match(v):
            raise ValueError("Shift times must be HH:MM (24-hour)")
        return v

    @field_validator("end")
    @classmethod
    def _ordered(cls, v: str, info: ValidationInfo) -> str:
        start = info.data.get("start")
        if start is not None and v <= start:
            raise ValueError("Shift must end after it starts")
        return v


def _validate_shift_list(v: list[ShiftIn] | None) -> list[ShiftIn] | None:
    if v is not None and not 1 <= len(v) <= MAX_SHIFTS:
        raise ValueError(f"Staff must have between 1 and {MAX_SHIFTS} shifts")
    return v


class StaffCreate(BaseModel):
    email: str
    password: str
    name: str
    role: str = "STAFF"
    branch_id: str | None = None
    shifts: list[ShiftIn] = Field(default_factory=lambda: [ShiftIn(start="09:00", end="13:00")])
    hourly_rate: float | None = Field(default=None, ge=0)
    commission_percentage: float | None = Field(default=None, ge=0, le=100)
    week_off_day: int = Field(default=0, ge=0, le=6)

    @field_validator("role")
    @classmethod
    def _validate_role(cls, v: str) -> str:
        if v not in _STAFF_ROLES:
            raise ValueError(f"Role must be one of: {sorted(_STAFF_ROLES)}")
        return v

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v

    @field_validator("shifts")
    @classmethod
    def _shift_count(cls, v: list[ShiftIn]) -> list[ShiftIn]:
        return _validate_shift_list(v)


class StaffUpdate(BaseModel):
    name: str | None = None
    role: str | None = None
    branch_id: str | None = None
    is_active: bool | None = None
    shifts: list[ShiftIn] | None = None
    hourly_rate: float | None = Field(default=None, ge=0)
    commission_percentage: float | None = Field(default=None, ge=0, le=100)
    week_off_day: int | None = Field(default=None, ge=0, le=6)

    @field_validator("role")
    @classmethod
    def _validate_role(cls, v: str | None) -> str | None:
        if v is not None and v not in _STAFF_ROLES:
            raise ValueError(f"Role must be one of: {sorted(_STAFF_ROLES)}")
        return v

    @field_validator("shifts")
    @classmethod
    def _shift_count(cls, v: list[ShiftIn] | None) -> list[ShiftIn] | None:
        return _validate_shift_list(v)


class UserRead(BaseModel):
    id: int
    email: str
    name: str
    role: str
    branch_id: str | None
    is_active: bool
    shifts: list[ShiftIn] = Field(default_factory=list)
    hourly_rate: float | None = None
    commission_percentage: float | None = None
    week_off_day: int = 0
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class ShiftMatchResponse(BaseModel):
    time: str
    matched: bool
    shift_index: int | None = None
    shift: ShiftIn | None = None
