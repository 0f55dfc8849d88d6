"""Pydantic schemas for holidays."""

from __future__ import annotations

from pydantic import BaseModel, field_validator

from app.schemas.booking import validate_iso_date


class HolidayCreate(BaseModel):
    name: str
    date: str
    branch_id: str = "ALL"

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        return v

    @field_validator("date")
    @classmethod
    def _date(cls, v: str) -> str:
        return validate_iso_date(v)


class HolidayRead(BaseModel):
    id: int
    name: str
    date: str
    branch_id: str

    model_config = {"from_attributes": True}
