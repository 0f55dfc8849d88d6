"""
Attendance model — one punch-in / punch-out pair per row.

Times are local wall-clock ``HH:MM`` strings; a row without ``time_out`` is
an open shift and earns nothing until it is closed.
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Integer, String

from app.db.base import Base


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (Index("ix_attendance_user_date", "user_id", "date"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    date: str = Column(String(10), nullable=False, index=True)  # type: ignore[assignment]  # YYYY-MM-DD
    time_in: str = Column(String(11), nullable=False)  # type: ignore[assignment]
    time_out: str | None = Column(String(11), nullable=True)  # type: ignore[assignment]
    branch_id: str | None = Column(String(64), nullable=True)  # type: ignore[assignment]
    type: str = Column(String(10), nullable=False, default="STAFF")  # type: ignore[assignment]  # MEMBER | STAFF
    shift_index: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]
