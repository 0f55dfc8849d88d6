"""
Booking model — one member's seat in a trainer's slot on a given day.

A live (non-cancelled) PT booking owns its trainer/date/slot outright; the
partial unique index below makes the database refuse a second one even when
two commits race past the application-level re-check.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, text

from app.db.base import Base

_LIVE_PT = text("type = 'PT' AND status != 'CANCELLED'")


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_booking_trainer_date_slot", "trainer_id", "date", "time_slot"),
        Index("ix_booking_member_type", "member_id", "type"),
        Index(
            "uq_booking_live_pt_slot",
            "trainer_id",
            "date",
            "time_slot",
            unique=True,
            postgresql_where=_LIVE_PT,
            sqlite_where=_LIVE_PT,
        ),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    member_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    trainer_id: int | None = Column(Integer, ForeignKey("users.id"), nullable=True)  # type: ignore[assignment]
    type: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # PT | GROUP
    date: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # YYYY-MM-DD
    time_slot: str = Column(String(8), nullable=False)  # type: ignore[assignment]  # "06:00 AM"
    branch_id: str | None = Column(String(64), nullable=True)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(10),
        nullable=False,
        default="BOOKED",
        server_default="BOOKED",
    )  # BOOKED | CANCELLED | COMPLETED
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )


class BookingGuard(Base):
    """Version counter for one booking resource (a trainer slot or a member's quota).

    Every commit bumps the versions it read before re-validating, with
    ``UPDATE ... WHERE version = :seen``.  A commit whose version moved
    underneath it updates nothing and must re-validate.
    """

    __tablename__ = "booking_guards"

    key: str = Column(String(120), primary_key=True)  # type: ignore[assignment]
    version: int = Column(Integer, nullable=False, default=0, server_default="0")  # type: ignore[assignment]
