"""
User model — staff, trainers and members share one table.

Staff rows carry their payroll profile (hourly rate, commission, week-off
day) and their daily shift windows, stored inline as a JSON list of
``{"start": "HH:MM", "end": "HH:MM"}`` objects.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String

from app.db.base import Base

ADMIN_ROLES = frozenset({"SUPER_ADMIN", "BRANCH_ADMIN"})
STAFF_ROLES = frozenset(
    {"SUPER_ADMIN", "BRANCH_ADMIN", "MANAGER", "RECEPTIONIST", "TRAINER", "STAFF"}
)


class User(Base):
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    email: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    hashed_password: str = Column(String(128), nullable=False, default="")  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False, default="")  # type: ignore[assignment]
    role: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default="MEMBER",
        server_default="MEMBER",
    )  # SUPER_ADMIN | BRANCH_ADMIN | MANAGER | RECEPTIONIST | TRAINER | STAFF | MEMBER
    branch_id: str | None = Column(String(64), nullable=True, index=True)  # type: ignore[assignment]
    is_active: bool = Column(Boolean, default=True, server_default="true")  # type: ignore[assignment]

    shifts: list[dict] = Column(JSON, nullable=False, default=list)  # type: ignore[assignment]
    hourly_rate: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    commission_percentage: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    week_off_day: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]  # 0=Sunday

    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES
