"""
Plan & Subscription models — what a member has bought and for how long.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Column, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class Plan(Base):
    __tablename__ = "plans"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    type: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # GYM | PT | GROUP
    price: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    duration_days: int = Column(Integer, nullable=False, default=30)  # type: ignore[assignment]
    branch_id: str | None = Column(String(64), nullable=True)  # type: ignore[assignment]
    is_active: bool = Column(Boolean, default=True, server_default="true")  # type: ignore[assignment]
    max_sessions: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]
    session_duration_minutes: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]
    group_capacity: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]


class Subscription(Base):
    __tablename__ = "subscriptions"
    __table_args__ = (Index("ix_subscription_member_status", "member_id", "status"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    member_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    plan_id: int = Column(Integer, ForeignKey("plans.id"), nullable=False)  # type: ignore[assignment]
    start_date: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # YYYY-MM-DD
    end_date: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # YYYY-MM-DD
    status: str = Column(String(10), nullable=False, default="ACTIVE")  # type: ignore[assignment]
    # ACTIVE | EXPIRED | PENDING
    branch_id: str | None = Column(String(64), nullable=True)  # type: ignore[assignment]
    trainer_id: int | None = Column(Integer, ForeignKey("users.id"), nullable=True)  # type: ignore[assignment]

    plan = relationship("Plan", lazy="joined")
