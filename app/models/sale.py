"""
Sale model — read-only here; feeds manager commission.
"""

from __future__ import annotations

from sqlalchemy import Column, Float, ForeignKey, Integer, String

from app.db.base import Base


class Sale(Base):
    __tablename__ = "sales"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    invoice_no: str = Column(String(40), nullable=False)  # type: ignore[assignment]
    date: str = Column(String(10), nullable=False, index=True)  # type: ignore[assignment]  # YYYY-MM-DD
    amount: float = Column(Float, nullable=False)  # type: ignore[assignment]
    member_id: int | None = Column(Integer, ForeignKey("users.id"), nullable=True)  # type: ignore[assignment]
    plan_id: int | None = Column(Integer, ForeignKey("plans.id"), nullable=True)  # type: ignore[assignment]
    staff_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # type: ignore[assignment]
    branch_id: str | None = Column(String(64), nullable=True)  # type: ignore[assignment]
    payment_method: str = Column(String(10), nullable=False, default="CASH")  # type: ignore[assignment]
