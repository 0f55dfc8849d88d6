"""
Holiday model — a paid day off for one branch, or for every branch ('ALL').
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, String

from app.db.base import Base


class Holiday(Base):
    __tablename__ = "holidays"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    date: str = Column(String(10), nullable=False, index=True)  # type: ignore[assignment]  # YYYY-MM-DD
    branch_id: str = Column(String(64), nullable=False, default="ALL")  # type: ignore[assignment]
