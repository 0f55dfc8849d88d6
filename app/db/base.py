"""
Declarative base shared by every ORM model.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    # Models annotate columns with plain Python types (``id: int = Column(...)``).
    __allow_unmapped__ = True
