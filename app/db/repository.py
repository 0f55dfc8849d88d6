"""
Data access for the scheduling and payroll engines.

The engines in ``app.services`` are pure functions of in-memory
collections; this repository is the only place that knows those
collections come from SQL.  Every ``list_*`` call hits the database, so a
commit path that reads through it always sees the latest committed rows.
"""

from __future__ import annotations

import calendar
from collections.abc import Sequence

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.attendance import Attendance
from app.models.booking import Booking, BookingGuard
from app.models.holiday import Holiday
from app.models.plan import Plan, Subscription
from app.models.sale import Sale
from app.models.user import User


def month_bounds(year: int, month: int) -> tuple[str, str]:
    """Return the first and last ISO dates of a month."""
    _, days_in_month = calendar.monthrange(year, month)
    return f"{year:04d}-{month:02d}-01", f"{year:04d}-{month:02d}-{days_in_month:02d}"


class SchedulingRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ── Users ──────────────────────────────────────────────────────
    async def get_user(self, user_id: int) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    # ── Bookings ───────────────────────────────────────────────────
    async def list_slot_bookings(
        self, trainer_id: int, date: str, time_slot: str, *, lock: bool = False
    ) -> Sequence[Booking]:
        """Live bookings for one trainer/date/slot, optionally row-locked."""
        query = select(Booking).where(
            Booking.trainer_id == trainer_id,
            Booking.date == date,
            Booking.time_slot == time_slot,
            Booking.status != "CANCELLED",
        )
        if lock:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalars().all()

    async def list_trainer_day_bookings(self, trainer_id: int, date: str) -> Sequence[Booking]:
        result = await self.db.execute(
            select(Booking).where(
                Booking.trainer_id == trainer_id,
                Booking.date == date,
                Booking.status != "CANCELLED",
            )
        )
        return result.scalars().all()

    async def list_member_bookings(self, member_id: int, session_type: str) -> Sequence[Booking]:
        result = await self.db.execute(
            select(Booking).where(
                Booking.member_id == member_id,
                Booking.type == session_type,
                Booking.status != "CANCELLED",
            )
        )
        return result.scalars().all()

    async def list_trainer_month_bookings(
        self, trainer_id: int, year: int, month: int
    ) -> Sequence[Booking]:
        start, end = month_bounds(year, month)
        result = await self.db.execute(
            select(Booking).where(
                Booking.trainer_id == trainer_id,
                Booking.date >= start,
                Booking.date <= end,
            )
        )
        return result.scalars().all()

    # ── Commit guards ──────────────────────────────────────────────
    async def read_guard_versions(self, keys: Sequence[str]) -> dict[str, int]:
        """Current version of each guard, creating missing guards at version 0."""
        dialect = postgresql if self.db.get_bind().dialect.name == "postgresql" else sqlite
        await self.db.execute(
            dialect.insert(BookingGuard)
            .values([{"key": key, "version": 0} for key in sorted(keys)])
            .on_conflict_do_nothing(index_elements=["key"])
        )
        result = await self.db.execute(
            select(BookingGuard.key, BookingGuard.version).where(BookingGuard.key.in_(keys))
        )
        return {key: version for key, version in result.all()}

    async def bump_guard_versions(self, versions: dict[str, int]) -> bool:
        """Advance every guard still at its read version; ``False`` if any has moved."""
        for key, seen in sorted(versions.items()):
            result = await self.db.execute(
                update(BookingGuard)
                .where(BookingGuard.key == key, BookingGuard.version == seen)
                .values(version=seen + 1)
            )
            if result.rowcount != 1:
                return False
        return True

    # ── Subscriptions ──────────────────────────────────────────────
    async def list_active_subscriptions(self, member_id: int) -> Sequence[Subscription]:
        """ACTIVE subscriptions of a member, oldest first, with their plan loaded."""
        result = await self.db.execute(
            select(Subscription)
            .where(Subscription.member_id == member_id, Subscription.status == "ACTIVE")
            .order_by(Subscription.start_date, Subscription.id)
        )
        return result.unique().scalars().all()

    # ── Payroll inputs ─────────────────────────────────────────────
    async def list_staff_month_attendance(
        self, user_id: int, year: int, month: int
    ) -> Sequence[Attendance]:
        start, end = month_bounds(year, month)
        result = await self.db.execute(
            select(Attendance)
            .where(
                Attendance.user_id == user_id,
                Attendance.type == "STAFF",
                Attendance.date >= start,
                Attendance.date <= end,
            )
            .order_by(Attendance.date, Attendance.id)
        )
        return result.scalars().all()

    async def list_branch_month_holidays(
        self, branch_id: str | None, year: int, month: int
    ) -> Sequence[Holiday]:
        start, end = month_bounds(year, month)
        branches = ["ALL"] if branch_id is None else ["ALL", branch_id]
        result = await self.db.execute(
            select(Holiday)
            .where(Holiday.date >= start, Holiday.date <= end, Holiday.branch_id.in_(branches))
            .order_by(Holiday.date)
        )
        return result.scalars().all()

    async def list_staff_month_sales(self, staff_id: int, year: int, month: int) -> list[tuple[Sale, str | None]]:
        """Sales attributed to a staff member, each paired with its plan type."""
        start, end = month_bounds(year, month)
        result = await self.db.execute(
            select(Sale, Plan.type)
            .outerjoin(Plan, Sale.plan_id == Plan.id)
            .where(Sale.staff_id == staff_id, Sale.date >= start, Sale.date <= end)
            .order_by(Sale.date, Sale.id)
        )
        return [(sale, plan_type) for sale, plan_type in result.all()]
