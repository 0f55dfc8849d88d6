"""
Staff attendance — kiosk punch toggle and attendance log.

A punch opens a STAFF attendance row for the local day or closes the one
that is still open.  Check-ins are tagged with the shift they fall in; a
punch outside every shift is still recorded, it just earns no hours.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_current_active_user, get_db, require_staff
from app.core.config import settings
from app.models.attendance import Attendance
from app.models.user import STAFF_ROLES, User
from app.schemas.attendance import AttendanceRead, PunchRequest, PunchResponse
from app.services.shifts import hours_between, load_shifts, match_shift

router = APIRouter(prefix="/attendance", tags=["attendance"])
logger = logging.getLogger(__name__)


def _local_tz(tz_offset: str) -> timezone:
    sign = 1 if tz_offset[0] == "+" else -1
    parts = tz_offset[1:].split(":")
    hours = int(parts[0])
    minutes = int(parts[1]) if len(parts) > 1 else 0
    return timezone(timedelta(hours=sign * hours, minutes=sign * minutes))


def to_local(at: datetime | None) -> datetime:
    """Aware timestamps are converted to branch-local time; naive ones are already local."""
    tz = _local_tz(settings.TIMEZONE_OFFSET)
    if at is None:
        return datetime.now(timezone.utc).astimezone(tz)
    if at.tzinfo is None:
        return at.replace(tzinfo=tz)
    return at.astimezone(tz)


@router.post("/punch", response_model=PunchResponse)
async def punch(
    body: PunchRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> PunchResponse:
    if body.user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(status_code=403, detail="You can only punch for yourself")

    result = await db.execute(
        select(User).where(User.id == body.user_id, User.role.in_(STAFF_ROLES))
    )
    staff = result.scalar_one_or_none()
    if staff is None:
        raise HTTPException(status_code=404, detail="Staff member not found")
    if not staff.is_active:
        raise HTTPException(status_code=403, detail="Staff account is deactivated")

    local = to_local(body.at)
    day = local.strftime("%Y-%m-%d")
    clock = local.strftime("%H:%M")

    open_result = await db.execute(
        select(Attendance)
        .where(
            Attendance.user_id == staff.id,
            Attendance.date == day,
            Attendance.type == "STAFF",
            Attendance.time_out.is_(None),
        )
        .order_by(Attendance.id.desc())
        .limit(1)
        .with_for_update()
    )
    open_row = open_result.scalar_one_or_none()

    if open_row is not None:
        open_row.time_out = clock
        await db.commit()
        hours = round(hours_between(open_row.time_in, clock), 2)
        logger.info("Punch OUT for %s at %s %s (%.2fh)", staff.email, day, clock, hours)
        return PunchResponse(
            success=True,
            event="OUT",
            attendance_id=open_row.id,
            user_id=staff.id,
            name=staff.name,
            date=day,
            time=clock,
            shift_index=open_row.shift_index,
            hours=hours,
        )

    matched = match_shift(clock, load_shifts(staff.shifts))
    shift_index = matched[1] if matched else None
    if matched is None:
        logger.warning("Punch IN for %s at %s %s matches no shift", staff.email, day, clock)

    row = Attendance(
        user_id=staff.id,
        date=day,
        time_in=clock,
        branch_id=staff.branch_id,
        type="STAFF",
        shift_index=shift_index,
    )
    db.add(row)
    await db.commit()
    await db.refresh(row)
    logger.info("Punch IN for %s at %s %s (shift %s)", staff.email, day, clock, shift_index)
    return PunchResponse(
        success=True,
        event="IN",
        attendance_id=row.id,
        user_id=staff.id,
        name=staff.name,
        date=day,
        time=clock,
        shift_index=shift_index,
    )


@router.get("", response_model=list[AttendanceRead])
async def list_attendance(
    user_id: int | None = None,
    date: str | None = None,
    limit: int = Query(default=200, le=1000),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[Attendance]:
    if not current_user.is_admin:
        user_id = current_user.id

    query = select(Attendance).order_by(Attendance.date.desc(), Attendance.id.desc()).limit(limit)
    if user_id is not None:
        query = query.where(Attendance.user_id == user_id)
    if date:
        query = query.where(Attendance.date == date)
    result = await db.execute(query)
    return list(result.scalars().all())
