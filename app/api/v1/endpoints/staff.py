"""
Staff directory — profiles, payroll settings and shift windows.

- GET operations require any authenticated user.
- POST / PUT require an admin role.
Shift windows are validated here (HH:MM, start before end, one to three
per person) so the scheduling engine can trust them.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_current_active_user, get_db, require_admin
from app.core.security import get_password_hash
from app.models.user import STAFF_ROLES, User
from app.schemas.user import (ShiftIn, ShiftMatchResponse, StaffCreate,
                              StaffUpdate, UserRead)
from app.services.shifts import load_shifts, match_shift

router = APIRouter(prefix="/staff", tags=["staff"])
logger = logging.getLogger(__name__)


async def _get_staff_or_404(db: AsyncSession, staff_id: int) -> User:
    result = await db.execute(
        select(User).where(User.id == staff_id, User.role.in_(STAFF_ROLES))
    )
    staff = result.scalar_one_or_none()
    if staff is None:
        raise HTTPException(status_code=404, detail="Staff member not found")
    return staff


@router.get("", response_model=list[UserRead])
async def list_staff(
    branch_id: str | None = None,
    role: str | None = None,
    skip: int = 0,
    limit: int = Query(default=50, le=500),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> list[User]:
    query = (
        select(User)
        .where(User.role.in_(STAFF_ROLES), User.is_active.is_(True))
        .order_by(User.name)
        .offset(skip)
        .limit(limit)
    )
    if branch_id:
        query = query.where(User.branch_id == branch_id)
    if role:
        query = query.where(User.role == role)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post("", response_model=UserRead, status_code=201)
async def create_staff(
    body: StaffCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> User:
    existing = await db.execute(select(User).where(User.email == body.email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Email already registered")

    data = body.model_dump(exclude={"password"})
    staff = User(**data, hashed_password=get_password_hash(body.password))
    db.add(staff)
    await db.commit()
    await db.refresh(staff)
    logger.info("Created %s %s with %d shift(s)", staff.role, staff.email, len(staff.shifts))
    return staff


@router.get("/{staff_id}", response_model=UserRead)
async def get_staff(
    staff_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> User:
    return await _get_staff_or_404(db, staff_id)


@router.put("/{staff_id}", response_model=UserRead)
async def update_staff(
    staff_id: int,
    body: StaffUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> User:
    staff = await _get_staff_or_404(db, staff_id)

    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(staff, field, value)

    await db.commit()
    await db.refresh(staff)
    logger.info("Updated staff %d", staff_id)
    return staff


@router.get("/{staff_id}/shift-match", response_model=ShiftMatchResponse)
async def shift_match(
    staff_id: int,
    time: str = Query(..., description="Clock time, HH:MM or hh:mm AM/PM"),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> ShiftMatchResponse:
    """Which of the staff member's shifts a punch at *time* would be attributed to."""
    staff = await _get_staff_or_404(db, staff_id)
    matched = match_shift(time, load_shifts(staff.shifts))
    if matched is None:
        return ShiftMatchResponse(time=time, matched=False)
    shift, index = matched
    return ShiftMatchResponse(
        time=time,
        matched=True,
        shift_index=index,
        shift=ShiftIn(start=_hhmm(shift.start), end=_hhmm(shift.end)),
    )


def _hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
