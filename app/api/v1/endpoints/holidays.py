"""
Holiday calendar — every listed date is a paid day for the matching branch.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_current_active_user, get_db, require_admin
from app.models.holiday import Holiday
from app.models.user import User
from app.schemas.common import DeleteResponse
from app.schemas.holiday import HolidayCreate, HolidayRead

router = APIRouter(prefix="/holidays", tags=["holidays"])
logger = logging.getLogger(__name__)


@router.get("", response_model=list[HolidayRead])
async def list_holidays(
    branch_id: str | None = None,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> list[Holiday]:
    """All holidays, or those applying to *branch_id* (including 'ALL'), by date."""
    query = select(Holiday).order_by(Holiday.date)
    if branch_id:
        query = query.where(Holiday.branch_id.in_(["ALL", branch_id]))
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post("", response_model=HolidayRead, status_code=201)
async def create_holiday(
    body: HolidayCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Holiday:
    branch_id = body.branch_id
    if admin.role != "SUPER_ADMIN":
        branch_id = admin.branch_id or "ALL"

    holiday = Holiday(name=body.name, date=body.date, branch_id=branch_id)
    db.add(holiday)
    await db.commit()
    await db.refresh(holiday)
    logger.info("Holiday %s on %s for branch %s", holiday.name, holiday.date, holiday.branch_id)
    return holiday


@router.delete("/{holiday_id}", response_model=DeleteResponse)
async def delete_holiday(
    holiday_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> DeleteResponse:
    result = await db.execute(select(Holiday).where(Holiday.id == holiday_id))
    holiday = result.scalar_one_or_none()
    if holiday is None:
        raise HTTPException(status_code=404, detail="Holiday not found")

    await db.delete(holiday)
    await db.commit()
    logger.info("Deleted holiday %d (%s)", holiday_id, holiday.name)
    return DeleteResponse(success=True, message=f"Holiday '{holiday.name}' deleted")
