"""
Payroll statement and service health endpoints.

The statement is recomputed from source rows on every request.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_current_active_user, get_db, get_repository
from app.db.repository import SchedulingRepository
from app.models.user import STAFF_ROLES, User
from app.schemas.common import HealthResponse
from app.schemas.payroll import PayrollResult
from app.services.payroll import SaleLine, generate_monthly_payroll

router = APIRouter(tags=["payroll"])
logger = logging.getLogger(__name__)


@router.get("/payroll/{staff_id}/{year}/{month}", response_model=PayrollResult)
async def monthly_payroll(
    staff_id: int,
    year: int,
    month: int,
    repo: SchedulingRepository = Depends(get_repository),
    current_user: User = Depends(get_current_active_user),
) -> PayrollResult:
    """Earnings statement for one staff member; admins see anyone, staff see themselves."""
    if month < 1 or month > 12:
        raise HTTPException(status_code=400, detail="Month must be 1-12")
    if year < 1 or year > 9999:
        raise HTTPException(status_code=400, detail="Year must be 1-9999")
    if not current_user.is_admin and current_user.id != staff_id:
        raise HTTPException(status_code=403, detail="You can only view your own payroll")

    staff = await repo.get_user(staff_id)
    if staff is None or staff.role not in STAFF_ROLES:
        raise HTTPException(status_code=404, detail="Staff member not found")

    attendance = await repo.list_staff_month_attendance(staff_id, year, month)
    bookings = await repo.list_trainer_month_bookings(staff_id, year, month)
    holidays = await repo.list_branch_month_holidays(staff.branch_id, year, month)
    sales = [
        SaleLine(staff_id=sale.staff_id, date=sale.date, amount=sale.amount, plan_type=plan_type)
        for sale, plan_type in await repo.list_staff_month_sales(staff_id, year, month)
    ]

    result = generate_monthly_payroll(
        staff, attendance, year, month, bookings, holidays, sales=sales
    )
    logger.info(
        "Payroll %04d-%02d for staff %d: %.2f over %d day(s)",
        year, month, staff_id, result.net_pay, result.total_days_worked,
    )
    return result


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Public health check — database connectivity."""
    result = HealthResponse(db=False)
    try:
        await db.execute(select(1))
        result.db = True
    except Exception as e:
        logger.error("Health check DB failure: %s", e)
    return result
