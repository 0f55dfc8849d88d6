"""
Booking endpoints — slot availability, commit, listing and class completion.

Availability is a display-time snapshot; ``POST /bookings`` re-validates
everything against the latest rows before inserting.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import (get_current_active_user, get_db, get_repository,
                             require_staff)
from app.core.exceptions import InvalidInputError
from app.db.repository import SchedulingRepository
from app.models.booking import Booking
from app.models.user import User
from app.schemas.booking import (BookingCreate, BookingRead, SessionType,
                                 SlotsResponse, validate_iso_date)
from app.services.booking import (find_eligible_subscription,
                                  validate_and_commit_booking)
from app.services.slots import compute_available_slots

router = APIRouter(prefix="/bookings", tags=["bookings"])
logger = logging.getLogger(__name__)


def _resolve_member(current_user: User, member_id: int | None) -> int:
    """Members book for themselves; staff may book on a member's behalf."""
    if current_user.is_staff:
        if member_id is None:
            raise InvalidInputError("Please select the member to book for.")
        return member_id
    if member_id is not None and member_id != current_user.id:
        raise HTTPException(status_code=403, detail="Members can only book for themselves")
    return current_user.id


@router.get("/slots", response_model=SlotsResponse)
async def available_slots(
    trainer_id: int,
    date: str,
    type: SessionType = Query(...),
    member_id: int | None = None,
    repo: SchedulingRepository = Depends(get_repository),
    current_user: User = Depends(get_current_active_user),
) -> SlotsResponse:
    """On-duty slots of a trainer on a date, annotated for the requesting member."""
    try:
        date = validate_iso_date(date)
    except ValueError as exc:
        raise InvalidInputError(str(exc)) from None

    trainer = await repo.get_user(trainer_id)
    if trainer is None or trainer.role != "TRAINER":
        raise HTTPException(status_code=404, detail="Trainer not found")

    if not current_user.is_staff:
        member_id = current_user.id

    group_capacity = None
    if member_id is not None and type is SessionType.GROUP:
        sub = find_eligible_subscription(
            await repo.list_active_subscriptions(member_id), SessionType.GROUP
        )
        if sub is not None:
            group_capacity = sub.plan.group_capacity

    bookings = await repo.list_trainer_day_bookings(trainer_id, date)
    slots = compute_available_slots(
        trainer,
        date,
        type,
        bookings,
        member_id=member_id,
        group_capacity=group_capacity,
    )
    return SlotsResponse(trainer_id=trainer_id, date=date, type=type, slots=slots)


@router.post("", response_model=BookingRead, status_code=201)
async def create_booking(
    body: BookingCreate,
    repo: SchedulingRepository = Depends(get_repository),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    member_id = _resolve_member(current_user, body.member_id)
    return await validate_and_commit_booking(
        repo,
        member_id=member_id,
        trainer_id=body.trainer_id,
        date=body.date,
        time_slot=body.time_slot,
        session_type=body.type,
    )


@router.get("", response_model=list[BookingRead])
async def list_bookings(
    date: str | None = None,
    trainer_id: int | None = None,
    member_id: int | None = None,
    include_cancelled: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[Booking]:
    if not current_user.is_staff:
        member_id = current_user.id

    query = select(Booking).order_by(Booking.date, Booking.time_slot, Booking.id)
    if date:
        query = query.where(Booking.date == date)
    if trainer_id is not None:
        query = query.where(Booking.trainer_id == trainer_id)
    if member_id is not None:
        query = query.where(Booking.member_id == member_id)
    if not include_cancelled:
        query = query.where(Booking.status != "CANCELLED")
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post("/{booking_id}/complete", response_model=BookingRead)
async def complete_booking(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    _staff: User = Depends(require_staff),
) -> Booking:
    """Mark a session as conducted; completed sessions earn trainer commission."""
    result = await db.execute(select(Booking).where(Booking.id == booking_id).with_for_update())
    booking = result.scalar_one_or_none()
    if booking is None:
        raise HTTPException(status_code=404, detail="Class session not found")
    if booking.status != "BOOKED":
        raise HTTPException(
            status_code=409,
            detail=f"Booking is already {booking.status.lower()}",
        )

    booking.status = "COMPLETED"
    await db.commit()
    await db.refresh(booking)
    logger.info("Completed %s booking #%d for trainer %s", booking.type, booking.id, booking.trainer_id)
    return booking
