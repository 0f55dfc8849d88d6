"""
Booking transaction validator.

The slot list a member looked at may be stale by the time they press
"book".  ``validate_and_commit_booking`` therefore re-reads the slot inside
the same transaction that inserts the booking and re-applies every rule:

1. collision (PT exclusivity, PT vs. running group class, already joined)
2. group capacity
3. an ACTIVE subscription whose plan type matches the session type
4. the plan's ``max_sessions`` quota inside the subscription window

The first failure is raised as the matching ``SchedulingError``.

Concurrent commits are serialised per slot and per member quota by
``booking_guards`` version rows: a commit reads the versions before the
re-read and bumps them with a compare-and-swap before inserting.  A commit
that loses the swap rolls back and re-validates against the winner's row,
so group capacity and quota hold under concurrency.  The live PT partial
unique index on ``bookings`` additionally backs PT exclusivity; a PT insert
that still collides is reported as a collision.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy.exc import IntegrityError

from app.core.config import settings
from app.core.exceptions import (CapacityExceededError, InvalidInputError,
                                 NoEligibleSubscriptionError,
                                 QuotaExhaustedError, SchedulingError,
                                 SlotCollisionError)
from app.db.repository import SchedulingRepository
from app.models.booking import Booking
from app.schemas.booking import SessionType
from app.services.shifts import load_shifts, parse_clock
from app.services.slots import CLASS_FULL, evaluate_slot, is_live, normalise_slot

logger = logging.getLogger(__name__)

COMMIT_ATTEMPTS = 3

_PLAN_LABELS = {SessionType.PT: "Personal Training", SessionType.GROUP: "Group Class"}


def find_eligible_subscription(subscriptions: Sequence[Any], session_type: SessionType) -> Any | None:
    """First ACTIVE subscription whose plan type matches *session_type*."""
    for sub in subscriptions:
        plan = getattr(sub, "plan", None)
        if sub.status == "ACTIVE" and plan is not None and plan.type == session_type.value:
            return sub
    return None


def count_window_bookings(bookings: Sequence[Any], subscription: Any, session_type: SessionType) -> int:
    """Live bookings of *session_type* dated inside the subscription's validity window."""
    return sum(
        1
        for b in bookings
        if is_live(b)
        and b.type == session_type.value
        and subscription.start_date <= b.date <= subscription.end_date
    )


def resolve_slot(trainer: Any | None, time_slot: str | None) -> str:
    """Validate the requested slot against the grid and the trainer's shifts."""
    if not time_slot:
        raise InvalidInputError("Please select a time slot.")
    label = normalise_slot(time_slot)
    if label is None:
        raise InvalidInputError(f"'{time_slot}' is not a bookable time slot.")
    if trainer is None or not trainer.is_active or trainer.role != "TRAINER":
        raise InvalidInputError("Selected trainer is not available.")
    minute = parse_clock(label)
    if not any(shift.contains(minute) for shift in load_shifts(trainer.shifts)):
        raise InvalidInputError(f"Trainer is not on duty at {label}.")
    return label


def check_booking(
    *,
    member_id: int,
    session_type: SessionType,
    slot_bookings: Sequence[Any],
    member_bookings: Sequence[Any],
    subscriptions: Sequence[Any],
) -> Any:
    """Run rules 1-4 over freshly read collections; return the eligible subscription."""
    subscription = find_eligible_subscription(subscriptions, session_type)
    plan = subscription.plan if subscription is not None else None
    capacity = (plan.group_capacity if plan is not None else None) or settings.DEFAULT_GROUP_CAPACITY

    verdict = evaluate_slot(slot_bookings, session_type, member_id, capacity)
    if not verdict.available:
        if verdict.reason == CLASS_FULL:
            raise CapacityExceededError(
                f"Class is full ({verdict.count}/{verdict.capacity}). Please choose another slot."
            )
        raise SlotCollisionError(
            f"Collision detected: slot is no longer available ({verdict.reason}). "
            "Please refresh and try again."
        )

    if subscription is None:
        raise NoEligibleSubscriptionError(
            f"You need an active {_PLAN_LABELS[session_type]} subscription "
            f"(plan type {session_type.value})."
        )

    if plan.max_sessions:
        used = count_window_bookings(member_bookings, subscription, session_type)
        if used >= plan.max_sessions:
            raise QuotaExhaustedError(
                f"You have used all {plan.max_sessions} {session_type.value} sessions "
                "of your plan. Please upgrade your plan."
            )
    return subscription


async def validate_and_commit_booking(
    repo: SchedulingRepository,
    *,
    member_id: int,
    trainer_id: int,
    date: str,
    time_slot: str | None,
    session_type: SessionType,
) -> Booking:
    """Re-validate the slot against the latest rows and insert a BOOKED booking."""
    trainer = await repo.get_user(trainer_id)
    label = resolve_slot(trainer, time_slot)
    trainer_branch = trainer.branch_id
    guard_keys = [
        f"slot:{trainer_id}:{date}:{label}",
        f"member:{member_id}:{session_type.value}",
    ]

    for attempt in range(1, COMMIT_ATTEMPTS + 1):
        try:
            versions = await repo.read_guard_versions(guard_keys)
            subscriptions = await repo.list_active_subscriptions(member_id)
            slot_bookings = await repo.list_slot_bookings(trainer_id, date, label, lock=True)
            member_bookings = await repo.list_member_bookings(member_id, session_type.value)
            subscription = check_booking(
                member_id=member_id,
                session_type=session_type,
                slot_bookings=slot_bookings,
                member_bookings=member_bookings,
                subscriptions=subscriptions,
            )
        except SchedulingError as exc:
            await repo.db.rollback()
            logger.info(
                "Booking rejected (%s) member=%s trainer=%s %s %s",
                exc.kind, member_id, trainer_id, date, label,
            )
            raise

        if not await repo.bump_guard_versions(versions):
            await repo.db.rollback()
            logger.info(
                "Concurrent booking on trainer=%s %s %s, re-validating (attempt %d)",
                trainer_id, date, label, attempt,
            )
            continue

        booking = Booking(
            member_id=member_id,
            trainer_id=trainer_id,
            type=session_type.value,
            date=date,
            time_slot=label,
            branch_id=subscription.branch_id or trainer_branch,
            status="BOOKED",
        )
        repo.db.add(booking)
        try:
            await repo.db.commit()
        except IntegrityError:
            await repo.db.rollback()
            logger.warning(
                "Concurrent PT booking lost the race: trainer=%s %s %s", trainer_id, date, label
            )
            raise SlotCollisionError(
                "Collision detected: slot was just booked by someone else. Please refresh and try again."
            ) from None
        await repo.db.refresh(booking)

        logger.info(
            "Booked %s #%d member=%s trainer=%s %s %s",
            session_type.value, booking.id, member_id, trainer_id, date, label,
        )
        return booking

    raise SlotCollisionError(
        "Collision detected: slot is too busy right now. Please refresh and try again."
    )
