"""
Slot availability calculator.

The booking grid is a fixed set of sixteen hourly slots, ``06:00 AM``
through ``09:00 PM``.  For a trainer and a date the calculator keeps only
the slots that start inside one of the trainer's shifts and annotates each
with whether the requester may book it, and why not.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from app.core.config import settings
from app.schemas.booking import SessionType, SlotAvailability
from app.services.shifts import format_clock_12h, load_shifts, parse_clock

SLOT_LABELS: tuple[str, ...] = tuple(format_clock_12h(hour * 60) for hour in range(6, 22))

PRIVATE_SESSION = "PRIVATE SESSION"
GROUP_CLASS = "GROUP CLASS"
ALREADY_JOINED = "ALREADY JOINED"
CLASS_FULL = "CLASS FULL"


def is_live(booking: Any) -> bool:
    return booking.status != "CANCELLED"


def normalise_slot(time_slot: str) -> str | None:
    """Map any clock spelling of a grid slot (``"18:00"``, ``"6:00 pm"``) to its label."""
    try:
        label = format_clock_12h(parse_clock(time_slot))
    except ValueError:
        return None
    return label if label in SLOT_LABELS else None


def evaluate_slot(
    slot_bookings: Sequence[Any],
    session_type: SessionType,
    member_id: int | None,
    capacity: int,
) -> SlotAvailability:
    """Apply the exclusivity and capacity rules to the live bookings of one slot.

    *slot_bookings* must already be narrowed to one trainer, date and slot.
    The returned ``slot`` field is left empty for the caller to fill.
    """
    live = [b for b in slot_bookings if is_live(b)]
    group_count = sum(1 for b in live if b.type == SessionType.GROUP.value)

    if any(b.type == SessionType.PT.value for b in live):
        return SlotAvailability(slot="", available=False, reason=PRIVATE_SESSION)
    if session_type is SessionType.PT and group_count:
        return SlotAvailability(slot="", available=False, reason=GROUP_CLASS)

    is_group = session_type is SessionType.GROUP
    annotations = {"count": group_count, "capacity": capacity} if is_group else {}
    if member_id is not None and any(b.member_id == member_id for b in live):
        return SlotAvailability(slot="", available=False, reason=ALREADY_JOINED, **annotations)
    if is_group and group_count >= capacity:
        return SlotAvailability(slot="", available=False, reason=CLASS_FULL, **annotations)
    return SlotAvailability(slot="", available=True, **annotations)


def candidate_slots(raw_shifts: Iterable[Any] | None) -> list[str]:
    """Grid slots whose start lies in ``[shift.start, shift.end)`` of some shift, in grid order."""
    shifts = load_shifts(raw_shifts)
    return [
        label
        for label in SLOT_LABELS
        if any(shift.contains(parse_clock(label)) for shift in shifts)
    ]


def compute_available_slots(
    trainer: Any,
    date: str,
    session_type: SessionType,
    bookings: Iterable[Any],
    *,
    member_id: int | None = None,
    group_capacity: int | None = None,
) -> list[SlotAvailability]:
    """Annotated on-duty slots for *trainer* on *date*, in fixed chronological order.

    *bookings* may hold anything; only this trainer's live bookings on *date*
    are considered.  *group_capacity* is the requester's GROUP-plan capacity
    and falls back to ``DEFAULT_GROUP_CAPACITY``.
    """
    capacity = group_capacity or settings.DEFAULT_GROUP_CAPACITY
    by_slot: dict[str, list[Any]] = {}
    for booking in bookings:
        if booking.trainer_id != trainer.id or booking.date != date or not is_live(booking):
            continue
        label = normalise_slot(booking.time_slot)
        if label is not None:
            by_slot.setdefault(label, []).append(booking)

    result = []
    for label in candidate_slots(trainer.shifts):
        verdict = evaluate_slot(by_slot.get(label, []), session_type, member_id, capacity)
        result.append(verdict.model_copy(update={"slot": label}))
    return result
