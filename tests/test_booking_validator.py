"""Tests for the commit-time booking rules (pure, no database)."""

from types import SimpleNamespace

import pytest

from app.core.exceptions import (CapacityExceededError, InvalidInputError,
                                 NoEligibleSubscriptionError,
                                 QuotaExhaustedError, SlotCollisionError)
from app.schemas.booking import SessionType
from app.services.booking import (check_booking, count_window_bookings,
                                  find_eligible_subscription, resolve_slot)


def _sub(plan_type, *, max_sessions=None, group_capacity=None, status="ACTIVE",
         start="2025-01-01", end="2025-01-31"):
    plan = SimpleNamespace(type=plan_type, max_sessions=max_sessions, group_capacity=group_capacity)
    return SimpleNamespace(plan=plan, status=status, start_date=start, end_date=end, branch_id="B1")


def _booking(member_id, type="PT", date="2025-01-10", status="BOOKED"):
    return SimpleNamespace(member_id=member_id, type=type, date=date, status=status)


def _trainer(**overrides):
    fields = dict(id=7, role="TRAINER", is_active=True, shifts=[{"start": "09:00", "end": "13:00"}])
    fields.update(overrides)
    return SimpleNamespace(**fields)


def test_pt_quota_exhausted():
    sub = _sub("PT", max_sessions=12)
    used = [_booking(3, date=f"2025-01-{d:02d}") for d in range(2, 14)]
    with pytest.raises(QuotaExhaustedError) as exc:
        check_booking(
            member_id=3,
            session_type=SessionType.PT,
            slot_bookings=[],
            member_bookings=used,
            subscriptions=[sub],
        )
    assert exc.value.kind == "QUOTA_EXHAUSTED"
    assert "12" in exc.value.message


def test_quota_counts_only_live_bookings_inside_the_window():
    sub = _sub("PT", max_sessions=2)
    history = [
        _booking(3, date="2024-12-30"),
        _booking(3, date="2025-01-05", status="CANCELLED"),
        _booking(3, type="GROUP"),
        _booking(3, date="2025-01-20"),
    ]
    assert count_window_bookings(history, sub, SessionType.PT) == 1
    returned = check_booking(
        member_id=3,
        session_type=SessionType.PT,
        slot_bookings=[],
        member_bookings=history,
        subscriptions=[sub],
    )
    assert returned is sub


def test_stale_pt_slot_is_a_collision():
    with pytest.raises(SlotCollisionError) as exc:
        check_booking(
            member_id=2,
            session_type=SessionType.PT,
            slot_bookings=[_booking(1)],
            member_bookings=[],
            subscriptions=[_sub("PT")],
        )
    assert exc.value.kind == "SLOT_COLLISION"
    assert exc.value.status_code == 409


def test_already_joined_group_is_a_collision():
    with pytest.raises(SlotCollisionError):
        check_booking(
            member_id=2,
            session_type=SessionType.GROUP,
            slot_bookings=[_booking(2, type="GROUP")],
            member_bookings=[],
            subscriptions=[_sub("GROUP")],
        )


def test_full_class_uses_plan_capacity():
    seats = [_booking(m, type="GROUP") for m in range(1, 6)]
    with pytest.raises(CapacityExceededError) as exc:
        check_booking(
            member_id=50,
            session_type=SessionType.GROUP,
            slot_bookings=seats,
            member_bookings=[],
            subscriptions=[_sub("GROUP", group_capacity=5)],
        )
    assert "5/5" in exc.value.message


def test_wrong_plan_type_has_no_eligible_subscription():
    with pytest.raises(NoEligibleSubscriptionError) as exc:
        check_booking(
            member_id=2,
            session_type=SessionType.PT,
            slot_bookings=[],
            member_bookings=[],
            subscriptions=[_sub("GYM"), _sub("GROUP")],
        )
    assert exc.value.status_code == 403


def test_first_active_matching_subscription_is_used():
    expired = _sub("PT", status="EXPIRED")
    first, second = _sub("PT", max_sessions=4), _sub("PT", max_sessions=8)
    assert find_eligible_subscription([expired, first, second], SessionType.PT) is first


def test_resolve_slot_normalises_label():
    assert resolve_slot(_trainer(), "10:00") == "10:00 AM"


@pytest.mark.parametrize(
    "trainer,slot",
    [
        (_trainer(), None),
        (_trainer(), "10:30 AM"),
        (_trainer(), "03:00 PM"),
        (_trainer(role="MEMBER"), "10:00 AM"),
        (_trainer(is_active=False), "10:00 AM"),
        (None, "10:00 AM"),
    ],
)
def test_resolve_slot_rejects_invalid_input(trainer, slot):
    with pytest.raises(InvalidInputError) as exc:
        resolve_slot(trainer, slot)
    assert exc.value.kind == "INVALID_INPUT"


def test_group_request_against_live_pt_is_a_collision():
    with pytest.raises(SlotCollisionError):
        check_booking(
            member_id=2,
            session_type=SessionType.GROUP,
            slot_bookings=[_booking(1, type="PT")],
            member_bookings=[],
            subscriptions=[_sub("GROUP")],
        )
