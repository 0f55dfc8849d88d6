"""Tests for the monthly payroll calculator (pure, no database)."""

from types import SimpleNamespace

import pytest

from app.services.payroll import SaleLine, generate_monthly_payroll

FULL_DAY = [{"start": "09:00", "end": "17:00"}]


def _staff(**overrides):
    fields = dict(
        id=1,
        role="STAFF",
        branch_id="B1",
        shifts=FULL_DAY,
        hourly_rate=500.0,
        commission_percentage=None,
        week_off_day=0,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def _att(date, time_in, time_out, user_id=1, type="STAFF", id=None):
    return SimpleNamespace(id=id, user_id=user_id, date=date, time_in=time_in, time_out=time_out, type=type)


def _holiday(date, branch_id="ALL"):
    return SimpleNamespace(date=date, branch_id=branch_id)


def _session(date, status="COMPLETED", trainer_id=1):
    return SimpleNamespace(date=date, status=status, trainer_id=trainer_id)


def test_early_checkin_inside_grace_is_paid_in_full():
    result = generate_monthly_payroll(_staff(), [_att("2025-03-04", "08:45", "17:30")], 2025, 3)
    assert result.total_days_worked == 1
    assert result.total_hours_worked == 8.75
    assert result.base_salary == 4375.0
    assert result.late_days == 0
    assert result.early_out_days == 0


def test_daily_hours_are_capped():
    shifts = [{"start": "09:00", "end": "18:00"}]
    result = generate_monthly_payroll(
        _staff(shifts=shifts), [_att("2025-03-04", "08:30", "18:30")], 2025, 3
    )
    assert result.total_hours_worked == 9.0
    assert result.base_salary == 4500.0


def test_split_shift_day_is_summed_then_capped():
    shifts = [{"start": "06:00", "end": "11:00"}, {"start": "16:00", "end": "21:00"}]
    records = [
        _att("2025-03-04", "06:00", "11:00"),
        _att("2025-03-04", "16:00", "21:00"),
    ]
    result = generate_monthly_payroll(_staff(shifts=shifts), records, 2025, 3)
    assert result.total_days_worked == 1
    assert result.total_hours_worked == 9.0


def test_holiday_is_flat_entitlement():
    result = generate_monthly_payroll(
        _staff(), [], 2025, 3, holidays=[_holiday("2025-03-14")]
    )
    assert result.holidays_paid == 1
    assert result.holiday_pay == 4500.0
    assert result.total_earnings == 4500.0


def test_holidays_filtered_by_branch_and_month_and_deduplicated():
    holidays = [
        _holiday("2025-03-14"),
        _holiday("2025-03-14", "B1"),
        _holiday("2025-03-20", "B2"),
        _holiday("2025-04-01"),
    ]
    result = generate_monthly_payroll(_staff(), [], 2025, 3, holidays=holidays)
    assert result.holidays_paid == 1


def test_week_off_credit_per_six_worked_days():
    records = [_att(f"2025-03-{d:02d}", "09:00", "17:00") for d in range(3, 15)]
    result = generate_monthly_payroll(_staff(), records, 2025, 3)
    assert result.total_days_worked == 12
    assert result.week_offs_taken == 2
    assert result.week_off_pay == 9000.0
    assert result.base_salary == 12 * 8 * 500


def test_week_off_cadence_ignores_the_calendar():
    # 31 worked days are five completed blocks, whatever the week-off weekday
    records = [_att(f"2025-03-{d:02d}", "09:00", "17:00") for d in range(1, 32)]
    result = generate_monthly_payroll(_staff(week_off_day=3), records, 2025, 3)
    assert result.week_offs_taken == 5
    assert result.week_off_pay == 5 * 4500.0


def test_only_closed_matched_staff_rows_count():
    records = [
        _att("2025-03-04", "09:00", None),
        _att("2025-03-05", "13:00", "15:00", type="MEMBER"),
        _att("2025-03-06", "09:00", "17:00", user_id=2),
        _att("2025-03-07", "18:00", "20:00"),
        _att("2025-02-28", "09:00", "17:00"),
    ]
    result = generate_monthly_payroll(_staff(), records, 2025, 3)
    assert result.total_days_worked == 0
    assert result.base_salary == 0.0


def test_missing_shifts_is_unattributable_not_fatal():
    result = generate_monthly_payroll(
        _staff(shifts=[]), [_att("2025-03-04", "09:00", "17:00")], 2025, 3
    )
    assert result.total_hours_worked == 0.0
    assert result.shift_summary == "No shifts assigned"


def test_missing_hourly_rate_falls_back():
    result = generate_monthly_payroll(
        _staff(hourly_rate=None), [_att("2025-03-04", "09:00", "13:00")], 2025, 3
    )
    assert result.hourly_rate == 500.0
    assert result.base_salary == 2000.0


def test_late_and_early_out_flags():
    records = [
        _att("2025-03-04", "09:20", "17:00"),
        _att("2025-03-05", "09:00", "16:00"),
    ]
    result = generate_monthly_payroll(_staff(), records, 2025, 3)
    assert result.late_days == 1
    assert result.early_out_days == 1


def test_trainer_commission_on_completed_sessions():
    trainer = _staff(role="TRAINER", commission_percentage=10)
    bookings = [
        _session("2025-03-03"),
        _session("2025-03-04"),
        _session("2025-03-05"),
        _session("2025-03-06", status="BOOKED"),
        _session("2025-02-27"),
        _session("2025-03-07", trainer_id=9),
    ]
    result = generate_monthly_payroll(trainer, [], 2025, 3, bookings)
    assert result.commission_earned == 150.0
    assert result.incentive_type == "3 Sessions Conducted (10%)"
    assert result.net_pay == result.total_earnings == 150.0


def test_session_value_override():
    trainer = _staff(role="TRAINER", commission_percentage=20)
    result = generate_monthly_payroll(
        trainer, [], 2025, 3, [_session("2025-03-03")], session_value=1000
    )
    assert result.commission_earned == 200.0


def test_manager_commission_on_gym_sales():
    manager = _staff(role="MANAGER", commission_percentage=5)
    sales = [
        SaleLine(staff_id=1, date="2025-03-02", amount=10000, plan_type="GYM"),
        SaleLine(staff_id=1, date="2025-03-09", amount=5000, plan_type="GYM"),
        SaleLine(staff_id=1, date="2025-03-10", amount=3000, plan_type="PT"),
        SaleLine(staff_id=2, date="2025-03-11", amount=9000, plan_type="GYM"),
    ]
    result = generate_monthly_payroll(manager, [], 2025, 3, sales=sales)
    assert result.commission_earned == 750.0
    assert result.incentive_type == "2 Gym Plans Sold (5%)"


def test_other_roles_earn_no_commission():
    result = generate_monthly_payroll(_staff(commission_percentage=50), [], 2025, 3)
    assert result.commission_earned == 0.0
    assert result.incentive_type == "No incentives found"


def test_payroll_is_idempotent():
    args = (
        _staff(role="TRAINER", commission_percentage=10),
        [_att("2025-03-04", "08:45", "17:30")],
        2025,
        3,
        [_session("2025-03-04")],
        [_holiday("2025-03-14")],
    )
    assert generate_monthly_payroll(*args) == generate_monthly_payroll(*args)


@pytest.mark.parametrize("time_in,time_out", [("08:00", "17:00"), ("17:01", "18:00")])
def test_checkins_outside_the_window_earn_nothing(time_in, time_out):
    result = generate_monthly_payroll(_staff(), [_att("2025-03-04", time_in, time_out)], 2025, 3)
    assert result.total_hours_worked == 0.0
