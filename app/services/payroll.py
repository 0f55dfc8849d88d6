"""
Monthly payroll calculator.

``generate_monthly_payroll`` is a pure function of its arguments: the same
staff profile, attendance, bookings, holidays and sales always produce the
same statement, and nothing is cached or written.

Earnings are made of four parts:

* **base salary**: hours from closed STAFF attendance rows that match one of
  the staff member's shifts, capped per day at ``MAX_HOURS_PER_DAY``,
  times the hourly rate;
* **week-off pay**: one credit per completed block of
  ``WEEK_OFF_BLOCK_DAYS`` worked days, each paid as a full day;
* **holiday pay**: a full day for every holiday date in the month that
  applies to the staff member's branch, worked or not.  Holidays are counted
  per date, so an ``ALL`` holiday and a branch holiday on the same day pay
  once;
* **commission**: trainers earn a percentage of ``SESSION_VALUE_BASIS`` per
  completed session; managers earn a percentage of their GYM-plan sales.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from app.core.config import settings
from app.schemas.payroll import PayrollResult
from app.services.shifts import hours_between, load_shifts, match_shift, parse_clock, shift_summary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaleLine:
    staff_id: int
    date: str
    amount: float
    plan_type: str | None


@dataclass
class _DayTally:
    hours: float = 0.0
    late: bool = False
    early_out: bool = False


def _in_month(iso_date: str | None, year: int, month: int) -> bool:
    return bool(iso_date) and iso_date.startswith(f"{year:04d}-{month:02d}-")


def _tally_attendance(
    staff: Any, attendance_records: Iterable[Any], year: int, month: int
) -> dict[str, _DayTally]:
    shifts = load_shifts(staff.shifts)
    days: dict[str, _DayTally] = defaultdict(_DayTally)

    for record in attendance_records:
        if record.user_id != staff.id or getattr(record, "type", "STAFF") != "STAFF":
            continue
        if not _in_month(record.date, year, month) or not record.time_in or not record.time_out:
            continue
        matched = match_shift(record.time_in, shifts)
        if matched is None:
            continue
        shift, _index = matched
        try:
            hours = hours_between(record.time_in, record.time_out)
            time_in, time_out = parse_clock(record.time_in), parse_clock(record.time_out)
        except ValueError:
            logger.warning("Skipping attendance #%s with unreadable times", record.id)
            continue

        tally = days[record.date]
        tally.hours += hours
        tally.late = tally.late or time_in > shift.start
        tally.early_out = tally.early_out or (time_out >= time_in and time_out < shift.end)
    return days


def _commission(
    staff: Any,
    bookings: Iterable[Any],
    sales: Iterable[SaleLine],
    year: int,
    month: int,
    session_value: float,
) -> tuple[float, str]:
    pct = staff.commission_percentage or 0
    if staff.role == "TRAINER":
        completed = [
            b
            for b in bookings
            if b.trainer_id == staff.id and b.status == "COMPLETED" and _in_month(b.date, year, month)
        ]
        earned = len(completed) * session_value * pct / 100
        return earned, f"{len(completed)} Sessions Conducted ({pct:g}%)"
    if staff.role == "MANAGER":
        gym_sales = [
            s
            for s in sales
            if s.staff_id == staff.id and s.plan_type == "GYM" and _in_month(s.date, year, month)
        ]
        earned = sum(s.amount for s in gym_sales) * pct / 100
        return earned, f"{len(gym_sales)} Gym Plans Sold ({pct:g}%)"
    return 0.0, "No incentives found"


def generate_monthly_payroll(
    staff: Any,
    attendance_records: Iterable[Any],
    year: int,
    month: int,
    bookings: Iterable[Any] = (),
    holidays: Iterable[Any] = (),
    *,
    sales: Iterable[SaleLine] = (),
    session_value: float | None = None,
) -> PayrollResult:
    """Compute one staff member's earnings statement for ``year``/``month``."""
    max_hours = settings.MAX_HOURS_PER_DAY
    rate = staff.hourly_rate or settings.DEFAULT_HOURLY_RATE
    full_day_pay = max_hours * rate

    days = _tally_attendance(staff, attendance_records, year, month)
    total_hours = sum(min(day.hours, max_hours) for day in days.values())
    days_worked = len(days)
    base_salary = total_hours * rate

    week_offs = days_worked // settings.WEEK_OFF_BLOCK_DAYS
    week_off_pay = week_offs * full_day_pay

    holiday_dates = {
        h.date
        for h in holidays
        if _in_month(h.date, year, month) and h.branch_id in ("ALL", staff.branch_id)
    }
    holiday_pay = len(holiday_dates) * full_day_pay

    commission, incentive = _commission(
        staff,
        bookings,
        sales,
        year,
        month,
        settings.SESSION_VALUE_BASIS if session_value is None else session_value,
    )

    total = base_salary + week_off_pay + holiday_pay + commission
    return PayrollResult(
        staff_id=staff.id,
        year=year,
        month=month,
        hourly_rate=rate,
        shift_summary=shift_summary(load_shifts(staff.shifts)),
        total_days_worked=days_worked,
        total_hours_worked=round(total_hours, 2),
        base_salary=round(base_salary, 2),
        week_offs_taken=week_offs,
        week_off_pay=round(week_off_pay, 2),
        holidays_paid=len(holiday_dates),
        holiday_pay=round(holiday_pay, 2),
        commission_earned=round(commission, 2),
        incentive_type=incentive,
        late_days=sum(1 for day in days.values() if day.late),
        early_out_days=sum(1 for day in days.values() if day.early_out),
        total_earnings=round(total, 2),
        net_pay=round(total, 2),
    )
