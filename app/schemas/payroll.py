"""Pydantic schema for the monthly payroll statement."""

from __future__ import annotations

from pydantic import BaseModel


class PayrollResult(BaseModel):
    staff_id: int
    year: int
    month: int
    hourly_rate: float
    shift_summary: str
    total_days_worked: int
    total_hours_worked: float
    base_salary: float
    week_offs_taken: int
    week_off_pay: float
    holidays_paid: int
    holiday_pay: float
    commission_earned: float
    incentive_type: str
    late_days: int
    early_out_days: int
    deductions: float = 0.0  # tax / PF are not modelled
    total_earnings: float
    net_pay: float
