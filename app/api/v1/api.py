"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import attendance, auth, bookings, holidays, payroll, staff

api_router = APIRouter()

# Auth (login, refresh, profile)
api_router.include_router(auth.router)

# Staff directory & shifts
api_router.include_router(staff.router)

# Slot availability, booking commit, class completion
api_router.include_router(bookings.router)

# Staff punches
api_router.include_router(attendance.router)

# Holiday calendar
api_router.include_router(holidays.router)

# Payroll statement, health
api_router.include_router(payroll.router)
