"""
Shift model, clock parsing and the attendance shift matcher.

A shift is a half-open wall-clock window ``[start, end)`` with no date.
Staff own one to three of them; they are stored on the user row as
``{"start": "HH:MM", "end": "HH:MM"}`` dicts and normalised here.

All comparisons happen in minutes since midnight so that the 24-hour shift
clock and the 12-hour slot labels (``"06:00 PM"``) line up.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from app.core.config import settings

_CLOCK_RE = re.compile(
    r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([AaPp][Mm])?\s*$"
)


def parse_clock(value: str) -> int:
    """Convert ``HH:MM``, ``HH:MM:SS`` or ``hh:mm[:ss] AM/PM`` to minutes since midnight.

    Raises ``ValueError`` for anything else.
    """
    match = _CLOCK_RE.match(value or "")
    if match is None:
        raise ValueError(f"Unrecognised clock time: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    meridiem = match.group(4)
    if minutes > 59:
        raise ValueError(f"Unrecognised clock time: {value!r}")
    if meridiem:
        if not 1 <= hours <= 12:
            raise ValueError(f"Unrecognised clock time: {value!r}")
        hours = hours % 12 + (12 if meridiem.upper() == "PM" else 0)
    elif hours > 23:
        raise ValueError(f"Unrecognised clock time: {value!r}")
    return hours * 60 + minutes


def format_clock_12h(minutes: int) -> str:
    """``780`` -> ``"01:00 PM"``."""
    hours, mins = divmod(minutes % (24 * 60), 60)
    suffix = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12:02d}:{mins:02d} {suffix}"


@dataclass(frozen=True)
class Shift:
    start: int  # minutes since midnight
    end: int

    @classmethod
    def from_dict(cls, raw: Mapping[str, str]) -> Shift:
        return cls(parse_clock(raw["start"]), parse_clock(raw["end"]))

    def contains(self, minute: int) -> bool:
        """Half-open membership used by the slot grid."""
        return self.start <= minute < self.end

    def label(self) -> str:
        return f"{format_clock_12h(self.start)} - {format_clock_12h(self.end)}"


def load_shifts(raw_shifts: Iterable[Any] | None) -> list[Shift]:
    """Normalise a user's stored shifts, skipping entries that cannot be parsed.

    Shift validity is enforced when the staff profile is saved; anything
    malformed that still reaches the engine is unattributable, not fatal.
    """
    shifts: list[Shift] = []
    for raw in raw_shifts or ():
        if isinstance(raw, Shift):
            shifts.append(raw)
            continue
        try:
            shifts.append(Shift.from_dict(raw))
        except (KeyError, TypeError, ValueError):
            continue
    return shifts


def match_shift(
    clock_time: str,
    shifts: Sequence[Shift],
    grace_minutes: int | None = None,
) -> tuple[Shift, int] | None:
    """Return the first shift (and its index) whose ``[start - grace, end]`` covers *clock_time*.

    Early arrivals inside the grace window and late arrivals up to the
    nominal end both match.  Overlapping shifts resolve by list order.
    """
    grace = settings.EARLY_CHECKIN_GRACE_MINUTES if grace_minutes is None else grace_minutes
    try:
        minute = parse_clock(clock_time)
    except ValueError:
        return None
    for index, shift in enumerate(shifts):
        if shift.start - grace <= minute <= shift.end:
            return shift, index
    return None


def shift_summary(shifts: Sequence[Shift]) -> str:
    if not shifts:
        return "No shifts assigned"
    return ", ".join(s.label() for s in shifts)


def hours_between(time_in: str, time_out: str) -> float:
    """Decimal hours from *time_in* to *time_out*; a checkout past midnight wraps."""
    span = parse_clock(time_out) - parse_clock(time_in)
    if span < 0:
        span += 24 * 60
    return span / 60
