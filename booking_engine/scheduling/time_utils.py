"""
Time arithmetic for display-time and duration strings.

All times are compared as integer minutes since midnight. Parsing is
lenient: a malformed time yields 0 and a malformed duration yields the
default duration, so bad upstream data degrades instead of raising.
Callers treat 0 as "unparsable".
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from booking_engine.utils import round_half_up

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60
DEFAULT_DURATION_MINUTES = 60

_MERIDIEM = re.compile(r"\s*(AM|PM)", re.IGNORECASE)
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_DURATION = re.compile(r"(\d+(?:\.\d+)?)\s*(hour|hr|h|minute|min|m)", re.IGNORECASE)
_CLOCK_24H = re.compile(r"^(\d{1,2}):(\d{2})$")
_CLOCK_12H = re.compile(r"^(\d{1,2}):(\d{2})\s?(AM|PM)$", re.IGNORECASE)


def canonical_date(text: Optional[str]) -> Optional[str]:
    """
    Return the zero-padded "YYYY-MM-DD" form of a date, or None.

    Bookings are matched on this string, so "2026-11-4" and
    "2026-11-04" must collapse to one key.

    Examples:
        >>> canonical_date(" 2026-11-4 ")
        '2026-11-04'
        >>> canonical_date("04/11/2026") is None
        True
    """
    if not text:
        return None
    try:
        return datetime.strptime(text.strip(), "%Y-%m-%d").date().isoformat()
    except ValueError:
        return None


def is_clock_time(text: Optional[str]) -> bool:
    """True for "14:30" (0-23 hours) or "2:30 PM" (1-12 hours); minutes 00-59."""
    if not text:
        return False
    value = text.strip()
    match = _CLOCK_24H.match(value)
    if match:
        return int(match.group(1)) <= 23 and int(match.group(2)) < 60
    match = _CLOCK_12H.match(value)
    if match:
        return 1 <= int(match.group(1)) <= 12 and int(match.group(2)) < 60
    return False


def _leading_int(text: str) -> Optional[int]:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else None


def parse_time_to_minutes(text: Optional[str]) -> int:
    """
    Convert "9:00 AM", "12:30 pm" or "14:30" into minutes since midnight.

    12 AM is 0 and 12 PM is 720. Anything that is not two colon-separated
    numeric parts, or that falls outside a single day, returns 0.
    """
    if not text:
        return 0

    clean = text.strip().upper()
    is_pm = "PM" in clean
    is_am = "AM" in clean

    parts = _MERIDIEM.sub("", clean).strip().split(":")
    if len(parts) != 2:
        return 0

    hours = _leading_int(parts[0])
    minutes = _leading_int(parts[1])
    if hours is None or minutes is None:
        return 0

    if is_pm and hours != 12:
        hours += 12
    elif is_am and hours == 12:
        hours = 0

    total = hours * 60 + minutes
    if not 0 <= minutes < 60 or not 0 <= total < MINUTES_PER_DAY:
        logger.debug("Time '%s' is outside a single day", text)
        return 0
    return total


def parse_duration_to_minutes(
    text: Optional[str], default: int = DEFAULT_DURATION_MINUTES
) -> int:
    """
    Convert "2 hours", "1.5 hrs" or "45 mins" into whole minutes.

    Only the first amount/unit pair is read. Hours are rounded half-up
    to the nearest minute. No match returns ``default``.
    """
    if not text:
        return default
    match = _DURATION.search(text)
    if not match:
        return default

    amount = float(match.group(1))
    if match.group(2).lower().startswith("h"):
        return round_half_up(amount * 60)
    return round_half_up(amount)


def intervals_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Half-open overlap test: touching endpoints do not conflict."""
    return start1 < end2 and start2 < end1


def format_minutes(minutes: int) -> str:
    """Render minutes since midnight as "H:MM AM/PM", wrapping past midnight."""
    minutes %= MINUTES_PER_DAY
    hours, mins = divmod(minutes, 60)
    period = "PM" if hours >= 12 else "AM"
    display = hours - 12 if hours > 12 else (12 if hours == 0 else hours)
    return f"{display}:{mins:02d} {period}"


def calculate_end_time(start_time: str, duration: Optional[str]) -> str:
    """Return the display end time, or ``start_time`` if the duration is unreadable."""
    if not duration or not _DURATION.search(duration):
        return start_time
    start = parse_time_to_minutes(start_time)
    return format_minutes(start + parse_duration_to_minutes(duration))


@dataclass(frozen=True)
class TimeInterval:
    """Half-open ``[start, end)`` range of minutes since midnight."""

    start: int
    end: int

    @classmethod
    def from_strings(
        cls, time: str, duration: Optional[str], default: int = DEFAULT_DURATION_MINUTES
    ) -> "TimeInterval":
        start = parse_time_to_minutes(time)
        return cls(start, start + parse_duration_to_minutes(duration, default))

    def overlaps(self, other: "TimeInterval") -> bool:
        return intervals_overlap(self.start, self.end, other.start, other.end)
