"""
Booking status state machine.

A booking moves upcoming -> in_progress -> completed as time passes,
and can leave the normal path as cancelled or no_show. Cancelled,
no_show, and completed are terminal. Every transition must be listed
in TRANSITIONS; anything else raises InvalidTransitionError.

Usage:
    sm = BookingStatusMachine(BookingStatus.UPCOMING)
    sm.transition(StatusTrigger.CANCEL)
    assert sm.current_status == BookingStatus.CANCELLED
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from booking_engine.schemas.booking_schema import BookingStatus
from booking_engine.scheduling.time_utils import parse_time_to_minutes

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({
    BookingStatus.CANCELLED,
    BookingStatus.NO_SHOW,
    BookingStatus.COMPLETED,
})


class StatusTrigger(str, Enum):
    """Events that change a booking's status."""
    APPOINTMENT_STARTED = "appointment_started"
    APPOINTMENT_FINISHED = "appointment_finished"
    CANCEL = "cancel"
    MARK_NO_SHOW = "mark_no_show"


@dataclass
class Transition:
    """A single valid status transition."""
    from_status: BookingStatus
    to_status: BookingStatus
    trigger: StatusTrigger


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current status."""


class BookingStatusMachine:
    """Deterministic status transitions for one booking."""

    TRANSITIONS: list[Transition] = [
        Transition(BookingStatus.UPCOMING, BookingStatus.IN_PROGRESS,
                   StatusTrigger.APPOINTMENT_STARTED),
        Transition(BookingStatus.UPCOMING, BookingStatus.COMPLETED,
                   StatusTrigger.APPOINTMENT_FINISHED),
        Transition(BookingStatus.UPCOMING, BookingStatus.CANCELLED,
                   StatusTrigger.CANCEL),
        Transition(BookingStatus.UPCOMING, BookingStatus.NO_SHOW,
                   StatusTrigger.MARK_NO_SHOW),
        Transition(BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED,
                   StatusTrigger.APPOINTMENT_FINISHED),
        Transition(BookingStatus.IN_PROGRESS, BookingStatus.NO_SHOW,
                   StatusTrigger.MARK_NO_SHOW),
    ]

    def __init__(self, status: BookingStatus = BookingStatus.UPCOMING) -> None:
        self._current_status = status

    @property
    def current_status(self) -> BookingStatus:
        return self._current_status

    def transition(self, trigger: StatusTrigger) -> BookingStatus:
        """
        Apply a trigger to the current status.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_status == self._current_status and t.trigger == trigger:
                old_status = self._current_status
                self._current_status = t.to_status
                logger.debug(
                    "Status transition: %s -> %s (trigger: %s)",
                    old_status.value, self._current_status.value, trigger.value,
                )
                return self._current_status

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_status.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def transition_to(self, status: BookingStatus) -> BookingStatus:
        """Move directly to ``status`` if some trigger allows it."""
        if status == self._current_status:
            return status
        for t in self.TRANSITIONS:
            if t.from_status == self._current_status and t.to_status == status:
                return self.transition(t.trigger)
        raise InvalidTransitionError(
            f"Cannot move booking from '{self._current_status.value}' to '{status.value}'"
        )

    def get_valid_triggers(self) -> list[StatusTrigger]:
        """Return all triggers valid from the current status."""
        return [t.trigger for t in self.TRANSITIONS if t.from_status == self._current_status]

    def is_terminal(self) -> bool:
        return self._current_status in TERMINAL_STATUSES


def create_booking_datetime(booking_date: str, booking_time: str) -> Optional[datetime]:
    """Local datetime for a booking's date and display time, or None if unreadable."""
    try:
        day = datetime.strptime(booking_date.strip(), "%Y-%m-%d")
    except (ValueError, AttributeError):
        logger.warning("Unreadable booking date %r", booking_date)
        return None
    return day + timedelta(minutes=parse_time_to_minutes(booking_time))


def determine_booking_status(
    booking_date: str,
    booking_time: str,
    end_time: str,
    current: BookingStatus,
    now: datetime,
) -> BookingStatus:
    """
    Status a booking should have at ``now``.

    Terminal statuses never change. Otherwise the booking is upcoming
    before its start, in progress until its end, then completed.
    """
    if current in TERMINAL_STATUSES:
        return current

    start = create_booking_datetime(booking_date, booking_time)
    if start is None:
        return current
    end = create_booking_datetime(booking_date, end_time) if end_time else start
    if end is None:
        end = start
    elif end < start:
        # End time wrapped past midnight.
        end += timedelta(days=1)

    if now < start:
        return BookingStatus.UPCOMING
    if now <= end:
        return BookingStatus.IN_PROGRESS
    return BookingStatus.COMPLETED
