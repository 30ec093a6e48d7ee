"""
Provider availability resolution against the booking store.

Combines a provider's weekly base schedule with the bookings already
confirmed for a date and marks each offered slot booked or free for a
requested service duration.

Failure policy is deliberately asymmetric and must stay that way:
  * get_booked_slots / get_available_slots fail OPEN. If the store
    cannot be read the grid shows nothing booked, so browsing still
    works during a storage fault.
  * is_slot_available fails CLOSED. If the check cannot be completed
    the slot is reported as conflicting, so a single booking attempt
    is refused rather than risking a double-book.
"""

import logging
from datetime import date, datetime
from typing import Callable, Optional, Union

from booking_engine.config import settings
from booking_engine.schemas.availability_schema import BookedSlot, BookingConflict, TimeSlot
from booking_engine.scheduling.booking_store import BookingStore, BookingStoreError
from booking_engine.scheduling.provider_rules import day_of_week, get_provider_day_schedule
from booking_engine.scheduling.time_utils import TimeInterval, calculate_end_time, canonical_date

logger = logging.getLogger(__name__)

DateLike = Union[str, date]

VERIFY_FAILED_MESSAGE = "Unable to verify availability. Please try again."


def _to_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(canonical_date(value) or value.strip())


def _date_key(value: DateLike) -> str:
    """Comparison key for a date; "2026-11-4" and "2026-11-04" share one."""
    if isinstance(value, date):
        return _to_date(value).isoformat()
    return canonical_date(value) or value.strip()


def provider_names_match(booked_name: Optional[str], requested_name: str) -> bool:
    """Case-insensitive match allowing either name to contain the other.

    Handles short names ("KIKI") against display names ("Kiki's Nails").
    A booking with no provider name never matches.
    """
    if not booked_name or not booked_name.strip() or not requested_name.strip():
        return False
    booked = booked_name.strip().lower()
    requested = requested_name.strip().lower()
    return booked == requested or requested in booked or booked in requested


class AvailabilityService:
    """
    Read-only availability queries over an injected booking store.

    Args:
        store: the booking collection to read.
        today: callable returning the current calendar date.
        default_duration: minutes assumed when a duration is unreadable.
    """

    def __init__(
        self,
        store: BookingStore,
        today: Optional[Callable[[], date]] = None,
        default_duration: Optional[int] = None,
    ) -> None:
        self.store = store
        self._today = today or date.today
        self.default_duration = (
            default_duration
            if default_duration is not None
            else settings.scheduling.default_service_duration_minutes
        )

    def _query_booked_slots(self, provider_name: str, booking_date: DateLike) -> list[BookedSlot]:
        """Active bookings for a provider/date. Raises BookingStoreError."""
        date_key = _date_key(booking_date)
        return [
            BookedSlot(
                time=booking.booking_time,
                end_time=booking.end_time,
                booking_id=booking.id,
                service_name=booking.service_name,
                duration=booking.duration,
            )
            for booking in self.store.list_bookings()
            if booking.is_active
            and _date_key(booking.booking_date) == date_key
            and provider_names_match(booking.provider_name, provider_name)
        ]

    def get_booked_slots(self, provider_name: str, booking_date: DateLike) -> list[BookedSlot]:
        """Active bookings for a provider/date; an unreadable store yields []."""
        try:
            return self._query_booked_slots(provider_name, booking_date)
        except BookingStoreError:
            # Fail open: see module docstring.
            logger.warning(
                "Booking store unreadable while listing %s on %s; showing no bookings",
                provider_name, booking_date, exc_info=True,
            )
            return []

    def _interval(self, time: str, duration: Optional[str]) -> TimeInterval:
        return TimeInterval.from_strings(time, duration, self.default_duration)

    def get_available_slots(
        self,
        provider_name: str,
        booking_date: DateLike,
        service_duration: Optional[str] = None,
    ) -> list[TimeSlot]:
        """
        Every base-schedule slot for the date, marked booked or free.

        Returns [] for past dates (today is bookable), unreadable dates,
        and days the provider does not work. Slots keep schedule order.
        """
        try:
            target = _to_date(booking_date)
        except ValueError:
            logger.warning("Unreadable booking date %r for %s", booking_date, provider_name)
            return []

        if target < self._today():
            return []

        base_slots = get_provider_day_schedule(provider_name).get(day_of_week(target), [])
        if not base_slots:
            return []

        booked = [
            (slot, self._interval(slot.time, slot.duration))
            for slot in self.get_booked_slots(provider_name, target)
        ]

        slots: list[TimeSlot] = []
        for time in base_slots:
            candidate = self._interval(time, service_duration)
            conflict = next(
                (slot for slot, interval in booked if candidate.overlaps(interval)), None
            )
            slots.append(TimeSlot(
                time=time,
                is_booked=conflict is not None,
                booking_id=conflict.booking_id if conflict else None,
            ))

        logger.debug(
            "%s on %s: %d/%d slots free",
            provider_name, target, sum(not s.is_booked for s in slots), len(slots),
        )
        return slots

    def is_slot_available(
        self,
        provider_name: str,
        booking_date: DateLike,
        time: str,
        service_duration: Optional[str],
        exclude_booking_id: Optional[str] = None,
    ) -> BookingConflict:
        """
        Check one candidate slot against existing bookings.

        ``exclude_booking_id`` ignores a booking that is being moved.
        """
        try:
            booked_slots = self._query_booked_slots(provider_name, booking_date)
            candidate = self._interval(time, service_duration)

            for booked in booked_slots:
                if booked.booking_id == exclude_booking_id:
                    continue
                if candidate.overlaps(self._interval(booked.time, booked.duration)):
                    end_time = booked.end_time or calculate_end_time(booked.time, booked.duration)
                    return BookingConflict(
                        has_conflict=True,
                        conflicting_booking_id=booked.booking_id,
                        message=(
                            f"This time slot conflicts with an existing {booked.service_name} "
                            f"appointment ({booked.time} - {end_time})"
                        ),
                    )
            return BookingConflict(has_conflict=False)
        except Exception:
            # Fail closed: see module docstring.
            logger.exception(
                "Could not verify %s on %s at %s; treating as conflict",
                provider_name, booking_date, time,
            )
            return BookingConflict(has_conflict=True, message=VERIFY_FAILED_MESSAGE)

    def get_provider_schedule(self, provider_name: str) -> dict[int, list[str]]:
        """Base weekly schedule for a provider (0 = Sunday)."""
        return get_provider_day_schedule(provider_name)

    @staticmethod
    def format_slots_for_calendar(slots: list[TimeSlot]) -> list[str]:
        """Bare time strings of the free slots, in order."""
        return [slot.time for slot in slots if not slot.is_booked]
