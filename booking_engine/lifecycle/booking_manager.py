"""
Post-checkout operations on confirmed bookings.

Every write reads a fresh snapshot, changes one booking (or refreshes
statuses across all of them) and saves against the snapshot version,
so a concurrent writer surfaces as StoreVersionConflictError instead
of a lost update.

Reschedules run in three steps:
    1. request_reschedule               customer proposes dates (pending)
    2. provider_respond_to_reschedule   provider offers dates and times
    3. confirm_reschedule               customer picks one; cooldown starts
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from booking_engine.config import settings
from booking_engine.lifecycle.notifications import (
    BookingEvent,
    EventKind,
    LoggingNotificationDispatcher,
    NotificationDispatcher,
    notify_safely,
)
from booking_engine.lifecycle.status_machine import (
    BookingStatusMachine,
    InvalidTransitionError,
    StatusTrigger,
    create_booking_datetime,
    determine_booking_status,
)
from booking_engine.schemas.booking_schema import (
    AvailableDate,
    BookingStatus,
    ConfirmedBooking,
    RescheduleRequest,
)
from booking_engine.scheduling.availability import AvailabilityService
from booking_engine.scheduling.booking_store import BookingStore, StoreSnapshot
from booking_engine.scheduling.provider_rules import same_provider
from booking_engine.scheduling.slot_locks import ProviderDayLocks, provider_day_key
from booking_engine.scheduling.time_utils import calculate_end_time, canonical_date, is_clock_time

logger = logging.getLogger(__name__)

BOOKING_NOT_FOUND = "Booking not found"
ONLY_UPCOMING = "Only upcoming bookings can be rescheduled"
AWAITING_PROVIDER = "Waiting for provider to respond with available dates"
INVALID_DATE = "Invalid reschedule date"
INVALID_TIME = "Invalid reschedule time"
NOT_IN_FUTURE = "The new appointment time must be in the future"


class BookingNotFoundError(LookupError):
    """Raised when no booking has the requested id."""

    def __init__(self, booking_id: str) -> None:
        super().__init__(f"{BOOKING_NOT_FOUND}: {booking_id}")
        self.booking_id = booking_id


class RescheduleNotAllowedError(Exception):
    """Raised when a reschedule step is refused."""


@dataclass
class RescheduleEligibility:
    can_reschedule: bool
    reason: Optional[str] = None


def _sort_key(booking: ConfirmedBooking) -> datetime:
    return create_booking_datetime(booking.booking_date, booking.booking_time) or datetime.max


def _as_local_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


class BookingManager:
    """
    Lifecycle operations over an injected booking store.

    Args:
        store: booking collection to read and rewrite.
        availability: used to conflict-check reschedule targets.
        dispatcher: receives cancellation and reschedule events.
        clock: returns "now" as a naive local datetime.
        locks: share with CheckoutService so reschedules and checkouts
            for the same provider/day are serialised.
        cooldown_hours: minimum gap between confirmed reschedules.
    """

    def __init__(
        self,
        store: BookingStore,
        availability: Optional[AvailabilityService] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        clock: Optional[Callable[[], datetime]] = None,
        locks: Optional[ProviderDayLocks] = None,
        cooldown_hours: Optional[int] = None,
    ) -> None:
        self.store = store
        self._clock = clock or datetime.now
        self.availability = availability or AvailabilityService(
            store, today=lambda: self._clock().date()
        )
        self.dispatcher = dispatcher or LoggingNotificationDispatcher()
        self.locks = locks or ProviderDayLocks()
        self.cooldown_hours = (
            cooldown_hours
            if cooldown_hours is not None
            else settings.scheduling.reschedule_cooldown_hours
        )

    # -- queries --------------------------------------------------------

    def list_bookings(self) -> list[ConfirmedBooking]:
        return self.store.list_bookings()

    def get_booking(self, booking_id: str) -> Optional[ConfirmedBooking]:
        return next((b for b in self.store.list_bookings() if b.id == booking_id), None)

    def get_bookings_by_provider(self, provider_name: str) -> list[ConfirmedBooking]:
        return [b for b in self.store.list_bookings() if same_provider(b.provider_name, provider_name)]

    def get_bookings_by_date(self, booking_date: str) -> list[ConfirmedBooking]:
        key = canonical_date(booking_date) or booking_date.strip()
        return [
            b for b in self.store.list_bookings()
            if (canonical_date(b.booking_date) or b.booking_date) == key
        ]

    def get_bookings_by_group(self, group_booking_id: str) -> list[ConfirmedBooking]:
        return [b for b in self.store.list_bookings() if b.group_booking_id == group_booking_id]

    def get_upcoming_bookings(self) -> list[ConfirmedBooking]:
        """Active bookings that have not started yet, soonest first."""
        now = self._clock()
        upcoming = []
        for booking in self.store.list_bookings():
            if not booking.is_active:
                continue
            start = create_booking_datetime(booking.booking_date, booking.booking_time)
            if start is None:
                if booking.status == BookingStatus.UPCOMING:
                    upcoming.append(booking)
            elif start > now:
                upcoming.append(booking)
        return sorted(upcoming, key=_sort_key)

    def get_past_bookings(self) -> list[ConfirmedBooking]:
        """Finished, cancelled, no-show, or already-started bookings, most recent first."""
        now = self._clock()
        past = []
        for booking in self.store.list_bookings():
            if booking.status in (BookingStatus.CANCELLED, BookingStatus.NO_SHOW,
                                  BookingStatus.COMPLETED):
                past.append(booking)
                continue
            start = create_booking_datetime(booking.booking_date, booking.booking_time)
            if start is not None and start <= now:
                past.append(booking)
        return sorted(past, key=_sort_key, reverse=True)

    def get_today_bookings(self, today: Optional[date] = None) -> list[ConfirmedBooking]:
        """Active bookings on ``today`` (default: the clock's date), in time order."""
        day = (today or self._clock().date()).isoformat()
        return sorted(
            (b for b in self.store.list_bookings() if b.booking_date == day and b.is_active),
            key=_sort_key,
        )

    # -- status ---------------------------------------------------------

    def _find(self, snapshot: StoreSnapshot, booking_id: str) -> ConfirmedBooking:
        for booking in snapshot.bookings:
            if booking.id == booking_id:
                return booking
        raise BookingNotFoundError(booking_id)

    def _replace(self, snapshot: StoreSnapshot, updated: ConfirmedBooking) -> None:
        bookings = [updated if b.id == updated.id else b for b in snapshot.bookings]
        self.store.save(bookings, expected_version=snapshot.version)

    def _notify(self, kind: EventKind, booking: ConfirmedBooking) -> None:
        notify_safely(self.dispatcher, BookingEvent(
            kind=kind,
            booking_id=booking.id,
            provider_name=booking.provider_name,
            service_name=booking.service_name,
            booking_date=booking.booking_date,
            booking_time=booking.booking_time,
            status=booking.status.value,
        ))

    def refresh_statuses(self) -> list[ConfirmedBooking]:
        """
        Move every booking to the status its time implies.

        Terminal bookings are left alone, and a move the state machine
        does not allow (such as in_progress back to upcoming) is skipped.
        Saves only when something changed.
        """
        snapshot = self.store.load()
        now = self._clock()
        timestamp = now.isoformat()
        changed = 0
        refreshed = []

        for booking in snapshot.bookings:
            target = determine_booking_status(
                booking.booking_date, booking.booking_time, booking.end_time, booking.status, now
            )
            if target != booking.status:
                try:
                    BookingStatusMachine(booking.status).transition_to(target)
                except InvalidTransitionError:
                    logger.debug("Skipping status refresh for %s: %s -> %s",
                                 booking.id, booking.status.value, target.value)
                else:
                    booking = booking.model_copy(update={"status": target, "updated_at": timestamp})
                    changed += 1
            refreshed.append(booking)

        if changed:
            self.store.save(refreshed, expected_version=snapshot.version)
            logger.info("Refreshed status of %d booking(s)", changed)
        return refreshed

    def update_booking_status(self, booking_id: str, status: BookingStatus) -> ConfirmedBooking:
        """
        Set a booking's status through the state machine.

        Raises:
            BookingNotFoundError: unknown id.
            InvalidTransitionError: the move is not allowed from the current status.
        """
        snapshot = self.store.load()
        booking = self._find(snapshot, booking_id)
        BookingStatusMachine(booking.status).transition_to(status)

        changes: dict = {"status": status, "updated_at": self._clock().isoformat()}
        if status in (BookingStatus.CANCELLED, BookingStatus.NO_SHOW):
            changes["is_pending_reschedule"] = False
        updated = booking.model_copy(update=changes)
        self._replace(snapshot, updated)
        logger.info("Booking %s is now %s", booking_id, status.value)
        return updated

    def cancel_booking(self, booking_id: str) -> ConfirmedBooking:
        """Cancel a booking, free its slot, and drop any pending reschedule."""
        snapshot = self.store.load()
        booking = self._find(snapshot, booking_id)
        BookingStatusMachine(booking.status).transition(StatusTrigger.CANCEL)

        updated = booking.model_copy(update={
            "status": BookingStatus.CANCELLED,
            "is_pending_reschedule": False,
            "updated_at": self._clock().isoformat(),
        })
        self._replace(snapshot, updated)
        logger.info("Cancelled booking %s (%s with %s)",
                    booking_id, booking.service_name, booking.provider_name)
        self._notify(EventKind.BOOKING_CANCELLED, updated)
        return updated

    # -- reschedule -----------------------------------------------------

    @staticmethod
    def _provider_answered(booking: ConfirmedBooking) -> bool:
        request = booking.reschedule_request
        return bool(request and request.provider_available_dates)

    def _cooldown_reason(self, booking: ConfirmedBooking, now: datetime) -> Optional[str]:
        request = booking.reschedule_request
        if not request or not request.last_rescheduled_at:
            return None
        try:
            last = _as_local_naive(datetime.fromisoformat(request.last_rescheduled_at))
        except ValueError:
            logger.warning("Ignoring unreadable last_rescheduled_at %r on %s",
                           request.last_rescheduled_at, booking.id)
            return None

        hours_since = (now - last).total_seconds() / 3600
        if hours_since >= self.cooldown_hours:
            return None
        remaining = math.ceil(self.cooldown_hours - hours_since)
        return f"You can reschedule again in {remaining} hour{'' if remaining == 1 else 's'}"

    def _request_block_reason(self, booking: ConfirmedBooking, now: datetime) -> Optional[str]:
        if booking.status != BookingStatus.UPCOMING:
            return ONLY_UPCOMING
        if booking.is_pending_reschedule and not self._provider_answered(booking):
            return AWAITING_PROVIDER
        return self._cooldown_reason(booking, now)

    def can_reschedule(self, booking_id: str) -> RescheduleEligibility:
        """Whether the customer may start (or continue) a reschedule now."""
        booking = self.get_booking(booking_id)
        if booking is None:
            return RescheduleEligibility(False, BOOKING_NOT_FOUND)
        if (
            booking.status == BookingStatus.UPCOMING
            and booking.is_pending_reschedule
            and self._provider_answered(booking)
        ):
            # Provider offered dates; the customer can pick one.
            return RescheduleEligibility(True)
        reason = self._request_block_reason(booking, self._clock())
        return RescheduleEligibility(reason is None, reason)

    def request_reschedule(self, booking_id: str, preferred_dates: list[str]) -> ConfirmedBooking:
        """
        Step 1: ask the provider for new dates.

        The original date and time are kept from the first request; the
        reschedule count only moves on confirmation.

        Raises:
            BookingNotFoundError: unknown id.
            RescheduleNotAllowedError: not upcoming, awaiting a provider
                answer, or inside the cooldown window.
        """
        snapshot = self.store.load()
        booking = self._find(snapshot, booking_id)
        now = self._clock()

        reason = self._request_block_reason(booking, now)
        if reason:
            raise RescheduleNotAllowedError(reason)

        previous = booking.reschedule_request or RescheduleRequest()
        updated = booking.model_copy(update={
            "is_pending_reschedule": True,
            "reschedule_request": RescheduleRequest(
                original_date=previous.original_date or booking.booking_date,
                original_time=previous.original_time or booking.booking_time,
                requested_dates=list(preferred_dates),
                requested_at=now.isoformat(),
                reschedule_count=previous.reschedule_count,
                last_rescheduled_at=previous.last_rescheduled_at,
            ),
            "updated_at": now.isoformat(),
        })
        self._replace(snapshot, updated)
        logger.info("Reschedule requested for %s (%d preferred date(s))",
                    booking_id, len(preferred_dates))
        self._notify(EventKind.RESCHEDULE_REQUESTED, updated)
        return updated

    def provider_respond_to_reschedule(
        self, booking_id: str, available_dates: list[AvailableDate]
    ) -> ConfirmedBooking:
        """
        Step 2: record the provider's offered dates and times.

        Does nothing if the booking is no longer pending or the provider
        has already answered.
        """
        snapshot = self.store.load()
        booking = self._find(snapshot, booking_id)

        if not booking.is_pending_reschedule:
            logger.info("Ignoring provider response for %s: no reschedule pending", booking_id)
            return booking
        if self._provider_answered(booking):
            logger.info("Ignoring duplicate provider response for %s", booking_id)
            return booking

        now = self._clock().isoformat()
        request = booking.reschedule_request or RescheduleRequest()
        updated = booking.model_copy(update={
            "reschedule_request": request.model_copy(update={
                "provider_available_dates": list(available_dates),
                "provider_responded_at": now,
            }),
            "updated_at": now,
        })
        self._replace(snapshot, updated)
        logger.info("Provider offered %d date(s) for %s", len(available_dates), booking_id)
        self._notify(EventKind.RESCHEDULE_PROVIDER_RESPONSE, updated)
        return updated

    def confirm_reschedule(self, booking_id: str, new_date: str, new_time: str) -> ConfirmedBooking:
        """
        Step 3: move the booking and start the cooldown.

        Does nothing if no reschedule is pending. The new date is stored
        in its zero-padded form.

        Raises:
            BookingNotFoundError: unknown id.
            RescheduleNotAllowedError: the booking is no longer upcoming,
                the new date/time is unreadable or not in the future, or
                the new slot clashes with another booking or could not
                be checked.
        """
        booking = self.get_booking(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)

        target_date = canonical_date(new_date)
        if target_date is None:
            raise RescheduleNotAllowedError(f"{INVALID_DATE}: {new_date!r}")
        if not is_clock_time(new_time):
            raise RescheduleNotAllowedError(f"{INVALID_TIME}: {new_time!r}")
        target_time = new_time.strip()
        start = create_booking_datetime(target_date, target_time)
        if start is None or start <= self._clock():
            raise RescheduleNotAllowedError(NOT_IN_FUTURE)

        with self.locks.hold([provider_day_key(booking.provider_name, target_date)]):
            snapshot = self.store.load()
            booking = self._find(snapshot, booking_id)
            if not booking.is_pending_reschedule:
                logger.info("Ignoring reschedule confirmation for %s: none pending", booking_id)
                return booking
            if booking.status != BookingStatus.UPCOMING:
                raise RescheduleNotAllowedError(ONLY_UPCOMING)

            conflict = self.availability.is_slot_available(
                booking.provider_name, target_date, target_time, booking.duration,
                exclude_booking_id=booking.id,
            )
            if conflict.has_conflict:
                raise RescheduleNotAllowedError(conflict.message or "Time slot is not available")

            now = self._clock().isoformat()
            previous = booking.reschedule_request or RescheduleRequest()
            updated = booking.model_copy(update={
                "booking_date": target_date,
                "booking_time": target_time,
                "end_time": calculate_end_time(target_time, booking.duration),
                "is_pending_reschedule": False,
                "reschedule_request": RescheduleRequest(
                    original_date=previous.original_date or booking.booking_date,
                    original_time=previous.original_time or booking.booking_time,
                    reschedule_count=previous.reschedule_count + 1,
                    last_rescheduled_at=now,
                ),
                "updated_at": now,
            })
            self._replace(snapshot, updated)

        logger.info("Booking %s moved to %s at %s (reschedule #%d)", booking_id,
                    updated.booking_date, updated.booking_time,
                    updated.reschedule_request.reschedule_count)
        self._notify(EventKind.RESCHEDULE_CONFIRMED, updated)
        return updated
