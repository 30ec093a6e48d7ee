"""
Cart checkout: validate, price, persist, notify.

Flow for one checkout attempt:
    1. per-item detail validation (dates and times present and readable)
    2. lock every (provider, date) the cart touches
    3. compute the payment split and build confirmed bookings
    4. snapshot the store version, then run cart conflict validation
    5. append to the store against the snapshot version
    6. dispatch one confirmation per booking, fire-and-forget

Steps 2-5 form one critical section per provider/day inside this
process. The version check in step 5 catches writers outside it, such
as another process sharing the same JSON file. On a version mismatch
steps 4 and 5 run again, up to ``write_attempts`` times, so an
unrelated write costs a re-check and a real clash still fails.
Nothing is written unless every item passes.
"""

import uuid
from datetime import datetime
from typing import Callable, Optional

from booking_engine.checkout.payments import create_appointment_records
from booking_engine.checkout.validation import (
    CheckoutValidationError,
    build_pending_requests,
    validate_bookings,
)
from booking_engine.config import settings
from booking_engine.lifecycle.notifications import (
    BookingEvent,
    EventKind,
    LoggingNotificationDispatcher,
    NotificationDispatcher,
    notify_safely,
)
from booking_engine.lifecycle.status_machine import create_booking_datetime
from booking_engine.logging_context import get_checkout_logger, new_checkout_id, set_checkout_id
from booking_engine.schemas.availability_schema import CartConflict, CartValidationResult
from booking_engine.schemas.booking_schema import (
    BookingStatus,
    ConfirmedBooking,
    PaymentStatus,
    PaymentType,
)
from booking_engine.schemas.cart_schema import (
    CartItem,
    CustomerInfo,
    FinalizedAppointment,
    ScheduleSelection,
)
from booking_engine.scheduling.availability import AvailabilityService
from booking_engine.scheduling.booking_store import BookingStore, StoreVersionConflictError
from booking_engine.scheduling.cart_validator import CartValidator
from booking_engine.scheduling.slot_locks import ProviderDayLocks, provider_day_key
from booking_engine.scheduling.time_utils import calculate_end_time

logger = get_checkout_logger(__name__)

VALIDATION_UNAVAILABLE_MESSAGE = "Unable to validate bookings. Please try again."


class BookingConflictError(Exception):
    """Raised when any cart item clashes with a stored booking or another item."""

    def __init__(self, conflicts: list[CartConflict]) -> None:
        messages = "; ".join(c.message for c in conflicts)
        super().__init__(f"Booking conflict detected: {messages}")
        self.conflicts = conflicts


class CheckoutService:
    """
    Turns a validated cart into confirmed bookings in the store.

    Args:
        store: booking collection to validate against and append to.
        availability: resolver to use; built over ``store`` when omitted.
        dispatcher: receives booking_confirmed events.
        clock: returns "now" as a naive local datetime.
        locks: shared ProviderDayLocks when several services use one store.
        write_attempts: how many times to re-check and retry when another
            writer bumps the store version mid-checkout.
    """

    def __init__(
        self,
        store: BookingStore,
        availability: Optional[AvailabilityService] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        clock: Optional[Callable[[], datetime]] = None,
        locks: Optional[ProviderDayLocks] = None,
        write_attempts: Optional[int] = None,
    ) -> None:
        self.store = store
        self._clock = clock or datetime.now
        self.availability = availability or AvailabilityService(
            store, today=lambda: self._clock().date()
        )
        self.validator = CartValidator(self.availability)
        self.dispatcher = dispatcher or LoggingNotificationDispatcher()
        self.locks = locks or ProviderDayLocks()
        self.write_attempts = write_attempts or settings.store.write_attempts

    def validate_bookings_before_checkout(
        self, items: list[CartItem], selections: dict[str, ScheduleSelection]
    ) -> CartValidationResult:
        """Conflict-check the scheduled items; an internal error blocks checkout."""
        try:
            requests = build_pending_requests(items, selections)
            return self.validator.validate_cart_bookings(requests)
        except Exception:
            logger.exception("Cart validation failed unexpectedly")
            return CartValidationResult(
                is_valid=False,
                conflicts=[CartConflict(cart_item_id="unknown",
                                        message=VALIDATION_UNAVAILABLE_MESSAGE)],
            )

    def create_bookings_from_cart(
        self,
        items: list[CartItem],
        selections: dict[str, ScheduleSelection],
        customer: CustomerInfo,
    ) -> list[ConfirmedBooking]:
        """
        Confirm every item in the cart, or none of them.

        Raises:
            CheckoutValidationError: an item is missing or has a bad date/time.
            BookingConflictError: an item clashes with a booking or another item.
            BookingStoreError: the store could not be read or written, including
                StoreVersionConflictError when other writers kept changing the
                store through every write attempt.
        """
        set_checkout_id(new_checkout_id())
        if not items:
            raise CheckoutValidationError(["Your cart is empty"])

        valid, errors = validate_bookings(items, selections)
        if not valid:
            raise CheckoutValidationError(errors)

        requests = build_pending_requests(items, selections)
        keys = [provider_day_key(r.provider_name, r.date) for r in requests]
        logger.info("Checking out %d item(s) for %s", len(items), customer.name)

        with self.locks.hold(keys):
            records = create_appointment_records(items, selections, customer)
            bookings = self._build_bookings(items, records)
            self._append_validated(items, selections, bookings)

        logger.info("Confirmed %d booking(s)", len(bookings))
        for booking in bookings:
            notify_safely(self.dispatcher, BookingEvent(
                kind=EventKind.BOOKING_CONFIRMED,
                booking_id=booking.id,
                provider_name=booking.provider_name,
                service_name=booking.service_name,
                booking_date=booking.booking_date,
                booking_time=booking.booking_time,
                status=booking.status.value,
            ))
        return bookings

    def _append_validated(
        self,
        items: list[CartItem],
        selections: dict[str, ScheduleSelection],
        bookings: list[ConfirmedBooking],
    ) -> None:
        """Conflict-check and append under the held locks.

        A version mismatch means some other write landed in between.
        The check is re-run against the new store contents, so only a
        real clash fails the checkout.
        """
        for attempt in range(1, self.write_attempts + 1):
            snapshot_version = self.store.load().version

            result = self.validate_bookings_before_checkout(items, selections)
            if not result.is_valid:
                logger.info("Checkout blocked by %d conflict(s)", len(result.conflicts))
                raise BookingConflictError(result.conflicts)

            try:
                self.store.append(bookings, expected_version=snapshot_version)
                return
            except StoreVersionConflictError:
                if attempt == self.write_attempts:
                    raise
                logger.info("Store changed during checkout; re-checking (attempt %d of %d)",
                            attempt + 1, self.write_attempts)

    def _build_bookings(
        self, items: list[CartItem], records: list[FinalizedAppointment]
    ) -> list[ConfirmedBooking]:
        now = self._clock()
        timestamp = now.isoformat()
        items_by_id = {item.id: item for item in items}
        is_group = len(records) > 1
        group_id = f"group_{uuid.uuid4().hex[:12]}" if is_group else None

        bookings = []
        for record in records:
            item = items_by_id[record.cart_item_id]
            start = create_booking_datetime(record.date, record.time)
            status = (
                BookingStatus.COMPLETED
                if start is not None and start <= now
                else BookingStatus.UPCOMING
            )
            bookings.append(ConfirmedBooking(
                id=f"booking_{record.cart_item_id}_{uuid.uuid4().hex[:12]}",
                cart_item_id=record.cart_item_id,
                provider_name=record.provider_name,
                service_name=record.service_name,
                price=item.price,
                duration=record.duration,
                quantity=item.quantity,
                booking_date=record.date,
                booking_time=record.time,
                end_time=calculate_end_time(record.time, record.duration),
                status=status,
                customer_name=record.customer_name,
                customer_email=record.customer_email,
                customer_phone=record.customer_phone,
                payment_type=record.payment_type,
                amount_paid=record.amount_paid,
                deposit_amount=record.deposit_amount,
                remaining_balance=record.remaining_balance,
                service_charge=record.service_charge,
                payment_status=(
                    PaymentStatus.PAID_IN_FULL
                    if record.payment_type == PaymentType.FULL
                    else PaymentStatus.DEPOSIT_PAID
                ),
                payment_breakdown=record.payment_breakdown,
                payment_confirmed_at=timestamp,
                transaction_id=f"txn_{uuid.uuid4().hex[:16]}",
                group_booking_id=group_id,
                is_group_booking=is_group,
                group_booking_count=len(records) if is_group else None,
                notes=record.notes,
                add_ons=record.payment_breakdown.add_on_items,
                created_at=timestamp,
                updated_at=timestamp,
                confirmed_at=timestamp,
                booking_instructions=settings.scheduling.booking_instructions,
            ))
        return bookings
