"""
Cart-level double-booking detection.

Checks every pending request in one checkout against the booking store
and against the other requests in the same cart. Purely advisory: no
writes and no reservation. Callers that persist afterwards must hold
the checkout lock or rely on the store's version check to catch a
concurrent checkout for the same slot.
"""

import logging

from booking_engine.schemas.availability_schema import CartConflict, CartValidationResult
from booking_engine.schemas.cart_schema import PendingBookingRequest
from booking_engine.scheduling.availability import AvailabilityService
from booking_engine.scheduling.provider_rules import same_provider
from booking_engine.scheduling.time_utils import TimeInterval

logger = logging.getLogger(__name__)

NO_LONGER_AVAILABLE_MESSAGE = "Time slot is no longer available"


class CartValidator:
    """Validates a batch of pending bookings from a single checkout."""

    def __init__(self, availability: AvailabilityService) -> None:
        self.availability = availability

    def _interval(self, request: PendingBookingRequest) -> TimeInterval:
        return TimeInterval.from_strings(
            request.time, request.duration, self.availability.default_duration
        )

    def _same_cart_conflicts(
        self, request: PendingBookingRequest, requests: list[PendingBookingRequest]
    ) -> list[PendingBookingRequest]:
        interval = self._interval(request)
        return [
            other
            for other in requests
            if other.cart_item_id != request.cart_item_id
            and other.date == request.date
            and same_provider(other.provider_name, request.provider_name)
            and interval.overlaps(self._interval(other))
        ]

    def validate_cart_bookings(
        self, requests: list[PendingBookingRequest]
    ) -> CartValidationResult:
        """
        Validate every request in list order; never stops at the first conflict.

        A request already clashing with a stored booking is reported once
        for that clash and not re-checked against the cart.
        """
        conflicts: list[CartConflict] = []

        for request in requests:
            existing = self.availability.is_slot_available(
                request.provider_name, request.date, request.time, request.duration
            )
            if existing.has_conflict:
                conflicts.append(CartConflict(
                    cart_item_id=request.cart_item_id,
                    message=existing.message or NO_LONGER_AVAILABLE_MESSAGE,
                    conflicting_booking_id=existing.conflicting_booking_id,
                ))
                continue

            clashing = self._same_cart_conflicts(request, requests)
            if clashing:
                others = ", ".join(f"{o.time} ({o.cart_item_id})" for o in clashing)
                conflicts.append(CartConflict(
                    cart_item_id=request.cart_item_id,
                    message=(
                        "This time slot conflicts with another service in your cart "
                        f"at {others}"
                    ),
                    conflicting_cart_item_ids=[o.cart_item_id for o in clashing],
                ))

        if conflicts:
            logger.info("Cart validation found %d conflict(s) across %d item(s)",
                        len(conflicts), len(requests))
        return CartValidationResult(is_valid=not conflicts, conflicts=conflicts)
