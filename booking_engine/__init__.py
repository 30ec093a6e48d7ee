"""Availability and booking engine for a beauty-services marketplace."""

from booking_engine.checkout import (
    BookingConflictError,
    CheckoutService,
    CheckoutValidationError,
)
from booking_engine.lifecycle import (
    BookingManager,
    BookingNotFoundError,
    InvalidTransitionError,
    RescheduleNotAllowedError,
)
from booking_engine.scheduling import (
    AvailabilityService,
    BookingStore,
    BookingStoreError,
    CartValidator,
    InMemoryBookingStore,
    JsonFileBookingStore,
    StoreVersionConflictError,
)

__version__ = "0.1.0"

__all__ = [
    "AvailabilityService",
    "BookingConflictError",
    "BookingManager",
    "BookingNotFoundError",
    "BookingStore",
    "BookingStoreError",
    "CartValidator",
    "CheckoutService",
    "CheckoutValidationError",
    "InMemoryBookingStore",
    "InvalidTransitionError",
    "JsonFileBookingStore",
    "RescheduleNotAllowedError",
    "StoreVersionConflictError",
]
