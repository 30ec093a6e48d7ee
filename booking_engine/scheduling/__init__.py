from booking_engine.scheduling.availability import AvailabilityService
from booking_engine.scheduling.booking_store import (
    BookingStore,
    BookingStoreError,
    InMemoryBookingStore,
    JsonFileBookingStore,
    StoreVersionConflictError,
)
from booking_engine.scheduling.cart_validator import CartValidator
from booking_engine.scheduling.provider_rules import (
    get_full_provider_name,
    get_provider_day_schedule,
    resolve_provider,
)
from booking_engine.scheduling.slot_locks import ProviderDayLocks, provider_day_key
from booking_engine.scheduling.time_utils import (
    intervals_overlap,
    parse_duration_to_minutes,
    parse_time_to_minutes,
)

__all__ = [
    "AvailabilityService",
    "BookingStore",
    "BookingStoreError",
    "CartValidator",
    "InMemoryBookingStore",
    "JsonFileBookingStore",
    "ProviderDayLocks",
    "StoreVersionConflictError",
    "get_full_provider_name",
    "get_provider_day_schedule",
    "intervals_overlap",
    "parse_duration_to_minutes",
    "parse_time_to_minutes",
    "provider_day_key",
    "resolve_provider",
]
