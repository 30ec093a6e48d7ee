from booking_engine.lifecycle.booking_manager import (
    BookingManager,
    BookingNotFoundError,
    RescheduleEligibility,
    RescheduleNotAllowedError,
)
from booking_engine.lifecycle.notifications import (
    BookingEvent,
    EventKind,
    LoggingNotificationDispatcher,
    NotificationDispatcher,
    RecordingNotificationDispatcher,
    notify_safely,
)
from booking_engine.lifecycle.status_machine import (
    BookingStatusMachine,
    InvalidTransitionError,
    StatusTrigger,
    determine_booking_status,
)

__all__ = [
    "BookingEvent",
    "BookingManager",
    "BookingNotFoundError",
    "BookingStatusMachine",
    "EventKind",
    "InvalidTransitionError",
    "LoggingNotificationDispatcher",
    "NotificationDispatcher",
    "RecordingNotificationDispatcher",
    "RescheduleEligibility",
    "RescheduleNotAllowedError",
    "StatusTrigger",
    "determine_booking_status",
    "notify_safely",
]
