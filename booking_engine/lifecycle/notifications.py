"""
Booking event notifications.

Delivery is somebody else's job: the engine hands a BookingEvent to a
dispatcher and moves on. A failing dispatcher is logged and ignored so
a notification problem never undoes a booking, cancellation, or
reschedule that has already been written.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    BOOKING_CONFIRMED = "booking_confirmed"
    BOOKING_CANCELLED = "booking_cancelled"
    RESCHEDULE_REQUESTED = "reschedule_requested"
    RESCHEDULE_PROVIDER_RESPONSE = "reschedule_provider_response"
    RESCHEDULE_CONFIRMED = "reschedule_confirmed"


@dataclass(frozen=True)
class BookingEvent:
    """Something a customer or provider should hear about."""

    kind: EventKind
    booking_id: str
    provider_name: str
    service_name: str
    booking_date: str
    booking_time: str
    status: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationDispatcher(Protocol):
    def dispatch(self, event: BookingEvent) -> None: ...


class LoggingNotificationDispatcher:
    """Default dispatcher: writes each event to the log."""

    def dispatch(self, event: BookingEvent) -> None:
        logger.info(
            "Notify %s: %s with %s on %s at %s (booking %s)",
            event.kind.value, event.service_name, event.provider_name,
            event.booking_date, event.booking_time, event.booking_id,
        )


class RecordingNotificationDispatcher:
    """Keeps every event in memory, for callers that poll or for tests."""

    def __init__(self) -> None:
        self.events: list[BookingEvent] = []

    def dispatch(self, event: BookingEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[EventKind]:
        return [e.kind for e in self.events]


def notify_safely(dispatcher: NotificationDispatcher, event: BookingEvent) -> bool:
    """Dispatch without letting a delivery failure propagate. Returns success."""
    try:
        dispatcher.dispatch(event)
        return True
    except Exception:
        logger.exception("Notification %s for booking %s failed",
                         event.kind.value, event.booking_id)
        return False
