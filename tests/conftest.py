"""Shared test fixtures and helpers."""

from datetime import datetime, timedelta
from typing import Optional

import pytest

from booking_engine.checkout.checkout_service import CheckoutService
from booking_engine.lifecycle.booking_manager import BookingManager
from booking_engine.lifecycle.notifications import RecordingNotificationDispatcher
from booking_engine.schemas.booking_schema import BookingStatus, ConfirmedBooking
from booking_engine.schemas.cart_schema import AddOn, CartItem, CustomerInfo, ScheduleSelection
from booking_engine.scheduling.availability import AvailabilityService
from booking_engine.scheduling.booking_store import InMemoryBookingStore

# Monday morning; the dates below are relative to it.
NOW = datetime(2026, 10, 19, 8, 0)
TODAY = "2026-10-19"
YESTERDAY = "2026-10-18"
WEDNESDAY = "2026-10-21"
SATURDAY = "2026-10-24"
SUNDAY = "2026-10-25"


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryBookingStore()


@pytest.fixture
def availability(store, clock):
    return AvailabilityService(store, today=lambda: clock().date(), default_duration=60)


@pytest.fixture
def dispatcher():
    return RecordingNotificationDispatcher()


@pytest.fixture
def checkout(store, availability, dispatcher, clock):
    return CheckoutService(store, availability=availability, dispatcher=dispatcher, clock=clock)


@pytest.fixture
def manager(store, availability, dispatcher, clock):
    return BookingManager(
        store, availability=availability, dispatcher=dispatcher, clock=clock, cooldown_hours=24
    )


@pytest.fixture
def customer():
    return CustomerInfo(name="Amara Okafor", email="amara@example.com", phone="07700 900123")


def make_booking(
    booking_id: str = "b1",
    provider_name: str = "Kiki's Nails",
    booking_date: str = WEDNESDAY,
    booking_time: str = "10:00 AM",
    duration: str = "1 hour",
    status: BookingStatus = BookingStatus.UPCOMING,
    service_name: str = "Gel Manicure",
    **kwargs,
) -> ConfirmedBooking:
    """Helper to create a ConfirmedBooking with sensible defaults."""
    return ConfirmedBooking(
        id=booking_id,
        provider_name=provider_name,
        service_name=service_name,
        booking_date=booking_date,
        booking_time=booking_time,
        duration=duration,
        status=status,
        **kwargs,
    )


def make_item(
    item_id: str = "item-1",
    provider_name: str = "KIKI",
    service_name: str = "Gel Manicure",
    price: float = 100.0,
    duration: str = "1 hour",
    add_ons: Optional[list[tuple[str, float]]] = None,
) -> CartItem:
    """Helper to create a CartItem; add-ons are (name, price) pairs."""
    return CartItem(
        id=item_id,
        provider_name=provider_name,
        service_name=service_name,
        price=price,
        duration=duration,
        add_ons=[AddOn(name=name, price=p) for name, p in add_ons or []],
    )


def make_selection(
    selected_date: str = WEDNESDAY,
    selected_time: str = "10:00 AM",
    is_deposit_only: bool = False,
    notes: str = "",
) -> ScheduleSelection:
    return ScheduleSelection(
        selected_date=selected_date,
        selected_time=selected_time,
        is_deposit_only=is_deposit_only,
        notes=notes,
    )
