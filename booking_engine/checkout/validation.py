"""
Scheduling-detail validation for cart items before checkout.

Every item needs a readable date and a time in either 24-hour
("14:30") or 12-hour ("2:30 PM") form. Errors are collected for all
items so the customer sees every problem at once; checkout must stop
if any are present.
"""

import logging

from booking_engine.schemas.cart_schema import CartItem, PendingBookingRequest, ScheduleSelection
from booking_engine.scheduling.provider_rules import get_full_provider_name
from booking_engine.scheduling.time_utils import canonical_date, is_clock_time

logger = logging.getLogger(__name__)


class CheckoutValidationError(Exception):
    """Raised when cart items are missing or have unreadable scheduling details."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Validation failed: " + ", ".join(errors))
        self.errors = errors


def _validate_date(value: str) -> bool:
    """Validate date is a real calendar day in YYYY-MM-DD format."""
    return canonical_date(value) is not None


def _validate_time(value: str) -> bool:
    """Validate time is H:MM / HH:MM within a day, optionally followed by AM or PM."""
    return is_clock_time(value)


def validate_bookings(
    items: list[CartItem], selections: dict[str, ScheduleSelection]
) -> tuple[bool, list[str]]:
    """
    Check every item has a usable date and time.

    Returns:
        (valid, errors) where errors are human-readable, one per problem.
    """
    errors: list[str] = []
    for item in items:
        selection = selections.get(item.id)
        selected_date = selection.selected_date if selection else ""
        selected_time = selection.selected_time if selection else ""

        if not selected_date:
            errors.append(f"{item.service_name} needs a date")
        if not selected_time:
            errors.append(f"{item.service_name} needs a time")
        if selected_date and not _validate_date(selected_date):
            errors.append(f"Invalid date for {item.service_name}")
        if selected_time and not _validate_time(selected_time):
            errors.append(f"Invalid time format for {item.service_name}")

    if errors:
        logger.info("Checkout detail validation failed: %s", "; ".join(errors))
    return not errors, errors


def build_pending_requests(
    items: list[CartItem], selections: dict[str, ScheduleSelection]
) -> list[PendingBookingRequest]:
    """Turn scheduled cart items into conflict-check requests.

    Items without both a date and a time are left out; detail
    validation reports those separately.
    """
    requests = []
    for item in items:
        selection = selections.get(item.id)
        if not selection or not selection.selected_date or not selection.selected_time:
            continue
        requests.append(PendingBookingRequest(
            cart_item_id=item.id,
            provider_name=get_full_provider_name(item.provider_name),
            date=canonical_date(selection.selected_date) or selection.selected_date.strip(),
            time=selection.selected_time.strip(),
            duration=item.duration,
        ))
    return requests
