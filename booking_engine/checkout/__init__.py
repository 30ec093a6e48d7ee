from booking_engine.checkout.checkout_service import BookingConflictError, CheckoutService
from booking_engine.checkout.payments import (
    build_payment_breakdowns,
    calculate_checkout_total,
    calculate_deposit,
    calculate_per_item_service_charge,
    calculate_service_charge,
    create_appointment_records,
    format_booking_summary,
    get_payment_summary,
)
from booking_engine.checkout.validation import (
    CheckoutValidationError,
    build_pending_requests,
    validate_bookings,
)

__all__ = [
    "BookingConflictError",
    "CheckoutService",
    "CheckoutValidationError",
    "build_payment_breakdowns",
    "build_pending_requests",
    "calculate_checkout_total",
    "calculate_deposit",
    "calculate_per_item_service_charge",
    "calculate_service_charge",
    "create_appointment_records",
    "format_booking_summary",
    "get_payment_summary",
    "validate_bookings",
]
