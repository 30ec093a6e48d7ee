from booking_engine.schemas.availability_schema import (
    BookedSlot,
    BookingConflict,
    CartConflict,
    CartValidationResult,
    TimeSlot,
)
from booking_engine.schemas.booking_schema import (
    AddOnItem,
    AvailableDate,
    BookingStatus,
    ConfirmedBooking,
    PaymentBreakdown,
    PaymentStatus,
    PaymentType,
    RescheduleRequest,
)
from booking_engine.schemas.cart_schema import (
    AddOn,
    CartItem,
    CustomerInfo,
    FinalizedAppointment,
    PendingBookingRequest,
    ScheduleSelection,
)

__all__ = [
    "AddOn",
    "AddOnItem",
    "AvailableDate",
    "BookedSlot",
    "BookingConflict",
    "BookingStatus",
    "CartConflict",
    "CartItem",
    "CartValidationResult",
    "ConfirmedBooking",
    "CustomerInfo",
    "FinalizedAppointment",
    "PaymentBreakdown",
    "PaymentStatus",
    "PaymentType",
    "PendingBookingRequest",
    "RescheduleRequest",
    "ScheduleSelection",
    "TimeSlot",
]
