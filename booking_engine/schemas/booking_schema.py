"""Confirmed booking records and their payment breakdown."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class BookingStatus(str, Enum):
    UPCOMING = "upcoming"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


# Bookings in these states never block a slot.
INACTIVE_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.NO_SHOW})

# Stored records are written snake_case but may also arrive camelCase
# ("providerName", "bookingDate") from the web app's booking file.
STORE_RECORD_CONFIG = ConfigDict(extra="ignore", alias_generator=to_camel, populate_by_name=True)


class PaymentType(str, Enum):
    FULL = "full"
    DEPOSIT = "deposit"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    DEPOSIT_PAID = "deposit_paid"
    PAID_IN_FULL = "paid_in_full"
    REFUND_PENDING = "refund_pending"
    REFUNDED = "refunded"
    FAILED = "failed"


class AddOnItem(BaseModel):
    """Itemised add-on line for receipts."""

    model_config = STORE_RECORD_CONFIG

    name: str
    price: float


class PaymentBreakdown(BaseModel):
    """Per-item payment split attached to a finalized booking.

    ``amount_paid + remaining_balance`` equals ``total_with_service_charge``
    to the penny, and ``deposit_amount`` is zero for full payments.
    """

    model_config = STORE_RECORD_CONFIG

    base_service_price: float = 0.0
    add_ons_total: float = 0.0
    item_subtotal: float
    service_charge_rate: float
    proportional_service_charge: float
    total_with_service_charge: float
    payment_type: PaymentType
    deposit_percentage: Optional[float] = None
    amount_paid: float
    deposit_amount: float = 0.0
    remaining_balance: float = 0.0
    add_on_items: list[AddOnItem] = Field(default_factory=list)


class AvailableDate(BaseModel):
    """A date a provider offered during a reschedule, with its open times."""

    model_config = STORE_RECORD_CONFIG

    date: str
    times: list[str] = Field(default_factory=list)


class RescheduleRequest(BaseModel):
    """Reschedule bookkeeping carried on a booking."""

    model_config = STORE_RECORD_CONFIG

    original_date: Optional[str] = None
    original_time: Optional[str] = None
    requested_dates: Optional[list[str]] = None
    requested_at: Optional[str] = None
    provider_available_dates: Optional[list[AvailableDate]] = None
    provider_responded_at: Optional[str] = None
    reschedule_count: int = 0
    last_rescheduled_at: Optional[str] = None


class ConfirmedBooking(BaseModel):
    """A booking as persisted in the booking store.

    The availability engine only reads these; lifecycle operations are
    the only writers after checkout.
    """

    model_config = STORE_RECORD_CONFIG

    id: str
    cart_item_id: str = ""
    provider_name: str
    service_name: str
    price: float = 0.0
    duration: str = "1 hour"
    quantity: int = 1

    booking_date: str
    booking_time: str
    end_time: str = ""
    status: BookingStatus = BookingStatus.UPCOMING

    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""

    payment_type: PaymentType = PaymentType.FULL
    amount_paid: float = 0.0
    deposit_amount: float = 0.0
    remaining_balance: float = 0.0
    service_charge: float = 0.0
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_breakdown: Optional[PaymentBreakdown] = None
    payment_confirmed_at: Optional[str] = None
    transaction_id: Optional[str] = None

    group_booking_id: Optional[str] = None
    is_group_booking: bool = False
    group_booking_count: Optional[int] = None

    is_pending_reschedule: bool = False
    reschedule_request: Optional[RescheduleRequest] = None

    notes: str = ""
    add_ons: list[AddOnItem] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    confirmed_at: Optional[str] = None
    booking_instructions: Optional[str] = None

    @property
    def is_active(self) -> bool:
        """True when the booking still occupies its time slot."""
        return self.status not in INACTIVE_STATUSES
