"""Cart, checkout input, and finalized appointment models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from booking_engine.schemas.booking_schema import PaymentBreakdown, PaymentType


class AddOn(BaseModel):
    """Optional extra attached to a cart item."""
    id: Optional[int] = None
    name: str
    price: float = 0.0


class CartItem(BaseModel):
    """A service in the customer's cart, as supplied by the catalog."""

    model_config = ConfigDict(extra="ignore")

    id: str
    provider_name: str
    service_name: str
    service_description: str = ""
    price: float = 0.0
    duration: str = "1 hour"
    quantity: int = 1
    add_ons: list[AddOn] = Field(default_factory=list)

    @property
    def subtotal(self) -> float:
        """Base price plus all add-ons."""
        return self.price + sum(addon.price for addon in self.add_ons)


class ScheduleSelection(BaseModel):
    """The date, time, and payment mode a customer picked for one cart item."""
    selected_date: str = ""
    selected_time: str = ""
    notes: str = ""
    is_deposit_only: bool = False


class CustomerInfo(BaseModel):
    """Who is making the booking."""
    name: str
    email: str = ""
    phone: str = ""


class PendingBookingRequest(BaseModel):
    """One cart item's requested slot, validated before checkout."""
    cart_item_id: str
    provider_name: str
    date: str
    time: str
    duration: str = "1 hour"


class FinalizedAppointment(BaseModel):
    """Priced appointment record handed to persistence after validation."""

    cart_item_id: str
    provider_name: str
    service_name: str
    date: str
    time: str
    duration: str
    notes: str = ""
    customer_name: str
    customer_email: str = ""
    customer_phone: str = ""
    payment_type: PaymentType
    amount_paid: float
    deposit_amount: float
    remaining_balance: float
    service_charge: float
    payment_breakdown: PaymentBreakdown
