"""Availability query and conflict-check results."""

from typing import Optional

from pydantic import BaseModel, Field


class BookedSlot(BaseModel):
    """Scheduling-relevant projection of an active booking."""
    time: str
    end_time: str = ""
    booking_id: str
    service_name: str = ""
    duration: str = "1 hour"


class TimeSlot(BaseModel):
    """A base-schedule slot marked booked or free."""
    time: str
    is_booked: bool = False
    booking_id: Optional[str] = None


class BookingConflict(BaseModel):
    """Outcome of a single-slot availability check."""
    has_conflict: bool
    conflicting_booking_id: Optional[str] = None
    message: Optional[str] = None


class CartConflict(BaseModel):
    """A cart item that cannot be booked, and why."""
    cart_item_id: str
    message: str
    conflicting_booking_id: Optional[str] = None
    conflicting_cart_item_ids: list[str] = Field(default_factory=list)


class CartValidationResult(BaseModel):
    """Aggregate result of validating every item in a checkout."""
    is_valid: bool
    conflicts: list[CartConflict] = Field(default_factory=list)
