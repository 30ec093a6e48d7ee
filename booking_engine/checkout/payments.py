"""
Payment split for a validated cart.

The service charge is computed once on the whole cart (a rate with a
floor) and shared between items in proportion to each item's subtotal.
Each item then pays either in full or a deposit, independently of the
others, in one checkout transaction.

All currency amounts are rounded to 2 decimal places, halves up.
"""

import logging
from datetime import date
from typing import Optional, TypedDict

from booking_engine.checkout.validation import CheckoutValidationError
from booking_engine.config import settings
from booking_engine.schemas.booking_schema import AddOnItem, PaymentBreakdown, PaymentType
from booking_engine.schemas.cart_schema import (
    CartItem,
    CustomerInfo,
    FinalizedAppointment,
    ScheduleSelection,
)
from booking_engine.scheduling.provider_rules import get_full_provider_name
from booking_engine.scheduling.time_utils import canonical_date
from booking_engine.utils import round_money

logger = logging.getLogger(__name__)


class PaymentSummary(TypedDict):
    """Amounts due now and later for one total."""

    amount_due: float
    remaining_balance: float
    deposit_amount: float
    payment_type: PaymentType


class CheckoutTotals(TypedDict):
    """Cart-wide totals over finalized appointments."""

    subtotal: float
    service_charge: float
    deposit_items: int
    full_payment_items: int
    total_due: float
    remaining_balance: float


def calculate_service_charge(
    subtotal: float,
    rate: Optional[float] = None,
    minimum: Optional[float] = None,
) -> float:
    """Cart-level platform fee: ``rate`` of the subtotal, never below ``minimum``."""
    rate = settings.payments.service_charge_rate if rate is None else rate
    minimum = settings.payments.service_charge_minimum if minimum is None else minimum
    return max(subtotal * rate, minimum)


def calculate_per_item_service_charge(
    item_subtotal: float, cart_subtotal: float, total_service_charge: float
) -> float:
    """An item's share of the cart service charge, by its share of the subtotal."""
    if cart_subtotal == 0:
        return 0.0
    return round_money(total_service_charge * (item_subtotal / cart_subtotal))


def calculate_deposit(total_amount: float, percentage: Optional[float] = None) -> float:
    """Deposit due up front, ``percentage`` percent of the total."""
    percentage = settings.payments.deposit_percentage if percentage is None else percentage
    return round_money(total_amount * percentage / 100)


def calculate_remaining_balance(total_amount: float, percentage: Optional[float] = None) -> float:
    """Balance left after the deposit is paid."""
    return round_money(total_amount - calculate_deposit(total_amount, percentage))


def get_payment_summary(
    total_amount: float, is_deposit: bool, percentage: Optional[float] = None
) -> PaymentSummary:
    if is_deposit:
        deposit = calculate_deposit(total_amount, percentage)
        return {
            "amount_due": deposit,
            "remaining_balance": calculate_remaining_balance(total_amount, percentage),
            "deposit_amount": deposit,
            "payment_type": PaymentType.DEPOSIT,
        }
    return {
        "amount_due": total_amount,
        "remaining_balance": 0.0,
        "deposit_amount": 0.0,
        "payment_type": PaymentType.FULL,
    }


def cart_subtotal(items: list[CartItem]) -> float:
    """Sum of base prices and add-ons across the cart."""
    return sum(item.subtotal for item in items)


def build_payment_breakdown(
    item: CartItem,
    is_deposit: bool,
    cart_total: float,
    total_service_charge: float,
    rate: Optional[float] = None,
    deposit_percentage: Optional[float] = None,
) -> PaymentBreakdown:
    """Price one item given the cart subtotal and the cart-level service charge."""
    rate = settings.payments.service_charge_rate if rate is None else rate
    deposit_percentage = (
        settings.payments.deposit_percentage if deposit_percentage is None else deposit_percentage
    )

    add_ons_total = sum(addon.price for addon in item.add_ons)
    item_subtotal = item.subtotal
    item_charge = calculate_per_item_service_charge(item_subtotal, cart_total, total_service_charge)
    total = round_money(item_subtotal + item_charge)

    if is_deposit:
        deposit = calculate_deposit(total, deposit_percentage)
        payment_type = PaymentType.DEPOSIT
        amount_paid = deposit
        remaining = round_money(total - deposit)
    else:
        deposit = 0.0
        payment_type = PaymentType.FULL
        amount_paid = total
        remaining = 0.0

    return PaymentBreakdown(
        base_service_price=item.price,
        add_ons_total=add_ons_total,
        item_subtotal=item_subtotal,
        service_charge_rate=rate,
        proportional_service_charge=item_charge,
        total_with_service_charge=total,
        payment_type=payment_type,
        deposit_percentage=deposit_percentage / 100 if is_deposit else None,
        amount_paid=amount_paid,
        deposit_amount=deposit,
        remaining_balance=remaining,
        add_on_items=[AddOnItem(name=a.name, price=a.price) for a in item.add_ons],
    )


def build_payment_breakdowns(
    items: list[CartItem],
    selections: dict[str, ScheduleSelection],
    rate: Optional[float] = None,
    minimum: Optional[float] = None,
    deposit_percentage: Optional[float] = None,
) -> dict[str, PaymentBreakdown]:
    """Breakdown per cart item id; items without a selection pay in full."""
    cart_total = cart_subtotal(items)
    total_service_charge = calculate_service_charge(cart_total, rate, minimum)
    breakdowns = {}
    for item in items:
        selection = selections.get(item.id)
        breakdowns[item.id] = build_payment_breakdown(
            item,
            bool(selection and selection.is_deposit_only),
            cart_total,
            total_service_charge,
            rate=rate,
            deposit_percentage=deposit_percentage,
        )
    return breakdowns


def create_appointment_records(
    items: list[CartItem],
    selections: dict[str, ScheduleSelection],
    customer: CustomerInfo,
    rate: Optional[float] = None,
    minimum: Optional[float] = None,
    deposit_percentage: Optional[float] = None,
) -> list[FinalizedAppointment]:
    """
    Price every validated cart item and attach its scheduling fields.

    Call once per checkout attempt, after cart validation succeeded.

    Raises:
        CheckoutValidationError: if an item has no schedule selection.
    """
    missing = [f"Missing booking data for {i.service_name}" for i in items if i.id not in selections]
    if missing:
        raise CheckoutValidationError(missing)

    breakdowns = build_payment_breakdowns(items, selections, rate, minimum, deposit_percentage)
    logger.debug("Priced %d item(s), service charge %.2f", len(items),
                 sum(b.proportional_service_charge for b in breakdowns.values()))

    records = []
    for item in items:
        selection = selections[item.id]
        breakdown = breakdowns[item.id]
        records.append(FinalizedAppointment(
            cart_item_id=item.id,
            provider_name=get_full_provider_name(item.provider_name),
            service_name=item.service_name,
            date=canonical_date(selection.selected_date) or selection.selected_date.strip(),
            time=selection.selected_time.strip(),
            duration=item.duration,
            notes=selection.notes,
            customer_name=customer.name,
            customer_email=customer.email,
            customer_phone=customer.phone,
            payment_type=breakdown.payment_type,
            amount_paid=breakdown.amount_paid,
            deposit_amount=breakdown.deposit_amount,
            remaining_balance=breakdown.remaining_balance,
            service_charge=breakdown.proportional_service_charge,
            payment_breakdown=breakdown,
        ))
    return records


def calculate_checkout_total(records: list[FinalizedAppointment]) -> CheckoutTotals:
    """What the customer pays now across the whole checkout."""
    return {
        "subtotal": round_money(sum(r.payment_breakdown.item_subtotal for r in records)),
        "service_charge": round_money(sum(r.service_charge for r in records)),
        "deposit_items": sum(1 for r in records if r.payment_type == PaymentType.DEPOSIT),
        "full_payment_items": sum(1 for r in records if r.payment_type == PaymentType.FULL),
        "total_due": round_money(sum(r.amount_paid for r in records)),
        "remaining_balance": round_money(sum(r.remaining_balance for r in records)),
    }


def _display_date(value: str) -> str:
    try:
        parsed = date.fromisoformat(value.strip())
    except ValueError:
        return value
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def format_booking_summary(
    items: list[CartItem], selections: dict[str, ScheduleSelection]
) -> str:
    """Bullet list of what is being booked, for the confirmation screen."""
    lines = []
    for item in items:
        selection = selections.get(item.id)
        if selection is None:
            lines.append(f"• {item.service_name} - Not scheduled")
            continue
        lines.append(
            f"• {item.service_name} - {_display_date(selection.selected_date)} "
            f"at {selection.selected_time}"
        )
    return "\n".join(lines)
