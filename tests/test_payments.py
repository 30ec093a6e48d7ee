"""Tests for the service charge and deposit split."""

import pytest

from booking_engine.checkout.payments import (
    build_payment_breakdowns,
    calculate_checkout_total,
    calculate_deposit,
    calculate_per_item_service_charge,
    calculate_remaining_balance,
    calculate_service_charge,
    create_appointment_records,
    format_booking_summary,
    get_payment_summary,
)
from booking_engine.checkout.validation import CheckoutValidationError
from booking_engine.schemas.booking_schema import PaymentType
from tests.conftest import WEDNESDAY, make_item, make_selection

RATE = 0.05
MINIMUM = 2.00
DEPOSIT = 20


class TestServiceCharge:
    def test_rate_applies_above_minimum(self):
        assert calculate_service_charge(150.0, RATE, MINIMUM) == pytest.approx(7.50)

    def test_minimum_applies(self):
        assert calculate_service_charge(20.0, RATE, MINIMUM) == pytest.approx(2.00)

    def test_empty_cart_still_has_minimum(self):
        assert calculate_service_charge(0.0, RATE, MINIMUM) == pytest.approx(2.00)

    def test_proportional_split(self):
        assert calculate_per_item_service_charge(100.0, 150.0, 7.50) == 5.00
        assert calculate_per_item_service_charge(50.0, 150.0, 7.50) == 2.50

    def test_zero_cart_gets_no_share(self):
        assert calculate_per_item_service_charge(0.0, 0.0, 2.00) == 0.0

    def test_share_rounds_half_up(self):
        # 2.00 split three ways is 0.666..., rounds to 0.67
        assert calculate_per_item_service_charge(10.0, 30.0, 2.00) == 0.67


class TestDeposit:
    def test_deposit_and_remaining(self):
        assert calculate_deposit(105.0, DEPOSIT) == 21.00
        assert calculate_remaining_balance(105.0, DEPOSIT) == 84.00

    def test_payment_summary_deposit(self):
        summary = get_payment_summary(105.0, True, DEPOSIT)
        assert summary["amount_due"] == 21.00
        assert summary["remaining_balance"] == 84.00
        assert summary["payment_type"] == PaymentType.DEPOSIT

    def test_payment_summary_full(self):
        summary = get_payment_summary(105.0, False, DEPOSIT)
        assert summary["amount_due"] == 105.0
        assert summary["remaining_balance"] == 0.0
        assert summary["deposit_amount"] == 0.0
        assert summary["payment_type"] == PaymentType.FULL


class TestBreakdowns:
    def test_two_item_cart(self):
        items = [make_item("A", price=100.0), make_item("B", price=50.0)]
        selections = {"A": make_selection(is_deposit_only=True), "B": make_selection()}
        breakdowns = build_payment_breakdowns(items, selections, RATE, MINIMUM, DEPOSIT)

        a, b = breakdowns["A"], breakdowns["B"]
        assert a.proportional_service_charge == 5.00
        assert b.proportional_service_charge == 2.50
        assert a.total_with_service_charge == 105.00
        assert a.payment_type == PaymentType.DEPOSIT
        assert a.amount_paid == 21.00
        assert a.remaining_balance == 84.00
        assert a.deposit_percentage == pytest.approx(0.2)
        assert b.payment_type == PaymentType.FULL
        assert b.amount_paid == 52.50
        assert b.deposit_amount == 0.0
        assert b.deposit_percentage is None

    def test_add_ons_count_towards_subtotal(self):
        items = [make_item("A", price=40.0, add_ons=[("Nail art", 10.0)])]
        breakdown = build_payment_breakdowns(items, {"A": make_selection()}, RATE, MINIMUM, DEPOSIT)["A"]
        assert breakdown.add_ons_total == 10.0
        assert breakdown.item_subtotal == 50.0
        assert breakdown.proportional_service_charge == 2.50
        assert breakdown.add_on_items[0].name == "Nail art"

    def test_paid_plus_remaining_equals_total(self):
        items = [make_item("A", price=33.33), make_item("B", price=66.67), make_item("C", price=12.5)]
        selections = {i.id: make_selection(is_deposit_only=True) for i in items}
        for breakdown in build_payment_breakdowns(items, selections, RATE, MINIMUM, DEPOSIT).values():
            assert breakdown.amount_paid + breakdown.remaining_balance == pytest.approx(
                breakdown.total_with_service_charge, abs=1e-9
            )


class TestAppointmentRecords:
    def test_records_carry_schedule_and_customer(self, customer):
        items = [make_item("A", provider_name="KIKI", price=100.0)]
        records = create_appointment_records(
            items, {"A": make_selection(notes="short nails")}, customer, RATE, MINIMUM, DEPOSIT
        )
        record = records[0]
        assert record.provider_name == "Kiki's Nails"
        assert record.date == WEDNESDAY
        assert record.time == "10:00 AM"
        assert record.notes == "short nails"
        assert record.customer_email == "amara@example.com"
        assert record.service_charge == 5.00
        assert record.amount_paid == 105.00

    def test_missing_selection_raises(self, customer):
        items = [make_item("A"), make_item("B", service_name="Pedicure")]
        with pytest.raises(CheckoutValidationError) as exc_info:
            create_appointment_records(items, {"A": make_selection()}, customer)
        assert exc_info.value.errors == ["Missing booking data for Pedicure"]

    def test_checkout_total(self, customer):
        items = [make_item("A", price=100.0), make_item("B", price=50.0)]
        selections = {"A": make_selection(is_deposit_only=True), "B": make_selection()}
        records = create_appointment_records(items, selections, customer, RATE, MINIMUM, DEPOSIT)
        totals = calculate_checkout_total(records)
        assert totals["subtotal"] == 150.0
        assert totals["service_charge"] == 7.50
        assert totals["deposit_items"] == 1
        assert totals["full_payment_items"] == 1
        assert totals["total_due"] == 73.50
        assert totals["remaining_balance"] == 84.00


class TestBookingSummary:
    def test_summary_lines(self):
        items = [make_item("A"), make_item("B", service_name="Pedicure")]
        summary = format_booking_summary(items, {"A": make_selection(WEDNESDAY, "2:00 PM")})
        assert summary.splitlines() == [
            "• Gel Manicure - Oct 21, 2026 at 2:00 PM",
            "• Pedicure - Not scheduled",
        ]
