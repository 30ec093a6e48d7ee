"""Tests for per-item scheduling detail validation."""

import pytest

from booking_engine.checkout.validation import build_pending_requests, validate_bookings
from booking_engine.schemas.cart_schema import ScheduleSelection
from tests.conftest import WEDNESDAY, make_item, make_selection


class TestValidateBookings:
    def test_complete_details_pass(self):
        valid, errors = validate_bookings([make_item("A")], {"A": make_selection()})
        assert valid
        assert errors == []

    def test_missing_selection_needs_date_and_time(self):
        valid, errors = validate_bookings([make_item("A")], {})
        assert not valid
        assert errors == ["Gel Manicure needs a date", "Gel Manicure needs a time"]

    def test_invalid_date(self):
        _, errors = validate_bookings([make_item("A")], {"A": make_selection("21/10/2026")})
        assert errors == ["Invalid date for Gel Manicure"]

    def test_invalid_time(self):
        _, errors = validate_bookings([make_item("A")], {"A": make_selection(WEDNESDAY, "ten")})
        assert errors == ["Invalid time format for Gel Manicure"]

    def test_accepted_time_formats(self):
        for time in ("9:00 AM", "9:00AM", "09:30", "14:30", "12:00 pm"):
            valid, _ = validate_bookings([make_item("A")], {"A": make_selection(WEDNESDAY, time)})
            assert valid, time

    @pytest.mark.parametrize("time", ["13:00 PM", "0:30 AM", "25:00", "24:00", "9:75", "9:60 AM"])
    def test_out_of_range_times_rejected(self, time):
        valid, errors = validate_bookings([make_item("A")], {"A": make_selection(WEDNESDAY, time)})
        assert not valid
        assert errors == ["Invalid time format for Gel Manicure"]

    @pytest.mark.parametrize("value", ["2026-02-30", "2026-13-01"])
    def test_impossible_dates_rejected(self, value):
        _, errors = validate_bookings([make_item("A")], {"A": make_selection(value)})
        assert errors == ["Invalid date for Gel Manicure"]

    def test_errors_collected_across_items(self):
        items = [make_item("A"), make_item("B", service_name="Pedicure")]
        selections = {
            "A": ScheduleSelection(selected_time="10:00 AM"),
            "B": make_selection(WEDNESDAY, "25 o'clock"),
        }
        _, errors = validate_bookings(items, selections)
        assert errors == ["Gel Manicure needs a date", "Invalid time format for Pedicure"]


class TestPendingRequests:
    def test_uses_full_provider_name(self):
        requests = build_pending_requests([make_item("A", provider_name="KIKI")], {"A": make_selection()})
        assert requests[0].provider_name == "Kiki's Nails"
        assert requests[0].date == WEDNESDAY
        assert requests[0].duration == "1 hour"

    def test_unscheduled_items_skipped(self):
        items = [make_item("A"), make_item("B")]
        requests = build_pending_requests(items, {"A": make_selection()})
        assert [r.cart_item_id for r in requests] == ["A"]

    def test_dates_are_zero_padded(self):
        requests = build_pending_requests([make_item("A")], {"A": make_selection(" 2026-11-4 ")})
        assert requests[0].date == "2026-11-04"
