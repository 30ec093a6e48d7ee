"""Tests for time and duration arithmetic."""

import pytest

from booking_engine.scheduling.time_utils import (
    TimeInterval,
    calculate_end_time,
    canonical_date,
    format_minutes,
    intervals_overlap,
    is_clock_time,
    parse_duration_to_minutes,
    parse_time_to_minutes,
)


class TestParseTime:
    @pytest.mark.parametrize("text,expected", [
        ("9:00 AM", 540),
        ("12:00 AM", 0),
        ("12:00 PM", 720),
        ("12:30 pm", 750),
        ("1:15 PM", 795),
        ("14:30", 870),
        ("00:00", 0),
        ("  6:00 PM  ", 1080),
    ])
    def test_valid_times(self, text, expected):
        assert parse_time_to_minutes(text) == expected

    @pytest.mark.parametrize("text", ["", None, "noon", "9", "9:00:00", "ab:cd"])
    def test_malformed_returns_zero(self, text):
        assert parse_time_to_minutes(text) == 0

    def test_out_of_day_returns_zero(self):
        assert parse_time_to_minutes("25:00") == 0
        assert parse_time_to_minutes("10:75") == 0


class TestParseDuration:
    @pytest.mark.parametrize("text,expected", [
        ("1 hour", 60),
        ("2 hours", 120),
        ("1.5 hrs", 90),
        ("45 mins", 45),
        ("30 minutes", 30),
        ("2h", 120),
        ("90m", 90),
        ("1 HOUR", 60),
    ])
    def test_valid_durations(self, text, expected):
        assert parse_duration_to_minutes(text) == expected

    def test_first_amount_only(self):
        assert parse_duration_to_minutes("1 hour 30 minutes") == 60

    def test_hours_round_half_up(self):
        # 0.0125 h = 0.75 min
        assert parse_duration_to_minutes("0.0125 hours") == 1

    def test_unreadable_uses_default(self):
        assert parse_duration_to_minutes("all afternoon") == 60
        assert parse_duration_to_minutes(None) == 60
        assert parse_duration_to_minutes("", default=45) == 45


class TestOverlap:
    def test_overlapping(self):
        assert intervals_overlap(600, 660, 630, 690)

    def test_touching_endpoints_do_not_conflict(self):
        assert not intervals_overlap(600, 660, 660, 720)
        assert not intervals_overlap(660, 720, 600, 660)

    def test_contained(self):
        assert intervals_overlap(600, 720, 630, 660)

    def test_symmetric(self):
        assert intervals_overlap(630, 690, 600, 660) == intervals_overlap(600, 660, 630, 690)

    def test_interval_from_strings(self):
        first = TimeInterval.from_strings("10:00 AM", "1 hour")
        second = TimeInterval.from_strings("10:30 AM", "30 mins")
        assert first == TimeInterval(600, 660)
        assert first.overlaps(second)


class TestEndTime:
    def test_format_minutes(self):
        assert format_minutes(0) == "12:00 AM"
        assert format_minutes(750) == "12:30 PM"
        assert format_minutes(1080) == "6:00 PM"

    def test_end_time_adds_duration(self):
        assert calculate_end_time("10:00 AM", "1.5 hours") == "11:30 AM"
        assert calculate_end_time("11:30 AM", "45 mins") == "12:15 PM"

    def test_end_time_wraps_midnight(self):
        assert calculate_end_time("11:00 PM", "2 hours") == "1:00 AM"

    def test_unreadable_duration_keeps_start(self):
        assert calculate_end_time("10:00 AM", "a while") == "10:00 AM"


class TestCanonicalDate:
    @pytest.mark.parametrize("text,expected", [
        ("2026-11-04", "2026-11-04"),
        ("2026-11-4", "2026-11-04"),
        (" 2026-1-9 ", "2026-01-09"),
    ])
    def test_pads_readable_dates(self, text, expected):
        assert canonical_date(text) == expected

    @pytest.mark.parametrize("text", ["", None, "04/11/2026", "2026-02-30", "tomorrow"])
    def test_unreadable_dates(self, text):
        assert canonical_date(text) is None


class TestIsClockTime:
    @pytest.mark.parametrize("text", ["9:00 AM", "9:00AM", "12:59 pm", "00:00", "23:59", " 14:30 "])
    def test_valid(self, text):
        assert is_clock_time(text)

    @pytest.mark.parametrize("text", ["", None, "13:00 PM", "0:15 AM", "24:00", "9:75", "ten"])
    def test_invalid(self, text):
        assert not is_clock_time(text)
