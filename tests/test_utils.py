"""Tests for shared utility functions."""

from booking_engine.utils import normalize_name, round_half_up, round_money


class TestRoundMoney:
    def test_halves_round_up(self):
        assert round_money(2.345) == 2.35
        assert round_money(0.125) == 0.13

    def test_float_noise_removed(self):
        assert round_money(7.500000000000001) == 7.5

    def test_whole_amounts(self):
        assert round_money(21) == 21.0


class TestRoundHalfUp:
    def test_half_goes_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3

    def test_below_half_goes_down(self):
        assert round_half_up(89.4) == 89


class TestNormalizeName:
    def test_upper_cases(self):
        assert normalize_name("Kiki's Nails") == "KIKI'S NAILS"

    def test_collapses_whitespace(self):
        assert normalize_name("  Hair  by   jennifer ") == "HAIR BY JENNIFER"
