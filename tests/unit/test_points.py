"""Tests for rm_common.points: integer points arithmetic."""

from decimal import Decimal

import pytest

from src.rm_common.points import calculate_payout, format_points, parse_odds


class TestCalculatePayout:
    def test_exact_product(self) -> None:
        assert calculate_payout(100, Decimal("2.50")) == 250

    def test_floors_fractional_points(self) -> None:
        # 33 * 1.55 = 51.15
        assert calculate_payout(33, Decimal("1.55")) == 51

    def test_odds_of_one_returns_stake(self) -> None:
        assert calculate_payout(10, Decimal("1.00")) == 10

    def test_no_float_drift(self) -> None:
        # 0.1-style binary float error would give 114.99999...
        assert calculate_payout(100, Decimal("1.15")) == 115


class TestParseOdds:
    def test_accepts_strings_and_numbers(self) -> None:
        assert parse_odds("2.5") == Decimal("2.50")
        assert parse_odds(3) == Decimal("3.00")

    def test_truncates_to_two_digits(self) -> None:
        assert parse_odds("1.999") == Decimal("1.99")

    @pytest.mark.parametrize("value", ["abc", "NaN", "Infinity", None])
    def test_rejects_unusable(self, value: object) -> None:
        with pytest.raises(ValueError):
            parse_odds(value)

    @pytest.mark.parametrize("value", [Decimal("1e30"), "1e40", 10**30])
    def test_too_many_digits_is_value_error(self, value: object) -> None:
        with pytest.raises(ValueError, match="out of range"):
            parse_odds(value)


class TestFormatPoints:
    def test_german_thousands_separator(self) -> None:
        assert format_points(1150) == "1.150"
        assert format_points(1_000_000) == "1.000.000"

    def test_small_and_negative(self) -> None:
        assert format_points(900) == "900"
        assert format_points(-25000) == "-25.000"
