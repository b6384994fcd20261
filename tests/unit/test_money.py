"""Tests for money coercion and rounding."""

from decimal import Decimal

import pytest

from ledger_kernel.db.types import BALANCE_TOLERANCE, round_money, to_decimal


class TestRoundMoney:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("1.005", "1.01"),
            ("1.004", "1.00"),
            ("-1.005", "-1.01"),
            ("2.675", "2.68"),
            ("100", "100.00"),
        ],
    )
    def test_half_up(self, value, expected):
        assert round_money(Decimal(value)) == Decimal(expected)

    def test_result_has_two_places(self):
        assert round_money(Decimal("3")).as_tuple().exponent == -2

    def test_tolerance(self):
        assert BALANCE_TOLERANCE == Decimal("0.01")


class TestToDecimal:
    def test_none_is_zero(self):
        assert to_decimal(None) == Decimal("0")

    def test_string_and_int(self):
        assert to_decimal("12.50") == Decimal("12.50")
        assert to_decimal(7) == Decimal("7")

    def test_decimal_passthrough(self):
        value = Decimal("1.23")
        assert to_decimal(value) is value

    def test_float_rejected(self):
        with pytest.raises(TypeError):
            to_decimal(0.1)
