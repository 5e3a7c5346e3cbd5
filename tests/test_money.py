"""Unit tests for integer-cent money helpers."""

from decimal import Decimal

import pytest

from storefront.domain.money import cents_to_amount, format_cents, line_total_cents, to_cents


class TestToCents:
    @pytest.mark.parametrize(
        "amount, expected",
        [
            ("5.99", 599),
            ("12.99", 1299),
            (Decimal("3.25"), 325),
            (7, 700),
            (0.1, 10),
            (0.2, 20),
            ("0.005", 1),
        ],
    )
    def test_converts_amounts(self, amount, expected) -> None:
        assert to_cents(amount) == expected

    @pytest.mark.parametrize("amount", ["abc", "", "NaN", "Infinity", True, None])
    def test_rejects_invalid_amounts(self, amount) -> None:
        with pytest.raises(ValueError):
            to_cents(amount)


class TestFormatting:
    def test_decimal_sum_has_no_float_drift(self) -> None:
        """0.10 + 0.20 must come out as exactly 0.30."""
        total = to_cents("0.10") + to_cents("0.20")

        assert total == 30
        assert format_cents(total) == "0.30"
        assert cents_to_amount(total) == 0.3

    def test_format_pads_two_decimals(self) -> None:
        assert format_cents(600) == "6.00"
        assert format_cents(5) == "0.05"
        assert format_cents(0) == "0.00"

    def test_line_total(self) -> None:
        assert line_total_cents(599, 3) == 1797
