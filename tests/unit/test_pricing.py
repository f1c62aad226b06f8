"""Unit tests for price derivation."""

from decimal import Decimal

import pytest

from marketplace_client.exceptions import ValidationError
from marketplace_client.services.pricing import discounted_price, format_price

PRICES = [Decimal("0"), Decimal("0.01"), Decimal("4.00"), Decimal("12.99"), Decimal("1000")]


@pytest.mark.unit
class TestDiscountedPrice:
    """Test suite for discounted_price."""

    def test_tea_scenario(self) -> None:
        """Test that Tea at 4.00 with 25% off costs 3.00."""
        assert discounted_price(Decimal("4.00"), 25) == Decimal("3.00")

    @pytest.mark.parametrize("price", PRICES)
    def test_zero_discount_is_identity(self, price: Decimal) -> None:
        """Test that a 0% discount returns the base price."""
        assert discounted_price(price, 0) == price

    @pytest.mark.parametrize("price", PRICES)
    def test_full_discount_is_free(self, price: Decimal) -> None:
        """Test that a 100% discount returns zero."""
        assert discounted_price(price, 100) == 0

    @pytest.mark.parametrize("price", PRICES)
    def test_monotonically_non_increasing(self, price: Decimal) -> None:
        """Test that a bigger discount never raises the price."""
        results = [discounted_price(price, d) for d in range(0, 101, 5)]

        assert all(a >= b for a, b in zip(results, results[1:], strict=False))

    @pytest.mark.parametrize("discount", [-0.01, -5, 100.5, 150])
    def test_rejects_discount_out_of_range(self, discount: float) -> None:
        """Test that discounts outside [0, 100] are rejected."""
        with pytest.raises(ValidationError):
            discounted_price(Decimal("10"), discount)

    def test_rejects_negative_price(self) -> None:
        """Test that a negative base price is rejected."""
        with pytest.raises(ValidationError):
            discounted_price(-1, 10)

    def test_rejects_non_numeric(self) -> None:
        """Test that garbage input raises ValidationError."""
        with pytest.raises(ValidationError):
            discounted_price("ten", 10)

    def test_float_inputs_are_exact(self) -> None:
        """Test that floats go through their repr, avoiding binary noise."""
        assert discounted_price(12.99, 20) == Decimal("10.392")

    def test_no_internal_rounding(self) -> None:
        """Test that the result keeps sub-cent precision."""
        assert discounted_price(Decimal("0.99"), 33) == Decimal("0.6633")


@pytest.mark.unit
class TestFormatPrice:
    """Test suite for format_price."""

    @pytest.mark.parametrize(
        ("amount", "expected"),
        [
            (Decimal("3"), "$3.00"),
            (Decimal("10.392"), "$10.39"),
            (Decimal("0.125"), "$0.13"),
            (15.99, "$15.99"),
        ],
    )
    def test_rounds_to_cents(self, amount: Decimal | float, expected: str) -> None:
        """Test half-up rounding at presentation time."""
        assert format_price(amount) == expected

    def test_custom_symbol(self) -> None:
        """Test a different currency prefix."""
        assert format_price(Decimal("5"), currency_symbol="€") == "€5.00"
