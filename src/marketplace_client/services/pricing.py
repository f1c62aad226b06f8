"""Price derivation for discounted menu items.

Amounts stay unrounded Decimals internally; rounding to cents happens only in
format_price so repeated computations do not compound rounding error.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from marketplace_client.exceptions import ValidationError

HUNDRED = Decimal("100")
CENTS = Decimal("0.01")


def _to_decimal(value: Decimal | int | float | str, field_name: str) -> Decimal:
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation as e:
            raise ValidationError(f"{field_name} must be a number, got {value!r}") from e

    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be finite, got {value!r}")
    return amount


def discounted_price(
    base_price: Decimal | int | float | str,
    discount_percent: Decimal | int | float | str,
) -> Decimal:
    """Compute the price after applying a percentage discount.

    Args:
        base_price: Price before discount, must be non-negative
        discount_percent: Discount between 0 and 100 inclusive

    Returns:
        Decimal: base_price * (1 - discount_percent / 100), unrounded

    Raises:
        ValidationError: If the discount is outside [0, 100] or the price is negative
    """
    price = _to_decimal(base_price, "base_price")
    discount = _to_decimal(discount_percent, "discount_percent")

    if price < 0:
        raise ValidationError(f"base_price must be non-negative, got {price}")
    if discount < 0 or discount > HUNDRED:
        raise ValidationError(f"discount_percent must be between 0 and 100, got {discount}")

    return price * (1 - discount / HUNDRED)


def format_price(amount: Decimal | int | float | str, currency_symbol: str = "$") -> str:
    """Round an amount to cents for display.

    Args:
        amount: Amount to display
        currency_symbol: Prefix for the formatted value

    Returns:
        str: e.g. "$3.00"
    """
    value = _to_decimal(amount, "amount").quantize(CENTS, rounding=ROUND_HALF_UP)
    return f"{currency_symbol}{value}"
