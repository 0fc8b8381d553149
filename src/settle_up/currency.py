"""Conversion between decimal major units and integer minor units.

All settlement arithmetic runs on integer minor units (e.g. cents) so that
repeated additions never drift. Only the display and persistence boundaries
convert back to Decimal.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .exceptions import ValidationError

MINOR_UNIT_FACTOR = 100  # two decimal digits
MINOR_UNIT_EXPONENT = Decimal("0.01")

CURRENCY_CONFIG: dict[str, dict[str, str | int]] = {
    "JPY": {"symbol": "¥", "decimals": 0},
    "USD": {"symbol": "$", "decimals": 2},
    "EUR": {"symbol": "€", "decimals": 2},
    "GBP": {"symbol": "£", "decimals": 2},
    "CNY": {"symbol": "¥", "decimals": 2},
    "KRW": {"symbol": "₩", "decimals": 0},
}


def to_decimal(amount: Decimal | int | float | str) -> Decimal:
    """
    Coerce an amount to a finite Decimal.

    Floats go through str() first so 0.1 becomes Decimal("0.1") rather than
    its binary expansion.

    Raises:
        ValidationError: If the amount is not a number or is NaN/Infinity
    """
    if isinstance(amount, bool):
        raise ValidationError(f"Invalid amount: {amount!r}")
    try:
        if isinstance(amount, Decimal):
            value = amount
        elif isinstance(amount, float):
            value = Decimal(str(amount))
        else:
            value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid amount: {amount!r}") from e

    if not value.is_finite():
        raise ValidationError(f"Amount must be finite, got {amount!r}")
    return value


def to_minor(amount: Decimal | int | float | str) -> int:
    """
    Convert a major-unit amount to integer minor units.
    Uses ROUND_HALF_UP for consistency.

    Args:
        amount: Amount in major units (e.g. Decimal("12.50"))

    Returns:
        Amount in minor units (e.g. 1250)
    """
    minor = to_decimal(amount) * MINOR_UNIT_FACTOR
    return int(minor.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_major(amount: int) -> Decimal:
    """Convert integer minor units back to a two-place Decimal."""
    return (Decimal(amount) / MINOR_UNIT_FACTOR).quantize(MINOR_UNIT_EXPONENT)


def format_currency(amount_minor: int, currency: str = "JPY") -> str:
    """
    Format a minor-unit amount for display.

    Currencies without fractional display (JPY, KRW) are rounded half-up to
    whole units. Unknown currency codes fall back to the JPY layout with the
    code as prefix.

    Example:
        format_currency(123456, "USD") -> "$1,234.56"
        format_currency(-50000, "JPY") -> "-¥500"
    """
    config = CURRENCY_CONFIG.get(currency)
    if config is None:
        symbol, decimals = f"{currency} ", 0
    else:
        symbol, decimals = str(config["symbol"]), int(config["decimals"])

    major = abs(to_major(amount_minor))
    quantum = Decimal(1).scaleb(-decimals)
    rounded = major.quantize(quantum, rounding=ROUND_HALF_UP)

    sign = "-" if amount_minor < 0 else ""
    return f"{sign}{symbol}{rounded:,.{decimals}f}"
