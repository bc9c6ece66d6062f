"""Fixed-point helpers for amounts and ratios."""

import re
from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_UP

CENT = Decimal("0.01")
RATIO_QUANTUM = Decimal("0.000001")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """Normalize numeric values to Decimal.

    Floats are converted through their string representation so that
    ``0.1`` becomes ``Decimal("0.1")`` rather than its binary expansion.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(value) -> Decimal:
    """Round to cents, half away from zero."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round6(value) -> Decimal:
    """Round a ratio to six fractional digits, half away from zero."""
    return to_decimal(value).quantize(RATIO_QUANTUM, rounding=ROUND_HALF_UP)


def truncate2(value) -> Decimal:
    """Drop everything past the second fractional digit."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_DOWN)


def format_amount(value) -> str:
    """Format an amount as a string with exactly two decimals."""
    return f"{round2(value):.2f}"


def format_ratio(value) -> str:
    """Format a ratio as a string with exactly six decimals."""
    return f"{round6(value):.6f}"


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles "123.45", "¥123.45", "1,234.56" and "(123.45)" (negative).

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = re.sub(r"[$€£¥]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount
