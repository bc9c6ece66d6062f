"""Tests for fixed-point money helpers."""

from decimal import Decimal

import pytest

from profitshare.utils.money import (
    format_amount,
    format_ratio,
    parse_amount,
    round2,
    round6,
    to_decimal,
    truncate2,
)


def test_round2_half_away_from_zero():
    assert round2("2.345") == Decimal("2.35")
    assert round2("-2.345") == Decimal("-2.35")
    assert round2("2.344") == Decimal("2.34")


def test_round6_half_away_from_zero():
    assert round6("0.3333335") == Decimal("0.333334")


def test_truncate2_drops_extra_digits():
    assert truncate2("0.259") == Decimal("0.25")
    assert truncate2("0.2") == Decimal("0.20")


def test_float_goes_through_string():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(None) == Decimal("0")


def test_format_amount_and_ratio():
    assert format_amount(5) == "5.00"
    assert format_amount(Decimal("-0.005")) == "-0.01"
    assert format_ratio("0.6") == "0.600000"


def test_parse_amount_formats():
    assert parse_amount("123.45") == Decimal("123.45")
    assert parse_amount("¥1,234.50") == Decimal("1234.50")
    assert parse_amount("(5.00)") == Decimal("-5.00")


@pytest.mark.parametrize("value", ["", "   ", "abc", "NaN", "Infinity"])
def test_parse_amount_rejects_invalid(value):
    with pytest.raises(ValueError):
        parse_amount(value)
