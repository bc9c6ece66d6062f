"""Tests for date and settlement time parsing."""

import pytest
from datetime import date, datetime, timedelta
from profitshare.utils.date_parser import (
    end_of_day,
    parse_date,
    parse_datetime,
    resolve_settlement_time,
)


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2026-02-16") == date(2026, 2, 16)


def test_parse_relative_dates():
    """Test parsing 'today' and 'yesterday'."""
    assert parse_date("today") == date.today()
    assert parse_date("yesterday") == date.today() - timedelta(days=1)


def test_parse_this_month():
    assert parse_date("this month") == date.today().replace(day=1)


def test_parse_invalid_date():
    with pytest.raises(ValueError):
        parse_date("not a date")


def test_parse_datetime():
    assert parse_datetime("2026-02-16 10:30:00") == datetime(2026, 2, 16, 10, 30, 0)


def test_parse_datetime_drops_timezone():
    assert parse_datetime("2026-02-16T10:30:00+08:00").tzinfo is None


def test_end_of_day():
    assert end_of_day(date(2026, 2, 28)) == datetime(2026, 2, 28, 23, 59, 59)


def test_settlement_time_normalized_to_end_of_day():
    assert resolve_settlement_time("2026-02-28") == datetime(2026, 2, 28, 23, 59, 59)
    assert resolve_settlement_time("2026-02-28 08:15") == datetime(2026, 2, 28, 23, 59, 59)


def test_settlement_time_defaults_to_today():
    expected = end_of_day(date.today())
    assert resolve_settlement_time() == expected
    assert resolve_settlement_time("  ") == expected


def test_settlement_time_invalid():
    with pytest.raises(ValueError):
        resolve_settlement_time("someday")
