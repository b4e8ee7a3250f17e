"""Tests for date parser with relative dates."""

import pytest
from datetime import date, timedelta
from ledgerkit.utils.date_parser import PERIOD_NAMES, parse_date, get_date_range

TODAY = date(2025, 2, 14)


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    result = parse_date("2024-01-15")
    assert result == date(2024, 1, 15)


def test_parse_iso_date_is_never_day_first():
    """Test that ISO dates keep month before day."""
    assert parse_date("2025-02-03") == date(2025, 2, 3)


def test_parse_today():
    """Test parsing 'today'."""
    result = parse_date("today")
    assert result == date.today()


@pytest.mark.parametrize(
    "text, offset",
    [
        ("today", 0),
        ("idag", 0),
        ("yesterday", -1),
        ("igår", -1),
        ("tomorrow", 1),
        ("imorgon", 1),
        ("  Yesterday ", -1),
    ],
)
def test_parse_relative_days(text, offset):
    """Test English and Swedish relative day words."""
    assert parse_date(text, today=TODAY) == TODAY + timedelta(days=offset)


def test_parse_month_and_year_words():
    """Test relative month and year forms."""
    assert parse_date("this month", today=TODAY) == date(2025, 2, 1)
    assert parse_date("last month", today=TODAY) == date(2025, 1, 1)
    assert parse_date("last month", today=date(2025, 1, 20)) == date(2024, 12, 1)
    assert parse_date("this year", today=TODAY) == date(2025, 1, 1)
    assert parse_date("last year", today=TODAY) == date(2024, 1, 1)


def test_parse_invalid_relative():
    """Test parsing invalid relative date."""
    with pytest.raises(ValueError):
        parse_date("last invalid")


def test_parse_standard_formats():
    """Test parsing various standard date formats."""
    # These should all work via dateutil parser
    assert parse_date("January 15, 2024") == date(2024, 1, 15)
    assert parse_date("15/01/2024") == date(2024, 1, 15)
    assert parse_date("03/02/2025") == date(2025, 2, 3)


@pytest.mark.parametrize(
    "period, expected",
    [
        ("this-month", (date(2025, 2, 1), date(2025, 3, 1))),
        ("last-month", (date(2025, 1, 1), date(2025, 2, 1))),
        ("this-quarter", (date(2025, 1, 1), date(2025, 4, 1))),
        ("last-quarter", (date(2024, 10, 1), date(2025, 1, 1))),
        ("this-year", (date(2025, 1, 1), date(2026, 1, 1))),
        ("last-year", (date(2024, 1, 1), date(2025, 1, 1))),
    ],
)
def test_get_date_range_is_half_open(period, expected):
    """Test that every named period is a half-open [start, end) range."""
    assert get_date_range(period, today=TODAY) == expected


def test_get_date_range_covers_every_period_name():
    """Test that every advertised period name resolves."""
    for period in PERIOD_NAMES:
        start, end = get_date_range(period)
        assert start < end


def test_get_date_range_quarter_boundary():
    """Test quarters at the end of the year."""
    assert get_date_range("this-quarter", today=date(2025, 12, 31)) == (
        date(2025, 10, 1),
        date(2026, 1, 1),
    )
    assert get_date_range("last-quarter", today=date(2025, 4, 1)) == (
        date(2025, 1, 1),
        date(2025, 4, 1),
    )


def test_get_date_range_invalid_period():
    """Test get_date_range with invalid period."""
    with pytest.raises(ValueError, match="Unknown period"):
        get_date_range("invalid-period")
