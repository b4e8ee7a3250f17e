"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

RELATIVE_WORDS = {
    "today": 0,
    "idag": 0,
    "yesterday": -1,
    "igår": -1,
    "tomorrow": 1,
    "imorgon": 1,
}

PERIOD_NAMES = (
    "this-month",
    "last-month",
    "this-quarter",
    "last-quarter",
    "this-year",
    "last-year",
)


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports ISO dates ("2025-01-15"), anything dateutil understands, and the
    relative forms "today", "yesterday", "tomorrow" (also in Swedish) plus
    "last month", "this month", "this year", "last year" which resolve to the
    first day of that month or year.

    Args:
        date_str: Date string
        today: Reference date, defaults to date.today()

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    if text in RELATIVE_WORDS:
        return today + timedelta(days=RELATIVE_WORDS[text])

    if text == "this month":
        return today.replace(day=1)
    if text == "last month":
        return (today - relativedelta(months=1)).replace(day=1)
    if text == "this year":
        return today.replace(month=1, day=1)
    if text == "last year":
        return today.replace(month=1, day=1) - relativedelta(years=1)

    try:
        # ISO first so that 2025-02-03 is never read day-first
        return date.fromisoformat(text)
    except ValueError:
        pass

    try:
        return date_parser.parse(text, dayfirst=True).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get the half-open range [start, end) for a named period.

    Args:
        period: One of this-month, last-month, this-quarter, last-quarter,
            this-year, last-year
        today: Reference date, defaults to date.today()

    Returns:
        Tuple of (start_date, end_date), end exclusive

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()
    month_start = today.replace(day=1)
    quarter_start = month_start.replace(month=3 * ((today.month - 1) // 3) + 1)
    year_start = today.replace(month=1, day=1)

    if period == "this-month":
        return month_start, month_start + relativedelta(months=1)
    if period == "last-month":
        return month_start - relativedelta(months=1), month_start
    if period == "this-quarter":
        return quarter_start, quarter_start + relativedelta(months=3)
    if period == "last-quarter":
        return quarter_start - relativedelta(months=3), quarter_start
    if period == "this-year":
        return year_start, year_start + relativedelta(years=1)
    if period == "last-year":
        return year_start - relativedelta(years=1), year_start

    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: {', '.join(PERIOD_NAMES)}"
    )
