"""Date utilities for splitledger.

Pure functions for period range calculations and date parsing.
"""

import datetime

import pandas as pd


def month_range(month: str) -> tuple[datetime.date, datetime.date, str]:
    """Calculate date range and label for a month.

    Args:
        month: Month in YYYY-MM format.

    Returns:
        Tuple of (since, until, label) where:
        - since: First day of month
        - until: First day of next month (exclusive)
        - label: Human-readable month (e.g., "January 2025")
    """
    dt = datetime.datetime.strptime(month, "%Y-%m")
    since = dt.date()
    until = (dt.replace(day=28) + datetime.timedelta(days=4)).replace(day=1).date()
    label = dt.strftime("%B %Y")
    return since, until, label


def year_range(year: int | str) -> tuple[datetime.date, datetime.date, str]:
    """Calculate date range and label for a calendar year.

    Args:
        year: Year, e.g. 2025 or "2025".

    Returns:
        Tuple of (since, until, label) with until exclusive.
    """
    dt = datetime.datetime.strptime(str(year), "%Y")
    since = dt.date()
    until = since.replace(year=since.year + 1)
    return since, until, str(since.year)


def parse_date(raw_date: str | datetime.date) -> datetime.date:
    """Parse a date written in any common format.

    ISO dates are read directly; anything else goes through
    pandas.to_datetime, reading ambiguous day/month orders day first.

    Args:
        raw_date: Date string or date.

    Returns:
        Parsed date.

    Raises:
        ValueError: If the date cannot be parsed.
    """
    if isinstance(raw_date, datetime.datetime):
        return raw_date.date()
    if isinstance(raw_date, datetime.date):
        return raw_date
    if not isinstance(raw_date, str):
        raise ValueError(f"Could not parse date {raw_date!r}: expected text or a date")

    try:
        return datetime.date.fromisoformat(raw_date.strip())
    except ValueError:
        pass

    try:
        parsed = pd.to_datetime(raw_date, dayfirst=True)
    except (ValueError, pd.errors.ParserError) as e:
        raise ValueError(f"Could not parse date '{raw_date}': {e}") from e

    if pd.isna(parsed):
        raise ValueError(f"Could not parse date '{raw_date}'")
    return parsed.date()
