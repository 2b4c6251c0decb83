"""Date parsing utilities for X12 date elements."""

from __future__ import annotations

import re
from datetime import date, datetime

# Reasonable date bounds for healthcare transactions
MIN_VALID_YEAR = 1900
MAX_VALID_YEAR = 2100

_CCYYMMDD_RE = re.compile(r"^\d{8}$")


def parse_flexible_date(date_str: str | None) -> datetime | None:
    """Parse date from multiple common formats with validation.

    Supports the following formats:
    - ISO 8601: YYYY-MM-DD (e.g., 2024-01-15)
    - US format: MM/DD/YYYY (e.g., 01/15/2024)
    - Compact: YYYYMMDD (e.g., 20240115)

    Validates that:
    - The date is a real calendar date (no Feb 30, etc.)
    - The year is between 1900 and 2100

    Args:
        date_str: Date string to parse, or None

    Returns:
        Parsed datetime object, or None if parsing fails or input is None

    Examples:
        >>> parse_flexible_date("2024-01-15")
        datetime.datetime(2024, 1, 15, 0, 0)
        >>> parse_flexible_date("20240115")
        datetime.datetime(2024, 1, 15, 0, 0)
        >>> parse_flexible_date("2024-02-30")  # Invalid date
        None
    """
    if not date_str:
        return None

    formats = [
        "%Y-%m-%d",  # ISO 8601
        "%m/%d/%Y",  # US format
        "%Y%m%d",  # Compact / X12 D8
    ]

    for fmt in formats:
        try:
            parsed = datetime.strptime(date_str.strip(), fmt)
            if parsed.year < MIN_VALID_YEAR or parsed.year > MAX_VALID_YEAR:
                continue
            return parsed
        except ValueError:
            # strptime raises ValueError for invalid dates like Feb 30
            continue

    return None


def is_ccyymmdd(value: str | None) -> bool:
    """Check that a value is an eight-digit real calendar date."""
    if not value or not _CCYYMMDD_RE.match(value):
        return False
    return parse_flexible_date(value) is not None


def display_date(edi_date: str | None) -> str:
    """Render a CCYYMMDD value as MM/DD/CCYY for reports.

    Values that are not at least eight characters are returned unchanged.
    """
    if not edi_date or len(edi_date) < 8:
        return edi_date or ""
    return f"{edi_date[4:6]}/{edi_date[6:8]}/{edi_date[0:4]}"


def to_date(value: date | datetime | str | None) -> date | None:
    """Coerce a date, datetime or flexible date string to a date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_flexible_date(str(value))
    return parsed.date() if parsed else None
