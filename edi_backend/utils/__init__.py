"""Shared utility functions for the EDI backend."""

from .date_parser import display_date, is_ccyymmdd, parse_flexible_date, to_date
from .sanitization import digits_only, sanitize_filename, sanitize_text

__all__ = [
    "digits_only",
    "display_date",
    "is_ccyymmdd",
    "parse_flexible_date",
    "sanitize_filename",
    "sanitize_text",
    "to_date",
]
