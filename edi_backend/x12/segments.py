"""Segment and envelope primitives shared by the generators and parser.

Generation always uses the fixed delimiter set below. Inbound documents
carry their own delimiters, detected by the tokenizer.

Envelope reference:
- ISA/IEA: Interchange (9-digit control number)
- GS/GE: Functional group
- ST/SE: Transaction set (4-digit control number)
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from ..utils.date_parser import parse_flexible_date
from ..utils.sanitization import digits_only, sanitize_text
from .errors import FormatError, ValidationError


@dataclass(frozen=True)
class Delimiters:
    """Delimiter set governing an X12 document."""

    element: str = "*"
    component: str = ":"
    segment: str = "~"
    repetition: str = "^"


GENERATION_DELIMITERS = Delimiters()

# ISA12 for 005010
INTERCHANGE_VERSION = "00501"

# ISA06/ISA08 are fixed width; GS02/GS03 carry the same identifiers
INTERCHANGE_ID_LENGTH = 15

_CENT = Decimal("0.01")

# X12 decimal (R) values: optional minus, digits, optional fraction. No
# exponents, no NaN or infinity.
_DECIMAL_RE = re.compile(r"^-?(\d+(\.\d*)?|\.\d+)$")


def is_decimal(value: str | None) -> bool:
    """Check that an element holds a plain X12 decimal number."""
    return bool(value) and _DECIMAL_RE.match(value.strip()) is not None


class Composite(str):
    """An element built from sub-elements joined by the component separator."""


def build_segment(
    segment_id: str,
    *elements: Any,
    delimiters: Delimiters = GENERATION_DELIMITERS,
) -> str:
    """Assemble one segment, terminator included.

    Trailing empty elements are kept because element positions are
    significant.

    Args:
        segment_id: Segment identifier (e.g. "NM1", "CLM")
        *elements: Element values; None becomes an empty element
        delimiters: Delimiter set to assemble with

    Returns:
        Segment text such as ``"NM1*41*2*CLINIC~"``

    Raises:
        FormatError: If an element embeds the element separator or the
            segment terminator, or a non-composite element embeds the
            component or repetition separator.
    """
    # ISA11 and ISA16 carry the separators themselves
    reserved = [delimiters.element, delimiters.segment]
    if segment_id != "ISA":
        reserved += [delimiters.component, delimiters.repetition]

    parts = []
    for position, element in enumerate(elements, start=1):
        part = "" if element is None else str(element)
        checked = reserved
        if isinstance(element, Composite):
            checked = [sep for sep in reserved if sep != delimiters.component]
        if any(sep in part for sep in checked):
            raise FormatError(
                f"{segment_id}{position:02d} contains a delimiter character: {part!r}"
            )
        parts.append(part)
    return delimiters.element.join([segment_id, *parts]) + delimiters.segment


def composite(
    *components: Any, delimiters: Delimiters = GENERATION_DELIMITERS
) -> Composite:
    """Join composite sub-elements, dropping empty trailing components."""
    parts = ["" if c is None else str(c) for c in components]
    while parts and not parts[-1]:
        parts.pop()
    return Composite(delimiters.component.join(parts))


def format_date(value: date | datetime | str | None) -> str:
    """Format a date as CCYYMMDD.

    Accepts date/datetime objects or strings in YYYY-MM-DD, YYYYMMDD or
    MM/DD/YYYY form.

    Raises:
        FormatError: If the value is missing or not a real date.
    """
    if isinstance(value, datetime):
        return value.strftime("%Y%m%d")
    if isinstance(value, date):
        return value.strftime("%Y%m%d")
    if isinstance(value, str):
        parsed = parse_flexible_date(value)
        if parsed is not None:
            return parsed.strftime("%Y%m%d")
    raise FormatError(f"Invalid or missing date: {value!r}")


def format_short_date(value: date | datetime) -> str:
    """Format a date as YYMMDD (ISA09)."""
    return format_date(value)[2:]


def format_time(value: datetime | time | None) -> str:
    """Format a time as HHMM.

    Raises:
        FormatError: If the value is not a datetime or time.
    """
    if isinstance(value, (datetime, time)):
        return value.strftime("%H%M")
    raise FormatError(f"Invalid or missing time: {value!r}")


def fixed_width(value: str | None, width: int) -> str:
    """Right-pad with spaces to exactly ``width`` characters, truncating."""
    return (value or "")[:width].ljust(width, " ")


def zero_pad(value: int | str, width: int) -> str:
    """Left-pad with zeros to at least ``width`` characters."""
    return str(value).rjust(width, "0")


def format_amount(value: Decimal | float | int | str) -> str:
    """Format a non-negative dollar amount with exactly two decimals.

    Examples:
        >>> format_amount(125.5)
        '125.50'
        >>> format_amount("45")
        '45.00'

    Raises:
        FormatError: For negative, non-finite or non-numeric values.
    """
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise FormatError(f"Amount is not numeric: {value!r}")
    if not amount.is_finite():
        raise FormatError(f"Amount is not finite: {value!r}")
    if amount < 0:
        raise FormatError(f"Amount must not be negative: {value!r}")
    try:
        return str(amount.quantize(_CENT, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        raise FormatError(f"Amount is too large: {value!r}")


def format_quantity(value: Decimal | float | int | str) -> str:
    """Format a unit count without a trailing ``.0`` for whole numbers."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise FormatError(f"Quantity is not numeric: {value!r}")
    if not math.isfinite(number) or number <= 0:
        raise FormatError(f"Quantity must be positive: {value!r}")
    if number.is_integer():
        return str(int(number))
    return format(Decimal(str(value)).normalize(), "f")


def format_npi(value: str | None) -> str:
    """Return a National Provider Identifier as exactly 10 digits.

    Non-digit characters (spaces, dashes) are stripped first.

    Raises:
        ValidationError: If the stripped value is not exactly 10 digits.
    """
    npi = digits_only(value)
    if len(npi) != 10:
        raise ValidationError(f"NPI must be exactly 10 digits: {value!r}")
    return npi


def format_tax_id(value: str | None) -> str:
    """Return a tax identification number (EIN) as digits only."""
    return digits_only(value)


def normalize_gender(value: str | None) -> str:
    """Map a gender value to the X12 DMG03 code set (M, F or U)."""
    normalized = (value or "").strip().lower()
    if normalized in ("f", "female"):
        return "F"
    if normalized in ("m", "male"):
        return "M"
    return "U"


def strip_diagnosis_code(code: str) -> str:
    """Remove the decimal point(s) from an ICD-10 code (M54.5 -> M545)."""
    return sanitize_text(code).replace(".", "").upper()
