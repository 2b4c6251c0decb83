"""Input sanitization utilities."""

from __future__ import annotations

import re

# Characters that collide with the generation delimiter set:
# element (*), segment (~), repetition (^) and component (:) separators.
X12_RESERVED_CHARS = "*~^:"

_RESERVED_RE = re.compile(f"[{re.escape(X12_RESERVED_CHARS)}]")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_WHITESPACE_RE = re.compile(r"\s+")
_NON_DIGIT_RE = re.compile(r"\D")


def sanitize_text(value: str | None) -> str:
    """Make a free-text value safe to embed in an X12 element.

    Removes delimiter characters and control characters (including
    newlines), then collapses whitespace runs to a single space.

    Args:
        value: Raw text such as a name or address line

    Returns:
        Cleaned text, or an empty string for None/blank input

    Examples:
        >>> sanitize_text("Smith*Jones ~ PT:Clinic^")
        'SmithJones PTClinic'
        >>> sanitize_text(None)
        ''
    """
    if not value:
        return ""

    cleaned = _RESERVED_RE.sub("", value)
    cleaned = _CONTROL_RE.sub(" ", cleaned)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def digits_only(value: str | None) -> str:
    """Strip everything except ASCII digits (phones, ZIP codes, EINs)."""
    if not value:
        return ""
    return _NON_DIGIT_RE.sub("", value)


def sanitize_filename(filename: str | None, max_length: int = 255) -> str:
    """Sanitize an uploaded remittance filename for safe logging.

    Prevents:
    - Path traversal attacks (../, etc.)
    - Log injection (newlines, control characters)
    - Excessively long filenames

    Args:
        filename: The raw filename from the upload
        max_length: Maximum allowed filename length

    Returns:
        A safe filename string
    """
    if not filename:
        return "unknown"

    # Keep only the final path component
    safe_name = filename.replace("\\", "/").split("/")[-1]
    safe_name = safe_name.replace("..", "")

    # Remove control characters and newlines (prevent log injection)
    safe_name = _CONTROL_RE.sub("", safe_name)

    if len(safe_name) > max_length:
        # Preserve extension if present (.835, .edi, .txt)
        if "." in safe_name:
            name, ext = safe_name.rsplit(".", 1)
            ext = ext[:10]
            safe_name = name[: max_length - len(ext) - 1] + "." + ext
        else:
            safe_name = safe_name[:max_length]

    return safe_name or "unknown"
