"""Exceptions raised by the X12 codec.

Malformed inbound documents never raise; they produce diagnostics.
These exceptions cover caller-contract violations on the generation side
and internal tokenizer failures that the validator converts to diagnostics.
"""

from __future__ import annotations

from typing import Any


class X12Error(ValueError):
    """Base class for X12 codec errors."""


class FormatError(X12Error):
    """A value cannot be serialized into its X12 representation."""


class ValidationError(X12Error):
    """An identifier or code fails its structural check (e.g. NPI length)."""


class DelimiterError(X12Error):
    """Delimiters cannot be detected from the interchange header."""


class ClaimValidationError(X12Error):
    """Generator input failed pre-generation validation.

    Attributes:
        findings: The error and warning findings that were produced.
    """

    def __init__(self, findings: list[Any]):
        self.findings = findings
        errors = [f for f in findings if getattr(f, "is_error", False)]
        summary = "; ".join(f"{f.field}: {f.message}" for f in errors[:5])
        super().__init__(f"{len(errors)} validation error(s): {summary}")
