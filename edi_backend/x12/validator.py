"""Structural pre-validation of 835 remittance documents.

Checks that the envelope is present and loop-consistent before semantic
parsing. Problems are reported as diagnostics; nothing here raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import DelimiterError
from .segments import is_decimal
from .tokenizer import TokenizedDocument, X12Segment, envelope_pairs, tokenize

logger = logging.getLogger(__name__)

REQUIRED_835_SEGMENTS = ("ISA", "GS", "ST", "BPR", "TRN", "SE", "GE", "IEA")

# GS01 for health care claim payment/advice
PAYMENT_ADVICE_FUNCTIONAL_ID = "HP"
TRANSACTION_SET_835 = "835"


class Severity(str, Enum):
    """Diagnostic severity. Errors are fatal for the scope they occur in."""

    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    """A problem found while validating or parsing a document."""

    message: str
    severity: Severity = Severity.ERROR
    segment: str | None = None
    position: int | None = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "message": self.message,
            "severity": self.severity.value,
            "segment": self.segment,
            "position": self.position,
        }


def error(message: str, segment: X12Segment | str | None = None) -> Diagnostic:
    """Build an error diagnostic, locating it at ``segment`` when given."""
    return _diagnostic(message, Severity.ERROR, segment)


def warning(message: str, segment: X12Segment | str | None = None) -> Diagnostic:
    """Build a warning diagnostic, locating it at ``segment`` when given."""
    return _diagnostic(message, Severity.WARNING, segment)


def _diagnostic(
    message: str, severity: Severity, segment: X12Segment | str | None
) -> Diagnostic:
    if isinstance(segment, X12Segment):
        return Diagnostic(message, severity, segment.id, segment.position)
    return Diagnostic(message, severity, segment)


def has_errors(diagnostics: list[Diagnostic]) -> bool:
    """Return True if any diagnostic is error severity."""
    return any(d.is_error for d in diagnostics)


def _check_control_pair(
    header: X12Segment,
    header_index: int,
    trailer: X12Segment,
    trailer_index: int,
) -> Diagnostic | None:
    """Compare a header/trailer control number pair on stripped values.

    Only compared when both sides carry a value.
    """
    opening = header.get(header_index).strip()
    closing = trailer.get(trailer_index).strip()
    if not opening or not closing or opening == closing:
        return None
    return error(
        f"{header.id}/{trailer.id} control number mismatch: "
        f"{header.id}{header_index:02d}={opening}, "
        f"{trailer.id}{trailer_index:02d}={closing}",
        trailer,
    )


def _check_envelopes(segments: list[X12Segment]) -> list[Diagnostic]:
    """Compare control numbers on every ISA/IEA, GS/GE and ST/SE pair.

    An ST without an SE is left to the parser, which drops only that
    transaction. An unpaired ISA or GS is an error here, unless its trailer
    is missing entirely and already reported as a required segment.
    """
    diagnostics = []
    present = {s.id for s in segments}
    for header_id, header_index, trailer_id, trailer_index in (
        ("ISA", 13, "IEA", 2),
        ("GS", 6, "GE", 2),
        ("ST", 2, "SE", 2),
    ):
        pairs, unpaired = envelope_pairs(segments, header_id, trailer_id)
        for start, end in pairs:
            mismatch = _check_control_pair(
                segments[start], header_index, segments[end], trailer_index
            )
            if mismatch is not None:
                diagnostics.append(mismatch)

        if header_id == "ST" or trailer_id not in present:
            continue
        for index in unpaired:
            header = segments[index]
            diagnostics.append(
                error(
                    f"{header_id} at position {header.position} has no matching "
                    f"{trailer_id}",
                    header,
                )
            )
    return diagnostics


def check_835(raw: str) -> tuple[list[Diagnostic], TokenizedDocument | None]:
    """Validate a document and return the tokenized form when it tokenizes.

    The parser uses this to avoid tokenizing twice.
    """
    diagnostics: list[Diagnostic] = []

    if not raw or not raw.strip():
        return [error("Empty EDI content")], None

    if not raw.lstrip("\ufeff").strip().startswith("ISA"):
        return [error("EDI content must start with ISA segment", "ISA")], None

    try:
        document = tokenize(raw)
    except DelimiterError as e:
        return [error(f"Failed to tokenize EDI content: {e}", "ISA")], None

    if not document.segments:
        return [error("Failed to tokenize EDI content: no segments found")], None

    for segment_id in REQUIRED_835_SEGMENTS:
        if not document.has(segment_id):
            diagnostics.append(error(f"Missing required segment: {segment_id}", segment_id))

    for st in (s for s in document.segments if s.id == "ST"):
        if st.get(1) != TRANSACTION_SET_835:
            diagnostics.append(
                error(f"Expected transaction set 835, got {st.get(1) or '(empty)'}", st)
            )

    gs = document.find("GS")
    if gs is not None and gs.get(1) != PAYMENT_ADVICE_FUNCTIONAL_ID:
        diagnostics.append(
            warning(
                "Expected GS01=HP (Health Care Claim Payment/Advice), "
                f"got {gs.get(1) or '(empty)'}",
                gs,
            )
        )

    diagnostics.extend(_check_envelopes(document.segments))

    if not document.has("CLP"):
        diagnostics.append(
            warning("No CLP (claim) segments found; 835 has no claim payment data", "CLP")
        )

    for bpr in (s for s in document.segments if s.id == "BPR"):
        if not is_decimal(bpr.get(2)):
            diagnostics.append(
                error("BPR02 payment amount is missing or not numeric", bpr)
            )

    return diagnostics, document


def validate_835(raw: str) -> list[Diagnostic]:
    """Validate the structure of an 835 document.

    Args:
        raw: Raw 835 text

    Returns:
        Diagnostics in discovery order; empty when the document is clean.
    """
    diagnostics, _ = check_835(raw)
    if has_errors(diagnostics):
        logger.debug(
            f"835 validation found {sum(d.is_error for d in diagnostics)} error(s)"
        )
    return diagnostics

