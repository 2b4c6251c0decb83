"""Interchange envelope assembly shared by the outbound generators.

A generator supplies the transaction body (everything between ST and SE);
this module wraps it in ST/SE, GS/GE and ISA/IEA with matching control
numbers and a correct SE segment count.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from .. import config
from ..utils.sanitization import sanitize_text
from .control_numbers import ControlNumberGenerator, ControlNumbers, default_control_numbers
from .errors import ValidationError
from .segments import (
    GENERATION_DELIMITERS,
    INTERCHANGE_ID_LENGTH,
    INTERCHANGE_VERSION,
    build_segment,
    fixed_width,
    format_date,
    format_short_date,
    format_time,
)

logger = logging.getLogger(__name__)

# ISA01/ISA03: no authorization or security information
NO_AUTHORIZATION = "00"
# GS07: accredited standards committee X12
RESPONSIBLE_AGENCY = "X"

# ISA15
USAGE_INDICATORS = ("P", "T")
# ISA05/ISA07 are two-character code values
ID_QUALIFIER_RE = re.compile(r"^[0-9A-Z]{2}$")


@dataclass
class GenerationResult:
    """A generated interchange.

    Attributes:
        content: Compact document, segments back to back
        formatted_content: Same segments, one per line
        control_numbers: ISA13/GS06/ST02 values used
        segment_count: Segments from ST through SE (the SE01 value)
        warnings: Non-blocking validation findings
    """

    content: str
    formatted_content: str
    control_numbers: ControlNumbers
    segment_count: int
    warnings: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "content": self.content,
            "formatted_content": self.formatted_content,
            "control_numbers": self.control_numbers.to_dict(),
            "segment_count": self.segment_count,
            "warnings": [w.to_dict() for w in self.warnings],
        }


class X12Generator:
    """Base class for outbound transaction generators.

    Subclasses set the three class attributes and build the body.
    """

    transaction_set_id = ""
    functional_identifier = ""
    implementation_reference = ""

    def __init__(
        self,
        control_numbers: ControlNumberGenerator | None = None,
        clock: Callable[[], datetime] | None = None,
        usage_indicator: str | None = None,
        id_qualifier: str | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            control_numbers: Control number source (default from EDI_CONTROL_NUMBER_MODE)
            clock: Callable returning the creation timestamp (default: datetime.now)
            usage_indicator: ISA15, P or T (default from EDI_USAGE_INDICATOR)
            id_qualifier: ISA05/ISA07 (default from EDI_INTERCHANGE_ID_QUALIFIER)

        Raises:
            ValidationError: If the usage indicator or ID qualifier would
                break the fixed-width ISA header.
        """
        self.control_numbers = control_numbers or default_control_numbers()
        self.clock = clock or datetime.now
        self.usage_indicator = usage_indicator or config.EDI_USAGE_INDICATOR
        self.id_qualifier = id_qualifier or config.EDI_INTERCHANGE_ID_QUALIFIER

        if self.usage_indicator not in USAGE_INDICATORS:
            raise ValidationError(
                f"ISA15 usage indicator must be P or T: {self.usage_indicator!r}"
            )
        if not ID_QUALIFIER_RE.match(self.id_qualifier):
            raise ValidationError(
                f"Interchange ID qualifier must be 2 characters: {self.id_qualifier!r}"
            )

    def assemble(
        self,
        body: list[str],
        controls: ControlNumbers,
        now: datetime,
        sender_id: str,
        receiver_id: str,
        warnings: list[Any] | None = None,
    ) -> GenerationResult:
        """Wrap a transaction body in its ST/SE, GS/GE and ISA/IEA envelopes."""
        sender = sanitize_text(sender_id)
        receiver = sanitize_text(receiver_id)
        qualifier = self.id_qualifier
        for label, value in (("sender", sender), ("receiver", receiver)):
            if len(value) > INTERCHANGE_ID_LENGTH:
                raise ValidationError(
                    f"Interchange {label} ID exceeds {INTERCHANGE_ID_LENGTH} "
                    f"characters: {value!r}"
                )

        transaction = [
            build_segment(
                "ST", self.transaction_set_id, controls.st, self.implementation_reference
            ),
            *body,
        ]
        # SE01 counts ST and SE themselves
        transaction.append(build_segment("SE", len(transaction) + 1, controls.st))

        segments = [
            build_segment(
                "ISA",
                NO_AUTHORIZATION,
                fixed_width("", 10),
                NO_AUTHORIZATION,
                fixed_width("", 10),
                qualifier,
                fixed_width(sender, INTERCHANGE_ID_LENGTH),
                qualifier,
                fixed_width(receiver, INTERCHANGE_ID_LENGTH),
                format_short_date(now),
                format_time(now),
                GENERATION_DELIMITERS.repetition,
                INTERCHANGE_VERSION,
                controls.isa,
                "0",
                self.usage_indicator,
                GENERATION_DELIMITERS.component,
            ),
            build_segment(
                "GS",
                self.functional_identifier,
                sender,
                receiver,
                format_date(now),
                format_time(now),
                controls.gs,
                RESPONSIBLE_AGENCY,
                self.implementation_reference,
            ),
            *transaction,
            build_segment("GE", 1, controls.gs),
            build_segment("IEA", 1, controls.isa),
        ]

        logger.info(
            f"Generated {self.transaction_set_id}: ISA {controls.isa}, GS {controls.gs}, "
            f"ST {controls.st}, {len(transaction)} transaction segments"
        )
        return GenerationResult(
            content="".join(segments),
            formatted_content="\n".join(segments),
            control_numbers=controls,
            segment_count=len(transaction),
            warnings=warnings or [],
        )
