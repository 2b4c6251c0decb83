"""
270 Eligibility Inquiry Generator.

Builds an ANSI X12 270 (005010X279A1) inquiry for one subscriber.

Loop reference:
- 2000A/2100A: Information source, the payer (HL*20, NM1*PR)
- 2000B/2100B: Information receiver, the provider (HL*21, NM1*1P)
- 2000C/2100C: Subscriber (HL*22, TRN, NM1*IL, DMG, DTP*291)
- 2110C: Eligibility inquiry (EQ)
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..schemas.eligibility import Eligibility270Input
from ..utils.sanitization import sanitize_text
from .claim_validation import has_blocking_findings, validate_inquiry
from .control_numbers import ISA_CONTROL_WIDTH, ControlNumbers
from .envelope import GenerationResult, X12Generator
from .errors import ClaimValidationError
from .segments import (
    build_segment,
    format_date,
    format_npi,
    format_time,
    normalize_gender,
)

logger = logging.getLogger(__name__)

IMPLEMENTATION_270 = "005010X279A1"

# TRN03 is the originating company: "1" followed by its identifier
TRACE_ORIGINATOR_PREFIX = "1"


class EDI270Generator(X12Generator):
    """Generator for 270 eligibility inquiries."""

    transaction_set_id = "270"
    functional_identifier = "HS"
    implementation_reference = IMPLEMENTATION_270

    def generate(
        self, inquiry: Eligibility270Input | Mapping[str, Any]
    ) -> GenerationResult:
        """Generate one 270 interchange.

        Reference (BHT03) and trace (TRN02) numbers come from the inquiry
        when provided, otherwise from the control number source.

        Raises:
            ClaimValidationError: If pre-generation validation finds errors
            ValidationError: If the provider NPI is malformed
        """
        if not isinstance(inquiry, Eligibility270Input):
            inquiry = Eligibility270Input.model_validate(inquiry)

        findings = validate_inquiry(inquiry)
        if has_blocking_findings(findings):
            logger.warning(
                f"270 inquiry for member {inquiry.subscriber.member_id} failed validation"
            )
            raise ClaimValidationError(findings)

        now = self.clock()
        controls = ControlNumbers.allocate(self.control_numbers)
        reference = sanitize_text(inquiry.reference_id) or self.control_numbers.next(
            ISA_CONTROL_WIDTH
        )
        trace = sanitize_text(inquiry.trace_number) or self.control_numbers.next(
            ISA_CONTROL_WIDTH
        )

        npi = format_npi(inquiry.provider.npi)
        subscriber = inquiry.subscriber
        body = [
            # BHT01 information source hierarchy, BHT02 request
            build_segment("BHT", "0022", "13", reference, format_date(now), format_time(now)),
            build_segment("HL", "1", "", "20", "1"),
            build_segment(
                "NM1", "PR", "2", sanitize_text(inquiry.payer.name),
                "", "", "", "", "PI", sanitize_text(inquiry.payer.identifier),
            ),
            build_segment("HL", "2", "1", "21", "1"),
            build_segment(
                "NM1", "1P", "2", sanitize_text(inquiry.provider.name),
                "", "", "", "", "XX", npi,
            ),
            build_segment("HL", "3", "2", "22", "0"),
            build_segment("TRN", "1", trace, f"{TRACE_ORIGINATOR_PREFIX}{npi}"),
            build_segment(
                "NM1", "IL", "1",
                sanitize_text(subscriber.last_name), sanitize_text(subscriber.first_name),
                "", "", "", "MI", sanitize_text(subscriber.member_id),
            ),
            build_segment(
                "DMG", "D8", format_date(subscriber.date_of_birth),
                normalize_gender(subscriber.gender),
            ),
            build_segment("DTP", "291", "D8", format_date(inquiry.date_of_service)),
            build_segment("EQ", sanitize_text(inquiry.service_type_code)),
        ]

        return self.assemble(
            body,
            controls,
            now,
            sender_id=inquiry.submitter_id,
            receiver_id=inquiry.payer.identifier,
            warnings=[f for f in findings if not f.is_error],
        )


def generate_270(inquiry: Eligibility270Input | Mapping[str, Any], **kwargs: Any) -> str:
    """Convenience function to generate a compact 270 document."""
    return EDI270Generator(**kwargs).generate(inquiry).content
