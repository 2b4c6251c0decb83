"""
837P Professional Claim Generator.

Builds an ANSI X12 837P (005010X222A1) claim interchange from structured
claim input.

Loop reference:
- 1000A: Submitter (NM1*41, PER*IC)
- 1000B: Receiver (NM1*40)
- 2000A/2010AA: Billing provider (HL*20, PRV*BI, NM1*85, N3, N4, REF*EI)
- 2000B/2010BA: Subscriber (HL*22, SBR, NM1*IL, N3, N4, DMG)
- 2010BB: Payer (NM1*PR)
- 2300: Claim (CLM, REF*G1, DTP*472, HI)
- 2310B: Rendering provider (NM1*82, PRV*PE)
- 2400: Service lines (LX, SV1, DTP*472)
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..schemas.claim import Claim837PInput, ServiceLine
from ..utils.sanitization import digits_only, sanitize_text
from .claim_validation import has_blocking_findings, validate_claim
from .control_numbers import ControlNumbers
from .envelope import GenerationResult, X12Generator
from .errors import ClaimValidationError
from .segments import (
    build_segment,
    composite,
    format_amount,
    format_date,
    format_npi,
    format_quantity,
    format_tax_id,
    format_time,
    normalize_gender,
    strip_diagnosis_code,
)

logger = logging.getLogger(__name__)

IMPLEMENTATION_837P = "005010X222A1"

# BHT06: chargeable claim
CLAIM_OR_ENCOUNTER = "CH"
# CLM05-2: place of service codes from the CMS code set
FACILITY_QUALIFIER = "B"

# HI qualifiers: principal and additional ICD-10-CM diagnoses
PRINCIPAL_DIAGNOSIS = "ABK"
OTHER_DIAGNOSIS = "ABF"
MAX_HI_CODES = 12

BHT_REFERENCE_LENGTH = 30
CLM_ID_LENGTH = 20


class EDI837PGenerator(X12Generator):
    """Generator for 837P professional claims."""

    transaction_set_id = "837"
    functional_identifier = "HC"
    implementation_reference = IMPLEMENTATION_837P

    def generate(self, claim: Claim837PInput | Mapping[str, Any]) -> GenerationResult:
        """Generate one 837P interchange.

        Args:
            claim: Claim model, or a mapping accepted by ``Claim837PInput``

        Returns:
            GenerationResult with compact and line-formatted content

        Raises:
            ClaimValidationError: If pre-generation validation finds errors
            ValidationError: If an NPI is malformed
            FormatError: If a date or amount cannot be formatted
        """
        if not isinstance(claim, Claim837PInput):
            claim = Claim837PInput.model_validate(claim)

        findings = validate_claim(claim)
        if has_blocking_findings(findings):
            logger.warning(
                f"837P claim {claim.claim.claim_id} failed validation: "
                f"{sum(1 for f in findings if f.is_error)} error(s)"
            )
            raise ClaimValidationError(findings)

        now = self.clock()
        controls = ControlNumbers.allocate(self.control_numbers)

        body = [
            build_segment(
                "BHT",
                "0019",
                "00",
                sanitize_text(claim.claim.claim_id)[:BHT_REFERENCE_LENGTH],
                format_date(now),
                format_time(now),
                CLAIM_OR_ENCOUNTER,
            ),
            *self._submitter_loop(claim),
            *self._receiver_loop(claim),
            *self._billing_provider_loop(claim),
            *self._subscriber_loop(claim),
            *self._claim_loop(claim),
            *self._rendering_provider_loop(claim),
        ]
        for number, line in enumerate(claim.service_lines, start=1):
            body.extend(self._service_line_loop(claim, number, line))

        return self.assemble(
            body,
            controls,
            now,
            sender_id=claim.submitter.submitter_id,
            receiver_id=claim.receiver.identifier,
            warnings=[f for f in findings if not f.is_error],
        )

    def _submitter_loop(self, claim: Claim837PInput) -> list[str]:
        submitter = claim.submitter
        contact = [
            "IC",
            sanitize_text(submitter.contact_name),
            "TE",
            digits_only(submitter.contact_phone),
        ]
        if submitter.contact_email:
            contact += ["EM", sanitize_text(submitter.contact_email)]
        return [
            build_segment(
                "NM1", "41", "2", sanitize_text(submitter.name),
                "", "", "", "", "46", sanitize_text(submitter.submitter_id),
            ),
            build_segment("PER", *contact),
        ]

    def _receiver_loop(self, claim: Claim837PInput) -> list[str]:
        return [
            build_segment(
                "NM1", "40", "2", sanitize_text(claim.receiver.name),
                "", "", "", "", "46", sanitize_text(claim.receiver.identifier),
            )
        ]

    def _billing_provider_loop(self, claim: Claim837PInput) -> list[str]:
        provider = claim.billing_provider
        return [
            build_segment("HL", "1", "", "20", "1"),
            build_segment("PRV", "BI", "PXC", sanitize_text(provider.taxonomy_code)),
            build_segment(
                "NM1", "85", "2", sanitize_text(provider.name),
                "", "", "", "", "XX", format_npi(provider.npi),
            ),
            _address_line(provider.address1, provider.address2),
            build_segment(
                "N4", sanitize_text(provider.city), provider.state, digits_only(provider.zip)
            ),
            build_segment("REF", "EI", format_tax_id(provider.tax_id)),
        ]

    def _subscriber_loop(self, claim: Claim837PInput) -> list[str]:
        patient = claim.patient
        return [
            build_segment("HL", "2", "1", "22", "0"),
            # SBR01 primary, SBR02 self
            build_segment(
                "SBR", "P", "18", "", "", "", "", "", "",
                sanitize_text(claim.claim_filing_indicator),
            ),
            build_segment(
                "NM1", "IL", "1",
                sanitize_text(patient.last_name), sanitize_text(patient.first_name),
                "", "", "", "MI", sanitize_text(patient.member_id),
            ),
            _address_line(patient.address1, patient.address2),
            build_segment(
                "N4", sanitize_text(patient.city), patient.state, digits_only(patient.zip)
            ),
            build_segment(
                "DMG", "D8", format_date(patient.date_of_birth),
                normalize_gender(patient.gender),
            ),
            build_segment(
                "NM1", "PR", "2", sanitize_text(claim.payer.name),
                "", "", "", "", "PI", sanitize_text(claim.payer.identifier),
            ),
        ]

    def _claim_loop(self, claim: Claim837PInput) -> list[str]:
        details = claim.claim
        segments = [
            # CLM06-09: provider signature on file, assignment accepted,
            # benefits assigned, release of information
            build_segment(
                "CLM",
                sanitize_text(details.claim_id)[:CLM_ID_LENGTH],
                format_amount(details.total_charge),
                "",
                "",
                composite(
                    sanitize_text(details.place_of_service),
                    FACILITY_QUALIFIER,
                    sanitize_text(details.frequency_code),
                ),
                "Y",
                "A",
                "Y",
                "I",
            )
        ]
        if details.prior_auth_number:
            segments.append(
                build_segment("REF", "G1", sanitize_text(details.prior_auth_number))
            )
        segments.append(
            build_segment("DTP", "472", "D8", format_date(details.date_of_service))
        )

        diagnoses = [
            composite(PRINCIPAL_DIAGNOSIS if index == 0 else OTHER_DIAGNOSIS,
                      strip_diagnosis_code(code))
            for index, code in enumerate(details.diagnosis_codes[:MAX_HI_CODES])
        ]
        segments.append(build_segment("HI", *diagnoses))
        return segments

    def _rendering_provider_loop(self, claim: Claim837PInput) -> list[str]:
        rendering = claim.rendering_provider
        if rendering is None or not rendering.npi:
            return []
        return [
            build_segment(
                "NM1", "82", "1",
                sanitize_text(rendering.last_name), sanitize_text(rendering.first_name),
                "", "", "", "XX", format_npi(rendering.npi),
            ),
            build_segment("PRV", "PE", "PXC", sanitize_text(rendering.taxonomy_code)),
        ]

    def _service_line_loop(
        self, claim: Claim837PInput, number: int, line: ServiceLine
    ) -> list[str]:
        procedure = composite("HC", sanitize_text(line.cpt_code), *line.modifiers)
        pointers = composite(*line.diagnosis_pointers)
        service_date = line.date_of_service or claim.claim.date_of_service
        return [
            build_segment("LX", number),
            build_segment(
                "SV1",
                procedure,
                format_amount(line.charge_amount),
                "UN",
                format_quantity(line.units),
                "",
                "",
                pointers,
            ),
            build_segment("DTP", "472", "D8", format_date(service_date)),
        ]


def _address_line(address1: str, address2: str | None) -> str:
    if address2 and sanitize_text(address2):
        return build_segment("N3", sanitize_text(address1), sanitize_text(address2))
    return build_segment("N3", sanitize_text(address1))


def generate_837p(claim: Claim837PInput | Mapping[str, Any], **kwargs: Any) -> str:
    """Convenience function to generate a compact 837P document.

    Args:
        claim: Claim model or mapping
        **kwargs: Passed to ``EDI837PGenerator`` (control_numbers, clock,
            usage_indicator, id_qualifier)

    Returns:
        The interchange text with segments back to back
    """
    return EDI837PGenerator(**kwargs).generate(claim).content
