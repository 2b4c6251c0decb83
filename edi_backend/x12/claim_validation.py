"""Pre-generation validation for 837P claims and 270 inquiries.

Findings carry the dotted path of the offending field so that API
clients can attach messages to form inputs.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Mapping

from ..schemas.claim import Claim837PInput
from ..schemas.eligibility import Eligibility270Input
from ..utils.sanitization import digits_only, sanitize_text
from .segments import INTERCHANGE_ID_LENGTH

MAX_DIAGNOSIS_CODES = 12
MAX_DIAGNOSIS_POINTERS = 4
MAX_MODIFIERS = 4

_TAX_ID_RE = re.compile(r"^\d{9}$")
_NPI_RE = re.compile(r"^\d{10}$")
_PROCEDURE_RE = re.compile(r"^[0-9A-Z]{5}$")
_MODIFIER_RE = re.compile(r"^[0-9A-Z]{2}$")
_STATE_RE = re.compile(r"^[A-Z]{2}$")
_SERVICE_TYPE_RE = re.compile(r"^[0-9A-Z]{1,2}$")
_GENDER_VALUES = {"M", "F", "U", "MALE", "FEMALE", "UNKNOWN"}

# Line totals may differ from the claim total by rounding only
CHARGE_TOLERANCE = Decimal("0.01")


@dataclass
class ClaimFinding:
    """One validation finding."""

    field: str
    message: str
    severity: str = "error"

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


class _Findings(list):
    """Finding list with shorthand for the common required-field checks."""

    def error(self, field: str, message: str) -> None:
        self.append(ClaimFinding(field, message, "error"))

    def warning(self, field: str, message: str) -> None:
        self.append(ClaimFinding(field, message, "warning"))

    def require(self, field: str, value: str | None, message: str) -> None:
        if not value or not value.strip():
            self.error(field, message)

    def npi(self, field: str, value: str | None, label: str) -> None:
        if not _NPI_RE.match(digits_only(value)):
            self.error(field, f"{label} NPI must be 10 digits")

    def state(self, field: str, value: str | None, label: str) -> None:
        if not value or not _STATE_RE.match(value):
            self.error(field, f"{label} state must be a 2-letter code")

    def interchange_id(self, field: str, value: str | None, label: str) -> None:
        if len(sanitize_text(value)) > INTERCHANGE_ID_LENGTH:
            self.error(
                field, f"{label} must be at most {INTERCHANGE_ID_LENGTH} characters"
            )


def has_blocking_findings(findings: list[ClaimFinding]) -> bool:
    """Return True if any finding is error severity."""
    return any(f.is_error for f in findings)


def validate_claim(claim: Claim837PInput | Mapping[str, Any]) -> list[ClaimFinding]:
    """Check an 837P claim for everything the generator cannot fix itself.

    Args:
        claim: Claim model, or a mapping accepted by ``Claim837PInput``

    Returns:
        Findings; errors block generation, warnings do not.

    Raises:
        pydantic.ValidationError: If a mapping does not fit the model.
    """
    if not isinstance(claim, Claim837PInput):
        claim = Claim837PInput.model_validate(claim)

    findings = _Findings()

    submitter = claim.submitter
    findings.require("submitter.name", submitter.name, "Submitter name is required")
    findings.require(
        "submitter.submitter_id", submitter.submitter_id, "Submitter ID is required"
    )
    findings.require(
        "submitter.contact_name",
        submitter.contact_name,
        "Submitter contact name is required",
    )
    if len(digits_only(submitter.contact_phone)) < 10:
        findings.error(
            "submitter.contact_phone",
            "Submitter contact phone must be at least 10 digits",
        )

    findings.require("receiver.name", claim.receiver.name, "Receiver name is required")
    findings.require(
        "receiver.identifier", claim.receiver.identifier, "Receiver ID is required"
    )
    findings.interchange_id(
        "submitter.submitter_id", submitter.submitter_id, "Submitter ID"
    )
    findings.interchange_id("receiver.identifier", claim.receiver.identifier, "Receiver ID")
    findings.require("payer.name", claim.payer.name, "Payer name is required")
    findings.require("payer.identifier", claim.payer.identifier, "Payer ID is required")

    provider = claim.billing_provider
    findings.npi("billing_provider.npi", provider.npi, "Billing provider")
    if not _TAX_ID_RE.match(digits_only(provider.tax_id)):
        findings.error(
            "billing_provider.tax_id",
            "Billing provider Tax ID (EIN) must be 9 digits",
        )
    findings.require(
        "billing_provider.taxonomy_code",
        provider.taxonomy_code,
        "Billing provider taxonomy code is required",
    )
    findings.require(
        "billing_provider.name", provider.name, "Billing provider name is required"
    )
    findings.require(
        "billing_provider.address1",
        provider.address1,
        "Billing provider street address is required",
    )
    findings.require(
        "billing_provider.city", provider.city, "Billing provider city is required"
    )
    findings.state("billing_provider.state", provider.state, "Billing provider")
    findings.require(
        "billing_provider.zip", provider.zip, "Billing provider ZIP code is required"
    )

    rendering = claim.rendering_provider
    if rendering is not None and rendering.npi:
        findings.npi("rendering_provider.npi", rendering.npi, "Rendering provider")
        findings.require(
            "rendering_provider.last_name",
            rendering.last_name,
            "Rendering provider last name is required",
        )
        findings.require(
            "rendering_provider.first_name",
            rendering.first_name,
            "Rendering provider first name is required",
        )
        findings.require(
            "rendering_provider.taxonomy_code",
            rendering.taxonomy_code,
            "Rendering provider taxonomy code is required",
        )

    patient = claim.patient
    findings.require(
        "patient.first_name", patient.first_name, "Patient first name is required"
    )
    findings.require(
        "patient.last_name", patient.last_name, "Patient last name is required"
    )
    findings.require(
        "patient.member_id", patient.member_id, "Patient member ID is required"
    )
    findings.require(
        "patient.address1", patient.address1, "Patient street address is required"
    )
    findings.require("patient.city", patient.city, "Patient city is required")
    findings.state("patient.state", patient.state, "Patient")
    findings.require("patient.zip", patient.zip, "Patient ZIP code is required")
    if (patient.gender or "").strip().upper() not in _GENDER_VALUES:
        findings.warning(
            "patient.gender",
            f"Patient gender '{patient.gender}' is not recognized; sending U",
        )
    if patient.date_of_birth > claim.claim.date_of_service:
        findings.error(
            "patient.date_of_birth",
            "Patient date of birth is after the date of service",
        )

    details = claim.claim
    findings.require("claim.claim_id", details.claim_id, "Claim ID is required")
    if details.total_charge <= 0:
        findings.error(
            "claim.total_charge", "Total charge must be a positive dollar amount"
        )
    findings.require(
        "claim.place_of_service",
        details.place_of_service,
        "Place of service code is required",
    )
    diagnosis_count = len(details.diagnosis_codes)
    if diagnosis_count == 0:
        findings.error(
            "claim.diagnosis_codes", "At least one ICD-10 diagnosis code is required"
        )
    elif diagnosis_count > MAX_DIAGNOSIS_CODES:
        findings.error(
            "claim.diagnosis_codes",
            f"Maximum {MAX_DIAGNOSIS_CODES} diagnosis codes per claim",
        )

    if not claim.service_lines:
        findings.error("service_lines", "At least one service line is required")
        return list(findings)

    line_total = sum((line.charge_amount for line in claim.service_lines), Decimal("0"))
    if abs(line_total - details.total_charge) > CHARGE_TOLERANCE:
        findings.warning(
            "service_lines",
            f"Service line charges (${line_total:.2f}) do not match "
            f"claim total (${details.total_charge:.2f})",
        )

    for index, line in enumerate(claim.service_lines):
        prefix = f"service_lines[{index}]"
        label = f"Line {index + 1}"

        if not _PROCEDURE_RE.match(line.cpt_code or ""):
            findings.error(
                f"{prefix}.cpt_code",
                f"{label}: CPT code must be 5 alphanumeric characters",
            )
        if line.charge_amount <= 0:
            findings.error(
                f"{prefix}.charge_amount", f"{label}: Charge amount must be positive"
            )
        if line.units <= 0:
            findings.error(f"{prefix}.units", f"{label}: Units must be positive")

        if len(line.diagnosis_pointers) > MAX_DIAGNOSIS_POINTERS:
            findings.error(
                f"{prefix}.diagnosis_pointers",
                f"{label}: Maximum {MAX_DIAGNOSIS_POINTERS} diagnosis pointers",
            )
        for pointer in line.diagnosis_pointers:
            if pointer < 1 or pointer > diagnosis_count:
                findings.error(
                    f"{prefix}.diagnosis_pointers",
                    f"{label}: Pointer {pointer} exceeds diagnosis count "
                    f"({diagnosis_count})",
                )

        if len(line.modifiers) > MAX_MODIFIERS:
            findings.error(
                f"{prefix}.modifiers", f"{label}: Maximum {MAX_MODIFIERS} modifiers"
            )
        for position, modifier in enumerate(line.modifiers):
            if not _MODIFIER_RE.match(modifier):
                findings.error(
                    f"{prefix}.modifiers[{position}]",
                    f'{label}: Modifier "{modifier}" must be 2 alphanumeric characters',
                )

    return list(findings)


def validate_inquiry(
    inquiry: Eligibility270Input | Mapping[str, Any],
) -> list[ClaimFinding]:
    """Check a 270 eligibility inquiry before generation.

    Raises:
        pydantic.ValidationError: If a mapping does not fit the model.
    """
    if not isinstance(inquiry, Eligibility270Input):
        inquiry = Eligibility270Input.model_validate(inquiry)

    findings = _Findings()
    findings.require("submitter_id", inquiry.submitter_id, "Submitter ID is required")
    findings.require("payer.name", inquiry.payer.name, "Payer name is required")
    findings.require("payer.identifier", inquiry.payer.identifier, "Payer ID is required")
    findings.interchange_id("submitter_id", inquiry.submitter_id, "Submitter ID")
    findings.interchange_id("payer.identifier", inquiry.payer.identifier, "Payer ID")
    findings.require("provider.name", inquiry.provider.name, "Provider name is required")
    findings.npi("provider.npi", inquiry.provider.npi, "Provider")

    subscriber = inquiry.subscriber
    findings.require(
        "subscriber.member_id", subscriber.member_id, "Subscriber member ID is required"
    )
    findings.require(
        "subscriber.first_name",
        subscriber.first_name,
        "Subscriber first name is required",
    )
    findings.require(
        "subscriber.last_name", subscriber.last_name, "Subscriber last name is required"
    )
    if (subscriber.gender or "").strip().upper() not in _GENDER_VALUES:
        findings.warning(
            "subscriber.gender",
            f"Subscriber gender '{subscriber.gender}' is not recognized; sending U",
        )
    if not _SERVICE_TYPE_RE.match(inquiry.service_type_code or ""):
        findings.error(
            "service_type_code",
            "Service type code must be 1-2 alphanumeric characters",
        )
    return list(findings)
