"""Pydantic schemas for 837P claim generation input.

These models only coerce types. X12-specific checks (NPI length,
pointer ranges, code formats) live in ``x12.claim_validation`` so they can
be reported as field-level findings instead of a single parse failure.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .. import config
from ..utils.date_parser import to_date


def coerce_flexible_date(value):
    """Accept ISO, MM/DD/YYYY and CCYYMMDD strings for date fields.

    Unparseable values pass through so pydantic reports them.
    """
    return to_date(value) or value


class PartyIdentity(BaseModel):
    """A receiver or payer: organization name plus identifier."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str
    identifier: str


class Submitter(BaseModel):
    """Loop 1000A submitter and its EDI contact."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str
    submitter_id: str
    contact_name: str
    contact_phone: str
    contact_email: str | None = None


class BillingProvider(BaseModel):
    """Loop 2010AA billing provider."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str
    npi: str
    tax_id: str
    taxonomy_code: str
    address1: str
    address2: str | None = None
    city: str
    state: str
    zip: str

    @field_validator("state")
    @classmethod
    def uppercase_state(cls, v: str) -> str:
        return v.upper()


class RenderingProvider(BaseModel):
    """Loop 2310B rendering provider. Omitted from output without an NPI."""

    model_config = ConfigDict(str_strip_whitespace=True)

    npi: str | None = None
    last_name: str = ""
    first_name: str = ""
    taxonomy_code: str | None = None


class Patient(BaseModel):
    """Loop 2010BA subscriber, who is also the patient."""

    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: str
    last_name: str
    date_of_birth: date
    gender: str = "U"
    member_id: str
    address1: str
    address2: str | None = None
    city: str
    state: str
    zip: str

    @field_validator("state")
    @classmethod
    def uppercase_state(cls, v: str) -> str:
        return v.upper()

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def parse_birth_date(cls, v):
        return coerce_flexible_date(v)


class ClaimDetails(BaseModel):
    """Loop 2300 claim information."""

    model_config = ConfigDict(str_strip_whitespace=True)

    claim_id: str
    total_charge: Decimal
    place_of_service: str
    frequency_code: str = "1"
    date_of_service: date
    prior_auth_number: str | None = None
    diagnosis_codes: list[str] = Field(default_factory=list)

    @field_validator("date_of_service", mode="before")
    @classmethod
    def parse_service_date(cls, v):
        return coerce_flexible_date(v)

    @field_validator("diagnosis_codes")
    @classmethod
    def normalize_diagnosis_codes(cls, v: list[str]) -> list[str]:
        """Drop blank entries and uppercase the codes."""
        return [code.strip().upper() for code in v if code and code.strip()]


class ServiceLine(BaseModel):
    """Loop 2400 service line."""

    model_config = ConfigDict(str_strip_whitespace=True)

    cpt_code: str
    modifiers: list[str] = Field(default_factory=list)
    charge_amount: Decimal
    units: Decimal = Decimal("1")
    date_of_service: date | None = None
    diagnosis_pointers: list[int] = Field(default_factory=lambda: [1])

    @field_validator("cpt_code")
    @classmethod
    def uppercase_code(cls, v: str) -> str:
        return v.upper()

    @field_validator("date_of_service", mode="before")
    @classmethod
    def parse_service_date(cls, v):
        return coerce_flexible_date(v)

    @field_validator("modifiers")
    @classmethod
    def normalize_modifiers(cls, v: list[str]) -> list[str]:
        """Drop blank modifiers; absent modifiers are omitted, not padded."""
        return [m.strip().upper() for m in v if m and m.strip()]

    @field_validator("diagnosis_pointers")
    @classmethod
    def default_pointers(cls, v: list[int]) -> list[int]:
        return v or [1]


class Claim837PInput(BaseModel):
    """Complete input for one 837P professional claim."""

    submitter: Submitter
    receiver: PartyIdentity
    billing_provider: BillingProvider
    rendering_provider: RenderingProvider | None = None
    payer: PartyIdentity
    patient: Patient
    claim: ClaimDetails
    service_lines: list[ServiceLine] = Field(default_factory=list)
    claim_filing_indicator: str = Field(
        default_factory=lambda: config.EDI_CLAIM_FILING_INDICATOR
    )
