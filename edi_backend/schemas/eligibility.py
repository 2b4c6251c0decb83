"""Pydantic schemas for 270 eligibility inquiry input."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .. import config
from .claim import PartyIdentity, coerce_flexible_date


class InformationReceiver(BaseModel):
    """Loop 2100B provider asking about eligibility."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str
    npi: str


class Subscriber(BaseModel):
    """Loop 2100C subscriber being verified."""

    model_config = ConfigDict(str_strip_whitespace=True)

    member_id: str
    first_name: str
    last_name: str
    date_of_birth: date
    gender: str = "U"

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def parse_birth_date(cls, v):
        return coerce_flexible_date(v)


class Eligibility270Input(BaseModel):
    """Complete input for one 270 eligibility inquiry."""

    model_config = ConfigDict(str_strip_whitespace=True)

    submitter_id: str
    payer: PartyIdentity
    provider: InformationReceiver
    subscriber: Subscriber
    date_of_service: date
    service_type_code: str = Field(default_factory=lambda: config.EDI_SERVICE_TYPE_CODE)
    reference_id: str | None = None
    trace_number: str | None = None

    @field_validator("date_of_service", mode="before")
    @classmethod
    def parse_service_date(cls, v):
        return coerce_flexible_date(v)
