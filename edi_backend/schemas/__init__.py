"""Shared Pydantic schemas for the EDI backend.

This module centralizes generator inputs and request models used by the
routes and the command-line script.
"""

from .claim import (
    BillingProvider,
    Claim837PInput,
    ClaimDetails,
    PartyIdentity,
    Patient,
    RenderingProvider,
    ServiceLine,
    Submitter,
)
from .eligibility import Eligibility270Input, InformationReceiver, Subscriber
from .requests import RawDocumentRequest

__all__ = [
    "BillingProvider",
    "Claim837PInput",
    "ClaimDetails",
    "Eligibility270Input",
    "InformationReceiver",
    "PartyIdentity",
    "Patient",
    "RawDocumentRequest",
    "RenderingProvider",
    "ServiceLine",
    "Submitter",
    "Subscriber",
]
