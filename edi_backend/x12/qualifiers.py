"""Qualifier code sets and per-segment dispatch tables.

Each qualifier domain is a closed ``str`` enumeration so that a parsed
value compares equal to its raw code. Segment handlers never compare raw
strings inline: they look the qualifier up in one of the tables below.
A qualifier missing from a table is an explicit, visible gap.
"""

from __future__ import annotations

from enum import Enum


class EntityIdentifier(str, Enum):
    """N1/NM1 entity identifier codes (N101 / NM101)."""

    PAYER = "PR"
    PAYEE = "PE"
    PATIENT = "QC"
    INSURED = "IL"
    CORRECTED_PATIENT = "74"
    RENDERING_PROVIDER = "82"
    CROSSOVER_CARRIER = "TT"
    SUBMITTER = "41"
    RECEIVER = "40"
    BILLING_PROVIDER = "85"
    INFORMATION_RECEIVER = "1P"


class IdentificationQualifier(str, Enum):
    """Identification code qualifiers (N103 / NM108)."""

    NPI = "XX"
    FEDERAL_TAX_ID = "FI"
    PAYOR_ID = "PI"
    MEMBER_ID = "MI"
    ETIN = "46"


class ReferenceQualifier(str, Enum):
    """REF01 reference identification qualifiers."""

    ORIGINAL_REFERENCE = "F8"
    PAYER_CLAIM_ID = "1K"
    BILL_TYPE = "BLT"
    MEDICAL_RECORD = "EA"
    TAX_ID = "TJ"
    PAYEE_ID = "PQ"
    NPI = "XX"
    PRIOR_AUTHORIZATION = "G1"
    EMPLOYER_ID = "EI"


class AmountQualifier(str, Enum):
    """AMT01 amount qualifiers."""

    ALLOWED_ACTUAL = "B6"
    COVERAGE = "AU"
    TAX = "T"
    PATIENT_PAID = "F5"


class DateQualifier(str, Enum):
    """DTM01 / DTP01 date-time qualifiers."""

    STATEMENT_FROM = "232"
    STATEMENT_TO = "233"
    COVERAGE_EXPIRATION = "036"
    SERVICE = "472"
    PRODUCTION = "405"
    PLAN = "291"


class DateFormat(str, Enum):
    """Date-time period format qualifiers (DTM05 / DTP02)."""

    DATE = "D8"
    RANGE = "RD8"


class ContactFunction(str, Enum):
    """PER01 contact function codes."""

    TECHNICAL = "CX"
    BILLING = "BL"
    INFORMATION = "IC"


class CommunicationQualifier(str, Enum):
    """PER communication number qualifiers."""

    PHONE = "TE"
    EXTENSION = "EX"
    FAX = "FX"
    EMAIL = "EM"
    URL = "UR"


class AdjustmentGroup(str, Enum):
    """CAS01 claim adjustment group codes."""

    CONTRACTUAL = "CO"
    PATIENT_RESPONSIBILITY = "PR"
    OTHER = "OA"
    PAYER_INITIATED = "PI"
    CORRECTION = "CR"


class ClaimStatusCode(str, Enum):
    """CLP02 claim status codes."""

    PRIMARY = "1"
    SECONDARY = "2"
    TERTIARY = "3"
    DENIED = "4"
    PRIMARY_FORWARDED = "19"
    SECONDARY_FORWARDED = "20"
    TERTIARY_FORWARDED = "21"
    REVERSAL = "22"
    NOT_OUR_CLAIM = "23"
    REJECTED = "25"


class PaymentMethod(str, Enum):
    """BPR04 payment method codes."""

    CHECK = "CHK"
    ACH = "ACH"
    WIRE = "FWT"
    FINANCIAL_INSTITUTION_OPTION = "BOP"
    NON_PAYMENT = "NON"


# N1*PR: PER01 values routed to the technical contact; others are the web contact
TECHNICAL_CONTACT_FUNCTIONS = frozenset(
    {ContactFunction.TECHNICAL.value, ContactFunction.BILLING.value}
)

# PER03..PER08 pairs: qualifier -> ContactInfo attribute
CONTACT_FIELDS: dict[str, str] = {
    CommunicationQualifier.PHONE.value: "phone",
    CommunicationQualifier.EXTENSION.value: "phone_extension",
    CommunicationQualifier.FAX.value: "fax",
    CommunicationQualifier.EMAIL.value: "email",
    CommunicationQualifier.URL.value: "url",
}

# N1*PE: N103 qualifier -> PayeeIdentification attribute
PAYEE_ID_FIELDS: dict[str, str] = {
    IdentificationQualifier.NPI.value: "npi",
    IdentificationQualifier.FEDERAL_TAX_ID.value: "tax_id",
}

# REF under N1*PE: always accumulated, and these also set a named attribute
PAYEE_REF_FIELDS: dict[str, str] = {
    ReferenceQualifier.TAX_ID.value: "tax_id",
    ReferenceQualifier.PAYEE_ID.value: "npi",
    ReferenceQualifier.NPI.value: "npi",
}

# Loop 2100 NM1: qualifier -> (ClaimPayment attribute, take identifier only)
CLAIM_NAME_FIELDS: dict[str, tuple[str, bool]] = {
    EntityIdentifier.PATIENT.value: ("patient_name", False),
    EntityIdentifier.INSURED.value: ("insured_name", False),
    EntityIdentifier.CORRECTED_PATIENT.value: ("corrected_patient_name", False),
    EntityIdentifier.RENDERING_PROVIDER.value: ("rendering_provider_npi", True),
    EntityIdentifier.CROSSOVER_CARRIER.value: ("crossover_carrier", True),
}

# Loop 2100 REF: named field OR the generic reference list
CLAIM_REF_FIELDS: dict[str, str] = {
    ReferenceQualifier.ORIGINAL_REFERENCE.value: "original_reference_number",
    ReferenceQualifier.PAYER_CLAIM_ID.value: "payer_claim_id",
    ReferenceQualifier.BILL_TYPE.value: "institutional_bill_type",
    ReferenceQualifier.MEDICAL_RECORD.value: "medical_record_number",
}

# Loop 2100 AMT: the supplemental list only
CLAIM_AMT_FIELDS: dict[str, str] = {}

# Loop 2110 REF: the reference list only
LINE_REF_FIELDS: dict[str, str] = {}

# Loop 2110 AMT: the supplemental list AND these named fields
LINE_AMT_FIELDS: dict[str, str] = {
    AmountQualifier.ALLOWED_ACTUAL.value: "allowed_amount",
}

# Loop 2100 DTM: qualifier -> (start attribute, end attribute for ranges)
CLAIM_DATE_FIELDS: dict[str, tuple[str, str | None]] = {
    DateQualifier.STATEMENT_FROM.value: ("statement_from_date", "statement_to_date"),
    DateQualifier.STATEMENT_TO.value: ("statement_to_date", None),
    DateQualifier.COVERAGE_EXPIRATION.value: ("coverage_expiration_date", None),
}

# Loop 2110 DTM
LINE_DATE_FIELDS: dict[str, tuple[str, str | None]] = {
    DateQualifier.SERVICE.value: ("service_date", "service_date_end"),
}

CLAIM_STATUS_DESCRIPTIONS: dict[str, str] = {
    ClaimStatusCode.PRIMARY.value: "Processed as Primary",
    ClaimStatusCode.SECONDARY.value: "Processed as Secondary",
    ClaimStatusCode.TERTIARY.value: "Processed as Tertiary",
    ClaimStatusCode.DENIED.value: "Denied",
    ClaimStatusCode.PRIMARY_FORWARDED.value: "Processed as Primary, Forwarded to Additional Payer(s)",
    ClaimStatusCode.SECONDARY_FORWARDED.value: "Processed as Secondary, Forwarded to Additional Payer(s)",
    ClaimStatusCode.TERTIARY_FORWARDED.value: "Processed as Tertiary, Forwarded to Additional Payer(s)",
    ClaimStatusCode.REVERSAL.value: "Reversal of Previous Payment",
    ClaimStatusCode.NOT_OUR_CLAIM.value: "Not Our Claim, Forwarded to Additional Payer(s)",
    ClaimStatusCode.REJECTED.value: "Reject into/out of adjudication system",
}

ADJUSTMENT_GROUP_DESCRIPTIONS: dict[str, str] = {
    AdjustmentGroup.CONTRACTUAL.value: "Contractual Obligation",
    AdjustmentGroup.PATIENT_RESPONSIBILITY.value: "Patient Responsibility",
    AdjustmentGroup.OTHER.value: "Other Adjustment",
    AdjustmentGroup.PAYER_INITIATED.value: "Payer Initiated Reduction",
    AdjustmentGroup.CORRECTION.value: "Corrections and Reversals",
}

PAYMENT_METHOD_NAMES: dict[str, str] = {
    PaymentMethod.CHECK.value: "Check",
    PaymentMethod.ACH.value: "EFT/ACH",
    PaymentMethod.WIRE.value: "Federal Wire Transfer",
    PaymentMethod.FINANCIAL_INSTITUTION_OPTION.value: "Financial Institution Option",
    PaymentMethod.NON_PAYMENT.value: "Non-Payment Data",
}
