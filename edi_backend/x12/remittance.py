"""Typed document tree for parsed 835 remittance advice.

Loop reference (005010X221A1):
- Envelope: ISA/GS headers
- Loop 1000A: Payer identification (N1*PR)
- Loop 1000B: Payee identification (N1*PE)
- Loop 2100: Claim payment information (CLP)
- Loop 2110: Service payment information (SVC)
- PLB: Provider level adjustments

Amounts are floats, as read from the document. Instances are built once
by the parser and treated as read-only afterwards.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from .validator import Diagnostic, Severity


@dataclass
class Address:
    """N3/N4 address."""

    line1: str = ""
    line2: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    country: str = ""


@dataclass
class ContactInfo:
    """PER contact. Communication numbers are filled by qualifier."""

    function_code: str = ""
    name: str = ""
    phone: str = ""
    phone_extension: str = ""
    fax: str = ""
    email: str = ""
    url: str = ""


@dataclass
class ReferenceNumber:
    """REF qualifier/value pair."""

    qualifier: str
    value: str


@dataclass
class SupplementalAmount:
    """AMT qualifier/amount pair."""

    qualifier: str
    amount: float


@dataclass
class ISAHeader:
    """Interchange control header fields, identifiers stripped of padding."""

    authorization_qualifier: str = ""
    authorization_info: str = ""
    security_qualifier: str = ""
    security_info: str = ""
    sender_qualifier: str = ""
    sender_id: str = ""
    receiver_qualifier: str = ""
    receiver_id: str = ""
    date: str = ""
    time: str = ""
    repetition_separator: str = ""
    version_number: str = ""
    control_number: str = ""
    acknowledgment_requested: str = ""
    usage_indicator: str = ""
    component_separator: str = ""


@dataclass
class GSHeader:
    """Functional group header fields."""

    functional_identifier_code: str = ""
    sender_code: str = ""
    receiver_code: str = ""
    date: str = ""
    time: str = ""
    control_number: str = ""
    responsible_agency_code: str = ""
    version_code: str = ""


@dataclass
class Envelope:
    isa: ISAHeader = field(default_factory=ISAHeader)
    gs: GSHeader = field(default_factory=GSHeader)


@dataclass
class PayerIdentification:
    """Loop 1000A."""

    name: str = ""
    identifier_qualifier: str = ""
    identifier_code: str = ""
    address: Address | None = None
    technical_contact: ContactInfo | None = None
    web_contact: ContactInfo | None = None
    additional_ids: list[ReferenceNumber] = field(default_factory=list)


@dataclass
class PayeeIdentification:
    """Loop 1000B."""

    name: str = ""
    identifier_qualifier: str = ""
    identifier_code: str = ""
    npi: str = ""
    tax_id: str = ""
    address: Address | None = None
    additional_ids: list[ReferenceNumber] = field(default_factory=list)


@dataclass
class AdjustmentDetail:
    """One reason/amount/quantity triple of a CAS segment."""

    reason_code: str
    amount: float
    quantity: float | None = None


@dataclass
class ClaimAdjustment:
    """CAS segment: a group code and its reason triples."""

    group_code: str
    details: list[AdjustmentDetail] = field(default_factory=list)

    @property
    def total(self) -> float:
        return sum(d.amount for d in self.details)


@dataclass
class PartyName:
    """NM1 individual or organization name."""

    entity_type: str = "1"
    last_name: str = ""
    first_name: str = ""
    middle_name: str = ""
    suffix: str = ""
    identifier_qualifier: str = ""
    identifier: str = ""

    @property
    def display_name(self) -> str:
        """LAST, FIRST, MIDDLE with empty parts left out."""
        parts = [self.last_name, self.first_name, self.middle_name]
        return ", ".join(p for p in parts if p)


@dataclass
class InpatientAdjudication:
    """MIA segment."""

    covered_days: float | None = None
    pps_operating_outlier_amount: float | None = None
    lifetime_psychiatric_days: float | None = None
    claim_drg_amount: float | None = None


@dataclass
class OutpatientAdjudication:
    """MOA segment."""

    reimbursement_rate: float | None = None
    hcpcs_payable_amount: float | None = None
    remark_codes: list[str] = field(default_factory=list)
    esrd_payment_amount: float | None = None
    nonpayable_professional_component: float | None = None


@dataclass
class ProcedureCode:
    """SVC01/SVC06 composite procedure identifier."""

    qualifier: str = "HC"
    code: str = ""
    modifiers: list[str] = field(default_factory=list)
    description: str = ""


@dataclass
class RemarkCode:
    """LQ segment."""

    qualifier: str
    code: str


@dataclass
class ServiceLinePayment:
    """Loop 2110."""

    procedure: ProcedureCode
    charged_amount: float = 0.0
    paid_amount: float = 0.0
    revenue_code: str = ""
    units_paid: float | None = None
    original_procedure: ProcedureCode | None = None
    units_billed: float | None = None
    service_date: str = ""
    service_date_end: str = ""
    allowed_amount: float | None = None
    adjustments: list[ClaimAdjustment] = field(default_factory=list)
    reference_numbers: list[ReferenceNumber] = field(default_factory=list)
    supplemental_amounts: list[SupplementalAmount] = field(default_factory=list)
    remark_codes: list[RemarkCode] = field(default_factory=list)


@dataclass
class ClaimPayment:
    """Loop 2100."""

    patient_account_number: str = ""
    claim_status: str = ""
    total_charged_amount: float = 0.0
    total_paid_amount: float = 0.0
    patient_responsibility_amount: float = 0.0
    claim_filing_indicator: str = ""
    payer_claim_control_number: str = ""
    facility_code: str = ""
    frequency_code: str = ""
    drg_code: str = ""
    adjustments: list[ClaimAdjustment] = field(default_factory=list)
    patient_name: PartyName = field(default_factory=PartyName)
    insured_name: PartyName | None = None
    corrected_patient_name: PartyName | None = None
    rendering_provider_npi: str = ""
    crossover_carrier: str = ""
    inpatient_adjudication: InpatientAdjudication | None = None
    outpatient_adjudication: OutpatientAdjudication | None = None
    statement_from_date: str = ""
    statement_to_date: str = ""
    coverage_expiration_date: str = ""
    original_reference_number: str = ""
    payer_claim_id: str = ""
    institutional_bill_type: str = ""
    medical_record_number: str = ""
    reference_numbers: list[ReferenceNumber] = field(default_factory=list)
    supplemental_amounts: list[SupplementalAmount] = field(default_factory=list)
    service_lines: list[ServiceLinePayment] = field(default_factory=list)

    def supplemental_amount(self, qualifier: str) -> float | None:
        """Return the first AMT value with ``qualifier``."""
        for amount in self.supplemental_amounts:
            if amount.qualifier == qualifier:
                return amount.amount
        return None


@dataclass
class ProviderAdjustmentDetail:
    """One reason/amount pair of a PLB segment."""

    reason_code: str
    amount: float
    reference_id: str = ""


@dataclass
class ProviderAdjustment:
    """PLB segment."""

    provider_identifier: str = ""
    fiscal_period_date: str = ""
    adjustments: list[ProviderAdjustmentDetail] = field(default_factory=list)


@dataclass
class Transaction835:
    """One ST/SE transaction set."""

    control_number: str = ""
    total_payment_amount: float = 0.0
    credit_debit_flag: str = ""
    payment_method: str = ""
    payment_format: str = ""
    sender_bank_id: str = ""
    sender_account_number: str = ""
    receiver_bank_id: str = ""
    receiver_account_number: str = ""
    check_or_eft_number: str = ""
    trace_originator_id: str = ""
    trace_supplemental_id: str = ""
    payment_date: str = ""
    payer: PayerIdentification = field(default_factory=PayerIdentification)
    payee: PayeeIdentification = field(default_factory=PayeeIdentification)
    claims: list[ClaimPayment] = field(default_factory=list)
    provider_adjustments: list[ProviderAdjustment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class ParseResult:
    """Outcome of parsing one 835 document."""

    envelope: Envelope = field(default_factory=Envelope)
    transactions: list[Transaction835] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    segment_count: int = 0

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "envelope": asdict(self.envelope),
            "transactions": [t.to_dict() for t in self.transactions],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "segment_count": self.segment_count,
            "is_valid": self.is_valid,
        }
