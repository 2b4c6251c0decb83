"""Payment posting summaries for parsed 835 remittances.

Produces one summary per transaction (check or EFT) with per-claim and
per-line breakdowns, and flags the cases billing staff need to act on:
denials, reversals, reduced units, underpayments and recoupments.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from ..utils.date_parser import display_date
from ..x12.qualifiers import (
    ADJUSTMENT_GROUP_DESCRIPTIONS,
    CLAIM_STATUS_DESCRIPTIONS,
    PAYMENT_METHOD_NAMES,
    AdjustmentGroup,
    AmountQualifier,
    ClaimStatusCode,
)
from ..x12.remittance import (
    ClaimAdjustment,
    ClaimPayment,
    ParseResult,
    ServiceLinePayment,
    Transaction835,
)
from .reason_codes import (
    DenialCategory,
    categorize_denial,
    lookup_carc,
    lookup_plb_reason,
    lookup_rarc,
)

logger = logging.getLogger(__name__)

# PLB reasons that take money back from the provider
RECOUPMENT_REASONS = frozenset({"WO", "WU"})

# Paid amounts within a cent of the expected amount are not underpayments
UNDERPAYMENT_TOLERANCE = 0.01


class FlagType(str, Enum):
    """Conditions surfaced on a payment summary."""

    DENIAL = "DENIAL"
    REVERSAL = "REVERSAL"
    PARTIAL_DENIAL = "PARTIAL_DENIAL"
    UNITS_REDUCED = "UNITS_REDUCED"
    VISIT_LIMIT_EXCEEDED = "VISIT_LIMIT_EXCEEDED"
    NO_PRIOR_AUTH = "NO_PRIOR_AUTH"
    BUNDLED_SERVICE = "BUNDLED_SERVICE"
    MEDICAL_NECESSITY = "MEDICAL_NECESSITY"
    UNDERPAYMENT = "UNDERPAYMENT"
    RECOUPMENT = "RECOUPMENT"
    ZERO_PAYMENT = "ZERO_PAYMENT"


class FlagSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


DENIAL_FLAG_TYPES: dict[DenialCategory, FlagType] = {
    DenialCategory.VISIT_LIMIT: FlagType.VISIT_LIMIT_EXCEEDED,
    DenialCategory.NO_PRIOR_AUTH: FlagType.NO_PRIOR_AUTH,
    DenialCategory.BUNDLED: FlagType.BUNDLED_SERVICE,
    DenialCategory.MEDICAL_NECESSITY: FlagType.MEDICAL_NECESSITY,
    DenialCategory.NOT_COVERED: FlagType.DENIAL,
    DenialCategory.OTHER: FlagType.DENIAL,
}


@dataclass
class SummaryFlag:
    """An alert attached to a summary."""

    type: FlagType
    message: str
    severity: FlagSeverity = FlagSeverity.WARNING
    claim_id: str = ""
    line_index: int | None = None


@dataclass
class AdjustmentSummaryDetail:
    group_code: str
    group_description: str
    reason_code: str
    reason_description: str
    amount: float


@dataclass
class DenialReason:
    """A CARC that explains a denial, with its remark codes."""

    reason_code: str
    description: str
    remark_codes: list[str] = field(default_factory=list)
    remark_descriptions: list[str] = field(default_factory=list)


@dataclass
class ServiceLineSummary:
    cpt_code: str
    modifiers: list[str]
    service_date: str
    charged_amount: float
    allowed_amount: float
    paid_amount: float
    units_billed: float | None
    units_paid: float | None
    patient_responsibility: float
    contractual_adjustment: float
    other_adjustments: float
    adjustment_details: list[AdjustmentSummaryDetail] = field(default_factory=list)
    is_denied: bool = False
    denial_reasons: list[DenialReason] = field(default_factory=list)

    @property
    def units_reduced(self) -> bool:
        return bool(
            self.units_billed and self.units_paid and self.units_paid < self.units_billed
        )


@dataclass
class ClaimSummary:
    patient_account_number: str
    patient_name: str
    claim_status: str
    claim_status_description: str
    charged_amount: float
    allowed_amount: float
    paid_amount: float
    patient_responsibility: float
    contractual_adjustment: float
    other_adjustments: float
    payer_claim_control_number: str = ""
    statement_date_range: str = ""
    service_lines: list[ServiceLineSummary] = field(default_factory=list)
    denial_reasons: list[DenialReason] = field(default_factory=list)
    flags: list[SummaryFlag] = field(default_factory=list)


@dataclass
class ProviderAdjustmentSummary:
    reason_code: str
    reason_description: str
    amount: float
    reference_id: str = ""


@dataclass
class PaymentSummary:
    """Posting summary for one check or EFT."""

    check_or_eft_number: str
    payment_method: str
    payment_date: str
    payer_name: str
    payer_id: str
    payee_name: str
    payee_npi: str
    total_payment_amount: float
    total_charged_amount: float
    total_allowed_amount: float
    total_patient_responsibility: float
    total_contractual_adjustment: float
    total_other_adjustments: float
    provider_adjustment_total: float
    claim_count: int
    paid_claim_count: int
    denied_claim_count: int
    reversal_count: int
    claims: list[ClaimSummary] = field(default_factory=list)
    provider_adjustments: list[ProviderAdjustmentSummary] = field(default_factory=list)
    flags: list[SummaryFlag] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


def summarize_remittance(result: ParseResult) -> list[PaymentSummary]:
    """Summarize every transaction of a parsed 835."""
    return [summarize_transaction(txn) for txn in result.transactions]


def summarize_transaction(txn: Transaction835) -> PaymentSummary:
    """Build the posting summary for one transaction."""
    claims = [summarize_claim(claim) for claim in txn.claims]

    total_charged = sum(c.charged_amount for c in claims)
    provider_adjustments = [
        ProviderAdjustmentSummary(
            reason_code=detail.reason_code,
            reason_description=lookup_plb_reason(detail.reason_code),
            amount=detail.amount,
            reference_id=detail.reference_id,
        )
        for plb in txn.provider_adjustments
        for detail in plb.adjustments
    ]

    flags = [flag for claim in claims for flag in claim.flags]
    for adjustment in provider_adjustments:
        if adjustment.reason_code in RECOUPMENT_REASONS:
            flags.append(
                SummaryFlag(
                    type=FlagType.RECOUPMENT,
                    message=(
                        f"Provider-level recoupment: {adjustment.reason_description} "
                        f"(${abs(adjustment.amount):.2f})"
                    ),
                )
            )

    if txn.total_payment_amount == 0 and total_charged > 0:
        flags.append(
            SummaryFlag(
                type=FlagType.ZERO_PAYMENT,
                message="Total payment amount is $0.00; all claims may be denied or adjusted",
                severity=FlagSeverity.CRITICAL,
            )
        )

    statuses = [c.claim_status for c in txn.claims]
    denied = ClaimStatusCode.DENIED.value
    reversal = ClaimStatusCode.REVERSAL.value

    summary = PaymentSummary(
        check_or_eft_number=txn.check_or_eft_number,
        payment_method=PAYMENT_METHOD_NAMES.get(txn.payment_method, txn.payment_method),
        payment_date=display_date(txn.payment_date),
        payer_name=txn.payer.name,
        payer_id=txn.payer.identifier_code,
        payee_name=txn.payee.name,
        payee_npi=txn.payee.npi,
        total_payment_amount=txn.total_payment_amount,
        total_charged_amount=total_charged,
        total_allowed_amount=sum(c.allowed_amount for c in claims),
        total_patient_responsibility=sum(c.patient_responsibility for c in claims),
        total_contractual_adjustment=sum(c.contractual_adjustment for c in claims),
        total_other_adjustments=sum(c.other_adjustments for c in claims),
        provider_adjustment_total=sum(a.amount for a in provider_adjustments),
        claim_count=len(claims),
        paid_claim_count=sum(1 for s in statuses if s not in (denied, reversal)),
        denied_claim_count=statuses.count(denied),
        reversal_count=statuses.count(reversal),
        claims=claims,
        provider_adjustments=provider_adjustments,
        flags=flags,
    )
    logger.debug(
        f"Summarized transaction {txn.check_or_eft_number}: "
        f"{summary.claim_count} claim(s), {len(flags)} flag(s)"
    )
    return summary


def summarize_claim(claim: ClaimPayment) -> ClaimSummary:
    """Build the per-claim breakdown, including its flags."""
    lines = [summarize_service_line(line) for line in claim.service_lines]

    contractual = sum_group(claim.adjustments, AdjustmentGroup.CONTRACTUAL) + sum(
        line.contractual_adjustment for line in lines
    )
    patient_responsibility = claim.patient_responsibility_amount or (
        sum_group(claim.adjustments, AdjustmentGroup.PATIENT_RESPONSIBILITY)
        + sum(line.patient_responsibility for line in lines)
    )
    other = (
        sum_group(claim.adjustments, AdjustmentGroup.OTHER)
        + sum_group(claim.adjustments, AdjustmentGroup.PAYER_INITIATED)
        + sum(line.other_adjustments for line in lines)
    )

    allowed = claim.supplemental_amount(AmountQualifier.COVERAGE.value)
    if allowed is None:
        allowed = sum(line.allowed_amount for line in lines) or (
            claim.total_charged_amount - contractual
        )

    date_range = ""
    if claim.statement_from_date:
        date_range = display_date(claim.statement_from_date)
        if claim.statement_to_date and claim.statement_to_date != claim.statement_from_date:
            date_range += f" - {display_date(claim.statement_to_date)}"

    return ClaimSummary(
        patient_account_number=claim.patient_account_number,
        patient_name=claim.patient_name.display_name or "Unknown Patient",
        claim_status=claim.claim_status,
        claim_status_description=CLAIM_STATUS_DESCRIPTIONS.get(
            claim.claim_status, f"Status {claim.claim_status}"
        ),
        charged_amount=claim.total_charged_amount,
        allowed_amount=allowed,
        paid_amount=claim.total_paid_amount,
        patient_responsibility=patient_responsibility,
        contractual_adjustment=contractual,
        other_adjustments=other,
        payer_claim_control_number=claim.payer_claim_control_number,
        statement_date_range=date_range,
        service_lines=lines,
        denial_reasons=collect_denial_reasons(claim),
        flags=build_claim_flags(claim, lines, allowed),
    )


def summarize_service_line(line: ServiceLinePayment) -> ServiceLineSummary:
    """Build the per-line breakdown."""
    contractual = sum_group(line.adjustments, AdjustmentGroup.CONTRACTUAL)
    is_denied = is_line_denied(line)

    details = [
        AdjustmentSummaryDetail(
            group_code=adjustment.group_code,
            group_description=ADJUSTMENT_GROUP_DESCRIPTIONS.get(
                adjustment.group_code, adjustment.group_code
            ),
            reason_code=detail.reason_code,
            reason_description=lookup_carc(detail.reason_code),
            amount=detail.amount,
        )
        for adjustment in line.adjustments
        for detail in adjustment.details
    ]

    denial_reasons = []
    if is_denied:
        remarks = [r.code for r in line.remark_codes]
        for adjustment in line.adjustments:
            for detail in adjustment.details:
                if (
                    detail.amount > 0
                    or adjustment.group_code != AdjustmentGroup.CONTRACTUAL.value
                ):
                    denial_reasons.append(_denial_reason(detail.reason_code, remarks))

    return ServiceLineSummary(
        cpt_code=line.procedure.code,
        modifiers=list(line.procedure.modifiers),
        service_date=display_date(line.service_date),
        charged_amount=line.charged_amount,
        allowed_amount=(
            line.allowed_amount
            if line.allowed_amount is not None
            else line.charged_amount - contractual
        ),
        paid_amount=line.paid_amount,
        units_billed=line.units_billed,
        units_paid=line.units_paid,
        patient_responsibility=sum_group(
            line.adjustments, AdjustmentGroup.PATIENT_RESPONSIBILITY
        ),
        contractual_adjustment=contractual,
        other_adjustments=sum_group(line.adjustments, AdjustmentGroup.OTHER)
        + sum_group(line.adjustments, AdjustmentGroup.PAYER_INITIATED),
        adjustment_details=details,
        is_denied=is_denied,
        denial_reasons=denial_reasons,
    )


def build_claim_flags(
    claim: ClaimPayment, lines: list[ServiceLineSummary], allowed: float
) -> list[SummaryFlag]:
    """Detect the claim-level conditions worth flagging."""
    flags: list[SummaryFlag] = []
    claim_id = claim.patient_account_number

    if claim.claim_status == ClaimStatusCode.DENIED.value:
        flags.append(
            SummaryFlag(
                type=FlagType.DENIAL,
                message=f"Claim {claim_id} was fully denied",
                severity=FlagSeverity.CRITICAL,
                claim_id=claim_id,
            )
        )

    if claim.claim_status == ClaimStatusCode.REVERSAL.value:
        flags.append(
            SummaryFlag(
                type=FlagType.REVERSAL,
                message=f"Claim {claim_id} is a reversal of a previous payment",
                claim_id=claim_id,
            )
        )

    denied_count = sum(1 for line in lines if line.is_denied)
    if 0 < denied_count < len(lines):
        flags.append(
            SummaryFlag(
                type=FlagType.PARTIAL_DENIAL,
                message=f"Claim {claim_id}: {denied_count} of {len(lines)} service lines denied",
                claim_id=claim_id,
            )
        )

    for index, line in enumerate(lines):
        if line.units_reduced:
            flags.append(
                SummaryFlag(
                    type=FlagType.UNITS_REDUCED,
                    message=(
                        f"Claim {claim_id}, CPT {line.cpt_code}: "
                        f"{format_units(line.units_billed)} units billed, "
                        f"{format_units(line.units_paid)} units paid"
                    ),
                    claim_id=claim_id,
                    line_index=index,
                )
            )

    all_adjustments = claim.adjustments + [
        adjustment for line in claim.service_lines for adjustment in line.adjustments
    ]
    for adjustment in all_adjustments:
        for detail in adjustment.details:
            category = categorize_denial(detail.reason_code)
            if category is None:
                continue
            flag_type = DENIAL_FLAG_TYPES[category]
            # One flag per type per claim
            if any(f.type == flag_type for f in flags):
                continue
            flags.append(
                SummaryFlag(
                    type=flag_type,
                    message=(
                        f"Claim {claim_id}: {lookup_carc(detail.reason_code)} "
                        f"(CARC {detail.reason_code})"
                    ),
                    severity=(
                        FlagSeverity.CRITICAL
                        if flag_type == FlagType.DENIAL
                        else FlagSeverity.WARNING
                    ),
                    claim_id=claim_id,
                )
            )

    if (
        claim.claim_status not in (ClaimStatusCode.DENIED.value, ClaimStatusCode.REVERSAL.value)
        and claim.total_paid_amount > 0
        and allowed > 0
    ):
        expected = allowed - sum_group(
            claim.adjustments, AdjustmentGroup.PATIENT_RESPONSIBILITY
        )
        if expected > 0 and claim.total_paid_amount < expected - UNDERPAYMENT_TOLERANCE:
            flags.append(
                SummaryFlag(
                    type=FlagType.UNDERPAYMENT,
                    message=(
                        f"Claim {claim_id}: Paid ${claim.total_paid_amount:.2f} but expected "
                        f"${expected:.2f} based on allowed amount"
                    ),
                    claim_id=claim_id,
                )
            )

    return flags


def collect_denial_reasons(claim: ClaimPayment) -> list[DenialReason]:
    """Collect denial CARCs from the claim and its denied lines, first wins."""
    reasons: list[DenialReason] = []

    if claim.claim_status == ClaimStatusCode.DENIED.value or claim.total_paid_amount == 0:
        remarks = (
            claim.outpatient_adjudication.remark_codes
            if claim.outpatient_adjudication
            else []
        )
        for adjustment in claim.adjustments:
            for detail in adjustment.details:
                if detail.amount > 0:
                    reasons.append(_denial_reason(detail.reason_code, remarks))

    for line in claim.service_lines:
        if not is_line_denied(line):
            continue
        remarks = [r.code for r in line.remark_codes]
        for adjustment in line.adjustments:
            for detail in adjustment.details:
                if detail.amount > 0:
                    reasons.append(_denial_reason(detail.reason_code, remarks))

    seen: set[str] = set()
    unique = []
    for reason in reasons:
        if reason.reason_code not in seen:
            seen.add(reason.reason_code)
            unique.append(reason)
    return unique


def is_line_denied(line: ServiceLinePayment) -> bool:
    """A line is denied when it was charged but nothing was paid."""
    return line.paid_amount == 0 and line.charged_amount > 0


def sum_group(adjustments: list[ClaimAdjustment], group: AdjustmentGroup) -> float:
    """Total of all CAS amounts with the given group code."""
    return sum(a.total for a in adjustments if a.group_code == group.value)


def _denial_reason(reason_code: str, remarks: list[str]) -> DenialReason:
    return DenialReason(
        reason_code=reason_code,
        description=lookup_carc(reason_code),
        remark_codes=list(remarks),
        remark_descriptions=[lookup_rarc(code) for code in remarks],
    )


def format_units(value: float | None) -> str:
    """Render a unit count, dropping ``.0`` from whole numbers."""
    if value is None:
        return ""
    return str(int(value)) if float(value).is_integer() else str(value)
