"""Remittance reporting: reason codes, payment summaries and text reports."""

from .reason_codes import (
    CodeKind,
    DenialCategory,
    categorize_denial,
    describe_adjustment,
    lookup_carc,
    lookup_code,
    lookup_plb_reason,
    lookup_rarc,
)
from .report import format_payment_report
from .summary import (
    ClaimSummary,
    FlagSeverity,
    FlagType,
    PaymentSummary,
    ServiceLineSummary,
    SummaryFlag,
    summarize_remittance,
    summarize_transaction,
)

__all__ = [
    "ClaimSummary",
    "CodeKind",
    "DenialCategory",
    "FlagSeverity",
    "FlagType",
    "PaymentSummary",
    "ServiceLineSummary",
    "SummaryFlag",
    "categorize_denial",
    "describe_adjustment",
    "format_payment_report",
    "lookup_carc",
    "lookup_code",
    "lookup_plb_reason",
    "lookup_rarc",
    "summarize_remittance",
    "summarize_transaction",
]
