"""Tests for payment posting summaries and text reports.

Tests cover:
- Payment header and totals
- Per-claim and per-line breakdowns
- Denial reasons with remark codes
- Flags (denials, reversals, reduced units, recoupments, underpayments)
- Plain-text report rendering
"""

import pytest

from edi_backend.remittance import (
    FlagSeverity,
    FlagType,
    format_payment_report,
    summarize_remittance,
    summarize_transaction,
)
from edi_backend.remittance.summary import format_units
from edi_backend.x12 import parse_835
from edi_backend.x12.remittance import (
    AdjustmentDetail,
    ClaimAdjustment,
    ClaimPayment,
    ProcedureCode,
    ServiceLinePayment,
    SupplementalAmount,
    Transaction835,
)


def _summary(raw):
    summaries = summarize_remittance(parse_835(raw))
    assert len(summaries) == 1
    return summaries[0]


def _flag_types(summary):
    return {flag.type for flag in summary.flags}


class TestPaymentHeader:
    """Tests for transaction-level summary fields."""

    def test_eft_summary(self, multi_claim_835):
        summary = _summary(multi_claim_835)
        assert summary.check_or_eft_number == "EFT20240115001"
        assert summary.payment_method == "EFT/ACH"
        assert summary.payment_date == "01/15/2024"
        assert summary.payer_name == "TEXAS MEDICAID"
        assert summary.payer_id == "TXMCD"
        assert summary.payee_name == "SOUTH TEXAS PT CLINIC"
        assert summary.payee_npi == "1234567890"
        assert summary.total_payment_amount == 450.0

    def test_claim_counts(self, multi_claim_835):
        summary = _summary(multi_claim_835)
        assert summary.claim_count == 2
        assert summary.paid_claim_count == 1
        assert summary.denied_claim_count == 1
        assert summary.reversal_count == 0

    def test_check_summary(self, check_single_835):
        summary = _summary(check_single_835)
        assert summary.payment_method == "Check"
        assert summary.check_or_eft_number == "CHK000789"
        assert summary.claim_count == 1
        assert summary.paid_claim_count == 1
        assert summary.denied_claim_count == 0
        assert summary.total_patient_responsibility == 95.0

    def test_provider_adjustments(self, multi_claim_835):
        summary = _summary(multi_claim_835)
        assert summary.provider_adjustment_total == -75.0
        adjustment = summary.provider_adjustments[0]
        assert adjustment.reason_code == "WO"
        assert adjustment.reason_description == "Overpayment Recovery"
        assert adjustment.reference_id == "RECOUP001"

    def test_unknown_payment_method_kept(self):
        summary = summarize_transaction(Transaction835(payment_method="ZZZ"))
        assert summary.payment_method == "ZZZ"
        assert summary.claim_count == 0

    def test_to_dict(self, multi_claim_835):
        data = _summary(multi_claim_835).to_dict()
        assert data["claims"][0]["patient_account_number"] == "CLAIM001"
        assert data["flags"][0]["type"] == FlagType.DENIAL


class TestClaimSummary:
    """Tests for per-claim breakdowns."""

    def test_paid_claim(self, multi_claim_835):
        claim = _summary(multi_claim_835).claims[0]
        assert claim.patient_account_number == "CLAIM001"
        assert claim.patient_name == "DOE, JOHN, A"
        assert claim.claim_status_description == "Processed as Primary"
        assert claim.charged_amount == 350.0
        assert claim.paid_amount == 280.0
        assert claim.allowed_amount == 280.0
        assert claim.patient_responsibility == 35.0
        assert claim.payer_claim_control_number == "TXMCD20240001"
        assert claim.statement_date_range == "01/15/2024"
        assert claim.denial_reasons == []
        assert claim.flags == []

    def test_denied_claim(self, multi_claim_835):
        claim = _summary(multi_claim_835).claims[1]
        assert claim.patient_name == "SMITH, JANE, M"
        assert "Denied" in claim.claim_status_description
        assert claim.paid_amount == 0.0

    def test_denial_reasons(self, multi_claim_835):
        claim = _summary(multi_claim_835).claims[1]
        assert len(claim.denial_reasons) == 1
        assert claim.denial_reasons[0].reason_code == "197"
        assert "Precertification" in claim.denial_reasons[0].description

    def test_line_denial_reasons_carry_remarks(self, pt_denials_835):
        claim = _summary(pt_denials_835).claims[0]
        reasons = {r.reason_code: r for r in claim.denial_reasons}
        assert list(reasons) == ["119", "97"]
        assert reasons["119"].remark_codes == ["N362"]
        assert reasons["97"].remark_codes == ["M15"]
        assert "bundled" in reasons["97"].remark_descriptions[0]

    def test_unknown_patient(self):
        txn = Transaction835(claims=[ClaimPayment(patient_account_number="X1", claim_status="1")])
        assert summarize_transaction(txn).claims[0].patient_name == "Unknown Patient"

    def test_unknown_status(self):
        txn = Transaction835(claims=[ClaimPayment(claim_status="99")])
        assert summarize_transaction(txn).claims[0].claim_status_description == "Status 99"


class TestServiceLineSummary:
    """Tests for per-line breakdowns."""

    def test_paid_line(self, multi_claim_835):
        line = _summary(multi_claim_835).claims[0].service_lines[0]
        assert line.cpt_code == "97161"
        assert line.modifiers == ["GP"]
        assert line.service_date == "01/15/2024"
        assert line.charged_amount == 150.0
        assert line.paid_amount == 120.0
        assert line.allowed_amount == 120.0
        assert line.contractual_adjustment == 30.0
        assert line.is_denied is False
        assert line.adjustment_details[0].group_description == "Contractual Obligation"

    def test_denied_line(self, multi_claim_835):
        line = _summary(multi_claim_835).claims[1].service_lines[0]
        assert line.is_denied is True
        assert line.denial_reasons[0].reason_code == "197"
        assert line.denial_reasons[0].remark_codes == ["N700"]

    def test_allowed_without_amt(self, pt_denials_835):
        """Test allowed falls back to charged minus contractual."""
        line = _summary(pt_denials_835).claims[0].service_lines[1]
        assert line.allowed_amount == 0.0

    def test_units_reduced(self, pt_denials_835):
        line = _summary(pt_denials_835).claims[0].service_lines[3]
        assert line.units_billed == 4
        assert line.units_paid == 2
        assert line.units_reduced is True

    def test_patient_responsibility(self, check_single_835):
        line = _summary(check_single_835).claims[0].service_lines[0]
        assert line.patient_responsibility == 25.0


class TestFlags:
    """Tests for summary flags."""

    def test_denial_flags(self, multi_claim_835):
        summary = _summary(multi_claim_835)
        assert FlagType.DENIAL in _flag_types(summary)
        assert FlagType.NO_PRIOR_AUTH in _flag_types(summary)
        denial = next(f for f in summary.flags if f.type == FlagType.DENIAL)
        assert denial.severity == FlagSeverity.CRITICAL
        assert denial.claim_id == "CLAIM002"

    def test_recoupment(self, multi_claim_835):
        summary = _summary(multi_claim_835)
        recoupment = next(f for f in summary.flags if f.type == FlagType.RECOUPMENT)
        assert "$75.00" in recoupment.message

    def test_pt_denials(self, pt_denials_835):
        types = _flag_types(_summary(pt_denials_835))
        assert FlagType.VISIT_LIMIT_EXCEEDED in types
        assert FlagType.BUNDLED_SERVICE in types
        assert FlagType.PARTIAL_DENIAL in types
        assert FlagType.UNITS_REDUCED in types
        assert FlagType.DENIAL not in types

    def test_one_flag_per_category(self, pt_denials_835):
        summary = _summary(pt_denials_835)
        visit_limits = [f for f in summary.flags if f.type == FlagType.VISIT_LIMIT_EXCEEDED]
        assert len(visit_limits) == 1

    def test_units_reduced_message(self, pt_denials_835):
        summary = _summary(pt_denials_835)
        flag = next(f for f in summary.flags if f.type == FlagType.UNITS_REDUCED)
        assert flag.line_index == 3
        assert "CPT 97150: 4 units billed, 2 units paid" in flag.message

    def test_reversal(self, reversal_835):
        summary = _summary(reversal_835)
        assert FlagType.REVERSAL in _flag_types(summary)
        assert summary.reversal_count == 1
        assert summary.paid_claim_count == 1
        assert summary.total_payment_amount == 65.0

    def test_clean_check_has_no_flags(self, check_single_835):
        assert _summary(check_single_835).flags == []

    def test_zero_payment(self):
        txn = Transaction835(
            total_payment_amount=0.0,
            claims=[
                ClaimPayment(
                    patient_account_number="C1",
                    claim_status="4",
                    total_charged_amount=100.0,
                )
            ],
        )
        flag = next(
            f for f in summarize_transaction(txn).flags if f.type == FlagType.ZERO_PAYMENT
        )
        assert flag.severity == FlagSeverity.CRITICAL

    def test_underpayment(self):
        claim = ClaimPayment(
            patient_account_number="C2",
            claim_status="1",
            total_charged_amount=150.0,
            total_paid_amount=50.0,
            supplemental_amounts=[SupplementalAmount(qualifier="AU", amount=100.0)],
        )
        flags = summarize_transaction(
            Transaction835(total_payment_amount=50.0, claims=[claim])
        ).flags
        underpayment = next(f for f in flags if f.type == FlagType.UNDERPAYMENT)
        assert "Paid $50.00 but expected $100.00" in underpayment.message

    def test_paid_within_tolerance(self):
        claim = ClaimPayment(
            claim_status="1",
            total_charged_amount=150.0,
            total_paid_amount=79.995,
            adjustments=[
                ClaimAdjustment(
                    group_code="PR", details=[AdjustmentDetail(reason_code="2", amount=20.0)]
                )
            ],
            supplemental_amounts=[SupplementalAmount(qualifier="AU", amount=100.0)],
        )
        flags = summarize_transaction(
            Transaction835(total_payment_amount=79.995, claims=[claim])
        ).flags
        assert FlagType.UNDERPAYMENT not in {f.type for f in flags}

    def test_partial_denial_needs_a_paid_line(self):
        lines = [
            ServiceLinePayment(procedure=ProcedureCode(code="97110"), charged_amount=50.0),
            ServiceLinePayment(procedure=ProcedureCode(code="97112"), charged_amount=50.0),
        ]
        claim = ClaimPayment(claim_status="1", total_charged_amount=100.0, service_lines=lines)
        flags = summarize_transaction(Transaction835(claims=[claim])).flags
        assert FlagType.PARTIAL_DENIAL not in {f.type for f in flags}


class TestPaymentReport:
    """Tests for the plain-text report."""

    @pytest.fixture
    def report(self, multi_claim_835):
        return format_payment_report(_summary(multi_claim_835))

    @pytest.mark.parametrize(
        "text",
        [
            "ELECTRONIC REMITTANCE ADVICE",
            "EFT20240115001",
            "TEXAS MEDICAID",
            "SOUTH TEXAS PT CLINIC",
            "CLAIM001",
            "CLAIM002",
            "97161",
            "DENIED",
            "DENIAL REASONS",
            "CARC 197",
            "FLAGS / ALERTS",
            "PROVIDER-LEVEL ADJUSTMENTS",
            "Overpayment Recovery",
            "(Ref: RECOUP001)",
        ],
    )
    def test_sections(self, report, text):
        assert text in report

    def test_ends_with_footer(self, report):
        lines = report.splitlines()
        assert lines[-2] == "END OF REMITTANCE SUMMARY"
        assert lines[-1] == "=" * 80

    def test_critical_marker(self, report):
        assert "[!!] Claim CLAIM002 was fully denied" in report

    def test_claim_counts_line(self, report):
        assert "Claims: 2 total, 1 paid, 1 denied, 0 reversals" in report

    def test_units_reduced_row(self, pt_denials_835):
        report = format_payment_report(_summary(pt_denials_835))
        assert "Units: 4 billed -> 2 paid" in report

    def test_no_flags_section_when_clean(self, check_single_835):
        report = format_payment_report(_summary(check_single_835))
        assert "FLAGS / ALERTS" not in report
        assert "PROVIDER-LEVEL ADJUSTMENTS" not in report
        assert "Payment Method:    Check" in report


class TestFormatUnits:
    """Unit counts shared by summary flags and the text report."""

    @pytest.mark.parametrize(
        "value,expected", [(None, ""), (2.0, "2"), (1, "1"), (1.5, "1.5")]
    )
    def test_format_units(self, value, expected):
        assert format_units(value) == expected
