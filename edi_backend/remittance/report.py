"""Plain-text payment posting report for a remittance summary."""

from __future__ import annotations

from .summary import FlagSeverity, PaymentSummary, ServiceLineSummary, format_units

REPORT_WIDTH = 80

_SEVERITY_MARKERS = {
    FlagSeverity.CRITICAL: "[!!]",
    FlagSeverity.WARNING: "[!]",
    FlagSeverity.INFO: "[i]",
}


def _money(amount: float) -> str:
    return f"${amount:.2f}"


def _rule(char: str = "-") -> str:
    return char * REPORT_WIDTH


def format_payment_report(summary: PaymentSummary) -> str:
    """Render a payment summary for human review and posting verification.

    Args:
        summary: Summary built by ``summarize_transaction``

    Returns:
        Multi-line report text ending with ``END OF REMITTANCE SUMMARY``.
    """
    lines: list[str] = [
        _rule("="),
        "ELECTRONIC REMITTANCE ADVICE (835) - PAYMENT POSTING SUMMARY",
        _rule("="),
        "",
        f"Payment Method:    {summary.payment_method}",
        f"Check/EFT #:       {summary.check_or_eft_number}",
        f"Payment Date:      {summary.payment_date}",
        f"Payer:             {summary.payer_name} ({summary.payer_id})",
        f"Payee:             {summary.payee_name}"
        + (f" (NPI: {summary.payee_npi})" if summary.payee_npi else ""),
        "",
        _rule(),
        "PAYMENT TOTALS",
        _rule(),
        f"Total Charged:              {_money(summary.total_charged_amount)}",
        f"Total Allowed:              {_money(summary.total_allowed_amount)}",
        f"Total Contractual Adj:     -{_money(summary.total_contractual_adjustment)}",
        f"Total Patient Resp:         {_money(summary.total_patient_responsibility)}",
        f"Total Other Adj:           -{_money(summary.total_other_adjustments)}",
        f"Total Payment:              {_money(summary.total_payment_amount)}",
    ]
    if summary.provider_adjustment_total != 0:
        lines.append(
            f"Provider Adjustments:       {_money(summary.provider_adjustment_total)}"
        )
    lines += [
        "",
        f"Claims: {summary.claim_count} total, {summary.paid_claim_count} paid, "
        f"{summary.denied_claim_count} denied, {summary.reversal_count} reversals",
        "",
    ]

    if summary.flags:
        lines += [_rule(), "FLAGS / ALERTS", _rule()]
        for flag in summary.flags:
            lines.append(f"  {_SEVERITY_MARKERS[flag.severity]} {flag.message}")
        lines.append("")

    for claim in summary.claims:
        lines += [
            _rule(),
            f"CLAIM: {claim.patient_account_number}",
            _rule(),
            f"  Patient:         {claim.patient_name}",
            f"  Status:          {claim.claim_status_description}",
        ]
        if claim.payer_claim_control_number:
            lines.append(f"  Payer Ctrl #:    {claim.payer_claim_control_number}")
        if claim.statement_date_range:
            lines.append(f"  Date Range:      {claim.statement_date_range}")
        lines += [
            f"  Charged:         {_money(claim.charged_amount)}",
            f"  Allowed:         {_money(claim.allowed_amount)}",
            f"  Paid:            {_money(claim.paid_amount)}",
            f"  Patient Resp:    {_money(claim.patient_responsibility)}",
            f"  Contractual Adj: {_money(claim.contractual_adjustment)}",
        ]
        if claim.other_adjustments > 0:
            lines.append(f"  Other Adj:       {_money(claim.other_adjustments)}")
        lines.append("")

        if claim.denial_reasons:
            lines.append("  DENIAL REASONS:")
            for reason in claim.denial_reasons:
                lines.append(f"    CARC {reason.reason_code}: {reason.description}")
                for code, description in zip(
                    reason.remark_codes, reason.remark_descriptions
                ):
                    lines.append(f"      RARC {code}: {description}")
            lines.append("")

        if claim.service_lines:
            lines += [
                "  SERVICE LINES:",
                "  "
                + "CPT".ljust(8)
                + "Mods".ljust(12)
                + "Charged".rjust(10)
                + "Allowed".rjust(10)
                + "Paid".rjust(10)
                + "Pt Resp".rjust(10)
                + "Status".rjust(10),
                "  " + "-" * 70,
            ]
            for line in claim.service_lines:
                lines += _format_service_line(line)
            lines.append("")

    if summary.provider_adjustments:
        lines += [_rule(), "PROVIDER-LEVEL ADJUSTMENTS (PLB)", _rule()]
        for adjustment in summary.provider_adjustments:
            reference = f" (Ref: {adjustment.reference_id})" if adjustment.reference_id else ""
            lines.append(
                f"  {adjustment.reason_code}: {adjustment.reason_description} - "
                f"{_money(adjustment.amount)}{reference}"
            )
        lines.append("")

    lines += [_rule("="), "END OF REMITTANCE SUMMARY", _rule("=")]
    return "\n".join(lines)


def _format_service_line(line: ServiceLineSummary) -> list[str]:
    modifiers = ",".join(line.modifiers) if line.modifiers else "-"
    status = "DENIED" if line.is_denied else "PAID"
    rows = [
        "  "
        + line.cpt_code.ljust(8)
        + modifiers.ljust(12)
        + _money(line.charged_amount).rjust(10)
        + _money(line.allowed_amount).rjust(10)
        + _money(line.paid_amount).rjust(10)
        + _money(line.patient_responsibility).rjust(10)
        + status.rjust(10)
    ]
    indent = " " * 11

    if line.units_reduced:
        rows.append(
            f"{indent}Units: {format_units(line.units_billed)} billed -> "
            f"{format_units(line.units_paid)} paid"
        )
    if line.service_date:
        rows.append(f"{indent}Date: {line.service_date}")

    if line.is_denied:
        for reason in line.denial_reasons:
            rows.append(f"{indent}Denial: CARC {reason.reason_code} - {reason.description}")
    else:
        for detail in line.adjustment_details:
            rows.append(
                f"{indent}{detail.group_code} {detail.reason_code}: "
                f"-{_money(detail.amount)} ({detail.reason_description})"
            )
    return rows
