"""EDI 835 parser for healthcare claim payment/advice.

Parses ANSI X12 835 (005010X221A1) remittance files into the typed tree
defined in ``remittance``. Malformed input never raises: structural
problems come back as diagnostics on the ``ParseResult``.

Segment Reference:
- ISA/GS: Interchange and functional group headers
- ST/SE: Transaction set header/trailer (one payment per pair)
- BPR: Financial information (amount, method, bank routing)
- TRN: Reassociation trace number (check or EFT number)
- DTM: Dates (405 production, 232/233 statement, 472 service)
- N1/N3/N4/PER/REF: Payer (PR) and payee (PE) identification
- CLP: Claim payment information
- CAS: Claim or service adjustment
- NM1: Patient, insured, rendering provider names
- MIA/MOA: Inpatient/outpatient adjudication
- AMT: Supplemental amounts
- SVC: Service payment information
- LQ: Remark codes
- PLB: Provider level adjustments
"""

from __future__ import annotations

import logging

from ..utils.date_parser import is_ccyymmdd
from .qualifiers import (
    CLAIM_AMT_FIELDS,
    CLAIM_DATE_FIELDS,
    CLAIM_NAME_FIELDS,
    CLAIM_REF_FIELDS,
    CONTACT_FIELDS,
    LINE_AMT_FIELDS,
    LINE_DATE_FIELDS,
    LINE_REF_FIELDS,
    PAYEE_ID_FIELDS,
    PAYEE_REF_FIELDS,
    TECHNICAL_CONTACT_FUNCTIONS,
    DateFormat,
    DateQualifier,
    EntityIdentifier,
)
from .remittance import (
    Address,
    AdjustmentDetail,
    ClaimAdjustment,
    ClaimPayment,
    ContactInfo,
    Envelope,
    GSHeader,
    InpatientAdjudication,
    ISAHeader,
    OutpatientAdjudication,
    ParseResult,
    PartyName,
    PayeeIdentification,
    PayerIdentification,
    ProcedureCode,
    ProviderAdjustment,
    ProviderAdjustmentDetail,
    ReferenceNumber,
    RemarkCode,
    ServiceLinePayment,
    SupplementalAmount,
    Transaction835,
)
from .segments import is_decimal
from .tokenizer import X12Segment, envelope_pairs
from .validator import Diagnostic, check_835, error, has_errors, warning

logger = logging.getLogger(__name__)

# Segments that close the claim (Loop 2100) currently being read
CLAIM_TERMINATORS = frozenset({"CLP", "PLB", "SE"})
# Segments that close a 1000A/1000B party loop
PARTY_TERMINATORS = frozenset({"N1", "CLP", "LX"})

MAX_CAS_TRIPLES = 6
MAX_PLB_PAIRS = 6


def parse_amount(value: str | None) -> float:
    """Parse a monetary element; empty or non-numeric values become 0.0."""
    if not is_decimal(value):
        return 0.0
    return float(value)


def parse_optional_number(value: str | None) -> float | None:
    """Parse an optional numeric element; empty or non-numeric gives None."""
    if not is_decimal(value):
        return None
    return float(value)


def parse_cas(segment: X12Segment) -> ClaimAdjustment:
    """Parse a CAS segment into its group code and reason triples.

    CAS02-04, CAS05-07, ... CAS17-19; reading stops at the first empty
    reason code.
    """
    adjustment = ClaimAdjustment(group_code=segment.get(1))
    for i in range(MAX_CAS_TRIPLES):
        index = 2 + i * 3
        reason_code = segment.get(index)
        if not reason_code:
            break
        adjustment.details.append(
            AdjustmentDetail(
                reason_code=reason_code,
                amount=parse_amount(segment.get(index + 1)),
                quantity=parse_optional_number(segment.get(index + 2)),
            )
        )
    return adjustment


def parse_procedure(value: str, component_sep: str = ":") -> ProcedureCode:
    """Parse an SVC01/SVC06 composite such as ``HC:97140:GP:59``."""
    parts = value.split(component_sep)
    return ProcedureCode(
        qualifier=parts[0] or "HC",
        code=parts[1] if len(parts) > 1 else "",
        modifiers=[m for m in parts[2:6] if m],
        description=parts[6] if len(parts) > 6 else "",
    )


def parse_name(segment: X12Segment) -> PartyName:
    """Parse an NM1 segment."""
    return PartyName(
        entity_type=segment.get(2) or "1",
        last_name=segment.get(3),
        first_name=segment.get(4),
        middle_name=segment.get(5),
        suffix=segment.get(7),
        identifier_qualifier=segment.get(8),
        identifier=segment.get(9),
    )


def parse_contact(segment: X12Segment) -> ContactInfo:
    """Parse a PER segment, routing PER03..PER08 pairs by qualifier."""
    contact = ContactInfo(function_code=segment.get(1), name=segment.get(2))
    for index in (3, 5, 7):
        attribute = CONTACT_FIELDS.get(segment.get(index))
        value = segment.get(index + 1)
        if attribute and value:
            setattr(contact, attribute, value)
    return contact


class EDI835Parser:
    """Parser for EDI 835 remittance advice.

    One parser instance can be reused; per-document state lives on the
    instance only for the duration of ``parse``.
    """

    def __init__(self) -> None:
        self.component_sep = ":"
        self.diagnostics: list[Diagnostic] = []

    def parse(self, raw: str) -> ParseResult:
        """Parse an 835 document.

        Args:
            raw: Raw 835 text

        Returns:
            ParseResult. When structural validation fails the result has an
            empty envelope, no transactions and a segment count of 0.
        """
        validation, document = check_835(raw)
        if document is None or has_errors(validation):
            logger.warning(
                f"835 rejected by validation with "
                f"{sum(d.is_error for d in validation)} error(s)"
            )
            return ParseResult(diagnostics=validation)

        self.component_sep = document.delimiters.component
        self.diagnostics = list(validation)
        segments = document.segments

        envelope = self._parse_envelope(segments)
        transactions = []
        for start, end in self._transaction_ranges(segments):
            transaction = self._parse_transaction(segments[start : end + 1])
            if transaction is not None:
                transactions.append(transaction)

        claim_count = sum(len(t.claims) for t in transactions)
        logger.info(
            f"Parsed 835: {len(transactions)} transaction(s), {claim_count} claim(s), "
            f"{len(segments)} segments"
        )

        return ParseResult(
            envelope=envelope,
            transactions=transactions,
            diagnostics=self.diagnostics,
            segment_count=len(segments),
        )

    # ------------------------------------------------------------------
    # Envelope and transaction boundaries
    # ------------------------------------------------------------------

    def _parse_envelope(self, segments: list[X12Segment]) -> Envelope:
        envelope = Envelope()

        isa = next((s for s in segments if s.id == "ISA"), None)
        if isa is None:
            self.diagnostics.append(error("Missing ISA segment", "ISA"))
        else:
            envelope.isa = ISAHeader(
                authorization_qualifier=isa.get(1),
                authorization_info=isa.get(2).strip(),
                security_qualifier=isa.get(3),
                security_info=isa.get(4).strip(),
                sender_qualifier=isa.get(5).strip(),
                sender_id=isa.get(6).strip(),
                receiver_qualifier=isa.get(7).strip(),
                receiver_id=isa.get(8).strip(),
                date=isa.get(9),
                time=isa.get(10),
                repetition_separator=isa.get(11),
                version_number=isa.get(12),
                control_number=isa.get(13).strip(),
                acknowledgment_requested=isa.get(14),
                usage_indicator=isa.get(15),
                component_separator=isa.get(16)[:1],
            )

        gs = next((s for s in segments if s.id == "GS"), None)
        if gs is None:
            self.diagnostics.append(error("Missing GS segment", "GS"))
        else:
            envelope.gs = GSHeader(
                functional_identifier_code=gs.get(1),
                sender_code=gs.get(2),
                receiver_code=gs.get(3),
                date=gs.get(4),
                time=gs.get(5),
                control_number=gs.get(6),
                responsible_agency_code=gs.get(7),
                version_code=gs.get(8),
            )

        return envelope

    def _transaction_ranges(self, segments: list[X12Segment]) -> list[tuple[int, int]]:
        """Pair each ST with the next SE. An ST without one is reported."""
        ranges, unpaired = envelope_pairs(segments, "ST", "SE")
        for index in unpaired:
            segment = segments[index]
            self.diagnostics.append(
                error(f"ST at position {segment.position} has no matching SE", segment)
            )
        return ranges

    # ------------------------------------------------------------------
    # Transaction (Loop 2000 header, 1000A, 1000B)
    # ------------------------------------------------------------------

    def _parse_transaction(self, segments: list[X12Segment]) -> Transaction835 | None:
        st = segments[0]
        bpr = next((s for s in segments if s.id == "BPR"), None)
        if bpr is None:
            self.diagnostics.append(
                error(
                    f"Missing BPR segment in transaction {st.get(2)} at position {st.position}",
                    st,
                )
            )
            return None

        transaction = Transaction835(
            control_number=st.get(2),
            total_payment_amount=parse_amount(bpr.get(2)),
            credit_debit_flag=bpr.get(3),
            payment_method=bpr.get(4) or bpr.get(1),
            payment_format=bpr.get(5),
            sender_bank_id=bpr.get(7),
            sender_account_number=bpr.get(9),
            receiver_bank_id=bpr.get(13),
            receiver_account_number=bpr.get(15),
        )

        trn = next((s for s in segments if s.id == "TRN"), None)
        if trn is not None:
            transaction.check_or_eft_number = trn.get(2)
            transaction.trace_originator_id = trn.get(3)
            transaction.trace_supplemental_id = trn.get(4)

        for segment in segments:
            if segment.id == "DTM" and segment.get(1) == DateQualifier.PRODUCTION.value:
                transaction.payment_date = segment.get(2)
                break

        transaction.payer = self._parse_payer(segments)
        transaction.payee = self._parse_payee(segments)
        transaction.claims = self._parse_claims(segments)
        transaction.provider_adjustments = [
            self._parse_plb(s) for s in segments if s.id == "PLB"
        ]
        return transaction

    def _party_loop(
        self, segments: list[X12Segment], entity: EntityIdentifier
    ) -> tuple[X12Segment | None, list[X12Segment]]:
        """Return the N1 for ``entity`` and the segments that belong to it."""
        for i, segment in enumerate(segments):
            if segment.id == "N1" and segment.get(1) == entity.value:
                children = []
                for child in segments[i + 1 :]:
                    if child.id in PARTY_TERMINATORS:
                        break
                    children.append(child)
                return segment, children
        return None, []

    @staticmethod
    def _apply_address(address: Address | None, segment: X12Segment) -> Address:
        address = address or Address()
        if segment.id == "N3":
            address.line1 = segment.get(1)
            address.line2 = segment.get(2)
        else:
            address.city = segment.get(1)
            address.state = segment.get(2)
            address.zip = segment.get(3)
            address.country = segment.get(4)
        return address

    def _parse_payer(self, segments: list[X12Segment]) -> PayerIdentification:
        n1, children = self._party_loop(segments, EntityIdentifier.PAYER)
        payer = PayerIdentification()
        if n1 is None:
            return payer

        payer.name = n1.get(2)
        payer.identifier_qualifier = n1.get(3)
        payer.identifier_code = n1.get(4)

        for segment in children:
            if segment.id in ("N3", "N4"):
                payer.address = self._apply_address(payer.address, segment)
            elif segment.id == "PER":
                contact = parse_contact(segment)
                if contact.function_code in TECHNICAL_CONTACT_FUNCTIONS:
                    payer.technical_contact = contact
                else:
                    payer.web_contact = contact
            elif segment.id == "REF":
                payer.additional_ids.append(
                    ReferenceNumber(qualifier=segment.get(1), value=segment.get(2))
                )
        return payer

    def _parse_payee(self, segments: list[X12Segment]) -> PayeeIdentification:
        n1, children = self._party_loop(segments, EntityIdentifier.PAYEE)
        payee = PayeeIdentification()
        if n1 is None:
            return payee

        payee.name = n1.get(2)
        payee.identifier_qualifier = n1.get(3)
        payee.identifier_code = n1.get(4)
        attribute = PAYEE_ID_FIELDS.get(payee.identifier_qualifier)
        if attribute:
            setattr(payee, attribute, payee.identifier_code)

        for segment in children:
            if segment.id in ("N3", "N4"):
                payee.address = self._apply_address(payee.address, segment)
            elif segment.id == "REF":
                reference = ReferenceNumber(qualifier=segment.get(1), value=segment.get(2))
                payee.additional_ids.append(reference)
                attribute = PAYEE_REF_FIELDS.get(reference.qualifier)
                if attribute:
                    setattr(payee, attribute, reference.value)
        return payee

    # ------------------------------------------------------------------
    # Claims (Loop 2100) and service lines (Loop 2110)
    # ------------------------------------------------------------------

    def _parse_claims(self, segments: list[X12Segment]) -> list[ClaimPayment]:
        claims = []
        i = 0
        while i < len(segments):
            if segments[i].id != "CLP":
                i += 1
                continue
            end = i + 1
            while end < len(segments) and segments[end].id not in CLAIM_TERMINATORS:
                end += 1
            claims.append(self._parse_claim(segments[i:end]))
            i = end
        return claims

    def _parse_claim(self, segments: list[X12Segment]) -> ClaimPayment:
        clp = segments[0]
        claim = ClaimPayment(
            patient_account_number=clp.get(1),
            claim_status=clp.get(2),
            total_charged_amount=parse_amount(clp.get(3)),
            total_paid_amount=parse_amount(clp.get(4)),
            patient_responsibility_amount=parse_amount(clp.get(5)),
            claim_filing_indicator=clp.get(6),
            payer_claim_control_number=clp.get(7),
            facility_code=clp.get(8),
            frequency_code=clp.get(9),
            drg_code=clp.get(11),
        )

        first_line = next(
            (i for i, s in enumerate(segments) if s.id == "SVC"), len(segments)
        )
        for segment in segments[1:first_line]:
            self._apply_claim_segment(claim, segment)

        line_segments = segments[first_line:]
        for i, segment in enumerate(line_segments):
            if segment.id != "SVC":
                continue
            end = i + 1
            while end < len(line_segments) and line_segments[end].id != "SVC":
                end += 1
            claim.service_lines.append(self._parse_service_line(line_segments[i:end]))

        return claim

    def _apply_claim_segment(self, claim: ClaimPayment, segment: X12Segment) -> None:
        """Route one claim-level segment to its field or list."""
        if segment.id == "CAS":
            claim.adjustments.append(parse_cas(segment))

        elif segment.id == "NM1":
            target = CLAIM_NAME_FIELDS.get(segment.get(1))
            if target is not None:
                attribute, identifier_only = target
                name = parse_name(segment)
                setattr(claim, attribute, name.identifier if identifier_only else name)

        elif segment.id == "MIA":
            claim.inpatient_adjudication = InpatientAdjudication(
                covered_days=parse_optional_number(segment.get(1)),
                pps_operating_outlier_amount=parse_optional_number(segment.get(2)),
                lifetime_psychiatric_days=parse_optional_number(segment.get(3)),
                claim_drg_amount=parse_optional_number(segment.get(4)),
            )

        elif segment.id == "MOA":
            claim.outpatient_adjudication = OutpatientAdjudication(
                reimbursement_rate=parse_optional_number(segment.get(1)),
                hcpcs_payable_amount=parse_optional_number(segment.get(2)),
                remark_codes=[segment.get(i) for i in range(3, 8) if segment.get(i)],
                esrd_payment_amount=parse_optional_number(segment.get(8)),
                nonpayable_professional_component=parse_optional_number(segment.get(9)),
            )

        elif segment.id == "DTM":
            target = CLAIM_DATE_FIELDS.get(segment.get(1))
            if target is not None:
                self._apply_period(claim, segment, *target)

        elif segment.id == "REF":
            # Named field OR reference list, never both
            attribute = CLAIM_REF_FIELDS.get(segment.get(1))
            if attribute:
                setattr(claim, attribute, segment.get(2))
            else:
                claim.reference_numbers.append(
                    ReferenceNumber(qualifier=segment.get(1), value=segment.get(2))
                )

        elif segment.id == "AMT":
            amount = SupplementalAmount(
                qualifier=segment.get(1), amount=parse_amount(segment.get(2))
            )
            claim.supplemental_amounts.append(amount)
            attribute = CLAIM_AMT_FIELDS.get(amount.qualifier)
            if attribute:
                setattr(claim, attribute, amount.amount)

    def _parse_service_line(self, segments: list[X12Segment]) -> ServiceLinePayment:
        svc = segments[0]
        line = ServiceLinePayment(
            procedure=parse_procedure(svc.get(1), self.component_sep),
            charged_amount=parse_amount(svc.get(2)),
            paid_amount=parse_amount(svc.get(3)),
            revenue_code=svc.get(4),
            units_paid=parse_optional_number(svc.get(5)),
            original_procedure=(
                parse_procedure(svc.get(6), self.component_sep) if svc.get(6) else None
            ),
            units_billed=parse_optional_number(svc.get(7)),
        )

        for segment in segments[1:]:
            if segment.id == "CAS":
                line.adjustments.append(parse_cas(segment))

            elif segment.id == "DTM":
                target = LINE_DATE_FIELDS.get(segment.get(1))
                if target is not None:
                    self._apply_period(line, segment, *target)

            elif segment.id == "REF":
                reference = ReferenceNumber(qualifier=segment.get(1), value=segment.get(2))
                attribute = LINE_REF_FIELDS.get(reference.qualifier)
                if attribute:
                    setattr(line, attribute, reference.value)
                else:
                    line.reference_numbers.append(reference)

            elif segment.id == "AMT":
                # Always listed; some qualifiers also set a named field
                amount = SupplementalAmount(
                    qualifier=segment.get(1), amount=parse_amount(segment.get(2))
                )
                line.supplemental_amounts.append(amount)
                attribute = LINE_AMT_FIELDS.get(amount.qualifier)
                if attribute:
                    setattr(line, attribute, amount.amount)

            elif segment.id == "LQ":
                line.remark_codes.append(
                    RemarkCode(qualifier=segment.get(1), code=segment.get(2))
                )

        return line

    # ------------------------------------------------------------------
    # Dates
    # ------------------------------------------------------------------

    def _apply_period(
        self,
        target: object,
        segment: X12Segment,
        start_attribute: str,
        end_attribute: str | None,
    ) -> None:
        """Store a DTM date or range on ``target``."""
        start, end = self._read_period(segment)
        setattr(target, start_attribute, start)
        if end and end_attribute:
            setattr(target, end_attribute, end)

    def _read_period(self, segment: X12Segment) -> tuple[str, str]:
        """Read a DTM value according to its format qualifier (DTM05).

        Returns:
            (start, end); end is empty for a single date.
        """
        label = f"DTM*{segment.get(1)} at position {segment.position}"
        date_format = segment.get(5)

        if date_format == DateFormat.RANGE.value:
            value = segment.get(6) or segment.get(2)
            parts = value.split("-")
            if len(parts) != 2 or not all(is_ccyymmdd(p) for p in parts):
                self.diagnostics.append(
                    warning(f"{label} has a malformed RD8 date range: {value!r}", segment)
                )
            if len(parts) == 2:
                return parts[0], parts[1]
            return value, ""

        value = segment.get(2) or segment.get(6)
        if "-" in value:
            self.diagnostics.append(
                warning(
                    f"{label} contains a date range without the RD8 format qualifier: "
                    f"{value!r}",
                    segment,
                )
            )
            parts = value.split("-")
            if len(parts) == 2:
                return parts[0], parts[1]
            return value, ""

        if value and not is_ccyymmdd(value):
            self.diagnostics.append(
                warning(f"{label} is not a CCYYMMDD date: {value!r}", segment)
            )
        return value, ""

    # ------------------------------------------------------------------
    # PLB
    # ------------------------------------------------------------------

    def _parse_plb(self, segment: X12Segment) -> ProviderAdjustment:
        """Parse a PLB segment: PLB03/04 through PLB13/14 reason/amount pairs."""
        adjustment = ProviderAdjustment(
            provider_identifier=segment.get(1),
            fiscal_period_date=segment.get(2),
        )
        for i in range(MAX_PLB_PAIRS):
            index = 3 + i * 2
            reason = segment.get(index)
            amount = segment.get(index + 1)
            if not reason and not amount:
                break
            code, _, reference = reason.partition(self.component_sep)
            adjustment.adjustments.append(
                ProviderAdjustmentDetail(
                    reason_code=code,
                    amount=parse_amount(amount),
                    reference_id=reference,
                )
            )
        return adjustment


def parse_835(raw: str) -> ParseResult:
    """Parse an 835 document with a fresh parser."""
    return EDI835Parser().parse(raw)
