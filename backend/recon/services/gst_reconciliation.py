"""
GST Reconciliation - matches supplier-filed GST return entries to books invoices.

An entry is looked up by supplier GSTIN and invoice number (exact, then
normalized) within a date window, then scored from 100 down:
- invoice value differs by more than the tolerance: -30
- tax total differs by more than the tolerance: -25
- intra-state vs inter-state tax structure disagrees: -15
- invoice dates further apart than the date tolerance: -10
"""
import calendar
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple

from recon.config import settings
from recon.exceptions import ReconciliationError
from recon.models.gst_return import GSTReturnEntry
from recon.models.invoice import PurchaseInvoice
from recon.schemas.common import Discrepancy, DiscrepancyType, Severity
from recon.schemas.gst import (
    GSTMatchRecord, GSTMatchType, GSTReconciliationResult, ITCStatus, ReconciliationSummary, SaveSummary,
)
from recon.store.base import ReconciliationStore
from recon.utils.matching_rules import amount_severity, check_amount_within, round_money, to_decimal
from recon.utils.similarity import normalize_invoice_number

logger = logging.getLogger(__name__)

VALUE_PENALTY = 30
TAX_PENALTY = 25
STRUCTURE_PENALTY = 15
DATE_PENALTY = 10


def entry_tax(entry: GSTReturnEntry) -> Decimal:
    return to_decimal(entry.cgst) + to_decimal(entry.sgst) + to_decimal(entry.igst)


def invoice_tax(invoice: PurchaseInvoice) -> Decimal:
    return to_decimal(invoice.cgst_amount) + to_decimal(invoice.sgst_amount) + to_decimal(invoice.igst_amount)


def parse_period(period: str) -> Tuple[date, date]:
    """First and last day of a MMYYYY return period"""
    if not period or len(period) != 6 or not period.isdigit():
        raise ReconciliationError(f"Invalid GST return period '{period}', expected MMYYYY")
    month = int(period[:2])
    year = int(period[2:])
    if not 1 <= month <= 12:
        raise ReconciliationError(f"Invalid month in GST return period '{period}'")
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


class GSTEntryReconciler:
    """Reconciles GST return entries against purchase invoices in the books"""

    def __init__(self, store: ReconciliationStore):
        self.store = store

    def find_books_invoice(self, entry: GSTReturnEntry, org_id: str) -> Optional[PurchaseInvoice]:
        date_from = date_to = None
        if entry.invoice_date is not None:
            window = timedelta(days=settings.gst_date_tolerance_days)
            date_from = entry.invoice_date - window
            date_to = entry.invoice_date + window

        invoices = self.store.list_books_invoices(org_id, entry.counterparty_gstin, date_from, date_to)

        for invoice in invoices:
            if invoice.invoice_number == entry.invoice_number:
                return invoice

        normalized = normalize_invoice_number(entry.invoice_number)
        if not normalized:
            return None
        for invoice in invoices:
            if normalize_invoice_number(invoice.invoice_number) == normalized:
                return invoice
        return None

    def match_entry(self, entry_id: int, org_id: str) -> GSTMatchRecord:
        entry = self.store.get_gst_entry(entry_id, org_id)
        return self.compare_entry(entry, org_id)

    def compare_entry(self, entry: GSTReturnEntry, org_id: str) -> GSTMatchRecord:
        filed_tax = entry_tax(entry)
        invoice = self.find_books_invoice(entry, org_id)

        if invoice is None:
            return GSTMatchRecord(
                gst_entry_id=entry.id,
                invoice_id=None,
                invoice_number=entry.invoice_number,
                counterparty_gstin=entry.counterparty_gstin,
                match_type=GSTMatchType.NO_MATCH,
                match_score=0.0,
                itc_status=ITCStatus.NOT_FILED,
                entry_tax=filed_tax,
                discrepancies=[Discrepancy(
                    type=DiscrepancyType.MISSING_IN_BOOKS,
                    severity=Severity.HIGH,
                    message=f"Invoice {entry.invoice_number} from {entry.counterparty_gstin} is in the GST return but not in the books",
                    expected=to_decimal(entry.invoice_value),
                )],
            )

        tolerance = to_decimal(settings.gst_amount_tolerance)
        score = 100
        discrepancies: List[Discrepancy] = []

        filed_value = to_decimal(entry.invoice_value)
        booked_value = to_decimal(invoice.total_with_gst)
        if not check_amount_within(filed_value, booked_value, tolerance):
            difference = booked_value - filed_value
            score -= VALUE_PENALTY
            discrepancies.append(Discrepancy(
                type=DiscrepancyType.AMOUNT_MISMATCH,
                severity=amount_severity(difference),
                message=f"Invoice value mismatch: GST return {filed_value}, books {booked_value}",
                expected=filed_value,
                actual=booked_value,
                variance=round_money(difference),
            ))

        booked_tax = invoice_tax(invoice)
        if not check_amount_within(filed_tax, booked_tax, tolerance):
            difference = booked_tax - filed_tax
            score -= TAX_PENALTY
            discrepancies.append(Discrepancy(
                type=DiscrepancyType.GST_MISMATCH,
                severity=amount_severity(difference),
                message=f"Tax amount mismatch: GST return {filed_tax}, books {booked_tax}",
                expected=filed_tax,
                actual=booked_tax,
                variance=round_money(difference),
            ))

        filed_intra = to_decimal(entry.cgst) > 0
        filed_inter = to_decimal(entry.igst) > 0
        booked_intra = to_decimal(invoice.cgst_amount) > 0
        booked_inter = to_decimal(invoice.igst_amount) > 0
        if filed_intra != booked_intra or filed_inter != booked_inter:
            score -= STRUCTURE_PENALTY
            filed_kind = "IGST" if filed_inter else "CGST+SGST"
            booked_kind = "IGST" if booked_inter else "CGST+SGST"
            discrepancies.append(Discrepancy(
                type=DiscrepancyType.GST_STRUCTURE_MISMATCH,
                severity=Severity.MEDIUM,
                message=f"Tax structure mismatch: GST return charges {filed_kind}, books charge {booked_kind}",
            ))

        if entry.invoice_date is not None:
            days_apart = abs((invoice.invoice_date - entry.invoice_date).days)
            if days_apart > settings.gst_date_tolerance_days:
                score -= DATE_PENALTY
                discrepancies.append(Discrepancy(
                    type=DiscrepancyType.DATE_MISMATCH,
                    severity=Severity.LOW,
                    message=f"Invoice date mismatch: GST return {entry.invoice_date}, books {invoice.invoice_date} ({days_apart} days)",
                ))

        if score == 100:
            match_type = GSTMatchType.EXACT
        elif score >= 70:
            match_type = GSTMatchType.PARTIAL
        else:
            match_type = GSTMatchType.NO_MATCH

        if not entry.itc_available:
            itc_status = ITCStatus.NOT_FILED
        elif discrepancies:
            itc_status = ITCStatus.MISMATCH
        else:
            itc_status = ITCStatus.AVAILABLE

        return GSTMatchRecord(
            gst_entry_id=entry.id,
            invoice_id=invoice.id,
            invoice_number=entry.invoice_number,
            counterparty_gstin=entry.counterparty_gstin,
            match_type=match_type,
            match_score=float(score),
            itc_status=itc_status,
            entry_tax=filed_tax,
            discrepancies=discrepancies,
        )

    def reconcile_return(self, return_id: int, org_id: str) -> GSTReconciliationResult:
        """Match every entry of a GST return and summarise the period"""
        gst_return = self.store.get_gst_return(return_id, org_id)
        period_start, period_end = parse_period(gst_return.period)

        matches = [self.compare_entry(entry, org_id) for entry in self.store.list_gst_entries(gst_return.id)]
        period_invoices = self.store.list_period_invoices(org_id, period_start, period_end)

        matched_invoice_ids = {m.invoice_id for m in matches if m.invoice_id is not None}
        total_itc_available = sum((m.entry_tax for m in matches), Decimal("0"))
        total_itc_claimed = sum((m.entry_tax for m in matches if m.invoice_id is not None), Decimal("0"))

        summary = ReconciliationSummary(
            total_gst_entries=len(matches),
            total_invoices=len(period_invoices),
            matched=sum(1 for m in matches if m.match_type in (GSTMatchType.EXACT, GSTMatchType.PARTIAL)),
            unmatched=sum(1 for m in matches if m.match_type == GSTMatchType.NO_MATCH),
            missing_in_books=sum(1 for m in matches if m.invoice_id is None),
            missing_in_gstr=sum(1 for inv in period_invoices if inv.id not in matched_invoice_ids),
            amount_mismatches=sum(
                1 for m in matches if any(d.type == DiscrepancyType.AMOUNT_MISMATCH for d in m.discrepancies)
            ),
            gst_mismatches=sum(
                1 for m in matches if any(d.type == DiscrepancyType.GST_MISMATCH for d in m.discrepancies)
            ),
            total_itc_available=total_itc_available,
            total_itc_claimed=total_itc_claimed,
            itc_difference=total_itc_available - total_itc_claimed,
        )

        logger.info(
            f"Reconciled GST return {return_id} ({gst_return.period}): {summary.matched}/{summary.total_gst_entries} matched, "
            f"{summary.missing_in_books} missing in books, {summary.missing_in_gstr} missing in GSTR"
        )
        return GSTReconciliationResult(
            return_id=gst_return.id,
            period=gst_return.period,
            matches=matches,
            summary=summary,
        )

    def save_match(self, record: GSTMatchRecord, org_id: str) -> Optional[int]:
        """Persist one result; entries with no books invoice have nothing to link and are skipped"""
        if record.invoice_id is None:
            return None
        with self.store.atomic():
            match = self.store.save_gst_match(record, org_id)
            match_id = match.id
        return match_id

    def save_reconciliation_matches(self, records: List[GSTMatchRecord], org_id: str) -> SaveSummary:
        saved = skipped = 0
        for record in records:
            if self.save_match(record, org_id) is None:
                skipped += 1
            else:
                saved += 1
        logger.info(f"Saved {saved} GST match(es), skipped {skipped}")
        return SaveSummary(saved=saved, skipped=skipped)
