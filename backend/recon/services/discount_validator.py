"""
Discount Validator - checks invoiced discounts against the vendor's contracted terms.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from recon.config import settings
from recon.exceptions import ReconciliationError
from recon.models.discount_term import DiscountTerm
from recon.models.invoice import PurchaseInvoice
from recon.schemas.discount import (
    DISCOUNT_TERM_TYPES, AuditSummary, DiscountEvaluation, DiscountStatus, DiscountTermType, PenaltyEvaluation,
)
from recon.store.base import ReconciliationStore
from recon.utils.matching_rules import HUNDRED, round_money, to_decimal

logger = logging.getLogger(__name__)

AUDITABLE_INVOICE_STATUSES = ["VERIFIED", "MATCHED", "CLOSED"]
DAYS_PER_PENALTY_PERIOD = Decimal("30")


class DiscountTermEvaluator:
    """Computes the discount an invoice should carry and the penalty a late payment owes"""

    def __init__(self, store: ReconciliationStore):
        self.store = store

    def term_discount(self, term: DiscountTerm, subtotal: Decimal) -> Decimal:
        """
        Discount a single term grants on a subtotal.

        Flat percent takes precedence over flat amount, which takes precedence over
        slabs. The first slab with min <= subtotal < max applies; a missing max is unbounded.
        """
        if term.flat_percent:
            return subtotal * to_decimal(term.flat_percent) / HUNDRED
        if term.flat_amount:
            return to_decimal(term.flat_amount)

        for slab in term.slabs or []:
            min_value = to_decimal(slab.get("min_value") or 0)
            max_value = slab.get("max_value")
            if subtotal < min_value:
                continue
            if max_value is not None and subtotal >= to_decimal(max_value):
                continue
            if slab.get("discount_percent"):
                return subtotal * to_decimal(slab["discount_percent"]) / HUNDRED
            if slab.get("discount_amount"):
                return to_decimal(slab["discount_amount"])
            return Decimal("0")

        return Decimal("0")

    def _term_applies(
        self, term: DiscountTerm, invoice: PurchaseInvoice, subtotal: Decimal, payment_date: Optional[date]
    ) -> bool:
        if term.min_order_value and subtotal < to_decimal(term.min_order_value):
            return False

        if term.applicable_skus:
            invoice_skus = {line.sku_id for line in invoice.invoice_lines if line.sku_id}
            if not invoice_skus.intersection(term.applicable_skus):
                return False

        # Cash discounts are forfeited once the invoice is known to be paid late
        if term.term_type == DiscountTermType.CASH_DISCOUNT.value and term.payment_within_days:
            if payment_date is not None and (payment_date - invoice.invoice_date).days > term.payment_within_days:
                return False

        return True

    def evaluate_invoice(self, invoice_id: int, org_id: str, payment_date: Optional[date] = None) -> DiscountEvaluation:
        """
        Compare the discount on an invoice's lines with the best applicable vendor term.

        Args:
            invoice_id: Purchase invoice to check
            org_id: Organization scope
            payment_date: Date the invoice was paid; defaults to the earliest
                allocated bank transaction, if any

        Returns:
            DiscountEvaluation with status CORRECT, UNDER_DISCOUNTED,
            OVER_DISCOUNTED or NEEDS_REVIEW
        """
        invoice = self.store.get_purchase_invoice(invoice_id, org_id)
        return self.evaluate(invoice, org_id, payment_date)

    def evaluate(self, invoice: PurchaseInvoice, org_id: str, payment_date: Optional[date] = None) -> DiscountEvaluation:
        subtotal = to_decimal(invoice.total_amount)
        actual = round_money(sum((to_decimal(line.discount_amount) for line in invoice.invoice_lines), Decimal("0")))

        terms = self.store.list_discount_terms(org_id, invoice.vendor_id, invoice.invoice_date, DISCOUNT_TERM_TYPES)
        if payment_date is None and any(t.term_type == DiscountTermType.CASH_DISCOUNT.value for t in terms):
            payment_date = self.store.first_payment_date(invoice.id)

        expected = Decimal("0")
        best_term: Optional[DiscountTerm] = None
        tied_terms: List[DiscountTerm] = []
        for term in terms:
            if not self._term_applies(term, invoice, subtotal, payment_date):
                continue
            discount = round_money(self.term_discount(term, subtotal))
            if discount > expected:
                expected = discount
                best_term = term
                tied_terms = []
            elif best_term is not None and discount == expected:
                tied_terms.append(term)

        difference = round_money(actual - expected)
        tolerance = to_decimal(settings.discount_tolerance)
        notes = []

        if abs(difference) <= tolerance:
            status = DiscountStatus.CORRECT
            notes.append("Discount is correct as per terms")
        elif tied_terms:
            # Several terms grant the same discount and the invoice honours none of them
            status = DiscountStatus.NEEDS_REVIEW
            term_ids = ", ".join(str(t.id) for t in [best_term] + tied_terms)
            notes.append(f"Terms {term_ids} grant the same discount; manual review required")
        elif difference < -tolerance:
            status = DiscountStatus.UNDER_DISCOUNTED
            notes.append(f"Vendor under-discounted by ₹{abs(difference):.2f}")
        else:
            status = DiscountStatus.OVER_DISCOUNTED
            notes.append(f"Vendor over-discounted by ₹{difference:.2f}")

        return DiscountEvaluation(
            invoice_id=invoice.id,
            vendor_id=invoice.vendor_id,
            discount_term_id=best_term.id if best_term else None,
            term_type=DiscountTermType(best_term.term_type) if best_term else None,
            expected_discount=expected,
            actual_discount=actual,
            difference=difference,
            status=status,
            notes=notes,
        )

    def calculate_late_payment_penalty(self, invoice_id: int, org_id: str, payment_date: date) -> PenaltyEvaluation:
        """Penalty accrues pro rata per 30 days past the due date (invoice date when no due date)"""
        invoice = self.store.get_purchase_invoice(invoice_id, org_id)
        due_date = invoice.due_date or invoice.invoice_date
        days_late = max(0, (payment_date - due_date).days)

        if days_late == 0:
            return PenaltyEvaluation(
                invoice_id=invoice.id,
                due_date=due_date,
                payment_date=payment_date,
                days_late=0,
                penalty_amount=Decimal("0.00"),
            )

        terms = self.store.list_discount_terms(
            org_id, invoice.vendor_id, invoice.invoice_date, [DiscountTermType.LATE_PAYMENT_PENALTY]
        )
        term = next((t for t in terms if t.penalty_percent), None)

        penalty = Decimal("0")
        if term is not None:
            penalty = (
                to_decimal(invoice.total_with_gst)
                * to_decimal(term.penalty_percent)
                * (Decimal(days_late) / DAYS_PER_PENALTY_PERIOD)
                / HUNDRED
            )

        return PenaltyEvaluation(
            invoice_id=invoice.id,
            discount_term_id=term.id if term else None,
            due_date=due_date,
            payment_date=payment_date,
            days_late=days_late,
            penalty_percent=to_decimal(term.penalty_percent) if term else None,
            penalty_amount=round_money(penalty),
        )

    def audit_vendor_discounts(self, vendor_id: int, org_id: str) -> List[DiscountEvaluation]:
        """Evaluate and persist discount audits for a vendor's processed invoices"""
        invoices = self.store.list_audit_invoices(
            org_id, vendor_id, AUDITABLE_INVOICE_STATUSES, settings.discount_audit_limit
        )

        evaluations = []
        for invoice in invoices:
            try:
                evaluation = self.evaluate(invoice, org_id)
                with self.store.atomic():
                    self.store.save_discount_audit(evaluation, org_id)
                evaluations.append(evaluation)
            except ReconciliationError as e:
                logger.error(f"Discount audit failed for invoice {invoice.invoice_number}: {e}", exc_info=True)

        logger.info(f"Audited {len(evaluations)} invoice(s) for vendor {vendor_id}")
        return evaluations

    def get_audit_summary(self, org_id: str, vendor_id: Optional[int] = None) -> AuditSummary:
        audits = self.store.list_discount_audits(org_id, vendor_id)
        return AuditSummary(
            total_audits=len(audits),
            correct=sum(1 for a in audits if a.status == DiscountStatus.CORRECT.value),
            under_discounted=sum(1 for a in audits if a.status == DiscountStatus.UNDER_DISCOUNTED.value),
            over_discounted=sum(1 for a in audits if a.status == DiscountStatus.OVER_DISCOUNTED.value),
            needs_review=sum(1 for a in audits if a.status == DiscountStatus.NEEDS_REVIEW.value),
            total_discrepancy=round_money(sum((abs(to_decimal(a.difference)) for a in audits), Decimal("0"))),
        )
