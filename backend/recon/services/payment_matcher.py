"""
Payment Matcher - matches bank transactions to open invoices and applies payments.

A debit pays purchase invoices, a credit settles sales invoices. Candidates are
scored on amount, reference, description and date proximity; the best one decides
the match type. Allocations keep two invariants:
- a transaction is never allocated beyond its amount plus the split tolerance
- an invoice is never paid beyond its total plus the overpayment tolerance
"""
import logging
from datetime import timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from recon.config import settings
from recon.exceptions import AllocationError
from recon.models.bank_transaction import BankTransaction
from recon.schemas.payment import (
    AllocationRequest, InvoiceCandidate, InvoiceKind, PaymentAllocation, PaymentMatchResult,
    PaymentMatchType, ReversalResult,
)
from recon.store.base import ReconciliationStore
from recon.utils.matching_rules import round_money, to_decimal
from recon.utils.similarity import extract_invoice_number

logger = logging.getLogger(__name__)

EXACT_AMOUNT_DELTA = Decimal("1")
PARTIAL_HIGH_RATIO = Decimal("0.95")
PARTIAL_LOW_RATIO = Decimal("0.5")


def transaction_amount(transaction: BankTransaction) -> Decimal:
    debit = to_decimal(transaction.debit)
    if debit > 0:
        return debit
    return to_decimal(transaction.credit)


def transaction_kind(transaction: BankTransaction) -> InvoiceKind:
    """Money out pays suppliers, money in comes from customers"""
    return InvoiceKind.PURCHASE if to_decimal(transaction.debit) > 0 else InvoiceKind.SALES


def payment_status_for(amount_paid: Decimal, total: Decimal) -> str:
    if amount_paid <= 0:
        return "UNPAID"
    if amount_paid >= to_decimal(total) - to_decimal(settings.invoice_overpayment_tolerance):
        return "PAID"
    return "PARTIALLY_PAID"


def allocation_match_type(match_score: float) -> str:
    if match_score >= 95:
        return "EXACT"
    if match_score >= 70:
        return "PARTIAL_QTY"
    return "PARTIAL_BOTH"


class PaymentMatcher:
    """Scores open invoices against bank transactions and records allocations"""

    def __init__(self, store: ReconciliationStore):
        self.store = store

    def score_invoice(self, transaction: BankTransaction, invoice, invoice_kind: InvoiceKind) -> Optional[InvoiceCandidate]:
        """Score one invoice against a transaction; None when nothing is outstanding on it"""
        txn_amount = transaction_amount(transaction)
        total = to_decimal(invoice.total_with_gst)
        paid = to_decimal(invoice.amount_paid)
        outstanding = total - paid
        if outstanding <= 0:
            return None

        score = 0
        reasons = []
        difference = abs(txn_amount - outstanding)

        # Amount
        if difference < EXACT_AMOUNT_DELTA:
            score += 40
            reasons.append("Exact amount match")
        elif difference <= to_decimal(settings.payment_amount_tolerance):
            score += 30
            reasons.append(f"Amount within ₹{settings.payment_amount_tolerance:g}")
        elif txn_amount < outstanding:
            ratio = txn_amount / outstanding
            if ratio >= PARTIAL_HIGH_RATIO:
                score += 25
                reasons.append("Partial payment (≥95%)")
            elif ratio >= PARTIAL_LOW_RATIO:
                score += 15
                reasons.append("Partial payment (≥50%)")

        # Reference
        reference_matched = False
        invoice_number = (invoice.invoice_number or "").lower()
        reference = (transaction.reference_number or "").strip().lower()
        if reference and invoice_number:
            if invoice_number in reference or reference in invoice_number:
                score += 30
                reference_matched = True
                reasons.append("Reference match")
            else:
                extracted = extract_invoice_number(transaction.reference_number)
                if extracted and extracted.lower() in invoice_number:
                    score += 25
                    reference_matched = True
                    reasons.append("Extracted reference match")

        # Description
        description = (transaction.description or "").lower()
        if invoice_number and invoice_number in description:
            score += 15
            reasons.append("Invoice number in description")

        # Date proximity: the strongest applicable signal counts
        date_points, date_reason = self._date_score(transaction, invoice)
        if date_points:
            score += date_points
            reasons.append(date_reason)

        return InvoiceCandidate(
            invoice_id=invoice.id,
            invoice_kind=invoice_kind,
            invoice_number=invoice.invoice_number,
            invoice_date=invoice.invoice_date,
            due_date=invoice.due_date,
            total_with_gst=total,
            amount_paid=paid,
            outstanding=outstanding,
            amount_difference=difference,
            match_score=float(min(score, 100)),
            reference_matched=reference_matched,
            reasons=reasons,
        )

    def _date_score(self, transaction: BankTransaction, invoice):
        options = []
        days_since_invoice = abs((transaction.transaction_date - invoice.invoice_date).days)
        if days_since_invoice <= 7:
            options.append((15, "Payment within 7 days of invoice"))
        elif days_since_invoice <= 30:
            options.append((10, "Payment within 30 days of invoice"))
        elif days_since_invoice <= 60:
            options.append((5, "Payment within 60 days of invoice"))

        if invoice.due_date is not None:
            days_from_due = abs((transaction.transaction_date - invoice.due_date).days)
            if days_from_due <= 7:
                options.append((12, "Payment near due date"))

        if not options:
            return 0, None
        # max() keeps the first of equal scores, so ordering above is the tie-break
        return max(options, key=lambda option: option[0])

    def match_transaction(
        self, transaction_id: int, org_id: str, invoice_kind: Optional[InvoiceKind] = None
    ) -> PaymentMatchResult:
        """
        Find the open invoices a bank transaction most likely pays.

        Args:
            transaction_id: Bank transaction to match
            org_id: Organization scope
            invoice_kind: Optional expected invoice kind; it must agree with the
                transaction's direction or the result is NO_MATCH

        Returns:
            PaymentMatchResult with ranked candidates and human-readable reasons
        """
        transaction = self.store.get_bank_transaction(transaction_id, org_id)
        amount = transaction_amount(transaction)
        kind = transaction_kind(transaction)

        if amount <= 0:
            return self._no_match(transaction, amount, kind, "Transaction has no debit or credit amount")

        if invoice_kind is not None and InvoiceKind(invoice_kind) != kind:
            direction = "Debit" if kind == InvoiceKind.PURCHASE else "Credit"
            return self._no_match(
                transaction, amount, kind,
                f"{direction} transaction cannot settle {InvoiceKind(invoice_kind).value} invoices",
            )

        window = timedelta(days=settings.payment_date_window_days)
        invoices = self.store.list_payable_invoices(
            org_id,
            kind,
            transaction.transaction_date - window,
            transaction.transaction_date + window,
            settings.payment_candidate_limit,
        )

        candidates = []
        for invoice in invoices:
            candidate = self.score_invoice(transaction, invoice, kind)
            if candidate and candidate.match_score >= settings.payment_min_score:
                candidates.append(candidate)
        candidates.sort(key=lambda c: c.match_score, reverse=True)

        if not candidates:
            return self._no_match(transaction, amount, kind, "No open invoice scored high enough")

        best = candidates[0]
        match_type, total_matched = self._classify(amount, best)
        unmatched = amount - total_matched
        confidence = best.match_score
        auto_match = confidence >= settings.payment_auto_match_score and match_type != PaymentMatchType.SPLIT
        needs_review = (
            not auto_match
            or match_type == PaymentMatchType.SPLIT
            or unmatched > to_decimal(settings.payment_amount_tolerance)
        )

        logger.info(
            f"Transaction {transaction.id}: {match_type.value} against invoice {best.invoice_number} "
            f"(score {confidence}, {best.match_reason})"
        )

        return PaymentMatchResult(
            bank_transaction_id=transaction.id,
            transaction_amount=amount,
            invoice_kind=kind,
            match_type=match_type,
            candidates=candidates,
            best_match=best,
            total_matched=total_matched,
            unmatched_amount=unmatched,
            confidence=confidence,
            auto_match=auto_match,
            needs_review=needs_review,
            reasons=best.reasons,
        )

    def _classify(self, amount: Decimal, best: InvoiceCandidate):
        if best.amount_difference < EXACT_AMOUNT_DELTA:
            return PaymentMatchType.EXACT, amount
        if best.amount_difference <= to_decimal(settings.payment_amount_tolerance):
            return PaymentMatchType.FUZZY, min(amount, best.outstanding)
        if best.reference_matched:
            return PaymentMatchType.REFERENCE, min(amount, best.outstanding)
        if amount < best.outstanding:
            return PaymentMatchType.PARTIAL, amount
        return PaymentMatchType.SPLIT, best.outstanding

    def _no_match(self, transaction: BankTransaction, amount: Decimal, kind: InvoiceKind, reason: str) -> PaymentMatchResult:
        return PaymentMatchResult(
            bank_transaction_id=transaction.id,
            transaction_amount=amount,
            invoice_kind=kind,
            match_type=PaymentMatchType.NO_MATCH,
            unmatched_amount=amount,
            needs_review=True,
            reasons=[reason],
        )

    def _get_invoice(self, invoice_id: int, invoice_kind: InvoiceKind, org_id: str):
        if invoice_kind == InvoiceKind.PURCHASE:
            return self.store.get_purchase_invoice(invoice_id, org_id)
        return self.store.get_sales_invoice(invoice_id, org_id)

    def allocate(
        self,
        transaction_id: int,
        org_id: str,
        allocations: List[AllocationRequest],
        match_score: float,
        notes: Optional[str] = None,
    ) -> List[PaymentAllocation]:
        """
        Apply a transaction to one or more invoices, all or nothing.

        Raises:
            NotFoundError: transaction or an invoice is missing from the organization
            AllocationError: an allocation invariant would be broken
        """
        if not allocations:
            raise AllocationError("At least one allocation is required")

        transaction = self.store.get_bank_transaction(transaction_id, org_id)
        amount = transaction_amount(transaction)
        kind = transaction_kind(transaction)

        already_allocated = sum(
            (to_decimal(a.matched_amount) for a in self.store.list_transaction_allocations(transaction.id)),
            Decimal("0"),
        )
        requested = sum((to_decimal(a.amount) for a in allocations), Decimal("0"))
        if already_allocated + requested > amount + to_decimal(settings.payment_amount_tolerance):
            raise AllocationError(
                f"Allocations total {already_allocated + requested} exceeds transaction amount {amount} "
                f"(tolerance ₹{settings.payment_amount_tolerance:g})"
            )

        # Validate every invoice before writing anything
        invoices = []
        running_paid: Dict[tuple, Decimal] = {}
        for request in allocations:
            if request.invoice_kind != kind:
                raise AllocationError(
                    f"Cannot apply a {kind.value} payment to {request.invoice_kind.value} invoice {request.invoice_id}"
                )
            invoice = self._get_invoice(request.invoice_id, request.invoice_kind, org_id)
            key = (request.invoice_kind, invoice.id)
            new_paid = running_paid.get(key, to_decimal(invoice.amount_paid)) + to_decimal(request.amount)
            limit = to_decimal(invoice.total_with_gst) + to_decimal(settings.invoice_overpayment_tolerance)
            if new_paid > limit:
                raise AllocationError(
                    f"Invoice {invoice.invoice_number} would be paid {new_paid}, above its total {invoice.total_with_gst}"
                )
            running_paid[key] = new_paid
            invoices.append(invoice)

        transaction_status = "AUTO_MATCHED" if match_score >= settings.payment_auto_match_score else "MANUALLY_MATCHED"
        results = []
        with self.store.atomic():
            for request, invoice in zip(allocations, invoices):
                allocation = self.store.add_payment_allocation(
                    transaction,
                    invoice,
                    request.invoice_kind,
                    round_money(request.amount),
                    match_score,
                    allocation_match_type(match_score),
                    notes,
                )
                new_paid = round_money(to_decimal(invoice.amount_paid) + to_decimal(request.amount))
                status = payment_status_for(new_paid, invoice.total_with_gst)
                self.store.update_invoice_payment(invoice, new_paid, status)
                results.append(PaymentAllocation(
                    id=allocation.id,
                    bank_transaction_id=transaction.id,
                    invoice_id=invoice.id,
                    invoice_kind=request.invoice_kind,
                    matched_amount=round_money(request.amount),
                    match_score=match_score,
                    match_type=allocation.match_type,
                    invoice_amount_paid=new_paid,
                    invoice_payment_status=status,
                    transaction_status=transaction_status,
                ))
            self.store.set_transaction_status(transaction, transaction_status)

        logger.info(
            f"Allocated transaction {transaction_id} to {len(results)} invoice(s), total {requested}, "
            f"status {transaction_status}"
        )
        return results

    def create_payment_match(
        self,
        transaction_id: int,
        org_id: str,
        invoice_id: int,
        invoice_kind: InvoiceKind,
        amount: Decimal,
        match_score: float,
        notes: Optional[str] = None,
    ) -> PaymentAllocation:
        request = AllocationRequest(invoice_id=invoice_id, invoice_kind=invoice_kind, amount=amount)
        return self.allocate(transaction_id, org_id, [request], match_score, notes)[0]

    def create_split_payment(
        self, transaction_id: int, org_id: str, splits: List[AllocationRequest], notes: Optional[str] = None
    ) -> List[PaymentAllocation]:
        """Spread one transaction over several invoices at the fixed split score"""
        allocations = self.allocate(transaction_id, org_id, splits, settings.payment_split_score, notes)
        logger.info(f"Split payment created for transaction {transaction_id} across {len(splits)} invoice(s)")
        return allocations

    def reverse_allocation(self, allocation_id: int, org_id: str) -> ReversalResult:
        """Undo one allocation and roll the invoice's paid amount back"""
        allocation = self.store.get_payment_allocation(allocation_id, org_id)
        transaction = self.store.get_bank_transaction(allocation.bank_transaction_id, org_id)

        if allocation.purchase_invoice_id is not None:
            invoice_kind = InvoiceKind.PURCHASE
            invoice = self.store.get_purchase_invoice(allocation.purchase_invoice_id, org_id)
        else:
            invoice_kind = InvoiceKind.SALES
            invoice = self.store.get_sales_invoice(allocation.sales_invoice_id, org_id)

        reversed_amount = to_decimal(allocation.matched_amount)
        new_paid = max(Decimal("0"), to_decimal(invoice.amount_paid) - reversed_amount)
        status = payment_status_for(new_paid, invoice.total_with_gst)

        with self.store.atomic():
            self.store.update_invoice_payment(invoice, round_money(new_paid), status)
            self.store.delete_payment_allocation(allocation)
            if not self.store.list_transaction_allocations(transaction.id):
                self.store.set_transaction_status(transaction, "UNMATCHED")
            transaction_status = transaction.match_status

        logger.info(f"Reversed allocation {allocation_id} of {reversed_amount} on invoice {invoice.invoice_number}")

        return ReversalResult(
            allocation_id=allocation_id,
            bank_transaction_id=transaction.id,
            invoice_id=invoice.id,
            invoice_kind=invoice_kind,
            reversed_amount=reversed_amount,
            invoice_amount_paid=round_money(new_paid),
            invoice_payment_status=status,
            transaction_status=transaction_status,
        )
