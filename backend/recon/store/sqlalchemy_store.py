"""
SQLAlchemy implementation of the reconciliation store.

Write methods only flush; callers group them with ``store.atomic()`` so a
failed step leaves nothing behind.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from recon.exceptions import NotFoundError
from recon.models import (
    SKU, PurchaseOrder, POLine, PurchaseInvoice, InvoiceLine, SalesInvoice, BankTransaction,
    PaymentMatch, GSTReturn, GSTReturnEntry, DiscountTerm, DocumentMatch, LineMatch, GSTMatch,
    DiscountAudit, ReviewQueue,
)
from recon.schemas.matching import DocumentMatchRecord, Resolution
from recon.schemas.gst import GSTMatchRecord
from recon.schemas.discount import DiscountEvaluation
from recon.schemas.payment import InvoiceKind
from recon.store.base import ReconciliationStore
from recon.utils.idempotency import idempotency_key

logger = logging.getLogger(__name__)

PAYABLE_STATUSES = ("UNPAID", "PARTIALLY_PAID")
OPEN_PO_STATUSES = ("OPEN", "PARTIALLY_FULFILLED")


class SqlAlchemyStore(ReconciliationStore):
    """Reconciliation store backed by a SQLAlchemy session"""

    def __init__(self, db: Session):
        self.db = db

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def _get_scoped(self, model, record_id: int, org_id: str, label: str):
        record = self.db.query(model).filter(model.id == record_id, model.org_id == org_id).first()
        if record is None:
            raise NotFoundError(label, record_id, org_id)
        return record

    # Records by id

    def get_purchase_order(self, po_id: int, org_id: str) -> PurchaseOrder:
        return self._get_scoped(PurchaseOrder, po_id, org_id, "Purchase order")

    def get_purchase_invoice(self, invoice_id: int, org_id: str) -> PurchaseInvoice:
        return self._get_scoped(PurchaseInvoice, invoice_id, org_id, "Purchase invoice")

    def get_sales_invoice(self, invoice_id: int, org_id: str) -> SalesInvoice:
        return self._get_scoped(SalesInvoice, invoice_id, org_id, "Sales invoice")

    def get_bank_transaction(self, transaction_id: int, org_id: str) -> BankTransaction:
        return self._get_scoped(BankTransaction, transaction_id, org_id, "Bank transaction")

    def get_payment_allocation(self, allocation_id: int, org_id: str) -> PaymentMatch:
        return self._get_scoped(PaymentMatch, allocation_id, org_id, "Payment allocation")

    def get_gst_return(self, return_id: int, org_id: str) -> GSTReturn:
        return self._get_scoped(GSTReturn, return_id, org_id, "GST return")

    def get_gst_entry(self, entry_id: int, org_id: str) -> GSTReturnEntry:
        entry = (
            self.db.query(GSTReturnEntry)
            .join(GSTReturn, GSTReturnEntry.return_id == GSTReturn.id)
            .filter(GSTReturnEntry.id == entry_id, GSTReturn.org_id == org_id)
            .first()
        )
        if entry is None:
            raise NotFoundError("GST return entry", entry_id, org_id)
        return entry

    def get_document_match(self, match_id: int, org_id: str) -> DocumentMatch:
        return self._get_scoped(DocumentMatch, match_id, org_id, "Document match")

    def get_review_item(self, item_id: int, org_id: str) -> ReviewQueue:
        item = (
            self.db.query(ReviewQueue)
            .join(DocumentMatch, ReviewQueue.document_match_id == DocumentMatch.id)
            .filter(ReviewQueue.id == item_id, DocumentMatch.org_id == org_id)
            .first()
        )
        if item is None:
            raise NotFoundError("Review queue item", item_id, org_id)
        return item

    # Catalog

    def _active_skus(self, org_id: str):
        return self.db.query(SKU).filter(SKU.org_id == org_id, SKU.is_active.is_(True))

    def find_sku_by_code(self, org_id: str, sku_code: str) -> Optional[SKU]:
        return (
            self._active_skus(org_id)
            .filter(func.lower(SKU.sku_code) == sku_code.strip().lower())
            .order_by(SKU.id)
            .first()
        )

    def find_sku_by_name(self, org_id: str, name: str) -> Optional[SKU]:
        return (
            self._active_skus(org_id)
            .filter(func.lower(SKU.name) == name.strip().lower())
            .order_by(SKU.id)
            .first()
        )

    def find_sku_by_alias(self, org_id: str, alias: str) -> Optional[SKU]:
        # JSON containment isn't portable across backends; the catalog is scanned instead
        for sku in self._active_skus(org_id).order_by(SKU.id):
            if alias in (sku.aliases or []):
                return sku
        return None

    def list_active_skus(self, org_id: str, limit: Optional[int] = None) -> List[SKU]:
        query = self._active_skus(org_id).order_by(SKU.id)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def append_sku_alias(self, sku_id: int, org_id: str, alias: str) -> bool:
        sku = (
            self.db.query(SKU)
            .filter(SKU.id == sku_id, SKU.org_id == org_id)
            .with_for_update()
            .first()
        )
        if sku is None:
            raise NotFoundError("SKU", sku_id, org_id)

        aliases = list(sku.aliases or [])
        if alias in aliases:
            return False

        # Reassign so the JSON column is marked dirty
        sku.aliases = aliases + [alias]
        self.db.flush()
        return True

    # Candidate listings

    def list_open_purchase_orders(self, org_id: str, vendor_id: int) -> List[PurchaseOrder]:
        return (
            self.db.query(PurchaseOrder)
            .filter(
                PurchaseOrder.org_id == org_id,
                PurchaseOrder.vendor_id == vendor_id,
                PurchaseOrder.status.in_(OPEN_PO_STATUSES),
            )
            .order_by(PurchaseOrder.po_date.desc(), PurchaseOrder.id.desc())
            .all()
        )

    def list_payable_invoices(
        self, org_id: str, invoice_kind: str, date_from: date, date_to: date, limit: int
    ) -> list:
        model = PurchaseInvoice if invoice_kind == InvoiceKind.PURCHASE else SalesInvoice
        return (
            self.db.query(model)
            .filter(
                model.org_id == org_id,
                model.payment_status.in_(PAYABLE_STATUSES),
                model.invoice_date >= date_from,
                model.invoice_date <= date_to,
            )
            .order_by(model.invoice_date.desc(), model.id)
            .limit(limit)
            .all()
        )

    def list_books_invoices(
        self, org_id: str, gstin: str, date_from: Optional[date] = None, date_to: Optional[date] = None
    ) -> List[PurchaseInvoice]:
        query = self.db.query(PurchaseInvoice).filter(
            PurchaseInvoice.org_id == org_id,
            PurchaseInvoice.vendor_gstin == gstin,
        )
        if date_from is not None:
            query = query.filter(PurchaseInvoice.invoice_date >= date_from)
        if date_to is not None:
            query = query.filter(PurchaseInvoice.invoice_date <= date_to)
        return query.order_by(PurchaseInvoice.id).all()

    def list_period_invoices(self, org_id: str, period_start: date, period_end: date) -> List[PurchaseInvoice]:
        return (
            self.db.query(PurchaseInvoice)
            .filter(
                PurchaseInvoice.org_id == org_id,
                PurchaseInvoice.invoice_date >= period_start,
                PurchaseInvoice.invoice_date <= period_end,
            )
            .order_by(PurchaseInvoice.id)
            .all()
        )

    def list_gst_entries(self, return_id: int) -> List[GSTReturnEntry]:
        return (
            self.db.query(GSTReturnEntry)
            .filter(GSTReturnEntry.return_id == return_id)
            .order_by(GSTReturnEntry.id)
            .all()
        )

    def list_discount_terms(
        self, org_id: str, vendor_id: int, on_date: date, term_types: Sequence[str]
    ) -> List[DiscountTerm]:
        return (
            self.db.query(DiscountTerm)
            .filter(
                DiscountTerm.org_id == org_id,
                DiscountTerm.vendor_id == vendor_id,
                DiscountTerm.is_active.is_(True),
                DiscountTerm.term_type.in_([str(getattr(t, "value", t)) for t in term_types]),
                DiscountTerm.valid_from <= on_date,
                or_(DiscountTerm.valid_to.is_(None), DiscountTerm.valid_to >= on_date),
            )
            .order_by(DiscountTerm.id)
            .all()
        )

    def list_audit_invoices(self, org_id: str, vendor_id: int, statuses: Sequence[str], limit: int) -> List[PurchaseInvoice]:
        return (
            self.db.query(PurchaseInvoice)
            .filter(
                PurchaseInvoice.org_id == org_id,
                PurchaseInvoice.vendor_id == vendor_id,
                PurchaseInvoice.status.in_(list(statuses)),
            )
            .order_by(PurchaseInvoice.invoice_date.desc(), PurchaseInvoice.id)
            .limit(limit)
            .all()
        )

    def list_pending_invoices(self, org_id: str, limit: int) -> List[PurchaseInvoice]:
        return (
            self.db.query(PurchaseInvoice)
            .filter(PurchaseInvoice.org_id == org_id, PurchaseInvoice.status == "PENDING")
            .order_by(PurchaseInvoice.invoice_date, PurchaseInvoice.id)
            .limit(limit)
            .all()
        )

    def list_discount_audits(self, org_id: str, vendor_id: Optional[int] = None) -> List[DiscountAudit]:
        query = self.db.query(DiscountAudit).filter(DiscountAudit.org_id == org_id)
        if vendor_id is not None:
            query = query.filter(DiscountAudit.vendor_id == vendor_id)
        return query.order_by(DiscountAudit.id).all()

    def list_transaction_allocations(self, transaction_id: int) -> List[PaymentMatch]:
        return (
            self.db.query(PaymentMatch)
            .filter(PaymentMatch.bank_transaction_id == transaction_id)
            .order_by(PaymentMatch.id)
            .all()
        )

    def first_payment_date(self, invoice_id: int) -> Optional[date]:
        return (
            self.db.query(func.min(BankTransaction.transaction_date))
            .join(PaymentMatch, PaymentMatch.bank_transaction_id == BankTransaction.id)
            .filter(PaymentMatch.purchase_invoice_id == invoice_id)
            .scalar()
        )

    def invoiced_quantity_for_po(self, po_id: int) -> Decimal:
        invoice_ids = [
            row[0]
            for row in self.db.query(DocumentMatch.invoice_id)
            .filter(
                DocumentMatch.purchase_order_id == po_id,
                or_(DocumentMatch.resolution.is_(None), DocumentMatch.resolution != "rejected"),
            )
            .distinct()
        ]
        if not invoice_ids:
            return Decimal("0")
        total = (
            self.db.query(func.sum(InvoiceLine.quantity))
            .filter(InvoiceLine.invoice_id.in_(invoice_ids))
            .scalar()
        )
        return Decimal(str(total)) if total is not None else Decimal("0")

    # Writes

    def save_document_match(self, record: DocumentMatchRecord) -> DocumentMatch:
        key = idempotency_key("po_invoice_match", record.org_id, record.purchase_order_id, record.invoice_id)
        match = self.db.query(DocumentMatch).filter(DocumentMatch.idempotency_key == key).first()
        if match is None:
            match = DocumentMatch(
                org_id=record.org_id,
                idempotency_key=key,
                purchase_order_id=record.purchase_order_id,
                invoice_id=record.invoice_id,
            )
            self.db.add(match)
        else:
            logger.info(f"Updating existing match {match.id} for PO {record.purchase_order_id} / invoice {record.invoice_id}")

        match.match_score = record.match_score
        match.match_type = record.match_type.value
        match.total_value_match = record.total_value_match
        match.total_gst_match = record.total_gst_match
        match.discrepancies = [d.model_dump(mode="json") for d in record.discrepancies]
        match.needs_review = record.needs_review
        match.auto_approve = record.auto_approve
        match.line_matches = [
            LineMatch(
                po_line_id=line.po_line_id,
                invoice_line_id=line.invoice_line_id,
                quantity_variance=line.quantity_variance,
                quantity_variance_percent=line.quantity_variance_percent,
                price_variance=line.price_variance,
                price_variance_percent=line.price_variance_percent,
                amount_variance=line.amount_variance,
                within_quantity_tolerance=line.within_quantity_tolerance,
                within_price_tolerance=line.within_price_tolerance,
                match_score=line.match_score,
                match_type=line.match_type.value,
            )
            for line in record.line_matches
        ]
        self.db.flush()
        return match

    def save_gst_match(self, record: GSTMatchRecord, org_id: str) -> GSTMatch:
        key = idempotency_key("gst_match", org_id, record.gst_entry_id)
        match = self.db.query(GSTMatch).filter(GSTMatch.idempotency_key == key).first()
        if match is None:
            match = GSTMatch(
                org_id=org_id,
                idempotency_key=key,
                gst_entry_id=record.gst_entry_id,
            )
            self.db.add(match)

        match.invoice_id = record.invoice_id
        match.match_type = record.match_type.value
        match.match_score = record.match_score
        match.itc_status = record.itc_status.value
        match.discrepancies = [d.model_dump(mode="json") for d in record.discrepancies]
        self.db.flush()
        return match

    def save_discount_audit(self, evaluation: DiscountEvaluation, org_id: str) -> DiscountAudit:
        key = idempotency_key("discount_audit", org_id, evaluation.invoice_id)
        audit = self.db.query(DiscountAudit).filter(DiscountAudit.idempotency_key == key).first()
        if audit is None:
            audit = DiscountAudit(
                org_id=org_id,
                idempotency_key=key,
                invoice_id=evaluation.invoice_id,
                vendor_id=evaluation.vendor_id,
            )
            self.db.add(audit)

        audit.discount_term_id = evaluation.discount_term_id
        audit.expected_discount = evaluation.expected_discount
        audit.actual_discount = evaluation.actual_discount
        audit.difference = evaluation.difference
        audit.status = evaluation.status.value
        audit.notes = "; ".join(evaluation.notes) or None
        self.db.flush()
        return audit

    def add_payment_allocation(
        self, transaction, invoice, invoice_kind: str, amount: Decimal, match_score: float,
        match_type: str, notes: Optional[str] = None
    ) -> PaymentMatch:
        allocation = PaymentMatch(
            org_id=transaction.org_id,
            bank_transaction_id=transaction.id,
            purchase_invoice_id=invoice.id if invoice_kind == InvoiceKind.PURCHASE else None,
            sales_invoice_id=invoice.id if invoice_kind == InvoiceKind.SALES else None,
            matched_amount=amount,
            match_score=match_score,
            match_type=match_type,
            notes=notes,
        )
        self.db.add(allocation)
        self.db.flush()
        return allocation

    def delete_payment_allocation(self, allocation: PaymentMatch) -> None:
        self.db.delete(allocation)
        self.db.flush()

    def update_invoice_payment(self, invoice, amount_paid: Decimal, payment_status: str) -> None:
        invoice.amount_paid = amount_paid
        invoice.payment_status = payment_status
        self.db.flush()

    def set_transaction_status(self, transaction: BankTransaction, match_status: str) -> None:
        transaction.match_status = match_status
        self.db.flush()

    def set_invoice_status(self, invoice: PurchaseInvoice, status: str) -> None:
        invoice.status = status
        self.db.flush()

    def set_purchase_order_status(self, purchase_order: PurchaseOrder, status: str) -> None:
        purchase_order.status = status
        self.db.flush()

    def find_open_review_item(self, document_match_id: int) -> Optional[ReviewQueue]:
        return (
            self.db.query(ReviewQueue)
            .filter(ReviewQueue.document_match_id == document_match_id, ReviewQueue.resolved_at.is_(None))
            .first()
        )

    def add_review_item(self, document_match_id: int, priority: str, issue_category: str, sla_deadline) -> ReviewQueue:
        item = ReviewQueue(
            document_match_id=document_match_id,
            priority=priority,
            issue_category=issue_category,
            sla_deadline=sla_deadline,
        )
        self.db.add(item)
        self.db.flush()
        return item

    def resolve_review_item(self, item: ReviewQueue, document_match: DocumentMatch, resolution: Resolution) -> None:
        item.resolved_at = resolution.resolved_at
        item.resolution_notes = resolution.notes
        document_match.resolution = resolution.decision
        document_match.resolved_by = resolution.resolved_by
        document_match.resolved_at = resolution.resolved_at
        document_match.resolution_notes = resolution.notes
        self.db.flush()
