"""
PO / Invoice Matcher - reconciles a purchase invoice against a purchase order.

Line pairs come from the LineItemMatcher; document totals are compared on the
pre-tax subtotal and on the tax-inclusive total. The overall score blends the
average line score (60%) with the two total checks (20 points each).
"""
import logging
from decimal import Decimal
from typing import List, Optional

from recon.config import settings
from recon.exceptions import ReconciliationError, VendorMismatchError
from recon.models.purchase_order import PurchaseOrder
from recon.models.invoice import PurchaseInvoice
from recon.schemas.common import Discrepancy, DiscrepancyType, Severity
from recon.schemas.matching import BestPOMatch, DocumentMatchRecord, DocumentMatchType
from recon.services.line_item_matcher import LineItemMatcher
from recon.store.base import ReconciliationStore
from recon.utils.matching_rules import (
    check_line_values, check_price_variance, check_quantity_variance, check_total_match,
    partial_credit, round_score, to_decimal,
)

logger = logging.getLogger(__name__)

LINE_WEIGHT = Decimal("0.6")
TOTAL_POINTS = 20


class DocumentReconciler:
    """Compares whole documents and picks the best purchase order for an invoice"""

    def __init__(self, store: ReconciliationStore, line_matcher: Optional[LineItemMatcher] = None):
        self.store = store
        self.line_matcher = line_matcher or LineItemMatcher()

    def reconcile(self, invoice_id: int, po_id: int, org_id: str) -> DocumentMatchRecord:
        """
        Reconcile one invoice against one purchase order.

        Raises:
            NotFoundError: either record is missing from the organization
            VendorMismatchError: the documents belong to different vendors
        """
        invoice = self.store.get_purchase_invoice(invoice_id, org_id)
        po = self.store.get_purchase_order(po_id, org_id)
        return self.compare(po, invoice, org_id)

    def compare(self, po: PurchaseOrder, invoice: PurchaseInvoice, org_id: str) -> DocumentMatchRecord:
        if po.vendor_id != invoice.vendor_id:
            raise VendorMismatchError(po.vendor_id, invoice.vendor_id)

        po_lines = sorted(po.po_lines, key=lambda line: line.line_no)
        invoice_lines = sorted(invoice.invoice_lines, key=lambda line: line.line_no)

        discrepancies: List[Discrepancy] = []
        for line in po_lines:
            discrepancies.extend(check_line_values(line, "PO"))
        for line in invoice_lines:
            discrepancies.extend(check_line_values(line, "Invoice"))

        pairs, unmatched_po_lines, unmatched_invoice_lines = self.line_matcher.match_lines(po_lines, invoice_lines)

        line_matches = []
        for po_line, invoice_line, candidate in pairs:
            line_matches.append(self.line_matcher.build_line_match(po_line, invoice_line, candidate))

            _, qty_issue = check_quantity_variance(
                po_line.quantity, invoice_line.quantity, self.line_matcher.quantity_tolerance, invoice_line.line_no
            )
            if qty_issue:
                discrepancies.append(qty_issue)

            _, price_issue = check_price_variance(
                po_line.unit_price, invoice_line.unit_price, self.line_matcher.price_tolerance, invoice_line.line_no
            )
            if price_issue:
                discrepancies.append(price_issue)

        for po_line in unmatched_po_lines:
            discrepancies.append(Discrepancy(
                type=DiscrepancyType.SHORT_SUPPLY,
                severity=Severity.HIGH,
                message=f"PO line {po_line.line_no} ({po_line.description}) not found on invoice",
                expected=to_decimal(po_line.quantity),
                actual=Decimal("0"),
                line_number=po_line.line_no,
            ))

        for invoice_line in unmatched_invoice_lines:
            discrepancies.append(Discrepancy(
                type=DiscrepancyType.EXCESS_SUPPLY,
                severity=Severity.MEDIUM,
                message=f"Invoice line {invoice_line.line_no} ({invoice_line.description}) not on purchase order",
                expected=Decimal("0"),
                actual=to_decimal(invoice_line.quantity),
                line_number=invoice_line.line_no,
            ))

        value_match, value_issue, value_variance = check_total_match(
            po.total_amount, invoice.total_amount, settings.total_value_tolerance_percent, "Subtotal"
        )
        if value_issue:
            discrepancies.append(value_issue)

        gst_match, gst_issue, gst_variance = check_total_match(
            po.total_with_gst, invoice.total_with_gst, settings.total_gst_tolerance_percent, "Total with GST"
        )
        if gst_issue:
            discrepancies.append(gst_issue)

        if pairs:
            avg_line_score = sum(Decimal(str(c.score)) for _, _, c in pairs) / len(pairs)
        else:
            avg_line_score = Decimal("0")

        score = (
            LINE_WEIGHT * avg_line_score
            + (TOTAL_POINTS if value_match else partial_credit(TOTAL_POINTS, value_variance))
            + (TOTAL_POINTS if gst_match else partial_credit(TOTAL_POINTS, gst_variance))
        )
        match_score = round_score(score)

        match_type = self._classify(match_score, discrepancies, value_match, gst_match)
        has_high = any(d.severity == Severity.HIGH for d in discrepancies)
        needs_review = match_score < settings.document_auto_approve_score or has_high

        return DocumentMatchRecord(
            org_id=org_id,
            purchase_order_id=po.id,
            invoice_id=invoice.id,
            match_score=match_score,
            match_type=match_type,
            line_matches=line_matches,
            unmatched_po_line_ids=[line.id for line in unmatched_po_lines],
            unmatched_invoice_line_ids=[line.id for line in unmatched_invoice_lines],
            total_value_match=value_match,
            total_gst_match=gst_match,
            value_variance_percent=round_score(value_variance),
            gst_variance_percent=round_score(gst_variance),
            discrepancies=discrepancies,
            needs_review=needs_review,
            auto_approve=not needs_review,
        )

    def _classify(
        self, match_score: float, discrepancies: List[Discrepancy], value_match: bool, gst_match: bool
    ) -> DocumentMatchType:
        if match_score >= settings.document_exact_score and not discrepancies:
            return DocumentMatchType.EXACT
        if not value_match and not gst_match:
            return DocumentMatchType.PARTIAL_BOTH
        if not value_match:
            return DocumentMatchType.PARTIAL_QTY
        if not gst_match:
            return DocumentMatchType.PARTIAL_VALUE
        if match_score >= 50:
            return DocumentMatchType.PARTIAL_QTY
        return DocumentMatchType.NO_MATCH

    def find_best_po(self, invoice_id: int, org_id: str) -> Optional[BestPOMatch]:
        """
        Compare an invoice with every open PO of its vendor and keep the highest score.

        POs that can't be compared are logged and skipped. Returns None when the
        vendor has no open purchase orders.
        """
        invoice = self.store.get_purchase_invoice(invoice_id, org_id)
        purchase_orders = self.store.list_open_purchase_orders(org_id, invoice.vendor_id)

        if not purchase_orders:
            logger.warning(f"No open purchase orders for vendor {invoice.vendor_id} (invoice {invoice.invoice_number})")
            return None

        best: Optional[BestPOMatch] = None
        for po in purchase_orders:
            try:
                record = self.compare(po, invoice, org_id)
            except ReconciliationError as e:
                logger.error(f"Failed to compare invoice {invoice.invoice_number} with PO {po.po_number}: {e}")
                continue

            if best is None or record.match_score > best.match_score:
                best = BestPOMatch(
                    purchase_order_id=po.id,
                    po_number=po.po_number,
                    match_score=record.match_score,
                    match=record,
                )

        if best:
            logger.info(f"Best PO for invoice {invoice.invoice_number}: {best.po_number} (score {best.match_score})")
        return best

    def save_match(self, record: DocumentMatchRecord) -> int:
        """Persist a match; saving the same PO/invoice pair again updates it in place"""
        with self.store.atomic():
            match = self.store.save_document_match(record)
            match_id = match.id

        logger.info(
            f"Saved match {match_id}: PO {record.purchase_order_id} / invoice {record.invoice_id} "
            f"{record.match_type.value} score={record.match_score} needs_review={record.needs_review}"
        )
        return match_id
