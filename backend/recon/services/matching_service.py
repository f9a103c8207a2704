"""
Invoice matching workflow: find the best PO, persist the match, route it.
"""
import logging
from typing import Optional

from recon.config import settings
from recon.exceptions import ReconciliationError
from recon.schemas.matching import DocumentMatchType, ProcessingOutcome
from recon.services.po_invoice_matcher import DocumentReconciler
from recon.services.review_queue_service import ReviewQueueService
from recon.store.base import ReconciliationStore
from recon.utils.matching_rules import HUNDRED, to_decimal

logger = logging.getLogger(__name__)


def process_invoice(
    store: ReconciliationStore,
    invoice_id: int,
    org_id: str,
    reconciler: Optional[DocumentReconciler] = None,
    review_queue: Optional[ReviewQueueService] = None,
) -> ProcessingOutcome:
    """
    Match an invoice to its best purchase order and record the outcome

    Invoice status becomes MATCHED (auto-approved), PENDING (needs review) or
    UNMATCHED (no open PO). A clean EXACT match also advances the PO status.

    Args:
        store: Reconciliation store
        invoice_id: Purchase invoice to process
        org_id: Organization scope

    Returns:
        ProcessingOutcome describing what was saved and queued
    """
    reconciler = reconciler or DocumentReconciler(store)
    review_queue = review_queue or ReviewQueueService(store)

    invoice = store.get_purchase_invoice(invoice_id, org_id)
    logger.info(f"Starting PO matching for invoice {invoice.invoice_number}")

    try:
        best = reconciler.find_best_po(invoice_id, org_id)

        if best is None:
            with store.atomic():
                store.set_invoice_status(invoice, "UNMATCHED")
            logger.info(f"No suitable PO found for invoice {invoice.invoice_number}")
            return ProcessingOutcome(
                invoice_id=invoice_id,
                matched=False,
                invoice_status="UNMATCHED",
                reason="No suitable PO found",
            )

        record = best.match
        match_id = reconciler.save_match(record)

        invoice_status = "PENDING" if record.needs_review else "MATCHED"
        with store.atomic():
            store.set_invoice_status(invoice, invoice_status)

        review_queue_id = None
        if record.needs_review:
            review_queue_id = review_queue.add_to_queue(match_id, record).id

        po_status = None
        if record.match_type == DocumentMatchType.EXACT and not record.needs_review:
            po_status = update_po_status(store, best.purchase_order_id, org_id)

    except ReconciliationError:
        store.rollback()
        with store.atomic():
            store.set_invoice_status(invoice, "FAILED")
        logger.error(f"Automatic matching failed for invoice {invoice_id}", exc_info=True)
        raise

    logger.info(
        f"Matched invoice {invoice.invoice_number} to PO {best.po_number} "
        f"(match {match_id}, score {record.match_score}, needs_review={record.needs_review})"
    )
    return ProcessingOutcome(
        invoice_id=invoice_id,
        matched=True,
        invoice_status=invoice_status,
        document_match_id=match_id,
        purchase_order_id=best.purchase_order_id,
        match_score=record.match_score,
        needs_review=record.needs_review,
        review_queue_id=review_queue_id,
        po_status=po_status,
    )


def update_po_status(store: ReconciliationStore, po_id: int, org_id: str) -> str:
    """Advance a PO to PARTIALLY_FULFILLED or FULFILLED by the share of ordered quantity invoiced"""
    po = store.get_purchase_order(po_id, org_id)
    ordered = sum((to_decimal(line.quantity) for line in po.po_lines), to_decimal(0))
    if ordered <= 0:
        return po.status

    invoiced = store.invoiced_quantity_for_po(po.id)
    fulfilment_percent = invoiced / ordered * HUNDRED

    status = po.status
    if fulfilment_percent >= to_decimal(settings.po_fulfilled_percent):
        status = "FULFILLED"
    elif fulfilment_percent > 0:
        status = "PARTIALLY_FULFILLED"

    if status != po.status:
        old_status = po.status
        with store.atomic():
            store.set_purchase_order_status(po, status)
        logger.info(f"PO {po.po_number} status updated: {old_status} -> {status}")
    return status
