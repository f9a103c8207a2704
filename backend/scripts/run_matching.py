#!/usr/bin/env python3
"""
Batch runner: match pending purchase invoices to POs and reconcile a GST return.

Usage:
    python scripts/run_matching.py --org demo-org
    python scripts/run_matching.py --org demo-org --gst-return 3 --save
"""

import argparse
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env'))

import logging

from recon.database import SessionLocal
from recon.exceptions import ReconciliationError
from recon.services.gst_reconciliation import GSTEntryReconciler
from recon.services.matching_service import process_invoice
from recon.store import SqlAlchemyStore

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def run(org_id: str, limit: int, gst_return_id: int = None, save: bool = False):
    db = SessionLocal()
    store = SqlAlchemyStore(db)
    try:
        invoices = store.list_pending_invoices(org_id, limit)
        logger.info(f"Matching {len(invoices)} pending invoice(s) for {org_id}")

        matched = review = failed = 0
        for invoice in invoices:
            try:
                outcome = process_invoice(store, invoice.id, org_id)
            except ReconciliationError as e:
                failed += 1
                logger.error(f"Invoice {invoice.id} failed: {e}")
                continue
            if outcome.matched and outcome.needs_review:
                review += 1
            elif outcome.matched:
                matched += 1

        logger.info(f"Done: {matched} auto-matched, {review} queued for review, {failed} failed")

        if gst_return_id is not None:
            reconciler = GSTEntryReconciler(store)
            result = reconciler.reconcile_return(gst_return_id, org_id)
            logger.info(f"GST summary: {result.summary.model_dump()}")
            if save:
                reconciler.save_reconciliation_matches(result.matches, org_id)
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run PO/invoice matching and GST reconciliation")
    parser.add_argument("--org", required=True, help="Organization id")
    parser.add_argument("--limit", type=int, default=100)
    parser.add_argument("--gst-return", type=int, default=None, help="GST return id to reconcile")
    parser.add_argument("--save", action="store_true", help="Persist GST match results")
    args = parser.parse_args()
    run(args.org, args.limit, args.gst_return, args.save)
