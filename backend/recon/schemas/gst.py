from pydantic import BaseModel
from typing import List, Optional
from enum import Enum
from decimal import Decimal

from recon.schemas.common import Discrepancy


class GSTMatchType(str, Enum):
    EXACT = "EXACT"
    PARTIAL = "PARTIAL"
    NO_MATCH = "NO_MATCH"


class ITCStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    NOT_FILED = "NOT_FILED"
    MISMATCH = "MISMATCH"


class GSTMatchRecord(BaseModel):
    gst_entry_id: int
    invoice_id: Optional[int] = None
    invoice_number: str
    counterparty_gstin: str
    match_type: GSTMatchType
    match_score: float
    itc_status: ITCStatus
    entry_tax: Decimal
    discrepancies: List[Discrepancy] = []


class ReconciliationSummary(BaseModel):
    total_gst_entries: int
    total_invoices: int
    matched: int
    unmatched: int
    missing_in_books: int
    missing_in_gstr: int
    amount_mismatches: int
    gst_mismatches: int
    total_itc_available: Decimal
    total_itc_claimed: Decimal
    itc_difference: Decimal


class GSTReconciliationResult(BaseModel):
    return_id: int
    period: str
    matches: List[GSTMatchRecord]
    summary: ReconciliationSummary


class SaveSummary(BaseModel):
    saved: int
    skipped: int
