from pydantic import BaseModel
from typing import List, Optional, Literal
from enum import Enum
from decimal import Decimal
from datetime import datetime

from recon.schemas.common import Discrepancy


class LineMatchType(str, Enum):
    EXACT = "EXACT"
    PARTIAL = "PARTIAL"
    NO_MATCH = "NO_MATCH"


class DocumentMatchType(str, Enum):
    EXACT = "EXACT"
    PARTIAL_QTY = "PARTIAL_QTY"
    PARTIAL_VALUE = "PARTIAL_VALUE"
    PARTIAL_BOTH = "PARTIAL_BOTH"
    NO_MATCH = "NO_MATCH"


class LineCandidate(BaseModel):
    """Score of one PO line considered for an invoice line, with the signals behind it"""
    po_line_id: int
    invoice_line_id: int
    score: float
    sku_matched: bool
    description_matched: bool
    hsn_matched: bool
    quantity_variance_percent: float
    price_variance_percent: float
    within_quantity_tolerance: bool
    within_price_tolerance: bool


class LineMatchRecord(BaseModel):
    po_line_id: int
    invoice_line_id: int
    po_line_no: int
    invoice_line_no: int
    quantity_variance: Decimal  # invoice - PO
    quantity_variance_percent: float
    price_variance: Decimal
    price_variance_percent: float
    amount_variance: Decimal
    within_quantity_tolerance: bool
    within_price_tolerance: bool
    match_score: float
    match_type: LineMatchType


class Resolution(BaseModel):
    decision: Literal["approved", "rejected"]
    resolved_by: str
    resolved_at: datetime
    notes: Optional[str] = None


class DocumentMatchRecord(BaseModel):
    """Result of reconciling one purchase invoice against one purchase order"""
    org_id: str
    purchase_order_id: int
    invoice_id: int
    match_score: float
    match_type: DocumentMatchType
    line_matches: List[LineMatchRecord]
    unmatched_po_line_ids: List[int] = []
    unmatched_invoice_line_ids: List[int] = []
    total_value_match: bool
    total_gst_match: bool
    value_variance_percent: float
    gst_variance_percent: float
    discrepancies: List[Discrepancy]
    needs_review: bool
    auto_approve: bool
    resolution: Optional[Resolution] = None


class BestPOMatch(BaseModel):
    purchase_order_id: int
    po_number: str
    match_score: float
    match: DocumentMatchRecord


class ProcessingOutcome(BaseModel):
    """What the invoice matching workflow did with one invoice"""
    invoice_id: int
    matched: bool
    invoice_status: str
    document_match_id: Optional[int] = None
    purchase_order_id: Optional[int] = None
    match_score: Optional[float] = None
    needs_review: bool = False
    review_queue_id: Optional[int] = None
    po_status: Optional[str] = None
    reason: Optional[str] = None
