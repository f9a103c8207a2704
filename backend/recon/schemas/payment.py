from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum
from decimal import Decimal
from datetime import date


class InvoiceKind(str, Enum):
    PURCHASE = "purchase"
    SALES = "sales"


class PaymentMatchType(str, Enum):
    EXACT = "EXACT"
    FUZZY = "FUZZY"
    REFERENCE = "REFERENCE"
    PARTIAL = "PARTIAL"
    SPLIT = "SPLIT"
    NO_MATCH = "NO_MATCH"


class InvoiceCandidate(BaseModel):
    """An open invoice scored against a bank transaction"""
    invoice_id: int
    invoice_kind: InvoiceKind
    invoice_number: str
    invoice_date: date
    due_date: Optional[date] = None
    total_with_gst: Decimal
    amount_paid: Decimal
    outstanding: Decimal
    amount_difference: Decimal
    match_score: float
    reference_matched: bool = False
    reasons: List[str] = []

    @property
    def match_reason(self) -> str:
        return ", ".join(self.reasons)


class PaymentMatchResult(BaseModel):
    bank_transaction_id: int
    transaction_amount: Decimal
    invoice_kind: Optional[InvoiceKind] = None
    match_type: PaymentMatchType
    candidates: List[InvoiceCandidate] = []
    best_match: Optional[InvoiceCandidate] = None
    total_matched: Decimal = Decimal("0")
    unmatched_amount: Decimal = Decimal("0")
    confidence: float = 0.0
    auto_match: bool = False
    needs_review: bool = True
    reasons: List[str] = []


class AllocationRequest(BaseModel):
    """Portion of a transaction to apply to one invoice"""
    invoice_id: int
    invoice_kind: InvoiceKind
    amount: Decimal = Field(gt=0)


class PaymentAllocation(BaseModel):
    id: int
    bank_transaction_id: int
    invoice_id: int
    invoice_kind: InvoiceKind
    matched_amount: Decimal
    match_score: float
    match_type: str
    invoice_amount_paid: Decimal
    invoice_payment_status: str
    transaction_status: str

    class Config:
        from_attributes = True


class ReversalResult(BaseModel):
    allocation_id: int
    bank_transaction_id: int
    invoice_id: int
    invoice_kind: InvoiceKind
    reversed_amount: Decimal
    invoice_amount_paid: Decimal
    invoice_payment_status: str
    transaction_status: str
