from pydantic import BaseModel
from typing import List, Optional
from enum import Enum
from decimal import Decimal
from datetime import date


class DiscountTermType(str, Enum):
    TRADE_DISCOUNT = "TRADE_DISCOUNT"
    CASH_DISCOUNT = "CASH_DISCOUNT"
    VOLUME_REBATE = "VOLUME_REBATE"
    SPECIAL_SCHEME = "SPECIAL_SCHEME"
    LATE_PAYMENT_PENALTY = "LATE_PAYMENT_PENALTY"


DISCOUNT_TERM_TYPES = [
    DiscountTermType.TRADE_DISCOUNT,
    DiscountTermType.CASH_DISCOUNT,
    DiscountTermType.VOLUME_REBATE,
    DiscountTermType.SPECIAL_SCHEME,
]


class DiscountStatus(str, Enum):
    CORRECT = "CORRECT"
    UNDER_DISCOUNTED = "UNDER_DISCOUNTED"
    OVER_DISCOUNTED = "OVER_DISCOUNTED"
    NEEDS_REVIEW = "NEEDS_REVIEW"


class DiscountEvaluation(BaseModel):
    invoice_id: int
    vendor_id: int
    discount_term_id: Optional[int] = None
    term_type: Optional[DiscountTermType] = None
    expected_discount: Decimal
    actual_discount: Decimal
    difference: Decimal  # actual - expected
    status: DiscountStatus
    notes: List[str] = []


class PenaltyEvaluation(BaseModel):
    invoice_id: int
    discount_term_id: Optional[int] = None
    due_date: date
    payment_date: date
    days_late: int
    penalty_percent: Optional[Decimal] = None
    penalty_amount: Decimal


class AuditSummary(BaseModel):
    total_audits: int
    correct: int
    under_discounted: int
    over_discounted: int
    needs_review: int
    total_discrepancy: Decimal
