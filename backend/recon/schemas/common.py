from pydantic import BaseModel
from typing import Optional
from enum import Enum
from decimal import Decimal


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class DiscrepancyType(str, Enum):
    """Kinds of disagreement between two records"""
    SHORT_SUPPLY = "SHORT_SUPPLY"
    EXCESS_SUPPLY = "EXCESS_SUPPLY"
    QTY_VARIANCE = "QTY_VARIANCE"
    PRICE_VARIANCE = "PRICE_VARIANCE"
    VALUE_VARIANCE = "VALUE_VARIANCE"
    AMOUNT_MISMATCH = "AMOUNT_MISMATCH"
    GST_MISMATCH = "GST_MISMATCH"
    GST_STRUCTURE_MISMATCH = "GST_STRUCTURE_MISMATCH"
    DATE_MISMATCH = "DATE_MISMATCH"
    MISSING_IN_BOOKS = "MISSING_IN_BOOKS"
    INVALID_VALUE = "INVALID_VALUE"


class Discrepancy(BaseModel):
    """Represents a single discrepancy found while comparing two records"""
    type: DiscrepancyType
    severity: Severity
    message: str
    expected: Optional[Decimal] = None
    actual: Optional[Decimal] = None
    variance: Optional[Decimal] = None
    line_number: Optional[int] = None
