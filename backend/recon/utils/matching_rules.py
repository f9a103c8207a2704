from typing import List, Tuple, Optional
from decimal import Decimal, ROUND_HALF_UP

from recon.schemas.common import Discrepancy, DiscrepancyType, Severity

HUNDRED = Decimal("100")
CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Coerce ORM numerics, floats and ints to Decimal; None counts as zero"""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_score(value) -> float:
    return float(to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def variance_percent(expected, actual) -> Decimal:
    """
    Absolute variance of actual against expected, as a percentage of expected.

    A zero expected value gives 0% when actual is also zero, otherwise 100%.
    """
    expected = to_decimal(expected)
    actual = to_decimal(actual)
    if expected == 0:
        return Decimal("0") if actual == 0 else HUNDRED
    return abs((actual - expected) / expected) * HUNDRED


def check_within_tolerance(expected, actual, tolerance_percent) -> Tuple[bool, Decimal]:
    """
    Check if actual is within a percent tolerance of expected

    Returns:
        (within, variance_percent) tuple
    """
    variance = variance_percent(expected, actual)
    return variance <= to_decimal(tolerance_percent), variance


def check_amount_within(expected, actual, tolerance) -> bool:
    """Absolute rupee tolerance; the boundary itself counts as within"""
    return abs(to_decimal(actual) - to_decimal(expected)) <= to_decimal(tolerance)


def amount_severity(difference) -> Severity:
    """Severity for a rupee difference: HIGH above 1000, MEDIUM above 100"""
    difference = abs(to_decimal(difference))
    if difference > 1000:
        return Severity.HIGH
    if difference > 100:
        return Severity.MEDIUM
    return Severity.LOW


def partial_credit(points: int, variance: Decimal) -> Decimal:
    """Points that decay one per percentage point of variance, floored at zero"""
    return max(Decimal("0"), Decimal(points) - variance)


def check_quantity_variance(
    po_quantity, invoice_quantity, tolerance_percent, line_number: Optional[int] = None
) -> Tuple[bool, Optional[Discrepancy]]:
    """
    Check an invoiced quantity against the ordered quantity

    Returns:
        (within_tolerance, discrepancy) tuple
    """
    within, variance = check_within_tolerance(po_quantity, invoice_quantity, tolerance_percent)
    if within:
        return True, None

    return False, Discrepancy(
        type=DiscrepancyType.QTY_VARIANCE,
        severity=Severity.HIGH if variance > 10 else Severity.MEDIUM,
        message=f"Quantity variance: PO {po_quantity}, invoice {invoice_quantity} ({round_score(variance)}%)",
        expected=to_decimal(po_quantity),
        actual=to_decimal(invoice_quantity),
        variance=round_money(to_decimal(invoice_quantity) - to_decimal(po_quantity)),
        line_number=line_number,
    )


def check_price_variance(
    po_price, invoice_price, tolerance_percent, line_number: Optional[int] = None
) -> Tuple[bool, Optional[Discrepancy]]:
    """
    Check an invoiced unit price against the PO unit price

    Returns:
        (within_tolerance, discrepancy) tuple
    """
    within, variance = check_within_tolerance(po_price, invoice_price, tolerance_percent)
    if within:
        return True, None

    return False, Discrepancy(
        type=DiscrepancyType.PRICE_VARIANCE,
        severity=Severity.HIGH if variance > 5 else Severity.LOW,
        message=f"Price variance: PO {po_price}, invoice {invoice_price} ({round_score(variance)}%)",
        expected=to_decimal(po_price),
        actual=to_decimal(invoice_price),
        variance=round_money(to_decimal(invoice_price) - to_decimal(po_price)),
        line_number=line_number,
    )


def check_total_match(
    po_total, invoice_total, tolerance_percent, label: str
) -> Tuple[bool, Optional[Discrepancy], Decimal]:
    """
    Check if an invoice total matches the PO total within a percent tolerance

    Returns:
        (matches, discrepancy, variance_percent) tuple
    """
    within, variance = check_within_tolerance(po_total, invoice_total, tolerance_percent)
    if within:
        return True, None, variance

    return False, Discrepancy(
        type=DiscrepancyType.VALUE_VARIANCE,
        severity=Severity.HIGH if variance > 10 else Severity.MEDIUM,
        message=f"{label} mismatch: PO {po_total}, invoice {invoice_total} ({round_score(variance)}%)",
        expected=to_decimal(po_total),
        actual=to_decimal(invoice_total),
        variance=round_money(to_decimal(invoice_total) - to_decimal(po_total)),
    ), variance


def check_line_values(line, side: str) -> List[Discrepancy]:
    """Negative quantities or prices cannot be reconciled; report them instead of failing"""
    issues = []
    for field in ("quantity", "unit_price"):
        value = to_decimal(getattr(line, field))
        if value < 0:
            issues.append(Discrepancy(
                type=DiscrepancyType.INVALID_VALUE,
                severity=Severity.HIGH,
                message=f"{side} line {line.line_no} has negative {field.replace('_', ' ')} ({value})",
                actual=value,
                line_number=line.line_no,
            ))
    return issues
