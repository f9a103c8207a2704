"""
Line Item Matcher - pairs invoice lines with PO lines.

Each candidate PO line is scored out of 100:
- catalog id agreement 40 (or description containment 20)
- HSN code agreement 15
- quantity within tolerance 25, decaying one point per % outside
- unit price within tolerance 20, decaying one point per % outside

Assignment is greedy in invoice-line order: each invoice line takes the best
remaining PO line, and a claimed PO line leaves the pool.
"""
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from recon.config import settings
from recon.models.po_line import POLine
from recon.models.invoice_line import InvoiceLine
from recon.schemas.matching import LineCandidate, LineMatchRecord, LineMatchType
from recon.utils.matching_rules import (
    check_within_tolerance, partial_credit, round_money, round_score, to_decimal,
)

logger = logging.getLogger(__name__)

SKU_POINTS = 40
DESCRIPTION_POINTS = 20
HSN_POINTS = 15
QUANTITY_POINTS = 25
PRICE_POINTS = 20


class LineItemMatcher:
    """Scores and pairs invoice lines against PO lines"""

    def __init__(
        self,
        quantity_tolerance: Optional[float] = None,
        price_tolerance: Optional[float] = None,
        min_score: Optional[float] = None,
    ):
        self.quantity_tolerance = quantity_tolerance if quantity_tolerance is not None else settings.quantity_tolerance_percent
        self.price_tolerance = price_tolerance if price_tolerance is not None else settings.price_tolerance_percent
        self.min_score = min_score if min_score is not None else settings.line_min_score

    def score_candidate(self, po_line: POLine, invoice_line: InvoiceLine) -> LineCandidate:
        score = Decimal("0")

        sku_matched = bool(po_line.sku_id and invoice_line.sku_id and po_line.sku_id == invoice_line.sku_id)
        description_matched = False
        if sku_matched:
            score += SKU_POINTS
        elif po_line.description and invoice_line.description:
            description_matched = po_line.description.lower() in invoice_line.description.lower()
            if description_matched:
                score += DESCRIPTION_POINTS

        hsn_matched = bool(po_line.hsn_code and invoice_line.hsn_code and po_line.hsn_code == invoice_line.hsn_code)
        if hsn_matched:
            score += HSN_POINTS

        qty_within, qty_variance = check_within_tolerance(
            po_line.quantity, invoice_line.quantity, self.quantity_tolerance
        )
        score += QUANTITY_POINTS if qty_within else partial_credit(QUANTITY_POINTS, qty_variance)

        price_within, price_variance = check_within_tolerance(
            po_line.unit_price, invoice_line.unit_price, self.price_tolerance
        )
        score += PRICE_POINTS if price_within else partial_credit(PRICE_POINTS, price_variance)

        return LineCandidate(
            po_line_id=po_line.id,
            invoice_line_id=invoice_line.id,
            score=float(score),
            sku_matched=sku_matched,
            description_matched=description_matched,
            hsn_matched=hsn_matched,
            quantity_variance_percent=float(qty_variance),
            price_variance_percent=float(price_variance),
            within_quantity_tolerance=qty_within,
            within_price_tolerance=price_within,
        )

    def match_invoice_line(
        self, invoice_line: InvoiceLine, po_lines: List[POLine]
    ) -> Optional[Tuple[POLine, LineCandidate]]:
        """
        Pick the best PO line for one invoice line.

        The first PO line wins ties. Returns None when nothing reaches the minimum score.
        """
        best: Optional[Tuple[POLine, LineCandidate]] = None
        for po_line in po_lines:
            candidate = self.score_candidate(po_line, invoice_line)
            if best is None or candidate.score > best[1].score:
                best = (po_line, candidate)

        if best is None or best[1].score < self.min_score:
            return None
        return best

    def match_lines(
        self, po_lines: List[POLine], invoice_lines: List[InvoiceLine]
    ) -> Tuple[List[Tuple[POLine, InvoiceLine, LineCandidate]], List[POLine], List[InvoiceLine]]:
        """
        Greedily pair invoice lines with PO lines.

        Returns:
            (pairs, unmatched_po_lines, unmatched_invoice_lines) tuple
        """
        available = list(po_lines)
        pairs = []
        unmatched_invoice_lines = []

        for invoice_line in invoice_lines:
            best = self.match_invoice_line(invoice_line, available)
            if best is None:
                unmatched_invoice_lines.append(invoice_line)
                continue
            po_line, candidate = best
            pairs.append((po_line, invoice_line, candidate))
            available.remove(po_line)

        return pairs, available, unmatched_invoice_lines

    def build_line_match(self, po_line: POLine, invoice_line: InvoiceLine, candidate: LineCandidate) -> LineMatchRecord:
        po_qty = to_decimal(po_line.quantity)
        inv_qty = to_decimal(invoice_line.quantity)
        po_price = to_decimal(po_line.unit_price)
        inv_price = to_decimal(invoice_line.unit_price)

        if candidate.score >= 90:
            match_type = LineMatchType.EXACT
        elif candidate.score >= 50:
            match_type = LineMatchType.PARTIAL
        else:
            match_type = LineMatchType.NO_MATCH

        return LineMatchRecord(
            po_line_id=po_line.id,
            invoice_line_id=invoice_line.id,
            po_line_no=po_line.line_no,
            invoice_line_no=invoice_line.line_no,
            quantity_variance=inv_qty - po_qty,
            quantity_variance_percent=round_score(candidate.quantity_variance_percent),
            price_variance=round_money(inv_price - po_price),
            price_variance_percent=round_score(candidate.price_variance_percent),
            amount_variance=round_money(to_decimal(invoice_line.total_amount) - to_decimal(po_line.total_amount)),
            within_quantity_tolerance=candidate.within_quantity_tolerance,
            within_price_tolerance=candidate.within_price_tolerance,
            match_score=round_score(candidate.score),
            match_type=match_type,
        )
