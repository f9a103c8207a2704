"""Tests for the tolerance and variance helpers shared by the matchers."""
from decimal import Decimal
from types import SimpleNamespace

from recon.schemas.common import DiscrepancyType, Severity
from recon.utils.idempotency import idempotency_key
from recon.utils.matching_rules import (
    amount_severity,
    check_amount_within,
    check_line_values,
    check_price_variance,
    check_quantity_variance,
    check_total_match,
    check_within_tolerance,
    partial_credit,
    round_money,
    round_score,
    variance_percent,
)


class TestVariancePercent:
    """Percent variance relative to the expected side."""

    def test_simple_variance(self):
        assert variance_percent(100, 103) == Decimal("3")

    def test_variance_is_absolute(self):
        assert variance_percent(100, 97) == Decimal("3")

    def test_zero_expected_and_zero_actual(self):
        assert variance_percent(0, 0) == Decimal("0")

    def test_zero_expected_nonzero_actual(self):
        assert variance_percent(0, 5) == Decimal("100")

    def test_none_counts_as_zero(self):
        assert variance_percent(None, None) == Decimal("0")


class TestTolerance:
    """Boundary behaviour of percent and rupee tolerances."""

    def test_boundary_is_within(self):
        within, variance = check_within_tolerance(100, 105, 5)
        assert within is True
        assert variance == Decimal("5")

    def test_just_outside(self):
        within, _ = check_within_tolerance(100, Decimal("105.01"), 5)
        assert within is False

    def test_amount_boundary_is_within(self):
        assert check_amount_within(Decimal("100.00"), Decimal("101.00"), 1)

    def test_amount_one_paisa_over(self):
        assert not check_amount_within(Decimal("100.00"), Decimal("101.01"), 1)


class TestQuantityVariance:
    """Quantity checks produce discrepancies only outside tolerance."""

    def test_within_tolerance_has_no_discrepancy(self):
        within, issue = check_quantity_variance(100, 103, 5, line_number=1)
        assert within is True
        assert issue is None

    def test_moderate_variance_is_medium(self):
        within, issue = check_quantity_variance(100, 108, 5, line_number=2)
        assert within is False
        assert issue.type == DiscrepancyType.QTY_VARIANCE
        assert issue.severity == Severity.MEDIUM
        assert issue.line_number == 2

    def test_large_variance_is_high(self):
        _, issue = check_quantity_variance(100, 120, 5)
        assert issue.severity == Severity.HIGH
        assert issue.variance == Decimal("20.00")

    def test_variance_is_the_quantity_difference(self):
        _, issue = check_quantity_variance(50, 40, 5)
        assert issue.variance == Decimal("-10.00")
        assert "(20.0%)" in issue.message


class TestPriceVariance:

    def test_small_price_variance_is_low(self):
        _, issue = check_price_variance(100, 104, 2)
        assert issue.type == DiscrepancyType.PRICE_VARIANCE
        assert issue.severity == Severity.LOW

    def test_large_price_variance_is_high(self):
        _, issue = check_price_variance(100, 110, 2)
        assert issue.severity == Severity.HIGH

    def test_variance_is_the_price_difference(self):
        _, issue = check_price_variance(Decimal("200.00"), Decimal("220.50"), 2)
        assert issue.variance == Decimal("20.50")


class TestTotalMatch:

    def test_matching_totals(self):
        matches, issue, variance = check_total_match(1000, 1020, 5, "Subtotal")
        assert matches is True
        assert issue is None
        assert variance == Decimal("2")

    def test_mismatch_is_value_variance(self):
        matches, issue, _ = check_total_match(1000, 1080, 5, "Subtotal")
        assert matches is False
        assert issue.type == DiscrepancyType.VALUE_VARIANCE
        assert issue.severity == Severity.MEDIUM
        assert issue.message.startswith("Subtotal mismatch")
        assert issue.variance == Decimal("80.00")

    def test_large_mismatch_is_high(self):
        _, issue, _ = check_total_match(1000, 1200, 2, "Total with GST")
        assert issue.severity == Severity.HIGH


class TestHelpers:

    def test_amount_severity_thresholds(self):
        assert amount_severity(Decimal("100")) == Severity.LOW
        assert amount_severity(Decimal("-100.01")) == Severity.MEDIUM
        assert amount_severity(Decimal("1000.01")) == Severity.HIGH

    def test_partial_credit_floors_at_zero(self):
        assert partial_credit(25, Decimal("10")) == Decimal("15")
        assert partial_credit(25, Decimal("40")) == Decimal("0")

    def test_rounding_is_half_up(self):
        assert round_money(Decimal("2.345")) == Decimal("2.35")
        assert round_score(Decimal("89.995")) == 90.0

    def test_negative_line_values_are_reported(self):
        line = SimpleNamespace(line_no=3, quantity=Decimal("-2"), unit_price=Decimal("10"))
        issues = check_line_values(line, "Invoice")
        assert len(issues) == 1
        assert issues[0].type == DiscrepancyType.INVALID_VALUE
        assert issues[0].severity == Severity.HIGH
        assert issues[0].line_number == 3


class TestIdempotencyKey:

    def test_stable_for_same_inputs(self):
        assert idempotency_key("po_invoice_match", "org", 1, 2) == idempotency_key("po_invoice_match", "org", 1, 2)

    def test_differs_by_kind_and_order(self):
        key = idempotency_key("po_invoice_match", "org", 1, 2)
        assert key != idempotency_key("gst_match", "org", 1, 2)
        assert key != idempotency_key("po_invoice_match", "org", 2, 1)
        assert len(key) == 64
