"""Tests for document-level PO / invoice reconciliation."""
from decimal import Decimal

import pytest

from recon.exceptions import NotFoundError, VendorMismatchError
from recon.models import DocumentMatch, LineMatch
from recon.schemas.common import DiscrepancyType, Severity
from recon.schemas.matching import DocumentMatchType, LineMatchType
from recon.services.line_item_matcher import LineItemMatcher
from recon.services.po_invoice_matcher import DocumentReconciler


@pytest.fixture
def reconciler(store):
    return DocumentReconciler(store, LineItemMatcher(quantity_tolerance=5, price_tolerance=2, min_score=30))


class TestReconcile:
    """Scoring, classification and discrepancies for a single PO / invoice pair."""

    @pytest.fixture(autouse=True)
    def setup_records(self, factory):
        self.factory = factory
        self.org = factory.org_id
        self.vendor = factory.vendor()
        self.bolt = factory.sku(name="Steel bolt M8", hsn_code="7318")
        self.nut = factory.sku(name="Hex nut M8", hsn_code="7318")

    def _line(self, sku, quantity, unit_price):
        return {"sku_id": sku.id, "hsn_code": sku.hsn_code, "description": sku.name,
                "quantity": quantity, "unit_price": unit_price}

    def test_clean_match_is_exact_and_auto_approved(self, reconciler):
        po = self.factory.purchase_order(self.vendor, [self._line(self.bolt, 10, 100)])
        invoice = self.factory.invoice(self.vendor, [self._line(self.bolt, 10, 100)])

        record = reconciler.reconcile(invoice.id, po.id, self.org)

        assert record.match_score == 100.0
        assert record.match_type == DocumentMatchType.EXACT
        assert record.discrepancies == []
        assert record.needs_review is False
        assert record.auto_approve is True

    def test_quantity_within_tolerance(self, reconciler):
        po = self.factory.purchase_order(self.vendor, [self._line(self.bolt, 100, 10)])
        invoice = self.factory.invoice(self.vendor, [self._line(self.bolt, 103, 10)])

        record = reconciler.reconcile(invoice.id, po.id, self.org)

        line = record.line_matches[0]
        assert line.within_quantity_tolerance is True
        assert line.match_score >= 90
        assert line.match_type == LineMatchType.EXACT
        assert not any(d.type == DiscrepancyType.QTY_VARIANCE for d in record.discrepancies)
        assert record.total_value_match is True

    def test_tax_inclusive_total_outside_tolerance(self, reconciler):
        po = self.factory.purchase_order(self.vendor, [self._line(self.bolt, 100, 10)])
        invoice = self.factory.invoice(self.vendor, [self._line(self.bolt, 103, 10)])

        record = reconciler.reconcile(invoice.id, po.id, self.org)

        # 3% off on the GST-inclusive total against a 2% tolerance: 60 + 20 + (20 - 3)
        assert record.total_gst_match is False
        assert record.match_score == 97.0
        assert record.match_type == DocumentMatchType.PARTIAL_VALUE
        assert [d.type for d in record.discrepancies] == [DiscrepancyType.VALUE_VARIANCE]

    def test_short_supply_needs_review(self, reconciler):
        po = self.factory.purchase_order(
            self.vendor, [self._line(self.bolt, 10, 100), self._line(self.nut, 10, 20)]
        )
        invoice = self.factory.invoice(self.vendor, [self._line(self.bolt, 10, 100)])

        record = reconciler.reconcile(invoice.id, po.id, self.org)

        short = [d for d in record.discrepancies if d.type == DiscrepancyType.SHORT_SUPPLY]
        assert len(short) == 1
        assert short[0].severity == Severity.HIGH
        assert short[0].line_number == 2
        assert len(record.unmatched_po_line_ids) == 1
        assert record.needs_review is True
        assert record.auto_approve is False

    def test_excess_supply(self, reconciler):
        po = self.factory.purchase_order(self.vendor, [self._line(self.bolt, 10, 100)])
        invoice = self.factory.invoice(
            self.vendor, [self._line(self.bolt, 10, 100), {"description": "Freight", "quantity": 1, "unit_price": 10}]
        )

        record = reconciler.reconcile(invoice.id, po.id, self.org)

        excess = [d for d in record.discrepancies if d.type == DiscrepancyType.EXCESS_SUPPLY]
        assert len(excess) == 1
        assert excess[0].severity == Severity.MEDIUM
        assert len(record.unmatched_invoice_line_ids) == 1

    def test_price_variance_reported(self, reconciler):
        po = self.factory.purchase_order(self.vendor, [self._line(self.bolt, 10, 100)])
        invoice = self.factory.invoice(self.vendor, [self._line(self.bolt, 10, 110)])

        record = reconciler.reconcile(invoice.id, po.id, self.org)

        price = [d for d in record.discrepancies if d.type == DiscrepancyType.PRICE_VARIANCE]
        assert price[0].severity == Severity.HIGH
        assert record.needs_review is True

    def test_negative_quantity_is_reported_not_raised(self, reconciler):
        po = self.factory.purchase_order(self.vendor, [self._line(self.bolt, 10, 100)])
        invoice = self.factory.invoice(self.vendor, [self._line(self.bolt, -10, 100)])

        record = reconciler.reconcile(invoice.id, po.id, self.org)

        assert any(d.type == DiscrepancyType.INVALID_VALUE for d in record.discrepancies)
        assert record.needs_review is True

    def test_empty_invoice(self, reconciler):
        po = self.factory.purchase_order(self.vendor, [self._line(self.bolt, 10, 100)])
        invoice = self.factory.invoice(self.vendor, [], total_amount=0)

        record = reconciler.reconcile(invoice.id, po.id, self.org)

        assert record.line_matches == []
        assert record.match_type == DocumentMatchType.PARTIAL_BOTH
        assert record.needs_review is True

    def test_vendor_mismatch(self, reconciler):
        other_vendor = self.factory.vendor()
        po = self.factory.purchase_order(self.vendor, [self._line(self.bolt, 10, 100)])
        invoice = self.factory.invoice(other_vendor, [self._line(self.bolt, 10, 100)])

        with pytest.raises(VendorMismatchError):
            reconciler.reconcile(invoice.id, po.id, self.org)

    def test_other_organization_is_not_found(self, reconciler):
        po = self.factory.purchase_order(self.vendor, [self._line(self.bolt, 10, 100)])
        invoice = self.factory.invoice(self.vendor, [self._line(self.bolt, 10, 100)])

        with pytest.raises(NotFoundError):
            reconciler.reconcile(invoice.id, po.id, "org-b")

    def test_deterministic(self, reconciler):
        po = self.factory.purchase_order(
            self.vendor, [self._line(self.bolt, 10, 100), self._line(self.nut, 40, 20)]
        )
        invoice = self.factory.invoice(
            self.vendor, [self._line(self.nut, 38, 21), self._line(self.bolt, 11, 100)]
        )

        first = reconciler.reconcile(invoice.id, po.id, self.org)
        second = reconciler.reconcile(invoice.id, po.id, self.org)

        assert first.model_dump() == second.model_dump()


class TestFindBestPO:

    @pytest.fixture(autouse=True)
    def setup_records(self, factory):
        self.factory = factory
        self.org = factory.org_id
        self.vendor = factory.vendor()
        self.sku = factory.sku(hsn_code="8471")

    def _line(self, quantity, unit_price):
        return {"sku_id": self.sku.id, "hsn_code": "8471", "quantity": quantity, "unit_price": unit_price}

    def test_picks_highest_score(self, reconciler):
        loose = self.factory.purchase_order(self.vendor, [self._line(50, 100)])
        exact = self.factory.purchase_order(self.vendor, [self._line(10, 100)])
        invoice = self.factory.invoice(self.vendor, [self._line(10, 100)])

        best = reconciler.find_best_po(invoice.id, self.org)

        assert best.purchase_order_id == exact.id
        assert best.purchase_order_id != loose.id
        assert best.match.match_type == DocumentMatchType.EXACT

    def test_closed_orders_are_ignored(self, reconciler):
        self.factory.purchase_order(self.vendor, [self._line(10, 100)], status="FULFILLED")
        invoice = self.factory.invoice(self.vendor, [self._line(10, 100)])

        assert reconciler.find_best_po(invoice.id, self.org) is None

    def test_no_orders_for_vendor(self, reconciler):
        other = self.factory.vendor()
        self.factory.purchase_order(other, [self._line(10, 100)])
        invoice = self.factory.invoice(self.vendor, [self._line(10, 100)])

        assert reconciler.find_best_po(invoice.id, self.org) is None


class TestSaveMatch:
    """Saving the same pair twice updates the existing row."""

    def test_rerun_upserts(self, reconciler, factory, session):
        vendor = factory.vendor()
        sku = factory.sku()
        po = factory.purchase_order(vendor, [{"sku_id": sku.id, "quantity": 10, "unit_price": 100}])
        invoice = factory.invoice(vendor, [{"sku_id": sku.id, "quantity": 10, "unit_price": 100}])

        record = reconciler.reconcile(invoice.id, po.id, factory.org_id)
        first_id = reconciler.save_match(record)
        second_id = reconciler.save_match(reconciler.reconcile(invoice.id, po.id, factory.org_id))

        assert first_id == second_id
        assert session.query(DocumentMatch).count() == 1
        assert session.query(LineMatch).count() == 1

        saved = session.query(DocumentMatch).one()
        assert saved.match_score == record.match_score
        assert saved.match_type == record.match_type.value
        assert saved.idempotency_key
