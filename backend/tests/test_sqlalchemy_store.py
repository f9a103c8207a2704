"""Tests for the SQLAlchemy store: organization scoping, lookups and upserts."""
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from recon.exceptions import NotFoundError
from recon.models import SKU, GSTMatch
from recon.schemas.gst import GSTMatchRecord, GSTMatchType, ITCStatus
from recon.schemas.payment import InvoiceKind
from recon.store import SqlAlchemyStore


class TestOrganizationScoping:
    """Records of another organization are reported as missing."""

    @pytest.fixture(autouse=True)
    def setup_records(self, factory, store):
        self.factory = factory
        self.store = store
        vendor = factory.vendor(org_id="org-b")
        self.invoice = factory.invoice(vendor, [], total_amount=100, org_id="org-b")
        self.po = factory.purchase_order(vendor, [], total_amount=100, org_id="org-b")
        self.txn = factory.bank_transaction(debit="100", org_id="org-b")
        self.gst_return = factory.gst_return(org_id="org-b", entries=[{
            "counterparty_gstin": "27ABCDE1234F1Z5", "invoice_number": "X", "invoice_value": 1, "taxable_value": 1,
        }])

    def test_visible_to_owner(self):
        assert self.store.get_purchase_invoice(self.invoice.id, "org-b").id == self.invoice.id
        assert self.store.get_gst_entry(self.gst_return.entries[0].id, "org-b") is not None

    @pytest.mark.parametrize("getter, attr", [
        ("get_purchase_invoice", "invoice"),
        ("get_purchase_order", "po"),
        ("get_bank_transaction", "txn"),
        ("get_gst_return", "gst_return"),
    ])
    def test_hidden_from_other_org(self, getter, attr):
        with pytest.raises(NotFoundError) as excinfo:
            getattr(self.store, getter)(getattr(self, attr).id, "org-a")
        assert excinfo.value.org_id == "org-a"

    def test_gst_entry_scoped_through_return(self):
        with pytest.raises(NotFoundError):
            self.store.get_gst_entry(self.gst_return.entries[0].id, "org-a")


class TestCatalogLookups:

    def test_code_and_name_are_case_insensitive(self, factory, store):
        sku = factory.sku(sku_code="AbC-1", name="Blue Paint 1L")
        assert store.find_sku_by_code(factory.org_id, "abc-1").id == sku.id
        assert store.find_sku_by_name(factory.org_id, "  blue paint 1l ").id == sku.id

    def test_alias_lookup_is_exact(self, factory, store):
        sku = factory.sku(aliases=["PAINT BLUE 1 LTR"])
        assert store.find_sku_by_alias(factory.org_id, "PAINT BLUE 1 LTR").id == sku.id
        assert store.find_sku_by_alias(factory.org_id, "paint blue") is None

    def test_snapshot_limit(self, factory, store):
        for _ in range(4):
            factory.sku()
        assert len(store.list_active_skus(factory.org_id, limit=3)) == 3
        assert len(store.list_active_skus(factory.org_id)) == 4

    def test_concurrent_alias_learning_merges(self, factory, engine):
        sku = factory.sku(aliases=[])
        Session = sessionmaker(bind=engine, autoflush=False)
        first, second = SqlAlchemyStore(Session()), SqlAlchemyStore(Session())

        with first.atomic():
            first.append_sku_alias(sku.id, factory.org_id, "ALIAS ONE")
        with second.atomic():
            second.append_sku_alias(sku.id, factory.org_id, "ALIAS TWO")

        check = Session()
        assert check.get(SKU, sku.id).aliases == ["ALIAS ONE", "ALIAS TWO"]
        for s in (first.db, second.db, check):
            s.close()


class TestListings:

    def test_payable_invoices_window_and_status(self, factory, store):
        vendor = factory.vendor()
        inside = factory.invoice(vendor, [], total_amount=100, invoice_date=date(2024, 1, 10))
        factory.invoice(vendor, [], total_amount=100, invoice_date=date(2024, 1, 30))
        factory.invoice(vendor, [], total_amount=100, invoice_date=date(2024, 1, 11), payment_status="PAID")

        invoices = store.list_payable_invoices(
            factory.org_id, InvoiceKind.PURCHASE, date(2024, 1, 5), date(2024, 1, 20), 50
        )

        assert [i.id for i in invoices] == [inside.id]

    def test_discount_terms_by_type_and_validity(self, factory, store):
        vendor = factory.vendor()
        trade = factory.discount_term(vendor, "TRADE_DISCOUNT", flat_percent=Decimal("2"))
        factory.discount_term(vendor, "LATE_PAYMENT_PENALTY", penalty_percent=Decimal("1"))
        factory.discount_term(vendor, "TRADE_DISCOUNT", flat_percent=Decimal("3"), valid_from=date(2025, 1, 1))

        terms = store.list_discount_terms(factory.org_id, vendor.id, date(2024, 6, 1), ["TRADE_DISCOUNT"])

        assert [t.id for t in terms] == [trade.id]

    def test_first_payment_date(self, factory, store):
        vendor = factory.vendor()
        invoice = factory.invoice(vendor, [], total_amount=100, cgst=0, sgst=0, total_with_gst=100)
        early = factory.bank_transaction(debit="40", transaction_date=date(2024, 1, 20))
        late = factory.bank_transaction(debit="60", transaction_date=date(2024, 2, 20))
        with store.atomic():
            store.add_payment_allocation(late, invoice, InvoiceKind.PURCHASE, Decimal("60"), 80, "PARTIAL_QTY")
            store.add_payment_allocation(early, invoice, InvoiceKind.PURCHASE, Decimal("40"), 80, "PARTIAL_QTY")

        assert store.first_payment_date(invoice.id) == date(2024, 1, 20)


class TestUpserts:

    def test_gst_match_upsert(self, factory, store, session):
        vendor = factory.vendor()
        invoice = factory.invoice(vendor, [], total_amount=100)
        entry = factory.gst_return(entries=[{
            "counterparty_gstin": vendor.gstin, "invoice_number": invoice.invoice_number,
            "invoice_value": 118, "taxable_value": 100,
        }]).entries[0]
        record = GSTMatchRecord(
            gst_entry_id=entry.id, invoice_id=invoice.id, invoice_number=invoice.invoice_number,
            counterparty_gstin=vendor.gstin, match_type=GSTMatchType.PARTIAL, match_score=75.0,
            itc_status=ITCStatus.MISMATCH, entry_tax=Decimal("0"),
        )

        with store.atomic():
            first = store.save_gst_match(record, factory.org_id)
        record.match_score = 100.0
        record.match_type = GSTMatchType.EXACT
        with store.atomic():
            second = store.save_gst_match(record, factory.org_id)

        assert first.id == second.id
        assert session.query(GSTMatch).count() == 1
        assert session.query(GSTMatch).one().match_type == "EXACT"

    def test_gst_match_relinked_on_rerun(self, factory, store, session):
        vendor = factory.vendor()
        first_invoice = factory.invoice(vendor, [], total_amount=100)
        second_invoice = factory.invoice(vendor, [], total_amount=100)
        entry = factory.gst_return(entries=[{
            "counterparty_gstin": vendor.gstin, "invoice_number": first_invoice.invoice_number,
            "invoice_value": 118, "taxable_value": 100,
        }]).entries[0]
        record = GSTMatchRecord(
            gst_entry_id=entry.id, invoice_id=first_invoice.id, invoice_number=entry.invoice_number,
            counterparty_gstin=vendor.gstin, match_type=GSTMatchType.EXACT, match_score=100.0,
            itc_status=ITCStatus.AVAILABLE, entry_tax=Decimal("18"),
        )

        with store.atomic():
            first = store.save_gst_match(record, factory.org_id)
        record.invoice_id = second_invoice.id
        with store.atomic():
            second = store.save_gst_match(record, factory.org_id)

        assert first.id == second.id
        assert session.query(GSTMatch).count() == 1
        assert session.query(GSTMatch).one().invoice_id == second_invoice.id

    def test_atomic_rolls_back_on_error(self, factory, store, session):
        vendor = factory.vendor()
        invoice = factory.invoice(vendor, [], total_amount=100)

        with pytest.raises(RuntimeError):
            with store.atomic():
                store.set_invoice_status(invoice, "MATCHED")
                raise RuntimeError("boom")

        session.refresh(invoice)
        assert invoice.status == "PENDING"
