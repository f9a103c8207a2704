"""Shared fixtures: an in-memory SQLite database and a record factory scoped to one organization."""
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from recon.database import Base
from recon.models import (
    Vendor, Customer, SKU, PurchaseOrder, POLine, PurchaseInvoice, InvoiceLine, SalesInvoice,
    BankTransaction, GSTReturn, GSTReturnEntry, DiscountTerm,
)
from recon.store import SqlAlchemyStore

ORG = "org-a"
OTHER_ORG = "org-b"
GST_RATE = Decimal("0.18")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    db = Session()
    yield db
    db.close()


@pytest.fixture
def store(session):
    return SqlAlchemyStore(session)


@pytest.fixture
def factory(session):
    return RecordFactory(session)


class RecordFactory:
    """Creates committed records with sensible defaults."""

    def __init__(self, session, org_id: str = ORG):
        self.session = session
        self.org_id = org_id
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    def _save(self, record):
        self.session.add(record)
        self.session.commit()
        return record

    def vendor(self, name=None, gstin="27ABCDE1234F1Z5", org_id=None):
        return self._save(Vendor(
            org_id=org_id or self.org_id,
            name=name or f"Vendor {self._next()}",
            gstin=gstin,
        ))

    def customer(self, name=None, org_id=None):
        return self._save(Customer(org_id=org_id or self.org_id, name=name or f"Customer {self._next()}"))

    def sku(self, sku_code=None, name=None, hsn_code=None, aliases=None, is_active=True, org_id=None):
        n = self._next()
        return self._save(SKU(
            org_id=org_id or self.org_id,
            sku_code=sku_code or f"SKU-{n:04d}",
            name=name or f"Item {n}",
            hsn_code=hsn_code,
            aliases=list(aliases or []),
            is_active=is_active,
        ))

    def purchase_order(self, vendor, lines, po_date=date(2024, 1, 5), total_amount=None,
                       total_with_gst=None, status="OPEN", org_id=None):
        """lines: dicts with quantity, unit_price and optional sku_id, description, hsn_code"""
        po_lines = []
        subtotal = Decimal("0")
        for line_no, line_data in enumerate(lines, start=1):
            quantity = Decimal(str(line_data["quantity"]))
            unit_price = Decimal(str(line_data["unit_price"]))
            subtotal += quantity * unit_price
            po_lines.append(POLine(
                line_no=line_no,
                sku_id=line_data.get("sku_id"),
                description=line_data.get("description", f"Line {line_no}"),
                hsn_code=line_data.get("hsn_code"),
                quantity=quantity,
                unit_price=unit_price,
                total_amount=quantity * unit_price,
            ))
        total_amount = Decimal(str(total_amount)) if total_amount is not None else subtotal
        if total_with_gst is None:
            total_with_gst = (total_amount * (1 + GST_RATE)).quantize(Decimal("0.01"))
        return self._save(PurchaseOrder(
            org_id=org_id or self.org_id,
            po_number=f"PO-{self._next():04d}",
            vendor_id=vendor.id,
            po_date=po_date,
            total_amount=total_amount,
            total_with_gst=Decimal(str(total_with_gst)),
            status=status,
            po_lines=po_lines,
        ))

    def invoice(self, vendor, lines=(), invoice_number=None, invoice_date=date(2024, 1, 15), due_date=None,
                total_amount=None, cgst=None, sgst=None, igst=Decimal("0"), total_with_gst=None,
                amount_paid=Decimal("0"), status="PENDING", payment_status="UNPAID", vendor_gstin=None, org_id=None):
        invoice_lines = []
        subtotal = Decimal("0")
        for line_no, line_data in enumerate(lines, start=1):
            quantity = Decimal(str(line_data["quantity"]))
            unit_price = Decimal(str(line_data["unit_price"]))
            subtotal += quantity * unit_price
            invoice_lines.append(InvoiceLine(
                line_no=line_no,
                sku_id=line_data.get("sku_id"),
                description=line_data.get("description", f"Line {line_no}"),
                hsn_code=line_data.get("hsn_code"),
                quantity=quantity,
                unit_price=unit_price,
                discount_amount=Decimal(str(line_data.get("discount_amount", 0))),
                total_amount=quantity * unit_price,
            ))
        total_amount = Decimal(str(total_amount)) if total_amount is not None else subtotal
        if cgst is None and sgst is None and not igst:
            cgst = sgst = (total_amount * GST_RATE / 2).quantize(Decimal("0.01"))
        cgst = Decimal(str(cgst or 0))
        sgst = Decimal(str(sgst or 0))
        igst = Decimal(str(igst or 0))
        if total_with_gst is None:
            total_with_gst = total_amount + cgst + sgst + igst
        return self._save(PurchaseInvoice(
            org_id=org_id or self.org_id,
            invoice_number=invoice_number or f"INV-2024-{self._next():03d}",
            vendor_id=vendor.id,
            vendor_gstin=vendor_gstin if vendor_gstin is not None else vendor.gstin,
            invoice_date=invoice_date,
            due_date=due_date,
            total_amount=total_amount,
            cgst_amount=cgst,
            sgst_amount=sgst,
            igst_amount=igst,
            total_with_gst=Decimal(str(total_with_gst)),
            amount_paid=Decimal(str(amount_paid)),
            status=status,
            payment_status=payment_status,
            invoice_lines=invoice_lines,
        ))

    def sales_invoice(self, customer, total_with_gst, invoice_number=None, invoice_date=date(2024, 1, 15),
                      amount_paid=Decimal("0"), org_id=None):
        total_with_gst = Decimal(str(total_with_gst))
        return self._save(SalesInvoice(
            org_id=org_id or self.org_id,
            invoice_number=invoice_number or f"SI-{self._next():04d}",
            customer_id=customer.id,
            invoice_date=invoice_date,
            total_amount=total_with_gst,
            total_with_gst=total_with_gst,
            amount_paid=Decimal(str(amount_paid)),
            payment_status="UNPAID",
        ))

    def bank_transaction(self, debit=None, credit=None, transaction_date=date(2024, 1, 18),
                         description=None, reference_number=None, org_id=None):
        return self._save(BankTransaction(
            org_id=org_id or self.org_id,
            transaction_date=transaction_date,
            description=description,
            reference_number=reference_number,
            debit=Decimal(str(debit)) if debit is not None else None,
            credit=Decimal(str(credit)) if credit is not None else None,
            match_status="UNMATCHED",
        ))

    def gst_return(self, period="012024", entries=(), org_id=None):
        """entries: dicts of GSTReturnEntry fields"""
        gst_entries = []
        for line_data in entries:
            line_data = dict(line_data)
            for field in ("invoice_value", "taxable_value", "cgst", "sgst", "igst"):
                line_data[field] = Decimal(str(line_data.get(field, 0)))
            line_data.setdefault("itc_available", True)
            gst_entries.append(GSTReturnEntry(**line_data))
        return self._save(GSTReturn(
            org_id=org_id or self.org_id,
            return_type="GSTR2B",
            period=period,
            entries=gst_entries,
        ))

    def discount_term(self, vendor, term_type="VOLUME_REBATE", valid_from=date(2023, 1, 1), org_id=None, **fields):
        return self._save(DiscountTerm(
            org_id=org_id or self.org_id,
            vendor_id=vendor.id,
            name=fields.pop("name", term_type.replace("_", " ").title()),
            term_type=term_type,
            valid_from=valid_from,
            applicable_skus=fields.pop("applicable_skus", []),
            **fields,
        ))
