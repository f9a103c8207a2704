"""
Seed script to generate synthetic catalog, PO, invoice, bank and GST data for demo purposes
"""
import sys
import os
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session
from recon.database import SessionLocal, engine, Base
from recon.models import (
    Vendor, SKU, PurchaseOrder, POLine, PurchaseInvoice, InvoiceLine, BankTransaction,
    GSTReturn, GSTReturnEntry, DiscountTerm,
)
from decimal import Decimal
from datetime import date, timedelta
from faker import Faker

fake = Faker("en_IN")

ORG_ID = os.getenv("SEED_ORG_ID", "demo-org")
GST_RATE = Decimal("0.18")
UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def fake_gstin(state_code: str = "27") -> str:
    return fake.bothify(text=f"{state_code}?????####?1Z?", letters=UPPER)


def create_vendors(db: Session, count: int = 6) -> list[Vendor]:
    """Create synthetic vendors"""
    vendors = []
    for _ in range(count):
        vendor = Vendor(
            org_id=ORG_ID,
            name=fake.company(),
            gstin=fake_gstin(),
            email=fake.company_email(),
        )
        db.add(vendor)
        vendors.append(vendor)
    db.commit()
    return vendors


def create_skus(db: Session, count: int = 25) -> list[SKU]:
    """Create a product catalog with a few learned aliases"""
    skus = []
    for i in range(count):
        name = fake.unique.catch_phrase()
        sku = SKU(
            org_id=ORG_ID,
            sku_code=f"SKU-{str(i + 1).zfill(4)}",
            name=name,
            description=fake.sentence(nb_words=8),
            hsn_code=fake.numerify(text="####"),
            aliases=[name.upper()] if i % 4 == 0 else [],
        )
        db.add(sku)
        skus.append(sku)
    db.commit()
    return skus


def create_purchase_orders(db: Session, vendors: list[Vendor], skus: list[SKU], count: int = 10) -> list[PurchaseOrder]:
    """Create synthetic purchase orders with line items"""
    pos = []
    for i in range(count):
        vendor = fake.random_element(elements=vendors)
        po = PurchaseOrder(
            org_id=ORG_ID,
            po_number=f"PO-2024-{str(i + 1).zfill(4)}",
            vendor_id=vendor.id,
            po_date=date.today() - timedelta(days=fake.random_int(min=20, max=60)),
            total_amount=Decimal("0.00"),
            total_with_gst=Decimal("0.00"),
            status="OPEN",
        )
        db.add(po)
        db.flush()  # Get the ID

        total = Decimal("0.00")
        for line_no, sku in enumerate(fake.random_elements(elements=skus, length=fake.random_int(min=2, max=4), unique=True), start=1):
            quantity = Decimal(str(fake.random_int(min=5, max=200)))
            unit_price = Decimal(str(round(fake.random.uniform(50.0, 2500.0), 2)))
            line_total = quantity * unit_price
            total += line_total
            db.add(POLine(
                po_id=po.id,
                line_no=line_no,
                sku_id=sku.id,
                description=sku.name,
                hsn_code=sku.hsn_code,
                quantity=quantity,
                unit_price=unit_price,
                total_amount=line_total,
            ))

        po.total_amount = total
        po.total_with_gst = (total * (1 + GST_RATE)).quantize(Decimal("0.01"))
        pos.append(po)

    db.commit()
    return pos


def create_invoice_from_po(
    db: Session, po: PurchaseOrder, number: int, qty_factor: Decimal = Decimal("1"), drop_last_line: bool = False
) -> PurchaseInvoice:
    vendor = db.query(Vendor).filter(Vendor.id == po.vendor_id).first()
    lines = list(po.po_lines)[:-1] if drop_last_line else list(po.po_lines)

    subtotal = Decimal("0.00")
    invoice = PurchaseInvoice(
        org_id=ORG_ID,
        invoice_number=f"INV-2024-{str(number).zfill(4)}",
        vendor_id=po.vendor_id,
        vendor_gstin=vendor.gstin,
        invoice_date=po.po_date + timedelta(days=fake.random_int(min=5, max=15)),
        total_amount=Decimal("0.00"),
        total_with_gst=Decimal("0.00"),
        status="PENDING",
    )
    invoice.due_date = invoice.invoice_date + timedelta(days=30)
    db.add(invoice)
    db.flush()

    for po_line in lines:
        quantity = (po_line.quantity * qty_factor).quantize(Decimal("1"))
        line_total = quantity * po_line.unit_price
        subtotal += line_total
        db.add(InvoiceLine(
            invoice_id=invoice.id,
            line_no=po_line.line_no,
            sku_id=po_line.sku_id,
            description=po_line.description,
            hsn_code=po_line.hsn_code,
            quantity=quantity,
            unit_price=po_line.unit_price,
            discount_amount=Decimal("0.00"),
            total_amount=line_total,
        ))

    half_tax = (subtotal * GST_RATE / 2).quantize(Decimal("0.01"))
    invoice.total_amount = subtotal
    invoice.cgst_amount = half_tax
    invoice.sgst_amount = half_tax
    invoice.igst_amount = Decimal("0.00")
    invoice.total_with_gst = subtotal + 2 * half_tax
    return invoice


def create_invoices(db: Session, pos: list[PurchaseOrder]) -> list[PurchaseInvoice]:
    """Create invoices covering exact, small-variance and short-supply scenarios"""
    invoices = []
    number = 1

    # Perfect matches
    for po in pos[:4]:
        invoices.append(create_invoice_from_po(db, po, number))
        number += 1

    # Quantity within tolerance (3% over)
    for po in pos[4:6]:
        invoices.append(create_invoice_from_po(db, po, number, qty_factor=Decimal("1.03")))
        number += 1

    # Short supply: last PO line missing
    for po in pos[6:8]:
        invoices.append(create_invoice_from_po(db, po, number, drop_last_line=True))
        number += 1

    db.commit()
    return invoices


def create_bank_transactions(db: Session, invoices: list[PurchaseInvoice]) -> list[BankTransaction]:
    """Payments for some invoices: exact, near-exact and partial"""
    transactions = []
    for i, invoice in enumerate(invoices[:5]):
        if i == 3:
            amount = invoice.total_with_gst - Decimal("5.00")
        elif i == 4:
            amount = (invoice.total_with_gst * Decimal("0.6")).quantize(Decimal("0.01"))
        else:
            amount = invoice.total_with_gst
        txn = BankTransaction(
            org_id=ORG_ID,
            transaction_date=invoice.invoice_date + timedelta(days=fake.random_int(min=1, max=6)),
            description=f"NEFT {fake.company()} {invoice.invoice_number if i % 2 == 0 else ''}".strip(),
            reference_number=invoice.invoice_number if i < 2 else fake.bothify(text="UTR##########"),
            debit=amount,
        )
        db.add(txn)
        transactions.append(txn)
    db.commit()
    return transactions


def create_gst_return(db: Session, invoices: list[PurchaseInvoice]) -> GSTReturn:
    """GSTR-2B for the month of the first invoice, with one entry missing in books"""
    period_date = invoices[0].invoice_date
    gst_return = GSTReturn(org_id=ORG_ID, return_type="GSTR2B", period=period_date.strftime("%m%Y"))
    db.add(gst_return)
    db.flush()

    for invoice in invoices[:6]:
        db.add(GSTReturnEntry(
            return_id=gst_return.id,
            counterparty_gstin=invoice.vendor_gstin,
            invoice_number=invoice.invoice_number,
            invoice_date=invoice.invoice_date,
            invoice_value=invoice.total_with_gst,
            taxable_value=invoice.total_amount,
            cgst=invoice.cgst_amount,
            sgst=invoice.sgst_amount,
            igst=invoice.igst_amount,
            itc_available=True,
        ))

    db.add(GSTReturnEntry(
        return_id=gst_return.id,
        counterparty_gstin=fake_gstin("29"),
        counterparty_name=fake.company(),
        invoice_number="INV-9999",
        invoice_date=period_date,
        invoice_value=Decimal("11800.00"),
        taxable_value=Decimal("10000.00"),
        igst=Decimal("1800.00"),
        itc_available=True,
    ))
    db.commit()
    return gst_return


def create_discount_terms(db: Session, vendors: list[Vendor]) -> list[DiscountTerm]:
    terms = []
    for vendor in vendors[:3]:
        terms.append(DiscountTerm(
            org_id=ORG_ID,
            vendor_id=vendor.id,
            name="Volume slabs",
            term_type="VOLUME_REBATE",
            valid_from=date.today() - timedelta(days=365),
            slabs=[
                {"min_value": 0, "max_value": 50000, "discount_percent": 5},
                {"min_value": 50000, "max_value": None, "discount_percent": 8},
            ],
        ))
        terms.append(DiscountTerm(
            org_id=ORG_ID,
            vendor_id=vendor.id,
            name="Late payment interest",
            term_type="LATE_PAYMENT_PENALTY",
            valid_from=date.today() - timedelta(days=365),
            penalty_percent=Decimal("1.5"),
        ))
    db.add_all(terms)
    db.commit()
    return terms


def main():
    """Main seeding function"""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        print("Creating vendors...")
        vendors = create_vendors(db)
        print(f"Created {len(vendors)} vendors")

        print("Creating SKU catalog...")
        skus = create_skus(db)
        print(f"Created {len(skus)} SKUs")

        print("Creating purchase orders...")
        pos = create_purchase_orders(db, vendors, skus)
        print(f"Created {len(pos)} purchase orders")

        print("Creating invoices...")
        invoices = create_invoices(db, pos)
        print(f"Created {len(invoices)} invoices")

        transactions = create_bank_transactions(db, invoices)
        gst_return = create_gst_return(db, invoices)
        terms = create_discount_terms(db, vendors)

        print("\nSeeding complete!")
        print(f"Summary (org {ORG_ID}):")
        print(f"  - Vendors: {len(vendors)}")
        print(f"  - SKUs: {len(skus)}")
        print(f"  - Purchase Orders: {len(pos)}")
        print(f"  - Invoices: {len(invoices)} (4 exact, 2 within tolerance, 2 short supply)")
        print(f"  - Bank transactions: {len(transactions)}")
        print(f"  - GST return {gst_return.period}: {len(gst_return.entries)} entries")
        print(f"  - Discount terms: {len(terms)}")

    except Exception as e:
        print(f"Error during seeding: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
