from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, Date, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from recon.database import Base


class PurchaseInvoice(Base):
    """Vendor bill recorded in the books"""
    __tablename__ = "purchase_invoices"

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(String(64), nullable=False, index=True)
    invoice_number = Column(String, nullable=False, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False)
    vendor_gstin = Column(String(15), nullable=True, index=True)
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    total_amount = Column(Numeric(14, 2), nullable=False)  # Pre-tax subtotal
    cgst_amount = Column(Numeric(14, 2), nullable=False, default=0)
    sgst_amount = Column(Numeric(14, 2), nullable=False, default=0)
    igst_amount = Column(Numeric(14, 2), nullable=False, default=0)
    total_with_gst = Column(Numeric(14, 2), nullable=False)
    amount_paid = Column(Numeric(14, 2), nullable=False, default=0)
    status = Column(String(24), default="PENDING", index=True)  # PENDING, VERIFIED, MATCHED, UNMATCHED, CLOSED
    payment_status = Column(String(24), default="UNPAID", index=True)  # UNPAID, PARTIALLY_PAID, PAID
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    vendor = relationship("Vendor", back_populates="invoices")
    invoice_lines = relationship(
        "InvoiceLine", back_populates="invoice", cascade="all, delete-orphan", order_by="InvoiceLine.line_no"
    )
