from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey
from sqlalchemy.sql import func
from recon.database import Base


class DiscountAudit(Base):
    __tablename__ = "discount_audits"

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(String(64), nullable=False, index=True)
    idempotency_key = Column(String(64), nullable=False, unique=True, index=True)
    invoice_id = Column(Integer, ForeignKey("purchase_invoices.id"), nullable=False, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)
    discount_term_id = Column(Integer, ForeignKey("discount_terms.id"), nullable=True)
    expected_discount = Column(Numeric(14, 2), nullable=False)
    actual_discount = Column(Numeric(14, 2), nullable=False)
    difference = Column(Numeric(14, 2), nullable=False)
    status = Column(String(24), nullable=False, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
