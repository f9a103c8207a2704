from sqlalchemy import Column, Integer, String, Numeric, Boolean, ForeignKey, Date, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from recon.database import Base


class GSTReturn(Base):
    __tablename__ = "gst_returns"

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(String(64), nullable=False, index=True)
    return_type = Column(String(16), nullable=False, default="GSTR2B")
    period = Column(String(6), nullable=False)  # MMYYYY
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    entries = relationship("GSTReturnEntry", back_populates="gst_return", cascade="all, delete-orphan")


class GSTReturnEntry(Base):
    """Supplier-filed invoice line from a GST return"""
    __tablename__ = "gst_return_entries"

    id = Column(Integer, primary_key=True, index=True)
    return_id = Column(Integer, ForeignKey("gst_returns.id"), nullable=False, index=True)
    counterparty_gstin = Column(String(15), nullable=False, index=True)
    counterparty_name = Column(String, nullable=True)
    invoice_number = Column(String, nullable=False)
    invoice_date = Column(Date, nullable=True)
    invoice_value = Column(Numeric(14, 2), nullable=False)
    taxable_value = Column(Numeric(14, 2), nullable=False)
    cgst = Column(Numeric(14, 2), nullable=False, default=0)
    sgst = Column(Numeric(14, 2), nullable=False, default=0)
    igst = Column(Numeric(14, 2), nullable=False, default=0)
    itc_available = Column(Boolean, nullable=False, default=True)

    gst_return = relationship("GSTReturn", back_populates="entries")
