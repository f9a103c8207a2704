from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from recon.database import Base


class GSTMatch(Base):
    __tablename__ = "gst_matches"

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(String(64), nullable=False, index=True)
    idempotency_key = Column(String(64), nullable=False, unique=True, index=True)
    gst_entry_id = Column(Integer, ForeignKey("gst_return_entries.id"), nullable=False, index=True)
    invoice_id = Column(Integer, ForeignKey("purchase_invoices.id"), nullable=False, index=True)
    match_type = Column(String(20), nullable=False)
    match_score = Column(Float, nullable=False)
    itc_status = Column(String(20), nullable=False)  # AVAILABLE, NOT_FILED, MISMATCH
    discrepancies = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
