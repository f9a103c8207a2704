from sqlalchemy import Column, Integer, String, Text, Boolean, Float, Numeric, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from recon.database import Base


class DocumentMatch(Base):
    """Persisted result of reconciling a purchase invoice against a purchase order"""
    __tablename__ = "document_matches"

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(String(64), nullable=False, index=True)
    idempotency_key = Column(String(64), nullable=False, unique=True, index=True)
    purchase_order_id = Column(Integer, ForeignKey("purchase_orders.id"), nullable=False, index=True)
    invoice_id = Column(Integer, ForeignKey("purchase_invoices.id"), nullable=False, index=True)
    match_score = Column(Float, nullable=False)  # 0 to 100
    match_type = Column(String(20), nullable=False, index=True)
    total_value_match = Column(Boolean, nullable=False)
    total_gst_match = Column(Boolean, nullable=False)
    discrepancies = Column(JSON, nullable=False, default=list)
    needs_review = Column(Boolean, nullable=False, index=True)
    auto_approve = Column(Boolean, nullable=False)
    resolution = Column(String(20), nullable=True)  # 'approved', 'rejected'
    resolved_by = Column(String(100), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    resolution_notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    purchase_order = relationship("PurchaseOrder")
    invoice = relationship("PurchaseInvoice")
    line_matches = relationship("LineMatch", back_populates="document_match", cascade="all, delete-orphan")
    review_queue_items = relationship("ReviewQueue", back_populates="document_match", cascade="all, delete-orphan")


class LineMatch(Base):
    __tablename__ = "line_matches"

    id = Column(Integer, primary_key=True, index=True)
    document_match_id = Column(Integer, ForeignKey("document_matches.id"), nullable=False, index=True)
    po_line_id = Column(Integer, ForeignKey("po_lines.id"), nullable=False)
    invoice_line_id = Column(Integer, ForeignKey("invoice_lines.id"), nullable=False)
    quantity_variance = Column(Numeric(14, 3), nullable=False)
    quantity_variance_percent = Column(Float, nullable=False)
    price_variance = Column(Numeric(14, 2), nullable=False)
    price_variance_percent = Column(Float, nullable=False)
    amount_variance = Column(Numeric(14, 2), nullable=False)
    within_quantity_tolerance = Column(Boolean, nullable=False)
    within_price_tolerance = Column(Boolean, nullable=False)
    match_score = Column(Float, nullable=False)
    match_type = Column(String(20), nullable=False)

    document_match = relationship("DocumentMatch", back_populates="line_matches")
