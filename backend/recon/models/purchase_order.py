from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, Date, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from recon.database import Base


class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(String(64), nullable=False, index=True)
    po_number = Column(String, nullable=False, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False)
    po_date = Column(Date, nullable=False)
    total_amount = Column(Numeric(14, 2), nullable=False)  # Pre-tax subtotal
    total_with_gst = Column(Numeric(14, 2), nullable=False)
    status = Column(String(24), default="OPEN", index=True)  # OPEN, PARTIALLY_FULFILLED, FULFILLED, CLOSED
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    vendor = relationship("Vendor", back_populates="purchase_orders")
    po_lines = relationship(
        "POLine", back_populates="purchase_order", cascade="all, delete-orphan", order_by="POLine.line_no"
    )
