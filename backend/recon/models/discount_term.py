from sqlalchemy import Column, Integer, String, Numeric, Boolean, ForeignKey, Date, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from recon.database import Base


class DiscountTerm(Base):
    """Contracted discount, rebate or late-payment penalty for a vendor"""
    __tablename__ = "discount_terms"

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(String(64), nullable=False, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)
    name = Column(String, nullable=True)
    # TRADE_DISCOUNT, CASH_DISCOUNT, VOLUME_REBATE, SPECIAL_SCHEME, LATE_PAYMENT_PENALTY
    term_type = Column(String(32), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    valid_from = Column(Date, nullable=False)
    valid_to = Column(Date, nullable=True)
    min_order_value = Column(Numeric(14, 2), nullable=True)
    applicable_skus = Column(JSON, nullable=False, default=list)  # SKU ids; empty means all
    flat_percent = Column(Numeric(6, 3), nullable=True)
    flat_amount = Column(Numeric(14, 2), nullable=True)
    slabs = Column(JSON, nullable=True)  # [{"min_value", "max_value", "discount_percent" | "discount_amount"}]
    payment_within_days = Column(Integer, nullable=True)
    penalty_percent = Column(Numeric(6, 3), nullable=True)  # Per 30 days late
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    vendor = relationship("Vendor", back_populates="discount_terms")
