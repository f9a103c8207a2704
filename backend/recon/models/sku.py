from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON, UniqueConstraint
from sqlalchemy.sql import func
from recon.database import Base


class SKU(Base):
    """Catalog entry that invoice and PO lines resolve to"""
    __tablename__ = "skus"
    __table_args__ = (UniqueConstraint("org_id", "sku_code", name="uq_skus_org_code"),)

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(String(64), nullable=False, index=True)
    sku_code = Column(String(64), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    hsn_code = Column(String(16), nullable=True)
    aliases = Column(JSON, nullable=False, default=list)  # Learned alternate names, append-only
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
