from sqlalchemy import Column, Integer, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from recon.database import Base


class POLine(Base):
    __tablename__ = "po_lines"

    id = Column(Integer, primary_key=True, index=True)
    po_id = Column(Integer, ForeignKey("purchase_orders.id"), nullable=False)
    line_no = Column(Integer, nullable=False)
    sku_id = Column(Integer, ForeignKey("skus.id"), nullable=True, index=True)
    description = Column(String, nullable=False)
    hsn_code = Column(String(16), nullable=True)
    quantity = Column(Numeric(14, 3), nullable=False)
    unit_price = Column(Numeric(14, 2), nullable=False)
    total_amount = Column(Numeric(14, 2), nullable=False)

    # Relationships
    purchase_order = relationship("PurchaseOrder", back_populates="po_lines")
