from sqlalchemy import Column, Integer, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from recon.database import Base


class InvoiceLine(Base):
    __tablename__ = "invoice_lines"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("purchase_invoices.id"), nullable=False)
    line_no = Column(Integer, nullable=False)
    sku_id = Column(Integer, ForeignKey("skus.id"), nullable=True, index=True)
    description = Column(String, nullable=False)
    hsn_code = Column(String(16), nullable=True)
    quantity = Column(Numeric(14, 3), nullable=False)
    unit_price = Column(Numeric(14, 2), nullable=False)
    discount_amount = Column(Numeric(14, 2), nullable=False, default=0)
    total_amount = Column(Numeric(14, 2), nullable=False)

    # Relationships
    invoice = relationship("PurchaseInvoice", back_populates="invoice_lines")
