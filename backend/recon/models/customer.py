from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from recon.database import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(String(64), nullable=False, index=True)
    name = Column(String, nullable=False)
    gstin = Column(String(15), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    sales_invoices = relationship("SalesInvoice", back_populates="customer")
