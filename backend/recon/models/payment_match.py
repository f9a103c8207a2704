from sqlalchemy import Column, Integer, String, Text, Numeric, Float, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from recon.database import Base


class PaymentMatch(Base):
    """Portion of a bank transaction applied to one invoice"""
    __tablename__ = "payment_matches"

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(String(64), nullable=False, index=True)
    bank_transaction_id = Column(Integer, ForeignKey("bank_transactions.id"), nullable=False, index=True)
    purchase_invoice_id = Column(Integer, ForeignKey("purchase_invoices.id"), nullable=True, index=True)
    sales_invoice_id = Column(Integer, ForeignKey("sales_invoices.id"), nullable=True, index=True)
    matched_amount = Column(Numeric(14, 2), nullable=False)
    match_score = Column(Float, nullable=False)
    match_type = Column(String(24), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    bank_transaction = relationship("BankTransaction", back_populates="payment_matches")
    purchase_invoice = relationship("PurchaseInvoice")
    sales_invoice = relationship("SalesInvoice")
