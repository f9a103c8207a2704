from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from recon.database import Base


class BankTransaction(Base):
    """Bank statement line; exactly one of debit or credit is set"""
    __tablename__ = "bank_transactions"

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(String(64), nullable=False, index=True)
    transaction_date = Column(Date, nullable=False)
    description = Column(String, nullable=True)
    reference_number = Column(String, nullable=True)
    debit = Column(Numeric(14, 2), nullable=True)
    credit = Column(Numeric(14, 2), nullable=True)
    match_status = Column(String(24), default="UNMATCHED", index=True)  # UNMATCHED, AUTO_MATCHED, MANUALLY_MATCHED
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    payment_matches = relationship("PaymentMatch", back_populates="bank_transaction", cascade="all, delete-orphan")
