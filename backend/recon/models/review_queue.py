from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from recon.database import Base


class ReviewQueue(Base):
    """Represents an item in the review queue for human oversight"""
    __tablename__ = "review_queue"

    id = Column(Integer, primary_key=True, index=True)
    document_match_id = Column(Integer, ForeignKey("document_matches.id"), nullable=False, index=True)
    priority = Column(String(10), nullable=False, index=True)  # 'low', 'medium', 'high', 'critical'
    issue_category = Column(String(50), nullable=False)  # Primary discrepancy type
    assigned_to = Column(String(100), nullable=True)
    sla_deadline = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    resolved_at = Column(DateTime(timezone=True), nullable=True, index=True)
    resolution_notes = Column(Text, nullable=True)

    # Relationships
    document_match = relationship("DocumentMatch", back_populates="review_queue_items")
