"""
Review Queue Service - Manages the review queue for human oversight.
Calculates priority, SLA deadlines, and records reviewer decisions.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from recon.config import settings
from recon.models.review_queue import ReviewQueue
from recon.schemas.common import Discrepancy, DiscrepancyType, Severity
from recon.schemas.matching import DocumentMatchRecord, Resolution
from recon.store.base import ReconciliationStore

logger = logging.getLogger(__name__)

SEVERITY_ORDER = {Severity.HIGH: 0, Severity.MEDIUM: 1, Severity.LOW: 2}


class ReviewQueueService:
    """Service for managing review queue items"""

    def __init__(self, store: ReconciliationStore):
        self.store = store

    def add_to_queue(self, document_match_id: int, record: DocumentMatchRecord) -> ReviewQueue:
        """
        Add a needs-review match to the queue with priority.

        Args:
            document_match_id: Persisted match the item points at
            record: The match result that needs review

        Returns:
            The open ReviewQueue item for this match
        """
        if not record.needs_review:
            raise ValueError(f"Cannot add auto-approved match {document_match_id} to review queue")

        # Check if already in queue
        existing = self.store.find_open_review_item(document_match_id)
        if existing:
            logger.info(f"Match {document_match_id} already in review queue")
            return existing

        priority = self._calculate_priority(record)
        primary = self._get_primary_discrepancy(record.discrepancies)
        issue_category = primary.type.value if primary else "low_score"

        with self.store.atomic():
            item = self.store.add_review_item(
                document_match_id, priority, issue_category, self._calculate_sla(priority)
            )

        logger.info(f"Added match {document_match_id} to review queue with priority: {priority}")
        return item

    def _calculate_priority(self, record: DocumentMatchRecord) -> str:
        """
        Calculate priority based on score and discrepancies.

        Priority levels:
        - critical: score below 50, invalid line values
        - high: any HIGH discrepancy, totals off by more than 5%
        - medium: any MEDIUM discrepancy
        - low: everything else
        """
        types = {d.type for d in record.discrepancies}
        severities = {d.severity for d in record.discrepancies}

        if record.match_score < 50 or DiscrepancyType.INVALID_VALUE in types:
            return "critical"

        if Severity.HIGH in severities:
            return "high"
        if record.value_variance_percent > 5 or record.gst_variance_percent > 5:
            return "high"

        if Severity.MEDIUM in severities:
            return "medium"

        return "low"

    def _get_primary_discrepancy(self, discrepancies: List[Discrepancy]) -> Optional[Discrepancy]:
        if not discrepancies:
            return None
        return min(discrepancies, key=lambda d: SEVERITY_ORDER.get(d.severity, 99))

    def _calculate_sla(self, priority: str) -> datetime:
        sla_hours = {
            "critical": settings.sla_critical_hours,
            "high": settings.sla_high_hours,
            "medium": settings.sla_medium_hours,
            "low": settings.sla_low_hours,
        }
        hours = sla_hours.get(priority, settings.sla_low_hours)
        return datetime.now() + timedelta(hours=hours)

    def resolve(self, item_id: int, org_id: str, decision: str, reviewer: str, notes: Optional[str] = None) -> Resolution:
        """Record a reviewer's decision on the queued match"""
        item = self.store.get_review_item(item_id, org_id)
        if item.resolved_at is not None:
            raise ValueError(f"Review item {item_id} is already resolved")

        match = self.store.get_document_match(item.document_match_id, org_id)
        resolution = Resolution(decision=decision, resolved_by=reviewer, resolved_at=datetime.now(), notes=notes)

        with self.store.atomic():
            self.store.resolve_review_item(item, match, resolution)

        logger.info(f"Review item {item_id} {decision} by {reviewer}")
        return resolution
