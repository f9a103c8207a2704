"""Tests for review queue priority, SLA and resolution."""
from datetime import datetime, timedelta

import pytest

from recon.exceptions import NotFoundError
from recon.models import DocumentMatch, ReviewQueue
from recon.schemas.common import Discrepancy, DiscrepancyType, Severity
from recon.schemas.matching import DocumentMatchRecord, DocumentMatchType
from recon.services.review_queue_service import ReviewQueueService


def discrepancy(type_, severity):
    return Discrepancy(type=type_, severity=severity, message=f"{type_.value} {severity.value}")


class TestReviewQueueService:

    @pytest.fixture(autouse=True)
    def setup_records(self, factory, store, session):
        self.factory = factory
        self.store = store
        self.session = session
        self.org = factory.org_id
        vendor = factory.vendor()
        self.po = factory.purchase_order(vendor, [{"quantity": 1, "unit_price": 100}])
        self.invoice = factory.invoice(vendor, [{"quantity": 1, "unit_price": 100}])
        self.service = ReviewQueueService(store)

    def _record(self, score=80.0, discrepancies=(), value_variance=0.0, gst_variance=0.0, needs_review=True):
        return DocumentMatchRecord(
            org_id=self.org,
            purchase_order_id=self.po.id,
            invoice_id=self.invoice.id,
            match_score=score,
            match_type=DocumentMatchType.PARTIAL_QTY,
            line_matches=[],
            total_value_match=value_variance <= 5,
            total_gst_match=gst_variance <= 2,
            value_variance_percent=value_variance,
            gst_variance_percent=gst_variance,
            discrepancies=list(discrepancies),
            needs_review=needs_review,
            auto_approve=not needs_review,
        )

    def _saved(self, record):
        with self.store.atomic():
            match_id = self.store.save_document_match(record).id
        return match_id

    @pytest.mark.parametrize("score, discrepancies, value_variance, expected", [
        (40.0, [], 0.0, "critical"),
        (85.0, [discrepancy(DiscrepancyType.INVALID_VALUE, Severity.HIGH)], 0.0, "critical"),
        (85.0, [discrepancy(DiscrepancyType.SHORT_SUPPLY, Severity.HIGH)], 0.0, "high"),
        (85.0, [], 6.0, "high"),
        (85.0, [discrepancy(DiscrepancyType.EXCESS_SUPPLY, Severity.MEDIUM)], 0.0, "medium"),
        (85.0, [discrepancy(DiscrepancyType.PRICE_VARIANCE, Severity.LOW)], 0.0, "low"),
    ])
    def test_priority(self, score, discrepancies, value_variance, expected):
        record = self._record(score, discrepancies, value_variance)
        item = self.service.add_to_queue(self._saved(record), record)
        assert item.priority == expected

    def test_sla_follows_priority(self):
        record = self._record(40.0)
        before = datetime.now()
        item = self.service.add_to_queue(self._saved(record), record)

        deadline = item.sla_deadline.replace(tzinfo=None)
        assert before + timedelta(hours=2) <= deadline <= datetime.now() + timedelta(hours=2)

    def test_issue_category_is_most_severe_discrepancy(self):
        record = self._record(85.0, [
            discrepancy(DiscrepancyType.PRICE_VARIANCE, Severity.LOW),
            discrepancy(DiscrepancyType.SHORT_SUPPLY, Severity.HIGH),
        ])
        item = self.service.add_to_queue(self._saved(record), record)
        assert item.issue_category == "SHORT_SUPPLY"

    def test_low_score_without_discrepancies(self):
        record = self._record(85.0)
        item = self.service.add_to_queue(self._saved(record), record)
        assert item.issue_category == "low_score"

    def test_one_open_item_per_match(self):
        record = self._record(60.0)
        match_id = self._saved(record)

        first = self.service.add_to_queue(match_id, record)
        second = self.service.add_to_queue(match_id, record)

        assert first.id == second.id
        assert self.session.query(ReviewQueue).count() == 1

    def test_auto_approved_match_is_rejected(self):
        record = self._record(98.0, needs_review=False)
        with pytest.raises(ValueError):
            self.service.add_to_queue(self._saved(record), record)

    def test_resolve(self):
        record = self._record(60.0)
        match_id = self._saved(record)
        item = self.service.add_to_queue(match_id, record)

        resolution = self.service.resolve(item.id, self.org, "approved", "reviewer@example.com", "Price agreed by phone")

        match = self.session.get(DocumentMatch, match_id)
        self.session.refresh(item)
        assert resolution.decision == "approved"
        assert match.resolution == "approved"
        assert match.resolved_by == "reviewer@example.com"
        assert item.resolved_at is not None
        assert item.resolution_notes == "Price agreed by phone"

    def test_resolve_twice(self):
        record = self._record(60.0)
        item = self.service.add_to_queue(self._saved(record), record)
        self.service.resolve(item.id, self.org, "rejected", "reviewer")

        with pytest.raises(ValueError):
            self.service.resolve(item.id, self.org, "approved", "reviewer")

    def test_resolved_match_can_be_queued_again(self):
        record = self._record(60.0)
        match_id = self._saved(record)
        item = self.service.add_to_queue(match_id, record)
        self.service.resolve(item.id, self.org, "rejected", "reviewer")

        again = self.service.add_to_queue(match_id, record)

        assert again.id != item.id

    def test_resolve_other_org(self):
        record = self._record(60.0)
        item = self.service.add_to_queue(self._saved(record), record)
        with pytest.raises(NotFoundError):
            self.service.resolve(item.id, "org-b", "approved", "reviewer")
