from recon.schemas.common import Discrepancy, DiscrepancyType, Severity
from recon.schemas.sku import SKUMatch, MappingResult, MatchTier, OracleSuggestion, CatalogEntry, AliasLearned
from recon.schemas.matching import (
    LineCandidate, LineMatchRecord, LineMatchType, DocumentMatchRecord, DocumentMatchType,
    BestPOMatch, Resolution, ProcessingOutcome,
)
from recon.schemas.payment import (
    InvoiceKind, PaymentMatchType, InvoiceCandidate, PaymentMatchResult,
    AllocationRequest, PaymentAllocation, ReversalResult,
)
from recon.schemas.gst import GSTMatchType, ITCStatus, GSTMatchRecord, ReconciliationSummary, GSTReconciliationResult, SaveSummary
from recon.schemas.discount import DiscountTermType, DiscountStatus, DiscountEvaluation, PenaltyEvaluation, AuditSummary

__all__ = [
    "Discrepancy",
    "DiscrepancyType",
    "Severity",
    "SKUMatch",
    "MappingResult",
    "MatchTier",
    "OracleSuggestion",
    "CatalogEntry",
    "AliasLearned",
    "LineCandidate",
    "LineMatchRecord",
    "LineMatchType",
    "DocumentMatchRecord",
    "DocumentMatchType",
    "BestPOMatch",
    "Resolution",
    "ProcessingOutcome",
    "InvoiceKind",
    "PaymentMatchType",
    "InvoiceCandidate",
    "PaymentMatchResult",
    "AllocationRequest",
    "PaymentAllocation",
    "ReversalResult",
    "GSTMatchType",
    "ITCStatus",
    "GSTMatchRecord",
    "ReconciliationSummary",
    "GSTReconciliationResult",
    "SaveSummary",
    "DiscountTermType",
    "DiscountStatus",
    "DiscountEvaluation",
    "PenaltyEvaluation",
    "AuditSummary",
]
