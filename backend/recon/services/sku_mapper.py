"""
SKU Mapper - resolves free-text line descriptions to catalog entries.

Cascade, cheapest first; the first confident tier wins:
1. SKU code (case-insensitive)
2. Exact name or learned alias
3. Fuzzy edit-distance similarity against names and aliases
4. AI oracle over a bounded catalog snapshot
"""
import logging
from typing import Dict, List, Optional

from recon.config import settings
from recon.schemas.sku import AliasLearned, CatalogEntry, MappingResult, MatchTier, SKUMatch
from recon.services.ai_oracle import SKUOracle, get_default_oracle
from recon.store.base import ReconciliationStore
from recon.utils.similarity import similarity

logger = logging.getLogger(__name__)


class SKUResolver:
    """Maps invoice and PO line descriptions onto the product catalog"""

    def __init__(self, store: ReconciliationStore, oracle: Optional[SKUOracle] = None):
        self.store = store
        self.oracle = oracle if oracle is not None else get_default_oracle()

    def map_line_item(
        self,
        org_id: str,
        description: str,
        sku_code: Optional[str] = None,
        hsn_code: Optional[str] = None,
    ) -> MappingResult:
        """
        Resolve one line description to ranked catalog candidates.

        Args:
            org_id: Organization whose catalog is searched
            description: Free-text line description
            sku_code: Optional code printed on the document
            hsn_code: Optional tax classification, passed to the AI tier as context

        Returns:
            MappingResult with up to five candidates; needs_review is set when
            nothing reached the review threshold
        """
        description = description or ""

        # Tier 1: SKU code
        if sku_code and sku_code.strip():
            sku = self.store.find_sku_by_code(org_id, sku_code)
            if sku:
                return self._resolved(description, self._to_match(sku, MatchTier.EXACT, 1.0))

        if not description.strip():
            logger.warning("Empty line description with no resolvable SKU code")
            return MappingResult(description=description, matches=[], best_match=None, needs_review=True)

        # Tier 2: exact name, then alias
        sku = self.store.find_sku_by_name(org_id, description)
        if sku:
            return self._resolved(description, self._to_match(sku, MatchTier.EXACT, 1.0))

        sku = self.store.find_sku_by_alias(org_id, description)
        if sku:
            return self._resolved(description, self._to_match(sku, MatchTier.ALIAS, settings.sku_alias_confidence))

        # Tier 3: fuzzy
        fuzzy_matches = self._fuzzy_matches(org_id, description)
        if fuzzy_matches and fuzzy_matches[0].confidence >= settings.sku_fuzzy_accept_threshold:
            return MappingResult(
                description=description,
                matches=fuzzy_matches,
                best_match=fuzzy_matches[0],
                needs_review=False,
            )

        # Tier 4: AI oracle
        ai_matches = self._ai_matches(org_id, description, hsn_code)

        matches = self._merge(fuzzy_matches + ai_matches)
        best_match = matches[0] if matches else None
        needs_review = best_match is None or best_match.confidence < settings.sku_review_threshold

        return MappingResult(
            description=description,
            matches=matches,
            best_match=best_match,
            needs_review=needs_review,
        )

    def bulk_map_line_items(self, org_id: str, line_items: List[Dict]) -> List[MappingResult]:
        """Map a batch of {"description", "sku_code", "hsn_code"} dicts, one after another"""
        results = []
        for item in line_items:
            results.append(self.map_line_item(
                org_id,
                item.get("description", ""),
                sku_code=item.get("sku_code"),
                hsn_code=item.get("hsn_code"),
            ))
        return results

    def learn_from_mapping(self, sku_id: int, org_id: str, alias: str) -> AliasLearned:
        """
        Record a confirmed description as an alias of a catalog entry.

        Raises:
            NotFoundError: SKU doesn't exist in the organization
            ValueError: alias is blank
        """
        if not alias or not alias.strip():
            raise ValueError("Alias must not be blank")

        with self.store.atomic():
            learned = self.store.append_sku_alias(sku_id, org_id, alias)

        if learned:
            logger.info(f"Learned alias '{alias}' for SKU {sku_id}")
        return AliasLearned(sku_id=sku_id, alias=alias, learned=learned)

    def _fuzzy_matches(self, org_id: str, description: str) -> List[SKUMatch]:
        threshold = settings.sku_fuzzy_threshold
        matches = []

        for sku in self.store.list_active_skus(org_id):
            name_score = similarity(description, sku.name)
            if name_score >= threshold:
                matches.append(self._to_match(sku, MatchTier.FUZZY, name_score))

            for alias in sku.aliases or []:
                alias_score = similarity(description, alias)
                if alias_score >= threshold:
                    # Alias hits are discounted against direct name hits
                    matches.append(self._to_match(sku, MatchTier.FUZZY, alias_score * settings.sku_fuzzy_alias_weight))

        return self._merge(matches)

    def _ai_matches(self, org_id: str, description: str, hsn_code: Optional[str]) -> List[SKUMatch]:
        skus = self.store.list_active_skus(org_id, limit=settings.ai_catalog_snapshot_size)
        if not skus:
            return []

        catalog = [
            CatalogEntry(
                sku_id=sku.id,
                sku_code=sku.sku_code,
                name=sku.name,
                description=sku.description,
                hsn_code=sku.hsn_code,
                aliases=list(sku.aliases or []),
            )
            for sku in skus
        ]
        by_id = {sku.id: sku for sku in skus}

        try:
            suggestions = self.oracle.rank(description, hsn_code, catalog)
        except Exception as e:
            logger.error(f"SKU oracle failed for '{description}', keeping deterministic matches: {e}", exc_info=True)
            return []

        matches = []
        for suggestion in suggestions:
            sku = by_id.get(suggestion.sku_id)
            if sku is None:
                continue
            match = self._to_match(sku, MatchTier.AI, suggestion.confidence)
            match.reasoning = suggestion.reasoning
            matches.append(match)
        return matches

    def _merge(self, matches: List[SKUMatch]) -> List[SKUMatch]:
        """Keep the most confident candidate per SKU, sorted descending, top N"""
        best: Dict[int, SKUMatch] = {}
        for match in matches:
            existing = best.get(match.sku_id)
            if existing is None or match.confidence > existing.confidence:
                best[match.sku_id] = match

        ranked = sorted(best.values(), key=lambda m: m.confidence, reverse=True)
        return ranked[:settings.sku_max_matches]

    def _resolved(self, description: str, match: SKUMatch) -> MappingResult:
        return MappingResult(description=description, matches=[match], best_match=match, needs_review=False)

    def _to_match(self, sku, tier: MatchTier, confidence: float) -> SKUMatch:
        return SKUMatch(
            sku_id=sku.id,
            sku_code=sku.sku_code,
            name=sku.name,
            confidence=confidence,
            tier=tier,
        )
