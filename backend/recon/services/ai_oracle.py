"""
AI fallback oracle for SKU resolution.

The oracle is the last tier of the catalog lookup. It ranks catalog entries for a
free-text description; any failure (no key, timeout, bad JSON) degrades to an
empty suggestion list so the caller can carry on with the deterministic tiers.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from openai import OpenAI

from recon.config import settings
from recon.schemas.sku import CatalogEntry, OracleSuggestion

logger = logging.getLogger(__name__)


class SKUOracle(ABC):
    """Ranks catalog entries for a line description"""

    @abstractmethod
    def rank(self, description: str, hsn_code: Optional[str], catalog: List[CatalogEntry]) -> List[OracleSuggestion]:
        pass


class NullSKUOracle(SKUOracle):
    """Oracle used when no AI service is configured"""

    def rank(self, description: str, hsn_code: Optional[str], catalog: List[CatalogEntry]) -> List[OracleSuggestion]:
        return []


class OpenAISKUOracle(SKUOracle):
    """Oracle backed by the OpenAI chat completions API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[OpenAI] = None,
    ):
        self.model = model or settings.openai_model
        self.max_suggestions = settings.ai_max_suggestions
        self.client = client
        if self.client is None and (api_key or settings.openai_api_key):
            self.client = OpenAI(
                api_key=api_key or settings.openai_api_key,
                timeout=timeout or settings.ai_oracle_timeout_seconds,
                max_retries=0,
            )

    def rank(self, description: str, hsn_code: Optional[str], catalog: List[CatalogEntry]) -> List[OracleSuggestion]:
        if not self.client or not catalog:
            return []

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": self._build_prompt(description, hsn_code, catalog)}],
                temperature=settings.ai_oracle_temperature,
                max_tokens=1024,
            )
            if not response.choices or not response.choices[0].message.content:
                return []

            suggestions = parse_oracle_response(
                response.choices[0].message.content,
                known_ids=[entry.sku_id for entry in catalog],
                limit=self.max_suggestions,
            )
            logger.info(f"AI oracle returned {len(suggestions)} SKU suggestion(s) for '{description}'")
            return suggestions

        except Exception as e:
            logger.error(f"AI SKU matching failed for '{description}': {e}")
            return []

    def _build_prompt(self, description: str, hsn_code: Optional[str], catalog: List[CatalogEntry]) -> str:
        sku_list = [entry.model_dump(exclude_none=True) for entry in catalog]
        hsn_line = f"HSN Code: {hsn_code}\n" if hsn_code else ""
        return f"""You are an expert in matching product descriptions to SKU master data.

Given the following product description from an invoice:
"{description}"
{hsn_line}
Match it to the most likely SKU(s) from this master list:
{json.dumps(sku_list, indent=2)}

Return a JSON array of up to {self.max_suggestions} best matches with confidence scores (0-1), ordered by confidence descending.
Format: [{{"id": <sku_id>, "confidence": 0.95, "reasoning": "why this matches"}}]

Return ONLY the JSON array, no other text."""


def parse_oracle_response(content: str, known_ids: Iterable[int], limit: int = 3) -> List[OracleSuggestion]:
    """
    Parse the oracle's JSON array, keeping only ids present in the catalog snapshot.

    Raises:
        ValueError: content is not a JSON array
    """
    content = re.sub(r"```json\s*", "", content)
    content = re.sub(r"```\s*", "", content)
    match = re.search(r"\[.*\]", content, re.DOTALL)
    if match:
        content = match.group(0)

    items = json.loads(content)
    if not isinstance(items, list):
        raise ValueError("Oracle response is not a JSON array")

    known = set(known_ids)
    suggestions = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            sku_id = int(item.get("id"))
            confidence = float(item.get("confidence") or 0)
        except (TypeError, ValueError):
            continue
        if sku_id not in known:
            continue
        suggestions.append(OracleSuggestion(
            sku_id=sku_id,
            confidence=min(max(confidence, 0.0), 1.0),
            reasoning=item.get("reasoning"),
        ))

    suggestions.sort(key=lambda s: s.confidence, reverse=True)
    return suggestions[:limit]


def get_default_oracle() -> SKUOracle:
    if settings.ai_oracle_enabled and settings.openai_api_key:
        return OpenAISKUOracle()
    return NullSKUOracle()
