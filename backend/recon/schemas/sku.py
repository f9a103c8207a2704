from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum


class MatchTier(str, Enum):
    EXACT = "EXACT"
    ALIAS = "ALIAS"
    FUZZY = "FUZZY"
    AI = "AI"


class SKUMatch(BaseModel):
    """A catalog entry proposed for a free-text line description"""
    sku_id: int
    sku_code: str
    name: str
    confidence: float = Field(ge=0.0, le=1.0)
    tier: MatchTier
    reasoning: Optional[str] = None


class MappingResult(BaseModel):
    description: str
    matches: List[SKUMatch] = []
    best_match: Optional[SKUMatch] = None
    needs_review: bool


class OracleSuggestion(BaseModel):
    """One ranked suggestion returned by the AI oracle"""
    sku_id: int
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: Optional[str] = None


class CatalogEntry(BaseModel):
    """Catalog snapshot row handed to the AI oracle"""
    sku_id: int
    sku_code: str
    name: str
    description: Optional[str] = None
    hsn_code: Optional[str] = None
    aliases: List[str] = []

    class Config:
        from_attributes = True


class AliasLearned(BaseModel):
    sku_id: int
    alias: str
    learned: bool  # False when the alias was already known
