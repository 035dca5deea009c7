"""
Semantic Relevance Scorer

Scores one listing against an interpreted query with a fixed rule table:

    location match        +0.4
    property type match   +0.3
    price in range        +0.2
    bedrooms match        +0.1   (no bedroom filter counts as a match)
    amenity overlap       +0.1 × share of requested amenities present
    intent category       +0.2

The total is clamped to 1.0. Listings with missing optional fields simply
earn nothing for the affected rules.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from core.scoring import ScoreRule, evaluate

from .query_interpreter import NormalizedQuery
from .vocabulary import SearchVocabulary, default_vocabulary


@dataclass(frozen=True)
class RelevanceResult:
    listing_id: int
    relevance_score: float
    matching_features: Tuple[str, ...]
    explanation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "listing_id": self.listing_id,
            "relevance_score": self.relevance_score,
            "matching_features": list(self.matching_features),
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class _Candidate:
    """A listing paired with the query it is scored against."""
    listing: Any
    query: NormalizedQuery
    categories: Tuple[str, ...]

    @property
    def filters(self):
        return self.query.filters


def _lower(value: Optional[str]) -> str:
    return (value or "").lower()


def _location_match(c: _Candidate) -> bool:
    where = (_lower(c.listing.location), _lower(c.listing.city))
    return any(loc.lower() in field for loc in c.filters.locations for field in where if field)


def _type_match(c: _Candidate) -> bool:
    kinds = {_lower(c.listing.property_type), _lower(c.listing.category)} - {""}
    return any(t.lower() in kinds for t in c.filters.property_types)


def _price_match(c: _Candidate) -> bool:
    return bool(c.listing.price) and c.filters.price_range.contains(float(c.listing.price))


def _bedroom_match(c: _Candidate) -> bool:
    if not c.filters.bedrooms:
        return True
    return c.listing.bedrooms is not None and c.listing.bedrooms in c.filters.bedrooms


def _amenity_overlap(c: _Candidate) -> float:
    wanted = {a.lower() for a in c.filters.amenities}
    if not wanted:
        return 0.0
    have = {f.lower() for f in c.listing.features or ()}
    return len(wanted & have) / len(wanted)


def _intent_match(c: _Candidate) -> bool:
    return _lower(c.listing.category) in c.categories


RELEVANCE_RULES = (
    ScoreRule("location", 0.4, _location_match, "location"),
    ScoreRule("property_type", 0.3, _type_match, "property_type"),
    ScoreRule("price", 0.2, _price_match, "price"),
    ScoreRule("bedrooms", 0.1, _bedroom_match, "bedrooms"),
    ScoreRule("amenities", 0.1, _amenity_overlap, "amenities"),
    ScoreRule("intent", 0.2, _intent_match, "intent"),
)


class RelevanceScorer:

    def __init__(self, vocabulary: Optional[SearchVocabulary] = None, rules=RELEVANCE_RULES):
        self.vocabulary = vocabulary or default_vocabulary()
        self.rules = rules

    def score(self, listing, query: NormalizedQuery) -> RelevanceResult:
        candidate = _Candidate(listing, query, self.vocabulary.categories_for(query.intent.type))
        outcome = evaluate(self.rules, candidate)
        return RelevanceResult(
            listing_id=listing.id,
            relevance_score=round(outcome.score, 4),
            matching_features=outcome.matched,
            explanation=f"Matches {len(outcome.matched)} criteria with {round(outcome.score * 100)}% relevance",
        )
