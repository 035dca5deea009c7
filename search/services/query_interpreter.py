"""
Query Interpreter

Turns a free-text property search into a structured ``NormalizedQuery``:

1. Normalisation (lowercase, punctuation stripped, whitespace collapsed)
2. Intent detection (buy, rent, short_stay, invest, explore)
3. Entity extraction (location, property type, price, bedrooms, amenity, timeframe)
4. Filter synthesis (grouped entities, price bands, intent defaults)
5. Confidence scoring
6. LRU caching of recent interpretations (256 entries)

Interpretation never raises: text with nothing recognisable yields no
entities and the default ``explore`` intent.

    interpreter = QueryInterpreter()
    query = interpreter.interpret("3 bedroom apartment in Lekki under 50 million")
    query.filters.locations        # ("Lekki",)
    query.filters.price_range      # PriceRange(min=40000000.0, max=60000000.0)
"""

import re
import logging
from datetime import date
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from core.cache import CacheNamespace, MISS

from .pattern_matcher import PatternHit, PatternMatcher, PatternRule
from .vocabulary import (
    DEFAULT_INTENT,
    DEFAULT_INTENT_CONFIDENCE,
    SearchVocabulary,
    default_vocabulary,
)

logger = logging.getLogger(__name__)

# Max query length to prevent abuse
MAX_QUERY_LENGTH = 500

ENTITY_TYPES = ("location", "property_type", "price", "bedrooms", "amenity", "timeframe")

ENTITY_CONFIDENCE = {
    "location": 0.9,
    "property_type": 0.8,
    "price": 0.7,
    "bedrooms": 0.8,
    "amenity": 0.6,
    "timeframe": 0.7,
}

# =============================================================================
# PRICE HEURISTICS
# =============================================================================
# Placeholder band used when a query names no price
DEFAULT_PRICE_MIN = 0.0
DEFAULT_PRICE_MAX = 100_000_000.0

# A stated price searches the band around it, not the exact figure
PRICE_BAND_LOW = 0.8
PRICE_BAND_HIGH = 1.2
PRICE_FLOOR = 100_000.0
PRICE_CEILING = 1_000_000_000.0

PRICE_UNITS = {
    "billion": 1_000_000_000,
    "million": 1_000_000,
    "m": 1_000_000,
    "thousand": 1_000,
    "k": 1_000,
    "naira": 1,
    "ngn": 1,
    "": 1,
}

PRICE_PATTERN = (
    r"(?<![\w.])(?P<sign>₦\s*)?(?P<amount>\d+(?:\.\d+)?)\s*"
    r"(?P<unit>billion|million|thousand|naira|ngn|m|k)?\b"
)
BEDROOM_PATTERN = r"(?<![\w.])(\d+)\s*(?:bedroom|bed)"


# =============================================================================
# VALUE OBJECTS
# =============================================================================

@dataclass(frozen=True)
class Intent:
    type: str
    confidence: float
    modifiers: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "confidence": self.confidence, "modifiers": list(self.modifiers)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Intent":
        return cls(data["type"], data["confidence"], tuple(data.get("modifiers") or ()))


@dataclass(frozen=True)
class Entity:
    type: str
    raw_value: str
    confidence: float
    normalized_value: Any

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "raw_value": self.raw_value,
            "confidence": self.confidence,
            "normalized_value": self.normalized_value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entity":
        return cls(data["type"], data["raw_value"], data["confidence"], data["normalized_value"])


@dataclass(frozen=True)
class PriceRange:
    min: float = DEFAULT_PRICE_MIN
    max: float = DEFAULT_PRICE_MAX

    @classmethod
    def around(cls, value: float) -> "PriceRange":
        """The 80%–120% band around ``value``, both bounds clamped."""
        return cls(_clamp_price(value * PRICE_BAND_LOW), _clamp_price(value * PRICE_BAND_HIGH))

    @property
    def is_default(self) -> bool:
        return self.min == DEFAULT_PRICE_MIN and self.max == DEFAULT_PRICE_MAX

    def contains(self, price: Optional[float]) -> bool:
        return price is not None and self.min <= price <= self.max

    def union(self, other: "PriceRange") -> "PriceRange":
        return PriceRange(min(self.min, other.min), max(self.max, other.max))

    def to_dict(self) -> Dict[str, float]:
        return {"min": self.min, "max": self.max}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, float]]) -> "PriceRange":
        if not data:
            return cls()
        return cls(data.get("min", DEFAULT_PRICE_MIN), data.get("max", DEFAULT_PRICE_MAX))


def _clamp_price(value: float) -> float:
    return max(PRICE_FLOOR, min(value, PRICE_CEILING))


@dataclass(frozen=True)
class FilterSet:
    locations: Tuple[str, ...] = ()
    property_types: Tuple[str, ...] = ()
    price_range: PriceRange = field(default_factory=PriceRange)
    bedrooms: Tuple[int, ...] = ()
    amenities: Tuple[str, ...] = ()
    timeframes: Tuple[str, ...] = ()
    keywords: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "locations": list(self.locations),
            "property_types": list(self.property_types),
            "price_range": self.price_range.to_dict(),
            "bedrooms": list(self.bedrooms),
            "amenities": list(self.amenities),
            "timeframes": list(self.timeframes),
            "keywords": list(self.keywords),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterSet":
        return cls(
            locations=tuple(data.get("locations") or ()),
            property_types=tuple(data.get("property_types") or ()),
            price_range=PriceRange.from_dict(data.get("price_range")),
            bedrooms=tuple(data.get("bedrooms") or ()),
            amenities=tuple(data.get("amenities") or ()),
            timeframes=tuple(data.get("timeframes") or ()),
            keywords=tuple(data.get("keywords") or ()),
        )


@dataclass(frozen=True)
class NormalizedQuery:
    original_text: str
    normalized_text: str
    intent: Intent
    entities: Tuple[Entity, ...] = ()
    filters: FilterSet = field(default_factory=FilterSet)
    confidence: float = 0.0

    def entities_of(self, entity_type: str) -> Tuple[Entity, ...]:
        return tuple(e for e in self.entities if e.type == entity_type)

    def has_entity(self, entity_type: str) -> bool:
        return any(e.type == entity_type for e in self.entities)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_text": self.original_text,
            "normalized_text": self.normalized_text,
            "intent": self.intent.to_dict(),
            "entities": [e.to_dict() for e in self.entities],
            "filters": self.filters.to_dict(),
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NormalizedQuery":
        return cls(
            original_text=data["original_text"],
            normalized_text=data["normalized_text"],
            intent=Intent.from_dict(data["intent"]),
            entities=tuple(Entity.from_dict(e) for e in data.get("entities") or ()),
            filters=FilterSet.from_dict(data.get("filters") or {}),
            confidence=data.get("confidence", 0.0),
        )


# =============================================================================
# NORMALISATION
# =============================================================================

def normalize_text(text: Optional[str]) -> str:
    """
    Lowercase, strip punctuation to whitespace, collapse whitespace.

    Thousands separators inside numbers are dropped ("50,000" → "50000");
    decimal points between digits and the naira sign survive.
    """
    if not text:
        return ""
    t = str(text)[:MAX_QUERY_LENGTH].lower()
    t = re.sub(r"(?<=\d),(?=\d)", "", t)
    t = re.sub(r"[^\w\s₦.]|_", " ", t)
    t = re.sub(r"(?<!\d)\.|\.(?!\d)", " ", t)
    return re.sub(r"\s+", " ", t).strip()


def _unique(values) -> Tuple:
    seen = []
    for v in values:
        if v not in seen:
            seen.append(v)
    return tuple(seen)


# =============================================================================
# INTERPRETER
# =============================================================================

class QueryInterpreter:
    """
    Rule-based natural-language query interpreter.

    Args:
        vocabulary: tables to match against (defaults to the Nigerian market)
        cache: optional ``CacheStore``; interpretations are written under
               ``ai:query:<normalized text>`` in the search namespace
    """

    def __init__(self, vocabulary: Optional[SearchVocabulary] = None, cache=None):
        self.vocabulary = vocabulary or default_vocabulary()
        self.cache = cache
        self._intent_matchers = tuple(
            (name, len(triggers), PatternMatcher(
                PatternRule.literal(phrase, lambda m, p=phrase: p) for phrase in triggers
            ))
            for name, triggers in self.vocabulary.intent_triggers
        )
        self._entity_matcher = PatternMatcher(self._entity_rules())
        self._analyze = lru_cache(maxsize=256)(self._analyze_uncached)

    # ── Rule tables ────────────────────────────────────────────────────

    def _entity_rules(self) -> List[PatternRule]:
        vocab = self.vocabulary
        rules = []

        for location in vocab.locations:
            rules.append(PatternRule.literal(
                location,
                lambda m, loc=location: Entity("location", loc, ENTITY_CONFIDENCE["location"], loc.lower()),
            ))

        for property_type in vocab.property_types:
            rules.append(PatternRule.literal(
                property_type,
                lambda m, t=property_type: Entity("property_type", t, ENTITY_CONFIDENCE["property_type"], t),
            ))

        rules.append(PatternRule.regex(PRICE_PATTERN, self._build_price))

        rules.append(PatternRule.regex(
            BEDROOM_PATTERN,
            lambda m: Entity("bedrooms", m.group(1), ENTITY_CONFIDENCE["bedrooms"], int(m.group(1))),
        ))

        for amenity in vocab.amenities:
            rules.append(PatternRule.literal(
                amenity,
                lambda m, a=amenity: Entity("amenity", a, ENTITY_CONFIDENCE["amenity"], a),
            ))

        for token, expression in vocab.timeframes:
            rules.append(PatternRule.regex(
                expression,
                lambda m, t=token: self._build_timeframe(m, t),
                multiple=False,
            ))

        return rules

    @staticmethod
    def _build_timeframe(match, token: str) -> Optional[Entity]:
        year = match.groupdict().get("year")
        if year and int(year) != date.today().year:
            return None
        return Entity("timeframe", match.group(0), ENTITY_CONFIDENCE["timeframe"], token)

    @staticmethod
    def _build_price(match) -> Optional[Entity]:
        unit = (match.group("unit") or "").lower()
        # A bare number ("3 bedroom", "2024") is not a price
        if not unit and not match.group("sign"):
            return None
        value = float(match.group("amount")) * PRICE_UNITS[unit]
        return Entity("price", match.group(0).strip(), ENTITY_CONFIDENCE["price"], value)

    # ── Pipeline ───────────────────────────────────────────────────────

    def interpret(self, text: Optional[str]) -> NormalizedQuery:
        """Interpret ``text``. Never raises on malformed input."""
        original = "" if text is None else str(text)
        normalized = normalize_text(original)
        # Keyed by year too: a named year only counts while it is current
        intent, entities, filters, confidence = self._analyze(normalized, date.today().year)

        query = NormalizedQuery(
            original_text=original,
            normalized_text=normalized,
            intent=intent,
            entities=entities,
            filters=filters,
            confidence=confidence,
        )

        logger.debug(
            f"Interpreted '{normalized}' → intent={intent.type} ({intent.confidence:.2f}), "
            f"{len(entities)} entities, confidence={confidence:.2f}"
        )

        if self.cache is not None and normalized:
            self.cache.set(CacheNamespace.SEARCH, self.cache_key(normalized), query.to_dict())
        return query

    def lookup(self, text: Optional[str]) -> Optional[NormalizedQuery]:
        """Previously cached interpretation of ``text``, or None."""
        normalized = normalize_text(text)
        if self.cache is None or not normalized:
            return None
        cached = self.cache.get(CacheNamespace.SEARCH, self.cache_key(normalized))
        if cached is MISS:
            return None
        query = NormalizedQuery.from_dict(cached)
        # The cache is keyed by normalized text; keep this caller's wording
        return NormalizedQuery(
            original_text="" if text is None else str(text),
            normalized_text=query.normalized_text,
            intent=query.intent,
            entities=query.entities,
            filters=query.filters,
            confidence=query.confidence,
        )

    @staticmethod
    def cache_key(normalized: str) -> str:
        return f"ai:query:{normalized.lower()}"

    def _analyze_uncached(self, normalized: str, current_year: int):
        intent, intent_hits = self.detect_intent(normalized)
        entity_hits = list(self._entity_matcher.scan(normalized))
        entities = tuple(hit.value for hit in entity_hits)
        keywords = self._leftover_keywords(normalized, intent_hits + entity_hits)
        filters = self.build_filters(intent, entities, keywords)
        confidence = self.calculate_confidence(intent, entities)
        return intent, entities, filters, confidence

    def detect_intent(self, normalized: str) -> Tuple[Intent, List[PatternHit]]:
        """
        Score every intent by the share of its trigger phrases present.

        ``explore`` at 0.5 stands until an intent scores strictly higher; the
        first intent with the strictly highest share wins.
        """
        best = Intent(DEFAULT_INTENT, DEFAULT_INTENT_CONFIDENCE)
        best_hits: List[PatternHit] = []
        for name, trigger_count, matcher in self._intent_matchers:
            hits = list(matcher.scan(normalized))
            if not hits or not trigger_count:
                continue
            confidence = len(hits) / trigger_count
            if confidence > best.confidence:
                best = Intent(name, confidence, tuple(hit.value for hit in hits))
                best_hits = hits
        return best, best_hits

    def build_filters(self, intent: Intent, entities, keywords=()) -> FilterSet:
        by_type: Dict[str, List[Entity]] = {t: [] for t in ENTITY_TYPES}
        for entity in entities:
            by_type[entity.type].append(entity)

        price_range = PriceRange()
        price_entities = by_type["price"]
        if price_entities:
            price_range = PriceRange.around(price_entities[0].normalized_value)
            for entity in price_entities[1:]:
                price_range = price_range.union(PriceRange.around(entity.normalized_value))

        property_types = _unique(e.normalized_value for e in by_type["property_type"])
        if not property_types:
            property_types = self.vocabulary.default_types_for(intent.type)

        return FilterSet(
            locations=_unique(e.raw_value for e in by_type["location"]),
            property_types=property_types,
            price_range=price_range,
            bedrooms=_unique(e.normalized_value for e in by_type["bedrooms"]),
            amenities=_unique(e.normalized_value for e in by_type["amenity"]),
            timeframes=_unique(e.normalized_value for e in by_type["timeframe"]),
            keywords=tuple(keywords),
        )

    @staticmethod
    def calculate_confidence(intent: Intent, entities) -> float:
        confidence = intent.confidence
        confidence += min(len(entities) * 0.1, 0.3)

        types = {e.type for e in entities}
        if "location" in types:
            confidence += 0.2
        if "property_type" in types:
            confidence += 0.15
        if "price" in types:
            confidence += 0.1

        return min(confidence, 1.0)

    def _leftover_keywords(self, normalized: str, hits: List[PatternHit]) -> Tuple[str, ...]:
        """Tokens no rule consumed, minus stop words and bare numbers."""
        spans = [hit.span for hit in hits]
        keywords = []
        for token in re.finditer(r"\S+", normalized):
            start, end = token.span()
            if any(start < s_end and s_start < end for s_start, s_end in spans):
                continue
            word = token.group(0)
            if word in self.vocabulary.stop_words or re.fullmatch(r"[\d.₦]+", word):
                continue
            keywords.append(word)
        return _unique(keywords)