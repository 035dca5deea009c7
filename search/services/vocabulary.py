"""
Search Vocabulary

Fixed word lists and pattern tables the query interpreter, suggestion
generator and context enhancer work from.

Everything is bundled into an immutable ``SearchVocabulary`` that services
receive at construction time, so tests can swap in a different market
without patching module state.

Tables:
- LOCATIONS: Nigerian cities and Lagos neighbourhoods (display form)
- PROPERTY_TYPES: dwelling / asset kinds
- AMENITIES: features listings advertise
- INTENT_TRIGGERS: trigger phrases per intent, in tie-break order
- TIMEFRAMES: timeframe token → regex
- SUGGESTION_PATTERNS: regex → natural-language suggestion text
"""

from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import FrozenSet, Mapping, Tuple

# =============================================================================
# LOCATIONS
# =============================================================================
LOCATIONS = (
    # Major cities
    "Lagos", "Abuja", "Kano", "Ibadan", "Kaduna", "Port Harcourt", "Maiduguri",
    "Zaria", "Aba", "Jos", "Ilorin", "Oyo", "Enugu", "Abeokuta", "Sokoto",
    "Onitsha", "Warri", "Calabar", "Uyo",

    # Lagos neighbourhoods
    "Lekki", "Victoria Island", "Ikeja", "Surulere", "Yaba", "Gbagada",
    "Magodo", "Banana Island", "Ikoyi", "Maryland",
)

# =============================================================================
# PROPERTY TYPES
# =============================================================================
PROPERTY_TYPES = (
    "apartment", "house", "villa", "duplex", "penthouse", "studio",
    "commercial", "office", "shop", "warehouse", "land", "farm",
)

# =============================================================================
# AMENITIES
# =============================================================================
AMENITIES = (
    "air conditioning", "generator", "security", "parking", "garden",
    "swimming pool", "gym", "wifi", "kitchen", "laundry", "furnished",
    "pet friendly", "elevator", "doorman", "storage", "terrace",
)

# =============================================================================
# INTENTS
# =============================================================================
# Declaration order is the tie-break order: the first of equally confident
# intents wins.
INTENT_TRIGGERS = (
    ("buy", ("buy", "purchase", "own", "investment", "buying")),
    ("rent", ("rent", "lease", "rental", "renting", "monthly")),
    ("short_stay", ("short stay", "vacation", "temporary", "holiday", "airbnb")),
    ("invest", ("investment", "roi", "yield", "income", "profit")),
    ("explore", ("browse", "view", "look", "search", "find")),
)

DEFAULT_INTENT = "explore"
DEFAULT_INTENT_CONFIDENCE = 0.5

# Property types assumed when the query names none
INTENT_DEFAULT_TYPES = {
    "buy": ("house", "apartment", "villa"),
    "rent": ("apartment", "house"),
    "short_stay": ("apartment", "house"),
    "invest": ("commercial", "land", "apartment"),
    "explore": (),
}

# Listing category each intent is looking for
INTENT_CATEGORIES = {
    "buy": ("property_sale",),
    "rent": ("long_term_rental",),
    "short_stay": ("short_stay",),
    "invest": ("commercial", "landed_property"),
    "explore": (),
}

# =============================================================================
# TIMEFRAMES
# =============================================================================
# A named year (group "year") counts only when it is the current one
TIMEFRAMES = (
    ("immediate", r"\b(immediate(?:ly)?|now|urgent(?:ly)?|asap)\b"),
    ("next_month", r"\b(next\s*month|in\s*a\s*month)\b"),
    ("this_year", r"\b(this\s*year|(?P<year>\d{4}))\b"),
)

# =============================================================================
# NATURAL-LANGUAGE SUGGESTIONS
# =============================================================================
# (regex, suggestion template). Templates may reference regex groups (\1).
SUGGESTION_PATTERNS = (
    (r"(\d+)\s*bed", r"\1 Bedroom Apartment"),
    (r"luxury", "Luxury Properties"),
    (r"affordable", "Affordable Housing"),
    (r"investment", "Investment Properties"),
    (r"family", "Family Homes"),
    (r"studio", "Studio Apartments"),
    (r"penthouse", "Penthouse"),
    (r"commercial", "Commercial Properties"),
    (r"short\s*-?\s*let", "Short-let Apartments"),
)

# =============================================================================
# STOP WORDS (never kept as free-text keywords)
# =============================================================================
STOP_WORDS = frozenset({
    "a", "an", "the", "in", "on", "at", "for", "to", "of", "with", "and", "or",
    "i", "me", "my", "we", "want", "need", "looking", "around", "near", "under",
    "below", "above", "over", "less", "more", "than", "between", "from", "is",
    "are", "be", "some", "any", "please", "that", "this", "which", "who", "per",
})


@dataclass(frozen=True)
class SearchVocabulary:
    """Immutable bundle of every table the search services read."""

    locations: Tuple[str, ...] = LOCATIONS
    property_types: Tuple[str, ...] = PROPERTY_TYPES
    amenities: Tuple[str, ...] = AMENITIES
    intent_triggers: Tuple[Tuple[str, Tuple[str, ...]], ...] = INTENT_TRIGGERS
    intent_default_types: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: MappingProxyType(dict(INTENT_DEFAULT_TYPES)))
    intent_categories: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: MappingProxyType(dict(INTENT_CATEGORIES)))
    timeframes: Tuple[Tuple[str, str], ...] = TIMEFRAMES
    suggestion_patterns: Tuple[Tuple[str, str], ...] = SUGGESTION_PATTERNS
    stop_words: FrozenSet[str] = STOP_WORDS

    # Mapping fields are unhashable, identity hashing keeps the bundle usable as a key
    __hash__ = object.__hash__

    def default_types_for(self, intent: str) -> Tuple[str, ...]:
        return tuple(self.intent_default_types.get(intent, ()))

    def categories_for(self, intent: str) -> Tuple[str, ...]:
        return tuple(self.intent_categories.get(intent, ()))


@lru_cache(maxsize=1)
def default_vocabulary() -> SearchVocabulary:
    """The Nigerian-market vocabulary every service uses unless given another."""
    return SearchVocabulary()
