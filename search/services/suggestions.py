"""
Search-as-you-type suggestions built from the vocabulary tables, a small set of
natural-language patterns and the user's own search history.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from .pattern_matcher import PatternMatcher, PatternRule
from .vocabulary import SearchVocabulary, default_vocabulary

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 10

# (prefix match, substring match) relevance per vocabulary table
LOCATION_RELEVANCE = (0.9, 0.7)
PROPERTY_TYPE_RELEVANCE = (0.8, 0.6)
AMENITY_RELEVANCE = (0.7, 0.5)
PATTERN_RELEVANCE = 0.8
HISTORY_RELEVANCE = 0.8


@dataclass(frozen=True)
class SearchSuggestion:
    text: str
    type: str
    relevance: float
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "type": self.type,
            "relevance": self.relevance,
            "description": self.description,
        }


class SuggestionGenerator:
    """Pure function of (partial text, history) over an injected vocabulary."""

    def __init__(self, vocabulary: Optional[SearchVocabulary] = None):
        self.vocabulary = vocabulary or default_vocabulary()
        self._pattern_matcher = PatternMatcher(
            PatternRule.regex(expression, lambda m, t=template: m.expand(t), multiple=False)
            for expression, template in self.vocabulary.suggestion_patterns
        )

    def suggest(self, partial_text: Optional[str], history: Optional[Iterable[str]] = None,
                limit: int = MAX_SUGGESTIONS) -> List[SearchSuggestion]:
        partial = (partial_text or "").lower().strip()
        if not partial:
            return []

        candidates: List[SearchSuggestion] = []
        candidates += self._from_table(
            partial, self.vocabulary.locations, "location", LOCATION_RELEVANCE,
            lambda name: f"Properties in {name}",
        )
        candidates += self._from_table(
            partial, self.vocabulary.property_types, "property_type", PROPERTY_TYPE_RELEVANCE,
            lambda name: f"{name.capitalize()} listings",
        )
        candidates += self._from_table(
            partial, self.vocabulary.amenities, "amenity", AMENITY_RELEVANCE,
            lambda name: f"Properties with {name}",
        )

        for text in self._pattern_matcher.collect(partial):
            candidates.append(SearchSuggestion(text, "query", PATTERN_RELEVANCE, "Based on your search"))

        for entry in history or ():
            if entry and partial in entry.lower():
                candidates.append(SearchSuggestion(entry, "query", HISTORY_RELEVANCE, "From your search history"))

        # sorted() is stable: equal relevance keeps source order
        ranked = sorted(candidates, key=lambda s: s.relevance, reverse=True)
        logger.debug(f"{len(candidates)} suggestion candidates for '{partial}'")
        return ranked[:max(0, min(limit, MAX_SUGGESTIONS))]

    @staticmethod
    def _from_table(partial, names, suggestion_type, relevance, describe) -> List[SearchSuggestion]:
        prefix_score, substring_score = relevance
        suggestions = []
        for name in names:
            lowered = name.lower()
            if lowered.startswith(partial):
                score = prefix_score
            elif partial in lowered:
                score = substring_score
            else:
                continue
            suggestions.append(SearchSuggestion(name, suggestion_type, score, describe(name)))
        return suggestions


suggestion_generator = SuggestionGenerator()
