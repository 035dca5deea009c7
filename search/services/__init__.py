from .context import ContextEnhancer, SearchBehavior
from .query_interpreter import (
    Entity,
    FilterSet,
    Intent,
    NormalizedQuery,
    PriceRange,
    QueryInterpreter,
    normalize_text,
)
from .relevance import RelevanceResult, RelevanceScorer
from .search_service import RankedListing, SearchResult, SearchService
from .suggestions import SearchSuggestion, SuggestionGenerator, suggestion_generator
from .vocabulary import SearchVocabulary, default_vocabulary

__all__ = [
    "ContextEnhancer",
    "Entity",
    "FilterSet",
    "Intent",
    "NormalizedQuery",
    "PriceRange",
    "QueryInterpreter",
    "RankedListing",
    "RelevanceResult",
    "RelevanceScorer",
    "SearchBehavior",
    "SearchResult",
    "SearchService",
    "SearchSuggestion",
    "SearchVocabulary",
    "SuggestionGenerator",
    "default_vocabulary",
    "normalize_text",
    "suggestion_generator",
]
