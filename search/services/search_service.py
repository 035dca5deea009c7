"""
Search Service

Natural-language search end to end:

    text → QueryInterpreter → ContextEnhancer (when behaviour is supplied)
         → catalog query → RelevanceScorer → threshold, sort, truncate

Ranked results are cached in the ``search:results`` namespace under an md5 of
the normalized query, the limit and the behaviour input. Catalog failures
propagate as ``CatalogTimeoutError`` / ``CatalogUnavailableError``; a query
that matches nothing returns an empty result list.
"""

import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from core.cache import CacheNamespace
from core.services import BaseService
from listings.catalog import ListingFilter, ListingSummary
from propsearch.config import config

from .context import ContextEnhancer, SearchBehavior
from .query_interpreter import NormalizedQuery, QueryInterpreter
from .relevance import RelevanceResult, RelevanceScorer

# Which rows survive the candidate cap
CANDIDATE_ORDER = ("-view_count", "-inquiry_count")


@dataclass(frozen=True)
class RankedListing:
    listing: ListingSummary
    relevance: RelevanceResult

    def to_dict(self) -> Dict[str, Any]:
        data = self.listing.to_dict()
        data.update(self.relevance.to_dict())
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RankedListing":
        values = dict(data)
        relevance = RelevanceResult(
            listing_id=values.pop("listing_id"),
            relevance_score=values.pop("relevance_score"),
            matching_features=tuple(values.pop("matching_features")),
            explanation=values.pop("explanation"),
        )
        return cls(ListingSummary.from_dict(values), relevance)


@dataclass(frozen=True)
class SearchResult:
    query: NormalizedQuery
    results: Tuple[RankedListing, ...] = ()
    meta: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query.to_dict(),
            "results": [r.to_dict() for r in self.results],
            "meta": dict(self.meta),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchResult":
        return cls(
            query=NormalizedQuery.from_dict(data["query"]),
            results=tuple(RankedListing.from_dict(r) for r in data["results"]),
            meta=dict(data.get("meta") or {}),
        )


class SearchService(BaseService):
    """
    Orchestrates interpretation, enhancement, retrieval and ranking.

    Collaborators are injectable; by default the service talks to the
    module-level catalog service and the shared cache.
    """

    def __init__(self, catalog=None, interpreter: Optional[QueryInterpreter] = None,
                 enhancer: Optional[ContextEnhancer] = None, scorer: Optional[RelevanceScorer] = None,
                 cache=None):
        super().__init__(cache=cache)
        if catalog is None:
            from listings.catalog import catalog_service
            catalog = catalog_service
        self.catalog = catalog
        self.interpreter = interpreter or QueryInterpreter(cache=self.cache)
        self.enhancer = enhancer or ContextEnhancer(
            catalog=catalog, vocabulary=self.interpreter.vocabulary, cache=self.cache,
        )
        self.scorer = scorer or RelevanceScorer(vocabulary=self.interpreter.vocabulary)

    # ── Public API ─────────────────────────────────────────────────────

    def interpret(self, text: str) -> NormalizedQuery:
        """Interpretation of ``text``, served from cache when available."""
        return self.interpreter.lookup(text) or self.interpreter.interpret(text)

    def search(self, text: str, behavior: Optional[SearchBehavior] = None,
               limit: Optional[int] = None) -> SearchResult:
        limit = self._clamp_limit(limit)
        query = self.interpret(text)

        if not query.normalized_text:
            return SearchResult(query=query, meta={"total": 0, "candidates": 0, "limit": limit, "enhanced": False})

        return self.cache.get_or_compute(
            CacheNamespace.SEARCH,
            self.cache_key(query, limit, behavior),
            lambda: self._rank(query, behavior, limit),
            dumps=lambda result: result.to_dict(),
            loads=SearchResult.from_dict,
        )

    def clear_caches(self) -> None:
        self.cache.delete_pattern(CacheNamespace.SEARCH.pattern())

    # ── Internals ──────────────────────────────────────────────────────

    @staticmethod
    def _clamp_limit(limit: Optional[int]) -> int:
        if limit is None:
            return config.search.default_result_limit
        return max(1, min(int(limit), config.search.max_result_limit))

    @staticmethod
    def cache_key(query: NormalizedQuery, limit: int, behavior: Optional[SearchBehavior]) -> str:
        payload = json.dumps(
            {
                "q": query.normalized_text,
                "limit": limit,
                "behavior": behavior.to_dict() if behavior else None,
            },
            sort_keys=True,
        )
        return hashlib.md5(payload.encode()).hexdigest()

    @staticmethod
    def build_listing_filter(query: NormalizedQuery) -> ListingFilter:
        """
        Catalog query for ``query``. Scoring sees at most ``candidate_limit``
        rows, taken most viewed first, so a quiet listing beyond the cap is
        not ranked.
        """
        filters = query.filters
        price_range = filters.price_range
        return ListingFilter(
            location_contains=filters.locations,
            property_type_in=filters.property_types,
            price_min=None if price_range.is_default else price_range.min,
            price_max=None if price_range.is_default else price_range.max,
            bedrooms_in=filters.bedrooms,
            order_by=CANDIDATE_ORDER,
            limit=config.search.candidate_limit,
        )

    def _rank(self, query: NormalizedQuery, behavior: Optional[SearchBehavior], limit: int) -> SearchResult:
        if behavior is not None:
            query = self.enhancer.enhance(query, behavior)

        with self.timed(f"search '{query.normalized_text}'"):
            candidates = self.catalog.find_listings(self.build_listing_filter(query))

            threshold = config.search.relevance_threshold
            ranked = []
            for listing in candidates:
                relevance = self.scorer.score(listing, query)
                if relevance.relevance_score > threshold:
                    ranked.append(RankedListing(listing, relevance))

            ranked.sort(key=lambda r: (-r.relevance.relevance_score, r.listing.id))

        self.logger.info(
            f"Search '{query.normalized_text}': {len(ranked)}/{len(candidates)} candidates above {threshold}"
        )
        return SearchResult(
            query=query,
            results=tuple(ranked[:limit]),
            meta={
                "total": len(ranked),
                "candidates": len(candidates),
                "limit": limit,
                "enhanced": behavior is not None,
            },
        )


search_service = SearchService()
