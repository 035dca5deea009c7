"""
Context Enhancer

Widens an interpreted query with what the user's behaviour says about them,
then applies Nigerian-market defaults.

Behaviour signals:
- previous searches → up to 3 most frequently mentioned locations
- saved listings    → dominant property types, price span, bedroom counts
- clicked listings  → confidence boost (×1.2)

Market defaults:
- the placeholder price ceiling (100M) is lifted to 500M for luxury stock
- queries naming no amenities pick up ``security`` and ``parking``
- confident queries (> 0.7) get a further ×1.1

Enhancement only unions lists and widens the price range, so applying it
again with the same behaviour leaves the filters unchanged.
"""

import dataclasses
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from core.services import BaseService
from listings.catalog import ListingFilter

from .query_interpreter import DEFAULT_PRICE_MAX, FilterSet, NormalizedQuery, PriceRange
from .vocabulary import SearchVocabulary, default_vocabulary

MARKET_PRICE_CEILING = 500_000_000.0
MARKET_DEFAULT_AMENITIES = ("security", "parking")

CLICK_CONFIDENCE_BOOST = 1.2
MARKET_CONFIDENCE_BOOST = 1.1
MARKET_CONFIDENCE_THRESHOLD = 0.7

SAVED_PRICE_LOW = 0.8
SAVED_PRICE_HIGH = 1.2


@dataclass(frozen=True)
class SearchBehavior:
    previous_searches: Tuple[str, ...] = ()
    saved_listing_ids: Tuple[int, ...] = ()
    clicked_listing_ids: Tuple[int, ...] = ()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["SearchBehavior"]:
        if not data:
            return None
        return cls(
            previous_searches=tuple(data.get("previous_searches") or ()),
            saved_listing_ids=tuple(data.get("saved_listing_ids") or ()),
            clicked_listing_ids=tuple(data.get("clicked_listing_ids") or ()),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "previous_searches": list(self.previous_searches),
            "saved_listing_ids": list(self.saved_listing_ids),
            "clicked_listing_ids": list(self.clicked_listing_ids),
        }


def _top(counter: Counter, n: int) -> Tuple:
    # most_common keeps first-seen order among equal counts
    return tuple(value for value, _ in counter.most_common(n))


def _union(left: Tuple, right: Tuple) -> Tuple:
    return left + tuple(v for v in right if v not in left)


def merge_filters(primary: FilterSet, inferred: FilterSet, inferred_has_price: bool) -> FilterSet:
    price_range = primary.price_range
    if inferred_has_price:
        price_range = primary.price_range.union(inferred.price_range)
    return FilterSet(
        locations=_union(primary.locations, inferred.locations),
        property_types=_union(primary.property_types, inferred.property_types),
        price_range=price_range,
        bedrooms=_union(primary.bedrooms, inferred.bedrooms),
        amenities=_union(primary.amenities, inferred.amenities),
        timeframes=_union(primary.timeframes, inferred.timeframes),
        keywords=_union(primary.keywords, inferred.keywords),
    )


class ContextEnhancer(BaseService):

    def __init__(self, catalog=None, vocabulary: Optional[SearchVocabulary] = None, cache=None):
        super().__init__(cache=cache)
        if catalog is None:
            from listings.catalog import catalog_service
            catalog = catalog_service
        self.catalog = catalog
        self.vocabulary = vocabulary or default_vocabulary()

    def enhance(self, query: NormalizedQuery, behavior: Optional[SearchBehavior] = None) -> NormalizedQuery:
        filters = query.filters
        confidence = query.confidence

        if behavior is not None:
            filters = merge_filters(filters, self.analyze_searches(behavior.previous_searches), False)

            if behavior.saved_listing_ids:
                saved, has_price = self.analyze_saved_listings(behavior.saved_listing_ids)
                filters = merge_filters(filters, saved, has_price)

            if behavior.clicked_listing_ids:
                confidence = min(confidence * CLICK_CONFIDENCE_BOOST, 1.0)

        filters, confidence = self.apply_market_context(filters, confidence)
        return dataclasses.replace(query, filters=filters, confidence=confidence)

    def analyze_searches(self, searches) -> FilterSet:
        counts: Counter = Counter()
        for search in searches or ():
            text = (search or "").lower()
            for location in self.vocabulary.locations:
                if location.lower() in text:
                    counts[location] += 1
        return FilterSet(locations=_top(counts, 3))

    def analyze_saved_listings(self, listing_ids) -> Tuple[FilterSet, bool]:
        """Preferences implied by saved listings, and whether they imply a price."""
        ids = tuple(dict.fromkeys(listing_ids))
        listings = self.catalog.find_listings(ListingFilter(ids=ids, is_active=None, moderation_status=None))

        types: Counter = Counter(l.property_type or l.category for l in listings)
        bedrooms: Counter = Counter(l.bedrooms for l in listings if l.bedrooms)
        prices = [float(l.price) for l in listings if l.price and l.price > 0]

        price_range = PriceRange()
        if prices:
            price_range = PriceRange(min(prices) * SAVED_PRICE_LOW, max(prices) * SAVED_PRICE_HIGH)

        self.logger.debug(f"Analyzed {len(listings)} saved listings")
        inferred = FilterSet(
            property_types=_top(types, 2),
            price_range=price_range,
            bedrooms=_top(bedrooms, 3),
        )
        return inferred, bool(prices)

    @staticmethod
    def apply_market_context(filters: FilterSet, confidence: float):
        if filters.price_range.max == DEFAULT_PRICE_MAX:
            filters = dataclasses.replace(
                filters, price_range=PriceRange(filters.price_range.min, MARKET_PRICE_CEILING)
            )
        if not filters.amenities:
            filters = dataclasses.replace(filters, amenities=MARKET_DEFAULT_AMENITIES)
        if confidence > MARKET_CONFIDENCE_THRESHOLD:
            confidence = min(confidence * MARKET_CONFIDENCE_BOOST, 1.0)
        return filters, confidence
