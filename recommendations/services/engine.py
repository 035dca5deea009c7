"""
Recommendation Engine

Four cache-first recommendation feeds, each a fixed rule table over catalog
listings:

    personalized(user_id)   what the user's engagement history points at
    similar(listing_id)     listings resembling a reference listing
    trending()              most viewed / inquired listings
    location_based(name)    popular listings in an area

Results live in the ``analytics`` cache namespace and are cleared by pattern
when the underlying engagement data changes (see ``listings.signals``).
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from django.utils.text import slugify

from core.cache import CacheNamespace
from core.exceptions import ValidationError
from core.scoring import ScoreRule, evaluate
from core.services import BaseService
from listings.catalog import ListingFilter, ListingSummary
from propsearch.config import config

from .preferences import PreferenceService

# Score floors per feed
PERSONALIZED_THRESHOLD = 0.3
SIMILAR_THRESHOLD = 0.4
TRENDING_THRESHOLD = 0.5

# Placeholder market average used by location feeds
AREA_AVERAGE_PRICE = 50_000_000
COMPETITIVE_PRICE_FACTOR = 1.1
POPULAR_VIEW_COUNT = 50


@dataclass(frozen=True)
class RecommendationResult:
    listing_id: int
    score: float
    reason: str
    features: Tuple[str, ...]
    price: float
    location: str
    image: Optional[str]
    title: str

    @classmethod
    def build(cls, listing: ListingSummary, score: float, reasons) -> "RecommendationResult":
        return cls(
            listing_id=listing.id,
            score=round(score, 4),
            reason=", ".join(reasons),
            features=tuple(listing.features),
            price=listing.price,
            location=listing.location,
            image=listing.image_url,
            title=listing.title,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "listing_id": self.listing_id,
            "score": self.score,
            "reason": self.reason,
            "features": list(self.features),
            "price": self.price,
            "location": self.location,
            "image": self.image,
            "title": self.title,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecommendationResult":
        values = dict(data)
        values["features"] = tuple(values.get("features") or ())
        return cls(**values)


@dataclass(frozen=True)
class _Pair:
    """A candidate listing and what it is compared against."""
    listing: ListingSummary
    reference: Any


def _lower(value) -> str:
    return (value or "").lower()


# =============================================================================
# PERSONALIZED
# =============================================================================

def _profile_type_match(p: _Pair) -> bool:
    kinds = {_lower(p.listing.property_type), _lower(p.listing.category)} - {""}
    return any(t.lower() in kinds for t in p.reference.property_types)


def _profile_location_match(p: _Pair) -> bool:
    where = (_lower(p.listing.location), _lower(p.listing.city))
    return any(loc.lower() in field for loc in p.reference.locations for field in where if field)


def _profile_price_match(p: _Pair) -> bool:
    low, high = p.reference.price_range
    return low <= float(p.listing.price or 0) <= high


def _profile_amenity_overlap(p: _Pair) -> float:
    wanted = p.reference.amenities
    if not wanted:
        return 0.0
    return len(set(wanted) & set(p.listing.features)) / len(wanted)


def _amenity_reason(p: _Pair) -> str:
    common = set(p.reference.amenities) & set(p.listing.features)
    return f"Has {len(common)} of your preferred amenities"


PERSONALIZED_RULES = (
    ScoreRule("property_type", 0.3, _profile_type_match, "Matches your preferred property type"),
    ScoreRule("location", 0.25, _profile_location_match, "In your preferred location"),
    ScoreRule("price", 0.2, _profile_price_match, "Within your budget range"),
    ScoreRule("bedrooms", 0.15, lambda p: p.listing.bedrooms in p.reference.bedrooms,
              "Matches your bedroom preference"),
    ScoreRule("amenities", 0.1, _profile_amenity_overlap, _amenity_reason),
    ScoreRule("clicked", 0.1, lambda p: p.listing.id in p.reference.recently_viewed,
              "You showed interest in this property"),
    ScoreRule("verified", 0.05, lambda p: p.listing.owner_verified, "Verified property owner"),
)


# =============================================================================
# SIMILAR
# =============================================================================

def _similar_price(p: _Pair) -> bool:
    reference_price = float(p.reference.price or 0)
    if reference_price <= 0:
        return False
    return abs(float(p.listing.price or 0) - reference_price) / reference_price <= 0.2


def _shared_features(p: _Pair) -> set:
    return set(p.listing.features) & set(p.reference.features)


def _feature_overlap(p: _Pair) -> float:
    common = _shared_features(p)
    if not common:
        return 0.0
    return len(common) / max(len(p.listing.features) or 1, len(p.reference.features) or 1)


SIMILAR_RULES = (
    ScoreRule("category", 0.3, lambda p: p.listing.category == p.reference.category, "Same property type"),
    ScoreRule("location", 0.25, lambda p: p.listing.location == p.reference.location, "Same location"),
    ScoreRule(
        "city", 0.15,
        lambda p: p.listing.location != p.reference.location and bool(p.listing.city)
        and p.listing.city == p.reference.city,
        "Same city",
    ),
    ScoreRule("price", 0.2, _similar_price, "Similar price range"),
    ScoreRule("bedrooms", 0.15, lambda p: p.listing.bedrooms == p.reference.bedrooms, "Same number of bedrooms"),
    ScoreRule("features", 0.1, _feature_overlap, lambda p: f"Shares {len(_shared_features(p))} features"),
)


# =============================================================================
# LOCATION
# =============================================================================

def _in_location(p: _Pair) -> bool:
    return p.reference in _lower(p.listing.location)


def _in_city(p: _Pair) -> bool:
    return not _in_location(p) and p.reference in _lower(p.listing.city)


LOCATION_RULES = (
    ScoreRule("base", 0.5, lambda p: True, "Listed in this area"),
    ScoreRule("location", 0.3, _in_location, "Exact location match"),
    ScoreRule("city", 0.2, _in_city, "Same city"),
    ScoreRule("nearby", 0.1, lambda p: not _in_location(p) and not _in_city(p), "Nearby area"),
    ScoreRule("popular", 0.1, lambda p: p.listing.view_count > POPULAR_VIEW_COUNT, "Popular in this area"),
    ScoreRule(
        "competitive", 0.1,
        lambda p: float(p.listing.price or 0) <= AREA_AVERAGE_PRICE * COMPETITIVE_PRICE_FACTOR,
        "Competitive pricing",
    ),
)


def _rank(results: List[RecommendationResult], limit: Optional[int] = None) -> List[RecommendationResult]:
    ordered = sorted(results, key=lambda r: (-r.score, r.listing_id))
    return ordered if limit is None else ordered[:limit]


class RecommendationEngine(BaseService):
    """
    Cache-first recommendation feeds.

    Args:
        catalog: object implementing the catalog query interface
        cache: ``CacheStore`` shared by the engine and its preference service
    """

    def __init__(self, catalog=None, cache=None, preferences: Optional[PreferenceService] = None):
        super().__init__(cache=cache)
        if catalog is None:
            from listings.catalog import catalog_service
            catalog = catalog_service
        self.catalog = catalog
        self.preferences = preferences or PreferenceService(catalog=catalog, cache=self.cache)

    def _cached(self, key: str, compute) -> List[RecommendationResult]:
        return self.cache.get_or_compute(
            CacheNamespace.ANALYTICS,
            key,
            compute,
            dumps=lambda results: [r.to_dict() for r in results],
            loads=lambda rows: [RecommendationResult.from_dict(r) for r in rows],
        )

    # ── Feeds ──────────────────────────────────────────────────────────

    def personalized(self, user_id, limit: int = 10) -> List[RecommendationResult]:
        """
        Listings matching the user's preference profile, excluding anything
        they already inquired about. A user with no history gets the default
        profile, which rarely clears the threshold.
        """
        def compute():
            profile = self.preferences.get_profile(user_id)
            candidates = self.catalog.find_listings(ListingFilter(
                exclude_ids=tuple(sorted(profile.inquired)),
                order_by=("-view_count",),
                limit=config.search.candidate_limit,
            ))
            results = []
            for listing in candidates:
                outcome = evaluate(PERSONALIZED_RULES, _Pair(listing, profile))
                if outcome.score > PERSONALIZED_THRESHOLD:
                    results.append(RecommendationResult.build(listing, outcome.score, outcome.reasons))
            self.logger.info(f"Personalized for user {user_id}: {len(results)}/{len(candidates)} above threshold")
            return _rank(results, limit)

        return self._cached(f"recommendations:user:{user_id}:{limit}", compute)

    def similar(self, listing_id, limit: int = 6) -> List[RecommendationResult]:
        """Raises ``NotFoundError`` if the reference listing does not exist."""
        def compute():
            reference = self.catalog.get_listing_by_id(listing_id)
            candidates = self.catalog.find_listings(ListingFilter(
                category_in=(reference.category,),
                location_contains=(reference.location,) if reference.location else (),
                exclude_ids=(reference.id,),
            ))
            results = []
            for listing in candidates:
                outcome = evaluate(SIMILAR_RULES, _Pair(listing, reference))
                if outcome.score > SIMILAR_THRESHOLD:
                    results.append(RecommendationResult.build(listing, outcome.score, outcome.reasons))
            return _rank(results, limit)

        return self._cached(f"similar:{listing_id}:{limit}", compute)

    def trending(self, limit: int = 10) -> List[RecommendationResult]:
        def compute():
            candidates = self.catalog.find_listings(ListingFilter(
                order_by=("-inquiry_count", "-view_count"),
                limit=limit * 2,
            ))
            results = []
            for listing in candidates:
                score = self.trending_score(listing)
                if score > TRENDING_THRESHOLD:
                    reason = f"High engagement: {listing.view_count} views, {listing.inquiry_count} inquiries"
                    results.append(RecommendationResult.build(listing, score, (reason,)))
            return _rank(results, limit)

        return self._cached(f"trending:{limit}", compute)

    @staticmethod
    def trending_score(listing: ListingSummary) -> float:
        return 0.4 * min(listing.view_count / 100, 1) + 0.6 * min(listing.inquiry_count / 10, 1)

    def location_based(self, location: str, limit: int = 8) -> List[RecommendationResult]:
        term = (location or "").strip()
        if not term:
            raise ValidationError("Location is required", field="location")

        def compute():
            candidates = self.catalog.find_listings(ListingFilter(
                location_contains=(term,),
                order_by=("-view_count", "-inquiry_count"),
                limit=limit,
            ))
            results = []
            for listing in candidates:
                outcome = evaluate(LOCATION_RULES, _Pair(listing, term.lower()))
                # "base" always fires; it explains nothing the caller asked about
                reasons = outcome.reasons[1:]
                results.append(RecommendationResult.build(listing, outcome.score, reasons))
            return _rank(results)

        return self._cached(f"location:{slugify(term) or term.lower()}:{limit}", compute)

    # ── Invalidation ───────────────────────────────────────────────────

    def invalidate_user(self, user_id) -> None:
        self.cache.delete_pattern(CacheNamespace.ANALYTICS.pattern(f"recommendations:user:{user_id}:*"))
        self.preferences.invalidate(user_id)

    def invalidate_listing_views(self) -> None:
        for feed in ("similar", "trending", "location"):
            self.cache.delete_pattern(CacheNamespace.ANALYTICS.pattern(f"{feed}:*"))

    def clear_all(self) -> None:
        self.cache.delete_pattern(CacheNamespace.ANALYTICS.pattern())
        self.cache.delete_pattern(CacheNamespace.USER.pattern("preferences:*"))


recommendation_engine = RecommendationEngine()
