"""
User preference profiles.

A profile summarises what a user has engaged with: the property types,
locations, bedroom counts and amenities that recur across their inquiries,
views and favorites, plus the price band around what they usually look at.
Profiles are cached for five minutes in the ``user:data`` namespace.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from core.cache import CacheNamespace
from core.services import BaseService
from listings.catalog import UserHistory

PROFILE_PRICE_LOW = 0.8
PROFILE_PRICE_HIGH = 1.3
DEFAULT_PRICE_RANGE = (0.0, 100_000_000.0)


@dataclass(frozen=True)
class UserPreferenceProfile:
    user_id: Any
    property_types: Tuple[str, ...] = ()
    locations: Tuple[str, ...] = ()
    price_range: Tuple[float, float] = DEFAULT_PRICE_RANGE
    bedrooms: Tuple[int, ...] = ()
    amenities: Tuple[str, ...] = ()
    last_searched: Optional[datetime] = None
    search_frequency: int = 0
    # Listing ids: last 20 viewed, and every inquired-about listing
    recently_viewed: frozenset = field(default=frozenset(), compare=False)
    inquired: frozenset = field(default=frozenset(), compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "property_types": list(self.property_types),
            "locations": list(self.locations),
            "price_range": {"min": self.price_range[0], "max": self.price_range[1]},
            "bedrooms": list(self.bedrooms),
            "amenities": list(self.amenities),
            "last_searched": self.last_searched.isoformat() if self.last_searched else None,
            "search_frequency": self.search_frequency,
            "recently_viewed": sorted(self.recently_viewed),
            "inquired": sorted(self.inquired),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserPreferenceProfile":
        price = data.get("price_range") or {}
        last = data.get("last_searched")
        return cls(
            user_id=data["user_id"],
            property_types=tuple(data.get("property_types") or ()),
            locations=tuple(data.get("locations") or ()),
            price_range=(price.get("min", DEFAULT_PRICE_RANGE[0]), price.get("max", DEFAULT_PRICE_RANGE[1])),
            bedrooms=tuple(data.get("bedrooms") or ()),
            amenities=tuple(data.get("amenities") or ()),
            last_searched=datetime.fromisoformat(last) if last else None,
            search_frequency=data.get("search_frequency", 0),
            recently_viewed=frozenset(data.get("recently_viewed") or ()),
            inquired=frozenset(data.get("inquired") or ()),
        )


def _top(values, n: int) -> Tuple:
    return tuple(value for value, _ in Counter(v for v in values if v).most_common(n))


def build_profile(user_id, history: UserHistory) -> UserPreferenceProfile:
    """Derive a profile from engagement history. Empty history gives the wide-open default."""
    listings = history.listings
    prices = [float(l.price) for l in listings if l.price]

    price_range = DEFAULT_PRICE_RANGE
    if prices:
        average = sum(prices) / len(prices)
        price_range = (average * PROFILE_PRICE_LOW, average * PROFILE_PRICE_HIGH)

    return UserPreferenceProfile(
        user_id=user_id,
        property_types=_top((l.property_type or l.category for l in listings), 3),
        locations=_top((l.location for l in listings), 5),
        price_range=price_range,
        bedrooms=_top((l.bedrooms for l in listings), 3),
        amenities=_top((f for l in listings for f in l.features), 10),
        last_searched=history.views[0].occurred_at if history.views else None,
        search_frequency=len(history.views),
        recently_viewed=history.recently_viewed_ids(20),
        inquired=history.inquired_ids,
    )


class PreferenceService(BaseService):
    """Cache-first access to user preference profiles."""

    def __init__(self, catalog=None, cache=None):
        super().__init__(cache=cache)
        if catalog is None:
            from listings.catalog import catalog_service
            catalog = catalog_service
        self.catalog = catalog

    @staticmethod
    def cache_key(user_id) -> str:
        return f"preferences:{user_id}"

    def get_profile(self, user_id) -> UserPreferenceProfile:
        return self.cache.get_or_compute(
            CacheNamespace.USER,
            self.cache_key(user_id),
            lambda: build_profile(user_id, self.catalog.get_user_history(user_id)),
            dumps=lambda profile: profile.to_dict(),
            loads=UserPreferenceProfile.from_dict,
        )

    def invalidate(self, user_id) -> None:
        self.cache.delete(CacheNamespace.USER, self.cache_key(user_id))
