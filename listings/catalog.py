"""
Catalog Query Interface
=======================

What the search and recommendation services consume from the listing
catalog, and the service that enforces a time budget on every call.

Value objects:
    ListingSummary   immutable projection of a listing
    ListingFilter    structured catalog query
    HistoryItem      one inquiry / view / favorite event
    UserHistory      a user's engagement history

Any object with ``find_listings``, ``get_listing_by_id`` and
``get_user_history`` can stand in for ``CatalogService``.
"""

import concurrent.futures
import hashlib
import json
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from django.db import DatabaseError, close_old_connections

from core.cache import CacheNamespace
from core.exceptions import CatalogTimeoutError, CatalogUnavailableError
from core.services import BaseService
from propsearch.config import config


# =============================================================================
# Value objects
# =============================================================================

@dataclass(frozen=True)
class ListingSummary:
    id: int
    title: str
    category: str
    property_type: str = ""
    location: str = ""
    city: str = ""
    state: str = ""
    price: float = 0.0
    bedrooms: Optional[int] = None
    features: Tuple[str, ...] = ()
    image_url: Optional[str] = None
    owner_verified: bool = False
    view_count: int = 0
    inquiry_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["features"] = list(self.features)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ListingSummary":
        values = dict(data)
        values["features"] = tuple(values.get("features") or ())
        return cls(**values)


@dataclass(frozen=True)
class ListingFilter:
    """
    A catalog query. Empty tuples and ``None`` mean "no constraint".

    ``location_contains`` terms are OR-ed and matched case-insensitively
    against location, city and state.
    """
    is_active: Optional[bool] = True
    moderation_status: Optional[str] = "approved"
    location_contains: Tuple[str, ...] = ()
    category_in: Tuple[str, ...] = ()
    property_type_in: Tuple[str, ...] = ()
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    bedrooms_in: Tuple[int, ...] = ()
    ids: Tuple[int, ...] = ()
    exclude_ids: Tuple[int, ...] = ()
    order_by: Tuple[str, ...] = ()
    limit: Optional[int] = None

    def cache_key(self) -> str:
        payload = json.dumps(asdict(self), sort_keys=True, default=str)
        return hashlib.md5(payload.encode()).hexdigest()


@dataclass(frozen=True)
class HistoryItem:
    listing: ListingSummary
    occurred_at: Optional[datetime] = None


@dataclass(frozen=True)
class UserHistory:
    """A user's inquiries, views (newest first) and favorites."""
    inquiries: Tuple[HistoryItem, ...] = ()
    views: Tuple[HistoryItem, ...] = ()
    favorites: Tuple[HistoryItem, ...] = ()

    @property
    def listings(self) -> Tuple[ListingSummary, ...]:
        """Every listing the user engaged with, one entry per event."""
        return tuple(item.listing for item in self.inquiries + self.views + self.favorites)

    @property
    def inquired_ids(self) -> frozenset:
        return frozenset(item.listing.id for item in self.inquiries)

    def recently_viewed_ids(self, limit: int = 20) -> frozenset:
        return frozenset(item.listing.id for item in self.views[:limit])


# =============================================================================
# Catalog Service
# =============================================================================

_executor = concurrent.futures.ThreadPoolExecutor(
    max_workers=config.search.catalog_workers,
    thread_name_prefix="catalog",
)


def _call_in_worker(fn, *args):
    close_old_connections()
    try:
        return fn(*args)
    finally:
        close_old_connections()


class CatalogService(BaseService):
    """
    Time-bounded access to the listing catalog.

    Every call runs on a worker thread and is abandoned once the time budget
    runs out:

    - budget exceeded → ``CatalogTimeoutError`` (504, retryable)
    - database failure → ``CatalogUnavailableError`` (503, retryable)
    - missing listing → ``NotFoundError`` from the repository, unchanged

    Listing pages are cached in the ``property:listings`` namespace and
    single listings in ``property:details``.
    """

    def __init__(self, repository=None, timeout: Optional[float] = None, cache=None, executor=None):
        super().__init__(cache=cache)
        if repository is None:
            from .repositories import ListingRepository
            repository = ListingRepository
        self.repository = repository
        self.timeout = config.search.catalog_timeout if timeout is None else timeout
        self.executor = executor or _executor

    def _run(self, operation: str, fn, *args, timeout: Optional[float] = None):
        budget = self.timeout if timeout is None else timeout
        future = self.executor.submit(_call_in_worker, fn, *args)
        try:
            return future.result(timeout=budget)
        except concurrent.futures.TimeoutError:
            future.cancel()
            self.logger.error(f"Catalog {operation} exceeded {budget}s budget")
            raise CatalogTimeoutError(timeout=budget, operation=operation)
        except DatabaseError as e:
            self.logger.error(f"Catalog {operation} failed: {e}")
            raise CatalogUnavailableError(operation=operation) from e

    def find_listings(self, listing_filter: ListingFilter, timeout: Optional[float] = None):
        return self.cache.get_or_compute(
            CacheNamespace.LISTINGS,
            listing_filter.cache_key(),
            lambda: self._run("find_listings", self.repository.find_listings, listing_filter, timeout=timeout),
            dumps=lambda rows: [row.to_dict() for row in rows],
            loads=lambda rows: [ListingSummary.from_dict(row) for row in rows],
        )

    def get_listing_by_id(self, listing_id, timeout: Optional[float] = None) -> ListingSummary:
        return self.cache.get_or_compute(
            CacheNamespace.DETAILS,
            str(listing_id),
            lambda: self._run("get_listing_by_id", self.repository.get_listing_by_id, listing_id, timeout=timeout),
            dumps=lambda summary: summary.to_dict(),
            loads=ListingSummary.from_dict,
        )

    def get_user_history(self, user_id, timeout: Optional[float] = None) -> UserHistory:
        # Never cached: history drives invalidation of everything derived from it
        return self._run("get_user_history", self.repository.get_user_history, user_id, timeout=timeout)

    def invalidate_listing(self, listing_id) -> None:
        self.cache.delete(CacheNamespace.DETAILS, str(listing_id))
        self.cache.delete_pattern(CacheNamespace.LISTINGS.pattern())


catalog_service = CatalogService()
