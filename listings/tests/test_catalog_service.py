"""
Tests for the time-bounded catalog service.

The repository is replaced with plain stubs; no database is used.
"""

import threading

import pytest
from django.db import OperationalError

from core.exceptions import CatalogTimeoutError, CatalogUnavailableError, NotFoundError
from listings.catalog import CatalogService, ListingFilter, UserHistory


class StubRepository:

    def __init__(self, listings, delay_event=None):
        self.listings = {l.id: l for l in listings}
        self.find_calls = 0
        self.delay_event = delay_event

    def find_listings(self, listing_filter):
        self.find_calls += 1
        if self.delay_event is not None:
            self.delay_event.wait(2)
        return [l for l in self.listings.values() if not listing_filter.ids or l.id in listing_filter.ids]

    def get_listing_by_id(self, listing_id):
        if listing_id not in self.listings:
            raise NotFoundError(f"Listing {listing_id} not found", resource="listing")
        return self.listings[listing_id]

    def get_user_history(self, user_id):
        return UserHistory()


class FailingRepository(StubRepository):

    def find_listings(self, listing_filter):
        raise OperationalError("connection refused")


@pytest.fixture
def listings(make_listing):
    return [make_listing(1), make_listing(2, price=10_000_000.0)]


class TestCatalogService:

    def test_find_listings(self, listings, cache_store):
        service = CatalogService(repository=StubRepository(listings), cache=cache_store)
        rows = service.find_listings(ListingFilter(ids=(2,)))
        assert [r.id for r in rows] == [2]

    def test_find_listings_is_cached(self, listings, cache_store):
        repository = StubRepository(listings)
        service = CatalogService(repository=repository, cache=cache_store)

        first = service.find_listings(ListingFilter())
        second = service.find_listings(ListingFilter())

        assert first == second
        assert repository.find_calls == 1

    def test_invalidate_listing_drops_cached_pages(self, listings, cache_store):
        repository = StubRepository(listings)
        service = CatalogService(repository=repository, cache=cache_store)

        service.find_listings(ListingFilter())
        service.invalidate_listing(1)
        service.find_listings(ListingFilter())

        assert repository.find_calls == 2

    def test_missing_listing_raises_not_found(self, listings, cache_store):
        service = CatalogService(repository=StubRepository(listings), cache=cache_store)
        with pytest.raises(NotFoundError):
            service.get_listing_by_id(99)

    def test_listing_round_trips_through_cache(self, listings, cache_store):
        service = CatalogService(repository=StubRepository(listings), cache=cache_store)
        assert service.get_listing_by_id(1) == listings[0]
        assert service.get_listing_by_id(1) == listings[0]

    def test_timeout(self, listings, cache_store):
        release = threading.Event()
        service = CatalogService(repository=StubRepository(listings, delay_event=release),
                                 cache=cache_store, timeout=0.05)
        try:
            with pytest.raises(CatalogTimeoutError) as exc_info:
                service.find_listings(ListingFilter())
        finally:
            release.set()

        assert exc_info.value.details["timeout"] == 0.05
        assert exc_info.value.details["retryable"] is True

    def test_database_error_is_unavailable(self, listings, cache_store):
        service = CatalogService(repository=FailingRepository(listings), cache=cache_store)
        with pytest.raises(CatalogUnavailableError) as exc_info:
            service.find_listings(ListingFilter())
        assert not isinstance(exc_info.value, CatalogTimeoutError)


class TestListingFilter:

    def test_cache_key_is_stable(self):
        assert ListingFilter(ids=(1, 2)).cache_key() == ListingFilter(ids=(1, 2)).cache_key()

    def test_cache_key_differs_by_field(self):
        assert ListingFilter(limit=10).cache_key() != ListingFilter(limit=20).cache_key()


class TestUserHistory:

    def test_empty(self):
        history = UserHistory()
        assert history.listings == ()
        assert history.inquired_ids == frozenset()
        assert history.recently_viewed_ids() == frozenset()

    def test_derived_views(self, make_listing, make_history):
        a, b, c = make_listing(1), make_listing(2), make_listing(3)
        history = make_history(inquiries=[a], views=[b, c], favorites=[c])

        assert history.inquired_ids == {1}
        assert history.recently_viewed_ids(1) == {2}
        assert [l.id for l in history.listings] == [1, 2, 3, 3]
