"""
Shared pytest configuration.

Boots Django with the test settings (in-memory SQLite, LocMem cache) and
provides an in-memory catalog so service tests never touch a database.

Run with: python -m pytest -v
"""

import os
import uuid
from datetime import datetime, timedelta, timezone

os.environ["DJANGO_ENV"] = "test"
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "propsearch.settings")

import django  # noqa: E402

django.setup()

import pytest  # noqa: E402
from django.core.cache.backends.locmem import LocMemCache  # noqa: E402

from core.cache import CacheStore  # noqa: E402
from core.exceptions import NotFoundError  # noqa: E402
from listings.catalog import HistoryItem, ListingSummary, UserHistory  # noqa: E402


# =============================================================================
# In-memory catalog
# =============================================================================

class InMemoryCatalog:
    """
    Implements the catalog query interface over a list of summaries.

    ``moderation_status`` and ``is_active`` are tracked per listing id in
    ``status``; everything is active and approved unless stated otherwise.
    """

    def __init__(self, listings=(), histories=None, status=None):
        self.listings = list(listings)
        self.histories = dict(histories or {})
        self.status = dict(status or {})
        self.calls = []

    def _matches(self, listing, f) -> bool:
        active, moderation = self.status.get(listing.id, (True, "approved"))
        if f.is_active is not None and active != f.is_active:
            return False
        if f.moderation_status and moderation != f.moderation_status:
            return False
        if f.location_contains:
            where = [listing.location.lower(), listing.city.lower(), listing.state.lower()]
            if not any(term.lower() in field for term in f.location_contains for field in where):
                return False
        if f.category_in and listing.category not in f.category_in:
            return False
        if f.property_type_in and listing.property_type.lower() not in {t.lower() for t in f.property_type_in}:
            return False
        if f.price_min is not None and listing.price < f.price_min:
            return False
        if f.price_max is not None and listing.price > f.price_max:
            return False
        if f.bedrooms_in and listing.bedrooms not in f.bedrooms_in:
            return False
        if f.ids and listing.id not in f.ids:
            return False
        if f.exclude_ids and listing.id in f.exclude_ids:
            return False
        return True

    def find_listings(self, listing_filter, timeout=None):
        self.calls.append(("find_listings", listing_filter))
        rows = [l for l in self.listings if self._matches(l, listing_filter)]
        rows.sort(key=lambda l: l.id)
        for field in reversed(listing_filter.order_by):
            name = field.lstrip("-")
            rows.sort(key=lambda l: getattr(l, name), reverse=field.startswith("-"))
        if listing_filter.limit:
            rows = rows[:listing_filter.limit]
        return rows

    def get_listing_by_id(self, listing_id, timeout=None):
        self.calls.append(("get_listing_by_id", listing_id))
        for listing in self.listings:
            if listing.id == listing_id:
                return listing
        raise NotFoundError(f"Listing {listing_id} not found", resource="listing")

    def get_user_history(self, user_id, timeout=None):
        self.calls.append(("get_user_history", user_id))
        return self.histories.get(user_id, UserHistory())

    def count(self, operation) -> int:
        return sum(1 for name, _ in self.calls if name == operation)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def cache_store():
    """A CacheStore over a private LocMem backend."""
    backend = LocMemCache(f"test-{uuid.uuid4().hex}", {})
    return CacheStore(backend=backend, key_prefix="test")


@pytest.fixture
def make_listing():
    def factory(id, **overrides):
        values = {
            "title": f"Listing {id}",
            "category": "property_sale",
            "property_type": "apartment",
            "location": "Lekki Phase 1",
            "city": "Lagos",
            "state": "Lagos",
            "price": 45_000_000.0,
            "bedrooms": 3,
            "features": ("security", "parking"),
            "image_url": f"https://img.example.com/{id}.jpg",
            "owner_verified": False,
            "view_count": 0,
            "inquiry_count": 0,
        }
        values.update(overrides)
        if "features" in overrides:
            values["features"] = tuple(overrides["features"])
        return ListingSummary(id=id, **values)
    return factory


@pytest.fixture
def make_history():
    """Build a UserHistory; views are given newest first."""
    def factory(inquiries=(), views=(), favorites=()):
        now = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)

        def items(listings):
            return tuple(HistoryItem(l, now - timedelta(hours=i)) for i, l in enumerate(listings))

        return UserHistory(inquiries=items(inquiries), views=items(views), favorites=items(favorites))
    return factory


@pytest.fixture
def catalog_factory():
    return InMemoryCatalog


@pytest.fixture
def sample_listings(make_listing):
    return [
        make_listing(1, title="Lekki 3 bed flat", price=45_000_000.0, view_count=120, inquiry_count=12),
        make_listing(2, title="Lekki duplex", property_type="duplex", price=150_000_000.0, bedrooms=5,
                     features=("swimming pool", "security"), view_count=40, inquiry_count=3),
        make_listing(3, title="Ikeja rental", category="long_term_rental", location="Allen Avenue",
                     city="Ikeja", price=3_500_000.0, bedrooms=2, view_count=60, inquiry_count=8),
        make_listing(4, title="Abuja land", category="landed_property", property_type="land",
                     location="Maitama", city="Abuja", state="FCT", price=80_000_000.0, bedrooms=None,
                     features=()),
        make_listing(5, title="Lekki 3 bed terrace", price=52_000_000.0, owner_verified=True,
                     view_count=10, inquiry_count=1),
    ]
