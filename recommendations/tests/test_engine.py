"""
Tests for the recommendation engine.

Run with: python -m pytest recommendations/tests/test_engine.py -v
"""

import pytest

from core.cache import CacheNamespace, MISS
from core.exceptions import NotFoundError, ValidationError
from recommendations.services import RecommendationEngine, RecommendationResult


@pytest.fixture
def listings(sample_listings, make_listing):
    return sample_listings + [
        make_listing(6, title="Lekki apartment", price=48_000_000.0, owner_verified=True),
    ]


@pytest.fixture
def catalog(catalog_factory, listings, make_history):
    by_id = {l.id: l for l in listings}
    histories = {
        7: make_history(inquiries=[by_id[2]], views=[by_id[1], by_id[5]]),
    }
    return catalog_factory(listings, histories=histories)


@pytest.fixture
def engine(catalog, cache_store):
    return RecommendationEngine(catalog=catalog, cache=cache_store)


class TestPersonalized:

    def test_ranking(self, engine):
        results = engine.personalized(7)
        assert [r.listing_id for r in results] == [5, 1, 6, 3]
        assert all(0 <= r.score <= 1 for r in results)

    def test_inquired_listings_are_excluded(self, engine):
        assert 2 not in [r.listing_id for r in engine.personalized(7)]

    def test_reasons(self, engine):
        top = engine.personalized(7)[0]
        assert top.reason == (
            "Matches your preferred property type, In your preferred location, "
            "Matches your bedroom preference, Has 2 of your preferred amenities, "
            "You showed interest in this property, Verified property owner"
        )
        assert top.score == pytest.approx(0.9167, abs=1e-4)

    def test_limit(self, engine):
        assert len(engine.personalized(7, limit=2)) == 2

    def test_no_history_is_not_an_error(self, engine):
        # The default profile only earns price and verification credit
        assert engine.personalized(99) == []

    def test_cached(self, engine, catalog):
        first = engine.personalized(7)
        second = engine.personalized(7)

        assert first == second
        assert catalog.count("get_user_history") == 1
        assert catalog.count("find_listings") == 1

    def test_invalidate_user(self, engine, catalog, cache_store):
        engine.personalized(7)
        engine.personalized(8)
        engine.invalidate_user(7)

        assert cache_store.get(CacheNamespace.USER, "preferences:7") is MISS
        assert cache_store.get(CacheNamespace.ANALYTICS, "recommendations:user:7:10") is MISS
        assert cache_store.get(CacheNamespace.ANALYTICS, "recommendations:user:8:10") is not MISS

        engine.personalized(7)
        assert catalog.count("get_user_history") == 3


class TestSimilar:

    def test_similar(self, engine):
        results = engine.similar(1)

        assert [r.listing_id for r in results] == [5, 6, 2]
        assert results[0].score == 1.0
        assert results[2].score == pytest.approx(0.6)
        assert results[2].reason == "Same property type, Same location, Shares 1 features"

    def test_reference_is_excluded(self, engine):
        assert 1 not in [r.listing_id for r in engine.similar(1)]

    def test_limit(self, engine):
        assert [r.listing_id for r in engine.similar(1, limit=2)] == [5, 6]

    def test_missing_reference(self, engine):
        with pytest.raises(NotFoundError):
            engine.similar(999)

    def test_zero_priced_reference(self, catalog_factory, make_listing, cache_store):
        catalog = catalog_factory([make_listing(1, price=0.0), make_listing(2, price=0.0)])
        results = RecommendationEngine(catalog=catalog, cache=cache_store).similar(1)
        assert "Similar price range" not in results[0].reason


class TestTrending:

    def test_trending(self, engine):
        results = engine.trending()

        assert [r.listing_id for r in results] == [1, 3]
        assert results[0].score == 1.0
        assert results[1].score == pytest.approx(0.72)
        assert results[0].reason == "High engagement: 120 views, 12 inquiries"

    def test_candidate_pool_is_twice_the_limit(self, engine, catalog):
        assert [r.listing_id for r in engine.trending(limit=1)] == [1]
        _, listing_filter = catalog.calls[-1]
        assert listing_filter.limit == 2
        assert listing_filter.order_by == ("-inquiry_count", "-view_count")

    def test_trending_score(self, make_listing):
        listing = make_listing(1, view_count=50, inquiry_count=5)
        assert RecommendationEngine.trending_score(listing) == pytest.approx(0.5)


class TestLocationBased:

    def test_location(self, engine):
        results = engine.location_based("Lekki")

        assert [r.listing_id for r in results] == [1, 5, 6, 2]
        assert results[0].score == 1.0
        assert results[0].reason == "Exact location match, Popular in this area, Competitive pricing"
        assert results[-1].score == pytest.approx(0.8)

    def test_city_match(self, engine):
        results = engine.location_based("ikeja")
        assert [r.listing_id for r in results] == [3]
        assert results[0].reason == "Same city, Popular in this area, Competitive pricing"
        assert results[0].score == pytest.approx(0.9)

    def test_nearby(self, engine):
        # Matched on state only
        results = engine.location_based("FCT")
        assert [r.listing_id for r in results] == [4]
        assert results[0].reason.startswith("Nearby area")

    def test_blank_location(self, engine):
        with pytest.raises(ValidationError):
            engine.location_based("  ")


class TestInvalidation:

    def test_listing_views(self, engine, catalog):
        engine.trending()
        engine.similar(1)
        engine.location_based("Lekki")
        engine.personalized(7)
        calls_before = catalog.count("find_listings")

        engine.invalidate_listing_views()

        engine.trending()
        engine.similar(1)
        engine.location_based("Lekki")
        engine.personalized(7)
        assert catalog.count("find_listings") == calls_before + 3

    def test_clear_all(self, engine, catalog):
        engine.trending()
        engine.personalized(7)
        engine.clear_all()
        engine.trending()
        engine.personalized(7)
        assert catalog.count("get_user_history") == 2


class TestRecommendationResult:

    def test_round_trip(self, listings):
        result = RecommendationResult.build(listings[0], 0.87654, ("A", "B"))
        assert result.score == 0.8765
        assert result.reason == "A, B"
        assert RecommendationResult.from_dict(result.to_dict()) == result
