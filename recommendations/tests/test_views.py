"""
Tests for the recommendation feed endpoints.
"""

import pytest
from django.contrib.auth.models import AnonymousUser
from rest_framework.test import APIRequestFactory, force_authenticate

from recommendations import views
from recommendations.services import RecommendationEngine


class Member:
    is_authenticated = True
    is_active = True

    def __init__(self, pk, is_staff=False):
        self.pk = pk
        self.is_staff = is_staff


@pytest.fixture
def factory():
    return APIRequestFactory()


@pytest.fixture
def engine(catalog_factory, sample_listings, make_history, cache_store, monkeypatch):
    histories = {7: make_history(inquiries=[sample_listings[1]], views=[sample_listings[0], sample_listings[4]])}
    engine = RecommendationEngine(catalog=catalog_factory(sample_listings, histories=histories), cache=cache_store)
    monkeypatch.setattr(views, "recommendation_engine", engine)
    return engine


def get(factory, view, path, params=None, user=None):
    request = factory.get(path, params or {})
    if user is not None:
        force_authenticate(request, user=user)
    else:
        request.user = AnonymousUser()
    return view.as_view()(request)


class TestPersonalized:
    path = "/api/v1/recommendations/personalized/"

    def test_own_feed(self, factory, engine):
        response = get(factory, views.PersonalizedRecommendationsView, self.path, user=Member(7))

        assert response.status_code == 200
        assert [r["listing_id"] for r in response.data] == [5, 1, 3]

    def test_requires_authentication(self, factory, engine):
        response = get(factory, views.PersonalizedRecommendationsView, self.path)
        assert response.status_code in (401, 403)

    def test_other_users_feed_is_forbidden(self, factory, engine):
        response = get(factory, views.PersonalizedRecommendationsView, self.path, {"user_id": 7}, user=Member(8))

        assert response.status_code == 403
        assert response.data["error"] == "permission_denied"

    def test_staff_can_view_other_feeds(self, factory, engine):
        staff = Member(1, is_staff=True)
        response = get(factory, views.PersonalizedRecommendationsView, self.path, {"user_id": 7}, user=staff)
        assert response.status_code == 200
        assert response.data[0]["listing_id"] == 5

    def test_limit_bounds(self, factory, engine):
        response = get(factory, views.PersonalizedRecommendationsView, self.path, {"limit": 51}, user=Member(7))
        assert response.status_code == 400


class TestSimilar:
    path = "/api/v1/recommendations/similar/"

    def test_similar(self, factory, engine):
        response = get(factory, views.SimilarListingsView, self.path, {"listing_id": 1})

        assert response.status_code == 200
        assert [r["listing_id"] for r in response.data] == [5, 2]
        assert response.data[0]["title"] == "Lekki 3 bed terrace"

    def test_missing_listing_id(self, factory, engine):
        response = get(factory, views.SimilarListingsView, self.path)

        assert response.status_code == 400
        assert response.data["detail"]["field"] == "listing_id"

    def test_unknown_listing(self, factory, engine):
        response = get(factory, views.SimilarListingsView, self.path, {"listing_id": 999})
        assert response.status_code == 404


class TestTrending:

    def test_trending(self, factory, engine):
        response = get(factory, views.TrendingListingsView, "/api/v1/recommendations/trending/", {"limit": 1})

        assert response.status_code == 200
        assert [r["listing_id"] for r in response.data] == [1]
        assert response.data[0]["score"] == 1.0


class TestLocation:
    path = "/api/v1/recommendations/location/"

    def test_location(self, factory, engine):
        response = get(factory, views.LocationRecommendationsView, self.path, {"location": "Lekki"})

        assert response.status_code == 200
        assert [r["listing_id"] for r in response.data] == [1, 5, 2]

    @pytest.mark.parametrize("params", [{}, {"location": ""}, {"location": "x" * 101}])
    def test_invalid_location(self, factory, engine, params):
        response = get(factory, views.LocationRecommendationsView, self.path, params)
        assert response.status_code == 400
