"""
Tests for the health and cache invalidation endpoints.
"""

import pytest
from django.contrib.auth.models import AnonymousUser
from rest_framework.test import APIRequestFactory, force_authenticate

from core import views
from core.cache import CacheNamespace, MISS


class StaffUser:
    is_authenticated = True
    is_active = True
    is_staff = True
    pk = 1

    def __str__(self):
        return "admin"


@pytest.fixture
def factory():
    return APIRequestFactory()


@pytest.fixture
def store(cache_store, monkeypatch):
    monkeypatch.setattr(views, "cache_store", cache_store)
    return cache_store


class TestHealthView:

    def test_ok(self, factory, store):
        response = views.HealthView.as_view()(factory.get("/api/v1/health/"))
        assert response.status_code == 200
        assert response.data == {"status": "ok", "service": "propsearch", "cache": "ok"}


class TestCacheInvalidateView:

    def test_requires_admin(self, factory, store):
        request = factory.post("/api/v1/cache/invalidate/", {"domain": "search"}, format="json")
        request.user = AnonymousUser()
        response = views.CacheInvalidateView.as_view()(request)
        assert response.status_code in (401, 403)

    def test_invalidates_domain(self, factory, store):
        store.set(CacheNamespace.SEARCH, "q", [1])
        store.set(CacheNamespace.ANALYTICS, "trending:10", [2])

        request = factory.post("/api/v1/cache/invalidate/", {"domain": "search"}, format="json")
        force_authenticate(request, user=StaffUser())
        response = views.CacheInvalidateView.as_view()(request)

        assert response.status_code == 200
        assert response.data == {"domain": "search", "patterns": ["search:results:*"]}
        assert store.get(CacheNamespace.SEARCH, "q") is MISS
        assert store.get(CacheNamespace.ANALYTICS, "trending:10") == [2]

    def test_unknown_domain(self, factory, store):
        request = factory.post("/api/v1/cache/invalidate/", {"domain": "nope"}, format="json")
        force_authenticate(request, user=StaffUser())
        response = views.CacheInvalidateView.as_view()(request)

        assert response.status_code == 400
        assert response.data["error"] == "validation_error"
        assert response.data["detail"]["field"] == "domain"
