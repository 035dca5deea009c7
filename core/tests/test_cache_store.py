"""
Tests for the namespaced cache store.

Run with: python -m pytest core/tests/test_cache_store.py -v
"""

import pytest

from core.cache import CacheNamespace, CacheStore, MISS
from core.exceptions import ValidationError


class BrokenBackend:
    """A cache backend whose every call fails."""

    def get(self, *args, **kwargs):
        raise ConnectionError("cache down")

    get_many = set = delete = get


class TestCacheStoreBasics:

    def test_miss_returns_sentinel(self, cache_store):
        assert cache_store.get(CacheNamespace.SEARCH, "nothing") is MISS

    def test_set_then_get(self, cache_store):
        cache_store.set(CacheNamespace.SEARCH, "q1", {"results": [1, 2]})
        assert cache_store.get(CacheNamespace.SEARCH, "q1") == {"results": [1, 2]}

    def test_none_is_a_cacheable_value(self, cache_store):
        cache_store.set(CacheNamespace.DETAILS, "7", None)
        assert cache_store.get(CacheNamespace.DETAILS, "7") is None

    def test_namespaces_do_not_collide(self, cache_store):
        cache_store.set(CacheNamespace.SEARCH, "k", "search")
        cache_store.set(CacheNamespace.ANALYTICS, "k", "analytics")
        assert cache_store.get(CacheNamespace.SEARCH, "k") == "search"
        assert cache_store.get(CacheNamespace.ANALYTICS, "k") == "analytics"

    def test_delete(self, cache_store):
        cache_store.set(CacheNamespace.USER, "preferences:1", {"a": 1})
        cache_store.delete(CacheNamespace.USER, "preferences:1")
        assert cache_store.get(CacheNamespace.USER, "preferences:1") is MISS

    def test_ttl_override_per_store(self):
        store = CacheStore(backend=BrokenBackend(), ttls={CacheNamespace.USER: 42}, key_prefix="t")
        assert store.ttl_for(CacheNamespace.USER) == 42

    def test_default_ttls(self, cache_store):
        assert cache_store.ttl_for(CacheNamespace.USER) == 300
        assert cache_store.ttl_for(CacheNamespace.LOCATION) == 86400


class TestPatternInvalidation:

    def test_prefix_pattern_clears_only_that_prefix(self, cache_store):
        cache_store.set(CacheNamespace.ANALYTICS, "trending:10", [1])
        cache_store.set(CacheNamespace.ANALYTICS, "similar:4:6", [2])
        cache_store.set(CacheNamespace.SEARCH, "abc", [3])

        cache_store.delete_pattern("analytics:trending:*")

        assert cache_store.get(CacheNamespace.ANALYTICS, "trending:10") is MISS
        assert cache_store.get(CacheNamespace.ANALYTICS, "similar:4:6") == [2]
        assert cache_store.get(CacheNamespace.SEARCH, "abc") == [3]

    def test_namespace_pattern(self, cache_store):
        cache_store.set(CacheNamespace.ANALYTICS, "recommendations:user:1:10", [1])
        cache_store.set(CacheNamespace.ANALYTICS, "recommendations:user:2:10", [2])

        cache_store.delete_pattern(CacheNamespace.ANALYTICS.pattern("recommendations:user:1:*"))

        assert cache_store.get(CacheNamespace.ANALYTICS, "recommendations:user:1:10") is MISS
        assert cache_store.get(CacheNamespace.ANALYTICS, "recommendations:user:2:10") == [2]

    def test_prefix_must_end_at_segment_boundary(self, cache_store):
        # "user:1*" must not be accepted, it would also match user 10, 11, ...
        with pytest.raises(ValidationError):
            cache_store.delete_pattern("analytics:recommendations:user:1*")

    def test_inner_wildcard_rejected(self, cache_store):
        with pytest.raises(ValidationError):
            cache_store.delete_pattern("analytics:*:10")

    def test_empty_pattern_rejected(self, cache_store):
        with pytest.raises(ValidationError):
            cache_store.delete_pattern("")

    def test_exact_pattern_deletes_one_key(self, cache_store):
        cache_store.set(CacheNamespace.ANALYTICS, "trending:10", [1])
        cache_store.set(CacheNamespace.ANALYTICS, "trending:20", [2])

        cache_store.delete_pattern("analytics:trending:10")

        assert cache_store.get(CacheNamespace.ANALYTICS, "trending:10") is MISS
        assert cache_store.get(CacheNamespace.ANALYTICS, "trending:20") == [2]

    def test_star_clears_everything(self, cache_store):
        cache_store.set(CacheNamespace.SEARCH, "a", 1)
        cache_store.set(CacheNamespace.USER, "b", 2)

        cache_store.delete_pattern("*")

        assert cache_store.get(CacheNamespace.SEARCH, "a") is MISS
        assert cache_store.get(CacheNamespace.USER, "b") is MISS

    def test_writes_after_invalidation_are_visible(self, cache_store):
        cache_store.set(CacheNamespace.SEARCH, "q", "old")
        cache_store.delete_pattern("search:*")
        cache_store.set(CacheNamespace.SEARCH, "q", "new")
        assert cache_store.get(CacheNamespace.SEARCH, "q") == "new"

    def test_recommendations_domain(self, cache_store):
        cache_store.set(CacheNamespace.ANALYTICS, "trending:10", [1])
        cache_store.set(CacheNamespace.USER, "preferences:3", {"x": 1})
        cache_store.set(CacheNamespace.USER, "session:3", "keep")

        patterns = cache_store.invalidate_domain("recommendations")

        assert patterns == ["analytics:*", "user:data:preferences:*"]
        assert cache_store.get(CacheNamespace.ANALYTICS, "trending:10") is MISS
        assert cache_store.get(CacheNamespace.USER, "preferences:3") is MISS
        assert cache_store.get(CacheNamespace.USER, "session:3") == "keep"

    def test_unknown_domain(self, cache_store):
        with pytest.raises(ValidationError) as exc_info:
            cache_store.invalidate_domain("everything")
        assert exc_info.value.details["field"] == "domain"


class TestGetOrCompute:

    def test_computes_once(self, cache_store):
        calls = []

        def compute():
            calls.append(1)
            return [1, 2, 3]

        first = cache_store.get_or_compute(CacheNamespace.ANALYTICS, "trending:3", compute)
        second = cache_store.get_or_compute(CacheNamespace.ANALYTICS, "trending:3", compute)

        assert first == second == [1, 2, 3]
        assert len(calls) == 1

    def test_dumps_and_loads(self, cache_store):
        kwargs = dict(dumps=lambda v: {"wrapped": v}, loads=lambda d: d["wrapped"])
        cache_store.get_or_compute(CacheNamespace.SEARCH, "k", lambda: 5, **kwargs)

        assert cache_store.get(CacheNamespace.SEARCH, "k") == {"wrapped": 5}
        assert cache_store.get_or_compute(CacheNamespace.SEARCH, "k", lambda: 99, **kwargs) == 5

    def test_errors_propagate_and_nothing_is_stored(self, cache_store):
        def boom():
            raise RuntimeError("catalog down")

        with pytest.raises(RuntimeError):
            cache_store.get_or_compute(CacheNamespace.SEARCH, "k", boom)
        assert cache_store.get(CacheNamespace.SEARCH, "k") is MISS


class TestCacheFailures:
    """An unreachable backend behaves like an empty cache."""

    @pytest.fixture
    def broken_store(self):
        return CacheStore(backend=BrokenBackend(), key_prefix="broken")

    def test_get_is_a_miss(self, broken_store):
        assert broken_store.get(CacheNamespace.SEARCH, "k") is MISS

    def test_set_and_delete_do_not_raise(self, broken_store):
        broken_store.set(CacheNamespace.SEARCH, "k", 1)
        broken_store.delete(CacheNamespace.SEARCH, "k")
        broken_store.delete_pattern("search:*")

    def test_get_or_compute_still_computes(self, broken_store):
        assert broken_store.get_or_compute(CacheNamespace.SEARCH, "k", lambda: "fresh") == "fresh"

    def test_ping(self, broken_store, cache_store):
        assert broken_store.ping() is False
        assert cache_store.ping() is True
