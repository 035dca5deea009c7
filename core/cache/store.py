"""
Cache Store
===========

Thin layer over Django's cache framework that adds:

1. Typed namespaces with per-namespace TTLs (``CacheNamespace``)
2. Prefix-pattern invalidation without key scanning
3. A single read-through helper, ``get_or_compute``
4. Failure absorption: an unreachable backend behaves like an empty cache

Pattern invalidation is generation based. Every colon-separated prefix of a
logical key (``analytics``, ``analytics:trending``, ...) owns a generation
token stored in the cache itself. The physical key of an entry is a hash of
the logical key plus the current tokens of all its prefixes, so rotating one
prefix's token orphans every entry below it. Orphans are never read again and
fall out by TTL.

Usage::

    from core.cache import CacheStore, CacheNamespace

    store = CacheStore()
    results = store.get_or_compute(
        CacheNamespace.ANALYTICS, "trending:10", lambda: compute_trending(10)
    )
    store.delete_pattern("analytics:trending:*")
"""

import hashlib
import logging
import uuid
from typing import Any, Callable, Dict, List, Optional

from django.core.cache import cache as default_cache

from core.exceptions import ValidationError
from propsearch.config import config

from .namespaces import CacheNamespace, DEFAULT_TTLS, INVALIDATION_DOMAINS

logger = logging.getLogger(__name__)


class _Miss:
    """Sentinel for a cache miss (``None`` is a legitimate cached value)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "MISS"


MISS = _Miss()

ROOT_PATTERN = "*"


class CacheStore:
    """Namespaced, pattern-invalidatable read-through cache."""

    def __init__(self, backend=None, ttls: Optional[Dict[CacheNamespace, int]] = None,
                 key_prefix: Optional[str] = None):
        self._backend = backend
        self._ttls = dict(ttls or {})
        self.key_prefix = key_prefix or config.cache.key_prefix

    @property
    def backend(self):
        return self._backend if self._backend is not None else default_cache

    # ── TTLs ──────────────────────────────────────────────────────────

    def ttl_for(self, namespace: CacheNamespace) -> int:
        if namespace in self._ttls:
            return self._ttls[namespace]
        configured = config.cache.ttl_for(namespace.config_name)
        if configured is not None:
            return configured
        return DEFAULT_TTLS[namespace]

    # ── Key derivation ────────────────────────────────────────────────

    def _generation_key(self, prefix: str) -> str:
        return f"{self.key_prefix}:gen:{prefix or ROOT_PATTERN}"

    @staticmethod
    def _ancestor_prefixes(logical_key: str) -> List[str]:
        """``a:b:c`` -> ``["", "a", "a:b"]``"""
        segments = logical_key.split(":")
        return [""] + [":".join(segments[:i]) for i in range(1, len(segments))]

    def _physical_key(self, logical_key: str) -> str:
        generation_keys = [self._generation_key(p) for p in self._ancestor_prefixes(logical_key)]
        tokens = self.backend.get_many(generation_keys)
        generations = ".".join(str(tokens.get(k, "0")) for k in generation_keys)
        digest = hashlib.md5(f"{logical_key}|{generations}".encode()).hexdigest()
        return f"{self.key_prefix}:v:{digest}"

    # ── Basic operations ──────────────────────────────────────────────

    def get(self, namespace: CacheNamespace, key: str) -> Any:
        """Cached value, or ``MISS``. Backend failures count as a miss."""
        logical_key = namespace.key(key)
        try:
            value = self.backend.get(self._physical_key(logical_key), MISS)
        except Exception as e:
            logger.warning(f"Cache get failed for '{logical_key}', treating as miss: {e}")
            return MISS

        if value is MISS:
            logger.debug(f"Cache MISS: {logical_key}")
            return MISS

        logger.debug(f"Cache HIT: {logical_key}")
        return value

    def set(self, namespace: CacheNamespace, key: str, value: Any, ttl: Optional[int] = None) -> None:
        logical_key = namespace.key(key)
        timeout = self.ttl_for(namespace) if ttl is None else ttl
        try:
            self.backend.set(self._physical_key(logical_key), value, timeout=timeout)
        except Exception as e:
            logger.warning(f"Cache set failed for '{logical_key}': {e}")

    def delete(self, namespace: CacheNamespace, key: str) -> None:
        self._delete_logical(namespace.key(key))

    def _delete_logical(self, logical_key: str) -> None:
        try:
            self.backend.delete(self._physical_key(logical_key))
        except Exception as e:
            logger.warning(f"Cache delete failed for '{logical_key}': {e}")

    # ── Pattern invalidation ──────────────────────────────────────────

    def delete_pattern(self, pattern: str) -> None:
        """
        Invalidate every key matching ``pattern``.

        Accepted forms:
            ``*``                 every key
            ``search:results:*``  every key below a prefix
            ``analytics:trending:10``  one exact logical key
        """
        if not pattern:
            raise ValidationError("Empty cache pattern", field="pattern")

        if pattern == ROOT_PATTERN:
            self._bump_generation("")
            return

        if "*" not in pattern:
            self._delete_logical(pattern)
            return

        prefix = pattern[:-2]
        if not pattern.endswith(":*") or not prefix or "*" in prefix:
            raise ValidationError(
                "Cache patterns must end in ':*' at a segment boundary",
                field="pattern",
                pattern=pattern,
            )
        self._bump_generation(prefix)

    def _bump_generation(self, prefix: str) -> None:
        try:
            # No timeout: a generation token must outlive every entry it guards
            self.backend.set(self._generation_key(prefix), uuid.uuid4().hex[:12], timeout=None)
            logger.info(f"Cache invalidated: {prefix or ROOT_PATTERN}:*")
        except Exception as e:
            logger.warning(f"Cache invalidation failed for '{prefix or ROOT_PATTERN}': {e}")

    def invalidate_domain(self, domain: str) -> List[str]:
        """
        Invalidate a named domain (``search``, ``recommendations``, ``all`` ...).
        Returns the patterns that were cleared.
        """
        patterns = INVALIDATION_DOMAINS.get(domain)
        if patterns is None:
            raise ValidationError(
                f"Unknown cache domain '{domain}'",
                field="domain",
                allowed=sorted(INVALIDATION_DOMAINS),
            )
        for pattern in patterns:
            self.delete_pattern(pattern)
        return list(patterns)

    # ── Read-through ──────────────────────────────────────────────────

    def get_or_compute(
        self,
        namespace: CacheNamespace,
        key: str,
        compute: Callable[[], Any],
        ttl: Optional[int] = None,
        dumps: Optional[Callable[[Any], Any]] = None,
        loads: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        """
        Return the cached value for ``key`` or compute, store and return it.

        ``dumps``/``loads`` convert between the computed value and what is
        stored, e.g. ``[r.to_dict() for r in results]`` and back.
        Errors raised by ``compute`` propagate and nothing is stored.
        """
        cached = self.get(namespace, key)
        if cached is not MISS:
            return loads(cached) if loads else cached

        value = compute()
        self.set(namespace, key, dumps(value) if dumps else value, ttl=ttl)
        return value

    # ── Health ────────────────────────────────────────────────────────

    def ping(self) -> bool:
        """True if the backend accepts a write and reads it back."""
        probe_key = f"{self.key_prefix}:health:{uuid.uuid4().hex[:8]}"
        try:
            self.backend.set(probe_key, "ok", timeout=5)
            ok = self.backend.get(probe_key) == "ok"
            self.backend.delete(probe_key)
            return ok
        except Exception as e:
            logger.warning(f"Cache ping failed: {e}")
            return False
