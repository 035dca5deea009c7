from .namespaces import CacheNamespace, DEFAULT_TTLS, INVALIDATION_DOMAINS
from .store import CacheStore, MISS

__all__ = [
    "CacheNamespace",
    "CacheStore",
    "DEFAULT_TTLS",
    "INVALIDATION_DOMAINS",
    "MISS",
]
