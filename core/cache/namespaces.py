"""
Cache namespaces.

Every cached value lives under one logical namespace. The prefix is the
first part of the logical key, so ``delete_pattern("analytics:*")`` clears
every recommendation set without touching search results.
"""

from enum import Enum


class CacheNamespace(Enum):
    """(key prefix, config name) per logical domain."""

    LISTINGS = ("property:listings", "listings")
    DETAILS = ("property:details", "details")
    SEARCH = ("search:results", "search")
    ANALYTICS = ("analytics", "analytics")
    LOCATION = ("location:data", "location")
    USER = ("user:data", "user")

    def __init__(self, prefix, config_name):
        self.prefix = prefix
        self.config_name = config_name

    def key(self, key: str) -> str:
        """Full logical key for ``key`` inside this namespace."""
        return f"{self.prefix}:{key}"

    def pattern(self, sub_pattern: str = "*") -> str:
        return f"{self.prefix}:{sub_pattern}"


# Defaults used when config carries no TTL for a namespace
DEFAULT_TTLS = {
    CacheNamespace.LISTINGS: 5 * 60,
    CacheNamespace.DETAILS: 30 * 60,
    CacheNamespace.SEARCH: 10 * 60,
    CacheNamespace.ANALYTICS: 30 * 60,
    CacheNamespace.LOCATION: 24 * 60 * 60,
    CacheNamespace.USER: 5 * 60,
}

# Named invalidation domains accepted by the admin endpoint
INVALIDATION_DOMAINS = {
    "listings": [CacheNamespace.LISTINGS.pattern()],
    "details": [CacheNamespace.DETAILS.pattern()],
    "search": [CacheNamespace.SEARCH.pattern()],
    "recommendations": [CacheNamespace.ANALYTICS.pattern(), CacheNamespace.USER.pattern("preferences:*")],
    "analytics": [CacheNamespace.ANALYTICS.pattern()],
    "location": [CacheNamespace.LOCATION.pattern()],
    "user": [CacheNamespace.USER.pattern()],
    "all": ["*"],
}
