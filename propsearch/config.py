"""
Configuration Layer
===================

Centralized, type-safe configuration for every environment variable the
search and recommendation services read.

Usage:
    from propsearch.config import config

    # Catalog budget for a single query
    timeout = config.search.catalog_timeout

    # Per-namespace cache TTL (seconds)
    ttl = config.cache.ttl_for("analytics")

    if config.is_production:
        ...
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


# =============================================================================
# Configuration Classes
# =============================================================================

@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection settings (the listing catalog lives here)."""
    url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///db.sqlite3"))
    name: str = field(default_factory=lambda: os.getenv("DB_NAME", "db.sqlite3"))
    host: str = field(default_factory=lambda: os.getenv("DB_HOST", "localhost"))
    port: int = field(default_factory=lambda: _env_int("DB_PORT", 5432))
    user: str = field(default_factory=lambda: os.getenv("DB_USER", ""))
    password: str = field(default_factory=lambda: os.getenv("DB_PASSWORD", ""))

    @property
    def is_sqlite(self) -> bool:
        return "sqlite" in self.url.lower()


@dataclass(frozen=True)
class RedisConfig:
    """Redis cache and Celery broker settings."""
    url: str = field(default_factory=lambda: os.getenv("REDIS_URL", "redis://localhost:6379/0"))
    broker_url: str = field(default_factory=lambda: os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0"))
    result_backend: str = field(default_factory=lambda: os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0"))


@dataclass(frozen=True)
class CacheConfig:
    """
    Cache TTLs per logical namespace, in seconds.

    Each one can be overridden with ``CACHE_TTL_<NAMESPACE>``, e.g.
    ``CACHE_TTL_ANALYTICS=900``.
    """
    key_prefix: str = field(default_factory=lambda: os.getenv("CACHE_KEY_PREFIX", "propsearch"))
    listings_ttl: int = field(default_factory=lambda: _env_int("CACHE_TTL_LISTINGS", 300))
    details_ttl: int = field(default_factory=lambda: _env_int("CACHE_TTL_DETAILS", 1800))
    search_ttl: int = field(default_factory=lambda: _env_int("CACHE_TTL_SEARCH", 600))
    analytics_ttl: int = field(default_factory=lambda: _env_int("CACHE_TTL_ANALYTICS", 1800))
    location_ttl: int = field(default_factory=lambda: _env_int("CACHE_TTL_LOCATION", 86400))
    user_ttl: int = field(default_factory=lambda: _env_int("CACHE_TTL_USER", 300))

    @property
    def ttls(self) -> Dict[str, int]:
        return {
            "listings": self.listings_ttl,
            "details": self.details_ttl,
            "search": self.search_ttl,
            "analytics": self.analytics_ttl,
            "location": self.location_ttl,
            "user": self.user_ttl,
        }

    def ttl_for(self, name: str) -> Optional[int]:
        """TTL for a namespace name, or None if the name is unknown."""
        return self.ttls.get(name.lower())


@dataclass(frozen=True)
class SearchConfig:
    """Search and recommendation tuning knobs."""
    catalog_timeout: float = field(default_factory=lambda: _env_float("CATALOG_TIMEOUT_SECONDS", 5.0))
    catalog_workers: int = field(default_factory=lambda: _env_int("CATALOG_WORKERS", 8))
    candidate_limit: int = field(default_factory=lambda: _env_int("SEARCH_CANDIDATE_LIMIT", 200))
    default_result_limit: int = field(default_factory=lambda: _env_int("SEARCH_RESULT_LIMIT", 20))
    max_result_limit: int = field(default_factory=lambda: _env_int("SEARCH_MAX_RESULT_LIMIT", 50))
    # Ranked search results must score strictly above this
    relevance_threshold: float = field(default_factory=lambda: _env_float("SEARCH_RELEVANCE_THRESHOLD", 0.3))


@dataclass(frozen=True)
class SecurityConfig:
    """Security-related settings."""
    secret_key: str = field(default_factory=lambda: os.getenv("SECRET_KEY", "django-insecure-dev-key-change-in-production"))
    allowed_hosts: List[str] = field(default_factory=lambda: os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(","))
    cors_origins: List[str] = field(default_factory=lambda: os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000"
    ).split(","))
    csrf_trusted_origins: List[str] = field(default_factory=lambda: os.getenv(
        "CSRF_TRUSTED_ORIGINS",
        "http://localhost:3000"
    ).split(","))

    @property
    def is_secure_key(self) -> bool:
        """Check if using a proper secret key."""
        return "insecure" not in self.secret_key.lower() and len(self.secret_key) >= 50


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration - aggregates all config sections."""

    # Environment
    environment: str = field(default_factory=lambda: os.getenv("DJANGO_ENV", "development"))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "True").lower() == "true")

    # Sub-configurations
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    redis: RedisConfig = field(default_factory=RedisConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def validate(self) -> List[str]:
        """
        Validate configuration and return list of warnings/errors.
        Call this on startup to catch misconfigurations early.
        """
        issues = []

        if self.is_production:
            if not self.security.is_secure_key:
                issues.append("CRITICAL: Using insecure SECRET_KEY in production!")
            if self.debug:
                issues.append("WARNING: DEBUG=True in production!")
            if self.database.is_sqlite:
                issues.append("WARNING: SQLite catalog database in production")

        if self.search.catalog_timeout <= 0:
            issues.append("CRITICAL: CATALOG_TIMEOUT_SECONDS must be positive")

        if self.search.default_result_limit > self.search.max_result_limit:
            issues.append("WARNING: SEARCH_RESULT_LIMIT exceeds SEARCH_MAX_RESULT_LIMIT")

        for name, ttl in self.cache.ttls.items():
            if ttl <= 0:
                issues.append(f"WARNING: cache TTL for '{name}' is {ttl}s, entries will not be cached")

        return issues

    def log_status(self) -> None:
        """Log configuration status on startup."""
        logger.info(f"Environment: {self.environment}")
        logger.info(f"Debug: {self.debug}")
        logger.info(f"Catalog timeout: {self.search.catalog_timeout}s")

        for issue in self.validate():
            if issue.startswith("CRITICAL"):
                logger.critical(issue)
            elif issue.startswith("WARNING"):
                logger.warning(issue)
            else:
                logger.info(issue)


# =============================================================================
# Singleton Instance
# =============================================================================

@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """
    Get the singleton configuration instance.
    Uses lru_cache to ensure single instance across the application.
    """
    return AppConfig()


# Convenience alias
config = get_config()


# =============================================================================
# Django Settings Helpers
# =============================================================================

def get_database_config() -> dict:
    """
    Get database configuration in Django format.
    Returns dict suitable for DATABASES setting.
    """
    if config.database.is_sqlite:
        return {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": config.database.name,
        }

    return {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": config.database.name,
        "HOST": config.database.host,
        "PORT": config.database.port,
        "USER": config.database.user,
        "PASSWORD": config.database.password,
    }
