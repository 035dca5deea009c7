"""
core.exceptions: re-exports for convenient imports.

Usage::

    from core.exceptions import NotFoundError, CatalogTimeoutError
    from core.exceptions import propsearch_exception_handler
"""

from .base import (
    PropSearchError,
    ServiceError,
    CatalogUnavailableError,
    CatalogTimeoutError,
    ValidationError,
    NotFoundError,
    AuthorizationError,
)

from .handlers import propsearch_exception_handler

__all__ = [
    # Base
    "PropSearchError",
    # Upstream
    "ServiceError",
    "CatalogUnavailableError",
    "CatalogTimeoutError",
    # Client
    "ValidationError",
    "NotFoundError",
    "AuthorizationError",
    # Handler
    "propsearch_exception_handler",
]
