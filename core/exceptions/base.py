"""
PropSearch Exception Hierarchy
==============================

Domain-specific exceptions for structured error handling across the search
and recommendation services.

Usage::

    from core.exceptions import CatalogTimeoutError, NotFoundError

    # In a service:
    raise CatalogTimeoutError(timeout=5.0)

    # In a repository:
    raise NotFoundError("Listing not found", resource="listing", id=listing_id)
"""

from rest_framework import status


# =============================================================================
# Base Exception
# =============================================================================

class PropSearchError(Exception):
    """Base exception for all PropSearch application errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "server_error"

    def __init__(self, message="An unexpected error occurred", **kwargs):
        self.message = message
        self.details = kwargs
        super().__init__(message)

    def to_dict(self):
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["detail"] = self.details
        return result


# =============================================================================
# Service Errors (upstream dependencies)
# =============================================================================

class ServiceError(PropSearchError):
    """An upstream dependency failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "service_error"

    def __init__(self, message="Upstream service unavailable", upstream=None, **kwargs):
        if upstream:
            kwargs["upstream"] = upstream
        super().__init__(message, **kwargs)


class CatalogUnavailableError(ServiceError):
    """The listing catalog could not be queried. Safe to retry."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "catalog_unavailable"

    def __init__(self, message="Listing catalog unavailable", **kwargs):
        kwargs.setdefault("retryable", True)
        super().__init__(message, upstream="catalog", **kwargs)


class CatalogTimeoutError(CatalogUnavailableError):
    """A catalog query exceeded its time budget."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    error_code = "catalog_timeout"

    def __init__(self, message="Listing catalog query timed out", timeout=None, **kwargs):
        if timeout is not None:
            kwargs["timeout"] = timeout
        super().__init__(message, **kwargs)


# =============================================================================
# Client Errors
# =============================================================================

class ValidationError(PropSearchError):
    """Invalid input from the client."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "validation_error"

    def __init__(self, message="Invalid request data", field=None, **kwargs):
        if field:
            kwargs["field"] = field
        super().__init__(message, **kwargs)


class NotFoundError(PropSearchError):
    """Requested resource does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"

    def __init__(self, message="Resource not found", resource=None, **kwargs):
        if resource:
            kwargs["resource"] = resource
        super().__init__(message, **kwargs)


class AuthorizationError(PropSearchError):
    """User lacks permission for this action."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "permission_denied"

    def __init__(self, message="You do not have permission", **kwargs):
        super().__init__(message, **kwargs)

