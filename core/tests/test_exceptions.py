"""
Tests for the exception hierarchy and the DRF exception handler.
"""

from rest_framework.exceptions import NotAuthenticated

from core.exceptions import (
    CatalogTimeoutError,
    CatalogUnavailableError,
    NotFoundError,
    PropSearchError,
    ServiceError,
    ValidationError,
)
from core.exceptions.handlers import propsearch_exception_handler


class TestHierarchy:

    def test_timeout_is_an_unavailable_catalog(self):
        exc = CatalogTimeoutError(timeout=5.0)
        assert isinstance(exc, CatalogUnavailableError)
        assert isinstance(exc, ServiceError)
        assert isinstance(exc, PropSearchError)

    def test_status_codes(self):
        assert ValidationError().status_code == 400
        assert NotFoundError().status_code == 404
        assert ServiceError().status_code == 502
        assert CatalogUnavailableError().status_code == 503
        assert CatalogTimeoutError().status_code == 504

    def test_catalog_errors_are_retryable(self):
        exc = CatalogTimeoutError(timeout=2.5)
        assert exc.to_dict() == {
            "error": "catalog_timeout",
            "message": "Listing catalog query timed out",
            "detail": {"timeout": 2.5, "retryable": True, "upstream": "catalog"},
        }

    def test_no_detail_key_without_details(self):
        assert "detail" not in PropSearchError("boom").to_dict()


class TestExceptionHandler:

    def test_not_found(self):
        response = propsearch_exception_handler(NotFoundError("Listing 9 not found", resource="listing"), {})
        assert response.status_code == 404
        assert response.data["error"] == "not_found"
        assert response.data["detail"] == {"resource": "listing"}

    def test_retry_after_on_retryable(self):
        response = propsearch_exception_handler(CatalogUnavailableError(), {})
        assert response.status_code == 503
        assert response["Retry-After"] == "5"

    def test_no_retry_after_on_client_errors(self):
        response = propsearch_exception_handler(ValidationError("bad", field="text"), {})
        assert response.status_code == 400
        assert not response.has_header("Retry-After")

    def test_drf_exceptions_fall_through(self):
        response = propsearch_exception_handler(NotAuthenticated(), {})
        assert response.status_code in (401, 403)

    def test_unknown_exceptions_return_none(self):
        assert propsearch_exception_handler(RuntimeError("boom"), {"view": None}) is None
