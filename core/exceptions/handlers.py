"""
DRF Exception Handler
=====================

Custom exception handler that catches PropSearchError subtypes and returns
consistent ``{error, message, detail}`` JSON responses.

Registered in ``REST_FRAMEWORK["EXCEPTION_HANDLER"]``.
"""

import logging
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

from .base import PropSearchError, ServiceError

logger = logging.getLogger(__name__)


def propsearch_exception_handler(exc, context):
    """
    Custom DRF exception handler.

    - Catches any ``PropSearchError`` subtype → structured JSON response.
    - Marks retryable upstream failures with a ``Retry-After`` header.
    - Falls back to DRF's default handler for standard DRF exceptions.
    - Logs unhandled exceptions that slip through both layers.
    """

    if isinstance(exc, PropSearchError):
        log = logger.error if isinstance(exc, ServiceError) else logger.warning
        log(
            "PropSearchError [%s]: %s %s",
            exc.error_code,
            exc.message,
            exc.details or "",
        )
        response = Response(
            exc.to_dict(),
            status=exc.status_code,
        )
        if exc.details.get("retryable"):
            response["Retry-After"] = "5"
        return response

    response = drf_exception_handler(exc, context)

    if response is None:
        logger.exception("Unhandled exception in %s", context.get("view", "unknown"))

    return response
