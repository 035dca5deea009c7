"""
Request logging for the search API.
"""

import logging
import time

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware:
    """
    Log API requests with their latency, and every error response.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not request.path.startswith("/api/"):
            return self.get_response(request)

        started = time.monotonic()
        ip = self.get_client_ip(request)
        response = self.get_response(request)
        elapsed_ms = int((time.monotonic() - started) * 1000)

        if response.status_code >= 400:
            logger.warning(
                f"API Error {response.status_code}: {request.method} {request.path} "
                f"from {ip} ({elapsed_ms}ms)"
            )
        else:
            logger.info(f"API Request: {request.method} {request.path} from {ip} ({elapsed_ms}ms)")

        return response

    def get_client_ip(self, request):
        x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
        if x_forwarded_for:
            return x_forwarded_for.split(",")[0].strip()
        return request.META.get("REMOTE_ADDR", "unknown")
