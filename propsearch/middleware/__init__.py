from .request_logging import RequestLoggingMiddleware
from .response_interceptor import NotFoundNormalizerMiddleware

__all__ = [
    "RequestLoggingMiddleware",
    "NotFoundNormalizerMiddleware",
]
