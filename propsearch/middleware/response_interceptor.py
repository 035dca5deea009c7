"""
Response normalisation for API 404s.
"""

from django.conf import settings
from django.http import JsonResponse


class NotFoundNormalizerMiddleware:
    """
    Replace Django's HTML 404 page with a JSON body for unknown API routes.

    Responses that already carry a JSON error body (a missing listing
    raised as ``NotFoundError``) are left untouched.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)

        if not request.path.startswith("/api/") or settings.DEBUG:
            return response

        if response.status_code == 404 and "json" not in response.get("Content-Type", ""):
            return JsonResponse(
                {"error": "not_found", "message": "Not found"},
                status=404
            )

        return response
