"""
Search Views

Natural-language property search and search-as-you-type suggestions.
"""

import logging

from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import ValidationError

from .serializers import SearchRequestSerializer, SuggestionRequestSerializer
from .services import SearchBehavior, suggestion_generator
from .services.search_service import search_service

logger = logging.getLogger(__name__)


def _first_error(serializer) -> tuple:
    field, messages = next(iter(serializer.errors.items()))
    message = messages[0] if isinstance(messages, list) and messages else messages
    return field, str(message)


class SearchView(APIView):
    """
    Search listings with a natural-language query.

    POST /api/v1/search/
        {"text": "3 bedroom apartment in Lekki under 50 million",
         "limit": 20,
         "behavior": {"previous_searches": [...], "saved_listing_ids": [...], "clicked_listing_ids": [...]}}

    Response:
        query   - the interpreted query (intent, entities, filters, confidence)
        results - ranked listings, best first, each with its relevance breakdown
        meta    - totals and the effective limit

    Catalog outages surface as 503/504 with ``retryable: true``; a query that
    matches nothing is a 200 with an empty ``results`` list.
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = SearchRequestSerializer(data=request.data)
        if not serializer.is_valid():
            field, message = _first_error(serializer)
            raise ValidationError(message, field=field)

        data = serializer.validated_data
        behavior = SearchBehavior.from_dict(data.get("behavior"))

        result = search_service.search(data["text"], behavior=behavior, limit=data["limit"])
        logger.info(f"Search '{data['text']}' returned {len(result.results)} results")
        return Response(result.to_dict())


class SuggestionsView(APIView):
    """
    GET /api/v1/search/suggestions/?partial=lek&history=lekki+duplex

    Up to 10 suggestions, most relevant first. A blank ``partial`` returns
    an empty list.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        serializer = SuggestionRequestSerializer(data=request.query_params)
        if not serializer.is_valid():
            field, message = _first_error(serializer)
            raise ValidationError(message, field=field)

        data = serializer.validated_data
        suggestions = suggestion_generator.suggest(data["partial"], history=data["history"])
        return Response([s.to_dict() for s in suggestions])
