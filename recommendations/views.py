"""
Recommendation Views

    GET /api/v1/recommendations/personalized/?limit=10[&user_id=]
    GET /api/v1/recommendations/similar/?listing_id=42&limit=6
    GET /api/v1/recommendations/trending/?limit=10
    GET /api/v1/recommendations/location/?location=Lekki&limit=8

Every feed returns a list of recommendation results, best first.
"""

import logging

from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import AuthorizationError, ValidationError

from .serializers import (
    LimitSerializer,
    LocationQuerySerializer,
    PersonalizedQuerySerializer,
    SimilarQuerySerializer,
)
from .services import recommendation_engine

logger = logging.getLogger(__name__)


class RecommendationView(APIView):
    """Shared query validation for the feed endpoints."""
    permission_classes = [AllowAny]
    query_serializer_class = LimitSerializer
    default_limit = 10

    def validated_params(self, request) -> dict:
        serializer = self.query_serializer_class(data=request.query_params)
        if not serializer.is_valid():
            field, messages = next(iter(serializer.errors.items()))
            raise ValidationError(str(messages[0]), field=field)
        params = dict(serializer.validated_data)
        params.setdefault("limit", self.default_limit)
        return params

    @staticmethod
    def render(results):
        return Response([r.to_dict() for r in results])


class PersonalizedRecommendationsView(RecommendationView):
    """
    Recommendations for the signed-in user. Staff may pass ``user_id`` to
    inspect another user's feed.
    """
    permission_classes = [IsAuthenticated]
    query_serializer_class = PersonalizedQuerySerializer

    def get(self, request):
        params = self.validated_params(request)
        user_id = params.get("user_id") or request.user.pk

        if user_id != request.user.pk and not request.user.is_staff:
            raise AuthorizationError("You can only view your own recommendations")

        results = recommendation_engine.personalized(user_id, limit=params["limit"])
        return self.render(results)


class SimilarListingsView(RecommendationView):
    query_serializer_class = SimilarQuerySerializer
    default_limit = 6

    def get(self, request):
        params = self.validated_params(request)
        results = recommendation_engine.similar(params["listing_id"], limit=params["limit"])
        return self.render(results)


class TrendingListingsView(RecommendationView):

    def get(self, request):
        params = self.validated_params(request)
        return self.render(recommendation_engine.trending(limit=params["limit"]))


class LocationRecommendationsView(RecommendationView):
    query_serializer_class = LocationQuerySerializer
    default_limit = 8

    def get(self, request):
        params = self.validated_params(request)
        results = recommendation_engine.location_based(params["location"], limit=params["limit"])
        logger.debug(f"Location feed '{params['location']}': {len(results)} results")
        return self.render(results)
