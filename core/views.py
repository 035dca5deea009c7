"""
Operational endpoints: health check and cache invalidation.
"""

import logging

from rest_framework import serializers, status
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from core.cache import CacheStore, INVALIDATION_DOMAINS
from core.exceptions import ValidationError

logger = logging.getLogger(__name__)

cache_store = CacheStore()


class CacheInvalidateSerializer(serializers.Serializer):
    domain = serializers.ChoiceField(choices=sorted(INVALIDATION_DOMAINS))


class HealthView(APIView):
    """
    GET /api/v1/health/

    Reports whether the cache backend answers. A dead cache degrades
    latency but not correctness, so the service stays "ok".
    """
    permission_classes = [AllowAny]
    throttle_classes = []

    def get(self, request):
        cache_ok = cache_store.ping()
        return Response({
            "status": "ok",
            "service": "propsearch",
            "cache": "ok" if cache_ok else "unavailable",
        })


class CacheInvalidateView(APIView):
    """
    POST /api/v1/cache/invalidate/   {"domain": "search"}

    Admin-only bulk invalidation of one cache domain.
    """
    permission_classes = [IsAdminUser]

    def post(self, request):
        serializer = CacheInvalidateSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationError(
                "Invalid cache domain",
                field="domain",
                allowed=sorted(INVALIDATION_DOMAINS),
            )

        domain = serializer.validated_data["domain"]
        patterns = cache_store.invalidate_domain(domain)
        logger.info(f"Cache domain '{domain}' invalidated by {request.user}")

        return Response(
            {"domain": domain, "patterns": patterns},
            status=status.HTTP_200_OK,
        )
