"""
PropSearch URL Configuration
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse


def api_root(request):
    """Minimal public API root, no endpoint enumeration."""
    return JsonResponse({
        "service": "PropSearch API",
        "version": "1.0.0",
    })


urlpatterns = [
    path('', api_root, name='api_root'),
    path('admin/', admin.site.urls),

    # ── Versioned API ─────────────────────────────────────────────────
    path('api/v1/search/', include('search.urls')),
    path('api/v1/recommendations/', include('recommendations.urls')),
    path('api/v1/', include('core.urls')),
]
