from django.urls import path

from .views import HealthView, CacheInvalidateView

urlpatterns = [
    path('health/', HealthView.as_view(), name='health'),
    path('cache/invalidate/', CacheInvalidateView.as_view(), name='cache-invalidate'),
]
