from django.urls import path

from .views import (
    LocationRecommendationsView,
    PersonalizedRecommendationsView,
    SimilarListingsView,
    TrendingListingsView,
)

urlpatterns = [
    path('personalized/', PersonalizedRecommendationsView.as_view(), name='recommendations-personalized'),
    path('similar/', SimilarListingsView.as_view(), name='recommendations-similar'),
    path('trending/', TrendingListingsView.as_view(), name='recommendations-trending'),
    path('location/', LocationRecommendationsView.as_view(), name='recommendations-location'),
]
