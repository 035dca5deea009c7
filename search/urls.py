from django.urls import path

from .views import SearchView, SuggestionsView

urlpatterns = [
    path('', SearchView.as_view(), name='search'),
    path('suggestions/', SuggestionsView.as_view(), name='search-suggestions'),
]
