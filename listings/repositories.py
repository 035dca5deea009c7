"""
Repository Layer
================

Encapsulates every ORM query the search services make against the catalog.
Methods return immutable ``ListingSummary`` projections, never model
instances, so nothing above this layer can touch the database.

Usage:
    from listings.repositories import ListingRepository

    summaries = ListingRepository.find_listings(ListingFilter(location_contains=("Lekki",)))
    history = ListingRepository.get_user_history(user_id)
"""

from typing import List

from django.db.models import Q

from core.repositories import BaseRepository

from .catalog import HistoryItem, ListingFilter, ListingSummary, UserHistory
from .models import Favorite, Inquiry, Listing, ListingView

# Views older than this many entries do not influence preferences
HISTORY_VIEW_LIMIT = 50


class ListingRepository(BaseRepository[Listing]):
    """Read-only access to listings and user engagement history."""

    model = Listing
    not_found_resource = "listing"

    @staticmethod
    def _apply_filter(qs, f: ListingFilter):
        if f.is_active is not None:
            qs = qs.filter(is_active=f.is_active)
        if f.moderation_status:
            qs = qs.filter(moderation_status=f.moderation_status)

        if f.location_contains:
            location_q = Q()
            for term in f.location_contains:
                location_q |= (
                    Q(location__icontains=term)
                    | Q(city__icontains=term)
                    | Q(state__icontains=term)
                )
            qs = qs.filter(location_q)

        if f.category_in:
            qs = qs.filter(category__in=f.category_in)
        if f.property_type_in:
            type_q = Q()
            for property_type in f.property_type_in:
                type_q |= Q(property_type__iexact=property_type)
            qs = qs.filter(type_q)
        if f.price_min is not None:
            qs = qs.filter(price__gte=f.price_min)
        if f.price_max is not None:
            qs = qs.filter(price__lte=f.price_max)
        if f.bedrooms_in:
            qs = qs.filter(bedrooms__in=f.bedrooms_in)
        if f.ids:
            qs = qs.filter(pk__in=f.ids)
        if f.exclude_ids:
            qs = qs.exclude(pk__in=f.exclude_ids)

        if f.order_by:
            qs = qs.order_by(*f.order_by, "pk")
        if f.limit:
            qs = qs[:f.limit]
        return qs

    @classmethod
    def find_listings(cls, listing_filter: ListingFilter) -> List[ListingSummary]:
        qs = cls._apply_filter(cls.queryset(), listing_filter)
        return [listing.to_summary() for listing in qs]

    @classmethod
    def get_listing_by_id(cls, listing_id) -> ListingSummary:
        """Raises NotFoundError if the listing does not exist."""
        return cls.get_by_id(listing_id).to_summary()

    @staticmethod
    def get_user_history(user_id) -> UserHistory:
        inquiries = (
            Inquiry.objects.filter(user_id=user_id)
            .select_related("listing")
            .order_by("-created_at")
        )
        views = (
            ListingView.objects.filter(user_id=user_id)
            .select_related("listing")
            .order_by("-viewed_at")[:HISTORY_VIEW_LIMIT]
        )
        favorites = (
            Favorite.objects.filter(user_id=user_id)
            .select_related("listing")
            .order_by("-created_at")
        )

        return UserHistory(
            inquiries=tuple(HistoryItem(i.listing.to_summary(), i.created_at) for i in inquiries),
            views=tuple(HistoryItem(v.listing.to_summary(), v.viewed_at) for v in views),
            favorites=tuple(HistoryItem(f.listing.to_summary(), f.created_at) for f in favorites),
        )
