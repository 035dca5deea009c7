from django.contrib import admin

from .models import Favorite, Inquiry, Listing, ListingView


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    list_display = ['title', 'category', 'property_type', 'city', 'price', 'moderation_status', 'is_active']
    list_filter = ['category', 'moderation_status', 'is_active', 'owner_verified']
    search_fields = ['title', 'location', 'city']
    readonly_fields = ['view_count', 'inquiry_count', 'created_at', 'updated_at']


admin.site.register(Inquiry)
admin.site.register(ListingView)
admin.site.register(Favorite)
