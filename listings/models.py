"""
Read models for the listing catalog.

The marketplace CRUD application owns these tables. The search services only
read them, through ``listings.repositories.ListingRepository``.
"""

from django.conf import settings
from django.db import models


class Listing(models.Model):
    """A property listed on the marketplace."""

    class Category(models.TextChoices):
        PROPERTY_SALE = "property_sale", "Property for sale"
        LONG_TERM_RENTAL = "long_term_rental", "Long-term rental"
        SHORT_STAY = "short_stay", "Short stay"
        COMMERCIAL = "commercial", "Commercial"
        LANDED_PROPERTY = "landed_property", "Landed property"

    class ModerationStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    # Transactional category (sale, rental ...) vs. dwelling kind (apartment, villa ...)
    category = models.CharField(max_length=32, choices=Category.choices, db_index=True)
    property_type = models.CharField(max_length=32, blank=True, db_index=True)

    location = models.CharField(max_length=255)
    city = models.CharField(max_length=100, db_index=True)
    state = models.CharField(max_length=100, blank=True)

    price = models.DecimalField(max_digits=15, decimal_places=2)
    bedrooms = models.PositiveSmallIntegerField(null=True, blank=True)
    features = models.JSONField(default=list, blank=True)
    image_url = models.URLField(max_length=500, blank=True)

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='listings'
    )
    owner_verified = models.BooleanField(default=False)

    is_active = models.BooleanField(default=True)
    moderation_status = models.CharField(
        max_length=16,
        choices=ModerationStatus.choices,
        default=ModerationStatus.PENDING,
    )

    # Denormalised engagement counters, maintained by the CRUD application
    view_count = models.PositiveIntegerField(default=0)
    inquiry_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_active', 'moderation_status'], name='listings_li_is_acti_5b1c2e_idx'),
            models.Index(fields=['-inquiry_count', '-view_count'], name='listings_li_inquiry_8f3a41_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.city})"

    def to_summary(self):
        """Project onto the immutable summary the ranking code works with."""
        from .catalog import ListingSummary

        return ListingSummary(
            id=self.pk,
            title=self.title,
            category=self.category,
            property_type=self.property_type,
            location=self.location,
            city=self.city,
            state=self.state,
            price=float(self.price),
            bedrooms=self.bedrooms,
            features=tuple(self.features or ()),
            image_url=self.image_url or None,
            owner_verified=self.owner_verified,
            view_count=self.view_count,
            inquiry_count=self.inquiry_count,
        )


class Inquiry(models.Model):
    """A user contacting the owner about a listing."""
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='listing_inquiries'
    )
    listing = models.ForeignKey(Listing, on_delete=models.CASCADE, related_name='inquiries')
    message = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name_plural = 'Inquiries'


class ListingView(models.Model):
    """A user opening a listing's detail page."""
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='listing_views'
    )
    listing = models.ForeignKey(Listing, on_delete=models.CASCADE, related_name='views')
    viewed_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-viewed_at']


class Favorite(models.Model):
    """A listing saved by a user."""
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='favorite_listings'
    )
    listing = models.ForeignKey(Listing, on_delete=models.CASCADE, related_name='favorites')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        unique_together = ['user', 'listing']
