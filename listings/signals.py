"""
Catalog mutation hooks.

Inquiries and favorites invalidate the acting user's recommendation caches;
listing edits invalidate everything ranked from listings. Tasks are queued
only after the surrounding transaction commits, so a worker never
recomputes from rows that are about to be rolled back.
"""

import logging

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import Favorite, Inquiry, Listing
from .tasks import invalidate_listing_caches, invalidate_user_recommendations

logger = logging.getLogger(__name__)


def _schedule(task, *args):
    transaction.on_commit(lambda: task.delay(*args))


@receiver(post_save, sender=Inquiry)
def inquiry_created(sender, instance, created, **kwargs):
    if created:
        _schedule(invalidate_user_recommendations, instance.user_id)


@receiver(post_save, sender=Favorite)
@receiver(post_delete, sender=Favorite)
def favorite_changed(sender, instance, **kwargs):
    _schedule(invalidate_user_recommendations, instance.user_id)


@receiver(post_save, sender=Listing)
@receiver(post_delete, sender=Listing)
def listing_changed(sender, instance, **kwargs):
    _schedule(invalidate_listing_caches, instance.pk)
