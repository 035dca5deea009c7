"""
Background tasks for the listings app.

Cache invalidation fired by catalog mutations. Running it on a worker keeps
the CRUD request that caused the mutation off the cache's critical path.
"""
import logging
from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(
    name='listings.tasks.invalidate_user_recommendations',
    max_retries=2,
    default_retry_delay=5,
    ignore_result=True,
)
def invalidate_user_recommendations(user_id):
    """
    Drop a user's cached recommendations and preference profile.

    Fired when the user inquires about or favorites a listing, since both
    change the profile their recommendations are ranked against.
    """
    from recommendations.services.engine import recommendation_engine

    recommendation_engine.invalidate_user(user_id)
    logger.info(f"Invalidated recommendation caches for user {user_id}")


@shared_task(
    name='listings.tasks.invalidate_listing_caches',
    max_retries=2,
    default_retry_delay=5,
    ignore_result=True,
)
def invalidate_listing_caches(listing_id):
    """
    Drop everything derived from a listing that changed.

    That is the listing's detail entry, cached catalog pages, search results,
    and the similar / trending / location recommendation sets. Personalized
    sets expire on their own TTL.
    """
    from listings.catalog import catalog_service
    from recommendations.services.engine import recommendation_engine
    from search.services.search_service import search_service

    catalog_service.invalidate_listing(listing_id)
    search_service.clear_caches()
    recommendation_engine.invalidate_listing_views()
    logger.info(f"Invalidated caches derived from listing {listing_id}")
