"""
Core App Configuration
======================

Validates configuration and reports the cache backend in use when Django
starts, so a misconfigured Redis URL shows up in the boot log rather than as
silent cache misses.
"""

import logging

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)


class CoreConfig(AppConfig):
    name = "core"
    verbose_name = "PropSearch core"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        from core.config import validate_config_on_startup
        validate_config_on_startup()

        backend = settings.CACHES.get("default", {}).get("BACKEND", "unset")
        logger.info("Cache backend: %s", backend.rsplit(".", 1)[-1])
