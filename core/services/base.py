"""
Base Service
=============

Foundation for the search and recommendation services. Provides a
per-subclass logger and the shared cache store.
"""

import logging
import time
from contextlib import contextmanager

from core.cache import CacheStore


class BaseService:
    """
    All service classes inherit from this.

    Subclass example::

        class RecommendationEngine(BaseService):
            def trending(self, limit=10):
                self.logger.info("Computing trending listings")
                ...

    Features:
        - ``cls.logger``: pre-configured logger using the subclass module name
        - ``self.cache``: the ``CacheStore`` the service reads through
        - ``self.timed(label)``: context manager that logs elapsed time at DEBUG
    """

    logger: logging.Logger = logging.getLogger(__name__)

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        # Each subclass gets its own logger named after its module
        cls.logger = logging.getLogger(cls.__module__)

    def __init__(self, cache=None):
        self.cache = cache if cache is not None else CacheStore()

    @contextmanager
    def timed(self, label: str):
        started = time.monotonic()
        try:
            yield
        finally:
            elapsed_ms = (time.monotonic() - started) * 1000
            self.logger.debug("%s took %.1fms", label, elapsed_ms)
