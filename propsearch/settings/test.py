"""
Test Settings

In-memory database and cache, eager Celery, no throttling.
"""

from .base import *

DEBUG = False
SECRET_KEY = "test-secret-key"
ALLOWED_HOSTS = ["testserver", "localhost"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "propsearch-tests",
    }
}

REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

LOGGING["root"]["level"] = "WARNING"
LOGGING["loggers"]["search"]["level"] = "WARNING"
LOGGING["loggers"]["recommendations"]["level"] = "WARNING"
