"""
Celery Configuration for PropSearch

Workers run the cache invalidation tasks fired by listing, inquiry and
favorite mutations.
"""

import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'propsearch.settings')

app = Celery('propsearch')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
