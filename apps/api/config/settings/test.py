# apps/api/config/settings/test.py

from .base import *

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PROCESS_QUEUE_CONSUMERS = [
    {
        "category": "PRICE_UPDATED",
        "name": "trend",
        "handler": "tests.consumers.trend",
    },
    {
        "category": "PRICE_UPDATED",
        "name": "anomaly",
        "handler": "tests.consumers.anomaly",
    },
    {
        "category": "NEW_ITEM",
        "name": "new_item_notifier",
        "handler": "tests.consumers.new_item_notifier",
    },
]

PROCESS_QUEUE_SUBJECT_SOURCE = "tests.consumers.all_subject_ids"
PROCESS_QUEUE_FAILURE_WEBHOOK_URL = ""

LOGGING["loggers"]["inventory"]["level"] = "DEBUG"
