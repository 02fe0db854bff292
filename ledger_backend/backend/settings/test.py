# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS (pytest-django)

- In-memory SQLite regardless of DATABASE_URL
- Fast password hashing
- Ledger loggers quiet unless LOG_LEVEL is raised explicitly
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, env

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LEDGER_INTERNAL_DIRECTION = "SALE"

REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    "DEFAULT_THROTTLE_CLASSES": (),
}

LOGGING["loggers"]["ledger"]["level"] = env("LOG_LEVEL", default="CRITICAL")
