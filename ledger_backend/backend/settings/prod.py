# backend/settings/prod.py
"""
PATH: backend/settings/prod.py

PRODUCTION SETTINGS

Fail closed on anything the ledger cannot run safely without:
- SECRET_KEY and ALLOWED_HOSTS set
- Postgres: reconciliation and valuation rely on SELECT ... FOR UPDATE,
  which SQLite silently ignores
- LEDGER_INTERNAL_DIRECTION is one of SALE / PURCHASE / REJECT
- CORS/CSRF origins explicit and https

The API is JWT-only; session cookies exist for the admin alone.
"""

from __future__ import annotations

from django.core.exceptions import ImproperlyConfigured

from .base import *  # noqa: F403
from .base import BASE_DIR, LEDGER_INTERNAL_DIRECTION, LOGGING, MIDDLEWARE, env

DEBUG = False

# ----------------------------
# Secrets / hosts
# ----------------------------
SECRET_KEY = (env("SECRET_KEY", default="") or "").strip()
if not SECRET_KEY or SECRET_KEY == "dev-insecure-change-me":
    raise ImproperlyConfigured("SECRET_KEY must be set to a strong value in production.")

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=[])
if not ALLOWED_HOSTS:
    raise ImproperlyConfigured("ALLOWED_HOSTS must be set in production.")

# ----------------------------
# Database: row locks required
# ----------------------------
if not (env("DATABASE_URL", default="") or "").startswith(
    ("postgres", "pgsql", "psql", "postgis")
):
    raise ImproperlyConfigured(
        "DATABASE_URL must point at Postgres in production "
        "(row-level locking is required by the ledger)."
    )

DATABASES = {"default": env.db("DATABASE_URL")}
DATABASES["default"]["CONN_MAX_AGE"] = env.int("DB_CONN_MAX_AGE", default=60)

# ----------------------------
# Ledger policy
# ----------------------------
if LEDGER_INTERNAL_DIRECTION not in {"SALE", "PURCHASE", "REJECT"}:
    raise ImproperlyConfigured(
        f"LEDGER_INTERNAL_DIRECTION={LEDGER_INTERNAL_DIRECTION!r}; "
        "expected SALE, PURCHASE or REJECT."
    )

# ----------------------------
# Static files (admin) via WhiteNoise
# ----------------------------
STATIC_ROOT = env("STATIC_ROOT", default=str(BASE_DIR / "staticfiles"))
MIDDLEWARE.insert(1, "whitenoise.middleware.WhiteNoiseMiddleware")
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {
        "BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"
    },
}

# ----------------------------
# TLS behind a proxy
# ----------------------------
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = env.bool("SECURE_SSL_REDIRECT", default=True)
SECURE_HSTS_SECONDS = env.int("SECURE_HSTS_SECONDS", default=3600)
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
X_FRAME_OPTIONS = "DENY"

# ----------------------------
# CORS / CSRF
# ----------------------------
CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=[])
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=[])
CORS_ALLOW_CREDENTIALS = False

for _name, _origins in (
    ("CORS_ALLOWED_ORIGINS", CORS_ALLOWED_ORIGINS),
    ("CSRF_TRUSTED_ORIGINS", CSRF_TRUSTED_ORIGINS),
):
    if not _origins:
        raise ImproperlyConfigured(f"{_name} must be set in production.")
    if any(not o.startswith("https://") for o in _origins):
        raise ImproperlyConfigured(f"{_name} must be https:// in production.")

LOGGING["loggers"]["ledger"]["level"] = env("LOG_LEVEL", default="WARNING")
