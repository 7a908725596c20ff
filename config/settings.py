"""
HarborQuote – Django Settings (Infrastructure Only)
====================================================
Django serves as the HTTP container for the HarborQuote engines.
Engine code never imports Django; only adapters/django_api does.

Quote tunables live in the HARBORQUOTE dict and are read through
core.config.QuoteConfig.from_mapping.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("HARBORQUOTE_SECRET_KEY", "harborquote-dev-key")

DEBUG = os.environ.get("HARBORQUOTE_DEBUG", "1") == "1"

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver"]

# ── Installed Apps ────────────────────────────────────────────
# The engines carry no Django models.
INSTALLED_APPS = [
    "django.contrib.contenttypes",
]

# ── Middleware ────────────────────────────────────────────────
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# ── URL ───────────────────────────────────────────────────────
ROOT_URLCONF = "config.urls"

# ── Database ──────────────────────────────────────────────────
# Unused by the engines; Django requires a default entry.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# ── Cache ─────────────────────────────────────────────────────
# Backs DjangoCacheKeyValueStore for server-side quote sessions.
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "harborquote",
    }
}

# ── HarborQuote ───────────────────────────────────────────────
HARBORQUOTE = {
    "STORAGE_KEY": "quoteBuilder",
    "DEBOUNCE_SECONDS": 1.0,
    "MAX_AGE_SECONDS": 24 * 60 * 60,
    "INACTIVITY_SECONDS": 30 * 60,
    "TAX_REGION": "ON",
    "TAX_TYPE": "HST",
    "TAX_RATE": 0.13,
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "harborquote": {
            "handlers": ["console"],
            "level": os.environ.get("HARBORQUOTE_LOG_LEVEL", "INFO"),
        },
    },
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
