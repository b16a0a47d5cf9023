"""
DUKA – Django Settings (Infrastructure Only)
============================================
Django serves as the framework container for DUKA.
The daily form engine is the authority; Django hosts the HTTP
adapter and the optional ORM-backed form store.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("DUKA_SECRET_KEY", "duka-dev-key-replace-before-deployment")

DEBUG = os.environ.get("DUKA_DEBUG", "1") == "1"

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver"]

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # ── DUKA Modules ──────────────────────────────────────
    "core.form_store",
]

# ── Middleware ────────────────────────────────────────────────
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# ── URL ───────────────────────────────────────────────────────
ROOT_URLCONF = "config.urls"
APPEND_SLASH = False

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("DUKA_DB_PATH", BASE_DIR / "db.sqlite3"),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Daily Forms ───────────────────────────────────────────────
# STORE: "memory" (dev catalog, lost on restart) or "db" (core.form_store).
DAILY_FORMS = {
    "STORE": os.environ.get("DUKA_FORM_STORE", "memory"),
    "STRICT_PATCH_FIELDS": os.environ.get("DUKA_STRICT_PATCH_FIELDS", "0") == "1",
    "DEFAULT_PAGE_SIZE": 20,
    "MAX_PAGE_SIZE": 100,
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "duka": {
            "handlers": ["console"],
            "level": os.environ.get("DUKA_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
