"""
Action Broadcast – Django Settings (Development / Tests)
========================================================
Django hosts the broadcast app for configuration and signals.
The bus itself keeps no state outside the process and needs no database.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get(
    "DJANGO_SECRET_KEY", "action-broadcast-dev-key-replace-before-deployment"
)

DEBUG = True

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "action_broadcast.apps.ActionBroadcastConfig",
]

# ── Database ──────────────────────────────────────────────────
# No models. Present so Django checks pass.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# ── Action Broadcast ──────────────────────────────────────────
ACTION_BROADCAST = {
    "CATCH_SUBSCRIBER_ERRORS": True,
    "FIRST_AT_INIT_STATE": False,
    "SEND_SIGNALS": False,
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "console": {"class": "logging.StreamHandler"},
    },
    "loggers": {
        "action_broadcast": {
            "handlers": ["console"],
            "level": os.environ.get("ACTION_BROADCAST_LOG_LEVEL", "INFO"),
        },
    },
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
