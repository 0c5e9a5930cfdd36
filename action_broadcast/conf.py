"""
Action Broadcast — Settings
=============================
Reads the optional ACTION_BROADCAST dict from Django settings.

    ACTION_BROADCAST = {
        "CATCH_SUBSCRIBER_ERRORS": True,
        "FIRST_AT_INIT_STATE": False,
        "SEND_SIGNALS": False,
    }

Outside a Django project (no DJANGO_SETTINGS_MODULE, nothing
configured) the defaults apply, so the bus works as a plain library.
"""

from __future__ import annotations

import os
from typing import Any, Dict

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

SETTINGS_NAME = "ACTION_BROADCAST"

DEFAULTS: Dict[str, bool] = {
    # Log failed subscriber callbacks and keep dispatching.
    # False → the exception propagates out of publish().
    "CATCH_SUBSCRIBER_ERRORS": True,
    # Default for SubscriptionManager.first_at_init_state.
    "FIRST_AT_INIT_STATE": False,
    # Send signals.intent_published after every fan-out.
    "SEND_SIGNALS": False,
}


def _django_settings_available() -> bool:
    return settings.configured or "DJANGO_SETTINGS_MODULE" in os.environ


def get_user_settings() -> Dict[str, Any]:
    """Raw ACTION_BROADCAST dict, or {} when not configured."""
    if not _django_settings_available():
        return {}
    user_settings = getattr(settings, SETTINGS_NAME, None)
    if user_settings is None:
        return {}
    if not isinstance(user_settings, dict):
        raise ImproperlyConfigured(
            f"{SETTINGS_NAME} must be a dict, "
            f"got {type(user_settings).__name__}."
        )
    return user_settings


def validate_settings() -> Dict[str, bool]:
    """
    Merge user settings over defaults and validate them.

    Raises:
        ImproperlyConfigured: Unknown key or non-bool value.
    """
    user_settings = get_user_settings()

    unknown = sorted(set(user_settings) - set(DEFAULTS))
    if unknown:
        raise ImproperlyConfigured(
            f"Unknown {SETTINGS_NAME} setting(s): {', '.join(unknown)}. "
            f"Allowed: {', '.join(sorted(DEFAULTS))}."
        )

    for name, value in user_settings.items():
        if not isinstance(value, bool):
            raise ImproperlyConfigured(
                f"{SETTINGS_NAME}['{name}'] must be a bool, "
                f"got {type(value).__name__}."
            )

    merged = dict(DEFAULTS)
    merged.update(user_settings)
    return merged


def get_setting(name: str) -> bool:
    """Return one effective setting value."""
    if name not in DEFAULTS:
        raise KeyError(f"Unknown {SETTINGS_NAME} setting '{name}'.")
    return validate_settings()[name]
