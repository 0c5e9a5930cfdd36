"""
Action Broadcast — App Configuration
======================================
Validates ACTION_BROADCAST at startup so a bad setting fails at
boot instead of at the first publish.
No channel is created here; the default channel stays lazy.
"""

import logging

from django.apps import AppConfig

logger = logging.getLogger("action_broadcast")


class ActionBroadcastConfig(AppConfig):
    name = "action_broadcast"
    label = "action_broadcast"
    verbose_name = "Action Broadcast"

    def ready(self):
        from action_broadcast.conf import validate_settings

        effective = validate_settings()
        logger.info(f"Action Broadcast ready: {effective}")
