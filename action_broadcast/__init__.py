"""
Action Broadcast — Public API
===============================
In-process publish/subscribe over one shared broadcast channel.
Publishers send named actions, receivers filter by action name,
components release their subscriptions on teardown.
"""

from action_broadcast.channel import (
    BroadcastChannel,
    Subscription,
    get_default_channel,
    reset_default_channel,
    set_default_channel,
)
from action_broadcast.errors import (
    ActionBroadcastError,
    InvalidArgument,
    SubscriptionManagerDisposedError,
)
from action_broadcast.intent import ActionIntent
from action_broadcast.lifecycle import AutoCancelComponent, SubscriptionManager
from action_broadcast.receiver import (
    IntentStream,
    register_receiver,
    register_single_receiver,
    send_broadcast,
    send_intent_broadcast,
)

__all__ = [
    "ActionIntent",
    "BroadcastChannel",
    "Subscription",
    "IntentStream",
    "get_default_channel",
    "set_default_channel",
    "reset_default_channel",
    "register_receiver",
    "register_single_receiver",
    "send_broadcast",
    "send_intent_broadcast",
    "SubscriptionManager",
    "AutoCancelComponent",
    "ActionBroadcastError",
    "InvalidArgument",
    "SubscriptionManagerDisposedError",
]
