"""
Action Broadcast — Receivers and Senders
==========================================
Filtered views over a BroadcastChannel, and the publish helpers.

    receiver = register_receiver(["login", "logout"]).listen(on_account)
    send_broadcast("login", data="user42")
    receiver.cancel()

Filtering:
- actions=None       → every intent
- actions=[...]      → intents whose action is in the collection
- actions=[] / set() → nothing

The listener owns the returned Subscription and must cancel it when
it goes away (or hand it to a SubscriptionManager).

Every function takes an optional channel; None means the
process-wide default channel.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, FrozenSet, Optional

from action_broadcast.channel import (
    BroadcastChannel,
    ErrorCallback,
    IntentCallback,
    IntentPredicate,
    Subscription,
    get_default_channel,
)
from action_broadcast.errors import InvalidArgument
from action_broadcast.intent import ActionIntent, validate_action


# ══════════════════════════════════════════════════════════════
# FILTERED VIEW
# ══════════════════════════════════════════════════════════════

class IntentStream:
    """
    Lazy, filtered view of a channel.

    Nothing is attached until listen() is called. Every listen()
    creates an independent Subscription; canceling one leaves the
    others and the channel untouched.
    """

    def __init__(
        self,
        channel: BroadcastChannel,
        actions: Optional[FrozenSet[str]] = None,
        predicates: tuple = (),
    ):
        self._channel = channel
        self._actions = actions
        self._predicates = predicates

    @property
    def channel(self) -> BroadcastChannel:
        return self._channel

    @property
    def actions(self) -> Optional[FrozenSet[str]]:
        """Accepted action names, or None for all actions."""
        return self._actions

    def matches(self, intent: ActionIntent) -> bool:
        if self._actions is not None and intent.action not in self._actions:
            return False
        return all(predicate(intent) for predicate in self._predicates)

    def where(self, predicate: IntentPredicate) -> "IntentStream":
        """Return a narrower view that also requires `predicate`."""
        if not callable(predicate):
            raise InvalidArgument(
                "predicate", f"must be callable, got {type(predicate).__name__}"
            )
        return IntentStream(
            self._channel, self._actions, self._predicates + (predicate,)
        )

    def listen(
        self,
        on_intent: IntentCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """Start receiving. Returns the Subscription to cancel later."""
        if self._actions is None and not self._predicates:
            predicate = None
        else:
            predicate = self.matches
        return self._channel.listen(on_intent, predicate=predicate, on_error=on_error)

    def __repr__(self) -> str:
        actions = "*" if self._actions is None else sorted(self._actions)
        return f"<IntentStream {actions} on {self._channel.name!r}>"


# ══════════════════════════════════════════════════════════════
# RECEIVERS
# ══════════════════════════════════════════════════════════════

def register_receiver(
    actions: Optional[Iterable[str]] = None,
    channel: Optional[BroadcastChannel] = None,
) -> IntentStream:
    """
    Create a view receiving intents whose action is in `actions`.

    Args:
        actions: Action names to receive. None receives everything,
                 an empty collection receives nothing.
        channel: Channel to listen on. Defaults to the process-wide one.

    Raises:
        InvalidArgument: `actions` is a bare string or holds an
                         empty/non-string name.
    """
    if isinstance(actions, (str, bytes)):
        raise InvalidArgument(
            "actions",
            "must be a collection of action names; "
            "use register_single_receiver() for one action",
        )

    action_set = None
    if actions is not None:
        action_set = frozenset(
            validate_action(action, "actions") for action in actions
        )

    return IntentStream(channel or get_default_channel(), action_set)


def register_single_receiver(
    action: str,
    channel: Optional[BroadcastChannel] = None,
) -> IntentStream:
    """Create a view receiving only intents with `action`."""
    validate_action(action)
    return register_receiver((action,), channel=channel)


# ══════════════════════════════════════════════════════════════
# SENDERS
# ══════════════════════════════════════════════════════════════

def send_broadcast(
    action: str,
    data: Any = None,
    extras: Optional[Mapping[str, Any]] = None,
    channel: Optional[BroadcastChannel] = None,
) -> None:
    """
    Publish a new intent.

    * action is the event identifier.
    * data is a single payload value, for events carrying one datum.
    * extras is a mapping of named payload values; it is copied.
    * data and extras may be used together.

    Raises:
        InvalidArgument: `action` is empty.
    """
    intent = ActionIntent(action, data=data, extras=extras)
    (channel or get_default_channel()).publish(intent)


def send_intent_broadcast(
    intent: ActionIntent,
    channel: Optional[BroadcastChannel] = None,
) -> None:
    """
    Publish a pre-built intent as-is.

    Raises:
        InvalidArgument: `intent` is None or not an ActionIntent.
    """
    if intent is None:
        raise InvalidArgument("intent", "is required")
    (channel or get_default_channel()).publish(intent)
