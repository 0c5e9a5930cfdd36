"""
Action Broadcast — Broadcast Channel
======================================
Single fan-out point for ActionIntents.

Dispatch behavior:
1. Snapshot live subscriptions
2. Skip subscriptions canceled since the snapshot
3. Ask each subscription's predicate
4. Invoke matching callbacks sequentially, on the publisher's thread
5. Route callback failures to on_error, or log them and continue

Rules:
- Every intent reaches all matching subscriptions before the next
  intent is dispatched, including intents published from inside a
  callback (queued until the current fan-out completes)
- No subscribers → the intent is dropped (no buffering, no replay)
- Subscribers attached mid-dispatch start with the next intent
- Thread-safe: publishes are serialized; the subscriber list has its
  own short lock, so listen() and cancel() never wait for callbacks
- In-memory only

One process-wide default channel is created on first use and lives
until the process exits. Tests and embedding hosts may inject their
own with set_default_channel().
"""

from __future__ import annotations

import logging
from collections import deque
from threading import Lock, RLock
from typing import Callable, Deque, List, Optional

from action_broadcast import conf
from action_broadcast.errors import InvalidArgument
from action_broadcast.intent import ActionIntent
from action_broadcast.signals import intent_published

logger = logging.getLogger("action_broadcast.channel")

IntentCallback = Callable[[ActionIntent], None]
IntentPredicate = Callable[[ActionIntent], bool]
ErrorCallback = Callable[[Exception, ActionIntent], None]


# ══════════════════════════════════════════════════════════════
# SUBSCRIPTION
# ══════════════════════════════════════════════════════════════

class Subscription:
    """
    One live listener on a BroadcastChannel.

    Created by BroadcastChannel.listen() (usually through
    IntentStream.listen()). cancel() detaches it; a canceled
    subscription never receives again.
    """

    def __init__(
        self,
        channel: "BroadcastChannel",
        on_intent: IntentCallback,
        predicate: Optional[IntentPredicate] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        self._channel = channel
        self._on_intent = on_intent
        self._predicate = predicate
        self._on_error = on_error
        self._active = True

    @property
    def channel(self) -> "BroadcastChannel":
        return self._channel

    @property
    def is_active(self) -> bool:
        return self._active

    def accepts(self, intent: ActionIntent) -> bool:
        return self._predicate is None or bool(self._predicate(intent))

    def cancel(self) -> None:
        """Detach from the channel. Idempotent."""
        if self._active:
            self._channel._detach(self)

    def __repr__(self) -> str:
        state = "active" if self._active else "canceled"
        callback = getattr(self._on_intent, "__qualname__", repr(self._on_intent))
        return f"<Subscription {callback} on {self._channel.name!r} ({state})>"


# ══════════════════════════════════════════════════════════════
# BROADCAST CHANNEL
# ══════════════════════════════════════════════════════════════

class BroadcastChannel:
    """
    Multi-consumer fan-out channel.

    Usage:
        channel = BroadcastChannel()
        sub = channel.listen(print, predicate=lambda i: i.action == "login")
        channel.publish(ActionIntent("login", data="user42"))
        sub.cancel()
    """

    def __init__(self, name: str = "broadcast"):
        self.name = name
        self._subscriptions: List[Subscription] = []
        self._pending: Deque[ActionIntent] = deque()
        self._dispatching = False
        # Guards _subscriptions only; never held while callbacks run
        self._lock = Lock()
        # Serializes publish() so every intent fans out completely in turn
        self._dispatch_lock = RLock()

    # ══════════════════════════════════════════════════════════
    # SUBSCRIBE / CANCEL
    # ══════════════════════════════════════════════════════════

    def listen(
        self,
        on_intent: IntentCallback,
        predicate: Optional[IntentPredicate] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """
        Attach a subscription.

        Args:
            on_intent: Called with every accepted intent.
            predicate: Decides delivery. None accepts everything.
            on_error:  Called with (exception, intent) when on_intent
                       raises. Without it the failure is logged.

        Raises:
            InvalidArgument: A callback is not callable.
        """
        if not callable(on_intent):
            raise InvalidArgument(
                "on_intent", f"must be callable, got {type(on_intent).__name__}"
            )
        if predicate is not None and not callable(predicate):
            raise InvalidArgument(
                "predicate", f"must be callable, got {type(predicate).__name__}"
            )
        if on_error is not None and not callable(on_error):
            raise InvalidArgument(
                "on_error", f"must be callable, got {type(on_error).__name__}"
            )

        subscription = Subscription(self, on_intent, predicate, on_error)
        with self._lock:
            self._subscriptions.append(subscription)
            count = len(self._subscriptions)

        logger.debug(f"Subscription attached to '{self.name}': {subscription} ({count} live)")
        return subscription

    def _detach(self, subscription: Subscription) -> None:
        with self._lock:
            if not subscription._active:
                return
            subscription._active = False
            try:
                self._subscriptions.remove(subscription)
            except ValueError:
                pass
            count = len(self._subscriptions)

        logger.debug(f"Subscription canceled on '{self.name}': {subscription} ({count} live)")

    def subscription_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def has_subscribers(self) -> bool:
        with self._lock:
            return bool(self._subscriptions)

    # ══════════════════════════════════════════════════════════
    # PUBLISH
    # ══════════════════════════════════════════════════════════

    def publish(self, intent: ActionIntent) -> None:
        """
        Deliver `intent` to every matching live subscription.

        Returns after all callbacks ran. When called from inside a
        callback the intent is queued and delivered once the current
        fan-out completes, before the outer publish() returns.

        Publishes from other threads wait for the current dispatch.
        A callback must not block on another thread's publish().

        Raises:
            InvalidArgument: `intent` is not an ActionIntent.
            ImproperlyConfigured: ACTION_BROADCAST is invalid; nothing
                                  is queued or delivered.
            Exception: A subscriber failure, only when
                       CATCH_SUBSCRIBER_ERRORS is False. Intents queued
                       by nested publishes are dropped.
        """
        if not isinstance(intent, ActionIntent):
            raise InvalidArgument(
                "intent", f"must be an ActionIntent, got {type(intent).__name__}"
            )

        # Settings are read before queueing so a bad config leaves no trace
        effective = conf.validate_settings()
        catch_errors = effective["CATCH_SUBSCRIBER_ERRORS"]
        send_signals = effective["SEND_SIGNALS"]

        with self._dispatch_lock:
            self._pending.append(intent)
            if self._dispatching:
                logger.debug(
                    f"Queued nested publish of '{intent.action}' on '{self.name}'"
                )
                return

            self._dispatching = True
            try:
                while self._pending:
                    current = self._pending.popleft()
                    delivered = self._fan_out(current, catch_errors)
                    if send_signals:
                        intent_published.send(
                            sender=self, intent=current, delivered=delivered
                        )
            except Exception:
                if self._pending:
                    logger.warning(
                        f"Dropped {len(self._pending)} queued intent(s) on "
                        f"'{self.name}' after a failed dispatch"
                    )
                    self._pending.clear()
                raise
            finally:
                self._dispatching = False

    def _fan_out(self, intent: ActionIntent, catch_errors: bool) -> int:
        with self._lock:
            targets = list(self._subscriptions)

        if not targets:
            logger.debug(
                f"No subscribers on '{self.name}', dropped '{intent.action}'"
            )
            return 0

        delivered = 0
        for subscription in targets:
            # Canceled since the snapshot, by a callback or another thread
            if not subscription._active:
                continue

            try:
                if not subscription.accepts(intent):
                    continue
                subscription._on_intent(intent)
                delivered += 1
            except Exception as exc:
                self._handle_subscriber_error(
                    subscription, intent, exc, catch_errors
                )

        logger.debug(
            f"Dispatched '{intent.action}' on '{self.name}': "
            f"{delivered} of {len(targets)} subscriptions notified"
        )
        return delivered

    def _handle_subscriber_error(
        self,
        subscription: Subscription,
        intent: ActionIntent,
        exc: Exception,
        catch_errors: bool,
    ) -> None:
        if subscription._on_error is not None:
            try:
                subscription._on_error(exc, intent)
            except Exception:
                logger.error(
                    f"Error handler of {subscription} failed for "
                    f"'{intent.action}' on '{self.name}'",
                    exc_info=True,
                )
            return

        if not catch_errors:
            raise exc

        logger.error(
            f"Subscriber failed: {subscription} for '{intent.action}' "
            f"on '{self.name}': {exc}",
            exc_info=True,
        )

    def __repr__(self) -> str:
        return f"<BroadcastChannel {self.name!r} ({self.subscription_count()} subscriptions)>"


# ══════════════════════════════════════════════════════════════
# DEFAULT CHANNEL (process-wide)
# ══════════════════════════════════════════════════════════════

_default_channel: Optional[BroadcastChannel] = None
_default_channel_lock = Lock()


def get_default_channel() -> BroadcastChannel:
    """Return the process-wide channel, creating it on first use."""
    global _default_channel
    channel = _default_channel
    if channel is not None:
        return channel

    with _default_channel_lock:
        if _default_channel is None:
            _default_channel = BroadcastChannel(name="default")
            logger.info("Default broadcast channel created")
        return _default_channel


def set_default_channel(channel: BroadcastChannel) -> None:
    """Replace the process-wide channel (testing / embedding hosts)."""
    global _default_channel
    if not isinstance(channel, BroadcastChannel):
        raise InvalidArgument(
            "channel", f"must be a BroadcastChannel, got {type(channel).__name__}"
        )
    with _default_channel_lock:
        _default_channel = channel


def reset_default_channel() -> None:
    """Forget the process-wide channel; the next use creates a fresh one."""
    global _default_channel
    with _default_channel_lock:
        _default_channel = None
