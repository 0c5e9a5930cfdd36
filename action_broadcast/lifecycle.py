"""
Action Broadcast — Subscription Lifecycle
===========================================
Tracks the subscriptions a component creates and cancels all of
them when the component is torn down.

Host components have three hooks:
    construct            → early startup, dependencies may be missing
    dependencies_ready   → may run many times
    teardown             → runs once

Lifecycle:
    1. Uninitialized
    2. Active: register_subscriptions() runs exactly once, at construct
       when first_at_init_state is True, otherwise at the first
       dependencies_ready
    3. Terminated: teardown cancels every tracked subscription.
       Nothing may be added until reinitialize().

Usage (composition):
    class ProfilePanel:
        def __init__(self):
            self.subscriptions = SubscriptionManager(self.register_subscriptions)
            self.subscriptions.on_construct()

        def register_subscriptions(self):
            return [register_single_receiver("profileUpdate").listen(self.refresh)]

Usage (base class):
    class ProfilePanel(AutoCancelComponent):
        def register_subscriptions(self):
            return [register_single_receiver("profileUpdate").listen(self.refresh)]
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Tuple

from action_broadcast import conf
from action_broadcast.channel import Subscription
from action_broadcast.errors import InvalidArgument, SubscriptionManagerDisposedError

logger = logging.getLogger("action_broadcast.lifecycle")

SubscriptionFactory = Callable[[], Optional[Iterable[Optional[Subscription]]]]


# ══════════════════════════════════════════════════════════════
# SUBSCRIPTION MANAGER
# ══════════════════════════════════════════════════════════════

class SubscriptionManager:
    """
    Subscriptions owned by one component instance.

    Not thread-safe: the owning component drives it from its own
    lifecycle hooks.
    """

    def __init__(
        self,
        register_subscriptions: Optional[SubscriptionFactory] = None,
        first_at_init_state: Optional[bool] = None,
        owner: Optional[str] = None,
    ):
        if register_subscriptions is not None and not callable(register_subscriptions):
            raise InvalidArgument(
                "register_subscriptions",
                f"must be callable, got {type(register_subscriptions).__name__}",
            )
        if first_at_init_state is None:
            first_at_init_state = conf.get_setting("FIRST_AT_INIT_STATE")

        self._register_subscriptions = register_subscriptions
        self.first_at_init_state = first_at_init_state
        self.owner = owner or "component"
        self._subscriptions: List[Subscription] = []
        self._first = True
        self._disposed = False

    @property
    def subscriptions(self) -> Tuple[Subscription, ...]:
        return tuple(self._subscriptions)

    @property
    def is_populated(self) -> bool:
        return not self._first

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def __len__(self) -> int:
        return len(self._subscriptions)

    # ══════════════════════════════════════════════════════════
    # LIFECYCLE HOOKS
    # ══════════════════════════════════════════════════════════

    def on_construct(self) -> None:
        if self.first_at_init_state and self._first:
            self._populate()

    def on_dependencies_ready(self) -> None:
        if self._first:
            self._populate()

    def on_teardown(self) -> None:
        self.cancel_subscription_all()
        self._disposed = True
        logger.debug(f"Subscriptions of '{self.owner}' released")

    def reinitialize(self) -> None:
        """Cancel anything tracked and re-arm the one-shot population."""
        self.cancel_subscription_all()
        self._first = True
        self._disposed = False

    def _populate(self) -> None:
        if self._disposed:
            logger.warning(
                f"Lifecycle hook on disposed '{self.owner}' ignored; "
                f"call reinitialize() first"
            )
            return

        self._first = False
        if self._register_subscriptions is None:
            return

        produced = self._register_subscriptions()
        for subscription in produced or ():
            self.add_subscription(subscription)

        logger.debug(
            f"Registered {len(self._subscriptions)} subscription(s) "
            f"for '{self.owner}'"
        )

    # ══════════════════════════════════════════════════════════
    # MANAGEMENT
    # ══════════════════════════════════════════════════════════

    def add_subscription(self, subscription: Optional[Subscription]) -> None:
        """
        Track `subscription` so teardown cancels it. None is ignored.

        Raises:
            SubscriptionManagerDisposedError: Called after teardown.
                The subscription is canceled before raising.
        """
        if subscription is None:
            return
        if self._disposed:
            subscription.cancel()
            raise SubscriptionManagerDisposedError(self.owner)
        self._subscriptions.append(subscription)

    def cancel_subscription(self, subscription: Optional[Subscription]) -> None:
        """Cancel and forget one tracked subscription. Unknown ones are ignored."""
        if subscription is None or subscription not in self._subscriptions:
            return
        subscription.cancel()
        self._subscriptions.remove(subscription)

    def cancel_subscription_all(self) -> None:
        """Cancel every tracked subscription and clear the collection."""
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.cancel()


# ══════════════════════════════════════════════════════════════
# HOST COMPONENT BASE
# ══════════════════════════════════════════════════════════════

class AutoCancelComponent:
    """
    Base for components that listen while alive.

    The host framework calls construct(), dependencies_ready() and
    teardown(); subclasses override register_subscriptions() and,
    when they need the hooks themselves, call super().
    """

    first_at_init_state: Optional[bool] = None

    def __init__(self) -> None:
        self._subscription_manager = SubscriptionManager(
            self.register_subscriptions,
            first_at_init_state=self.first_at_init_state,
            owner=type(self).__name__,
        )

    @property
    def subscription_manager(self) -> SubscriptionManager:
        return self._subscription_manager

    def register_subscriptions(self) -> Iterable[Optional[Subscription]]:
        return []

    def construct(self) -> None:
        self._subscription_manager.on_construct()

    def dependencies_ready(self) -> None:
        self._subscription_manager.on_dependencies_ready()

    def teardown(self) -> None:
        self._subscription_manager.on_teardown()

    def add_subscription(self, subscription: Optional[Subscription]) -> None:
        self._subscription_manager.add_subscription(subscription)

    def cancel_subscription(self, subscription: Optional[Subscription]) -> None:
        self._subscription_manager.cancel_subscription(subscription)

    def cancel_subscription_all(self) -> None:
        self._subscription_manager.cancel_subscription_all()
