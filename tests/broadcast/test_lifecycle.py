"""
Action Broadcast — Subscription Lifecycle Tests
=================================================
Covers:
- One-shot population at construct or first dependencies_ready
- add / cancel / cancel-all management
- Teardown releases everything and blocks further adds
- reinitialize()
- AutoCancelComponent delegation
"""

import logging

import pytest

from action_broadcast.channel import BroadcastChannel
from action_broadcast.errors import InvalidArgument, SubscriptionManagerDisposedError
from action_broadcast.lifecycle import AutoCancelComponent, SubscriptionManager
from action_broadcast.receiver import register_single_receiver, send_broadcast


@pytest.fixture
def channel():
    return BroadcastChannel(name="test")


class CountingFactory:
    """register_subscriptions stand-in that counts its calls."""

    def __init__(self, channel, actions=("A",)):
        self.channel = channel
        self.actions = actions
        self.calls = 0
        self.received = []

    def __call__(self):
        self.calls += 1
        return [
            register_single_receiver(action, channel=self.channel).listen(self.received.append)
            for action in self.actions
        ]


# ══════════════════════════════════════════════════════════════
# POPULATION
# ══════════════════════════════════════════════════════════════

class TestPopulation:
    def test_deferred_to_first_dependencies_ready(self, channel):
        factory = CountingFactory(channel)
        manager = SubscriptionManager(factory, first_at_init_state=False)

        manager.on_construct()
        assert factory.calls == 0
        assert not manager.is_populated

        manager.on_dependencies_ready()
        manager.on_dependencies_ready()
        manager.on_dependencies_ready()

        assert factory.calls == 1
        assert len(manager) == 1
        assert manager.is_populated

    def test_first_at_init_state(self, channel):
        factory = CountingFactory(channel)
        manager = SubscriptionManager(factory, first_at_init_state=True)

        manager.on_construct()
        assert factory.calls == 1

        manager.on_dependencies_ready()
        assert factory.calls == 1

    def test_default_from_settings(self, channel, settings):
        settings.ACTION_BROADCAST = {"FIRST_AT_INIT_STATE": True}
        manager = SubscriptionManager(CountingFactory(channel))
        assert manager.first_at_init_state is True

    def test_default_is_deferred(self, channel):
        manager = SubscriptionManager(CountingFactory(channel))
        assert manager.first_at_init_state is False

    def test_generator_factory_and_none_entries(self, channel):
        def factory():
            yield register_single_receiver("A", channel=channel).listen(print)
            yield None
            yield register_single_receiver("B", channel=channel).listen(print)

        manager = SubscriptionManager(factory)
        manager.on_dependencies_ready()
        assert len(manager) == 2

    def test_factory_returning_none(self):
        manager = SubscriptionManager(lambda: None)
        manager.on_dependencies_ready()
        assert len(manager) == 0
        assert manager.is_populated

    def test_no_factory(self):
        manager = SubscriptionManager()
        manager.on_dependencies_ready()
        assert len(manager) == 0

    def test_rejects_non_callable_factory(self):
        with pytest.raises(InvalidArgument):
            SubscriptionManager(register_subscriptions=[])

    def test_populated_subscriptions_receive(self, channel):
        factory = CountingFactory(channel, actions=("A", "B"))
        manager = SubscriptionManager(factory)
        manager.on_dependencies_ready()

        send_broadcast("A", channel=channel)
        send_broadcast("C", channel=channel)
        send_broadcast("B", channel=channel)

        assert [i.action for i in factory.received] == ["A", "B"]


# ══════════════════════════════════════════════════════════════
# MANAGEMENT
# ══════════════════════════════════════════════════════════════

class TestManagement:
    def test_add_and_cancel_one(self, channel):
        manager = SubscriptionManager()
        received = []
        sub = register_single_receiver("A", channel=channel).listen(received.append)
        manager.add_subscription(sub)

        manager.cancel_subscription(sub)
        send_broadcast("A", channel=channel)

        assert received == []
        assert not sub.is_active
        assert len(manager) == 0

    def test_add_none_ignored(self):
        manager = SubscriptionManager()
        manager.add_subscription(None)
        assert len(manager) == 0

    def test_cancel_unknown_is_noop(self, channel):
        manager = SubscriptionManager()
        foreign = channel.listen(print)

        manager.cancel_subscription(foreign)
        manager.cancel_subscription(None)

        assert foreign.is_active

    def test_cancel_twice_is_noop(self, channel):
        manager = SubscriptionManager()
        sub = channel.listen(print)
        manager.add_subscription(sub)
        manager.cancel_subscription(sub)
        manager.cancel_subscription(sub)
        assert len(manager) == 0

    def test_cancel_all_idempotent(self, channel):
        manager = SubscriptionManager()
        subs = [channel.listen(print) for _ in range(3)]
        for sub in subs:
            manager.add_subscription(sub)

        manager.cancel_subscription_all()
        manager.cancel_subscription_all()

        assert len(manager) == 0
        assert all(not sub.is_active for sub in subs)
        assert channel.subscription_count() == 0

    def test_subscriptions_snapshot(self, channel):
        manager = SubscriptionManager()
        sub = channel.listen(print)
        manager.add_subscription(sub)
        snapshot = manager.subscriptions
        manager.cancel_subscription_all()
        assert snapshot == (sub,)


# ══════════════════════════════════════════════════════════════
# TEARDOWN
# ══════════════════════════════════════════════════════════════

class TestTeardown:
    def test_teardown_releases_everything(self, channel):
        factory = CountingFactory(channel, actions=("A", "B"))
        manager = SubscriptionManager(factory)
        manager.on_dependencies_ready()
        assert channel.subscription_count() == 2

        manager.on_teardown()

        assert channel.subscription_count() == 0
        assert len(manager) == 0
        assert manager.is_disposed
        send_broadcast("A", channel=channel)
        assert factory.received == []

    def test_add_after_teardown_cancels_and_raises(self, channel):
        manager = SubscriptionManager(owner="ProfilePanel")
        manager.on_teardown()
        sub = channel.listen(print)

        with pytest.raises(SubscriptionManagerDisposedError, match="ProfilePanel"):
            manager.add_subscription(sub)
        assert not sub.is_active

    def test_hooks_after_teardown_ignored(self, channel, caplog):
        factory = CountingFactory(channel)
        manager = SubscriptionManager(factory)
        manager.on_teardown()

        with caplog.at_level(logging.WARNING, logger="action_broadcast"):
            manager.on_dependencies_ready()

        assert factory.calls == 0
        assert "disposed" in caplog.text

    def test_teardown_twice(self, channel):
        manager = SubscriptionManager(CountingFactory(channel))
        manager.on_dependencies_ready()
        manager.on_teardown()
        manager.on_teardown()
        assert channel.subscription_count() == 0

    def test_reinitialize(self, channel):
        factory = CountingFactory(channel)
        manager = SubscriptionManager(factory)
        manager.on_dependencies_ready()
        manager.on_teardown()

        manager.reinitialize()
        assert not manager.is_disposed
        assert not manager.is_populated

        manager.on_dependencies_ready()
        assert factory.calls == 2
        assert channel.subscription_count() == 1


# ══════════════════════════════════════════════════════════════
# HOST COMPONENT
# ══════════════════════════════════════════════════════════════

class AccountPanel(AutoCancelComponent):
    def __init__(self, channel):
        self.channel = channel
        self.account_id = None
        self.nickname = None
        self.closed = False
        super().__init__()

    def register_subscriptions(self):
        yield register_single_receiver("login", channel=self.channel).listen(self.on_login)
        yield register_single_receiver("profileUpdate", channel=self.channel).listen(self.on_profile)

    def on_login(self, intent):
        self.account_id = intent.get("accountId")

    def on_profile(self, intent):
        self.nickname = intent.get("nickname")


class EagerPanel(AutoCancelComponent):
    first_at_init_state = True

    def __init__(self, channel):
        self.channel = channel
        super().__init__()

    def register_subscriptions(self):
        return [self.channel.listen(print)]


class TestAutoCancelComponent:
    def test_full_lifecycle(self, channel):
        panel = AccountPanel(channel)
        panel.construct()
        assert channel.subscription_count() == 0

        panel.dependencies_ready()
        panel.dependencies_ready()
        assert channel.subscription_count() == 2

        send_broadcast("login", extras={"accountId": 7}, channel=channel)
        send_broadcast("profileUpdate", extras={"nickname": "Bob"}, channel=channel)
        assert panel.account_id == 7
        assert panel.nickname == "Bob"

        panel.teardown()
        assert channel.subscription_count() == 0
        send_broadcast("profileUpdate", extras={"nickname": "Alice"}, channel=channel)
        assert panel.nickname == "Bob"

    def test_eager_component(self, channel):
        panel = EagerPanel(channel)
        panel.construct()
        assert channel.subscription_count() == 1
        panel.dependencies_ready()
        assert channel.subscription_count() == 1
        panel.teardown()
        assert channel.subscription_count() == 0

    def test_delegated_management(self, channel):
        panel = AccountPanel(channel)
        extra = channel.listen(print)
        panel.add_subscription(extra)
        assert len(panel.subscription_manager) == 1

        panel.cancel_subscription(extra)
        assert not extra.is_active

        panel.add_subscription(channel.listen(print))
        panel.cancel_subscription_all()
        panel.cancel_subscription_all()
        assert channel.subscription_count() == 0

    def test_owner_is_class_name(self, channel):
        assert AccountPanel(channel).subscription_manager.owner == "AccountPanel"

    def test_base_registers_nothing(self):
        component = AutoCancelComponent()
        component.construct()
        component.dependencies_ready()
        assert len(component.subscription_manager) == 0
        component.teardown()
