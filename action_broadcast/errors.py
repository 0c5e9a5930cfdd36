"""
Action Broadcast — Errors
===========================
Error types for the broadcast layer.
All failures are local precondition violations raised at the call
that breaks the contract. Nothing here is deferred or fatal.
"""


class ActionBroadcastError(Exception):
    """Base error for Action Broadcast operations."""
    pass


class InvalidArgument(ActionBroadcastError, ValueError):
    """An argument violates the call contract (empty action, missing intent)."""

    def __init__(self, argument: str, reason: str):
        self.argument = argument
        self.reason = reason
        super().__init__(f"Invalid argument '{argument}': {reason}.")


class SubscriptionManagerDisposedError(ActionBroadcastError):
    """Subscription added to a manager after its component was torn down."""

    def __init__(self, owner: str):
        self.owner = owner
        super().__init__(
            f"Subscription manager of '{owner}' is disposed. "
            f"Call reinitialize() before adding subscriptions."
        )
