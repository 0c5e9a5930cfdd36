"""
Action Broadcast — Action Intent
==================================
The event record carried through the broadcast channel.

An intent has:
- action: non-empty identifier of the event kind (read-only)
- data:   single ad-hoc payload value (read-only reference)
- extras: named payload fields (mutable via set())

Extras are copied on construction by default. ActionIntent.raw()
adopts the caller's mapping by reference instead. That is dangerous:
any receiver may mutate the mapping and the caller sees it, and
vice versa. Use it only when the mapping is built for this intent alone.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Optional

from action_broadcast.errors import InvalidArgument


def validate_action(action: Any, argument: str = "action") -> str:
    """Reject empty, missing or non-string action identifiers."""
    if not action or not isinstance(action, str):
        raise InvalidArgument(argument, "must be a non-empty string")
    return action


class ActionIntent:
    """
    A single broadcast occurrence.

    Usage:
        intent = ActionIntent("profileUpdate", extras={"nickname": "Bob"})
        intent.get("nickname")   # "Bob"
        intent.get("missing")    # None
        intent.set("age", 30)
    """

    __slots__ = ("_action", "_data", "_extras")

    def __init__(
        self,
        action: str,
        data: Any = None,
        extras: Optional[Mapping[str, Any]] = None,
        copy_extras: bool = True,
    ):
        self._action = validate_action(action)
        self._data = data

        if extras is not None and not isinstance(extras, Mapping):
            raise InvalidArgument(
                "extras", f"must be a mapping, got {type(extras).__name__}"
            )

        if copy_extras:
            self._extras: Dict[str, Any] = dict(extras) if extras else {}
        else:
            if extras is None:
                raise InvalidArgument(
                    "extras", "is required when copy_extras is False"
                )
            self._extras = extras  # shared with the caller

    @classmethod
    def raw(
        cls, action: str, data: Any, extras: Mapping[str, Any]
    ) -> "ActionIntent":
        """
        Build an intent that adopts `extras` by reference.

        Mutations made by receivers are visible to the caller and the
        other way round.
        """
        return cls(action, data=data, extras=extras, copy_extras=False)

    # ══════════════════════════════════════════════════════════
    # READ-ONLY IDENTITY
    # ══════════════════════════════════════════════════════════

    @property
    def action(self) -> str:
        return self._action

    @property
    def data(self) -> Any:
        return self._data

    @property
    def extras(self) -> Dict[str, Any]:
        return self._extras

    # ══════════════════════════════════════════════════════════
    # EXTRAS ACCESS
    # ══════════════════════════════════════════════════════════

    def get(self, key: str) -> Any:
        """Return the extra stored under `key`, or None if absent."""
        return self._extras.get(key)

    def set(self, key: str, value: Any) -> None:
        """Insert or overwrite an extra. Never touches action or data."""
        self._extras[key] = value

    def __getitem__(self, key: str) -> Any:
        return self._extras[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._extras[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._extras

    # ══════════════════════════════════════════════════════════
    # VALUE SEMANTICS
    # ══════════════════════════════════════════════════════════

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActionIntent):
            return NotImplemented
        return (
            self._action == other._action
            and self._data == other._data
            and self._extras == other._extras
        )

    # extras are mutable
    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"ActionIntent(action={self._action!r}, data={self._data!r}, "
            f"extras={self._extras!r})"
        )

    def to_dict(self) -> dict:
        return {
            "action": self._action,
            "data": self._data,
            "extras": dict(self._extras),
        }
