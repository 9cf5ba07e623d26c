# flatstate/core/hooks.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from flatstate.interfaces.types import StateID, SubscriberFunc, Unsubscribe


@dataclass(frozen=True)
class StateSnapshot:
    """
    Immutable view of a machine handed to subscribers.

    ``context`` is a deep copy; subscribers never receive the live context.
    """

    current: StateID
    previous: Optional[StateID]
    context: Any


class SubscriberRegistry:
    """
    Manages the registration and synchronous notification of observers that
    listen to machine state changes.
    """

    def __init__(self) -> None:
        self._subscribers: List[SubscriberFunc] = []

    def __len__(self) -> int:
        return len(self._subscribers)

    def register(self, callback: SubscriberFunc) -> Unsubscribe:
        """
        Add a subscriber.

        :param callback: Called with a :class:`StateSnapshot` on every change.
        :return: A callable removing this registration; calling it again is a no-op.
        """
        if not callable(callback):
            raise TypeError("Subscriber callback must be callable")
        self._subscribers.append(callback)
        active = True

        def unsubscribe() -> None:
            nonlocal active
            if active:
                active = False
                self._subscribers.remove(callback)

        return unsubscribe

    def notify(self, snapshot: StateSnapshot) -> None:
        """
        Deliver ``snapshot`` to every subscriber in registration order.

        The subscriber list is copied first, so subscribers may register or
        unsubscribe while being notified. Exceptions propagate to the caller.
        """
        for callback in list(self._subscribers):
            callback(snapshot)
