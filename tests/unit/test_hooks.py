# tests/unit/test_hooks.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import dataclasses
from unittest.mock import MagicMock

import pytest

from flatstate.core.hooks import StateSnapshot, SubscriberRegistry


@pytest.fixture
def snapshot() -> StateSnapshot:
    return StateSnapshot("ON", "OFF", {"n": 1})


def test_snapshot_is_frozen(snapshot):
    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.current = "OFF"


def test_register_and_notify(snapshot):
    registry = SubscriberRegistry()
    callback = MagicMock()
    registry.register(callback)
    registry.notify(snapshot)
    callback.assert_called_once_with(snapshot)
    assert len(registry) == 1


def test_notify_in_registration_order(snapshot):
    registry = SubscriberRegistry()
    order = []
    registry.register(lambda s: order.append("a"))
    registry.register(lambda s: order.append("b"))
    registry.notify(snapshot)
    assert order == ["a", "b"]


def test_unsubscribe_is_idempotent(snapshot):
    registry = SubscriberRegistry()
    callback = MagicMock()
    unsubscribe = registry.register(callback)
    unsubscribe()
    unsubscribe()
    registry.notify(snapshot)
    callback.assert_not_called()
    assert len(registry) == 0


def test_unsubscribe_only_removes_own_registration(snapshot):
    registry = SubscriberRegistry()
    callback = MagicMock()
    first = registry.register(callback)
    registry.register(callback)
    first()
    first()
    registry.notify(snapshot)
    assert callback.call_count == 1


def test_unsubscribe_during_notify(snapshot):
    registry = SubscriberRegistry()
    calls = []
    unsubscribe = None

    def once(s):
        calls.append("once")
        unsubscribe()

    unsubscribe = registry.register(once)
    registry.register(lambda s: calls.append("other"))
    registry.notify(snapshot)
    registry.notify(snapshot)
    assert calls == ["once", "other", "other"]


def test_register_rejects_non_callable():
    with pytest.raises(TypeError):
        SubscriberRegistry().register("nope")


def test_subscriber_exceptions_propagate(snapshot):
    registry = SubscriberRegistry()
    registry.register(MagicMock(side_effect=ValueError("bad subscriber")))
    with pytest.raises(ValueError):
        registry.notify(snapshot)
