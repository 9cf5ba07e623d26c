# tests/unit/test_transitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import threading
from unittest.mock import MagicMock

import pytest

from flatstate.core.config import FSMConfig, StateConfig, Transition
from flatstate.core.errors import ConfigurationError
from flatstate.core.guards import PlaceholderGuard, snapshot_context
from flatstate.core.transitions import get_state_config, lookup_definition, match_transition, resolve_transition

# -----------------------------------------------------------------------------
# FIXTURES
# -----------------------------------------------------------------------------


@pytest.fixture
def wildcard_config() -> FSMConfig:
    return FSMConfig(
        initial="A",
        states={
            "A": StateConfig(on={"go": "B", "*": "C"}),
            "B": StateConfig(on={}),
            "C": StateConfig(on={}),
            "D": StateConfig(),
            "E": StateConfig(on={"go": "NOWHERE"}),
        },
    )


# -----------------------------------------------------------------------------
# PLACEHOLDER GUARD TESTS
# -----------------------------------------------------------------------------


def test_placeholder_guard_always_permits():
    guard = PlaceholderGuard("[guard amount < price]")
    assert guard({}, None) is True
    assert guard.hint == "[GUARD: [guard amount < price]]"


def test_placeholder_guard_without_notation():
    assert PlaceholderGuard().hint == "[GUARD: guarded]"


def test_placeholder_guard_equality():
    assert PlaceholderGuard("[guard 1]") == PlaceholderGuard("[guard 1]")
    assert PlaceholderGuard("[guard 1]") != PlaceholderGuard("[guard 2]")
    assert len({PlaceholderGuard("[guarded]"), PlaceholderGuard("[guarded]")}) == 1


def test_snapshot_context_is_deep():
    context = {"items": [1, 2]}
    snapshot = snapshot_context(context)
    snapshot["items"].append(3)
    assert context == {"items": [1, 2]}


def test_snapshot_context_rejects_uncopyable():
    with pytest.raises(ConfigurationError) as exc_info:
        snapshot_context({"lock": threading.Lock()})
    assert exc_info.value.component == "context"


# -----------------------------------------------------------------------------
# LOOKUP TESTS
# -----------------------------------------------------------------------------


def test_get_state_config_unknown_state(wildcard_config):
    with pytest.raises(ConfigurationError):
        get_state_config(wildcard_config, "Z")


def test_get_state_config_without_on(wildcard_config):
    with pytest.raises(ConfigurationError):
        get_state_config(wildcard_config, "D")


def test_lookup_prefers_exact_event(wildcard_config):
    assert lookup_definition(wildcard_config.states["A"], "go") == "B"


def test_lookup_falls_back_to_wildcard(wildcard_config):
    assert lookup_definition(wildcard_config.states["A"], "anything") == "C"


def test_lookup_missing_without_wildcard(wildcard_config):
    assert lookup_definition(wildcard_config.states["B"], "go") is None


# -----------------------------------------------------------------------------
# MATCH TESTS
# -----------------------------------------------------------------------------


def test_match_string_definition():
    assert match_transition("B", {}) == Transition(target="B")


def test_match_single_guarded_edge():
    edge = Transition(target="B", guard=lambda ctx, p: ctx["ok"])
    assert match_transition(edge, {"ok": True}) is edge
    assert match_transition(edge, {"ok": False}) is None


def test_match_sequence_first_match_wins():
    first = Transition(target="X", guard=lambda ctx, p: True)
    second = Transition(target="Y", guard=lambda ctx, p: True)
    assert match_transition((first, second), {}) is first


def test_match_sequence_skips_failing_guards():
    first = Transition(target="X", guard=lambda ctx, p: False)
    second = Transition(target="Y")
    assert match_transition((first, second), {}) is second


def test_match_sequence_guardless_entry_is_unconditional():
    fallback = Transition(target="Y")
    later = Transition(target="Z", guard=lambda ctx, p: True)
    assert match_transition((fallback, later), {}) is fallback


def test_match_sequence_no_match():
    edge = Transition(target="X", guard=lambda ctx, p: False)
    assert match_transition((edge,), {}) is None


def test_match_passes_payload_to_guard():
    guard = MagicMock(return_value=True)
    match_transition(Transition(target="B", guard=guard), {"n": 1}, payload="data")
    guard.assert_called_once_with({"n": 1}, "data")


def test_guards_receive_a_copy():
    context = {"n": 1}

    def mutating_guard(ctx, payload):
        ctx["n"] = 99
        return True

    match_transition(Transition(target="B", guard=mutating_guard), context)
    assert context == {"n": 1}


def test_each_guard_gets_a_fresh_copy():
    def mutating_guard(ctx, payload):
        ctx["n"] = 99
        return False

    def checking_guard(ctx, payload):
        return ctx["n"] == 1

    edges = (Transition(target="X", guard=mutating_guard), Transition(target="Y", guard=checking_guard))
    assert match_transition(edges, {"n": 1}) == Transition(target="Y", guard=checking_guard)


def test_guard_exceptions_propagate():
    def broken(ctx, payload):
        raise RuntimeError("guard failed")

    with pytest.raises(RuntimeError, match="guard failed"):
        match_transition(Transition(target="B", guard=broken), {})


# -----------------------------------------------------------------------------
# RESOLVE TESTS
# -----------------------------------------------------------------------------


def test_resolve_known_event(wildcard_config):
    assert resolve_transition(wildcard_config, "A", "go", {}) == Transition(target="B")


def test_resolve_refused_event(wildcard_config):
    assert resolve_transition(wildcard_config, "B", "go", {}) is None


def test_resolve_unknown_target_raises(wildcard_config):
    with pytest.raises(ConfigurationError) as exc_info:
        resolve_transition(wildcard_config, "E", "go", {})
    assert exc_info.value.details["target"] == "NOWHERE"


def test_resolve_internal_edge_needs_no_target():
    config = FSMConfig(initial="A", states={"A": StateConfig(on={"tick": Transition(action=lambda c, p: None)})})
    edge = resolve_transition(config, "A", "tick", {})
    assert edge.is_internal
