# flatstate/core/transitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Any, Optional

from flatstate.core.config import FSMConfig, StateConfig, Transition, TransitionDefinition
from flatstate.core.errors import ConfigurationError
from flatstate.core.guards import _GuardEvaluator
from flatstate.interfaces.types import WILDCARD, EventID, StateID


def get_state_config(config: FSMConfig, state: StateID) -> StateConfig:
    """
    Return the config of ``state``, insisting it exists and has an ``on`` mapping.

    :raises ConfigurationError: If the state is unknown or has no ``on`` mapping.
    """
    state_config = config.states.get(state)
    if state_config is None:
        raise ConfigurationError(
            f'State "{state}" is not defined in the config',
            "states",
            details={"state": state, "known_states": list(config.states)},
        )
    if state_config.on is None:
        raise ConfigurationError(f'State "{state}" has no "on" transitions mapping', "states", details={"state": state})
    return state_config


def lookup_definition(state_config: StateConfig, event: EventID) -> Optional[TransitionDefinition]:
    """
    Find the definition for ``event``, falling back to the wildcard entry.
    """
    on = state_config.on or {}
    definition = on.get(event)
    if definition is None:
        definition = on.get(WILDCARD)
    return definition


def match_transition(definition: TransitionDefinition, context: Any, payload: Any = None) -> Optional[Transition]:
    """
    Select the edge a definition resolves to for the given context and payload.

    A bare state name always matches. A single edge or each entry of a
    sequence matches when it has no guard or its guard returns true; sequence
    entries are tried strictly in declared order and the first match wins.
    Guards only ever see a deep copy of ``context``.

    :return: The matching edge, or ``None`` when every guard rejected it.
    """
    if isinstance(definition, str):
        return Transition(target=definition)

    evaluator = _GuardEvaluator(context, payload)
    if isinstance(definition, Transition):
        return definition if evaluator.passes(definition.guard) else None

    for edge in definition:
        if evaluator.passes(edge.guard):
            return edge
    return None


def resolve_transition(
    config: FSMConfig,
    current: StateID,
    event: EventID,
    context: Any,
    payload: Any = None,
) -> Optional[Transition]:
    """
    Resolve which edge ``event`` selects from state ``current``.

    This is a pure query: nothing but guards is called and guards only see a
    context snapshot.

    :return: The selected edge, or ``None`` if the event is refused.
    :raises ConfigurationError: If ``current`` is not a usable state, or the
        selected edge targets a state missing from the config.
    """
    state_config = get_state_config(config, current)
    definition = lookup_definition(state_config, event)
    if definition is None:
        return None

    edge = match_transition(definition, context, payload)
    if edge is not None and edge.target is not None and edge.target not in config.states:
        raise ConfigurationError(
            f'Event "{event}" from "{current}" resolved to unknown target state "{edge.target}"',
            "states",
            details={"source": current, "event": event, "target": edge.target},
        )
    return edge
