# flatstate/core/compose.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import copy
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from flatstate.core.actions import compose_hooks
from flatstate.core.config import (
    ConfigFragment,
    FSMConfig,
    StateConfig,
    TransitionDefinition,
    as_fragment,
    normalize_definition,
)
from flatstate.core.errors import ConfigurationError
from flatstate.interfaces.types import HookFunc, StateID


class HookPolicy(str, Enum):
    """How ``on_enter``/``on_exit`` hooks of the same state are combined."""

    REPLACE = "replace"
    COMPOSE = "compose"


class ContextPolicy(str, Enum):
    """How fragment contexts are combined."""

    MERGE = "merge"
    REPLACE = "replace"


class ConflictPolicy(str, Enum):
    """How conflicting ``initial`` values are treated."""

    LAST_WINS = "last-wins"
    ERROR = "error"


class TransitionPolicy(str, Enum):
    """How definitions for the same state and event are combined."""

    REPLACE = "replace"
    PREPEND = "prepend"
    APPEND = "append"


FragmentLike = Union[ConfigFragment, FSMConfig, Mapping[str, Any], None]


class _MergedContext:
    """
    Context factory producing a fresh shallow merge of every source per call.

    Factory sources are called, static sources deep-copied, and the results
    merged in fragment order with later keys winning.
    """

    def __init__(self, sources: List[Any]) -> None:
        self.sources = list(sources)

    def __call__(self) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for index, source in enumerate(self.sources):
            value = source() if callable(source) else copy.deepcopy(source)
            if not isinstance(value, Mapping):
                raise ConfigurationError(
                    f"Cannot merge context of type {type(value).__name__}; use context='replace'",
                    "context",
                    details={"fragment_context": index},
                )
            merged.update(value)
        return merged

    def __repr__(self) -> str:
        return f"_MergedContext({len(self.sources)} sources)"


class _StateAccumulator:
    """Collects the pieces of one state while fragments are folded."""

    def __init__(self) -> None:
        self.on: Dict[str, TransitionDefinition] = {}
        self.on_enter: List[HookFunc] = []
        self.on_exit: List[HookFunc] = []

    def merge_on(self, on: Mapping[str, TransitionDefinition], policy: TransitionPolicy) -> None:
        for event, definition in on.items():
            existing = self.on.get(event)
            if existing is None or policy is TransitionPolicy.REPLACE:
                self.on[event] = definition
            elif policy is TransitionPolicy.PREPEND:
                self.on[event] = normalize_definition(definition) + normalize_definition(existing)
            else:
                self.on[event] = normalize_definition(existing) + normalize_definition(definition)

    def build(self, policy: HookPolicy) -> StateConfig:
        if policy is HookPolicy.COMPOSE:
            on_enter = compose_hooks(self.on_enter)
            on_exit = compose_hooks(self.on_exit)
        else:
            on_enter = self.on_enter[-1] if self.on_enter else None
            on_exit = self.on_exit[-1] if self.on_exit else None
        return StateConfig(on=dict(self.on), on_enter=on_enter, on_exit=on_exit)


def _policy(enum_cls: type, value: Any, name: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(repr(member.value) for member in enum_cls)
        raise ValueError(f"Invalid {name} policy {value!r}; expected one of {allowed}") from None


def compose_fsm_config(
    fragments: Iterable[FragmentLike],
    *,
    hooks: Union[HookPolicy, str] = HookPolicy.REPLACE,
    context: Union[ContextPolicy, str] = ContextPolicy.MERGE,
    on_conflict: Union[ConflictPolicy, str] = ConflictPolicy.LAST_WINS,
    transitions: Union[TransitionPolicy, str] = TransitionPolicy.REPLACE,
) -> FSMConfig:
    """
    Merge configuration fragments, in order, into one :class:`FSMConfig`.

    Falsy entries are dropped first so fragments can be included
    conditionally::

        config = compose_fsm_config(
            [core, with_auth and auth_gate, error_handling],
            transitions="prepend",
        )

    :param fragments: :class:`ConfigFragment`, :class:`FSMConfig` or mapping
        entries, or falsy placeholders.
    :param hooks: ``"replace"`` keeps the last hook of each state,
        ``"compose"`` chains all of them in fragment order.
    :param context: ``"merge"`` wraps every fragment context in a factory
        producing a fresh shallow merge on each call; ``"replace"`` keeps the
        last fragment's context as is.
    :param on_conflict: ``"last-wins"`` or ``"error"``; the latter refuses two
        fragments defining different ``initial`` values.
    :param transitions: ``"replace"``, ``"prepend"`` (later fragment's edges
        are evaluated first) or ``"append"`` (later fragment acts as fallback).
    :raises ValueError: On an unknown policy.
    :raises ConfigurationError: If no fragment remains, ``initial`` is never
        defined or conflicts under ``on_conflict="error"``.
    """
    hook_policy = _policy(HookPolicy, hooks, "hooks")
    context_policy = _policy(ContextPolicy, context, "context")
    conflict_policy = _policy(ConflictPolicy, on_conflict, "on_conflict")
    transition_policy = _policy(TransitionPolicy, transitions, "transitions")

    valid = [as_fragment(fragment) for fragment in fragments if fragment]
    if not valid:
        raise ConfigurationError("compose_fsm_config requires at least one fragment", "compose")

    initial: Optional[StateID] = None
    debug = False
    logger = None
    context_sources: List[Any] = []
    states: Dict[StateID, _StateAccumulator] = {}

    for fragment in valid:
        if fragment.initial is not None:
            if conflict_policy is ConflictPolicy.ERROR and initial is not None and initial != fragment.initial:
                raise ConfigurationError(
                    f"Conflict: fragments define different 'initial' values: \"{initial}\" vs \"{fragment.initial}\"",
                    "compose",
                    details={"initial": [initial, fragment.initial]},
                )
            initial = fragment.initial

        if fragment.debug is not None:
            debug = fragment.debug
        if fragment.logger is not None:
            logger = fragment.logger
        if fragment.context is not None:
            context_sources.append(fragment.context)

        for name, state_config in (fragment.states or {}).items():
            acc = states.setdefault(name, _StateAccumulator())
            if state_config.on:
                acc.merge_on(state_config.on, transition_policy)
            if state_config.on_enter is not None:
                acc.on_enter.append(state_config.on_enter)
            if state_config.on_exit is not None:
                acc.on_exit.append(state_config.on_exit)

    if initial is None:
        raise ConfigurationError("No fragment defines an 'initial' state", "compose")

    merged_context: Any = None
    if context_sources:
        if context_policy is ContextPolicy.REPLACE:
            merged_context = context_sources[-1]
        else:
            merged_context = _MergedContext(context_sources)

    return FSMConfig(
        initial=initial,
        states={name: acc.build(hook_policy) for name, acc in states.items()},
        context=merged_context,
        debug=debug,
        logger=logger,
    )
