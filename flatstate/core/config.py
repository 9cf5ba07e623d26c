# flatstate/core/config.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from flatstate.core.errors import ConfigurationError
from flatstate.interfaces.protocols import LoggerProtocol
from flatstate.interfaces.types import WILDCARD, ActionExec, GuardCheck, HookFunc, StateID


@dataclass(frozen=True)
class Transition:
    """
    A single transition edge for one event out of one state.

    :param target: Destination state. ``None`` makes the edge internal: its
        action runs but the state does not change and no enter/exit hooks run.
    :param guard: Pure predicate ``guard(context, payload) -> bool``. It is
        always handed a deep copy of the context.
    :param action: Side effect ``action(context, payload)`` run on the live
        context while the edge executes.
    """

    target: Optional[StateID] = None
    guard: Optional[GuardCheck] = None
    action: Optional[ActionExec] = None

    def __post_init__(self) -> None:
        if self.target is not None and not isinstance(self.target, str):
            raise ConfigurationError(f"Transition target must be a string, got {self.target!r}", "Transition")
        if self.target == WILDCARD:
            raise ConfigurationError(f'"{WILDCARD}" is reserved and cannot be a transition target', "Transition")
        if self.guard is not None and not callable(self.guard):
            raise ConfigurationError("Transition guard must be callable", "Transition")
        if self.action is not None and not callable(self.action):
            raise ConfigurationError("Transition action must be callable", "Transition")

    @property
    def is_internal(self) -> bool:
        """True when the edge has no target."""
        return self.target is None


# A bare target, a single edge, or an ordered sequence of edges.
TransitionDefinition = Union[StateID, Transition, Tuple[Transition, ...]]

_EDGE_KEYS = frozenset({"target", "guard", "action"})
_STATE_KEYS = frozenset({"on", "on_enter", "on_exit"})
_CONFIG_KEYS = frozenset({"initial", "states", "context", "debug", "logger"})


def _check_keys(data: Mapping[str, Any], allowed: frozenset, component: str) -> None:
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ConfigurationError(
            f"Unknown {component} keys: {', '.join(map(str, unknown))}",
            component,
            details={"unknown": unknown, "allowed": sorted(allowed)},
        )


def _coerce_edge(value: Any) -> Transition:
    if isinstance(value, Transition):
        return value
    if isinstance(value, str):
        return Transition(target=value)
    if isinstance(value, Mapping):
        _check_keys(value, _EDGE_KEYS, "Transition")
        return Transition(**value)
    raise ConfigurationError(f"Cannot build a transition from {value!r}", "Transition")


def coerce_definition(value: Any) -> TransitionDefinition:
    """
    Convert a user supplied transition definition into one of the three
    canonical variants, keeping the variant the user chose.

    Strings and :class:`Transition` instances pass through, a mapping becomes a
    single :class:`Transition`, and a list or tuple becomes a tuple of edges.

    :raises ConfigurationError: If the value has none of these shapes.
    """
    if isinstance(value, (str, Transition)):
        return value
    if isinstance(value, Mapping):
        return _coerce_edge(value)
    if isinstance(value, (list, tuple)):
        return tuple(_coerce_edge(item) for item in value)
    raise ConfigurationError(f"Invalid transition definition: {value!r}", "Transition")


def normalize_definition(definition: TransitionDefinition) -> Tuple[Transition, ...]:
    """Return any definition variant as a tuple of edges."""
    if isinstance(definition, str):
        return (Transition(target=definition),)
    if isinstance(definition, Transition):
        return (definition,)
    return tuple(definition)


@dataclass(frozen=True)
class StateConfig:
    """
    Configuration of a single state.

    ``on`` maps event names (or the ``"*"`` wildcard) to transition
    definitions. A state whose ``on`` is ``None`` cannot be left; trying to do
    so raises :class:`ConfigurationError`.
    """

    on: Optional[Dict[str, TransitionDefinition]] = None
    on_enter: Optional[HookFunc] = None
    on_exit: Optional[HookFunc] = None

    def __post_init__(self) -> None:
        if self.on is not None:
            if not isinstance(self.on, Mapping):
                raise ConfigurationError("State 'on' must be a mapping of events to transitions", "StateConfig")
            coerced = {str(event): coerce_definition(defn) for event, defn in self.on.items()}
            object.__setattr__(self, "on", coerced)
        for name in ("on_enter", "on_exit"):
            hook = getattr(self, name)
            if hook is not None and not callable(hook):
                raise ConfigurationError(f"State hook '{name}' must be callable", "StateConfig")

    @classmethod
    def from_dict(cls, data: Union["StateConfig", Mapping[str, Any]]) -> "StateConfig":
        """Build a state config from a mapping with ``on``/``on_enter``/``on_exit`` keys."""
        if isinstance(data, StateConfig):
            return data
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"State config must be a mapping, got {data!r}", "StateConfig")
        _check_keys(data, _STATE_KEYS, "StateConfig")
        return cls(**data)


def _coerce_states(states: Any, component: str) -> Dict[StateID, StateConfig]:
    if not isinstance(states, Mapping):
        raise ConfigurationError("'states' must be a mapping of state names to configs", component)
    return {str(name): StateConfig.from_dict(value) for name, value in states.items()}


@dataclass(frozen=True)
class FSMConfig:
    """
    Complete, immutable description of a state machine.

    :param initial: State the machine starts in and returns to on reset. It is
        checked against ``states`` lazily, when the machine first resolves a
        transition.
    :param states: Mapping of state names to :class:`StateConfig`.
    :param context: Initial context value (deep-copied for every fresh
        context) or a zero-argument factory returning one.
    :param debug: Enables debug logging for machines built from this config.
    :param logger: Logger capability, see :class:`LoggerProtocol`.
    """

    initial: StateID
    states: Dict[StateID, StateConfig] = field(default_factory=dict)
    context: Any = None
    debug: bool = False
    logger: Optional[LoggerProtocol] = None

    def __post_init__(self) -> None:
        if not isinstance(self.initial, str):
            raise ConfigurationError(f"'initial' must be a state name, got {self.initial!r}", "FSMConfig")
        object.__setattr__(self, "states", _coerce_states(self.states, "FSMConfig"))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FSMConfig":
        """
        Build a config from a plain mapping.

        Example::

            FSMConfig.from_dict({
                "initial": "OFF",
                "states": {
                    "OFF": {"on": {"start": "ON"}},
                    "ON": {"on": {"stop": "OFF"}},
                },
            })

        :raises ConfigurationError: On unknown keys or a missing ``initial``.
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Config must be a mapping, got {data!r}", "FSMConfig")
        _check_keys(data, _CONFIG_KEYS, "FSMConfig")
        if "initial" not in data:
            raise ConfigurationError("Config is missing 'initial'", "FSMConfig")
        return cls(**data)


@dataclass(frozen=True)
class ConfigFragment:
    """
    Partial configuration consumed by :func:`compose_fsm_config`.

    Every field is optional and per-state entries may be partial: a
    :class:`StateConfig` with ``on=None`` contributes only its hooks.
    """

    initial: Optional[StateID] = None
    states: Optional[Dict[StateID, StateConfig]] = None
    context: Any = None
    debug: Optional[bool] = None
    logger: Optional[LoggerProtocol] = None

    def __post_init__(self) -> None:
        if self.states is not None:
            object.__setattr__(self, "states", _coerce_states(self.states, "ConfigFragment"))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConfigFragment":
        """Build a fragment from a plain mapping; every key is optional."""
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Fragment must be a mapping, got {data!r}", "ConfigFragment")
        _check_keys(data, _CONFIG_KEYS, "ConfigFragment")
        return cls(**data)


def as_config(config: Union[FSMConfig, Mapping[str, Any]]) -> FSMConfig:
    """Accept an :class:`FSMConfig` or a mapping and return an :class:`FSMConfig`."""
    if isinstance(config, FSMConfig):
        return config
    return FSMConfig.from_dict(config)


def as_fragment(fragment: Union[ConfigFragment, FSMConfig, Mapping[str, Any]]) -> ConfigFragment:
    """Accept a fragment, a full config or a mapping and return a :class:`ConfigFragment`."""
    if isinstance(fragment, ConfigFragment):
        return fragment
    if isinstance(fragment, FSMConfig):
        return ConfigFragment(
            initial=fragment.initial,
            states=fragment.states,
            context=fragment.context,
            debug=fragment.debug or None,
            logger=fragment.logger,
        )
    return ConfigFragment.from_dict(fragment)
