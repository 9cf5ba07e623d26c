# flatstate/core/state_machine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import copy
import logging
from typing import Any, Mapping, Optional, Union

from flatstate.core.config import FSMConfig, Transition, as_config
from flatstate.core.errors import InvalidTransitionError
from flatstate.core.hooks import StateSnapshot, SubscriberRegistry
from flatstate.core.transitions import get_state_config, resolve_transition
from flatstate.interfaces.protocols import LoggerProtocol
from flatstate.interfaces.types import EventID, StateID, SubscriberFunc, Unsubscribe

_logger = logging.getLogger(__name__)


class StateMachine:
    """
    Synchronous finite state machine driven by an :class:`FSMConfig`.

    The machine owns its current state, previous state and context. They only
    change through :meth:`transition` and :meth:`reset`, and every change is
    published to subscribers as a :class:`StateSnapshot`.

    Example::

        fsm = StateMachine({
            "initial": "IDLE",
            "states": {
                "IDLE": {"on": {"load": "LOADING"}},
                "LOADING": {"on": {"done": "IDLE"}},
            },
        })
        fsm.transition("load")  # -> "LOADING"

    Exceptions raised by guards, actions, lifecycle hooks and subscribers are
    never caught; they propagate to the caller and may leave that one
    transition partially applied (e.g. ``on_exit`` ran, then the action raised).

    Subscribers are notified synchronously and may call :meth:`transition`
    themselves. Nothing limits that recursion: a subscriber that answers every
    notification with a self-loop transition recurses until ``RecursionError``.
    """

    def __init__(
        self,
        config: Union[FSMConfig, Mapping[str, Any]],
        *,
        logger: Optional[LoggerProtocol] = None,
        debug: Optional[bool] = None,
    ) -> None:
        """
        :param config: An :class:`FSMConfig` or a mapping accepted by
            :meth:`FSMConfig.from_dict`. The initial state is not validated
            here but on the first transition.
        :param logger: Overrides the config's logger.
        :param debug: Overrides the config's debug flag.
        """
        self._config = as_config(config)
        self._logger: LoggerProtocol = logger or self._config.logger or _logger
        self._debug = self._config.debug if debug is None else debug
        self._subscribers = SubscriberRegistry()
        self._depth = 0

        self._current: StateID = self._config.initial
        self._previous: Optional[StateID] = None
        self._context: Any = self._create_context()

    @classmethod
    def from_mermaid(cls, diagram: str, **kwargs: Any) -> "StateMachine":
        """
        Build a machine from a Mermaid ``stateDiagram-v2`` text.

        Guards and actions of the resulting machine are inert placeholders.
        """
        from flatstate.diagrams.mermaid import from_mermaid

        return cls(from_mermaid(diagram), **kwargs)

    @property
    def config(self) -> FSMConfig:
        """The configuration this machine executes."""
        return self._config

    @property
    def state(self) -> StateID:
        """The current state."""
        return self._current

    @property
    def previous(self) -> Optional[StateID]:
        """The state before the last external transition, ``None`` after start or reset."""
        return self._previous

    @property
    def context(self) -> Any:
        """The live context object."""
        return self._context

    @property
    def debug(self) -> bool:
        return self._debug

    @debug.setter
    def debug(self, value: bool) -> None:
        self._debug = bool(value)

    def is_(self, state: StateID) -> bool:
        """Return True if the machine is currently in ``state``."""
        return self._current == state

    def subscribe(self, callback: SubscriberFunc) -> Unsubscribe:
        """
        Subscribe to state changes.

        ``callback`` is invoked right away with the current snapshot, then after
        every transition (internal ones included) and every reset.

        A callback may call :meth:`transition`; the nested call runs to
        completion before the outer notification loop continues. Subscribers
        later in the list therefore receive the nested snapshot first and the
        outer, older snapshot last, so the last snapshot they saw can lag
        behind :attr:`state`. Unbounded reentrancy is the caller's
        responsibility.

        If the immediate call raises, the subscription is removed again and
        the exception propagates.

        :return: A callable that removes the subscription.
        """
        unsubscribe = self._subscribers.register(callback)
        try:
            callback(self._snapshot())
        except BaseException:
            unsubscribe()
            raise
        return unsubscribe

    def can_transition(self, event: EventID, payload: Any = None) -> bool:
        """
        Dry run of :meth:`transition`.

        Evaluates guards against a context snapshot and never runs actions or
        hooks, never changes state and never notifies.

        :return: False exactly when :meth:`transition` would raise
            :class:`InvalidTransitionError`.
        :raises ConfigurationError: Exactly when :meth:`transition` would.
        """
        return resolve_transition(self._config, self._current, event, self._context, payload) is not None

    def transition(self, event: EventID, payload: Any = None, assert_: bool = True) -> StateID:
        """
        Send ``event`` to the machine.

        An internal edge (no target) runs its action and notifies. An external
        edge, self-loops included, runs ``on_exit`` of the old state, the edge
        action, switches state, runs ``on_enter`` of the new state and notifies.

        :param event: Event name.
        :param payload: Passed to guards, the action and the lifecycle hooks.
        :param assert_: If True (default), raise when the event is refused;
            otherwise return the unchanged state without side effects.
        :return: The current state after the transition and its notifications.
        :raises InvalidTransitionError: If the event is refused and ``assert_`` is set.
        :raises ConfigurationError: If the current state has no ``on`` mapping
            or the selected target is unknown, whatever ``assert_`` is.
        """
        self._depth += 1
        try:
            self._log("transition %r from %r (depth %d)", event, self._current, self._depth)
            edge = resolve_transition(self._config, self._current, event, self._context, payload)

            if edge is None:
                if assert_:
                    raise InvalidTransitionError(
                        f'Invalid transition "{self._current}" -> "{event}"',
                        self._current,
                        event,
                    )
                self._log("transition %r refused in %r", event, self._current)
                return self._current

            if edge.is_internal:
                self._run_internal(edge, event, payload)
            else:
                self._run_external(edge, payload)

            self._notify()
            return self._current
        finally:
            self._depth -= 1

    def reset(self) -> "StateMachine":
        """
        Return to the initial state with a freshly produced context.

        Subscribers are notified exactly once.
        """
        self._current = self._config.initial
        self._previous = None
        self._context = self._create_context()
        self._log("reset to %r", self._current)
        self._notify()
        return self

    def to_mermaid(self) -> str:
        """Encode this machine's config as a Mermaid ``stateDiagram-v2``."""
        from flatstate.diagrams.mermaid import to_mermaid

        return to_mermaid(self._config)

    def _run_internal(self, edge: Transition, event: EventID, payload: Any) -> None:
        self._log("internal transition %r in %r", event, self._current)
        if edge.action is not None:
            edge.action(self._context, payload)

    def _run_external(self, edge: Transition, payload: Any) -> None:
        old = self._current
        old_config = get_state_config(self._config, old)
        if old_config.on_exit is not None:
            old_config.on_exit(self._context, payload)

        if edge.action is not None:
            edge.action(self._context, payload)

        self._previous, self._current = old, edge.target
        self._log("state changed %r -> %r", old, self._current)

        new_config = self._config.states[self._current]
        if new_config.on_enter is not None:
            new_config.on_enter(self._context, payload)

    def _create_context(self) -> Any:
        source = self._config.context
        if source is None:
            return {}
        if callable(source):
            return source()
        return copy.deepcopy(source)

    def _snapshot(self) -> StateSnapshot:
        return StateSnapshot(self._current, self._previous, copy.deepcopy(self._context))

    def _notify(self) -> None:
        if len(self._subscribers):
            self._subscribers.notify(self._snapshot())

    def _log(self, msg: str, *args: Any) -> None:
        if self._debug:
            self._logger.debug(msg, *args)

    def __repr__(self) -> str:
        return f"StateMachine(state={self._current!r}, previous={self._previous!r})"
