# flatstate/core/validations.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from collections import deque
from typing import Any, List, Mapping, Set, Union

from flatstate.core.config import FSMConfig, Transition, as_config, normalize_definition
from flatstate.core.errors import ConfigurationError
from flatstate.interfaces.types import WILDCARD, StateID, ValidationResult

ERROR = "ERROR"
WARNING = "WARNING"


class Validator:
    """
    Eager structural checks of a configuration.

    A :class:`StateMachine` detects the same problems lazily, when a
    transition first runs into them; the validator finds them all up front.
    It is never invoked implicitly.
    """

    def __init__(self) -> None:
        self._rules = _DefaultValidationRules

    def validate(self, config: Union[FSMConfig, Mapping[str, Any]]) -> List[ValidationResult]:
        """
        Run every rule against ``config``.

        :param config: An :class:`FSMConfig` or a mapping.
        :return: All findings, errors first then warnings; empty when clean.
        """
        config = as_config(config)
        results: List[ValidationResult] = []
        results.extend(self._rules.validate_initial(config))
        results.extend(self._rules.validate_states(config))
        results.extend(self._rules.validate_reachability(config))
        return sorted(results, key=lambda r: r.severity != ERROR)

    def validate_or_raise(self, config: Union[FSMConfig, Mapping[str, Any]]) -> FSMConfig:
        """
        Validate and return the coerced config.

        :raises ConfigurationError: If any rule reports an error. Warnings
            alone never raise.
        """
        config = as_config(config)
        results = self.validate(config)
        errors = [r for r in results if r.severity == ERROR]
        if errors:
            raise ConfigurationError(
                f"Invalid configuration: {errors[0].message}",
                "Validator",
                validation_errors=results,
            )
        return config


class _DefaultValidationRules:
    """
    Built-in rules. Each returns a list of :class:`ValidationResult`.
    """

    @staticmethod
    def validate_initial(config: FSMConfig) -> List[ValidationResult]:
        if config.initial not in config.states:
            return [
                ValidationResult(
                    ERROR,
                    f'Initial state "{config.initial}" is not defined',
                    {"state": config.initial},
                )
            ]
        return []

    @staticmethod
    def validate_states(config: FSMConfig) -> List[ValidationResult]:
        """
        Check every state:
        - the wildcard is not used as a state name
        - an ``on`` mapping exists
        - edges are :class:`Transition` instances with known targets
        - guards, actions and hooks are callable
        """
        results: List[ValidationResult] = []
        for name, state_config in config.states.items():
            if name == WILDCARD:
                results.append(ValidationResult(ERROR, f'"{WILDCARD}" cannot be used as a state name', {"state": name}))

            for hook_name in ("on_enter", "on_exit"):
                hook = getattr(state_config, hook_name)
                if hook is not None and not callable(hook):
                    results.append(
                        ValidationResult(ERROR, f'State "{name}" {hook_name} is not callable', {"state": name})
                    )

            if state_config.on is None:
                results.append(ValidationResult(ERROR, f'State "{name}" has no "on" mapping', {"state": name}))
                continue

            for event, definition in state_config.on.items():
                for index, edge in enumerate(normalize_definition(definition)):
                    where = {"state": name, "event": event, "index": index}
                    if not isinstance(edge, Transition):
                        results.append(
                            ValidationResult(ERROR, f'State "{name}" event "{event}" has a non-transition entry', where)
                        )
                        continue
                    if edge.target is not None and edge.target not in config.states:
                        results.append(
                            ValidationResult(
                                ERROR,
                                f'State "{name}" event "{event}" targets unknown state "{edge.target}"',
                                dict(where, target=edge.target),
                            )
                        )
                    for part in ("guard", "action"):
                        value = getattr(edge, part)
                        if value is not None and not callable(value):
                            results.append(
                                ValidationResult(ERROR, f'State "{name}" event "{event}" {part} is not callable', where)
                            )
        return results

    @staticmethod
    def validate_reachability(config: FSMConfig) -> List[ValidationResult]:
        """Warn about states no transition path from the initial state reaches."""
        if config.initial not in config.states:
            return []
        seen: Set[StateID] = {config.initial}
        queue = deque([config.initial])
        while queue:
            state_config = config.states[queue.popleft()]
            for definition in (state_config.on or {}).values():
                for edge in normalize_definition(definition):
                    target = getattr(edge, "target", None)
                    if target is not None and target in config.states and target not in seen:
                        seen.add(target)
                        queue.append(target)
        return [
            ValidationResult(WARNING, f'State "{name}" is unreachable from "{config.initial}"', {"state": name})
            for name in config.states
            if name not in seen
        ]
