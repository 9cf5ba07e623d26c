# flatstate/diagrams/codegen.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Union

from flatstate.core.config import FSMConfig, Transition, TransitionDefinition, as_config
from flatstate.diagrams.mermaid import from_mermaid

GUARD_STUB = "lambda ctx, payload: True"
ACTION_STUB = "lambda ctx, payload: None"


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _hint(func: Any, default: str) -> str:
    hint = getattr(func, "hint", None)
    return hint if isinstance(hint, str) else default


def _literal_alias(name: str, values: List[str]) -> str:
    if not values:
        return f"{name} = str"
    return f"{name} = Literal[{', '.join(_quote(v) for v in values)}]"


class _Writer:
    """Accumulates indented source lines."""

    def __init__(self, indent: str) -> None:
        self.indent = indent
        self.lines: List[str] = []

    def line(self, level: int, text: str) -> None:
        self.lines.append(f"{self.indent * level}{text}")

    def edge(self, level: int, edge: Transition, prefix: str = "") -> None:
        self.line(level, f"{prefix}Transition(")
        if edge.target is not None:
            self.line(level + 1, f"target={_quote(edge.target)},")
        if edge.guard is not None:
            self.line(level + 1, f"guard={GUARD_STUB},  # TODO: {_hint(edge.guard, '[GUARD: guard]')}")
        if edge.action is not None:
            self.line(level + 1, f"action={ACTION_STUB},  # TODO: {_hint(edge.action, '[ACTION: action]')}")
        self.line(level, "),")

    def definition(self, level: int, event: str, definition: TransitionDefinition) -> None:
        key = f"{_quote(event)}: "
        if isinstance(definition, str):
            self.line(level, f"{key}{_quote(definition)},")
        elif isinstance(definition, Transition):
            if definition.target is not None and definition.guard is None and definition.action is None:
                self.line(level, f"{key}{_quote(definition.target)},")
            else:
                self.edge(level, definition, prefix=key)
        else:
            self.line(level, f"{key}(")
            for edge in definition:
                self.edge(level + 1, edge)
            self.line(level, "),")


def _discover(config: FSMConfig) -> Dict[str, List[str]]:
    states: Dict[str, None] = {config.initial: None}
    events: Dict[str, None] = {}
    for name, state_config in config.states.items():
        states[name] = None
        for event, definition in (state_config.on or {}).items():
            events[event] = None
            if isinstance(definition, str):
                states[definition] = None
            elif isinstance(definition, Transition):
                if definition.target is not None:
                    states[definition.target] = None
            else:
                for edge in definition:
                    if edge.target is not None:
                        states[edge.target] = None
    return {"states": list(states), "events": list(events)}


def to_python(
    source: Union[str, FSMConfig, Mapping[str, Any]],
    indent: str = "    ",
    config_name: str = "config",
) -> str:
    """
    Generate a Python module skeleton for a machine.

    The output declares ``States`` and ``Events`` literal aliases, a
    ``Context`` placeholder and an :class:`FSMConfig` assignment mirroring the
    graph. Guards are stubbed as ``lambda ctx, payload: True`` and actions as
    ``lambda ctx, payload: None``, each followed by a ``# TODO:`` comment with
    the original marker hint.

    :param source: Mermaid text, an :class:`FSMConfig` or a config mapping.
    :param indent: Indentation unit of the generated code.
    :param config_name: Name of the generated config variable.
    :raises ParseError: If ``source`` is diagram text that cannot be decoded.
    """
    config = from_mermaid(source) if isinstance(source, str) else as_config(source)
    found = _discover(config)

    w = _Writer(indent)
    w.line(0, "from typing import Any, Dict, Literal")
    w.line(0, "")
    w.line(0, "from flatstate import FSMConfig, StateConfig, Transition")
    w.line(0, "")
    w.line(0, _literal_alias("States", found["states"]))
    w.line(0, _literal_alias("Events", found["events"]))
    w.line(0, "Context = Dict[str, Any]  # TODO: define your context")
    w.line(0, "")
    w.line(0, f"{config_name} = FSMConfig(")
    w.line(1, f"initial={_quote(config.initial)},")
    w.line(1, "# context=lambda: {},  # TODO: initial context")
    w.line(1, "states={")
    for name, state_config in config.states.items():
        w.line(2, f"{_quote(name)}: StateConfig(")
        if state_config.on:
            w.line(3, "on={")
            for event, definition in state_config.on.items():
                w.definition(4, event, definition)
            w.line(3, "},")
        else:
            w.line(3, "on={},")
        w.line(2, "),")
    w.line(1, "},")
    w.line(0, ")")
    return "\n".join(w.lines) + "\n"
