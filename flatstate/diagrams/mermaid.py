# flatstate/diagrams/mermaid.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple, Union

from flatstate.core.actions import PlaceholderAction
from flatstate.core.config import FSMConfig, StateConfig, Transition, TransitionDefinition, as_config
from flatstate.core.errors import ParseError
from flatstate.core.guards import PlaceholderGuard
from flatstate.interfaces.types import WILDCARD, EventID, StateID

logger = logging.getLogger(__name__)

HEADER = "stateDiagram-v2"
INDENT = "    "
WILDCARD_LABEL = "* (any)"
INTERNAL_ACTION = "(action internal)"

_INITIAL_RE = re.compile(r"^\[\*\]\s*-->\s*(\w+)$")
_TRANSITION_RE = re.compile(r"^(\w+)\s*-->\s*(\w+):\s*(.+)$")
_ACTION_RE = re.compile(r"\s*/\s*\((action(?:\s+[^)]*)?)\)$")
_GUARD_RE = re.compile(r"\s*\[(guard(?:\s+[^\]]+)?|guarded)\]$")

# Mermaid lines with no meaning for a flat machine.
_SKIP_RES = (
    re.compile(r"^%%"),
    re.compile(r"^direction\s"),
    re.compile(r"^(classDef|class|style)\s"),
    re.compile(r"^state\s+[\"']"),
    re.compile(r"^state\s+\w+\s*\{"),
    re.compile(r"^note\s"),
    re.compile(r"-->\s*\[\*\]\s*$"),
)


class ParsedLabel(NamedTuple):
    """Structured form of a transition label such as ``pay [guard ok] / (action charge)``."""

    event: EventID
    has_guard: bool = False
    guard_notation: Optional[str] = None
    has_action: bool = False
    is_internal: bool = False
    action_notation: Optional[str] = None


def parse_label(label: str) -> ParsedLabel:
    """
    Split a label into event, guard clause and action clause.

    The action clause must come last, the guard clause right before it::

        parse_label("reject [guard 1] / (action log)")
        # ParsedLabel(event='reject', has_guard=True, guard_notation='[guard 1]',
        #             has_action=True, is_internal=False, action_notation='(action log)')

    ``* (any)`` is normalized to the ``"*"`` wildcard.
    """
    event = label.strip()
    has_guard = has_action = is_internal = False
    guard_notation = action_notation = None

    action_match = _ACTION_RE.search(event)
    if action_match:
        has_action = True
        content = action_match.group(1)
        is_internal = content == "action internal"
        if content not in ("action", "action internal"):
            action_notation = f"({content})"
        event = event[: action_match.start()].strip()

    guard_match = _GUARD_RE.search(event)
    if guard_match:
        has_guard = True
        guard_notation = guard_match.group(0).strip()
        event = event[: guard_match.start()].strip()

    if event == WILDCARD_LABEL:
        event = WILDCARD

    return ParsedLabel(event, has_guard, guard_notation, has_action, is_internal, action_notation)


def _is_skipped(line: str) -> bool:
    if line in ("{", "}"):
        return True
    return any(pattern.search(line) for pattern in _SKIP_RES)


def _build_edge(source: StateID, target: StateID, parsed: ParsedLabel) -> Transition:
    guard = PlaceholderGuard(parsed.guard_notation) if parsed.has_guard else None
    action = PlaceholderAction(parsed.action_notation) if parsed.has_action else None
    if source == target and parsed.is_internal:
        return Transition(guard=guard, action=action)
    return Transition(target=target, guard=guard, action=action)


def _collapse(edges: List[Transition]) -> TransitionDefinition:
    if len(edges) > 1:
        return tuple(edges)
    edge = edges[0]
    if edge.target is not None and edge.guard is None and edge.action is None:
        return edge.target
    return edge


def from_mermaid(diagram: str) -> FSMConfig:
    """
    Decode a Mermaid ``stateDiagram-v2`` into a runnable :class:`FSMConfig`.

    Anything before the header (e.g. YAML front matter) and any line that is
    not an initial-state or labelled transition line is ignored. Guards and
    actions become :class:`PlaceholderGuard` / :class:`PlaceholderAction`
    instances carrying the original marker text. Every target state and the
    initial state are present in ``states``, with an empty ``on`` mapping if
    they have no outgoing edges.

    :param diagram: Diagram text.
    :raises ParseError: If the header or the ``[*] --> State`` line is missing.
    """
    lines = diagram.splitlines()
    start = next((i for i, line in enumerate(lines) if line.strip().startswith(HEADER)), None)
    if start is None:
        raise ParseError(f'Invalid mermaid diagram: must contain "{HEADER}"')

    initial: Optional[StateID] = None
    edges: Dict[StateID, Dict[EventID, List[Transition]]] = {}
    targets: List[StateID] = []

    for number, raw in enumerate(lines[start + 1 :], start=start + 2):
        line = raw.strip()
        if not line or _is_skipped(line):
            continue

        initial_match = _INITIAL_RE.match(line)
        if initial_match:
            initial = initial_match.group(1)
            continue

        transition_match = _TRANSITION_RE.match(line)
        if transition_match is None:
            logger.debug("Ignoring mermaid line %d: %r", number, line)
            continue

        source, target, label = transition_match.groups()
        parsed = parse_label(label)
        if not parsed.event:
            logger.debug("Ignoring mermaid line %d without event: %r", number, line)
            continue
        edge = _build_edge(source, target, parsed)
        edges.setdefault(source, {}).setdefault(parsed.event, []).append(edge)
        if edge.target is not None:
            targets.append(edge.target)

    if initial is None:
        raise ParseError(
            "Invalid mermaid diagram: no initial state found ([*] --> State)",
            details={"lines": len(lines)},
        )

    states: Dict[StateID, StateConfig] = {
        source: StateConfig(on={event: _collapse(found) for event, found in by_event.items()})
        for source, by_event in edges.items()
    }
    for name in [initial, *targets]:
        if name not in states:
            states[name] = StateConfig(on={})

    return FSMConfig(initial=initial, states=states)


def _guard_marker(edge: Transition, position: Optional[int]) -> Optional[str]:
    if edge.guard is None:
        return None
    if isinstance(edge.guard, PlaceholderGuard) and edge.guard.notation:
        return edge.guard.notation
    return f"[guard {position}]" if position is not None else "[guarded]"


def _action_marker(edge: Transition) -> Optional[str]:
    if edge.is_internal:
        return INTERNAL_ACTION
    if edge.action is None:
        return None
    if isinstance(edge.action, PlaceholderAction) and edge.action.notation:
        return edge.action.notation
    return "(action)"


def _edge_lines(source: StateID, event: EventID, definition: TransitionDefinition) -> List[str]:
    if isinstance(definition, str):
        pairs: List[Tuple[Transition, Optional[int]]] = [(Transition(target=definition), None)]
    elif isinstance(definition, Transition):
        pairs = [(definition, None)]
    else:
        pairs = [(edge, index) for index, edge in enumerate(definition, start=1)]

    event_label = WILDCARD_LABEL if event == WILDCARD else event
    out = []
    for edge, position in pairs:
        label = event_label
        guard = _guard_marker(edge, position)
        if guard:
            label += f" {guard}"
        action = _action_marker(edge)
        if action:
            label += f" / {action}"
        out.append(f"{INDENT}{source} --> {edge.target or source}: {label}")
    return out


def to_mermaid(config: Union[FSMConfig, Mapping[str, Any]]) -> str:
    """
    Encode a config as a Mermaid ``stateDiagram-v2``.

    Example output::

        stateDiagram-v2
            [*] --> OFF
            OFF --> ON: start
            ON --> OFF: stop

    States and events are written in config order, one line per edge. Hooks
    and context have no diagram representation and are left out.
    """
    config = as_config(config)
    lines = [HEADER, f"{INDENT}[*] --> {config.initial}"]
    for source, state_config in config.states.items():
        for event, definition in (state_config.on or {}).items():
            lines.extend(_edge_lines(source, event, definition))
    return "\n".join(lines) + "\n"
