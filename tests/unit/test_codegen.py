# tests/unit/test_codegen.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import pytest

from flatstate.core.config import FSMConfig, StateConfig, Transition
from flatstate.core.errors import ParseError
from flatstate.core.state_machine import StateMachine
from flatstate.diagrams.codegen import to_python

DIAGRAM = """
stateDiagram-v2
[*] --> IDLE
IDLE --> LOADING: load
LOADING --> SUCCESS: resolve [guard hasData]
"""

EXPECTED = '''from typing import Any, Dict, Literal

from flatstate import FSMConfig, StateConfig, Transition

States = Literal["IDLE", "LOADING", "SUCCESS"]
Events = Literal["load", "resolve"]
Context = Dict[str, Any]  # TODO: define your context

config = FSMConfig(
    initial="IDLE",
    # context=lambda: {},  # TODO: initial context
    states={
        "IDLE": StateConfig(
            on={
                "load": "LOADING",
            },
        ),
        "LOADING": StateConfig(
            on={
                "resolve": Transition(
                    target="SUCCESS",
                    guard=lambda ctx, payload: True,  # TODO: [GUARD: [guard hasData]]
                ),
            },
        ),
        "SUCCESS": StateConfig(
            on={},
        ),
    },
)
'''


def _execute(source: str) -> dict:
    namespace: dict = {}
    exec(compile(source, "<generated>", "exec"), namespace)
    return namespace


def test_generates_expected_skeleton():
    assert to_python(DIAGRAM) == EXPECTED


def test_generated_code_runs():
    namespace = _execute(to_python(DIAGRAM))
    config = namespace["config"]
    assert isinstance(config, FSMConfig)
    fsm = StateMachine(config)
    assert fsm.transition("load") == "LOADING"
    assert fsm.transition("resolve") == "SUCCESS"


def test_custom_indent_and_name():
    source = to_python(DIAGRAM, indent="\t", config_name="machine_config")
    assert "machine_config = FSMConfig(\n" in source
    assert '\tinitial="IDLE",\n' in source
    assert "machine_config" in _execute(source)


def test_sequences_internal_edges_and_actions():
    source = to_python(
        """stateDiagram-v2
        [*] --> FETCHING
        FETCHING --> RETRYING: reject [guard 1]
        FETCHING --> FAILED: reject [guard 2] / (action log error)
        FETCHING --> FETCHING: progress / (action internal)
        FETCHING --> IDLE: * (any)
        """
    )
    assert '"reject": (\n' in source
    assert "# TODO: [GUARD: [guard 2]]" in source
    assert "action=lambda ctx, payload: None,  # TODO: [ACTION: (action log error)]" in source
    assert "# TODO: [ACTION: action]" in source
    assert '"*": "IDLE",' in source
    assert 'Events = Literal["reject", "progress", "*"]' in source

    config = _execute(source)["config"]
    assert [edge.target for edge in config.states["FETCHING"].on["reject"]] == ["RETRYING", "FAILED"]
    assert config.states["FETCHING"].on["progress"].target is None


def test_accepts_config_with_real_callables():
    config = FSMConfig(
        initial="A",
        states={"A": StateConfig(on={"go": Transition(target="B", guard=lambda c, p: True)}), "B": StateConfig(on={})},
    )
    source = to_python(config)
    assert "guard=lambda ctx, payload: True,  # TODO: [GUARD: guard]" in source


def test_no_events_falls_back_to_str():
    source = to_python({"initial": "A", "states": {"A": {"on": {}}}})
    assert "Events = str" in source
    assert 'States = Literal["A"]' in source


def test_invalid_diagram_raises():
    with pytest.raises(ParseError):
        to_python("graph TD\nA --> B")
