# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import pytest

from flatstate import FSMConfig, StateConfig, Transition


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "property: mark test as a property-based test")
    config.addinivalue_line("markers", "integration: mark test as an end-to-end scenario")


@pytest.fixture
def toggle_config() -> FSMConfig:
    """OFF <-> ON switch driven by start/stop."""
    return FSMConfig.from_dict(
        {
            "initial": "OFF",
            "states": {
                "ON": {"on": {"stop": "OFF"}},
                "OFF": {"on": {"start": "ON"}},
            },
        }
    )


@pytest.fixture
def fetch_retry_config() -> FSMConfig:
    """Fetch machine with a bounded retry loop."""

    def count_attempt(ctx, payload):
        ctx["attempts"] += 1

    def store_data(ctx, payload):
        ctx["data"] = payload

    def store_error(ctx, payload):
        ctx["error"] = payload

    return FSMConfig(
        initial="IDLE",
        context={"attempts": 0, "max": 2, "data": None, "error": None},
        states={
            "IDLE": StateConfig(on={"fetch": "FETCHING"}),
            "FETCHING": StateConfig(
                on_enter=count_attempt,
                on={
                    "resolve": Transition(target="SUCCESS"),
                    "reject": (
                        Transition(target="RETRYING", guard=lambda ctx, p: ctx["attempts"] < ctx["max"]),
                        Transition(target="FAILED", guard=lambda ctx, p: ctx["attempts"] >= ctx["max"]),
                    ),
                },
            ),
            "RETRYING": StateConfig(on={"retry": "FETCHING"}),
            "SUCCESS": StateConfig(on_enter=store_data, on={"reset": "IDLE"}),
            "FAILED": StateConfig(on_enter=store_error, on={"reset": "IDLE"}),
        },
    )


@pytest.fixture
def recorder():
    """Subscriber collecting every snapshot it receives."""

    class Recorder:
        def __init__(self):
            self.snapshots = []

        def __call__(self, snapshot):
            self.snapshots.append(snapshot)

        @property
        def states(self):
            return [s.current for s in self.snapshots]

    return Recorder()
