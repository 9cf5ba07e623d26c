"""flatstate: embeddable synchronous finite state machine

This package provides a small, declarative finite state machine engine along
with a Mermaid diagram codec and a configuration composer.

Responsibilities:
    - Transition resolution with ordered guards and wildcard fallback
    - Internal and external transition execution with lifecycle hooks
    - Synchronous change notification to subscribers
    - Mermaid stateDiagram-v2 encoding and decoding
    - Python code skeleton generation from diagrams
    - Composition of partial configuration fragments

Interactions:
    - Client code through the public API re-exported here
    - Logging system for diagnostics (debug only, opt-in per machine)

Cross-cutting Concerns:
    Threading:
        - Machines are single-threaded and fully synchronous
        - No locks, timers or queues are used

    Error Handling:
        - Structured error hierarchy rooted at FSMError
        - Exceptions from user guards, actions, hooks and subscribers propagate

    Logging:
        - Module loggers under the "flatstate" namespace
        - NullHandler installed on the package logger
"""

import logging

from flatstate.core.actions import PlaceholderAction, compose_hooks
from flatstate.core.compose import (
    ConflictPolicy,
    ContextPolicy,
    HookPolicy,
    TransitionPolicy,
    compose_fsm_config,
)
from flatstate.core.config import ConfigFragment, FSMConfig, StateConfig, Transition
from flatstate.core.errors import ConfigurationError, FSMError, InvalidTransitionError, ParseError
from flatstate.core.guards import PlaceholderGuard
from flatstate.core.hooks import StateSnapshot
from flatstate.core.state_machine import StateMachine
from flatstate.core.validations import Validator
from flatstate.diagrams.codegen import to_python
from flatstate.diagrams.mermaid import from_mermaid, parse_label, to_mermaid
from flatstate.interfaces.types import WILDCARD

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ConfigFragment",
    "ConfigurationError",
    "ConflictPolicy",
    "ContextPolicy",
    "FSMConfig",
    "FSMError",
    "HookPolicy",
    "InvalidTransitionError",
    "ParseError",
    "PlaceholderAction",
    "PlaceholderGuard",
    "StateConfig",
    "StateMachine",
    "StateSnapshot",
    "Transition",
    "TransitionPolicy",
    "Validator",
    "WILDCARD",
    "compose_fsm_config",
    "compose_hooks",
    "from_mermaid",
    "parse_label",
    "to_mermaid",
    "to_python",
]
