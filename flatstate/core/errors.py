# flatstate/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, Dict, List, Optional


class FSMError(Exception):
    """
    Base exception class for errors raised by the flatstate library.

    :param message: Human readable description of the failure.
    :param details: Optional structured data describing the failure.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(FSMError):
    """
    Raised when a machine configuration is structurally invalid: a state is
    missing, a state has no ``on`` mapping, a transition targets an unknown
    state, fragments cannot be composed, and so on.

    Configuration errors are always raised, independent of the ``assert_``
    flag passed to :meth:`StateMachine.transition`.
    """

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        validation_errors: Optional[List[Any]] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.component = component
        self.validation_errors = validation_errors or []


class InvalidTransitionError(FSMError):
    """
    Raised when an event has no matching transition from the current state,
    either because neither the event nor the wildcard is defined or because
    every guard of the resolved definition rejected it.
    """

    def __init__(
        self,
        message: str,
        source_state: Optional[str] = None,
        event: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.source_state = source_state
        self.event = event


class ParseError(FSMError):
    """
    Raised when diagram text cannot be decoded into a configuration, i.e. the
    header or the initial-state line is missing.
    """
