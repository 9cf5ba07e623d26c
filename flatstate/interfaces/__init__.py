"""
Interfaces package: shared type aliases and capability protocols.
"""

from .protocols import LoggerProtocol
from .types import (
    WILDCARD,
    ActionExec,
    EventID,
    GuardCheck,
    HookFunc,
    StateID,
    SubscriberFunc,
    Unsubscribe,
    ValidationResult,
)

__all__ = [
    "LoggerProtocol",
    "WILDCARD",
    "ActionExec",
    "EventID",
    "GuardCheck",
    "HookFunc",
    "StateID",
    "SubscriberFunc",
    "Unsubscribe",
    "ValidationResult",
]
