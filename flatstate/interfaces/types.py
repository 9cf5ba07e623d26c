# flatstate/interfaces/types.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, Callable, Dict, NamedTuple

StateID = str
EventID = str

# Reserved event key matched when no specific event entry exists.
WILDCARD: EventID = "*"


class ValidationResult(NamedTuple):
    severity: str
    message: str
    context: Dict[str, Any]


# Callback Types
GuardCheck = Callable[[Any, Any], bool]
ActionExec = Callable[[Any, Any], None]
HookFunc = Callable[[Any, Any], None]
SubscriberFunc = Callable[[Any], None]
Unsubscribe = Callable[[], None]
