# flatstate/core/guards.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import copy
from typing import Any, Optional

from flatstate.core.errors import ConfigurationError
from flatstate.interfaces.types import GuardCheck


class PlaceholderGuard:
    """
    Inert stand-in for a guard that was reconstructed from diagram text.

    It always permits the transition. The original marker text is kept in
    ``notation`` so the guard can be written back to a diagram and used as a
    hint by the code generator.
    """

    __slots__ = ("notation",)

    def __init__(self, notation: Optional[str] = None) -> None:
        self.notation = notation

    def __call__(self, context: Any, payload: Any = None) -> bool:
        return True

    @property
    def hint(self) -> str:
        """Human readable description, e.g. ``[GUARD: [guard amount < price]]``."""
        return f"[GUARD: {self.notation or 'guarded'}]"

    def __repr__(self) -> str:
        return f"PlaceholderGuard({self.notation!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PlaceholderGuard):
            return NotImplemented
        return self.notation == other.notation

    def __hash__(self) -> int:
        return hash((PlaceholderGuard, self.notation))


def snapshot_context(context: Any) -> Any:
    """
    Return a deep copy of ``context`` for guard evaluation.

    Deep-copy support is a precondition on context values; a context that
    cannot be copied cannot be guarded safely.

    :raises ConfigurationError: If the context cannot be deep-copied.
    """
    try:
        return copy.deepcopy(context)
    except Exception as e:
        raise ConfigurationError(
            f"Context of type {type(context).__name__} cannot be deep-copied for guard evaluation: {e}",
            "context",
        ) from e


class _GuardEvaluator:
    """
    Internal helper evaluating the guards of one resolution.

    Every guard gets its own deep copy of the context, taken only when the
    guard is actually called, so a guard that mutates its argument cannot
    change what later guards of the same sequence see.
    """

    def __init__(self, context: Any, payload: Any) -> None:
        self._context = context
        self._payload = payload

    def passes(self, guard: Optional[GuardCheck]) -> bool:
        """
        :param guard: Guard to evaluate; ``None`` always passes.
        :return: The truthiness of the guard's result.
        """
        if guard is None:
            return True
        return bool(guard(snapshot_context(self._context), self._payload))
