# flatstate/core/actions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any, Optional, Sequence, Tuple

from flatstate.interfaces.types import HookFunc


class PlaceholderAction:
    """
    Inert stand-in for an action that was reconstructed from diagram text.

    Calling it does nothing. ``notation`` holds the original action clause
    (e.g. ``(action save to db)``) or ``None`` for a bare ``(action)``.
    """

    __slots__ = ("notation",)

    def __init__(self, notation: Optional[str] = None) -> None:
        self.notation = notation

    def __call__(self, context: Any, payload: Any = None) -> None:
        return None

    @property
    def hint(self) -> str:
        """Human readable description, e.g. ``[ACTION: (action save to db)]``."""
        return f"[ACTION: {self.notation or 'action'}]"

    def __repr__(self) -> str:
        return f"PlaceholderAction({self.notation!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PlaceholderAction):
            return NotImplemented
        return self.notation == other.notation

    def __hash__(self) -> int:
        return hash((PlaceholderAction, self.notation))


class _HookChain:
    """
    Internal callable running several lifecycle hooks in order.
    """

    def __init__(self, hooks: Sequence[HookFunc]) -> None:
        self.hooks: Tuple[HookFunc, ...] = tuple(hooks)

    def __call__(self, context: Any, payload: Any = None) -> None:
        for hook in self.hooks:
            hook(context, payload)

    def __repr__(self) -> str:
        return f"_HookChain({list(self.hooks)!r})"


def compose_hooks(hooks: Sequence[HookFunc]) -> Optional[HookFunc]:
    """
    Combine hooks into one callable running them in sequence.

    :param hooks: Hooks in the order they should run.
    :return: ``None`` for no hooks, the hook itself for one, otherwise a chain.
    """
    if not hooks:
        return None
    if len(hooks) == 1:
        return hooks[0]
    return _HookChain(hooks)
