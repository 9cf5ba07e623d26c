# flatstate/interfaces/protocols.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class LoggerProtocol(Protocol):
    """
    Logger capability injected into a state machine.

    The method names match :class:`logging.Logger`, so any stdlib logger or
    ``LoggerAdapter`` satisfies the protocol.

    Runtime Invariants:
    - The state machine only ever calls ``debug``, and only when its
      per-instance debug flag is set.

    Error Handling:
    - Exceptions raised by a logger are not caught; they propagate to the
      caller of the machine operation that logged.
    """

    def debug(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        """Log a diagnostic message."""
        ...

    def info(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        """Log an informational message."""
        ...

    def warning(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        """Log a warning."""
        ...

    def error(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        """Log an error."""
        ...
