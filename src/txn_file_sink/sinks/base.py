"""
Base sink interface for channel consumers.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from txn_file_sink.events import Status


@runtime_checkable
class EventSink(Protocol):
    """
    Protocol for sinks that drain a transactional channel.

    Implementations persist or forward one event per ``process()`` call.
    Examples: appending to a file, logging, in-memory collection.
    """

    @property
    def name(self) -> str:
        """Return the sink name used in logs."""
        ...

    def configure(self, config: Any | Mapping[str, Any]) -> None:
        """
        Apply configuration. Invalid configuration raises ConfigurationError here,
        never from ``process()``.

        Args:
            config: A config object or a flat host property map.
        """
        ...

    def start(self) -> None:
        """Prepare the sink for ``process()`` calls."""
        ...

    def stop(self) -> None:
        """Interrupt any wait in progress and stop accepting work."""
        ...

    def process(self) -> Status:
        """
        Consume at most one event.

        Returns:
            Status.READY when an event was committed, Status.BACKOFF otherwise.
        """
        ...
