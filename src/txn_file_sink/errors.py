"""
Exception types raised by txn-file-sink.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from txn_file_sink.events import Event

# Faults that are never wrapped into DeliveryError. Any BaseException that
# is not an Exception (KeyboardInterrupt, SystemExit, GeneratorExit) is
# treated the same way.
ENVIRONMENT_FAULTS: tuple[type[BaseException], ...] = (MemoryError, RecursionError)


class SinkError(Exception):
    """Base class for all txn-file-sink errors."""


class ConfigurationError(SinkError):
    """Raised when sink configuration is missing or invalid."""


class ChannelError(SinkError):
    """Raised when a channel or transaction is used out of order."""


class DeliveryError(SinkError):
    """
    Raised when an event could not be delivered.

    The transaction that owned the event has been rolled back by the time
    this is raised, so the event is available for redelivery. The original
    failure is chained as ``__cause__``.

    Args:
        message: Human readable description.
        event: The event being delivered, if one had been taken.
    """

    def __init__(self, message: str, event: Event | None = None) -> None:
        super().__init__(message)
        self.event = event


def is_environment_fault(exc: BaseException) -> bool:
    """Return True if ``exc`` must propagate unwrapped."""
    return isinstance(exc, ENVIRONMENT_FAULTS) or not isinstance(exc, Exception)
