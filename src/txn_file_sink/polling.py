"""
Bounded poll-with-backoff for channels whose ``take()`` does not block.
"""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from txn_file_sink.channel import Channel
from txn_file_sink.errors import ConfigurationError
from txn_file_sink.events import Event


@dataclass(frozen=True)
class PollPolicy:
    """
    How long to wait for an event and how to back off between empty takes.

    Args:
        timeout: Total wait budget in seconds (default 0.5). Zero means a
            single take with no waiting.
        initial_backoff: First sleep after an empty take, in seconds.
        max_backoff: Upper bound for a single sleep, in seconds.
        multiplier: Growth factor applied after every empty take.
    """

    timeout: float = 0.5
    initial_backoff: float = 0.001
    max_backoff: float = 0.05
    multiplier: float = 2.0

    def __post_init__(self) -> None:
        for name in ("timeout", "initial_backoff", "max_backoff", "multiplier"):
            if not math.isfinite(getattr(self, name)):
                raise ConfigurationError(f"{name} must be finite, got {getattr(self, name)!r}")
        if self.timeout < 0:
            raise ConfigurationError(f"poll timeout must be >= 0, got {self.timeout!r}")
        if self.initial_backoff <= 0:
            raise ConfigurationError(
                f"initial backoff must be > 0, got {self.initial_backoff!r}"
            )
        if self.max_backoff < self.initial_backoff:
            raise ConfigurationError("max backoff must be >= initial backoff")
        if self.multiplier < 1:
            raise ConfigurationError(f"backoff multiplier must be >= 1, got {self.multiplier!r}")


def poll(
    channel: Channel,
    policy: PollPolicy,
    stop_event: threading.Event | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> Event | None:
    """
    Take from ``channel`` until an event arrives or the budget runs out.

    Sleeps go through ``stop_event.wait`` so a stop request cuts the wait
    short.

    Returns:
        The event, or None if the budget elapsed or a stop was requested.
    """
    waiter = stop_event if stop_event is not None else threading.Event()
    deadline = clock() + policy.timeout
    delay = policy.initial_backoff

    while True:
        event = channel.take()
        if event is not None:
            return event
        if waiter.is_set():
            return None
        remaining = deadline - clock()
        if remaining <= 0:
            return None
        if waiter.wait(min(delay, remaining)):
            return None
        delay = min(delay * policy.multiplier, policy.max_backoff)
