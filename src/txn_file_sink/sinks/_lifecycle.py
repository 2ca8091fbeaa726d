"""
Lifecycle plumbing shared by the built-in sinks.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from txn_file_sink.channel import Channel
from txn_file_sink.consumer import drain_one
from txn_file_sink.counters import SinkCounter
from txn_file_sink.errors import ConfigurationError
from txn_file_sink.events import Event, Status
from txn_file_sink.polling import PollPolicy

_log = logging.getLogger(__name__)


class ChannelSink:
    """
    Holds the channel, stop flag and counters of a sink.

    Subclasses implement ``configure`` and ``_deliver`` and call
    :meth:`_drain` from ``process``.
    """

    def __init__(self, channel: Channel | None, name: str) -> None:
        self._channel = channel
        self._name = name
        self._stop_event = threading.Event()
        self._counter = SinkCounter()
        self._configured = False

    @property
    def name(self) -> str:
        """Return the sink name."""
        return self._name

    @property
    def channel(self) -> Channel | None:
        """Return the bound channel."""
        return self._channel

    @property
    def counter(self) -> SinkCounter:
        """Return the delivery counters."""
        return self._counter

    @property
    def stopped(self) -> bool:
        """Return True once stop() has been called."""
        return self._stop_event.is_set()

    def set_channel(self, channel: Channel) -> None:
        """Bind the channel this sink drains."""
        self._channel = channel

    def start(self) -> None:
        """Clear any earlier stop request."""
        self._require_ready()
        self._stop_event.clear()
        _log.info("Sink %s started", self._name)

    def stop(self) -> None:
        """Interrupt any wait in progress. While stopped, process() does not wait for events."""
        self._stop_event.set()
        _log.info("Sink %s stopped; counters=%s", self._name, self._counter.snapshot())

    def _require_ready(self) -> Channel:
        if not self._configured:
            raise ConfigurationError(f"Sink {self._name} has not been configured")
        if self._channel is None:
            raise ConfigurationError(f"Sink {self._name} has no channel")
        return self._channel

    def _drain(self, deliver: Callable[[Event], None], policy: PollPolicy) -> Status:
        channel = self._require_ready()
        return drain_one(
            channel,
            deliver,
            policy=policy,
            stop_event=self._stop_event,
            counter=self._counter,
        )
