"""
Logging sink for channel events.

Logs one line per event using Python logging. Handy for debugging a
pipeline before pointing it at a real destination.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from txn_file_sink.channel import Channel
from txn_file_sink.config import LoggerSinkConfig
from txn_file_sink.events import Event, Status
from txn_file_sink.records import summarize_body
from txn_file_sink.sinks._lifecycle import ChannelSink


class LoggerEventSink(ChannelSink):
    """
    Sink that emits events via Python logging.

    Each event becomes a single log line with its headers and a truncated
    body preview. Records carry ``extra={"sink_event": True}`` for filtering.

    Args:
        channel: Channel to drain.
        config: LoggerSinkConfig or host property map (default LoggerSinkConfig()).
        name: Name used in logs (default "logger-sink").

    Example:
        sink = LoggerEventSink(channel, {"level": "INFO", "max.bytes.to.log": "32"})
        sink.process()
    """

    def __init__(
        self,
        channel: Channel | None = None,
        config: LoggerSinkConfig | Mapping[str, Any] | None = None,
        *,
        name: str = "logger-sink",
    ) -> None:
        super().__init__(channel, name)
        self.configure(config if config is not None else LoggerSinkConfig())

    def configure(self, config: LoggerSinkConfig | Mapping[str, Any]) -> None:
        if not isinstance(config, LoggerSinkConfig):
            config = LoggerSinkConfig.from_context(config)
        self._config = config
        self._logger = logging.getLogger(config.logger_name)
        self._configured = True

    @property
    def logger_name(self) -> str:
        """Return the logger name."""
        return self._logger.name

    @property
    def level(self) -> int:
        """Return the logging level."""
        return self._config.level

    def process(self) -> Status:
        return self._drain(self._deliver, self._config.poll)

    def _deliver(self, event: Event) -> None:
        preview = summarize_body(event.body, self._config.max_bytes_to_log)
        self._logger.log(
            self._config.level,
            "Event: { headers:%s body:%s }",
            dict(event.headers),
            preview,
            extra={"sink_event": True},
        )
