"""
File sink for channel events.

Appends one text line per committed event: ``<payload>:<epoch-millis>\\r\\n``.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any, BinaryIO

from txn_file_sink.channel import Channel
from txn_file_sink.config import FileSinkConfig
from txn_file_sink.events import Event, Status
from txn_file_sink.records import decode_body, format_record, summarize_body
from txn_file_sink.sinks._lifecycle import ChannelSink

_log = logging.getLogger(__name__)

# One lock per absolute path, shared by every sink in the process.
_path_locks: dict[str, threading.Lock] = {}
_path_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = os.path.abspath(path)
    with _path_locks_guard:
        return _path_locks.setdefault(key, threading.Lock())


def _write_record(f: BinaryIO, data: bytes) -> None:
    """Write ``data`` with a single call; a short write is an error."""
    written = f.write(data)
    if written != len(data):
        raise OSError(f"Short write: {written} of {len(data)} bytes")


def append_record(path: Path, data: bytes) -> None:
    """
    Append ``data`` to ``path`` as one unbuffered append-mode write.

    The file is created if absent; a missing parent directory raises
    FileNotFoundError. If the write fails the file is truncated back to its
    previous length so no partial record is left behind.

    Args:
        path: Target file.
        data: Encoded record.
    """
    with _lock_for(path):
        with open(path, mode="ab", buffering=0) as f:
            start = os.fstat(f.fileno()).st_size
            try:
                _write_record(f, data)
            except BaseException:
                _truncate(f, path, start)
                raise


def _truncate(f: BinaryIO, path: Path, size: int) -> None:
    try:
        os.ftruncate(f.fileno(), size)
    except OSError as exc:
        _log.error("Could not remove partial record from %s: %s", path, exc)


class FileEventSink(ChannelSink):
    """
    Sink that appends each event to a text file.

    An event is appended if and only if its transaction commits. Decode,
    open and write failures roll the transaction back and raise
    DeliveryError, leaving the event in the channel for redelivery. A
    persistent failure such as a missing directory therefore makes the
    channel redeliver the same event indefinitely.

    Thread-safe: sinks in the same process writing to the same path
    serialize on a shared lock, and each record is a single append-mode
    write for writers in other processes.

    Args:
        channel: Channel to drain. Can also be bound later with set_channel().
        config: FileSinkConfig or host property map. Can also be applied later
            with configure().
        name: Name used in logs (default "file-sink").

    Example:
        sink = FileEventSink(channel, {"filename": "/var/log/events.txt"})
        sink.start()
        status = sink.process()
    """

    def __init__(
        self,
        channel: Channel | None = None,
        config: FileSinkConfig | Mapping[str, Any] | None = None,
        *,
        name: str = "file-sink",
    ) -> None:
        super().__init__(channel, name)
        self._config: FileSinkConfig | None = None
        self._path: Path | None = None
        if config is not None:
            self.configure(config)

    def configure(self, config: FileSinkConfig | Mapping[str, Any]) -> None:
        """
        Apply configuration.

        Args:
            config: FileSinkConfig, or a property map with at least ``filename``.

        Raises:
            ConfigurationError: If the configuration is missing or invalid.
        """
        if not isinstance(config, FileSinkConfig):
            config = FileSinkConfig.from_context(config)
        self._config = config
        self._path = Path(config.filename)
        self._configured = True
        _log.debug("Sink %s configured with filename=%s", self.name, self._path)

    @property
    def config(self) -> FileSinkConfig | None:
        """Return the current configuration."""
        return self._config

    @property
    def path(self) -> Path | None:
        """Return the path to the output file."""
        return self._path

    def process(self) -> Status:
        """
        Consume at most one event and append it to the file.

        Returns:
            Status.READY when an event was appended and committed,
            Status.BACKOFF when none arrived within the poll timeout.

        Raises:
            DeliveryError: If the event could not be decoded or written.
            ConfigurationError: If the sink has no configuration or channel.
        """
        self._require_ready()
        return self._drain(self._deliver, self._config.poll)

    def _deliver(self, event: Event) -> None:
        cfg = self._config
        text = decode_body(event, cfg.encoding, cfg.decode_errors)
        record = format_record(text, cfg.time_source(), cfg.separator, cfg.line_terminator)
        append_record(self._path, record.encode(cfg.encoding))
        _log.debug("Sink %s appended event %s", self.name, summarize_body(event.body))

    def __enter__(self) -> FileEventSink:
        """Context manager entry - start the sink."""
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Context manager exit - stop the sink."""
        self.stop()
