"""
Configuration for the built-in sinks.
"""

from __future__ import annotations

import codecs
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from txn_file_sink.errors import ConfigurationError
from txn_file_sink.polling import PollPolicy
from txn_file_sink.records import (
    DEFAULT_LINE_TERMINATOR,
    DEFAULT_MAX_PREVIEW_BYTES,
    DEFAULT_SEPARATOR,
    epoch_millis,
)
from txn_file_sink.validation import coerce_number, validate_context_minimal

DECODE_ERROR_POLICIES = ("strict", "replace", "backslashreplace")


def _poll_from_context(context: Mapping[str, Any]) -> PollPolicy:
    defaults = PollPolicy()
    return PollPolicy(
        timeout=coerce_number("poll.timeout", context.get("poll.timeout", defaults.timeout)),
        initial_backoff=coerce_number(
            "poll.backoff.initial",
            context.get("poll.backoff.initial", defaults.initial_backoff),
        ),
        max_backoff=coerce_number(
            "poll.backoff.max", context.get("poll.backoff.max", defaults.max_backoff)
        ),
    )


@dataclass
class FileSinkConfig:
    """
    Configuration for FileEventSink.

    Args:
        filename: Path of the file records are appended to (required).
            The parent directory must already exist.
        encoding: Codec used to decode payloads and encode records (default "utf-8").
            Codecs that emit a byte-order mark (utf-16, utf-32, utf-8-sig) are rejected.
        decode_errors: Codec error policy for payload decoding (default "strict").
            With "strict", undecodable payloads fail delivery and are rolled back.
        separator: Literal between payload text and timestamp (default ":").
        line_terminator: Appended after every record (default "\\r\\n").
        poll: Wait budget and backoff used while waiting for an event.
        time_source: Callable returning epoch milliseconds. Injectable for tests.
    """

    filename: str
    encoding: str = "utf-8"
    decode_errors: str = "strict"
    separator: str = DEFAULT_SEPARATOR
    line_terminator: str = DEFAULT_LINE_TERMINATOR
    poll: PollPolicy = field(default_factory=PollPolicy)
    time_source: Callable[[], int] = epoch_millis

    def __post_init__(self) -> None:
        if not isinstance(self.filename, str) or not self.filename.strip():
            raise ConfigurationError(f"filename must be a non-empty string, got {self.filename!r}")
        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ConfigurationError(f"Unknown encoding: {self.encoding!r}") from None
        try:
            bom = "".encode(self.encoding)
        except LookupError:
            raise ConfigurationError(f"Not a text encoding: {self.encoding!r}") from None
        if bom:
            # Records are encoded one at a time, so a BOM would precede every line.
            raise ConfigurationError(
                f"Encoding {self.encoding!r} writes a byte-order mark; "
                "use an endian-specific variant such as 'utf-16-le'"
            )
        if self.decode_errors not in DECODE_ERROR_POLICIES:
            raise ConfigurationError(
                f"Unsupported decode_errors: {self.decode_errors!r} "
                f"(expected one of {list(DECODE_ERROR_POLICIES)})"
            )

    @classmethod
    def from_context(cls, context: Mapping[str, Any]) -> FileSinkConfig:
        """
        Build a config from a flat host property map.

        Recognised keys: ``filename``, ``encoding``, ``decode.errors``,
        ``separator``, ``poll.timeout``, ``poll.backoff.initial``,
        ``poll.backoff.max``. Unknown keys are ignored.

        Raises:
            ConfigurationError: If ``filename`` is missing or any value is invalid.
        """
        validate_context_minimal(context, required=("filename",))
        return cls(
            filename=context["filename"],
            encoding=context.get("encoding", "utf-8"),
            decode_errors=context.get("decode.errors", "strict"),
            separator=context.get("separator", DEFAULT_SEPARATOR),
            poll=_poll_from_context(context),
        )


@dataclass
class LoggerSinkConfig:
    """
    Configuration for LoggerEventSink.

    Args:
        logger_name: Name for the logger (default "txn_file_sink.events").
        level: Log level as string or int (default "INFO").
        max_bytes_to_log: Payload bytes included in each log line (default 16).
        poll: Wait budget and backoff used while waiting for an event.
    """

    logger_name: str = "txn_file_sink.events"
    level: str | int = "INFO"
    max_bytes_to_log: int = DEFAULT_MAX_PREVIEW_BYTES
    poll: PollPolicy = field(default_factory=PollPolicy)

    def __post_init__(self) -> None:
        if self.max_bytes_to_log < 0:
            raise ConfigurationError(
                f"max_bytes_to_log must be >= 0, got {self.max_bytes_to_log!r}"
            )
        self.level = self.resolve_level(self.level)

    @staticmethod
    def resolve_level(level: str | int) -> int:
        """Convert level string to int if needed."""
        if isinstance(level, int):
            return level
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ConfigurationError(f"Unknown log level: {level!r}")
        return resolved

    @classmethod
    def from_context(cls, context: Mapping[str, Any]) -> LoggerSinkConfig:
        """Build a config from a flat host property map."""
        validate_context_minimal(context, required=())
        return cls(
            logger_name=context.get("logger.name", "txn_file_sink.events"),
            level=context.get("level", "INFO"),
            max_bytes_to_log=int(
                coerce_number(
                    "max.bytes.to.log",
                    context.get("max.bytes.to.log", DEFAULT_MAX_PREVIEW_BYTES),
                )
            ),
            poll=_poll_from_context(context),
        )
