"""
Output record helpers.

This module turns event payloads into text for the file sink and into
log-safe previews for the logger sink.
"""

import time

from txn_file_sink.events import Event

DEFAULT_SEPARATOR = ":"
DEFAULT_LINE_TERMINATOR = "\r\n"
DEFAULT_MAX_PREVIEW_BYTES = 16


def epoch_millis() -> int:
    """Return the current time as integer milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def decode_body(event: Event, encoding: str = "utf-8", errors: str = "strict") -> str:
    """
    Decode an event payload as text.

    Args:
        event: The event to decode.
        encoding: Codec name (default utf-8).
        errors: Codec error policy. ``strict`` raises UnicodeDecodeError.

    Returns:
        The decoded payload.
    """
    return event.body.decode(encoding, errors)


def format_record(
    text: str,
    millis: int,
    separator: str = DEFAULT_SEPARATOR,
    terminator: str = DEFAULT_LINE_TERMINATOR,
) -> str:
    """
    Build one output line: ``<text><separator><millis><terminator>``.

    Args:
        text: Decoded payload.
        millis: Timestamp in epoch milliseconds.
        separator: Literal placed between payload and timestamp.
        terminator: Line terminator.

    Returns:
        The record, ready to be encoded and appended.
    """
    return f"{text}{separator}{millis}{terminator}"


def summarize_body(body: bytes, max_bytes: int = DEFAULT_MAX_PREVIEW_BYTES) -> str:
    """
    Return a short printable preview of a payload.

    Bytes beyond ``max_bytes`` are dropped and the total size is appended.
    Undecodable bytes are shown as backslash escapes.

    Args:
        body: Raw payload.
        max_bytes: Maximum number of payload bytes to show.

    Returns:
        A single-line preview string.
    """
    head = body[:max_bytes].decode("utf-8", "backslashreplace")
    head = head.replace("\r", "\\r").replace("\n", "\\n")
    if len(body) > max_bytes:
        return f"{head}... ({len(body)} bytes)"
    return head
