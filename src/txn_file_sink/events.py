"""
Event and status types.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


class Status(enum.Enum):
    """Outcome of a single ``process()`` invocation."""

    READY = "READY"
    BACKOFF = "BACKOFF"


@dataclass(frozen=True)
class Event:
    """
    An opaque byte payload taken from a channel.

    Args:
        body: Raw payload bytes.
        headers: Optional string headers. Stored read-only.
    """

    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.body, (bytes, bytearray, memoryview)):
            raise TypeError(f"Event body must be bytes, got {type(self.body).__name__}")
        object.__setattr__(self, "body", bytes(self.body))
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @classmethod
    def from_text(
        cls,
        text: str,
        encoding: str = "utf-8",
        headers: Mapping[str, str] | None = None,
    ) -> Event:
        """Build an event by encoding ``text``."""
        return cls(body=text.encode(encoding), headers=headers or {})

    def __hash__(self) -> int:
        return hash((self.body, frozenset(self.headers.items())))

    def __len__(self) -> int:
        return len(self.body)
