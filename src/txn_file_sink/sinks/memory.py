"""
In-memory sink for testing and development.
"""

from __future__ import annotations

from txn_file_sink.channel import Channel
from txn_file_sink.events import Event, Status
from txn_file_sink.polling import PollPolicy
from txn_file_sink.sinks._lifecycle import ChannelSink


class MemoryEventSink(ChannelSink):
    """
    Sink that stores committed events in a list.

    Useful for testing and development. Not intended for production use.
    """

    def __init__(
        self,
        channel: Channel | None = None,
        poll: PollPolicy | None = None,
        *,
        name: str = "memory-sink",
    ) -> None:
        super().__init__(channel, name)
        self.events: list[Event] = []
        self.configure(poll or PollPolicy())

    def configure(self, config: PollPolicy) -> None:
        """Set the poll policy."""
        self._poll = config
        self._configured = True

    def process(self) -> Status:
        # Staged per call; only kept once the transaction has committed.
        staged: list[Event] = []
        status = self._drain(staged.append, self._poll)
        if status is Status.READY:
            self.events.extend(staged)
        return status

    def clear(self) -> None:
        """Clear all stored events."""
        self.events.clear()

    def __len__(self) -> int:
        """Return the number of stored events."""
        return len(self.events)
