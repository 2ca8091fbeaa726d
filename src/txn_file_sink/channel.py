"""
Transactional channel interface and an in-memory implementation.

A channel is the queue a sink drains. Every ``take()`` happens inside a
transaction: committing removes the taken events for good, rolling back
puts them back at the head of the queue so they are redelivered.
"""

from __future__ import annotations

import enum
import logging
import threading
from collections import deque
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from txn_file_sink.errors import ChannelError
from txn_file_sink.events import Event

_log = logging.getLogger(__name__)


class TransactionState(enum.Enum):
    NEW = "NEW"
    OPEN = "OPEN"
    COMMITTED = "COMMITTED"
    ROLLED_BACK = "ROLLED_BACK"
    CLOSED = "CLOSED"


@runtime_checkable
class Transaction(Protocol):
    """Handle scoping the events taken from one channel."""

    def begin(self) -> None:
        """Open the transaction."""
        ...

    def commit(self) -> None:
        """Make every take in this transaction permanent."""
        ...

    def rollback(self) -> None:
        """Return every event taken in this transaction to the channel."""
        ...

    def close(self) -> None:
        """Release the handle. Must be idempotent."""
        ...


@runtime_checkable
class Channel(Protocol):
    """
    Protocol for transactional event channels.

    Implementations own the events until a transaction commits. Examples:
    an in-memory queue, a durable file-backed queue, a broker client.
    """

    def get_transaction(self) -> Transaction:
        """Return a transaction handle bound to this channel."""
        ...

    def take(self) -> Event | None:
        """Take the next event, or return None if the channel is empty."""
        ...


class MemoryTransaction:
    """
    Transaction handle for :class:`MemoryChannel`.

    Not shared between threads; the channel hands each thread its own.
    """

    def __init__(self, channel: MemoryChannel) -> None:
        self._channel = channel
        self._state = TransactionState.NEW
        self._taken: list[Event] = []

    @property
    def state(self) -> TransactionState:
        """Return the current state."""
        return self._state

    @property
    def taken(self) -> tuple[Event, ...]:
        """Return the events taken and not yet committed or rolled back."""
        return tuple(self._taken)

    def begin(self) -> None:
        if self._state is not TransactionState.NEW:
            raise ChannelError(f"Cannot begin a transaction in state {self._state.value}")
        self._state = TransactionState.OPEN

    def commit(self) -> None:
        self._require_open("commit")
        self._channel._release(self._taken, requeue=False)
        self._taken = []
        self._state = TransactionState.COMMITTED

    def rollback(self) -> None:
        self._require_open("rollback")
        self._channel._release(self._taken, requeue=True)
        if self._taken:
            _log.debug("Rolled back %d event(s)", len(self._taken))
        self._taken = []
        self._state = TransactionState.ROLLED_BACK

    def close(self) -> None:
        if self._state is TransactionState.CLOSED:
            return
        if self._state is TransactionState.OPEN:
            _log.warning("Closing an open transaction; rolling back %d event(s)", len(self._taken))
            self.rollback()
        self._state = TransactionState.CLOSED

    def _record_take(self, event: Event) -> None:
        self._taken.append(event)

    def _require_open(self, operation: str) -> None:
        if self._state is not TransactionState.OPEN:
            raise ChannelError(f"Cannot {operation} a transaction in state {self._state.value}")


class MemoryChannel:
    """
    Thread-safe in-memory channel.

    Useful for tests, development and embedding a sink in-process. Each
    thread gets its own transaction from :meth:`get_transaction`, so several
    consumers can drain the same channel concurrently.

    Args:
        capacity: Maximum number of queued plus in-flight events (default 1000).
        transaction_capacity: Maximum takes per transaction (default 100).

    Example:
        channel = MemoryChannel()
        channel.put(Event(b"hello"))
    """

    def __init__(self, capacity: int = 1000, transaction_capacity: int = 100) -> None:
        if capacity < 1 or transaction_capacity < 1:
            raise ValueError("capacity and transaction_capacity must be positive")
        self._capacity = capacity
        self._transaction_capacity = transaction_capacity
        self._queue: deque[Event] = deque()
        self._in_flight = 0
        self._lock = threading.Lock()
        self._local = threading.local()

    def put(self, event: Event) -> None:
        """Append an event to the tail of the queue."""
        with self._lock:
            if len(self._queue) + self._in_flight >= self._capacity:
                raise ChannelError(f"Channel is full (capacity {self._capacity})")
            self._queue.append(event)

    def put_many(self, events: Iterable[Event]) -> None:
        """Append several events in order."""
        for event in events:
            self.put(event)

    def get_transaction(self) -> MemoryTransaction:
        """Return the calling thread's transaction, creating one if needed."""
        txn: MemoryTransaction | None = getattr(self._local, "transaction", None)
        if txn is None or txn.state is TransactionState.CLOSED:
            txn = MemoryTransaction(self)
            self._local.transaction = txn
        return txn

    def take(self) -> Event | None:
        txn: MemoryTransaction | None = getattr(self._local, "transaction", None)
        if txn is None or txn.state is not TransactionState.OPEN:
            raise ChannelError("take() requires an open transaction")
        if len(txn.taken) >= self._transaction_capacity:
            raise ChannelError(
                f"Transaction capacity of {self._transaction_capacity} take(s) exceeded"
            )
        with self._lock:
            if not self._queue:
                return None
            event = self._queue.popleft()
            self._in_flight += 1
        txn._record_take(event)
        return event

    def _release(self, events: list[Event], *, requeue: bool) -> None:
        with self._lock:
            if requeue:
                self._queue.extendleft(reversed(events))
            self._in_flight -= len(events)

    @property
    def size(self) -> int:
        """Return the number of queued events, excluding in-flight ones."""
        with self._lock:
            return len(self._queue)

    @property
    def in_flight(self) -> int:
        """Return the number of events taken by uncommitted transactions."""
        with self._lock:
            return self._in_flight

    def drain(self) -> list[Event]:
        """Remove and return every queued event without a transaction."""
        with self._lock:
            events = list(self._queue)
            self._queue.clear()
        return events

    def __len__(self) -> int:
        return self.size
