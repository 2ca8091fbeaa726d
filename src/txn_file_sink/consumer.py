"""
The single-event consume-transform-commit unit shared by every sink.

One call to :func:`drain_one` begins a transaction, waits a bounded time
for an event, hands it to ``deliver``, and commits. Any failure rolls the
transaction back so the channel redelivers the event. The transaction is
closed on every exit path.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from txn_file_sink.channel import Channel, Transaction
from txn_file_sink.counters import SinkCounter
from txn_file_sink.errors import DeliveryError, is_environment_fault
from txn_file_sink.events import Event, Status
from txn_file_sink.polling import PollPolicy, poll

_log = logging.getLogger(__name__)


def drain_one(
    channel: Channel,
    deliver: Callable[[Event], None],
    *,
    policy: PollPolicy,
    stop_event: threading.Event | None = None,
    counter: SinkCounter | None = None,
) -> Status:
    """
    Consume at most one event from ``channel``.

    Args:
        channel: Channel to take from.
        deliver: Persists one event. Must raise on failure.
        policy: Wait budget and backoff for the take.
        stop_event: Set by the host to cut the wait short.
        counter: Optional counters to update.

    Returns:
        Status.READY if an event was delivered and committed,
        Status.BACKOFF if no event arrived within the wait budget.

    Raises:
        DeliveryError: If delivery failed. The transaction was rolled back.
        MemoryError, RecursionError, and non-Exception BaseExceptions are
        re-raised unwrapped after rollback.
    """
    txn = channel.get_transaction()
    try:
        txn.begin()
    except BaseException:
        txn.close()
        raise
    if counter is not None:
        counter.increment("drain_attempts")

    event: Event | None = None
    try:
        event = poll(channel, policy, stop_event)
        if event is None:
            txn.rollback()
            if counter is not None:
                counter.increment("backoffs")
            return Status.BACKOFF

        deliver(event)
        txn.commit()
        if counter is not None:
            counter.increment("drain_successes")
        return Status.READY
    except BaseException as exc:
        _rollback_quietly(txn, exc)
        if counter is not None:
            counter.increment("rollbacks")
        if is_environment_fault(exc):
            raise
        if counter is not None:
            counter.increment("delivery_failures")
        _log.warning(
            "Delivery failed, transaction rolled back: %s: %s", type(exc).__name__, exc
        )
        raise DeliveryError(f"Failed to deliver event: {exc}", event=event) from exc
    finally:
        txn.close()


def _rollback_quietly(txn: Transaction, original: BaseException) -> None:
    """Roll back, keeping ``original`` as the error that propagates."""
    try:
        txn.rollback()
    except Exception as rollback_exc:
        _log.error(
            "Rollback failed after %s: %s",
            type(original).__name__,
            rollback_exc,
            exc_info=rollback_exc,
        )
