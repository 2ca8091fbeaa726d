"""
Tests for drain_one and the in-memory sink.
"""

from __future__ import annotations

import threading

import pytest

from txn_file_sink import (
    DeliveryError,
    Event,
    MemoryChannel,
    MemoryEventSink,
    PollPolicy,
    SinkCounter,
    Status,
    drain_one,
    is_environment_fault,
)
from txn_file_sink.records import format_record, summarize_body


class TestDrainOne:
    def test_delivers_and_commits(self, channel: MemoryChannel, fast_poll: PollPolicy) -> None:
        delivered: list[Event] = []
        channel.put(Event(b"a"))
        counter = SinkCounter()

        status = drain_one(channel, delivered.append, policy=fast_poll, counter=counter)

        assert status is Status.READY
        assert [e.body for e in delivered] == [b"a"]
        assert channel.size == 0
        assert counter.snapshot() == {
            "drain_attempts": 1,
            "drain_successes": 1,
            "backoffs": 0,
            "delivery_failures": 0,
            "rollbacks": 0,
        }

    def test_failure_wrapped_and_chained(
        self, channel: MemoryChannel, fast_poll: PollPolicy
    ) -> None:
        channel.put(Event(b"a"))

        def fail(event: Event) -> None:
            raise ValueError("boom")

        with pytest.raises(DeliveryError, match="boom") as exc_info:
            drain_one(channel, fail, policy=fast_poll)

        assert isinstance(exc_info.value.__cause__, ValueError)
        assert channel.size == 1

    def test_backoff_does_not_deliver(self, channel: MemoryChannel, fast_poll: PollPolicy) -> None:
        delivered: list[Event] = []
        assert drain_one(channel, delivered.append, policy=fast_poll) is Status.BACKOFF
        assert delivered == []

    def test_handle_closed_when_begin_fails(self, fast_poll: PollPolicy) -> None:
        class BrokenTransaction:
            closed = False

            def begin(self) -> None:
                raise RuntimeError("channel unavailable")

            def close(self) -> None:
                self.closed = True

        txn = BrokenTransaction()

        class BrokenChannel:
            def get_transaction(self) -> BrokenTransaction:
                return txn

        with pytest.raises(RuntimeError, match="channel unavailable"):
            drain_one(BrokenChannel(), lambda event: None, policy=fast_poll)  # type: ignore[arg-type]
        assert txn.closed


class TestMemoryEventSink:
    def test_collects_committed_events(
        self, channel: MemoryChannel, fast_poll: PollPolicy
    ) -> None:
        channel.put_many([Event(b"1"), Event(b"2")])
        sink = MemoryEventSink(channel, fast_poll)

        while sink.process() is Status.READY:
            pass

        assert [e.body for e in sink.events] == [b"1", b"2"]
        assert len(sink) == 2
        sink.clear()
        assert len(sink) == 0

    def test_concurrent_workers_keep_every_event(
        self, channel: MemoryChannel, fast_poll: PollPolicy
    ) -> None:
        """Workers sharing one sink never drop each other's committed events."""
        channel.put_many([Event(str(i).encode()) for i in range(500)])
        sink = MemoryEventSink(channel, fast_poll)

        def worker() -> None:
            while sink.process() is Status.READY:
                pass

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert len(sink) == 500
        assert sorted(int(e.body) for e in sink.events) == list(range(500))
        assert channel.size == 0


class TestEnvironmentFaultClassification:
    @pytest.mark.parametrize(
        "exc", [MemoryError(), RecursionError(), KeyboardInterrupt(), SystemExit(1)]
    )
    def test_faults(self, exc: BaseException) -> None:
        assert is_environment_fault(exc)

    @pytest.mark.parametrize("exc", [OSError(), ValueError(), UnicodeDecodeError("utf-8", b"", 0, 1, "x")])
    def test_ordinary_errors(self, exc: BaseException) -> None:
        assert not is_environment_fault(exc)


class TestRecords:
    def test_format_record(self) -> None:
        assert format_record("hello", 1700000000000) == "hello:1700000000000\r\n"

    def test_summarize_short_body(self) -> None:
        assert summarize_body(b"hi") == "hi"

    def test_summarize_escapes_newlines(self) -> None:
        assert summarize_body(b"a\r\nb") == "a\\r\\nb"

    def test_summarize_invalid_bytes(self) -> None:
        assert summarize_body(b"\xff") == "\\xff"
