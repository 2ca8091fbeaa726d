"""
Tests for bounded polling.
"""

from __future__ import annotations

import threading
import time

import pytest

from txn_file_sink import ConfigurationError, Event, MemoryChannel, PollPolicy, poll


@pytest.fixture
def open_channel(channel: MemoryChannel):
    txn = channel.get_transaction()
    txn.begin()
    yield channel
    txn.close()


class TestPoll:
    def test_returns_available_event(self, open_channel: MemoryChannel) -> None:
        open_channel.put(Event(b"now"))
        assert poll(open_channel, PollPolicy(timeout=0)).body == b"now"

    def test_returns_none_after_budget(self, open_channel: MemoryChannel) -> None:
        started = time.monotonic()
        assert poll(open_channel, PollPolicy(timeout=0.05, max_backoff=0.01)) is None
        elapsed = time.monotonic() - started
        assert 0.04 <= elapsed < 1.0

    def test_zero_timeout_takes_once(self, open_channel: MemoryChannel) -> None:
        assert poll(open_channel, PollPolicy(timeout=0)) is None

    def test_picks_up_late_event(self, open_channel: MemoryChannel) -> None:
        timer = threading.Timer(0.02, open_channel.put, args=(Event(b"late"),))
        timer.start()
        try:
            event = poll(open_channel, PollPolicy(timeout=2.0, max_backoff=0.005))
        finally:
            timer.cancel()
        assert event is not None
        assert event.body == b"late"

    def test_stop_event_interrupts_wait(self, open_channel: MemoryChannel) -> None:
        stop = threading.Event()
        threading.Timer(0.02, stop.set).start()
        started = time.monotonic()
        assert poll(open_channel, PollPolicy(timeout=10.0, max_backoff=1.0), stop) is None
        assert time.monotonic() - started < 5.0


class TestPollPolicy:
    def test_defaults(self) -> None:
        policy = PollPolicy()
        assert policy.timeout == 0.5
        assert policy.initial_backoff <= policy.max_backoff

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"timeout": -1},
            {"initial_backoff": 0},
            {"initial_backoff": 0.1, "max_backoff": 0.01},
            {"multiplier": 0.5},
            {"timeout": float("inf")},
            {"timeout": float("nan")},
            {"max_backoff": float("inf")},
        ],
    )
    def test_invalid_values_rejected(self, kwargs: dict) -> None:
        with pytest.raises(ConfigurationError):
            PollPolicy(**kwargs)
