"""
Shared fixtures for txn-file-sink tests.
"""

from pathlib import Path

import pytest

from txn_file_sink import FileSinkConfig, MemoryChannel, PollPolicy

FIXED_MILLIS = 1_700_000_000_123


@pytest.fixture
def channel() -> MemoryChannel:
    """Create a fresh in-memory channel."""
    return MemoryChannel()


@pytest.fixture
def fast_poll() -> PollPolicy:
    """Poll policy with a short budget so empty takes return quickly."""
    return PollPolicy(timeout=0.05, initial_backoff=0.001, max_backoff=0.01)


@pytest.fixture
def target(tmp_path: Path) -> Path:
    """Path of a not-yet-created output file in an existing directory."""
    return tmp_path / "events.txt"


@pytest.fixture
def file_config(target: Path, fast_poll: PollPolicy) -> FileSinkConfig:
    """File sink config with a fixed clock for deterministic output."""
    return FileSinkConfig(
        filename=str(target),
        poll=fast_poll,
        time_source=lambda: FIXED_MILLIS,
    )
