"""
Per-sink delivery counters.
"""

from __future__ import annotations

import threading


class SinkCounter:
    """
    Thread-safe counters describing what a sink has done.

    Attributes:
        drain_attempts: Invocations that began a transaction.
        drain_successes: Events appended and committed.
        backoffs: Invocations that found no event within the wait budget.
        delivery_failures: Invocations that raised DeliveryError.
        rollbacks: Transactions rolled back after a failure.
    """

    _FIELDS = ("drain_attempts", "drain_successes", "backoffs", "delivery_failures", "rollbacks")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._values = dict.fromkeys(self._FIELDS, 0)

    def increment(self, name: str, amount: int = 1) -> None:
        """Add ``amount`` to the named counter."""
        if name not in self._values:
            raise KeyError(name)
        with self._lock:
            self._values[name] += amount

    def snapshot(self) -> dict[str, int]:
        """Return a copy of all counter values."""
        with self._lock:
            return dict(self._values)

    def reset(self) -> None:
        """Set every counter back to zero."""
        with self._lock:
            for name in self._values:
                self._values[name] = 0

    @property
    def drain_attempts(self) -> int:
        return self._get("drain_attempts")

    @property
    def drain_successes(self) -> int:
        return self._get("drain_successes")

    @property
    def backoffs(self) -> int:
        return self._get("backoffs")

    @property
    def delivery_failures(self) -> int:
        return self._get("delivery_failures")

    @property
    def rollbacks(self) -> int:
        return self._get("rollbacks")

    def _get(self, name: str) -> int:
        with self._lock:
            return self._values[name]
