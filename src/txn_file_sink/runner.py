"""
Background host loop that drives a sink.
"""

from __future__ import annotations

import logging
import threading

from txn_file_sink.errors import DeliveryError
from txn_file_sink.events import Status
from txn_file_sink.sinks.base import EventSink

_log = logging.getLogger(__name__)


class SinkRunner:
    """
    Call ``sink.process()`` on a background thread until stopped.

    READY resets the backoff. BACKOFF and DeliveryError sleep for an
    interval that grows by ``backoff_increment`` up to ``max_backoff``; the
    sleep is cut short by stop(). Delivery failures are logged and the
    event is left to the channel's redelivery. Any other exception ends the
    loop and is kept in :attr:`fault`.

    Args:
        sink: A started-or-startable EventSink.
        backoff_increment: Seconds added to the sleep after each idle or failed call.
        max_backoff: Upper bound for a single sleep, in seconds.

    Example:
        runner = SinkRunner(FileEventSink(channel, {"filename": "out.txt"}))
        runner.start()
        ...
        runner.stop()
    """

    def __init__(
        self,
        sink: EventSink,
        *,
        backoff_increment: float = 1.0,
        max_backoff: float = 5.0,
    ) -> None:
        if backoff_increment < 0 or max_backoff < 0:
            raise ValueError("backoff_increment and max_backoff must be >= 0")
        self._sink = sink
        self._backoff_increment = backoff_increment
        self._max_backoff = max_backoff
        self._stop_flag = threading.Event()
        self._thread: threading.Thread | None = None
        self.fault: BaseException | None = None

    @property
    def sink(self) -> EventSink:
        """Return the driven sink."""
        return self._sink

    @property
    def is_alive(self) -> bool:
        """Return True while the loop thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the sink and the loop thread."""
        if self.is_alive:
            raise RuntimeError("SinkRunner is already running")
        self._sink.start()
        self._stop_flag.clear()
        self.fault = None
        self._thread = threading.Thread(
            target=self._run, name=f"sink-runner-{self._sink.name}", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop the sink, interrupt any sleep, and join the loop thread."""
        self._stop_flag.set()
        self._sink.stop()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                _log.warning("Runner for %s did not stop within %ss", self._sink.name, timeout)

    def _run(self) -> None:
        backoff = 0.0
        while not self._stop_flag.is_set():
            try:
                status = self._sink.process()
            except DeliveryError as exc:
                _log.error("Sink %s failed to deliver an event", self._sink.name, exc_info=exc)
                status = Status.BACKOFF
            except BaseException as exc:
                _log.critical("Sink %s stopped by fault", self._sink.name, exc_info=exc)
                self.fault = exc
                return

            if status is Status.READY:
                backoff = 0.0
                continue
            backoff = min(backoff + self._backoff_increment, self._max_backoff)
            self._stop_flag.wait(backoff)
