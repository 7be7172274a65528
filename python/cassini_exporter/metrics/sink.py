"""
Out-of-band error channel for the metrics registry.

Registry faults are written with a non-blocking put; when the queue is full
the error is dropped and counted so a slow consumer never stalls a writer.
"""

import logging
import queue
import threading
from typing import Callable, Optional

logger = logging.getLogger("cassini.errors")


class ErrorSink:
    """Bounded one-way queue of errors."""

    def __init__(self, maxsize: int = 100):
        self.maxsize = maxsize
        self._queue: "queue.Queue[Exception]" = queue.Queue(maxsize=maxsize)
        self._dropped_count = 0
        self._lock = threading.Lock()

    def report(self, err: Exception) -> bool:
        """
        Queue an error without blocking.

        Returns:
            True if queued, False if dropped because the sink is full
        """
        try:
            self._queue.put_nowait(err)
            return True
        except queue.Full:
            with self._lock:
                self._dropped_count += 1
            return False

    def get(self, timeout: Optional[float] = None) -> Optional[Exception]:
        """Pop the next error, or None if none arrives within timeout."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def get_nowait(self) -> Optional[Exception]:
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    @property
    def pending(self) -> int:
        """Number of queued errors."""
        return self._queue.qsize()

    @property
    def dropped_count(self) -> int:
        """Number of errors dropped on overflow."""
        with self._lock:
            return self._dropped_count


class ErrorDrain:
    """
    Background consumer for an ErrorSink.

    Logs every error and passes it to an optional callback.
    """

    def __init__(
        self,
        sink: ErrorSink,
        on_error: Optional[Callable[[Exception], None]] = None,
        poll_interval: float = 0.2,
    ):
        self.sink = sink
        self.on_error = on_error
        self.poll_interval = poll_interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._handled_count = 0

    @property
    def handled_count(self) -> int:
        return self._handled_count

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start draining in a daemon thread."""
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="cassini-error-drain", daemon=True
        )
        self._thread.start()
        logger.debug("Error drain started")

    def _run(self) -> None:
        while not self._stop.is_set():
            err = self.sink.get(timeout=self.poll_interval)
            if err is not None:
                self._handle(err)
        # Flush whatever arrived before stop
        while True:
            err = self.sink.get_nowait()
            if err is None:
                break
            self._handle(err)

    def _handle(self, err: Exception) -> None:
        self._handled_count += 1
        logger.warning(f"Metrics error: {err}")
        if self.on_error:
            try:
                self.on_error(err)
            except Exception as e:
                logger.error(f"Error callback failed: {e}")

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the drain thread and wait for it to exit."""
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Error drain did not stop within timeout")
            self._thread = None
        dropped = self.sink.dropped_count
        if dropped:
            logger.warning(f"Error sink dropped {dropped} errors")
        logger.debug("Error drain stopped")
