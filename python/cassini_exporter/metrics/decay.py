"""Background reset of a rate counter."""

import logging
import threading
from typing import Optional

from .value import MetricValue

logger = logging.getLogger("cassini.decay")


class RateDecayLoop:
    """
    Reset one metric to zero every interval.

    Producers count events into the target between ticks, so a scrape reads
    an approximate count per interval.
    """

    def __init__(self, target: MetricValue, interval: float = 1.0):
        """
        Initialize decay loop.

        Args:
            target: Metric reset on every tick
            interval: Seconds between resets
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.target = target
        self.interval = interval
        self._stop = threading.Event()
        self._ticked = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._ticks = 0

    @property
    def ticks(self) -> int:
        """Number of resets performed."""
        return self._ticks

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self) -> None:
        """Reset the target once."""
        self.target.reset()
        self._ticks += 1
        self._ticked.set()

    def wait_for_tick(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the next tick.

        Returns:
            True if a tick happened within timeout
        """
        self._ticked.clear()
        return self._ticked.wait(timeout)

    def start(self) -> None:
        """Start ticking in a daemon thread."""
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="cassini-rate-decay", daemon=True
        )
        self._thread.start()
        logger.info(f"Rate decay loop started (interval={self.interval}s)")

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.tick()

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the loop and join it."""
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Rate decay loop did not stop within timeout")
            self._thread = None
        logger.info(f"Rate decay loop stopped after {self._ticks} ticks")
