"""Thread-safe numeric metric cell."""

import threading
from enum import Enum
from typing import Iterable, Tuple


class MetricKind(str, Enum):
    """Exposition type of a metric value."""
    GAUGE = "gauge"
    COUNTER = "counter"


class MetricValue:
    """
    A single numeric value with a kind and ordered label values.

    All reads and writes go through the instance lock, so a value can be
    shared freely between producer threads and the scrape thread.
    """

    def __init__(
        self,
        value: float = 0.0,
        kind: MetricKind = MetricKind.GAUGE,
        label_values: Iterable[str] = (),
    ):
        self.kind = kind
        self.label_values: Tuple[str, ...] = tuple(str(v) for v in label_values)
        self._value = float(value)
        self._lock = threading.Lock()

    @property
    def value(self) -> float:
        """Current value."""
        with self._lock:
            return self._value

    def set(self, value: float) -> None:
        """Overwrite the value."""
        with self._lock:
            self._value = float(value)

    def count(self, delta: float) -> None:
        """Add delta to the value."""
        with self._lock:
            self._value += delta

    def reset(self) -> None:
        """Set the value back to zero."""
        with self._lock:
            self._value = 0.0

    @classmethod
    def gauge(cls, value: float = 0.0, *label_values: str) -> "MetricValue":
        return cls(value, MetricKind.GAUGE, label_values)

    @classmethod
    def counter(cls, value: float = 0.0, *label_values: str) -> "MetricValue":
        return cls(value, MetricKind.COUNTER, label_values)

    def __repr__(self) -> str:
        return (
            f"MetricValue(value={self.value}, kind={self.kind.value}, "
            f"label_values={self.label_values})"
        )
