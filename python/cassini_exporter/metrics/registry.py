"""
Dynamic metric registry and Prometheus collector.

Entries are stored per key as either a single MetricValue or a series of
MetricValues sharing one descriptor (e.g. one gauge per node). The registry
implements the prometheus_client custom collector protocol: ``describe()``
yields the fixed descriptor set and ``collect()`` yields one sample per
stored value.

Consistency is per key: collect() snapshots the key list, then reads each
value under its own lock. A scrape may therefore observe some keys before
and some after a concurrent update.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from ..errors import (
    CounterDecreaseError,
    CounterOverwriteError,
    LabelMismatchError,
    MissingDescriptorError,
    TypeMismatchError,
)
from .descriptors import Descriptor, DescriptorTable
from .sink import ErrorSink
from .value import MetricKind, MetricValue

logger = logging.getLogger("cassini.registry")


@dataclass(frozen=True)
class Single:
    """Entry holding one value."""
    value: MetricValue

    @property
    def values(self) -> Tuple[MetricValue, ...]:
        return (self.value,)


@dataclass(frozen=True)
class Series:
    """Entry holding several label-bound values under one descriptor."""
    values: Tuple[MetricValue, ...]


Entry = Union[Single, Series]


def to_entry(value: object) -> Optional[Entry]:
    """
    Normalize a value to a registry entry.

    Returns:
        Single or Series, or None if value is not a metric representation
    """
    if isinstance(value, (Single, Series)):
        return value
    if isinstance(value, MetricValue):
        return Single(value)
    if isinstance(value, (list, tuple)) and all(isinstance(v, MetricValue) for v in value):
        return Series(tuple(value))
    return None


def _new_family(desc: Descriptor, kind: MetricKind) -> Metric:
    labels = list(desc.label_names)
    if kind is MetricKind.COUNTER:
        return CounterMetricFamily(desc.name, desc.help, labels=labels)
    return GaugeMetricFamily(desc.name, desc.help, labels=labels)


class MetricRegistry:
    """
    Concurrent key -> entry store with a two-phase collector protocol.

    Faults (unknown key, wrong entry type, label mismatch) are never raised;
    they are reported on the error sink and the operation is abandoned.
    """

    def __init__(self, descriptors: DescriptorTable, sink: Optional[ErrorSink] = None):
        """
        Initialize registry.

        Args:
            descriptors: Fixed descriptor table
            sink: Error sink for registry faults. Faults are logged if None.
        """
        self.descriptors = descriptors
        self._sink = sink
        self._entries: Dict[str, Entry] = {}
        self._lock = threading.Lock()
        # Rate counter reset by the decay loop (see install_rate_metric)
        self.rate_key: Optional[str] = None
        self.rate_metric: Optional[MetricValue] = None

    def set_error_sink(self, sink: Optional[ErrorSink]) -> None:
        self._sink = sink

    @property
    def error_sink(self) -> Optional[ErrorSink]:
        return self._sink

    def _report(self, err: Exception) -> None:
        if self._sink is None:
            logger.warning(f"Metrics error: {err}")
            return
        if not self._sink.report(err):
            logger.debug(f"Error sink full, dropped: {err}")

    def get(self, key: str) -> Optional[Entry]:
        with self._lock:
            return self._entries.get(key)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def install_rate_metric(self, key: str, metric: MetricValue) -> None:
        """
        Store metric under key as the rate counter.

        The entry is protected like a counter: set() can not replace it, so
        count_rate() and the decay loop always act on the scraped value.
        """
        with self._lock:
            self._entries[key] = Single(metric)
            self.rate_key = key
            self.rate_metric = metric

    def _is_protected(self, entry: Optional[Entry]) -> bool:
        if not isinstance(entry, Single):
            return False
        return entry.value.kind is MetricKind.COUNTER or entry.value is self.rate_metric

    def set(self, key: str, value: Union[MetricValue, Sequence[MetricValue], Entry]) -> bool:
        """
        Replace the entry for key.

        Counter entries and the rate metric are never replaced; use count()
        or reset() instead.

        Returns:
            True if stored
        """
        entry = to_entry(value)
        if entry is None:
            self._report(TypeMismatchError(
                key,
                "Set error: value is not a MetricValue or a sequence of MetricValue",
            ))
            return False

        with self._lock:
            protected = self._is_protected(self._entries.get(key))
            if not protected:
                self._entries[key] = entry

        if protected:
            self._report(CounterOverwriteError(key))
            return False
        return True

    def count(self, key: str, delta: float) -> bool:
        """
        Add delta to the value stored under key.

        A missing key gets a new counter initialized to delta. Insert-if-absent
        runs under the map lock, so concurrent first writers never lose an
        update. Counters never go down here; a negative delta on a counter is
        reported and dropped.

        Returns:
            True if counted
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None and delta >= 0:
                self._entries[key] = Single(MetricValue(delta, MetricKind.COUNTER))
                return True

        if isinstance(entry, Series):
            self._report(TypeMismatchError(
                key, "Count error: can not count a series entry"
            ))
            return False
        # A missing key would become a counter
        if delta < 0 and (entry is None or entry.value.kind is MetricKind.COUNTER):
            self._report(CounterDecreaseError(key, delta))
            return False
        entry.value.count(delta)
        return True

    def count_rate(self, delta: float) -> bool:
        """
        Add delta to the rate metric.

        Returns:
            False if no rate metric is installed or delta is negative
        """
        metric = self.rate_metric
        if metric is None:
            self._report(TypeMismatchError(
                self.rate_key or "rate", "TxCount error: no rate metric installed"
            ))
            return False
        if delta < 0:
            self._report(CounterDecreaseError(self.rate_key or "rate", delta))
            return False
        metric.count(delta)
        return True

    def describe(self) -> Iterator[Metric]:
        """Yield one empty family per descriptor."""
        for desc in self.descriptors.values():
            yield _new_family(desc, desc.kind)

    def collect(self) -> Iterator[Metric]:
        """Yield one family per stored key with one sample per value."""
        with self._lock:
            snapshot = list(self._entries.items())

        for key, entry in snapshot:
            family = self._export(key, entry)
            if family is not None:
                yield family

    def _export(self, key: str, entry: Entry) -> Optional[Metric]:
        desc = self.descriptors.lookup(key)
        if desc is None:
            self._report(MissingDescriptorError(key))
            return None

        values = entry.values
        if not values:
            return None

        kind = values[0].kind
        family = _new_family(desc, kind)
        for metric in values:
            if metric.kind is not kind:
                self._report(TypeMismatchError(
                    key, f"Collect error: mixed {kind.value}/{metric.kind.value} series"
                ))
                continue
            if len(metric.label_values) != len(desc.label_names):
                self._report(LabelMismatchError(
                    key, len(desc.label_names), len(metric.label_values)
                ))
                continue
            family.add_metric(list(metric.label_values), metric.value)
        return family

    def snapshot(self) -> Dict[str, List[Tuple[Tuple[str, ...], float]]]:
        """Current values per key as (label_values, value) pairs."""
        with self._lock:
            items = list(self._entries.items())
        return {
            key: [(m.label_values, m.value) for m in entry.values]
            for key, entry in items
        }
