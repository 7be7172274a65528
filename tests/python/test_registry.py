"""Tests for the metric registry and its collector protocol."""

import os
import sys
import threading
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../../python'))

from cassini_exporter.errors import (
    CounterDecreaseError,
    CounterOverwriteError,
    LabelMismatchError,
    MissingDescriptorError,
    TypeMismatchError,
)
from cassini_exporter.metrics import (
    DescriptorTable,
    ErrorSink,
    MetricKind,
    MetricRegistry,
    MetricValue,
    Series,
    Single,
    default_table,
)


def collected(registry):
    """Map metric family name -> list of (labels, value) from one collect pass."""
    result = {}
    for family in registry.collect():
        result[family.name] = [(s.labels, s.value) for s in family.samples]
    return result


class TestRegistrySet:
    """Test set()."""

    def test_set_then_collect(self, registry, drain_errors):
        """Test a stored gauge is collected with its value."""
        registry.set("tx_cost", MetricValue.gauge(12.5))

        result = collected(registry)

        assert result["cassini_tx_cost"] == [({}, 12.5)]
        assert drain_errors() == []

    def test_set_last_write_wins(self, registry):
        """Test set() replaces the entry wholesale."""
        first = MetricValue.gauge(1)
        second = MetricValue.gauge(2)
        registry.set("queue", first)
        registry.set("queue", second)

        assert registry.get("queue") == Single(second)

    def test_set_series(self, registry):
        """Test a list of values becomes a Series with one sample each."""
        registry.set("adaptors", [
            MetricValue.gauge(3, "node-a"),
            MetricValue.gauge(5, "node-b"),
        ])

        assert isinstance(registry.get("adaptors"), Series)
        samples = collected(registry)["cassini_adaptors"]
        assert ({"node": "node-a"}, 3.0) in samples
        assert ({"node": "node-b"}, 5.0) in samples

    def test_set_invalid_value_reported(self, registry, drain_errors):
        """Test a non-metric value is rejected, not stored."""
        assert registry.set("adaptors", "panic test") is False

        errors = drain_errors()
        assert len(errors) == 1
        assert isinstance(errors[0], TypeMismatchError)
        assert registry.get("adaptors") is None

    def test_set_refuses_counter_overwrite(self, registry, drain_errors):
        """Test counters cannot be replaced by set()."""
        registry.count("errors", 4)

        assert registry.set("errors", MetricValue.gauge(0)) is False

        errors = drain_errors()
        assert len(errors) == 1
        assert isinstance(errors[0], CounterOverwriteError)
        assert registry.get("errors").value.value == 4


class TestRegistryCount:
    """Test count()."""

    def test_count_creates_counter(self, registry):
        """Test first count() creates a counter initialized to delta."""
        registry.count("queue_size", 2)

        entry = registry.get("queue_size")
        assert entry.value.kind is MetricKind.COUNTER
        assert entry.value.value == 2

    def test_count_accumulates(self):
        """Test two counts on a fresh key sum."""
        table = DescriptorTable([("hits", "hits", "Hits", [], "counter")])
        registry = MetricRegistry(table, ErrorSink())
        registry.count("hits", 1.5)
        registry.count("hits", 2.5)

        assert registry.get("hits").value.value == 4.0

    def test_count_on_series_reported(self, registry, drain_errors):
        """Test counting a series entry is abandoned and reported."""
        registry.set("adaptors", [MetricValue.gauge(1, "n1")])

        assert registry.count("adaptors", 1) is False

        errors = drain_errors()
        assert len(errors) == 1
        assert isinstance(errors[0], TypeMismatchError)

    def test_concurrent_first_count_no_lost_updates(self):
        """Test N concurrent counts on a brand-new key read exactly N."""
        table = DescriptorTable([("hits", "hits", "Hits", [], "counter")])
        sink = ErrorSink()
        registry = MetricRegistry(table, sink)
        threads_n = 16
        per_thread = 200
        barrier = threading.Barrier(threads_n)

        def worker():
            barrier.wait()
            for _ in range(per_thread):
                registry.count("hits", 1)

        threads = [threading.Thread(target=worker) for _ in range(threads_n)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        families = list(registry.collect())
        assert len(families) == 1
        assert families[0].samples[0].value == threads_n * per_thread
        assert sink.pending == 0

    def test_counter_never_decreases(self, registry, drain_errors):
        """Test a negative delta on a counter is reported and dropped."""
        registry.count("errors", 4)

        assert registry.count("errors", -10) is False

        errors = drain_errors()
        assert len(errors) == 1
        assert isinstance(errors[0], CounterDecreaseError)
        assert collected(registry)["cassini_errors"] == [({}, 4.0)]

    def test_negative_first_count_not_created(self, registry, drain_errors):
        """Test a negative delta does not create a counter below zero."""
        assert registry.count("queue_size", -1) is False

        assert registry.get("queue_size") is None
        assert isinstance(drain_errors()[0], CounterDecreaseError)

    def test_gauge_may_decrease(self, registry, drain_errors):
        """Test count() can still lower a gauge."""
        registry.set("txs_wait", MetricValue.gauge(5))

        assert registry.count("txs_wait", -2) is True

        assert registry.get("txs_wait").value.value == 3
        assert drain_errors() == []


class TestRateMetric:
    """Test the rate metric reset by the decay loop."""

    def test_set_cannot_replace_rate_metric(self, registry, drain_errors):
        """Test set() on the rate key keeps tx counts visible to scrapes."""
        rate = registry.rate_metric

        assert registry.set("txs_per_second", MetricValue.gauge(0)) is False
        registry.count_rate(3)

        assert registry.get("txs_per_second") == Single(rate)
        assert collected(registry)["cassini_txs_per_second"] == [({}, 3.0)]
        assert isinstance(drain_errors()[0], CounterOverwriteError)

    def test_count_rate_without_metric_reported(self, sink, drain_errors):
        """Test counting the rate on a bare registry reports instead of raising."""
        registry = MetricRegistry(default_table(), sink)

        assert registry.count_rate(1) is False

        errors = drain_errors()
        assert len(errors) == 1
        assert isinstance(errors[0], TypeMismatchError)

    def test_count_rate_negative_reported(self, registry, drain_errors):
        """Test the rate metric is never lowered by count_rate()."""
        registry.count_rate(2)

        assert registry.count_rate(-1) is False

        assert registry.rate_metric.value == 2
        assert isinstance(drain_errors()[0], CounterDecreaseError)


class TestRegistryCollect:
    """Test describe() and collect()."""

    def test_describe_full_set(self, sink):
        """Test describe() yields every descriptor, even when empty."""
        registry = MetricRegistry(default_table(), sink)

        names = {family.name for family in registry.describe()}

        assert names == {desc.name for desc in default_table().values()}
        for family in registry.describe():
            assert family.samples == []

    def test_describe_types(self, registry):
        """Test describe() announces the descriptor kinds."""
        types = {family.name: family.type for family in registry.describe()}

        assert types["cassini_errors"] == "counter"
        assert types["cassini_queue"] == "gauge"

    def test_missing_descriptor(self, registry, drain_errors):
        """Test an unknown key yields one error and is skipped."""
        registry.count("unknown_key", 1)

        result = collected(registry)

        errors = drain_errors()
        assert len(errors) == 1
        assert isinstance(errors[0], MissingDescriptorError)
        assert errors[0].key == "unknown_key"
        assert "cassini_queue" in result
        assert "cassini_txs_wait" in result
        assert len(result) == 5

    def test_label_mismatch(self, registry, drain_errors):
        """Test a value with the wrong number of labels is skipped."""
        registry.set("queue_size", [
            MetricValue.gauge(1, "pending"),
            MetricValue.gauge(2),
        ])

        result = collected(registry)

        assert result["cassini_queue_size"] == [({"type": "pending"}, 1.0)]
        errors = drain_errors()
        assert len(errors) == 1
        assert isinstance(errors[0], LabelMismatchError)

    def test_counter_sample(self, registry):
        """Test counter entries collect as counter families."""
        registry.count("errors", 3)

        families = {f.name: f for f in registry.collect()}

        assert families["cassini_errors"].type == "counter"
        assert families["cassini_errors"].samples[0].value == 3

    def test_isolation(self, registry):
        """Test counts on other keys leave an existing gauge untouched."""
        registry.set("queue", MetricValue.gauge(0))
        registry.count("errors", 7)
        registry.count("queue_size", 2)

        assert collected(registry)["cassini_queue"] == [({}, 0.0)]

    def test_no_sink_logs(self, caplog):
        """Test faults are logged when no sink is configured."""
        registry = MetricRegistry(default_table())
        registry.count("unknown_key", 1)

        with caplog.at_level("WARNING", logger="cassini.registry"):
            list(registry.collect())

        assert "can not find desc(unknown_key)" in caplog.text

    def test_full_sink_never_blocks(self):
        """Test a full sink drops errors instead of blocking collect()."""
        sink = ErrorSink(maxsize=1)
        registry = MetricRegistry(default_table(), sink)
        registry.count("bad_1", 1)
        registry.count("bad_2", 1)
        registry.count("bad_3", 1)

        list(registry.collect())

        assert sink.pending == 1
        assert sink.dropped_count == 2


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
