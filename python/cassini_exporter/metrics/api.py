"""
Module-level metrics API.

Free functions operate on a process-wide default registry unless an explicit
``registry`` is passed. The application's entry point builds the registry
with init_registry() and owns its lifecycle; tests build their own.
"""

from typing import Optional, Sequence, Union

from .descriptors import (
    KEY_ERRORS,
    KEY_QUEUE,
    KEY_TX_COST,
    KEY_TXS_PER_SECOND,
    KEY_TXS_WAIT,
    DescriptorTable,
    default_table,
)
from .registry import Entry, MetricRegistry
from .sink import ErrorSink
from .value import MetricKind, MetricValue


def init_registry(
    sink: Optional[ErrorSink] = None,
    descriptors: Optional[DescriptorTable] = None,
) -> MetricRegistry:
    """
    Create a registry seeded with the startup values.

    Args:
        sink: Error sink for registry faults
        descriptors: Descriptor table (default: cassini catalog)

    Returns:
        Registry with queue, txs_wait and tx_cost at 0, the rate gauge
        installed as ``registry.rate_metric`` and the errors counter at 0.
    """
    registry = MetricRegistry(descriptors or default_table(), sink)

    rate = MetricValue(0.0, MetricKind.GAUGE)
    registry.install_rate_metric(KEY_TXS_PER_SECOND, rate)

    set_gauge(KEY_QUEUE, 0, registry=registry)
    set_gauge(KEY_TXS_WAIT, 0, registry=registry)
    set_gauge(KEY_TX_COST, 0, registry=registry)
    count(KEY_ERRORS, 0, registry=registry)
    return registry


# Global instance
_registry: Optional[MetricRegistry] = None


def get_registry() -> MetricRegistry:
    """Get or create the global registry."""
    global _registry
    if _registry is None:
        _registry = init_registry()
    return _registry


def use_registry(registry: Optional[MetricRegistry]) -> None:
    """Install registry as the global instance."""
    global _registry
    _registry = registry


def reset_registry() -> None:
    """Drop the global registry (useful for testing)."""
    use_registry(None)


def set(
    key: str,
    value: Union[MetricValue, Sequence[MetricValue], Entry],
    registry: Optional[MetricRegistry] = None,
) -> bool:
    """Store value under key, replacing any previous entry."""
    return (registry or get_registry()).set(key, value)


def set_gauge(
    key: str,
    value: float,
    *label_values: str,
    registry: Optional[MetricRegistry] = None,
) -> bool:
    """Store a single gauge under key."""
    return set(key, MetricValue(value, MetricKind.GAUGE, label_values), registry=registry)


def count(key: str, delta: float, registry: Optional[MetricRegistry] = None) -> bool:
    """Add delta to key, creating a counter on first use."""
    return (registry or get_registry()).count(key, delta)


def tx_count(delta: float, registry: Optional[MetricRegistry] = None) -> bool:
    """Count relayed transactions into the per-second rate metric."""
    return (registry or get_registry()).count_rate(delta)
