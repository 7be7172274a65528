"""Metrics registry, collector protocol and scrape endpoint."""
from .value import MetricKind, MetricValue
from .descriptors import Descriptor, DescriptorTable, default_table
from .sink import ErrorSink, ErrorDrain
from .registry import MetricRegistry, Single, Series
from .decay import RateDecayLoop
from .exporter import MetricsExporter
from .api import (
    init_registry,
    get_registry,
    use_registry,
    reset_registry,
    set,
    set_gauge,
    count,
    tx_count,
)

__all__ = [
    "MetricKind",
    "MetricValue",
    "Descriptor",
    "DescriptorTable",
    "default_table",
    "ErrorSink",
    "ErrorDrain",
    "MetricRegistry",
    "Single",
    "Series",
    "RateDecayLoop",
    "MetricsExporter",
    "init_registry",
    "get_registry",
    "use_registry",
    "reset_registry",
    "set",
    "set_gauge",
    "count",
    "tx_count",
]
