"""
cassini exporter - in-process metrics for the cassini relay.

Application code records named, optionally labeled values through
cassini_exporter.metrics; a Prometheus scraper pulls them from /metrics.

Usage:
    python -m cassini_exporter

Environment Variables:
    CASSINI_METRICS_HOST - Scrape endpoint bind address (default: 0.0.0.0)
    CASSINI_METRICS_PORT - Scrape endpoint port (default: 39099)
    CASSINI_DECAY_INTERVAL - Rate counter reset interval in seconds (default: 1.0)
"""

__version__ = "1.0.0"

from .config import ExporterConfig, get_config
from .metrics import MetricRegistry, init_registry, set, set_gauge, count, tx_count

__all__ = [
    "ExporterConfig",
    "get_config",
    "MetricRegistry",
    "init_registry",
    "set",
    "set_gauge",
    "count",
    "tx_count",
]
