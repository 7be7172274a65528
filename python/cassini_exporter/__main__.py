"""
cassini exporter entry point.

Usage:
    python -m cassini_exporter

Environment Variables:
    CASSINI_METRICS_HOST - Scrape endpoint bind address (default: 0.0.0.0)
    CASSINI_METRICS_PORT - Scrape endpoint port (default: 39099)
    CASSINI_DECAY_INTERVAL - Rate counter reset interval (default: 1.0)
    CASSINI_ERROR_SINK_SIZE - Error sink capacity (default: 100)
    CASSINI_LOG_LEVEL - Log level (DEBUG, INFO, WARNING, ERROR)
"""

import signal
import sys
import threading
from typing import Optional

from .config import ExporterConfig, get_config, get_logger, setup_logging
from .metrics import ErrorDrain, ErrorSink, MetricsExporter, RateDecayLoop, init_registry
from .metrics import api
from .metrics.descriptors import KEY_ERRORS

logger = get_logger("service")


class ExporterService:
    """Composition root: registry, decay loop, error drain and HTTP server."""

    def __init__(self, config: ExporterConfig):
        self.config = config
        self.sink = ErrorSink(config.error_sink_size)
        self.registry = init_registry(self.sink)
        self.decay = RateDecayLoop(self.registry.rate_metric, config.decay_interval)
        self.drain = ErrorDrain(self.sink, on_error=self._count_error)
        self.exporter = MetricsExporter(
            self.registry, port=config.metrics_port, host=config.metrics_host
        )

    def _count_error(self, err: Exception) -> None:
        self.registry.count(KEY_ERRORS, 1)

    def start(self) -> bool:
        """Install the registry globally and start all background threads."""
        api.use_registry(self.registry)
        self.drain.start()
        self.decay.start()
        started = self.exporter.start()
        if started:
            logger.info("Exporter service started")
        return started

    def stop(self) -> None:
        """Stop in reverse order and join every thread."""
        self.exporter.stop()
        self.decay.stop()
        self.drain.stop()
        api.reset_registry()
        logger.info("Exporter service stopped")


def main(config: Optional[ExporterConfig] = None) -> int:
    """Main entry point."""
    config = config or get_config()
    setup_logging(level=config.log_level)

    service = ExporterService(config)
    shutdown_event = threading.Event()

    def signal_handler(signum, frame):
        logger.info("Shutdown requested...")
        shutdown_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, signal_handler)

    if not service.start():
        logger.error(f"Could not bind metrics endpoint on port {config.metrics_port}")
        service.stop()
        return 1

    try:
        shutdown_event.wait()
    finally:
        service.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
