"""
Prometheus scrape endpoint for the cassini metrics registry.

Serves the standard text exposition on ``/metrics``. Each scrape runs one
collect() pass over the registry.
"""

import logging
from typing import Optional

from prometheus_client import CollectorRegistry, generate_latest, start_http_server

from .registry import MetricRegistry

logger = logging.getLogger("cassini.metrics")


class MetricsExporter:
    """
    Owns a prometheus CollectorRegistry and the HTTP server exposing it.
    """

    def __init__(self, registry: MetricRegistry, port: int = 39099, host: str = "0.0.0.0"):
        """
        Initialize exporter.

        Args:
            registry: Metric registry to expose
            port: Port for Prometheus HTTP server
            host: Host to bind to
        """
        self.registry = registry
        self.port = port
        self.host = host
        self.collector_registry = CollectorRegistry()
        # register() calls describe() once
        self.collector_registry.register(registry)
        self._server = None
        self._thread = None

    @property
    def is_running(self) -> bool:
        return self._server is not None

    @property
    def bound_port(self) -> Optional[int]:
        """Actual listening port (useful when started on port 0)."""
        if self._server is None:
            return None
        return self._server.server_port

    def start(self) -> bool:
        """
        Start the Prometheus HTTP server.

        Returns:
            True if started successfully
        """
        if self._server is not None:
            return True

        try:
            self._server, self._thread = start_http_server(
                self.port, addr=self.host, registry=self.collector_registry
            )
            logger.info(f"Prometheus metrics server started on {self.host}:{self.bound_port}")
            return True
        except OSError as e:
            logger.error(f"Failed to start metrics server: {e}")
            return False

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the HTTP server and join its thread."""
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout)
        self._server = None
        self._thread = None
        logger.info("Prometheus metrics server stopped")

    def render(self) -> bytes:
        """Current text exposition, as served on /metrics."""
        return generate_latest(self.collector_registry)
