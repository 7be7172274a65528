"""
Exporter configuration with environment variable support.

Environment Variables:
    CASSINI_METRICS_HOST - Scrape endpoint bind address (default: 0.0.0.0)
    CASSINI_METRICS_PORT - Scrape endpoint port (default: 39099)
    CASSINI_DECAY_INTERVAL - Seconds between rate counter resets (default: 1.0)
    CASSINI_ERROR_SINK_SIZE - Error sink capacity (default: 100)
    CASSINI_DEBUG - Enable debug logging (true/false)
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger("cassini.config")


@dataclass
class ExporterConfig:
    """Exporter configuration."""

    # Scrape endpoint
    metrics_host: str = field(
        default_factory=lambda: os.getenv("CASSINI_METRICS_HOST", "0.0.0.0")
    )
    metrics_port: int = field(
        default_factory=lambda: int(os.getenv("CASSINI_METRICS_PORT", "39099"))
    )

    # Rate decay
    decay_interval: float = field(
        default_factory=lambda: float(os.getenv("CASSINI_DECAY_INTERVAL", "1.0"))
    )

    # Error sink
    error_sink_size: int = field(
        default_factory=lambda: int(os.getenv("CASSINI_ERROR_SINK_SIZE", "100"))
    )

    # Debug
    debug: bool = field(
        default_factory=lambda: os.getenv("CASSINI_DEBUG", "false").lower() == "true"
    )

    def __post_init__(self):
        """Validate values after initialization."""
        if not 0 <= self.metrics_port <= 65535:
            raise ValueError(f"Invalid metrics port: {self.metrics_port}")
        if self.decay_interval <= 0:
            raise ValueError(f"Decay interval must be positive: {self.decay_interval}")
        if self.error_sink_size < 1:
            logger.warning(
                f"Error sink size {self.error_sink_size} too small, using 1"
            )
            self.error_sink_size = 1

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.debug else os.getenv("CASSINI_LOG_LEVEL", "INFO").upper()


# Singleton config instance
_config: Optional[ExporterConfig] = None


def get_config() -> ExporterConfig:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = ExporterConfig()
    return _config


def reset_config():
    """Reset the global config (useful for testing)."""
    global _config
    _config = None
