"""
Logging configuration for the cassini exporter.

All loggers live under the ``cassini`` hierarchy (cassini.registry,
cassini.decay, cassini.errors, cassini.metrics, cassini.service).

Environment Variables:
    CASSINI_LOG_LEVEL - Log level (DEBUG, INFO, WARNING, ERROR). Default: INFO
    CASSINI_LOG_FORMAT - Optional logging format string
"""

import logging
import os
import sys
from typing import Optional

ROOT_LOGGER = "cassini"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s (%(threadName)s): %(message)s"


def _resolve_level(level: Optional[str]) -> int:
    if level is None:
        level = os.getenv("CASSINI_LOG_LEVEL", "INFO")
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(
    level: Optional[str] = None,
    format_string: Optional[str] = None,
    name: str = ROOT_LOGGER,
) -> logging.Logger:
    """
    Setup logging for the exporter.

    Args:
        level: Log level. Default from CASSINI_LOG_LEVEL or INFO.
        format_string: Custom format. Default from CASSINI_LOG_FORMAT, else
            timestamp + level + name + thread + message.
        name: Logger name.

    Returns:
        Configured logger instance.
    """
    resolved = _resolve_level(level)
    if format_string is None:
        format_string = os.getenv("CASSINI_LOG_FORMAT", DEFAULT_FORMAT)

    logger = logging.getLogger(name)
    logger.setLevel(resolved)
    logger.handlers.clear()

    # Background threads log too; one stdout handler for all of them
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(format_string, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)

    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Get a logger in the cassini hierarchy.

    Args:
        name: Logger name (prefixed with 'cassini.' if not already)
    """
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    logger = logging.getLogger(name)
    if not logging.getLogger(ROOT_LOGGER).handlers:
        setup_logging()
    return logger

