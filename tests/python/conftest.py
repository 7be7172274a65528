"""Pytest configuration and fixtures."""

import os
import sys
import pytest

# Add python directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../../python'))

from cassini_exporter.metrics import ErrorSink, default_table, init_registry, reset_registry


def pytest_configure(config):
    """Configure pytest."""
    os.environ['CASSINI_LOG_LEVEL'] = 'WARNING'


@pytest.fixture
def sink():
    """Error sink large enough for any single test."""
    return ErrorSink(maxsize=100)


@pytest.fixture
def registry(sink):
    """Isolated registry seeded with the startup values."""
    return init_registry(sink, default_table())


@pytest.fixture(autouse=True)
def _clean_global_registry():
    reset_registry()
    yield
    reset_registry()


@pytest.fixture
def drain_errors(sink):
    """Return a function that pops every queued error."""
    def _drain():
        errors = []
        while True:
            err = sink.get_nowait()
            if err is None:
                return errors
            errors.append(err)
    return _drain
