"""Pytest configuration and shared fixtures.

This module provides pytest configuration and shared fixtures for all tests
in the dbgateway test suite.
"""

import pytest
import tempfile
import structlog
from pathlib import Path
from typing import Generator
from unittest.mock import AsyncMock, MagicMock

# Configure test logging to suppress noise during tests
structlog.configure(
    processors=[structlog.testing.LogCapture()],
    logger_factory=structlog.testing.ReturnLoggerFactory(),
    cache_logger_on_first_use=False,
)

SAMPLE_SCRIPT = "CREATE TABLE t(id INTEGER PRIMARY KEY, name TEXT NOT NULL)"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def mock_logger():
    """Mock structured logger for testing."""
    logger = MagicMock()
    logger.bind.return_value = logger
    return logger


@pytest.fixture
def sample_script() -> str:
    """Initialization script creating a single two-column table."""
    return SAMPLE_SCRIPT


def _make_pool(connection) -> MagicMock:
    pool = MagicMock()
    pool.acquire.return_value.__aenter__.return_value = connection
    pool.acquire.return_value.__aexit__.return_value = None
    pool.close = AsyncMock()
    pool.wait_closed = AsyncMock()
    return pool


def _make_cursor_connection(cursor) -> MagicMock:
    connection = MagicMock()
    connection.cursor.return_value.__aenter__.return_value = cursor
    connection.cursor.return_value.__aexit__.return_value = None
    connection.commit = AsyncMock()
    return connection


# Pytest markers for different test categories
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (fast, isolated)"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (slower, real dependencies)"
    )
    config.addinivalue_line(
        "markers", "database: marks tests exercising a real database engine"
    )


# Auto-mark tests based on their location
def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(config.rootdir) / "tests")

        if test_path.parts[0] == "unit":
            item.add_marker(pytest.mark.unit)
        elif test_path.parts[0] == "integration":
            item.add_marker(pytest.mark.integration)

        if "database" in str(test_path):
            item.add_marker(pytest.mark.database)


@pytest.fixture(autouse=True)
def reset_default_registry():
    """Drop the process-wide connector registry between tests."""
    yield

    from dbgateway.database import registry
    registry._default_registry = None


@pytest.fixture
def make_pool():
    """Factory for driver pool mocks whose ``acquire()`` yields a connection."""
    return _make_pool


@pytest.fixture
def make_cursor_connection():
    """Factory for connection mocks whose ``cursor()`` is an async context manager."""
    return _make_cursor_connection
