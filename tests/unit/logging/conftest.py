"""Logging-specific test configuration and fixtures."""

import logging

import pytest
import structlog

from dbgateway.logging.factory import LoggerFactory


@pytest.fixture
def logger_factory():
    """Create clean logger factory for testing."""
    factory = LoggerFactory()
    yield factory
    # Cleanup after test
    factory.shutdown()


@pytest.fixture(autouse=True)
def restore_logging_state():
    """Restore structlog and root logger configuration after each test."""
    saved = structlog.get_config()
    yield

    structlog.configure(**saved)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.WARNING)  # Reset to default
