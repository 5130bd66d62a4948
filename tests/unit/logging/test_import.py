"""Simple import test to verify logging module can be imported."""


def test_import_logging_module():
    """Test that logging module exposes its public API."""
    from dbgateway.logging import (
        LoggerFactory,
        PerformanceLogger,
        StructuredLogger,
        configure_logging,
        get_logger,
        get_performance_logger,
    )

    assert callable(configure_logging)
    assert callable(get_logger)
    assert callable(get_performance_logger)
    assert LoggerFactory and PerformanceLogger and StructuredLogger


def test_create_simple_logger():
    """Test creating a simple logger."""
    from dbgateway.logging import get_logger

    logger = get_logger("test.simple")
    assert logger is not None
    assert logger.name == "test.simple"


def test_basic_logging():
    """Test basic logging functionality."""
    from dbgateway.logging import get_logger

    logger = get_logger("test.basic")

    # These should not raise any exceptions
    logger.info("Test info message")
    logger.debug("Test debug message")
    logger.warning("Test warning message")
    logger.error("Test error message")
