"""dbgateway structured logging.

Classes:
    StructuredLogger: Main structured logging interface
    PerformanceLogger: Performance monitoring and timing
    LoggerFactory: Logger creation and configuration

Example:
    >>> from dbgateway.logging import get_logger, get_performance_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Connected", connector="sqlite")
    >>>
    >>> perf_logger = get_performance_logger("connector.sqlite")
    >>> with perf_logger.measure("get_tables"):
    ...     pass
"""

from .factory import (
    LoggerConfig,
    LoggerFactory,
    configure_logging,
    get_factory,
    get_logger,
    get_performance_logger,
)
from .performance import OperationMetrics, PerformanceLogger, TimingContext
from .structured import StructuredLogger

__all__ = [
    # Factory and configuration
    "LoggerConfig",
    "LoggerFactory",
    "configure_logging",
    "get_factory",
    "get_logger",
    "get_performance_logger",

    # Performance logging
    "OperationMetrics",
    "PerformanceLogger",
    "TimingContext",

    # Structured logging
    "StructuredLogger",
]
