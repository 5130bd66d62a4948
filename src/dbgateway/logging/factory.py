"""Logger factory and configuration for dbgateway.

This module provides centralized logger creation and configuration of the
structlog pipeline. All output goes to stderr: stdout belongs to the
protocol transport that embeds the gateway.

Classes:
    LoggerConfig: Settings applied by the factory
    LoggerFactory: Logger creation and configuration manager

Functions:
    configure_logging: Configure logging system globally
    get_logger: Convenience function for getting loggers
    get_performance_logger: Convenience function for performance loggers

Example:
    >>> from dbgateway.logging import configure_logging, get_logger
    >>> configure_logging(level="INFO", format="json")
    >>> logger = get_logger(__name__)
    >>> logger.info("Gateway started", connector="postgres")
"""

import logging
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import structlog

from .performance import PerformanceLogger
from .structured import StructuredLogger
from ..core.exceptions import ConfigurationError

_VALID_FORMATS = ("json", "text")


@dataclass
class LoggerConfig:
    """Configuration for logger instances.

    Attributes:
        level: Log level
        format: Log format (json, text)
    """
    level: str = "INFO"
    format: str = "text"


class LoggerFactory:
    """Factory for creating and configuring dbgateway loggers.

    Loggers are cached by name. Configuration of structlog happens on the
    first explicit ``configure`` call, or lazily on the first logger request
    when nothing else has configured structlog yet.
    """

    def __init__(self, config: Optional[LoggerConfig] = None) -> None:
        self.config = config or LoggerConfig()
        self.initialized = False
        self._loggers: Dict[str, StructuredLogger] = {}
        self._performance_loggers: Dict[str, PerformanceLogger] = {}

    def configure(self, *, level: Optional[str] = None, format: Optional[str] = None) -> None:
        """Apply configuration and (re)build the logging pipeline.

        Args:
            level: Log level name
            format: Output format, ``json`` or ``text``

        Raises:
            ConfigurationError: If the level or format is unknown
        """
        if level is not None:
            if not isinstance(logging.getLevelName(level.upper()), int):
                raise ConfigurationError(
                    f"Invalid log level: {level}",
                    context={"level": level},
                )
            self.config.level = level.upper()

        if format is not None:
            if format.lower() not in _VALID_FORMATS:
                raise ConfigurationError(
                    f"Invalid log format: {format}",
                    context={"format": format, "valid_formats": list(_VALID_FORMATS)},
                )
            self.config.format = format.lower()

        self._configure_stdlib_logging()
        self._configure_structlog()
        self.initialized = True

    def _configure_stdlib_logging(self) -> None:
        root_logger = logging.getLogger()
        level = logging.getLevelName(self.config.level)
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(handler)

    def _configure_structlog(self) -> None:
        processors: List[Any] = [
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]

        if self.config.format == "json":
            processors.append(structlog.processors.JSONRenderer())
        else:
            processors.append(structlog.dev.ConsoleRenderer(colors=False))

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            context_class=dict,
            cache_logger_on_first_use=True,
        )

    def _ensure_configured(self) -> None:
        if not self.initialized and not structlog.is_configured():
            self.configure()

    def get_logger(self, name: str, *, level: Optional[str] = None) -> StructuredLogger:
        """Get or create a structured logger.

        Args:
            name: Logger name
            level: Override default log level

        Returns:
            StructuredLogger instance
        """
        self._ensure_configured()

        cache_key = f"{name}_{level}"
        if cache_key not in self._loggers:
            self._loggers[cache_key] = StructuredLogger(name, level=level)
        return self._loggers[cache_key]

    def get_performance_logger(self, name: str, *, auto_log: bool = True) -> PerformanceLogger:
        """Get or create a performance logger.

        Args:
            name: Logger name
            auto_log: Whether to log each measurement

        Returns:
            PerformanceLogger instance
        """
        self._ensure_configured()

        cache_key = f"{name}_{auto_log}"
        if cache_key not in self._performance_loggers:
            self._performance_loggers[cache_key] = PerformanceLogger(
                name,
                auto_log=auto_log,
                logger=self.get_logger(f"perf.{name}"),
            )
        return self._performance_loggers[cache_key]

    def shutdown(self) -> None:
        """Clear cached loggers and mark the factory unconfigured."""
        self._loggers.clear()
        self._performance_loggers.clear()
        self.initialized = False

    def __repr__(self) -> str:
        return (
            f"LoggerFactory("
            f"level={self.config.level!r}, "
            f"format={self.config.format!r}, "
            f"initialized={self.initialized})"
        )


# Global logger factory instance
_global_factory = LoggerFactory()


def configure_logging(*, level: str = "INFO", format: str = "text") -> None:
    """Configure dbgateway logging globally.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Log format (json, text)
    """
    _global_factory.configure(level=level, format=format)


def get_logger(name: str, *, level: Optional[str] = None) -> StructuredLogger:
    """Get or create a structured logger using the global factory."""
    return _global_factory.get_logger(name, level=level)


def get_performance_logger(name: str, *, auto_log: bool = True) -> PerformanceLogger:
    """Get or create a performance logger using the global factory."""
    return _global_factory.get_performance_logger(name, auto_log=auto_log)


def get_factory() -> LoggerFactory:
    return _global_factory
