"""Structured logging implementation for dbgateway.

This module wraps structlog with a small context layer so that every event
emitted by a connector carries the same key/value context (connector id,
operation, schema).

Classes:
    StructuredLogger: Main structured logging interface

Example:
    >>> logger = StructuredLogger("connector.postgres").bind(connector="postgres")
    >>> logger.info("Listing tables", schema="public", table_count=12)
"""

import logging
from typing import Any, Dict, Optional

import structlog

from ..core.exceptions import GatewayException


class StructuredLogger:
    """Structured logger with bound and scoped context.

    Attributes:
        name: Logger name

    Example:
        >>> logger = StructuredLogger("database.registry")
        >>> logger.info("Connector registered", connector_id="mysql")
        >>> scoped = logger.bind(connector_id="mysql")
        >>> scoped.warning("Overriding registration")
    """

    def __init__(
        self,
        name: str,
        *,
        level: Optional[str] = None,
    ) -> None:
        """Initialize structured logger.

        Args:
            name: Logger name (typically module or component name)
            level: Optional level override for the underlying stdlib logger
        """
        self.name = name
        self._logger = structlog.get_logger(name)
        self._context: Dict[str, Any] = {}
        self._stdlib_logger = logging.getLogger(name)

        if level is not None:
            self.set_level(level)

    def _prepare_event_dict(self, **kwargs: Any) -> Dict[str, Any]:
        event_dict = {"logger": self.name}
        event_dict.update(self._context)
        event_dict.update(kwargs)
        return event_dict

    def bind(self, **context_data: Any) -> "StructuredLogger":
        """Create a new logger carrying additional bound context.

        Args:
            **context_data: Context data to bind

        Returns:
            New logger instance with bound context
        """
        bound = StructuredLogger(self.name)
        bound._context.update(self._context)
        bound._context.update(context_data)
        return bound

    def set_level(self, level: str) -> None:
        """Set logging level.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

        Raises:
            GatewayException: If the level name is unknown
        """
        log_level = logging.getLevelName(level.upper())
        if not isinstance(log_level, int):
            raise GatewayException(
                f"Unknown log level: {level}",
                code="UNKNOWN_LOG_LEVEL",
            )
        self._stdlib_logger.setLevel(log_level)

    def get_level(self) -> str:
        return logging.getLevelName(self._stdlib_logger.getEffectiveLevel())

    def get_context(self) -> Dict[str, Any]:
        return dict(self._context)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(message, **self._prepare_event_dict(**kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(message, **self._prepare_event_dict(**kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(message, **self._prepare_event_dict(**kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self._logger.error(message, **self._prepare_event_dict(**kwargs))

    def critical(self, message: str, **kwargs: Any) -> None:
        self._logger.critical(message, **self._prepare_event_dict(**kwargs))

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an error event with the current exception's traceback."""
        self._logger.error(message, exc_info=True, **self._prepare_event_dict(**kwargs))

    def __repr__(self) -> str:
        return (
            f"StructuredLogger("
            f"name={self.name!r}, "
            f"level={self.get_level()!r})"
        )
