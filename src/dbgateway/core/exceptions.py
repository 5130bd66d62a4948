"""dbgateway exception hierarchy.

This module defines the structured exceptions raised by the connector layer.
Every exception carries an error code, a context dictionary and an optional
cause so the upstream protocol layer can turn a failure into a typed error
response without parsing messages.

Classes:
    GatewayException: Base exception for all dbgateway operations
    ConfigurationError: DSN and configuration errors
    ConnectionError: Connect-time errors
    NotInitializedError: Connector accessed before a successful connect
    IntrospectionError: Catalogue lookup errors
    UnsupportedOperationError: Capability missing for a dialect
    SecurityError: Statement safety policy rejections
    QueryExecutionError: Backend rejected or failed a statement

Example:
    >>> try:
    ...     await manager.connect_with_dsn(dsn)
    ... except DatabaseConnectionError as e:
    ...     logger.error("Connection failed", error_code=e.code, context=e.context)
"""

from typing import Any, Dict, Optional


class GatewayException(Exception):
    """Base exception for all dbgateway operations.

    Attributes:
        code: Unique error code for categorization
        context: Additional context information about the error
        cause: Original exception that caused this error (if any)

    Example:
        >>> raise GatewayException(
        ...     "Operation failed",
        ...     code="OPERATION_FAILED",
        ...     context={"connector": "postgres"}
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        """Initialize gateway exception.

        Args:
            message: Human-readable error description
            code: Unique error code for categorization (defaults to class name)
            context: Additional context information
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message: str = message
        self.code: str = code or self.default_code
        self.context: Dict[str, Any] = context or {}
        self.cause: Optional[BaseException] = cause

    @property
    def default_code(self) -> str:
        return self.__class__.__name__

    def __str__(self) -> str:
        """Return formatted error message with code."""
        return f"{self.code}: {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"context={self.context!r}, "
            f"cause={self.cause!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
        }


# Error code constants
class ErrorCodes:
    """Error codes attached to dbgateway exceptions."""

    # Configuration errors
    CONFIG_INVALID = "CONFIG_INVALID"
    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    MALFORMED_DSN = "MALFORMED_DSN"
    NO_MATCHING_CONNECTOR = "NO_MATCHING_CONNECTOR"

    # Connection errors
    CONNECTION_REFUSED = "CONNECTION_REFUSED"
    CONNECTION_TIMEOUT = "CONNECTION_TIMEOUT"
    AUTH_FAILED = "AUTH_FAILED"

    # Lifecycle errors
    NOT_INITIALIZED = "NOT_INITIALIZED"
    INVALID_STATE = "INVALID_STATE"
    ALREADY_CONNECTED = "ALREADY_CONNECTED"

    # Introspection errors
    TABLE_NOT_FOUND = "TABLE_NOT_FOUND"
    PROCEDURE_NOT_FOUND = "PROCEDURE_NOT_FOUND"
    METADATA_EXTRACTION_FAILED = "METADATA_EXTRACTION_FAILED"
    UNSUPPORTED = "UNSUPPORTED"

    # Execution errors
    READONLY_VIOLATION = "READONLY_VIOLATION"
    EXECUTION_ERROR = "EXECUTION_ERROR"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"


class ConfigurationError(GatewayException):
    """Configuration related errors.

    Raised when configuration is invalid, missing, or cannot be processed.
    """

    @property
    def default_code(self) -> str:
        return ErrorCodes.CONFIG_INVALID


class MalformedDSNError(ConfigurationError):
    """Raised when a connection string cannot be parsed by its dialect."""

    @property
    def default_code(self) -> str:
        return ErrorCodes.MALFORMED_DSN


class NoMatchingConnectorError(ConfigurationError):
    """Raised when no registered connector accepts a connection string."""

    @property
    def default_code(self) -> str:
        return ErrorCodes.NO_MATCHING_CONNECTOR


class ConnectionError(GatewayException):
    """Database connection related errors.

    Base class for all connect-time failures including refused connections,
    timeouts and authentication problems.
    """

    @property
    def default_code(self) -> str:
        return ErrorCodes.CONNECTION_REFUSED


class DatabaseConnectionError(ConnectionError):
    """Raised when unable to establish a connection to the database server."""
    pass


class AuthenticationError(ConnectionError):
    """Raised when the database rejects the supplied credentials."""

    @property
    def default_code(self) -> str:
        return ErrorCodes.AUTH_FAILED


class NotInitializedError(GatewayException):
    """Raised when a connector or manager is used before connecting."""

    @property
    def default_code(self) -> str:
        return ErrorCodes.NOT_INITIALIZED


class IntrospectionError(GatewayException):
    """Catalogue lookup errors."""

    @property
    def default_code(self) -> str:
        return ErrorCodes.METADATA_EXTRACTION_FAILED


class ObjectNotFoundError(IntrospectionError):
    """Raised when a named database object does not exist."""
    pass


class TableNotFoundError(ObjectNotFoundError):
    """Raised when a table lookup misses."""

    @property
    def default_code(self) -> str:
        return ErrorCodes.TABLE_NOT_FOUND


class ProcedureNotFoundError(ObjectNotFoundError):
    """Raised when a stored procedure or function lookup misses."""

    @property
    def default_code(self) -> str:
        return ErrorCodes.PROCEDURE_NOT_FOUND


class UnsupportedOperationError(GatewayException):
    """Raised when a dialect has no equivalent for an operation.

    SQLite, for instance, has no server-side routines.
    """

    @property
    def default_code(self) -> str:
        return ErrorCodes.UNSUPPORTED


class SecurityError(GatewayException):
    """Security related errors."""

    @property
    def default_code(self) -> str:
        return ErrorCodes.READONLY_VIOLATION


class ReadOnlyViolationError(SecurityError):
    """Raised when the statement safety policy rejects a statement."""
    pass


class QueryExecutionError(GatewayException):
    """Raised when the backend rejects or fails a statement."""

    @property
    def default_code(self) -> str:
        return ErrorCodes.EXECUTION_ERROR


def format_success(data: Any, meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build the success envelope handed to the upstream layer.

    Args:
        data: Result payload
        meta: Optional metadata, omitted when empty

    Returns:
        Envelope dictionary
    """
    envelope: Dict[str, Any] = {"success": True, "data": data}
    if meta:
        envelope["meta"] = meta
    return envelope


def format_error(exc: BaseException) -> Dict[str, Any]:
    """Build the error envelope for a failed request.

    Gateway exceptions keep their code; anything else is reported as an
    execution error.

    Args:
        exc: Exception raised while serving the request

    Returns:
        Envelope dictionary
    """
    if isinstance(exc, GatewayException):
        envelope: Dict[str, Any] = {
            "success": False,
            "error": exc.message,
            "code": exc.code,
        }
        if exc.context:
            envelope["details"] = exc.context
        return envelope

    return {
        "success": False,
        "error": str(exc),
        "code": ErrorCodes.EXECUTION_ERROR,
    }
