"""dbgateway core infrastructure.

This package provides the foundational pieces shared by the connector layer:
the exception hierarchy and the lifecycle base class.

Modules:
    exceptions: Exception hierarchy and error envelopes
    base: Lifecycle state machine for resource-owning components

Example:
    >>> from dbgateway.core import LifecycleComponent
    >>> from dbgateway.core.exceptions import NotInitializedError
"""

from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    DatabaseConnectionError,
    ErrorCodes,
    GatewayException,
    IntrospectionError,
    MalformedDSNError,
    NoMatchingConnectorError,
    NotInitializedError,
    ObjectNotFoundError,
    ProcedureNotFoundError,
    QueryExecutionError,
    ReadOnlyViolationError,
    SecurityError,
    TableNotFoundError,
    UnsupportedOperationError,
    format_error,
    format_success,
)
from .base import LifecycleComponent, LifecycleState

__all__ = [
    # Base classes
    "LifecycleComponent",
    "LifecycleState",

    # Exceptions
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionError",
    "DatabaseConnectionError",
    "ErrorCodes",
    "GatewayException",
    "IntrospectionError",
    "MalformedDSNError",
    "NoMatchingConnectorError",
    "NotInitializedError",
    "ObjectNotFoundError",
    "ProcedureNotFoundError",
    "QueryExecutionError",
    "ReadOnlyViolationError",
    "SecurityError",
    "TableNotFoundError",
    "UnsupportedOperationError",

    # Envelopes
    "format_error",
    "format_success",
]
