"""dbgateway database layer.

This module provides the connector contract, the bundled dialect connectors,
DSN parsing, the statement safety policy and the manager that owns the
single active connection.

Supported Platforms:
- PostgreSQL (asyncpg)
- MySQL/MariaDB (aiomysql)
- Microsoft SQL Server (aioodbc)
- Oracle Database (oracledb)
- SQLite (aiosqlite)

Example:
    >>> from dbgateway.database import ConnectorManager
    >>> manager = ConnectorManager(readonly=True)
    >>> connector = await manager.connect_with_dsn("sqlite::memory:")
    >>> await connector.get_tables()
"""

from .base import ALL_CAPABILITIES, BaseDatabaseConnector
from .dsn import DSNParser, redact_dsn
from .manager import ConnectorManager
from .models import (
    Capability,
    ConnectorDescriptor,
    DialectId,
    FieldDescriptor,
    SQLResult,
    StoredProcedure,
    TableColumn,
    TableIndex,
    ValidationResult,
)
from .registry import ConnectorRegistry, build_default_registry, get_default_registry
from .safety import StatementSafetyPolicy, allowed_keywords, split_statements

__all__ = [
    # Models
    "Capability",
    "ConnectorDescriptor",
    "DialectId",
    "FieldDescriptor",
    "SQLResult",
    "StoredProcedure",
    "TableColumn",
    "TableIndex",
    "ValidationResult",

    # Core classes
    "ALL_CAPABILITIES",
    "BaseDatabaseConnector",
    "ConnectorManager",
    "ConnectorRegistry",
    "DSNParser",
    "StatementSafetyPolicy",

    # Helpers
    "allowed_keywords",
    "build_default_registry",
    "get_default_registry",
    "redact_dsn",
    "split_statements",
]
