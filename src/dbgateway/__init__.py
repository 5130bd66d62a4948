"""dbgateway - Uniform introspection and query access to relational databases.

dbgateway connects to one database, picked from the scheme of a connection
string, and exposes a single contract for listing schemas, tables, columns,
indexes and stored routines and for executing guarded statements across
PostgreSQL, MySQL, MariaDB, SQL Server, Oracle and SQLite.

Modules:
    core: Exceptions and the lifecycle base class
    config: Configuration models and DSN resolution
    logging: Structured logging framework
    database: Connectors, registry, manager and safety policy

Example:
    Basic usage of dbgateway components:

    >>> from dbgateway.database import ConnectorManager
    >>> from dbgateway.logging import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> manager = ConnectorManager(readonly=True)
    >>> connector = await manager.connect_with_dsn("sqlite:///data/app.db")
    >>> logger.info("Tables loaded", tables=await connector.get_tables())
"""

__version__ = "0.1.0"
__title__ = "dbgateway"
__description__ = "Uniform introspection and query access to relational databases"
__license__ = "MIT"

from . import core, config, logging, database  # noqa: E402

__all__ = [
    "core",
    "config",
    "logging",
    "database",
    "__version__",
    "__title__",
    "__description__",
    "__license__",
]
