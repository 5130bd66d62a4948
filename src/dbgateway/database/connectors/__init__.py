"""Bundled dialect connectors and their DSN parsers."""

from .mysql import MariaDBConnector, MariaDBDSNParser, MySQLConnector, MySQLDSNParser
from .oracle import OracleConnector, OracleDSNParser
from .postgresql import PostgresDSNParser, PostgreSQLConnector
from .sqlite import SQLiteConnector, SQLiteDSNParser
from .sqlserver import SQLServerConnector, SQLServerDSNParser

__all__ = [
    "MariaDBConnector",
    "MariaDBDSNParser",
    "MySQLConnector",
    "MySQLDSNParser",
    "OracleConnector",
    "OracleDSNParser",
    "PostgresDSNParser",
    "PostgreSQLConnector",
    "SQLiteConnector",
    "SQLiteDSNParser",
    "SQLServerConnector",
    "SQLServerDSNParser",
]
