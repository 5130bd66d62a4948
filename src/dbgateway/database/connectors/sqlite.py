# src/dbgateway/database/connectors/sqlite.py
"""SQLite database connector implementation for dbgateway."""

import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import unquote

import aiosqlite

from ..base import ALL_CAPABILITIES, BaseDatabaseConnector
from ..dsn import DSNParser, redact_dsn
from ..models import (
    Capability,
    ConnectorDescriptor,
    DialectId,
    FieldDescriptor,
    SQLResult,
    TableColumn,
    TableIndex,
)
from ...config.models import SQLiteConfig
from ...core.exceptions import DatabaseConnectionError, ErrorCodes, MalformedDSNError

MEMORY_PATH = ":memory:"


class SQLiteDSNParser(DSNParser):
    """Parser for ``sqlite:`` connection strings.

    Accepted forms::

        sqlite::memory:
        sqlite:///absolute/path.db
        sqlite://relative/path.db
        sqlite:relative.db
    """

    schemes = ("sqlite",)
    sample_dsn = "sqlite:///path/to/database.db"

    def is_valid_dsn(self, dsn: Any) -> bool:
        if not isinstance(dsn, str):
            return False
        scheme, separator, rest = dsn.strip().partition(":")
        return bool(separator) and scheme.lower() == "sqlite" and bool(rest.split("?", 1)[0])

    def parse(self, dsn: str) -> SQLiteConfig:
        self._require_valid(dsn)
        rest = dsn.strip().partition(":")[2].split("?", 1)[0]

        if rest in (MEMORY_PATH, "//" + MEMORY_PATH):
            path = MEMORY_PATH
        elif rest.startswith("///"):
            path = "/" + rest[3:]
        elif rest.startswith("//"):
            path = rest[2:]
        else:
            path = rest

        path = unquote(path)
        if not path or path == "/":
            raise MalformedDSNError(
                "SQLite connection string has no database path",
                context={"dsn": redact_dsn(dsn)},
            )
        return self._build(SQLiteConfig, dsn, {"db_path": path})


class SQLiteConnector(BaseDatabaseConnector):
    """SQLite connector over a single aiosqlite connection.

    SQLite has one namespace per database file, so every schema argument
    is ignored and ``main`` is reported as the only schema.
    """

    component_name = "SQLiteConnector"
    descriptor = ConnectorDescriptor(DialectId.SQLITE, "SQLite")
    dsn_parser_class = SQLiteDSNParser
    capabilities = ALL_CAPABILITIES - {Capability.STORED_PROCEDURES}
    fallback_schema = "main"

    def __init__(self) -> None:
        super().__init__()
        self._connection: Optional[aiosqlite.Connection] = None

    def _has_connection(self) -> bool:
        return self._connection is not None

    async def _open(self) -> None:
        db_path = self.config.db_path
        if db_path != MEMORY_PATH and not Path(db_path).exists():
            raise DatabaseConnectionError(
                f"SQLite database file not found: {db_path}",
                code=ErrorCodes.CONFIG_NOT_FOUND,
                context={"database_path": db_path},
            )

        try:
            self._connection = await aiosqlite.connect(db_path)
            self._connection.row_factory = aiosqlite.Row
            await self._connection.execute("PRAGMA foreign_keys = ON")

            async with self._connection.execute("SELECT sqlite_version()") as cursor:
                result = await cursor.fetchone()
                self._server_version = result[0] if result else "unknown"
        except sqlite3.DatabaseError as e:
            raise DatabaseConnectionError(
                f"SQLite database error: {e}",
                code=ErrorCodes.CONNECTION_REFUSED,
                context={"database_path": db_path},
                cause=e,
            ) from e

        self.logger.info(
            "SQLite connection opened",
            database_path=db_path,
            sqlite_version=self._server_version,
        )

    async def _close(self) -> None:
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    async def _run_init_script(self, script: str) -> None:
        await self._connection.executescript(script)
        await self._connection.commit()

    async def _fetch(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        async with self._connection.execute(sql, tuple(params)) as cursor:
            rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def _execute(self, statement: str) -> SQLResult:
        # sqlite3 refuses more than one statement per execute()
        async with self._connection.execute(statement) as cursor:
            if cursor.description is None:
                await self._connection.commit()
                return SQLResult(rows=[])
            rows = await cursor.fetchall()
            fields = [FieldDescriptor(desc[0]) for desc in cursor.description]
        return SQLResult(rows=[dict(row) for row in rows], fields=fields)

    async def _get_schemas(self) -> List[str]:
        return ["main"]

    async def _get_tables(self, schema: Optional[str]) -> List[str]:
        rows = await self._fetch(
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' "
            "ORDER BY name"
        )
        return [row["name"] for row in rows]

    async def _table_exists(self, table: str, schema: Optional[str]) -> bool:
        rows = await self._fetch(
            "SELECT 1 AS found FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' AND name = ?",
            (table,),
        )
        return bool(rows)

    async def _get_table_schema(self, table: str, schema: Optional[str]) -> List[TableColumn]:
        rows = await self._fetch(
            "SELECT name, type, \"notnull\", dflt_value, pk "
            "FROM pragma_table_info(?) ORDER BY cid",
            (table,),
        )
        return [
            TableColumn(
                name=row["name"],
                data_type=row["type"],
                # Primary key columns never hold NULL in practice
                nullable=not row["notnull"] and not row["pk"],
                default_expression=row["dflt_value"],
            )
            for row in rows
        ]

    async def _get_table_indexes(self, table: str, schema: Optional[str]) -> List[TableIndex]:
        rows = await self._fetch(
            "SELECT il.name AS index_name, ii.name AS column_name, "
            "il.\"unique\" AS is_unique, il.origin = 'pk' AS is_primary "
            "FROM pragma_index_list(?) AS il "
            "JOIN pragma_index_info(il.name) AS ii "
            "ORDER BY il.name, ii.seqno",
            (table,),
        )
        indexes = self._group_indexes(rows)

        if not any(index.is_primary for index in indexes):
            # A rowid-alias primary key has no index of its own
            pk_rows = await self._fetch(
                "SELECT name FROM pragma_table_info(?) WHERE pk > 0 ORDER BY pk",
                (table,),
            )
            if pk_rows:
                indexes.append(
                    TableIndex(
                        name="PRIMARY",
                        column_names=tuple(row["name"] for row in pk_rows),
                        is_unique=True,
                        is_primary=True,
                    )
                )

        return sorted(indexes, key=lambda index: (not index.is_primary, index.name))

    async def _get_stored_procedures(self, schema: Optional[str]) -> List[str]:
        return []
