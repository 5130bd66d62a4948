"""Base class for dialect connectors.

``BaseDatabaseConnector`` owns the lifecycle, DSN parsing, logging, error
wrapping and default-namespace substitution. Dialects implement the
underscore-prefixed hooks that talk to their driver.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import (
    Any,
    Awaitable,
    Callable,
    ClassVar,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Type,
    TypeVar,
)

from .dsn import DSNParser, redact_dsn
from .models import (
    Capability,
    ConnectorDescriptor,
    DialectId,
    SQLResult,
    StoredProcedure,
    TableColumn,
    TableIndex,
    ValidationResult,
)
from .safety import StatementSafetyPolicy
from ..config.models import BaseConfig
from ..core import LifecycleComponent, LifecycleState
from ..core.exceptions import (
    DatabaseConnectionError,
    ErrorCodes,
    GatewayException,
    IntrospectionError,
    NotInitializedError,
    QueryExecutionError,
    UnsupportedOperationError,
)
from ..logging import get_logger, get_performance_logger

T = TypeVar("T")

ALL_CAPABILITIES: FrozenSet[Capability] = frozenset(Capability)


class BaseDatabaseConnector(LifecycleComponent, ABC):
    """
    Abstract base class for all database connectors.
    Provides lifecycle management, logging and the introspection contract.
    """

    descriptor: ClassVar[ConnectorDescriptor]
    dsn_parser_class: ClassVar[Type[DSNParser]]
    capabilities: ClassVar[FrozenSet[Capability]] = ALL_CAPABILITIES
    fallback_schema: ClassVar[Optional[str]] = None

    def __init__(self) -> None:
        super().__init__()
        self.dsn_parser: DSNParser = self.dsn_parser_class()
        self.logger = get_logger(f"connector.{self.id.value}").bind(connector=self.id.value)
        self.perf_logger = get_performance_logger(f"connector.{self.id.value}")
        self.policy = StatementSafetyPolicy(self.id)
        self.config: Optional[BaseConfig] = None
        self._init_script: Optional[str] = None
        self._default_schema: Optional[str] = self.fallback_schema
        self._server_version: Optional[str] = None

    @property
    def id(self) -> DialectId:
        return self.descriptor.id

    @property
    def display_name(self) -> str:
        return self.descriptor.display_name

    @property
    def default_schema(self) -> Optional[str]:
        """Namespace substituted when a call omits the schema."""
        return self._default_schema

    @property
    def is_connected(self) -> bool:
        """Return True if connector is initialized and holds a connection."""
        return self.is_initialized and self._has_connection()

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def clone(self) -> "BaseDatabaseConnector":
        """Return a fresh, unconnected instance of this connector type."""
        return type(self)()

    def get_connection_info(self) -> Dict[str, Any]:
        """Get current connection details for diagnostics."""
        info: Dict[str, Any] = {
            "connector": self.id.value,
            "state": self.state.value,
            "connected": self.is_connected,
            "default_schema": self._default_schema,
            "server_version": self._server_version,
            "operation_metrics": self.perf_logger.get_all_metrics(),
        }
        if self.config is not None:
            for key in ("host", "port", "database", "db_path"):
                if hasattr(self.config, key):
                    info[key] = getattr(self.config, key)
        return info

    # Lifecycle

    async def connect(self, dsn: str, init_script: Optional[str] = None) -> None:
        """Parse the DSN, open the driver connection and run the init script.

        Raises:
            GatewayException: If the connector was already connected
            MalformedDSNError: If the DSN cannot be parsed
            ConnectionError: If the backend cannot be reached or rejects the login
        """
        if self.state is not LifecycleState.UNINITIALIZED:
            raise GatewayException(
                f"{self.display_name} connector cannot connect in state: {self.state.value}",
                code=ErrorCodes.ALREADY_CONNECTED
                if self.state is LifecycleState.CONNECTED
                else ErrorCodes.INVALID_STATE,
                context={"connector": self.id.value, "state": self.state.value},
            )

        self.config = self.dsn_parser.parse(dsn)
        self._init_script = init_script
        self.logger.info("Connecting", dsn=redact_dsn(dsn))
        await self.initialize()

    async def disconnect(self) -> None:
        """Close the driver connection. Safe to call repeatedly."""
        await self.cleanup()

    async def _async_initialize(self) -> None:
        with self.perf_logger.measure("connect"):
            try:
                await self._open()
            except GatewayException:
                raise
            except Exception as e:
                raise DatabaseConnectionError(
                    f"Failed to connect to {self.display_name}: {e}",
                    context=self._connection_context(),
                    cause=e,
                ) from e
        if self._init_script and self._init_script.strip():
            self.logger.info("Running initialization script")
            try:
                await self._run_init_script(self._init_script)
            except Exception as e:
                raise QueryExecutionError(
                    f"Initialization script failed: {e}",
                    context={"connector": self.id.value},
                    cause=e,
                ) from e
        self.logger.info("Connected", default_schema=self._default_schema)

    async def _async_cleanup(self) -> None:
        await self._close()
        self.logger.info("Disconnected")

    def _connection_context(self) -> Dict[str, Any]:
        context: Dict[str, Any] = {"connector": self.id.value}
        for key in ("host", "port", "database"):
            value = getattr(self.config, key, None)
            if value is not None:
                context[key] = value
        return context

    def _ensure_connected(self) -> None:
        if self.state is not LifecycleState.CONNECTED:
            raise NotInitializedError(
                f"{self.display_name} connector is not connected",
                context={"connector": self.id.value, "state": self.state.value},
            )

    def _resolve_schema(self, schema: Optional[str]) -> Optional[str]:
        return schema if schema else self._default_schema

    async def _introspect(
        self,
        operation: str,
        call: Callable[[], Awaitable[T]],
        **context: Any,
    ) -> T:
        self._ensure_connected()
        with self.perf_logger.measure(operation, **context):
            try:
                return await call()
            except GatewayException:
                raise
            except Exception as e:
                self.logger.bind(operation=operation, **context).error(
                    "Introspection failed", error=str(e)
                )
                raise IntrospectionError(
                    f"{operation} failed: {e}",
                    context={"connector": self.id.value, "operation": operation, **context},
                    cause=e,
                ) from e

    # Introspection contract

    async def get_schemas(self) -> List[str]:
        return await self._introspect("get_schemas", self._get_schemas)

    async def get_tables(self, schema: Optional[str] = None) -> List[str]:
        """List tables of a schema, ordered by name."""
        target = self._resolve_schema(schema)
        return await self._introspect(
            "get_tables", lambda: self._get_tables(target), schema=target
        )

    async def table_exists(self, table: str, schema: Optional[str] = None) -> bool:
        target = self._resolve_schema(schema)
        return await self._introspect(
            "table_exists", lambda: self._table_exists(table, target), table=table, schema=target
        )

    async def get_table_schema(self, table: str, schema: Optional[str] = None) -> List[TableColumn]:
        """List columns of a table in ordinal order.

        A missing table yields an empty list; callers use ``table_exists``
        to tell the two apart.
        """
        target = self._resolve_schema(schema)
        return await self._introspect(
            "get_table_schema",
            lambda: self._get_table_schema(table, target),
            table=table,
            schema=target,
        )

    async def get_table_indexes(self, table: str, schema: Optional[str] = None) -> List[TableIndex]:
        target = self._resolve_schema(schema)
        return await self._introspect(
            "get_table_indexes",
            lambda: self._get_table_indexes(table, target),
            table=table,
            schema=target,
        )

    async def get_stored_procedures(self, schema: Optional[str] = None) -> List[str]:
        target = self._resolve_schema(schema)
        return await self._introspect(
            "get_stored_procedures", lambda: self._get_stored_procedures(target), schema=target
        )

    async def get_stored_procedure_detail(
        self, name: str, schema: Optional[str] = None
    ) -> StoredProcedure:
        """Describe one stored procedure or function.

        Raises:
            NotInitializedError: If the connector is not connected
            UnsupportedOperationError: If the dialect has no stored routines
            ProcedureNotFoundError: If no routine has that name
        """
        self._ensure_connected()
        if not self.supports(Capability.STORED_PROCEDURES):
            raise UnsupportedOperationError(
                f"{self.display_name} does not support stored procedures",
                context={"connector": self.id.value},
            )
        target = self._resolve_schema(schema)
        return await self._introspect(
            "get_stored_procedure_detail",
            lambda: self._get_stored_procedure_detail(name, target),
            procedure=name,
            schema=target,
        )

    # Execution

    def validate_query(self, statement: str) -> ValidationResult:
        return self.policy.validate(statement)

    async def execute_sql(self, statement: str) -> SQLResult:
        """Execute exactly one statement.

        The safety policy is not applied here; ``ConnectorManager.execute_sql``
        does that.

        Raises:
            NotInitializedError: If the connector is not connected
            QueryExecutionError: If the backend rejects or fails the statement
        """
        self._ensure_connected()
        with self.perf_logger.measure("execute_sql") as timer:
            try:
                result = await self._execute(statement)
            except GatewayException:
                raise
            except Exception as e:
                self.logger.warning("Statement failed", error=str(e))
                raise QueryExecutionError(
                    str(e),
                    context={"connector": self.id.value},
                    cause=e,
                ) from e
        result.execution_time = timer.duration or 0.0
        return result

    # Helpers for dialects

    @staticmethod
    def _group_indexes(rows: Iterable[Mapping[str, Any]]) -> List[TableIndex]:
        """Fold one-row-per-column index metadata into index records.

        Rows must carry ``index_name``, ``column_name``, ``is_unique`` and
        ``is_primary`` and arrive in key order within each index.
        """
        grouped: Dict[str, Dict[str, Any]] = {}
        for row in rows:
            name = row["index_name"]
            entry = grouped.get(name)
            if entry is None:
                entry = grouped[name] = {
                    "columns": [],
                    "is_unique": bool(row["is_unique"]),
                    "is_primary": bool(row["is_primary"]),
                }
            entry["columns"].append(row["column_name"])

        return [
            TableIndex(
                name=name,
                column_names=tuple(entry["columns"]),
                is_unique=entry["is_unique"] or entry["is_primary"],
                is_primary=entry["is_primary"],
            )
            for name, entry in grouped.items()
        ]

    @staticmethod
    def _signature(parameters: Sequence[str]) -> str:
        return ", ".join(p for p in parameters if p)

    # Dialect hooks

    @abstractmethod
    async def _open(self) -> None:
        """Open the driver pool or connection from ``self.config``."""

    @abstractmethod
    async def _close(self) -> None:
        """Release the driver pool or connection; tolerate a missing one."""

    @abstractmethod
    def _has_connection(self) -> bool:
        pass

    @abstractmethod
    async def _fetch(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """Run a catalogue query and return rows as dictionaries."""

    @abstractmethod
    async def _execute(self, statement: str) -> SQLResult:
        pass

    async def _run_init_script(self, script: str) -> None:
        await self._execute(script)

    @abstractmethod
    async def _get_schemas(self) -> List[str]:
        pass

    @abstractmethod
    async def _get_tables(self, schema: Optional[str]) -> List[str]:
        pass

    async def _table_exists(self, table: str, schema: Optional[str]) -> bool:
        return table in await self._get_tables(schema)

    @abstractmethod
    async def _get_table_schema(self, table: str, schema: Optional[str]) -> List[TableColumn]:
        pass

    @abstractmethod
    async def _get_table_indexes(self, table: str, schema: Optional[str]) -> List[TableIndex]:
        pass

    @abstractmethod
    async def _get_stored_procedures(self, schema: Optional[str]) -> List[str]:
        pass

    async def _get_stored_procedure_detail(self, name: str, schema: Optional[str]) -> StoredProcedure:
        raise UnsupportedOperationError(
            f"{self.display_name} does not support stored procedures",
            context={"connector": self.id.value},
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id.value!r}, state={self.state.value!r})"
