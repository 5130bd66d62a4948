# src/dbgateway/database/manager.py
"""Owner of the single active connector.

One ``ConnectorManager`` is constructed at startup and handed to every
request handler. It resolves the DSN through the registry, connects a fresh
connector instance and guards statement execution with the safety policy.
"""

from typing import Any, Dict, List, Optional

from .base import BaseDatabaseConnector
from .dsn import redact_dsn
from .models import DialectId, SQLResult, ValidationResult
from .registry import ConnectorRegistry, get_default_registry
from ..core.exceptions import (
    ErrorCodes,
    GatewayException,
    NoMatchingConnectorError,
    NotInitializedError,
)
from ..logging import get_logger


class ConnectorManager:
    """Session-scoped owner of exactly one active connector.

    Example:
        >>> manager = ConnectorManager(readonly=True)
        >>> await manager.connect_with_dsn("sqlite::memory:")
        >>> connector = manager.get_current_connector()
        >>> await connector.get_tables()
        >>> await manager.disconnect()
    """

    def __init__(self, registry: Optional[ConnectorRegistry] = None, *, readonly: bool = False) -> None:
        self.logger = get_logger("database.manager")
        self._registry = registry if registry is not None else get_default_registry()
        self._readonly = readonly
        self._active: Optional[BaseDatabaseConnector] = None
        self._connected = False

    @property
    def registry(self) -> ConnectorRegistry:
        return self._registry

    @property
    def readonly(self) -> bool:
        return self._readonly

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def active_connector_id(self) -> Optional[DialectId]:
        return self._active.id if self._active is not None and self._connected else None

    async def connect_with_dsn(self, dsn: str, init_script: Optional[str] = None) -> BaseDatabaseConnector:
        """Resolve a connector for the DSN and connect it.

        Args:
            dsn: Connection string
            init_script: SQL batch executed right after connecting

        Returns:
            The connected connector

        Raises:
            GatewayException: If a connector is already connected
            NoMatchingConnectorError: If no registered connector accepts the DSN
            MalformedDSNError: If the matching connector cannot parse the DSN
            ConnectionError: If connecting fails
        """
        if self._connected:
            raise GatewayException(
                "A connector is already active; disconnect it first",
                code=ErrorCodes.ALREADY_CONNECTED,
                context={"active_connector": self._active.id.value if self._active else None},
            )

        prototype = self._registry.get_connector_for_dsn(dsn)
        if prototype is None:
            raise NoMatchingConnectorError(
                "No connector found that can handle the DSN",
                context={
                    "dsn": redact_dsn(dsn) if isinstance(dsn, str) else None,
                    "available_connectors": [c.value for c in self._registry.get_available_connectors()],
                },
            )

        connector = prototype.clone()
        self.logger.info(
            "Connecting with DSN",
            connector_id=connector.id.value,
            dsn=redact_dsn(dsn),
            readonly=self._readonly,
        )
        await connector.connect(dsn, init_script)

        self._active = connector
        self._connected = True
        return connector

    async def disconnect(self) -> None:
        """Disconnect the active connector; a no-op when nothing is connected."""
        if not self._connected or self._active is None:
            return
        try:
            await self._active.disconnect()
        finally:
            self._connected = False
            self.logger.info("Disconnected", connector_id=self._active.id.value)

    def get_current_connector(self) -> BaseDatabaseConnector:
        """Get the active connector.

        Raises:
            NotInitializedError: If no connector has been connected
        """
        if not self._connected or self._active is None:
            raise NotInitializedError(
                "No active connector. Call connect_with_dsn() first.",
            )
        return self._active

    def validate_query(self, statement: str) -> ValidationResult:
        connector = self.get_current_connector()
        return connector.policy.with_readonly(self._readonly).validate(statement)

    async def execute_sql(self, statement: str) -> SQLResult:
        """Validate a statement with the active policy, then execute it.

        Raises:
            NotInitializedError: If no connector has been connected
            ReadOnlyViolationError: If the statement is rejected
            QueryExecutionError: If the backend fails the statement
        """
        connector = self.get_current_connector()
        policy = connector.policy.with_readonly(self._readonly)
        policy.check(statement)
        return await connector.execute_sql(statement)

    def list_connectors(self) -> List[Dict[str, Any]]:
        """Describe every registered connector for help surfaces."""
        active_id = self.active_connector_id
        return [
            {
                "id": connector_id.value,
                "name": self._registry.get_connector(connector_id).display_name,
                "dsn": sample,
                "active": connector_id == active_id,
            }
            for connector_id, sample in self._registry.get_all_sample_dsns().items()
        ]

    async def __aenter__(self) -> "ConnectorManager":
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.disconnect()

    def __repr__(self) -> str:
        active = self.active_connector_id.value if self.active_connector_id else None
        return f"ConnectorManager(active={active!r}, readonly={self._readonly})"
