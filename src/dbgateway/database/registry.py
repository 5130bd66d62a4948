# src/dbgateway/database/registry.py
"""Connector registry for dbgateway."""

from typing import Dict, List, Optional, Union

from .base import BaseDatabaseConnector
from .dsn import redact_dsn
from .models import DialectId
from ..core.exceptions import ErrorCodes, GatewayException
from ..logging import get_logger


class ConnectorRegistry:
    """Catalogue of connector prototypes keyed by dialect.

    Registered connectors are never connected; the manager clones a
    prototype to obtain a working instance. Lookup by DSN walks the
    connectors in registration order and the first one whose parser
    accepts the string wins.
    """

    def __init__(self) -> None:
        self.logger = get_logger("database.registry")
        self._connectors: Dict[DialectId, BaseDatabaseConnector] = {}

    def register(self, connector: BaseDatabaseConnector) -> None:
        """Register a connector prototype under its declared id.

        Args:
            connector: Connector instance

        Raises:
            GatewayException: If the object is not a connector
        """
        if not isinstance(connector, BaseDatabaseConnector):
            raise GatewayException(
                f"Connector {type(connector).__name__} must extend BaseDatabaseConnector",
                code=ErrorCodes.CONFIG_INVALID,
                context={"class": type(connector).__name__},
            )

        connector_id = connector.id
        if connector_id in self._connectors:
            self.logger.warning(
                "Overriding existing connector registration",
                connector_id=connector_id.value,
                existing_class=type(self._connectors[connector_id]).__name__,
                new_class=type(connector).__name__,
            )
            # Re-registration keeps the original position in dispatch order
        self._connectors[connector_id] = connector

        self.logger.debug(
            "Connector registered",
            connector_id=connector_id.value,
            class_name=type(connector).__name__,
        )

    def get_connector(self, connector_id: Union[DialectId, str]) -> Optional[BaseDatabaseConnector]:
        try:
            key = DialectId(connector_id)
        except ValueError:
            return None
        return self._connectors.get(key)

    def get_connector_for_dsn(self, dsn: str) -> Optional[BaseDatabaseConnector]:
        """Find the first registered connector whose parser accepts the DSN.

        Returns:
            The matching connector prototype, or None when nothing matches
        """
        for connector in self._connectors.values():
            if connector.dsn_parser.is_valid_dsn(dsn):
                self.logger.debug(
                    "Connector matched DSN",
                    connector_id=connector.id.value,
                    dsn=redact_dsn(dsn) if isinstance(dsn, str) else None,
                )
                return connector
        return None

    def get_available_connectors(self) -> List[DialectId]:
        return list(self._connectors)

    def get_sample_dsn(self, connector_id: Union[DialectId, str]) -> Optional[str]:
        connector = self.get_connector(connector_id)
        return connector.dsn_parser.get_sample_dsn() if connector is not None else None

    def get_all_sample_dsns(self) -> Dict[DialectId, str]:
        return {
            connector_id: connector.dsn_parser.get_sample_dsn()
            for connector_id, connector in self._connectors.items()
        }

    def list_connectors(self) -> Dict[str, Dict[str, str]]:
        """Get metadata for all registered connectors."""
        return {
            connector_id.value: {
                "id": connector_id.value,
                "name": connector.display_name,
                "class_name": type(connector).__name__,
                "sample_dsn": connector.dsn_parser.get_sample_dsn(),
            }
            for connector_id, connector in self._connectors.items()
        }

    def is_registered(self, connector_id: Union[DialectId, str]) -> bool:
        return self.get_connector(connector_id) is not None

    def unregister(self, connector_id: Union[DialectId, str]) -> None:
        """Remove a connector registration.

        Raises:
            GatewayException: If the connector is not registered
        """
        connector = self.get_connector(connector_id)
        if connector is None:
            raise GatewayException(
                f"Cannot unregister unknown connector: {connector_id}",
                code=ErrorCodes.CONFIG_NOT_FOUND,
                context={"connector_id": str(connector_id)},
            )
        del self._connectors[connector.id]
        self.logger.info("Connector unregistered", connector_id=connector.id.value)

    def clear(self) -> None:
        """Clear all registered connectors."""
        connector_ids = [c.value for c in self._connectors]
        self._connectors.clear()
        self.logger.info("Registry cleared", unregistered_connectors=connector_ids)

    def __len__(self) -> int:
        return len(self._connectors)

    def __contains__(self, connector_id: object) -> bool:
        return isinstance(connector_id, (str, DialectId)) and self.is_registered(connector_id)


def build_default_registry() -> ConnectorRegistry:
    """Create a registry holding every bundled connector."""
    from .connectors import (
        MariaDBConnector,
        MySQLConnector,
        OracleConnector,
        PostgreSQLConnector,
        SQLiteConnector,
        SQLServerConnector,
    )

    registry = ConnectorRegistry()
    for connector_class in (
        PostgreSQLConnector,
        MySQLConnector,
        MariaDBConnector,
        SQLServerConnector,
        OracleConnector,
        SQLiteConnector,
    ):
        registry.register(connector_class())
    return registry


# Global registry instance
_default_registry: Optional[ConnectorRegistry] = None


def get_default_registry() -> ConnectorRegistry:
    """Get the process-wide registry of bundled connectors."""
    global _default_registry
    if _default_registry is None:
        _default_registry = build_default_registry()
    return _default_registry
