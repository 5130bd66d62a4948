"""dbgateway configuration management.

This package provides type-safe configuration models for driver connections
and process settings, plus connection string resolution.

Classes:
    BaseConfig: Base configuration class
    DriverConfig: Driver-ready connection configuration
    GatewaySettings: Process-wide gateway settings
    LoggingConfig: Logging configuration

Example:
    >>> from dbgateway.config import GatewaySettings, resolve_dsn
    >>> settings = GatewaySettings.from_env()
    >>> resolved = resolve_dsn(settings.dsn_value)
"""

from .environment import ResolvedDSN, resolve_dsn
from .models import (
    BaseConfig,
    DriverConfig,
    GatewaySettings,
    LoggingConfig,
    MySQLConfig,
    OracleConfig,
    PoolConfig,
    PostgresConfig,
    SQLiteConfig,
    SQLServerConfig,
)

__all__ = [
    "BaseConfig",
    "DriverConfig",
    "GatewaySettings",
    "LoggingConfig",
    "MySQLConfig",
    "OracleConfig",
    "PoolConfig",
    "PostgresConfig",
    "ResolvedDSN",
    "SQLiteConfig",
    "SQLServerConfig",
    "resolve_dsn",
]
