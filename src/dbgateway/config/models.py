"""Configuration models for dbgateway.

This module defines Pydantic models for the configuration objects used by
the gateway: the driver configurations produced by the DSN parsers and the
process-level settings read at startup.

Classes:
    BaseConfig: Base configuration class
    PoolConfig: Connection pool sizing
    DriverConfig: Driver-ready connection configuration
    PostgresConfig: PostgreSQL connection configuration
    MySQLConfig: MySQL/MariaDB connection configuration
    SQLServerConfig: SQL Server connection configuration
    OracleConfig: Oracle connection configuration
    SQLiteConfig: SQLite connection configuration
    LoggingConfig: Logging configuration
    GatewaySettings: Process-wide gateway settings

Example:
    >>> config = PostgresConfig(
    ...     host="localhost",
    ...     database="postgres",
    ...     username="postgres",
    ...     password="secret",
    ...     sslmode="disable",
    ... )
    >>> config.to_dict()["password"]
    '***MASKED***'
"""

import os
import re
from pathlib import Path
from typing import Any, ClassVar, Dict, FrozenSet, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator
from pydantic import PositiveInt, ValidationError, ValidationInfo

from ..core.exceptions import ConfigurationError, ErrorCodes

_ENV_REFERENCE = re.compile(r"\$\{([^}]+)\}")

_TRUTHY = ("1", "true", "yes", "on")


def _resolve_env_references(value: Any) -> Any:
    if isinstance(value, str):
        def replace_env_var(match: "re.Match[str]") -> str:
            var_spec = match.group(1)
            if ":" in var_spec:
                var_name, default = var_spec.split(":", 1)
            else:
                var_name, default = var_spec, ""
            return os.getenv(var_name, default)

        return _ENV_REFERENCE.sub(replace_env_var, value)
    elif isinstance(value, dict):
        return {k: _resolve_env_references(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_env_references(item) for item in value]
    return value


class BaseConfig(BaseModel):
    """Base configuration class with common functionality.

    Provides strict validation, ``${VAR}`` / ``${VAR:default}`` environment
    reference resolution and secret-masking serialization. Subclasses built
    from untrusted input set ``resolve_env`` to False so their values are
    kept literally; ``literal_fields`` exempts individual fields.

    Example:
        >>> class MyConfig(BaseConfig):
        ...     name: str
        ...     value: int = 42
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
        use_enum_values=True,
        validate_default=True,
        populate_by_name=True,
    )

    resolve_env: ClassVar[bool] = True
    literal_fields: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def resolve_environment_variables(cls, values: Any) -> Any:
        """Resolve environment variable references in string values.

        Supports ${VAR_NAME} and ${VAR_NAME:default_value} syntax.
        """
        if cls.resolve_env and isinstance(values, dict):
            return {
                key: value if key in cls.literal_fields else _resolve_env_references(value)
                for key, value in values.items()
            }
        return values

    def to_dict(self, *, mask_secrets: bool = True) -> Dict[str, Any]:
        """Convert configuration to dictionary.

        Args:
            mask_secrets: Whether to mask secret values

        Returns:
            Dictionary representation of configuration
        """
        data = self.model_dump()

        def convert(value: Any) -> Any:
            if isinstance(value, dict):
                return {k: convert(v) for k, v in value.items()}
            elif isinstance(value, list):
                return [convert(item) for item in value]
            elif isinstance(value, SecretStr):
                return "***MASKED***" if mask_secrets else value.get_secret_value()
            return value

        return convert(data)


class PoolConfig(BaseConfig):
    """Connection pool sizing.

    Attributes:
        min_size: Minimum pool size
        max_size: Maximum pool size
        increment: Connections opened per growth step (Oracle only)
    """

    resolve_env = False

    min_size: int = Field(1, ge=0, description="Minimum pool size")
    max_size: PositiveInt = Field(10, description="Maximum pool size")
    increment: PositiveInt = Field(1, description="Pool growth step")

    @model_validator(mode="after")
    def validate_max_size(self) -> "PoolConfig":
        if self.max_size < self.min_size:
            raise ValueError("max_size must be greater than or equal to min_size")
        return self


class DriverConfig(BaseConfig):
    """Driver-ready connection configuration produced by a DSN parser.

    Attributes:
        host: Database host
        port: Database port
        database: Database, service or namespace name
        username: Login user
        password: Login password
        pool: Pool sizing
        connect_timeout: Connection timeout in seconds
        options: Unrecognized query parameters, kept for reference
    """

    # Values come from a DSN and are taken as given.
    resolve_env = False

    host: str = Field("localhost", min_length=1, description="Database host")
    port: Optional[PositiveInt] = Field(None, description="Database port")
    database: Optional[str] = Field(None, description="Database name")
    username: Optional[str] = Field(None, description="Database username")
    password: Optional[SecretStr] = Field(None, description="Database password")
    pool: PoolConfig = Field(default_factory=PoolConfig, description="Pool sizing")
    connect_timeout: Optional[PositiveInt] = Field(None, description="Connect timeout in seconds")
    options: Dict[str, str] = Field(default_factory=dict, description="Extra query parameters")

    @property
    def password_value(self) -> Optional[str]:
        return self.password.get_secret_value() if self.password is not None else None


class PostgresConfig(DriverConfig):
    """PostgreSQL connection configuration."""

    port: PositiveInt = 5432
    sslmode: Literal[
        "disable", "allow", "prefer", "require", "verify-ca", "verify-full"
    ] = Field("verify-full", description="libpq TLS mode")
    statement_timeout: Optional[PositiveInt] = Field(
        None, description="Per-statement timeout in seconds"
    )


class MySQLConfig(DriverConfig):
    """MySQL and MariaDB connection configuration."""

    port: PositiveInt = 3306
    ssl: bool = Field(False, description="Require TLS")


class SQLServerConfig(DriverConfig):
    """SQL Server connection configuration."""

    port: PositiveInt = 1433
    encrypt: bool = Field(True, description="Encrypt the connection")
    trust_server_certificate: bool = Field(False, description="Skip certificate validation")
    request_timeout: Optional[PositiveInt] = Field(None, description="Query timeout in seconds")
    driver: str = Field("ODBC Driver 18 for SQL Server", description="ODBC driver name")
    instance_name: Optional[str] = Field(None, description="Named instance")

    def odbc_connection_string(self) -> str:
        """Render the ODBC connection string handed to the driver manager."""
        server = self.host
        if self.instance_name:
            server = f"{server}\\{self.instance_name}"
        else:
            server = f"{server},{self.port}"

        parts = [
            f"DRIVER={{{self.driver}}}",
            f"SERVER={server}",
        ]
        if self.database:
            parts.append(f"DATABASE={self.database}")
        if self.username:
            parts.append(f"UID={self.username}")
        if self.password is not None:
            parts.append(f"PWD={{{self.password_value}}}")
        parts.append(f"Encrypt={'yes' if self.encrypt else 'no'}")
        parts.append(f"TrustServerCertificate={'yes' if self.trust_server_certificate else 'no'}")
        return ";".join(parts)


class OracleConfig(DriverConfig):
    """Oracle connection configuration; ``database`` holds the service name."""

    port: PositiveInt = 1521

    @property
    def connect_string(self) -> str:
        return f"{self.host}:{self.port}/{self.database or ''}"


class SQLiteConfig(BaseConfig):
    """SQLite connection configuration.

    Attributes:
        db_path: ``:memory:`` or a filesystem path
    """

    resolve_env = False

    db_path: str = Field(..., min_length=1, description="Database file path or :memory:")

    @property
    def is_memory(self) -> bool:
        return self.db_path == ":memory:"


class LoggingConfig(BaseConfig):
    """Logging configuration.

    Attributes:
        level: Log level
        format: Log output format
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Log level"
    )
    format: Literal["json", "text"] = Field("text", description="Log format")

    @field_validator("level", "format", mode="before")
    @classmethod
    def normalize_case(cls, v: Any, info: ValidationInfo) -> Any:
        if isinstance(v, str):
            return v.upper() if info.field_name == "level" else v.lower()
        return v


class GatewaySettings(BaseConfig):
    """Process-wide gateway settings.

    Attributes:
        dsn: Connection string, resolved by the startup path
        readonly: Tighten the statement safety policy
        init_script_path: SQL script executed right after connect
        logging: Logging configuration
    """

    literal_fields = frozenset({"dsn"})

    dsn: Optional[SecretStr] = Field(None, description="Connection string")
    readonly: bool = Field(False, description="Read-only mode")
    init_script_path: Optional[Path] = Field(None, description="Initialization SQL script")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging config")

    @property
    def dsn_value(self) -> Optional[str]:
        return self.dsn.get_secret_value() if self.dsn is not None else None

    def load_init_script(self) -> Optional[str]:
        """Read the initialization script, if one is configured.

        Raises:
            ConfigurationError: If the script file cannot be read
        """
        if self.init_script_path is None:
            return None
        try:
            return self.init_script_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read init script: {self.init_script_path}",
                code=ErrorCodes.CONFIG_NOT_FOUND,
                context={"path": str(self.init_script_path)},
                cause=e,
            ) from e

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GatewaySettings":
        """Build settings from environment variables.

        Reads ``DSN``, ``READONLY``, ``INIT_SCRIPT``, ``LOG_LEVEL`` and
        ``LOG_FORMAT``; unset variables keep their defaults.

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ

        values: Dict[str, Any] = {}
        if env.get("DSN"):
            values["dsn"] = env["DSN"]
        if env.get("READONLY"):
            values["readonly"] = env["READONLY"].strip().lower() in _TRUTHY
        if env.get("INIT_SCRIPT"):
            values["init_script_path"] = env["INIT_SCRIPT"]

        logging_values: Dict[str, Any] = {}
        if env.get("LOG_LEVEL"):
            logging_values["level"] = env["LOG_LEVEL"]
        if env.get("LOG_FORMAT"):
            logging_values["format"] = env["LOG_FORMAT"]
        if logging_values:
            values["logging"] = logging_values

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(
                "Invalid gateway settings in environment",
                context={"errors": [err["msg"] for err in e.errors()]},
                cause=e,
            ) from e
