# src/dbgateway/database/models.py
"""Introspection and result records shared by every connector."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class DialectId(str, Enum):
    """Supported database dialects."""
    POSTGRES = "postgres"
    MYSQL = "mysql"
    MARIADB = "mariadb"
    SQLSERVER = "sqlserver"
    ORACLE = "oracle"
    SQLITE = "sqlite"


class Capability(str, Enum):
    """Optional connector capabilities."""
    STORED_PROCEDURES = "stored_procedures"


@dataclass(frozen=True)
class ConnectorDescriptor:
    """Stable identity of a connector."""
    id: DialectId
    display_name: str


@dataclass(frozen=True)
class TableColumn:
    """Column of a table, in ordinal position order."""
    name: str
    data_type: str
    nullable: bool
    default_expression: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "data_type": self.data_type,
            "nullable": self.nullable,
        }
        if self.default_expression is not None:
            data["default_expression"] = self.default_expression
        return data


@dataclass(frozen=True)
class TableIndex:
    """Index of a table; column_names follow key order."""
    name: str
    column_names: Tuple[str, ...]
    is_unique: bool
    is_primary: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "column_names": list(self.column_names),
            "is_unique": self.is_unique,
            "is_primary": self.is_primary,
        }


@dataclass(frozen=True)
class StoredProcedure:
    """Stored procedure or function.

    ``definition_source`` is best-effort and left as None when the backend
    does not expose it to the connected user.
    """
    name: str
    kind: str  # 'procedure' or 'function'
    language: str
    parameter_signature: str
    return_type: Optional[str] = None
    definition_source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "kind": self.kind,
            "language": self.language,
            "parameter_signature": self.parameter_signature,
        }
        if self.return_type is not None:
            data["return_type"] = self.return_type
        if self.definition_source is not None:
            data["definition_source"] = self.definition_source
        return data


@dataclass(frozen=True)
class FieldDescriptor:
    """Result column as reported by the driver."""
    name: str
    type_name: Optional[str] = None


@dataclass
class SQLResult:
    """Rows returned by a statement, unnormalized."""
    rows: List[Dict[str, Any]]
    fields: List[FieldDescriptor] = field(default_factory=list)
    execution_time: float = 0.0

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": self.rows,
            "fields": [{"name": f.name, "type": f.type_name} for f in self.fields],
            "row_count": self.row_count,
        }


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a statement safety check."""
    is_valid: bool
    message: Optional[str] = None
