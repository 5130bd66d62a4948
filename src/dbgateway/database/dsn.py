# src/dbgateway/database/dsn.py
"""Connection string parsing shared by every dialect.

Each connector owns a ``DSNParser`` subclass. Classification
(``is_valid_dsn``) looks only at the scheme so the registry can dispatch
cheaply; ``parse`` does the full extraction and raises
``MalformedDSNError`` on bad input.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, NamedTuple, Optional, Tuple, Type, TypeVar
from urllib.parse import SplitResult, parse_qsl, unquote, urlsplit, urlunsplit

from pydantic import ValidationError

from ..config.models import BaseConfig
from ..core.exceptions import MalformedDSNError

ConfigT = TypeVar("ConfigT", bound=BaseConfig)

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


class URLParts(NamedTuple):
    """Components of a URL-style connection string, percent-decoded."""
    host: Optional[str]
    port: Optional[int]
    database: Optional[str]
    username: Optional[str]
    password: Optional[str]
    params: Dict[str, str]


def redact_dsn(dsn: str) -> str:
    """Mask the password of a connection string for logging."""
    try:
        parts = urlsplit(dsn)
        password = parts.password
    except ValueError:
        return "<unparseable dsn>"

    if password is None:
        return dsn

    userinfo, _, hostinfo = parts.netloc.rpartition("@")
    username = userinfo.split(":", 1)[0]
    return urlunsplit(parts._replace(netloc=f"{username}:****@{hostinfo}"))


class DSNParser(ABC):
    """Base class for dialect connection string parsers.

    Subclasses declare the schemes they accept, the default port and a
    sample DSN, and implement ``parse``.
    """

    schemes: ClassVar[Tuple[str, ...]] = ()
    default_port: ClassVar[Optional[int]] = None
    sample_dsn: ClassVar[str] = ""

    def is_valid_dsn(self, dsn: Any) -> bool:
        """Classify a connection string by scheme. Never raises."""
        if not isinstance(dsn, str):
            return False
        scheme, separator, rest = dsn.strip().partition("://")
        return bool(separator) and scheme.lower() in self.schemes

    @abstractmethod
    def parse(self, dsn: str) -> BaseConfig:
        """Parse a connection string into a driver configuration.

        Raises:
            MalformedDSNError: If the string cannot be parsed
        """

    def get_sample_dsn(self) -> str:
        return self.sample_dsn

    def _require_valid(self, dsn: str) -> None:
        if not self.is_valid_dsn(dsn):
            raise MalformedDSNError(
                f"Not a {'/'.join(self.schemes)} connection string",
                context={"dsn": redact_dsn(dsn) if isinstance(dsn, str) else repr(dsn)},
            )

    def _split_url(self, dsn: str) -> URLParts:
        self._require_valid(dsn)
        try:
            parts: SplitResult = urlsplit(dsn.strip())
            port = parts.port
        except ValueError as e:
            raise MalformedDSNError(
                f"Invalid connection string: {e}",
                context={"dsn": redact_dsn(dsn)},
                cause=e,
            ) from e

        database = unquote(parts.path[1:]) if parts.path.startswith("/") else unquote(parts.path)
        return URLParts(
            host=parts.hostname,
            port=port if port is not None else self.default_port,
            database=database or None,
            username=unquote(parts.username) if parts.username else None,
            password=unquote(parts.password) if parts.password is not None else None,
            params=dict(parse_qsl(parts.query, keep_blank_values=True)),
        )

    @staticmethod
    def _int_param(params: Dict[str, str], key: str) -> Optional[int]:
        value = params.get(key)
        if value is None or value == "":
            return None
        try:
            return int(value)
        except ValueError as e:
            raise MalformedDSNError(
                f"Parameter {key} must be an integer, got {value!r}",
                context={"parameter": key},
                cause=e,
            ) from e

    @staticmethod
    def _bool_param(params: Dict[str, str], key: str) -> Optional[bool]:
        value = params.get(key)
        if value is None:
            return None
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise MalformedDSNError(
            f"Parameter {key} must be a boolean, got {value!r}",
            context={"parameter": key},
        )

    @staticmethod
    def _build(config_class: Type[ConfigT], dsn: str, values: Dict[str, Any]) -> ConfigT:
        """Instantiate a config model, reporting validation errors as malformed DSNs."""
        try:
            return config_class(**{k: v for k, v in values.items() if v is not None})
        except ValidationError as e:
            raise MalformedDSNError(
                "Invalid connection string: "
                + "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()),
                context={"dsn": redact_dsn(dsn)},
                cause=e,
            ) from e

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(schemes={self.schemes!r})"
