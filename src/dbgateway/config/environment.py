"""Connection string resolution for the startup path.

The DSN is taken from the first source that provides one: the explicit
command-line value, the ``DSN`` environment variable, then a ``DSN`` entry
in a ``.env`` file.
"""

import os
from pathlib import Path
from typing import Mapping, NamedTuple, Optional, Union

from dotenv import dotenv_values

SOURCE_COMMAND_LINE = "command line argument"
SOURCE_ENVIRONMENT = "environment variable"
SOURCE_DOTENV = ".env file"


class ResolvedDSN(NamedTuple):
    dsn: str
    source: str


def resolve_dsn(
    cli_dsn: Optional[str] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    dotenv_path: Union[str, Path, None] = None,
) -> Optional[ResolvedDSN]:
    """Resolve the connection string.

    Args:
        cli_dsn: Value given on the command line
        environ: Environment mapping (defaults to ``os.environ``)
        dotenv_path: ``.env`` file to consult (defaults to ``./.env``)

    Returns:
        The DSN and where it came from, or None when no source defines one
    """
    if cli_dsn:
        return ResolvedDSN(cli_dsn, SOURCE_COMMAND_LINE)

    env = os.environ if environ is None else environ
    if env.get("DSN"):
        return ResolvedDSN(env["DSN"], SOURCE_ENVIRONMENT)

    path = Path(dotenv_path) if dotenv_path is not None else Path.cwd() / ".env"
    if path.is_file():
        dsn = dotenv_values(path).get("DSN")
        if dsn:
            return ResolvedDSN(dsn, SOURCE_DOTENV)

    return None
