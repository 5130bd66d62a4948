#!/usr/bin/env python3
"""Command line entry point for dbgateway.

Resolves the connection string, connects the matching connector once and
runs a single introspection or query command. Results are written to stdout
as JSON envelopes; logs go to stderr.

Exit codes:
    0: Command succeeded
    1: Startup failed (no DSN, no matching connector, connect error)
    2: The command itself failed
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import __version__
from .config import GatewaySettings, resolve_dsn
from .core.exceptions import (
    ConfigurationError,
    GatewayException,
    NoMatchingConnectorError,
    TableNotFoundError,
    format_error,
    format_success,
)
from .database import ConnectorManager, get_default_registry
from .logging import configure_logging, get_logger

EXIT_OK = 0
EXIT_STARTUP_FAILED = 1
EXIT_COMMAND_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="dbgateway",
        description="Inspect and query a relational database through one connection string",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s connectors                                   # List supported databases
  %(prog)s --dsn sqlite:///data/app.db tables           # List tables
  %(prog)s --dsn postgres://u:p@host/db describe users  # Describe a table
  %(prog)s --readonly query "SELECT count(*) FROM users"

The DSN is read from --dsn, then the DSN environment variable, then a .env file.
        """,
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    parser.add_argument(
        "--dsn",
        help="Database connection string",
    )

    parser.add_argument(
        "--readonly",
        action="store_true",
        help="Restrict query to the read-only statement allow-list",
    )

    parser.add_argument(
        "--init-script",
        type=Path,
        metavar="FILE",
        help="SQL script executed right after connecting",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Log level (default: INFO)",
    )

    parser.add_argument(
        "--log-format",
        choices=["json", "text"],
        type=str.lower,
        help="Log format (default: text)",
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    commands.add_parser("connectors", help="List supported connectors and sample DSNs")
    commands.add_parser("schemas", help="List schemas")

    tables = commands.add_parser("tables", help="List tables of a schema")
    tables.add_argument("--schema", help="Schema (default: the dialect's default)")

    describe = commands.add_parser("describe", help="Describe the columns of a table")
    describe.add_argument("table")
    describe.add_argument("--schema")

    indexes = commands.add_parser("indexes", help="List the indexes of a table")
    indexes.add_argument("table")
    indexes.add_argument("--schema")

    procedures = commands.add_parser("procedures", help="List stored procedures and functions")
    procedures.add_argument("--schema")

    procedure = commands.add_parser("procedure", help="Describe a stored procedure or function")
    procedure.add_argument("name")
    procedure.add_argument("--schema")

    query = commands.add_parser("query", help="Execute one statement")
    query.add_argument("sql")

    return parser


def _emit(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _print_sample_dsns(manager: ConnectorManager) -> None:
    print("\nSupported connection strings:", file=sys.stderr)
    for entry in manager.list_connectors():
        print(f"  {entry['name']:<12} {entry['dsn']}", file=sys.stderr)


async def run_command(manager: ConnectorManager, args: argparse.Namespace) -> Any:
    """Run one command against the connected manager and return its payload.

    Raises:
        GatewayException: If the command fails
    """
    connector = manager.get_current_connector()
    schema = getattr(args, "schema", None)

    if args.command == "schemas":
        return await connector.get_schemas()

    if args.command == "tables":
        return await connector.get_tables(schema)

    if args.command == "describe":
        columns = await connector.get_table_schema(args.table, schema)
        if not columns and not await connector.table_exists(args.table, schema):
            raise TableNotFoundError(
                f"Table '{args.table}' not found",
                context={"table": args.table, "schema": schema or connector.default_schema},
            )
        return [column.to_dict() for column in columns]

    if args.command == "indexes":
        return [index.to_dict() for index in await connector.get_table_indexes(args.table, schema)]

    if args.command == "procedures":
        return await connector.get_stored_procedures(schema)

    if args.command == "procedure":
        detail = await connector.get_stored_procedure_detail(args.name, schema)
        return detail.to_dict()

    if args.command == "query":
        result = await manager.execute_sql(args.sql)
        return {**result.to_dict(), "execution_time": result.execution_time}

    raise ValueError(f"Unknown command: {args.command}")


async def _run(args: argparse.Namespace, settings: GatewaySettings) -> int:
    logger = get_logger("cli")
    manager = ConnectorManager(get_default_registry(), readonly=settings.readonly)

    if args.command == "connectors":
        _emit(format_success(manager.list_connectors()))
        return EXIT_OK

    resolved = resolve_dsn(args.dsn)
    if resolved is None:
        print(
            "Error: no connection string given. Pass --dsn, set DSN, or add DSN to a .env file.",
            file=sys.stderr,
        )
        _print_sample_dsns(manager)
        return EXIT_STARTUP_FAILED

    logger.info("Resolved connection string", source=resolved.source)

    try:
        init_script = settings.load_init_script()
        connector = await manager.connect_with_dsn(resolved.dsn, init_script)
    except NoMatchingConnectorError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        _print_sample_dsns(manager)
        return EXIT_STARTUP_FAILED
    except GatewayException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        logger.error("Startup failed", error_code=e.code, context=e.context)
        return EXIT_STARTUP_FAILED

    logger.debug("Connector ready", connector=connector.get_connection_info())

    try:
        data = await run_command(manager, args)
    except GatewayException as e:
        _emit(format_error(e))
        return EXIT_COMMAND_FAILED
    finally:
        await manager.disconnect()

    _emit(format_success(data, {"connector": connector.id.value}))
    return EXIT_OK


def _settings_from_args(args: argparse.Namespace) -> GatewaySettings:
    settings = GatewaySettings.from_env()
    overrides: Dict[str, Any] = {}
    if args.readonly:
        overrides["readonly"] = True
    if args.init_script is not None:
        overrides["init_script_path"] = args.init_script
    logging_overrides = {
        key: value
        for key, value in (("level", args.log_level), ("format", args.log_format))
        if value
    }
    if logging_overrides:
        overrides["logging"] = settings.logging.model_copy(update=logging_overrides)
    return settings.model_copy(update=overrides) if overrides else settings


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = _settings_from_args(args)
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_STARTUP_FAILED

    configure_logging(level=settings.logging.level, format=settings.logging.format)
    return asyncio.run(_run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
