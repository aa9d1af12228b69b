"""
dbgadget - Command Line Interface
Copyright (c) 2025 Dmitry Solonnikov
Licensed under MIT License - see LICENSE file for details
"""
import argparse
import logging
from typing import List, Optional

from .config import load_config
from .connection import CatalogClient, DatabaseConnection
from .dependencies import tables_in_dependency_order
from .errors import GadgetError
from .graph import dependency_graph
from .models import ColumnOptions
from .scanner import CatalogScanner

logger = logging.getLogger(__name__)

COMMANDS = ('tables', 'order', 'graph', 'constraints', 'foreign-keys',
            'functions', 'sequences', 'triggers', 'types')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dbgadget',
        description="Inspect a PostgreSQL schema and order its tables by foreign key dependencies.",
    )
    parser.add_argument('-c', '--config', default='config.ini',
                        help="INI file with [database] and [introspection] sections")
    parser.add_argument('-v', '--verbose', action='store_true', help="debug logging")
    parser.add_argument('command', choices=COMMANDS)
    parser.add_argument('table', nargs='?', help="limit listing to one table")
    return parser


def run(command: str, scanner: CatalogScanner, table: Optional[str] = None,
        include_dropped: bool = False) -> List[str]:
    """Run one command and return its output lines."""
    if command == 'order':
        return tables_in_dependency_order(scanner)
    if command == 'graph':
        return dependency_graph(scanner).splitlines()
    if command == 'tables':
        columns = scanner.list_columns(table, ColumnOptions(include_dropped=include_dropped))
        return [f"{name}: {', '.join(t.columns)}" for name, t in columns.items()]
    if command == 'constraints':
        return [
            f"{name}.{c.name} ({c.kind.value})"
            for name, items in scanner.list_constraints(table).items()
            for c in items
        ]
    if command == 'foreign-keys':
        return [
            f"{name}.{fk.name}: ({', '.join(fk.columns)}) -> {fk.ref_table} ({', '.join(fk.ref_columns)})"
            for name, items in scanner.list_foreign_keys(table).items()
            for fk in items
        ]
    if command == 'functions':
        return [f"{f.name} {f.arg_types}" for f in scanner.list_functions().values()]
    if command == 'sequences':
        return list(scanner.list_sequences())
    if command == 'triggers':
        return [f"{t.name} on {t.table_name} -> {t.function_name}"
                for t in scanner.list_triggers(table).values()]
    if command == 'types':
        return list(scanner.list_types())
    raise ValueError(f"Unknown command: {command}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        config = load_config(args.config)
        with DatabaseConnection(config.database) as conn:
            scanner = CatalogScanner(CatalogClient(conn), schema=config.schema)
            lines = run(args.command, scanner, args.table, config.include_dropped)
    except GadgetError as e:
        logger.error("%s", e)
        return 1

    for line in lines:
        print(line)
    return 0
