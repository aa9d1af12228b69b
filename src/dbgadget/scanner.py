"""
dbgadget - Catalog Scanner Module
Copyright (c) 2025 Dmitry Solonnikov
Licensed under MIT License - see LICENSE file for details
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence as Seq

from .config import DEFAULT_SCHEMA
from .errors import QueryFailure, UnresolvedReference
from .models import (
    ColumnOptions, Constraint, ForeignKey, Function, PgType, Sequence, Table,
    Trigger, UnknownConstraintKind, constraint_kind,
)

logger = logging.getLogger(__name__)

INTEGER_COLUMNS = ('oid', 'attnum')


TABLES_SQL = """
    SELECT c.oid, t.tablename
    FROM pg_catalog.pg_tables t
    JOIN pg_catalog.pg_namespace n ON n.nspname = t.schemaname
    JOIN pg_catalog.pg_class c ON c.relname = t.tablename AND c.relnamespace = n.oid
    WHERE t.schemaname = %s
"""

COLUMNS_SQL = """
    SELECT t.tablename, a.attname, a.attnum
    FROM pg_catalog.pg_attribute a
    JOIN pg_catalog.pg_class c ON a.attrelid = c.oid
    JOIN pg_catalog.pg_namespace n ON c.relnamespace = n.oid
    JOIN pg_catalog.pg_tables t ON c.relname = t.tablename AND t.schemaname = n.nspname
    WHERE a.attnum >= 0
    AND n.nspname = %s
"""

FOREIGN_KEYS_SQL = """
    SELECT con.conname AS name,
           t1.tablename AS tablename, con.conkey AS cols,
           t2.tablename AS refname, con.confkey AS refcols
    FROM pg_catalog.pg_constraint con
    JOIN pg_catalog.pg_class c1 ON con.conrelid = c1.oid
    JOIN pg_catalog.pg_namespace n1 ON c1.relnamespace = n1.oid
    JOIN pg_catalog.pg_tables t1 ON c1.relname = t1.tablename AND t1.schemaname = n1.nspname
    JOIN pg_catalog.pg_class c2 ON con.confrelid = c2.oid
    JOIN pg_catalog.pg_namespace n2 ON c2.relnamespace = n2.oid
    JOIN pg_catalog.pg_tables t2 ON c2.relname = t2.tablename AND t2.schemaname = n2.nspname
    WHERE n1.nspname = %s
    AND n2.nspname = %s
    AND con.contype = 'f'
"""

CONSTRAINTS_SQL = """
    SELECT con.conname AS name,
           con.contype AS constrainttype,
           t.tablename AS tablename
    FROM pg_catalog.pg_constraint con
    JOIN pg_catalog.pg_class c ON con.conrelid = c.oid
    JOIN pg_catalog.pg_namespace n ON c.relnamespace = n.oid
    JOIN pg_catalog.pg_tables t ON c.relname = t.tablename AND t.schemaname = n.nspname
    WHERE n.nspname = %s
"""

FUNCTIONS_SQL = """
    SELECT p.oid, p.proname, p.proargtypes::text AS proargtypes
    FROM pg_catalog.pg_proc p
    JOIN pg_catalog.pg_namespace n ON p.pronamespace = n.oid
    WHERE n.nspname = %s
    ORDER BY p.proname, p.oid
"""

SEQUENCES_SQL = """
    SELECT c.oid, c.relname
    FROM pg_catalog.pg_class c
    JOIN pg_catalog.pg_namespace n ON c.relnamespace = n.oid
    WHERE c.relkind = 'S'
    AND n.nspname = %s
    ORDER BY c.relname
"""

TRIGGERS_SQL = """
    SELECT tg.oid, tg.tgname, t.tablename, p.proname
    FROM pg_catalog.pg_trigger tg
    JOIN pg_catalog.pg_class c ON tg.tgrelid = c.oid
    JOIN pg_catalog.pg_namespace n ON c.relnamespace = n.oid
    JOIN pg_catalog.pg_tables t ON c.relname = t.tablename AND t.schemaname = n.nspname
    JOIN pg_catalog.pg_proc p ON tg.tgfoid = p.oid
    WHERE tg.tgconstrrelid = 0
    AND n.nspname = %s
"""

TYPES_SQL = """
    SELECT t.oid, t.typname
    FROM pg_catalog.pg_type t
    JOIN pg_catalog.pg_namespace n ON t.typnamespace = n.oid
    WHERE n.nspname = %s
    ORDER BY t.typname
"""


def parse_int_array(value: Any) -> List[int]:
    """Parse a Postgres integer array into a list of ints.

    psycopg2 usually hands int2[] back as a list, but the text form
    ``{1,3}`` is accepted as well.

    Raises:
        ValueError: if the value is neither form
    """
    if isinstance(value, (list, tuple)):
        return [int(item) for item in value]
    if isinstance(value, str):
        body = value.strip()
        if not (body.startswith('{') and body.endswith('}')):
            raise ValueError(f"Not an array literal: {value!r}")
        return [int(item) for item in body[1:-1].split(',') if item.strip()]
    raise ValueError(f"Not an array: {value!r}")


def parse_oid_vector(value: Any) -> List[int]:
    """Parse an oidvector ("23 25") into a list of type OIDs."""
    if isinstance(value, (list, tuple)):
        return [int(item) for item in value]
    return [int(item) for item in str(value or '').split()]


class CatalogScanner:
    """Reads tables, columns, keys and other objects of one schema."""

    def __init__(self, client, schema: str = DEFAULT_SCHEMA):
        """Initialize scanner.

        Args:
            client: Object with a ``query(sql, params)`` method returning
                rows as dictionaries (see connection.CatalogClient)
            schema: Schema all listings are scoped to
        """
        self.client = client
        self.schema = schema

    def _fetch(self, sql: str, params: Seq[Any], required: Iterable[str],
               convert: Optional[Dict[str, Callable[[Any], Any]]] = None) -> List[Dict[str, Any]]:
        """Run a query and check every row carries the expected columns.

        oid and attnum values are converted to int, other columns through
        ``convert``; a value that does not convert fails the whole query.
        """
        rows = self.client.query(sql, params)
        required = tuple(required)
        converters = {key: int for key in INTEGER_COLUMNS if key in required}
        converters.update(convert or {})
        for row in rows:
            missing = [key for key in required if key not in row]
            if missing:
                raise QueryFailure(f"Catalog row is missing columns {missing}: {row!r}", sql)
            for key, converter in converters.items():
                try:
                    row[key] = converter(row[key])
                except (TypeError, ValueError) as e:
                    raise QueryFailure(f"Malformed {key} in catalog row {row!r}: {e}", sql) from e
        return rows

    @staticmethod
    def _scoped(sql: str, params: List[Any], column: str, value: Optional[str], order_by: str):
        if value is not None:
            sql += f" AND {column} = %s"
            params.append(value)
        return sql + f" ORDER BY {order_by}", params

    def list_tables(self) -> Dict[str, Table]:
        """Return the tables of the schema, name -> Table (columns empty)."""
        sql = TABLES_SQL + " ORDER BY t.tablename"
        rows = self._fetch(sql, [self.schema], ('oid', 'tablename'))
        tables = {row['tablename']: Table(name=row['tablename'], oid=row['oid']) for row in rows}
        logger.debug("Found %d tables in schema %s", len(tables), self.schema)
        return tables

    def list_columns(self, table_name: Optional[str] = None,
                     options: Optional[ColumnOptions] = None) -> Dict[str, Table]:
        """Return columns per table in attribute number order.

        Args:
            table_name: If given, only this table is listed
            options: ColumnOptions; dropped columns are skipped unless
                ``include_dropped`` is set

        Returns:
            Dictionary table name -> Table with ``columns`` filled
        """
        options = options or ColumnOptions()
        sql = COLUMNS_SQL
        if not options.include_dropped:
            sql += " AND a.attisdropped IS FALSE"
        sql, params = self._scoped(sql, [self.schema], 't.tablename', table_name,
                                   't.tablename, a.attnum')
        rows = self._fetch(sql, params, ('tablename', 'attname', 'attnum'))

        tables: Dict[str, Table] = {}
        for row in rows:
            name = row['tablename']
            tables.setdefault(name, Table(name=name)).columns.append(row['attname'])
        return tables

    def _column_positions(self) -> Dict[str, Dict[int, str]]:
        """Attribute number -> column name per table, dropped columns included."""
        sql, params = self._scoped(COLUMNS_SQL, [self.schema], 't.tablename', None,
                                   't.tablename, a.attnum')
        rows = self._fetch(sql, params, ('tablename', 'attname', 'attnum'))
        positions: Dict[str, Dict[int, str]] = {}
        for row in rows:
            positions.setdefault(row['tablename'], {})[row['attnum']] = row['attname']
        return positions

    @staticmethod
    def _resolve(positions: Dict[int, str], indexes: List[int], table: str, constraint: str) -> List[str]:
        names = []
        for index in indexes:
            if index not in positions:
                raise UnresolvedReference(table, constraint, index)
            names.append(positions[index])
        return names

    def list_foreign_keys(self, table_name: Optional[str] = None) -> Dict[str, List[ForeignKey]]:
        """Return foreign keys per owning table.

        conkey/confkey hold attribute numbers, not names. They are resolved
        against the column list including dropped columns, otherwise a
        dropped column in between shifts every later position.
        """
        sql, params = self._scoped(FOREIGN_KEYS_SQL, [self.schema, self.schema],
                                   't1.tablename', table_name, 't1.tablename, con.conname')
        rows = self._fetch(sql, params, ('name', 'tablename', 'cols', 'refname', 'refcols'))
        if not rows:
            return {}

        positions = self._column_positions()
        foreign_keys: Dict[str, List[ForeignKey]] = {}
        for row in rows:
            name, refname = row['tablename'], row['refname']
            try:
                cols = parse_int_array(row['cols'])
                refcols = parse_int_array(row['refcols'])
            except (TypeError, ValueError) as e:
                raise QueryFailure(f"Malformed key columns in {row['name']!r}: {e}", sql) from e
            if len(cols) != len(refcols):
                raise QueryFailure(
                    f"Foreign key {row['name']!r} pairs {len(cols)} columns with {len(refcols)}", sql)

            foreign_keys.setdefault(name, []).append(ForeignKey(
                name=row['name'],
                columns=self._resolve(positions.get(name, {}), cols, name, row['name']),
                ref_table=refname,
                ref_columns=self._resolve(positions.get(refname, {}), refcols, refname, row['name']),
            ))
        logger.debug("Found %d foreign keys", sum(len(fks) for fks in foreign_keys.values()))
        return foreign_keys

    def list_constraints(self, table_name: Optional[str] = None) -> Dict[str, List[Constraint]]:
        """Return constraints per table with their kind decoded."""
        sql, params = self._scoped(CONSTRAINTS_SQL, [self.schema], 't.tablename', table_name,
                                   't.tablename, con.conname')
        rows = self._fetch(sql, params, ('name', 'constrainttype', 'tablename'))

        constraints: Dict[str, List[Constraint]] = {}
        for row in rows:
            kind = constraint_kind(row['constrainttype'])
            if isinstance(kind, UnknownConstraintKind):
                logger.warning("Unknown constraint type %r for %s.%s",
                               kind.code, row['tablename'], row['name'])
            constraints.setdefault(row['tablename'], []).append(Constraint(name=row['name'], kind=kind))
        return constraints

    def list_functions(self) -> Dict[str, Function]:
        """Return functions of the schema; overloads collapse to the last one."""
        rows = self._fetch(FUNCTIONS_SQL, [self.schema], ('oid', 'proname', 'proargtypes'),
                           convert={'proargtypes': parse_oid_vector})
        return {
            row['proname']: Function(
                name=row['proname'],
                oid=row['oid'],
                arg_types=row['proargtypes'],
            )
            for row in rows
        }

    def list_sequences(self) -> Dict[str, Sequence]:
        rows = self._fetch(SEQUENCES_SQL, [self.schema], ('oid', 'relname'))
        return {row['relname']: Sequence(name=row['relname'], oid=row['oid']) for row in rows}

    def list_triggers(self, table_name: Optional[str] = None) -> Dict[str, Trigger]:
        """Return user-defined triggers; constraint triggers are skipped."""
        sql, params = self._scoped(TRIGGERS_SQL, [self.schema], 't.tablename', table_name,
                                   't.tablename, tg.tgname')
        rows = self._fetch(sql, params, ('oid', 'tgname', 'tablename', 'proname'))
        return {
            row['tgname']: Trigger(
                name=row['tgname'],
                oid=row['oid'],
                table_name=row['tablename'],
                function_name=row['proname'],
            )
            for row in rows
        }

    def list_types(self) -> Dict[str, PgType]:
        rows = self._fetch(TYPES_SQL, [self.schema], ('oid', 'typname'))
        return {row['typname']: PgType(name=row['typname'], oid=row['oid']) for row in rows}
