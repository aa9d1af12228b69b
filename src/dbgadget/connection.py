"""Database connection handling module."""
import logging
from typing import Any, Dict, List, Optional, Sequence

import psycopg2
import psycopg2.extras
from psycopg2.extensions import connection

from .errors import ConnectionFailure, QueryFailure

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """Handles database connections with context manager support."""

    def __init__(self, params: Dict[str, str]):
        """Initialize connection parameters.

        Args:
            params: psycopg2 connection keyword arguments
        """
        self.params = params
        self._conn: Optional[connection] = None

    def connect(self) -> connection:
        """Establish database connection.

        Returns:
            Active database connection
        """
        if not self._conn or self._conn.closed:
            logger.debug("Connecting to %s", self.params.get('dbname'))
            try:
                self._conn = psycopg2.connect(**self.params)
            except psycopg2.Error as e:
                raise ConnectionFailure(f"Could not connect to database: {e}") from e
        return self._conn

    def close(self):
        """Close the database connection if it exists."""
        if self._conn and not self._conn.closed:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> connection:
        return self.connect()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class CatalogClient:
    """Runs read-only catalog queries on a connection owned by the caller."""

    def __init__(self, conn: connection):
        self.conn = conn

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """Execute a query and return its rows as dictionaries.

        Args:
            sql: Query text with %s placeholders
            params: Query parameters

        Returns:
            List of rows, column name -> value
        """
        logger.debug("Catalog query: %s params=%r", ' '.join(sql.split()), tuple(params))
        try:
            with self.conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                cur.execute(sql, tuple(params))
                return [dict(row) for row in cur.fetchall()]
        except psycopg2.Error as e:
            raise QueryFailure(f"Catalog query failed: {e}", sql) from e
