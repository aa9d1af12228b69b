"""
dbgadget - Errors Module
Copyright (c) 2025 Dmitry Solonnikov
Licensed under MIT License - see LICENSE file for details
"""
from typing import List, Optional


class GadgetError(Exception):
    """Base class for all catalog introspection errors."""


class ConfigError(GadgetError):
    """Configuration file is missing or incomplete."""


class QueryFailure(GadgetError):
    """A catalog query failed or returned rows of an unexpected shape."""

    def __init__(self, message: str, sql: Optional[str] = None):
        super().__init__(message)
        self.sql = sql


class UnresolvedReference(GadgetError):
    """A foreign key refers to a column position the table does not have."""

    def __init__(self, table: str, constraint: str, position: int):
        super().__init__(
            f"Foreign key {constraint!r} on table {table!r} refers to "
            f"column position {position}, which does not exist"
        )
        self.table = table
        self.constraint = constraint
        self.position = position


class CycleDetected(GadgetError):
    """The table dependency graph is not acyclic."""

    def __init__(self, cycle: List[str]):
        super().__init__(f"Dependency cycle detected: {' -> '.join(cycle)}")
        self.cycle = cycle


class ConnectionFailure(GadgetError):
    """The database connection could not be established."""
