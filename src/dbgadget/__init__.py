"""Catalog introspection and table dependency ordering for PostgreSQL."""
from .connection import CatalogClient, DatabaseConnection
from .dependencies import (
    build_dependencies, dependencies, tables_in_dependency_order, topological_order,
)
from .errors import ConfigError, ConnectionFailure, CycleDetected, GadgetError, QueryFailure, UnresolvedReference
from .graph import GraphBuilder, dependency_graph, render_graph
from .models import ColumnOptions, ConstraintKind, UnknownConstraintKind
from .scanner import CatalogScanner

__version__ = "0.1.0"
