"""
dbgadget - Table Dependencies Module
Copyright (c) 2025 Dmitry Solonnikov
Licensed under MIT License - see LICENSE file for details

A table ``a`` depends on a table ``b`` when ``a`` has a foreign key
referencing ``b``. Dependencies come before their dependents in the order.
"""
import logging
from typing import Dict, Iterable, List, Mapping

from .errors import CycleDetected
from .models import DependencyGraph, ForeignKey

logger = logging.getLogger(__name__)


def build_dependencies(tables: Iterable[str],
                       foreign_keys: Mapping[str, List[ForeignKey]]) -> DependencyGraph:
    """Build the table dependency graph.

    Args:
        tables: Table names (a dict of tables works as well); their order is
            kept as the key order of the result
        foreign_keys: Foreign keys per owning table

    Returns:
        Dictionary table name -> set of referenced table names. Every table
        gets an entry, tables without foreign keys get an empty set.
    """
    graph: DependencyGraph = {}
    for name in tables:
        graph[name] = {fk.ref_table for fk in foreign_keys.get(name, [])}
    return graph


def ordered_dependencies(graph: DependencyGraph, rank: Dict[str, int], node: str) -> List[str]:
    """Dependencies of ``node`` in a run-independent order."""
    # Порядок ключей графа, неизвестные имена в конце по алфавиту
    return sorted(graph.get(node, ()), key=lambda name: (name not in rank, rank.get(name, 0), name))


def topological_order(graph: DependencyGraph) -> List[str]:
    """Order tables so that every table follows the tables it depends on.

    Depth-first traversal in key order, emitting nodes in post-order.
    The result holds exactly the keys of the graph: referenced names that
    are not keys are walked as tables without dependencies but not emitted.

    Raises:
        CycleDetected: if the graph has a cycle, including a table that
            references itself
    """
    rank = {name: index for index, name in enumerate(graph)}
    emitted = set()
    order: List[str] = []

    for root in graph:
        if root in emitted:
            continue
        path = [root]
        on_path = {root}
        pending = [iter(ordered_dependencies(graph, rank, root))]

        while pending:
            child = next(pending[-1], None)
            if child is None:
                node = path.pop()
                on_path.discard(node)
                pending.pop()
                emitted.add(node)
                if node in rank:
                    order.append(node)
            elif child in emitted:
                continue
            elif child in on_path:
                cycle = path[path.index(child):] + [child]
                raise CycleDetected(cycle)
            else:
                path.append(child)
                on_path.add(child)
                pending.append(iter(ordered_dependencies(graph, rank, child)))

    return order


def dependencies(scanner) -> DependencyGraph:
    """Read tables and foreign keys through a CatalogScanner and build the graph."""
    tables = scanner.list_tables()
    graph = build_dependencies(tables, scanner.list_foreign_keys())
    logger.info("Built dependency graph: %d tables, %d edges",
                len(graph), sum(len(deps) for deps in graph.values()))
    return graph


def tables_in_dependency_order(scanner) -> List[str]:
    """Tables of the scanned schema, each after the tables it references."""
    return topological_order(dependencies(scanner))
