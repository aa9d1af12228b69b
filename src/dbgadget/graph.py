"""
dbgadget - Dependency Graph Export Module
Copyright (c) 2025 Dmitry Solonnikov
Licensed under MIT License - see LICENSE file for details
"""
from typing import Dict, List, Mapping, Optional

import networkx as nx

from .dependencies import ordered_dependencies, dependencies
from .models import DependencyGraph, Table


def _quote(name: str) -> str:
    return '"' + name.replace('\\', '\\\\').replace('"', '\\"') + '"'


def render_graph(graph: DependencyGraph) -> str:
    """Render the dependency graph in Graphviz dot format.

    A table without dependencies gets a bare node line, every other table
    one ``"dependent" -> "dependency"`` line per referenced table.
    """
    rank = {name: index for index, name in enumerate(graph)}
    lines = ["digraph dependencies {"]
    for name in graph:
        deps = ordered_dependencies(graph, rank, name)
        if not deps:
            lines.append(f"  {_quote(name)}")
        for dep in deps:
            lines.append(f"  {_quote(name)} -> {_quote(dep)}")
    lines.append("}")
    return "\n".join(lines) + "\n"


def dependency_graph(scanner) -> str:
    """Dot description of the dependency graph of the scanned schema."""
    return render_graph(dependencies(scanner))


class GraphBuilder:
    """networkx view of a table dependency graph."""

    def __init__(self):
        self.graph = nx.DiGraph()

    def build_graph(self, deps: DependencyGraph, tables: Optional[Mapping[str, Table]] = None) -> nx.DiGraph:
        """Build graph from a dependency mapping.

        Args:
            deps: Table name -> referenced table names
            tables: Optional table records; their OIDs become node attributes

        Returns:
            The built DiGraph, edges pointing from dependent to dependency
        """
        self.graph.clear()
        tables = tables or {}
        for name, refs in deps.items():
            table = tables.get(name)
            self.graph.add_node(name, oid=table.oid if table else None)
            for ref in refs:
                self.graph.add_edge(name, ref)
        return self.graph

    def get_dependencies(self, table_name: str) -> Dict[str, List[str]]:
        """Foreign key neighbours of a table.

        Args:
            table_name: Table to look up

        Returns:
            ``{"in": [...], "out": [...]}``: tables whose foreign keys
            reference this table, and tables this table's foreign keys
            reference. Both empty for a table not in the graph.
        """
        if table_name not in self.graph:
            return {"in": [], "out": []}

        return {
            "in": sorted(self.graph.predecessors(table_name)),
            "out": sorted(self.graph.successors(table_name)),
        }

    def get_subgraph(self, table_name: str, depth: int = 1) -> nx.DiGraph:
        """Tables within ``depth`` foreign key hops of a table.

        Hops are counted regardless of edge direction, so both referencing
        and referenced tables are included; edges keep their
        dependent -> dependency direction.
        """
        if table_name not in self.graph:
            return nx.DiGraph()

        nearby = nx.ego_graph(self.graph.to_undirected(as_view=True), table_name, radius=depth)
        return self.graph.subgraph(nearby.nodes).copy()
