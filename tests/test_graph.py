"""Tests for graph export and the networkx view."""
import networkx as nx
import pytest

from dbgadget.graph import GraphBuilder, dependency_graph, render_graph
from dbgadget.models import Table


@pytest.fixture
def graph_builder():
    """Create graph builder instance."""
    return GraphBuilder()


@pytest.fixture
def sample_dependencies():
    """Dependencies of a small shop schema."""
    return {
        "customers": set(),
        "orders": {"customers"},
        "order_items": {"orders", "products"},
        "products": set(),
    }


def test_render_graph_lines():
    """Test one edge line and one bare node line."""
    text = render_graph({"orders": {"customers"}, "customers": set()})
    lines = [line.strip() for line in text.splitlines()]

    assert lines[0] == "digraph dependencies {"
    assert lines[-1] == "}"
    assert lines.count('"orders" -> "customers"') == 1
    assert lines.count('"customers"') == 1
    assert '"orders"' not in lines
    assert len(lines) == 4


def test_render_graph_quotes_names():
    text = render_graph({'odd "name"': set(), "back\\slash": {'odd "name"'}})

    assert '"odd \\"name\\""' in text
    assert '"back\\\\slash" -> "odd \\"name\\""' in text


def test_render_graph_is_stable(sample_dependencies):
    text = render_graph(sample_dependencies)

    assert text == render_graph(dict(sample_dependencies))
    assert text.index('"order_items" -> "orders"') < text.index('"order_items" -> "products"')


def test_dependency_graph_from_scanner(scanner):
    text = dependency_graph(scanner)

    assert '"orders" -> "customers"' in text
    assert '"order_items" -> "products"' in text
    assert text.count('"orders" -> "customers"') == 1


def test_build_graph(graph_builder, sample_dependencies):
    """Test building graph from dependencies."""
    tables = {"orders": Table(name="orders", oid=16410)}
    graph = graph_builder.build_graph(sample_dependencies, tables)

    assert isinstance(graph, nx.DiGraph)
    assert len(graph.nodes()) == 4
    assert len(graph.edges()) == 3
    assert graph.nodes["orders"]["oid"] == 16410
    assert graph.nodes["customers"]["oid"] is None


def test_get_dependencies(graph_builder, sample_dependencies):
    """Test incoming and outgoing references."""
    graph_builder.build_graph(sample_dependencies)

    details = graph_builder.get_dependencies("orders")
    assert details == {"in": ["order_items"], "out": ["customers"]}
    assert graph_builder.get_dependencies("missing") == {"in": [], "out": []}


def test_get_subgraph(graph_builder, sample_dependencies):
    graph_builder.build_graph(sample_dependencies)

    assert set(graph_builder.get_subgraph("customers").nodes) == {"customers", "orders"}
    assert set(graph_builder.get_subgraph("customers", depth=2).nodes) == {
        "customers", "orders", "order_items",
    }
    assert len(graph_builder.get_subgraph("missing")) == 0
