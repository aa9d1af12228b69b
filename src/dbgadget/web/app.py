"""
dbgadget - Web Application
Copyright (c) 2025 Dmitry Solonnikov
Licensed under MIT License - see LICENSE file for details
"""
import logging
import os
from contextlib import contextmanager
from dataclasses import asdict

from flask import Flask, Response, jsonify, request

from ..config import load_config
from ..connection import CatalogClient, DatabaseConnection
from ..dependencies import build_dependencies, topological_order
from ..errors import CycleDetected, GadgetError
from ..graph import GraphBuilder, render_graph
from ..scanner import CatalogScanner

logger = logging.getLogger(__name__)


def _scanner_factory(config_path):
    config = load_config(config_path)

    @contextmanager
    def open_scanner():
        with DatabaseConnection(config.database) as conn:
            yield CatalogScanner(CatalogClient(conn), schema=config.schema)

    return open_scanner


def create_app(config_path='config.ini', scanner_factory=None) -> Flask:
    """Create the Flask application.

    Args:
        config_path: INI file used when no scanner_factory is given
        scanner_factory: Callable returning a context manager that yields a
            CatalogScanner; a connection is opened per request by default
    """
    app = Flask(__name__)
    open_scanner = scanner_factory or _scanner_factory(config_path)

    def load_dependencies(scanner):
        tables = scanner.list_tables()
        return tables, build_dependencies(tables, scanner.list_foreign_keys())

    @app.errorhandler(CycleDetected)
    def handle_cycle(e):
        return jsonify({"error": str(e), "cycle": e.cycle}), 409

    @app.errorhandler(GadgetError)
    def handle_error(e):
        logger.error("Request failed: %s", e)
        return jsonify({"error": str(e)}), 500

    @app.route('/tables')
    def get_tables():
        """Список таблиц с колонками"""
        with open_scanner() as scanner:
            tables = scanner.list_tables()
            columns = scanner.list_columns()
        for name, table in tables.items():
            if name in columns:
                table.columns = columns[name].columns
        return jsonify([asdict(table) for table in tables.values()])

    @app.route('/dependencies')
    def get_dependencies():
        with open_scanner() as scanner:
            _, deps = load_dependencies(scanner)
        return jsonify({name: sorted(refs) for name, refs in deps.items()})

    @app.route('/order')
    def get_order():
        """Таблицы в порядке зависимостей"""
        with open_scanner() as scanner:
            _, deps = load_dependencies(scanner)
        return jsonify(topological_order(deps))

    @app.route('/graph.dot')
    def get_graph():
        with open_scanner() as scanner:
            _, deps = load_dependencies(scanner)
        return Response(render_graph(deps), mimetype='text/vnd.graphviz')

    @app.route('/tables/<name>/constraints')
    def get_constraints(name):
        with open_scanner() as scanner:
            constraints = scanner.list_constraints(name).get(name, [])
        return jsonify([{"name": c.name, "kind": c.kind.value} for c in constraints])

    @app.route('/tables/<name>/foreign-keys')
    def get_foreign_keys(name):
        with open_scanner() as scanner:
            foreign_keys = scanner.list_foreign_keys(name).get(name, [])
        return jsonify([asdict(fk) for fk in foreign_keys])

    @app.route('/tables/<name>/neighbours')
    def get_neighbours(name):
        """Входящие и исходящие ссылки таблицы"""
        with open_scanner() as scanner:
            tables, deps = load_dependencies(scanner)
        builder = GraphBuilder()
        builder.build_graph(deps, tables)
        result = builder.get_dependencies(name)
        depth = request.args.get('depth', default=1, type=int)
        result["nodes"] = sorted(builder.get_subgraph(name, depth).nodes)
        return jsonify(result)

    return app


def main():
    """Run the development server; DBGADGET_DEBUG=1 turns on Flask debug mode."""
    logging.basicConfig(level=logging.INFO)
    app = create_app(os.environ.get('DBGADGET_CONFIG', 'config.ini'))
    app.run(debug=os.environ.get('DBGADGET_DEBUG') == '1')


if __name__ == '__main__':
    main()
