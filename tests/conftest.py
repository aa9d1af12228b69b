"""Shared fixtures: an in-memory catalog standing in for Postgres."""
import pytest

from dbgadget.scanner import CatalogScanner


def _column(table, name, attnum, dropped=False):
    return {"tablename": table, "attname": name, "attnum": attnum, "attisdropped": dropped}


SHOP_COLUMNS = [
    _column("customers", "id", 1),
    _column("customers", "name", 2),
    # orders had a column dropped between id and customer_id
    _column("orders", "id", 1),
    _column("orders", "........pg.dropped.2........", 2, dropped=True),
    _column("orders", "customer_id", 3),
    _column("orders", "billing_customer_id", 4),
    _column("order_items", "id", 1),
    _column("order_items", "order_id", 2),
    _column("order_items", "product_id", 3),
    _column("products", "id", 1),
    _column("products", "sku", 2),
]

SHOP_TABLES = [
    {"oid": 16390, "tablename": "customers"},
    {"oid": 16400, "tablename": "order_items"},
    {"oid": 16410, "tablename": "orders"},
    {"oid": 16420, "tablename": "products"},
]

SHOP_FOREIGN_KEYS = [
    {"name": "order_items_order_id_fkey", "tablename": "order_items", "cols": [2],
     "refname": "orders", "refcols": [1]},
    {"name": "order_items_product_id_fkey", "tablename": "order_items", "cols": "{3}",
     "refname": "products", "refcols": "{1}"},
    {"name": "orders_billing_customer_id_fkey", "tablename": "orders", "cols": [4],
     "refname": "customers", "refcols": [1]},
    {"name": "orders_customer_id_fkey", "tablename": "orders", "cols": [3],
     "refname": "customers", "refcols": [1]},
]

SHOP_CONSTRAINTS = [
    {"name": "customers_pkey", "constrainttype": "p", "tablename": "customers"},
    {"name": "orders_pkey", "constrainttype": "p", "tablename": "orders"},
    {"name": "orders_customer_id_fkey", "constrainttype": "f", "tablename": "orders"},
    {"name": "products_sku_key", "constrainttype": "u", "tablename": "products"},
]


class FakeCatalogClient:
    """Answers catalog queries from canned rows, picked by query text."""

    def __init__(self, tables=(), columns=(), foreign_keys=(), constraints=(),
                 functions=(), sequences=(), triggers=(), types=()):
        self.tables = list(tables)
        self.columns = list(columns)
        self.foreign_keys = list(foreign_keys)
        self.constraints = list(constraints)
        self.functions = list(functions)
        self.sequences = list(sequences)
        self.triggers = list(triggers)
        self.types = list(types)
        self.queries = []

    def query(self, sql, params=()):
        params = list(params)
        self.queries.append((sql, params))
        filtered = "tablename = %s" in sql
        table = params[-1] if filtered else None

        if "a.attname" in sql:
            rows = self.columns
            if "attisdropped IS FALSE" in sql:
                rows = [row for row in rows if not row["attisdropped"]]
        elif "con.confkey" in sql:
            rows = self.foreign_keys
        elif "constrainttype" in sql:
            rows = self.constraints
        elif "pg_trigger" in sql:
            rows = self.triggers
        elif "proargtypes" in sql:
            rows = self.functions
        elif "relkind = 'S'" in sql:
            rows = self.sequences
        elif "pg_type" in sql:
            rows = self.types
        elif "t.tablename" in sql:
            rows = self.tables
        else:
            raise AssertionError(f"Unexpected query: {sql}")

        if table is not None:
            rows = [row for row in rows if row["tablename"] == table]
        return [dict(row) for row in rows]


@pytest.fixture
def catalog():
    """Catalog of a small shop schema."""
    return FakeCatalogClient(
        tables=SHOP_TABLES,
        columns=SHOP_COLUMNS,
        foreign_keys=SHOP_FOREIGN_KEYS,
        constraints=SHOP_CONSTRAINTS,
        functions=[
            {"oid": 17001, "proname": "order_total", "proargtypes": "23"},
            {"oid": 17002, "proname": "touch_updated_at", "proargtypes": ""},
        ],
        sequences=[{"oid": 16389, "relname": "customers_id_seq"}],
        triggers=[{"oid": 17100, "tgname": "orders_touch", "tablename": "orders",
                   "proname": "touch_updated_at"}],
        types=[{"oid": 16392, "typname": "customers"}, {"oid": 16393, "typname": "order_status"}],
    )


@pytest.fixture
def scanner(catalog):
    """Scanner on the shop catalog."""
    return CatalogScanner(catalog)
