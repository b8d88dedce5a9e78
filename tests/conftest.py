"""Shared fixtures: an in-memory catalog and a fake psycopg connection."""

from typing import Any

import pytest

from operation_hooks.hooks.types import FieldContext
from operation_hooks.pg.introspection import PgCatalog

# Type oids
INT4 = 23
TEXT = 25
JSON = 114
JSONB = 3802
RECORD = 2249
USERS_ROW = 90001
MESSAGE = 90010
MESSAGE_ARRAY = 90011

USERS_TABLE = 80001

SCHEMA = "operation_hooks"

TYPE_ROWS = [
    {"id": INT4, "name": "int4", "namespace_name": "pg_catalog", "category": "N"},
    {"id": TEXT, "name": "text", "namespace_name": "pg_catalog", "category": "S"},
    {"id": JSON, "name": "json", "namespace_name": "pg_catalog", "category": "U"},
    {"id": JSONB, "name": "jsonb", "namespace_name": "pg_catalog", "category": "U"},
    {"id": RECORD, "name": "record", "namespace_name": "pg_catalog", "category": "P"},
    {"id": USERS_ROW, "name": "users", "namespace_name": SCHEMA, "category": "C"},
    {"id": MESSAGE, "name": "mutation_message", "namespace_name": SCHEMA, "category": "C"},
    {
        "id": MESSAGE_ARRAY,
        "name": "_mutation_message",
        "namespace_name": SCHEMA,
        "category": "A",
    },
]


def proc_row(
    name: str,
    arg_type_ids: list[int],
    arg_modes: list[str] | None = None,
    return_type_id: int = MESSAGE,
    proc_id: int = 70001,
) -> dict[str, Any]:
    return {
        "id": proc_id,
        "name": name,
        "namespace_name": SCHEMA,
        "arg_type_ids": arg_type_ids,
        "arg_modes": arg_modes or [],
        "return_type_id": return_type_id,
    }


def make_catalog(
    *procedures: dict[str, Any],
    primary_key: bool = True,
    unique_name: bool = False,
) -> PgCatalog:
    """Catalog with ``users (id int4 primary key, name text)`` and the given procedures."""
    constraints = []
    if primary_key:
        constraints.append(
            {"id": 60001, "name": "users_pkey", "type": "p", "class_id": USERS_TABLE, "key_attribute_nums": [1]}
        )
    if unique_name:
        constraints.append(
            {"id": 60002, "name": "users_name_key", "type": "u", "class_id": USERS_TABLE, "key_attribute_nums": [2]}
        )
    return PgCatalog.from_rows(
        types=TYPE_ROWS,
        classes=[
            {"id": USERS_TABLE, "name": "users", "namespace_name": SCHEMA, "kind": "r", "type_id": USERS_ROW}
        ],
        attributes=[
            {"class_id": USERS_TABLE, "num": 1, "name": "id", "type_id": INT4, "type_modifier": -1},
            {"class_id": USERS_TABLE, "num": 2, "name": "name", "type_id": TEXT, "type_modifier": -1},
        ],
        constraints=constraints,
        procedures=list(procedures),
    )


def constraint_named(catalog: PgCatalog, name: str):
    table = catalog.table_named("users")
    for constraint in table.constraints:
        if constraint.name == name:
            return constraint
    raise KeyError(name)


def mutation_context(
    catalog: PgCatalog,
    field_name: str = "createUser",
    operation: str = "insert",
    constraint: str | None = None,
    node: bool = False,
) -> FieldContext:
    return FieldContext(
        type_name="Mutation",
        field_name=field_name,
        is_root_mutation=True,
        is_pg_create_mutation_field=operation == "insert",
        is_pg_update_mutation_field=operation == "update",
        is_pg_delete_mutation_field=operation == "delete",
        is_pg_node_mutation=node,
        table=catalog.table_named("users"),
        constraint=constraint_named(catalog, constraint) if constraint else None,
    )


class FakeCursor:
    def __init__(self, conn: "FakeConnection"):
        self.conn = conn
        self._rows: list[dict[str, Any]] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def execute(self, query, params=None):
        self.conn.executed.append((query, params))
        self._rows = self.conn.responses.pop(0) if self.conn.responses else []

    async def fetchall(self):
        return self._rows


class FakeConnection:
    """Stands in for psycopg.AsyncConnection.

    Each execute() consumes the next entry of ``responses`` as its rows.
    """

    def __init__(self, responses: list[list[dict[str, Any]]] | None = None):
        self.responses = list(responses or [])
        self.executed: list[tuple[Any, Any]] = []
        self.notice_handlers: list[Any] = []

    def cursor(self, row_factory=None):
        return FakeCursor(self)

    def add_notice_handler(self, handler):
        self.notice_handlers.append(handler)

    def remove_notice_handler(self, handler):
        self.notice_handlers.remove(handler)


@pytest.fixture
def fake_conn():
    return FakeConnection()
