"""Positional arguments for table hook procedures.

A hook procedure takes up to three arguments:
1. the mutation's JSON input (json or jsonb)
2. the affected row, typed as the table's row type
3. the operation name as text

How the row argument is found depends on the operation and phase and is
decided once per field (see select_row_lookup); only the key values are
read per request. SQL is composed with psycopg.sql, values are passed as
query parameters.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Union

from psycopg import sql

from operation_hooks.errors import ConfigurationError, InvalidIdentifierError
from operation_hooks.hooks.types import FieldContext, Phase
from operation_hooks.pg.inflection import Inflector
from operation_hooks.pg.introspection import PgAttribute, PgClass, PgType
from operation_hooks.pg.matcher import MutationMatch, SqlOperation
from operation_hooks.pg.node_id import decode_node_id

if TYPE_CHECKING:
    from operation_hooks.pg.procedures import ProcedureSpec

# Planner alias under which primary key columns of the mutated row are
# selected so they are available to after-hooks
PRIMARY_KEY_ALIAS_PREFIX = "@ophookpk__"

_ROW_ALIAS = sql.Identifier("__ophook_row__")


def primary_key_alias(attribute: PgAttribute) -> str:
    return f"{PRIMARY_KEY_ALIAS_PREFIX}{attribute.name}"


def get_path(obj: Any, path: list[str]) -> Any:
    """Follow ``path`` through mappings (or attributes); None if it breaks off."""
    current = obj
    for key in path:
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(key)
        else:
            current = getattr(current, key, None)
    return current


# ---------------------------------------------------------------------------
# Row lookup strategies
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NoRow:
    """The row does not exist at this point (before insert, after delete)."""


@dataclass
class PrimaryKeyPostImage:
    """Re-read the row after the mutation by the primary key it returned."""

    keys: list[PgAttribute]

    def key_values(self, args: dict[str, Any], value: Any) -> list[Any]:
        values = []
        for key in self.keys:
            alias = primary_key_alias(key)
            captured = get_path(value, ["data", alias])
            if captured is None:
                captured = get_path(value, [alias])
            values.append(captured)
        return values


@dataclass
class UniqueConstraintLookup:
    """Read the row by the unique constraint the mutation is addressed by."""

    keys: list[PgAttribute]
    input_names: list[str]

    def key_values(self, args: dict[str, Any], value: Any) -> list[Any]:
        return [get_path(args, ["input", name]) for name in self.input_names]


@dataclass
class GlobalIdentifierLookup:
    """Read the row by the primary key encoded in the mutation's global identifier."""

    keys: list[PgAttribute]
    alias: str
    node_id_field_name: str = "nodeId"

    def key_values(self, args: dict[str, Any], value: Any) -> list[Any]:
        node_id = get_path(args, ["input", self.node_id_field_name])
        alias, identifiers = decode_node_id(node_id)
        if alias != self.alias:
            raise InvalidIdentifierError(
                f"Mismatched type: identifier addresses '{alias}', expected '{self.alias}'"
            )
        if len(identifiers) != len(self.keys):
            raise InvalidIdentifierError("Invalid ID")
        return identifiers


RowLookup = Union[NoRow, PrimaryKeyPostImage, UniqueConstraintLookup, GlobalIdentifierLookup]


def select_row_lookup(
    match: MutationMatch,
    phase: Phase,
    field_context: FieldContext,
    inflector: Inflector,
    procedure_name: str = "",
) -> RowLookup:
    """Decide how the row argument is determined for one field and phase.

    Raises:
        ConfigurationError: If the table has no primary key where one is
            needed, or the row cannot be determined at all
    """
    operation = match.operation
    table = match.table

    if (operation is SqlOperation.INSERT and phase is Phase.BEFORE) or (
        operation is SqlOperation.DELETE and phase is Phase.AFTER
    ):
        return NoRow()

    constraint = field_context.constraint
    if constraint is not None:
        return UniqueConstraintLookup(
            keys=list(constraint.key_attributes),
            input_names=[inflector.column(key) for key in constraint.key_attributes],
        )

    primary_key = table.primary_key_constraint
    if operation in (SqlOperation.INSERT, SqlOperation.UPDATE) and phase is Phase.AFTER:
        if primary_key is None:
            raise ConfigurationError(
                f"Table has no primary key, cannot pass row to {procedure_name}"
            )
        return PrimaryKeyPostImage(keys=list(primary_key.key_attributes))

    if field_context.is_pg_node_mutation:
        if primary_key is None:
            raise ConfigurationError(
                f"Table has no primary key, cannot pass row to {procedure_name}"
            )
        return GlobalIdentifierLookup(
            keys=list(primary_key.key_attributes),
            alias=inflector.node_alias(table),
            node_id_field_name=inflector.node_id_field_name,
        )

    raise ConfigurationError(
        "Don't know how to determine row for operation hooks, "
        f"mutation '{field_context.field_name}'"
    )


def required_columns(match: MutationMatch | None) -> list[tuple[str, str]]:
    """Primary key columns an insert/update must select for after-hooks.

    Returns:
        ``(column, alias)`` pairs; empty for deletes and keyless tables
    """
    if match is None or match.operation is SqlOperation.DELETE:
        return []
    primary_key = match.table.primary_key_constraint
    if primary_key is None:
        return []
    return [(key.name, primary_key_alias(key)) for key in primary_key.key_attributes]


# ---------------------------------------------------------------------------
# SQL composition
# ---------------------------------------------------------------------------


def type_identifier(pg_type: PgType | None, fallback: str = "jsonb") -> sql.Identifier:
    if pg_type is None:
        return sql.Identifier(fallback)
    return sql.Identifier(pg_type.namespace_name, pg_type.name)


def table_identifier(table: PgClass) -> sql.Identifier:
    return sql.Identifier(table.namespace_name, table.name)


@dataclass
class CallArguments:
    """Composed argument list and its parameters for one invocation."""

    parts: list[sql.Composable] = field(default_factory=list)
    params: list[Any] = field(default_factory=list)

    def add(self, part: sql.Composable, *params: Any) -> None:
        self.parts.append(part)
        self.params.extend(params)

    def as_sql(self) -> sql.Composed:
        return sql.SQL(", ").join(self.parts)


def row_argument(
    table: PgClass, lookup: RowLookup, args: dict[str, Any], value: Any
) -> tuple[sql.Composable, list[Any]]:
    if isinstance(lookup, NoRow):
        return sql.SQL("null::{}").format(table_identifier(table)), []

    values = lookup.key_values(args, value)
    conditions = sql.SQL(") and (").join(
        sql.SQL("{}.{} = {}::{}").format(
            _ROW_ALIAS,
            sql.Identifier(key.name),
            sql.Placeholder(),
            type_identifier(key.type, fallback="text"),
        )
        for key in lookup.keys
    )
    query = sql.SQL("(select {row} from {table} {row} where ({conditions}))::{table}").format(
        row=_ROW_ALIAS,
        table=table_identifier(table),
        conditions=conditions,
    )
    return query, values


def build_arguments(spec: ProcedureSpec, args: dict[str, Any], value: Any) -> CallArguments:
    """Build the positional arguments for one call of a hook procedure."""
    arguments = CallArguments()
    if spec.shape.has_payload:
        data = get_path(args, spec.path) if spec.path else None
        arguments.add(
            sql.SQL("{}::{}").format(sql.Placeholder(), type_identifier(spec.payload_type)),
            json.dumps(data, default=str) if data is not None else None,
        )
    if spec.shape.has_row:
        part, params = row_argument(spec.table, spec.row_lookup, args, value)
        arguments.add(part, *params)
    if spec.shape.has_operation:
        arguments.add(sql.Literal(spec.operation.value))
    return arguments


def build_call(
    spec: ProcedureSpec, args: dict[str, Any], value: Any
) -> tuple[sql.Composed, list[Any]]:
    """Compose ``select * from proc(...)`` for one request.

    Array-returning procedures are flattened with ``unnest`` so every
    return shape yields one row per message.
    """
    arguments = build_arguments(spec, args, value)
    call = sql.SQL("{}({})").format(
        sql.Identifier(spec.proc.namespace_name, spec.proc.name),
        arguments.as_sql(),
    )
    source = sql.SQL("unnest({})").format(call) if spec.is_array else call
    return sql.SQL("select * from {}").format(source), arguments.params
