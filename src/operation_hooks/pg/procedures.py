"""Lookup and validation of table hook procedures.

For a table mutation the procedure ``<table>_<operation>_<phase>`` is
looked up in the catalog. Its input arguments decide the call shape:

    ()                         no arguments
    (data json[b])             mutation input payload
    (data json[b], row)        + the affected row
    (data json[b], row, text)  + the operation name

Any return shape is accepted as long as it yields message rows
``(level, message, path, code)``: setof composite, composite array,
``returns table(...)`` or OUT parameters.
"""

from dataclasses import dataclass
from enum import Enum

from operation_hooks.errors import ConfigurationError
from operation_hooks.hooks.types import FieldContext, Phase
from operation_hooks.pg.arguments import RowLookup, select_row_lookup
from operation_hooks.pg.inflection import Inflector
from operation_hooks.pg.introspection import PgCatalog, PgClass, PgProc, PgType
from operation_hooks.pg.matcher import MutationMatch, SqlOperation

HOOK_PHASES = (Phase.BEFORE, Phase.AFTER)


class CallShape(Enum):
    """Positional arguments a hook procedure accepts."""

    NO_ARGS = 0
    PAYLOAD = 1
    PAYLOAD_ROW = 2
    PAYLOAD_ROW_OPERATION = 3

    @property
    def has_payload(self) -> bool:
        return self.value >= 1

    @property
    def has_row(self) -> bool:
        return self.value >= 2

    @property
    def has_operation(self) -> bool:
        return self.value >= 3


@dataclass
class ProcedureSpec:
    """Everything needed to call a hook procedure, resolved once per field.

    Attributes:
        proc: The procedure to call
        table: Table the mutation operates on
        operation: insert, update or delete
        phase: before or after
        shape: Which positional arguments to pass
        is_array: The procedure returns an array and must be unnested
        path: Location of the JSON payload within the mutation arguments;
            also the prefix of every message path
        payload_type: json or jsonb type of the first argument
        row_lookup: How to determine the row argument (None without one)
    """

    proc: PgProc
    table: PgClass
    operation: SqlOperation
    phase: Phase
    shape: CallShape
    is_array: bool
    path: list[str]
    payload_type: PgType | None = None
    row_lookup: RowLookup | None = None


def call_shape(catalog: PgCatalog, proc: PgProc) -> CallShape:
    """Validate a procedure's input arguments and classify them.

    Raises:
        ConfigurationError: For more than three inputs or a non-JSON first input
    """
    input_type_ids = proc.input_arg_type_ids
    if len(input_type_ids) > 3:
        raise ConfigurationError(
            f"Function '{proc.qualified_name}' accepts too many arguments"
        )
    if input_type_ids:
        first = catalog.type_by_id(input_type_ids[0])
        if first is None or not first.is_json:
            raise ConfigurationError(
                f"Function {proc.qualified_name}(...)'s first argument should be "
                "either JSON or JSONB"
            )
    return CallShape(len(input_type_ids))


def payload_path(match: MutationMatch, inflector: Inflector) -> list[str]:
    """Where the mutation's JSON payload sits within its arguments."""
    if match.operation is SqlOperation.INSERT:
        return ["input", inflector.table_field_name(match.table)]
    if match.operation is SqlOperation.UPDATE:
        return ["input", inflector.patch_field(inflector.table_field_name(match.table))]
    return []


def resolve_procedure(
    catalog: PgCatalog,
    match: MutationMatch,
    phase: Phase,
    inflector: Inflector,
    field_context: FieldContext | None = None,
) -> PgProc | None:
    """Find the hook procedure for a table operation and phase, if defined."""
    name = inflector.operation_hook_function_name(
        match.table, match.operation.value, phase.value, field_context
    )
    return catalog.procedure_named(name)


def procedure_spec(
    catalog: PgCatalog,
    proc: PgProc,
    match: MutationMatch,
    phase: Phase,
    field_context: FieldContext,
    inflector: Inflector,
) -> ProcedureSpec:
    """Resolve how to call ``proc`` for this field and phase.

    Raises:
        ConfigurationError: If the procedure's signature cannot be served
    """
    shape = call_shape(catalog, proc)
    input_type_ids = proc.input_arg_type_ids
    return_type = catalog.type_by_id(proc.return_type_id)

    row_lookup = None
    if shape.has_row:
        row_lookup = select_row_lookup(
            match, phase, field_context, inflector, procedure_name=proc.qualified_name
        )

    return ProcedureSpec(
        proc=proc,
        table=match.table,
        operation=match.operation,
        phase=phase,
        shape=shape,
        is_array=bool(return_type and return_type.is_pg_array),
        path=payload_path(match, inflector),
        payload_type=catalog.type_by_id(input_type_ids[0]) if shape.has_payload else None,
        row_lookup=row_lookup,
    )
