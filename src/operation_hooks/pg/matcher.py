"""Classification of root mutation fields by table operation."""

from dataclasses import dataclass
from enum import Enum

from operation_hooks.hooks.types import FieldContext
from operation_hooks.pg.introspection import PgClass


class SqlOperation(Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class MutationMatch:
    table: PgClass
    operation: SqlOperation


def match_mutation(field_context: FieldContext) -> MutationMatch | None:
    """Return the table and operation of a root table mutation, else None."""
    table = field_context.table
    if not field_context.is_root_mutation or not isinstance(table, PgClass):
        return None

    if field_context.is_pg_create_mutation_field:
        operation = SqlOperation.INSERT
    elif field_context.is_pg_update_mutation_field:
        operation = SqlOperation.UPDATE
    elif field_context.is_pg_delete_mutation_field:
        operation = SqlOperation.DELETE
    else:
        return None

    return MutationMatch(table=table, operation=operation)
