"""Naming rules shared with the schema builder.

The defaults follow the usual conventions of generated PostgreSQL GraphQL
schemas (``users`` table -> ``user`` input field, ``userPatch`` patch
field, ``first_name`` column -> ``firstName``). Schema builders using
different names subclass Inflector and override the relevant method.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from operation_hooks.hooks.types import FieldContext
    from operation_hooks.pg.introspection import PgAttribute, PgClass


def camel_case(name: str) -> str:
    """Convert snake_case to camelCase: ``first_name`` -> ``firstName``."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def singularize(word: str) -> str:
    """Naive English singular: ``users`` -> ``user``, ``categories`` -> ``category``."""
    if word.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if word.endswith(("sses", "xes", "ches", "shes")):
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


class Inflector:
    """Default naming rules."""

    node_id_field_name = "nodeId"

    def operation_hook_function_name(
        self,
        table: PgClass,
        operation: str,
        phase: str,
        field_context: FieldContext | None = None,
    ) -> str:
        """Name of the procedure called around a table mutation."""
        return f"{table.name}_{operation}_{phase.lower()}"

    def table_field_name(self, table: PgClass) -> str:
        return camel_case(singularize(table.name))

    def patch_field(self, item_name: str) -> str:
        return f"{item_name}Patch"

    def column(self, attribute: PgAttribute) -> str:
        return camel_case(attribute.name)

    def node_alias(self, table: PgClass) -> str:
        """Type name encoded into the table's global identifiers."""
        return table.name
