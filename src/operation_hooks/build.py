"""Schema build session.

An OperationHooksBuild owns the hook registry for one schema build,
registers the built-in generators, wraps every root field of a
graphql-core schema and finally verifies that none was missed.

Usage:
    build = OperationHooksBuild(config, catalog=catalog)
    build.add_operation_hook(my_generator)
    schema = build.wrap_schema(schema, field_context_for=scope_of_field)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from graphql import GraphQLField, GraphQLSchema

from operation_hooks.config import OperationHooksConfig
from operation_hooks.hooks.completeness import check_schema_hooks
from operation_hooks.hooks.registry import HookRegistry
from operation_hooks.hooks.types import FieldContext, HookGenerator
from operation_hooks.hooks.wrapper import apply_operation_hooks
from operation_hooks.messages import (
    mutation_messages_hooks,
    payload_messages_hooks,
    preflight_hooks,
)
from operation_hooks.pg.inflection import Inflector
from operation_hooks.pg.introspection import PgCatalog, introspect
from operation_hooks.pg.notices import notice_hooks
from operation_hooks.pg.plugin import PgOperationHooks

# (root type name, field name, field, "query" | "mutation" | "subscription") -> FieldContext
FieldContextFactory = Callable[[str, str, GraphQLField, str], FieldContext]


def default_field_context(
    type_name: str, field_name: str, field: GraphQLField, operation: str
) -> FieldContext:
    """FieldContext carrying only the root flags."""
    return FieldContext(
        type_name=type_name,
        field_name=field_name,
        is_root_query=operation == "query",
        is_root_mutation=operation == "mutation",
        is_root_subscription=operation == "subscription",
    )


class OperationHooksBuild:
    """Hook registration and schema wrapping for one schema build."""

    def __init__(
        self,
        config: OperationHooksConfig | None = None,
        catalog: PgCatalog | None = None,
        inflector: Inflector | None = None,
    ):
        self.config = config or OperationHooksConfig()
        self.registry = HookRegistry()
        self.pg_hooks = PgOperationHooks(catalog, inflector) if catalog is not None else None
        self._register_builtin_hooks()

    @classmethod
    async def from_database(
        cls,
        conn: Any,
        config: OperationHooksConfig | None = None,
        inflector: Inflector | None = None,
    ) -> OperationHooksBuild:
        """Introspect the configured schemas and start a build with the catalog."""
        config = config or OperationHooksConfig()
        catalog = await introspect(conn, config.schemas)
        return cls(config, catalog=catalog, inflector=inflector)

    def _register_builtin_hooks(self) -> None:
        self.registry.register(mutation_messages_hooks)
        if self.pg_hooks is not None:
            self.registry.register(self.pg_hooks)
        self.registry.register(notice_hooks)
        if self.config.operation_messages:
            self.registry.register(payload_messages_hooks)
        if self.config.operation_messages_preflight:
            self.registry.register(preflight_hooks)

    def add_operation_hook(self, generator: HookGenerator) -> None:
        """Register an application hook generator (before wrap_schema only)."""
        self.registry.register(generator)

    def wrap_schema(
        self,
        schema: GraphQLSchema,
        field_context_for: FieldContextFactory | None = None,
    ) -> GraphQLSchema:
        """Wrap every root field's resolver and check none was missed.

        Raises:
            MissingResolverError: If a root field has no resolver
            SchemaCompletenessError: If any root field ends up unwrapped
        """
        factory = field_context_for or default_field_context
        roots = (
            ("query", schema.query_type),
            ("mutation", schema.mutation_type),
            ("subscription", schema.subscription_type),
        )
        for operation, root_type in roots:
            if root_type is None:
                continue
            for field_name, field in root_type.fields.items():
                field_context = factory(root_type.name, field_name, field, operation)
                apply_operation_hooks(field, field_context, self.registry)
        return check_schema_hooks(schema)
