"""Build-time check that every root field went through the hook wrapper."""

from graphql import GraphQLSchema

from operation_hooks.errors import SchemaCompletenessError
from operation_hooks.hooks.wrapper import is_hooked


def find_unhooked_fields(schema: GraphQLSchema) -> list[str]:
    """List ``Type.field`` coordinates of root fields lacking hooks."""
    missing: list[str] = []
    root_types = [
        schema.query_type,
        schema.mutation_type,
        schema.subscription_type,
    ]
    for root_type in root_types:
        if root_type is None:
            continue
        for field_name, field in root_type.fields.items():
            if not is_hooked(field.resolve):
                missing.append(f"{root_type.name}.{field_name}")
    return missing


def check_schema_hooks(schema: GraphQLSchema) -> GraphQLSchema:
    """Fail the build if any root field was not wrapped.

    Raises:
        SchemaCompletenessError: Naming every offending field
    """
    missing = find_unhooked_fields(schema)
    if missing:
        raise SchemaCompletenessError(missing)
    return schema
