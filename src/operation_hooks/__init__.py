"""Operation hooks for graphql-core schemas.

Wraps root field resolvers with an ordered before/after/error/finally hook
pipeline, and calls PostgreSQL ``<table>_<operation>_<before|after>``
procedures around table mutations, collecting the rows they return as
messages on the mutation.

Usage:
    from operation_hooks import OperationHooksBuild, OperationHooksConfig

    build = await OperationHooksBuild.from_database(conn, OperationHooksConfig.from_env())
    schema = build.wrap_schema(schema, field_context_for=scope_of_field)
"""

from operation_hooks.build import (
    FieldContextFactory,
    OperationHooksBuild,
    default_field_context,
)
from operation_hooks.config import OperationHooksConfig
from operation_hooks.errors import (
    ConfigurationError,
    HookLogicError,
    InvalidIdentifierError,
    MissingResolverError,
    OperationAbortedError,
    OperationHooksError,
    RegistrationError,
    SchemaCompletenessError,
)
from operation_hooks.hooks import (
    FieldContext,
    HookEntry,
    HookRegistry,
    HookSet,
    Marker,
    Message,
    Phase,
    RequestMeta,
    get_request_meta,
)
from operation_hooks.messages import (
    MESSAGES_KEY,
    resolve_payload_messages,
    resolve_payload_preflight,
)

__all__ = [
    # Build
    "FieldContextFactory",
    "OperationHooksBuild",
    "OperationHooksConfig",
    "default_field_context",
    # Hooks
    "FieldContext",
    "HookEntry",
    "HookRegistry",
    "HookSet",
    "Marker",
    "Message",
    "Phase",
    "RequestMeta",
    "get_request_meta",
    # Messages
    "MESSAGES_KEY",
    "resolve_payload_messages",
    "resolve_payload_preflight",
    # Errors
    "ConfigurationError",
    "HookLogicError",
    "InvalidIdentifierError",
    "MissingResolverError",
    "OperationAbortedError",
    "OperationHooksError",
    "RegistrationError",
    "SchemaCompletenessError",
]
