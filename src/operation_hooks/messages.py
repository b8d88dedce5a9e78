"""Operation messages: validation, error extensions, payloads and preflight.

Hooks push Message records onto the request meta. The generators here:
- mutation_messages_hooks: abort on any error-level message and attach
  the messages to raised errors (every root field)
- payload_messages_hooks: attach the messages to mutation payloads
- preflight_hooks: when a mutation is called with ``preflight: true``,
  return the messages without running the mutation
"""

from collections.abc import Mapping
from typing import Any

from graphql import GraphQLResolveInfo

from operation_hooks.errors import OperationAbortedError
from operation_hooks.hooks.types import FieldContext, HookEntry, HookSet, RequestMeta

# Payload key holding the messages; unusual to avoid clashing with real fields
MESSAGES_KEY = "#messages"
PREFLIGHT_KEY = "preflight"

VALIDATE_PRIORITY = 900
ERROR_MESSAGES_PRIORITY = 500
PAYLOAD_MESSAGES_PRIORITY = 950
PREFLIGHT_PRIORITY = 990


def validate_messages(value: Any, args: dict[str, Any], context: Any, meta: RequestMeta) -> Any:
    """Abort the operation if any message so far has level ``error``."""
    first_error = meta.first_error()
    if first_error is not None:
        raise OperationAbortedError(
            meta.field_name, first_error.message, list(meta.messages)
        )
    return value


def add_messages_to_error(
    error: BaseException, args: dict[str, Any], context: Any, meta: RequestMeta
) -> BaseException:
    """Expose the accumulated messages in the error's GraphQL extensions."""
    extensions = getattr(error, "extensions", None)
    if not isinstance(extensions, dict):
        extensions = {}
    extensions["messages"] = [message.to_dict() for message in meta.messages]
    error.extensions = extensions  # type: ignore[attr-defined]
    return error


def mutation_messages_hooks(field_context: FieldContext) -> HookSet:
    """Validation and error-message hooks for every root field.

    Contributing to queries and subscriptions too keeps every root field
    wrapped, which the build-time completeness check requires. Wrapped
    resolvers are coroutines, so the schema must run with ``graphql()``;
    ``graphql_sync()`` is not supported.
    """
    return HookSet(
        before=[HookEntry(VALIDATE_PRIORITY, validate_messages)],
        after=[HookEntry(VALIDATE_PRIORITY, validate_messages)],
        error=[HookEntry(ERROR_MESSAGES_PRIORITY, add_messages_to_error)],
    )


# ---------------------------------------------------------------------------
# Mutation payloads
# ---------------------------------------------------------------------------


def attach_messages(payload: Any, messages: list[Any]) -> Any:
    """Return ``payload`` carrying ``messages`` under MESSAGES_KEY.

    Mappings are copied; other objects get the messages as an attribute.
    """
    if payload is None or isinstance(payload, Mapping):
        return {**(payload or {}), MESSAGES_KEY: messages}
    setattr(payload, MESSAGES_KEY, messages)
    return payload


def add_messages_to_payload(value: Any, args: dict[str, Any], context: Any, meta: RequestMeta) -> Any:
    return attach_messages(value, meta.messages)


def payload_messages_hooks(field_context: FieldContext) -> HookSet | None:
    if not field_context.is_root_mutation:
        return None
    # Runs after validation so only successful payloads carry messages
    return HookSet(after=[HookEntry(PAYLOAD_MESSAGES_PRIORITY, add_messages_to_payload)])


def resolve_payload_messages(payload: Any, info: GraphQLResolveInfo) -> list[dict[str, Any]] | None:
    """Resolver for a mutation payload's ``messages`` field."""
    if isinstance(payload, Mapping):
        messages = payload.get(MESSAGES_KEY)
    else:
        messages = getattr(payload, MESSAGES_KEY, None)
    if messages is None:
        return None
    return [message.to_dict() if hasattr(message, "to_dict") else message for message in messages]


# ---------------------------------------------------------------------------
# Preflight
# ---------------------------------------------------------------------------


def preflight(value: Any, args: dict[str, Any], context: Any, meta: RequestMeta) -> Any:
    """Short-circuit the mutation when called with ``preflight: true``."""
    if not args.get(PREFLIGHT_KEY):
        return value
    return {PREFLIGHT_KEY: True, MESSAGES_KEY: meta.messages}


def preflight_hooks(field_context: FieldContext) -> HookSet | None:
    if not field_context.is_root_mutation:
        return None
    # Last before-hook, so every validation has already run
    return HookSet(before=[HookEntry(PREFLIGHT_PRIORITY, preflight)])


def resolve_payload_preflight(payload: Any, info: GraphQLResolveInfo) -> bool:
    """Resolver for a mutation payload's ``preflight`` field."""
    if isinstance(payload, Mapping):
        return bool(payload.get(PREFLIGHT_KEY))
    return bool(getattr(payload, PREFLIGHT_KEY, False))
