"""Wrapping of root field resolvers with the hook chain.

Per request the wrapped resolver moves through
BEFORE -> RESOLVE -> AFTER, diverting to ERROR on any failure and always
running FINALLY before it returns or raises.
"""

import inspect
from collections.abc import Callable
from contextvars import ContextVar
from typing import Any

from graphql import GraphQLField, GraphQLResolveInfo

from operation_hooks.errors import HookLogicError, MissingResolverError
from operation_hooks.hooks.chain import run_finally, run_phase
from operation_hooks.hooks.registry import HookRegistry
from operation_hooks.hooks.types import (
    CompiledHooks,
    FieldContext,
    Marker,
    RequestMeta,
)

# Set on every resolver produced by wrap_resolver()
HOOKED_ATTRIBUTE = "__operation_hooks__"

_request_meta: ContextVar[RequestMeta | None] = ContextVar(
    "operation_hooks_request_meta", default=None
)


def get_request_meta() -> RequestMeta | None:
    """Return the RequestMeta of the hooked root field currently executing.

    Downstream resolvers running inside a wrapped root resolver see the
    same object the hooks do; outside of one this returns None.
    """
    return _request_meta.get()


def is_hooked(resolve: Callable[..., Any] | None) -> bool:
    return bool(resolve is not None and getattr(resolve, HOOKED_ATTRIBUTE, False))


def wrap_resolver(
    resolve: Callable[..., Any],
    hooks: CompiledHooks,
    type_name: str,
    field_name: str,
) -> Callable[..., Any]:
    """Wrap a graphql-core resolver so the compiled hooks run around it."""

    async def resolve_with_hooks(root: Any, info: GraphQLResolveInfo, **args: Any) -> Any:
        meta = RequestMeta(type_name=type_name, field_name=field_name)
        token = _request_meta.set(meta)
        context = info.context
        try:
            try:
                before_result = await run_phase(
                    hooks.before, Marker.PENDING, args, context, meta
                )
                # A before hook supplied a result; skip the resolver entirely
                if before_result is not Marker.PENDING:
                    return before_result

                result = resolve(root, info, **args)
                if inspect.isawaitable(result):
                    result = await result

                return await run_phase(hooks.after, result, args, context, meta)
            except Exception as error:
                error_result = await run_phase(hooks.error, error, args, context, meta)
                if error_result is error:
                    raise
                if not isinstance(error_result, BaseException):
                    raise HookLogicError(
                        "Logic error: 'error' hook must return an exception."
                    ) from error
                raise error_result from error
            finally:
                await run_finally(hooks.finally_, args, context, meta)
        finally:
            _request_meta.reset(token)

    setattr(resolve_with_hooks, HOOKED_ATTRIBUTE, True)
    resolve_with_hooks.__name__ = getattr(resolve, "__name__", "resolve")
    resolve_with_hooks.__wrapped__ = resolve  # type: ignore[attr-defined]
    return resolve_with_hooks


def apply_operation_hooks(
    field: GraphQLField,
    field_context: FieldContext,
    registry: HookRegistry,
) -> GraphQLField:
    """Wrap a root field's resolver with the hooks compiled for it.

    Non-root fields, and root fields no generator contributes to, are
    returned untouched.

    Raises:
        MissingResolverError: If a hooked root field relies on the default resolver
    """
    if not field_context.is_root:
        return field

    hooks = registry.compile_for_field(field_context)
    if hooks is None:
        return field

    if field.resolve is None:
        raise MissingResolverError(
            f"Default resolver found for field {field_context.coordinate}; "
            "default resolvers at the root level are not supported by operation hooks"
        )

    field.resolve = wrap_resolver(
        field.resolve, hooks, field_context.type_name, field_context.field_name
    )
    return field
