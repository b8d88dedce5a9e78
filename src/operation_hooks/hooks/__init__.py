"""Phase-based hooks around root field resolvers.

Hook generators are registered with a HookRegistry before the schema is
wrapped. For every root field each generator may contribute callbacks to
four phases:
- before: runs before the resolver; returning anything other than the
  pending marker short-circuits the resolver
- after: transforms the resolver's result
- error: transforms the raised exception, which is always re-raised
- finally: cleanup, always runs, failures are logged and ignored

Usage:
    from operation_hooks.hooks import HookRegistry, apply_operation_hooks

    registry = HookRegistry()
    registry.register(lambda ctx: {"after": [(500, add_timestamp)]})
    apply_operation_hooks(field, field_context, registry)
"""

from operation_hooks.hooks.chain import run_finally, run_phase
from operation_hooks.hooks.completeness import check_schema_hooks, find_unhooked_fields
from operation_hooks.hooks.registry import HookRegistry
from operation_hooks.hooks.types import (
    CompiledHooks,
    FieldContext,
    HookCallback,
    HookEntry,
    HookGenerator,
    HookSet,
    Marker,
    Message,
    Phase,
    RequestMeta,
)
from operation_hooks.hooks.wrapper import (
    HOOKED_ATTRIBUTE,
    apply_operation_hooks,
    get_request_meta,
    is_hooked,
    wrap_resolver,
)

__all__ = [
    "CompiledHooks",
    "FieldContext",
    "HOOKED_ATTRIBUTE",
    "HookCallback",
    "HookEntry",
    "HookGenerator",
    "HookRegistry",
    "HookSet",
    "Marker",
    "Message",
    "Phase",
    "RequestMeta",
    "apply_operation_hooks",
    "check_schema_hooks",
    "find_unhooked_fields",
    "get_request_meta",
    "is_hooked",
    "run_finally",
    "run_phase",
    "wrap_resolver",
]
