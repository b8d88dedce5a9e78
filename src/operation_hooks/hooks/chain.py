"""Sequential execution of phase callbacks.

Callbacks run one after the other; each may be sync or async and the
next one starts only once the previous one has settled.
"""

import inspect
import logging
from collections.abc import Sequence
from typing import Any

from operation_hooks.errors import HookLogicError
from operation_hooks.hooks.types import HookCallback, Marker, RequestMeta

logger = logging.getLogger(__name__)


async def _call(
    callback: HookCallback,
    value: Any,
    args: dict[str, Any],
    context: Any,
    meta: RequestMeta,
) -> Any:
    result = callback(value, args, context, meta)
    if inspect.isawaitable(result):
        result = await result
    return result


async def run_phase(
    callbacks: Sequence[HookCallback],
    value: Any,
    args: dict[str, Any],
    context: Any,
    meta: RequestMeta,
) -> Any:
    """Run before/after/error callbacks, threading the value through each.

    The first failing callback aborts the phase and its exception propagates.

    Raises:
        HookLogicError: If a callback returns None for a value that was neither
            None nor a Marker
    """
    output = value
    for callback in callbacks:
        incoming = output
        output = await _call(callback, incoming, args, context, meta)
        # None replacing a marker is a real override (e.g. a null early exit)
        if output is None and incoming is not None and not isinstance(incoming, Marker):
            raise HookLogicError("Logic error: operation hook returned None.")
    return output


async def run_finally(
    callbacks: Sequence[HookCallback],
    args: dict[str, Any],
    context: Any,
    meta: RequestMeta,
) -> None:
    """Run cleanup callbacks.

    Every callback is invoked even if earlier ones fail; failures are logged
    and never propagate, so cleanup cannot mask the operation's outcome.
    """
    for callback in callbacks:
        try:
            output = await _call(callback, Marker.FINALLY, args, context, meta)
            if output is not Marker.FINALLY:
                raise HookLogicError(
                    "Logic error: 'finally' hook must return the input value."
                )
        except Exception as e:
            logger.error(
                "finally hook %r failed for %s.%s: %s",
                getattr(callback, "__qualname__", callback),
                meta.type_name,
                meta.field_name,
                e,
            )
