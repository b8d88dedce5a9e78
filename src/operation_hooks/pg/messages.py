"""Calling hook procedures and folding their rows into request messages."""

import logging
from collections.abc import Mapping
from typing import Any

from psycopg.rows import dict_row

from operation_hooks.errors import ConfigurationError
from operation_hooks.hooks.types import HookCallback, Message, RequestMeta
from operation_hooks.pg.arguments import build_call
from operation_hooks.pg.procedures import ProcedureSpec

logger = logging.getLogger(__name__)

# Key (or attribute) of the request context holding the psycopg connection
CONNECTION_CONTEXT_KEY = "pg_client"


def connection_from_context(context: Any) -> Any:
    """Return the request's psycopg AsyncConnection, or None."""
    if context is None:
        return None
    if isinstance(context, Mapping):
        return context.get(CONNECTION_CONTEXT_KEY)
    return getattr(context, CONNECTION_CONTEXT_KEY, None)


def fold_message(row: Mapping[str, Any], prefix: list[str]) -> Message | None:
    """Turn a procedure row into a Message rooted at the payload path.

    A non-set composite function returning NULL still yields one row of
    nulls; such rows carry no message and fold to None.
    """
    if row.get("level") is None and row.get("message") is None:
        return None
    message = Message.from_row(dict(row))
    if message.path is not None:
        message.path = [*prefix, *message.path]
    return message


async def call_procedure(
    spec: ProcedureSpec,
    conn: Any,
    args: dict[str, Any],
    value: Any,
) -> list[Message]:
    query, params = build_call(spec, args, value)
    async with conn.cursor(row_factory=dict_row) as cur:
        await cur.execute(query, params)
        rows = await cur.fetchall()
    messages = [fold_message(row, spec.path) for row in rows]
    messages = [message for message in messages if message is not None]
    logger.debug(
        "%s returned %d message(s)", spec.proc.qualified_name, len(messages)
    )
    return messages


def procedure_callback(spec: ProcedureSpec) -> HookCallback:
    """Hook callback calling ``spec``'s procedure on the request connection.

    The messages it yields are appended to the request meta; the hook's
    input value is returned unchanged.
    """

    async def call_hook_procedure(
        value: Any, args: dict[str, Any], context: Any, meta: RequestMeta
    ) -> Any:
        conn = connection_from_context(context)
        if conn is None:
            raise ConfigurationError(
                f"No '{CONNECTION_CONTEXT_KEY}' in the request context; cannot call "
                f"{spec.proc.qualified_name}"
            )
        for message in await call_procedure(spec, conn, args, value):
            meta.add_message(message)
        return value

    call_hook_procedure.__qualname__ = f"call_hook_procedure[{spec.proc.qualified_name}]"
    return call_hook_procedure
