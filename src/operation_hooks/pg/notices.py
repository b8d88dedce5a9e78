"""Messages raised from PostgreSQL as ``OPMSG`` notices.

Any SQL executed during a mutation may emit

    raise notice 'Name is rather short'
      using errcode = 'OPMSG', detail = '{"level": "warning", "path": ["name"]}';

and the notice becomes a message of the mutation. Only root mutations are
supported: root query fields may run concurrently on one connection, so a
notice could not be attributed to a single field.
"""

import json
import logging
from typing import Any

from operation_hooks.hooks.types import (
    FieldContext,
    HookEntry,
    HookSet,
    Message,
    RequestMeta,
)
from operation_hooks.pg.messages import connection_from_context

logger = logging.getLogger(__name__)

NOTICE_SQLSTATE = "OPMSG"
NOTICE_HANDLER_KEY = "pg_notice_handler"


def make_notice_handler(meta: RequestMeta):
    """Build a psycopg notice handler appending OPMSG notices to ``meta``."""

    def handle_notice(diag: Any) -> None:
        if diag.sqlstate != NOTICE_SQLSTATE:
            return
        details: dict[str, Any] = {}
        if diag.message_detail:
            try:
                decoded = json.loads(diag.message_detail)
            except ValueError as e:
                logger.warning(
                    "Failed to parse OPMSG notice detail from PostgreSQL %r: %s",
                    diag.message_detail,
                    e,
                )
            else:
                if isinstance(decoded, dict):
                    details = decoded
        meta.add_message(
            Message.from_row({"level": "info", "message": diag.message_primary, **details})
        )

    return handle_notice


def register_notice_handler(
    value: Any, args: dict[str, Any], context: Any, meta: RequestMeta
) -> Any:
    conn = connection_from_context(context)
    if conn is None:
        return value
    handler = make_notice_handler(meta)
    conn.add_notice_handler(handler)
    meta.extra[NOTICE_HANDLER_KEY] = (conn, handler)
    return value


def unregister_notice_handler(
    value: Any, args: dict[str, Any], context: Any, meta: RequestMeta
) -> Any:
    registered = meta.extra.pop(NOTICE_HANDLER_KEY, None)
    if registered is not None:
        conn, handler = registered
        conn.remove_notice_handler(handler)
    return value


def notice_hooks(field_context: FieldContext) -> HookSet | None:
    """Hook generator collecting OPMSG notices during root mutations."""
    if not field_context.is_root_mutation:
        return None
    return HookSet(
        before=[HookEntry(100, register_notice_handler)],
        finally_=[HookEntry(500, unregister_notice_handler)],
    )
