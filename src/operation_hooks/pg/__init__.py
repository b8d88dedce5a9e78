"""PostgreSQL integration for operation hooks.

- PgOperationHooks: calls ``<table>_<operation>_<before|after>`` procedures
  around table mutations and turns their rows into messages
- notice_hooks: turns ``OPMSG`` notices into messages
- introspect / PgCatalog: the catalog both are built from
"""

from operation_hooks.pg.arguments import (
    PRIMARY_KEY_ALIAS_PREFIX,
    GlobalIdentifierLookup,
    NoRow,
    PrimaryKeyPostImage,
    RowLookup,
    UniqueConstraintLookup,
    build_call,
    select_row_lookup,
)
from operation_hooks.pg.inflection import Inflector
from operation_hooks.pg.introspection import (
    JSON_TYPE_ID,
    JSONB_TYPE_ID,
    PgAttribute,
    PgCatalog,
    PgClass,
    PgConstraint,
    PgProc,
    PgType,
    introspect,
)
from operation_hooks.pg.matcher import MutationMatch, SqlOperation, match_mutation
from operation_hooks.pg.messages import (
    CONNECTION_CONTEXT_KEY,
    fold_message,
    procedure_callback,
)
from operation_hooks.pg.node_id import decode_node_id, encode_node_id
from operation_hooks.pg.notices import NOTICE_SQLSTATE, notice_hooks
from operation_hooks.pg.plugin import HookProcedure, PgOperationHooks
from operation_hooks.pg.procedures import (
    CallShape,
    ProcedureSpec,
    call_shape,
    procedure_spec,
    resolve_procedure,
)

__all__ = [
    "CONNECTION_CONTEXT_KEY",
    "CallShape",
    "GlobalIdentifierLookup",
    "HookProcedure",
    "Inflector",
    "JSONB_TYPE_ID",
    "JSON_TYPE_ID",
    "MutationMatch",
    "NOTICE_SQLSTATE",
    "NoRow",
    "PRIMARY_KEY_ALIAS_PREFIX",
    "PgAttribute",
    "PgCatalog",
    "PgClass",
    "PgConstraint",
    "PgOperationHooks",
    "PgProc",
    "PgType",
    "PrimaryKeyPostImage",
    "ProcedureSpec",
    "RowLookup",
    "SqlOperation",
    "UniqueConstraintLookup",
    "build_call",
    "call_shape",
    "decode_node_id",
    "encode_node_id",
    "fold_message",
    "introspect",
    "match_mutation",
    "notice_hooks",
    "procedure_callback",
    "procedure_spec",
    "resolve_procedure",
    "select_row_lookup",
]
