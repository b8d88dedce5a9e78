"""Hook generator calling ``<table>_<operation>_<before|after>`` procedures."""

import logging
from dataclasses import dataclass

from operation_hooks.errors import ConfigurationError
from operation_hooks.hooks.types import FieldContext, HookCallback, HookEntry, HookSet, Phase
from operation_hooks.pg.arguments import required_columns
from operation_hooks.pg.inflection import Inflector
from operation_hooks.pg.introspection import PgCatalog, PgClass, PgProc
from operation_hooks.pg.matcher import SqlOperation, match_mutation
from operation_hooks.pg.messages import procedure_callback
from operation_hooks.pg.procedures import (
    HOOK_PHASES,
    CallShape,
    call_shape,
    procedure_spec,
    resolve_procedure,
)

logger = logging.getLogger(__name__)

PROCEDURE_HOOK_PRIORITY = 500


@dataclass
class HookProcedure:
    """A hook procedure found in the catalog (used for reporting)."""

    table: PgClass
    operation: SqlOperation
    phase: Phase
    proc: PgProc
    shape: CallShape | None = None
    error: str | None = None


class PgOperationHooks:
    """Hook generator for PostgreSQL table mutations.

    For each root insert/update/delete field, contributes a before and/or
    after callback when a procedure named after the table, operation and
    phase exists. Procedure specs are resolved when the field is compiled,
    so signature problems fail the build rather than a request.
    """

    def __init__(self, catalog: PgCatalog, inflector: Inflector | None = None):
        self.catalog = catalog
        self.inflector = inflector or Inflector()

    def __call__(self, field_context: FieldContext) -> HookSet | None:
        before = self.callback_for(field_context, Phase.BEFORE)
        after = self.callback_for(field_context, Phase.AFTER)
        if before is None and after is None:
            return None

        hooks = HookSet()
        if before is not None:
            hooks.before.append(HookEntry(PROCEDURE_HOOK_PRIORITY, before))
        if after is not None:
            hooks.after.append(HookEntry(PROCEDURE_HOOK_PRIORITY, after))
        return hooks

    def callback_for(self, field_context: FieldContext, phase: Phase) -> HookCallback | None:
        match = match_mutation(field_context)
        if match is None:
            return None
        proc = resolve_procedure(self.catalog, match, phase, self.inflector, field_context)
        if proc is None:
            return None
        spec = procedure_spec(
            self.catalog, proc, match, phase, field_context, self.inflector
        )
        logger.debug(
            "%s calls %s (%s) %s the mutation",
            field_context.coordinate,
            proc.qualified_name,
            spec.shape.name,
            phase.value,
        )
        return procedure_callback(spec)

    def required_columns(self, field_context: FieldContext) -> list[tuple[str, str]]:
        """Primary key columns the schema builder must select for this field.

        Returns ``(column, alias)`` pairs; the mutation result must expose
        each value under ``result["data"][alias]``.
        """
        return required_columns(match_mutation(field_context))

    def hook_procedures(self) -> list[HookProcedure]:
        """Every hook procedure defined for the catalog's tables."""
        found = []
        for table in sorted(self.catalog.tables, key=lambda t: (t.namespace_name, t.name)):
            for operation in SqlOperation:
                for phase in HOOK_PHASES:
                    name = self.inflector.operation_hook_function_name(
                        table, operation.value, phase.value
                    )
                    proc = self.catalog.procedure_named(name)
                    if proc is None:
                        continue
                    entry = HookProcedure(
                        table=table, operation=operation, phase=phase, proc=proc
                    )
                    try:
                        entry.shape = call_shape(self.catalog, proc)
                    except ConfigurationError as e:
                        entry.error = str(e)
                    found.append(entry)
        return found
