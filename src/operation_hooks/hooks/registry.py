"""Hook generator registry.

Collects hook generators for one schema build and compiles them into
per-field, priority-sorted callback lists. The registry locks itself the
first time a field is compiled: a generator registered after that point
would only apply to some fields, so late registration is rejected.
"""

import logging
import threading

from operation_hooks.errors import RegistrationError
from operation_hooks.hooks.types import (
    CompiledHooks,
    FieldContext,
    HookEntry,
    HookGenerator,
    HookSet,
    Phase,
)

logger = logging.getLogger(__name__)


class HookRegistry:
    """Registry of hook generators for one schema build.

    Each build session owns its own registry; nothing is shared between
    builds.

    Example:
        registry = HookRegistry()
        registry.register(lambda ctx: {"before": [(500, check_input)]})
        hooks = registry.compile_for_field(field_context)
    """

    def __init__(self) -> None:
        self._generators: list[HookGenerator] = []
        self._locked = False
        self._lock = threading.Lock()

    @property
    def locked(self) -> bool:
        return self._locked

    def register(self, generator: HookGenerator) -> None:
        """Register a hook generator.

        Args:
            generator: Called once per root field with its FieldContext;
                returns a HookSet (or equivalent dict) or None

        Raises:
            RegistrationError: If any field's hooks have already been compiled
        """
        with self._lock:
            if self._locked:
                raise RegistrationError(
                    "Attempted to register operation hook after a hook was "
                    "applied; this indicates an issue with the ordering of "
                    "your plugins. Register every hook generator before "
                    "wrapping the schema."
                )
            self._generators.append(generator)

    def list_registered(self) -> list[HookGenerator]:
        """List registered generators in registration order."""
        return list(self._generators)

    def compile_for_field(self, field_context: FieldContext) -> CompiledHooks | None:
        """Invoke every generator for a field and sort the result by priority.

        Locks the registry against further registration.

        Returns:
            The compiled callbacks, or None if no generator contributed any
            hook (the field should then be left unwrapped).
        """
        with self._lock:
            self._locked = True
            generators = list(self._generators)

        merged = HookSet()
        for generator in generators:
            contributed = generator(field_context)
            if contributed is None:
                continue
            if isinstance(contributed, dict):
                contributed = HookSet.from_dict(contributed)
            for phase in Phase:
                merged.for_phase(phase).extend(contributed.for_phase(phase))

        if merged.is_empty():
            return None

        def sorted_callbacks(entries: list[HookEntry]):
            # sorted() is stable, so equal priorities keep registration order
            return tuple(
                entry.callback
                for entry in sorted(entries, key=lambda entry: entry.priority)
            )

        compiled = CompiledHooks(
            before=sorted_callbacks(merged.before),
            after=sorted_callbacks(merged.after),
            error=sorted_callbacks(merged.error),
            finally_=sorted_callbacks(merged.finally_),
        )
        logger.debug(
            "Compiled operation hooks for %s: %d before, %d after, %d error, %d finally",
            field_context.coordinate,
            len(compiled.before),
            len(compiled.after),
            len(compiled.error),
            len(compiled.finally_),
        )
        return compiled
