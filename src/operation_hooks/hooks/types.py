"""Operation hook types.

Defines the core data structures of the hook pipeline:
- Phase / Marker: the four phases and the empty markers that flow through them
- HookEntry / HookSet: what a hook generator contributes for one field
- CompiledHooks: priority-sorted callbacks, fixed once per field
- FieldContext: static scope of the field being wrapped
- RequestMeta / Message: per-request state shared between hooks
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Phase(Enum):
    """Stage of resolver execution a callback is attached to."""

    BEFORE = "before"
    AFTER = "after"
    ERROR = "error"
    FINALLY = "finally"


class Marker(Enum):
    """Empty values passed through the chain instead of a real value.

    PENDING: no before-hook has supplied a replacement result
    FINALLY: the chain is performing cleanup; callbacks must return it unchanged
    """

    PENDING = "pending"
    FINALLY = "finally"


# Callback signature: (value, args, context, meta) -> value | Awaitable[value]
HookCallback = Callable[[Any, dict[str, Any], Any, "RequestMeta"], Any]


@dataclass(frozen=True)
class HookEntry:
    """A callback and its ordering key. Lower priorities run first."""

    priority: int
    callback: HookCallback


@dataclass
class HookSet:
    """Callbacks contributed by one generator for one field."""

    before: list[HookEntry] = field(default_factory=list)
    after: list[HookEntry] = field(default_factory=list)
    error: list[HookEntry] = field(default_factory=list)
    finally_: list[HookEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HookSet":
        """Create a HookSet from ``{"before": [...], "finally": [...]}``.

        Entries may be HookEntry instances or ``(priority, callback)`` pairs.
        """

        def entries(key: str) -> list[HookEntry]:
            result = []
            for item in data.get(key) or []:
                if not isinstance(item, HookEntry):
                    priority, callback = item
                    item = HookEntry(priority=priority, callback=callback)
                result.append(item)
            return result

        return cls(
            before=entries("before"),
            after=entries("after"),
            error=entries("error"),
            finally_=entries("finally"),
        )

    def for_phase(self, phase: Phase) -> list[HookEntry]:
        if phase is Phase.FINALLY:
            return self.finally_
        return getattr(self, phase.value)

    def is_empty(self) -> bool:
        return not (self.before or self.after or self.error or self.finally_)


@dataclass(frozen=True)
class CompiledHooks:
    """Priority-sorted callbacks for each phase of one field."""

    before: tuple[HookCallback, ...] = ()
    after: tuple[HookCallback, ...] = ()
    error: tuple[HookCallback, ...] = ()
    finally_: tuple[HookCallback, ...] = ()

    def for_phase(self, phase: Phase) -> tuple[HookCallback, ...]:
        if phase is Phase.FINALLY:
            return self.finally_
        return getattr(self, phase.value)


@dataclass
class FieldContext:
    """Static scope of a root field, supplied by the schema builder.

    Attributes:
        type_name: Name of the root type (e.g. "Mutation")
        field_name: Name of the field on that type
        is_root_query / is_root_mutation / is_root_subscription: Root flags
        is_pg_create_mutation_field: Field inserts into ``table``
        is_pg_update_mutation_field: Field updates a row of ``table``
        is_pg_delete_mutation_field: Field deletes a row of ``table``
        is_pg_node_mutation: Field identifies its row by global identifier
        table: The PgClass the field operates on, if any
        constraint: The unique PgConstraint matched by the field, if any
        extra: Anything else a collaborator wants to pass to generators
    """

    type_name: str
    field_name: str
    is_root_query: bool = False
    is_root_mutation: bool = False
    is_root_subscription: bool = False
    is_pg_create_mutation_field: bool = False
    is_pg_update_mutation_field: bool = False
    is_pg_delete_mutation_field: bool = False
    is_pg_node_mutation: bool = False
    table: Any = None  # PgClass, avoiding circular import
    constraint: Any = None  # PgConstraint
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_root(self) -> bool:
        return self.is_root_query or self.is_root_mutation or self.is_root_subscription

    @property
    def coordinate(self) -> str:
        return f"{self.type_name}.{self.field_name}"


@dataclass
class Message:
    """A structured diagnostic attached to an operation.

    Attributes:
        level: Classification or severity (e.g. "info", "warning", "error")
        message: Human-readable text
        path: Location in the operation input the message refers to
        code: Machine-readable code
        details: Any additional columns/keys supplied with the message
    """

    level: str
    message: str
    path: list[str] | None = None
    code: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Message":
        """Create a Message from a result row or decoded JSON object."""
        extra = {
            key: value
            for key, value in row.items()
            if key not in ("level", "message", "path", "code")
        }
        path = row.get("path")
        return cls(
            level=row.get("level") or "info",
            message=row.get("message") or "",
            path=list(path) if path is not None else None,
            code=row.get("code"),
            details=extra,
        )

    @property
    def is_error(self) -> bool:
        return self.level.lower() == "error"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            **self.details,
            "level": self.level,
            "message": self.message,
            "path": self.path,
        }
        if self.code is not None:
            result["code"] = self.code
        return result


@dataclass
class RequestMeta:
    """Mutable state for one resolver invocation.

    Created fresh for every call of a wrapped resolver and discarded once
    the finally phase has run. Messages keep insertion order across phases.
    """

    type_name: str
    field_name: str
    messages: list[Message] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def add_message(self, message: Message) -> None:
        self.messages.append(message)

    def first_error(self) -> Message | None:
        for message in self.messages:
            if message.is_error:
                return message
        return None


# Generator signature: FieldContext -> HookSet | dict | None
HookGenerator = Callable[[FieldContext], HookSet | dict[str, Any] | None]
