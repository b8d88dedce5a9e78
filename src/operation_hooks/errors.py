"""Exception types for operation hooks.

Build-time errors (configuration, registration ordering, completeness)
are raised while the schema is being wrapped and are never retried.
Request-time errors (logic errors in contributed hooks, aborted
operations, invalid identifiers) surface as execution errors for the
request that triggered them.
"""

from typing import Any


class OperationHooksError(Exception):
    """Base class for all operation hook errors."""
    pass


class ConfigurationError(OperationHooksError):
    """A hook or procedure is configured in a way that cannot work."""
    pass


class MissingResolverError(ConfigurationError):
    """A root field has no resolver to wrap."""
    pass


class RegistrationError(OperationHooksError):
    """A hook generator was registered after hooks were compiled."""
    pass


class HookLogicError(OperationHooksError):
    """A contributed hook callback broke the callback contract."""
    pass


class InvalidIdentifierError(OperationHooksError):
    """A global identifier could not be decoded or addresses the wrong row."""
    pass


class SchemaCompletenessError(OperationHooksError):
    """One or more root fields were not wrapped with operation hooks."""

    def __init__(self, fields: list[str]):
        self.fields = fields
        super().__init__(
            "Schema validation error: operation hooks were not added to the "
            "following fields: " + ", ".join(fields)
        )


class OperationAbortedError(OperationHooksError):
    """An operation was aborted because a hook reported an error message.

    Attributes:
        field_name: The root field whose execution was aborted
        messages: The messages accumulated up to the abort
        extensions: GraphQL error extensions (graphql-core copies a dict
            ``extensions`` attribute of the original error onto the
            ``GraphQLError`` it reports)
    """

    def __init__(self, field_name: str, message: str, messages: list[Any]):
        self.field_name = field_name
        self.messages = messages
        self.extensions: dict[str, Any] = {}
        super().__init__(f"Aborting {field_name} due to error: {message}")
