"""Tests for operation messages: validation, error extensions, payloads and preflight."""

import pytest
from graphql import build_schema, graphql

from operation_hooks import (
    FieldContext,
    Message,
    OperationAbortedError,
    OperationHooksBuild,
    OperationHooksConfig,
    RequestMeta,
    resolve_payload_messages,
    resolve_payload_preflight,
)
from operation_hooks.messages import (
    MESSAGES_KEY,
    add_messages_to_error,
    attach_messages,
    mutation_messages_hooks,
    payload_messages_hooks,
    preflight,
    preflight_hooks,
    validate_messages,
)


SDL = """
type Query {
  ping: String
}

type Mutation {
  createUser(input: CreateUserInput!, preflight: Boolean): CreateUserPayload
}

input CreateUserInput {
  user: UserInput!
}

input UserInput {
  name: String!
}

type CreateUserPayload {
  name: String
  preflight: Boolean
  messages: [OperationMessage!]
}

type OperationMessage {
  level: String!
  message: String!
  path: [String!]
  code: String
}
"""

CREATE_USER = """
mutation ($preflight: Boolean) {
  createUser(input: {user: {name: "Bo"}}, preflight: $preflight) {
    name
    preflight
    messages { level message path code }
  }
}
"""


def make_schema(calls: list[str]):
    schema = build_schema(SDL)

    def create_user(root, info, input, preflight=None):
        calls.append("createUser")
        return {"name": input["user"]["name"]}

    schema.query_type.fields["ping"].resolve = lambda root, info: "pong"
    schema.mutation_type.fields["createUser"].resolve = create_user
    payload = schema.get_type("CreateUserPayload")
    payload.fields["messages"].resolve = resolve_payload_messages
    payload.fields["preflight"].resolve = resolve_payload_preflight
    return schema


def short_name_check(level: str):
    def check(value, args, context, meta):
        if len(args["input"]["user"]["name"]) < 3:
            meta.add_message(
                Message(
                    level=level,
                    message="Name is too short",
                    path=["input", "user", "name"],
                    code="NAME_TOO_SHORT",
                )
            )
        return value

    return check


def mutation_hook(phase: str, callback, priority: int = 500):
    def generator(field_context: FieldContext):
        if not field_context.is_root_mutation:
            return None
        return {phase: [(priority, callback)]}

    return generator


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def calls():
    return []


@pytest.fixture
def meta():
    return RequestMeta(type_name="Mutation", field_name="createUser")


@pytest.fixture
def mutation_context():
    return FieldContext(type_name="Mutation", field_name="createUser", is_root_mutation=True)


@pytest.fixture
def query_context():
    return FieldContext(type_name="Query", field_name="ping", is_root_query=True)


# =============================================================================
# Message tests
# =============================================================================


class TestMessage:
    def test_from_row_keeps_extra_columns(self):
        message = Message.from_row(
            {"level": "warning", "message": "Hm", "path": ("name",), "code": "X", "hint": "y"}
        )
        assert message.level == "warning"
        assert message.path == ["name"]
        assert message.code == "X"
        assert message.details == {"hint": "y"}

    def test_from_row_defaults(self):
        message = Message.from_row({"message": "Hello"})
        assert message.level == "info"
        assert message.path is None
        assert message.code is None

    def test_is_error_is_case_insensitive(self):
        assert Message(level="ERROR", message="x").is_error
        assert Message(level="error", message="x").is_error
        assert not Message(level="warning", message="x").is_error

    def test_to_dict(self):
        message = Message(level="info", message="Hi", path=["a"], details={"hint": "b"})
        assert message.to_dict() == {"hint": "b", "level": "info", "message": "Hi", "path": ["a"]}

        message.code = "C1"
        assert message.to_dict()["code"] == "C1"

    def test_first_error(self, meta):
        meta.add_message(Message(level="info", message="fine"))
        assert meta.first_error() is None

        meta.add_message(Message(level="error", message="first"))
        meta.add_message(Message(level="error", message="second"))
        assert meta.first_error().message == "first"


# =============================================================================
# Validation and error extensions
# =============================================================================


class TestValidateMessages:
    def test_passes_value_without_errors(self, meta):
        meta.add_message(Message(level="warning", message="careful"))
        assert validate_messages("value", {}, None, meta) == "value"

    def test_aborts_on_error_message(self, meta):
        meta.add_message(Message(level="info", message="fine"))
        meta.add_message(Message(level="error", message="Name is too short"))

        with pytest.raises(OperationAbortedError) as exc_info:
            validate_messages("value", {}, None, meta)

        assert str(exc_info.value) == "Aborting createUser due to error: Name is too short"
        assert len(exc_info.value.messages) == 2

    def test_error_gets_messages_extension(self, meta):
        meta.add_message(Message(level="warning", message="careful", path=["name"]))
        error = ValueError("boom")

        assert add_messages_to_error(error, {}, None, meta) is error
        assert error.extensions == {
            "messages": [{"level": "warning", "message": "careful", "path": ["name"]}]
        }

    def test_existing_extensions_are_kept(self, meta):
        error = OperationAbortedError("createUser", "nope", [])
        error.extensions["code"] = "ABORTED"

        add_messages_to_error(error, {}, None, meta)
        assert error.extensions == {"code": "ABORTED", "messages": []}

    def test_hooks_apply_to_every_root_field(self, mutation_context, query_context):
        for ctx in (mutation_context, query_context):
            hooks = mutation_messages_hooks(ctx)
            assert [entry.priority for entry in hooks.before] == [900]
            assert [entry.priority for entry in hooks.after] == [900]
            assert [entry.priority for entry in hooks.error] == [500]


# =============================================================================
# Payload messages
# =============================================================================


class TestPayloadMessages:
    def test_attach_to_mapping_copies(self):
        payload = {"name": "Bo"}
        result = attach_messages(payload, ["m"])
        assert result == {"name": "Bo", MESSAGES_KEY: ["m"]}
        assert MESSAGES_KEY not in payload

    def test_attach_to_none(self):
        assert attach_messages(None, []) == {MESSAGES_KEY: []}

    def test_attach_to_object(self):
        class Payload:
            pass

        payload = Payload()
        assert attach_messages(payload, ["m"]) is payload
        assert getattr(payload, MESSAGES_KEY) == ["m"]

    def test_resolve_payload_messages(self):
        payload = {MESSAGES_KEY: [Message(level="info", message="Hi")]}
        assert resolve_payload_messages(payload, None) == [
            {"level": "info", "message": "Hi", "path": None}
        ]
        assert resolve_payload_messages({}, None) is None

    def test_only_mutations(self, mutation_context, query_context):
        assert payload_messages_hooks(query_context) is None
        assert payload_messages_hooks(mutation_context).after[0].priority == 950

    @pytest.mark.asyncio
    async def test_messages_exposed_on_payload(self, calls):
        build = OperationHooksBuild(OperationHooksConfig(operation_messages=True))
        build.add_operation_hook(mutation_hook("before", short_name_check("warning")))
        schema = build.wrap_schema(make_schema(calls))

        result = await graphql(schema, CREATE_USER)
        assert result.errors is None
        assert result.data["createUser"] == {
            "name": "Bo",
            "preflight": False,
            "messages": [
                {
                    "level": "warning",
                    "message": "Name is too short",
                    "path": ["input", "user", "name"],
                    "code": "NAME_TOO_SHORT",
                }
            ],
        }

    @pytest.mark.asyncio
    async def test_payload_untouched_when_disabled(self, calls):
        build = OperationHooksBuild(OperationHooksConfig(operation_messages=False))
        build.add_operation_hook(mutation_hook("before", short_name_check("warning")))
        schema = build.wrap_schema(make_schema(calls))

        result = await graphql(schema, CREATE_USER)
        assert result.data["createUser"]["messages"] is None

    @pytest.mark.asyncio
    async def test_error_message_aborts_before_resolver(self, calls):
        build = OperationHooksBuild(OperationHooksConfig(operation_messages=True))
        build.add_operation_hook(mutation_hook("before", short_name_check("error")))
        schema = build.wrap_schema(make_schema(calls))

        result = await graphql(schema, CREATE_USER)
        assert result.data == {"createUser": None}
        assert calls == []

        error = result.errors[0]
        assert error.message == "Aborting createUser due to error: Name is too short"
        assert error.original_error.extensions["messages"] == [
            {
                "level": "error",
                "message": "Name is too short",
                "path": ["input", "user", "name"],
                "code": "NAME_TOO_SHORT",
            }
        ]

    @pytest.mark.asyncio
    async def test_error_message_in_after_phase_aborts(self, calls):
        build = OperationHooksBuild(OperationHooksConfig(operation_messages=True))
        build.add_operation_hook(mutation_hook("after", short_name_check("error")))
        schema = build.wrap_schema(make_schema(calls))

        result = await graphql(schema, CREATE_USER)
        assert result.data == {"createUser": None}
        assert calls == ["createUser"]
        assert isinstance(result.errors[0].original_error, OperationAbortedError)


# =============================================================================
# Preflight
# =============================================================================


class TestPreflight:
    def test_passthrough_without_flag(self, meta):
        assert preflight("value", {}, None, meta) == "value"
        assert preflight("value", {"preflight": False}, None, meta) == "value"

    def test_short_circuits_with_flag(self, meta):
        meta.add_message(Message(level="info", message="ok"))
        result = preflight("pending", {"preflight": True}, None, meta)
        assert result == {"preflight": True, MESSAGES_KEY: meta.messages}

    def test_only_mutations(self, mutation_context, query_context):
        assert preflight_hooks(query_context) is None
        assert preflight_hooks(mutation_context).before[0].priority == 990

    def test_resolve_payload_preflight(self):
        assert resolve_payload_preflight({"preflight": True}, None) is True
        assert resolve_payload_preflight({}, None) is False

    @pytest.mark.asyncio
    async def test_preflight_reports_without_mutating(self, calls):
        build = OperationHooksBuild(
            OperationHooksConfig(operation_messages=True, operation_messages_preflight=True)
        )
        build.add_operation_hook(mutation_hook("before", short_name_check("warning")))
        schema = build.wrap_schema(make_schema(calls))

        result = await graphql(schema, CREATE_USER, variable_values={"preflight": True})
        assert result.errors is None
        assert calls == []
        payload = result.data["createUser"]
        assert payload["preflight"] is True
        assert payload["name"] is None
        assert [m["message"] for m in payload["messages"]] == ["Name is too short"]

    @pytest.mark.asyncio
    async def test_preflight_still_aborts_on_error(self, calls):
        build = OperationHooksBuild(
            OperationHooksConfig(operation_messages=True, operation_messages_preflight=True)
        )
        build.add_operation_hook(mutation_hook("before", short_name_check("error")))
        schema = build.wrap_schema(make_schema(calls))

        result = await graphql(schema, CREATE_USER, variable_values={"preflight": True})
        assert result.data == {"createUser": None}
        assert result.errors[0].message.startswith("Aborting createUser")
        assert calls == []

    @pytest.mark.asyncio
    async def test_mutation_runs_without_preflight(self, calls):
        build = OperationHooksBuild(
            OperationHooksConfig(operation_messages=True, operation_messages_preflight=True)
        )
        schema = build.wrap_schema(make_schema(calls))

        result = await graphql(schema, CREATE_USER, variable_values={"preflight": False})
        assert result.data["createUser"]["name"] == "Bo"
        assert result.data["createUser"]["preflight"] is False
        assert calls == ["createUser"]

    @pytest.mark.asyncio
    async def test_flag_ignored_when_disabled(self, calls):
        build = OperationHooksBuild(OperationHooksConfig(operation_messages=True))
        schema = build.wrap_schema(make_schema(calls))

        result = await graphql(schema, CREATE_USER, variable_values={"preflight": True})
        assert result.data["createUser"]["name"] == "Bo"
        assert calls == ["createUser"]
