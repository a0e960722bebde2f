"""Shared test fixtures for gqlms tests."""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from typing import Any

import pytest

from gqlms.http import HttpResult


def type_ref(kind: str, name: str | None = None, of_type: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build an introspection ``type`` object."""
    return {"kind": kind, "name": name, "ofType": of_type}


def non_null(inner: dict[str, Any]) -> dict[str, Any]:
    return type_ref("NON_NULL", None, inner)


def list_of(inner: dict[str, Any]) -> dict[str, Any]:
    return type_ref("LIST", None, inner)


def scalar(name: str) -> dict[str, Any]:
    return type_ref("SCALAR", name)


def input_object(name: str) -> dict[str, Any]:
    return type_ref("INPUT_OBJECT", name)


def schema_body(fields: list[dict[str, Any]]) -> bytes:
    """A ``__schema`` introspection response with the given mutation fields."""
    return json.dumps({"data": {"__schema": {"mutationType": {"fields": fields}}}}).encode()


def input_type_body(name: str, fields: list[dict[str, Any]]) -> bytes:
    return json.dumps({"data": {"__type": {"name": name, "inputFields": fields}}}).encode()


def json_result(status: int, payload: Any) -> HttpResult:
    return HttpResult(status_code=status, body=json.dumps(payload).encode())


Handler = Callable[[dict[str, Any], dict[str, str]], HttpResult]


class FakeExecutor:
    """Stands in for RequestExecutor; answers through *handler* and records calls."""

    def __init__(self, handler: Handler):
        self.handler = handler
        self.calls: list[tuple[str, dict[str, str], dict[str, Any]]] = []
        self.proxy = None

    def send(self, endpoint: str, headers: Mapping[str, str], payload: bytes) -> HttpResult:
        body = json.loads(payload)
        self.calls.append((endpoint, dict(headers), body))
        return self.handler(body, dict(headers))

    def post_json(self, endpoint: str, headers: Mapping[str, str], body: dict[str, Any]) -> HttpResult:
        return self.send(endpoint, headers, json.dumps(body).encode())

    def mutation_calls(self) -> list[tuple[str, dict[str, str], dict[str, Any]]]:
        return [c for c in self.calls if c[2].get("query", "").startswith("mutation ")]


# The scenario used across runner and CLI tests:
#   createUser(input: CreateUserInput!)  with CreateUserInput { email: String! }
#   deleteUser(id: ID!)
USER_SCHEMA_FIELDS = [
    {"name": "createUser", "args": [{"name": "input", "type": non_null(input_object("CreateUserInput"))}]},
    {"name": "deleteUser", "args": [{"name": "id", "type": non_null(scalar("ID"))}]},
]

USER_INPUT_TYPES = {
    "CreateUserInput": [{"name": "email", "type": non_null(scalar("String"))}],
}


def make_schema_handler(
    fields: list[dict[str, Any]],
    input_types: dict[str, list[dict[str, Any]]] | None = None,
    mutation_responses: dict[str, HttpResult] | None = None,
) -> Handler:
    """Route introspection queries to canned schema data and mutations to *mutation_responses*."""
    input_types = input_types or {}
    mutation_responses = mutation_responses or {}

    def handler(body: dict[str, Any], headers: dict[str, str]) -> HttpResult:
        op = body.get("operationName")
        if op == "IntrospectMutations":
            return HttpResult(200, schema_body(fields))
        if op == "IntrospectType":
            name = body["variables"]["typeName"]
            return HttpResult(200, input_type_body(name, input_types.get(name, [])))
        if op in mutation_responses:
            return mutation_responses[op]
        return json_result(200, {"data": {op: {"__typename": "Result"}}})

    return handler


@pytest.fixture
def user_schema_executor() -> FakeExecutor:
    return FakeExecutor(
        make_schema_handler(
            USER_SCHEMA_FIELDS,
            USER_INPUT_TYPES,
            {"deleteUser": json_result(403, {"errors": [{"message": "nope"}]})},
        )
    )
