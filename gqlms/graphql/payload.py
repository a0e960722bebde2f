"""Synthesize a minimal, syntactically valid document for one mutation.

Each argument becomes a variable.  Its value is a sentinel chosen from the
argument's leaf type; input objects are filled field by field using the
introspected field list, recursively.  The selection set is always
``{ __typename }`` so the document never depends on the return type's shape.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from gqlms.graphql.types import (
    InputField,
    ListType,
    MutationField,
    NamedType,
    NonNullType,
    TypeRef,
    is_non_null,
    resolve_leaf,
    type_signature,
)

SENTINEL_STRING = "gqlmsTestValue"
SENTINEL_ENUM = "ENUM_VALUE"

# Nesting bound for input objects, in addition to the per-path cycle check
MAX_INPUT_DEPTH = 8

_SCALAR_DUMMIES: dict[str, Any] = {
    "String": SENTINEL_STRING,
    "ID": SENTINEL_STRING,
    "Int": 0,
    "Float": 0.0,
    "Boolean": False,
}


def dummy_scalar(type_name: str) -> Any:
    """Sentinel for a scalar; custom scalars get the string sentinel."""
    return _SCALAR_DUMMIES.get(type_name, SENTINEL_STRING)


def _empty_value(t: TypeRef | None) -> Any:
    """Placeholder for a required field whose input type cannot be expanded."""
    while isinstance(t, NonNullType):
        t = t.of_type
    if isinstance(t, ListType):
        return []
    return {}


@dataclass
class MutationPayload:
    """A wire-ready mutation request."""

    operation_name: str
    query: str
    variables: dict[str, Any] = field(default_factory=lambda: dict[str, Any]())
    declarations: list[str] = field(default_factory=lambda: list[str]())

    def to_dict(self) -> dict[str, Any]:
        return {
            "operationName": self.operation_name,
            "query": self.query,
            "variables": self.variables,
        }

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict()).encode("utf-8")


class PayloadBuilder:
    """Builds mutation payloads, resolving input objects through *input_fields*.

    *input_fields* maps an input type name to its field list (normally
    ``Introspector.fetch_input_fields`` bound to a credential set).  Cycles
    between input types are cut: a nullable field that would re-enter a type
    already on the current path is omitted, a non-null one gets an empty
    object (or empty list).
    """

    def __init__(
        self,
        input_fields: Callable[[str], list[InputField]],
        *,
        on_progress: Callable[[str], None] | None = None,
    ):
        self._input_fields = input_fields
        self._on_progress = on_progress or (lambda _msg: None)

    def build(self, mutation: MutationField) -> MutationPayload:
        variables: dict[str, Any] = {}
        declarations: list[str] = []
        usages: list[str] = []

        for arg in mutation.args:
            variables[arg.name] = self.dummy_value(arg.type)
            declarations.append(f"${arg.name}: {type_signature(arg.type)}")
            usages.append(f"{arg.name}: ${arg.name}")

        name = mutation.name
        if declarations:
            query = (
                f"mutation {name}({', '.join(declarations)}) "
                f"{{ {name}({', '.join(usages)}) {{ __typename }} }}"
            )
        else:
            query = f"mutation {name} {{ {name} {{ __typename }} }}"

        return MutationPayload(
            operation_name=name,
            query=query,
            variables=variables,
            declarations=declarations,
        )

    def dummy_value(self, t: TypeRef | None, path: frozenset[str] = frozenset()) -> Any:
        """Dummy value for a type reference; deterministic for a given schema."""
        if isinstance(t, NonNullType):
            return self.dummy_value(t.of_type, path)
        if isinstance(t, ListType):
            return [self.dummy_value(t.of_type, path)]
        if t is None:
            return SENTINEL_STRING
        return self._named_value(t, path)

    def _named_value(self, t: NamedType, path: frozenset[str]) -> Any:
        if t.kind == "INPUT_OBJECT":
            return self._input_object(t.name, path)
        if t.kind == "ENUM":
            return SENTINEL_ENUM
        return dummy_scalar(t.name)

    def _input_object(self, type_name: str, path: frozenset[str]) -> dict[str, Any]:
        path = path | {type_name}
        obj: dict[str, Any] = {}
        for f in self._input_fields(type_name):
            leaf_kind, leaf_name = resolve_leaf(f.type)
            if leaf_kind == "INPUT_OBJECT" and (leaf_name in path or len(path) >= MAX_INPUT_DEPTH):
                reason = f"re-enters {leaf_name}" if leaf_name in path else "nests too deep"
                action = "using an empty value" if is_non_null(f.type) else "omitting it"
                self._on_progress(f"Input field {type_name}.{f.name} {reason}; {action}")
                if is_non_null(f.type):
                    obj[f.name] = _empty_value(f.type)
                continue
            obj[f.name] = self.dummy_value(f.type, path)
        return obj


def build_mutation_payload(
    mutation: MutationField,
    input_fields: Callable[[str], list[InputField]] | None = None,
) -> MutationPayload:
    """Convenience wrapper for a one-off build (no input objects if *input_fields* is None)."""
    return PayloadBuilder(input_fields or (lambda _name: [])).build(mutation)
