"""Schema introspection: the mutation catalog and input-object field lists.

Both queries are fixed documents.  The type reference is requested seven
levels deep so ``[ID!]!``-style wrappings always reach a named leaf; servers
that cut the chain shorter degrade to an unnamed leaf (see ``resolve_leaf``).
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping

from pydantic import ValidationError

from gqlms.errors import TransportError
from gqlms.graphql.envelope import InputTypeResponse, RawArgument, SchemaResponse
from gqlms.graphql.types import Argument, InputField, MutationField, parse_type_ref
from gqlms.http import RequestExecutor

_TYPE_REF = "kind name ofType { kind name ofType { kind name ofType { kind name ofType { kind name ofType { kind name ofType { kind name } } } } } }"

MUTATIONS_QUERY = (
    "query IntrospectMutations { __schema { mutationType { fields { name "
    "args { name type { " + _TYPE_REF + " } } } } } }"
)

INPUT_TYPE_QUERY = (
    "query IntrospectType($typeName: String!) { __type(name: $typeName) { name "
    "inputFields { name type { " + _TYPE_REF + " } } } }"
)


def _to_arguments(raw: list[RawArgument]) -> tuple[Argument, ...]:
    return tuple(Argument(name=a.name, type=parse_type_ref(a.type)) for a in raw)


def parse_mutations(body: bytes) -> list[MutationField]:
    """Extract mutation fields from a ``__schema`` response body.

    Returns an empty list if the body does not have the expected shape.
    """
    try:
        resp = SchemaResponse.model_validate_json(body)
    except ValidationError:
        return []
    if resp.data is None or resp.data.schema_ is None:
        return []
    mutation_type = resp.data.schema_.mutation_type
    if mutation_type is None or not mutation_type.fields:
        return []
    return [MutationField(name=f.name, args=_to_arguments(f.args)) for f in mutation_type.fields]


def parse_input_fields(body: bytes) -> list[InputField]:
    """Extract ``inputFields`` from a ``__type`` response body, or ``[]``."""
    try:
        resp = InputTypeResponse.model_validate_json(body)
    except ValidationError:
        return []
    if resp.data is None or resp.data.type_ is None or not resp.data.type_.input_fields:
        return []
    return list(_to_arguments(resp.data.type_.input_fields))


class Introspector:
    """Issues introspection queries against one endpoint.

    Input-object field lists are cached per instance by type name, so a run
    that builds many payloads over the same input type queries it once.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        endpoint: str,
        *,
        on_progress: Callable[[str], None] | None = None,
    ):
        self.executor = executor
        self.endpoint = endpoint
        self._on_progress = on_progress or (lambda _msg: None)
        self._input_cache: dict[str, list[InputField]] = {}

    def fetch_mutations(self, headers: Mapping[str, str]) -> list[MutationField]:
        """Return every mutation the schema exposes, in schema order.

        Raises:
            TransportError: If the endpoint cannot be reached.  Nothing can be
                tested without the catalog, so callers treat this as fatal.
        """
        result = self.executor.post_json(
            self.endpoint,
            headers,
            {"operationName": "IntrospectMutations", "query": MUTATIONS_QUERY},
        )
        mutations = parse_mutations(result.body)
        if not mutations:
            self._on_progress(
                f"Introspection returned no mutations (HTTP {result.status_code}); "
                "introspection may be disabled or the schema has no mutation type"
            )
        return mutations

    def fetch_input_fields(self, type_name: str, headers: Mapping[str, str]) -> list[InputField]:
        """Return the fields of input object *type_name*.

        Never raises: a transport or parse failure yields ``[]`` so the
        argument degrades to an empty object.
        """
        if type_name in self._input_cache:
            return self._input_cache[type_name]

        payload = {
            "operationName": "IntrospectType",
            "query": INPUT_TYPE_QUERY,
            "variables": {"typeName": type_name},
        }
        try:
            result = self.executor.send(self.endpoint, headers, json.dumps(payload).encode("utf-8"))
        except TransportError as e:
            self._on_progress(f"Could not introspect input type {type_name}: {e}")
            return []

        fields = parse_input_fields(result.body)
        if not fields:
            self._on_progress(f"Input type {type_name} has no introspectable fields")
        self._input_cache[type_name] = fields
        return fields
