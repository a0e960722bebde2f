"""GraphQL schema types used by the mutation sweep.

Two layers:
1. Type references: a tagged variant (NamedType | ListType | NonNullType)
   built from the ``{kind, name, ofType}`` chains returned by introspection
2. Schema entries: mutations, their arguments, and input-object fields

The resolver functions at the bottom are pure: no I/O, no caching.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

NAMED_KINDS = frozenset({"SCALAR", "ENUM", "INPUT_OBJECT", "OBJECT", "INTERFACE", "UNION"})

# -- Type references ----------------------------------------------------------


@dataclass(frozen=True)
class NamedType:
    """A leaf reference: SCALAR, ENUM, INPUT_OBJECT or OBJECT.

    ``kind`` is empty when the server truncated the chain before reporting it
    (the name is still usable to pick a dummy value).
    """

    kind: str
    name: str


@dataclass(frozen=True)
class ListType:
    """A LIST wrapper. ``of_type`` is None when the chain was truncated."""

    of_type: TypeRef | None = None


@dataclass(frozen=True)
class NonNullType:
    """A NON_NULL wrapper. ``of_type`` is None when the chain was truncated."""

    of_type: TypeRef | None = None


TypeRef = Union[NamedType, ListType, NonNullType]


def parse_type_ref(raw: Any) -> TypeRef | None:
    """Build a TypeRef from an introspection ``type`` object.

    Returns None for anything that is not a mapping.  Unknown kinds are kept as
    named types so the payload builder can still fall back to a sentinel.
    """
    if not isinstance(raw, dict):
        return None
    kind = str(raw.get("kind") or "")
    name = raw.get("name") or ""
    if kind == "NON_NULL":
        return NonNullType(of_type=parse_type_ref(raw.get("ofType")))
    if kind == "LIST":
        return ListType(of_type=parse_type_ref(raw.get("ofType")))
    if not name and raw.get("ofType") is not None:
        # Wrapper whose kind was not requested at this depth
        return parse_type_ref(raw.get("ofType"))
    return NamedType(kind=kind, name=str(name))


# -- Schema entries -----------------------------------------------------------


@dataclass(frozen=True)
class Argument:
    """A mutation argument or an input-object field."""

    name: str
    type: TypeRef | None


# Input-object fields carry the same shape as arguments
InputField = Argument


@dataclass(frozen=True)
class MutationField:
    """One mutation exposed by the schema's mutation root."""

    name: str
    args: tuple[Argument, ...] = field(default_factory=tuple)


# -- Resolver -----------------------------------------------------------------


def resolve_leaf(t: TypeRef | None) -> tuple[str, str]:
    """Strip LIST/NON_NULL wrappers and return ``(leaf_kind, leaf_name)``.

    A chain that never reaches a named type yields ``("", "")``.

    >>> resolve_leaf(NonNullType(ListType(NamedType("SCALAR", "ID"))))
    ('SCALAR', 'ID')
    """
    while isinstance(t, (NonNullType, ListType)):
        t = t.of_type
    if t is None:
        return "", ""
    return t.kind, t.name


def is_non_null(t: TypeRef | None) -> bool:
    """Whether the outermost wrapper is NON_NULL."""
    return isinstance(t, NonNullType)


def type_signature(t: TypeRef | None) -> str:
    """Render a type reference as it appears in a variable declaration.

    ``NonNull(List(NonNull(ID)))`` renders as ``[ID!]!``.  Without list
    wrappers this is the leaf name plus ``!`` when the outer wrapper is
    NON_NULL.  A truncated chain renders its leaf as an empty name.
    """
    if isinstance(t, NonNullType):
        return type_signature(t.of_type) + "!"
    if isinstance(t, ListType):
        return "[" + type_signature(t.of_type) + "]"
    if t is None:
        return ""
    return t.name
