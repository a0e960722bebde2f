"""Pydantic models for the GraphQL-over-HTTP response shapes the sweep reads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorExtensions(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: Any = None


class GraphQLError(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: Any = ""
    extensions: ErrorExtensions | None = None

    @property
    def code(self) -> str:
        if self.extensions is None or self.extensions.code is None:
            return ""
        return str(self.extensions.code)


class GraphQLResponse(BaseModel):
    """The standard ``{data, errors}`` envelope; absent ``data`` reads as None."""

    model_config = ConfigDict(extra="allow")

    data: Any = None
    errors: list[GraphQLError] | None = None


# -- Introspection shapes -----------------------------------------------------


class RawArgument(BaseModel):
    name: str
    type: dict[str, Any] | None = None


class RawMutationField(BaseModel):
    name: str
    args: list[RawArgument] = Field(default_factory=list)


class MutationType(BaseModel):
    fields: list[RawMutationField] | None = None


class Schema(BaseModel):
    mutation_type: MutationType | None = Field(default=None, alias="mutationType")


class SchemaData(BaseModel):
    schema_: Schema | None = Field(default=None, alias="__schema")


class SchemaResponse(BaseModel):
    data: SchemaData | None = None


class InputType(BaseModel):
    name: str | None = None
    input_fields: list[RawArgument] | None = Field(default=None, alias="inputFields")


class InputTypeData(BaseModel):
    type_: InputType | None = Field(default=None, alias="__type")


class InputTypeResponse(BaseModel):
    data: InputTypeData | None = None
