"""Normalized data models for a parsed API schema.

The loader converts OpenAPI / Swagger documents into these models. The
generator and the dispatcher only ever see this representation, never the
raw document.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")

StringFormat = Literal["date", "date-time", "email", "uuid", "uri"]


def status_for_method(method: str) -> int:
    """Status code sent for a matched method; also the declared response looked up.

    DELETE answers 200 with a body, never 204.
    """
    return 201 if method.upper() == "POST" else 200


class StringNode(BaseModel):
    kind: Literal["string"] = "string"
    format: Optional[StringFormat] = None
    enum_values: list[str] = []


class IntegerNode(BaseModel):
    kind: Literal["integer"] = "integer"
    minimum: Optional[int] = None
    maximum: Optional[int] = None


class NumberNode(BaseModel):
    kind: Literal["number"] = "number"
    minimum: Optional[float] = None
    maximum: Optional[float] = None


class BooleanNode(BaseModel):
    kind: Literal["boolean"] = "boolean"


class ArrayNode(BaseModel):
    kind: Literal["array"] = "array"
    items: Optional["TypedNode"] = None
    min_items: Optional[int] = None
    max_items: Optional[int] = None


class ObjectNode(BaseModel):
    """An object shape.

    Properties are kept as an ordered sequence sorted by name so that
    generation walks them in the same order on every run.
    """

    kind: Literal["object"] = "object"
    properties: list[tuple[str, Optional["TypedNode"]]] = []

    @field_validator("properties")
    @classmethod
    def sort_by_name(cls, v: list) -> list:
        return sorted(v, key=lambda prop: prop[0])

    def property_names(self) -> list[str]:
        return [name for name, _ in self.properties]


TypedNode = Annotated[
    Union[StringNode, IntegerNode, NumberNode, BooleanNode, ArrayNode, ObjectNode],
    Field(discriminator="kind"),
]

ArrayNode.model_rebuild()
ObjectNode.model_rebuild()


class Param(BaseModel):
    """A single API parameter (query, path, header, or cookie)."""

    model_config = ConfigDict(frozen=True)

    name: str
    location: Literal["query", "path", "header", "cookie"]
    required: bool
    param_type: str = "string"  # string / integer / number / boolean / array / object
    description: str = ""


class Operation(BaseModel):
    """A single (path, method) operation with its request and response shapes."""

    model_config = ConfigDict(frozen=True)

    method: str  # GET / POST / PUT / PATCH / DELETE
    path: str  # /api/users/{id}
    summary: str = ""
    description: str = ""
    parameters: list[Param] = []
    request_body: Optional[TypedNode] = None
    responses: dict[str, TypedNode] = {}  # {status_code: node}, JSON responses only
    tags: list[str] = []

    @field_validator("method")
    @classmethod
    def upper_method(cls, v: str) -> str:
        return v.upper()

    def response_for(self, status_code: int | str):
        return self.responses.get(str(status_code))


class Schema(BaseModel):
    """A whole API: title, version and the operations grouped by path template."""

    model_config = ConfigDict(frozen=True)

    kind: str = "openapi"
    title: str = ""
    version: str = ""
    paths: dict[str, list[Operation]] = {}

    @model_validator(mode="after")
    def reject_duplicate_operations(self) -> "Schema":
        for path, operations in self.paths.items():
            seen: set[str] = set()
            for op in operations:
                if op.method in seen:
                    raise ValueError(f"duplicate operation {op.method} {path}")
                seen.add(op.method)
        return self

    @property
    def endpoint_count(self) -> int:
        return sum(len(ops) for ops in self.paths.values())

    def operations_for(self, path: str) -> list[Operation]:
        return list(self.paths.get(path, []))

    def lookup(self, path: str, method: str) -> Operation | None:
        method = method.upper()
        for op in self.paths.get(path, []):
            if op.method == method:
                return op
        return None

    def allowed_methods(self, path: str) -> list[str]:
        return [op.method for op in self.paths.get(path, [])]
