"""
IR (Intermediate Representation) node definitions.

These nodes represent the normalized model every emitter reads. The model is
built once by the IRBuilder and never mutated: all nodes are frozen, maps are
read-only views and sequences are tuples.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from ..smithy_ast.prelude import REQUIRED_TRAIT


def freeze(value: Any) -> Any:
    """Recursively convert dicts to read-only mappings and lists to tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


class ShapeType(Enum):
    """Kind of shape in the IR."""

    STRUCTURE = "structure"
    UNION = "union"
    LIST = "list"
    MAP = "map"
    STRING = "string"
    INTEGER = "integer"
    LONG = "long"
    SHORT = "short"
    BYTE = "byte"
    FLOAT = "float"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    BLOB = "blob"
    ENUM = "enum"
    INT_ENUM = "intEnum"
    BIG_INTEGER = "bigInteger"
    BIG_DECIMAL = "bigDecimal"
    DOCUMENT = "document"
    SERVICE = "service"
    OPERATION = "operation"
    RESOURCE = "resource"


class HttpLocation(Enum):
    """Where a member is carried in an HTTP request."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    BODY = "body"


class Protocol(Enum):
    """Wire protocol of a service."""

    REST_JSON_1 = "restJson1"
    AWS_JSON_1_0 = "awsJson1_0"
    AWS_JSON_1_1 = "awsJson1_1"


@dataclass(frozen=True)
class Member:
    """A member of a structure, union, list or map."""

    name: str = ""
    target: str = ""  # Absolute shape id
    http_binding: HttpLocation | None = None
    traits: Mapping[str, Any] = field(default_factory=dict)
    documentation: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "traits", freeze(self.traits))

    @property
    def is_required(self) -> bool:
        return REQUIRED_TRAIT in self.traits


@dataclass(frozen=True)
class Shape:
    """A named type declaration."""

    id: str = ""  # "namespace#Name"
    name: str = ""
    type: ShapeType = ShapeType.STRUCTURE
    members: Mapping[str, Member] = field(default_factory=dict)
    target: str | None = None  # Element of a list or map
    enum_values: tuple[Any, ...] | None = None
    traits: Mapping[str, Any] = field(default_factory=dict)
    documentation: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "members", MappingProxyType(dict(self.members)))
        object.__setattr__(self, "traits", freeze(self.traits))
        if self.enum_values is not None:
            object.__setattr__(self, "enum_values", freeze(self.enum_values))

    def trait(self, trait_id: str, default: Any = None) -> Any:
        return self.traits.get(trait_id, default)

    @property
    def required_members(self) -> tuple[Member, ...]:
        return tuple(member for member in self.members.values() if member.is_required)


@dataclass(frozen=True)
class HttpBinding:
    """Concrete HTTP method, URI template, status code and parameter names."""

    method: str = "POST"
    uri: str = "/"
    code: int = 200
    path_params: tuple[str, ...] = ()
    query_params: tuple[str, ...] = ()
    header_params: tuple[str, ...] = ()


@dataclass(frozen=True)
class Operation:
    """One endpoint of a service."""

    id: str = ""
    name: str = ""
    input: Shape | None = None
    output: Shape | None = None
    errors: tuple[Shape, ...] = ()
    http: HttpBinding = field(default_factory=HttpBinding)
    traits: Mapping[str, Any] = field(default_factory=dict)
    documentation: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "errors", tuple(self.errors))
        object.__setattr__(self, "traits", freeze(self.traits))


@dataclass(frozen=True)
class Service:
    """The service declared by the model."""

    id: str = ""
    name: str = ""
    version: str = "1.0"
    namespace: str = ""
    operations: tuple[Operation, ...] = ()
    protocol: Protocol = Protocol.REST_JSON_1
    errors: tuple[str, ...] = ()
    traits: Mapping[str, Any] = field(default_factory=dict)
    documentation: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "operations", tuple(self.operations))
        object.__setattr__(self, "errors", tuple(self.errors))
        object.__setattr__(self, "traits", freeze(self.traits))


@dataclass(frozen=True)
class Model:
    """The complete Intermediate Representation."""

    namespace: str = ""

    # All shapes by absolute id, in declaration order
    shapes: Mapping[str, Shape] = field(default_factory=dict)

    # None for a types-only model
    service: Service | None = None

    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "shapes", MappingProxyType(dict(self.shapes)))
        object.__setattr__(self, "metadata", freeze(self.metadata))

    def shapes_of_type(self, shape_type: ShapeType) -> tuple[Shape, ...]:
        """Return every shape of the given kind, in model order."""
        return tuple(shape for shape in self.shapes.values() if shape.type is shape_type)

    @property
    def structures(self) -> tuple[Shape, ...]:
        return self.shapes_of_type(ShapeType.STRUCTURE)
