"""
Base class for code emitters.

Defines the contract every emitter implements: a pure, deterministic
transform from a Model to an ordered list of artifacts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from ...utils import module_to_path, pascal_to_snake_case
from ..analyzer.ir_nodes import Model, Shape, ShapeType
from ..config import EmitterOptions
from ..document import Document, DocumentSerializer

GENERATION_COMMENT = "# Generated by smithy_to_code. Do not edit."


@dataclass(frozen=True)
class Artifact:
    """One generated file."""

    path: str
    content: str
    format: bool = True  # Whether the writer may run a formatter on it
    module: str = ""  # Dotted module name of the artifact


class TargetKind(Enum):
    """Kind of Python value a member target maps to."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    BINARY = "binary"
    LIST = "list"
    MAP = "map"
    REFERENCE = "reference"  # Nested generated type
    UNKNOWN = "unknown"


# Must cover every ShapeType
TARGET_KINDS: dict[ShapeType, TargetKind] = {
    ShapeType.STRUCTURE: TargetKind.REFERENCE,
    ShapeType.UNION: TargetKind.UNKNOWN,
    ShapeType.LIST: TargetKind.LIST,
    ShapeType.MAP: TargetKind.MAP,
    ShapeType.STRING: TargetKind.STRING,
    ShapeType.INTEGER: TargetKind.INTEGER,
    ShapeType.LONG: TargetKind.INTEGER,
    ShapeType.SHORT: TargetKind.INTEGER,
    ShapeType.BYTE: TargetKind.INTEGER,
    ShapeType.FLOAT: TargetKind.FLOAT,
    ShapeType.DOUBLE: TargetKind.FLOAT,
    ShapeType.BOOLEAN: TargetKind.BOOLEAN,
    ShapeType.TIMESTAMP: TargetKind.TIMESTAMP,
    ShapeType.BLOB: TargetKind.BINARY,
    ShapeType.ENUM: TargetKind.STRING,
    ShapeType.INT_ENUM: TargetKind.INTEGER,
    ShapeType.BIG_INTEGER: TargetKind.INTEGER,
    ShapeType.BIG_DECIMAL: TargetKind.FLOAT,
    ShapeType.DOCUMENT: TargetKind.UNKNOWN,
    ShapeType.SERVICE: TargetKind.UNKNOWN,
    ShapeType.OPERATION: TargetKind.UNKNOWN,
    ShapeType.RESOURCE: TargetKind.UNKNOWN,
}

# Annotations of the scalar kinds
SCALAR_ANNOTATIONS: dict[TargetKind, str] = {
    TargetKind.STRING: "str",
    TargetKind.INTEGER: "int",
    TargetKind.FLOAT: "float",
    TargetKind.BOOLEAN: "bool",
    TargetKind.TIMESTAMP: "datetime",
    TargetKind.BINARY: "bytes",
    TargetKind.UNKNOWN: "Any",
}


def target_kind(shape: Shape) -> TargetKind:
    return TARGET_KINDS[shape.type]


class Emitter(ABC):
    """Abstract base class for emitters."""

    # Subpackage of the base module the artifacts go to
    SUBPACKAGE: str = ""

    def __init__(self, serializer: DocumentSerializer | None = None):
        """
        Initialize the emitter.

        Args:
            serializer: Document serializer (a default one is created if omitted)
        """
        self.serializer = serializer or DocumentSerializer()

    @abstractmethod
    def generate(self, model: Model, options: EmitterOptions) -> list[Artifact]:
        """
        Generate artifacts from the model.

        Args:
            model: The immutable model
            options: Emitter options

        Returns:
            Artifacts in model declaration order
        """

    def module_name(self, options: EmitterOptions, name: str) -> str:
        """Dotted module name for a shape or service name (e.g. "app.types.post")."""
        return f"{options.base_module}.{self.SUBPACKAGE}.{pascal_to_snake_case(name)}"

    def new_document(self, module: str, template: str, options: EmitterOptions, docstring: str | None) -> Document:
        return Document(
            module=module,
            template=template,
            generation_comment=GENERATION_COMMENT if options.add_generation_comment else None,
            docstring=docstring,
        )

    def render(self, document: Document, options: EmitterOptions) -> Artifact:
        """Serialize a document into an artifact."""
        return Artifact(
            path=module_to_path(document.module, options.output_dir),
            content=self.serializer.serialize(document),
            format=True,
            module=document.module,
        )
