"""
Reference resolver for shape ids.

Resolves member and element targets to shapes: model shapes first, then the
Smithy prelude, then an "Unknown" placeholder for dangling references.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from ...utils import shape_name
from ..smithy_ast.prelude import PRELUDE_SHAPES
from .ir_nodes import Shape, ShapeType

UNKNOWN_SHAPE_NAME = "Unknown"


@dataclass(frozen=True)
class ResolvedTarget:
    """A resolved shape reference."""

    shape: Shape
    is_builtin: bool = False  # Resolved from the prelude
    is_dangling: bool = False  # Not found anywhere, shape is a placeholder


def unknown_shape(shape_id: str | None) -> Shape:
    """Placeholder for a reference that resolves nowhere."""
    return Shape(id=shape_id or "", name=UNKNOWN_SHAPE_NAME, type=ShapeType.DOCUMENT)


def is_builtin(shape_id: str | None) -> bool:
    return shape_id in PRELUDE_SHAPES


class ReferenceResolver:
    """Resolves shape ids against a model's shapes."""

    def __init__(self, shapes: Mapping[str, Shape]):
        """
        Initialize the resolver.

        Args:
            shapes: Model shapes by absolute id
        """
        self.shapes = shapes

    def resolve(self, shape_id: str | None) -> ResolvedTarget:
        """
        Resolve a shape id to its target.

        Args:
            shape_id: Absolute shape id, or None

        Returns:
            ResolvedTarget, with a placeholder shape when the id is dangling
        """
        if shape_id and shape_id in self.shapes:
            return ResolvedTarget(shape=self.shapes[shape_id])

        if is_builtin(shape_id):
            shape = Shape(id=shape_id, name=shape_name(shape_id), type=ShapeType(PRELUDE_SHAPES[shape_id]))
            return ResolvedTarget(shape=shape, is_builtin=True)

        return ResolvedTarget(shape=unknown_shape(shape_id), is_dangling=True)

    def is_resolvable(self, shape_id: str | None) -> bool:
        return bool(shape_id) and (shape_id in self.shapes or is_builtin(shape_id))
