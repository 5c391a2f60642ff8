"""
Analyzer module.

Contains reference resolution and IR building.
"""

from __future__ import annotations

from .builder import IRBuilder, classify_binding, extract_path_params
from .ir_nodes import (
    HttpBinding,
    HttpLocation,
    Member,
    Model,
    Operation,
    Protocol,
    Service,
    Shape,
    ShapeType,
)
from .reference_resolver import ReferenceResolver, ResolvedTarget

__all__ = [
    "Model",
    "Shape",
    "ShapeType",
    "Member",
    "Service",
    "Operation",
    "HttpBinding",
    "HttpLocation",
    "Protocol",
    "IRBuilder",
    "ReferenceResolver",
    "ResolvedTarget",
    "classify_binding",
    "extract_path_params",
]
