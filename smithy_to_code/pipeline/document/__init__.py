"""
Document module.

Contains the section tree emitters build and the serializer that renders it.
"""

from __future__ import annotations

from .nodes import (
    Document,
    FieldDecl,
    FunctionDecl,
    ImportSection,
    ParamDecl,
    TypeDecl,
    ValidationDecl,
)
from .serializer import DocumentSerializer, format_docstring

__all__ = [
    "Document",
    "ImportSection",
    "FieldDecl",
    "ValidationDecl",
    "ParamDecl",
    "FunctionDecl",
    "TypeDecl",
    "DocumentSerializer",
    "format_docstring",
]
