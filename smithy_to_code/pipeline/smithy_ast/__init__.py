"""
Smithy AST module.

Contains source discovery, the IDL text parser and the JSON AST importer.
"""

from __future__ import annotations

from .importer import StructuredImporter
from .loader import Loader, merge_asts
from .text_parser import TextParser

__all__ = [
    "Loader",
    "TextParser",
    "StructuredImporter",
    "merge_asts",
]
