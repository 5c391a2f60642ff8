"""
Smithy IDL to Python code generation pipeline.

1. Load (smithy_ast): discover and parse IDL files, or import a JSON AST
2. Build (analyzer): resolve references and build the immutable Model
3. Emit (emitters): types, server and client artifacts, rendered from
   Document trees (document) through jinja2 templates
4. Write (writer): overwrite policies, optional formatting (formatters)
   and atomic replacement
"""

from __future__ import annotations

from .analyzer import IRBuilder, Model
from .config import (
    BuildConfig,
    CodeGeneratorConfig,
    EmitterOptions,
    FormatterConfig,
    OutputConfig,
    OutputMode,
    ParserConfig,
)
from .emitters import Artifact, ClientEmitter, ServiceEmitter, TypeEmitter
from .generator import PipelineGenerator
from .smithy_ast import Loader, StructuredImporter, TextParser
from .writer import ArtifactWriter, AtomicWriter, WriteReport

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "ParserConfig",
    "BuildConfig",
    "EmitterOptions",
    "FormatterConfig",
    "OutputConfig",
    "OutputMode",
    "Loader",
    "TextParser",
    "StructuredImporter",
    "IRBuilder",
    "Model",
    "Artifact",
    "TypeEmitter",
    "ServiceEmitter",
    "ClientEmitter",
    "ArtifactWriter",
    "AtomicWriter",
    "WriteReport",
]
