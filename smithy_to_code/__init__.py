"""Smithy to Code Generator

A Python package for generating Python code from Smithy IDL models:
dataclasses with validation, a FastAPI server layer and an httpx client.
"""

__version__ = "0.1.0"
__author__ = "François Lagunas"

from .errors import SmithyCodegenError
from .pipeline import (
    ArtifactWriter,
    CodeGeneratorConfig,
    EmitterOptions,
    FormatterConfig,
    OutputConfig,
    OutputMode,
    PipelineGenerator,
)

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "EmitterOptions",
    "FormatterConfig",
    "OutputConfig",
    "OutputMode",
    "ArtifactWriter",
    "SmithyCodegenError",
]
