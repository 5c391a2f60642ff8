"""
Exception hierarchy for the Smithy code generator.

Every failure the pipeline reports derives from SmithyCodegenError so that
callers (the CLI in particular) can catch a single type. Errors are raised,
never returned.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class SmithyCodegenError(Exception):
    """Base exception for all code generator errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ConfigurationError(SmithyCodegenError):
    """Raised when generator options are missing or inconsistent."""


class SourceDiscoveryError(SmithyCodegenError):
    """Raised when a source directory holds no IDL files."""

    def __init__(self, directory: str | Path, extensions: tuple[str, ...] = ()):
        details = {"extensions": ", ".join(extensions)} if extensions else None
        super().__init__(f"No IDL source files found in {directory}", details)
        self.directory = str(directory)


class ParseError(SmithyCodegenError):
    """Raised when a single IDL file cannot be parsed."""

    def __init__(self, file: str | Path, cause: BaseException | str):
        super().__init__(f"Failed to parse {file}: {cause}")
        self.file = str(file)
        self.cause = cause


class ParseErrors(SmithyCodegenError):
    """Aggregate of every per-file ParseError in one batch."""

    def __init__(self, errors: list[ParseError]):
        files = ", ".join(error.file for error in errors)
        super().__init__(f"{len(errors)} file(s) failed to parse: {files}")
        self.errors = list(errors)


class DecodeError(SmithyCodegenError):
    """Raised when a structured AST document is malformed."""

    def __init__(self, cause: BaseException | str, source: str | Path | None = None):
        where = f" in {source}" if source else ""
        super().__init__(f"Invalid AST document{where}: {cause}")
        self.cause = cause
        self.source = str(source) if source else None


class NamespaceNotFound(SmithyCodegenError):
    """Raised when neither metadata nor any shape id yields a namespace."""

    def __init__(self, reason: str = "no namespace in metadata and no shape ids"):
        super().__init__(f"Namespace not found: {reason}")
        self.reason = reason


class DanglingReferenceError(SmithyCodegenError):
    """Raised in strict mode when a shape or operation reference does not resolve."""

    def __init__(self, reference: str, referenced_by: str):
        super().__init__(
            f"Unresolved reference {reference!r}",
            {"referenced_by": referenced_by},
        )
        self.reference = reference
        self.referenced_by = referenced_by


class WriteError(SmithyCodegenError):
    """Raised when an artifact cannot be written."""

    def __init__(self, path: str | Path, cause: BaseException | str):
        super().__init__(f"Failed to write {path}: {cause}")
        self.path = str(path)
        self.cause = cause


class InvalidTraitError(SmithyCodegenError):
    """Raised when a trait value on a shape cannot be interpreted."""

    def __init__(self, trait_id: str, shape_id: str, cause: BaseException | str):
        super().__init__(f"Invalid {trait_id} trait on {shape_id}: {cause}")
        self.trait_id = trait_id
        self.shape_id = shape_id
        self.cause = cause
