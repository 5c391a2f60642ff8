"""
Importer for structured (Smithy JSON AST) documents.

Bypasses text parsing: the document is only checked for its outer container
shape here, all semantic normalization happens in the IR builder.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ...errors import DecodeError
from ...log import get_logger

logger = get_logger(__name__)


class StructuredImporter:
    """Decodes and validates {"shapes": {...}, "metadata": {...}} documents."""

    def import_text(self, text: str, source: str | Path | None = None) -> dict[str, Any]:
        """
        Decode a JSON AST document from text.

        Raises:
            DecodeError: If the text is not JSON or has the wrong outer shape
        """
        try:
            document = json.loads(text)
        except ValueError as e:
            raise DecodeError(e, source) from e
        return self.import_document(document, source)

    def import_file(self, path: str | Path) -> dict[str, Any]:
        """
        Decode a JSON AST document from a file.

        Raises:
            DecodeError: If the file cannot be read or decoded
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise DecodeError(e, path) from e
        return self.import_text(text, source=path)

    def import_document(self, document: Any, source: str | Path | None = None) -> dict[str, Any]:
        """
        Validate an already-decoded document.

        Args:
            document: The decoded JSON value
            source: Optional origin reported in errors

        Returns:
            A raw AST dictionary with "shapes" and "metadata" keys

        Raises:
            DecodeError: If the outer container is malformed
        """
        if not isinstance(document, dict):
            raise DecodeError(f"expected a JSON object, got {type(document).__name__}", source)

        shapes = document.get("shapes", {})
        if shapes is None:
            shapes = {}
        if not isinstance(shapes, dict):
            raise DecodeError(f'"shapes" must be an object, got {type(shapes).__name__}', source)

        metadata = document.get("metadata", {})
        if metadata is None:
            metadata = {}
        if not isinstance(metadata, dict):
            raise DecodeError(f'"metadata" must be an object, got {type(metadata).__name__}', source)

        for shape_id, raw_shape in shapes.items():
            if not isinstance(raw_shape, dict):
                raise DecodeError(f"shape {shape_id!r} must be an object, got {type(raw_shape).__name__}", source)

        logger.debug("Imported %d shape(s)%s", len(shapes), f" from {source}" if source else "")

        ast = {"shapes": shapes, "metadata": metadata}
        if "smithy" in document:
            ast["smithy"] = document["smithy"]
        return ast
