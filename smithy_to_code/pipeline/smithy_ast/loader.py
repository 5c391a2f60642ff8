"""
Source discovery and AST aggregation.

The loader finds IDL files, parses each one and merges the partial ASTs.
A batch either fully succeeds or fails with every per-file error collected.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ...errors import ParseError, ParseErrors, SourceDiscoveryError
from ...log import get_logger
from ..config import ParserConfig
from .importer import StructuredImporter
from .prelude import SMITHY_VERSION
from .text_parser import TextParser

logger = get_logger(__name__)


class Loader:
    """Discovers, parses and merges IDL sources."""

    def __init__(self, config: ParserConfig | None = None):
        self.config = config or ParserConfig()
        self.parser = TextParser(self.config)
        self.importer = StructuredImporter()

    def discover(self, directory: str | Path) -> list[Path]:
        """
        Recursively find IDL source files.

        Args:
            directory: Root directory to search

        Returns:
            Matching files in sorted path order

        Raises:
            SourceDiscoveryError: If the directory is missing or holds no matching file
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise SourceDiscoveryError(directory, self.config.extensions)

        files = sorted(
            path for path in directory.rglob("*") if path.is_file() and path.suffix in self.config.extensions
        )
        if not files:
            raise SourceDiscoveryError(directory, self.config.extensions)

        logger.debug("Discovered %d source file(s) in %s", len(files), directory)
        return files

    def load_directory(self, directory: str | Path) -> dict[str, Any]:
        """
        Parse every IDL file in a directory and merge the results.

        Raises:
            SourceDiscoveryError: If no source file is found
            ParseErrors: If any file fails to parse
        """
        return self.load_files(self.discover(directory))

    def load_files(self, files: list[Path]) -> dict[str, Any]:
        """
        Parse the given files and merge the results in order.

        Raises:
            ParseErrors: If any file fails to parse
        """
        parsed: list[tuple[str, dict[str, Any]]] = []
        errors: list[ParseError] = []

        for path in files:
            try:
                parsed.append((str(path), self.parser.parse_file(path)))
            except ParseError as e:
                errors.append(e)

        if errors:
            raise ParseErrors(errors)

        return merge_asts(parsed)

    def load(self, source: str | Path) -> dict[str, Any]:
        """
        Load a raw AST from a directory, a JSON AST document or a single IDL file.
        """
        source = Path(source)
        if source.is_dir():
            return self.load_directory(source)
        if source.suffix == ".json":
            return self.importer.import_file(source)
        if not source.is_file():
            raise SourceDiscoveryError(source, self.config.extensions)
        return self.load_files([source])


def merge_asts(parsed: list[tuple[str, dict[str, Any]]]) -> dict[str, Any]:
    """
    Union partial ASTs in order; the last file wins on an id collision.

    Args:
        parsed: (file name, raw AST) pairs in processing order

    Returns:
        The merged raw AST
    """
    shapes: dict[str, Any] = {}
    metadata: dict[str, Any] = {}
    origins: dict[str, str] = {}

    for filename, ast in parsed:
        for shape_id, raw_shape in ast.get("shapes", {}).items():
            if shape_id in origins:
                logger.warning(
                    "Shape %s defined in both %s and %s, keeping the definition from %s",
                    shape_id,
                    origins[shape_id],
                    filename,
                    filename,
                )
            shapes[shape_id] = raw_shape
            origins[shape_id] = filename
        metadata.update(ast.get("metadata", {}))

    logger.debug("Merged %d shape(s) from %d file(s)", len(shapes), len(parsed))
    return {"smithy": SMITHY_VERSION, "shapes": shapes, "metadata": metadata}
