"""
Atomic file writer for safe code generation.

Ensures that file writes are atomic to prevent data corruption
from interrupted operations.
"""

from __future__ import annotations

import ast
import os
import tempfile
from collections.abc import Callable
from pathlib import Path

from ...errors import WriteError


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file

    An interrupted write never leaves the target file half written.
    """

    def __init__(self, validate_python: Callable[[str, Path], None] | None = None):
        """Initialize the atomic writer.

        Args:
            validate_python: Optional validation function for Python code
        """
        self._validate_python = validate_python or validate_python_source

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to syntax-check ".py" content before the replace

        Raises:
            WriteError: If validation fails
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory so the final rename stays on one filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)

            if validate and path.suffix == ".py":
                self._validate_python(content, path)

            temp_path.replace(path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise


def validate_python_source(content: str, path: Path) -> None:
    """
    Default Python validation.

    Raises:
        WriteError: If the content does not parse
    """
    try:
        ast.parse(content, filename=str(path))
    except SyntaxError as e:
        raise WriteError(path, f"generated Python code is not valid: {e}") from e
