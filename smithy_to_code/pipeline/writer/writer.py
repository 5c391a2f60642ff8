"""
Artifact writer.

Applies the output policy to each artifact, formats Python content when
enabled, and writes through AtomicWriter. write_all keeps going after a
failure and reports every outcome; nothing already written is rolled back.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ...errors import SmithyCodegenError, WriteError
from ...log import get_logger
from ..config import FormatterConfig, OutputConfig, OutputMode
from ..emitters.base import Artifact
from ..formatters import get_formatter
from .atomic_writer import AtomicWriter

logger = get_logger(__name__)

BACKUP_SUFFIX = ".backup"


class WriteStatus(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class WriteResult:
    path: str
    status: WriteStatus
    backup_path: str | None = None


@dataclass(frozen=True)
class WriteFailure:
    path: str
    error: SmithyCodegenError


@dataclass
class WriteReport:
    """Outcome of writing a batch of artifacts."""

    results: list[WriteResult] = field(default_factory=list)
    failures: list[WriteFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def count(self, status: WriteStatus) -> int:
        return sum(1 for result in self.results if result.status is status)


class ArtifactWriter:
    """Writes artifacts to disk according to an OutputConfig."""

    def __init__(self, output_config: OutputConfig | None = None, formatter_config: FormatterConfig | None = None):
        self.output_config = output_config or OutputConfig()
        self.formatter_config = formatter_config or FormatterConfig()
        self.formatter = get_formatter(self.formatter_config)
        self.atomic_writer = AtomicWriter()

    def write(self, artifact: Artifact) -> WriteResult:
        """
        Write one artifact.

        Args:
            artifact: The artifact to persist

        Returns:
            The write result (created, updated or skipped)

        Raises:
            WriteError: If the file exists in error mode, or cannot be written
        """
        path = Path(artifact.path)
        exists = path.exists()
        mode = self.output_config.mode

        if exists and mode is OutputMode.SKIP_EXISTING:
            logger.warning("Skipping existing file %s (use force mode to overwrite)", path)
            return WriteResult(str(path), WriteStatus.SKIPPED)
        if exists and mode is OutputMode.ERROR_IF_EXISTS:
            raise WriteError(path, "file already exists")

        content = artifact.content
        if artifact.format and self.formatter is not None and path.suffix == ".py":
            content = self.formatter.format(content, self.formatter_config)

        backup_path = None
        try:
            if exists and self.output_config.backup:
                backup_path = f"{path}{BACKUP_SUFFIX}"
                shutil.copy2(path, backup_path)
                logger.debug("Backed up %s to %s", path, backup_path)

            if self.output_config.atomic_write:
                self.atomic_writer.write(path, content, validate=self.output_config.validate_before_write)
            else:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise WriteError(path, exc) from exc

        status = WriteStatus.UPDATED if exists else WriteStatus.CREATED
        logger.info("%s %s", status.value.capitalize(), path)
        return WriteResult(str(path), status, backup_path)

    def write_all(self, artifacts: Iterable[Artifact]) -> WriteReport:
        """Write every artifact, collecting failures instead of stopping at the first."""
        report = WriteReport()
        for artifact in artifacts:
            try:
                report.results.append(self.write(artifact))
            except WriteError as exc:
                logger.error("%s", exc)
                report.failures.append(WriteFailure(artifact.path, exc))
        return report
