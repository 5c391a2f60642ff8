"""
Tests for the artifact writer and the atomic writer.
"""

import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from smithy_to_code.errors import ConfigurationError, WriteError
from smithy_to_code.pipeline.config import FormatterConfig, OutputConfig, OutputMode
from smithy_to_code.pipeline.emitters import Artifact
from smithy_to_code.pipeline.writer import ArtifactWriter, AtomicWriter, WriteStatus

VALID = "x = 1\n"
UPDATED = "x = 2\n"


class TestOutputModes(unittest.TestCase):
    """Skip, force and error policies for existing files"""

    def setUp(self):
        self._tmp = TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.path = self.root / "pkg" / "module.py"
        self.path.parent.mkdir()
        self.path.write_text(VALID)

    def tearDown(self):
        self._tmp.cleanup()

    def artifact(self, content=UPDATED):
        return Artifact(path=str(self.path), content=content, module="pkg.module")

    def test_create(self):
        path = self.root / "new" / "deep" / "module.py"
        result = ArtifactWriter().write(Artifact(path=str(path), content=VALID))
        self.assertEqual(result.status, WriteStatus.CREATED)
        self.assertEqual(path.read_text(), VALID)

    def test_skip_existing_is_default(self):
        result = ArtifactWriter().write(self.artifact())
        self.assertEqual(result.status, WriteStatus.SKIPPED)
        self.assertEqual(self.path.read_text(), VALID)

    def test_force_overwrites(self):
        result = ArtifactWriter(OutputConfig(mode=OutputMode.FORCE)).write(self.artifact())
        self.assertEqual(result.status, WriteStatus.UPDATED)
        self.assertEqual(self.path.read_text(), UPDATED)
        self.assertIsNone(result.backup_path)

    def test_error_mode_raises(self):
        with self.assertRaises(WriteError):
            ArtifactWriter(OutputConfig(mode=OutputMode.ERROR_IF_EXISTS)).write(self.artifact())
        self.assertEqual(self.path.read_text(), VALID)

    def test_backup(self):
        writer = ArtifactWriter(OutputConfig(mode=OutputMode.FORCE, backup=True))
        result = writer.write(self.artifact())
        self.assertEqual(result.backup_path, f"{self.path}.backup")
        self.assertEqual(Path(result.backup_path).read_text(), VALID)
        self.assertEqual(self.path.read_text(), UPDATED)

    def test_invalid_python_is_not_written(self):
        writer = ArtifactWriter(OutputConfig(mode=OutputMode.FORCE))
        with self.assertRaises(WriteError):
            writer.write(self.artifact(content="def broken(:\n"))
        self.assertEqual(self.path.read_text(), VALID)
        # No temporary file is left behind
        self.assertEqual(sorted(p.name for p in self.path.parent.iterdir()), ["module.py"])


def test_write_all_collects_failures(tmp_path):
    existing = tmp_path / "existing.py"
    existing.write_text(VALID)
    artifacts = [
        Artifact(path=str(tmp_path / "first.py"), content=VALID),
        Artifact(path=str(existing), content=UPDATED),
        Artifact(path=str(tmp_path / "broken.py"), content="class :\n"),
        Artifact(path=str(tmp_path / "last.py"), content=VALID),
    ]

    report = ArtifactWriter(OutputConfig(mode=OutputMode.ERROR_IF_EXISTS)).write_all(artifacts)

    assert not report.ok
    assert [result.path for result in report.results] == [str(tmp_path / "first.py"), str(tmp_path / "last.py")]
    assert [failure.path for failure in report.failures] == [str(existing), str(tmp_path / "broken.py")]
    assert all(isinstance(failure.error, WriteError) for failure in report.failures)
    # Earlier writes are kept
    assert (tmp_path / "first.py").read_text() == VALID


def test_non_python_files_are_not_validated(tmp_path):
    path = tmp_path / "notes.txt"
    AtomicWriter().write(path, "def broken(:\n")
    assert path.read_text() == "def broken(:\n"


def test_custom_validator(tmp_path):
    seen = []
    AtomicWriter(validate_python=lambda content, path: seen.append(path.name)).write(tmp_path / "m.py", VALID)
    assert seen == ["m.py"]


class RecordingFormatter:
    def __init__(self):
        self.calls = 0

    def format(self, code, config):
        self.calls += 1
        return code.replace("x=1", "x = 1")


def test_formatter_runs_on_flagged_artifacts(tmp_path):
    writer = ArtifactWriter(formatter_config=FormatterConfig(enabled=False))
    writer.formatter = RecordingFormatter()

    writer.write(Artifact(path=str(tmp_path / "a.py"), content="x=1\n"))
    writer.write(Artifact(path=str(tmp_path / "b.py"), content="x=1\n", format=False))

    assert writer.formatter.calls == 1
    assert (tmp_path / "a.py").read_text() == "x = 1\n"
    assert (tmp_path / "b.py").read_text() == "x=1\n"


def test_unknown_formatter_rejected():
    with pytest.raises(ConfigurationError):
        ArtifactWriter(formatter_config=FormatterConfig(enabled=True, tool="yapf"))
