"""Shared fixtures for the smithy_to_code tests."""

import logging
from pathlib import Path

import pytest

from smithy_to_code.pipeline import EmitterOptions, IRBuilder, Loader, StructuredImporter

TEST_DATA = Path(__file__).parent / "test_data"
BLOG_DIR = TEST_DATA / "idl" / "blog"
MERGE_DIR = TEST_DATA / "idl" / "merge"
BLOG_AST = TEST_DATA / "ast" / "blog.json"


class RecordingHandler(logging.Handler):
    """Collects records; package loggers do not propagate to the root logger."""

    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record):
        self.records.append(record)

    def messages(self, level: int = logging.DEBUG) -> list[str]:
        return [record.getMessage() for record in self.records if record.levelno >= level]


@pytest.fixture
def log_records():
    logger = logging.getLogger("smithy_to_code")
    handler = RecordingHandler()
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    yield handler
    logger.removeHandler(handler)
    logger.setLevel(previous_level)


@pytest.fixture
def blog_model():
    return IRBuilder().build(Loader().load_directory(BLOG_DIR))


@pytest.fixture
def json_model():
    return IRBuilder().build(StructuredImporter().import_file(BLOG_AST))


@pytest.fixture
def options(tmp_path):
    return EmitterOptions(base_module="blog_app.generated", output_dir=str(tmp_path), app_name="blog_app")


@pytest.fixture(autouse=True)
def restore_package_logger():
    """setup_logging() replaces handlers on the package logger; undo it after each test."""
    logger = logging.getLogger("smithy_to_code")
    handlers, level, propagate = logger.handlers[:], logger.level, logger.propagate
    yield
    for handler in logger.handlers[:]:
        if handler not in handlers:
            handler.close()
        logger.removeHandler(handler)
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate
