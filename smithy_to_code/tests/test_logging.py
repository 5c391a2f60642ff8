"""
Tests for logging setup.
"""

import logging

from smithy_to_code.log import LOG_LEVEL_ENV, get_logger, setup_logging


def test_get_logger_namespaces():
    assert get_logger("smithy_to_code.pipeline.generator").name == "smithy_to_code.pipeline.generator"
    assert get_logger("smithy_to_code").name == "smithy_to_code"
    assert get_logger("elsewhere").name == "smithy_to_code.elsewhere"


def test_setup_logging_level_and_handlers(tmp_path):
    log_file = tmp_path / "codegen.log"
    logger = setup_logging("debug", str(log_file))
    try:
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert len(logger.handlers) == 2

        get_logger("smithy_to_code.tests").debug("hello from the tests")
        for handler in logger.handlers:
            handler.flush()
        assert "hello from the tests" in log_file.read_text()
    finally:
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)


def test_level_from_environment(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "ERROR")
    logger = setup_logging()
    try:
        assert logger.level == logging.ERROR
    finally:
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)


def test_repeated_setup_does_not_duplicate_handlers():
    setup_logging("INFO")
    logger = setup_logging("INFO")
    try:
        assert len(logger.handlers) == 1
    finally:
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
