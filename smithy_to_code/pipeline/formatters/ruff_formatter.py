"""
Ruff formatter for generated Python modules.
"""

from __future__ import annotations

import subprocess

from ...log import get_logger
from ..config import FormatterConfig
from .base import Formatter

logger = get_logger(__name__)


class RuffFormatter(Formatter):
    """Formatter running `ruff format` over stdin."""

    name = "ruff"

    def __init__(self, executable: str = "ruff"):
        self.executable = executable
        self._available = None

    def is_available(self) -> bool:
        """Check if ruff is installed."""
        if self._available is None:
            try:
                result = subprocess.run(
                    [self.executable, "--version"],
                    capture_output=True,
                    text=True,
                    timeout=5,
                )
                self._available = result.returncode == 0
            except (subprocess.SubprocessError, FileNotFoundError):
                self._available = False
            if not self._available:
                logger.warning("ruff is not available, generated code is left unformatted")
        return self._available

    def format(self, code: str, config: FormatterConfig) -> str:
        if not self.is_available():
            return code

        cmd = [self.executable, "format", "--stdin-filename", "generated.py"]
        if config.line_length:
            cmd.extend(["--line-length", str(config.line_length)])
        if config.target_version:
            cmd.extend(["--target-version", config.target_version])

        try:
            result = subprocess.run(cmd, input=code, capture_output=True, text=True, timeout=30)
        except subprocess.SubprocessError as exc:
            logger.warning("ruff format failed: %s", exc)
            return code

        if result.returncode != 0:
            logger.warning("ruff format rejected generated code: %s", result.stderr.strip())
            return code
        return result.stdout
