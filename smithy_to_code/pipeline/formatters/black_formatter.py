"""
Black formatter for generated Python modules.
"""

from __future__ import annotations

import importlib

from ...log import get_logger
from ..config import FormatterConfig
from .base import Formatter

logger = get_logger(__name__)


class BlackFormatter(Formatter):
    """Formatter using black (installed with the dev extra)."""

    name = "black"

    def __init__(self):
        self._black = None
        self._available = None

    def is_available(self) -> bool:
        """Check if black is installed."""
        if self._available is None:
            try:
                self._black = importlib.import_module("black")
                self._available = True
            except ImportError:
                logger.warning("black is not installed, generated code is left unformatted")
                self._available = False
        return self._available

    def format(self, code: str, config: FormatterConfig) -> str:
        if not self.is_available():
            return code

        black = self._black

        target_versions = set()
        version = getattr(black.TargetVersion, config.target_version.upper(), None) if config.target_version else None
        if version is not None:
            target_versions.add(version)
        elif config.target_version:
            logger.debug("black does not know target %s, using its default", config.target_version)

        mode = black.Mode(
            target_versions=target_versions,
            line_length=config.line_length,
            string_normalization=config.string_normalization,
            magic_trailing_comma=config.magic_trailing_comma,
        )

        try:
            return black.format_str(code, mode=mode)
        except black.InvalidInput as exc:
            logger.warning("black rejected generated code: %s", exc)
            return code
