"""
Base class for code formatters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ...errors import ConfigurationError
from ..config import FormatterConfig


class Formatter(ABC):
    """Abstract base class for code formatters.

    A formatter never fails the write: when its tool is missing or rejects
    the input, the code is returned unchanged.
    """

    name: str = ""

    @abstractmethod
    def format(self, code: str, config: FormatterConfig) -> str:
        """
        Format the given code.

        Args:
            code: The source code to format
            config: Formatter configuration

        Returns:
            Formatted code
        """

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if the formatter is available (dependencies installed).

        Returns:
            True if the formatter can be used
        """


def get_formatter(config: FormatterConfig) -> Formatter | None:
    """
    Return the formatter selected by the configuration.

    Returns:
        None when formatting is disabled

    Raises:
        ConfigurationError: If the configured tool is unknown
    """
    if not config.enabled:
        return None

    from .black_formatter import BlackFormatter
    from .ruff_formatter import RuffFormatter

    formatters = {"black": BlackFormatter, "ruff": RuffFormatter}
    if config.tool not in formatters:
        raise ConfigurationError(f"Unknown formatter {config.tool!r}", {"choices": ", ".join(formatters)})
    return formatters[config.tool]()
