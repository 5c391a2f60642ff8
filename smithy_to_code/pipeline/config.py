"""
Configuration for the code generator pipeline.

Every stage receives its configuration explicitly; nothing is read from
module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..errors import ConfigurationError


class OutputMode(str, Enum):
    """Output mode for file generation.

    Controls behavior when the output file already exists.
    """

    SKIP_EXISTING = "skip"  # Default: keep the existing file and warn
    FORCE = "force"  # Overwrite
    ERROR_IF_EXISTS = "error"  # Report a write failure


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        mode: How to handle existing output files
        backup: Copy an existing file to "<path>.backup" before overwriting it
        validate_before_write: Whether to syntax-check Python code before writing
        atomic_write: Whether to use atomic file writes
    """

    mode: OutputMode = OutputMode.SKIP_EXISTING
    backup: bool = False
    validate_before_write: bool = True
    atomic_write: bool = True


@dataclass
class FormatterConfig:
    """Configuration for post-processing formatters."""

    # Whether formatting is enabled
    enabled: bool = False

    # Which formatter to use: "black" or "ruff"
    tool: str = "black"

    # Line length for the formatter
    line_length: int = 100

    # Python version target (e.g., "py312", "py313")
    target_version: str = "py312"

    # Whether to use string normalization (convert single quotes to double)
    string_normalization: bool = True

    # Whether to respect magic trailing commas
    magic_trailing_comma: bool = True


@dataclass
class ParserConfig:
    """Configuration for IDL discovery and text parsing."""

    # File extensions recognized as IDL sources
    extensions: tuple[str, ...] = (".smithy",)

    # Attribute @required to the member it precedes instead of the block heuristic
    strict_required: bool = False


@dataclass
class BuildConfig:
    """Configuration for the IR builder."""

    # Raise DanglingReferenceError instead of dropping/placeholding unresolved ids
    strict_references: bool = False


@dataclass
class EmitterOptions:
    """Options shared by every emitter.

    Attributes:
        base_module: Dotted module prefix for generated code (e.g. "my_app.generated")
        output_dir: Root directory artifact paths are computed under
        app_name: Application identifier, required by the service and client emitters
        add_generation_comment: Add a "do not edit" header to every artifact
    """

    base_module: str
    output_dir: str = "."
    app_name: str | None = None
    add_generation_comment: bool = True

    def __post_init__(self):
        if not self.base_module or not all(part.isidentifier() for part in self.base_module.split(".")):
            raise ConfigurationError(f"Invalid base module: {self.base_module!r}")

    def require_app_name(self) -> str:
        """Return the application identifier or raise ConfigurationError."""
        if not self.app_name:
            raise ConfigurationError("An application name is required for service and client generation")
        return self.app_name


@dataclass
class CodeGeneratorConfig:
    """Aggregate configuration, loadable from a JSON config file."""

    base_module: str = ""
    output_dir: str = "."
    app_name: str | None = None

    # Which emitters run
    generate_types: bool = True
    generate_server: bool = True
    generate_client: bool = True

    # Add generation comment at top of file
    add_generation_comment: bool = True

    parser: ParserConfig = field(default_factory=ParserConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    formatter: FormatterConfig = field(default_factory=FormatterConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def emitter_options(self) -> EmitterOptions:
        """Build the emitter options for this configuration."""
        return EmitterOptions(
            base_module=self.base_module,
            output_dir=self.output_dir,
            app_name=self.app_name,
            add_generation_comment=self.add_generation_comment,
        )

    @staticmethod
    def from_dict(d: dict) -> CodeGeneratorConfig:
        """Create a config from a dictionary."""
        config = CodeGeneratorConfig()
        for k, v in d.items():
            if k == "parser" and isinstance(v, dict):
                extensions = tuple(v.get("extensions", ParserConfig().extensions))
                config.parser = ParserConfig(
                    extensions=extensions,
                    strict_required=v.get("strict_required", False),
                )
            elif k == "build" and isinstance(v, dict):
                config.build = BuildConfig(**v)
            elif k == "formatter" and isinstance(v, dict):
                config.formatter = FormatterConfig(**v)
            elif k == "output" and isinstance(v, dict):
                mode = v.get("mode", OutputMode.SKIP_EXISTING)
                if isinstance(mode, str):
                    mode = OutputMode(mode)
                config.output = OutputConfig(
                    mode=mode,
                    backup=v.get("backup", False),
                    validate_before_write=v.get("validate_before_write", True),
                    atomic_write=v.get("atomic_write", True),
                )
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "base_module": self.base_module,
            "output_dir": self.output_dir,
            "app_name": self.app_name,
            "generate_types": self.generate_types,
            "generate_server": self.generate_server,
            "generate_client": self.generate_client,
            "add_generation_comment": self.add_generation_comment,
            "parser": {
                "extensions": list(self.parser.extensions),
                "strict_required": self.parser.strict_required,
            },
            "build": {
                "strict_references": self.build.strict_references,
            },
            "formatter": {
                "enabled": self.formatter.enabled,
                "tool": self.formatter.tool,
                "line_length": self.formatter.line_length,
                "target_version": self.formatter.target_version,
                "string_normalization": self.formatter.string_normalization,
                "magic_trailing_comma": self.formatter.magic_trailing_comma,
            },
            "output": {
                "mode": self.output.mode.value,
                "backup": self.output.backup,
                "validate_before_write": self.output.validate_before_write,
                "atomic_write": self.output.atomic_write,
            },
        }
