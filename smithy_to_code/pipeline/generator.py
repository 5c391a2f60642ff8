"""
Pipeline generator.

Orchestrates the phases of code generation:
1. Load: discover and parse IDL files, or import a JSON AST document
2. Build: turn the raw AST into the immutable Model
3. Emit: run the type, service and client emitters
4. Write: persist the artifacts through the ArtifactWriter
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from ..log import get_logger
from .analyzer import IRBuilder, Model
from .config import CodeGeneratorConfig
from .emitters import Artifact, ClientEmitter, Emitter, ServiceEmitter, TypeEmitter
from .smithy_ast import Loader, StructuredImporter
from .writer import ArtifactWriter, WriteReport

logger = get_logger(__name__)


class PipelineGenerator:
    """
    Smithy IDL to Python code generator.

    Usage:
        config = CodeGeneratorConfig(base_module="blog_app.generated", app_name="blog_app")
        generator = PipelineGenerator(config)
        model = generator.build(generator.load("model/"))
        report = generator.write(generator.generate(model))
    """

    def __init__(self, config: CodeGeneratorConfig):
        self.config = config
        self.loader = Loader(config.parser)
        self.importer = StructuredImporter()
        self.builder = IRBuilder(config.build)

    def load(self, source: str | Path) -> dict[str, Any]:
        """Load a raw AST from a source directory, a single IDL file or a JSON AST file."""
        return self.loader.load(source)

    def load_document(self, document: Any) -> dict[str, Any]:
        """Validate an in-memory JSON AST document."""
        return self.importer.import_document(document)

    def build(self, ast: dict[str, Any]) -> Model:
        return self.builder.build(ast)

    def emitters(self) -> list[Emitter]:
        """The enabled emitters, in output order."""
        emitters: list[Emitter] = []
        if self.config.generate_types:
            emitters.append(TypeEmitter())
        if self.config.generate_server:
            emitters.append(ServiceEmitter())
        if self.config.generate_client:
            emitters.append(ClientEmitter())
        return emitters

    def generate(self, model: Model, parallel: bool = True) -> list[Artifact]:
        """
        Run the enabled emitters over the model.

        Args:
            model: The immutable model
            parallel: Run the emitters on a thread pool

        Returns:
            Types artifacts, then service artifacts, then client artifacts
        """
        options = self.config.emitter_options()
        emitters = self.emitters()

        if parallel and len(emitters) > 1:
            with ThreadPoolExecutor(max_workers=len(emitters)) as executor:
                futures = [executor.submit(emitter.generate, model, options) for emitter in emitters]
                batches = [future.result() for future in futures]
        else:
            batches = [emitter.generate(model, options) for emitter in emitters]

        artifacts = [artifact for batch in batches for artifact in batch]
        logger.info("Generated %d artifact(s) for %s", len(artifacts), model.namespace)
        return artifacts

    def write(self, artifacts: list[Artifact]) -> WriteReport:
        writer = ArtifactWriter(self.config.output, self.config.formatter)
        return writer.write_all(artifacts)

    def run(self, source: str | Path, parallel: bool = True) -> WriteReport:
        """Load, build, generate and write in one call."""
        model = self.build(self.load(source))
        return self.write(self.generate(model, parallel=parallel))
