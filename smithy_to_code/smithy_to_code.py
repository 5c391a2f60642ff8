import json

import click

from .cli_utils import reconstruct_command_line
from .errors import ConfigurationError, SmithyCodegenError
from .log import get_logger, setup_logging
from .pipeline import CodeGeneratorConfig, OutputMode, PipelineGenerator
from .pipeline.writer import WriteStatus

logger = get_logger(__name__)


@click.command()
@click.option("--source-dir", "-s", default=None, type=click.Path(exists=True, resolve_path=True), help="Directory of .smithy files")
@click.option("--document", "-d", default=None, type=click.Path(exists=True, dir_okay=False, resolve_path=True), help="Smithy JSON AST document")
@click.option("--base-module", "-m", default=None, type=str, help="Dotted module prefix, e.g. my_app.generated")
@click.option("--app-name", "-a", default=None, type=str, help="Application identifier (server and client)")
@click.option("--output-dir", "-o", default=None, type=click.Path(file_okay=False, resolve_path=True))
@click.option("--types-only", is_flag=True, default=False)
@click.option("--server-only", is_flag=True, default=False)
@click.option("--client-only", is_flag=True, default=False)
@click.option("--force", is_flag=True, default=False, help="Overwrite existing files")
@click.option("--backup", is_flag=True, default=False, help="Keep a .backup copy of overwritten files")
@click.option("--format", "format_code", is_flag=True, default=False, help="Run the configured formatter (black by default)")
@click.option("--strict", is_flag=True, default=False, help="Exact @required attribution and unresolved references as errors")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("--log-level", default=None, type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
def smithy_to_code(
    source_dir,
    document,
    base_module,
    app_name,
    output_dir,
    types_only,
    server_only,
    client_only,
    force,
    backup,
    format_code,
    strict,
    config,
    log_level,
):
    """Generate Python types, a FastAPI server layer and an httpx client from Smithy IDL."""
    setup_logging(log_level)
    logger.info("Running %s", reconstruct_command_line(smithy_to_code))

    if (source_dir is None) == (document is None):
        raise click.UsageError("Give exactly one of --source-dir or --document")
    if sum((types_only, server_only, client_only)) > 1:
        raise click.UsageError("--types-only, --server-only and --client-only are mutually exclusive")

    if config is not None:
        with open(config) as f:
            config = CodeGeneratorConfig.from_dict(json.load(f))
    else:
        config = CodeGeneratorConfig()

    # Command line flags override the config file
    if base_module:
        config.base_module = base_module
    if app_name:
        config.app_name = app_name
    if output_dir:
        config.output_dir = output_dir
    if types_only or server_only or client_only:
        config.generate_types = types_only
        config.generate_server = server_only
        config.generate_client = client_only
    if force:
        config.output.mode = OutputMode.FORCE
    if backup:
        config.output.backup = True
    if format_code:
        config.formatter.enabled = True
    if strict:
        config.parser.strict_required = True
        config.build.strict_references = True

    try:
        if not config.base_module:
            raise ConfigurationError("A base module is required (--base-module or the config file)")
        generator = PipelineGenerator(config)
        ast = generator.load(source_dir or document)
        model = generator.build(ast)
        artifacts = generator.generate(model)
        report = generator.write(artifacts)
    except SmithyCodegenError as e:
        raise click.ClickException(str(e)) from e

    click.echo(
        f"{len(artifacts)} artifact(s): "
        f"{report.count(WriteStatus.CREATED)} created, "
        f"{report.count(WriteStatus.UPDATED)} updated, "
        f"{report.count(WriteStatus.SKIPPED)} skipped"
    )
    if report.failures:
        for failure in report.failures:
            click.echo(f"  failed: {failure.path}: {failure.error}", err=True)
        raise click.ClickException(f"{len(report.failures)} artifact(s) could not be written")
