"""
Tests for the command line interface.
"""

import json
from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from smithy_to_code.cli_utils import reconstruct_command_line
from smithy_to_code.smithy_to_code import smithy_to_code

TEST_DATA = Path(__file__).parent / "test_data"
BLOG_DIR = TEST_DATA / "idl" / "blog"
BLOG_AST = TEST_DATA / "ast" / "blog.json"


def run(*args):
    return CliRunner().invoke(smithy_to_code, [str(arg) for arg in args])


def test_generates_blog_example(tmp_path):
    result = run("-s", BLOG_DIR, "-m", "blog_app.generated", "-a", "blog_app", "-o", tmp_path)

    assert result.exit_code == 0, result.output
    assert "11 artifact(s): 11 created, 0 updated, 0 skipped" in result.output
    assert (tmp_path / "blog_app" / "generated" / "client" / "blog_service_client.py").is_file()


def test_second_run_skips_then_force_updates(tmp_path):
    args = ("-s", BLOG_DIR, "-m", "blog_app.generated", "-a", "blog_app", "-o", tmp_path)
    run(*args)

    skipped = run(*args)
    assert skipped.exit_code == 0
    assert "0 created, 0 updated, 11 skipped" in skipped.output

    forced = run(*args, "--force", "--backup")
    assert forced.exit_code == 0
    assert "0 created, 11 updated, 0 skipped" in forced.output
    assert (tmp_path / "blog_app" / "generated" / "types" / "post.py.backup").is_file()


def test_types_only(tmp_path):
    result = run("-s", BLOG_DIR, "-m", "gen", "-o", tmp_path, "--types-only")
    assert result.exit_code == 0, result.output
    assert "7 artifact(s)" in result.output
    assert not (tmp_path / "gen" / "server").exists()


def test_json_document(tmp_path):
    result = run("-d", BLOG_AST, "-m", "gen", "-a", "blog", "-o", tmp_path, "--client-only")
    assert result.exit_code == 0, result.output
    assert "1 artifact(s)" in result.output


def test_config_file(tmp_path):
    config = tmp_path / "codegen.json"
    config.write_text(json.dumps({"base_module": "from_config", "app_name": "cfg", "generate_client": False}))
    result = run("-s", BLOG_DIR, "-c", config, "-o", tmp_path / "out")
    assert result.exit_code == 0, result.output
    assert "10 artifact(s)" in result.output
    assert (tmp_path / "out" / "from_config" / "types" / "post.py").is_file()


def test_missing_app_name_fails(tmp_path):
    result = run("-s", BLOG_DIR, "-m", "gen", "-o", tmp_path)
    assert result.exit_code == 1
    assert "application name is required" in result.output


def test_strict_mode_fails_on_dangling_reference(tmp_path):
    source = tmp_path / "model"
    source.mkdir()
    (source / "model.smithy").write_text("namespace example\n\nstructure Holder {\n    ghost: Ghost\n}\n")
    result = run("-s", source, "-m", "gen", "-o", tmp_path / "out", "--types-only", "--strict")
    assert result.exit_code == 1
    assert "Unresolved reference 'example#Ghost'" in result.output


def test_empty_source_dir_fails(tmp_path):
    result = run("-s", tmp_path, "-m", "gen", "-a", "app", "-o", tmp_path / "out")
    assert result.exit_code == 1
    assert "No IDL source files found" in result.output


@pytest.mark.parametrize(
    "args",
    [
        ("-m", "gen"),
        ("-s", BLOG_DIR, "-d", BLOG_AST, "-m", "gen"),
        ("-s", BLOG_DIR, "-m", "gen", "--types-only", "--client-only"),
    ],
)
def test_usage_errors(args):
    result = run(*args)
    assert result.exit_code == 2


def test_reconstruct_command_line_without_context():
    assert reconstruct_command_line(smithy_to_code) == "smithy_to_code"


def test_reconstruct_command_line_with_context():
    ctx = click.Context(smithy_to_code)
    ctx.params = {"source_dir": "/nowhere/model", "base_module": "gen", "force": True, "backup": False}
    with ctx:
        assert reconstruct_command_line(smithy_to_code) == "smithy_to_code --source-dir /nowhere/model --base-module gen --force"
