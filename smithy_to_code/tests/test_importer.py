"""
Tests for the structured (JSON AST) importer.
"""

from pathlib import Path

import pytest

from smithy_to_code.errors import DecodeError
from smithy_to_code.pipeline.smithy_ast import StructuredImporter

BLOG_AST = Path(__file__).parent / "test_data" / "ast" / "blog.json"


def test_import_file():
    ast = StructuredImporter().import_file(BLOG_AST)
    assert ast["metadata"] == {"namespace": "example.blog"}
    assert ast["smithy"] == "2.0"
    assert list(ast["shapes"])[0] == "example.blog#BlogService"


def test_missing_sections_default_to_empty():
    ast = StructuredImporter().import_document({})
    assert ast == {"shapes": {}, "metadata": {}}


@pytest.mark.parametrize(
    "text",
    [
        "[1, 2, 3]",
        '"shapes"',
        '{"shapes": []}',
        '{"shapes": {}, "metadata": "v1"}',
        '{"shapes": {"ns#A": "structure"}}',
        "{not json",
    ],
)
def test_malformed_documents_raise(text):
    with pytest.raises(DecodeError):
        StructuredImporter().import_text(text)


def test_missing_file_raises(tmp_path):
    with pytest.raises(DecodeError) as exc_info:
        StructuredImporter().import_file(tmp_path / "absent.json")
    assert exc_info.value.source == str(tmp_path / "absent.json")
