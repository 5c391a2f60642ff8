"""
Tests for the type emitter.
"""

import ast

import pytest

from smithy_to_code.pipeline import EmitterOptions
from smithy_to_code.pipeline.analyzer import IRBuilder, ShapeType
from smithy_to_code.pipeline.analyzer.reference_resolver import ReferenceResolver
from smithy_to_code.pipeline.emitters import TARGET_KINDS, TargetKind, TypeEmitter
from smithy_to_code.validation_rules import LengthRule, PatternRule, RangeRule, RequiredFieldsRule


def by_module(artifacts):
    return {artifact.module.rsplit(".", 1)[-1]: artifact for artifact in artifacts}


def class_def(source, name):
    tree = ast.parse(source)
    return next(node for node in tree.body if isinstance(node, ast.ClassDef) and node.name == name)


def field_annotations(source, name):
    return {
        node.target.id: ast.unparse(node.annotation)
        for node in class_def(source, name).body
        if isinstance(node, ast.AnnAssign)
    }


def test_target_kinds_cover_every_shape_type():
    assert set(TARGET_KINDS) == set(ShapeType)
    assert TARGET_KINDS[ShapeType.UNION] is TargetKind.UNKNOWN


def test_one_artifact_per_structure(blog_model, options):
    artifacts = TypeEmitter().generate(blog_model, options)

    assert [artifact.module for artifact in artifacts] == [
        "blog_app.generated.types.create_post_input",
        "blog_app.generated.types.create_post_output",
        "blog_app.generated.types.get_post_input",
        "blog_app.generated.types.get_post_output",
        "blog_app.generated.types.list_posts_input",
        "blog_app.generated.types.list_posts_output",
        "blog_app.generated.types.post",
    ]
    assert artifacts[-1].path.endswith("blog_app/generated/types/post.py")
    for artifact in artifacts:
        ast.parse(artifact.content)
        assert artifact.content.startswith("# Generated by smithy_to_code. Do not edit.\n")


def test_generation_is_deterministic(blog_model, options):
    first = TypeEmitter().generate(blog_model, options)
    second = TypeEmitter().generate(blog_model, options)
    assert first == second


def test_annotations_and_field_order(blog_model, options):
    artifacts = by_module(TypeEmitter().generate(blog_model, options))

    post = artifacts["post"].content
    assert field_annotations(post, "Post") == {
        "id": "str",
        "title": "str",
        "content": "str",
        "created_at": "datetime",
    }
    assert "from datetime import datetime" in post
    assert "created_at: datetime = field(metadata=config(field_name='createdAt'))" in post

    output = artifacts["list_posts_output"].content
    assert field_annotations(output, "ListPostsOutput") == {
        "posts": "list[Post] | None",
        "next_token": "str | None",
    }
    assert "from .post import Post" in output
    assert "posts: list[Post] | None = None" in output


def test_required_fields_come_first(options):
    model = IRBuilder().build(
        {
            "shapes": {
                "ns#Mixed": {
                    "type": "structure",
                    "members": {
                        "note": {"target": "smithy.api#String"},
                        "name": {"target": "smithy.api#String", "traits": {"smithy.api#required": {}}},
                    },
                }
            }
        }
    )
    content = TypeEmitter().generate(model, options)[0].content
    assert list(field_annotations(content, "Mixed")) == ["name", "note"]


def test_validate_method(blog_model, options):
    content = by_module(TypeEmitter().generate(blog_model, options))["create_post_input"].content

    assert "    def __post_init__(self):\n        self.validate()\n" in content
    assert (
        "        missing = [member for name, member in (('title', 'title'), ('content', 'content'))"
        " if getattr(self, name) is None]"
    ) in content
    assert "        if not 1 <= len(self.title) <= 200:" in content
    methods = [node.name for node in class_def(content, "CreatePostInput").body if isinstance(node, ast.FunctionDef)]
    assert methods == ["__post_init__", "validate"]


def test_blob_and_list_members(json_model, options):
    content = by_module(TypeEmitter().generate(json_model, options))["get_post_output"].content

    assert field_annotations(content, "GetPostOutput") == {
        "title": "str",
        "tags": "list[str] | None",
        "thumbnail": "bytes | None",
    }
    assert "import base64" in content
    assert "field(default=None, metadata=config(encoder=_encode_blob, decoder=_decode_blob))" in content
    # The codecs exist before the class body refers to them
    assert content.index("def _encode_blob") < content.index("class GetPostOutput")


def test_wire_name_override(json_model, options):
    content = by_module(TypeEmitter().generate(json_model, options))["get_post_input"].content
    assert "if_none_match: str | None = field(default=None, metadata=config(field_name='If-None-Match'))" in content


def test_dangling_target_becomes_any(options):
    model = IRBuilder().build(
        {"shapes": {"ns#Holder": {"type": "structure", "members": {"ghost": {"target": "ns#Ghost"}}}}}
    )
    content = TypeEmitter().generate(model, options)[0].content
    assert "from typing import Any" in content
    assert field_annotations(content, "Holder") == {"ghost": "Any | None"}


def test_self_reference_is_not_imported(options):
    model = IRBuilder().build(
        {
            "shapes": {
                "ns#Node": {"type": "structure", "members": {"children": {"target": "ns#NodeList"}}},
                "ns#NodeList": {"type": "list", "member": {"target": "ns#Node"}},
            }
        }
    )
    content = TypeEmitter().generate(model, options)[0].content
    assert "from .node import" not in content
    assert "children: list[Node] | None = None" in content


class TestBuildRules:
    """Rule derivation order and trait merging"""

    MODEL_AST = {
        "shapes": {
            "ns#Slug": {"type": "string", "traits": {"smithy.api#pattern": "^[a-z-]+$"}},
            "ns#Article": {
                "type": "structure",
                "members": {
                    "slug": {
                        "target": "ns#Slug",
                        "traits": {"smithy.api#required": {}, "smithy.api#length": {"max": 64}},
                    },
                    "rating": {"target": "smithy.api#Integer", "traits": {"smithy.api#range": {"min": 1, "max": 5}}},
                    "title": {"target": "smithy.api#String", "traits": {"smithy.api#required": {}}},
                },
            },
        }
    }

    def setup_method(self):
        self.model = IRBuilder().build(self.MODEL_AST)
        self.article = self.model.shapes["ns#Article"]
        self.rules = TypeEmitter().build_rules(self.article, ReferenceResolver(self.model.shapes))

    def test_rule_order(self):
        assert [type(rule) for rule in self.rules] == [RequiredFieldsRule, LengthRule, PatternRule, RangeRule]

    def test_required_rule_lists_every_required_member(self):
        assert self.rules[0].field_names == ["slug", "title"]

    def test_target_traits_are_merged(self):
        pattern = self.rules[2]
        assert pattern.field_name == "slug"
        assert pattern.pattern == "^[a-z-]+$"

    def test_optional_rules_check_none(self):
        rating = self.rules[3]
        assert not rating.is_required

    def test_pattern_imports_re(self, options):
        content = TypeEmitter().generate(self.model, options)[0].content
        assert "import re" in content
        ast.parse(content)


@pytest.mark.parametrize("add_comment", [True, False])
def test_generation_comment_option(blog_model, tmp_path, add_comment):
    options = EmitterOptions(base_module="pkg", output_dir=str(tmp_path), add_generation_comment=add_comment)
    content = TypeEmitter().generate(blog_model, options)[0].content
    assert content.startswith("# Generated by") is add_comment


MUTUAL_AST = {
    "shapes": {
        "ns#Author": {"type": "structure", "members": {"latest": {"target": "ns#Article"}}},
        "ns#Article": {
            "type": "structure",
            "members": {"author": {"target": "ns#Author", "traits": {"smithy.api#required": {}}}},
        },
    }
}


def test_sibling_imports_follow_the_class(options):
    artifacts = by_module(TypeEmitter().generate(IRBuilder().build(MUTUAL_AST), options))

    author = artifacts["author"].content
    article = artifacts["article"].content
    assert author.index("class Author") < author.index("from .article import Article")
    assert article.index("class Article") < article.index("from .author import Author")
    assert field_annotations(article, "Article") == {"author": "Author"}

    # The sibling import is the last statement of the module
    assert isinstance(ast.parse(author).body[-1], ast.ImportFrom)


def test_reserved_member_names_get_an_underscore(options):
    model = IRBuilder().build(
        {
            "shapes": {
                "ns#Form": {
                    "type": "structure",
                    "members": {
                        "field": {"target": "smithy.api#String", "traits": {"smithy.api#required": {}}},
                        "validate": {"target": "smithy.api#Boolean"},
                        "createdAt": {"target": "smithy.api#String"},
                    },
                }
            }
        }
    )
    content = TypeEmitter().generate(model, options)[0].content

    assert field_annotations(content, "Form") == {"field_": "str", "validate_": "bool | None", "created_at": "str | None"}
    assert "field_: str = field(metadata=config(field_name='field'))" in content
    assert "validate_: bool | None = field(default=None, metadata=config(field_name='validate'))" in content
    assert "(('field_', 'field'),)" in content


def test_required_string_and_optional_bounded_integer(options):
    model = IRBuilder().build(
        {
            "shapes": {
                "ns#Query": {
                    "type": "structure",
                    "members": {
                        "term": {"target": "smithy.api#String", "traits": {"smithy.api#required": {}}},
                        "score": {"target": "smithy.api#Integer", "traits": {"smithy.api#range": {"min": 0, "max": 100}}},
                    },
                }
            }
        }
    )
    query = model.shapes["ns#Query"]
    rules = TypeEmitter().build_rules(query, ReferenceResolver(model.shapes))

    assert [type(rule) for rule in rules] == [RequiredFieldsRule, RangeRule]
    assert rules[0].field_names == ["term"]
    assert (rules[1].minimum, rules[1].maximum) == (0, 100)
    assert rules[1].get_variant() == "between"

    content = TypeEmitter().generate(model, options)[0].content
    assert field_annotations(content, "Query") == {"term": "str", "score": "int | None"}
    assert "        if self.score is not None and not 0 <= self.score <= 100:" in content
