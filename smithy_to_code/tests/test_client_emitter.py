"""
Tests for the client emitter.
"""

import ast

import pytest

from smithy_to_code.errors import ConfigurationError
from smithy_to_code.pipeline import EmitterOptions
from smithy_to_code.pipeline.analyzer import IRBuilder
from smithy_to_code.pipeline.emitters import ClientEmitter
from smithy_to_code.pipeline.emitters.client_emitter import path_expression


def client_class(source, name="BlogServiceClient"):
    tree = ast.parse(source)
    return next(node for node in tree.body if isinstance(node, ast.ClassDef) and node.name == name)


def public_methods(source, name="BlogServiceClient"):
    return [
        node.name
        for node in client_class(source, name).body
        if isinstance(node, ast.AsyncFunctionDef) and not node.name.startswith("_")
    ]


@pytest.mark.parametrize(
    "uri, labels, expected",
    [
        ("/posts", set(), "'/posts'"),
        ("/posts/{id}", {"id"}, "f\"/posts/{_quote(payload.pop('id'), greedy=False)}\""),
        ("/files/{key+}", {"key"}, "f\"/files/{_quote(payload.pop('key'), greedy=True)}\""),
        # A label without a bound member stays literal
        ("/posts/{id}", set(), "'/posts/{id}'"),
        ("/a/{x}/b/{y}", {"y"}, "f\"/a/{{x}}/b/{_quote(payload.pop('y'), greedy=False)}\""),
    ],
)
def test_path_expression(uri, labels, expected):
    assert path_expression(uri, labels) == expected


def test_one_client_artifact(blog_model, options):
    artifacts = ClientEmitter().generate(blog_model, options)
    assert len(artifacts) == 1
    assert artifacts[0].module == "blog_app.generated.client.blog_service_client"
    assert artifacts[0].path.endswith("blog_app/generated/client/blog_service_client.py")
    ast.parse(artifacts[0].content)


def test_call_methods_in_declaration_order(blog_model, options):
    content = ClientEmitter().generate(blog_model, options)[0].content
    assert public_methods(content) == ["create_post", "get_post", "list_posts"]


def test_no_service_no_artifacts(options):
    model = IRBuilder().build({"shapes": {"ns#A": {"type": "structure"}}})
    assert ClientEmitter().generate(model, options) == []


def test_app_name_required(blog_model, tmp_path):
    with pytest.raises(ConfigurationError):
        ClientEmitter().generate(blog_model, EmitterOptions(base_module="blog_app.generated", output_dir=str(tmp_path)))


def test_base_url_environment_variable(blog_model, options):
    content = ClientEmitter().generate(blog_model, options)[0].content
    assert "BASE_URL_ENV = 'BLOG_APP_BLOG_SERVICE_BASE_URL'" in content


def test_request_building(blog_model, json_model, options):
    blog = ClientEmitter().generate(blog_model, options)[0].content
    assert "response = await self._send('CreatePost', 'POST', path, 201, json_body=payload or None)" in blog
    assert "params = _compact({'limit': payload.pop('limit', None), 'nextToken': payload.pop('nextToken', None)})" in blog
    assert "return GetPostOutput.from_dict(_response_json(operation='GetPost', response=response), infer_missing=True)" in blog

    json_client = ClientEmitter().generate(json_model, options)[0].content
    assert "headers = {k: str(v) for k, v in _compact({'If-None-Match': payload.pop('If-None-Match', None)}).items()}" in json_client
    delete = next(
        node for node in client_class(json_client).body
        if isinstance(node, ast.AsyncFunctionDef) and node.name == "delete_post"
    )
    assert ast.unparse(delete.returns) == "None"


def test_error_classes(blog_model, options):
    tree = ast.parse(ClientEmitter().generate(blog_model, options)[0].content)
    bases = {node.name: [ast.unparse(b) for b in node.bases] for node in tree.body if isinstance(node, ast.ClassDef)}
    assert bases["BlogServiceClientError"] == ["Exception"]
    assert bases["UnexpectedStatusError"] == ["BlogServiceClientError"]
    assert bases["TransportError"] == ["BlogServiceClientError"]
