"""
Client emitter.

Generates one httpx-based async client module for the service, under
<base_module>.client.<service>_client, with one public method per operation.
"""

from __future__ import annotations

import re

from ...log import get_logger
from ...utils import member_attribute, to_constant_case
from ..analyzer.ir_nodes import HttpLocation, Model, Operation, Service
from ..config import EmitterOptions
from ..document import Document, FunctionDecl, ParamDecl, TypeDecl
from .base import Artifact, Emitter
from .service_emitter import type_module, wire_name

logger = get_logger(__name__)

_LABEL_PATTERN = re.compile(r"\{([^}]+)\}")


def path_expression(uri: str, labels: set[str]) -> str:
    """
    Python expression of a request path.

    Labels bound to input members are URL-quoted into an f-string, greedy
    labels keep their slashes. "/posts/{id}" with {"id"} ->
    f"/posts/{_quote(payload.pop('id'), greedy=False)}"
    """
    parts: list[str] = []
    substituted = False
    last = 0
    for match in _LABEL_PATTERN.finditer(uri):
        parts.append(_escape_braces(uri[last : match.start()]))
        label = match.group(1)
        name = label.rstrip("+")
        if name in labels:
            parts.append("{" + f"_quote(payload.pop({name!r}), greedy={label.endswith('+')})" + "}")
            substituted = True
        else:
            parts.append(_escape_braces(match.group(0)))
        last = match.end()
    parts.append(_escape_braces(uri[last:]))

    if not substituted:
        return repr(uri)
    return "f" + repr("".join(parts))


def _escape_braces(text: str) -> str:
    return text.replace("{", "{{").replace("}", "}}")


class ClientEmitter(Emitter):
    """Emits the outbound client layer."""

    SUBPACKAGE = "client"

    def generate(self, model: Model, options: EmitterOptions) -> list[Artifact]:
        if model.service is None:
            return []

        app_name = options.require_app_name()
        artifact = self.render(self.build_client(model.service, app_name, options), options)
        logger.debug("Emitted client artifact for %s", model.service.name)
        return [artifact]

    def client_name(self, service: Service) -> str:
        return f"{service.name}Client"

    def base_url_env(self, app_name: str, service: Service) -> str:
        """Environment variable holding the default base URL (e.g. BLOG_APP_BLOG_SERVICE_BASE_URL)."""
        return f"{to_constant_case(app_name)}_{to_constant_case(service.name)}_BASE_URL"

    def build_client(self, service: Service, app_name: str, options: EmitterOptions) -> Document:
        client = self.client_name(service)
        base_error = f"{client}Error"

        document = self.new_document(
            f"{self.module_name(options, service.name)}_client",
            "client",
            options,
            docstring=f"Async HTTP client for {service.name} {service.version}.",
        )
        imports = document.imports
        imports.add("__future__", "annotations")
        imports.add("os")
        imports.add("typing", "Any")
        imports.add("urllib.parse", "quote")
        imports.add("httpx")

        document.constants.append(f"BASE_URL_ENV = {self.base_url_env(app_name, service)!r}")

        document.declarations.extend(self._error_classes(base_error))

        methods = self._lifecycle_methods(base_error)
        for operation in service.operations:
            for shape in (operation.input, operation.output):
                if shape is not None:
                    imports.add_relative(type_module(shape), shape.name, level=2)
            methods.append(self._call_method(operation))

        document.declarations.append(
            TypeDecl(
                name=client,
                docstring=service.documentation or f"Client for {service.name}.",
                methods=methods,
            )
        )

        document.functions.extend(self._helpers())
        return document

    def _error_classes(self, base_error: str) -> list[TypeDecl]:
        return [
            TypeDecl(name=base_error, bases=["Exception"], docstring="Base error of the client."),
            TypeDecl(
                name="UnexpectedStatusError",
                bases=[base_error],
                docstring="The server answered with a status other than the declared one.",
                methods=[
                    FunctionDecl(
                        name="__init__",
                        params=[
                            ParamDecl("self"),
                            ParamDecl("operation", "str"),
                            ParamDecl("status_code", "int"),
                            ParamDecl("body", "str"),
                        ],
                        body=[
                            'super().__init__(f"{operation} returned unexpected status {status_code}")',
                            "self.operation = operation",
                            "self.status_code = status_code",
                            "self.body = body",
                        ],
                    )
                ],
            ),
            TypeDecl(
                name="TransportError",
                bases=[base_error],
                docstring="The request could not be sent or its response could not be read.",
            ),
        ]

    def _lifecycle_methods(self, base_error: str) -> list[FunctionDecl]:
        return [
            FunctionDecl(
                name="__init__",
                params=[
                    ParamDecl("self"),
                    ParamDecl("base_url", "str | None", "None"),
                    ParamDecl("client", "httpx.AsyncClient | None", "None"),
                    ParamDecl("timeout", "float", "30.0"),
                ],
                body=[
                    'self.base_url = (base_url or os.environ.get(BASE_URL_ENV) or "").rstrip("/")',
                    "if not self.base_url:",
                    f'    raise {base_error}(f"No base URL given and {{BASE_URL_ENV}} is not set")',
                    "self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))",
                    "self._owns_client = client is None",
                ],
            ),
            FunctionDecl(
                name="__aenter__",
                params=[ParamDecl("self")],
                body=["return self"],
                is_async=True,
            ),
            FunctionDecl(
                name="__aexit__",
                params=[ParamDecl("self"), ParamDecl("exc_type"), ParamDecl("exc_val"), ParamDecl("exc_tb")],
                body=[
                    "if self._owns_client:",
                    "    await self._client.aclose()",
                ],
                is_async=True,
            ),
            FunctionDecl(
                name="_send",
                params=[
                    ParamDecl("self"),
                    ParamDecl("operation", "str"),
                    ParamDecl("method", "str"),
                    ParamDecl("path", "str"),
                    ParamDecl("expected_status", "int"),
                    ParamDecl("params", "dict[str, Any] | None", "None"),
                    ParamDecl("headers", "dict[str, str] | None", "None"),
                    ParamDecl("json_body", "Any", "None"),
                ],
                returns="httpx.Response",
                is_async=True,
                body=[
                    "try:",
                    "    response = await self._client.request(",
                    '        method, f"{self.base_url}{path}", params=params, headers=headers, json=json_body',
                    "    )",
                    "except httpx.HTTPError as exc:",
                    '    raise TransportError(f"{operation} failed: {exc}") from exc',
                    "if response.status_code != expected_status:",
                    "    raise UnexpectedStatusError(operation, response.status_code, response.text)",
                    "return response",
                ],
            ),
        ]

    def _call_method(self, operation: Operation) -> FunctionDecl:
        http = operation.http
        params = [ParamDecl("self")]
        body: list[str] = []

        labels: set[str] = set()
        query: list[str] = []
        headers: list[str] = []
        payload_member = None

        if operation.input is not None:
            params.append(ParamDecl("input_data", operation.input.name))
            body.append("input_data.validate()")
            body.append("payload = input_data.to_dict(encode_json=True)")

            for member in operation.input.members.values():
                if member.name in http.path_params:
                    labels.add(member.name)
                elif member.http_binding is HttpLocation.QUERY:
                    query.append(f"{wire_name(member)!r}: payload.pop({member.name!r}, None)")
                elif member.http_binding is HttpLocation.HEADER:
                    headers.append(f"{wire_name(member)!r}: payload.pop({member.name!r}, None)")
                elif member.http_binding is HttpLocation.BODY:
                    payload_member = member

        body.append(f"path = {path_expression(http.uri, labels)}")

        send_args = [repr(operation.name), repr(http.method), "path", str(http.code)]
        if query:
            body.append(f"params = _compact({{{', '.join(query)}}})")
            send_args.append("params=params")
        if headers:
            body.append(f"headers = {{k: str(v) for k, v in _compact({{{', '.join(headers)}}}).items()}}")
            send_args.append("headers=headers")
        if payload_member is not None:
            send_args.append(f"json_body=payload.get({payload_member.name!r})")
        elif operation.input is not None:
            send_args.append("json_body=payload or None")

        body.append(f"response = await self._send({', '.join(send_args)})")
        if operation.output is not None:
            body.append(f"return {operation.output.name}.from_dict(_response_json(operation={operation.name!r}, response=response), infer_missing=True)")
            returns = operation.output.name
        else:
            returns = "None"

        return FunctionDecl(
            name=member_attribute(operation.name),
            params=params,
            returns=returns,
            body=body,
            is_async=True,
            docstring=operation.documentation or f"{http.method} {http.uri}",
        )

    def _helpers(self) -> list[FunctionDecl]:
        return [
            FunctionDecl(
                name="_quote",
                params=[ParamDecl("value", "Any"), ParamDecl("greedy", "bool", "False")],
                returns="str",
                docstring="URL-quote a path label; greedy labels keep their slashes.",
                body=['return quote(str(value), safe="/" if greedy else "")'],
            ),
            FunctionDecl(
                name="_compact",
                params=[ParamDecl("values", "dict[str, Any]")],
                returns="dict[str, Any]",
                body=["return {key: value for key, value in values.items() if value is not None}"],
            ),
            FunctionDecl(
                name="_response_json",
                params=[ParamDecl("operation", "str"), ParamDecl("response", "httpx.Response")],
                returns="dict[str, Any]",
                body=[
                    "if not response.content:",
                    "    return {}",
                    "try:",
                    "    return response.json()",
                    "except ValueError as exc:",
                    '    raise TransportError(f"{operation} returned invalid JSON: {exc}") from exc',
                ],
            ),
        ]
