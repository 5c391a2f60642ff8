"""
Service emitter.

Generates the FastAPI server layer of the service as three modules under
<base_module>.server:

- <service>_contract: abstract class, one async method per operation
- <service>_handlers: one async handler per operation that decodes the
  request, calls the contract implementation and maps the outcome to the
  declared status code, a 400 ValidationError or a 500 InternalServerError
- <service>_routes: the ROUTES table and build_router(), which attaches every
  handler to one APIRouter
"""

from __future__ import annotations

from ...log import get_logger
from ...utils import member_attribute, pascal_to_snake_case
from ..analyzer.ir_nodes import HttpLocation, Member, Model, Operation, Service, Shape
from ..analyzer.reference_resolver import ReferenceResolver
from ..config import EmitterOptions
from ..document import Document, FunctionDecl, ParamDecl, TypeDecl
from ..smithy_ast.prelude import HTTP_HEADER_TRAIT, HTTP_QUERY_TRAIT
from .base import Artifact, Emitter, TargetKind, target_kind

logger = get_logger(__name__)

# Request value coercion helpers, by target kind
COERCIONS = {
    TargetKind.INTEGER: "_to_int",
    TargetKind.FLOAT: "_to_float",
    TargetKind.BOOLEAN: "_to_bool",
}

VALIDATION_ERROR = "ValidationError"
INTERNAL_ERROR = "InternalServerError"


def wire_name(member: Member) -> str:
    """Query parameter or header name of a member (trait value, else member name)."""
    for trait_id in (HTTP_QUERY_TRAIT, HTTP_HEADER_TRAIT):
        value = member.traits.get(trait_id)
        if isinstance(value, str) and value:
            return value
    return member.name


def route_uri(uri: str) -> str:
    """Convert greedy labels to path converters ("{key+}" -> "{key:path}")."""
    return uri.replace("+}", ":path}")


def type_module(shape: Shape) -> str:
    """Module of a generated type, relative to the server package."""
    return f"types.{pascal_to_snake_case(shape.name)}"


class ServiceEmitter(Emitter):
    """Emits the server contract, handlers and routes."""

    SUBPACKAGE = "server"

    def generate(self, model: Model, options: EmitterOptions) -> list[Artifact]:
        if model.service is None:
            return []

        app_name = options.require_app_name()
        service = model.service
        resolver = ReferenceResolver(model.shapes)

        artifacts = [
            self.render(self.build_contract(service, options), options),
            self.render(self.build_handlers(service, resolver, app_name, options), options),
            self.render(self.build_routes(service, options), options),
        ]
        logger.debug("Emitted %d server artifact(s) for %s", len(artifacts), service.name)
        return artifacts

    # Naming

    def service_module(self, options: EmitterOptions, service: Service, suffix: str) -> str:
        return f"{self.module_name(options, service.name)}_{suffix}"

    def contract_name(self, service: Service) -> str:
        return f"{service.name}Contract"

    def handlers_name(self, service: Service) -> str:
        return f"{service.name}Handlers"

    def method_name(self, operation: Operation) -> str:
        return member_attribute(operation.name)

    # Contract

    def build_contract(self, service: Service, options: EmitterOptions) -> Document:
        document = self.new_document(
            self.service_module(options, service, "contract"),
            "contract",
            options,
            docstring=f"Server contract of {service.name} {service.version}.",
        )
        document.imports.add("__future__", "annotations")
        document.imports.add("abc", "ABC", "abstractmethod")

        methods = []
        for operation in service.operations:
            params = [ParamDecl("self")]
            if operation.input is not None:
                params.append(ParamDecl("input_data", operation.input.name))
                document.imports.add_relative(type_module(operation.input), operation.input.name, level=2)
            if operation.output is not None:
                document.imports.add_relative(type_module(operation.output), operation.output.name, level=2)

            methods.append(
                FunctionDecl(
                    name=self.method_name(operation),
                    params=params,
                    returns=operation.output.name if operation.output else "None",
                    decorators=["abstractmethod"],
                    is_async=True,
                    docstring=operation.documentation or f"{operation.http.method} {operation.http.uri}",
                )
            )

        document.declarations.append(
            TypeDecl(
                name=self.contract_name(service),
                bases=["ABC"],
                docstring=service.documentation
                or f"Operations of {service.name}. Subclass and pass an instance to build_router().",
                methods=methods,
            )
        )
        return document

    # Handlers

    def build_handlers(
        self, service: Service, resolver: ReferenceResolver, app_name: str, options: EmitterOptions
    ) -> Document:
        contract = self.contract_name(service)
        document = self.new_document(
            self.service_module(options, service, "handlers"),
            "handlers",
            options,
            docstring=f"HTTP handlers of {service.name}, delegating to a {contract} implementation.",
        )
        imports = document.imports
        imports.add("__future__", "annotations")
        imports.add("json")
        imports.add("logging")
        imports.add("typing", "Any")
        imports.add("fastapi", "Request")
        imports.add("fastapi.responses", "JSONResponse", "Response")
        imports.add_relative(f"{pascal_to_snake_case(service.name)}_contract", contract)

        logger_name = f"{app_name}.{pascal_to_snake_case(service.name)}"
        document.constants.append(f"logger = logging.getLogger({logger_name!r})")
        document.functions.extend(self._handler_helpers())

        methods = [
            FunctionDecl(
                name="__init__",
                params=[ParamDecl("self"), ParamDecl("implementation", contract)],
                body=["self.implementation = implementation"],
            )
        ]
        for operation in service.operations:
            if operation.input is not None:
                imports.add_relative(type_module(operation.input), operation.input.name, level=2)
            methods.append(self._handler_method(operation, resolver))

        document.declarations.append(
            TypeDecl(
                name=self.handlers_name(service),
                docstring=f"One handler per {service.name} operation.",
                methods=methods,
            )
        )
        return document

    def _handler_method(self, operation: Operation, resolver: ReferenceResolver) -> FunctionDecl:
        method = self.method_name(operation)
        body: list[str] = []

        if operation.input is not None:
            body.append("try:")
            body.extend(f"    {line}" for line in self._decode_lines(operation, resolver))
            body.append(f"    input_data = {operation.input.name}.from_dict(data, infer_missing=True)")
            body.append("except (ValueError, KeyError, TypeError) as exc:")
            body.append(f"    return _error_response(400, {VALIDATION_ERROR!r}, str(exc))")
            call = f"await self.implementation.{method}(input_data)"
        else:
            call = f"await self.implementation.{method}()"

        body.append("try:")
        body.append(f"    output = {call}" if operation.output is not None else f"    {call}")
        body.append("except ValueError as exc:")
        body.append(f"    return _error_response(400, {VALIDATION_ERROR!r}, str(exc))")
        body.append("except Exception:")
        body.append(f'    logger.exception("Unhandled error in {operation.name}")')
        body.append(f'    return _error_response(500, {INTERNAL_ERROR!r}, "Internal server error")')

        code = operation.http.code
        if operation.output is not None:
            body.append(f"return JSONResponse(output.to_dict(encode_json=True), status_code={code})")
        else:
            body.append(f"return Response(status_code={code})")

        return FunctionDecl(
            name=method,
            params=[ParamDecl("self"), ParamDecl("request", "Request")],
            returns="Response",
            body=body,
            is_async=True,
            docstring=f"{operation.http.method} {operation.http.uri}",
        )

    def _decode_lines(self, operation: Operation, resolver: ReferenceResolver) -> list[str]:
        """Lines building the input dict from the request."""
        members = list(operation.input.members.values())
        payload = next((m for m in members if m.http_binding is HttpLocation.BODY), None)

        if payload is not None:
            lines = ["data: dict[str, Any] = {}", f"data[{payload.name!r}] = await _read_json(request)"]
        else:
            lines = ["data = await _read_body(request)"]

        labels = set(operation.http.path_params)
        for member in members:
            coerce = COERCIONS.get(self._kind(member, resolver))
            if member.name in labels:
                value = f"request.path_params[{member.name!r}]"
                lines.append(f"data[{member.name!r}] = {f'{coerce}({value})' if coerce else value}")
            elif member.http_binding is HttpLocation.QUERY:
                lines.extend(self._optional_value_lines(member, "request.query_params", coerce))
            elif member.http_binding is HttpLocation.HEADER:
                lines.extend(self._optional_value_lines(member, "request.headers", coerce))
        return lines

    def _optional_value_lines(self, member: Member, source: str, coerce: str | None) -> list[str]:
        key = wire_name(member)
        value = f"{source}[{key!r}]"
        return [
            f"if {key!r} in {source}:",
            f"    data[{member.name!r}] = {f'{coerce}({value})' if coerce else value}",
        ]

    def _kind(self, member: Member, resolver: ReferenceResolver) -> TargetKind:
        resolved = resolver.resolve(member.target)
        return TargetKind.UNKNOWN if resolved.is_dangling else target_kind(resolved.shape)

    def _handler_helpers(self) -> list[FunctionDecl]:
        value = [ParamDecl("value", "str")]
        return [
            FunctionDecl("_to_int", value, "int", ["return int(value)"]),
            FunctionDecl("_to_float", value, "float", ["return float(value)"]),
            FunctionDecl(
                "_to_bool",
                value,
                "bool",
                [
                    'if value.lower() in ("true", "1"):',
                    "    return True",
                    'if value.lower() in ("false", "0"):',
                    "    return False",
                    'raise ValueError(f"Invalid boolean value: {value!r}")',
                ],
            ),
            FunctionDecl(
                "_read_json",
                [ParamDecl("request", "Request")],
                "Any",
                [
                    "body = await request.body()",
                    "return json.loads(body) if body else None",
                ],
                is_async=True,
            ),
            FunctionDecl(
                "_read_body",
                [ParamDecl("request", "Request")],
                "dict[str, Any]",
                [
                    "data = await _read_json(request)",
                    "if data is None:",
                    "    return {}",
                    "if not isinstance(data, dict):",
                    '    raise ValueError("Request body must be a JSON object")',
                    "return data",
                ],
                is_async=True,
            ),
            FunctionDecl(
                "_error_response",
                [ParamDecl("status_code", "int"), ParamDecl("error", "str"), ParamDecl("message", "str")],
                "JSONResponse",
                ['return JSONResponse({"error": error, "message": message}, status_code=status_code)'],
            ),
        ]

    # Routes

    def build_routes(self, service: Service, options: EmitterOptions) -> Document:
        contract = self.contract_name(service)
        handlers = self.handlers_name(service)
        service_module = pascal_to_snake_case(service.name)

        document = self.new_document(
            self.service_module(options, service, "routes"),
            "routes",
            options,
            docstring=f"Route table of {service.name}.",
        )
        imports = document.imports
        imports.add("__future__", "annotations")
        imports.add("fastapi", "APIRouter")
        imports.add_relative(f"{service_module}_contract", contract)
        imports.add_relative(f"{service_module}_handlers", handlers)

        document.constants.append("# (method, uri, handler)")
        document.constants.append("ROUTES = (")
        for operation in service.operations:
            http = operation.http
            document.constants.append(f"    ({http.method!r}, {route_uri(http.uri)!r}, {self.method_name(operation)!r}),")
        document.constants.append(")")

        document.functions.append(
            FunctionDecl(
                name="build_router",
                params=[ParamDecl("implementation", contract), ParamDecl("prefix", "str", '""')],
                returns="APIRouter",
                docstring=f"Attach every {service.name} route to one APIRouter.",
                body=[
                    f"handlers = {handlers}(implementation)",
                    f"router = APIRouter(prefix=prefix, tags=[{service.name!r}])",
                    "for method, uri, handler_name in ROUTES:",
                    "    router.add_api_route(uri, getattr(handlers, handler_name), methods=[method], name=handler_name)",
                    "return router",
                ],
            )
        )
        return document
