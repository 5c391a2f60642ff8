"""
IR builder.

Phase 2 of the pipeline: normalize a raw AST (from the text parser or the
structured importer) into an immutable Model. Steps, in order:

1. Resolve the namespace (metadata first, then the first shape id)
2. Build every shape with its members, traits and documentation
3. Locate the service (first "service" shape in map order)
4. Build the service and its operations, resolving operation, input,
   output and error ids against the shape map

Unresolved operation ids are dropped with a warning, and unresolved member
targets are left for the emitters to degrade to "Unknown". With
BuildConfig(strict_references=True) both raise DanglingReferenceError.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from ...errors import DanglingReferenceError, InvalidTraitError, NamespaceNotFound
from ...log import get_logger
from ...utils import shape_name, shape_namespace
from ..config import BuildConfig
from ..smithy_ast.prelude import (
    DOCUMENTATION_TRAIT,
    HTTP_HEADER_TRAIT,
    HTTP_LABEL_TRAIT,
    HTTP_PAYLOAD_TRAIT,
    HTTP_QUERY_TRAIT,
    HTTP_TRAIT,
    PROTOCOL_TRAITS,
    UNIT_SHAPE,
    reference_id,
)
from .ir_nodes import HttpBinding, HttpLocation, Member, Model, Operation, Protocol, Service, Shape, ShapeType
from .reference_resolver import ReferenceResolver

logger = get_logger(__name__)

# Binding traits in precedence order
BINDING_TRAITS = (
    (HTTP_LABEL_TRAIT, HttpLocation.PATH),
    (HTTP_QUERY_TRAIT, HttpLocation.QUERY),
    (HTTP_HEADER_TRAIT, HttpLocation.HEADER),
    (HTTP_PAYLOAD_TRAIT, HttpLocation.BODY),
)

# Smithy 1.0 type names accepted as aliases
TYPE_ALIASES = {"set": "list"}

_PATH_PARAM_PATTERN = re.compile(r"\{([^}]+)\}")


def extract_path_params(uri: str) -> tuple[str, ...]:
    """
    Extract label names from a URI template, left to right.

    "/buckets/{bucket}/items/{key+}" -> ("bucket", "key")
    """
    return tuple(label.rstrip("+") for label in _PATH_PARAM_PATTERN.findall(uri))


def classify_binding(traits: Mapping[str, Any]) -> HttpLocation | None:
    """Return the HTTP location of a member (label > query > header > payload)."""
    for trait_id, location in BINDING_TRAITS:
        if trait_id in traits:
            return location
    return None


class IRBuilder:
    """Builds the Model from a raw AST."""

    def __init__(self, config: BuildConfig | None = None):
        """
        Initialize the builder.

        Args:
            config: Build configuration (lenient references by default)
        """
        self.config = config or BuildConfig()

    def build(self, ast: Mapping[str, Any]) -> Model:
        """
        Build the Model.

        Args:
            ast: Raw AST with "shapes" and optional "metadata"

        Returns:
            The immutable Model

        Raises:
            NamespaceNotFound: If no namespace can be determined
            DanglingReferenceError: On unresolved references in strict mode
        """
        raw_shapes = ast.get("shapes") or {}
        metadata = ast.get("metadata") or {}

        namespace = self._resolve_namespace(metadata, raw_shapes)

        shapes = {shape_id: self._build_shape(shape_id, raw) for shape_id, raw in raw_shapes.items()}
        self._check_member_targets(shapes)

        service = self._build_service(raw_shapes, shapes, namespace)

        model = Model(namespace=namespace, shapes=shapes, service=service, metadata=metadata)
        logger.debug(
            "Built model %s: %d shape(s), %s",
            namespace,
            len(shapes),
            f"service {service.name} with {len(service.operations)} operation(s)" if service else "no service",
        )
        return model

    # Step 1

    def _resolve_namespace(self, metadata: Mapping[str, Any], raw_shapes: Mapping[str, Any]) -> str:
        namespace = metadata.get("namespace")
        if isinstance(namespace, str) and namespace:
            return namespace

        for shape_id in raw_shapes:
            namespace = shape_namespace(shape_id)
            if namespace:
                return namespace
            raise NamespaceNotFound(f"first shape id {shape_id!r} has no namespace")

        raise NamespaceNotFound()

    # Step 2

    def _build_shape(self, shape_id: str, raw: Mapping[str, Any]) -> Shape:
        traits = raw.get("traits") or {}
        shape_type = self._shape_type(shape_id, raw.get("type"))

        members = {}
        for member_name, raw_member in (raw.get("members") or {}).items():
            members[member_name] = self._build_member(member_name, raw_member)

        # Element target: explicit, then Smithy JSON "member"/"value", then the parsed members
        target = reference_id(raw.get("target"))
        if target is None and shape_type is ShapeType.LIST:
            target = reference_id(raw.get("member"))
            if target is None and "member" in members:
                target = members["member"].target or None
        elif target is None and shape_type is ShapeType.MAP:
            target = reference_id(raw.get("value"))
            if target is None and "value" in members:
                target = members["value"].target or None

        enum_values = raw.get("enum")
        return Shape(
            id=shape_id,
            name=shape_name(shape_id),
            type=shape_type,
            members=members,
            target=target,
            enum_values=tuple(enum_values) if isinstance(enum_values, (list, tuple)) else None,
            traits=traits,
            documentation=self._documentation(traits),
        )

    def _shape_type(self, shape_id: str, raw_type: Any) -> ShapeType:
        if not raw_type:
            return ShapeType.STRUCTURE
        raw_type = TYPE_ALIASES.get(raw_type, raw_type)
        try:
            return ShapeType(raw_type)
        except ValueError:
            logger.warning("Shape %s has unknown type %r, treating it as a document", shape_id, raw_type)
            return ShapeType.DOCUMENT

    def _build_member(self, name: str, raw: Any) -> Member:
        if not isinstance(raw, Mapping):
            return Member(name=name, target=reference_id(raw) or "")

        traits = raw.get("traits") or {}
        return Member(
            name=name,
            target=reference_id(raw.get("target")) or "",
            http_binding=classify_binding(traits),
            traits=traits,
            documentation=self._documentation(traits),
        )

    def _documentation(self, traits: Mapping[str, Any]) -> str | None:
        documentation = traits.get(DOCUMENTATION_TRAIT)
        return documentation if isinstance(documentation, str) else None

    def _check_member_targets(self, shapes: Mapping[str, Shape]) -> None:
        resolver = ReferenceResolver(shapes)
        for shape in shapes.values():
            for member in shape.members.values():
                if resolver.is_resolvable(member.target):
                    continue
                if self.config.strict_references:
                    raise DanglingReferenceError(member.target, f"{shape.id}${member.name}")
                logger.warning("Member %s$%s targets unknown shape %r", shape.id, member.name, member.target)

    # Steps 3 and 4

    def _build_service(
        self, raw_shapes: Mapping[str, Any], shapes: Mapping[str, Shape], namespace: str
    ) -> Service | None:
        service_id = next((sid for sid, raw in raw_shapes.items() if raw.get("type") == "service"), None)
        if service_id is None:
            return None

        raw = raw_shapes[service_id]
        traits = raw.get("traits") or {}

        operations = []
        for ref in raw.get("operations") or []:
            operation_id = reference_id(ref)
            if operation_id not in raw_shapes:
                if self.config.strict_references:
                    raise DanglingReferenceError(str(operation_id), service_id)
                logger.warning("Service %s references unknown operation %r, dropping it", service_id, operation_id)
                continue
            operations.append(self._build_operation(operation_id, raw_shapes[operation_id], shapes))

        return Service(
            id=service_id,
            name=shape_name(service_id),
            version=raw.get("version") or "1.0",
            namespace=shape_namespace(service_id) or namespace,
            operations=operations,
            protocol=self._detect_protocol(traits),
            errors=[error_id for error_id in map(reference_id, raw.get("errors") or []) if error_id],
            traits=traits,
            documentation=self._documentation(traits),
        )

    def _detect_protocol(self, traits: Mapping[str, Any]) -> Protocol:
        for name, trait_id in PROTOCOL_TRAITS.items():
            if trait_id in traits:
                return Protocol(name)
        return Protocol.REST_JSON_1

    def _build_operation(self, operation_id: str, raw: Mapping[str, Any], shapes: Mapping[str, Shape]) -> Operation:
        traits = raw.get("traits") or {}
        input_shape = self._resolve_operation_shape(raw.get("input"), operation_id, shapes)
        output_shape = self._resolve_operation_shape(raw.get("output"), operation_id, shapes)
        errors = [self._resolve_operation_shape(ref, operation_id, shapes) for ref in raw.get("errors") or []]

        return Operation(
            id=operation_id,
            name=shape_name(operation_id),
            input=input_shape,
            output=output_shape,
            errors=[error for error in errors if error is not None],
            http=self._build_http_binding(operation_id, traits.get(HTTP_TRAIT), input_shape),
            traits=traits,
            documentation=self._documentation(traits),
        )

    def _resolve_operation_shape(self, ref: Any, operation_id: str, shapes: Mapping[str, Shape]) -> Shape | None:
        shape_id = reference_id(ref)
        if shape_id is None or shape_id == UNIT_SHAPE:
            return None
        if shape_id in shapes:
            return shapes[shape_id]
        if self.config.strict_references:
            raise DanglingReferenceError(shape_id, operation_id)
        logger.warning("Operation %s references unknown shape %r, using an empty structure", operation_id, shape_id)
        return Shape(id=shape_id, name=shape_name(shape_id), type=ShapeType.STRUCTURE)

    def _build_http_binding(self, operation_id: str, trait: Any, input_shape: Shape | None) -> HttpBinding:
        if not isinstance(trait, Mapping):
            trait = {}

        try:
            code = int(trait.get("code") or 200)
        except (TypeError, ValueError) as e:
            raise InvalidTraitError(HTTP_TRAIT, operation_id, f"status code {trait.get('code')!r} is not an integer") from e

        uri = trait.get("uri") or "/"
        members = input_shape.members.values() if input_shape else ()
        return HttpBinding(
            method=str(trait.get("method") or "POST").upper(),
            uri=uri,
            code=code,
            path_params=extract_path_params(uri),
            query_params=tuple(m.name for m in members if m.http_binding is HttpLocation.QUERY),
            header_params=tuple(m.name for m in members if m.http_binding is HttpLocation.HEADER),
        )
