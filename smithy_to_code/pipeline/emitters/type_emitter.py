"""
Type emitter.

Generates one dataclasses + dataclasses_json module per structure shape:
- Required members first, with non-nullable annotations
- Optional members as "X | None = None"
- Wire names kept through dataclasses_json field_name overrides
- A validate() method built from the member constraint traits, called
  from __post_init__
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ...log import get_logger
from ...utils import member_attribute, pascal_to_snake_case
from ...validation_rules import (
    LengthRule,
    PatternRule,
    RangeRule,
    RequiredFieldsRule,
    ValidationRule,
    load_rule_templates,
)
from ..analyzer.ir_nodes import Member, Model, Shape, ShapeType
from ..analyzer.reference_resolver import ReferenceResolver
from ..config import EmitterOptions
from ..document import Document, FieldDecl, FunctionDecl, ParamDecl, TypeDecl, ValidationDecl
from ..smithy_ast.prelude import LENGTH_TRAIT, PATTERN_TRAIT, RANGE_TRAIT
from .base import SCALAR_ANNOTATIONS, Artifact, Emitter, TargetKind, target_kind

logger = get_logger(__name__)

# Nesting limit for list/map annotations
MAX_ANNOTATION_DEPTH = 8

# Traits copied from a target simple shape onto the members that use it
CONSTRAINT_TRAITS = (LENGTH_TRAIT, RANGE_TRAIT, PATTERN_TRAIT)

BLOB_CODEC = "encoder=_encode_blob, decoder=_decode_blob"

# Names the class body or dataclasses_json bind; members using them get a trailing underscore
RESERVED_ATTRIBUTES = frozenset(
    {
        "field",
        "config",
        "validate",
        "to_dict",
        "from_dict",
        "to_json",
        "from_json",
        "schema",
        "dataclass_json_config",
    }
)


def field_attribute(member: Member) -> str:
    """Python attribute of a member in a generated type ('createdAt' -> 'created_at', 'validate' -> 'validate_')."""
    attribute = member_attribute(member.name)
    return f"{attribute}_" if attribute in RESERVED_ATTRIBUTES else attribute


class TypeEmitter(Emitter):
    """Emits the data/validation layer."""

    SUBPACKAGE = "types"

    def generate(self, model: Model, options: EmitterOptions) -> list[Artifact]:
        resolver = ReferenceResolver(model.shapes)
        templates = load_rule_templates()

        artifacts = [
            self.render(self.build_document(shape, resolver, templates, options), options) for shape in model.structures
        ]
        logger.debug("Emitted %d type artifact(s)", len(artifacts))
        return artifacts

    def build_document(
        self,
        shape: Shape,
        resolver: ReferenceResolver,
        templates: Mapping[str, Any],
        options: EmitterOptions,
    ) -> Document:
        """Build the document of one structure."""
        document = self.new_document(
            self.module_name(options, shape.name),
            "types",
            options,
            docstring=f"Data type for the {shape.id} structure.",
        )
        imports = document.imports
        imports.add("__future__", "annotations")
        imports.add("dataclasses", "dataclass")
        imports.add("dataclasses_json", "dataclass_json")

        required_fields: list[FieldDecl] = []
        optional_fields: list[FieldDecl] = []
        has_blob = False

        for member in shape.members.values():
            kind = self._member_kind(member, resolver)
            annotation = self.annotation(member.target, resolver, document, shape)
            attribute = field_attribute(member)

            overrides = []
            if attribute != member.name:
                overrides.append(f"field_name={member.name!r}")
            if kind is TargetKind.BINARY:
                overrides.append(BLOB_CODEC)
                has_blob = True

            metadata = f"config({', '.join(overrides)})" if overrides else None
            if metadata:
                imports.add("dataclasses", "field")
                imports.add("dataclasses_json", "config")

            if member.is_required:
                default = f"field(metadata={metadata})" if metadata else None
                required_fields.append(FieldDecl(attribute, annotation, default, member.documentation))
            else:
                default = f"field(default=None, metadata={metadata})" if metadata else "None"
                optional_fields.append(FieldDecl(attribute, f"{annotation} | None", default, member.documentation))

        rules = self.build_rules(shape, resolver)
        if any(isinstance(rule, PatternRule) for rule in rules):
            imports.add("re")

        if has_blob:
            imports.add("base64")
            document.functions.extend(self._blob_codec())

        document.declarations.append(
            TypeDecl(
                name=shape.name,
                decorators=["dataclass_json", "dataclass"],
                docstring=shape.documentation,
                fields=required_fields + optional_fields,
                validations=[ValidationDecl(type(rule).__name__, rule.generate_code(templates)) for rule in rules],
            )
        )
        return document

    def annotation(
        self,
        target: str | None,
        resolver: ReferenceResolver,
        document: Document,
        current: Shape,
        depth: int = 0,
    ) -> str:
        """
        Translate a member target to a Python annotation, registering imports.

        Args:
            target: Absolute shape id of the target
            resolver: Resolver over the model shapes
            document: Document being built (sibling types go to its late imports)
            current: The structure being generated (no self-import)
            depth: Current list/map nesting

        Returns:
            Annotation string (e.g. "list[Post]")
        """
        resolved = resolver.resolve(target)
        kind = TargetKind.UNKNOWN if resolved.is_dangling or depth > MAX_ANNOTATION_DEPTH else target_kind(resolved.shape)

        if kind is TargetKind.REFERENCE:
            name = resolved.shape.name
            if resolved.shape.id != current.id:
                document.late_imports.add_relative(pascal_to_snake_case(name), name)
            return name
        if kind is TargetKind.LIST:
            return f"list[{self.annotation(resolved.shape.target, resolver, document, current, depth + 1)}]"
        if kind is TargetKind.MAP:
            return f"dict[str, {self.annotation(resolved.shape.target, resolver, document, current, depth + 1)}]"
        if kind is TargetKind.TIMESTAMP:
            document.imports.add("datetime", "datetime")
        elif kind is TargetKind.UNKNOWN:
            document.imports.add("typing", "Any")
        return SCALAR_ANNOTATIONS[kind]

    def build_rules(self, shape: Shape, resolver: ReferenceResolver) -> list[ValidationRule]:
        """
        Derive validation rules from member traits.

        Order: one RequiredFieldsRule listing every required member, then per
        member in declaration order its LengthRule, RangeRule and PatternRule.
        """
        rules: list[ValidationRule] = []

        required = shape.required_members
        if required:
            rules.append(RequiredFieldsRule([field_attribute(m) for m in required], [m.name for m in required]))

        for member in shape.members.values():
            traits = self.constraint_traits(member, resolver)
            attribute = field_attribute(member)

            length = LengthRule.from_trait(traits.get(LENGTH_TRAIT), attribute, member.name, member.is_required)
            if length:
                rules.append(length)

            value_range = RangeRule.from_trait(traits.get(RANGE_TRAIT), attribute, member.name, member.is_required)
            if value_range:
                rules.append(value_range)

            pattern = traits.get(PATTERN_TRAIT)
            if isinstance(pattern, str):
                rules.append(PatternRule(attribute, member.name, pattern, member.is_required))

        return rules

    def constraint_traits(self, member: Member, resolver: ReferenceResolver) -> dict[str, Any]:
        """Constraint traits of a member, including those of its target simple shape."""
        resolved = resolver.resolve(member.target)
        traits: dict[str, Any] = {}
        if not resolved.is_builtin and resolved.shape.type is not ShapeType.STRUCTURE:
            traits.update((k, v) for k, v in resolved.shape.traits.items() if k in CONSTRAINT_TRAITS)
        traits.update(member.traits)
        return traits

    def _member_kind(self, member: Member, resolver: ReferenceResolver) -> TargetKind:
        resolved = resolver.resolve(member.target)
        return TargetKind.UNKNOWN if resolved.is_dangling else target_kind(resolved.shape)

    def _blob_codec(self) -> list[FunctionDecl]:
        value = [ParamDecl("value", "bytes | None")]
        text = [ParamDecl("value", "str | None")]
        return [
            FunctionDecl(
                name="_encode_blob",
                params=value,
                returns="str | None",
                body=['return None if value is None else base64.b64encode(value).decode("ascii")'],
            ),
            FunctionDecl(
                name="_decode_blob",
                params=text,
                returns="bytes | None",
                body=["return None if value is None else base64.b64decode(value)"],
            ),
        ]
