"""
Well-known Smithy identifiers shared by the parser, importer and builder.

The raw AST produced by the TextParser and accepted by the StructuredImporter
follows the Smithy JSON AST layout:

    {
        "smithy": "2.0",
        "shapes": {"ns#Name": {"type": ..., "members": {...}, "traits": {...}}},
        "metadata": {"namespace": "ns"},
    }
"""

from __future__ import annotations

SMITHY_VERSION = "2.0"

PRELUDE_NAMESPACE = "smithy.api"
PROTOCOLS_NAMESPACE = "aws.protocols"

# Trait ids
DOCUMENTATION_TRAIT = "smithy.api#documentation"
REQUIRED_TRAIT = "smithy.api#required"
LENGTH_TRAIT = "smithy.api#length"
RANGE_TRAIT = "smithy.api#range"
PATTERN_TRAIT = "smithy.api#pattern"
HTTP_TRAIT = "smithy.api#http"
HTTP_LABEL_TRAIT = "smithy.api#httpLabel"
HTTP_QUERY_TRAIT = "smithy.api#httpQuery"
HTTP_HEADER_TRAIT = "smithy.api#httpHeader"
HTTP_PAYLOAD_TRAIT = "smithy.api#httpPayload"

# Operation input/output marking "no structure"
UNIT_SHAPE = "smithy.api#Unit"

# Protocol traits, checked in this order
PROTOCOL_TRAITS = {
    "restJson1": f"{PROTOCOLS_NAMESPACE}#restJson1",
    "awsJson1_0": f"{PROTOCOLS_NAMESPACE}#awsJson1_0",
    "awsJson1_1": f"{PROTOCOLS_NAMESPACE}#awsJson1_1",
}

# Built-in shape ids and the raw type each one stands for
PRELUDE_SHAPES = {
    f"{PRELUDE_NAMESPACE}#String": "string",
    f"{PRELUDE_NAMESPACE}#Integer": "integer",
    f"{PRELUDE_NAMESPACE}#Long": "long",
    f"{PRELUDE_NAMESPACE}#Short": "short",
    f"{PRELUDE_NAMESPACE}#Byte": "byte",
    f"{PRELUDE_NAMESPACE}#Float": "float",
    f"{PRELUDE_NAMESPACE}#Double": "double",
    f"{PRELUDE_NAMESPACE}#Boolean": "boolean",
    f"{PRELUDE_NAMESPACE}#Timestamp": "timestamp",
    f"{PRELUDE_NAMESPACE}#Blob": "blob",
    f"{PRELUDE_NAMESPACE}#BigInteger": "bigInteger",
    f"{PRELUDE_NAMESPACE}#BigDecimal": "bigDecimal",
    f"{PRELUDE_NAMESPACE}#Document": "document",
    f"{PRELUDE_NAMESPACE}#PrimitiveInteger": "integer",
    f"{PRELUDE_NAMESPACE}#PrimitiveLong": "long",
    f"{PRELUDE_NAMESPACE}#PrimitiveShort": "short",
    f"{PRELUDE_NAMESPACE}#PrimitiveByte": "byte",
    f"{PRELUDE_NAMESPACE}#PrimitiveFloat": "float",
    f"{PRELUDE_NAMESPACE}#PrimitiveDouble": "double",
    f"{PRELUDE_NAMESPACE}#PrimitiveBoolean": "boolean",
}

# Member type names the text parser maps to prelude ids
TEXT_PRIMITIVE_TYPES = (
    "String",
    "Integer",
    "Long",
    "Short",
    "Byte",
    "Float",
    "Double",
    "Boolean",
    "Timestamp",
    "Blob",
)


def prelude_id(name: str) -> str:
    """Return the absolute prelude id for a built-in type name."""
    return f"{PRELUDE_NAMESPACE}#{name}"


def reference_id(reference) -> str | None:
    """Normalize a raw shape reference.

    Smithy JSON writes references as {"target": "ns#Name"}; the text parser
    writes bare strings. Both forms are accepted.
    """
    if reference is None:
        return None
    if isinstance(reference, str):
        return reference or None
    if isinstance(reference, dict):
        target = reference.get("target")
        return target if isinstance(target, str) and target else None
    return None
