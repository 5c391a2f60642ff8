"""
Pattern-based parser for a practical subset of the Smithy IDL.

Phase 1 of the pipeline: turn IDL text into a raw AST (Smithy JSON AST
layout) without resolving references. This is flat, single-level block
matching, not a grammar: a shape body is everything between "{" and the
next "}" outside a string literal, so nested braces are not supported.

Supported declarations:
    namespace, service, structure, union, operation, list, map and simple
    shapes (e.g. "string Slug"), each optionally preceded by "///" doc
    comments and "@trait" applications.

Required-member detection defaults to a heuristic: a member is required when
its block contains the "@required" marker and the member name appears in the
block. This over-matches (any "@required" in a block marks every member);
use ParserConfig(strict_required=True) or the structured-input path when
validation traits must be exact.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from ...errors import ParseError
from ...log import get_logger
from ..config import ParserConfig
from .prelude import (
    DOCUMENTATION_TRAIT,
    PRELUDE_NAMESPACE,
    PROTOCOL_TRAITS,
    PROTOCOLS_NAMESPACE,
    REQUIRED_TRAIT,
    SMITHY_VERSION,
    TEXT_PRIMITIVE_TYPES,
    prelude_id,
)

logger = get_logger(__name__)

UNKNOWN_NAMESPACE = "unknown"

_STRING = r'"(?:[^"\\]|\\.)*"'
_TRAIT = rf"@[\w.#]+(?:\((?:{_STRING}|[^()\"])*\))?"
_DOCS = r"(?:///[^\n]*\n\s*)*"
_BODY = rf"(?:{_STRING}|[^}}\"])*"

_SIMPLE_KINDS = (
    "string",
    "blob",
    "boolean",
    "byte",
    "short",
    "integer",
    "long",
    "float",
    "double",
    "timestamp",
    "bigInteger",
    "bigDecimal",
    "document",
)

_DECLARATION_PATTERN = re.compile(
    rf"(?P<docs>{_DOCS})"
    rf"(?P<traits>(?:{_TRAIT}\s*)*)"
    r"(?<![\w.#$])(?:"
    r"(?P<kind>service|structure|union|operation|list|map)[ \t]+(?P<name>[A-Za-z_]\w*)"
    r"(?:[ \t]+(?:for|with)[^{]*)?\s*"
    rf"\{{(?P<body>{_BODY})\}}"
    rf"|(?P<simple>{'|'.join(_SIMPLE_KINDS)})[ \t]+(?P<simple_name>[A-Za-z_]\w*)[ \t]*(?=\n|$)"
    r")",
)

_MEMBER_PATTERN = re.compile(
    rf"(?P<docs>{_DOCS})"
    rf"(?P<traits>(?:{_TRAIT}\s*)*)"
    r"(?<![\w.#$])(?P<name>[A-Za-z_]\w*)\s*:\s*(?P<target>[A-Za-z_][\w.#]*)"
)

_TRAIT_PATTERN = re.compile(rf"@(?P<name>[\w.#]+)(?:\((?P<args>(?:{_STRING}|[^()\"])*)\))?")
_PAIR_PATTERN = re.compile(rf"(?P<key>\w+)\s*:\s*(?P<value>{_STRING}|[^,\s]+)")
_STRING_PATTERN = re.compile(_STRING)

_NAMESPACE_PATTERN = re.compile(r"^\s*namespace\s+([\w.]+)", re.MULTILINE)
_VERSION_PATTERN = re.compile(r"\bversion\s*:\s*\"([^\"]+)\"")
_OPERATIONS_PATTERN = re.compile(r"\boperations\s*:\s*\[([^\]]*)\]")
_ERRORS_PATTERN = re.compile(r"\berrors\s*:\s*\[([^\]]*)\]")
_INPUT_PATTERN = re.compile(r"\binput\s*:=?\s*([A-Za-z_][\w.#]*)")
_OUTPUT_PATTERN = re.compile(r"\boutput\s*:=?\s*([A-Za-z_][\w.#]*)")

_BLOCK_COMMENT_PATTERN = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT_PATTERN = re.compile(r"(^|[ \t])//(?!/)[^\n]*", re.MULTILINE)


class TextParser:
    """Parses Smithy IDL text into a raw AST."""

    # Member type names mapped to prelude ids
    PRIMITIVE_TYPES = set(TEXT_PRIMITIVE_TYPES)

    def __init__(self, config: ParserConfig | None = None):
        """
        Initialize the parser.

        Args:
            config: Parser configuration (defaults to heuristic required detection)
        """
        self.config = config or ParserConfig()

    def parse_file(self, path: str | Path) -> dict[str, Any]:
        """
        Parse a single IDL file.

        Args:
            path: Path to the IDL file

        Returns:
            Raw AST dictionary

        Raises:
            ParseError: If the file cannot be read or parsed
        """
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to read %s: %s", path, e)
            raise ParseError(path, e) from e
        return self.parse(content, filename=str(path))

    def parse(self, content: str, filename: str = "<string>") -> dict[str, Any]:
        """
        Parse IDL text.

        Args:
            content: The IDL source text
            filename: Name reported in errors and logs

        Returns:
            Raw AST dictionary with "smithy", "shapes" and "metadata" keys

        Raises:
            ParseError: On any internal failure
        """
        try:
            ast = self._parse_content(content, filename)
        except Exception as e:
            logger.error("Failed to parse %s: %r", filename, e)
            raise ParseError(filename, e) from e

        logger.debug("Parsed %d shape(s) from %s", len(ast["shapes"]), filename)
        return ast

    def _parse_content(self, content: str, filename: str) -> dict[str, Any]:
        text = self._strip_comments(content)
        namespace = self._extract_namespace(text, filename)

        shapes: dict[str, dict[str, Any]] = {}
        service_id: str | None = None

        for match in _DECLARATION_PATTERN.finditer(text):
            traits = self._parse_traits(match.group("traits"))
            documentation = self._parse_doc_comment(match.group("docs"))
            if documentation and DOCUMENTATION_TRAIT not in traits:
                traits[DOCUMENTATION_TRAIT] = documentation

            if match.group("simple"):
                shape_id = f"{namespace}#{match.group('simple_name')}"
                shapes[shape_id] = {"type": match.group("simple"), "traits": traits}
                continue

            kind = match.group("kind")
            shape_id = f"{namespace}#{match.group('name')}"
            body = match.group("body")

            if kind == "service":
                if service_id is not None:
                    logger.warning("%s: ignoring service %s, %s is already declared", filename, shape_id, service_id)
                    continue
                service_id = shape_id
                shapes[shape_id] = self._parse_service(body, namespace, traits)
            elif kind in ("structure", "union"):
                shapes[shape_id] = self._parse_structure(kind, body, namespace, traits)
            elif kind == "operation":
                shapes[shape_id] = self._parse_operation(body, namespace, traits)
            elif kind == "list":
                shapes[shape_id] = self._parse_list(body, namespace, traits)
            else:
                shapes[shape_id] = self._parse_map(body, namespace, traits)

        return {
            "smithy": SMITHY_VERSION,
            "shapes": shapes,
            "metadata": {"namespace": namespace},
        }

    def _strip_comments(self, content: str) -> str:
        """Remove block and line comments, keeping "///" doc comments."""
        content = _BLOCK_COMMENT_PATTERN.sub("", content)
        return _LINE_COMMENT_PATTERN.sub(r"\1", content)

    def _extract_namespace(self, text: str, filename: str) -> str:
        match = _NAMESPACE_PATTERN.search(text)
        if match:
            return match.group(1)
        logger.warning("%s: no namespace declaration, using %r", filename, UNKNOWN_NAMESPACE)
        return UNKNOWN_NAMESPACE

    # Shape bodies

    def _parse_service(self, body: str, namespace: str, traits: dict[str, Any]) -> dict[str, Any]:
        version = _VERSION_PATTERN.search(body)
        return {
            "type": "service",
            "version": version.group(1) if version else "1.0",
            "operations": self._parse_reference_list(_OPERATIONS_PATTERN.search(body), namespace),
            "errors": self._parse_reference_list(_ERRORS_PATTERN.search(body), namespace),
            "traits": traits,
        }

    def _parse_structure(self, kind: str, body: str, namespace: str, traits: dict[str, Any]) -> dict[str, Any]:
        members = self._parse_members(body, namespace)

        if not self.config.strict_required and "@required" in body:
            for member_name, member in members.items():
                if member_name in body:
                    member["traits"].setdefault(REQUIRED_TRAIT, {})

        return {"type": kind, "members": members, "traits": traits}

    def _parse_operation(self, body: str, namespace: str, traits: dict[str, Any]) -> dict[str, Any]:
        input_match = _INPUT_PATTERN.search(body)
        output_match = _OUTPUT_PATTERN.search(body)
        return {
            "type": "operation",
            "input": self._resolve_reference(input_match.group(1), namespace) if input_match else None,
            "output": self._resolve_reference(output_match.group(1), namespace) if output_match else None,
            "errors": self._parse_reference_list(_ERRORS_PATTERN.search(body), namespace),
            "traits": traits,
        }

    def _parse_list(self, body: str, namespace: str, traits: dict[str, Any]) -> dict[str, Any]:
        members = self._parse_members(body, namespace)
        member = members.get("member")
        return {
            "type": "list",
            "members": members,
            "target": member["target"] if member else None,
            "traits": traits,
        }

    def _parse_map(self, body: str, namespace: str, traits: dict[str, Any]) -> dict[str, Any]:
        members = self._parse_members(body, namespace)
        value = members.get("value")
        return {
            "type": "map",
            "members": members,
            "target": value["target"] if value else None,
            "traits": traits,
        }

    def _parse_members(self, body: str, namespace: str) -> dict[str, dict[str, Any]]:
        members: dict[str, dict[str, Any]] = {}
        for match in _MEMBER_PATTERN.finditer(body):
            traits = self._parse_traits(match.group("traits"))
            documentation = self._parse_doc_comment(match.group("docs"))
            if documentation and DOCUMENTATION_TRAIT not in traits:
                traits[DOCUMENTATION_TRAIT] = documentation

            members[match.group("name")] = {
                "target": self._resolve_reference(match.group("target"), namespace),
                "traits": traits,
            }
        return members

    # References

    def _resolve_reference(self, name: str, namespace: str) -> str:
        """Map a type name to an absolute shape id."""
        if "#" in name:
            return name
        if name in self.PRIMITIVE_TYPES:
            return prelude_id(name)
        return f"{namespace}#{name}"

    def _parse_reference_list(self, match: re.Match | None, namespace: str) -> list[str]:
        if match is None:
            return []
        names = [name for name in re.split(r"[\s,]+", match.group(1)) if name]
        return [self._resolve_reference(name, namespace) for name in names]

    # Traits and documentation

    def _parse_traits(self, text: str | None) -> dict[str, Any]:
        traits: dict[str, Any] = {}
        if not text:
            return traits
        for match in _TRAIT_PATTERN.finditer(text):
            traits[self._trait_id(match.group("name"))] = self._parse_trait_value(match.group("args"))
        return traits

    def _trait_id(self, name: str) -> str:
        if "#" in name:
            return name
        if name in PROTOCOL_TRAITS:
            return f"{PROTOCOLS_NAMESPACE}#{name}"
        return f"{PRELUDE_NAMESPACE}#{name}"

    def _parse_trait_value(self, args: str | None) -> Any:
        """
        Convert trait arguments to a Smithy JSON value.

        "@required" -> {}, '@pattern("^a$")' -> "^a$",
        "@length(min: 1, max: 3)" -> {"min": 1, "max": 3}
        """
        if args is None or not args.strip():
            return {}
        args = args.strip()

        if _STRING_PATTERN.fullmatch(args):
            return self._unquote(args)

        pairs = list(_PAIR_PATTERN.finditer(args))
        if pairs:
            return {pair.group("key"): self._parse_scalar(pair.group("value")) for pair in pairs}

        return self._parse_scalar(args)

    def _parse_scalar(self, value: str) -> Any:
        value = value.strip()
        if value.startswith('"'):
            return self._unquote(value)
        if value in ("true", "false"):
            return value == "true"
        if value == "null":
            return None
        try:
            return int(value)
        except ValueError:
            pass
        try:
            return float(value)
        except ValueError:
            return value

    def _unquote(self, literal: str) -> str:
        try:
            return json.loads(literal)
        except ValueError:
            return literal[1:-1].replace('\\"', '"').replace("\\\\", "\\")

    def _parse_doc_comment(self, docs: str | None) -> str | None:
        if not docs or not docs.strip():
            return None
        lines = []
        for line in docs.strip().splitlines():
            line = line.strip()
            if line.startswith("///"):
                line = line[3:]
                if line.startswith(" "):
                    line = line[1:]
            lines.append(line)
        return "\n".join(lines).strip() or None
