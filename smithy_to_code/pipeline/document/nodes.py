"""
Document node definitions.

These nodes represent the structure of one generated Python module as a tree
of named sections (imports, constants, type declarations with their field,
validation and method lists, module functions). Emitters build a Document,
the DocumentSerializer renders it through the template of its concern.
"""

from __future__ import annotations

import collections
from dataclasses import dataclass, field

# Modules grouped with the standard library in generated imports
STDLIB_MODULES = {
    "abc",
    "base64",
    "collections",
    "dataclasses",
    "datetime",
    "enum",
    "json",
    "logging",
    "os",
    "re",
    "typing",
    "urllib",
    "urllib.parse",
}


@dataclass
class DocumentNode:
    """Base class for all document nodes."""

    pass


@dataclass
class ImportSection(DocumentNode):
    """The imports of a module, grouped as future / stdlib / third party / local."""

    from_imports: dict[str, set[str]] = field(default_factory=lambda: collections.defaultdict(set))
    module_imports: set[str] = field(default_factory=set)
    relative_imports: dict[str, set[str]] = field(default_factory=lambda: collections.defaultdict(set))

    def add(self, module: str, *names: str) -> None:
        """Add "from module import names", or "import module" when no names are given."""
        if names:
            self.from_imports[module].update(names)
        else:
            self.module_imports.add(module)

    def add_relative(self, module: str, *names: str, level: int = 1) -> None:
        """Add "from .module import names" ("from ..module" with level=2)."""
        self.relative_imports["." * level + module].update(names)

    def lines(self) -> list[str]:
        """Render import lines, with a blank line between groups."""
        future: list[str] = []
        stdlib: list[str] = []
        third_party: list[str] = []
        local: list[str] = []

        for module in sorted(self.module_imports):
            group = stdlib if module in STDLIB_MODULES else third_party
            group.append(f"import {module}")

        for module in sorted(self.from_imports):
            names = ", ".join(sorted(self.from_imports[module]))
            line = f"from {module} import {names}"
            if module == "__future__":
                future.append(line)
            elif module in STDLIB_MODULES:
                stdlib.append(line)
            else:
                third_party.append(line)

        for module in sorted(self.relative_imports):
            names = ", ".join(sorted(self.relative_imports[module]))
            local.append(f"from {module} import {names}")

        lines: list[str] = []
        for group in (future, sorted(stdlib, key=_import_sort_key), sorted(third_party, key=_import_sort_key), local):
            if not group:
                continue
            if lines:
                lines.append("")
            lines.extend(group)
        return lines


def _import_sort_key(line: str) -> str:
    # "import os" and "from os import x" sort together by module name
    return line.split()[1]


@dataclass
class FieldDecl(DocumentNode):
    """A class-level field (dataclass field or plain annotated attribute)."""

    name: str = ""
    annotation: str = ""
    default: str | None = None
    comment: str | None = None

    def comment_lines(self) -> list[str]:
        if not self.comment:
            return []
        return [f"# {line}".rstrip() for line in self.comment.strip().splitlines()]


@dataclass
class ValidationDecl(DocumentNode):
    """Generated code for one validation rule."""

    rule: str = ""  # Rule class name
    lines: list[str] = field(default_factory=list)


@dataclass
class ParamDecl(DocumentNode):
    """A function parameter."""

    name: str = ""
    annotation: str | None = None
    default: str | None = None
    keyword_only: bool = False

    def render(self) -> str:
        text = self.name
        if self.annotation:
            text += f": {self.annotation}"
            if self.default is not None:
                text += f" = {self.default}"
        elif self.default is not None:
            text += f"={self.default}"
        return text


@dataclass
class FunctionDecl(DocumentNode):
    """A function or method."""

    name: str = ""
    params: list[ParamDecl] = field(default_factory=list)
    returns: str | None = None
    body: list[str] = field(default_factory=list)
    decorators: list[str] = field(default_factory=list)
    is_async: bool = False
    docstring: str | None = None

    def signature(self) -> str:
        parts: list[str] = []
        star_added = False
        for param in self.params:
            if param.keyword_only and not star_added:
                parts.append("*")
                star_added = True
            parts.append(param.render())
        return ", ".join(parts)


@dataclass
class TypeDecl(DocumentNode):
    """A class declaration."""

    name: str = ""
    bases: list[str] = field(default_factory=list)
    decorators: list[str] = field(default_factory=list)
    docstring: str | None = None
    fields: list[FieldDecl] = field(default_factory=list)

    # None when the class has no generated validate() method
    validations: list[ValidationDecl] | None = None

    methods: list[FunctionDecl] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.docstring or self.fields or self.methods or self.validations is not None)


@dataclass
class Document(DocumentNode):
    """One generated Python module."""

    module: str = ""  # Dotted module name
    template: str = ""  # Concern rendering this document (types, contract, ...)
    generation_comment: str | None = None
    docstring: str | None = None
    imports: ImportSection = field(default_factory=ImportSection)
    # Imports rendered after the declarations, for sibling modules that may import this one
    late_imports: ImportSection = field(default_factory=ImportSection)
    constants: list[str] = field(default_factory=list)
    declarations: list[TypeDecl] = field(default_factory=list)
    functions: list[FunctionDecl] = field(default_factory=list)
