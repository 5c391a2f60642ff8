"""
Document serializer.

Renders a Document through the jinja2 template of its concern
(templates/python/<concern>.py.jinja2) and normalizes the result:
- 4-space indentation
- No trailing whitespace
- At most two consecutive blank lines
- Exactly one trailing newline
"""

from __future__ import annotations

import re
from pathlib import Path

import jinja2

from .nodes import Document

_BLANK_RUN_PATTERN = re.compile(r"\n{4,}")


def format_docstring(text: str, indent: int = 0) -> str:
    """Render text as a triple-quoted docstring at the given indent level."""
    pad = "    " * indent
    text = text.strip().replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text = text[:-1] + '\\"'

    lines = text.splitlines() or [""]
    if len(lines) == 1:
        return f'{pad}"""{lines[0]}"""'

    rendered = [f'{pad}"""{lines[0]}']
    rendered.extend(f"{pad}{line}" if line.strip() else "" for line in lines[1:])
    rendered.append(f'{pad}"""')
    return "\n".join(rendered)


class DocumentSerializer:
    """Serializes Document trees to Python source code."""

    INDENT = "    "  # 4 spaces

    def __init__(self, template_dir: str | Path | None = None):
        """
        Initialize the serializer.

        Args:
            template_dir: Directory holding the concern templates
                (defaults to the packaged templates/python)
        """
        if template_dir is None:
            template_dir = Path(__file__).parent.parent.parent / "templates" / "python"
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            undefined=jinja2.StrictUndefined,
        )
        self.jinja_env.filters["docstring"] = format_docstring

    def serialize(self, document: Document) -> str:
        """Serialize a complete document to source code."""
        template = self.jinja_env.get_template(f"{document.template}.py.jinja2")
        return self._post_process(template.render(document=document))

    def _post_process(self, code: str) -> str:
        lines = [line.rstrip() for line in code.split("\n")]
        code = "\n".join(lines).strip("\n")
        code = _BLANK_RUN_PATTERN.sub("\n\n\n", code)
        return code + "\n"
