"""
Naming utilities shared by the parser, builder and emitters.
"""

import keyword
import re
from pathlib import Path

# Regex pattern to split text into words, handling camelCase and acronym boundaries
_WORD_PATTERN = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|[0-9]+")


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens, dots) to spaces."""
    return text.replace("_", " ").replace("-", " ").replace(".", " ")


def _split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries."""
    return _WORD_PATTERN.findall(text)


def pascal_to_snake_case(text: str) -> str:
    """Convert PascalCase or camelCase to snake_case.

    Examples:
        "CreatePostInput" -> "create_post_input"
        "GetHTTPStatus" -> "get_http_status"
        "listPosts" -> "list_posts"
    """
    if not text:
        return ""
    words = _split_into_words(_normalize_separators(text))
    return "_".join(word.lower() for word in words)


def to_constant_case(text: str) -> str:
    """Convert any identifier-ish text to UPPER_SNAKE_CASE."""
    return pascal_to_snake_case(text).upper()


def python_identifier(name: str) -> str:
    """Return a valid Python identifier for a member name.

    Keywords get a trailing underscore, invalid characters become underscores.
    """
    cleaned = re.sub(r"\W", "_", name)
    if not cleaned or cleaned[0].isdigit():
        cleaned = f"_{cleaned}"
    if keyword.iskeyword(cleaned) or keyword.issoftkeyword(cleaned):
        cleaned = f"{cleaned}_"
    return cleaned


def shape_name(shape_id: str) -> str:
    """Extract the shape name from an absolute id ("ns#Name" -> "Name")."""
    return shape_id.split("#", 1)[1] if "#" in shape_id else shape_id


def shape_namespace(shape_id: str) -> str:
    """Extract the namespace from an absolute id ("ns#Name" -> "ns"), or ""."""
    return shape_id.split("#", 1)[0] if "#" in shape_id else ""


def module_to_path(module_name: str, output_dir: str | Path) -> str:
    """Map a dotted module name to a file path under output_dir.

    Examples:
        module_to_path("my_app.generated.types.post", "src")
            -> "src/my_app/generated/types/post.py"
    """
    parts = [part for part in module_name.split(".") if part]
    return str(Path(output_dir, *parts[:-1], f"{parts[-1]}.py"))


def member_attribute(member_name: str) -> str:
    """Python attribute name for a member ("createdAt" -> "created_at", "from" -> "from_")."""
    return python_identifier(pascal_to_snake_case(member_name) or member_name)
