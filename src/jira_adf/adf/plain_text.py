"""Plain-text extraction from ADF trees.

Concatenates every text leaf in document order, dropping block boundaries,
list markers, marks and heading levels. Uses an explicit stack so arbitrarily
deep trees cannot exhaust the interpreter's recursion limit.
"""

from typing import Any

from .model import Node, NodeType

__all__ = ["extract_plain_text"]


def extract_plain_text(value: Any) -> str:
    """Extract the plain text of an ADF value.

    Args:
        value: Node/Document, node-shaped dict, legacy string, or None

    Returns:
        Concatenated leaf text. Strings pass through unchanged; None and
        unrecognized values yield an empty string.

    Example:
        >>> extract_plain_text({"type": "paragraph", "content": [
        ...     {"type": "text", "text": "Hello "},
        ...     {"type": "text", "text": "world", "marks": [{"type": "strong"}]},
        ... ]})
        'Hello world'
    """
    if isinstance(value, str):
        return value
    if not isinstance(value, (Node, dict)):
        return ""

    parts: list[str] = []
    stack: list[Any] = [value]
    while stack:
        node = stack.pop()
        node_type, text, content = _unpack(node)
        if node_type == NodeType.TEXT:
            if text:
                parts.append(text)
            continue
        # Reversed so children pop in document order
        stack.extend(reversed(content))
    return "".join(parts)


def _unpack(node: Any) -> tuple[Any, str | None, list[Any]]:
    if isinstance(node, Node):
        return node.type, node.text, list(node.children)
    if isinstance(node, dict):
        text = node.get("text")
        content = node.get("content")
        return (
            node.get("type"),
            text if isinstance(text, str) else None,
            [child for child in content if isinstance(child, dict)]
            if isinstance(content, list)
            else [],
        )
    return None, None, []
