"""Atlassian Document Format (ADF) to Markdown converter.

Renders an ADF tree to Markdown for display in issue cards, comment threads
and update summaries. Each node kind has one rendering rule; each call
returns its own string and the caller composes them.

Degrades instead of failing on input it does not understand:
- Unknown node kinds render their children without wrapping
- Unknown mark kinds leave the text unchanged
- Subtrees deeper than ``max_depth`` render as plain text

Reference: https://developer.atlassian.com/cloud/jira/platform/apis/document/structure/
"""

import logging
from collections.abc import Callable
from typing import Any

from .. import metrics
from ..config import AdfConfig, get_config
from .model import DEFAULT_MAX_DEPTH, Mark, MarkType, Node, NodeType
from .plain_text import extract_plain_text

logger = logging.getLogger("jira_adf.adf.markdown")

__all__ = ["MarkdownRenderer", "render_markdown"]

BLOCK_SEPARATOR = "\n\n"
CODE_FENCE = "```"
BULLET_MARKER = "- "
RULE_LITERAL = "---"
QUOTE_PREFIX = "> "


class MarkdownRenderer:
    """ADF to Markdown renderer.

    Walks the tree with an explicit stack, so the depth limit alone bounds
    how much structure is rendered; the interpreter recursion limit does not.

    Stateless apart from its depth limit, so one instance can be shared
    between threads.

    Attributes:
        max_depth: Nesting level below which subtrees render as plain text

    Example:
        >>> renderer = MarkdownRenderer()
        >>> renderer.render({"type": "heading", "attrs": {"level": 2},
        ...                  "content": [{"type": "text", "text": "Notes"}]})
        '## Notes\\n\\n'
    """

    # One entry per NodeType member; checked at import time below
    _RENDERERS: dict[NodeType, str] = {
        NodeType.DOC: "_render_doc",
        NodeType.PARAGRAPH: "_render_paragraph",
        NodeType.TEXT: "_render_text",
        NodeType.CODE_BLOCK: "_render_code_block",
        NodeType.BULLET_LIST: "_render_bullet_list",
        NodeType.ORDERED_LIST: "_render_ordered_list",
        NodeType.LIST_ITEM: "_render_list_item",
        NodeType.HEADING: "_render_heading",
        NodeType.BLOCKQUOTE: "_render_blockquote",
        NodeType.HARD_BREAK: "_render_hard_break",
        NodeType.RULE: "_render_rule",
    }

    _MARK_WRAPPERS: dict[MarkType, Callable[[str, Mark], str]] = {
        MarkType.STRONG: lambda text, mark: f"**{text}**",
        MarkType.EM: lambda text, mark: f"*{text}*",
        MarkType.CODE: lambda text, mark: f"`{text}`",
        MarkType.STRIKE: lambda text, mark: f"~~{text}~~",
        MarkType.LINK: lambda text, mark: _wrap_link(text, mark),
    }

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.max_depth = max_depth

    @classmethod
    def from_config(cls, config: AdfConfig | None = None) -> "MarkdownRenderer":
        """Create a renderer using AdfConfig.adf_max_depth.

        Args:
            config: Optional AdfConfig instance. Uses get_config() if not provided.
        """
        config = config or get_config()
        return cls(max_depth=config.adf_max_depth)

    def render(self, value: Any) -> str:
        """Render a value to Markdown.

        Args:
            value: Node/Document, wire dict, legacy string, or None

        Returns:
            Markdown text. Strings pass through unchanged (legacy plain-text
            fields); None and unrecognized values yield an empty string.
        """
        if isinstance(value, str):
            return value
        if isinstance(value, dict):
            value = Node.from_wire(value, max_depth=self.max_depth)
        if not isinstance(value, Node):
            return ""
        return self._render_node(value, 0)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _render_node(self, root: Node, depth: int) -> str:
        # Post-order walk on an explicit stack. Every visited node leaves
        # exactly one string on ``results``; a node's rule runs once the
        # strings of all its children sit on top of that list.
        results: list[str] = []
        stack: list[tuple[Node, int, bool]] = [(root, depth, False)]
        while stack:
            node, level, expanded = stack.pop()
            if expanded:
                start = len(results) - len(node.children)
                parts = results[start:]
                del results[start:]
                results.append(self._apply_rule(node, parts))
                continue

            if level > self.max_depth:
                logger.warning(
                    "adf_depth_limit_exceeded",
                    extra={"stage": "render", "node_type": node.type, "max_depth": self.max_depth},
                )
                metrics.depth_limit_total.labels(stage="render").inc()
                results.append(extract_plain_text(node))
                continue

            if not node.children:
                results.append(self._apply_rule(node, []))
                continue

            stack.append((node, level, True))
            stack.extend((child, level + 1, False) for child in reversed(node.children))
        return results[0]

    def _apply_rule(self, node: Node, parts: list[str]) -> str:
        node_type = node.node_type
        if node_type is None:
            logger.debug(
                "adf_unknown_node_type",
                extra={"node_type": node.type, "has_content": bool(node.children)},
            )
            metrics.unknown_nodes_total.labels(node_type=node.type or "<missing>").inc()
            return "".join(parts)
        return getattr(self, self._RENDERERS[node_type])(node, parts)

    # ------------------------------------------------------------------
    # Block nodes
    # ------------------------------------------------------------------

    def _render_doc(self, node: Node, parts: list[str]) -> str:
        return "".join(parts)

    def _render_paragraph(self, node: Node, parts: list[str]) -> str:
        return "".join(parts) + BLOCK_SEPARATOR

    def _render_code_block(self, node: Node, parts: list[str]) -> str:
        language = node.attrs.get("language")
        if not isinstance(language, str):
            language = ""
        code = "".join(parts)
        return f"{CODE_FENCE}{language}\n{code}\n{CODE_FENCE}{BLOCK_SEPARATOR}"

    def _render_bullet_list(self, node: Node, parts: list[str]) -> str:
        return "".join(_list_entry(part, BULLET_MARKER) for part in parts)

    def _render_ordered_list(self, node: Node, parts: list[str]) -> str:
        # Numbering always restarts at 1; attrs such as "order" are ignored
        return "".join(
            _list_entry(part, f"{position}. ") for position, part in enumerate(parts, start=1)
        )

    def _render_list_item(self, node: Node, parts: list[str]) -> str:
        return _list_entry("".join(parts), "")

    def _render_heading(self, node: Node, parts: list[str]) -> str:
        level = node.attrs.get("level", 1)
        if not isinstance(level, int) or isinstance(level, bool):
            level = 1
        level = min(max(level, 1), 6)
        return f"{'#' * level} {''.join(parts)}{BLOCK_SEPARATOR}"

    def _render_blockquote(self, node: Node, parts: list[str]) -> str:
        body = "".join(parts).rstrip("\n")
        if not body:
            return ""
        quoted = "\n".join(f"{QUOTE_PREFIX}{line}" if line else ">" for line in body.split("\n"))
        return quoted + BLOCK_SEPARATOR

    def _render_hard_break(self, node: Node, parts: list[str]) -> str:
        return "\n"

    def _render_rule(self, node: Node, parts: list[str]) -> str:
        return RULE_LITERAL + BLOCK_SEPARATOR

    # ------------------------------------------------------------------
    # Inline nodes
    # ------------------------------------------------------------------

    def _render_text(self, node: Node, parts: list[str]) -> str:
        text = node.text or ""
        # Each mark wraps the previous result: the last mark is outermost
        for mark in node.marks:
            mark_type = mark.mark_type
            if mark_type is None:
                logger.debug("adf_unknown_mark_type", extra={"mark_type": mark.type})
                metrics.unknown_marks_total.labels(mark_type=mark.type).inc()
                continue
            text = self._MARK_WRAPPERS[mark_type](text, mark)
        return text


def _list_entry(rendered: str, marker: str) -> str:
    """Prefix one rendered list child with its marker.

    The child may be a listItem or any other node (a depth-collapsed text
    node, a stray paragraph); its output is kept either way.
    """
    body = rendered.strip()
    # Continuation lines line up under the marker so nested lists stay nested
    indent = " " * len(marker)
    lines = body.split("\n")
    body = "\n".join([lines[0]] + [f"{indent}{line}" if line else line for line in lines[1:]])
    return f"{marker}{body}{BLOCK_SEPARATOR}"


def _wrap_link(text: str, mark: Mark) -> str:
    href = mark.attrs.get("href")
    if not isinstance(href, str) or not href:
        return text
    return f"[{text}]({href})"


_missing = set(NodeType) - set(MarkdownRenderer._RENDERERS)
_missing |= set(MarkType) - set(MarkdownRenderer._MARK_WRAPPERS)
if _missing:
    raise RuntimeError(f"MarkdownRenderer has no rule for: {sorted(m.value for m in _missing)}")

_default_renderer = MarkdownRenderer()


def render_markdown(value: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Render an ADF value (or legacy string) to Markdown.

    Args:
        value: Node/Document, wire dict, legacy string, or None
        max_depth: Nesting limit for structured rendering

    Returns:
        Markdown text; never raises.

    Example:
        >>> render_markdown({"type": "doc", "version": 1, "content": [
        ...     {"type": "paragraph", "content": [
        ...         {"type": "text", "text": "Hello "},
        ...         {"type": "text", "text": "world", "marks": [{"type": "strong"}]},
        ...     ]},
        ... ]})
        'Hello **world**\\n\\n'
    """
    if max_depth == _default_renderer.max_depth:
        return _default_renderer.render(value)
    return MarkdownRenderer(max_depth=max_depth).render(value)
