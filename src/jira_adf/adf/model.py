"""Atlassian Document Format (ADF) document model.

Defines the node/mark types of the ADF tree and the versioned document
envelope, plus lenient conversion from and to the JSON wire format.

Wire parsing is total: documents arrive from Jira and are never trusted,
so malformed children, attrs and marks are dropped instead of raising.

Reference: https://developer.atlassian.com/cloud/jira/platform/apis/document/structure/
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .. import metrics

logger = logging.getLogger("jira_adf.adf.model")

__all__ = [
    "ADF_VERSION",
    "DEFAULT_MAX_DEPTH",
    "Document",
    "Mark",
    "MarkType",
    "Node",
    "NodeType",
]

ADF_VERSION = 1

# Nesting kept as structure when parsing or rendering untrusted trees
DEFAULT_MAX_DEPTH = 100


class NodeType(str, Enum):
    """Node kinds the converter knows how to render.

    Note: Uses (str, Enum) so members compare equal to the raw wire strings:
        NodeType.PARAGRAPH == "paragraph"  # True
    """

    DOC = "doc"
    PARAGRAPH = "paragraph"
    TEXT = "text"
    CODE_BLOCK = "codeBlock"
    BULLET_LIST = "bulletList"
    ORDERED_LIST = "orderedList"
    LIST_ITEM = "listItem"
    HEADING = "heading"
    BLOCKQUOTE = "blockquote"
    HARD_BREAK = "hardBreak"
    RULE = "rule"

    @classmethod
    def lookup(cls, value: str) -> "NodeType | None":
        """Return the member for a wire string, or None for unknown kinds."""
        try:
            return cls(value)
        except ValueError:
            return None


class MarkType(str, Enum):
    """Inline formatting marks with a Markdown rendering."""

    STRONG = "strong"
    EM = "em"
    CODE = "code"
    STRIKE = "strike"
    LINK = "link"

    @classmethod
    def lookup(cls, value: str) -> "MarkType | None":
        """Return the member for a wire string, or None for unknown marks."""
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class Mark:
    """Inline formatting annotation on a text node.

    Attributes:
        type: Raw mark kind from the wire (unknown kinds are kept as-is)
        attrs: Kind-specific metadata (e.g. ``href`` for links)
    """

    type: str
    attrs: dict[str, Any] = field(default_factory=dict)

    @property
    def mark_type(self) -> MarkType | None:
        return MarkType.lookup(self.type)

    @classmethod
    def from_wire(cls, value: Any) -> "Mark | None":
        """Parse a wire mark, returning None when it has no usable type."""
        if not isinstance(value, dict):
            return None
        mark_type = value.get("type")
        if not isinstance(mark_type, str):
            return None
        attrs = value.get("attrs")
        return cls(type=mark_type, attrs=dict(attrs) if isinstance(attrs, dict) else {})

    def to_wire(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type}
        if self.attrs:
            data["attrs"] = dict(self.attrs)
        return data


@dataclass(frozen=True)
class Node:
    """Single element of an ADF tree (block or inline).

    Attributes:
        type: Raw node kind from the wire; may be outside NodeType
        content: Child nodes for container kinds, None for leaves
        text: Literal inline content, only on ``text`` nodes
        attrs: Kind-specific metadata (``level``, ``language``, ...)
        marks: Formatting marks in application order, only on ``text`` nodes
    """

    type: str
    content: tuple["Node", ...] | None = None
    text: str | None = None
    attrs: dict[str, Any] = field(default_factory=dict)
    marks: tuple[Mark, ...] = ()

    def __post_init__(self) -> None:
        if self.text is not None and self.content:
            raise ValueError(f"{self.type} node cannot carry both text and content")

    @property
    def node_type(self) -> NodeType | None:
        """Known kind of this node, or None when the kind is unrecognized."""
        return NodeType.lookup(self.type)

    @property
    def children(self) -> tuple["Node", ...]:
        return self.content or ()

    @classmethod
    def from_wire(cls, value: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> "Node":
        """Build a Node from an untrusted wire dict.

        Never raises. Subtrees nested deeper than ``max_depth`` are collapsed
        into one text node holding their plain text.

        Args:
            value: Decoded JSON value, expected to be a node dict
            max_depth: Maximum nesting to keep as structure

        Returns:
            Parsed node. Non-dict input yields an empty unrecognized node.
        """
        return _parse_node(value, 0, max_depth)

    def to_wire(self) -> dict[str, Any]:
        """Dump to the ADF JSON shape, omitting absent optional fields."""
        return _dump_tree(self)

    def _wire_fields(self, children: list[dict[str, Any]]) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type}
        if self.attrs:
            data["attrs"] = dict(self.attrs)
        if self.content is not None:
            data["content"] = children
        if self.text is not None:
            data["text"] = self.text
        if self.marks:
            data["marks"] = [mark.to_wire() for mark in self.marks]
        return data


@dataclass(frozen=True)
class Document(Node):
    """Versioned ADF root envelope.

    Jira rejects document payloads without ``version``, so ``to_wire`` always
    emits ``{"type": "doc", "version": ..., "content": [...]}``.
    """

    type: str = NodeType.DOC.value
    content: tuple[Node, ...] | None = ()
    version: int = ADF_VERSION

    @classmethod
    def from_wire(cls, value: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> "Document":
        """Build a Document from a wire dict, keeping its version and children."""
        if not isinstance(value, dict):
            return cls()
        version = value.get("version")
        if not isinstance(version, int) or isinstance(version, bool):
            version = ADF_VERSION
        attrs = value.get("attrs")
        return cls(
            content=_parse_children(value.get("content"), 1, max_depth),
            attrs=dict(attrs) if isinstance(attrs, dict) else {},
            version=version,
        )

    def _wire_fields(self, children: list[dict[str, Any]]) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": NodeType.DOC.value,
            "version": self.version,
            "content": children,
        }
        if self.attrs:
            data["attrs"] = dict(self.attrs)
        return data


def _parse_children(value: Any, depth: int, max_depth: int) -> tuple[Node, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(
        _parse_node(child, depth, max_depth) for child in value if isinstance(child, dict)
    )


_ASSEMBLE = object()


def _parse_node(value: Any, depth: int, max_depth: int) -> Node:
    # Post-order build on an explicit stack: each container is assembled once
    # all of its children have been appended to its ``built`` list.
    root: list[Node] = []
    stack: list[tuple] = [(value, depth, root)]
    while stack:
        entry = stack.pop()
        if entry[0] is _ASSEMBLE:
            _, node_type, attrs, children, sink = entry
            sink.append(Node(type=node_type, content=tuple(children), attrs=attrs))
            continue

        raw, level, sink = entry
        parsed = _parse_shallow(raw, level, max_depth)
        if isinstance(parsed, Node):
            sink.append(parsed)
            continue

        node_type, attrs, raw_content = parsed
        built: list[Node] = []
        stack.append((_ASSEMBLE, node_type, attrs, built, sink))
        stack.extend(
            (child, level + 1, built) for child in reversed(raw_content) if isinstance(child, dict)
        )
    return root[0]


def _parse_shallow(value: Any, depth: int, max_depth: int) -> "Node | tuple[str, dict, list]":
    """Parse one level: a finished leaf Node, or (type, attrs, raw children)."""
    if not isinstance(value, dict):
        return Node(type="")

    node_type = value.get("type")
    if not isinstance(node_type, str):
        logger.debug("adf_node_missing_type", extra={"keys": [str(key) for key in list(value)[:10]]})
        node_type = ""

    attrs = value.get("attrs")
    attrs = dict(attrs) if isinstance(attrs, dict) else {}

    if node_type == NodeType.TEXT:
        text = value.get("text")
        raw_marks = value.get("marks")
        marks: tuple[Mark, ...] = ()
        if isinstance(raw_marks, list):
            parsed = (Mark.from_wire(mark) for mark in raw_marks)
            marks = tuple(mark for mark in parsed if mark is not None)
        return Node(
            type=node_type,
            text=text if isinstance(text, str) else None,
            attrs=attrs,
            marks=marks,
        )

    if depth >= max_depth:
        # Local import: plain_text imports this module
        from .plain_text import extract_plain_text

        logger.warning(
            "adf_depth_limit_exceeded",
            extra={"stage": "parse", "node_type": node_type, "max_depth": max_depth},
        )
        metrics.depth_limit_total.labels(stage="parse").inc()
        return Node(type=NodeType.TEXT.value, text=extract_plain_text(value))

    raw_content = value.get("content")
    if not isinstance(raw_content, list):
        return Node(type=node_type, attrs=attrs)
    return node_type, attrs, raw_content


def _dump_tree(root: Node) -> dict[str, Any]:
    """Iterative ``to_wire``: trees built in code carry no depth bound."""
    results: list[dict[str, Any]] = []
    stack: list[tuple[Node, bool]] = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if not expanded and node.content:
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.content))
            continue
        start = len(results) - (len(node.content) if expanded else 0)
        children = results[start:]
        del results[start:]
        results.append(node._wire_fields(children))
    return results[0]
