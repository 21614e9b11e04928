"""Shallow classification of untrusted field values.

Jira returns rich-text fields either as ADF documents or, for legacy
fields and older API versions, as plain strings. ``classify`` decides which
shape a value has without walking its children.
"""

from enum import Enum
from typing import Any

from .model import Document, Node, NodeType

__all__ = ["Classification", "classify"]


class Classification(str, Enum):
    """Shape of a raw rich-text field value."""

    DOCUMENT = "document"
    NODE = "node"
    STRING = "string"
    ABSENT = "absent"
    UNRECOGNIZED = "unrecognized"


def classify(value: Any) -> Classification:
    """Classify a value as document, bare node, string, absent or unrecognized.

    Pure and total: inspects only the top level and never raises.

    Args:
        value: Model instance or decoded JSON value

    Returns:
        Exactly one Classification member.
    """
    if value is None:
        return Classification.ABSENT
    if isinstance(value, str):
        return Classification.STRING
    if isinstance(value, Document):
        return Classification.DOCUMENT
    if isinstance(value, Node):
        if value.type == NodeType.DOC:
            return Classification.UNRECOGNIZED
        return Classification.NODE
    if isinstance(value, dict):
        return _classify_dict(value)
    return Classification.UNRECOGNIZED


def _classify_dict(value: dict) -> Classification:
    node_type = value.get("type")
    if not isinstance(node_type, str):
        return Classification.UNRECOGNIZED
    if node_type != NodeType.DOC:
        return Classification.NODE

    version = value.get("version")
    # bool is an int subclass but never a valid version
    has_version = isinstance(version, int) and not isinstance(version, bool)
    if has_version and isinstance(value.get("content"), list):
        return Classification.DOCUMENT
    return Classification.UNRECOGNIZED
