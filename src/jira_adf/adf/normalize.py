"""Normalization of raw rich-text values into canonical ADF documents.

The gate between Jira/legacy data and the rest of the converter: callers
pass whatever they hold (string, bare node, document, nothing) and get back
a Document or None.
"""

from typing import Any

from .builder import text_to_document
from .classify import Classification, classify
from .model import ADF_VERSION, DEFAULT_MAX_DEPTH, Document, Node

__all__ = ["normalize_document", "to_adf_payload"]


def normalize_document(value: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> Document | None:
    """Convert a raw value to a canonical ADF Document.

    - None -> None (no document is fabricated)
    - Document -> returned as-is (wire dicts are parsed, structure kept)
    - bare Node -> wrapped in a fresh version 1 Document
    - string -> paragraphs built by text_to_document
    - anything else -> None

    Args:
        value: Raw field value or model instance
        max_depth: Nesting limit applied when parsing wire dicts

    Returns:
        Document, or None when the value holds no document.
    """
    classification = classify(value)

    if classification is Classification.DOCUMENT:
        if isinstance(value, Document):
            return value
        return Document.from_wire(value, max_depth=max_depth)

    if classification is Classification.NODE:
        node = value if isinstance(value, Node) else Node.from_wire(value, max_depth=max_depth)
        return Document(version=ADF_VERSION, content=(node,))

    if classification is Classification.STRING:
        return text_to_document(value)

    return None


def to_adf_payload(value: Any) -> dict[str, Any] | None:
    """Normalize a value and dump it in the wire shape Jira expects.

    Example:
        >>> to_adf_payload("Fix the login page")
        {'type': 'doc', 'version': 1, 'content': [{'type': 'paragraph', 'content': [{'type': 'text', 'text': 'Fix the login page'}]}]}
    """
    document = normalize_document(value)
    if document is None:
        return None
    return document.to_wire()
