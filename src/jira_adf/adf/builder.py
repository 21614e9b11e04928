"""Plain text to ADF document construction.

Used on the write path: free-form text supplied for descriptions, comments
and worklog notes must be sent to Jira as an ADF document.
"""

import re

from .model import ADF_VERSION, Document, Node, NodeType

__all__ = ["text_to_document"]

# One or more blank (or whitespace-only) lines
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def text_to_document(text: str | None) -> Document | None:
    """Build a minimal ADF document from plain text.

    Splits on blank lines; each non-empty trimmed chunk becomes a paragraph
    holding a single unmarked text node.

    Args:
        text: Plain text (may be None)

    Returns:
        Document with version 1, or None when the text has no content.
        Never returns an empty Document.

    Example:
        >>> doc = text_to_document("First\\n\\nSecond")
        >>> [p.children[0].text for p in doc.children]
        ['First', 'Second']
    """
    if not isinstance(text, str) or not text.strip():
        return None

    paragraphs = [chunk.strip() for chunk in _PARAGRAPH_BREAK.split(text)]
    paragraphs = [chunk for chunk in paragraphs if chunk]
    if not paragraphs:
        return None

    return Document(
        version=ADF_VERSION,
        content=tuple(
            Node(
                type=NodeType.PARAGRAPH.value,
                content=(Node(type=NodeType.TEXT.value, text=paragraph),),
            )
            for paragraph in paragraphs
        ),
    )
