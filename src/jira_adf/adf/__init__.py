"""Atlassian Document Format (ADF) model and converters.

Provides the node tree model, Markdown and plain-text rendering, and
construction of documents from plain text.
"""

from .builder import text_to_document
from .classify import Classification, classify
from .markdown import MarkdownRenderer, render_markdown
from .model import ADF_VERSION, DEFAULT_MAX_DEPTH, Document, Mark, MarkType, Node, NodeType
from .normalize import normalize_document, to_adf_payload
from .plain_text import extract_plain_text

__all__ = [
    "ADF_VERSION",
    "DEFAULT_MAX_DEPTH",
    "Classification",
    "Document",
    "Mark",
    "MarkType",
    "MarkdownRenderer",
    "Node",
    "NodeType",
    "classify",
    "extract_plain_text",
    "normalize_document",
    "render_markdown",
    "text_to_document",
    "to_adf_payload",
]
