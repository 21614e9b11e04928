"""Jira ADF - Atlassian Document Format conversion for Jira integrations.

Provides:
- ADF document model with lenient parsing of Jira responses
- Markdown and plain-text rendering of ADF trees
- Plain text to ADF construction for issue/comment/worklog submission
- Async Jira Cloud client and Markdown formatters built on the converter

Python Version: 3.10+ required
"""

# Logging Configuration - configure before other imports
from .logging_config import StructuredFormatter, configure_logging

configure_logging()

from .__version__ import __version__  # noqa: E402
from .adf import (  # noqa: E402
    Classification,
    Document,
    Mark,
    MarkType,
    Node,
    NodeType,
    classify,
    extract_plain_text,
    normalize_document,
    render_markdown,
    text_to_document,
    to_adf_payload,
)
from .config import AdfConfig, get_config, reset_config  # noqa: E402

__all__ = [
    "AdfConfig",
    "Classification",
    "Document",
    "Mark",
    "MarkType",
    "Node",
    "NodeType",
    "StructuredFormatter",
    "__version__",
    "classify",
    "configure_logging",
    "extract_plain_text",
    "get_config",
    "normalize_document",
    "render_markdown",
    "reset_config",
    "text_to_document",
    "to_adf_payload",
]
