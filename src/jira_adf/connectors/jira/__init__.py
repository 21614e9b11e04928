"""Jira Cloud integration package.

Provides the REST client and Markdown formatters built on the ADF converter.
"""

from .client import JiraClient, JiraClientError, JiraNotFoundError
from .formatters import (
    format_comments,
    format_description,
    format_issue,
    format_issue_created,
    format_issue_updated,
    format_worklogs,
)

__all__ = [
    "JiraClient",
    "JiraClientError",
    "JiraNotFoundError",
    "format_comments",
    "format_description",
    "format_issue",
    "format_issue_created",
    "format_issue_updated",
    "format_worklogs",
]
