"""Markdown formatters for Jira issues, comments and worklogs.

Embeds the ADF converter's output into the Markdown cards returned to the
caller. Handles nullable fields gracefully (team-managed projects omit
priority, assignee and labels).
"""

from typing import Any

from ...adf import (
    Classification,
    classify,
    extract_plain_text,
    normalize_document,
    render_markdown,
)
from ...adf.model import Node
from ...config import get_config

__all__ = [
    "format_comments",
    "format_description",
    "format_issue",
    "format_issue_created",
    "format_issue_updated",
    "format_worklogs",
]


def _name(obj: Any, key: str, default: str) -> str:
    if isinstance(obj, dict) and obj.get(key):
        return str(obj[key])
    return default


def _date(value: Any) -> str:
    # "2026-02-07T14:00:00.000+0000" -> "2026-02-07"
    return value[:10] if isinstance(value, str) else ""


def _resolve_depth(max_depth: int | None) -> int:
    return get_config().adf_max_depth if max_depth is None else max_depth


def _has_content(value: Any) -> bool:
    classification = classify(value)
    if classification is Classification.STRING:
        return bool(value.strip())
    if classification is Classification.DOCUMENT:
        content = value.content if isinstance(value, Node) else value.get("content")
        return bool(content)
    return classification is Classification.NODE


def format_description(description: Any, max_depth: int | None = None) -> str:
    """Format the description section of an issue card.

    Args:
        description: Raw description field (ADF document, legacy string, or None)
        max_depth: Nesting limit passed to the Markdown renderer
            (defaults to AdfConfig.adf_max_depth)

    Returns:
        ``"## Description\\n{markdown}\\n\\n"``, or an empty string when the
        description is absent, blank, or a document without content.
    """
    if not _has_content(description):
        return ""
    max_depth = _resolve_depth(max_depth)
    return f"## Description\n{render_markdown(description, max_depth=max_depth)}\n\n"


def format_issue(issue: dict[str, Any] | None, max_depth: int | None = None) -> str:
    """Format a Jira issue as a Markdown card.

    Format:
        # PROJ-123: Fix login bug

        **Status:** In Progress
        **Priority:** High
        **Assignee:** Bob

        ## Description
        {ADF-rendered description}

        ## Labels
        security, auth

        ## Dates
        **Created:** 2026-02-01
        **Updated:** 2026-02-07

        [View in JIRA](https://company.atlassian.net/browse/PROJ-123)

    Issues without ``fields`` produce a fallback header only.

    Args:
        issue: Raw Jira API issue response dict
        max_depth: Nesting limit passed to the Markdown renderer
            (defaults to AdfConfig.adf_max_depth)

    Returns:
        Markdown card text
    """
    if not issue:
        return ""

    key = issue.get("key") or ""
    fields = issue.get("fields")
    if not isinstance(fields, dict) or not fields:
        header = f"# {key}: No Summary\n\n" if key else ""
        return (
            f"{header}**Status:** Unknown\n**Priority:** None\n**Assignee:** Unassigned\n\n"
        )

    summary = fields.get("summary") or "No Summary"
    status = _name(fields.get("status"), "name", "Unknown")
    priority = _name(fields.get("priority"), "name", "None")
    assignee = _name(fields.get("assignee"), "displayName", "Unassigned")

    markdown = f"# {key}: {summary}\n\n"
    markdown += f"**Status:** {status}\n**Priority:** {priority}\n**Assignee:** {assignee}\n\n"
    markdown += format_description(fields.get("description"), max_depth=max_depth)

    labels = fields.get("labels")
    if labels:
        markdown += f"## Labels\n{', '.join(labels)}\n\n"

    created = _date(fields.get("created"))
    updated = _date(fields.get("updated"))
    if created or updated:
        markdown += "## Dates\n"
        if created:
            markdown += f"**Created:** {created}\n"
        if updated:
            markdown += f"**Updated:** {updated}\n"
        markdown += "\n"

    self_url = issue.get("self")
    if isinstance(self_url, str) and "/rest/" in self_url and key:
        base_url = self_url.split("/rest/")[0]
        markdown += f"[View in JIRA]({base_url}/browse/{key})\n"

    return markdown


def format_comments(
    issue_key: str,
    comments: list[dict[str, Any]],
    max_depth: int | None = None,
) -> str:
    """Format an issue's comment thread.

    Format:
        # Comments for PROJ-123

        ## Comment by Charlie (2026-02-07)
        {ADF-rendered body}

    Args:
        issue_key: Jira issue key
        comments: Raw Jira API comment dicts
        max_depth: Nesting limit passed to the Markdown renderer
            (defaults to AdfConfig.adf_max_depth)

    Returns:
        Markdown thread text
    """
    if not comments:
        return f"No comments found for {issue_key}."

    max_depth = _resolve_depth(max_depth)
    sections = [f"# Comments for {issue_key}\n"]
    for comment in comments:
        author = _name(comment.get("author"), "displayName", "Unknown")
        created = _date(comment.get("created"))
        body = comment.get("body")
        body_md = render_markdown(body, max_depth=max_depth).strip() if _has_content(body) else ""
        sections.append(f"## Comment by {author} ({created})\n{body_md or '(Empty comment)'}\n")

    return "\n".join(sections)


def format_worklogs(issue_key: str, worklogs: list[dict[str, Any]]) -> str:
    """Format worklog entries, with worklog comments flattened to plain text."""
    if not worklogs:
        return f"No worklogs found for {issue_key}."

    lines = [f"# Worklogs for {issue_key}", ""]
    for worklog in worklogs:
        author = _name(worklog.get("author"), "displayName", "Unknown")
        time_spent = worklog.get("timeSpent") or "0m"
        started = _date(worklog.get("started"))
        line = f"- **{time_spent}** by {author} ({started})"
        note = extract_plain_text(worklog.get("comment")).strip()
        if note:
            line += f": {note}"
        lines.append(line)

    return "\n".join(lines) + "\n"


def format_issue_created(
    issue_ref: dict[str, Any],
    summary: str,
    description: Any = None,
    max_depth: int | None = None,
) -> str:
    """Summarize a newly created issue, previewing the description as submitted."""
    max_depth = _resolve_depth(max_depth)
    key = issue_ref.get("key", "UNKNOWN")
    markdown = f"# Issue Created: {key}\n\n**Summary:** {summary}\n\n"
    markdown += format_description(
        normalize_document(description, max_depth=max_depth), max_depth=max_depth
    )

    self_url = issue_ref.get("self")
    if isinstance(self_url, str) and "/rest/" in self_url:
        markdown += f"[View in JIRA]({self_url.split('/rest/')[0]}/browse/{key})\n"
    return markdown


def format_issue_updated(issue_key: str, updated_fields: list[str]) -> str:
    """Summarize which fields of an issue were updated."""
    if not updated_fields:
        return f"# Issue {issue_key}\n\nNo fields were updated.\n"
    field_lines = "\n".join(f"- {name}" for name in updated_fields)
    return f"# Issue Updated: {issue_key}\n\n**Updated fields:**\n{field_lines}\n"
