"""Shared pytest fixtures for Jira ADF converter tests.

Fixture Organization:
    - ADF builders: small helpers producing wire-format node dicts
    - Sample documents: realistic Jira description/comment bodies
    - Config isolation: environment cleanup around pydantic-settings
"""

import pytest

from jira_adf.config import reset_config

# =============================================================================
# ADF wire builders
# =============================================================================


def text(value, *marks):
    """Wire text node; marks given as type strings or full mark dicts."""
    node = {"type": "text", "text": value}
    if marks:
        node["marks"] = [m if isinstance(m, dict) else {"type": m} for m in marks]
    return node


def paragraph(*children):
    return {"type": "paragraph", "content": list(children)}


def doc(*children, version=1):
    return {"type": "doc", "version": version, "content": list(children)}


def list_item(*children):
    return {"type": "listItem", "content": list(children)}


@pytest.fixture
def adf():
    """Expose the wire builders to tests as ``adf.text(...)``, ``adf.doc(...)``."""

    class _Builders:
        pass

    builders = _Builders()
    builders.text = text
    builders.paragraph = paragraph
    builders.doc = doc
    builders.list_item = list_item
    return builders


# =============================================================================
# Sample documents
# =============================================================================


@pytest.fixture
def description_doc():
    """Typical Jira Cloud description: heading, paragraph, bullet list, code."""
    return doc(
        {
            "type": "heading",
            "attrs": {"level": 2},
            "content": [text("Steps to reproduce")],
        },
        paragraph(text("Login fails with "), text("401", "code"), text(" after reset.")),
        {
            "type": "bulletList",
            "content": [
                list_item(paragraph(text("Open the login page"))),
                list_item(paragraph(text("Submit valid credentials"))),
            ],
        },
        {
            "type": "codeBlock",
            "attrs": {"language": "python"},
            "content": [text("assert response.status_code == 200")],
        },
    )


# =============================================================================
# Config isolation
# =============================================================================


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove converter/Jira env vars and run from an empty directory (no .env)."""
    for key in [
        "JIRA_ADF_LOG_LEVEL",
        "JIRA_ADF_LOG_FORMAT",
        "ADF_MAX_DEPTH",
        "JIRA_INSTANCE_URL",
        "JIRA_EMAIL",
        "JIRA_API_TOKEN",
        "JIRA_REQUEST_DELAY_MS",
    ]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield monkeypatch
    reset_config()
