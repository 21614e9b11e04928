"""Unit tests for Jira API client.

Tests JiraClient with:
- Authentication (Basic Auth base64 encoding)
- Read path (issue, comments pagination, worklogs, transitions)
- Write path (descriptions, comments and worklog notes sent as ADF documents)
- Error handling (HTTP errors, 404, timeouts)
- Context manager support
"""

import base64
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest
from pydantic import SecretStr

from jira_adf.config import AdfConfig
from jira_adf.connectors.jira.client import JiraClient, JiraClientError, JiraNotFoundError

# =============================================================================
# Test Fixtures
# =============================================================================


@pytest.fixture
def jira_client():
    """Create JiraClient instance for testing."""
    return JiraClient(
        instance_url="https://test.atlassian.net",
        email="test@example.com",
        api_token="test-token-123",
        delay_ms=0,  # No delay for tests
    )


def _response(payload=None, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.raise_for_status = Mock()
    return response


def _status_error(status_code):
    response = Mock()
    response.status_code = status_code
    return httpx.HTTPStatusError("error", request=Mock(), response=response)


# =============================================================================
# Configuration
# =============================================================================


class TestAuthentication:
    def test_credentials_encoding(self):
        client = JiraClient(
            instance_url="https://test.atlassian.net",
            email="user@example.com",
            api_token="secret123",
        )
        auth_part = client.auth_header.replace("Basic ", "")
        assert base64.b64decode(auth_part).decode() == "user@example.com:secret123"

    def test_headers_in_client(self, jira_client):
        headers = jira_client.client.headers
        assert headers["Authorization"] == jira_client.auth_header
        assert headers["Accept"] == "application/json"
        assert headers["Content-Type"] == "application/json"

    def test_base_url_stripped(self):
        client = JiraClient("https://test.atlassian.net/", "a@b.c", "t")
        assert client.base_url == "https://test.atlassian.net"

    def test_timeout_configuration(self, jira_client):
        timeout = jira_client.client.timeout
        assert timeout.connect == 3.0
        assert timeout.read == 15.0


class TestFromConfig:
    def test_builds_from_config(self, clean_env):
        config = AdfConfig(
            jira_instance_url="https://corp.atlassian.net/",
            jira_email="dev@corp.com",
            jira_api_token=SecretStr("tok"),
            jira_request_delay_ms=250,
        )
        client = JiraClient.from_config(config)
        assert client.base_url == "https://corp.atlassian.net"
        assert client.delay_ms == 250

    def test_missing_credentials(self, clean_env):
        config = AdfConfig(jira_instance_url="https://corp.atlassian.net")
        with pytest.raises(ValueError, match="JIRA_API_TOKEN"):
            JiraClient.from_config(config)


# =============================================================================
# Test Connection
# =============================================================================


class TestTestConnection:
    @pytest.mark.asyncio
    async def test_successful_connection(self, jira_client):
        with patch.object(
            jira_client.client,
            "get",
            new=AsyncMock(return_value=_response({"emailAddress": "test@example.com"})),
        ):
            result = await jira_client.test_connection()

        assert result == {"success": True, "user_email": "test@example.com", "error": None}

    @pytest.mark.asyncio
    async def test_connection_http_401(self, jira_client):
        with patch.object(
            jira_client.client, "get", new=AsyncMock(side_effect=_status_error(401))
        ):
            result = await jira_client.test_connection()

        assert result["success"] is False
        assert "401" in result["error"]

    @pytest.mark.asyncio
    async def test_connection_timeout(self, jira_client):
        with patch.object(
            jira_client.client,
            "get",
            new=AsyncMock(side_effect=httpx.TimeoutException("Timeout")),
        ):
            result = await jira_client.test_connection()

        assert result["success"] is False
        assert "timeout" in result["error"].lower()


# =============================================================================
# Read path
# =============================================================================


class TestGetIssue:
    @pytest.mark.asyncio
    async def test_returns_raw_description(self, jira_client, description_doc):
        issue = {"key": "PROJ-1", "fields": {"description": description_doc}}
        mock_get = AsyncMock(return_value=_response(issue))

        with patch.object(jira_client.client, "get", new=mock_get):
            result = await jira_client.get_issue("PROJ-1", fields=["summary", "description"])

        assert result["fields"]["description"] == description_doc
        url = mock_get.call_args.args[0]
        assert url == "https://test.atlassian.net/rest/api/3/issue/PROJ-1"
        assert mock_get.call_args.kwargs["params"] == {"fields": "summary,description"}

    @pytest.mark.asyncio
    async def test_not_found(self, jira_client):
        with (
            patch.object(jira_client.client, "get", new=AsyncMock(side_effect=_status_error(404))),
            pytest.raises(JiraNotFoundError, match="JIRA_GET_ISSUE_NOT_FOUND"),
        ):
            await jira_client.get_issue("NOPE-1")

    @pytest.mark.asyncio
    async def test_timeout(self, jira_client):
        with (
            patch.object(
                jira_client.client,
                "get",
                new=AsyncMock(side_effect=httpx.TimeoutException("Timeout")),
            ),
            pytest.raises(JiraClientError, match="JIRA_GET_ISSUE_TIMEOUT"),
        ):
            await jira_client.get_issue("PROJ-1")

    @pytest.mark.asyncio
    async def test_server_error_is_chained(self, jira_client):
        error = _status_error(500)
        with patch.object(jira_client.client, "get", new=AsyncMock(side_effect=error)):
            with pytest.raises(JiraClientError, match="JIRA_GET_ISSUE_ERROR") as excinfo:
                await jira_client.get_issue("PROJ-1")

        assert excinfo.value.__cause__ is error
        assert not isinstance(excinfo.value, JiraNotFoundError)


class TestGetComments:
    @pytest.mark.asyncio
    async def test_offset_pagination(self, jira_client):
        pages = [
            _response({"comments": [{"id": "1"}, {"id": "2"}], "total": 3}),
            _response({"comments": [{"id": "3"}], "total": 3}),
        ]
        mock_get = AsyncMock(side_effect=pages)

        with patch.object(jira_client.client, "get", new=mock_get):
            comments = await jira_client.get_comments("PROJ-1")

        assert [c["id"] for c in comments] == ["1", "2", "3"]
        assert mock_get.call_args_list[1].kwargs["params"]["startAt"] == 2

    @pytest.mark.asyncio
    async def test_stops_on_empty_page(self, jira_client):
        mock_get = AsyncMock(return_value=_response({"comments": [], "total": 10}))

        with patch.object(jira_client.client, "get", new=mock_get):
            comments = await jira_client.get_comments("PROJ-1")

        assert comments == []
        assert mock_get.call_count == 1

    @pytest.mark.asyncio
    async def test_http_error(self, jira_client):
        with (
            patch.object(
                jira_client.client,
                "get",
                new=AsyncMock(side_effect=httpx.ConnectError("Connection failed")),
            ),
            pytest.raises(JiraClientError, match="JIRA_GET_COMMENTS_ERROR"),
        ):
            await jira_client.get_comments("PROJ-1")


class TestWorklogsAndTransitions:
    @pytest.mark.asyncio
    async def test_get_worklogs(self, jira_client):
        payload = {"worklogs": [{"id": "w1", "timeSpent": "1h"}]}
        with patch.object(jira_client.client, "get", new=AsyncMock(return_value=_response(payload))):
            assert await jira_client.get_worklogs("PROJ-1") == payload["worklogs"]

    @pytest.mark.asyncio
    async def test_get_transitions(self, jira_client):
        payload = {"transitions": [{"id": "31", "name": "Done"}]}
        with patch.object(jira_client.client, "get", new=AsyncMock(return_value=_response(payload))):
            assert await jira_client.get_transitions("PROJ-1") == payload["transitions"]


# =============================================================================
# Write path
# =============================================================================


class TestCreateIssue:
    @pytest.mark.asyncio
    async def test_description_sent_as_adf(self, jira_client):
        mock_post = AsyncMock(return_value=_response({"id": "100", "key": "PROJ-9"}, 201))

        with patch.object(jira_client.client, "post", new=mock_post):
            result = await jira_client.create_issue(
                "PROJ",
                "Fix login",
                issue_type="Bug",
                description="Steps\n\nExpected result",
                priority="High",
                labels=["auth"],
                assignee_account_id="acc-1",
            )

        assert result["key"] == "PROJ-9"
        fields = mock_post.call_args.kwargs["json"]["fields"]
        assert fields["project"] == {"key": "PROJ"}
        assert fields["issuetype"] == {"name": "Bug"}
        assert fields["priority"] == {"name": "High"}
        assert fields["labels"] == ["auth"]
        assert fields["assignee"] == {"accountId": "acc-1"}
        assert fields["description"] == {
            "type": "doc",
            "version": 1,
            "content": [
                {"type": "paragraph", "content": [{"type": "text", "text": "Steps"}]},
                {"type": "paragraph", "content": [{"type": "text", "text": "Expected result"}]},
            ],
        }

    @pytest.mark.asyncio
    async def test_blank_description_omitted(self, jira_client):
        mock_post = AsyncMock(return_value=_response({"key": "PROJ-10"}, 201))

        with patch.object(jira_client.client, "post", new=mock_post):
            await jira_client.create_issue("PROJ", "Summary only", description="   ")

        fields = mock_post.call_args.kwargs["json"]["fields"]
        assert "description" not in fields
        assert fields["issuetype"] == {"name": "Task"}

    @pytest.mark.asyncio
    async def test_existing_document_passed_through(self, jira_client, description_doc):
        mock_post = AsyncMock(return_value=_response({"key": "PROJ-11"}, 201))

        with patch.object(jira_client.client, "post", new=mock_post):
            await jira_client.create_issue("PROJ", "S", description=description_doc)

        assert mock_post.call_args.kwargs["json"]["fields"]["description"] == description_doc


class TestUpdateIssue:
    @pytest.mark.asyncio
    async def test_sends_only_given_fields(self, jira_client):
        mock_put = AsyncMock(return_value=_response(None, 204))

        with patch.object(jira_client.client, "put", new=mock_put):
            updated = await jira_client.update_issue("PROJ-1", description="New text")

        assert updated == ["description"]
        body = mock_put.call_args.kwargs["json"]
        assert body["fields"]["description"]["type"] == "doc"
        assert body["fields"]["description"]["version"] == 1

    @pytest.mark.asyncio
    async def test_empty_update_rejected(self, jira_client):
        with pytest.raises(ValueError):
            await jira_client.update_issue("PROJ-1", description="  ")

    @pytest.mark.asyncio
    async def test_clearing_labels_is_an_update(self, jira_client):
        with patch.object(jira_client.client, "put", new=AsyncMock(return_value=_response(None, 204))):
            assert await jira_client.update_issue("PROJ-1", labels=[]) == ["labels"]


class TestAddComment:
    @pytest.mark.asyncio
    async def test_body_wrapped_in_document(self, jira_client, adf):
        mock_post = AsyncMock(return_value=_response({"id": "c1"}, 201))

        with patch.object(jira_client.client, "post", new=mock_post):
            await jira_client.add_comment("PROJ-1", adf.paragraph(adf.text("LGTM", "strong")))

        body = mock_post.call_args.kwargs["json"]["body"]
        assert body["type"] == "doc"
        assert body["version"] == 1
        assert body["content"][0]["content"][0]["marks"] == [{"type": "strong"}]

    @pytest.mark.asyncio
    async def test_empty_comment_rejected(self, jira_client):
        with pytest.raises(ValueError, match="empty"):
            await jira_client.add_comment("PROJ-1", "\n\n")


class TestAddWorklog:
    @pytest.mark.asyncio
    async def test_comment_converted(self, jira_client):
        mock_post = AsyncMock(return_value=_response({"id": "w1"}, 201))

        with patch.object(jira_client.client, "post", new=mock_post):
            await jira_client.add_worklog(
                "PROJ-1", "2h", comment="Pairing session", started="2026-02-07T09:00:00.000+0000"
            )

        payload = mock_post.call_args.kwargs["json"]
        assert payload["timeSpent"] == "2h"
        assert payload["started"] == "2026-02-07T09:00:00.000+0000"
        assert payload["comment"]["content"][0]["content"][0]["text"] == "Pairing session"

    @pytest.mark.asyncio
    async def test_without_comment(self, jira_client):
        mock_post = AsyncMock(return_value=_response({"id": "w2"}, 201))

        with patch.object(jira_client.client, "post", new=mock_post):
            await jira_client.add_worklog("PROJ-1", "30m")

        assert mock_post.call_args.kwargs["json"] == {"timeSpent": "30m"}


class TestTransitionIssue:
    @pytest.mark.asyncio
    async def test_with_comment(self, jira_client):
        mock_post = AsyncMock(return_value=_response(None, 204))

        with patch.object(jira_client.client, "post", new=mock_post):
            result = await jira_client.transition_issue("PROJ-1", "31", comment="Done")

        assert result is None
        payload = mock_post.call_args.kwargs["json"]
        assert payload["transition"] == {"id": "31"}
        assert payload["update"]["comment"][0]["add"]["body"]["type"] == "doc"

    @pytest.mark.asyncio
    async def test_failure(self, jira_client):
        with (
            patch.object(jira_client.client, "post", new=AsyncMock(side_effect=_status_error(400))),
            pytest.raises(JiraClientError, match="JIRA_TRANSITION_ISSUE_ERROR"),
        ):
            await jira_client.transition_issue("PROJ-1", "99")


# =============================================================================
# Context manager
# =============================================================================


class TestContextManager:
    @pytest.mark.asyncio
    async def test_closes_client(self):
        client = JiraClient("https://test.atlassian.net", "a@b.c", "t")
        with patch.object(client.client, "aclose", new=AsyncMock()) as mock_close:
            async with client as entered:
                assert entered is client
        mock_close.assert_awaited_once()
