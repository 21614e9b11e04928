"""Jira Cloud REST API client.

Provides async httpx-based client for Jira Cloud API v3 with Basic Auth.
Rich-text fields are handed to the ADF converter on the way in and out:
- Read path: issue/comment/worklog bodies are returned exactly as Jira sends them
- Write path: descriptions, comments and worklog notes are normalized to ADF
  documents (``{"type": "doc", "version": 1, "content": [...]}``) before sending

Reference: https://developer.atlassian.com/cloud/jira/platform/rest/v3/intro/
"""

import asyncio
import base64
import logging
from typing import Any, NoReturn

import httpx

from ... import metrics
from ...adf import to_adf_payload
from ...config import AdfConfig

logger = logging.getLogger("jira_adf.jira.client")

API_PREFIX = "/rest/api/3"


class JiraClientError(Exception):
    """Raised when Jira API request fails.

    Wraps httpx errors and HTTP errors for consistent error handling.
    The message starts with an upper-case error code, e.g. ``JIRA_GET_ISSUE_TIMEOUT``.
    """

    pass


class JiraNotFoundError(JiraClientError):
    """Raised when Jira answers 404 for the requested issue or resource."""

    pass


class JiraClient:
    """Jira Cloud REST API client using httpx with Basic Auth.

    Uses long-lived httpx.AsyncClient with connection pooling.

    Attributes:
        base_url: Jira instance URL (e.g., https://company.atlassian.net)
        auth_header: Basic Auth header (base64 encoded email:api_token)
        delay_ms: Delay between paginated requests for rate limiting

    Example:
        >>> async with JiraClient("https://company.atlassian.net", "user@example.com", "token") as client:
        ...     issue = await client.get_issue("PROJ-123")
        ...     await client.add_comment("PROJ-123", "Deployed to staging")
    """

    def __init__(
        self,
        instance_url: str,
        email: str,
        api_token: str,
        delay_ms: int = 100,
    ) -> None:
        """Initialize Jira client with authentication.

        Args:
            instance_url: Jira instance URL (e.g., https://company.atlassian.net)
            email: Jira account email for Basic Auth
            api_token: Jira API token for authentication
            delay_ms: Delay between paginated requests in milliseconds (default: 100)
        """
        self.base_url = instance_url.rstrip("/")
        self.delay_ms = delay_ms

        credentials = f"{email}:{api_token}"
        encoded = base64.b64encode(credentials.encode()).decode()
        self.auth_header = f"Basic {encoded}"

        timeout_config = httpx.Timeout(
            connect=3.0,
            read=15.0,
            write=5.0,
            pool=3.0,
        )

        limits = httpx.Limits(
            max_keepalive_connections=20,
            max_connections=100,
            keepalive_expiry=10.0,
        )

        self.client = httpx.AsyncClient(
            timeout=timeout_config,
            limits=limits,
            headers={
                "Authorization": self.auth_header,
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
        )

    @classmethod
    def from_config(cls, config: AdfConfig) -> "JiraClient":
        """Build a client from loaded configuration.

        Raises:
            ValueError: If the Jira URL, email or token is not configured
        """
        if not config.jira_configured:
            raise ValueError(
                "JIRA_INSTANCE_URL, JIRA_EMAIL and JIRA_API_TOKEN must be set"
            )
        return cls(
            instance_url=config.jira_instance_url,
            email=config.jira_email,
            api_token=config.jira_api_token.get_secret_value(),
            delay_ms=config.jira_request_delay_ms,
        )

    def _url(self, path: str) -> str:
        return f"{self.base_url}{API_PREFIX}{path}"

    def _fail(self, operation: str, error: httpx.HTTPError, **context: Any) -> NoReturn:
        """Log an httpx failure and re-raise it as JiraClientError."""
        code = f"JIRA_{operation.upper()}"
        if isinstance(error, httpx.TimeoutException):
            logger.error(f"jira_{operation}_timeout", extra={**context, "error": str(error)})
            metrics.jira_requests_total.labels(operation=operation, status="timeout").inc()
            raise JiraClientError(f"{code}_TIMEOUT") from error

        if (
            isinstance(error, httpx.HTTPStatusError)
            and error.response.status_code == 404
        ):
            logger.warning(f"jira_{operation}_not_found", extra=context)
            metrics.jira_requests_total.labels(operation=operation, status="not_found").inc()
            raise JiraNotFoundError(f"{code}_NOT_FOUND: {error}") from error

        logger.error(f"jira_{operation}_error", extra={**context, "error": str(error)})
        metrics.jira_requests_total.labels(operation=operation, status="failed").inc()
        raise JiraClientError(f"{code}_ERROR: {error}") from error

    def _succeeded(self, operation: str) -> None:
        metrics.jira_requests_total.labels(operation=operation, status="success").inc()

    async def test_connection(self) -> dict[str, Any]:
        """Test Jira API connectivity and authentication.

        Sends GET request to /rest/api/3/myself to verify credentials.

        Returns:
            dict with keys:
                - success (bool): True if authenticated successfully
                - user_email (str | None): Authenticated user's email
                - error (str | None): Error message if failed
        """
        try:
            response = await self.client.get(self._url("/myself"))
            response.raise_for_status()
            data = response.json()
            return {
                "success": True,
                "user_email": data.get("emailAddress"),
                "error": None,
            }
        except httpx.TimeoutException as e:
            logger.error("jira_connection_timeout", extra={"error": str(e)})
            return {
                "success": False,
                "user_email": None,
                "error": f"Connection timeout: {e}",
            }
        except httpx.HTTPStatusError as e:
            logger.error(
                "jira_connection_failed",
                extra={"status_code": e.response.status_code, "error": str(e)},
            )
            return {
                "success": False,
                "user_email": None,
                "error": f"HTTP {e.response.status_code}: {e}",
            }
        except httpx.HTTPError as e:
            logger.error("jira_connection_error", extra={"error": str(e)})
            return {
                "success": False,
                "user_email": None,
                "error": f"Connection error: {e}",
            }

    # =========================================================================
    # Read path
    # =========================================================================

    async def get_issue(
        self, issue_key: str, fields: list[str] | None = None
    ) -> dict[str, Any]:
        """Get a single issue.

        The ``description`` and ``environment`` fields are returned untouched:
        ADF dicts on API v3, plain strings on legacy data.

        Args:
            issue_key: Jira issue key (e.g., 'PROJ-123')
            fields: Optional list of field names to fetch (default: all)

        Returns:
            Issue dict (full Jira API response object)

        Raises:
            JiraNotFoundError: If the issue does not exist
            JiraClientError: If request fails
        """
        params = {"fields": ",".join(fields)} if fields else None
        try:
            response = await self.client.get(
                self._url(f"/issue/{issue_key}"), params=params
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._fail("get_issue", e, issue_key=issue_key)
        self._succeeded("get_issue")
        return response.json()

    async def get_comments(self, issue_key: str) -> list[dict[str, Any]]:
        """Get all comments for an issue using offset-based pagination.

        Uses /rest/api/3/issue/{key}/comment with startAt/maxResults pagination.

        Args:
            issue_key: Jira issue key (e.g., 'PROJ-123')

        Returns:
            List of comment dicts with ADF ``body`` values

        Raises:
            JiraClientError: If request fails
        """
        all_comments: list[dict[str, Any]] = []
        start_at = 0
        max_results = 50
        total = None

        try:
            while total is None or start_at < total:
                response = await self.client.get(
                    self._url(f"/issue/{issue_key}/comment"),
                    params={"startAt": start_at, "maxResults": max_results},
                )
                response.raise_for_status()
                data = response.json()

                comments = data.get("comments", [])
                all_comments.extend(comments)

                total = data.get("total", 0)
                start_at += len(comments)
                if not comments:
                    break

                logger.debug(
                    "jira_get_comments_page",
                    extra={
                        "issue_key": issue_key,
                        "page_comments": len(comments),
                        "total_so_far": len(all_comments),
                        "total": total,
                    },
                )

                if start_at < total and self.delay_ms > 0:
                    await asyncio.sleep(self.delay_ms / 1000.0)
        except httpx.HTTPError as e:
            self._fail("get_comments", e, issue_key=issue_key)

        self._succeeded("get_comments")
        return all_comments

    async def get_worklogs(self, issue_key: str) -> list[dict[str, Any]]:
        """Get worklogs for an issue.

        Raises:
            JiraClientError: If request fails
        """
        try:
            response = await self.client.get(self._url(f"/issue/{issue_key}/worklog"))
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._fail("get_worklogs", e, issue_key=issue_key)
        self._succeeded("get_worklogs")
        return response.json().get("worklogs", [])

    async def get_transitions(self, issue_key: str) -> list[dict[str, Any]]:
        """Get the workflow transitions currently available for an issue.

        Raises:
            JiraClientError: If request fails
        """
        try:
            response = await self.client.get(
                self._url(f"/issue/{issue_key}/transitions")
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._fail("get_transitions", e, issue_key=issue_key)
        self._succeeded("get_transitions")
        return response.json().get("transitions", [])

    # =========================================================================
    # Write path
    # =========================================================================

    async def create_issue(
        self,
        project_key: str,
        summary: str,
        issue_type: str = "Task",
        description: Any = None,
        priority: str | None = None,
        labels: list[str] | None = None,
        assignee_account_id: str | None = None,
    ) -> dict[str, Any]:
        """Create an issue.

        Args:
            project_key: Jira project key (e.g., 'PROJ')
            summary: Issue summary line
            issue_type: Issue type name (default: Task)
            description: Plain text, ADF node or ADF document; omitted from
                the request when it holds no content
            priority: Optional priority name
            labels: Optional labels
            assignee_account_id: Optional assignee account ID

        Returns:
            Created issue reference (id, key, self)

        Raises:
            JiraClientError: If request fails
        """
        fields: dict[str, Any] = {
            "project": {"key": project_key},
            "summary": summary,
            "issuetype": {"name": issue_type},
        }
        description_adf = to_adf_payload(description)
        if description_adf is not None:
            fields["description"] = description_adf
        if priority:
            fields["priority"] = {"name": priority}
        if labels:
            fields["labels"] = labels
        if assignee_account_id:
            fields["assignee"] = {"accountId": assignee_account_id}

        try:
            response = await self.client.post(
                self._url("/issue"), json={"fields": fields}
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._fail("create_issue", e, project_key=project_key)

        created = response.json()
        self._succeeded("create_issue")
        logger.info(
            "jira_issue_created",
            extra={"project_key": project_key, "issue_key": created.get("key")},
        )
        return created

    async def update_issue(
        self,
        issue_key: str,
        summary: str | None = None,
        description: Any = None,
        priority: str | None = None,
        labels: list[str] | None = None,
    ) -> list[str]:
        """Update fields of an existing issue.

        Args:
            issue_key: Jira issue key (e.g., 'PROJ-123')
            summary: New summary
            description: New description (plain text, ADF node or document)
            priority: New priority name
            labels: Replacement label list

        Returns:
            Names of the fields that were sent

        Raises:
            ValueError: If no field carries a value
            JiraClientError: If request fails
        """
        fields: dict[str, Any] = {}
        if summary:
            fields["summary"] = summary
        description_adf = to_adf_payload(description)
        if description_adf is not None:
            fields["description"] = description_adf
        if priority:
            fields["priority"] = {"name": priority}
        if labels is not None:
            fields["labels"] = labels

        if not fields:
            raise ValueError("update_issue requires at least one field to update")

        try:
            response = await self.client.put(
                self._url(f"/issue/{issue_key}"), json={"fields": fields}
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._fail("update_issue", e, issue_key=issue_key)

        self._succeeded("update_issue")
        logger.info(
            "jira_issue_updated",
            extra={"issue_key": issue_key, "fields": sorted(fields)},
        )
        return sorted(fields)

    async def add_comment(self, issue_key: str, body: Any) -> dict[str, Any]:
        """Add a comment to an issue.

        Args:
            issue_key: Jira issue key (e.g., 'PROJ-123')
            body: Plain text, ADF node or ADF document

        Returns:
            Created comment dict

        Raises:
            ValueError: If the body has no content
            JiraClientError: If request fails
        """
        body_adf = to_adf_payload(body)
        if body_adf is None:
            raise ValueError("Comment body must not be empty")

        try:
            response = await self.client.post(
                self._url(f"/issue/{issue_key}/comment"), json={"body": body_adf}
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._fail("add_comment", e, issue_key=issue_key)

        self._succeeded("add_comment")
        return response.json()

    async def add_worklog(
        self,
        issue_key: str,
        time_spent: str,
        comment: Any = None,
        started: str | None = None,
    ) -> dict[str, Any]:
        """Log work on an issue.

        Args:
            issue_key: Jira issue key (e.g., 'PROJ-123')
            time_spent: Jira duration string (e.g., '2h 30m')
            comment: Optional worklog note (plain text or ADF)
            started: Optional start timestamp ('2026-02-07T09:00:00.000+0000')

        Returns:
            Created worklog dict

        Raises:
            JiraClientError: If request fails
        """
        payload: dict[str, Any] = {"timeSpent": time_spent}
        comment_adf = to_adf_payload(comment)
        if comment_adf is not None:
            payload["comment"] = comment_adf
        if started:
            payload["started"] = started

        try:
            response = await self.client.post(
                self._url(f"/issue/{issue_key}/worklog"), json=payload
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._fail("add_worklog", e, issue_key=issue_key)

        self._succeeded("add_worklog")
        return response.json()

    async def transition_issue(
        self, issue_key: str, transition_id: str, comment: Any = None
    ) -> None:
        """Move an issue through a workflow transition, optionally commenting.

        Raises:
            JiraClientError: If request fails
        """
        payload: dict[str, Any] = {"transition": {"id": transition_id}}
        comment_adf = to_adf_payload(comment)
        if comment_adf is not None:
            payload["update"] = {"comment": [{"add": {"body": comment_adf}}]}

        try:
            response = await self.client.post(
                self._url(f"/issue/{issue_key}/transitions"), json=payload
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._fail("transition_issue", e, issue_key=issue_key)

        self._succeeded("transition_issue")
        logger.info(
            "jira_issue_transitioned",
            extra={"issue_key": issue_key, "transition_id": transition_id},
        )

    async def close(self) -> None:
        """Close the HTTP client connection."""
        if hasattr(self, "client") and self.client is not None:
            await self.client.aclose()

    async def __aenter__(self) -> "JiraClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
