"""JIRA Cloud REST client, the offline mock issue store, and chat formatting."""

import logging
from datetime import UTC, datetime
from typing import TypedDict

import httpx

from incident_console.config import Settings
from incident_console.data.models import Incident, Telemetry, normalize_priority
from incident_console.errors import ConfigurationError, UpstreamError
from incident_console.observability.metrics import UPSTREAM_CALLS_TOTAL
from incident_console.query.incidents import TIMESTAMP_FORMAT
from incident_console.query.jql import DEFAULT_PROJECT_KEY, translate_to_jql

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15
MAX_RESULTS = 50
SEARCH_FIELDS = "summary,status,priority,assignee,created,updated,issuetype,description"


# --- Response TypedDicts ---


class JiraStatus(TypedDict, total=False):
    name: str


class JiraPriority(TypedDict, total=False):
    name: str


class JiraUser(TypedDict, total=False):
    displayName: str
    emailAddress: str


class JiraIssueFields(TypedDict, total=False):
    summary: str
    description: object
    status: JiraStatus
    priority: JiraPriority
    assignee: JiraUser | None
    created: str
    updated: str


class JiraIssue(TypedDict, total=False):
    key: str
    fields: JiraIssueFields


# --- Mock issue store ---


def _mock_issue(key: str, summary: str, status: str, priority: str, assignee: str | None) -> JiraIssue:
    now = datetime.now(UTC).isoformat()
    fields: JiraIssueFields = {
        "summary": summary,
        "status": {"name": status},
        "priority": {"name": priority},
        "assignee": {"displayName": assignee} if assignee else None,
        "created": now,
        "updated": now,
    }
    return {"key": key, "fields": fields}


def mock_issues() -> list[JiraIssue]:
    """Issues served when no JIRA instance is configured."""
    return [
        _mock_issue("KAN-4", "High CPU usage in production environment", "In Progress", "High", "pavani Racham"),
        _mock_issue("KAN-5", "Memory leak in worker nodes", "Open", "Medium", "pavani Racham"),
        _mock_issue("KAN-3", "Database connection timeout", "Done", "Low", "naresh vemuri"),
        _mock_issue("KAN-1", "Database connection timeout", "Done", "Low", None),
    ]


_LIST_ALL_QUERIES = ("jira", "ticket", "issue")
_LIST_ALL_VERBS = ("show", "find", "get")


def _fields(issue: JiraIssue) -> JiraIssueFields:
    return issue.get("fields") or {}


def _status_name(issue: JiraIssue) -> str:
    return (_fields(issue).get("status") or {}).get("name", "")


def _priority_name(issue: JiraIssue) -> str:
    return (_fields(issue).get("priority") or {}).get("name", "")


def _assignee_name(issue: JiraIssue) -> str | None:
    assignee = _fields(issue).get("assignee")
    return assignee.get("displayName") if assignee else None


def _matches_mock_issue(issue: JiraIssue, query_lower: str) -> bool:
    summary = (_fields(issue).get("summary") or "").lower()
    status = _status_name(issue).lower()
    priority = _priority_name(issue).lower()
    assignee = (_assignee_name(issue) or "").lower()

    if query_lower in summary or query_lower in status or query_lower in priority:
        return True
    if assignee and query_lower in assignee:
        return True
    if query_lower in issue.get("key", "").lower():
        return True

    if "high" in query_lower and "high" in priority:
        return True
    if "open" in query_lower and status == "open":
        return True
    if ("progress" in query_lower or "ongoing" in query_lower) and status == "in progress":
        return True
    return ("done" in query_lower or "completed" in query_lower) and status == "done"


def search_mock_issues(query: str, issues: list[JiraIssue] | None = None) -> list[JiraIssue]:
    """Filter the mock store the way the offline console does.

    Blank queries, a bare domain word, or anything containing show/find/get
    list every issue. Otherwise an issue is kept when the whole query is a
    substring of its summary, status, priority, assignee or key, or when a
    status/priority keyword in the query agrees with the issue.
    """
    issues = mock_issues() if issues is None else issues
    query_lower = query.strip().lower()
    if not query_lower or query_lower in _LIST_ALL_QUERIES or any(verb in query_lower for verb in _LIST_ALL_VERBS):
        return list(issues)
    return [issue for issue in issues if _matches_mock_issue(issue, query_lower)]


# --- Client ---


class JiraClient:
    """Thin async wrapper over the JIRA Cloud v3 REST API with basic auth."""

    def __init__(
        self,
        base_url: str = "",
        email: str = "",
        api_token: str = "",
        project_key: str = DEFAULT_PROJECT_KEY,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.email = email
        self.api_token = api_token
        self.project_key = project_key
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "JiraClient":
        return cls(
            base_url=settings.jira_base_url,
            email=settings.jira_email,
            api_token=settings.jira_api_token,
            project_key=settings.jira_project_key,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.email and self.api_token)

    async def _request(
        self,
        method: str,
        path: str,
        failure: str,
        params: dict[str, str | int] | None = None,
        json: object = None,
    ) -> object:
        """Send an authenticated request; raise UpstreamError carrying JIRA's first error message."""
        if not self.is_configured:
            raise ConfigurationError("Missing required JIRA configuration")

        url = f"{self.base_url}/rest/api/3{path}"
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    auth=(self.email, self.api_token),
                    headers={"Accept": "application/json"},
                )
            except httpx.HTTPError as e:
                UPSTREAM_CALLS_TOTAL.labels(service="jira", status="error").inc()
                logger.error("JIRA request %s %s failed: %s", method, url, e)
                raise UpstreamError(f"{failure}: {e}") from e

        if response.is_error:
            UPSTREAM_CALLS_TOTAL.labels(service="jira", status="error").inc()
            logger.error("JIRA API error: HTTP %d %s", response.status_code, response.text)
            raise UpstreamError(_error_message(response, failure), status_code=response.status_code)

        if not response.content:
            UPSTREAM_CALLS_TOTAL.labels(service="jira", status="success").inc()
            return {}
        try:
            data: object = response.json()
        except ValueError as e:
            UPSTREAM_CALLS_TOTAL.labels(service="jira", status="error").inc()
            logger.error("JIRA returned a non-JSON body from %s", url)
            raise UpstreamError("Invalid JSON from JIRA") from e
        UPSTREAM_CALLS_TOTAL.labels(service="jira", status="success").inc()
        return data

    async def search_issues(self, query: str) -> list[JiraIssue]:
        """Translate a free-text question to JQL and run it. Malformed responses yield []."""
        jql = translate_to_jql(query, self.project_key)
        data = await self._request(
            "GET",
            "/search",
            "Failed to fetch Jira issues",
            params={"jql": jql, "maxResults": MAX_RESULTS, "fields": SEARCH_FIELDS},
        )
        issues = data.get("issues") if isinstance(data, dict) else None
        if not isinstance(issues, list):
            logger.error("Invalid JIRA search response format: %r", data)
            return []
        logger.info("Found %d JIRA issues", len(issues))
        return issues

    async def get_issue(self, issue_key: str) -> JiraIssue:
        data = await self._request("GET", f"/issue/{issue_key}", "Failed to fetch Jira issue")
        return data  # type: ignore[return-value]

    async def create_issue(self, data: dict[str, object]) -> JiraIssue:
        created = await self._request("POST", "/issue", "Failed to create Jira issue", json=data)
        return created  # type: ignore[return-value]

    async def update_issue(self, issue_key: str, data: dict[str, object]) -> JiraIssue:
        """Update an issue. JIRA answers 204 on success, so the result is usually empty."""
        updated = await self._request("PUT", f"/issue/{issue_key}", "Failed to update Jira issue", json=data)
        return updated  # type: ignore[return-value]


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        messages = body.get("errorMessages")
        if isinstance(messages, list) and messages:
            return str(messages[0])
    return default


# --- Formatting ---

_STATUS_ICONS = {
    "To Do": "📝",
    "Open": "📝",
    "In Progress": "🔄",
    "Done": "✅",
    "Closed": "✅",
    "Blocked": "🚫",
}

_PRIORITY_ICONS = {
    "Highest": "🔴",
    "High": "🟠",
    "Medium": "🟡",
    "Low": "🟢",
    "Lowest": "⚪",
}

NO_ISSUES_MESSAGE = "🔍 No JIRA issues found matching your query."


def format_issues(issues: list[JiraIssue]) -> str:
    """Render issues as a chat reply, one block per issue."""
    if not issues:
        return NO_ISSUES_MESSAGE

    blocks: list[str] = []
    for issue in issues:
        status = _status_name(issue)
        priority = _priority_name(issue)
        fields = _fields(issue)
        updated = _format_timestamp(fields.get("updated") or "") or "Unknown"
        blocks.append(
            f"{_STATUS_ICONS.get(status, '❓')} {issue.get('key', '?')}: {fields.get('summary') or ''}\n"
            f"   Priority: {_PRIORITY_ICONS.get(priority, '⚪')} {priority}\n"
            f"   Status: {status}\n"
            f"   Assignee: {_assignee_name(issue) or 'Unassigned'}\n"
            f"   Updated: {updated}"
        )
    return "📋 JIRA Issues:\n\n" + "\n\n".join(blocks)


def format_project_status(issues: list[JiraIssue]) -> str:
    """Summarise totals, open and high priority counts, then the first three issues."""
    open_count = sum(1 for issue in issues if _status_name(issue) not in ("Done", "Closed"))
    high_count = sum(1 for issue in issues if _priority_name(issue) in ("High", "Highest"))
    return (
        "📊 JIRA Project Status:\n\n"
        f"Total Issues: {len(issues)}\n"
        f"Open Issues: {open_count}\n"
        f"High Priority: {high_count}\n\n"
        f"Recent Updates:\n{format_issues(issues[:3])}"
    )


def _format_timestamp(value: str) -> str:
    try:
        return datetime.fromisoformat(value).strftime(TIMESTAMP_FORMAT)
    except ValueError:
        return value


def issue_to_incident(issue: JiraIssue) -> Incident:
    """Project a JIRA issue onto the incident card shape used by the dashboard."""
    fields = _fields(issue)
    timestamp = _format_timestamp(fields.get("created") or "")

    return Incident(
        id=issue.get("key", ""),
        title=fields.get("summary") or "",
        status=_status_name(issue) or "Unknown",
        priority=normalize_priority(_priority_name(issue)),
        timestamp=timestamp,
        assigned_team=_assignee_name(issue) or "Unassigned",
        telemetry=Telemetry(cpu=0, memory=0, latency=0),
    )
