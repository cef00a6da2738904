"""FastAPI backend for the incident console.

Service clients and the chat dispatcher are built once at startup from the
cached settings and shared across requests via ``app.state``.
"""

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field

from incident_console.chat.dispatcher import Dispatcher, Domain, route_domain
from incident_console.config import Settings, get_settings
from incident_console.data import fixtures
from incident_console.data.models import (
    HealthCheckItem,
    Incident,
    Message,
    Notification,
    RCAReport,
    Recommendation,
    ServiceDependency,
)
from incident_console.errors import ConfigurationError, ConsoleError
from incident_console.observability.metrics import (
    APP_INFO,
    COMPONENT_HEALTHY,
    REQUEST_DURATION,
    REQUESTS_IN_PROGRESS,
    REQUESTS_TOTAL,
)
from incident_console.query.incident_report import render_incident_report
from incident_console.query.incidents import query_incidents, run_incident_query
from incident_console.query.mcp import MCP_CATEGORIES, MCPCategory, MCPQueryResult, process_mcp_query
from incident_console.services.github import GitHubClient, GitHubCommit
from incident_console.services.jira import JiraClient, mock_issues, search_mock_issues
from incident_console.services.openshift import OpenShiftService

logger = logging.getLogger(__name__)

HEALTH_PROBE_TIMEOUT_SECONDS = 5.0


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class QueryRequest(BaseModel):
    """Request body for the free-text query endpoints."""

    query: str


class TextResponse(BaseModel):
    """A pre-rendered chat-style text block."""

    response: str


class GitHubSearchResponse(BaseModel):
    data: list[GitHubCommit]


class JiraActionRequest(BaseModel):
    """Request body for POST /api/jira."""

    action: str | None = None
    data: dict[str, Any] | None = None


class ChatRequest(BaseModel):
    message: str


class ChatResponse(BaseModel):
    """Messages appended by the dispatcher (user then assistant) and the domain that answered."""

    messages: list[Message]
    domain: Domain | None = None


class ComponentHealth(BaseModel):
    """Health status of a single backend component."""

    name: str
    status: str
    detail: str | None = None


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    status: str
    components: list[ComponentHealth] = Field(default_factory=list)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _service_error(exc: ConsoleError, generic_message: str) -> JSONResponse:
    """Missing configuration hides behind a generic message; upstream failures carry their detail."""
    if isinstance(exc, ConfigurationError):
        return _error(generic_message, 500)
    return _error(str(exc) or generic_message, 500)


# ---------------------------------------------------------------------------
# Application lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the service clients once at startup."""
    settings = get_settings()
    APP_INFO.info({"version": "0.1.0", "jira_project": settings.jira_project_key})

    jira = JiraClient.from_settings(settings)
    github = GitHubClient.from_settings(settings)
    openshift = OpenShiftService.from_settings(settings)

    app.state.settings = settings
    app.state.jira = jira
    app.state.github = github
    app.state.openshift = openshift
    app.state.dispatcher = Dispatcher(
        jira=jira,
        github=github,
        openshift=openshift,
        simulated_delay_seconds=settings.simulated_delay_seconds,
    )
    logger.info(
        "Incident console ready (jira=%s, github=%s, cluster=%s)",
        "live" if jira.is_configured else "mock",
        "live" if github.is_configured else "off",
        "live" if openshift.is_configured else "fixtures",
    )
    yield
    logger.info("Shutting down incident console")


app = FastAPI(title="Incident Console", lifespan=lifespan)


@app.middleware("http")
async def track_requests(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Record duration, totals and in-progress gauges for every /api route."""
    endpoint = request.url.path
    if not endpoint.startswith("/api/"):
        return await call_next(request)

    REQUESTS_IN_PROGRESS.labels(endpoint=endpoint).inc()
    start = time.monotonic()
    try:
        response = await call_next(request)
    except Exception:
        REQUESTS_TOTAL.labels(endpoint=endpoint, status="error").inc()
        raise
    finally:
        REQUESTS_IN_PROGRESS.labels(endpoint=endpoint).dec()
        REQUEST_DURATION.labels(endpoint=endpoint).observe(time.monotonic() - start)

    status = "success" if response.status_code < 400 else "error"
    REQUESTS_TOTAL.labels(endpoint=endpoint, status=status).inc()
    return response


# ---------------------------------------------------------------------------
# Proxied third-party APIs
# ---------------------------------------------------------------------------


@app.post("/api/github/search", response_model=GitHubSearchResponse)
async def github_search(request: QueryRequest) -> GitHubSearchResponse | JSONResponse:
    """List the configured repository's commits. The query text is accepted but not used upstream."""
    github: GitHubClient = app.state.github
    try:
        commits = await github.list_commits()
    except ConsoleError as exc:
        logger.exception("Error processing GitHub search %r", request.query)
        return _service_error(exc, "Failed to process GitHub search")
    return GitHubSearchResponse(data=commits)


@app.get("/api/jira")
async def jira_get(
    action: str | None = None,
    query: str | None = None,
    issueKey: str | None = None,  # noqa: N803
) -> Any:
    """Search issues or fetch one issue by key."""
    jira: JiraClient = app.state.jira

    match action:
        case None | "":
            return _error("Action parameter is required", 400)
        case "search":
            if not query:
                return _error("Query parameter is required for search action", 400)
            if not jira.is_configured:
                return search_mock_issues(query)
            try:
                return await jira.search_issues(query)
            except ConsoleError as exc:
                logger.exception("Jira search error")
                return _service_error(exc, "Failed to search Jira issues")
        case "issue":
            if not issueKey:
                return _error("Issue key is required for issue action", 400)
            if not jira.is_configured:
                for issue in mock_issues():
                    if issue.get("key") == issueKey:
                        return issue
            try:
                return await jira.get_issue(issueKey)
            except ConsoleError as exc:
                logger.exception("Jira get issue error")
                return _service_error(exc, "Failed to fetch Jira issue")
        case _:
            return _error("Invalid action", 400)


@app.post("/api/jira")
async def jira_post(request: JiraActionRequest) -> Any:
    """Create or update an issue on the live tracker."""
    jira: JiraClient = app.state.jira
    data = request.data

    match request.action:
        case None | "":
            return _error("Action parameter is required", 400)
        case "create":
            if not data:
                return _error("Data is required for create action", 400)
            try:
                return await jira.create_issue(data)
            except ConsoleError as exc:
                logger.exception("Jira create error")
                return _service_error(exc, "Failed to create Jira issue")
        case "update":
            issue_key = (data or {}).get("issueKey")
            update_data = (data or {}).get("updateData")
            if not issue_key or not update_data:
                return _error("Issue key and update data are required for update action", 400)
            try:
                return await jira.update_issue(str(issue_key), update_data)
            except ConsoleError as exc:
                logger.exception("Jira update error")
                return _service_error(exc, "Failed to update Jira issue")
        case _:
            return _error("Invalid action", 400)


# ---------------------------------------------------------------------------
# Chat and query classifiers
# ---------------------------------------------------------------------------


@app.post("/api/chat", response_model=ChatResponse)
async def chat(request: ChatRequest) -> ChatResponse:
    """Dispatch one chat message and return the messages it appended."""
    dispatcher: Dispatcher = app.state.dispatcher
    conversation: list[Message] = []
    reply = await dispatcher.handle_message(request.message, conversation)
    domain = route_domain(request.message) if reply is not None else None
    return ChatResponse(messages=conversation, domain=domain)


@app.get("/api/incidents", response_model=list[Incident])
async def incidents(query: str = "") -> list[Incident]:
    """Incident list, filtered by the incident classifier when a query is given."""
    if not query.strip():
        return list(fixtures.INCIDENTS)
    await asyncio.sleep(app.state.settings.simulated_delay_seconds)
    return query_incidents(query, fixtures.INCIDENTS)


@app.post("/api/incidents/query", response_model=TextResponse)
async def incidents_report(request: QueryRequest) -> TextResponse:
    """Chat-style text report for an incident query."""
    await asyncio.sleep(app.state.settings.simulated_delay_seconds)
    result = run_incident_query(request.query, fixtures.INCIDENTS)
    return TextResponse(response=render_incident_report(result))


@app.post("/api/mcp", response_model=MCPQueryResult)
async def mcp(request: QueryRequest) -> MCPQueryResult:
    await asyncio.sleep(app.state.settings.simulated_delay_seconds)
    return process_mcp_query(request.query)


@app.get("/api/mcp/categories", response_model=list[MCPCategory])
async def mcp_categories() -> list[MCPCategory]:
    return list(MCP_CATEGORIES)


@app.post("/api/openshift", response_model=TextResponse)
async def openshift(request: QueryRequest) -> TextResponse:
    """Cluster status for a free-text question. Falls back to fixture data, never fails."""
    service: OpenShiftService = app.state.openshift
    return TextResponse(response=await service.process_query(request.query))


# ---------------------------------------------------------------------------
# Fixture datasets
# ---------------------------------------------------------------------------


@app.get("/api/recommendations", response_model=list[Recommendation])
async def recommendations() -> list[Recommendation]:
    return list(fixtures.RECOMMENDATIONS)


@app.get("/api/health-checks", response_model=list[HealthCheckItem])
async def health_checks() -> list[HealthCheckItem]:
    return list(fixtures.HEALTH_CHECKS)


@app.get("/api/rca", response_model=list[RCAReport])
async def rca_reports() -> list[RCAReport]:
    return list(fixtures.RCA_REPORTS)


@app.get("/api/dependencies", response_model=list[ServiceDependency])
async def dependencies() -> list[ServiceDependency]:
    return list(fixtures.SERVICE_DEPENDENCIES)


@app.get("/api/notifications", response_model=list[Notification])
async def notifications() -> list[Notification]:
    return list(fixtures.NOTIFICATIONS)


# ---------------------------------------------------------------------------
# Health and metrics
# ---------------------------------------------------------------------------


@app.get("/metrics")
async def metrics() -> Response:
    """Expose Prometheus metrics in exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


async def _probe(
    name: str,
    url: str,
    headers: dict[str, str] | None = None,
    auth: tuple[str, str] | None = None,
    verify: bool = True,
) -> ComponentHealth:
    try:
        async with httpx.AsyncClient(timeout=HEALTH_PROBE_TIMEOUT_SECONDS, verify=verify) as client:
            resp = await client.get(url, headers=headers, auth=auth)
    except httpx.HTTPError as exc:
        return ComponentHealth(name=name, status="unhealthy", detail=str(exc))
    if resp.status_code == 200:
        return ComponentHealth(name=name, status="healthy")
    return ComponentHealth(name=name, status="unhealthy", detail=f"HTTP {resp.status_code}")


def _health_probes(settings: Settings) -> list[Awaitable[ComponentHealth]]:
    """One probe per configured backend. Unconfigured backends are skipped."""
    probes: list[Awaitable[ComponentHealth]] = []

    if settings.github_token and settings.github_repo_owner and settings.github_repo_name:
        probes.append(
            _probe(
                "github",
                f"{settings.github_api_url}/repos/{settings.github_repo_owner}/{settings.github_repo_name}",
                headers={"Authorization": f"Bearer {settings.github_token}"},
            )
        )
    if settings.jira_base_url:
        probes.append(
            _probe(
                "jira",
                f"{settings.jira_base_url}/rest/api/3/myself",
                auth=(settings.jira_email, settings.jira_api_token),
            )
        )
    if settings.cluster_url:
        probes.append(
            _probe(
                "openshift",
                f"{settings.cluster_url}/version",
                headers={"Authorization": f"Bearer {settings.cluster_token}"},
                verify=settings.cluster_verify_ssl,
            )
        )
    if settings.splunk_url:
        probes.append(
            _probe(
                "splunk",
                f"{settings.splunk_url}/services/server/info?output_mode=json",
                headers={"Authorization": f"Bearer {settings.splunk_token}"},
                verify=False,
            )
        )
    if settings.kibana_url:
        probes.append(
            _probe(
                "kibana",
                f"{settings.kibana_url}/api/status",
                headers={"Authorization": f"ApiKey {settings.kibana_token}"},
            )
        )
    if settings.jenkins_url:
        probes.append(
            _probe(
                "jenkins",
                f"{settings.jenkins_url}/api/json",
                auth=(settings.jenkins_user, settings.jenkins_token),
            )
        )
    return probes


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Check health of the configured third-party backends."""
    settings = get_settings()
    components = list(await asyncio.gather(*_health_probes(settings)))

    for comp in components:
        COMPONENT_HEALTHY.labels(component=comp.name).set(1.0 if comp.status == "healthy" else 0.0)

    healthy_count = sum(1 for c in components if c.status == "healthy")
    if healthy_count == len(components):
        overall = "healthy"
    elif healthy_count == 0:
        overall = "unhealthy"
    else:
        overall = "degraded"

    return HealthResponse(status=overall, components=components)
