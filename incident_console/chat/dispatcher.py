"""Chat message dispatcher.

Sniffs domain markers in the raw message and hands it to exactly one domain:
JIRA, GitHub, the OpenShift cluster, or the MCP processor. Markers are tested
in that fixed order, so "show jira issues for pod restarts" goes to JIRA.

Dispatches are not serialised. Two messages handled concurrently against the
same conversation each append their user message immediately and their reply
when it completes, so replies land in completion order.
"""

import asyncio
import logging
from typing import Literal, assert_never

from incident_console.data.models import Message
from incident_console.errors import ConsoleError
from incident_console.observability.metrics import DISPATCHES_TOTAL
from incident_console.query.mcp import process_mcp_query, render_mcp_result
from incident_console.services.github import GitHubClient, format_commits
from incident_console.services.jira import (
    JiraClient,
    JiraIssue,
    format_issues,
    format_project_status,
    search_mock_issues,
)
from incident_console.services.openshift import OpenShiftService

logger = logging.getLogger(__name__)

Domain = Literal["jira", "github", "openshift", "mcp", "help"]

DOMAIN_MARKERS: tuple[tuple[Domain, tuple[str, ...]], ...] = (
    ("jira", ("jira", "ticket", "issue")),
    ("github", ("github", "commit", "pr")),
    ("openshift", ("openshift", "cluster", "pod", "deployment")),
    ("mcp", ("mcp", "model", "protocol")),
)

GENERIC_APOLOGY = "Sorry, I encountered an error processing your request. Please try again."
JIRA_APOLOGY = "Sorry, I encountered an error while searching JIRA issues. Please try again."
PROJECT_STATUS_QUERY = "show all issues"
HELP_TIP = (
    "Tip: You can ask about:\n"
    "• JIRA (tickets, issues)\n"
    "• GitHub (commits, PRs)\n"
    "• OpenShift (pods, deployments)\n"
    "• Model Context Protocol (MCP)"
)


def route_domain(text: str) -> Domain:
    """Return the first domain whose markers occur in the message, else 'help'."""
    text_lower = text.lower()
    for domain, markers in DOMAIN_MARKERS:
        if any(marker in text_lower for marker in markers):
            return domain
    return "help"


def _wants_project_status(text_lower: str) -> bool:
    if "issue" in text_lower or "ticket" in text_lower:
        return False
    return "status" in text_lower or "progress" in text_lower


class Dispatcher:
    """Routes chat messages to the domain services built at startup."""

    def __init__(
        self,
        jira: JiraClient,
        github: GitHubClient,
        openshift: OpenShiftService,
        simulated_delay_seconds: float = 0.0,
    ) -> None:
        self.jira = jira
        self.github = github
        self.openshift = openshift
        self.simulated_delay_seconds = simulated_delay_seconds

    async def handle_message(self, text: str, conversation: list[Message]) -> Message | None:
        """Append the user message and one assistant reply to ``conversation``.

        Blank input is ignored and returns None. Errors never propagate: they
        become an apology reply.
        """
        if not text.strip():
            return None

        conversation.append(Message(role="user", content=text))
        domain = route_domain(text)
        DISPATCHES_TOTAL.labels(domain=domain).inc()

        try:
            content = await self._answer(domain, text)
        except Exception:
            logger.exception("Failed to handle %s message", domain)
            content = GENERIC_APOLOGY

        reply = Message(role="assistant", content=content)
        conversation.append(reply)
        return reply

    async def _answer(self, domain: Domain, text: str) -> str:
        match domain:
            case "jira":
                return await self._answer_jira(text)
            case "github":
                return format_commits(await self.github.list_commits())
            case "openshift":
                return await self.openshift.process_query(text)
            case "mcp":
                await asyncio.sleep(self.simulated_delay_seconds)
                return render_mcp_result(process_mcp_query(text))
            case "help":
                return f"I understand you're asking about: {text}\n\n{HELP_TIP}"
            case _:
                assert_never(domain)

    async def _answer_jira(self, text: str) -> str:
        project_status = _wants_project_status(text.lower())
        try:
            issues = await self._search_jira(PROJECT_STATUS_QUERY if project_status else text)
        except ConsoleError:
            logger.exception("JIRA search failed")
            return JIRA_APOLOGY

        if project_status:
            return format_project_status(issues)
        return format_issues(issues)

    async def _search_jira(self, text: str) -> list[JiraIssue]:
        if self.jira.is_configured:
            return await self.jira.search_issues(text)
        logger.info("JIRA not configured, searching the mock issue store")
        return search_mock_issues(text)
