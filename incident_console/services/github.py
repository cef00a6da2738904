"""GitHub REST client for the configured repository's commit history."""

import logging
from datetime import datetime
from typing import TypedDict

import httpx

from incident_console.config import Settings
from incident_console.errors import ConfigurationError, UpstreamError
from incident_console.observability.metrics import UPSTREAM_CALLS_TOTAL

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15
API_VERSION = "2022-11-28"
USER_AGENT = "IPEConsole"


class GitHubAuthor(TypedDict, total=False):
    name: str
    email: str
    date: str


class GitHubCommitDetail(TypedDict, total=False):
    author: GitHubAuthor
    message: str


class GitHubCommit(TypedDict, total=False):
    sha: str
    html_url: str
    commit: GitHubCommitDetail


class GitHubClient:
    def __init__(
        self,
        owner: str = "",
        repo: str = "",
        token: str = "",
        api_url: str = "https://api.github.com",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHubClient":
        return cls(
            owner=settings.github_repo_owner,
            repo=settings.github_repo_name,
            token=settings.github_token,
            api_url=settings.github_api_url,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.owner and self.repo and self.token)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github.v3+json",
            "X-GitHub-Api-Version": API_VERSION,
            "User-Agent": USER_AGENT,
        }

    async def list_commits(self) -> list[GitHubCommit]:
        """List the repository's most recent commits (GitHub's default page)."""
        if not self.is_configured:
            raise ConfigurationError("Missing required GitHub configuration")

        url = f"{self.api_url}/repos/{self.owner}/{self.repo}/commits"
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(url, headers=self._headers())
            except httpx.HTTPError as e:
                UPSTREAM_CALLS_TOTAL.labels(service="github", status="error").inc()
                raise UpstreamError(f"Cannot reach GitHub at {self.api_url}: {e}") from e

        if response.is_error:
            UPSTREAM_CALLS_TOTAL.labels(service="github", status="error").inc()
            logger.error("GitHub API error: HTTP %d %s", response.status_code, response.text)
            raise UpstreamError(
                f"GitHub API error: {response.reason_phrase} - {response.text}",
                status_code=response.status_code,
            )

        try:
            commits: list[GitHubCommit] = response.json()
        except ValueError as e:
            UPSTREAM_CALLS_TOTAL.labels(service="github", status="error").inc()
            logger.error("GitHub returned a non-JSON body from %s", url)
            raise UpstreamError("Invalid JSON from GitHub") from e
        if not isinstance(commits, list):
            UPSTREAM_CALLS_TOTAL.labels(service="github", status="error").inc()
            raise UpstreamError("Unexpected GitHub response: expected a list of commits")
        UPSTREAM_CALLS_TOTAL.labels(service="github", status="success").inc()
        return commits


def _commit_date(date: str) -> str:
    try:
        return datetime.fromisoformat(date).strftime("%Y-%m-%d")
    except ValueError:
        return date


def format_commits(commits: list[GitHubCommit]) -> str:
    """One chat line per commit: date, message, author."""
    if not commits:
        return "No commits found in the configured repository."
    lines = []
    for commit in commits:
        detail = commit.get("commit", {})
        author = detail.get("author", {})
        lines.append(
            f"📝 {_commit_date(author.get('date', ''))} - {detail.get('message', '')} "
            f"(by {author.get('name', 'unknown')})"
        )
    return "Here are the GitHub search results:\n\n" + "\n".join(lines)
