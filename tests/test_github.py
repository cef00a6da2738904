"""Tests for the GitHub commit client and chat formatting."""

import httpx
import pytest
import respx

from incident_console.errors import ConfigurationError, UpstreamError
from incident_console.services.github import GitHubClient, GitHubCommit, format_commits

COMMITS_URL = "https://github.test/repos/acme/console/commits"


def _commit(sha: str, message: str, name: str = "Dana", date: str = "2025-03-25T21:05:00Z") -> GitHubCommit:
    return {"sha": sha, "commit": {"author": {"name": name, "date": date}, "message": message}}


@pytest.fixture
def client() -> GitHubClient:
    return GitHubClient(owner="acme", repo="console", token="ghp_fake", api_url="https://github.test")


class TestFormatCommits:
    def test_one_line_per_commit(self) -> None:
        text = format_commits([_commit("a1", "Fix pool leak"), _commit("b2", "Bump deps", name="Lee")])
        assert text.startswith("Here are the GitHub search results:")
        assert "📝 2025-03-25 - Fix pool leak (by Dana)" in text
        assert "📝 2025-03-25 - Bump deps (by Lee)" in text

    def test_empty(self) -> None:
        assert "No commits" in format_commits([])


@pytest.mark.integration
class TestListCommits:
    async def test_missing_configuration(self) -> None:
        with pytest.raises(ConfigurationError, match="Missing required GitHub configuration"):
            await GitHubClient(owner="acme", repo="console").list_commits()

    @respx.mock
    async def test_success(self, client: GitHubClient) -> None:
        route = respx.get(COMMITS_URL).mock(return_value=httpx.Response(200, json=[_commit("a1", "Fix pool leak")]))

        commits = await client.list_commits()

        assert [c["sha"] for c in commits] == ["a1"]
        headers = route.calls.last.request.headers
        assert headers["Authorization"] == "Bearer ghp_fake"
        assert headers["Accept"] == "application/vnd.github.v3+json"
        assert headers["X-GitHub-Api-Version"] == "2022-11-28"
        assert headers["User-Agent"] == "IPEConsole"

    @respx.mock
    async def test_upstream_error_embeds_status_text(self, client: GitHubClient) -> None:
        respx.get(COMMITS_URL).mock(return_value=httpx.Response(404, text='{"message":"Not Found"}'))

        with pytest.raises(UpstreamError, match="GitHub API error: Not Found") as exc_info:
            await client.list_commits()
        assert exc_info.value.status_code == 404

    @respx.mock
    async def test_unreachable(self, client: GitHubClient) -> None:
        respx.get(COMMITS_URL).mock(side_effect=httpx.ConnectError("connection refused"))

        with pytest.raises(UpstreamError, match="Cannot reach GitHub"):
            await client.list_commits()

    @respx.mock
    async def test_non_json_body_is_upstream_error(self, client: GitHubClient) -> None:
        respx.get(COMMITS_URL).mock(return_value=httpx.Response(200, text="<html>sso</html>"))

        with pytest.raises(UpstreamError, match="Invalid JSON from GitHub"):
            await client.list_commits()

    @respx.mock
    async def test_non_list_body_is_upstream_error(self, client: GitHubClient) -> None:
        respx.get(COMMITS_URL).mock(return_value=httpx.Response(200, json={"message": "moved"}))

        with pytest.raises(UpstreamError, match="expected a list"):
            await client.list_commits()
