"""Shared pytest configuration and fixtures."""

from collections.abc import Generator
from typing import Any
from unittest.mock import patch

import pytest

from incident_console.config import Settings, get_settings


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-e2e",
        action="store_true",
        default=False,
        help="Run e2e tests that hit real services (requires .env with valid credentials)",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-e2e"):
        return
    skip_e2e = pytest.mark.skip(reason="Need --run-e2e flag to run")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


@pytest.fixture(autouse=True)
def _no_dotenv(request: pytest.FixtureRequest) -> Generator[None]:
    """Block .env loading so a developer's local credentials never leak into tests.

    Sets Settings.model_config['env_file'] = None before each test (except e2e).
    """
    if "e2e" in request.keywords:
        yield
        return

    get_settings.cache_clear()
    original = Settings.model_config.get("env_file")
    Settings.model_config["env_file"] = None

    try:
        yield
    finally:
        Settings.model_config["env_file"] = original
        get_settings.cache_clear()


@pytest.fixture
def mock_settings() -> Generator[Any]:
    """Provide fake settings pointing every backend at a .test host.

    Patches get_settings at every import site so cached references are overridden.
    """
    fake_settings = type(
        "FakeSettings",
        (),
        {
            # GitHub
            "github_api_url": "https://github.test",
            "github_repo_owner": "acme",
            "github_repo_name": "console",
            "github_token": "ghp_test_fake",
            # JIRA
            "jira_base_url": "https://jira.test",
            "jira_email": "ops@acme.test",
            "jira_api_token": "jira-fake-token",
            "jira_project_key": "KAN",
            # Cluster
            "cluster_url": "https://cluster.test:6443",
            "cluster_token": "sha256~fake-token",
            "cluster_namespace": "payments",
            "cluster_verify_ssl": False,
            # Log / metrics backends and Jenkins stay unconfigured
            "splunk_url": "",
            "splunk_token": "",
            "kibana_url": "",
            "kibana_token": "",
            "jenkins_url": "",
            "jenkins_user": "",
            "jenkins_token": "",
            "simulated_delay_seconds": 0.0,
            "api_url": "http://api.test:8000",
        },
    )()
    with (
        patch("incident_console.config.get_settings", return_value=fake_settings),
        patch("incident_console.api.main.get_settings", return_value=fake_settings),
    ):
        yield fake_settings
