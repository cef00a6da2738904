from functools import lru_cache
from typing import ClassVar

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # GitHub (empty string means not configured)
    github_api_url: str = "https://api.github.com"
    github_repo_owner: str = ""
    github_repo_name: str = ""
    github_token: str = ""

    # JIRA Cloud REST API (empty base URL means the mock issue store is used)
    jira_base_url: str = ""
    jira_email: str = ""
    jira_api_token: str = ""
    jira_project_key: str = "KAN"

    # OpenShift / Kubernetes API (empty URL means fixture data is served)
    cluster_url: str = ""
    cluster_token: str = ""
    cluster_namespace: str = "default"
    cluster_verify_ssl: bool = False

    # Log / metrics backends (optional, only probed by /health)
    splunk_url: str = ""
    splunk_token: str = ""
    kibana_url: str = ""
    kibana_token: str = ""

    # Jenkins (optional, only probed by /health)
    jenkins_url: str = ""
    jenkins_user: str = ""
    jenkins_token: str = ""

    # Artificial processing delay before the incident and MCP classifiers answer
    simulated_delay_seconds: float = 0.5

    # Base URL of this API, used by the Streamlit dashboard
    api_url: str = "http://localhost:8000"

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Lazily load and cache settings. Fails at first call, not at import time."""
    return Settings()
