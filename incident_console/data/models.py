"""Pydantic models for the console's fixture datasets."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

IncidentPriority = Literal["High", "Medium", "Low"]

PENDING_RCA = "Pending"


class Telemetry(BaseModel):
    """Resource snapshot captured when the incident was raised."""

    model_config = ConfigDict(frozen=True)

    cpu: float  # percent
    memory: float  # percent
    latency: float  # milliseconds


class Incident(BaseModel):
    """An operational incident shown on the incidents tab."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    status: str  # conventionally Active | Investigating | Resolved
    priority: IncidentPriority
    timestamp: str  # "YYYY-MM-DD HH:MM:SS"
    affected_services: tuple[str, ...] = ()
    assigned_team: str
    telemetry: Telemetry
    related_incidents: tuple[str, ...] = ()
    rca: str = PENDING_RCA

    @property
    def has_rca(self) -> bool:
        return bool(self.rca) and self.rca != PENDING_RCA


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["health", "security", "performance", "incident", "devops"]
    title: str
    description: str
    severity: Literal["high", "medium", "low"]
    action: str


class HealthCheckDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    pod_count: int
    ready_pods: int
    cpu_usage: float
    memory_usage: float
    restarts: int
    uptime: str
    node_status: str


class HealthCheckItem(BaseModel):
    """Per-workload health snapshot displayed in the health check panel."""

    model_config = ConfigDict(frozen=True)

    category: str
    status: Literal["healthy", "warning", "critical"]
    details: HealthCheckDetails
    namespace: str
    timestamp: str


class RCAReport(BaseModel):
    """Root cause analysis write-up for a closed issue."""

    model_config = ConfigDict(frozen=True)

    issue_id: str
    summary: str
    impact: str
    root_cause: str
    timeline: str  # one event per line
    resolution: str
    preventive_measures: tuple[str, ...] = ()


class ServiceDependency(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: Literal["upstream", "downstream"]
    status: Literal["healthy", "degraded", "down"]
    latency: float  # milliseconds


class Notification(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    type: Literal["success", "error", "warning", "info"] = "info"


class Message(BaseModel):
    """A single entry of the chat conversation log."""

    role: Literal["user", "assistant"]
    content: str = Field(default="")


def normalize_priority(priority: str) -> IncidentPriority:
    """Coerce an arbitrary priority name into an incident priority (unknown → Medium)."""
    if priority == "High":
        return "High"
    if priority == "Low":
        return "Low"
    return "Medium"
