"""Mission Control Protocol (MCP) query processor.

MCP is the console's demo query mini-language (``CHECK system.metrics``,
``STATUS service.health``...). Every recognised query maps to a fixed payload;
results are a closed union discriminated on ``type`` and rendered to text with
an exhaustive match.
"""

from typing import Annotated, Literal, assert_never

from pydantic import BaseModel, ConfigDict, Field

# --- Payloads ---


class CpuStats(BaseModel):
    usage: str
    cores: int
    temperature: str


class MemoryStats(BaseModel):
    used: str
    available: str
    swap: str


class DiskStats(BaseModel):
    read: str
    write: str
    iops: int


class SystemMetrics(BaseModel):
    cpu: CpuStats
    memory: MemoryStats
    disk: DiskStats


class ServiceStatus(BaseModel):
    name: str
    status: str
    uptime: str


class ServiceHealth(BaseModel):
    services: list[ServiceStatus]


class EndpointLatency(BaseModel):
    path: str
    p95: str
    p99: str


class EndpointPerformance(BaseModel):
    endpoints: list[EndpointLatency]


class DeployedService(BaseModel):
    name: str
    version: str
    replicas: str
    status: str
    uptime: str


class DeploymentState(BaseModel):
    services: list[DeployedService]


class SecurityFinding(BaseModel):
    severity: str
    description: str


class SecurityPosture(BaseModel):
    status: str
    last_scan: str
    findings: list[SecurityFinding]


# --- Result variants ---


class MetricsResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["metrics"] = "metrics"
    data: SystemMetrics


class HealthResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["health"] = "health"
    data: ServiceHealth


class PerformanceResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["performance"] = "performance"
    data: EndpointPerformance


class DeploymentResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["deployment"] = "deployment"
    data: DeploymentState


class SecurityResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["security"] = "security"
    data: SecurityPosture


class ErrorResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["error"] = "error"
    message: str


MCPQueryResult = Annotated[
    MetricsResult | HealthResult | PerformanceResult | DeploymentResult | SecurityResult | ErrorResult,
    Field(discriminator="type"),
]

UNRECOGNIZED_MESSAGE = "Query not recognized. Please use one of the suggested queries."


# --- Suggested query catalogue ---


class MCPCategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    queries: tuple[str, ...]


MCP_CATEGORIES: tuple[MCPCategory, ...] = (
    MCPCategory(
        name="System Health",
        queries=("CHECK system.metrics", "MONITOR resource.utilization", "STATUS service.health"),
    ),
    MCPCategory(
        name="Performance",
        queries=("ANALYZE cpu.usage", "MEASURE memory.consumption", "TEST network.latency", "TRACK response.times"),
    ),
    MCPCategory(
        name="Configuration",
        queries=("GET service.config", "LIST env.variables", "SHOW deployment.state"),
    ),
    MCPCategory(
        name="Diagnostics",
        queries=("DEBUG system.errors", "ANALYZE error.logs", "TRACE request.flow", "FIND bottlenecks"),
    ),
    MCPCategory(
        name="Security",
        queries=("CHECK access.controls", "VERIFY auth.status", "AUDIT security.policies"),
    ),
)


# --- Fixed payloads ---


def _metrics() -> MetricsResult:
    return MetricsResult(
        data=SystemMetrics(
            cpu=CpuStats(usage="78%", cores=16, temperature="45°C"),
            memory=MemoryStats(used="24.5GB", available="32GB", swap="2GB"),
            disk=DiskStats(read="250MB/s", write="180MB/s", iops=3500),
        )
    )


def _health() -> HealthResult:
    return HealthResult(
        data=ServiceHealth(
            services=[
                ServiceStatus(name="API Gateway", status="healthy", uptime="99.99%"),
                ServiceStatus(name="Auth Service", status="healthy", uptime="99.95%"),
                ServiceStatus(name="Database", status="degraded", uptime="99.80%"),
                ServiceStatus(name="Cache", status="healthy", uptime="99.99%"),
            ]
        )
    )


def _performance() -> PerformanceResult:
    return PerformanceResult(
        data=EndpointPerformance(
            endpoints=[
                EndpointLatency(path="/api/v1/users", p95="120ms", p99="250ms"),
                EndpointLatency(path="/api/v1/orders", p95="180ms", p99="350ms"),
                EndpointLatency(path="/api/v1/products", p95="90ms", p99="180ms"),
            ]
        )
    )


def _deployment() -> DeploymentResult:
    return DeploymentResult(
        data=DeploymentState(
            services=[
                DeployedService(name="Frontend", version="v2.1.0", replicas="3/3", status="deployed", uptime="100%"),
                DeployedService(name="Backend API", version="v1.9.2", replicas="5/5", status="deployed", uptime="100%"),
                DeployedService(name="Worker", version="v1.5.0", replicas="2/2", status="deployed", uptime="100%"),
            ]
        )
    )


def _security() -> SecurityResult:
    return SecurityResult(
        data=SecurityPosture(
            status="secure",
            last_scan="2025-03-25 22:00:00",
            findings=[
                SecurityFinding(severity="medium", description="TLS 1.2 in use, upgrade to 1.3 recommended"),
                SecurityFinding(severity="low", description="Non-critical headers missing"),
            ],
        )
    )


MCP_RULES = (
    (("system.metrics", "resource.utilization"), _metrics),
    (("service.health",), _health),
    (("network.latency", "response.times"), _performance),
    (("deployment.state",), _deployment),
    (("security", "auth"), _security),
)


def process_mcp_query(query: str) -> MCPQueryResult:
    """Return the fixed payload for the first MCP rule the query matches."""
    query_lower = query.lower()
    for keywords, build in MCP_RULES:
        if any(keyword in query_lower for keyword in keywords):
            return build()
    return ErrorResult(message=UNRECOGNIZED_MESSAGE)


# --- Text rendering ---


def render_mcp_result(result: MCPQueryResult) -> str:
    """Render an MCP result as a markdown block for the chat view."""
    match result:
        case MetricsResult(data=data):
            return (
                "📊 System Metrics:\n\n"
                f"CPU:\n• Usage: {data.cpu.usage}\n• Cores: {data.cpu.cores}\n"
                f"• Temperature: {data.cpu.temperature}\n\n"
                f"Memory:\n• Used: {data.memory.used}\n• Available: {data.memory.available}\n"
                f"• Swap: {data.memory.swap}\n\n"
                f"Disk I/O:\n• Read: {data.disk.read}\n• Write: {data.disk.write}\n• IOPS: {data.disk.iops}"
            )
        case HealthResult(data=data):
            lines = ["🩺 Service Health Status:", ""]
            lines.extend(f"• {svc.name}: {svc.status} (uptime {svc.uptime})" for svc in data.services)
            return "\n".join(lines)
        case PerformanceResult(data=data):
            lines = ["⏱️ Performance Metrics:", ""]
            lines.extend(f"• {ep.path}: p95 {ep.p95}, p99 {ep.p99}" for ep in data.endpoints)
            return "\n".join(lines)
        case DeploymentResult(data=data):
            lines = ["🚀 Deployment State:", ""]
            lines.extend(
                f"• {svc.name} {svc.version}: {svc.replicas} replicas, {svc.status} (uptime {svc.uptime})"
                for svc in data.services
            )
            return "\n".join(lines)
        case SecurityResult(data=data):
            lines = [f"🔒 Security Status: {data.status}", f"Last scan: {data.last_scan}", "", "Findings:"]
            lines.extend(f"• [{finding.severity}] {finding.description}" for finding in data.findings)
            return "\n".join(lines)
        case ErrorResult(message=message):
            suggestions = "\n".join(f"• {c.name}: {', '.join(c.queries)}" for c in MCP_CATEGORIES)
            return f"⚠️ {message}\n\nSuggested queries:\n{suggestions}"
        case _:
            assert_never(result)
