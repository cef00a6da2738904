"""OpenShift / Kubernetes cluster reads and chat-style status summaries.

Every read degrades to a fixed fixture dataset when the cluster is not
configured or the request fails. The failure is logged and counted, never
raised: the dashboard always has something to show.
"""

import asyncio
import logging
import re
from typing import Literal, TypedDict

import httpx

from incident_console.config import Settings
from incident_console.errors import UpstreamError
from incident_console.observability.metrics import FIXTURE_FALLBACKS_TOTAL, UPSTREAM_CALLS_TOTAL

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15
CPU_LIMIT = "4000m"
MEMORY_LIMIT = "8Gi"

ResourceType = Literal["pods", "deployments"]
HealthLabel = Literal["Healthy", "Degraded", "Warning", "Critical"]

_HEALTH_ICONS: dict[HealthLabel, str] = {
    "Healthy": "🟢",
    "Degraded": "🟡",
    "Warning": "🟠",
    "Critical": "🔴",
}


# --- Kubernetes response types ---


class KubeCondition(TypedDict, total=False):
    type: str
    status: str
    reason: str
    message: str
    lastTransitionTime: str


class KubeMetadata(TypedDict, total=False):
    name: str
    namespace: str
    labels: dict[str, str]


class KubeStatus(TypedDict, total=False):
    phase: str
    conditions: list[KubeCondition]
    replicas: int
    readyReplicas: int
    availableReplicas: int
    unavailableReplicas: int
    observedGeneration: int


class KubeResource(TypedDict, total=False):
    kind: str
    metadata: KubeMetadata
    status: KubeStatus


class ContainerMetrics(TypedDict, total=False):
    name: str
    usage: dict[str, str]


class PodMetrics(TypedDict, total=False):
    metadata: KubeMetadata
    containers: list[ContainerMetrics]


class UsageVsLimit(TypedDict):
    usage: str
    limit: str


class PodCounts(TypedDict):
    running: int
    total: int


class ClusterMetrics(TypedDict):
    cpu: UsageVsLimit
    memory: UsageVsLimit
    pods: PodCounts


# --- Fixtures ---


def _mock_pod(name: str, namespace: str) -> KubeResource:
    return {
        "kind": "Pod",
        "metadata": {"name": name, "namespace": namespace},
        "status": {
            "phase": "Running",
            "conditions": [
                {"type": "Ready", "status": "True"},
                {"type": "PodScheduled", "status": "True"},
            ],
        },
    }


def mock_pods(namespace: str) -> list[KubeResource]:
    return [_mock_pod(name, namespace) for name in ("frontend-pod-1", "backend-pod-1", "database-pod-1")]


def mock_deployments(namespace: str) -> list[KubeResource]:
    deployments: list[KubeResource] = []
    for name, replicas in (("frontend", 3), ("backend", 2), ("database", 1)):
        deployments.append(
            {
                "kind": "Deployment",
                "metadata": {"name": name, "namespace": namespace},
                "status": {
                    "replicas": replicas,
                    "readyReplicas": replicas,
                    "availableReplicas": replicas,
                    "observedGeneration": 1,
                    "conditions": [
                        {"type": "Available", "status": "True", "message": "Deployment has minimum availability."},
                        {"type": "Progressing", "status": "True"},
                    ],
                },
            }
        )
    return deployments


def mock_metrics() -> ClusterMetrics:
    return {
        "cpu": {"usage": "450m", "limit": "1000m"},
        "memory": {"usage": "1.2Gi", "limit": "2Gi"},
        "pods": {"running": 3, "total": 3},
    }


# --- Health helpers ---


def health_percentage(healthy: int, total: int) -> int:
    """Share of healthy resources as a whole percentage, rounding halves up. 0 when empty."""
    if total <= 0:
        return 0
    return int(healthy * 100 / total + 0.5)


def health_label(percentage: int) -> HealthLabel:
    if percentage == 100:
        return "Healthy"
    if percentage >= 75:
        return "Degraded"
    if percentage >= 50:
        return "Warning"
    return "Critical"


def _has_condition(resource: KubeResource, condition_type: str) -> bool:
    conditions = resource.get("status", {}).get("conditions", [])
    return any(c.get("type") == condition_type and c.get("status") == "True" for c in conditions)


def _is_running(pod: KubeResource) -> bool:
    return pod.get("status", {}).get("phase") == "Running"


def _check_mark(condition: KubeCondition) -> str:
    return "✓" if condition.get("status") == "True" else "✗"


# --- Quantity parsing ---

_QUANTITY_RE = re.compile(r"^(\d+(?:\.\d+)?)(m|Ki|Mi|Gi)?$")
_BINARY_MULTIPLIERS = {"Ki": 1024, "Mi": 1024**2, "Gi": 1024**3}


def parse_cpu_millicores(quantity: str) -> int:
    """Convert a CPU quantity ('250m', '0.5', '2') to millicores. Unparseable → 0."""
    match = _QUANTITY_RE.match(quantity.strip())
    if not match:
        return 0
    value, unit = float(match.group(1)), match.group(2)
    if unit == "m":
        return int(value)
    if unit is None:
        return round(value * 1000)
    return 0


def parse_memory_bytes(quantity: str) -> int:
    """Convert a memory quantity ('128Mi', '1Gi', '4096') to bytes. Unparseable → 0."""
    match = _QUANTITY_RE.match(quantity.strip())
    if not match:
        return 0
    value, unit = float(match.group(1)), match.group(2)
    if unit is None:
        return int(value)
    return int(value * _BINARY_MULTIPLIERS.get(unit, 0))


def aggregate_pod_metrics(pods: list[PodMetrics]) -> ClusterMetrics:
    """Sum first-container usage across pods into a cluster metrics summary."""
    total_cpu = 0
    total_memory = 0
    running = 0
    for pod in pods:
        containers = pod.get("containers", [])
        if containers:
            usage = containers[0].get("usage", {})
            total_cpu += parse_cpu_millicores(usage.get("cpu", "0"))
            total_memory += parse_memory_bytes(usage.get("memory", "0"))
        if any(c.get("usage", {}).get("cpu") and c.get("usage", {}).get("memory") for c in containers):
            running += 1

    return {
        "cpu": {"usage": f"{total_cpu}m", "limit": CPU_LIMIT},
        "memory": {"usage": f"{round(total_memory / 1024**2)}Mi", "limit": MEMORY_LIMIT},
        "pods": {"running": running, "total": len(pods)},
    }


# --- Service ---


class OpenShiftService:
    """Reads pods, deployments and metrics from one namespace of a cluster."""

    def __init__(
        self,
        base_url: str = "",
        token: str = "",
        namespace: str = "default",
        verify_ssl: bool = False,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.namespace = namespace
        self.verify_ssl = verify_ssl
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenShiftService":
        return cls(
            base_url=settings.cluster_url,
            token=settings.cluster_token,
            namespace=settings.cluster_namespace,
            verify_ssl=settings.cluster_verify_ssl,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.token)

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}", "Accept": "application/json"}

    async def _get(self, path: str) -> dict[str, object]:
        url = f"{self.base_url}{path}"
        logger.debug("Fetching OpenShift data from %s", url)
        async with httpx.AsyncClient(timeout=self.timeout, verify=self.verify_ssl) as client:
            try:
                response = await client.get(url, headers=self._headers())
            except httpx.HTTPError as e:
                UPSTREAM_CALLS_TOTAL.labels(service="openshift", status="error").inc()
                raise UpstreamError(f"Cannot reach OpenShift at {self.base_url}: {e}") from e
        if response.is_error:
            UPSTREAM_CALLS_TOTAL.labels(service="openshift", status="error").inc()
            raise UpstreamError(
                f"OpenShift API error: HTTP {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as e:
            UPSTREAM_CALLS_TOTAL.labels(service="openshift", status="error").inc()
            raise UpstreamError(f"Invalid JSON from OpenShift at {url}") from e
        if not isinstance(data, dict):
            UPSTREAM_CALLS_TOTAL.labels(service="openshift", status="error").inc()
            raise UpstreamError(f"Unexpected OpenShift response from {url}: expected an object")
        UPSTREAM_CALLS_TOTAL.labels(service="openshift", status="success").inc()
        return data

    def _fallback(self, resource_type: ResourceType) -> list[KubeResource]:
        FIXTURE_FALLBACKS_TOTAL.labels(resource=resource_type).inc()
        if resource_type == "pods":
            return mock_pods(self.namespace)
        return mock_deployments(self.namespace)

    async def get_resources(self, resource_type: ResourceType, name: str | None = None) -> list[KubeResource]:
        """List pods or deployments (or fetch one by name). Falls back to fixtures."""
        if not self.is_configured:
            logger.info("Using mock OpenShift %s (cluster not configured)", resource_type)
            return self._fallback(resource_type)

        api_path = "/api/v1" if resource_type == "pods" else "/apis/apps/v1"
        path = f"{api_path}/namespaces/{self.namespace}/{resource_type}"
        if name:
            path = f"{path}/{name}"

        try:
            data = await self._get(path)
        except UpstreamError:
            logger.warning("OpenShift %s read failed, serving fixture data", resource_type, exc_info=True)
            return self._fallback(resource_type)

        if name:
            return [data]  # type: ignore[list-item]
        items = data.get("items", [])
        if not isinstance(items, list):
            logger.warning("OpenShift %s response has no item list, serving fixture data", resource_type)
            return self._fallback(resource_type)
        return items

    async def get_metrics(self) -> ClusterMetrics:
        """Aggregate pod CPU/memory usage from metrics.k8s.io. Falls back to fixtures."""
        if not self.is_configured:
            logger.info("Using mock OpenShift metrics (cluster not configured)")
            FIXTURE_FALLBACKS_TOTAL.labels(resource="metrics").inc()
            return mock_metrics()

        try:
            data = await self._get(f"/apis/metrics.k8s.io/v1beta1/namespaces/{self.namespace}/pods")
        except UpstreamError:
            logger.warning("OpenShift metrics read failed, serving fixture data", exc_info=True)
            FIXTURE_FALLBACKS_TOTAL.labels(resource="metrics").inc()
            return mock_metrics()

        pods = data.get("items", [])
        if not isinstance(pods, list):
            logger.warning("OpenShift metrics response has no item list, serving fixture data")
            FIXTURE_FALLBACKS_TOTAL.labels(resource="metrics").inc()
            return mock_metrics()
        return aggregate_pod_metrics(pods)

    async def process_query(self, query: str) -> str:
        """Answer a free-text cluster question with a formatted status block."""
        query_lower = query.lower()

        if "pod" in query_lower:
            return self.format_pod_status(await self.get_resources("pods"))

        if "deployment" in query_lower:
            return self.format_deployment_status(await self.get_resources("deployments"))

        if "metrics" in query_lower or "performance" in query_lower:
            return self.format_metrics(await self.get_metrics())

        pods, deployments, metrics = await asyncio.gather(
            self.get_resources("pods"),
            self.get_resources("deployments"),
            self.get_metrics(),
        )
        return self.format_overview(pods, deployments, metrics)

    # --- Formatting ---

    def format_pod_status(self, pods: list[KubeResource]) -> str:
        running = sum(1 for pod in pods if _is_running(pod))
        percentage = health_percentage(running, len(pods))
        label = health_label(percentage)

        lines = [
            f"🔍 Pod Status in {self.namespace}: {_HEALTH_ICONS[label]} {label}",
            f"Health: {percentage}% ({running}/{len(pods)} pods running)",
        ]
        for pod in pods:
            status = pod.get("status", {})
            icon = "✅" if _has_condition(pod, "Ready") else "⚠️"
            lines.append("")
            lines.append(f"{icon} {pod.get('metadata', {}).get('name', 'unknown')}:")
            lines.append(f"   Status: {status.get('phase') or 'Unknown'}")
            conditions = status.get("conditions")
            if conditions:
                lines.append("   Health Checks:")
                lines.extend(f"     • {c.get('type')}: {_check_mark(c)}" for c in conditions)
        return "\n".join(lines)

    def format_deployment_status(self, deployments: list[KubeResource]) -> str:
        available_count = sum(1 for dep in deployments if _has_condition(dep, "Available"))
        percentage = health_percentage(available_count, len(deployments))
        label = health_label(percentage)

        lines = [
            f"📊 Deployment Status in {self.namespace}: {_HEALTH_ICONS[label]} {label}",
            f"Health: {percentage}% ({available_count}/{len(deployments)} deployments healthy)",
        ]
        for dep in deployments:
            status = dep.get("status", {})
            replicas = status.get("replicas", 0)
            available = status.get("availableReplicas", 0)
            icon = "✅" if _has_condition(dep, "Available") else "⚠️"
            lines.append("")
            lines.append(f"{icon} {dep.get('metadata', {}).get('name', 'unknown')}:")
            lines.append(f"   Replicas: {available}/{replicas} ({health_percentage(available, replicas)}% healthy)")
            lines.append(f"   Generation: {status.get('observedGeneration', 0)}")
            conditions = status.get("conditions")
            if conditions:
                lines.append("   Conditions:")
                for c in conditions:
                    message = f" ({c['message']})" if c.get("message") else ""
                    lines.append(f"     • {c.get('type')}: {_check_mark(c)}{message}")
        return "\n".join(lines)

    def format_metrics(self, metrics: ClusterMetrics) -> str:
        return (
            f"📈 Cluster Metrics for {self.namespace}:\n\n"
            f"CPU Usage: {metrics['cpu']['usage']} / {metrics['cpu']['limit']}\n"
            f"Memory Usage: {metrics['memory']['usage']} / {metrics['memory']['limit']}\n"
            f"Pods: {metrics['pods']['running']} running / {metrics['pods']['total']} total"
        )

    def format_overview(
        self,
        pods: list[KubeResource],
        deployments: list[KubeResource],
        metrics: ClusterMetrics,
    ) -> str:
        running = sum(1 for pod in pods if _is_running(pod))
        healthy = sum(1 for dep in deployments if _has_condition(dep, "Available"))
        return (
            f"🎯 OpenShift Cluster Overview for {self.namespace}:\n\n"
            "1. Resources:\n"
            f"   • Pods: {running} running / {len(pods)} total\n"
            f"   • Deployments: {healthy} healthy / {len(deployments)} total\n\n"
            "2. Performance:\n"
            f"   • CPU: {metrics['cpu']['usage']} / {metrics['cpu']['limit']}\n"
            f"   • Memory: {metrics['memory']['usage']} / {metrics['memory']['limit']}\n"
            f"   • Active Pods: {metrics['pods']['running']} / {metrics['pods']['total']}"
        )
