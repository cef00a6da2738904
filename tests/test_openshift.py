"""Tests for the OpenShift service: health buckets, quantity parsing, and live reads with fixture fallback."""

import httpx
import pytest
import respx

from incident_console.services.openshift import (
    KubeResource,
    OpenShiftService,
    PodMetrics,
    aggregate_pod_metrics,
    health_label,
    health_percentage,
    mock_pods,
    parse_cpu_millicores,
    parse_memory_bytes,
)

CLUSTER = "https://cluster.test:6443"
PODS_URL = f"{CLUSTER}/api/v1/namespaces/payments/pods"
DEPLOYMENTS_URL = f"{CLUSTER}/apis/apps/v1/namespaces/payments/deployments"
METRICS_URL = f"{CLUSTER}/apis/metrics.k8s.io/v1beta1/namespaces/payments/pods"


def _pod(name: str, phase: str = "Running", ready: bool = True) -> KubeResource:
    return {
        "metadata": {"name": name},
        "status": {"phase": phase, "conditions": [{"type": "Ready", "status": "True" if ready else "False"}]},
    }


def _deployment(name: str, available: bool, replicas: int = 2, ready: int = 2) -> KubeResource:
    return {
        "metadata": {"name": name},
        "status": {
            "replicas": replicas,
            "availableReplicas": ready,
            "observedGeneration": 4,
            "conditions": [{"type": "Available", "status": "True" if available else "False"}],
        },
    }


@pytest.fixture
def live() -> OpenShiftService:
    return OpenShiftService(base_url=CLUSTER, token="sha256~fake", namespace="payments")


@pytest.fixture
def offline() -> OpenShiftService:
    return OpenShiftService()


class TestHealthBuckets:
    def test_all_ready(self) -> None:
        assert health_percentage(3, 3) == 100
        assert health_label(100) == "Healthy"

    def test_two_of_three_rounds_to_67_warning(self) -> None:
        assert health_percentage(2, 3) == 67
        assert health_label(67) == "Warning"

    def test_degraded_boundary(self) -> None:
        assert health_label(75) == "Degraded"
        assert health_label(74) == "Warning"

    def test_warning_boundary(self) -> None:
        assert health_label(50) == "Warning"
        assert health_label(49) == "Critical"

    def test_halves_round_up(self) -> None:
        assert health_percentage(1, 8) == 13

    def test_empty_is_zero(self) -> None:
        assert health_percentage(0, 0) == 0
        assert health_label(0) == "Critical"


class TestQuantityParsing:
    @pytest.mark.parametrize(("quantity", "millicores"), [("250m", 250), ("0.5", 500), ("2", 2000), ("bogus", 0)])
    def test_cpu(self, quantity: str, millicores: int) -> None:
        assert parse_cpu_millicores(quantity) == millicores

    @pytest.mark.parametrize(
        ("quantity", "size"),
        [("128Mi", 128 * 1024**2), ("1Gi", 1024**3), ("512Ki", 512 * 1024), ("4096", 4096), ("bogus", 0)],
    )
    def test_memory(self, quantity: str, size: int) -> None:
        assert parse_memory_bytes(quantity) == size

    def test_aggregate(self) -> None:
        pods: list[PodMetrics] = [
            {"containers": [{"usage": {"cpu": "250m", "memory": "128Mi"}}]},
            {"containers": [{"usage": {"cpu": "0.5", "memory": "384Mi"}}]},
            {"containers": []},
        ]
        metrics = aggregate_pod_metrics(pods)
        assert metrics["cpu"] == {"usage": "750m", "limit": "4000m"}
        assert metrics["memory"] == {"usage": "512Mi", "limit": "8Gi"}
        assert metrics["pods"] == {"running": 2, "total": 3}


class TestOfflineFallback:
    def test_not_configured(self, offline: OpenShiftService) -> None:
        assert not offline.is_configured

    async def test_pod_query_uses_fixtures(self, offline: OpenShiftService) -> None:
        text = await offline.process_query("show me the pods")
        assert "Pod Status in default: 🟢 Healthy" in text
        assert "Health: 100% (3/3 pods running)" in text
        assert "✅ frontend-pod-1:" in text

    async def test_metrics_query_uses_fixtures(self, offline: OpenShiftService) -> None:
        text = await offline.process_query("cluster performance")
        assert "CPU Usage: 450m / 1000m" in text
        assert "Memory Usage: 1.2Gi / 2Gi" in text

    async def test_overview(self, offline: OpenShiftService) -> None:
        text = await offline.process_query("how is openshift doing")
        assert "OpenShift Cluster Overview for default" in text
        assert "Pods: 3 running / 3 total" in text
        assert "Deployments: 3 healthy / 3 total" in text


@pytest.mark.integration
class TestLiveCluster:
    @respx.mock
    async def test_pods_two_of_three_running(self, live: OpenShiftService) -> None:
        route = respx.get(PODS_URL).mock(
            return_value=httpx.Response(
                200,
                json={"items": [_pod("api-1"), _pod("api-2"), _pod("api-3", phase="Pending", ready=False)]},
            )
        )

        text = await live.process_query("pod status")

        assert route.called
        assert route.calls.last.request.headers["Authorization"] == "Bearer sha256~fake"
        assert "🟠 Warning" in text
        assert "Health: 67% (2/3 pods running)" in text
        assert "⚠️ api-3:" in text
        assert "Ready: ✗" in text

    @respx.mock
    async def test_deployments(self, live: OpenShiftService) -> None:
        respx.get(DEPLOYMENTS_URL).mock(
            return_value=httpx.Response(
                200,
                json={"items": [_deployment("web", True), _deployment("worker", False, replicas=4, ready=1)]},
            )
        )

        text = await live.process_query("deployment health")

        assert "Health: 50% (1/2 deployments healthy)" in text
        assert "🟠 Warning" in text
        assert "Replicas: 1/4 (25% healthy)" in text
        assert "Generation: 4" in text

    @respx.mock
    async def test_metrics_aggregated(self, live: OpenShiftService) -> None:
        respx.get(METRICS_URL).mock(
            return_value=httpx.Response(
                200,
                json={"items": [{"containers": [{"usage": {"cpu": "100m", "memory": "1Gi"}}]}]},
            )
        )

        text = await live.process_query("metrics")

        assert "CPU Usage: 100m / 4000m" in text
        assert "Memory Usage: 1024Mi / 8Gi" in text
        assert "Pods: 1 running / 1 total" in text

    @respx.mock
    async def test_upstream_error_falls_back_silently(self, live: OpenShiftService) -> None:
        respx.get(PODS_URL).mock(return_value=httpx.Response(503, text="unavailable"))

        pods = await live.get_resources("pods")

        assert pods == mock_pods("payments")

    @respx.mock
    async def test_unreachable_cluster_falls_back_silently(self, live: OpenShiftService) -> None:
        respx.get(METRICS_URL).mock(side_effect=httpx.ConnectError("connection refused"))

        metrics = await live.get_metrics()

        assert metrics["cpu"]["usage"] == "450m"

    @respx.mock
    async def test_single_resource_by_name(self, live: OpenShiftService) -> None:
        respx.get(f"{PODS_URL}/api-1").mock(return_value=httpx.Response(200, json=_pod("api-1")))

        pods = await live.get_resources("pods", name="api-1")

        assert [p["metadata"]["name"] for p in pods] == ["api-1"]

    @respx.mock
    async def test_html_body_falls_back_silently(self, live: OpenShiftService) -> None:
        respx.get(PODS_URL).mock(return_value=httpx.Response(200, text="<html>login</html>"))

        text = await live.process_query("pods")

        assert "Pod Status in payments: 🟢 Healthy" in text
        assert "Health: 100% (3/3 pods running)" in text

    @respx.mock
    async def test_non_object_body_falls_back_silently(self, live: OpenShiftService) -> None:
        respx.get(DEPLOYMENTS_URL).mock(return_value=httpx.Response(200, json=[]))

        deployments = await live.get_resources("deployments")

        assert [d["metadata"]["name"] for d in deployments] == ["frontend", "backend", "database"]

    @respx.mock
    async def test_non_list_items_falls_back_silently(self, live: OpenShiftService) -> None:
        respx.get(METRICS_URL).mock(return_value=httpx.Response(200, json={"items": "none"}))

        metrics = await live.get_metrics()

        assert metrics["cpu"]["usage"] == "450m"
