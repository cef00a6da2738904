"""Static datasets served by the console in place of a real backend.

Everything here is seeded at import time and never written back.
"""

from incident_console.data.models import (
    HealthCheckDetails,
    HealthCheckItem,
    Incident,
    Notification,
    RCAReport,
    Recommendation,
    ServiceDependency,
    Telemetry,
)

INCIDENTS: tuple[Incident, ...] = (
    Incident(
        id="INC-001",
        title="Jenkins Pipeline Failure",
        status="Active",
        priority="High",
        timestamp="2025-03-25 22:45:00",
        affected_services=("CI/CD", "Deployment", "Build System"),
        assigned_team="DevOps",
        telemetry=Telemetry(cpu=85, memory=92, latency=1200),
        related_incidents=("INC-003",),
        rca="Pending",
    ),
    Incident(
        id="INC-002",
        title="Database Connection Timeout",
        status="Investigating",
        priority="High",
        timestamp="2025-03-25 23:00:00",
        affected_services=("Database", "API Gateway", "User Service"),
        assigned_team="Database",
        telemetry=Telemetry(cpu=95, memory=88, latency=5000),
        rca="High connection pool exhaustion due to connection leaks",
    ),
    Incident(
        id="INC-003",
        title="SonarQube Quality Gate Failure",
        status="Active",
        priority="Medium",
        timestamp="2025-03-25 22:30:00",
        affected_services=("Code Quality", "CI/CD"),
        assigned_team="DevOps",
        telemetry=Telemetry(cpu=45, memory=60, latency=800),
        related_incidents=("INC-001",),
        rca="Pending",
    ),
    Incident(
        id="INC-004",
        title="Kubernetes Pod OOM",
        status="Resolved",
        priority="High",
        timestamp="2025-03-25 21:15:00",
        affected_services=("Order Service", "Payment Service"),
        assigned_team="Platform",
        telemetry=Telemetry(cpu=100, memory=98, latency=3000),
        rca="Memory limit misconfiguration in deployment yaml",
    ),
    Incident(
        id="INC-005",
        title="API Gateway Latency Spike",
        status="Active",
        priority="Medium",
        timestamp="2025-03-25 23:10:00",
        affected_services=("API Gateway", "All Services"),
        assigned_team="Platform",
        telemetry=Telemetry(cpu=75, memory=82, latency=2500),
        rca="Pending",
    ),
    Incident(
        id="INC-006",
        title="SSL Certificate Expiry Warning",
        status="Investigating",
        priority="Low",
        timestamp="2025-03-25 22:00:00",
        affected_services=("Security", "API Gateway"),
        assigned_team="Security",
        telemetry=Telemetry(cpu=30, memory=45, latency=500),
        rca="Certificate renewal process delayed",
    ),
)

RECOMMENDATIONS: tuple[Recommendation, ...] = (
    Recommendation(
        type="health",
        title="Database Connection Pool Optimization",
        description="Current connection pool size may be insufficient for peak loads",
        severity="medium",
        action="Increase max pool size to 50 connections",
    ),
    Recommendation(
        type="security",
        title="SSL Certificate Expiration",
        description="Production SSL certificate will expire in 30 days",
        severity="high",
        action="Renew SSL certificate",
    ),
    Recommendation(
        type="performance",
        title="API Response Time Degradation",
        description="P95 latency increased by 25% in last 24 hours",
        severity="medium",
        action="Investigate slow queries and optimize",
    ),
    Recommendation(
        type="incident",
        title="Error Rate Spike",
        description="Payment service showing 5% error rate increase",
        severity="high",
        action="Check payment gateway integration",
    ),
    Recommendation(
        type="devops",
        title="Container Resource Limits",
        description="Some containers running without resource limits",
        severity="low",
        action="Set CPU and memory limits",
    ),
)

HEALTH_CHECKS: tuple[HealthCheckItem, ...] = (
    HealthCheckItem(
        category="Authentication Service",
        status="healthy",
        details=HealthCheckDetails(
            pod_count=3,
            ready_pods=3,
            cpu_usage=45,
            memory_usage=62,
            restarts=0,
            uptime="15d 7h",
            node_status="Running on nodes: worker-1, worker-2, worker-3",
        ),
        namespace="auth-system",
        timestamp="2025-03-25 23:05:00",
    ),
    HealthCheckItem(
        category="Payment Processing Pods",
        status="warning",
        details=HealthCheckDetails(
            pod_count=5,
            ready_pods=4,
            cpu_usage=78,
            memory_usage=85,
            restarts=2,
            uptime="7d 12h",
            node_status="Pod payment-proc-3 pending on worker-2",
        ),
        namespace="payment-system",
        timestamp="2025-03-25 23:06:00",
    ),
    HealthCheckItem(
        category="Order Management Service",
        status="critical",
        details=HealthCheckDetails(
            pod_count=4,
            ready_pods=2,
            cpu_usage=92,
            memory_usage=95,
            restarts=5,
            uptime="2d 4h",
            node_status="CrashLoopBackOff on worker-1",
        ),
        namespace="order-system",
        timestamp="2025-03-25 23:07:00",
    ),
    HealthCheckItem(
        category="API Gateway Pods",
        status="healthy",
        details=HealthCheckDetails(
            pod_count=6,
            ready_pods=6,
            cpu_usage=55,
            memory_usage=60,
            restarts=0,
            uptime="30d 2h",
            node_status="Running on all nodes",
        ),
        namespace="gateway",
        timestamp="2025-03-25 23:08:00",
    ),
    HealthCheckItem(
        category="Database Cluster",
        status="warning",
        details=HealthCheckDetails(
            pod_count=3,
            ready_pods=3,
            cpu_usage=82,
            memory_usage=88,
            restarts=1,
            uptime="45d 3h",
            node_status="High load on primary node",
        ),
        namespace="database",
        timestamp="2025-03-25 23:09:00",
    ),
    HealthCheckItem(
        category="Cache Service",
        status="healthy",
        details=HealthCheckDetails(
            pod_count=4,
            ready_pods=4,
            cpu_usage=40,
            memory_usage=55,
            restarts=0,
            uptime="20d 15h",
            node_status="Running on nodes: worker-1, worker-4",
        ),
        namespace="cache-system",
        timestamp="2025-03-25 23:10:00",
    ),
)

RCA_REPORTS: tuple[RCAReport, ...] = (
    RCAReport(
        issue_id="DEVOPS-123",
        summary="Production Pipeline Failure",
        impact="Critical - Delayed deployment of payment service updates affecting 15% of transactions",
        root_cause=(
            "Jenkins agent disconnection during crucial deployment step caused by network partition. "
            "The backup agent failed to take over due to misconfigured failover settings."
        ),
        timeline=(
            "2025-03-25 21:30:00 - Issue detected\n"
            "2025-03-25 21:35:00 - Alert triggered\n"
            "2025-03-25 21:45:00 - DevOps team engaged\n"
            "2025-03-25 22:15:00 - Root cause identified\n"
            "2025-03-25 22:30:00 - Fix implemented"
        ),
        resolution=(
            "Restored network connectivity and updated Jenkins agent failover configuration. "
            "Implemented proper health checks for agent availability."
        ),
        preventive_measures=(
            "Implement redundant network paths for Jenkins agents",
            "Add automated failover testing in pre-production",
            "Enhance monitoring for agent health metrics",
            "Update runbook with failover procedures",
        ),
    ),
    RCAReport(
        issue_id="DEVOPS-124",
        summary="SonarQube Code Quality Gate Failure",
        impact="Medium - Blocked merge of feature branch affecting team velocity",
        root_cause=(
            "Recent migration to new SonarQube version changed default quality profiles. "
            "Legacy code patterns now trigger new security hotspots and code smells."
        ),
        timeline=(
            "2025-03-25 22:15:00 - Quality gate failure detected\n"
            "2025-03-25 22:20:00 - Development team notified\n"
            "2025-03-25 22:45:00 - Analysis completed"
        ),
        resolution=(
            "Updated quality profiles to match organization standards. "
            "Created technical debt backlog for addressing legacy code issues."
        ),
        preventive_measures=(
            "Create automated quality profile backup",
            "Implement test runs for major SonarQube updates",
            "Document quality gate configuration changes",
            "Set up regular code quality review meetings",
        ),
    ),
    RCAReport(
        issue_id="DEVOPS-125",
        summary="ArgoCD Sync Failure",
        impact="High - Prevented automatic deployment of critical security patches",
        root_cause=(
            "Helm chart version mismatch between environments and invalid RBAC permissions "
            "for ArgoCD service account in target namespace."
        ),
        timeline=(
            "2025-03-25 22:30:00 - Sync failure detected\n"
            "2025-03-25 22:35:00 - Platform team alerted\n"
            "2025-03-25 22:50:00 - RBAC issues identified\n"
            "2025-03-25 23:05:00 - Resolution implemented"
        ),
        resolution=(
            "Standardized Helm chart versions across environments "
            "and corrected RBAC permissions for ArgoCD service account."
        ),
        preventive_measures=(
            "Implement version control for Helm charts",
            "Add automated RBAC validation tests",
            "Create environment parity checker",
            "Set up automated drift detection",
        ),
    ),
)

SERVICE_DEPENDENCIES: tuple[ServiceDependency, ...] = (
    ServiceDependency(name="API Gateway", type="upstream", status="healthy", latency=45),
    ServiceDependency(name="Database", type="downstream", status="degraded", latency=150),
    ServiceDependency(name="Cache", type="downstream", status="healthy", latency=5),
)

NOTIFICATIONS: tuple[Notification, ...] = (
    Notification(message="New critical incident reported", type="error"),
    Notification(message="System health check completed", type="success"),
    Notification(message="Backup process successful", type="success"),
)
