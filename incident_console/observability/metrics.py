"""Prometheus metric definitions for incident console self-instrumentation.

All metrics are module-level singletons registered with the default
prometheus_client registry.  Import them wherever instrumentation is needed.
"""

from prometheus_client import Counter, Gauge, Histogram, Info

# ---------------------------------------------------------------------------
# Histogram bucket definitions
# ---------------------------------------------------------------------------

REQUEST_DURATION_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 15.0)

# ---------------------------------------------------------------------------
# Request-level metrics
# ---------------------------------------------------------------------------

REQUEST_DURATION = Histogram(
    "incident_console_request_duration_seconds",
    "End-to-end request duration in seconds",
    labelnames=["endpoint"],
    buckets=REQUEST_DURATION_BUCKETS,
)

REQUESTS_TOTAL = Counter(
    "incident_console_requests_total",
    "Total number of requests",
    labelnames=["endpoint", "status"],
)

REQUESTS_IN_PROGRESS = Gauge(
    "incident_console_requests_in_progress",
    "Number of requests currently being processed",
    labelnames=["endpoint"],
)

# ---------------------------------------------------------------------------
# Chat dispatch and upstream metrics
# ---------------------------------------------------------------------------

DISPATCHES_TOTAL = Counter(
    "incident_console_dispatches_total",
    "Chat messages routed, by domain",
    labelnames=["domain"],
)

UPSTREAM_CALLS_TOTAL = Counter(
    "incident_console_upstream_calls_total",
    "Calls to third-party APIs (JIRA, GitHub, OpenShift)",
    labelnames=["service", "status"],
)

FIXTURE_FALLBACKS_TOTAL = Counter(
    "incident_console_fixture_fallbacks_total",
    "Cluster reads answered from fixture data instead of the live API",
    labelnames=["resource"],
)

# ---------------------------------------------------------------------------
# Health / info metrics
# ---------------------------------------------------------------------------

COMPONENT_HEALTHY = Gauge(
    "incident_console_component_healthy",
    "Whether a dependency component is healthy (1=healthy, 0=unhealthy)",
    labelnames=["component"],
)

APP_INFO = Info(
    "incident_console",
    "Incident console build information",
)
