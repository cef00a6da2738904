"""Streamlit dashboard for the incident console.

Talks to the FastAPI backend via httpx. Run with: streamlit run incident_console/ui/app.py
"""

from typing import Any

import httpx
import streamlit as st

from incident_console.config import get_settings
from incident_console.services.jira import issue_to_incident

API_URL = get_settings().api_url

st.set_page_config(page_title="Incident Console", layout="wide")

_PRIORITY_BADGES = {"High": "🔴", "Medium": "🟡", "Low": "🟢"}
_STATUS_BADGES = {"healthy": ":white_check_mark:", "warning": ":warning:", "critical": ":x:"}
_SEVERITY_BADGES = {"high": "🔴", "medium": "🟡", "low": "🟢"}
_NOTIFY = {"success": st.success, "error": st.error, "warning": st.warning, "info": st.info}


def _api_get(path: str, params: dict[str, str] | None = None) -> Any:
    """GET an API route, rendering connection and HTTP failures inline. Returns None on failure."""
    try:
        resp = httpx.get(f"{API_URL}{path}", params=params, timeout=30.0)
        resp.raise_for_status()
    except httpx.ConnectError:
        st.error(f"Cannot reach the API server at {API_URL}.")
        return None
    except httpx.HTTPStatusError as exc:
        st.error(_error_text(exc.response))
        return None
    return resp.json()


def _api_post(path: str, body: dict[str, Any]) -> Any:
    try:
        resp = httpx.post(f"{API_URL}{path}", json=body, timeout=60.0)
        resp.raise_for_status()
    except httpx.ConnectError:
        st.error(f"Cannot reach the API server at {API_URL}.")
        return None
    except httpx.HTTPStatusError as exc:
        st.error(_error_text(exc.response))
        return None
    return resp.json()


def _error_text(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"API error (HTTP {response.status_code}): {response.text}"
    if isinstance(body, dict) and "error" in body:
        return str(body["error"])
    return f"API error (HTTP {response.status_code}): {response.text}"


def _incident_card(incident: dict[str, Any]) -> None:
    badge = _PRIORITY_BADGES.get(incident.get("priority", ""), "⚪")
    with st.container(border=True):
        st.markdown(f"{badge} **{incident['id']}** {incident['title']}")
        st.caption(
            f"{incident['status']} · {incident['priority']} · {incident['assigned_team']} · {incident['timestamp']}"
        )
        services = incident.get("affected_services") or []
        if services:
            st.markdown("Affected: " + ", ".join(f"`{s}`" for s in services))
        telemetry = incident.get("telemetry")
        if telemetry and any(telemetry.values()):
            cpu, mem, lat = st.columns(3)
            cpu.metric("CPU", f"{telemetry['cpu']}%")
            mem.metric("Memory", f"{telemetry['memory']}%")
            lat.metric("Latency", f"{telemetry['latency']} ms")


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------

if "messages" not in st.session_state:
    st.session_state.messages = []

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------

with st.sidebar:
    st.title("Incident Console")

    notifications = _api_get("/api/notifications") or []
    for note in notifications:
        _NOTIFY.get(note.get("type", "info"), st.info)(note["message"])

    st.divider()

    st.subheader("Backend Health")
    health_data = _api_get("/health")
    if isinstance(health_data, dict):
        overall = health_data.get("status", "unknown")
        if overall == "healthy":
            st.success(f"Overall: {overall}")
        elif overall == "degraded":
            st.warning(f"Overall: {overall}")
        else:
            st.error(f"Overall: {overall}")
        for comp in health_data.get("components", []):
            icon = ":white_check_mark:" if comp.get("status") == "healthy" else ":x:"
            label = f"{icon} {comp.get('name')}: {comp.get('status')}"
            if comp.get("detail"):
                label += f" ({comp['detail']})"
            st.markdown(label)

    with st.expander("Health Checks"):
        for check in _api_get("/api/health-checks") or []:
            details = check["details"]
            st.markdown(f"{_STATUS_BADGES.get(check['status'], ':grey_question:')} **{check['category']}**")
            st.caption(
                f"{check['namespace']} · pods {details['ready_pods']}/{details['pod_count']} · "
                f"CPU {details['cpu_usage']}% · memory {details['memory_usage']}% · "
                f"restarts {details['restarts']} · up {details['uptime']}"
            )
            st.caption(details["node_status"])

    with st.expander("Root Cause Analysis"):
        for report in _api_get("/api/rca") or []:
            st.markdown(f"**{report['issue_id']}**: {report['summary']}")
            st.markdown(f"*Impact:* {report['impact']}")
            st.markdown(f"*Root cause:* {report['root_cause']}")
            st.text(report["timeline"])
            st.markdown(f"*Resolution:* {report['resolution']}")
            st.markdown("\n".join(f"- {measure}" for measure in report["preventive_measures"]))
            st.divider()

    with st.expander("Mission Control Protocol"):
        categories = _api_get("/api/mcp/categories") or []
        suggestions = [q for category in categories for q in category["queries"]]
        picked = st.selectbox("Suggested queries", [""] + suggestions)
        mcp_query = st.text_input("MCP query", value=picked)
        if st.button("Run MCP query") and mcp_query.strip():
            result = _api_post("/api/mcp", {"query": mcp_query})
            if isinstance(result, dict):
                if result.get("type") == "error":
                    st.error(result.get("message", "Query not recognized."))
                else:
                    st.json(result.get("data", {}))

    if st.button("Clear conversation"):
        st.session_state.messages = []
        st.rerun()

# ---------------------------------------------------------------------------
# Tabs
# ---------------------------------------------------------------------------

incidents_tab, jira_tab, chat_tab, recommendations_tab, dependencies_tab = st.tabs(
    ["Incidents", "JIRA", "Chat", "Recommendations", "Dependencies"]
)

with incidents_tab:
    incident_query = st.text_input(
        "Filter incidents",
        placeholder="critical, recent, resolved, DevOps team, cpu...",
    )
    incident_list = _api_get("/api/incidents", params={"query": incident_query}) or []
    st.caption(f"{len(incident_list)} incident(s)")
    for incident in incident_list:
        _incident_card(incident)

    st.divider()
    incident_question = st.text_input(
        "Ask about incidents",
        placeholder="Which services are affected by high priority incidents?",
        key="incident_question",
    )
    if st.button("Ask", key="ask_incidents") and incident_question.strip():
        with st.spinner("Analyzing incidents..."):
            report = _api_post("/api/incidents/query", {"query": incident_question})
        if isinstance(report, dict):
            st.text(report.get("response", ""))

with jira_tab:
    jira_query = st.text_input("Search JIRA", placeholder="high priority, unassigned, show all issues...")
    if jira_query.strip():
        issues = _api_get("/api/jira", params={"action": "search", "query": jira_query}) or []
        st.caption(f"{len(issues)} issue(s)")
        for issue in issues:
            _incident_card(issue_to_incident(issue).model_dump())

with chat_tab:
    for msg in st.session_state.messages:
        with st.chat_message(msg["role"]):
            st.markdown(msg["content"])

    if prompt := st.chat_input("Ask about JIRA, GitHub, OpenShift or MCP..."):
        with st.spinner("Thinking..."):
            data = _api_post("/api/chat", {"message": prompt})
        if isinstance(data, dict):
            st.session_state.messages.extend(data.get("messages", []))
        st.rerun()

with recommendations_tab:
    for rec in _api_get("/api/recommendations") or []:
        with st.container(border=True):
            st.markdown(f"{_SEVERITY_BADGES.get(rec['severity'], '⚪')} **{rec['title']}** `{rec['type']}`")
            st.markdown(rec["description"])
            st.caption(f"Action: {rec['action']}")

with dependencies_tab:
    for dep in _api_get("/api/dependencies") or []:
        icon = {"healthy": "🟢", "degraded": "🟡", "down": "🔴"}.get(dep["status"], "⚪")
        st.markdown(f"{icon} **{dep['name']}** ({dep['type']}) · {dep['latency']} ms")
