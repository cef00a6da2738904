"""Chat-style text rendering of incident query results."""

from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime

from incident_console.data.models import Incident
from incident_console.query.incidents import (
    IncidentCategory,
    IncidentQueryResult,
    find_team,
    parse_incident_timestamp,
)

_HEADINGS: dict[IncidentCategory, str] = {
    "critical": "High priority incidents",
    "recent": "Most recent incidents",
    "resolved": "Resolved incidents",
    "pending": "Open incidents",
    "team": "Incidents by team",
    "service": "Incidents by affected service",
    "performance": "Incidents with CPU or memory above 80%",
    "search": "Incidents matching your search",
}

_ICONS: dict[IncidentCategory, str] = {
    "critical": "🔴",
    "recent": "🔴",
    "resolved": "✅",
    "pending": "⚠️",
}


def format_age(timestamp: str, now: datetime) -> str:
    """Describe how long ago an incident was raised, e.g. '1 hours 5 minutes ago'."""
    minutes = int((now - parse_incident_timestamp(timestamp)).total_seconds() // 60)
    if minutes < 60:
        return f"{minutes} minutes ago"
    return f"{minutes // 60} hours {minutes % 60} minutes ago"


def _format_incident(incident: Incident, icon: str, now: datetime, show_rca: bool) -> list[str]:
    lines = [
        f"{icon} **{incident.id}** {incident.title}",
        f"   Status: {incident.status} | Priority: {incident.priority} | Team: {incident.assigned_team}",
        f"   Opened: {incident.timestamp} ({format_age(incident.timestamp, now)})",
    ]
    if show_rca and incident.has_rca:
        lines.append(f"   RCA: {incident.rca}")
    return lines


def _group_lines(groups: dict[str, list[Incident]]) -> list[str]:
    lines: list[str] = []
    for name, members in groups.items():
        lines.append(f"**{name}** ({len(members)})")
        for inc in members:
            lines.append(f"   • {inc.id} [{inc.status}, {inc.priority}] {inc.title}")
        lines.append("")
    return lines


def _group_by_team(incidents: Sequence[Incident]) -> dict[str, list[Incident]]:
    groups: dict[str, list[Incident]] = defaultdict(list)
    for inc in incidents:
        groups[inc.assigned_team].append(inc)
    return groups


def _group_by_service(incidents: Sequence[Incident], query_lower: str) -> dict[str, list[Incident]]:
    groups: dict[str, list[Incident]] = defaultdict(list)
    for inc in incidents:
        for service in inc.affected_services:
            if service.lower() in query_lower:
                groups[service].append(inc)
    if groups:
        return groups
    # No service named in the query: show every service.
    for inc in incidents:
        for service in inc.affected_services:
            groups[service].append(inc)
    return groups


def render_incident_report(result: IncidentQueryResult, now: datetime | None = None) -> str:
    """Render an incident query result as a markdown block for the chat view."""
    now = now or datetime.now()
    heading = _HEADINGS[result.category]

    if not result.incidents:
        return f"No results for '{result.query}': {heading.lower()} returned nothing."

    lines = [f"{heading} ({len(result.incidents)}):", ""]

    match result.category:
        case "team" if find_team(result.query) is None:
            lines.extend(_group_lines(_group_by_team(result.incidents)))
        case "service":
            lines.extend(_group_lines(_group_by_service(result.incidents, result.query.lower())))
        case _:
            icon = _ICONS.get(result.category, "•")
            for inc in result.incidents:
                lines.extend(_format_incident(inc, icon, now, show_rca=result.category == "resolved"))
                lines.append("")

    return "\n".join(lines).rstrip()
