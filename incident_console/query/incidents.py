"""Keyword classifier for free-text incident queries.

A query is lower-cased and tested against ``INCIDENT_RULES`` in order. The
first rule with a keyword contained in the query decides how the incident list
is filtered; a plain substring search is the fallback. The incidents tab and
the chat-style text report both go through ``run_incident_query`` so the two
views always agree on what a query means.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

from incident_console.data.models import Incident

logger = logging.getLogger(__name__)

IncidentCategory = Literal[
    "critical",
    "recent",
    "resolved",
    "pending",
    "team",
    "service",
    "performance",
    "search",
]

KNOWN_TEAMS = ("DevOps", "Platform", "Security", "Database")
OPEN_STATUSES = ("Active", "Investigating")
RECENT_LIMIT = 3
HIGH_USAGE_PERCENT = 80
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

IncidentFilter = Callable[[str, Sequence[Incident]], list[Incident]]


# --- Rule handlers ---


def parse_incident_timestamp(timestamp: str) -> datetime:
    """Parse an incident timestamp; unparseable values sort as the oldest."""
    try:
        return datetime.strptime(timestamp, TIMESTAMP_FORMAT)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(timestamp).replace(tzinfo=None)
    except ValueError:
        logger.warning("Unparseable incident timestamp: %r", timestamp)
        return datetime.min


def _high_priority(_query: str, incidents: Sequence[Incident]) -> list[Incident]:
    return [inc for inc in incidents if inc.priority == "High"]


def _most_recent(_query: str, incidents: Sequence[Incident]) -> list[Incident]:
    ordered = sorted(incidents, key=lambda inc: parse_incident_timestamp(inc.timestamp), reverse=True)
    return ordered[:RECENT_LIMIT]


def _resolved(_query: str, incidents: Sequence[Incident]) -> list[Incident]:
    return [inc for inc in incidents if inc.status == "Resolved"]


def _still_open(_query: str, incidents: Sequence[Incident]) -> list[Incident]:
    return [inc for inc in incidents if inc.status in OPEN_STATUSES]


def find_team(query: str) -> str | None:
    """Return the first known team named in the query, if any."""
    query_lower = query.lower()
    for team in KNOWN_TEAMS:
        if team.lower() in query_lower:
            return team
    return None


def _by_team(query: str, incidents: Sequence[Incident]) -> list[Incident]:
    team = find_team(query)
    if team is None:
        return list(incidents)
    return [inc for inc in incidents if inc.assigned_team == team]


def _by_service(query: str, incidents: Sequence[Incident]) -> list[Incident]:
    matched = [inc for inc in incidents if any(service.lower() in query for service in inc.affected_services)]
    # An unknown service name leaves the view unfiltered, like an unknown team.
    return matched if matched else list(incidents)


def _high_usage(_query: str, incidents: Sequence[Incident]) -> list[Incident]:
    return [
        inc
        for inc in incidents
        if inc.telemetry.cpu > HIGH_USAGE_PERCENT or inc.telemetry.memory > HIGH_USAGE_PERCENT
    ]


def _text_search(query: str, incidents: Sequence[Incident]) -> list[Incident]:
    return [
        inc
        for inc in incidents
        if query in inc.title.lower()
        or query in inc.status.lower()
        or query in inc.priority.lower()
        or query in inc.assigned_team.lower()
        or any(query in service.lower() for service in inc.affected_services)
    ]


# --- Rule table ---


class IncidentRule:
    """One row of the incident rule table."""

    __slots__ = ("category", "keywords", "apply")

    def __init__(self, category: IncidentCategory, keywords: tuple[str, ...], apply: IncidentFilter) -> None:
        self.category: IncidentCategory = category
        self.keywords = keywords
        self.apply = apply

    def matches(self, query_lower: str) -> bool:
        return any(keyword in query_lower for keyword in self.keywords)


# Order matters: the first matching rule wins.
INCIDENT_RULES: tuple[IncidentRule, ...] = (
    IncidentRule("critical", ("critical", "high priority", "urgent"), _high_priority),
    IncidentRule("recent", ("recent", "latest", "new"), _most_recent),
    IncidentRule("resolved", ("resolved", "fixed", "completed"), _resolved),
    IncidentRule("pending", ("pending", "open", "active"), _still_open),
    IncidentRule("team", ("team", "assigned"), _by_team),
    IncidentRule("service", ("service", "affecting"), _by_service),
    IncidentRule("performance", ("memory", "cpu", "performance"), _high_usage),
)

FALLBACK_RULE = IncidentRule("search", (), _text_search)


class IncidentQueryResult(BaseModel):
    """Outcome of an incident query: which rule fired and the resulting view."""

    model_config = ConfigDict(frozen=True)

    query: str
    category: IncidentCategory
    incidents: tuple[Incident, ...]


def classify_incident_query(query: str) -> IncidentRule:
    """Return the first rule whose keywords occur in the query, or the search fallback."""
    query_lower = query.lower()
    for rule in INCIDENT_RULES:
        if rule.matches(query_lower):
            return rule
    return FALLBACK_RULE


def run_incident_query(query: str, incidents: Sequence[Incident]) -> IncidentQueryResult:
    """Classify the query and apply the matching rule to the incident list."""
    rule = classify_incident_query(query)
    matched = rule.apply(query.lower(), incidents)
    logger.debug("Incident query %r matched rule '%s' (%d result(s))", query, rule.category, len(matched))
    return IncidentQueryResult(query=query, category=rule.category, incidents=tuple(matched))


def query_incidents(query: str, incidents: Sequence[Incident]) -> list[Incident]:
    """Filtered view of ``incidents`` for the incidents tab. Never raises."""
    return list(run_incident_query(query, incidents).incidents)
