"""Unit tests for the incident query classifier."""

import pytest

from incident_console.data.fixtures import INCIDENTS
from incident_console.data.models import Incident, Telemetry
from incident_console.query.incidents import (
    FALLBACK_RULE,
    classify_incident_query,
    parse_incident_timestamp,
    query_incidents,
    run_incident_query,
)


def _incident(
    id: str,
    timestamp: str = "2025-03-25 10:00:00",
    priority: str = "Medium",
    status: str = "Active",
    team: str = "DevOps",
    services: tuple[str, ...] = (),
    cpu: float = 10,
    memory: float = 10,
) -> Incident:
    return Incident(
        id=id,
        title=f"Incident {id}",
        status=status,
        priority=priority,  # type: ignore[arg-type]
        timestamp=timestamp,
        affected_services=services,
        assigned_team=team,
        telemetry=Telemetry(cpu=cpu, memory=memory, latency=100),
    )


def _ids(incidents: list[Incident]) -> list[str]:
    return [inc.id for inc in incidents]


class TestClassifyIncidentQuery:
    @pytest.mark.parametrize(
        ("query", "category"),
        [
            ("show critical incidents", "critical"),
            ("anything URGENT?", "critical"),
            ("latest problems", "recent"),
            ("what got fixed", "resolved"),
            ("open incidents", "pending"),
            ("assigned to Platform", "team"),
            ("what is affecting Redis", "service"),
            ("high cpu", "performance"),
            ("jenkins", "search"),
        ],
    )
    def test_category(self, query: str, category: str) -> None:
        assert classify_incident_query(query).category == category

    def test_first_match_wins(self) -> None:
        # "critical" outranks "recent" and "team".
        assert classify_incident_query("recent critical incidents for the DevOps team").category == "critical"

    def test_resolved_checked_before_open(self) -> None:
        assert classify_incident_query("resolved or open").category == "resolved"

    def test_unmatched_query_uses_fallback(self) -> None:
        assert classify_incident_query("xyz") is FALLBACK_RULE


class TestQueryIncidents:
    def test_critical_returns_high_priority_subset_in_order(self) -> None:
        result = query_incidents("critical", INCIDENTS)
        assert _ids(result) == [inc.id for inc in INCIDENTS if inc.priority == "High"]
        assert result

    def test_recent_returns_top_three_descending(self) -> None:
        incidents = [
            _incident("A", "2025-03-25 08:00:00"),
            _incident("B", "2025-03-25 12:00:00"),
            _incident("C", "2025-03-24 23:00:00"),
            _incident("D", "2025-03-25 10:00:00"),
        ]
        assert _ids(query_incidents("recent", incidents)) == ["B", "D", "A"]

    def test_recent_with_fewer_than_three(self) -> None:
        incidents = [_incident("A", "2025-03-25 08:00:00"), _incident("B", "2025-03-25 12:00:00")]
        assert _ids(query_incidents("latest", incidents)) == ["B", "A"]

    def test_resolved(self) -> None:
        result = query_incidents("fixed", INCIDENTS)
        assert result
        assert all(inc.status == "Resolved" for inc in result)

    def test_pending_includes_investigating(self) -> None:
        incidents = [
            _incident("A", status="Active"),
            _incident("B", status="Resolved"),
            _incident("C", status="Investigating"),
        ]
        assert _ids(query_incidents("pending", incidents)) == ["A", "C"]

    def test_team_filter(self) -> None:
        incidents = [_incident("A", team="DevOps"), _incident("B", team="Security"), _incident("C", team="Security")]
        assert _ids(query_incidents("security team", incidents)) == ["B", "C"]

    def test_unknown_team_leaves_list_unfiltered(self) -> None:
        incidents = [_incident("A", team="DevOps"), _incident("B", team="Security")]
        assert _ids(query_incidents("team marketing", incidents)) == ["A", "B"]

    def test_service_filter(self) -> None:
        incidents = [
            _incident("A", services=("API Gateway", "Redis")),
            _incident("B", services=("Database",)),
        ]
        assert _ids(query_incidents("incidents affecting redis", incidents)) == ["A"]

    def test_performance_threshold_is_strict(self) -> None:
        incidents = [
            _incident("A", cpu=80, memory=80),
            _incident("B", cpu=81),
            _incident("C", memory=95),
        ]
        assert _ids(query_incidents("memory pressure", incidents)) == ["B", "C"]

    def test_fallback_search_matches_title_team_and_services(self) -> None:
        incidents = [
            _incident("A", services=("Build System",)),
            _incident("B", team="Database"),
            _incident("C"),
        ]
        assert _ids(query_incidents("build", incidents)) == ["A"]
        assert _ids(query_incidents("database", incidents)) == ["B"]
        assert _ids(query_incidents("incident c", incidents)) == ["C"]

    def test_no_match_is_empty_not_error(self) -> None:
        assert query_incidents("nothing like this", INCIDENTS) == []

    def test_source_list_is_not_mutated(self) -> None:
        incidents = [_incident("A", "2025-03-25 08:00:00"), _incident("B", "2025-03-25 12:00:00")]
        query_incidents("recent", incidents)
        assert _ids(incidents) == ["A", "B"]

    def test_idempotent(self) -> None:
        for query in ("critical", "recent", "team devops", "cpu", "gateway"):
            assert run_incident_query(query, INCIDENTS) == run_incident_query(query, INCIDENTS)


class TestParseIncidentTimestamp:
    def test_standard_format(self) -> None:
        assert parse_incident_timestamp("2025-03-25 22:45:00").hour == 22

    def test_iso_format(self) -> None:
        assert parse_incident_timestamp("2025-03-25T22:45:00").minute == 45

    def test_garbage_sorts_oldest(self) -> None:
        incidents = [_incident("A", "not a date"), _incident("B", "2020-01-01 00:00:00")]
        assert _ids(query_incidents("recent", incidents)) == ["B", "A"]
