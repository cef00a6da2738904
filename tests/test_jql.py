"""Unit tests for the natural-language to JQL translator."""

import pytest

from incident_console.query.jql import build_jql, translate_to_jql


class TestBuildJql:
    def test_with_clause(self) -> None:
        assert build_jql("priority = High") == "project = KAN AND priority = High ORDER BY created DESC"

    def test_without_clause(self) -> None:
        assert build_jql("", "OPS") == "project = OPS ORDER BY created DESC"


class TestTranslateToJql:
    def test_show_all_issues_is_whole_project(self) -> None:
        assert translate_to_jql("show all issues") == "project = KAN ORDER BY created DESC"

    def test_unassigned_tickets(self) -> None:
        assert "assignee is EMPTY" in translate_to_jql("unassigned tickets")

    def test_unassigned_checked_before_assigned(self) -> None:
        assert translate_to_jql("issues not assigned to anyone") == (
            "project = KAN AND assignee is EMPTY ORDER BY created DESC"
        )

    def test_assigned_to_me_hits_assigned_rule_first(self) -> None:
        # "assigned" is tested before "assigned to me", so currentUser() is only reached via "my issues".
        assert "assignee is not EMPTY" in translate_to_jql("tickets assigned to me")
        assert "assignee = currentUser()" in translate_to_jql("my tasks")

    @pytest.mark.parametrize(
        ("query", "clause"),
        [
            ("urgent stuff", "priority = High"),
            ("what are we working on", 'status = "In Progress"'),
            ("show stories", "issuetype = Story"),
            ("list bugs", "issuetype = Bug"),
            ("show tasks", "issuetype = Task"),
            ("open things", "status not in (Closed, Resolved)"),
            ("closed last week", "status in (Closed, Resolved)"),
            ("blocked work", "status = Blocked"),
        ],
    )
    def test_rule_clauses(self, query: str, clause: str) -> None:
        assert translate_to_jql(query) == f"project = KAN AND {clause} ORDER BY created DESC"

    def test_generic_issues_is_treated_as_bugs(self) -> None:
        assert translate_to_jql("issues") == "project = KAN AND issuetype = Bug ORDER BY created DESC"

    def test_blocked_outranks_blocker(self) -> None:
        assert "status = Blocked" in translate_to_jql("blocked by a blocker")

    def test_blocker_alone(self) -> None:
        assert translate_to_jql("blocker") == "project = KAN AND priority = Highest ORDER BY created DESC"

    def test_recent_is_whole_project(self) -> None:
        assert translate_to_jql("latest") == "project = KAN ORDER BY created DESC"

    def test_text_search_fallback(self) -> None:
        terms = '"payment" "gateway" "timeout"'
        assert translate_to_jql("payment gateway timeout") == (
            f'project = KAN AND (summary ~ "{terms}" OR description ~ "{terms}") ORDER BY created DESC'
        )

    def test_text_search_drops_short_words(self) -> None:
        jql = translate_to_jql("db is down")
        assert '"down"' in jql
        assert '"db"' not in jql
        assert '"is"' not in jql

    def test_short_words_only_fall_back_to_whole_project(self) -> None:
        assert translate_to_jql("a b") == "project = KAN ORDER BY created DESC"

    def test_custom_project(self) -> None:
        assert translate_to_jql("urgent", project="OPS") == "project = OPS AND priority = High ORDER BY created DESC"

    def test_idempotent(self) -> None:
        assert translate_to_jql("payment gateway timeout") == translate_to_jql("payment gateway timeout")
