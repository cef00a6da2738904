"""Translate free-text JIRA questions into JQL scoped to one project.

Phrase rules are checked in order against the lower-cased question and the
first hit picks a fixed JQL template. Anything unmatched becomes a text search
over summary and description.
"""

import logging

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_KEY = "KAN"
MIN_SEARCH_TERM_LENGTH = 3

# Order matters: "unassigned" must be tested before "assigned". A bare
# "issues" also selects issuetype = Bug.
JQL_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("not assigned", "unassigned", "no assignee"), "assignee is EMPTY"),
    (("assigned",), "assignee is not EMPTY"),
    (("my issues", "assigned to me", "my tasks"), "assignee = currentUser()"),
    (("high priority", "urgent"), "priority = High"),
    (("in progress", "working on"), 'status = "In Progress"'),
    (("all issues", "all jira", "show all", "list all"), ""),
    (("jira stories", "show stories", "list stories"), "issuetype = Story"),
    (("bugs", "show bugs", "list bugs", "issues"), "issuetype = Bug"),
    (("tasks", "show tasks", "list tasks"), "issuetype = Task"),
    (("recent", "latest"), ""),
    (("open", "active"), "status not in (Closed, Resolved)"),
    (("closed", "resolved"), "status in (Closed, Resolved)"),
    (("blocked",), "status = Blocked"),
    (("blocker",), "priority = Highest"),
)


def build_jql(clause: str, project: str = DEFAULT_PROJECT_KEY) -> str:
    """Wrap a JQL clause in the project scope and default ordering."""
    if clause:
        return f"project = {project} AND {clause} ORDER BY created DESC"
    return f"project = {project} ORDER BY created DESC"


def _text_search_clause(query: str) -> str:
    terms = [term for term in query.split(" ") if len(term) >= MIN_SEARCH_TERM_LENGTH]
    if not terms:
        return ""
    search = " ".join(f'"{term}"' for term in terms)
    return f'(summary ~ "{search}" OR description ~ "{search}")'


def translate_to_jql(query: str, project: str = DEFAULT_PROJECT_KEY) -> str:
    """Convert a natural-language question into a JQL expression."""
    query_lower = query.lower()
    for phrases, clause in JQL_RULES:
        if any(phrase in query_lower for phrase in phrases):
            jql = build_jql(clause, project)
            break
    else:
        jql = build_jql(_text_search_clause(query), project)

    logger.info("Converted query to JQL: %s", jql)
    return jql
