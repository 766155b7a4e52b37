"""State transitions for the issue browser.

``resolve_issues_query`` is a pure function: it never mutates its arguments and
the state it returns shares no mutable object with them, so it can safely be
applied more than once to the same inputs.
"""

from app.adapters.github_models import Organization, QueryResult
from app.schemas.issues import UiState


def resolve_issues_query(
    prior: UiState,
    result: QueryResult,
    cursor: str | None,
) -> UiState:
    """Compute the next UI state from a GraphQL result.

    Without a cursor the result is a fresh search and replaces the prior
    organization. With a cursor it is a continuation page: its issue edges are
    appended to the prior ones, while ``pageInfo`` and ``totalCount`` come from
    the new page. Errors always come from the latest result.
    """
    organization = result.organization
    errors = [e.model_copy(deep=True) for e in result.errors] if result.errors is not None else None

    if organization is None:
        return UiState(path=prior.path, organization=None, errors=errors)
    if cursor is None:
        return UiState(path=prior.path, organization=organization.model_copy(deep=True), errors=errors)
    return UiState(path=prior.path, organization=_append_issues(prior.organization, organization), errors=errors)


def _append_issues(prior: Organization | None, new: Organization) -> Organization:
    merged = new.model_copy(deep=True)
    if merged.repository is None or merged.repository.issues is None:
        return merged

    old_edges = []
    if prior is not None and prior.repository is not None and prior.repository.issues is not None:
        old_edges = [edge.model_copy(deep=True) for edge in prior.repository.issues.edges]

    issues = merged.repository.issues
    merged_issues = issues.model_copy(update={"edges": old_edges + issues.edges})
    merged_repository = merged.repository.model_copy(update={"issues": merged_issues})
    return merged.model_copy(update={"repository": merged_repository})


def change_path(prior: UiState, path: str) -> UiState:
    """Return a copy of ``prior`` with a new search path and nothing else changed."""
    return prior.model_copy(update={"path": path}, deep=True)
