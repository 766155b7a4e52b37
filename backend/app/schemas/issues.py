"""Pydantic schemas for the issue browser state and its REST API."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.adapters.github_models import GraphQLError, Organization


class UiState(BaseModel):
    """Everything the page renders. Replaced as a whole, never edited in place."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    path: str
    organization: Organization | None = None
    errors: list[GraphQLError] | None = None

    @property
    def end_cursor(self) -> str | None:
        issues = _issues_of(self.organization)
        return issues.page_info.end_cursor if issues is not None else None

    @property
    def has_next_page(self) -> bool:
        issues = _issues_of(self.organization)
        return issues is not None and issues.page_info.has_next_page


class FetchRequest(BaseModel):
    path: str
    cursor: str | None = None


def _issues_of(organization: Organization | None):
    if organization is None or organization.repository is None:
        return None
    return organization.repository.issues
