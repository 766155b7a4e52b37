"""Pydantic models for the GitHub GraphQL API adapter.

Wire names are camelCase; attributes are snake_case. Unknown fields sent by the
API are ignored.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Base(BaseModel):
    model_config = ConfigDict(extra="ignore", alias_generator=to_camel, populate_by_name=True)


class ReactionContent(StrEnum):
    THUMBS_UP = "THUMBS_UP"
    THUMBS_DOWN = "THUMBS_DOWN"
    LAUGH = "LAUGH"
    HOORAY = "HOORAY"
    CONFUSED = "CONFUSED"
    HEART = "HEART"
    ROCKET = "ROCKET"
    EYES = "EYES"


class Reaction(_Base):
    id: str
    # New reaction types added upstream are kept as raw labels.
    content: ReactionContent | str


class ReactionEdge(_Base):
    node: Reaction


class ReactionConnection(_Base):
    edges: list[ReactionEdge] = Field(default_factory=list)


class Issue(_Base):
    id: str
    title: str
    url: str
    reactions: ReactionConnection = Field(default_factory=ReactionConnection)


class IssueEdge(_Base):
    node: Issue


class PageInfo(_Base):
    end_cursor: str | None = None
    has_next_page: bool = False


class IssueConnection(_Base):
    edges: list[IssueEdge] = Field(default_factory=list)
    total_count: int = 0
    page_info: PageInfo = Field(default_factory=PageInfo)


class Repository(_Base):
    name: str
    url: str
    issues: IssueConnection | None = None


class Organization(_Base):
    name: str | None = None
    url: str
    repository: Repository | None = None


class GraphQLError(_Base):
    """One entry of a GraphQL ``errors`` array. Extra keys (path, locations, type) are kept."""

    model_config = ConfigDict(extra="allow")

    message: str


class QueryData(_Base):
    organization: Organization | None = None


class QueryResult(_Base):
    """Decoded body of a GraphQL response: ``{"data": ..., "errors": [...]}``."""

    data: QueryData | None = None
    errors: list[GraphQLError] | None = None

    @property
    def organization(self) -> Organization | None:
        return self.data.organization if self.data is not None else None
