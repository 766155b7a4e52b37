from typing import Any

import pytest

from app.adapters.github_models import QueryResult

ORG = "the-road-to-learn-react"
REPO = "the-road-to-learn-react"


def issue_edge(n: int, reactions: tuple[str, ...] = ("HEART",)) -> dict[str, Any]:
    return {
        "node": {
            "id": f"I_{n}",
            "title": f"Issue {n}",
            "url": f"https://github.com/{ORG}/{REPO}/issues/{n}",
            "reactions": {
                "edges": [{"node": {"id": f"R_{n}_{i}", "content": content}} for i, content in enumerate(reactions)]
            },
        }
    }


@pytest.fixture
def make_body():
    """Build a raw GraphQL response body for one page of issues."""

    def _factory(
        first: int = 1,
        count: int = 5,
        has_next_page: bool = False,
        end_cursor: str | None = None,
        total_count: int | None = None,
        errors: list[dict[str, Any]] | None = None,
        with_organization: bool = True,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"data": {"organization": None}}
        if with_organization:
            body["data"]["organization"] = {
                "name": "The Road to learn React",
                "url": f"https://github.com/{ORG}",
                "repository": {
                    "name": REPO,
                    "url": f"https://github.com/{ORG}/{REPO}",
                    "issues": {
                        "edges": [issue_edge(n) for n in range(first, first + count)],
                        "totalCount": total_count if total_count is not None else first + count - 1,
                        "pageInfo": {"endCursor": end_cursor, "hasNextPage": has_next_page},
                    },
                },
            }
        if errors is not None:
            body["errors"] = errors
        return body

    return _factory


@pytest.fixture
def make_result(make_body):
    """Same as ``make_body`` but validated into a QueryResult."""

    def _factory(**kwargs: Any) -> QueryResult:
        return QueryResult.model_validate(make_body(**kwargs))

    return _factory
