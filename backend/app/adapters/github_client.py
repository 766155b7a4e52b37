"""HTTP adapter for the GitHub GraphQL API v4."""

from typing import Any

import httpx
import pydantic

from app.adapters.github_models import QueryResult
from app.adapters.github_queries import GET_ISSUES_OF_REPOSITORY


class GitHubClientError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubClient:
    DEFAULT_URL = "https://api.github.com/graphql"

    def __init__(self, token: str, url: str = DEFAULT_URL, timeout: float = 10.0) -> None:
        self._url = url
        self._http = httpx.AsyncClient(
            headers={"Authorization": f"bearer {token}"},
            timeout=timeout,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        if not self._http.is_closed:
            await self._http.aclose()

    async def send(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """POST a GraphQL document and return the decoded response body.

        The body carries ``data`` and, on query-level failures, ``errors``;
        those are returned as-is for the caller to inspect.

        Raises:
            GitHubClientError: On network failure, any non-2xx response, or a
                body that is not a JSON object.
        """
        try:
            resp = await self._http.post(self._url, json={"query": query, "variables": variables})
        except httpx.HTTPError as exc:
            raise GitHubClientError(f"GitHub GraphQL request failed: {exc}") from exc
        self._raise_for_status(resp)
        try:
            body = resp.json()
        except ValueError as exc:
            raise GitHubClientError(
                f"GitHub returned non-JSON body (status {resp.status_code}): {exc}",
                status_code=resp.status_code,
            ) from exc
        if not isinstance(body, dict):
            raise GitHubClientError(
                f"GitHub returned unexpected shape, expected object, got {type(body).__name__}",
                status_code=resp.status_code,
            )
        return body

    async def fetch_issues_of_repository(
        self,
        organization: str,
        repository: str,
        cursor: str | None = None,
    ) -> QueryResult:
        """Fetch one page of open issues, with their latest reactions.

        Args:
            organization: Organization login, e.g. ``the-road-to-learn-react``.
            repository: Repository name inside the organization.
            cursor: ``endCursor`` of the previous page, or None for the first page.
        """
        body = await self.send(
            GET_ISSUES_OF_REPOSITORY,
            {"organization": organization, "repository": repository, "cursor": cursor},
        )
        try:
            return QueryResult.model_validate(body)
        except pydantic.ValidationError as exc:
            raise GitHubClientError(f"GitHub response schema mismatch: {exc}") from exc

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.is_error:
            raise GitHubClientError(
                f"GitHub API error {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
            )
