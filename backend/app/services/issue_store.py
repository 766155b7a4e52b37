"""IssueStore: the single UI state container of the issue browser.

The store owns the current ``UiState``, runs fetches against the GitHub client,
and publishes every new state to its subscribers (one asyncio.Queue per
connected /events client).

Usage in lifespan (main.py):
    store = IssueStore(client=github_client, default_path=settings.default_path)
    app.state.issue_store = store

Usage in routers:
    outcome = await store.fetch("org/repo")
    outcome = await store.fetch(store.state.path, cursor=store.state.end_cursor)
"""

import asyncio
import contextlib
from dataclasses import dataclass
from typing import Any, Literal, Protocol

import structlog

from app.adapters.github_client import GitHubClientError
from app.adapters.github_models import QueryResult
from app.schemas.issues import UiState
from app.services.issue_state import change_path, resolve_issues_query

logger = structlog.get_logger(__name__)

_QUEUE_MAX_SIZE = 64

CANCELLED = "cancelled"

FetchPolicy = Literal["last_write_wins", "cancel_stale"]


class IssuesSource(Protocol):
    async def fetch_issues_of_repository(
        self, organization: str, repository: str, cursor: str | None = None
    ) -> QueryResult: ...


@dataclass(frozen=True)
class FetchOutcome:
    """Result of one fetch: the state after it, plus why it failed if it did."""

    ok: bool
    state: UiState
    reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self.reason == CANCELLED


def split_path(path: str) -> tuple[str, str | None]:
    """Split ``"org/repo"`` once on ``/``. A path without ``/`` has no repository."""
    organization, sep, repository = path.partition("/")
    return organization, repository if sep else None


class IssueStore:
    """Observable state cell updated only through pure transitions.

    ``STOP`` is a public sentinel placed on subscriber queues when the store
    closes. Consumers should break their read loop when they receive it.

    Overlapping fetches follow ``policy``: with ``last_write_wins`` every fetch
    completes and the last one to resolve is applied last; with
    ``cancel_stale`` starting a fetch cancels the one still in flight.
    """

    STOP: object = object()

    def __init__(self, client: IssuesSource, default_path: str, policy: FetchPolicy = "last_write_wins") -> None:
        self._client = client
        self._policy = policy
        self._state = UiState(path=default_path)
        self._subscribers: set[asyncio.Queue[Any]] = set()
        self._inflight: asyncio.Task[QueryResult] | None = None

    @property
    def state(self) -> UiState:
        return self._state

    def set_state(self, state: UiState) -> None:
        """Replace the whole state and notify every subscriber."""
        self._state = state
        serialised = state.model_dump_json(by_alias=True)
        for q in list(self._subscribers):
            try:
                q.put_nowait(serialised)
            except asyncio.QueueFull:  # noqa: PERF203
                logger.warning("state_subscriber_queue_full_dropping_state")

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def fetch(self, path: str, cursor: str | None = None) -> FetchOutcome:
        """Fetch one page of issues for ``path`` and publish the resulting state.

        Without a cursor this is a fresh search; with one it loads the next
        page and appends it. Transport failures leave the state unchanged and
        come back as ``ok=False``.
        """
        if path != self._state.path:
            self.set_state(change_path(self._state, path))

        organization, repository = split_path(path)
        log = logger.bind(path=path, cursor=cursor)
        log.info("issues_fetch_started")

        if self._policy == "cancel_stale" and self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
            log.info("issues_fetch_cancelled_stale")

        task = asyncio.create_task(self._client.fetch_issues_of_repository(organization, repository, cursor))
        self._inflight = task
        try:
            result = await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            return FetchOutcome(ok=False, state=self._state, reason=CANCELLED)
        except GitHubClientError as exc:
            log.warning("issues_fetch_failed", error=str(exc), status_code=exc.status_code)
            return FetchOutcome(ok=False, state=self._state, reason=str(exc))
        finally:
            if self._inflight is task:
                self._inflight = None

        self.set_state(resolve_issues_query(self._state, result, cursor))
        if result.errors:
            log.info("issues_fetch_returned_errors", errors=len(result.errors))
        else:
            log.info("issues_fetch_complete", edges=_edge_count(self._state))
        return FetchOutcome(ok=True, state=self._state)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self) -> asyncio.Queue[Any]:
        """Register a new subscriber and return its dedicated queue."""
        q: asyncio.Queue[Any] = asyncio.Queue(maxsize=_QUEUE_MAX_SIZE)
        self._subscribers.add(q)
        return q

    def unsubscribe(self, q: asyncio.Queue[Any]) -> None:
        """Remove a subscriber queue. Safe to call if the queue was already removed."""
        self._subscribers.discard(q)

    async def close(self) -> None:
        """Cancel any fetch in flight and tell every subscriber to exit."""
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._inflight
        self._inflight = None
        for q in list(self._subscribers):
            with contextlib.suppress(asyncio.QueueFull):
                q.put_nowait(self.STOP)


def _edge_count(state: UiState) -> int:
    organization = state.organization
    if organization is None or organization.repository is None or organization.repository.issues is None:
        return 0
    return len(organization.repository.issues.edges)
