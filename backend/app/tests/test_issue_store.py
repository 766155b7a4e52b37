"""Tests for IssueStore: fetch orchestration, overlap policy and subscriptions."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
import respx

from app.adapters.github_client import GitHubClient, GitHubClientError
from app.services.issue_store import IssueStore, split_path


def _mock_client(*results) -> MagicMock:
    client = MagicMock()
    client.fetch_issues_of_repository = AsyncMock(side_effect=list(results))
    return client


def _edge_ids(store: IssueStore) -> list[str]:
    return [edge.node.id for edge in store.state.organization.repository.issues.edges]


class TestSplitPath:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("org/repo", ("org", "repo")),
            ("org/repo/extra", ("org", "repo/extra")),
            ("org", ("org", None)),
            ("org/", ("org", "")),
            ("", ("", None)),
        ],
    )
    def test_split_once(self, path, expected):
        assert split_path(path) == expected


class TestFetch:
    async def test_first_fetch_replaces_state(self, make_result):
        client = _mock_client(make_result(count=5, has_next_page=True, end_cursor="c1"))
        store = IssueStore(client=client, default_path="org/repo")

        outcome = await store.fetch("org/repo")

        assert outcome.ok is True
        assert outcome.state is store.state
        assert len(_edge_ids(store)) == 5
        client.fetch_issues_of_repository.assert_awaited_once_with("org", "repo", None)

    async def test_load_more_scenario(self, make_result):
        client = _mock_client(
            make_result(count=5, has_next_page=True, end_cursor="c1"),
            make_result(first=6, count=3, has_next_page=False, end_cursor="c2"),
        )
        store = IssueStore(client=client, default_path="org/repo")

        await store.fetch("org/repo")
        assert store.state.has_next_page is True
        assert store.state.end_cursor == "c1"

        await store.fetch(store.state.path, cursor=store.state.end_cursor)

        assert _edge_ids(store) == [f"I_{n}" for n in range(1, 9)]
        assert store.state.has_next_page is False
        client.fetch_issues_of_repository.assert_awaited_with("org", "repo", "c1")

    async def test_new_path_is_recorded(self, make_result):
        store = IssueStore(client=_mock_client(make_result()), default_path="org/repo")
        await store.fetch("facebook/react")
        assert store.state.path == "facebook/react"
        store._client.fetch_issues_of_repository.assert_awaited_once_with("facebook", "react", None)

    async def test_malformed_path_is_forwarded(self, make_result):
        result = make_result(with_organization=False, errors=[{"message": "Variable $repository was not provided"}])
        store = IssueStore(client=_mock_client(result), default_path="org/repo")

        outcome = await store.fetch("just-an-org")

        assert outcome.ok is True
        store._client.fetch_issues_of_repository.assert_awaited_once_with("just-an-org", None, None)
        assert store.state.errors[0].message == "Variable $repository was not provided"

    async def test_query_errors_are_stored(self, make_result):
        store = IssueStore(
            client=_mock_client(make_result(errors=[{"message": "partial failure"}])),
            default_path="org/repo",
        )
        await store.fetch("org/repo")
        assert [e.message for e in store.state.errors] == ["partial failure"]

    async def test_transport_failure_leaves_state_unchanged(self, make_result):
        client = _mock_client(
            make_result(count=5, has_next_page=True, end_cursor="c1"),
            GitHubClientError("GitHub API error 502: bad gateway", status_code=502),
        )
        store = IssueStore(client=client, default_path="org/repo")
        await store.fetch("org/repo")
        before = store.state

        outcome = await store.fetch("org/repo", cursor="c1")

        assert outcome.ok is False
        assert outcome.cancelled is False
        assert "502" in outcome.reason
        assert store.state is before

    async def test_transport_failure_keeps_typed_path(self):
        client = _mock_client(GitHubClientError("refused"))
        store = IssueStore(client=client, default_path="org/repo")
        outcome = await store.fetch("other/repo")
        assert outcome.ok is False
        assert store.state.path == "other/repo"
        assert store.state.organization is None

    async def test_undecodable_response_is_a_failed_outcome(self):
        with respx.mock() as mock:
            mock.post(GitHubClient.DEFAULT_URL).respond(200, content=b'{"data": "\x80"}')
            async with GitHubClient(token="t") as client:
                store = IssueStore(client=client, default_path="org/repo")
                outcome = await store.fetch("org/repo")

        assert outcome.ok is False
        assert "non-JSON" in outcome.reason
        assert store.state.organization is None


class TestOverlappingFetches:
    async def test_last_write_wins_applies_later_response(self, make_result):
        gate_a = asyncio.Event()
        results = {"a": make_result(first=1, count=1), "b": make_result(first=50, count=1)}

        async def _fetch(organization, repository, cursor=None):
            if organization == "a":
                await gate_a.wait()
            return results[organization]

        client = MagicMock()
        client.fetch_issues_of_repository = _fetch
        store = IssueStore(client=client, default_path="a/repo")

        slow = asyncio.create_task(store.fetch("a/repo"))
        await asyncio.sleep(0)
        outcome_b = await store.fetch("b/repo")
        gate_a.set()
        outcome_a = await slow

        assert outcome_a.ok and outcome_b.ok
        assert _edge_ids(store) == ["I_1"]

    async def test_cancel_stale_drops_earlier_fetch(self, make_result):
        gate_a = asyncio.Event()
        results = {"a": make_result(first=1, count=1), "b": make_result(first=50, count=1)}

        async def _fetch(organization, repository, cursor=None):
            if organization == "a":
                await gate_a.wait()
            return results[organization]

        client = MagicMock()
        client.fetch_issues_of_repository = _fetch
        store = IssueStore(client=client, default_path="a/repo", policy="cancel_stale")

        slow = asyncio.create_task(store.fetch("a/repo"))
        await asyncio.sleep(0)
        outcome_b = await store.fetch("b/repo")
        outcome_a = await slow

        assert outcome_b.ok is True
        assert outcome_a.ok is False
        assert outcome_a.cancelled is True
        assert _edge_ids(store) == ["I_50"]
        assert store.state.path == "b/repo"

    async def test_cancelling_the_caller_propagates(self):
        started = asyncio.Event()

        async def _fetch(organization, repository, cursor=None):
            started.set()
            await asyncio.Event().wait()

        client = MagicMock()
        client.fetch_issues_of_repository = _fetch
        store = IssueStore(client=client, default_path="org/repo")

        task = asyncio.create_task(store.fetch("org/repo"))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


class TestSubscriptions:
    async def test_subscriber_receives_each_published_state(self, make_result):
        store = IssueStore(client=_mock_client(make_result(count=2)), default_path="org/repo")
        q = store.subscribe()

        await store.fetch("org/repo")

        frame = json.loads(q.get_nowait())
        assert frame["path"] == "org/repo"
        assert len(frame["organization"]["repository"]["issues"]["edges"]) == 2
        assert "pageInfo" in frame["organization"]["repository"]["issues"]

    async def test_path_change_is_published_before_result(self, make_result):
        store = IssueStore(client=_mock_client(make_result()), default_path="org/repo")
        q = store.subscribe()

        await store.fetch("other/repo")

        first = json.loads(q.get_nowait())
        second = json.loads(q.get_nowait())
        assert first["path"] == "other/repo"
        assert first["organization"] is None
        assert second["organization"] is not None

    async def test_unsubscribed_queue_gets_nothing(self, make_result):
        store = IssueStore(client=_mock_client(make_result()), default_path="org/repo")
        q = store.subscribe()
        store.unsubscribe(q)
        await store.fetch("org/repo")
        assert q.empty()

    async def test_full_queue_drops_state(self):
        store = IssueStore(client=_mock_client(), default_path="org/repo")
        q = store.subscribe()
        for _ in range(q.maxsize + 3):
            store.set_state(store.state)
        assert q.full()

    async def test_close_sends_stop(self):
        store = IssueStore(client=_mock_client(), default_path="org/repo")
        q = store.subscribe()
        await store.close()
        assert q.get_nowait() is IssueStore.STOP
