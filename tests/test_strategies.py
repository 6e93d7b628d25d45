"""
Tests for PushStrategyExecutor against the mock fork network.

Layout used by most tests:

    base ── s1          acme/app    (source)
        └── t1          mirror/app  (target, diverged)
"""

from __future__ import annotations

import json

import httpx
import pytest

from repofleet.engine.strategies import PushStrategyExecutor, PushTarget, merge_message
from repofleet.errors import InvalidRequest, RemoteApiError
from repofleet.github.client import GitHubClient

TARGET = PushTarget("mirror", "app", "main")


@pytest.fixture
def executor(mock_host) -> PushStrategyExecutor:
    return PushStrategyExecutor(mock_host)


@pytest.fixture
def diverged(mock_host):
    mock_host.add_repository("acme", "app")
    mock_host.fork("mirror", "app", "acme", "app")
    source_sha = mock_host.commit("acme", "app", "Source work")
    target_sha = mock_host.commit("mirror", "app", "Target work")
    return source_sha, target_sha


def rest_executor(ref_status: int, calls: list) -> PushStrategyExecutor:
    """Executor over the REST client; the merges endpoint always writes a merge commit."""

    def handler(request):
        body = json.loads(request.content)
        calls.append((request.method, request.url.path, body))
        if request.method == "PATCH":
            if ref_status == 422:
                return httpx.Response(422, json={"message": "Update is not a fast forward"})
            return httpx.Response(200, json={"object": {"sha": body["sha"]}})
        return httpx.Response(201, json={
            "sha": "m1",
            "commit": {"message": body["commit_message"]},
            "parents": [{"sha": "t1"}, {"sha": body["head"]}],
        })

    client = GitHubClient("ghp_test", transport=httpx.MockTransport(handler))
    return PushStrategyExecutor(client)


class TestForce:

    @pytest.mark.asyncio
    async def test_force_overwrites_target(self, mock_host, executor, diverged):
        source_sha, target_sha = diverged

        sha = await executor.apply("force", TARGET, source_sha, "Source")

        assert sha == source_sha
        assert mock_host.tip("mirror", "app") == source_sha
        # Target-only commit is no longer reachable from the branch
        assert not mock_host.is_ancestor(target_sha, mock_host.tip("mirror", "app"))

    @pytest.mark.asyncio
    async def test_force_with_lease_behaves_like_force(self, mock_host, executor, diverged):
        # No compare-and-swap: a target that moved is still overwritten
        source_sha, _ = diverged
        mock_host.commit("mirror", "app", "Concurrent target work")

        sha = await executor.apply("force-with-lease", TARGET, source_sha, "Source")

        assert sha == source_sha
        assert mock_host.tip("mirror", "app") == source_sha


class TestRegular:

    @pytest.mark.asyncio
    async def test_merge_commit_has_both_parents(self, mock_host, executor, diverged):
        source_sha, target_sha = diverged

        sha = await executor.apply("regular", TARGET, source_sha, "Source")

        merged = mock_host.commits[sha]
        assert merged.parents == [target_sha, source_sha]
        assert merged.message == merge_message("Source", "main", "regular")
        assert mock_host.tip("mirror", "app") == sha

    @pytest.mark.asyncio
    async def test_fast_forward_lands_on_source_commit(self, mock_host, executor):
        mock_host.add_repository("acme", "app")
        mock_host.fork("mirror", "app", "acme", "app")
        source_sha = mock_host.commit("acme", "app", "Ahead")

        sha = await executor.apply("regular", TARGET, source_sha, "Source")

        assert sha == source_sha
        assert mock_host.tip("mirror", "app") == source_sha
        assert mock_host.call_count("merge") == 0

    @pytest.mark.asyncio
    async def test_behind_target_is_fast_forwarded_not_merged(self):
        calls = []
        executor = rest_executor(200, calls)

        sha = await executor.apply("regular", TARGET, "s1", "Source")

        assert sha == "s1"
        assert calls == [
            ("PATCH", "/repos/mirror/app/git/refs/heads/main", {"sha": "s1", "force": False}),
        ]

    @pytest.mark.asyncio
    async def test_rejected_fast_forward_falls_back_to_merge(self):
        calls = []
        executor = rest_executor(422, calls)

        sha = await executor.apply("regular", TARGET, "s1", "Source")

        assert sha == "m1"
        assert [(method, path) for method, path, _ in calls] == [
            ("PATCH", "/repos/mirror/app/git/refs/heads/main"),
            ("POST", "/repos/mirror/app/merges"),
        ]
        assert calls[1][2]["head"] == "s1"
        assert calls[1][2]["base"] == "main"

    @pytest.mark.asyncio
    async def test_other_ref_errors_do_not_merge(self, mock_host, executor, diverged):
        source_sha, target_sha = diverged
        mock_host.inject_failure("update_ref", repo="mirror/app", status=403,
                                 message="Resource not accessible")

        with pytest.raises(RemoteApiError) as exc:
            await executor.apply("regular", TARGET, source_sha, "Source")
        assert exc.value.status == 403
        assert mock_host.call_count("merge") == 0
        assert mock_host.tip("mirror", "app") == target_sha

    @pytest.mark.asyncio
    async def test_already_merged_returns_source_sha(self, mock_host, executor):
        mock_host.add_repository("acme", "app")
        mock_host.fork("mirror", "app", "acme", "app")
        source_sha = mock_host.tip("acme", "app")
        mock_host.commit("mirror", "app", "Target ahead")
        before = mock_host.tip("mirror", "app")

        sha = await executor.apply("regular", TARGET, source_sha, "Source")

        assert sha == source_sha
        assert mock_host.tip("mirror", "app") == before

    @pytest.mark.asyncio
    async def test_conflict_is_fatal(self, mock_host, executor, diverged):
        source_sha, target_sha = diverged
        mock_host.add_conflict("mirror", "app", "main")

        with pytest.raises(RemoteApiError) as exc:
            await executor.apply("regular", TARGET, source_sha, "Source")
        assert exc.value.status == 409
        assert mock_host.tip("mirror", "app") == target_sha
        assert mock_host.call_count("merge") == 1


class TestValidation:

    @pytest.mark.asyncio
    async def test_unknown_strategy(self, mock_host, executor):
        with pytest.raises(InvalidRequest):
            await executor.apply("rebase", TARGET, "abc", "Source")
        assert mock_host.call_count() == 0

    def test_push_target_str(self):
        assert str(TARGET) == "mirror/app:main"
