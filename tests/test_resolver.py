"""
Tests for RemoteRepoResolver and the metadata refresh (getLastCommit).
"""

from __future__ import annotations

import pytest

from repofleet.engine.resolver import RemoteRepoResolver, refresh_metadata
from repofleet.errors import InvalidUrlFormat, RemoteApiError, RepositoryNotFound
from repofleet.models.repository import Repository


@pytest.fixture
def resolver(mock_host) -> RemoteRepoResolver:
    return RemoteRepoResolver(mock_host)


class TestResolve:

    @pytest.mark.asyncio
    async def test_details(self, mock_host, resolver):
        mock_host.add_repository("acme", "app", default_branch="trunk", commits=7)
        mock_host.commit("acme", "app", "Side work", branch="trunk")
        mock_host.repos[("acme", "app")].refs["feature"] = mock_host.tip("acme", "app")

        details = await resolver.resolve(Repository(url="https://github.com/acme/app"))

        assert details.default_branch == "trunk"
        assert [b.name for b in details.branches] == ["feature", "trunk"]
        assert len(details.last_commits) == 5
        assert details.head.sha == mock_host.tip("acme", "app")
        assert details.head.message == "Side work"

    @pytest.mark.asyncio
    async def test_issues_the_three_reads(self, mock_host, resolver):
        mock_host.add_repository("acme", "app")
        await resolver.resolve(Repository(url="https://github.com/acme/app"))
        assert sorted(c[0] for c in mock_host.calls) == [
            "get_repository", "list_branches", "list_commits",
        ]

    @pytest.mark.asyncio
    async def test_wire_shape_is_camel_case(self, mock_host, resolver):
        mock_host.add_repository("acme", "app")
        wire = (await resolver.resolve(Repository(url="https://github.com/acme/app"))).to_wire()
        assert set(wire) == {"defaultBranch", "branches", "lastCommits"}

    @pytest.mark.asyncio
    async def test_invalid_url_makes_no_remote_call(self, mock_host, resolver):
        with pytest.raises(InvalidUrlFormat):
            await resolver.resolve(Repository(url="not-a-url"))
        assert mock_host.call_count() == 0

    @pytest.mark.asyncio
    async def test_any_failed_read_fails_the_resolve(self, mock_host, resolver):
        mock_host.add_repository("acme", "app")
        mock_host.inject_failure("list_branches", status=403, message="Forbidden")
        with pytest.raises(RemoteApiError) as exc:
            await resolver.resolve(Repository(url="https://github.com/acme/app"))
        assert exc.value.status == 403

    @pytest.mark.asyncio
    async def test_unknown_remote_repo(self, resolver):
        with pytest.raises(RemoteApiError) as exc:
            await resolver.resolve(Repository(url="https://github.com/ghost/none"))
        assert exc.value.is_not_found


class TestRefreshMetadata:

    @pytest.mark.asyncio
    async def test_updates_cached_row(self, mock_host, registry, resolver):
        mock_host.add_repository("acme", "app", commits=3)
        repo = await registry.register("https://github.com/acme/app")

        details = await refresh_metadata(registry, resolver, repo.id)
        row = await registry.get(repo.id)

        assert row.status == "synced"
        assert row.last_sync is not None
        assert row.default_branch == "main"
        assert row.last_commit == mock_host.tip("acme", "app")
        assert row.last_commit_date == details.head.date
        assert len(row.recent_commits) == 3
        assert [b.name for b in row.branches] == ["main"]

    @pytest.mark.asyncio
    async def test_empty_repository_keeps_last_commit(self, mock_host, registry, resolver):
        mock_host.add_repository("acme", "empty", commits=0)
        repo = await registry.register("https://github.com/acme/empty")
        await registry.update(repo.id, last_commit="old")

        await refresh_metadata(registry, resolver, repo.id)
        row = await registry.get(repo.id)
        assert row.last_commit == "old"
        assert row.recent_commits == []

    @pytest.mark.asyncio
    async def test_unknown_id(self, mock_host, registry, resolver):
        with pytest.raises(RepositoryNotFound):
            await refresh_metadata(registry, resolver, "missing")
        assert mock_host.call_count() == 0

    @pytest.mark.asyncio
    async def test_failure_leaves_row_untouched(self, mock_host, registry, resolver):
        mock_host.add_repository("acme", "app")
        repo = await registry.register("https://github.com/acme/app")
        mock_host.inject_failure("list_commits", status=500)

        with pytest.raises(RemoteApiError):
            await refresh_metadata(registry, resolver, repo.id)
        row = await registry.get(repo.id)
        assert row.status is None
        assert row.last_commit is None
