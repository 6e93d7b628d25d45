"""
Tests for RefSynchronizer.ensure_branch.
"""

import pytest

from repofleet.engine.refs import RefSynchronizer
from repofleet.errors import RemoteApiError


@pytest.fixture
def refs(mock_host) -> RefSynchronizer:
    return RefSynchronizer(mock_host)


class TestEnsureBranch:

    @pytest.mark.asyncio
    async def test_existing_branch_is_returned(self, mock_host, refs):
        mock_host.add_repository("acme", "app")
        tip = mock_host.tip("acme", "app")

        branch = await refs.ensure_branch("acme", "app", "main", "ignored")

        assert branch.sha == tip
        assert mock_host.call_count("create_ref") == 0

    @pytest.mark.asyncio
    async def test_missing_branch_is_created_at_fallback(self, mock_host, refs):
        mock_host.add_repository("acme", "src")
        mock_host.add_repository("acme", "dst", default_branch="develop", commits=0)
        sha = mock_host.tip("acme", "src")

        branch = await refs.ensure_branch("acme", "dst", "develop", sha)

        assert branch.name == "develop"
        assert branch.sha == sha
        assert mock_host.tip("acme", "dst", "develop") == sha

    @pytest.mark.asyncio
    async def test_idempotent(self, mock_host, refs):
        mock_host.add_repository("acme", "src")
        mock_host.add_repository("acme", "dst", commits=0)
        sha = mock_host.tip("acme", "src")

        first = await refs.ensure_branch("acme", "dst", "main", sha)
        second = await refs.ensure_branch("acme", "dst", "main", sha)

        assert first == second
        assert mock_host.call_count("create_ref") == 1

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, mock_host, refs):
        mock_host.add_repository("acme", "app")
        mock_host.inject_failure("get_branch", status=401, message="Bad credentials")

        with pytest.raises(RemoteApiError) as exc:
            await refs.ensure_branch("acme", "app", "main", "abc")
        assert exc.value.status == 401
        assert mock_host.call_count("create_ref") == 0

    @pytest.mark.asyncio
    async def test_failed_create_propagates(self, mock_host, refs):
        mock_host.add_repository("acme", "dst", commits=0)

        with pytest.raises(RemoteApiError) as exc:
            await refs.ensure_branch("acme", "dst", "main", "0" * 40)
        assert exc.value.status == 422
