"""
Remote Repo Resolver — Turn a registry row into live remote metadata.

Parses owner/name from the stored URL, then issues three independent
reads concurrently (repository, branches, last 5 commits). All three
must succeed. A malformed URL fails before any remote call.
"""

from __future__ import annotations

import asyncio
import logging

from ..config.settings import DEFAULT_HOST
from ..github.base import HostedRepoClient
from ..github.urls import RepoCoordinates, parse_repo_url
from ..models.repository import (
    RECENT_COMMITS_LIMIT,
    CommitSummary,
    RepoDetails,
    Repository,
    utc_now_iso,
)
from ..registry.base import RepositoryRegistry

logger = logging.getLogger(__name__)


class RemoteRepoResolver:
    """Fetches live metadata for registry rows."""

    def __init__(self, client: HostedRepoClient, host: str = DEFAULT_HOST):
        self.client = client
        self.host = host

    def coordinates(self, repo: Repository) -> RepoCoordinates:
        """Owner/name of a row. Raises InvalidUrlFormat."""
        return parse_repo_url(repo.url, self.host)

    async def resolve(self, repo: Repository) -> RepoDetails:
        """Default branch, branch list and last commits of `repo`."""
        owner, name = self.coordinates(repo)
        logger.info(f"[resolver] Fetching details for {owner}/{name}")

        info, branches, commits = await asyncio.gather(
            self.client.get_repository(owner, name),
            self.client.list_branches(owner, name),
            self.client.list_commits(owner, name, per_page=RECENT_COMMITS_LIMIT),
        )

        details = RepoDetails(
            default_branch=info["default_branch"],
            branches=branches,
            last_commits=[
                CommitSummary(sha=c.sha, message=c.message, date=c.date, author=c.author)
                for c in commits
            ],
        )
        logger.debug(
            f"[resolver] {owner}/{name}: default={details.default_branch}, "
            f"{len(details.branches)} branches, head={details.head.sha[:7] if details.head else None}"
        )
        return details

    async def get_default_branch(self, owner: str, name: str) -> str:
        """Only the default branch, without refetching branches or commits."""
        info = await self.client.get_repository(owner, name)
        return info["default_branch"]

    async def get_branch_tip(self, owner: str, name: str, branch: str) -> str:
        """Live tip sha of `branch`."""
        return (await self.client.get_branch(owner, name, branch)).sha


async def refresh_metadata(
    registry: RepositoryRegistry,
    resolver: RemoteRepoResolver,
    repo_id: str,
) -> RepoDetails:
    """
    Refresh one row's cached metadata (the `getLastCommit` operation).

    Writes last_commit, last_commit_date, last_sync, status, default_branch,
    branches and recent_commits. A repo without commits keeps its previous
    last_commit.
    """
    repo = await registry.get(repo_id)
    details = await resolver.resolve(repo)

    fields = {
        "last_sync": utc_now_iso(),
        "status": "synced",
        "default_branch": details.default_branch,
        "branches": details.branches,
        "recent_commits": details.last_commits,
    }
    head = details.head
    if head is not None:
        fields["last_commit"] = head.sha
        fields["last_commit_date"] = head.date

    await registry.update(repo_id, **fields)
    logger.info(
        f"[resolver] Refreshed {repo.label}: "
        f"{head.sha[:7] if head else 'no commits'} on {details.default_branch}",
        extra={"repo_id": repo_id},
    )
    return details
