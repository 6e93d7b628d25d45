"""
Hosted Repo Client — Interface to the remote hosted-repository API.

The engine only talks to the host through this narrow interface, so the
orchestrator is host-agnostic and can run against `MockHostedRepoClient`.
All methods raise `RemoteApiError` on any remote failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.repository import BranchInfo, CommitInfo


class HostedRepoClient(ABC):
    """Abstract async client for ref, merge and commit operations."""

    @abstractmethod
    async def get_repository(self, owner: str, name: str) -> dict:
        """Repository metadata. Must contain `default_branch`."""

    @abstractmethod
    async def list_branches(self, owner: str, name: str) -> List[BranchInfo]:
        pass

    @abstractmethod
    async def list_commits(
        self, owner: str, name: str, per_page: int = 5, sha: Optional[str] = None
    ) -> List[CommitInfo]:
        """Commits reachable from `sha` (default branch if None), newest first."""

    @abstractmethod
    async def get_branch(self, owner: str, name: str, branch: str) -> BranchInfo:
        pass

    @abstractmethod
    async def get_commit(self, owner: str, name: str, sha: str) -> CommitInfo:
        pass

    @abstractmethod
    async def create_ref(self, owner: str, name: str, ref: str, sha: str) -> str:
        """Create `ref` (e.g. refs/heads/main) at `sha`. Returns the sha."""

    @abstractmethod
    async def update_ref(
        self, owner: str, name: str, ref: str, sha: str, force: bool = False
    ) -> str:
        """Move `ref` (e.g. heads/main) to `sha`. Returns the new sha."""

    @abstractmethod
    async def merge(
        self, owner: str, name: str, base: str, head: str, commit_message: str
    ) -> Optional[CommitInfo]:
        """
        Merge `head` into branch `base`.

        Returns the merge commit, or None when there was nothing to merge.
        """

    async def aclose(self) -> None:
        """Release network resources."""
