"""
Ref Synchronizer — Make sure a target branch exists before pushing.

A target repository does not need to contain the branch in advance:
a 404 on the read creates it at the fallback commit. Any other error,
including a failed create, propagates unchanged.
"""

from __future__ import annotations

import logging

from ..errors import RemoteApiError
from ..github.base import HostedRepoClient
from ..models.repository import BranchInfo

logger = logging.getLogger(__name__)


class RefSynchronizer:

    def __init__(self, client: HostedRepoClient):
        self.client = client

    async def ensure_branch(
        self, owner: str, name: str, branch: str, fallback_sha: str
    ) -> BranchInfo:
        """Return `branch`, creating it at `fallback_sha` if it is missing."""
        try:
            return await self.client.get_branch(owner, name, branch)
        except RemoteApiError as e:
            if not e.is_not_found:
                raise

        logger.info(
            f"[refs] {owner}/{name} has no branch {branch}, creating at {fallback_sha[:7]}"
        )
        await self.client.create_ref(owner, name, f"refs/heads/{branch}", fallback_sha)
        return await self.client.get_branch(owner, name, branch)
