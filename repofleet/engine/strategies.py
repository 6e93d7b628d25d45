"""
Push Strategy Executor — Apply a push strategy through the host API.

    regular           fast-forward ref update when the branch is behind,
                      else host-side merge of the source commit
    force             unconditional ref overwrite to the source commit
    force-with-lease  same as force (see note below)

Any remote failure (conflict, permission, rate limit) is fatal for the
target; nothing is retried here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import InvalidRequest, RemoteApiError
from ..github.base import HostedRepoClient
from ..models.run import PUSH_STRATEGIES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PushTarget:
    owner: str
    name: str
    branch: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}:{self.branch}"


def merge_message(source_label: str, branch: str, strategy: str) -> str:
    return f"Merge {source_label} into {branch} ({strategy} push)"


class PushStrategyExecutor:

    def __init__(self, client: HostedRepoClient):
        self.client = client

    async def apply(
        self,
        strategy: str,
        target: PushTarget,
        source_sha: str,
        source_label: str,
    ) -> str:
        """Push `source_sha` onto `target` and return the resulting sha."""
        if strategy not in PUSH_STRATEGIES:
            raise InvalidRequest(f"Unknown push strategy: {strategy}")

        if strategy in ("force", "force-with-lease"):
            # NOTE: force-with-lease performs no compare-and-swap against an
            # expected remote tip. It overwrites exactly like force.
            logger.info(f"[push] {strategy}: {target} → {source_sha[:7]}")
            await self.client.update_ref(
                target.owner, target.name, f"heads/{target.branch}", source_sha,
                force=True,
            )
            return source_sha

        try:
            await self.client.update_ref(
                target.owner, target.name, f"heads/{target.branch}", source_sha,
                force=False,
            )
            logger.info(f"[push] regular: fast-forwarded {target} → {source_sha[:7]}")
            return source_sha
        except RemoteApiError as e:
            # 422: branch tip is not an ancestor of the source
            if e.status != 422:
                raise

        logger.info(f"[push] regular: merging {source_sha[:7]} into {target}")
        merged = await self.client.merge(
            target.owner,
            target.name,
            base=target.branch,
            head=source_sha,
            commit_message=merge_message(source_label, target.branch, strategy),
        )
        return merged.sha if merged is not None else source_sha
