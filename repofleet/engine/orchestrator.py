"""
Replication Orchestrator — Push one source repo onto N target repos.

## Pipeline

    1. validate targets + strategy, load registry rows (no remote calls yet)
    2. resolve the source's default branch and its live tip sha
    3. for each target, sequentially:
         resolve default branch → ensure branch → apply strategy → update row
    4. return a RunResult with one tagged outcome per processed target

Targets are processed one at a time so log output and failure
attribution stay unambiguous per target.

## Failure policy

By default the first failing target aborts the run and its error
propagates; targets pushed before it stay pushed and keep their updated
rows (no rollback). `continue_on_error=True` records the failure as an
outcome and moves on to the next target instead.

Confirming a push onto the master repository is the caller's job; it is
not re-checked here.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List

from ..errors import InvalidRequest
from ..models.repository import Repository, utc_now_iso
from ..models.run import PUSH_STRATEGIES, RunResult, TargetOutcome
from ..registry.base import RepositoryRegistry
from .refs import RefSynchronizer
from .resolver import RemoteRepoResolver
from .strategies import PushStrategyExecutor, PushTarget

logger = logging.getLogger(__name__)


def ordered_unique(ids: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for repo_id in ids:
        if repo_id and repo_id not in seen:
            seen.add(repo_id)
            out.append(repo_id)
    return out


class ReplicationOrchestrator:

    def __init__(
        self,
        registry: RepositoryRegistry,
        resolver: RemoteRepoResolver,
        refs: RefSynchronizer,
        executor: PushStrategyExecutor,
    ):
        self.registry = registry
        self.resolver = resolver
        self.refs = refs
        self.executor = executor

    async def push(
        self,
        source_id: str,
        target_ids: Iterable[str],
        strategy: str = "regular",
        continue_on_error: bool = False,
    ) -> RunResult:
        """Replicate the source's default-branch tip onto every target."""
        targets_ordered = ordered_unique(target_ids or [])
        if not targets_ordered:
            raise InvalidRequest("Please select at least one target repository")
        if strategy not in PUSH_STRATEGIES:
            raise InvalidRequest(
                f"Unknown push strategy: {strategy} "
                f"(expected one of {', '.join(PUSH_STRATEGIES)})"
            )

        source = await self.registry.get(source_id)
        targets = await self.registry.get_many(targets_ordered)

        run = RunResult(source_id=source_id, target_ids=targets_ordered, strategy=strategy)
        log_extra = {"run_id": run.run_id, "repo_id": source_id, "strategy": strategy}

        # Live read, not the cached last_commit
        src_owner, src_name = self.resolver.coordinates(source)
        src_branch = await self.resolver.get_default_branch(src_owner, src_name)
        run.sha = await self.resolver.get_branch_tip(src_owner, src_name, src_branch)

        logger.info(
            f"[replicate] {run.run_id}: {strategy} push of {source.label} "
            f"({src_branch}@{run.sha[:7]}) to {len(targets)} target(s)",
            extra=log_extra,
        )

        for target in targets:
            try:
                outcome = await self._push_one(run, source, target)
            except Exception as e:
                logger.error(
                    f"[replicate] {run.run_id}: push to {target.label} failed: "
                    f"{type(e).__name__}: {e}",
                    extra={**log_extra, "target_id": target.id},
                )
                run.targets.append(TargetOutcome.failed(target.id, e))
                if not continue_on_error:
                    raise
                continue
            run.targets.append(outcome)

        run.finished_at = datetime.now(timezone.utc).isoformat()
        ok_count = sum(1 for t in run.targets if t.status == "ok")
        logger.info(
            f"[replicate] {run.run_id}: {ok_count}/{len(targets)} target(s) pushed",
            extra=log_extra,
        )
        return run

    async def _push_one(
        self, run: RunResult, source: Repository, target: Repository
    ) -> TargetOutcome:
        owner, name = self.resolver.coordinates(target)
        branch = await self.resolver.get_default_branch(owner, name)

        await self.refs.ensure_branch(owner, name, branch, run.sha)
        sha = await self.executor.apply(
            run.strategy, PushTarget(owner, name, branch), run.sha, source.label
        )

        now = utc_now_iso()
        await self.registry.update(
            target.id,
            last_sync=now,
            status="synced",
            last_commit=run.sha,
            last_commit_date=now,
        )
        logger.info(
            f"[replicate] {run.run_id}: {target.label} → {sha[:7]}",
            extra={"run_id": run.run_id, "target_id": target.id},
        )
        return TargetOutcome.ok(target.id, branch, sha)
