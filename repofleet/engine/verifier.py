"""
Convergence Verifier — Check that targets caught up with the source.

Each target's cached metadata is refreshed from the host, then every
target's `last_commit` is compared to the source's by exact string
equality. The verdict is a single boolean: diverged targets are not
named in the message.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable

from ..errors import InvalidRequest, PreconditionFailed
from ..models.run import VerificationResult
from ..registry.base import RepositoryRegistry
from .orchestrator import ordered_unique
from .resolver import RemoteRepoResolver, refresh_metadata

logger = logging.getLogger(__name__)


class ConvergenceVerifier:

    def __init__(self, registry: RepositoryRegistry, resolver: RemoteRepoResolver):
        self.registry = registry
        self.resolver = resolver

    async def verify(
        self, source_id: str, target_ids: Iterable[str]
    ) -> VerificationResult:
        target_ids = ordered_unique(target_ids or [])
        if not target_ids:
            raise InvalidRequest("Please select at least one target repository")

        source = await self.registry.get(source_id)
        if not source.last_commit:
            raise PreconditionFailed("Source commit information not available")
        await self.registry.get_many(target_ids)

        logger.info(
            f"[verify] Checking {len(target_ids)} target(s) against "
            f"{source.label}@{source.last_commit[:7]}",
            extra={"repo_id": source_id},
        )

        failed_refresh = set()
        for target_id in target_ids:
            try:
                await refresh_metadata(self.registry, self.resolver, target_id)
            except Exception as e:
                # The stale cached value stays in place; the target is counted
                # as not converged below.
                logger.warning(
                    f"[verify] Refresh of {target_id} failed: {type(e).__name__}: {e}",
                    extra={"repo_id": source_id, "target_id": target_id},
                )
                failed_refresh.add(target_id)

        targets = await self.registry.get_many(target_ids)
        matched = sum(
            1 for t in targets
            if t.id not in failed_refresh and t.last_commit == source.last_commit
        )
        success = matched == len(target_ids)

        timestamp = datetime.now(timezone.utc)
        clock = timestamp.strftime("%H:%M:%S")
        message = (
            f"Push verified successful at {clock}"
            if success
            else f"Push verification failed at {clock}. "
                 "Some repositories may not be in sync."
        )
        log_fn = logger.info if success else logger.error
        log_fn(f"[verify] {matched}/{len(target_ids)} in sync", extra={"repo_id": source_id})

        return VerificationResult(
            success=success,
            message=message,
            matched=matched,
            total=len(target_ids),
            checked_at=timestamp.isoformat(),
        )
