"""
Run Models — Results of a replication run and of its verification.

A ReplicationRun is never persisted: it exists for one push invocation
and is returned to the caller as a `RunResult`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

PushStrategy = Literal["regular", "force", "force-with-lease"]
PUSH_STRATEGIES = ("regular", "force", "force-with-lease")


def new_run_id() -> str:
    """R-20260204T120000-ab12cd"""
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
    return f"R-{ts}-{uuid4().hex[:6]}"


class OutcomeError(BaseModel):
    """Why a target failed."""

    name: str
    message: str
    status: Optional[int] = None


class TargetOutcome(BaseModel):
    """Tagged result for one target of a run."""

    target_id: str
    status: Literal["ok", "failed"]
    branch: Optional[str] = None
    sha: Optional[str] = None
    error: Optional[OutcomeError] = None

    @classmethod
    def ok(cls, target_id: str, branch: str, sha: str) -> "TargetOutcome":
        return cls(target_id=target_id, status="ok", branch=branch, sha=sha)

    @classmethod
    def failed(
        cls, target_id: str, exc: BaseException, branch: Optional[str] = None
    ) -> "TargetOutcome":
        return cls(
            target_id=target_id,
            status="failed",
            branch=branch,
            error=OutcomeError(
                name=type(exc).__name__,
                message=getattr(exc, "message", None) or str(exc),
                status=getattr(exc, "status", None),
            ),
        )


class RunResult(BaseModel):
    """Aggregate result of `ReplicationOrchestrator.push`."""

    run_id: str = Field(default_factory=new_run_id)
    source_id: str
    target_ids: List[str]
    strategy: PushStrategy
    sha: Optional[str] = None
    targets: List[TargetOutcome] = Field(default_factory=list)
    started_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    finished_at: Optional[str] = None

    @property
    def success(self) -> bool:
        return len(self.targets) == len(self.target_ids) and all(
            t.status == "ok" for t in self.targets
        )

    @property
    def failed_targets(self) -> List[str]:
        return [t.target_id for t in self.targets if t.status == "failed"]


class VerificationResult(BaseModel):
    """Verdict of `ConvergenceVerifier.verify`."""

    success: bool
    message: str
    matched: int
    total: int
    checked_at: str
