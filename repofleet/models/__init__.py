"""Pydantic models for registry rows, remote metadata and run results."""

from .repository import (
    BranchInfo,
    CommitInfo,
    CommitSummary,
    RepoDetails,
    Repository,
)
from .run import (
    PUSH_STRATEGIES,
    PushStrategy,
    RunResult,
    TargetOutcome,
    VerificationResult,
)

__all__ = [
    "BranchInfo",
    "CommitInfo",
    "CommitSummary",
    "PUSH_STRATEGIES",
    "PushStrategy",
    "RepoDetails",
    "Repository",
    "RunResult",
    "TargetOutcome",
    "VerificationResult",
]
