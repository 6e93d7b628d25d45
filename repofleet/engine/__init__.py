"""
Replication engine — resolve, synchronize refs, push, verify.

    RemoteRepoResolver      live metadata for a registry row
    RefSynchronizer         create the target branch when missing
    PushStrategyExecutor    regular / force / force-with-lease
    ReplicationOrchestrator one source onto N targets, sequentially
    ConvergenceVerifier     post-run last_commit comparison
"""

from .orchestrator import ReplicationOrchestrator
from .refs import RefSynchronizer
from .resolver import RemoteRepoResolver, refresh_metadata
from .strategies import PushStrategyExecutor, PushTarget
from .verifier import ConvergenceVerifier

__all__ = [
    "ConvergenceVerifier",
    "PushStrategyExecutor",
    "PushTarget",
    "RefSynchronizer",
    "RemoteRepoResolver",
    "ReplicationOrchestrator",
    "refresh_metadata",
]
