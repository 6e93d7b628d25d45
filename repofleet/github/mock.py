"""
Mock Hosted Repo Client — In-memory fork network for tests and demos.

All repositories share one commit store, the way a fork network does on
GitHub, so a sha from a source repo can be pushed to any target.
Mirrors the REST semantics the engine relies on:

- reading a missing branch raises RemoteApiError(404)
- creating an existing ref raises 422
- a non-forced, non-fast-forward ref update raises 422
- merge returns None when the base already contains the head, raises
  409 for branches registered in `conflicts`, else creates a merge
  commit (never a fast-forward, same as the merges endpoint)

Enable for the admin server with REPOFLEET_HOST_MODE=mock.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Set, Tuple

from ..errors import RemoteApiError
from ..models.repository import BranchInfo, CommitInfo
from .base import HostedRepoClient

logger = logging.getLogger(__name__)

_EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)


@dataclass
class _Commit:
    sha: str
    message: str
    author: str
    parents: List[str]
    seq: int

    @property
    def date(self) -> str:
        return (_EPOCH + timedelta(minutes=self.seq)).isoformat().replace("+00:00", "Z")

    def to_info(self) -> CommitInfo:
        return CommitInfo(
            sha=self.sha,
            message=self.message,
            date=self.date,
            author=self.author,
            parents=list(self.parents),
        )


@dataclass
class MockRepo:
    owner: str
    name: str
    default_branch: str = "main"
    refs: Dict[str, str] = field(default_factory=dict)
    protected: Set[str] = field(default_factory=set)


def _branch_name(ref: str) -> str:
    for prefix in ("refs/heads/", "heads/"):
        if ref.startswith(prefix):
            return ref[len(prefix):]
    return ref


class MockHostedRepoClient(HostedRepoClient):
    """HostedRepoClient that keeps every repo and commit in memory."""

    def __init__(self, autocreate: bool = False):
        # autocreate: unknown repos spring into existence with one commit
        self.autocreate = autocreate
        self.repos: Dict[Tuple[str, str], MockRepo] = {}
        self.commits: Dict[str, _Commit] = {}
        self.conflicts: Set[Tuple[str, str, str]] = set()
        self.failures: Dict[Tuple[str, Optional[str]], RemoteApiError] = {}
        self.calls: List[Tuple[str, str, str]] = []
        self._seq = 0

    # ─── Fixture helpers ────────────────────────────────────

    def add_repository(
        self,
        owner: str,
        name: str,
        default_branch: str = "main",
        commits: int = 1,
    ) -> MockRepo:
        """Create a repo with `commits` linear commits on its default branch."""
        repo = MockRepo(owner=owner, name=name, default_branch=default_branch)
        self.repos[(owner, name)] = repo
        for i in range(commits):
            self.commit(owner, name, f"Commit {i + 1} on {owner}/{name}")
        return repo

    def commit(
        self,
        owner: str,
        name: str,
        message: str,
        branch: Optional[str] = None,
        author: str = "Mock Author",
    ) -> str:
        """Append a commit to `branch` (default branch if None)."""
        repo = self.repos[(owner, name)]
        branch = branch or repo.default_branch
        parent = repo.refs.get(branch)
        sha = self._new_commit(message, author, [parent] if parent else [])
        repo.refs[branch] = sha
        return sha

    def fork(self, owner: str, name: str, parent_owner: str, parent_name: str) -> MockRepo:
        """Create owner/name with a copy of the parent's refs."""
        parent = self.repos[(parent_owner, parent_name)]
        repo = MockRepo(owner=owner, name=name, default_branch=parent.default_branch,
                        refs=dict(parent.refs))
        self.repos[(owner, name)] = repo
        return repo

    def tip(self, owner: str, name: str, branch: Optional[str] = None) -> Optional[str]:
        repo = self.repos[(owner, name)]
        return repo.refs.get(branch or repo.default_branch)

    def add_conflict(self, owner: str, name: str, branch: str) -> None:
        """Make every merge into owner/name:branch fail with 409."""
        self.conflicts.add((owner, name, branch))

    def inject_failure(
        self,
        method: str,
        repo: Optional[str] = None,
        status: int = 500,
        message: str = "Injected failure",
    ) -> None:
        """Fail `method` (for one "owner/name", or all repos) until cleared."""
        self.failures[(method, repo)] = RemoteApiError(message, status=status)

    def call_count(self, method: Optional[str] = None) -> int:
        return sum(1 for c in self.calls if method is None or c[0] == method)

    # ─── Internals ──────────────────────────────────────────

    def _new_commit(self, message: str, author: str, parents: List[str]) -> str:
        self._seq += 1
        digest = hashlib.sha1(
            f"{self._seq}|{message}|{','.join(parents)}".encode("utf-8")
        ).hexdigest()
        self.commits[digest] = _Commit(digest, message, author, parents, self._seq)
        return digest

    def _enter(self, method: str, owner: str, name: str) -> MockRepo:
        self.calls.append((method, owner, name))
        for key in ((method, f"{owner}/{name}"), (method, None)):
            if key in self.failures:
                raise self.failures[key]
        repo = self.repos.get((owner, name))
        if repo is None and self.autocreate:
            repo = self.add_repository(owner, name)
        if repo is None:
            raise RemoteApiError("Not Found", status=404,
                                 response={"message": "Not Found"})
        return repo

    def _reachable(self, sha: str) -> Set[str]:
        seen: Set[str] = set()
        stack = [sha]
        while stack:
            current = stack.pop()
            if current in seen or current not in self.commits:
                continue
            seen.add(current)
            stack.extend(self.commits[current].parents)
        return seen

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        return ancestor in self._reachable(descendant)

    def _require_commit(self, sha: str) -> _Commit:
        commit = self.commits.get(sha)
        if commit is None:
            raise RemoteApiError("Object does not exist", status=422)
        return commit

    # ─── HostedRepoClient ───────────────────────────────────

    async def get_repository(self, owner: str, name: str) -> dict:
        repo = self._enter("get_repository", owner, name)
        return {
            "full_name": f"{owner}/{name}",
            "default_branch": repo.default_branch,
        }

    async def list_branches(self, owner: str, name: str) -> List[BranchInfo]:
        repo = self._enter("list_branches", owner, name)
        return [
            BranchInfo(name=b, protected=b in repo.protected, sha=sha)
            for b, sha in sorted(repo.refs.items())
        ]

    async def list_commits(
        self, owner: str, name: str, per_page: int = 5, sha: Optional[str] = None
    ) -> List[CommitInfo]:
        repo = self._enter("list_commits", owner, name)
        start = repo.refs.get(sha, sha) if sha else repo.refs.get(repo.default_branch)
        if not start:
            return []
        reachable = sorted(
            (self.commits[s] for s in self._reachable(start)),
            key=lambda c: c.seq,
            reverse=True,
        )
        return [c.to_info() for c in reachable[:per_page]]

    async def get_branch(self, owner: str, name: str, branch: str) -> BranchInfo:
        repo = self._enter("get_branch", owner, name)
        if branch not in repo.refs:
            raise RemoteApiError("Branch not found", status=404,
                                 response={"message": "Branch not found"})
        return BranchInfo(name=branch, protected=branch in repo.protected,
                          sha=repo.refs[branch])

    async def get_commit(self, owner: str, name: str, sha: str) -> CommitInfo:
        self._enter("get_commit", owner, name)
        commit = self.commits.get(sha)
        if commit is None:
            raise RemoteApiError(f"No commit found for SHA: {sha}", status=422)
        return commit.to_info()

    async def create_ref(self, owner: str, name: str, ref: str, sha: str) -> str:
        repo = self._enter("create_ref", owner, name)
        branch = _branch_name(ref)
        if branch in repo.refs:
            raise RemoteApiError("Reference already exists", status=422)
        self._require_commit(sha)
        repo.refs[branch] = sha
        logger.debug(f"[mock] Created {ref} on {owner}/{name} at {sha[:7]}")
        return sha

    async def update_ref(
        self, owner: str, name: str, ref: str, sha: str, force: bool = False
    ) -> str:
        repo = self._enter("update_ref", owner, name)
        branch = _branch_name(ref)
        if branch not in repo.refs:
            raise RemoteApiError("Reference does not exist", status=422)
        self._require_commit(sha)
        current = repo.refs[branch]
        if not force and not self.is_ancestor(current, sha):
            raise RemoteApiError("Update is not a fast forward", status=422)
        repo.refs[branch] = sha
        logger.debug(f"[mock] Updated {ref} on {owner}/{name} to {sha[:7]}")
        return sha

    async def merge(
        self, owner: str, name: str, base: str, head: str, commit_message: str
    ) -> Optional[CommitInfo]:
        repo = self._enter("merge", owner, name)
        if base not in repo.refs:
            raise RemoteApiError("Base does not exist", status=404)
        head_sha = repo.refs.get(head, head)
        if head_sha not in self.commits:
            raise RemoteApiError("Head does not exist", status=404)

        base_sha = repo.refs[base]
        if self.is_ancestor(head_sha, base_sha):
            return None
        if (owner, name, base) in self.conflicts:
            raise RemoteApiError("Merge conflict", status=409)

        merged = self._new_commit(commit_message, "Mock Merger", [base_sha, head_sha])
        repo.refs[base] = merged
        return self.commits[merged].to_info()
