"""
Repository Models — Pydantic schemas for registry rows and remote metadata.

A `Repository` row is consumed and produced verbatim by the dashboard's
list calls, so field names follow the storage table's snake_case columns.
`RepoDetails` is the wire shape of a metadata refresh and uses camelCase.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

RECENT_COMMITS_LIMIT = 5


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class BranchInfo(BaseModel):
    """A branch and the commit it points at."""

    name: str
    protected: bool = False
    sha: str


class CommitSummary(BaseModel):
    """A commit as cached in `recent_commits`."""

    sha: str
    message: str = ""
    date: Optional[str] = None
    author: Optional[str] = None


class CommitInfo(CommitSummary):
    """A commit as returned by the hosted-repo API, with its parents."""

    parents: List[str] = Field(default_factory=list)


class RepoDetails(BaseModel):
    """Live metadata fetched for one repository."""

    model_config = ConfigDict(populate_by_name=True)

    default_branch: str = Field(alias="defaultBranch")
    branches: List[BranchInfo] = Field(default_factory=list)
    last_commits: List[CommitSummary] = Field(
        default_factory=list, alias="lastCommits"
    )

    @property
    def head(self) -> Optional[CommitSummary]:
        """Newest commit, if the repository has any."""
        return self.last_commits[0] if self.last_commits else None

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class Repository(BaseModel):
    """A tracked repository (one registry row)."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    url: str
    name: str = ""
    nickname: Optional[str] = None
    is_master: bool = False
    last_sync: Optional[str] = None
    status: Optional[str] = None
    last_commit: Optional[str] = None
    last_commit_date: Optional[str] = None
    default_branch: Optional[str] = None
    branches: List[BranchInfo] = Field(default_factory=list)
    recent_commits: List[CommitSummary] = Field(default_factory=list)
    created_at: str = Field(default_factory=utc_now_iso)

    @property
    def label(self) -> str:
        """Display label: nickname if set, else the URL."""
        return self.nickname or self.url
