"""
Repository Registry — Persisted record store for tracked repositories.

Pure data access. Backends implement the primitive reads and writes;
registration and master selection are defined here so every backend
shares the same rules:

- the first registered repository becomes master
- a URL can only be registered once
- `set_master(id)` clears every other row and flags the chosen one
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel

from ..errors import InvalidRequest
from ..github.urls import derive_name
from ..models.repository import Repository

logger = logging.getLogger(__name__)

# Columns callers may change through `update`
MUTABLE_FIELDS = frozenset({
    "nickname",
    "last_sync",
    "status",
    "last_commit",
    "last_commit_date",
    "default_branch",
    "branches",
    "recent_commits",
})


def serialize_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Turn nested pydantic models into plain JSON-ready values."""
    out: Dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, BaseModel):
            value = value.model_dump()
        elif isinstance(value, list):
            value = [v.model_dump() if isinstance(v, BaseModel) else v for v in value]
        out[key] = value
    return out


def check_fields(fields: Dict[str, Any]) -> None:
    unknown = set(fields) - MUTABLE_FIELDS
    if unknown:
        raise InvalidRequest(f"Cannot update field(s): {', '.join(sorted(unknown))}")


class RepositoryRegistry(ABC):
    """Abstract async registry of `Repository` rows."""

    @abstractmethod
    async def list(self) -> List[Repository]:
        """All rows, newest first."""

    @abstractmethod
    async def get(self, repo_id: str) -> Repository:
        """One row, or RepositoryNotFound."""

    @abstractmethod
    async def add(self, repo: Repository) -> Repository:
        """Insert a fully-formed row."""

    @abstractmethod
    async def update(self, repo_id: str, **fields: Any) -> Repository:
        """Patch mutable columns of one row and return it."""

    @abstractmethod
    async def delete(self, repo_id: str) -> None:
        """Remove a row. Nothing happens on the remote host."""

    @abstractmethod
    async def set_master(self, repo_id: str) -> Repository:
        """Make `repo_id` the single master row."""

    async def aclose(self) -> None:
        """Release backend resources."""

    # ─── Shared operations ──────────────────────────────────

    async def get_many(self, repo_ids: Iterable[str]) -> List[Repository]:
        """Rows in the order of `repo_ids`; the first unknown id raises."""
        return [await self.get(repo_id) for repo_id in repo_ids]

    async def register(self, url: str, nickname: Optional[str] = None) -> Repository:
        """Create a row for `url`. Master only when the registry is empty."""
        url = (url or "").strip()
        if not url:
            raise InvalidRequest("Please enter a repository URL")

        existing = await self.list()
        if any(r.url == url for r in existing):
            raise InvalidRequest(f"Repository already registered: {url}")

        repo = Repository(
            url=url,
            name=derive_name(url),
            nickname=nickname or None,
            is_master=not existing,
        )
        repo = await self.add(repo)
        logger.info(
            f"[registry] Registered {repo.label} ({repo.id})"
            + (" as master" if repo.is_master else "")
        )
        return repo

    async def get_master(self) -> Optional[Repository]:
        for repo in await self.list():
            if repo.is_master:
                return repo
        return None
