"""
JSON File Registry — Local state-file backend.

The whole registry lives in one JSON document and every mutation
rewrites it atomically (write to temp, then rename), so `set_master`
is a single write and cannot leave the registry without a master.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List

from ..errors import RepositoryNotFound
from ..models.repository import Repository
from .base import RepositoryRegistry, check_fields, serialize_fields

logger = logging.getLogger(__name__)


class JsonFileRegistry(RepositoryRegistry):
    """Registry stored at `path` as {"repositories": [...]}."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> List[Repository]:
        if not self.path.exists():
            return []
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return [Repository(**row) for row in data.get("repositories", [])]

    def _save(self, repos: List[Repository]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        temp_path = self.path.with_suffix(".tmp")
        with temp_path.open("w", encoding="utf-8") as f:
            json.dump({"repositories": [r.model_dump() for r in repos]}, f, indent=4)
            f.write("\n")

        temp_path.replace(self.path)
        logger.debug(f"[registry] Saved {len(repos)} repositories → {self.path.name}")

    @staticmethod
    def _index(repos: List[Repository], repo_id: str) -> int:
        for i, repo in enumerate(repos):
            if repo.id == repo_id:
                return i
        raise RepositoryNotFound(repo_id)

    async def list(self) -> List[Repository]:
        return sorted(self._load(), key=lambda r: r.created_at, reverse=True)

    async def get(self, repo_id: str) -> Repository:
        repos = self._load()
        return repos[self._index(repos, repo_id)]

    async def add(self, repo: Repository) -> Repository:
        repos = self._load()
        repos.append(repo)
        self._save(repos)
        return repo

    async def update(self, repo_id: str, **fields: Any) -> Repository:
        check_fields(fields)
        repos = self._load()
        i = self._index(repos, repo_id)
        merged = {**repos[i].model_dump(), **serialize_fields(fields)}
        repos[i] = Repository(**merged)
        self._save(repos)
        return repos[i]

    async def delete(self, repo_id: str) -> None:
        repos = self._load()
        del repos[self._index(repos, repo_id)]
        self._save(repos)
        logger.info(f"[registry] Deleted {repo_id}")

    async def set_master(self, repo_id: str) -> Repository:
        repos = self._load()
        chosen = self._index(repos, repo_id)
        for i, repo in enumerate(repos):
            repo.is_master = i == chosen
        self._save(repos)
        logger.info(f"[registry] Master is now {repos[chosen].label}")
        return repos[chosen]
