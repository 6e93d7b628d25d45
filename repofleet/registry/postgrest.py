"""
PostgREST Registry — Supabase-hosted `repositories` table.

## Configuration

- SUPABASE_URL: project base URL (the REST API lives under /rest/v1)
- SUPABASE_SERVICE_ROLE_KEY: service key, sent as `apikey` and bearer

`set_master` is two PATCH calls (clear the others, then set one). They
are not atomic: a crash between them leaves the table with no master.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from ..errors import RepositoryNotFound, StorageError
from ..models.repository import Repository
from .base import RepositoryRegistry, check_fields, serialize_fields

logger = logging.getLogger(__name__)


class PostgrestRegistry(RepositoryRegistry):
    """Registry backed by a PostgREST endpoint."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        table: str = "repositories",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.table = table
        self._client = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/rest/v1",
            headers={
                "apikey": service_key,
                "Authorization": f"Bearer {service_key}",
                "Content-Type": "application/json",
                "Prefer": "return=representation",
            },
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, **kwargs: Any) -> List[dict]:
        try:
            resp = await self._client.request(method, f"/{self.table}", **kwargs)
        except httpx.RequestError as e:
            logger.error(f"[registry] {method} {self.table} failed: {e}")
            raise StorageError(f"Storage request failed: {e}") from e

        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = resp.text
            message = body.get("message") if isinstance(body, dict) else None
            logger.error(f"[registry] {method} {self.table} → {resp.status_code}: {message}")
            raise StorageError(
                message or f"Storage error: HTTP {resp.status_code}",
                status=resp.status_code,
                response=body,
            )

        if resp.status_code == 204 or not resp.content:
            return []
        return resp.json()

    async def _one(self, rows: List[dict], repo_id: str) -> Repository:
        if not rows:
            raise RepositoryNotFound(repo_id)
        return Repository(**rows[0])

    async def list(self) -> List[Repository]:
        rows = await self._request(
            "GET", params={"select": "*", "order": "created_at.desc"}
        )
        return [Repository(**row) for row in rows]

    async def get(self, repo_id: str) -> Repository:
        rows = await self._request(
            "GET", params={"select": "*", "id": f"eq.{repo_id}"}
        )
        return await self._one(rows, repo_id)

    async def add(self, repo: Repository) -> Repository:
        rows = await self._request("POST", json=repo.model_dump())
        return await self._one(rows, repo.id)

    async def update(self, repo_id: str, **fields: Any) -> Repository:
        check_fields(fields)
        rows = await self._request(
            "PATCH", params={"id": f"eq.{repo_id}"}, json=serialize_fields(fields)
        )
        return await self._one(rows, repo_id)

    async def delete(self, repo_id: str) -> None:
        rows = await self._request("DELETE", params={"id": f"eq.{repo_id}"})
        if not rows:
            raise RepositoryNotFound(repo_id)
        logger.info(f"[registry] Deleted {repo_id}")

    async def set_master(self, repo_id: str) -> Repository:
        await self.get(repo_id)

        # Step 1: clear every other row
        await self._request(
            "PATCH", params={"id": f"neq.{repo_id}"}, json={"is_master": False}
        )
        # Step 2: flag the chosen one
        rows = await self._request(
            "PATCH", params={"id": f"eq.{repo_id}"}, json={"is_master": True}
        )
        repo = await self._one(rows, repo_id)
        logger.info(f"[registry] Master is now {repo.label}")
        return repo
