"""
GitHub Client — Hosted repo operations via the GitHub REST API.

Uses an `httpx.AsyncClient` so the three metadata reads of a resolve can
run concurrently. Every non-2xx response becomes a `RemoteApiError`
carrying the status, GitHub's message and its documentation_url.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from ..errors import RemoteApiError
from ..models.repository import BranchInfo, CommitInfo
from .base import HostedRepoClient

logger = logging.getLogger(__name__)

USER_AGENT = "repofleet/0.1"


def _get_headers(token: str) -> dict:
    """Get GitHub API headers."""
    return {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {token}",
        "X-GitHub-Api-Version": "2022-11-28",
        "User-Agent": USER_AGENT,
    }


def _branch_from_json(data: dict) -> BranchInfo:
    return BranchInfo(
        name=data["name"],
        protected=bool(data.get("protected", False)),
        sha=data["commit"]["sha"],
    )


def _commit_from_json(data: dict) -> CommitInfo:
    commit = data.get("commit") or {}
    author = commit.get("author") or {}
    return CommitInfo(
        sha=data["sha"],
        message=commit.get("message", ""),
        date=author.get("date"),
        author=author.get("name"),
        parents=[p["sha"] for p in data.get("parents", [])],
    )


class GitHubClient(HostedRepoClient):
    """
    HostedRepoClient backed by api.github.com.

    Pass `transport=` (e.g. `httpx.MockTransport`) to test without network.
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=_get_headers(token),
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"[github] {method} {path} failed: {e}")
            raise RemoteApiError(f"Request to GitHub failed: {e}") from e

        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = resp.text
            message = body.get("message") if isinstance(body, dict) else None
            error = RemoteApiError(
                message or f"HTTP {resp.status_code}",
                status=resp.status_code,
                response=body,
                documentation_url=(
                    body.get("documentation_url") if isinstance(body, dict) else None
                ),
            )
            # 404 on branch reads and 422 on fast-forward attempts are routine
            log_fn = logger.debug if resp.status_code in (404, 422) else logger.error
            log_fn(f"[github] {method} {path} → {resp.status_code}: {error.message}")
            raise error

        logger.debug(f"[github] {method} {path} → {resp.status_code}")
        return resp

    # ─── Reads ──────────────────────────────────────────────

    async def get_repository(self, owner: str, name: str) -> dict:
        resp = await self._request("GET", f"/repos/{owner}/{name}")
        return resp.json()

    async def list_branches(self, owner: str, name: str) -> List[BranchInfo]:
        resp = await self._request(
            "GET", f"/repos/{owner}/{name}/branches", params={"per_page": 100}
        )
        return [_branch_from_json(b) for b in resp.json()]

    async def list_commits(
        self, owner: str, name: str, per_page: int = 5, sha: Optional[str] = None
    ) -> List[CommitInfo]:
        params: dict = {"per_page": per_page}
        if sha:
            params["sha"] = sha
        try:
            resp = await self._request(
                "GET", f"/repos/{owner}/{name}/commits", params=params
            )
        except RemoteApiError as e:
            # An empty repository answers 409 "Git Repository is empty."
            if e.status == 409:
                return []
            raise
        return [_commit_from_json(c) for c in resp.json()]

    async def get_branch(self, owner: str, name: str, branch: str) -> BranchInfo:
        resp = await self._request("GET", f"/repos/{owner}/{name}/branches/{branch}")
        return _branch_from_json(resp.json())

    async def get_commit(self, owner: str, name: str, sha: str) -> CommitInfo:
        resp = await self._request("GET", f"/repos/{owner}/{name}/commits/{sha}")
        return _commit_from_json(resp.json())

    # ─── Writes ─────────────────────────────────────────────

    async def create_ref(self, owner: str, name: str, ref: str, sha: str) -> str:
        resp = await self._request(
            "POST", f"/repos/{owner}/{name}/git/refs", json={"ref": ref, "sha": sha}
        )
        logger.info(f"[github] Created {ref} on {owner}/{name} at {sha[:7]}")
        return resp.json()["object"]["sha"]

    async def update_ref(
        self, owner: str, name: str, ref: str, sha: str, force: bool = False
    ) -> str:
        resp = await self._request(
            "PATCH",
            f"/repos/{owner}/{name}/git/refs/{ref}",
            json={"sha": sha, "force": force},
        )
        logger.info(f"[github] Updated {ref} on {owner}/{name} to {sha[:7]}")
        return resp.json()["object"]["sha"]

    async def merge(
        self, owner: str, name: str, base: str, head: str, commit_message: str
    ) -> Optional[CommitInfo]:
        resp = await self._request(
            "POST",
            f"/repos/{owner}/{name}/merges",
            json={"base": base, "head": head, "commit_message": commit_message},
        )
        if resp.status_code == 204:
            logger.info(f"[github] {owner}/{name}:{base} already contains {head[:7]}")
            return None
        merged = _commit_from_json(resp.json())
        logger.info(f"[github] Merged {head[:7]} into {owner}/{name}:{base} → {merged.sha[:7]}")
        return merged
