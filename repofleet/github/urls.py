"""
Repository URL parsing.

Accepted shapes (host defaults to github.com):

    https://github.com/owner/name
    https://github.com/owner/name.git
    git@github.com:owner/name.git
    github.com/owner/name/
    https://www.github.com/owner/name
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import NamedTuple

from ..errors import InvalidUrlFormat
from ..config.settings import DEFAULT_HOST


class RepoCoordinates(NamedTuple):
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@lru_cache(maxsize=8)
def _pattern(host: str) -> "re.Pattern[str]":
    return re.compile(
        r"^(?:[a-z][a-z0-9+.-]*://)?"   # scheme
        r"(?:[^@/\s]+@)?"               # user@ / token@
        r"(?:www\.)?"
        + re.escape(host)
        + r"[/:]([^/\s]+)/([^/\s]+?)(?:\.git)?/?$",
        re.IGNORECASE,
    )


def parse_repo_url(url: str, host: str = DEFAULT_HOST) -> RepoCoordinates:
    """Extract (owner, name) from a hosted-repo URL or raise InvalidUrlFormat."""
    match = _pattern(host).match((url or "").strip())
    if not match:
        raise InvalidUrlFormat(url)
    return RepoCoordinates(owner=match.group(1), name=match.group(2))


def derive_name(url: str) -> str:
    """Display name for a registry row: last path segment without .git."""
    tail = url.strip().rstrip("/").split("/")[-1]
    if tail.endswith(".git"):
        tail = tail[: -len(".git")]
    return tail
