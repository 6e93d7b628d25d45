"""
Fleet Configuration — Parse environment variables into settings.

Two credentials drive everything, both supplied via the process
environment and never via the wire protocol:

    GITHUB_ACCESS_TOKEN=ghp_xxxxx                   # hosted-repo API
    SUPABASE_URL=https://xyz.supabase.co            # storage backend
    SUPABASE_SERVICE_ROLE_KEY=eyJ...

Without SUPABASE_URL the registry falls back to a local JSON file
(REPOFLEET_REGISTRY_FILE, default state/repositories.json).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_HOST = "github.com"
DEFAULT_REGISTRY_FILE = "state/repositories.json"

HOST_MODES = ("github", "mock")


@dataclass
class FleetSettings:
    """Settings for the registry backend and the hosted-repo client."""

    github_token: Optional[str] = None
    github_api_url: str = DEFAULT_API_URL
    github_host: str = DEFAULT_HOST
    host_mode: str = "github"
    http_timeout: float = 30.0

    # Storage backend
    storage_url: Optional[str] = None
    storage_key: Optional[str] = None
    storage_table: str = "repositories"
    registry_file: Path = field(default_factory=lambda: Path(DEFAULT_REGISTRY_FILE))

    @property
    def registry_backend(self) -> str:
        """'postgrest' when a storage URL is configured, else 'file'."""
        return "postgrest" if self.storage_url else "file"

    @classmethod
    def from_env(cls, root: Optional[Path] = None) -> "FleetSettings":
        """Parse settings from environment variables."""
        host_mode = os.environ.get("REPOFLEET_HOST_MODE", "github").lower()
        if host_mode not in HOST_MODES:
            logger.warning(f"Unknown REPOFLEET_HOST_MODE={host_mode}, using github")
            host_mode = "github"

        try:
            timeout = float(os.environ.get("REPOFLEET_HTTP_TIMEOUT", "30"))
        except ValueError:
            logger.warning("REPOFLEET_HTTP_TIMEOUT is not a number, using 30s")
            timeout = 30.0

        registry_file = Path(
            os.environ.get("REPOFLEET_REGISTRY_FILE", DEFAULT_REGISTRY_FILE)
        )
        if root is not None and not registry_file.is_absolute():
            registry_file = root / registry_file

        storage_url = os.environ.get("SUPABASE_URL") or None
        if storage_url:
            storage_url = storage_url.rstrip("/")

        return cls(
            github_token=os.environ.get("GITHUB_ACCESS_TOKEN") or None,
            github_api_url=os.environ.get("GITHUB_API_URL", DEFAULT_API_URL).rstrip("/"),
            github_host=os.environ.get("GITHUB_HOST", DEFAULT_HOST),
            host_mode=host_mode,
            http_timeout=timeout,
            storage_url=storage_url,
            storage_key=os.environ.get("SUPABASE_SERVICE_ROLE_KEY") or None,
            storage_table=os.environ.get("REPOFLEET_TABLE", "repositories"),
            registry_file=registry_file,
        )


@dataclass
class ConfigStatus:
    """Status of a configuration check."""

    component: str
    configured: bool
    mode: str
    missing: List[str] = field(default_factory=list)
    guidance: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "component": self.component,
            "configured": self.configured,
            "mode": self.mode,
            "missing": self.missing,
            "guidance": self.guidance,
        }


def check_settings(settings: FleetSettings) -> List[ConfigStatus]:
    """Check that each backend has the credentials it needs."""
    results = []

    if settings.host_mode == "mock":
        results.append(ConfigStatus("hosted_repo_api", True, "mock"))
    else:
        missing = [] if settings.github_token else ["GITHUB_ACCESS_TOKEN"]
        results.append(ConfigStatus(
            "hosted_repo_api",
            configured=not missing,
            mode="github",
            missing=missing,
            guidance=None if not missing else
            "Create a token with repo scope at https://github.com/settings/tokens",
        ))

    if settings.registry_backend == "postgrest":
        missing = [] if settings.storage_key else ["SUPABASE_SERVICE_ROLE_KEY"]
        results.append(ConfigStatus(
            "storage",
            configured=not missing,
            mode="postgrest",
            missing=missing,
            guidance=None if not missing else
            "Copy the service role key from the project's API settings",
        ))
    else:
        results.append(ConfigStatus(
            "storage",
            configured=True,
            mode="file",
            guidance=f"Using local registry file {settings.registry_file}",
        ))

    return results
