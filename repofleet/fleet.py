"""
Fleet — Wire settings into a registry, a hosted-repo client and the engine.

## Usage

    async with Fleet.from_settings(FleetSettings.from_env()) as fleet:
        await fleet.refresh(repo_id)
        run = await fleet.push(source_id, [target_id], "force")
        verdict = await fleet.verify(source_id, [target_id])

Callers (admin routes, CLI) open one Fleet per request inside
`asyncio.run`, so HTTP clients never outlive their event loop.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .config.settings import DEFAULT_HOST, FleetSettings, check_settings
from .engine.orchestrator import ReplicationOrchestrator
from .engine.refs import RefSynchronizer
from .engine.resolver import RemoteRepoResolver, refresh_metadata
from .engine.strategies import PushStrategyExecutor
from .engine.verifier import ConvergenceVerifier
from .errors import ConfigurationError
from .github.base import HostedRepoClient
from .github.client import GitHubClient
from .github.mock import MockHostedRepoClient
from .models.repository import RepoDetails
from .models.run import RunResult, VerificationResult
from .registry.base import RepositoryRegistry
from .registry.json_file import JsonFileRegistry
from .registry.postgrest import PostgrestRegistry

logger = logging.getLogger(__name__)

# One in-memory host per process so mock-mode state survives across requests
_shared_mock: Optional[MockHostedRepoClient] = None


def _mock_client() -> MockHostedRepoClient:
    global _shared_mock
    if _shared_mock is None:
        logger.warning("Using in-memory mock host (REPOFLEET_HOST_MODE=mock)")
        _shared_mock = MockHostedRepoClient(autocreate=True)
    return _shared_mock


_NOT_CONFIGURED = {
    "hosted_repo_api": "GitHub token not configured",
    "storage": "Storage service key not configured",
}


def require_configured(settings: FleetSettings) -> None:
    """Raise ConfigurationError for the first backend missing credentials."""
    for status in check_settings(settings):
        if not status.configured:
            logger.error(f"{status.component} not configured: missing {', '.join(status.missing)}")
            raise ConfigurationError(_NOT_CONFIGURED[status.component])


def build_registry(settings: FleetSettings) -> RepositoryRegistry:
    if settings.registry_backend == "postgrest":
        if not settings.storage_key:
            raise ConfigurationError("Storage service key not configured")
        return PostgrestRegistry(
            settings.storage_url,
            settings.storage_key,
            table=settings.storage_table,
            timeout=settings.http_timeout,
        )
    return JsonFileRegistry(settings.registry_file)


def build_client(settings: FleetSettings) -> HostedRepoClient:
    if settings.host_mode == "mock":
        return _mock_client()
    if not settings.github_token:
        logger.error("GitHub token not found")
        raise ConfigurationError("GitHub token not configured")
    return GitHubClient(
        settings.github_token,
        base_url=settings.github_api_url,
        timeout=settings.http_timeout,
    )


class Fleet:
    """The registry plus every engine component, sharing one client."""

    def __init__(
        self,
        registry: RepositoryRegistry,
        client: HostedRepoClient,
        host: str = DEFAULT_HOST,
    ):
        self.registry = registry
        self.client = client
        self.resolver = RemoteRepoResolver(client, host=host)
        self.refs = RefSynchronizer(client)
        self.executor = PushStrategyExecutor(client)
        self.orchestrator = ReplicationOrchestrator(
            registry, self.resolver, self.refs, self.executor
        )
        self.verifier = ConvergenceVerifier(registry, self.resolver)

    @classmethod
    def from_settings(cls, settings: FleetSettings) -> "Fleet":
        # No HTTP client is opened for a config that fails validation
        require_configured(settings)
        client = build_client(settings)
        registry = build_registry(settings)
        return cls(registry, client, host=settings.github_host)

    async def __aenter__(self) -> "Fleet":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.registry.aclose()
        await self.client.aclose()

    # ─── Operations ─────────────────────────────────────────

    async def refresh(self, repo_id: str) -> RepoDetails:
        """Refresh one repo's cached metadata (`getLastCommit`)."""
        return await refresh_metadata(self.registry, self.resolver, repo_id)

    async def push(
        self,
        source_id: str,
        target_ids: Iterable[str],
        strategy: str = "regular",
        continue_on_error: bool = False,
    ) -> RunResult:
        return await self.orchestrator.push(
            source_id, target_ids, strategy, continue_on_error=continue_on_error
        )

    async def verify(
        self, source_id: str, target_ids: Iterable[str]
    ) -> VerificationResult:
        return await self.verifier.verify(source_id, target_ids)
