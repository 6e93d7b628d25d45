"""
Shared fixtures for engine, route and CLI tests.

Every fixture runs against the in-memory mock host and a JSON registry
under tmp_path, so no test touches the network or the real project.

The `seeded` fixture registers two repositories in one fork network:

    acme/app     source, master, one commit ahead
    mirror/app   target, forked from acme/app before that commit
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from types import SimpleNamespace

import pytest

from repofleet.config.settings import FleetSettings
from repofleet.fleet import Fleet
from repofleet.github.mock import MockHostedRepoClient
from repofleet.registry.json_file import JsonFileRegistry

SOURCE_URL = "https://github.com/acme/app"
TARGET_URL = "https://github.com/mirror/app.git"


@pytest.fixture
def mock_host() -> MockHostedRepoClient:
    """Empty in-memory host."""
    return MockHostedRepoClient()


@pytest.fixture
def registry_path(tmp_path: Path) -> Path:
    return tmp_path / "state" / "repositories.json"


@pytest.fixture
def registry(registry_path: Path) -> JsonFileRegistry:
    return JsonFileRegistry(registry_path)


@pytest.fixture
def fleet(registry, mock_host) -> Fleet:
    return Fleet(registry, mock_host)


@pytest.fixture
def seeded(fleet, mock_host):
    """Register source + target, refresh both, then clear the call log."""
    mock_host.add_repository("acme", "app", commits=2)
    mock_host.fork("mirror", "app", "acme", "app")
    mock_host.commit("acme", "app", "Add feature")

    async def _seed():
        source = await fleet.registry.register(SOURCE_URL, "Source")
        target = await fleet.registry.register(TARGET_URL)
        await fleet.refresh(source.id)
        await fleet.refresh(target.id)
        return source.id, target.id

    source_id, target_id = asyncio.run(_seed())
    mock_host.calls.clear()
    return SimpleNamespace(
        source_id=source_id,
        target_id=target_id,
        source_tip=mock_host.tip("acme", "app"),
        target_tip=mock_host.tip("mirror", "app"),
    )


@pytest.fixture
def settings(registry_path: Path) -> FleetSettings:
    return FleetSettings(host_mode="mock", registry_file=registry_path)


@pytest.fixture
def app(settings, fleet):
    """Flask test app wired to the shared test fleet."""
    pytest.importorskip("flask")
    from repofleet.admin.server import create_app

    app = create_app(settings, fleet_factory=lambda: fleet)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def read_repo(registry):
    """Read one registry row synchronously."""
    return lambda repo_id: asyncio.run(registry.get(repo_id))
