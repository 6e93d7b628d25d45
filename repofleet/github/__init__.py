"""
Hosted repo access — the `HostedRepoClient` interface, its GitHub REST
implementation, an in-memory mock, and repository URL parsing.
"""

from .base import HostedRepoClient
from .client import GitHubClient
from .mock import MockHostedRepoClient
from .urls import RepoCoordinates, derive_name, parse_repo_url

__all__ = [
    "GitHubClient",
    "HostedRepoClient",
    "MockHostedRepoClient",
    "RepoCoordinates",
    "derive_name",
    "parse_repo_url",
]
