"""
Error Taxonomy — Exceptions raised by the replication engine.

Every failure aborts the current operation and is surfaced to the caller
with its message, class name and stack attached (see `error_details`).
Nothing in the engine retries.
"""

from __future__ import annotations

import traceback
from typing import Any, Dict, Optional


class FleetError(Exception):
    """Base class for all repo fleet errors."""

    status: Optional[int] = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def name(self) -> str:
        return type(self).__name__


class InvalidUrlFormat(FleetError):
    """A stored repository URL does not look like host/owner/name[.git]."""

    def __init__(self, url: str):
        super().__init__(f"Invalid repository URL: {url}")
        self.url = url


class RepositoryNotFound(FleetError):
    """A repository id is not present in the registry."""

    def __init__(self, repo_id: str):
        super().__init__(f"Repository not found: {repo_id}")
        self.repo_id = repo_id


class PreconditionFailed(FleetError):
    """An operation was attempted before its inputs were ready."""


class InvalidRequest(FleetError):
    """Local validation failed before any remote call was made."""


class ConfigurationError(FleetError):
    """Required settings (token, storage credentials) are missing."""


class StorageError(FleetError):
    """The storage backend rejected a read or write."""

    def __init__(self, message: str, status: Optional[int] = None,
                 response: Any = None):
        super().__init__(message)
        self.status = status
        self.response = response


class RemoteApiError(FleetError):
    """
    Any failure reported by the hosted-repo API.

    Covers auth, rate limits, merge conflicts and permission errors.
    Transport failures are wrapped with status=None.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        response: Any = None,
        documentation_url: Optional[str] = None,
    ):
        super().__init__(message)
        self.status = status
        self.response = response
        self.documentation_url = documentation_url

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


def error_details(exc: BaseException) -> Dict[str, Any]:
    """Build the `details` block of the error envelope for any exception."""
    return {
        "status": getattr(exc, "status", None),
        "name": type(exc).__name__,
        "message": getattr(exc, "message", None) or str(exc),
        "response": getattr(exc, "response", None),
        "documentation_url": getattr(exc, "documentation_url", None),
        "stack": "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        ),
    }
