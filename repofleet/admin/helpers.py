"""
Admin server shared helpers.

Every route opens one `Fleet` per request through the app's
FLEET_FACTORY and drives it with `asyncio.run`, so each request is a
single sequential asyncio task.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

from flask import current_app, jsonify

from ..errors import InvalidRequest, error_details
from ..fleet import Fleet

logger = logging.getLogger(__name__)

T = TypeVar("T")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET, POST, PATCH, DELETE, OPTIONS",
}


def with_fleet(operation: Callable[[Fleet], Awaitable[T]]) -> T:
    """Open a Fleet, run `operation(fleet)` to completion, close the Fleet."""
    factory = current_app.config["FLEET_FACTORY"]

    async def _run() -> T:
        async with factory() as fleet:
            return await operation(fleet)

    return asyncio.run(_run())


def error_response(exc: BaseException, context: str = "git-operations"):
    """JSON error envelope. Every failure is reported as HTTP 500."""
    message = getattr(exc, "message", None) or str(exc)
    logger.error(f"Error in {context}: {type(exc).__name__}: {message}", exc_info=exc)
    return jsonify({
        "success": False,
        "error": message,
        "details": error_details(exc),
    }), 500


def require(data: dict, key: str) -> Any:
    value = data.get(key)
    if value in (None, ""):
        raise InvalidRequest(f"{key} is required")
    return value
