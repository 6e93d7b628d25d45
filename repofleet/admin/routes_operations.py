"""
Admin API — Git operations RPC endpoint.

Blueprint: operations_bp
Prefix: /api
Routes:
    /api/git-operations   (POST, OPTIONS)

Request body `type` selects the operation:

    {"type": "getLastCommit", "sourceRepoId": ...}
    {"type": "push", "sourceRepoId": ..., "targetRepoId": ... | "targetRepoIds": [...],
     "pushType": "regular" | "force" | "force-with-lease", "continueOnError": false}
    {"type": "verify", "sourceRepoId": ..., "targetRepoIds": [...]}

Failures of any kind return the error envelope with HTTP 500.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from flask import Blueprint, jsonify, request

from ..errors import InvalidRequest
from ..fleet import Fleet
from .helpers import error_response, require, with_fleet

logger = logging.getLogger(__name__)

operations_bp = Blueprint("operations", __name__)


def _target_ids(data: dict) -> List[str]:
    ids = data.get("targetRepoIds")
    if ids is None and data.get("targetRepoId"):
        ids = [data["targetRepoId"]]
    if ids is not None and not isinstance(ids, list):
        raise InvalidRequest("targetRepoIds must be a list")
    return ids or []


async def _get_last_commit(fleet: Fleet, data: dict) -> Dict[str, Any]:
    details = await fleet.refresh(require(data, "sourceRepoId"))
    return {"success": True, "details": details.to_wire()}


async def _push(fleet: Fleet, data: dict) -> Dict[str, Any]:
    strategy = data.get("pushType") or "regular"
    run = await fleet.push(
        require(data, "sourceRepoId"),
        _target_ids(data),
        strategy,
        continue_on_error=bool(data.get("continueOnError", False)),
    )
    ok_count = len(run.targets) - len(run.failed_targets)
    if run.success:
        message = f"Git push operation completed successfully ({strategy})"
    else:
        message = f"Git push completed for {ok_count}/{len(run.target_ids)} target(s)"
    return {
        "success": run.success,
        "message": message,
        "sha": run.sha,
        "strategy": run.strategy,
        "runId": run.run_id,
        "results": [t.model_dump() for t in run.targets],
        "timestamp": run.finished_at,
    }


async def _verify(fleet: Fleet, data: dict) -> Dict[str, Any]:
    result = await fleet.verify(require(data, "sourceRepoId"), _target_ids(data))
    return {
        "success": result.success,
        "message": result.message,
        "matched": result.matched,
        "total": result.total,
        "checkedAt": result.checked_at,
    }


OPERATIONS = {
    "getLastCommit": _get_last_commit,
    "push": _push,
    "verify": _verify,
}


@operations_bp.route("/git-operations", methods=["POST", "OPTIONS"])
def api_git_operations():
    """Dispatch one git operation."""
    # CORS preflight: headers are added by the app's after_request hook
    if request.method == "OPTIONS":
        return "", 200

    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise InvalidRequest("Request body must be a JSON object")

        op_type = data.get("type")
        logger.info(f"Received operation: {op_type} (source={data.get('sourceRepoId')})")

        handler = OPERATIONS.get(op_type)
        if handler is None:
            raise InvalidRequest(f"Unknown operation type: {op_type}")

        payload = with_fleet(lambda fleet: handler(fleet, data))
    except Exception as e:
        return error_response(e)

    return jsonify(payload)
