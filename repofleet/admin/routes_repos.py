"""
Admin API — Repository registry endpoints.

Blueprint: repos_bp
Prefix: /api/repositories
Routes:
    /api/repositories               (GET list, POST register)
    /api/repositories/<id>          (PATCH nickname, DELETE)
    /api/repositories/<id>/master   (POST)
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from ..fleet import Fleet
from .helpers import error_response, require, with_fleet

logger = logging.getLogger(__name__)

repos_bp = Blueprint("repos", __name__)


@repos_bp.route("", methods=["GET"])
def api_list_repositories():
    """All tracked repositories, newest first."""
    try:
        repos = with_fleet(lambda fleet: fleet.registry.list())
    except Exception as e:
        return error_response(e, "repositories")
    return jsonify({
        "success": True,
        "repositories": [r.model_dump() for r in repos],
    })


@repos_bp.route("", methods=["POST"])
def api_register_repository():
    """Register a repository, then try to fetch its metadata."""
    data = request.get_json(silent=True) or {}

    async def _register(fleet: Fleet) -> dict:
        repo = await fleet.registry.register(require(data, "url"), data.get("nickname"))
        refreshed = True
        try:
            await fleet.refresh(repo.id)
        except Exception as e:
            # The row stays registered; the dashboard can refresh it later
            logger.warning(f"Initial refresh of {repo.label} failed: {e}")
            refreshed = False
        repo = await fleet.registry.get(repo.id)
        return {"success": True, "repository": repo.model_dump(), "refreshed": refreshed}

    try:
        payload = with_fleet(_register)
    except Exception as e:
        return error_response(e, "repositories")
    return jsonify(payload)


@repos_bp.route("/<repo_id>", methods=["PATCH"])
def api_update_label(repo_id: str):
    """Update a repository's nickname."""
    data = request.get_json(silent=True) or {}
    nickname = data.get("nickname") or None
    try:
        repo = with_fleet(lambda fleet: fleet.registry.update(repo_id, nickname=nickname))
    except Exception as e:
        return error_response(e, "repositories")
    return jsonify({"success": True, "repository": repo.model_dump()})


@repos_bp.route("/<repo_id>", methods=["DELETE"])
def api_delete_repository(repo_id: str):
    """Forget a repository. Nothing is deleted on the remote host."""
    try:
        with_fleet(lambda fleet: fleet.registry.delete(repo_id))
    except Exception as e:
        return error_response(e, "repositories")
    return jsonify({"success": True, "message": "Repository deleted successfully"})


@repos_bp.route("/<repo_id>/master", methods=["POST"])
def api_set_master(repo_id: str):
    """Make `repo_id` the master repository."""
    try:
        repo = with_fleet(lambda fleet: fleet.registry.set_master(repo_id))
    except Exception as e:
        return error_response(e, "repositories")
    return jsonify({
        "success": True,
        "message": "Master repository updated",
        "repository": repo.model_dump(),
    })
