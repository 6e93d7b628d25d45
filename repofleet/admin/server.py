"""
Admin Server — Flask-based API for the repository dashboard.

The dashboard (a separate front end) calls the RPC endpoint and the
registry routes. Every response carries permissive CORS headers.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Optional

from flask import Flask, jsonify, request

from ..config.settings import FleetSettings, check_settings
from ..errors import error_details
from ..fleet import Fleet
from .helpers import CORS_HEADERS
from .routes_operations import operations_bp
from .routes_repos import repos_bp

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[FleetSettings] = None,
    fleet_factory: Optional[Callable[[], Fleet]] = None,
) -> Flask:
    """Create the Flask application."""
    project_root = Path(__file__).parent.parent.parent
    if settings is None:
        settings = FleetSettings.from_env(root=project_root)

    app = Flask(__name__)
    app.config["PROJECT_ROOT"] = project_root
    app.config["SETTINGS"] = settings
    app.config["FLEET_FACTORY"] = fleet_factory or (lambda: Fleet.from_settings(settings))

    # ── Register Blueprints ───────────────────────────────────────
    app.register_blueprint(operations_bp, url_prefix="/api")            # /api/git-operations
    app.register_blueprint(repos_bp, url_prefix="/api/repositories")    # /api/repositories/*

    @app.route("/api/status")
    def api_status():
        """Configuration status of the storage and hosted-repo backends."""
        checks = check_settings(app.config["SETTINGS"])
        return jsonify({
            "configured": all(c.configured for c in checks),
            "checks": [c.to_dict() for c in checks],
        })

    # ── Error Handlers ────────────────────────────────────────────

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"success": False, "error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"success": False, "error": "Method not allowed"}), 405

    @app.errorhandler(500)
    def internal_server_error(e):
        """Catch-all: return the error envelope for any unhandled 500."""
        original = getattr(e, "original_exception", None) or e
        logger.error(f"Unhandled 500 on {request.method} {request.path}: {original}")
        return jsonify({
            "success": False,
            "error": f"Internal server error: {original}",
            "details": error_details(original),
        }), 500

    # ── Request Logging + CORS ────────────────────────────────────

    @app.before_request
    def log_request_start():
        request._start_time = time.time()

    @app.after_request
    def finish_response(response):
        """Attach CORS headers and log API calls with duration."""
        for header, value in CORS_HEADERS.items():
            response.headers[header] = value

        duration_ms = 0
        if hasattr(request, "_start_time"):
            duration_ms = int((time.time() - request._start_time) * 1000)

        if request.path.startswith("/api/"):
            log_fn = logger.debug if request.method == "OPTIONS" else logger.info
            log_fn(f"{request.method} {request.path} → {response.status_code} ({duration_ms}ms)")
        return response

    logger.info(
        f"Admin server initialized (registry={settings.registry_backend}, "
        f"host={settings.host_mode})"
    )

    return app


def run_server(
    host: str = "127.0.0.1",
    port: int = 5050,
    debug: bool = False,
) -> None:
    """
    Run the admin server.

    Args:
        host: Bind address (default: localhost only)
        port: Port to run on
        debug: Enable Flask debug mode
    """
    # Silence werkzeug: the after_request hook already logs each call
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    app = create_app()

    url = f"http://{host}:{port}"
    print(f"""
╔══════════════════════════════════════════════════════════════╗
║                      REPO FLEET ADMIN                        ║
╠══════════════════════════════════════════════════════════════╣
║  API running at:                                             ║
║  → {url:<58}║
║                                                              ║
║  Press Ctrl+C to stop                                        ║
╚══════════════════════════════════════════════════════════════╝
""")

    app.run(host=host, port=port, debug=debug, use_reloader=False)


if __name__ == "__main__":
    run_server()
