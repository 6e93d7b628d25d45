"""
Admin Server — JSON API consumed by the repository dashboard.

Usage:
    python -m repofleet.main serve
    # API at http://localhost:5050/api/

Features:
    - git-operations RPC (getLastCommit, push, verify)
    - repository registry (list, register, relabel, delete, set master)
"""

from .server import create_app, run_server

__all__ = ["create_app", "run_server"]
