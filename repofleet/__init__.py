"""
Repo Fleet — Replicate commits across a fleet of GitHub repositories.

The replication engine lives in `repofleet.engine`; the admin server
(`repofleet.admin`) and the CLI (`repofleet.main`) are thin callers.
"""

__version__ = "0.1.0"
