"""
Repo Fleet — CLI Entry Point

Usage:
    python -m repofleet.main repo-list
    python -m repofleet.main push SOURCE TARGET... --strategy regular
    python -m repofleet.main verify SOURCE TARGET...
    python -m repofleet.main serve --port 5050
"""

from __future__ import annotations

# Load .env file FIRST, before any other imports that might read env vars
from pathlib import Path
from dotenv import load_dotenv

_project_root = Path(__file__).parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

import click

from .config.settings import FleetSettings
from .logging_config import setup_logging
from .cli.config import check_config
from .cli.replicate import push, verify
from .cli.repos import (
    refresh,
    repo_add,
    repo_label,
    repo_list,
    repo_remove,
    repo_set_master,
)

# Initialize logging
setup_logging()


def get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Repo Fleet — keep a fleet of hosted repositories in sync."""
    ctx.ensure_object(dict)
    root = ctx.obj.setdefault("root", get_project_root())
    if "settings" not in ctx.obj:
        ctx.obj["settings"] = FleetSettings.from_env(root=root)


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", default=5050, type=int, help="Port to listen on")
@click.option("--debug", is_flag=True, help="Enable Flask debug mode")
def serve(host: str, port: int, debug: bool) -> None:
    """Run the admin API server."""
    from .admin.server import run_server

    run_server(host=host, port=port, debug=debug)


# Registry commands: repofleet/cli/repos.py
cli.add_command(repo_list)
cli.add_command(repo_add)
cli.add_command(repo_remove)
cli.add_command(repo_label)
cli.add_command(repo_set_master)
cli.add_command(refresh)

# Replication commands: repofleet/cli/replicate.py
cli.add_command(push)
cli.add_command(verify)

# Config commands: repofleet/cli/config.py
cli.add_command(check_config)


if __name__ == "__main__":
    cli()
