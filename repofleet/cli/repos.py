"""
CLI registry commands — list, add, remove, relabel, set master, refresh.

Usage:
    python -m repofleet.main repo-list [--json]
    python -m repofleet.main repo-add URL [--nickname LABEL]
    python -m repofleet.main repo-remove ID [--yes]
    python -m repofleet.main repo-label ID LABEL
    python -m repofleet.main repo-set-master ID
    python -m repofleet.main refresh ID
"""

from __future__ import annotations

import json

import click

from .common import run_with_fleet, short


@click.command("repo-list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def repo_list(ctx: click.Context, as_json: bool) -> None:
    """List tracked repositories, newest first."""
    repos = run_with_fleet(ctx, lambda fleet: fleet.registry.list())

    if as_json:
        click.echo(json.dumps([r.model_dump() for r in repos], indent=2))
        return

    if not repos:
        click.echo("No repositories registered. Add one with: repo-add URL")
        return

    click.echo(f"\n📦 {len(repos)} repositories\n")
    for repo in repos:
        star = click.style(" ★ master", fg="red") if repo.is_master else ""
        click.echo(f"  {repo.id}  {repo.label}{star}")
        click.echo(
            f"      {repo.default_branch or '?'} @ {short(repo.last_commit)}"
            f"  status={repo.status or '-'}  last_sync={repo.last_sync or 'never'}"
        )
    click.echo()


@click.command("repo-add")
@click.argument("url")
@click.option("--nickname", "-n", default=None, help="Display label")
@click.pass_context
def repo_add(ctx: click.Context, url: str, nickname: str) -> None:
    """Register a repository and fetch its metadata."""

    async def _add(fleet):
        repo = await fleet.registry.register(url, nickname)
        await fleet.refresh(repo.id)
        return await fleet.registry.get(repo.id)

    repo = run_with_fleet(ctx, _add)
    click.secho(f"✓ Repository added: {repo.label} ({repo.id})", fg="green")
    if repo.is_master:
        click.echo("  First repository: marked as master")
    click.echo(f"  {repo.default_branch} @ {short(repo.last_commit)}")


@click.command("repo-remove")
@click.argument("repo_id")
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def repo_remove(ctx: click.Context, repo_id: str, yes: bool) -> None:
    """Forget a repository (the remote is not touched)."""
    if not yes:
        click.confirm(f"Remove {repo_id} from the registry?", abort=True)
    run_with_fleet(ctx, lambda fleet: fleet.registry.delete(repo_id))
    click.secho("✓ Repository deleted", fg="green")


@click.command("repo-label")
@click.argument("repo_id")
@click.argument("label")
@click.pass_context
def repo_label(ctx: click.Context, repo_id: str, label: str) -> None:
    """Set a repository's display label."""
    repo = run_with_fleet(
        ctx, lambda fleet: fleet.registry.update(repo_id, nickname=label or None)
    )
    click.secho(f"✓ Label updated: {repo.label}", fg="green")


@click.command("repo-set-master")
@click.argument("repo_id")
@click.pass_context
def repo_set_master(ctx: click.Context, repo_id: str) -> None:
    """Make a repository the master."""
    repo = run_with_fleet(ctx, lambda fleet: fleet.registry.set_master(repo_id))
    click.secho(f"✓ Master repository is now {repo.label}", fg="green")


@click.command("refresh")
@click.argument("repo_id")
@click.pass_context
def refresh(ctx: click.Context, repo_id: str) -> None:
    """Refresh cached branches and recent commits."""
    details = run_with_fleet(ctx, lambda fleet: fleet.refresh(repo_id))
    click.echo(f"Default branch: {details.default_branch}")
    click.echo(f"Branches:       {', '.join(b.name for b in details.branches) or '-'}")
    for commit in details.last_commits:
        first_line = commit.message.splitlines()[0] if commit.message else ""
        click.echo(f"  {short(commit.sha)} {first_line[:60]} ({commit.author or '?'})")
