"""
CLI replication commands — push and verify.

Usage:
    python -m repofleet.main push SOURCE TARGET... [--strategy regular|force|force-with-lease]
                                  [--continue-on-error] [--no-verify] [--yes] [--json]
    python -m repofleet.main verify SOURCE TARGET...

Pushing onto the master repository asks for three confirmations
unless --yes is given.
"""

from __future__ import annotations

import json

import click

from ..models.run import PUSH_STRATEGIES
from .common import run_with_fleet, short

MASTER_WARNINGS = (
    "⚠️  {label} is the MASTER repository. Push to it anyway?",
    "⚠️  This may overwrite history on the master repository. Are you sure?",
    "⚠️  Final confirmation: push {strategy} onto {label}?",
)


def confirm_master_push(targets, strategy: str) -> None:
    """Three escalating prompts when a target is the master repository."""
    for repo in targets:
        if not repo.is_master:
            continue
        for warning in MASTER_WARNINGS:
            click.confirm(
                warning.format(label=repo.label, strategy=strategy), abort=True
            )


@click.command("push")
@click.argument("source_id")
@click.argument("target_ids", nargs=-1)
@click.option("--strategy", "-s", type=click.Choice(PUSH_STRATEGIES),
              default="regular", show_default=True, help="Push strategy")
@click.option("--continue-on-error", is_flag=True,
              help="Keep pushing remaining targets after a failure")
@click.option("--verify/--no-verify", "do_verify", default=True,
              help="Verify convergence after the push")
@click.option("--yes", is_flag=True, help="Skip master-repository confirmations")
@click.option("--json", "as_json", is_flag=True, help="Output the run result as JSON")
@click.pass_context
def push(
    ctx: click.Context,
    source_id: str,
    target_ids: tuple,
    strategy: str,
    continue_on_error: bool,
    do_verify: bool,
    yes: bool,
    as_json: bool,
) -> None:
    """Replicate SOURCE's default branch onto each TARGET."""
    if not target_ids:
        raise click.UsageError("Please select at least one target repository")

    if not yes:
        targets = run_with_fleet(ctx, lambda fleet: fleet.registry.get_many(target_ids))
        confirm_master_push(targets, strategy)

    if not as_json:
        click.echo(f"Starting {strategy} push operation to {len(target_ids)} target(s)...")

    run = run_with_fleet(
        ctx,
        lambda fleet: fleet.push(
            source_id, list(target_ids), strategy, continue_on_error=continue_on_error
        ),
    )

    verdict = None
    if do_verify and run.success:
        verdict = run_with_fleet(ctx, lambda fleet: fleet.verify(source_id, list(target_ids)))

    if as_json:
        payload = run.model_dump()
        payload["success"] = run.success
        if verdict is not None:
            payload["verification"] = verdict.model_dump()
        click.echo(json.dumps(payload, indent=2))
    else:
        for outcome in run.targets:
            if outcome.status == "ok":
                click.secho(f"  ✅ {outcome.target_id} → {short(outcome.sha)}", fg="green")
            else:
                click.secho(
                    f"  ❌ {outcome.target_id}: {outcome.error.name}: {outcome.error.message}",
                    fg="red",
                )
        click.echo(f"Source commit: {short(run.sha)} (run {run.run_id})")
        if verdict is not None:
            click.secho(verdict.message, fg="green" if verdict.success else "yellow")

    if not run.success or (verdict is not None and not verdict.success):
        raise SystemExit(1)


@click.command("verify")
@click.argument("source_id")
@click.argument("target_ids", nargs=-1)
@click.pass_context
def verify(ctx: click.Context, source_id: str, target_ids: tuple) -> None:
    """Check that every TARGET's last commit equals SOURCE's."""
    verdict = run_with_fleet(ctx, lambda fleet: fleet.verify(source_id, list(target_ids)))
    click.secho(verdict.message, fg="green" if verdict.success else "red")
    click.echo(f"  {verdict.matched}/{verdict.total} in sync")
    if not verdict.success:
        raise SystemExit(1)
