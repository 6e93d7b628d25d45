"""
CLI configuration commands.

Usage:
    python -m repofleet.main check-config [--json]
"""

from __future__ import annotations

import json

import click

from ..config.settings import check_settings


@click.command("check-config")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def check_config(ctx: click.Context, as_json: bool) -> None:
    """Check that storage and hosted-repo credentials are present."""
    settings = ctx.obj["settings"]
    checks = check_settings(settings)
    all_ok = all(c.configured for c in checks)

    if as_json:
        click.echo(json.dumps({
            "configured": all_ok,
            "checks": [c.to_dict() for c in checks],
        }, indent=2))
    else:
        click.echo("\n🔧 Configuration\n")
        for c in checks:
            icon = "✅" if c.configured else "❌"
            click.echo(f"  {icon} {c.component} ({c.mode})")
            if c.missing:
                click.echo(f"      missing: {', '.join(c.missing)}")
            if c.guidance:
                click.echo(f"      → {c.guidance}")
        click.echo()

    if not all_ok:
        raise SystemExit(1)
