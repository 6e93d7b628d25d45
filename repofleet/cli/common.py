"""Shared plumbing for CLI commands."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

import click

from ..errors import FleetError
from ..fleet import Fleet

T = TypeVar("T")


def run_with_fleet(ctx: click.Context, operation: Callable[[Fleet], Awaitable[T]]) -> T:
    """
    Run `operation` against a freshly opened Fleet.

    Engine errors are printed and turned into exit code 1.
    """
    factory = ctx.obj.get("fleet_factory") or (
        lambda: Fleet.from_settings(ctx.obj["settings"])
    )

    async def _run() -> T:
        async with factory() as fleet:
            return await operation(fleet)

    try:
        return asyncio.run(_run())
    except FleetError as e:
        click.secho(f"✗ {e.name}: {e.message}", fg="red", err=True)
        raise SystemExit(1)


def short(sha) -> str:
    return sha[:7] if sha else "-"
