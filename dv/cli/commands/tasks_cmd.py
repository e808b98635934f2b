from __future__ import annotations

import typer

from dv.cli.context import build_context
from dv.output.console import Style


def tasks(
    all_: bool = typer.Option(False, "--all", "-a", help="Include tasks without a description"),
) -> None:
    """List the available tasks."""
    ctx = build_context()
    listed = sorted(ctx.registry, key=lambda t: t.name) if all_ else ctx.registry.described()

    if not listed:
        ctx.console.print("No tasks defined", Style.DIM)
        return

    width = max(len(t.name) for t in listed)
    for task in listed:
        line = f"dv run {task.name.ljust(width)}"
        if task.description:
            line += f"  # {task.description}"
        ctx.console.print(line.rstrip())
