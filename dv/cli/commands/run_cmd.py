from __future__ import annotations

import typer

from dv.cli.commands._helpers import exit_on_error
from dv.cli.context import build_context

DEFAULT_TASK = "default"


def run(
    tasks: list[str] | None = typer.Argument(None, help="Tasks to run (default: 'default')"),
) -> None:
    """Run tasks, each after its prerequisites."""
    ctx = build_context()
    names = tasks or [DEFAULT_TASK]
    ctx.console.trace(f"Running: {', '.join(names)}")
    exit_on_error(ctx.registry.invoke(names, ctx.tasks), ctx)
