from __future__ import annotations

import os
from pathlib import Path

import typer

from dv import __version__
from dv.cli.commands.run_cmd import run
from dv.cli.commands.tasks_cmd import tasks
from dv.cli.context import PROJECT_ENV, TRACE_ENV
from dv.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(run)
app.command()(tasks)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    project: Path | None = typer.Option(
        None,
        "--project",
        "-p",
        help="Project root (default: $DV_PROJECT or the current directory)",
    ),
    trace: bool = typer.Option(False, "--trace", "-t", help="Show task tracing output."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if project is not None:
        try:
            root = project.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --project: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not root.is_dir():
            typer.echo(f"error: --project '{root}' is not a directory", err=True)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        os.environ[PROJECT_ENV] = str(root)

    if trace:
        os.environ[TRACE_ENV] = "1"


def main() -> None:
    app()
