"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from dv.core.result import Err, Result
from dv.output.console import Style
from dv.tasks.registry import TaskFailure

if TYPE_CHECKING:
    from dv.cli.context import CLIContext


def exit_on_error[T](result: Result[T, TaskFailure], ctx: CLIContext) -> None:
    """Exit with the failure's code if result is Err, otherwise return.

    This helper reduces boilerplate for the common pattern:
        match result:
            case Err(failure):
                ctx.console.error(failure.message)
                if failure.hint:
                    ctx.console.print(f"hint: {failure.hint}", Style.DIM)
                raise typer.Exit(code=int(failure.code))
            case Ok(_):
                pass
    """
    if isinstance(result, Err):
        failure = result.error
        ctx.console.error(failure.message)
        if failure.hint:
            ctx.console.print(f"hint: {failure.hint}", Style.DIM)
        raise typer.Exit(code=int(failure.code))
