"""Documentation generation.

``docs`` runs the configured generator (pdoc by default) over the Python
modules in the documentation file subset, writing into ``docs/``.
"""

from __future__ import annotations

from dataclasses import replace

from dv.core.config import ProjectConfig
from dv.core.errors import ErrorCode
from dv.core.project import DOCS_DIR
from dv.core.result import Err, Ok
from dv.platform.process import run_silent
from dv.tasks.base import Provider
from dv.tasks.context import TaskContext
from dv.tasks.registry import TaskFailure, TaskRegistry, TaskResult, failure

__all__ = ["DEFAULT_DOCS_COMMAND", "PROVIDER", "doc_modules"]

DEFAULT_DOCS_COMMAND = ("pdoc", "--output-directory", DOCS_DIR)
_MODULE_SUFFIXES = (".py", ".pyi")


def _configure(config: ProjectConfig) -> ProjectConfig:
    if config.docs_command is None:
        return replace(config, docs_command=DEFAULT_DOCS_COMMAND)
    return config


def _define_tasks(registry: TaskRegistry, ctx: TaskContext) -> None:
    registry.define("docs", action=_docs, description="Generate API documentation")


def doc_modules(ctx: TaskContext) -> list[str]:
    return [p for p in ctx.project.doc_files if p.endswith(_MODULE_SUFFIXES)]


def _docs(ctx: TaskContext) -> TaskResult:
    modules = doc_modules(ctx)
    if not modules:
        return Err(
            TaskFailure(
                message="No Python modules in the documentation files",
                hint=f"Check {ctx.config.manifest_file}",
                code=ErrorCode.ENV_ERROR,
            )
        )

    cmd = [*(ctx.config.docs_command or DEFAULT_DOCS_COMMAND), *modules]
    ctx.console.print(f"Generating docs for {ctx.project.title}...")
    ctx.console.trace(" ".join(cmd))
    match run_silent(cmd, cwd=ctx.project.root):
        case Err(e):
            return failure(e)
        case Ok(_):
            return Ok(None)


PROVIDER = Provider(name="docs", define_tasks=_define_tasks, configure=_configure)
