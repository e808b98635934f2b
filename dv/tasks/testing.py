"""Test running.

``test`` is only defined when the project has a ``tests/`` directory, so
``default`` fails with an unknown-task error in a project without tests.
"""

from __future__ import annotations

from dataclasses import replace

from dv.core.config import ProjectConfig
from dv.core.result import Err, Ok
from dv.platform.process import run_silent
from dv.tasks.base import Provider
from dv.tasks.context import TaskContext
from dv.tasks.registry import TaskRegistry, TaskResult, failure

__all__ = ["DEFAULT_TEST_COMMAND", "PROVIDER"]

DEFAULT_TEST_COMMAND = ("pytest",)


def _configure(config: ProjectConfig) -> ProjectConfig:
    if config.test_command is None:
        return replace(config, test_command=DEFAULT_TEST_COMMAND)
    return config


def _define_tasks(registry: TaskRegistry, ctx: TaskContext) -> None:
    if not ctx.project.tests_dir.is_dir():
        ctx.console.trace(f"No {ctx.project.tests_dir.name}/ directory; not defining the test task")
        return
    registry.define("test", action=_test, description="Run the test suite")


def _test(ctx: TaskContext) -> TaskResult:
    cmd = list(ctx.config.test_command or DEFAULT_TEST_COMMAND)
    ctx.console.trace(" ".join(cmd))
    match run_silent(cmd, cwd=ctx.project.root):
        case Err(e):
            return failure(e)
        case Ok(_):
            return Ok(None)


PROVIDER = Provider(name="testing", define_tasks=_define_tasks, configure=_configure)
