from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from dv.core.config import CONFIG_FILENAME, load_config_or_default
from dv.core.errors import ErrorCode
from dv.core.project import load_project
from dv.core.result import Err
from dv.output.console import ConsoleProtocol, RichConsole, Style
from dv.output.prompt import PromptProtocol, TerminalPrompt
from dv.tasks import providers
from dv.tasks.context import TaskContext
from dv.tasks.registry import TaskRegistry

PROJECT_ENV = "DV_PROJECT"
TRACE_ENV = "DV_TRACE"


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    console: ConsoleProtocol
    prompt: PromptProtocol
    registry: TaskRegistry
    tasks: TaskContext


def detect_project_root() -> Path:
    """``--project`` (via the environment), else the current directory."""
    env_root = os.environ.get(PROJECT_ENV)
    return Path(env_root).expanduser().resolve() if env_root else Path.cwd()


def build_context() -> CLIContext:
    console = RichConsole(trace=os.environ.get(TRACE_ENV) == "1")
    root = detect_project_root()

    if not root.is_dir():
        console.error(f"Project directory not found: {root}")
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config_result = load_config_or_default(root / CONFIG_FILENAME)
    if isinstance(config_result, Err):
        _fail(console, config_result.error.message, config_result.error.hint)
    config = providers.configure(config_result.value)

    project_result = load_project(root, config, console)
    if isinstance(project_result, Err):
        _fail(console, project_result.error.message, project_result.error.hint)

    registry = TaskRegistry()
    prompt = TerminalPrompt()
    tasks = TaskContext(project=project_result.value, console=console, prompt=prompt, registry=registry)
    providers.define_tasks(registry, tasks)

    return CLIContext(root=root, console=console, prompt=prompt, registry=registry, tasks=tasks)


def _fail(console: ConsoleProtocol, message: str, hint: str | None) -> None:
    console.error(message)
    if hint:
        console.print(f"hint: {hint}", Style.DIM)
    raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
