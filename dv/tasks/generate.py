"""Project file generation.

Each generated file is its own task named after the file, and
``generate`` runs them all. Generation never overwrites: a file that
already exists is skipped, so ``generate`` only fills in the missing ones.
"""

from __future__ import annotations

import getpass
import platform
from collections.abc import Callable
from datetime import date
from pathlib import Path

from jinja2 import TemplateNotFound

from dv.core.errors import ErrorCode
from dv.core.files import ProjectFileSet
from dv.core.project import Project
from dv.core.render import render_template
from dv.core.result import Err, Ok
from dv.platform.files import create_exclusive
from dv.tasks.base import Provider
from dv.tasks.context import TaskContext
from dv.tasks.registry import TaskFailure, TaskRegistry, TaskResult

__all__ = ["PROVIDER", "PYTHON_VERSION_FILE", "readme_context"]

PYTHON_VERSION_FILE = ".python-version"


def _define_tasks(registry: TaskRegistry, ctx: TaskContext) -> None:
    project = ctx.project
    targets: list[tuple[str, Callable[[TaskContext, Path], str]]] = [
        (_relative(project, project.readme_file), _readme_content),
        (_relative(project, project.history_file), _history_content),
        (project.config.manifest_file, _manifest_content),
        (PYTHON_VERSION_FILE, _python_version_content),
    ]

    for name, content in targets:
        registry.define(name, action=_generator(name, content))

    registry.define(
        "generate",
        deps=[name for name, _ in targets],
        description="Generate any missing project files",
    )


def _relative(project: Project, path: Path) -> str:
    return path.relative_to(project.root).as_posix()


def _generator(name: str, content: Callable[[TaskContext, Path], str]) -> Callable[[TaskContext], TaskResult]:
    def action(ctx: TaskContext) -> TaskResult:
        path = ctx.project.root / name
        if path.exists():
            ctx.console.trace(f"{name} already exists; not generating")
            return Ok(None)

        try:
            text = content(ctx, path)
        except TemplateNotFound as e:
            return Err(
                TaskFailure(
                    message=f"No template for {name}: {e.name}",
                    hint="Generated files must be .md or .rdoc",
                    code=ErrorCode.ENV_ERROR,
                )
            )

        ctx.console.success(f"Generating {name}...")
        try:
            create_exclusive(path, text)
        except FileExistsError:
            return Err(TaskFailure(message=f"{name} already exists"))
        except OSError as e:
            return Err(TaskFailure(message=f"Cannot create {name}: {e}", code=ErrorCode.IO_ERROR))
        return Ok(None)

    return action


def readme_context(project: Project) -> dict[str, object]:
    """Values the README and History templates are rendered with."""
    return {
        "name": project.name,
        "title": project.title,
        "description": project.description,
        "authors": list(project.authors),
        "author_login": _login(),
        "urls": dict(project.readme.urls),
        "python_version": _python_version(project),
        "year": date.today().year,
    }


def _login() -> str:
    try:
        return getpass.getuser()
    except (OSError, KeyError):
        return "author"


def _python_version(project: Project) -> str:
    if project.config.python_version:
        return project.config.python_version
    major, minor, _ = platform.python_version_tuple()
    return f"{major}.{minor}"


def _readme_content(ctx: TaskContext, path: Path) -> str:
    return render_template(f"README{path.suffix}.j2", **readme_context(ctx.project)) + "\n"


def _history_content(ctx: TaskContext, path: Path) -> str:
    return render_template(f"History{path.suffix}.j2", **readme_context(ctx.project)) + "\n"


def _manifest_content(ctx: TaskContext, path: Path) -> str:
    """List the current project files plus the generated ones."""
    project = ctx.project
    files = ProjectFileSet(list(project.files))
    for generated in (project.readme_file, project.history_file, path):
        files.append(_relative(project, generated))
    return "".join(f"{entry}\n" for entry in files)


def _python_version_content(ctx: TaskContext, path: Path) -> str:
    return _python_version(ctx.project) + "\n"


PROVIDER = Provider(name="generate", define_tasks=_define_tasks)
