"""The default task and the project debugging dump."""

from __future__ import annotations

from dv.core.result import Ok
from dv.output.console import Style
from dv.tasks.base import Provider
from dv.tasks.context import TaskContext
from dv.tasks.registry import TaskRegistry, TaskResult


def _define_tasks(registry: TaskRegistry, ctx: TaskContext) -> None:
    registry.define("default", deps=["test"], description="The task that runs by default")
    registry.define("debug", description="Show information about the project")
    registry.define("project_debug", action=_project_debug)
    registry.define("debug", deps=["project_debug"])


def _project_debug(ctx: TaskContext) -> TaskResult:
    project = ctx.project
    console = ctx.console

    console.header("Project")
    _field(ctx, "Name", project.name)
    _field(ctx, "Title", project.title)
    _field(ctx, "Package", project.package)
    _field(ctx, "Version", project.version)
    _field(ctx, "Summary", project.summary or "(none)")
    _field(ctx, "README", project.readme_file.relative_to(project.root).as_posix())
    _field(ctx, "History", project.history_file.relative_to(project.root).as_posix())
    _field(
        ctx,
        "Manifest",
        project.config.manifest_file + ("" if project.has_manifest else " (missing)"),
    )

    console.print("Authors:")
    for author in project.authors:
        console.print(f"- {author}", Style.BOLD)

    console.print("Metadata URLs:")
    for label, url in project.metadata_urls(console).items():
        console.print(f"- {label}: {url}")

    console.print(f"Project files ({len(project.files)}):")
    for path in project.files:
        console.print(f"- {path}", Style.DIM)

    console.print(f"Documentation files ({len(project.doc_files)}):")
    for path in project.doc_files:
        console.print(f"- {path}", Style.DIM)

    if project.executables:
        console.print("Executables:")
        for name in project.executables:
            console.print(f"- {name}")

    console.print("Dependencies:")
    for dep in project.dependencies:
        console.print(f"- {dep.as_requirement()} ({dep.kind})")

    console.newline()
    return Ok(None)


def _field(ctx: TaskContext, label: str, value: str) -> None:
    ctx.console.print(f"{label}: {value}")


PROVIDER = Provider(name="core", define_tasks=_define_tasks)
