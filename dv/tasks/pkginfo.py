"""Package metadata tasks.

``pkginfo`` (re)writes ``PKG-INFO`` at the project root with a
pre-release version, so the checked-in metadata never claims to be a
released version. It runs as part of ``precheckin``.
"""

from __future__ import annotations

from dv.core.errors import ErrorCode
from dv.core.pkginfo import PKGINFO_FILENAME, make_pkginfo
from dv.core.result import Err, Ok
from dv.output.console import Style
from dv.platform.files import atomic_write_text
from dv.release.version import prerelease_version
from dv.tasks.base import Provider
from dv.tasks.context import TaskContext
from dv.tasks.registry import TaskFailure, TaskRegistry, TaskResult

__all__ = ["PROVIDER"]


def _define_tasks(registry: TaskRegistry, ctx: TaskContext) -> None:
    registry.define("pkginfo", action=_write_pkginfo, description="(Re)generate the PKG-INFO file")
    registry.define("precheckin", deps=["pkginfo"])
    registry.define("pkginfo_debug", action=_pkginfo_debug)
    registry.define("debug", deps=["pkginfo_debug"])


def _write_pkginfo(ctx: TaskContext) -> TaskResult:
    project = ctx.project
    try:
        version = prerelease_version(project.version, now=ctx.now())
    except ValueError as e:
        return Err(TaskFailure(message=str(e), code=ErrorCode.ENV_ERROR))

    ctx.console.print(f"Updating {PKGINFO_FILENAME} for {version}")
    content = make_pkginfo(project, version=version, console=ctx.console)
    try:
        atomic_write_text(project.root / PKGINFO_FILENAME, content)
    except OSError as e:
        return Err(TaskFailure(message=f"Cannot write {PKGINFO_FILENAME}: {e}", code=ErrorCode.IO_ERROR))
    return Ok(None)


def _pkginfo_debug(ctx: TaskContext) -> TaskResult:
    console = ctx.console
    project = ctx.project

    if project.config.post_install_message:
        console.header("Post-install message:")
        console.print(_indent(project.config.post_install_message))

    console.header("PKG-INFO:")
    head = make_pkginfo(project, console=console).split("\n\n", 1)[0]
    console.print(_indent(head), Style.DIM)
    console.newline()
    return Ok(None)


def _indent(text: str, width: int = 4) -> str:
    pad = " " * width
    return "\n".join(pad + line for line in text.splitlines())


PROVIDER = Provider(name="pkginfo", define_tasks=_define_tasks)
