"""Release tasks: checksum and upload the package.

``release`` chains the whole process: the ``prerelease`` hook (the git
provider tags the release there), building, checksumming and uploading
the package, then the ``postrelease`` hook.
"""

from __future__ import annotations

from dataclasses import replace

from dv.core.config import ProjectConfig
from dv.core.result import Err, Ok
from dv.platform.process import run_silent
from dv.release.checksum import write_checksum
from dv.tasks.base import Provider
from dv.tasks.context import TaskContext
from dv.tasks.packaging import signature_path
from dv.tasks.registry import TaskRegistry, TaskResult, failure

__all__ = ["DEFAULT_UPLOAD_COMMAND", "PROVIDER", "upload_command"]

DEFAULT_UPLOAD_COMMAND = ("twine", "upload")


def _configure(config: ProjectConfig) -> ProjectConfig:
    if config.upload_command is None:
        return replace(config, upload_command=DEFAULT_UPLOAD_COMMAND)
    return config


def _define_tasks(registry: TaskRegistry, ctx: TaskContext) -> None:
    registry.define("prerelease", description="Prepare for a new release")
    registry.define("postrelease", description="Tasks to run after a release")

    registry.define(
        "checksum",
        deps=["package"],
        action=_checksum,
        description="Write a checksum for the release package",
    )
    registry.define(
        "release_package",
        deps=["package", "checksum"],
        action=_upload,
        description="Upload the release package",
    )
    registry.define(
        "release",
        deps=["prerelease", "release_package", "postrelease"],
        description="Release a new version",
    )


def _checksum(ctx: TaskContext) -> TaskResult:
    project = ctx.project
    if not ctx.prompt.yes("Make a checksum for this release?"):
        ctx.console.trace("Skipping the release checksum")
        return Ok(None)

    match write_checksum(project.package_path, project.checksum_path):
        case Err(e):
            return failure(e)
        case Ok(digest):
            ctx.console.trace(f"sha512: {digest}")
            ctx.console.success(f"Wrote {project.checksum_path.relative_to(project.root).as_posix()}")
            return Ok(None)


def upload_command(ctx: TaskContext) -> list[str]:
    """The command that publishes the package.

    With ``upload_host`` set the package is copied there with scp;
    otherwise it goes through ``upload_command`` (twine by default),
    along with its signature when there is one.
    """
    project = ctx.project
    package = str(project.package_path)
    if project.config.upload_host:
        return ["scp", package, f"{project.config.upload_host}:"]

    cmd = [*(project.config.upload_command or DEFAULT_UPLOAD_COMMAND), package]
    signature = signature_path(project.package_path)
    if signature.exists():
        cmd.append(str(signature))
    return cmd


def _upload(ctx: TaskContext) -> TaskResult:
    cmd = upload_command(ctx)
    ctx.console.print(f"Uploading {ctx.project.package_filename}...")
    ctx.console.trace(" ".join(cmd))
    match run_silent(cmd, cwd=ctx.project.root):
        case Err(e):
            return failure(e)
        case Ok(_):
            ctx.console.success(f"Released {ctx.project.package_filename}")
            return Ok(None)


PROVIDER = Provider(name="releases", define_tasks=_define_tasks, configure=_configure)
