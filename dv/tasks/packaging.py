"""Source distribution packaging.

``package`` builds ``pkg/<name>-<version>.tar.gz`` from the project file
list, with a ``PKG-INFO`` member for the release version at the top of
the archive. When a signing key is configured the tarball also gets an
ASCII-armored detached gpg signature next to it.
"""

from __future__ import annotations

import io
import shutil
import tarfile
import time
from pathlib import Path

from dv.core.errors import ErrorCode
from dv.core.pkginfo import PKGINFO_FILENAME, make_pkginfo
from dv.core.project import Project
from dv.core.result import Err, Ok, Result
from dv.platform.process import run_silent
from dv.tasks.base import Provider
from dv.tasks.context import TaskContext
from dv.tasks.registry import TaskFailure, TaskRegistry, TaskResult, failure

__all__ = ["PROVIDER", "build_sdist", "signature_path"]


def _define_tasks(registry: TaskRegistry, ctx: TaskContext) -> None:
    registry.define("clean", action=_clean, description="Remove generated build artifacts")
    registry.define(
        "package",
        deps=["clean"],
        action=_package,
        description=f"Build {ctx.project.package_filename}",
    )


def signature_path(package: Path) -> Path:
    return package.with_name(package.name + ".asc")


def _reset_owner(info: tarfile.TarInfo) -> tarfile.TarInfo:
    info.uid = info.gid = 0
    info.uname = info.gname = ""
    return info


def build_sdist(project: Project, dest: Path) -> Result[Path, TaskFailure]:
    """Write the source tarball for ``project`` to ``dest``.

    Every project file must exist; the failure lists the ones that don't.
    """
    missing = [e for e in project.files if not (project.root / e).is_file()]
    if missing:
        return Err(
            TaskFailure(
                message=f"Project files missing from the working tree: {', '.join(missing)}",
                hint=f"Update {project.config.manifest_file} or restore the files",
            )
        )

    base = project.package_basename
    pkginfo = make_pkginfo(project).encode("utf-8")

    dest.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(dest, "w:gz", format=tarfile.PAX_FORMAT) as tar:
        info = tarfile.TarInfo(f"{base}/{PKGINFO_FILENAME}")
        info.size = len(pkginfo)
        info.mode = 0o644
        info.mtime = int(time.time())
        tar.addfile(info, io.BytesIO(pkginfo))

        for entry in project.files:
            if entry == PKGINFO_FILENAME:
                continue
            tar.add(project.root / entry, arcname=f"{base}/{entry}", recursive=False, filter=_reset_owner)

    return Ok(dest)


def _package(ctx: TaskContext) -> TaskResult:
    project = ctx.project
    ctx.console.print(f"Building {project.package_filename}...")

    try:
        built = build_sdist(project, project.package_path)
    except OSError as e:
        return Err(TaskFailure(message=f"Cannot build {project.package_filename}: {e}", code=ErrorCode.IO_ERROR))
    if isinstance(built, Err):
        return built

    if project.config.signing_key:
        ctx.console.print(f"Signing with key {project.config.signing_key}...")
        signed = run_silent(
            [
                "gpg",
                "--local-user",
                project.config.signing_key,
                "--armor",
                "--detach-sign",
                "--output",
                str(signature_path(project.package_path)),
                str(project.package_path),
            ],
            cwd=project.root,
        )
        if isinstance(signed, Err):
            return failure(signed.error)

    ctx.console.success(f"Built {project.package_path.relative_to(project.root).as_posix()}")
    return Ok(None)


def _clean(ctx: TaskContext) -> TaskResult:
    pkg_dir = ctx.project.pkg_dir
    if not pkg_dir.exists():
        return Ok(None)

    ctx.console.trace(f"Removing {pkg_dir}")
    try:
        shutil.rmtree(pkg_dir)
    except OSError as e:
        return Err(TaskFailure(message=f"Cannot remove {pkg_dir}: {e}", code=ErrorCode.IO_ERROR))
    return Ok(None)


PROVIDER = Provider(name="packaging", define_tasks=_define_tasks)
