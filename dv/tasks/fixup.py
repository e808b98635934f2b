"""Fixup and conversion tasks for older projects.

- ``fixup:manifest`` drops lines that don't belong in the manifest
- ``fixup:pipenv`` removes Pipenv files
- ``fixup:legacy_deps`` converts ``requirements*.txt`` into ``deps.toml``
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from pathlib import Path

from dv.core.deps import DEPS_FILENAME
from dv.core.errors import ErrorCode
from dv.core.result import Err, Ok
from dv.output.console import Style
from dv.platform.files import create_exclusive, replace_file
from dv.tasks.base import Provider
from dv.tasks.context import TaskContext
from dv.tasks.registry import TaskFailure, TaskRegistry, TaskResult, failure

__all__ = [
    "LEGACY_DEPS_FILES",
    "MANIFEST_CRUFT_LINE",
    "PIPENV_FILES",
    "PROVIDER",
    "parse_requirements",
    "render_deps_toml",
]

MANIFEST_CRUFT_LINE = re.compile(r"^(?:changelog)$", re.IGNORECASE)

PIPENV_FILES = ("Pipfile", "Pipfile.lock")

# Legacy requirements files and whether they list development dependencies.
LEGACY_DEPS_FILES: tuple[tuple[str, bool], ...] = (
    ("requirements.txt", False),
    ("requirements-dev.txt", True),
    ("dev-requirements.txt", True),
)

_REQUIREMENT_RE = re.compile(r"^(?P<name>[A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?(?:\[[\w,.\s-]+\])?)\s*(?P<spec>[^;#]*)")
_BARE_KEY_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def _define_tasks(registry: TaskRegistry, ctx: TaskContext) -> None:
    registry.define("fixup", deps=["fixup:all"], description="Perform various fixup tasks on the current project")
    registry.define("fixup:all", deps=["fixup:manifest", "fixup:pipenv", "fixup:legacy_deps"])
    registry.define("fixup:manifest", action=_fixup_manifest, description="Clean up cruft from the manifest file")
    registry.define("fixup:pipenv", action=_fixup_pipenv, description="Remove Pipenv-related files")
    registry.define(
        "fixup:legacy_deps",
        action=_fixup_legacy_deps,
        description=f"Convert requirements files to {DEPS_FILENAME}",
    )
    registry.define("fixup_debug", action=_fixup_debug)
    registry.define("debug", deps=["fixup_debug"])


def _manifest_needs_fixup(ctx: TaskContext) -> bool:
    try:
        lines = ctx.project.manifest_file.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError):
        return False
    return any(MANIFEST_CRUFT_LINE.match(line) for line in lines)


def _present(ctx: TaskContext, names: Iterable[str]) -> list[Path]:
    return [ctx.project.root / n for n in names if (ctx.project.root / n).exists()]


def _legacy_deps_present(ctx: TaskContext) -> list[tuple[Path, bool]]:
    root = ctx.project.root
    return [(root / name, dev) for name, dev in LEGACY_DEPS_FILES if (root / name).is_file()]


def _fixup_debug(ctx: TaskContext) -> TaskResult:
    fixups: list[str] = []
    if _manifest_needs_fixup(ctx):
        fixups.append("Remove cruft from the manifest")
    if _present(ctx, PIPENV_FILES):
        fixups.append("Remove Pipenv files")
    if _legacy_deps_present(ctx):
        fixups.append(f"Convert legacy requirements files to {DEPS_FILENAME}")

    ctx.console.header("Fixups available:")
    if not fixups:
        ctx.console.print("None; project looks clean.")
    for desc in fixups:
        ctx.console.print(f"[ ] {desc}", Style.DEFAULT)
    ctx.console.newline()
    return Ok(None)


def _fixup_manifest(ctx: TaskContext) -> TaskResult:
    if not _manifest_needs_fixup(ctx):
        ctx.console.trace("Manifest is clean; skipping")
        return Ok(None)

    manifest = ctx.project.manifest_file
    ctx.console.trace("Removing cruft from the manifest")
    try:
        lines = manifest.read_text(encoding="utf-8").splitlines()
        kept = [line for line in lines if not MANIFEST_CRUFT_LINE.match(line)]
        replace_file(manifest, "".join(f"{line}\n" for line in kept))
    except OSError as e:
        return Err(TaskFailure(message=f"Cannot rewrite {manifest.name}: {e}", code=ErrorCode.IO_ERROR))
    return Ok(None)


def _remove_files(ctx: TaskContext, paths: list[Path]) -> TaskResult:
    """Remove ``paths``, through git when the project is a working copy."""
    if ctx.git.exists():
        relative = [p.relative_to(ctx.project.root).as_posix() for p in paths]
        removed = ctx.git.remove(relative, force=True)
        if isinstance(removed, Err):
            return failure(removed.error)
        return Ok(None)

    for path in paths:
        try:
            path.unlink()
        except OSError as e:
            return Err(TaskFailure(message=f"Cannot remove {path.name}: {e}", code=ErrorCode.IO_ERROR))
    return Ok(None)


def _fixup_pipenv(ctx: TaskContext) -> TaskResult:
    files = _present(ctx, PIPENV_FILES)
    if not files:
        ctx.console.trace("No Pipenv files; skipping")
        return Ok(None)
    for path in files:
        ctx.console.trace(f"Removing Pipenv file {path.name}...")
    return _remove_files(ctx, files)


def parse_requirements(text: str) -> list[tuple[str, str]]:
    """(name, specifier) pairs from a requirements file.

    Options (``-r``, ``-e``, ``--index-url``...), comments and URL
    requirements are skipped; environment markers are dropped.
    """
    reqs: list[tuple[str, str]] = []
    for raw in text.splitlines():
        line = raw.split(" #", 1)[0].strip()
        if not line or line.startswith(("#", "-")) or "://" in line:
            continue
        m = _REQUIREMENT_RE.match(line)
        if m:
            reqs.append((m.group("name"), m.group("spec").replace(" ", "")))
    return reqs


def _toml_key(name: str) -> str:
    return name if _BARE_KEY_RE.match(name) else json.dumps(name)


def render_deps_toml(runtime: list[tuple[str, str]], development: list[tuple[str, str]]) -> str:
    """Write dependency lists in the ``deps.toml`` format."""
    lines = ["[dependencies]"]
    lines.extend(f"{_toml_key(name)} = {json.dumps(spec or '*')}" for name, spec in runtime)
    if development:
        lines.extend(["", "[groups.development]"])
        lines.extend(f"{_toml_key(name)} = {json.dumps(spec or '*')}" for name, spec in development)
    return "\n".join(lines) + "\n"


def _fixup_legacy_deps(ctx: TaskContext) -> TaskResult:
    legacy = _legacy_deps_present(ctx)
    if not legacy:
        ctx.console.trace("No legacy dependency files; skipping")
        return Ok(None)

    deps_file = ctx.project.root / DEPS_FILENAME
    if deps_file.exists():
        ctx.console.trace(f"{DEPS_FILENAME} already exists; removing the legacy files")
        return _remove_files(ctx, [path for path, _ in legacy])

    runtime: list[tuple[str, str]] = []
    development: list[tuple[str, str]] = []
    for path, dev in legacy:
        try:
            reqs = parse_requirements(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            return Err(TaskFailure(message=f"Cannot read {path.name}: {e}", code=ErrorCode.IO_ERROR))
        if not reqs:
            return Err(
                TaskFailure(
                    message=f"Failed to read dependencies from {path.name}!",
                    code=ErrorCode.ENV_ERROR,
                )
            )
        (development if dev else runtime).extend(reqs)

    ctx.console.trace(f"Writing {DEPS_FILENAME}")
    try:
        create_exclusive(deps_file, render_deps_toml(runtime, development))
    except OSError as e:
        return Err(TaskFailure(message=f"Cannot create {DEPS_FILENAME}: {e}", code=ErrorCode.IO_ERROR))

    if ctx.git.exists():
        added = ctx.git.add([DEPS_FILENAME])
        if isinstance(added, Err):
            return failure(added.error)
    return _remove_files(ctx, [path for path, _ in legacy])


PROVIDER = Provider(name="fixup", define_tasks=_define_tasks)
