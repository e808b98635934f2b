"""Project file resolution.

The project file list is the authoritative set of files that documentation,
packaging and quality checks operate on. It comes from the manifest file
when there is one, and from a set of default glob patterns otherwise:

    files = resolve(root / "Manifest.txt", default_patterns("frob"), root=root, console=console)
    docs = derive_subset(files, DOC_EXCLUDE_DIRS, DOC_SUFFIXES)
    match find_named_file(files, README_PATTERN):
        case Ok(readme):
            ...
        case Err(error):
            console.warning(error.message)

Manifest entries are taken as written: paths that do not exist on disk are
passed through, since the manifest is maintained by hand.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from dv.core.errors import ProjectError
from dv.core.result import Err, Ok, Result

if TYPE_CHECKING:
    from dv.output.console import ConsoleProtocol

__all__ = [
    "DOC_EXCLUDE_DIRS",
    "DOC_SUFFIXES",
    "HISTORY_PATTERN",
    "README_PATTERN",
    "ProjectFileSet",
    "default_patterns",
    "derive_subset",
    "executables",
    "find_named_file",
    "resolve",
]

README_PATTERN = re.compile(r"^README\.(?:md|rdoc)$")
HISTORY_PATTERN = re.compile(r"^History\.(?:md|rdoc)$")

DOC_EXCLUDE_DIRS: tuple[str, ...] = ("tests", "test", "spec", "data")
DOC_SUFFIXES: tuple[str, ...] = (
    ".py",
    ".pyi",
    ".md",
    ".rdoc",
    ".rst",
    ".txt",
    ".c",
    ".h",
    ".png",
    ".jpg",
    ".gif",
    ".svg",
)


def _empty_entries() -> list[str]:
    return []


@dataclass
class ProjectFileSet:
    """Ordered, duplicate-free list of project-relative paths.

    Order is manifest order, or glob order when built from patterns.
    """

    entries: list[str] = field(default_factory=_empty_entries)

    def __post_init__(self) -> None:
        self.entries = list(_unique(_normalize(e) for e in self.entries))

    def append(self, path: str) -> None:
        """Add a path (e.g. a generated file); already-listed paths are ignored."""
        normalized = _normalize(path)
        if normalized not in self.entries:
            self.entries.append(normalized)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and _normalize(path) in self.entries

    def grep(self, pattern: re.Pattern[str]) -> list[str]:
        """Entries whose path matches ``pattern`` (re.search)."""
        return [e for e in self.entries if pattern.search(e)]


def _normalize(path: str) -> str:
    return path.replace("\\", "/")


def _unique(paths: Iterable[str]) -> Iterator[str]:
    seen: set[str] = set()
    for p in paths:
        if p not in seen:
            seen.add(p)
            yield p


def default_patterns(package: str | None) -> tuple[str, ...]:
    """Glob patterns used when a project has no manifest."""
    patterns = ["*.md", "*.rdoc", "*.txt", "bin/*"]
    if package:
        patterns.append(f"{package}/**/*.py")
    patterns.extend(["src/**/*.py", "ext/**/*.[ch]", "data/**/*", "tests/**/*.py"])
    return tuple(patterns)


def _read_manifest(manifest_path: Path) -> list[str] | None:
    try:
        text = manifest_path.read_text(encoding="utf-8")
    except (FileNotFoundError, IsADirectoryError, PermissionError, UnicodeDecodeError):
        return None
    return [line for line in text.splitlines() if line.strip()]


def _glob(root: Path, patterns: Sequence[str]) -> list[str]:
    found: list[str] = []
    for pattern in patterns:
        matches = sorted(
            p.relative_to(root).as_posix() for p in root.glob(pattern) if p.is_file()
        )
        found.extend(matches)
    return list(_unique(found))


def resolve(
    manifest_path: Path,
    patterns: Sequence[str],
    *,
    root: Path,
    console: ConsoleProtocol,
) -> ProjectFileSet:
    """Build the project file list.

    A readable manifest is authoritative, even when it is empty. Otherwise
    the default patterns are expanded under ``root`` and one warning is
    printed.
    """
    entries = _read_manifest(manifest_path)
    if entries is not None:
        console.trace(f"Read {len(entries)} entries from {manifest_path.name}")
        return ProjectFileSet(entries)

    console.warning(
        f"Manifest file {manifest_path.name} not found; using the default file patterns"
    )
    return ProjectFileSet(_glob(root, patterns))


def _first_segment(path: str) -> str:
    parts = PurePosixPath(path).parts
    return parts[0] if len(parts) > 1 else ""


def derive_subset(
    fileset: ProjectFileSet,
    exclude_dirs: Iterable[str],
    allowed_suffixes: Iterable[str],
) -> ProjectFileSet:
    """Filter out paths under ``exclude_dirs`` or with a suffix not allowed."""
    excluded = set(exclude_dirs)
    suffixes = {s.lower() for s in allowed_suffixes}
    return ProjectFileSet(
        [
            e
            for e in fileset.entries
            if _first_segment(e) not in excluded and PurePosixPath(e).suffix.lower() in suffixes
        ]
    )


def find_named_file(fileset: ProjectFileSet, name_pattern: re.Pattern[str]) -> Result[str, ProjectError]:
    """Return the first entry whose path matches ``name_pattern``."""
    for entry in fileset.entries:
        if name_pattern.match(entry):
            return Ok(entry)
    return Err(
        ProjectError(
            kind="not_found",
            message=f"No file matching {name_pattern.pattern!r} in the project files",
        )
    )


def executables(fileset: ProjectFileSet) -> list[str]:
    """Names of the scripts under bin/."""
    return [PurePosixPath(e).name for e in fileset.entries if _first_segment(e) == "bin"]
