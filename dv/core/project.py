"""The project being worked on.

A ``Project`` is built once per ``dv`` invocation from the project root and
its ``dv.toml`` settings. It owns the resolved file list and the metadata
every task reads; it is passed explicitly to task bodies through the task
context rather than being looked up globally.

Usage:
    match load_project(root, config, console):
        case Ok(project):
            print(project.name, project.version)
            for path in project.doc_files:
                ...
        case Err(error):
            console.error(error.message)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlsplit, urlunsplit

from dv.core.config import ProjectConfig
from dv.core.deps import DEPS_FILENAME, Dependency, load_dependencies
from dv.core.errors import ProjectError
from dv.core.files import (
    DOC_EXCLUDE_DIRS,
    DOC_SUFFIXES,
    HISTORY_PATTERN,
    README_PATTERN,
    ProjectFileSet,
    default_patterns,
    derive_subset,
    executables,
    find_named_file,
    resolve,
)
from dv.core.readme import ReadmeInfo, read_readme
from dv.core.result import Err, Ok, Result

if TYPE_CHECKING:
    from dv.output.console import ConsoleProtocol

__all__ = [
    "AUTHOR_PATTERN",
    "Author",
    "Project",
    "load_project",
    "make_metadata_urls",
    "read_version",
    "split_authors",
]

VALID_NAME_PATTERN = re.compile(r"^([A-Z0-9]|[A-Z0-9][A-Z0-9._-]*[A-Z0-9])$", re.IGNORECASE)
VERSION_PATTERN = re.compile(
    r"^\s*(?:__version__|VERSION)\s*(?::\s*[\w\[\]]+\s*)?=\s*['\"](?P<version>[^'\"]+)['\"]",
    re.MULTILINE,
)
AUTHOR_PATTERN = re.compile(r"^(?P<name>.*)\s<(?P<email>.*)>$")

PKG_DIR = "pkg"
DOCS_DIR = "docs"
TESTS_DIR = "tests"
CHECKSUM_DIR = "checksum"
DEFAULT_README = "README.md"
DEFAULT_HISTORY = "History.md"


@dataclass(frozen=True, slots=True)
class Author:
    name: str
    email: str | None = None


def _empty_deps() -> tuple[Dependency, ...]:
    return ()


@dataclass
class Project:
    """Resolved project information.

    Attributes:
        root: Absolute project directory
        config: Settings after capability providers applied their defaults
        name: Distribution name
        package: Import package name
        title: Human-readable title for docs and metadata
        version: Current version string
        files: Authoritative project file list
        readme_file: README path (may not exist)
        history_file: History/changelog path (may not exist)
        readme: Metadata parsed from the README
        dependencies: Declared dependencies
    """

    root: Path
    config: ProjectConfig
    name: str
    package: str
    title: str
    version: str
    files: ProjectFileSet
    readme_file: Path
    history_file: Path
    readme: ReadmeInfo = field(default_factory=ReadmeInfo)
    dependencies: tuple[Dependency, ...] = field(default_factory=_empty_deps)

    @property
    def manifest_file(self) -> Path:
        return self.root / self.config.manifest_file

    @property
    def has_manifest(self) -> bool:
        return self.manifest_file.is_file()

    @property
    def doc_files(self) -> list[str]:
        """Project files that go into the documentation."""
        return derive_subset(self.files, DOC_EXCLUDE_DIRS, DOC_SUFFIXES).entries

    @property
    def executables(self) -> list[str]:
        return executables(self.files)

    @property
    def authors(self) -> tuple[str, ...]:
        return self.config.authors or self.readme.authors

    @property
    def summary(self) -> str | None:
        return self.config.summary or self.readme.summary

    @property
    def description(self) -> str | None:
        return self.config.description or self.readme.description

    @property
    def homepage(self) -> str | None:
        return self.readme.urls.get("home")

    @property
    def release_tag_prefix(self) -> str:
        return self.config.release_tag_prefix

    @property
    def docs_dir(self) -> Path:
        return self.root / DOCS_DIR

    @property
    def tests_dir(self) -> Path:
        return self.root / TESTS_DIR

    @property
    def pkg_dir(self) -> Path:
        return self.root / PKG_DIR

    @property
    def checksum_dir(self) -> Path:
        return self.root / CHECKSUM_DIR

    @property
    def package_basename(self) -> str:
        return f"{self.name}-{self.version}"

    @property
    def package_filename(self) -> str:
        return f"{self.package_basename}.tar.gz"

    @property
    def package_path(self) -> Path:
        return self.pkg_dir / self.package_filename

    @property
    def checksum_path(self) -> Path:
        return self.checksum_dir / f"{self.package_filename}.sha512"

    def runtime_dependencies(self) -> list[Dependency]:
        return [d for d in self.dependencies if d.is_runtime]

    def development_dependencies(self) -> list[Dependency]:
        return [d for d in self.dependencies if not d.is_runtime]

    def metadata_urls(self, console: ConsoleProtocol | None = None) -> dict[str, str]:
        return make_metadata_urls(self.name, self.readme.urls, console=console)


def validate_name(name: str) -> Result[str, ProjectError]:
    if not VALID_NAME_PATTERN.match(name):
        return Err(
            ProjectError(
                kind="invalid_name",
                message=f"invalid project name: {name!r}",
                hint="Set 'name' in dv.toml to a valid distribution name",
            )
        )
    return Ok(name)


def _candidate_version_files(root: Path, config: ProjectConfig, package: str) -> list[Path]:
    if config.version_file:
        return [root / config.version_file]
    return [
        root / package / "__init__.py",
        root / "src" / package / "__init__.py",
        root / f"{package}.py",
    ]


def read_version(root: Path, config: ProjectConfig, package: str) -> Result[str, ProjectError]:
    """Find the version string in the package's source.

    Looks for ``__version__ = "..."`` (or ``VERSION = ...``) in the
    configured version file, else the package's ``__init__.py``.
    """
    candidates = _candidate_version_files(root, config, package)
    for path in candidates:
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            continue
        m = VERSION_PATTERN.search(source)
        if m:
            return Ok(m.group("version"))
        return Err(
            ProjectError(
                kind="malformed",
                message=f"No version string found in {path.relative_to(root).as_posix()}",
                hint='Add a line like: __version__ = "0.1.0"',
            )
        )

    searched = ", ".join(p.relative_to(root).as_posix() for p in candidates)
    return Err(
        ProjectError(
            kind="malformed",
            message=f"Could not find a version file (searched: {searched})",
            hint="Set 'version_file' in dv.toml",
        )
    )


def split_authors(authors: tuple[str, ...], console: ConsoleProtocol | None = None) -> list[Author]:
    """Split ``Name <email>`` author strings; others are kept name-only."""
    out: list[Author] = []
    for author in authors:
        m = AUTHOR_PATTERN.match(author)
        if m:
            out.append(Author(name=m.group("name").strip(), email=m.group("email").strip()))
        else:
            if console is not None:
                console.warning(f"Couldn't extract author name + email from {author!r}")
            out.append(Author(name=author.strip()))
    return out


def make_metadata_urls(
    name: str,
    urls: dict[str, str],
    *,
    console: ConsoleProtocol | None = None,
) -> dict[str, str]:
    """Build the project URL table from the README's URL list."""
    metadata: dict[str, str] = {}
    if home := urls.get("home"):
        metadata["Homepage"] = home

    if docs := urls.get("docs"):
        metadata["Documentation"] = docs
        parts = urlsplit(docs)
        if parts.path.rstrip("/").endswith(f"/{name}"):
            path = parts.path.rstrip("/") + "/History_md.html"
            metadata["Changelog"] = urlunsplit(parts._replace(path=path))

    if code := urls.get("code"):
        metadata["Source"] = code
        parts = urlsplit(code)
        host = parts.hostname or ""
        tracker: str | None = None
        if host == "sr.ht" or host.endswith(".sr.ht"):
            tracker = urlunsplit(parts._replace(netloc="todo.sr.ht"))
        elif host == "gitlab.com" or host.endswith(".gitlab.com"):
            tracker = urlunsplit(parts._replace(path=parts.path.rstrip("/") + "/-/issues"))
        elif host == "github.com" or host.endswith(".github.com"):
            tracker = urlunsplit(parts._replace(path=parts.path.rstrip("/") + "/issues"))
        elif console is not None:
            console.trace(f"No idea what bug tracker URIs for {host} look like!")
        if tracker:
            metadata["Issues"] = tracker

    return metadata


def _named_file(
    files: ProjectFileSet,
    pattern: re.Pattern[str],
    default: str,
    root: Path,
    console: ConsoleProtocol,
    what: str,
) -> Path:
    match find_named_file(files, pattern):
        case Ok(found):
            return root / found
        case Err(error):
            console.warning(f"{error.message}; using {default} as the {what}")
            return root / default


def load_project(
    root: Path,
    config: ProjectConfig,
    console: ConsoleProtocol,
) -> Result[Project, ProjectError]:
    """Resolve the project at ``root``.

    Missing optional inputs (manifest, README, history, deps file) are
    replaced by defaults with a warning; a missing version string or an
    invalid name is an error.
    """
    name_result = validate_name(config.name or root.name)
    if isinstance(name_result, Err):
        return name_result
    name = name_result.value

    package = config.package or name.replace("-", "_").replace(".", "_").lower()

    version = read_version(root, config, package)
    if isinstance(version, Err):
        return version

    files = resolve(
        root / config.manifest_file,
        default_patterns(package),
        root=root,
        console=console,
    )

    readme_file = _named_file(files, README_PATTERN, DEFAULT_README, root, console, "README")
    history_file = _named_file(files, HISTORY_PATTERN, DEFAULT_HISTORY, root, console, "history file")

    deps = load_dependencies(root / DEPS_FILENAME)
    if isinstance(deps, Err):
        return deps
    if deps.value is None:
        console.warning(f"No {DEPS_FILENAME} found; assuming no dependencies")

    return Ok(
        Project(
            root=root,
            config=config,
            name=name,
            package=package,
            title=config.title or name.capitalize(),
            version=version.value,
            files=files,
            readme_file=readme_file,
            history_file=history_file,
            readme=read_readme(readme_file),
            dependencies=tuple(deps.value or ()),
        )
    )
