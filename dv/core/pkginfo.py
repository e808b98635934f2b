"""Core metadata (``PKG-INFO``) for the project.

The file uses the core metadata format: ``Key: value`` header lines,
a blank line, then the long description (the README).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dv.core.project import Project, split_authors

if TYPE_CHECKING:
    from dv.output.console import ConsoleProtocol

__all__ = ["METADATA_VERSION", "PKGINFO_FILENAME", "make_pkginfo"]

METADATA_VERSION = "2.1"
PKGINFO_FILENAME = "PKG-INFO"
DEV_EXTRA = "dev"

_CONTENT_TYPES = {
    ".md": "text/markdown",
    ".rst": "text/x-rst",
}


def _one_line(value: str) -> str:
    return " ".join(value.split())


def make_pkginfo(
    project: Project,
    *,
    version: str | None = None,
    console: ConsoleProtocol | None = None,
) -> str:
    """Render ``PKG-INFO`` for ``project``.

    Args:
        project: The loaded project
        version: Version to record instead of the project's own (used for
            pre-release metadata)
        console: Receives warnings about authors that cannot be split into
            name and email
    """
    headers: list[tuple[str, str]] = [
        ("Metadata-Version", METADATA_VERSION),
        ("Name", project.name),
        ("Version", version or project.version),
    ]

    if project.summary:
        headers.append(("Summary", _one_line(project.summary)))

    authors = split_authors(project.authors, console)
    with_email = [a for a in authors if a.email]
    name_only = [a for a in authors if not a.email]
    if name_only:
        headers.append(("Author", ", ".join(a.name for a in name_only)))
    if with_email:
        headers.append(("Author-email", ", ".join(f"{a.name} <{a.email}>" for a in with_email)))

    if project.config.licenses:
        headers.append(("License", ", ".join(project.config.licenses)))

    for label, url in project.metadata_urls(console).items():
        headers.append(("Project-URL", f"{label}, {url}"))

    for dep in project.runtime_dependencies():
        headers.append(("Requires-Dist", dep.as_requirement()))

    dev = project.development_dependencies()
    if dev:
        headers.append(("Provides-Extra", DEV_EXTRA))
        for dep in dev:
            headers.append(("Requires-Dist", f'{dep.as_requirement()}; extra == "{DEV_EXTRA}"'))

    content_type = _CONTENT_TYPES.get(project.readme_file.suffix.lower(), "text/plain")
    headers.append(("Description-Content-Type", content_type))

    try:
        body = project.readme_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        body = project.description or ""

    head = "".join(f"{key}: {value}\n" for key, value in headers)
    return f"{head}\n{body}"
