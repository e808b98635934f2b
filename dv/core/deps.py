"""Dependency declarations.

Dependencies are declared in ``deps.toml``:

    [dependencies]
    rich = ">=13"
    typer = { version = ">=0.12", source = "pypi" }

    [groups.development]
    pytest = ">=8"

Tables under ``[groups]`` named ``development`` or ``dev`` declare
development dependencies; any other group is runtime. Only the version
requirement is load-bearing; other keys are accepted and ignored.
"""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from dv.core.errors import ProjectError
from dv.core.result import Err, Ok, Result
from dv.core.structured import StrDict, as_str_dict, get_str, get_table

__all__ = ["DEPS_FILENAME", "Dependency", "DependencyKind", "load_dependencies", "parse_dependencies"]

DEPS_FILENAME = "deps.toml"

DependencyKind = Literal["runtime", "development"]

_DEVELOPMENT_GROUPS = frozenset({"development", "dev"})
_NAME_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?(?:\[[\w,.\s-]+\])?$")


@dataclass(frozen=True, slots=True, order=True)
class Dependency:
    """A declared dependency on another distribution."""

    name: str
    requirement: str = ""
    kind: DependencyKind = "runtime"

    @property
    def is_runtime(self) -> bool:
        return self.kind == "runtime"

    def as_requirement(self) -> str:
        """PEP 508 form, e.g. ``rich>=13``."""
        return f"{self.name}{self.requirement}"


def _requirement(name: str, value: object) -> str:
    if isinstance(value, str):
        return value.strip().removeprefix("*")
    table = as_str_dict(value)
    if table is not None:
        return (get_str(table, "version") or "").removeprefix("*")
    raise TypeError(f"dependency '{name}' must be a requirement string or a table")


def _collect(table: StrDict, kind: DependencyKind) -> list[Dependency]:
    deps: list[Dependency] = []
    for name, value in table.items():
        if not _NAME_RE.match(name):
            raise ValueError(f"invalid dependency name: {name!r}")
        deps.append(Dependency(name=name, requirement=_requirement(name, value), kind=kind))
    return deps


def parse_dependencies(data: StrDict) -> list[Dependency]:
    """Build dependencies from a parsed deps table.

    Raises:
        TypeError, ValueError: On malformed declarations.
    """
    deps = _collect(get_table(data, "dependencies") or {}, "runtime")

    groups = get_table(data, "groups") or {}
    for group_name, group_value in groups.items():
        group = as_str_dict(group_value)
        if group is None:
            raise TypeError(f"group '{group_name}' must be a table")
        kind: DependencyKind = (
            "development" if group_name.lower() in _DEVELOPMENT_GROUPS else "runtime"
        )
        deps.extend(_collect(group, kind))

    # A dependency declared in several places is kept once, first declaration wins.
    unique: dict[str, Dependency] = {}
    for dep in deps:
        unique.setdefault(dep.name.lower(), dep)
    return list(unique.values())


def load_dependencies(path: Path) -> Result[list[Dependency] | None, ProjectError]:
    """Load dependencies from ``path``.

    Returns Ok(None) when the file does not exist, so the caller can warn
    and carry on with no dependencies.
    """
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return Ok(None)
    except OSError as e:
        return Err(ProjectError(kind="io", message=f"Error reading {path.name}: {e}"))

    try:
        data = as_str_dict(tomllib.loads(raw.decode("utf-8"))) or {}
        return Ok(parse_dependencies(data))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        return Err(ProjectError(kind="malformed", message=f"Invalid {path.name}: {e}"))
    except (TypeError, ValueError) as e:
        return Err(
            ProjectError(
                kind="malformed",
                message=f"Invalid dependency declaration in {path.name}: {e}",
            )
        )
