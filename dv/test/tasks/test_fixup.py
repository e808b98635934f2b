"""Tests for dv/tasks/fixup.py."""

from __future__ import annotations

import tomllib
from collections.abc import Callable
from pathlib import Path

from dv.core.deps import Dependency, parse_dependencies
from dv.core.errors import ErrorCode
from dv.core.result import Err, Ok
from dv.output.console import MockConsole
from dv.tasks.context import TaskContext
from dv.tasks.fixup import parse_requirements, render_deps_toml

type ContextFactory = Callable[..., TaskContext]


# =============================================================================
# Requirements conversion
# =============================================================================


def test_parse_requirements() -> None:
    text = """\
# runtime
requests>=2.0, <3  # http
-r other.txt
--index-url https://pypi.example.org/simple
rich
https://example.org/pkg.tar.gz
pytest >= 8 ; python_version > "3.8"
httpx[http2]==0.27
"""

    assert parse_requirements(text) == [
        ("requests", ">=2.0,<3"),
        ("rich", ""),
        ("pytest", ">=8"),
        ("httpx[http2]", "==0.27"),
    ]


def test_render_deps_toml_round_trips() -> None:
    text = render_deps_toml(
        [("requests", ">=2.0"), ("httpx[http2]", "==0.27"), ("rich", "")],
        [("pytest", ">=8")],
    )

    assert text == (
        "[dependencies]\n"
        'requests = ">=2.0"\n'
        '"httpx[http2]" = "==0.27"\n'
        'rich = "*"\n'
        "\n"
        "[groups.development]\n"
        'pytest = ">=8"\n'
    )
    assert parse_dependencies(tomllib.loads(text)) == [
        Dependency("requests", ">=2.0"),
        Dependency("httpx[http2]", "==0.27"),
        Dependency("rich", ""),
        Dependency("pytest", ">=8", kind="development"),
    ]


# =============================================================================
# Tasks
# =============================================================================


def test_legacy_deps_converted(project_root: Path, make_ctx: ContextFactory) -> None:
    (project_root / "deps.toml").unlink()
    (project_root / "requirements.txt").write_text("requests>=2.0\nrich\n", encoding="utf-8")
    (project_root / "requirements-dev.txt").write_text("pytest>=8\n", encoding="utf-8")
    ctx = make_ctx()

    assert ctx.invoke("fixup:legacy_deps") == Ok(None)

    deps = tomllib.loads((project_root / "deps.toml").read_text(encoding="utf-8"))
    assert deps == {
        "dependencies": {"requests": ">=2.0", "rich": "*"},
        "groups": {"development": {"pytest": ">=8"}},
    }
    assert not (project_root / "requirements.txt").exists()
    assert not (project_root / "requirements-dev.txt").exists()


def test_legacy_deps_with_existing_deps_file(project_root: Path, make_ctx: ContextFactory) -> None:
    before = (project_root / "deps.toml").read_text(encoding="utf-8")
    (project_root / "requirements.txt").write_text("requests\n", encoding="utf-8")
    ctx = make_ctx()

    assert ctx.invoke("fixup:legacy_deps") == Ok(None)

    assert (project_root / "deps.toml").read_text(encoding="utf-8") == before
    assert not (project_root / "requirements.txt").exists()


def test_legacy_deps_unreadable_requirements(project_root: Path, make_ctx: ContextFactory) -> None:
    (project_root / "deps.toml").unlink()
    (project_root / "requirements.txt").write_text("-e .\n", encoding="utf-8")
    ctx = make_ctx()

    result = ctx.invoke("fixup:legacy_deps")

    assert isinstance(result, Err)
    assert result.error.message == "Failed to read dependencies from requirements.txt!"
    assert result.error.code == ErrorCode.ENV_ERROR
    assert not (project_root / "deps.toml").exists()


def test_manifest_cruft_removed(project_root: Path, make_ctx: ContextFactory) -> None:
    manifest = project_root / "Manifest.txt"
    manifest.write_text("ChangeLog\nREADME.md\nfrob/__init__.py\n", encoding="utf-8")
    ctx = make_ctx()

    assert ctx.invoke("fixup:manifest") == Ok(None)

    assert manifest.read_text(encoding="utf-8") == "README.md\nfrob/__init__.py\n"


def test_pipenv_files_removed(project_root: Path, make_ctx: ContextFactory) -> None:
    (project_root / "Pipfile").write_text("[packages]\n", encoding="utf-8")
    ctx = make_ctx()

    assert ctx.invoke("fixup") == Ok(None)

    assert not (project_root / "Pipfile").exists()


def test_fixup_debug_lists_pending_fixups(project_root: Path, make_ctx: ContextFactory) -> None:
    (project_root / "Pipfile.lock").write_text("{}", encoding="utf-8")
    (project_root / "requirements.txt").write_text("rich\n", encoding="utf-8")
    console = MockConsole()
    ctx = make_ctx(console=console)

    assert ctx.invoke("fixup_debug") == Ok(None)

    assert console.find("[ ] Remove Pipenv files")
    assert console.find("[ ] Convert legacy requirements files to deps.toml")
    assert not console.find("Remove cruft")
