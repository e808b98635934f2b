"""Tests for dv/tasks/generate.py."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import jinja2
import pytest

from dv.core.config import ProjectConfig
from dv.core.errors import ErrorCode
from dv.core.readme import parse_readme
from dv.core.result import Err, Ok
from dv.output.console import MockConsole
from dv.tasks.context import TaskContext

type ContextFactory = Callable[..., TaskContext]


def test_generate_readme(project_root: Path, make_ctx: ContextFactory) -> None:
    (project_root / "README.md").unlink()
    ctx = make_ctx(config=ProjectConfig(python_version="3.12"))

    assert ctx.invoke("README.md") == Ok(None)

    text = (project_root / "README.md").read_text(encoding="utf-8")
    assert text.startswith("# Frob\n")
    assert text.endswith("\n")
    assert "* Python 3.12" in text
    assert "$ pip install frob" in text
    info = parse_readme(text)
    assert info.title == "Frob"
    assert info.urls["home"] == "https://example.org/frob"
    assert info.description == "Describe what Frob does here."


def test_generate_history(project_root: Path, make_ctx: ContextFactory) -> None:
    (project_root / "History.md").unlink()
    ctx = make_ctx()

    assert ctx.invoke("History.md") == Ok(None)

    assert (project_root / "History.md").read_text(encoding="utf-8") == "# Release History for frob\n\n---\n"


def test_generate_manifest(project_root: Path, make_ctx: ContextFactory) -> None:
    (project_root / "Manifest.txt").unlink()
    ctx = make_ctx()

    assert ctx.invoke("Manifest.txt") == Ok(None)

    assert (project_root / "Manifest.txt").read_text(encoding="utf-8").splitlines() == [
        "History.md",
        "README.md",
        "frob/__init__.py",
        "tests/test_frob.py",
        "Manifest.txt",
    ]


def test_generate_python_version(project_root: Path, make_ctx: ContextFactory) -> None:
    ctx = make_ctx(config=ProjectConfig(python_version="3.13"))

    assert ctx.invoke(".python-version") == Ok(None)

    assert (project_root / ".python-version").read_text(encoding="utf-8") == "3.13\n"


def test_generate_fills_in_missing_files(project_root: Path, make_ctx: ContextFactory) -> None:
    readme_before = (project_root / "README.md").read_text(encoding="utf-8")
    (project_root / "History.md").unlink()
    console = MockConsole()
    ctx = make_ctx(console=console, config=ProjectConfig(python_version="3.12"))

    assert ctx.invoke("generate") == Ok(None)

    assert (project_root / "README.md").read_text(encoding="utf-8") == readme_before
    assert (project_root / "History.md").read_text(encoding="utf-8") == "# Release History for frob\n\n---\n"
    assert (project_root / ".python-version").read_text(encoding="utf-8") == "3.12\n"
    assert console.find("Generating History.md...")
    assert not console.find("Generating README.md...")
    assert not console.has_error()


def test_generate_rdoc_readme(project_root: Path, make_ctx: ContextFactory) -> None:
    (project_root / "README.md").unlink()
    manifest = project_root / "Manifest.txt"
    manifest.write_text(manifest.read_text(encoding="utf-8").replace("README.md", "README.rdoc"), encoding="utf-8")
    ctx = make_ctx()

    assert ctx.invoke("README.rdoc") == Ok(None)

    text = (project_root / "README.rdoc").read_text(encoding="utf-8")
    assert text.startswith("= Frob\n")
    info = parse_readme(text)
    assert info.title == "Frob"
    assert info.urls["home"] == "https://example.org/frob"


def test_missing_template_fails_the_task(
    project_root: Path,
    make_ctx: ContextFactory,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def fake_render_template(template: str, /, **context: object) -> str:
        raise jinja2.TemplateNotFound(template)

    monkeypatch.setattr("dv.tasks.generate.render_template", fake_render_template)
    (project_root / "README.md").unlink()
    ctx = make_ctx()

    result = ctx.invoke("README.md")

    assert isinstance(result, Err)
    assert result.error.message == "No template for README.md: README.md.j2"
    assert result.error.code == ErrorCode.ENV_ERROR
    assert not (project_root / "README.md").exists()
