"""Fixtures for task tests: a small project on disk and a fake git."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path

import pytest

from dv.core.config import ProjectConfig
from dv.core.project import load_project
from dv.core.result import Err, Ok, Result
from dv.git.repository import GitError, GitStatus, LogEntry, Repository
from dv.output.console import MockConsole
from dv.output.prompt import ScriptedPrompt
from dv.tasks import providers
from dv.tasks.context import TaskContext
from dv.tasks.registry import TaskRegistry

NOW = datetime(2026, 10, 19, 12, 0, 0)

HISTORY = """\
# Release History for frob

---

## v1.1.0 [2026-03-02] Jane Doe <jane@example.com>

- Add frobbing.
"""

README = """\
# Frob

home
: https://example.org/frob

code
: https://github.com/example/frob

## Description

Frob frobs things. Very well.

## Authors

- Jane Doe <jane@example.com>
"""


class FakeRepository(Repository):
    """Repository that answers from canned state and records mutations."""

    def __init__(
        self,
        path: Path,
        *,
        status: GitStatus | None = None,
        tags: Sequence[str] = (),
        log: Sequence[LogEntry] = (),
        remote: str | None = "git@example.org:frob.git",
        upstream: bool = True,
        diff: str = "",
    ) -> None:
        super().__init__(path)
        self.status_value = status or GitStatus(branch="main", upstream="origin/main")
        self.tag_list = list(tags)
        self.log_entries = list(log)
        self.remote = remote
        self.upstream = upstream
        self.diff_text = diff
        self.calls: list[tuple[str, ...]] = []

    def exists(self) -> bool:
        return True

    def status(self) -> Result[GitStatus, GitError]:
        return Ok(self.status_value)

    def tags(self) -> Result[list[str], GitError]:
        return Ok(list(self.tag_list))

    def tag(
        self, name: str, *, rev: str | None = None, sign: bool = False, message: str | None = None
    ) -> Result[str, GitError]:
        self.calls.append(("tag", name, rev or "", "signed" if sign else "plain"))
        self.tag_list.insert(0, name)
        return Ok("")

    def log(self, since: str | None = None) -> Result[list[LogEntry], GitError]:
        self.calls.append(("log", since or ""))
        return Ok(list(self.log_entries))

    def diff(self) -> Result[str, GitError]:
        return Ok(self.diff_text)

    def add(self, paths: Sequence[str]) -> Result[str, GitError]:
        self.calls.append(("add", *paths))
        return Ok("")

    def remove(self, paths: Sequence[str], *, force: bool = False) -> Result[str, GitError]:
        self.calls.append(("rm", *paths))
        for p in paths:
            (self.path / p).unlink(missing_ok=True)
        return Ok("")

    def commit(
        self,
        *,
        message_file: Path | None = None,
        message: str | None = None,
        paths: Sequence[str] = (),
    ) -> Result[str, GitError]:
        text = message_file.read_text(encoding="utf-8") if message_file else message or ""
        self.calls.append(("commit", text, *paths))
        return Ok("")

    def fetch(self, remote: str = "origin", *, prune: bool = True) -> Result[str, GitError]:
        self.calls.append(("fetch", remote))
        return Ok("")

    def pull(self, remote: str = "origin", branch: str | None = None) -> Result[str, GitError]:
        self.calls.append(("pull", remote, branch or ""))
        return Ok("")

    def push(
        self,
        remote: str = "origin",
        branch: str | None = None,
        *,
        set_upstream: bool = False,
        tags: bool = True,
    ) -> Result[str, GitError]:
        self.calls.append(("push", remote, branch or "", "set-upstream" if set_upstream else ""))
        return Ok("")

    def head_rev(self) -> Result[str, GitError]:
        return Ok("abc1234")

    def remote_url(self, remote: str = "origin") -> str | None:
        return self.remote

    def current_branch(self) -> str | None:
        return "main"

    def has_upstream(self) -> bool:
        return self.upstream


def _write(root: Path, rel: str, text: str = "") -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """A releasable project named frob at version 1.2.0."""
    root = tmp_path / "frob"
    _write(root, "frob/__init__.py", '"""Frob."""\n\n__version__ = "1.2.0"\n')
    _write(root, "README.md", README)
    _write(root, "History.md", HISTORY)
    _write(root, "tests/test_frob.py", "def test_frob():\n    pass\n")
    _write(root, "deps.toml", '[dependencies]\nrich = ">=13"\n')
    _write(
        root,
        "Manifest.txt",
        "History.md\nManifest.txt\nREADME.md\ndeps.toml\nfrob/__init__.py\ntests/test_frob.py\n",
    )
    return root


type ContextFactory = Callable[..., TaskContext]


@pytest.fixture
def make_ctx(project_root: Path) -> ContextFactory:
    """Build a TaskContext for ``project_root`` with every provider's tasks defined.

    Keyword arguments: ``console``, ``prompt``, ``repo`` and ``config``.
    """

    def factory(
        *,
        console: MockConsole | None = None,
        prompt: ScriptedPrompt | None = None,
        repo: Repository | None = None,
        config: ProjectConfig | None = None,
    ) -> TaskContext:
        console = console if console is not None else MockConsole()
        loaded = load_project(project_root, providers.configure(config or ProjectConfig()), console)
        if isinstance(loaded, Err):
            raise AssertionError(loaded.error.message)

        registry = TaskRegistry()
        ctx = TaskContext(
            project=loaded.value,
            console=console,
            prompt=prompt if prompt is not None else ScriptedPrompt(),
            registry=registry,
            repo=repo,
            now=lambda: NOW,
        )
        providers.define_tasks(registry, ctx)
        return ctx

    return factory


@pytest.fixture
def fake_repo(project_root: Path) -> Callable[..., FakeRepository]:
    """Build a FakeRepository for ``project_root``; keyword arguments set its state."""

    def factory(**state: object) -> FakeRepository:
        return FakeRepository(project_root, **state)  # type: ignore[arg-type]

    return factory
