"""Git repository abstraction.

This is the VCS collaborator the release tasks talk to. It covers only the
commands the tasks need: status, tags, log, tag, add, commit, pull, push.
All operations return Result types.

Usage:
    repo = Repository(Path("/path/to/project"))

    match repo.tags():
        case Ok(tags):
            print(", ".join(tags))
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from dv.core.result import Err, Ok, Result
from dv.platform.process import ProcessError
from dv.platform.process import run as run_process

__all__ = [
    "GitError",
    "GitStatus",
    "LogEntry",
    "Repository",
    "StatusEntry",
]

_LOG_SEPARATOR = "\x1f"


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry in git status.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"

    @property
    def code(self) -> str:
        """The more significant of the two status characters."""
        if self.is_untracked:
            return "?"
        return self.xy[0] if self.xy[0] != " " else self.xy[1]

    @property
    def description(self) -> str:
        return _STATUS_DESCRIPTIONS.get(self.code, "changed")


_STATUS_DESCRIPTIONS = {
    "M": "modified",
    "A": "added",
    "D": "removed",
    "R": "renamed",
    "C": "copied",
    "U": "unmerged",
    "?": "not tracked",
    "!": "ignored",
}


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed git status.

    Attributes:
        branch: Current branch name
        upstream: Upstream branch (e.g., "origin/main"), None if not set
        entries: All status entries (staged, unstaged, untracked)
    """

    branch: str
    upstream: str | None = None
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        return len(self.entries) == 0

    @property
    def changed(self) -> list[StatusEntry]:
        """Tracked files with staged or unstaged changes."""
        return [e for e in self.entries if not e.is_untracked]

    @property
    def untracked(self) -> list[StatusEntry]:
        return [e for e in self.entries if e.is_untracked]


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One commit from ``git log``."""

    rev: str
    author: str
    message: str


class Repository:
    """Git repository abstraction.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check if this looks like a git working copy."""
        return (self.path / ".git").exists()

    def status(self) -> Result[GitStatus, GitError]:
        """Get repository status (``git status --porcelain=v1 -b``)."""
        result = self._run(["status", "--porcelain=v1", "-b"])
        match result:
            case Err(e):
                return Err(_git_error("status", e))
            case Ok(stdout):
                return Ok(self._parse_status(stdout))

    def current_branch(self) -> str | None:
        """Get current branch name; None if detached HEAD or error."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def has_upstream(self) -> bool:
        """Check if current branch has an upstream configured."""
        result = self._run(["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}"])
        return isinstance(result, Ok)

    def head_rev(self) -> Result[str, GitError]:
        """Abbreviated id of the working copy's HEAD commit."""
        return self._simple("rev-parse", ["rev-parse", "--short", "HEAD"])

    def remote_url(self, remote: str = "origin") -> str | None:
        """URL of ``remote``, or None if there is no such remote."""
        result = self._run(["remote", "get-url", remote])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def tags(self) -> Result[list[str], GitError]:
        """All tag names, newest version first."""
        result = self._run(["tag", "--list", "--sort=-version:refname"])
        match result:
            case Err(e):
                return Err(_git_error("tag --list", e))
            case Ok(stdout):
                return Ok([line.strip() for line in stdout.splitlines() if line.strip()])

    def tag(self, name: str, *, rev: str | None = None, sign: bool = False, message: str | None = None) -> Result[str, GitError]:
        """Create tag ``name`` at ``rev`` (HEAD by default).

        Signed tags are annotated, so they always carry a message.
        """
        args = ["tag"]
        if sign:
            args += ["-s", "-m", message or f"Signing {name}"]
        elif message:
            args += ["-a", "-m", message]
        args.append(name)
        if rev:
            args.append(rev)
        return self._simple("tag", args)

    def log(self, since: str | None = None) -> Result[list[LogEntry], GitError]:
        """Commits reachable from HEAD, newest first.

        Args:
            since: Only commits after this tag/rev (``since..HEAD``); the
                full history when None.
        """
        fmt = _LOG_SEPARATOR.join(["%h", "%an", "%s"])
        args = ["log", f"--format={fmt}"]
        if since:
            args.append(f"{since}..HEAD")
        result = self._run(args)
        match result:
            case Err(e):
                return Err(_git_error("log", e))
            case Ok(stdout):
                entries: list[LogEntry] = []
                for line in stdout.splitlines():
                    parts = line.split(_LOG_SEPARATOR, 2)
                    if len(parts) == 3:
                        entries.append(LogEntry(rev=parts[0], author=parts[1], message=parts[2]))
                return Ok(entries)

    def diff(self) -> Result[str, GitError]:
        result = self._run(["diff", "HEAD"])
        match result:
            case Err(e):
                return Err(_git_error("diff", e))
            case Ok(stdout):
                return Ok(stdout)

    def add(self, paths: Sequence[str]) -> Result[str, GitError]:
        return self._simple("add", ["add", "--", *paths])

    def remove(self, paths: Sequence[str], *, force: bool = False) -> Result[str, GitError]:
        args = ["rm", "-q"]
        if force:
            args.append("-f")
        return self._simple("rm", [*args, "--", *paths])

    def commit(
        self,
        *,
        message_file: Path | None = None,
        message: str | None = None,
        paths: Sequence[str] = (),
    ) -> Result[str, GitError]:
        """Commit with the message read from ``message_file``, or ``message``.

        Comment lines in the message file are stripped. With ``paths`` only
        those files are committed; otherwise all tracked changes (``-a``).
        """
        if message_file is not None:
            args = ["commit", "--cleanup=strip", "-F", str(message_file)]
        else:
            args = ["commit", "-m", message or ""]
        if paths:
            args += ["--", *paths]
        else:
            args.insert(1, "-a")
        return self._simple("commit", args)

    def fetch(self, remote: str = "origin", *, prune: bool = True) -> Result[str, GitError]:
        args = ["fetch", remote]
        if prune:
            args.append("--prune")
        return self._simple("fetch", args)

    def pull(self, remote: str = "origin", branch: str | None = None) -> Result[str, GitError]:
        """Pull with fast-forward only."""
        args = ["pull", "--ff-only", remote]
        if branch:
            args.append(branch)
        return self._simple("pull --ff-only", args)

    def push(
        self,
        remote: str = "origin",
        branch: str | None = None,
        *,
        set_upstream: bool = False,
        tags: bool = True,
    ) -> Result[str, GitError]:
        args = ["push"]
        if set_upstream:
            args.append("--set-upstream")
        if tags:
            args.append("--follow-tags")
        args.append(remote)
        if branch:
            args.append(branch)
        return self._simple("push", args)

    def _simple(self, command: str, args: list[str]) -> Result[str, GitError]:
        result = self._run(args)
        match result:
            case Err(e):
                return Err(_git_error(command, e))
            case Ok(stdout):
                return Ok(stdout.strip())

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path)

    def _parse_status(self, output: str) -> GitStatus:
        """Parse git status --porcelain=v1 -b output."""
        lines = [ln for ln in output.splitlines() if ln.strip()]

        if not lines:
            return GitStatus(branch="")

        branch, upstream = self._parse_branch_line(lines[0])

        entries: list[StatusEntry] = []
        for line in lines[1:]:
            entry = self._parse_entry(line)
            if entry:
                entries.append(entry)

        return GitStatus(branch=branch, upstream=upstream, entries=tuple(entries))

    def _parse_branch_line(self, line: str) -> tuple[str, str | None]:
        """Parse branch line: ## branch...upstream [info]"""
        s = line.strip()
        if s.startswith("##"):
            s = s[2:].lstrip()

        s = s.split(" [", 1)[0].strip()

        if "..." in s:
            left, right = s.split("...", 1)
            return (left.strip(), right.strip())

        return (s, None)

    def _parse_entry(self, line: str) -> StatusEntry | None:
        if len(line) < 4:
            return None

        if line.startswith("?? "):
            return StatusEntry(xy="??", path=_unquote(line[3:]))

        path = line[3:]
        # Renames are reported as "old -> new"; the new path is what matters.
        if " -> " in path:
            path = path.split(" -> ", 1)[1]
        return StatusEntry(xy=line[:2], path=_unquote(path))


def _unquote(path: str) -> str:
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
        return re.sub(r'\\(["\\])', r"\1", path[1:-1])
    return path


def _git_error(command: str, e: ProcessError) -> GitError:
    return GitError(
        command=command,
        message=e.stderr.strip() or e.stdout.strip() or f"git {command} failed",
        returncode=e.returncode,
    )
