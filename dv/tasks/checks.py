"""Source quality and sanity checks.

The quality checks look for whitespace problems in the project's source
files (trailing whitespace, spaces followed by tabs in indentation) and
report each offending run of consecutive lines once:

    frob/core.py:12-14
    12: def frob():⇥
    ...

Files listed in ``quality_check_whitelist`` are skipped. The sanity
checks are an empty hook other providers may add prerequisites to.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from dv.core.errors import ErrorCode
from dv.core.result import Err, Ok
from dv.output.console import Style
from dv.tasks.base import Provider
from dv.tasks.context import TaskContext
from dv.tasks.registry import TaskFailure, TaskRegistry, TaskResult

__all__ = [
    "MIXED_INDENT_RE",
    "PROVIDER",
    "TRAILING_WHITESPACE_RE",
    "LineGroup",
    "LineMatch",
    "find_matching_source_lines",
    "group_line_matches",
]

TRAILING_WHITESPACE_RE = re.compile(r"[ \t]+$")
MIXED_INDENT_RE = re.compile(r"(?<!#)( \t)")
SOURCE_FILE_RE = re.compile(r"\.(?:py|pyi|c|h)$")

TAB_ARROW = "⇥"


@dataclass(frozen=True, slots=True)
class LineMatch:
    filename: str
    lineno: int
    line: str


@dataclass(frozen=True, slots=True)
class LineGroup:
    """A run of consecutive matching lines in one file."""

    first: int
    last: int
    lines: tuple[str, ...]

    @property
    def label(self) -> str:
        return str(self.first) if self.first == self.last else f"{self.first}-{self.last}"


def _define_tasks(registry: TaskRegistry, ctx: TaskContext) -> None:
    registry.define(
        "quality_checks:for_trailing_whitespace",
        action=_checker("Found some trailing whitespace", TRAILING_WHITESPACE_RE),
        description="Check source code for trailing whitespace",
    )
    registry.define(
        "quality_checks:for_mixed_indentation",
        action=_checker("Found mixed indentation", MIXED_INDENT_RE),
        description="Check source code for mixed indentation",
    )
    registry.define(
        "quality_checks:whitespace",
        deps=["quality_checks:for_trailing_whitespace", "quality_checks:for_mixed_indentation"],
        description="Check source code for inconsistent whitespace",
    )
    registry.define("quality_checks:all", deps=["quality_checks:whitespace"])
    registry.define(
        "quality_checks",
        deps=["quality_checks:all"],
        description="Run several quality-checks on the code",
    )

    registry.define("sanity_checks:all", description="Check source code for common problems")
    registry.define(
        "sanity_checks",
        deps=["sanity_checks:all"],
        description="Run several sanity-checks on the code",
    )

    registry.define(
        "check",
        deps=["quality_checks", "sanity_checks"],
        description="Run the quality and sanity checks",
    )


def find_matching_source_lines(
    ctx: TaskContext,
    predicate: Callable[[str], bool],
) -> list[LineMatch]:
    """Lines of the project's source files for which ``predicate`` is true.

    Files that cannot be read are skipped with a trace message.
    """
    project = ctx.project
    whitelist = set(project.config.quality_check_whitelist)
    matches: list[LineMatch] = []

    for filename in project.files.grep(SOURCE_FILE_RE):
        if filename in whitelist:
            continue
        try:
            text = (project.root / filename).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            ctx.console.trace(f"Skipping {filename}: {e}")
            continue
        for i, line in enumerate(text.splitlines(), start=1):
            if predicate(line):
                matches.append(LineMatch(filename, i, line))

    return matches


def group_line_matches(matches: Sequence[LineMatch]) -> dict[str, list[LineGroup]]:
    """Group matches by file, then into runs of consecutive line numbers."""
    grouped: dict[str, list[LineGroup]] = {}
    by_file: dict[str, list[LineMatch]] = {}
    for m in matches:
        by_file.setdefault(m.filename, []).append(m)

    for filename, file_matches in by_file.items():
        groups: list[LineGroup] = []
        run: list[LineMatch] = []
        for m in file_matches:
            if run and m.lineno > run[-1].lineno + 1:
                groups.append(_group(run))
                run = []
            run.append(m)
        if run:
            groups.append(_group(run))
        grouped[filename] = groups

    return grouped


def _group(run: list[LineMatch]) -> LineGroup:
    return LineGroup(first=run[0].lineno, last=run[-1].lineno, lines=tuple(m.line for m in run))


def _checker(description: str, pattern: re.Pattern[str]) -> Callable[[TaskContext], TaskResult]:
    def action(ctx: TaskContext) -> TaskResult:
        matches = find_matching_source_lines(ctx, lambda line: pattern.search(line) is not None)
        if not matches:
            return Ok(None)
        _describe_lines_that_need_fixing(ctx, description, matches)
        return Err(TaskFailure(message=description, code=ErrorCode.BUILD_ERROR))

    return action


def _describe_lines_that_need_fixing(ctx: TaskContext, description: str, matches: Sequence[LineMatch]) -> None:
    console = ctx.console
    console.newline()
    console.error(f"Uh-oh! {description}")

    for filename, groups in group_line_matches(matches).items():
        for group in groups:
            console.print(f"{filename}:{group.label}", Style.BOLD)
            for lineno, line in zip(range(group.first, group.last + 1), group.lines):
                console.print(f"{lineno}: {_show_invisibles(line)}")
            console.newline()


def _show_invisibles(line: str) -> str:
    m = TRAILING_WHITESPACE_RE.search(line)
    if m:
        line = line[: m.start()] + m.group(0).replace(" ", "·")
    return line.replace("\t", f"{TAB_ARROW}   ")


PROVIDER = Provider(name="checks", define_tasks=_define_tasks)
