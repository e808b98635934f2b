"""Interactive operator input.

Destructive or outward-facing task steps (deleting untracked files,
pushing, overwriting the history file) ask the operator first. Like the
console, prompting is a protocol so task bodies can be driven by a
``ScriptedPrompt`` in tests.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

__all__ = ["PromptProtocol", "TerminalPrompt", "ScriptedPrompt"]


class PromptProtocol(Protocol):
    def yes(self, question: str, *, default: bool = True) -> bool:
        """Ask a yes/no question."""
        ...

    def select(self, question: str, choices: Sequence[str], *, default: str) -> str:
        """Ask the operator to pick one of ``choices``."""
        ...

    def edit(self, path: Path) -> None:
        """Open ``path`` in the operator's editor and wait for it to exit."""
        ...


class TerminalPrompt:
    """Prompt implementation backed by typer and Rich."""

    def yes(self, question: str, *, default: bool = True) -> bool:
        import typer

        return typer.confirm(question, default=default)

    def select(self, question: str, choices: Sequence[str], *, default: str) -> str:
        from rich.prompt import Prompt

        return Prompt.ask(question, choices=list(choices), default=default)

    def edit(self, path: Path) -> None:
        import typer

        typer.edit(filename=str(path))


def _empty_answers() -> list[bool | str]:
    return []


def _empty_questions() -> list[str]:
    return []


@dataclass
class ScriptedPrompt:
    """Prompt that replays canned answers, for tests.

    ``answers`` are consumed in order; when they run out, ``yes`` returns
    its default and ``select`` returns its default choice. ``editor`` is
    called with the path instead of launching an editor.
    """

    answers: list[bool | str] = field(default_factory=_empty_answers)
    editor: Callable[[Path], None] | None = None
    asked: list[str] = field(default_factory=_empty_questions)

    def yes(self, question: str, *, default: bool = True) -> bool:
        self.asked.append(question)
        if not self.answers:
            return default
        answer = self.answers.pop(0)
        if not isinstance(answer, bool):
            raise AssertionError(f"expected a yes/no answer for {question!r}, got {answer!r}")
        return answer

    def select(self, question: str, choices: Sequence[str], *, default: str) -> str:
        self.asked.append(question)
        if not self.answers:
            return default
        answer = self.answers.pop(0)
        if not isinstance(answer, str) or answer not in choices:
            raise AssertionError(f"expected one of {list(choices)} for {question!r}, got {answer!r}")
        return answer

    def edit(self, path: Path) -> None:
        if self.editor is not None:
            self.editor(path)
