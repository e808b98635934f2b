"""Per-invocation state shared by task bodies."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from dv.core.config import ProjectConfig
from dv.core.project import Project
from dv.git.repository import Repository
from dv.output.console import ConsoleProtocol
from dv.output.prompt import PromptProtocol
from dv.tasks.registry import TaskRegistry, TaskResult

__all__ = ["TaskContext"]


@dataclass
class TaskContext:
    """Everything a task body may touch.

    Attributes:
        project: The loaded project
        console: Output channel
        prompt: Operator input
        registry: Tasks defined for this run, for actions that chain to
            another task
        repo: Git working copy; created on first use when not given
        now: Clock, replaceable in tests
    """

    project: Project
    console: ConsoleProtocol
    prompt: PromptProtocol
    registry: TaskRegistry = field(default_factory=TaskRegistry)
    repo: Repository | None = None
    now: Callable[[], datetime] = datetime.now

    @property
    def config(self) -> ProjectConfig:
        return self.project.config

    @property
    def git(self) -> Repository:
        if self.repo is None:
            self.repo = Repository(self.project.root)
        return self.repo

    def invoke(self, name: str) -> TaskResult:
        """Run another task (and its prerequisites) unless it already ran."""
        return self.registry.invoke([name], self)
