"""Named tasks with prerequisites.

Providers register tasks here at startup; the CLI then invokes the ones
the operator asked for. A task name may be defined several times: later
definitions add prerequisites and actions to the existing task, which is
how providers hook into generic tasks like ``debug`` or ``prerelease``.

Usage:
    registry = TaskRegistry()
    registry.define("test", action=run_tests, description="Run the tests")
    registry.define("default", deps=["test"])

    match registry.invoke(["default"], ctx):
        case Ok(_):
            ...
        case Err(failure):
            console.error(failure.message)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from dv.core.errors import ErrorCode
from dv.core.result import Err, Ok, Result

if TYPE_CHECKING:
    from dv.tasks.context import TaskContext

__all__ = [
    "Action",
    "Task",
    "TaskFailure",
    "TaskRegistry",
    "TaskResult",
    "failure",
]


@dataclass(frozen=True, slots=True)
class TaskFailure:
    """Why a task stopped the run.

    Attributes:
        message: What went wrong
        hint: Optional suggestion for the operator
        code: Process exit code to report
    """

    message: str
    hint: str | None = None
    code: ErrorCode = ErrorCode.BUILD_ERROR


type TaskResult = Result[None, TaskFailure]
type Action = Callable[[TaskContext], TaskResult]


# Error kinds from the project/release/config layers and the exit code each maps to.
_KIND_CODES: dict[str, ErrorCode] = {
    "declined": ErrorCode.USER_ERROR,
    "invalid_input": ErrorCode.USER_ERROR,
    "invalid_name": ErrorCode.ENV_ERROR,
    "malformed": ErrorCode.ENV_ERROR,
    "config": ErrorCode.ENV_ERROR,
    "io": ErrorCode.IO_ERROR,
}


def failure(error: object, *, code: ErrorCode | None = None) -> Err[TaskFailure]:
    """Wrap an error record from any layer as a task failure.

    Expects error objects to have a ``message`` and optionally ``hint`` and
    ``kind`` attributes; the kind picks the exit code unless ``code`` is
    given.
    """
    message: str = getattr(error, "message", str(error))
    hint: str | None = getattr(error, "hint", None)
    if code is None:
        kind = getattr(error, "kind", None)
        code = _KIND_CODES.get(kind, ErrorCode.BUILD_ERROR) if isinstance(kind, str) else ErrorCode.BUILD_ERROR
    return Err(TaskFailure(message=message, hint=hint, code=code))


def _empty_names() -> list[str]:
    return []


def _empty_actions() -> list[Action]:
    return []


@dataclass
class Task:
    name: str
    description: str | None = None
    prerequisites: list[str] = field(default_factory=_empty_names)
    actions: list[Action] = field(default_factory=_empty_actions)


class TaskRegistry:
    """The set of tasks known to one ``dv`` invocation.

    Each task runs at most once per registry, however many tasks depend
    on it.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._done: set[str] = set()

    def define(
        self,
        name: str,
        *,
        deps: Sequence[str] = (),
        action: Action | None = None,
        description: str | None = None,
    ) -> Task:
        """Define ``name``, or extend it if it already exists."""
        task = self._tasks.get(name)
        if task is None:
            task = Task(name=name)
            self._tasks[name] = task

        for dep in deps:
            if dep not in task.prerequisites:
                task.prerequisites.append(dep)
        if action is not None:
            task.actions.append(action)
        if description:
            task.description = description
        return task

    def get(self, name: str) -> Task | None:
        return self._tasks.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks.values())

    def described(self) -> list[Task]:
        """Tasks with a description, sorted by name."""
        return sorted((t for t in self._tasks.values() if t.description), key=lambda t: t.name)

    def invoke(self, names: Iterable[str], ctx: TaskContext) -> TaskResult:
        """Run each named task after its prerequisites.

        Stops at the first failure. Tasks already run by this registry are
        skipped.
        """
        for name in names:
            result = self._invoke(name, ctx, ())
            if isinstance(result, Err):
                return result
        return Ok(None)

    def _invoke(self, name: str, ctx: TaskContext, chain: tuple[str, ...]) -> TaskResult:
        if name in chain:
            cycle = " => ".join([*chain, name])
            return Err(TaskFailure(message=f"Circular dependency detected: {cycle}"))

        task = self._tasks.get(name)
        if task is None:
            return Err(
                TaskFailure(
                    message=f"Don't know how to build task '{name}'",
                    hint="Run 'dv tasks' to list the available tasks",
                    code=ErrorCode.USER_ERROR,
                )
            )

        if name in self._done:
            return Ok(None)

        ctx.console.trace(f"** Invoke {name}")
        for dep in task.prerequisites:
            result = self._invoke(dep, ctx, (*chain, name))
            if isinstance(result, Err):
                return result

        # A prerequisite may have invoked this task from its action.
        if name in self._done:
            return Ok(None)
        self._done.add(name)

        if task.actions:
            ctx.console.trace(f"** Execute {name}")
        for action in task.actions:
            result = action(ctx)
            if isinstance(result, Err):
                return result
        return Ok(None)
