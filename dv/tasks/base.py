"""Capability providers.

A provider contributes one area of functionality (docs, packaging, git,
...). At startup every provider first gets a chance to fill in its
defaults on the project config, then defines its tasks against the
loaded project.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dv.core.config import ProjectConfig

if TYPE_CHECKING:
    from dv.tasks.context import TaskContext
    from dv.tasks.registry import TaskRegistry

__all__ = ["Provider"]


def _unchanged(config: ProjectConfig) -> ProjectConfig:
    return config


@dataclass(frozen=True, slots=True)
class Provider:
    name: str
    define_tasks: Callable[[TaskRegistry, TaskContext], None]
    configure: Callable[[ProjectConfig], ProjectConfig] = _unchanged
