"""The ordered list of capability providers.

Order matters twice: ``configure`` hooks see the config as left by the
providers before them, and generic tasks like ``debug`` list their
prerequisites in provider order.
"""

from __future__ import annotations

from collections.abc import Sequence

from dv.core.config import ProjectConfig
from dv.tasks import checks, core, docs, fixup, generate, git, packaging, pkginfo, releases, testing
from dv.tasks.base import Provider
from dv.tasks.context import TaskContext
from dv.tasks.registry import TaskRegistry

__all__ = ["PROVIDERS", "configure", "define_tasks"]

PROVIDERS: tuple[Provider, ...] = (
    core.PROVIDER,
    generate.PROVIDER,
    pkginfo.PROVIDER,
    packaging.PROVIDER,
    docs.PROVIDER,
    testing.PROVIDER,
    checks.PROVIDER,
    releases.PROVIDER,
    git.PROVIDER,
    fixup.PROVIDER,
)


def configure(config: ProjectConfig, providers: Sequence[Provider] = PROVIDERS) -> ProjectConfig:
    """Apply each provider's defaults, in order."""
    for provider in providers:
        config = provider.configure(config)
    return config


def define_tasks(
    registry: TaskRegistry,
    ctx: TaskContext,
    providers: Sequence[Provider] = PROVIDERS,
) -> None:
    for provider in providers:
        ctx.console.trace(f"Defining {provider.name} tasks")
        provider.define_tasks(registry, ctx)
