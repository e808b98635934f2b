"""Git operations module.

Usage:
    from dv.git import Repository

    repo = Repository(project.root)
    tags = repo.tags().unwrap_or([])
"""

from dv.git.repository import (
    GitError,
    GitStatus,
    LogEntry,
    Repository,
    StatusEntry,
)

__all__ = [
    "GitError",
    "GitStatus",
    "LogEntry",
    "Repository",
    "StatusEntry",
]
