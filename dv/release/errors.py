"""Error types for release tasks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

__all__ = ["ReleaseError", "ReleaseErrorKind"]

ReleaseErrorKind = Literal[
    "history_missing",
    "history_incomplete",
    "already_exists",
    "tag_exists",
    "malformed",
    "declined",
    "vcs_failed",
    "io",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
    tags: tuple[str, ...] = ()
