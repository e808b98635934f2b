"""Release tag naming.

A release tag is the configured prefix followed by the version, e.g.
``v1.2.0``. Tags are treated as opaque strings: they are recognized by
pattern membership and never compared as versions. Ordering comes from
the VCS listing (newest first).
"""

from __future__ import annotations

import re
from collections.abc import Iterable

__all__ = ["current_tag", "previous_tag", "release_tag_pattern", "release_tags"]


def release_tag_pattern(prefix: str) -> re.Pattern[str]:
    """Match ``prefix`` + two or more dotted integers + optional suffix.

    The suffix is any run of non-whitespace, so pre-release tags like
    ``v1.2.0rc1`` or ``v1.2.0-beta.3`` are release tags too.
    """
    return re.compile(re.escape(prefix) + r"\d+(?:\.\d+)+\S*")


def release_tags(all_tags: Iterable[str], prefix: str) -> list[str]:
    """The tags that name releases, in the order given."""
    pattern = release_tag_pattern(prefix)
    return [tag for tag in all_tags if pattern.fullmatch(tag)]


def current_tag(prefix: str, version: str) -> str:
    """Tag for the version being released."""
    return f"{prefix}{version}"


def previous_tag(tags: Iterable[str], current: str) -> str | None:
    """The most recent release tag other than ``current``.

    ``tags`` must already be filtered to release tags and ordered newest
    first.
    """
    for tag in tags:
        if tag != current:
            return tag
    return None
