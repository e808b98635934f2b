"""Version string helpers.

Versions are handled as dotted strings; the only arithmetic needed is the
"next minor" bump used to name pre-release builds.
"""

from __future__ import annotations

import re
from datetime import datetime

__all__ = ["bump", "prerelease_version"]

_NUMERIC_RE = re.compile(r"^\d+$")


def bump(version: str) -> str:
    """Drop the last numeric segment and increment the one before it.

    Any pre-release segments are discarded first:

        bump("1.2.3") == "1.3"
        bump("1.2.0rc1") == "1.3"
        bump("4") == "5"

    Raises:
        ValueError: If the version has no leading numeric segment.
    """
    segments: list[str] = []
    for part in re.split(r"[.\-+]", version):
        m = re.match(r"^(\d+)", part)
        if m is None:
            break
        segments.append(m.group(1))
        if not _NUMERIC_RE.match(part):
            break

    if not segments:
        raise ValueError(f"not a dotted numeric version: {version!r}")

    if len(segments) > 1:
        segments.pop()
    segments[-1] = str(int(segments[-1]) + 1)
    return ".".join(segments)


def prerelease_version(version: str, *, now: datetime | None = None) -> str:
    """Version for a pre-release build of the next release.

    Uses a PEP 440 development release, e.g. ``1.3.0.dev20261019120000``
    for a project currently at 1.2.3.
    """
    stamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
    return f"{bump(version)}.0.dev{stamp}"
