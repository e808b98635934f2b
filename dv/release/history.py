"""History file reconciliation.

The history file is a changelog whose preamble ends at a ``---`` line and
whose sections start with a heading naming a release tag:

    # Release History for frobnicator

    ---

    ## v1.1.0 [2026-03-02] Jane Doe <jane@example.com>

    - Add frobbing.

Every release tag should have exactly one section. This module finds tags
that lack one and builds the section for a new release; it never reorders
existing sections.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from dv.core.result import Err, Ok, Result
from dv.release.errors import ReleaseError
from dv.release.tags import release_tag_pattern

__all__ = [
    "HEADER_DELIMITER",
    "HistoryDocument",
    "HistorySection",
    "check_history",
    "heading_marker_for",
    "history_tags",
    "parse_history",
    "read_history",
    "synthesize_new_section",
    "unhistoried",
]

HEADER_DELIMITER = re.compile(r"^---", re.MULTILINE)

_HEADING_MARKERS = {
    ".md": "#",
    ".rdoc": "=",
}


@dataclass(frozen=True, slots=True)
class HistorySection:
    tag: str
    heading: str
    body: str


@dataclass(frozen=True, slots=True)
class HistoryDocument:
    """A parsed history file.

    Attributes:
        text: The full document
        header: Text up to and including the first ``---`` marker, or
            None if the document has no usable marker
        rest: Everything after the header (the whole text if no header)
        sections: Release sections in document order
    """

    text: str
    header: str | None
    rest: str
    sections: tuple[HistorySection, ...]

    @property
    def tags(self) -> list[str]:
        return [s.tag for s in self.sections]

    def has_section(self, tag: str) -> bool:
        return any(s.tag == tag for s in self.sections)


def _heading_pattern(prefix: str) -> re.Pattern[str]:
    tag = release_tag_pattern(prefix).pattern
    return re.compile(rf"^(?:h\d\.|#+|=+)\s+(?P<tag>{tag})(?:\s+|$)")


def parse_history(text: str, prefix: str) -> HistoryDocument:
    """Split ``text`` into header and rest, and find its release sections."""
    header: str | None = None
    rest = text
    m = HEADER_DELIMITER.search(text)
    if m is not None and text[m.end() :]:
        header = text[: m.end()]
        rest = text[m.end() :]

    heading_re = _heading_pattern(prefix)
    sections: list[HistorySection] = []
    current: tuple[str, str] | None = None
    body: list[str] = []
    for line in text.splitlines():
        hm = heading_re.match(line)
        if hm:
            if current is not None:
                sections.append(HistorySection(current[0], current[1], "\n".join(body).strip()))
            current = (hm.group("tag"), line)
            body = []
        elif current is not None:
            body.append(line)
    if current is not None:
        sections.append(HistorySection(current[0], current[1], "\n".join(body).strip()))

    return HistoryDocument(text=text, header=header, rest=rest, sections=tuple(sections))


def read_history(path: Path, prefix: str) -> Result[HistoryDocument, ReleaseError]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(
            ReleaseError(
                kind="history_missing",
                message=f"History file is missing or unreadable: {path.name}",
                hint=str(e),
            )
        )
    return Ok(parse_history(text, prefix))


def history_tags(document: HistoryDocument) -> list[str]:
    """Tags that have a section, in document order."""
    return document.tags


def heading_marker_for(path: Path) -> Result[str, ReleaseError]:
    """Heading character for the history file's markup format."""
    marker = _HEADING_MARKERS.get(path.suffix.lower())
    if marker is None:
        return Err(
            ReleaseError(
                kind="malformed",
                message=f"Don't know how to write headings for {path.name}",
                hint=f"Use one of: {', '.join(sorted(_HEADING_MARKERS))}",
            )
        )
    return Ok(marker)


def unhistoried(
    release_tags: Iterable[str],
    history_tags: Iterable[str],
    current_tag: str | None = None,
) -> list[str]:
    """Release tags with no history section.

    ``current_tag`` (the release in progress, not yet tagged) is checked
    first when given. Order is preserved and each tag is reported once.
    """
    documented = set(history_tags)
    candidates = [current_tag, *release_tags] if current_tag else list(release_tags)

    missing: list[str] = []
    for tag in candidates:
        if tag not in documented and tag not in missing:
            missing.append(tag)
    return missing


def check_history(
    release_tags: Iterable[str],
    document: HistoryDocument,
    current_tag: str | None = None,
    *,
    history_name: str = "History file",
) -> Result[None, ReleaseError]:
    """Fail if any release tag lacks a section."""
    missing = unhistoried(release_tags, history_tags(document), current_tag)
    if missing:
        return Err(
            ReleaseError(
                kind="history_incomplete",
                message=f"{history_name} needs updating; missing entries for tags: {', '.join(missing)}",
                hint="Run 'dv run update_history'",
                tags=tuple(missing),
            )
        )
    return Ok(None)


def synthesize_new_section(
    document: HistoryDocument,
    *,
    current_tag: str,
    author: str,
    day: date,
    log_entries: Sequence[str],
    marker: str,
    render_header: Callable[[], str],
) -> Result[str, ReleaseError]:
    """Build the history text with a new section for ``current_tag``.

    The section goes right after the header, ahead of older sections. A
    document without a ``---`` marker gets a header from ``render_header``
    and keeps its whole text below the new section.

    Returns the candidate document; it is up to the caller to persist it.
    """
    if document.has_section(current_tag):
        return Err(
            ReleaseError(
                kind="already_exists",
                message=f"History file already includes a section for {current_tag}",
                tags=(current_tag,),
            )
        )

    header = document.header if document.header is not None else render_header()

    lines = [f"{marker * 2} {current_tag} [{day.isoformat()}] {author}", ""]
    lines.extend(f"- {entry}" for entry in log_entries)
    section = "\n".join(lines) + "\n\n\n"

    return Ok(header + "\n" + section + document.rest)
