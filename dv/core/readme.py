"""README metadata extraction.

Package metadata that is not set explicitly in ``dv.toml`` is read from the
README, which is expected to follow a loose convention (Markdown or RDoc):

    # Frobnicator

    home
    : https://example.org/frobnicator

    code :: https://github.com/example/frobnicator

    ## Description

    Frobnicator frobs things. It is fast.

    ## Authors

    - Jane Doe <jane@example.com>

Anything missing is simply absent from the result; callers decide what to
fall back to.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

__all__ = ["ReadmeInfo", "parse_readme", "read_readme"]

_HEADING_RE = re.compile(r"^(#+|=+)\s+(.*?)\s*#*\s*$")
_URL_INLINE_RE = re.compile(r"^(?P<label>[\w-]+)\s*::\s*(?P<url>\S+)\s*$")
_URL_LABEL_RE = re.compile(r"^(?P<label>[\w-]+)\s*$")
_URL_DEFINITION_RE = re.compile(r"^:\s+(?P<url>\S+)\s*$")
_LIST_ITEM_RE = re.compile(r"^\s*[-*+]\s+(?P<item>.+?)\s*$")
_SENTENCE_RE = re.compile(r"^(.+?[.!?])(?:\s|$)")


def _empty_urls() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class ReadmeInfo:
    """Metadata pulled out of a README."""

    title: str | None = None
    description: str | None = None
    authors: tuple[str, ...] = ()
    urls: dict[str, str] = field(default_factory=_empty_urls)

    @property
    def summary(self) -> str | None:
        """First sentence of the description."""
        if not self.description:
            return None
        m = _SENTENCE_RE.match(self.description)
        return m.group(1) if m else self.description


@dataclass
class _Section:
    level: int
    title: str
    lines: list[str]


def _split_sections(text: str) -> tuple[list[str], list[_Section]]:
    preamble: list[str] = []
    sections: list[_Section] = []
    for line in text.splitlines():
        m = _HEADING_RE.match(line)
        if m:
            sections.append(_Section(len(m.group(1)), m.group(2), []))
        elif sections:
            sections[-1].lines.append(line)
        else:
            preamble.append(line)
    return preamble, sections


def _paragraphs(lines: list[str]) -> list[str]:
    paras: list[str] = []
    current: list[str] = []
    for line in lines:
        if line.strip():
            current.append(line.strip())
        elif current:
            paras.append(" ".join(current))
            current = []
    if current:
        paras.append(" ".join(current))
    return paras


def _extract_urls(lines: list[str]) -> dict[str, str]:
    urls: dict[str, str] = {}
    pending_label: str | None = None
    for line in lines:
        stripped = line.strip()
        inline = _URL_INLINE_RE.match(stripped)
        if inline:
            urls.setdefault(inline.group("label").lower(), inline.group("url"))
            pending_label = None
            continue
        definition = _URL_DEFINITION_RE.match(stripped)
        if definition and pending_label:
            urls.setdefault(pending_label, definition.group("url"))
            pending_label = None
            continue
        label = _URL_LABEL_RE.match(stripped)
        pending_label = label.group("label").lower() if label else None
    return urls


def _is_url_paragraph(para: str) -> bool:
    return "::" in para or bool(re.match(r"^[\w-]+ : \S+", para))


def parse_readme(text: str) -> ReadmeInfo:
    """Extract metadata from README text."""
    preamble, sections = _split_sections(text)

    title: str | None = None
    body_lines = preamble
    if sections and sections[0].level == 1:
        title = sections[0].title
        body_lines = preamble + sections[0].lines

    urls = _extract_urls(body_lines)

    description: str | None = None
    authors: list[str] = []
    for section in sections:
        name = section.title.lower()
        if description is None and "description" in name:
            paras = _paragraphs(section.lines)
            description = paras[0] if paras else None
        elif not authors and re.match(r"^authors?\b|^author\(s\)", name):
            for line in section.lines:
                m = _LIST_ITEM_RE.match(line)
                if m:
                    authors.append(m.group("item"))

    if description is None:
        paras = [p for p in _paragraphs(body_lines) if not _is_url_paragraph(p)]
        description = paras[0] if paras else None

    return ReadmeInfo(title=title, description=description, authors=tuple(authors), urls=urls)


def read_readme(path: Path) -> ReadmeInfo:
    """Parse the README at ``path``; an unreadable file yields empty metadata."""
    try:
        return parse_readme(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError):
        return ReadmeInfo()
