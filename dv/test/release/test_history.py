"""Tests for dv/release/history.py."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from dv.core.result import Err, Ok, Result
from dv.release.errors import ReleaseError
from dv.release.history import (
    check_history,
    heading_marker_for,
    history_tags,
    parse_history,
    read_history,
    synthesize_new_section,
    unhistoried,
)

HISTORY = """\
# Release History for frob

---

## v1.1.0 [2026-03-02] Jane Doe <jane@example.com>

- Add frobbing.


## v1.0.0 [2026-01-10] Jane Doe <jane@example.com>

First release.
"""


def _header() -> str:
    return "# Release History for frob\n\n---"


def _synthesize(
    text: str, tag: str = "v1.2.0", entries: list[str] | None = None
) -> Result[str, ReleaseError]:
    return synthesize_new_section(
        parse_history(text, "v"),
        current_tag=tag,
        author="Jane Doe <jane@example.com>",
        day=date(2026, 10, 19),
        log_entries=entries if entries is not None else ["Fix the frobber.", "Speed up frobbing."],
        marker="#",
        render_header=_header,
    )


# =============================================================================
# Parsing
# =============================================================================


class TestParseHistory:
    def test_sections_and_header(self) -> None:
        doc = parse_history(HISTORY, "v")

        assert doc.header == "# Release History for frob\n\n---"
        assert doc.rest.startswith("\n\n## v1.1.0")
        assert history_tags(doc) == ["v1.1.0", "v1.0.0"]
        assert doc.sections[0].body == "- Add frobbing."
        assert doc.sections[1].body == "First release."

    def test_heading_styles(self) -> None:
        text = "= v1.0.0\n\nh2. v1.1.0 [today]\n\n### v1.2.0rc1 Someone\n\n## not-a-tag\n"

        assert history_tags(parse_history(text, "v")) == ["v1.0.0", "v1.1.0", "v1.2.0rc1"]

    def test_tag_runs_to_whitespace(self) -> None:
        assert history_tags(parse_history("## v1.0.0x1\n## v1.0.0 \n", "v")) == ["v1.0.0x1", "v1.0.0"]
        assert history_tags(parse_history("## v1.0\tnotes\n", "v")) == ["v1.0"]

    def test_no_delimiter(self) -> None:
        doc = parse_history("## v1.0.0\n\nStuff.\n", "v")

        assert doc.header is None
        assert doc.rest == doc.text
        assert doc.tags == ["v1.0.0"]

    def test_delimiter_with_nothing_after_it(self) -> None:
        doc = parse_history("# History\n\n---", "v")

        assert doc.header is None
        assert doc.rest == "# History\n\n---"


def test_read_history_missing(tmp_path: Path) -> None:
    result = read_history(tmp_path / "History.md", "v")

    assert isinstance(result, Err)
    assert result.error.kind == "history_missing"


def test_read_history(tmp_path: Path) -> None:
    path = tmp_path / "History.md"
    path.write_text(HISTORY, encoding="utf-8")

    result = read_history(path, "v")

    assert isinstance(result, Ok)
    assert result.value.tags == ["v1.1.0", "v1.0.0"]


@pytest.mark.parametrize(
    ("name", "marker"),
    [("History.md", "#"), ("History.rdoc", "="), ("HISTORY.MD", "#")],
)
def test_heading_marker_for(name: str, marker: str) -> None:
    assert heading_marker_for(Path(name)) == Ok(marker)


def test_heading_marker_for_unknown_format() -> None:
    result = heading_marker_for(Path("History.txt"))

    assert isinstance(result, Err)
    assert result.error.kind == "malformed"


# =============================================================================
# Checking
# =============================================================================


class TestUnhistoried:
    def test_reports_missing_tags(self) -> None:
        assert unhistoried(["v2.0.0", "v1.0.0"], ["v1.0.0"]) == ["v2.0.0"]

    def test_current_tag_first(self) -> None:
        assert unhistoried(["v1.1.0", "v1.0.0"], ["v1.0.0"], "v1.2.0") == ["v1.2.0", "v1.1.0"]

    def test_current_tag_already_tagged_reported_once(self) -> None:
        assert unhistoried(["v1.2.0", "v1.0.0"], ["v1.0.0"], "v1.2.0") == ["v1.2.0"]

    def test_everything_documented(self) -> None:
        assert unhistoried(["v1.0.0"], ["v1.0.0", "v0.9.0"], "v1.0.0") == []


def test_check_history_ok() -> None:
    assert check_history(["v1.1.0", "v1.0.0"], parse_history(HISTORY, "v"), "v1.1.0") == Ok(None)


def test_check_history_incomplete() -> None:
    result = check_history(["v1.1.0"], parse_history(HISTORY, "v"), "v1.2.0", history_name="History.md")

    assert isinstance(result, Err)
    assert result.error.kind == "history_incomplete"
    assert result.error.tags == ("v1.2.0",)
    assert result.error.message.startswith("History.md needs updating")
    assert result.error.hint == "Run 'dv run update_history'"


# =============================================================================
# Synthesizing
# =============================================================================


class TestSynthesizeNewSection:
    def test_inserts_after_header(self) -> None:
        result = _synthesize(HISTORY)

        assert isinstance(result, Ok)
        assert result.value == (
            "# Release History for frob\n\n---\n"
            "## v1.2.0 [2026-10-19] Jane Doe <jane@example.com>\n"
            "\n"
            "- Fix the frobber.\n"
            "- Speed up frobbing.\n"
            "\n\n"
            "\n\n## v1.1.0 [2026-03-02] Jane Doe <jane@example.com>\n"
            "\n- Add frobbing.\n\n\n"
            "## v1.0.0 [2026-01-10] Jane Doe <jane@example.com>\n\nFirst release.\n"
        )

    def test_result_is_reconciled(self) -> None:
        result = _synthesize(HISTORY)

        assert isinstance(result, Ok)
        doc = parse_history(result.value, "v")
        assert doc.tags == ["v1.2.0", "v1.1.0", "v1.0.0"]
        assert unhistoried(["v1.1.0", "v1.0.0"], doc.tags, "v1.2.0") == []

    def test_second_synthesis_is_refused(self) -> None:
        first = _synthesize(HISTORY)
        assert isinstance(first, Ok)

        second = _synthesize(first.value)

        assert isinstance(second, Err)
        assert second.error.kind == "already_exists"

    def test_existing_section_refused(self) -> None:
        result = _synthesize(HISTORY, tag="v1.1.0")

        assert isinstance(result, Err)
        assert result.error.kind == "already_exists"
        assert result.error.tags == ("v1.1.0",)

    def test_document_without_header_gets_one(self) -> None:
        result = _synthesize("## v1.0.0\n\nFirst.\n", entries=[])

        assert isinstance(result, Ok)
        assert result.value == (
            "# Release History for frob\n\n---\n"
            "## v1.2.0 [2026-10-19] Jane Doe <jane@example.com>\n\n\n\n"
            "## v1.0.0\n\nFirst.\n"
        )
