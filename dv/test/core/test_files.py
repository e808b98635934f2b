"""Tests for dv/core/files.py."""

from __future__ import annotations

import re
from pathlib import Path

from dv.core.files import (
    DOC_EXCLUDE_DIRS,
    DOC_SUFFIXES,
    HISTORY_PATTERN,
    README_PATTERN,
    ProjectFileSet,
    default_patterns,
    derive_subset,
    executables,
    find_named_file,
    resolve,
)
from dv.core.result import Err, Ok
from dv.output.console import MockConsole, Style


def _touch(root: Path, *paths: str) -> None:
    for p in paths:
        path = root / p
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")


# =============================================================================
# ProjectFileSet
# =============================================================================


class TestProjectFileSet:
    def test_duplicates_removed_keeping_first(self) -> None:
        files = ProjectFileSet(["b.py", "a.py", "b.py"])
        assert files.entries == ["b.py", "a.py"]

    def test_backslashes_normalized(self) -> None:
        files = ProjectFileSet(["pkg\\mod.py"])
        assert files.entries == ["pkg/mod.py"]
        assert "pkg\\mod.py" in files

    def test_append_ignores_listed_paths(self) -> None:
        files = ProjectFileSet(["a.py"])
        files.append("a.py")
        files.append("Manifest.txt")
        assert files.entries == ["a.py", "Manifest.txt"]
        assert len(files) == 2

    def test_grep(self) -> None:
        files = ProjectFileSet(["a.py", "README.md", "ext/x.c"])
        assert files.grep(re.compile(r"\.(py|c)$")) == ["a.py", "ext/x.c"]


# =============================================================================
# resolve
# =============================================================================


class TestResolve:
    def test_manifest_round_trip(self, tmp_path: Path) -> None:
        listed = ["lib/frob.py", "README.md", "does/not/exist.txt"]
        (tmp_path / "Manifest.txt").write_text("\n".join(listed) + "\n", encoding="utf-8")
        console = MockConsole()

        files = resolve(tmp_path / "Manifest.txt", default_patterns("frob"), root=tmp_path, console=console)

        assert files.entries == listed
        assert not console.has_warning()

    def test_manifest_blank_lines_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "Manifest.txt").write_text("a.py\n\nb.py\r\n", encoding="utf-8")

        files = resolve(tmp_path / "Manifest.txt", (), root=tmp_path, console=MockConsole())

        assert files.entries == ["a.py", "b.py"]

    def test_empty_manifest_is_authoritative(self, tmp_path: Path) -> None:
        _touch(tmp_path, "README.md", "frob/__init__.py")
        (tmp_path / "Manifest.txt").write_text("", encoding="utf-8")
        console = MockConsole()

        files = resolve(tmp_path / "Manifest.txt", default_patterns("frob"), root=tmp_path, console=console)

        assert files.entries == []
        assert not console.has_warning()

    def test_missing_manifest_falls_back_with_one_warning(self, tmp_path: Path) -> None:
        _touch(
            tmp_path,
            "README.md",
            "History.md",
            "frob/__init__.py",
            "frob/sub/thing.py",
            "tests/test_frob.py",
            "bin/frob",
        )
        console = MockConsole()

        files = resolve(tmp_path / "Manifest.txt", default_patterns("frob"), root=tmp_path, console=console)

        assert files.entries == [
            "History.md",
            "README.md",
            "bin/frob",
            "frob/__init__.py",
            "frob/sub/thing.py",
            "tests/test_frob.py",
        ]
        assert console.count(Style.WARNING) == 1
        assert console.find("Manifest.txt")

    def test_fallback_skips_directories(self, tmp_path: Path) -> None:
        (tmp_path / "bin" / "subdir").mkdir(parents=True)
        _touch(tmp_path, "bin/tool")

        files = resolve(tmp_path / "Manifest.txt", ["bin/*"], root=tmp_path, console=MockConsole())

        assert files.entries == ["bin/tool"]

    def test_fallback_first_pattern_wins_on_duplicates(self, tmp_path: Path) -> None:
        _touch(tmp_path, "b.txt", "a.txt")

        files = resolve(tmp_path / "Manifest.txt", ["b.txt", "*.txt"], root=tmp_path, console=MockConsole())

        assert files.entries == ["b.txt", "a.txt"]


# =============================================================================
# derive_subset / find_named_file / executables
# =============================================================================


class TestDeriveSubset:
    def test_excludes_dirs_and_suffixes(self) -> None:
        files = ProjectFileSet(["lib/foo.rb", "README.md", "spec/foo_spec.rb"])

        subset = derive_subset(files, ["spec"], [".rb", ".md"])

        assert subset.entries == ["lib/foo.rb", "README.md"]

    def test_top_level_file_named_like_excluded_dir_kept(self) -> None:
        files = ProjectFileSet(["tests.md", "tests/notes.md"])

        subset = derive_subset(files, DOC_EXCLUDE_DIRS, DOC_SUFFIXES)

        assert subset.entries == ["tests.md"]

    def test_idempotent(self) -> None:
        files = ProjectFileSet(
            ["frob/__init__.py", "data/blob.bin", "tests/test_x.py", "README.md", "bin/frob"]
        )

        once = derive_subset(files, DOC_EXCLUDE_DIRS, DOC_SUFFIXES)
        twice = derive_subset(once, DOC_EXCLUDE_DIRS, DOC_SUFFIXES)

        assert once.entries == ["frob/__init__.py", "README.md"]
        assert twice.entries == once.entries


class TestFindNamedFile:
    def test_first_match(self) -> None:
        files = ProjectFileSet(["docs/README.md", "README.rdoc", "README.md"])

        assert find_named_file(files, README_PATTERN) == Ok("README.rdoc")

    def test_not_found(self) -> None:
        result = find_named_file(ProjectFileSet(["README.md"]), HISTORY_PATTERN)

        assert isinstance(result, Err)
        assert result.error.kind == "not_found"


def test_executables() -> None:
    files = ProjectFileSet(["bin/frob", "bin/frobctl", "frob/bin.py", "README.md"])
    assert executables(files) == ["frob", "frobctl"]


def test_default_patterns_include_package() -> None:
    patterns = default_patterns("frob")
    assert "frob/**/*.py" in patterns
    assert patterns[0] == "*.md"
