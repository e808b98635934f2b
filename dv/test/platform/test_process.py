"""Tests for dv.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from dv.core.result import Err, Ok
from dv.platform.process import ProcessError, run, run_silent


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(command=("git", "status"), returncode=1, stdout="", stderr="fatal: nope")
        assert str(error) == "git status failed (exit 1)"
        assert error.message == "git status failed (exit 1): fatal: nope"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("twine", "upload", "pkg/frob-1.0.tar.gz", "pkg/frob-1.0.tar.gz.asc"),
            returncode=1,
            stdout="",
            stderr="",
        )
        assert str(error) == "twine upload pkg/frob-1.0.tar.gz ... failed (exit 1)"
        assert error.message == str(error)

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "hello" in result.value

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(42)"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 42
        assert result.error.stderr == "bad"

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1


class TestRunSilent:
    def test_success(self, tmp_path: Path) -> None:
        assert run_silent([sys.executable, "-c", "pass"], cwd=tmp_path) == Ok(None)

    def test_failure(self, tmp_path: Path) -> None:
        result = run_silent([sys.executable, "-c", "raise SystemExit(3)"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 3
